#!/usr/bin/env python3
"""Print a development JWT for a user id."""
import argparse
import sys

from backend.utils.auth_jwt import AuthError, issue_token

parser = argparse.ArgumentParser()
parser.add_argument("user_id")
parser.add_argument("--ttl", type=int, default=None, help="lifetime in seconds")
args = parser.parse_args()

try:
    print(issue_token(args.user_id, ttl_seconds=args.ttl))
except AuthError as exc:
    sys.exit(f"error: {exc}")
