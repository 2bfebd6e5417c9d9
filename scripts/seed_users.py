#!/usr/bin/env python3
"""Add users to the configured directory (JSON file or DynamoDB)."""
from __future__ import annotations

import argparse
import uuid

from backend.meetings.controller import MeetingController
from backend.meetings.errors import MeetingValidationError
from backend.models.user_model import User
from backend.utils.time_utils import now_utc


def parse_user(value: str) -> User:
    try:
        name, email, user_type = (part.strip() for part in value.split(":"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected name:email:type, got {value!r}") from exc
    return User(id=uuid.uuid4().hex, name=name, email=email.lower(), user_type=user_type, created_at=now_utc())


def main():
    parser = argparse.ArgumentParser(description="Seed users for meeting requests")
    parser.add_argument("users", nargs="+", type=parse_user, help="name:email:founder|investor")
    args = parser.parse_args()

    directory = MeetingController.from_settings().directory
    for user in args.users:
        try:
            directory.add_user(user)
        except MeetingValidationError as exc:
            print(f"skip {user.email}: {exc}")
            continue
        print(f"{user.id}  {user.email}  ({user.user_type})")


if __name__ == "__main__":
    main()
