from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from backend.meetings.errors import MeetingValidationError, StoreError
from backend.models.meeting_model import Meeting
from backend.models.user_model import User

logger = logging.getLogger(__name__)


class _JsonCollection:
    """One JSON array of documents on disk, guarded by a process-wide lock."""

    def __init__(self, storage_path: Path):
        self.storage_path = storage_path
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _read_raw(self) -> list[dict]:
        if not self.storage_path.exists():
            return []
        try:
            payload = json.loads(self.storage_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("Failed to read %s", self.storage_path)
            raise StoreError(f"Unreadable collection {self.storage_path.name}") from exc
        if not isinstance(payload, list):
            logger.error("Collection %s is not a list", self.storage_path)
            raise StoreError(f"Collection {self.storage_path.name} is not a list")
        return payload

    def _write_raw(self, payload: list[dict]) -> None:
        tmp_path = self.storage_path.with_suffix(self.storage_path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.storage_path)
        except OSError as exc:
            logger.exception("Failed to write %s", self.storage_path)
            raise StoreError(f"Unwritable collection {self.storage_path.name}") from exc

    def all(self) -> list[dict]:
        with self._lock:
            return self._read_raw()

    def upsert(self, document: dict) -> None:
        with self._lock:
            data = self._read_raw()
            for idx, item in enumerate(data):
                if item.get("id") == document["id"]:
                    data[idx] = document
                    break
            else:
                data.append(document)
            self._write_raw(data)


def _parse(model, documents: Iterable[dict]) -> list:
    try:
        return [model.model_validate(doc) for doc in documents]
    except ValidationError as exc:
        logger.exception("Malformed %s document", model.__name__)
        raise StoreError(f"Malformed {model.__name__} document") from exc


class MeetingRepository:
    """JSON-file backed store for meeting documents."""

    def __init__(self, storage_path: Path):
        self._collection = _JsonCollection(storage_path)

    def list_for_participant(self, user_id: str) -> List[Meeting]:
        meetings = [m for m in _parse(Meeting, self._collection.all()) if m.has_participant(user_id)]
        return sorted(meetings, key=lambda m: m.created_at, reverse=True)

    def get_meeting(self, meeting_id: str) -> Meeting | None:
        for item in self._collection.all():
            if item.get("id") == meeting_id:
                return _parse(Meeting, [item])[0]
        return None

    def save(self, meeting: Meeting) -> Meeting:
        self._collection.upsert(meeting.to_document())
        return meeting


class UserDirectory:
    """JSON-file backed user lookup."""

    def __init__(self, storage_path: Path):
        self._collection = _JsonCollection(storage_path)

    def _users(self) -> list[User]:
        return _parse(User, self._collection.all())

    def find_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._users():
            if user.email.lower() == wanted:
                return user
        return None

    def get_user(self, user_id: str) -> User | None:
        return self.get_users([user_id]).get(user_id)

    def get_users(self, user_ids: Iterable[str]) -> dict[str, User]:
        wanted = set(user_ids)
        return {user.id: user for user in self._users() if user.id in wanted}

    def list_users_except(self, user_id: str) -> List[User]:
        return [user for user in self._users() if user.id != user_id]

    def add_user(self, user: User) -> User:
        if self.find_by_email(user.email):
            raise MeetingValidationError(f"User with email {user.email} already exists")
        self._collection.upsert(user.to_document())
        return user


def build_json_store(data_dir: Path) -> tuple[MeetingRepository, UserDirectory]:
    return MeetingRepository(data_dir / "meetings.json"), UserDirectory(data_dir / "users.json")
