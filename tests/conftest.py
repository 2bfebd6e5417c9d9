import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings  # noqa: E402
from backend.meetings.controller import MeetingController  # noqa: E402
from backend.models.meeting_model import Meeting  # noqa: E402
from backend.models.user_model import User  # noqa: E402
from backend.services.repository import build_json_store  # noqa: E402
from backend.utils.auth_aws import get_session  # noqa: E402

JWT_SECRET = "test-secret-with-enough-length-for-hs256"


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path):
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    get_settings.cache_clear()
    get_session.cache_clear()
    yield
    get_settings.cache_clear()
    get_session.cache_clear()


@pytest.fixture
def store(tmp_path):
    return build_json_store(tmp_path / "store")


@pytest.fixture
def repository(store):
    return store[0]


@pytest.fixture
def directory(store):
    return store[1]


def make_user(name: str, user_type: str = "founder") -> User:
    return User(
        id=f"user-{name}",
        name=name.title(),
        email=f"{name}@x.com",
        user_type=user_type,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def make_meeting(meeting_id: str, requested_by: str, requested_to: str, minutes: int = 0, **overrides) -> Meeting:
    created = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    fields = dict(
        id=meeting_id,
        requested_by=requested_by,
        requested_to=requested_to,
        title="Seed round",
        description="Intro call",
        date_time=datetime(2024, 6, 1, 15, 0, tzinfo=timezone.utc),
        duration=30,
        meeting_link="https://meet.google.com/abc",
        virtual_pitch_room_id="pitch-seed",
        created_at=created,
        updated_at=created,
    )
    fields.update(overrides)
    return Meeting(**fields)


@pytest.fixture
def users(directory):
    alice = directory.add_user(make_user("alice", "founder"))
    bob = directory.add_user(make_user("bob", "investor"))
    charlie = directory.add_user(make_user("charlie", "investor"))
    return alice, bob, charlie


@pytest.fixture
def controller(repository, directory, users):
    return MeetingController(repository, directory, get_settings())


@pytest.fixture
def client(controller):
    from fastapi.testclient import TestClient

    from backend.main import app
    from backend.meetings.routes import get_controller

    app.dependency_overrides[get_controller] = lambda: controller
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    from backend.utils.auth_jwt import issue_token

    def _headers(user_id: str) -> dict[str, str]:
        return {"x-auth-token": issue_token(user_id)}

    return _headers
