import json

import pytest

from backend.meetings.errors import MeetingValidationError, StoreError
from backend.services.repository import MeetingRepository
from conftest import make_meeting, make_user


def test_save_upserts_by_id(repository):
    repository.save(make_meeting("m1", "user-alice", "user-bob"))
    repository.save(make_meeting("m1", "user-alice", "user-bob", status="accepted"))

    raw = json.loads(repository._collection.storage_path.read_text())
    assert len(raw) == 1
    assert raw[0]["status"] == "accepted"
    assert raw[0]["requestedBy"] == "user-alice"
    assert "virtualPitchRoomId" in raw[0]


def test_list_for_participant_sorted_by_creation(repository):
    repository.save(make_meeting("a", "user-alice", "user-bob", minutes=5))
    repository.save(make_meeting("b", "user-charlie", "user-alice", minutes=15))
    repository.save(make_meeting("c", "user-alice", "user-charlie", minutes=1))
    repository.save(make_meeting("d", "user-bob", "user-charlie", minutes=30))

    assert [m.id for m in repository.list_for_participant("user-alice")] == ["b", "a", "c"]


def test_get_meeting_missing(repository):
    assert repository.get_meeting("nope") is None


def test_corrupt_file_raises_store_error(tmp_path):
    path = tmp_path / "meetings.json"
    path.write_text("not json")
    repository = MeetingRepository(path)

    with pytest.raises(StoreError):
        repository.get_meeting("m1")
    with pytest.raises(StoreError):
        repository.save(make_meeting("m1", "user-alice", "user-bob"))
    assert path.read_text() == "not json"


def test_malformed_document_raises_store_error(tmp_path):
    path = tmp_path / "meetings.json"
    path.write_text(json.dumps([{"id": "m1", "title": "missing fields"}]))
    with pytest.raises(StoreError):
        MeetingRepository(path).get_meeting("m1")


def test_no_temp_file_left_behind(repository):
    repository.save(make_meeting("m1", "user-alice", "user-bob"))
    leftovers = [p.name for p in repository._collection.storage_path.parent.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def test_directory_lookups(directory, users):
    alice, bob, charlie = users

    assert directory.find_by_email("ALICE@x.com").id == alice.id
    assert directory.find_by_email("zed@x.com") is None
    assert directory.get_user(bob.id) == bob
    assert set(directory.get_users([alice.id, "ghost"])) == {alice.id}
    assert [u.id for u in directory.list_users_except(alice.id)] == [bob.id, charlie.id]


def test_directory_rejects_duplicate_email(directory, users):
    with pytest.raises(MeetingValidationError):
        directory.add_user(make_user("alice"))
