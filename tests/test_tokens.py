from backend.utils.tokens import new_meeting_link, new_pitch_room_id, pitch_room_url


def test_pitch_room_ids_are_unique():
    ids = {new_pitch_room_id() for _ in range(1000)}
    assert len(ids) == 1000
    assert all(len(room_id) == len("pitch-") + 32 for room_id in ids)


def test_meeting_link_uses_base():
    link = new_meeting_link("https://meet.example.com/")
    assert link.startswith("https://meet.example.com/")
    assert "//" not in link[len("https://"):]


def test_pitch_room_url():
    assert pitch_room_url("/virtual-pitch/", "pitch-1") == "/virtual-pitch/pitch-1"
    assert pitch_room_url("/virtual-pitch", None) is None
