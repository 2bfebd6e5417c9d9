import secrets

TOKEN_BYTES = 16


def random_token(nbytes: int = TOKEN_BYTES) -> str:
    return secrets.token_hex(nbytes)


def new_pitch_room_id() -> str:
    return f"pitch-{random_token()}"


def new_meeting_link(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{random_token()}"


def pitch_room_url(base_path: str, room_id: str | None) -> str | None:
    if not room_id:
        return None
    return f"{base_path.rstrip('/')}/{room_id}"
