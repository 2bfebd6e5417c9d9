from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Protocol

from pydantic import ValidationError

from backend.config import Settings, get_settings
from backend.meetings.errors import (
    MeetingNotFoundError,
    MeetingValidationError,
    UserNotFoundError,
)
from backend.models.meeting_model import (
    RESPONSE_STATUSES,
    STATUS_ACCEPTED,
    STATUS_PENDING,
    Meeting,
    MeetingCreate,
    MeetingOut,
    Participant,
    VirtualPitchInfo,
)
from backend.models.user_model import User, UserSummary
from backend.utils.time_utils import now_utc
from backend.utils.tokens import new_meeting_link, new_pitch_room_id, pitch_room_url

logger = logging.getLogger(__name__)


class MeetingStore(Protocol):
    def list_for_participant(self, user_id: str) -> list[Meeting]: ...

    def get_meeting(self, meeting_id: str) -> Meeting | None: ...

    def save(self, meeting: Meeting) -> Meeting: ...


class IdentityDirectory(Protocol):
    def find_by_email(self, email: str) -> User | None: ...

    def get_users(self, user_ids: Iterable[str]) -> dict[str, User]: ...

    def list_users_except(self, user_id: str) -> list[User]: ...


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())) or "body"
        parts.append(f"{field}: {error.get('msg')}")
    return "; ".join(parts)


class MeetingController:
    """Meeting requests between two users and the pitch room attached to each.

    Every read and mutation is scoped to the meeting's participants. A caller
    who is not allowed to act on a meeting gets the same
    ``MeetingNotFoundError`` as a caller asking for an id that does not exist.
    """

    def __init__(self, repository: MeetingStore, directory: IdentityDirectory, settings: Settings | None = None):
        self.repository = repository
        self.directory = directory
        self.settings = settings or get_settings()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "MeetingController":
        settings = settings or get_settings()
        if settings.storage_backend == "dynamodb":
            from backend.services.dynamo_repository import DynamoMeetingRepository, DynamoUserDirectory

            return cls(DynamoMeetingRepository(), DynamoUserDirectory(), settings)

        from backend.services.repository import build_json_store

        repository, directory = build_json_store(settings.data_dir)
        return cls(repository, directory, settings)

    # Lookups

    def _participant_meeting(self, caller_id: str, meeting_id: str) -> Meeting:
        meeting = self.repository.get_meeting(meeting_id)
        if not meeting or not meeting.has_participant(caller_id):
            raise MeetingNotFoundError("Meeting not found or unauthorized")
        return meeting

    def _render(self, meetings: list[Meeting]) -> list[MeetingOut]:
        user_ids = {m.requested_by for m in meetings} | {m.requested_to for m in meetings}
        users = self.directory.get_users(user_ids) if user_ids else {}

        def participant(user_id: str) -> Participant | None:
            user = users.get(user_id)
            if not user:
                return None
            return Participant(id=user.id, name=user.name, email=user.email)

        return [
            MeetingOut(
                **meeting.model_dump(exclude={"requested_by", "requested_to"}),
                requested_by=participant(meeting.requested_by),
                requested_to=participant(meeting.requested_to),
            )
            for meeting in meetings
        ]

    def _render_one(self, meeting: Meeting) -> MeetingOut:
        return self._render([meeting])[0]

    def _pitch_info(self, meeting: Meeting) -> VirtualPitchInfo:
        return VirtualPitchInfo(
            meeting_id=meeting.id,
            title=meeting.title,
            virtual_pitch_room_id=meeting.virtual_pitch_room_id,
            virtual_pitch_url=pitch_room_url(self.settings.virtual_pitch_path, meeting.virtual_pitch_room_id),
        )

    # Operations

    def list_for_caller(self, caller_id: str) -> list[MeetingOut]:
        return self._render(self.repository.list_for_participant(caller_id))

    def create_meeting(self, caller_id: str, payload: dict[str, Any]) -> MeetingOut:
        try:
            request = MeetingCreate.model_validate(payload)
        except ValidationError as exc:
            raise MeetingValidationError(_validation_message(exc)) from exc

        target = self.directory.find_by_email(request.email)
        if not target:
            raise UserNotFoundError("User not found")
        if target.id == caller_id:
            raise MeetingValidationError("Cannot request a meeting with yourself")

        now = now_utc()
        meeting = Meeting(
            id=uuid.uuid4().hex,
            requested_by=caller_id,
            requested_to=target.id,
            title=request.title,
            description=request.description,
            date_time=request.date_time,
            duration=request.duration,
            status=STATUS_PENDING,
            meeting_link=new_meeting_link(self.settings.meeting_link_base),
            virtual_pitch_room_id=new_pitch_room_id(),
            created_at=now,
            updated_at=now,
        )
        self.repository.save(meeting)
        logger.info("Meeting %s requested by %s for %s", meeting.id, caller_id, target.id)
        return self._render_one(meeting)

    def set_status(self, caller_id: str, meeting_id: str, status: Any) -> MeetingOut:
        if status not in RESPONSE_STATUSES:
            raise MeetingValidationError("Invalid status")

        meeting = self.repository.get_meeting(meeting_id)
        if not meeting or meeting.requested_to != caller_id:
            raise MeetingNotFoundError("Meeting not found or unauthorized")

        if meeting.status != STATUS_PENDING and meeting.status != status:
            logger.info("Meeting %s status overwritten: %s -> %s", meeting_id, meeting.status, status)

        updates: dict[str, Any] = {"status": status, "updated_at": now_utc()}
        if status == STATUS_ACCEPTED and not meeting.virtual_pitch_room_id:
            updates["virtual_pitch_room_id"] = new_pitch_room_id()
            logger.info("Created virtual pitch room %s for meeting %s", updates["virtual_pitch_room_id"], meeting_id)

        meeting = self.repository.save(meeting.model_copy(update=updates))
        return self._render_one(meeting)

    def update_meeting_link(self, caller_id: str, meeting_id: str, meeting_link: Any) -> MeetingOut:
        if meeting_link is not None and not isinstance(meeting_link, str):
            raise MeetingValidationError("meetingLink must be a string")

        meeting = self._participant_meeting(caller_id, meeting_id)
        link = (meeting_link or "").strip()
        if link and link != meeting.meeting_link:
            meeting = self.repository.save(meeting.model_copy(update={"meeting_link": link, "updated_at": now_utc()}))
        return self._render_one(meeting)

    def get_virtual_pitch_info(self, caller_id: str, meeting_id: str) -> VirtualPitchInfo:
        return self._pitch_info(self._participant_meeting(caller_id, meeting_id))

    def refresh_virtual_pitch(self, caller_id: str, meeting_id: str) -> VirtualPitchInfo:
        meeting = self.repository.get_meeting(meeting_id)
        if not meeting or not meeting.has_participant(caller_id) or meeting.status != STATUS_ACCEPTED:
            raise MeetingNotFoundError("Meeting not found, not accepted, or unauthorized")

        room_id = new_pitch_room_id()
        meeting = self.repository.save(
            meeting.model_copy(update={"virtual_pitch_room_id": room_id, "updated_at": now_utc()})
        )
        logger.info("Refreshed virtual pitch room for meeting %s: %s", meeting_id, room_id)
        return self._pitch_info(meeting)

    def list_other_users(self, caller_id: str) -> list[UserSummary]:
        return [
            UserSummary(id=user.id, name=user.name, email=user.email, user_type=user.user_type)
            for user in self.directory.list_users_except(caller_id)
        ]
