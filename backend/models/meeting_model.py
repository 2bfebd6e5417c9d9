from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MeetingStatus = Literal["pending", "accepted", "declined"]
STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_DECLINED = "declined"
RESPONSE_STATUSES = (STATUS_ACCEPTED, STATUS_DECLINED)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Meeting(CamelModel):
    """Stored meeting document. Field names are camelCase on the wire and in storage."""

    id: str
    requested_by: str
    requested_to: str
    title: str
    description: str
    date_time: datetime
    duration: int
    status: MeetingStatus = STATUS_PENDING
    meeting_link: str
    virtual_pitch_room_id: str | None = None
    created_at: datetime
    updated_at: datetime

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.requested_by, self.requested_to)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class MeetingCreate(CamelModel):
    email: str = Field(min_length=3)
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    date_time: datetime
    duration: int = Field(gt=0)

    @field_validator("email", "title", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class Participant(CamelModel):
    id: str
    name: str
    email: str


class MeetingOut(CamelModel):
    id: str
    requested_by: Participant | None
    requested_to: Participant | None
    title: str
    description: str
    date_time: datetime
    duration: int
    status: MeetingStatus
    meeting_link: str
    virtual_pitch_room_id: str | None = None
    created_at: datetime
    updated_at: datetime


class VirtualPitchInfo(CamelModel):
    meeting_id: str
    title: str
    virtual_pitch_room_id: str | None = None
    virtual_pitch_url: str | None = None
