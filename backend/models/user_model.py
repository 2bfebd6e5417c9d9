from __future__ import annotations

from datetime import datetime
from typing import Literal

from backend.models.meeting_model import CamelModel

UserType = Literal["founder", "investor"]


class User(CamelModel):
    id: str
    name: str
    email: str
    user_type: UserType
    created_at: datetime

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class UserSummary(CamelModel):
    id: str
    name: str
    email: str
    user_type: UserType
