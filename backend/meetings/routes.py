from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status

from backend.meetings.controller import MeetingController
from backend.meetings.errors import (
    MeetingNotFoundError,
    MeetingServiceError,
    MeetingValidationError,
    UserNotFoundError,
)
from backend.models.meeting_model import MeetingOut, VirtualPitchInfo
from backend.models.user_model import UserSummary
from backend.utils.auth_jwt import get_current_user_id

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache
def get_controller() -> MeetingController:
    return MeetingController.from_settings()


CallerId = Annotated[str, Depends(get_current_user_id)]
Controller = Annotated[MeetingController, Depends(get_controller)]


def _http_error(exc: MeetingServiceError, fallback: str) -> HTTPException:
    if isinstance(exc, MeetingValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, (UserNotFoundError, MeetingNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    logger.exception("%s: %s", fallback, exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=fallback)


@router.get("", response_model=list[MeetingOut])
def list_meetings(caller_id: CallerId, controller: Controller):
    try:
        return controller.list_for_caller(caller_id)
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error fetching meetings") from exc


@router.post("", response_model=MeetingOut, status_code=status.HTTP_201_CREATED)
def create_meeting(caller_id: CallerId, controller: Controller, payload: dict = Body(...)):
    try:
        return controller.create_meeting(caller_id, payload)
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error creating meeting") from exc


@router.get("/users", response_model=list[UserSummary])
def list_users(caller_id: CallerId, controller: Controller):
    try:
        return controller.list_other_users(caller_id)
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error fetching users") from exc


@router.patch("/{meeting_id}/status", response_model=MeetingOut)
def update_status(meeting_id: str, caller_id: CallerId, controller: Controller, payload: dict = Body(...)):
    try:
        return controller.set_status(caller_id, meeting_id, payload.get("status"))
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error updating meeting status") from exc


@router.patch("/{meeting_id}", response_model=MeetingOut)
def update_meeting(meeting_id: str, caller_id: CallerId, controller: Controller, payload: dict = Body(...)):
    try:
        return controller.update_meeting_link(caller_id, meeting_id, payload.get("meetingLink"))
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error updating meeting") from exc


@router.get("/{meeting_id}/virtual-pitch", response_model=VirtualPitchInfo)
def get_virtual_pitch(meeting_id: str, caller_id: CallerId, controller: Controller):
    try:
        return controller.get_virtual_pitch_info(caller_id, meeting_id)
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error fetching virtual pitch information") from exc


@router.patch("/{meeting_id}/refresh-virtual-pitch", response_model=VirtualPitchInfo)
def refresh_virtual_pitch(meeting_id: str, caller_id: CallerId, controller: Controller):
    try:
        return controller.refresh_virtual_pitch(caller_id, meeting_id)
    except MeetingServiceError as exc:
        raise _http_error(exc, "Error refreshing virtual pitch room") from exc
