from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Iterator, List

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from backend.config import get_settings
from backend.meetings.errors import MeetingValidationError, StoreError
from backend.models.meeting_model import Meeting
from backend.models.user_model import User
from backend.utils.auth_aws import get_session

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _dynamo_client(client: Any | None = None):
    if client:
        return client
    settings = get_settings()
    return get_session().client(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url or None,
    )


def to_item(document: dict[str, Any]) -> dict[str, Any]:
    return {key: _serializer.serialize(value) for key, value in document.items() if value is not None}


def from_item(item: dict[str, Any]) -> dict[str, Any]:
    document = {key: _deserializer.deserialize(value) for key, value in item.items()}
    for key, value in document.items():
        if isinstance(value, Decimal):
            document[key] = int(value) if value == value.to_integral_value() else float(value)
    return document


def _parse(model, item: dict[str, Any]):
    try:
        return model.model_validate(from_item(item))
    except ValidationError as exc:
        logger.exception("Malformed %s item", model.__name__)
        raise StoreError(f"Malformed {model.__name__} item") from exc


class _DynamoTable:
    def __init__(self, table_name: str, client: Any | None = None):
        self.table_name = table_name
        self.client = _dynamo_client(client)

    def _call(self, operation: str, **kwargs) -> dict[str, Any]:
        try:
            return getattr(self.client, operation)(TableName=self.table_name, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            logger.exception("DynamoDB %s on %s failed", operation, self.table_name)
            raise StoreError(f"{operation} failed on {self.table_name}") from exc

    def get(self, key: str) -> dict[str, Any] | None:
        response = self._call("get_item", Key={"id": {"S": key}})
        return response.get("Item")

    def put(self, document: dict[str, Any]) -> None:
        self._call("put_item", Item=to_item(document))

    def scan(self, **kwargs) -> Iterator[dict[str, Any]]:
        while True:
            response = self._call("scan", **kwargs)
            yield from response.get("Items", [])
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    def query(self, **kwargs) -> list[dict[str, Any]]:
        return self._call("query", **kwargs).get("Items", [])


class DynamoMeetingRepository:
    """Meeting documents in a DynamoDB table keyed by ``id``."""

    def __init__(self, table_name: str | None = None, client: Any | None = None):
        self._table = _DynamoTable(table_name or get_settings().dynamodb_meetings_table, client)

    def list_for_participant(self, user_id: str) -> List[Meeting]:
        items = self._table.scan(
            FilterExpression="requestedBy = :uid OR requestedTo = :uid",
            ExpressionAttributeValues={":uid": {"S": user_id}},
        )
        meetings = [_parse(Meeting, item) for item in items]
        return sorted(meetings, key=lambda m: m.created_at, reverse=True)

    def get_meeting(self, meeting_id: str) -> Meeting | None:
        item = self._table.get(meeting_id)
        return _parse(Meeting, item) if item else None

    def save(self, meeting: Meeting) -> Meeting:
        self._table.put(meeting.to_document())
        return meeting


class DynamoUserDirectory:
    """Users table keyed by ``id`` with a global secondary index on ``email``."""

    def __init__(self, table_name: str | None = None, email_index: str | None = None, client: Any | None = None):
        settings = get_settings()
        self._table = _DynamoTable(table_name or settings.dynamodb_users_table, client)
        self.email_index = email_index or settings.dynamodb_users_email_index

    def find_by_email(self, email: str) -> User | None:
        items = self._table.query(
            IndexName=self.email_index,
            KeyConditionExpression="email = :email",
            ExpressionAttributeValues={":email": {"S": email.strip().lower()}},
            Limit=1,
        )
        return _parse(User, items[0]) if items else None

    def get_user(self, user_id: str) -> User | None:
        item = self._table.get(user_id)
        return _parse(User, item) if item else None

    def get_users(self, user_ids: Iterable[str]) -> dict[str, User]:
        users = {}
        for user_id in dict.fromkeys(user_ids):
            user = self.get_user(user_id)
            if user:
                users[user_id] = user
        return users

    def list_users_except(self, user_id: str) -> List[User]:
        items = self._table.scan(
            FilterExpression="id <> :uid",
            ExpressionAttributeValues={":uid": {"S": user_id}},
        )
        return [_parse(User, item) for item in items]

    def add_user(self, user: User) -> User:
        if self.find_by_email(user.email):
            raise MeetingValidationError(f"User with email {user.email} already exists")
        document = user.to_document()
        document["email"] = user.email.lower()
        self._table.put(document)
        return user
