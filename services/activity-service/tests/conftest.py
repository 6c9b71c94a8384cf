from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import pytest

from activity_service.domain.activity import Activity
from activity_service.domain.contracts import TrackActivityInput
from activity_service.domain.service import ActivityService


class FakeActivityRepository:
    """In-memory stand-in for the Postgres activity store."""

    def __init__(self) -> None:
        self.activities: dict[str, Activity] = {}

    def create_activity(self, payload: TrackActivityInput) -> Activity:
        now = datetime.now(timezone.utc)
        activity = Activity(
            activity_id=str(uuid.uuid4()),
            user_id=payload.user_id,
            activity_type=payload.activity_type,
            duration_minutes=payload.duration_minutes,
            calories_burned=payload.calories_burned,
            start_time=payload.start_time,
            additional_metrics=dict(payload.additional_metrics),
            created_at=now,
            updated_at=now,
        )
        self.activities[activity.activity_id] = activity
        return activity

    def get_activity(self, activity_id: str):
        return self.activities.get(activity_id)

    def list_user_activities(self, user_id: str) -> list[Activity]:
        return [a for a in self.activities.values() if a.user_id == user_id]


class FakeValidator:
    """Answers from a fixed set of valid ids, or raises a configured error."""

    def __init__(self, valid_ids: set[str] | None = None) -> None:
        self.valid_ids = valid_ids or set()
        self.error: Exception | None = None
        self.calls: list[str] = []

    def validate(self, user_id: str) -> bool:
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return user_id in self.valid_ids


class RecordingPublisher:
    def __init__(self) -> None:
        self.published: list[tuple[str, str, dict[str, Any]]] = []
        self.error: Exception | None = None

    def publish(self, exchange: str, routing_key: str, payload: dict[str, Any]) -> None:
        if self.error is not None:
            raise self.error
        self.published.append((exchange, routing_key, payload))


@pytest.fixture
def repository() -> FakeActivityRepository:
    return FakeActivityRepository()


@pytest.fixture
def validator() -> FakeValidator:
    return FakeValidator({"U1", "U2"})


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def service(repository, validator, publisher) -> ActivityService:
    return ActivityService(
        repository,
        validator,
        publisher,
        exchange="fitness.exchange",
        routing_key="activity.tracking",
    )
