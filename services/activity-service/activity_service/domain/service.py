"""Activity ingestion: validate the owner, persist, then notify downstream consumers."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from prometheus_client import Counter

from .activity import Activity
from .contracts import TrackActivityInput
from .errors import ActivityNotFoundError, InvalidUserError
from ..events import build_activity_event

logger = logging.getLogger(__name__)

ACTIVITIES_TRACKED = Counter(
    "activities_tracked_total",
    "Activities durably recorded",
    ["activity_type"],
)
EVENTS_PUBLISHED = Counter(
    "activity_events_published_total",
    "Activity events handed to the broker",
    ["outcome"],
)


class ActivityStore(Protocol):
    def create_activity(self, payload: TrackActivityInput) -> Activity: ...

    def get_activity(self, activity_id: str) -> Activity | None: ...

    def list_user_activities(self, user_id: str) -> list[Activity]: ...


class UserValidator(Protocol):
    def validate(self, user_id: str) -> bool: ...


class EventPublisher(Protocol):
    def publish(self, exchange: str, routing_key: str, payload: dict[str, Any]) -> None: ...


class ActivityService:
    """Activity workflows over injected store, validator and publisher handles."""

    def __init__(
        self,
        repository: ActivityStore,
        validator: UserValidator,
        publisher: EventPublisher,
        *,
        exchange: str,
        routing_key: str,
    ) -> None:
        self._repository = repository
        self._validator = validator
        self._publisher = publisher
        self._exchange = exchange
        self._routing_key = routing_key

    def track_activity(self, payload: TrackActivityInput) -> Activity:
        """Record an activity for a confirmed user and announce it.

        Validation, persistence and publishing run strictly in that order.
        Directory and store errors propagate and stop the call; publishing
        errors are logged and never reach the caller.

        Raises
        ------
        InvalidUserError
            The directory did not confirm ``payload.user_id``; nothing is stored.
        """
        if not self._validator.validate(payload.user_id):
            raise InvalidUserError(payload.user_id)

        activity = self._repository.create_activity(payload)
        ACTIVITIES_TRACKED.labels(activity_type=activity.activity_type.value).inc()
        logger.info("recorded activity %s for user %s", activity.activity_id, activity.user_id)

        self._publish(activity)
        return activity

    def _publish(self, activity: Activity) -> None:
        try:
            self._publisher.publish(self._exchange, self._routing_key, build_activity_event(activity))
        except Exception:
            EVENTS_PUBLISHED.labels(outcome="failure").inc()
            logger.exception("failed to publish activity %s", activity.activity_id)
            return
        EVENTS_PUBLISHED.labels(outcome="success").inc()

    def get_user_activities(self, user_id: str) -> list[Activity]:
        return self._repository.list_user_activities(user_id)

    def get_activity(self, activity_id: str) -> Activity:
        # Any caller may read any activity id; there is no owner check here.
        activity = self._repository.get_activity(activity_id)
        if activity is None:
            raise ActivityNotFoundError(activity_id)
        return activity
