"""Producer side of the activity event stream consumed by AI/analytics workers."""

from __future__ import annotations

import json
import logging
import time
from threading import Lock
from typing import Any, Callable

from kafka import KafkaProducer
from kafka.errors import KafkaError

from fitness_schemas import ActivityTracked

from .domain.activity import Activity

logger = logging.getLogger(__name__)


def build_activity_event(activity: Activity) -> dict[str, Any]:
    """Serialise a persisted activity into the JSON-safe event payload."""
    event = ActivityTracked(
        activity_id=activity.activity_id,
        user_id=activity.user_id,
        activity_type=activity.activity_type,
        duration=activity.duration_minutes,
        calories_burned=activity.calories_burned,
        start_time=activity.start_time,
        additional_metrics=activity.additional_metrics,
        created_at=activity.created_at,
        updated_at=activity.updated_at,
    )
    return event.model_dump(mode="json", by_alias=True)



class PublisherUnavailableError(RuntimeError):
    """The broker is cooling down after a failure, or a producer is being built."""


def _default_producer_factory(bootstrap_servers: str, options: dict[str, Any]) -> KafkaProducer:
    return KafkaProducer(
        bootstrap_servers=bootstrap_servers,
        value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
        key_serializer=lambda k: k.encode("utf-8") if k else None,
        acks=1,
        **options,
    )


class KafkaEventPublisher:
    """Fire-and-forget publisher; the exchange names the topic, the routing key the message key.

    The producer is created on first use so the service can still accept
    writes while the broker is down. A pinned ``api_version`` skips the
    blocking broker version lookup at construction, and ``max_block_ms``
    caps how long ``send`` may wait for metadata. After a failed construction
    or send, every publish fails immediately until ``retry_backoff_seconds``
    have passed.
    ``publish`` never waits for the broker acknowledgement; late delivery
    failures are only logged.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        producer_factory: Callable[[str, dict[str, Any]], Any] = _default_producer_factory,
        *,
        max_block_ms: int = 1000,
        api_version: tuple[int, ...] = (2, 5, 0),
        retry_backoff_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._bootstrap_servers = bootstrap_servers
        self._producer_factory = producer_factory
        self._options: dict[str, Any] = {
            "max_block_ms": max_block_ms,
            "request_timeout_ms": max(max_block_ms, 1000),
            "api_version": api_version,
        }
        self._retry_backoff = retry_backoff_seconds
        self._clock = clock
        self._retry_at = 0.0
        self._producer: Any | None = None
        self._lock = Lock()

    def _get_producer(self) -> Any:
        producer = self._producer
        if producer is not None:
            return producer
        if not self._lock.acquire(blocking=False):
            raise PublisherUnavailableError("kafka producer is being created")
        try:
            if self._producer is None:
                try:
                    self._producer = self._producer_factory(self._bootstrap_servers, self._options)
                except Exception:
                    self._trip()
                    raise
                logger.info("kafka producer connected to %s", self._bootstrap_servers)
            return self._producer
        finally:
            self._lock.release()

    def _trip(self) -> None:
        self._retry_at = self._clock() + self._retry_backoff
        logger.warning(
            "kafka publishing to %s suspended for %.0fs", self._bootstrap_servers, self._retry_backoff
        )

    def publish(self, exchange: str, routing_key: str, payload: dict[str, Any]) -> None:
        if self._clock() < self._retry_at:
            raise PublisherUnavailableError(f"broker at {self._bootstrap_servers} is cooling down")
        producer = self._get_producer()
        try:
            future = producer.send(exchange, value=payload, key=routing_key)
        except KafkaError:
            self._trip()
            raise
        future.add_errback(self._on_send_error, exchange, routing_key)

    @staticmethod
    def _on_send_error(exchange: str, routing_key: str, exc: BaseException) -> None:
        logger.error("delivery to %s (%s) failed: %s", exchange, routing_key, exc)

    def close(self) -> None:
        with self._lock:
            if self._producer is not None:
                self._producer.flush(timeout=5)
                self._producer.close(timeout=5)
                self._producer = None
