from __future__ import annotations

import json
import threading
from datetime import datetime, timezone

import pytest
from kafka.errors import KafkaTimeoutError, NoBrokersAvailable

from activity_service.domain.activity import Activity
from activity_service.events import KafkaEventPublisher, PublisherUnavailableError, build_activity_event
from fitness_schemas import ActivityType


class FakeFuture:
    def __init__(self) -> None:
        self.errbacks: list = []

    def add_errback(self, f, *args):
        self.errbacks.append((f, args))
        return self


class FakeProducer:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict, str]] = []
        self.closed = False

    def send(self, topic, value=None, key=None):
        self.sent.append((topic, value, key))
        return FakeFuture()

    def flush(self, timeout=None):
        pass

    def close(self, timeout=None):
        self.closed = True


def _activity() -> Activity:
    ts = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    return Activity(
        activity_id="A1",
        user_id="U1",
        activity_type=ActivityType.CYCLING,
        duration_minutes=45,
        calories_burned=410,
        start_time=datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc),
        additional_metrics={"cadence": [82, 85, 90], "indoor": True, "note": None},
        created_at=ts,
        updated_at=ts,
    )


def test_event_payload_is_json_safe_and_complete():
    payload = build_activity_event(_activity())

    assert json.loads(json.dumps(payload)) == payload
    assert payload == {
        "id": "A1",
        "userId": "U1",
        "activityType": "CYCLING",
        "duration": 45,
        "caloriesBurned": 410,
        "startTime": "2024-05-01T07:00:00Z",
        "additionalMetrics": {"cadence": [82, 85, 90], "indoor": True, "note": None},
        "createdAt": "2024-05-01T08:00:00Z",
        "updatedAt": "2024-05-01T08:00:00Z",
        "version": "v1",
    }


def test_producer_is_created_lazily_and_reused():
    created: list[str] = []
    producer = FakeProducer()

    def factory(servers: str, options: dict) -> FakeProducer:
        created.append(servers)
        return producer

    publisher = KafkaEventPublisher("kafka:9092", producer_factory=factory)
    assert created == []

    publisher.publish("fitness.exchange", "activity.tracking", {"id": "A1"})
    publisher.publish("fitness.exchange", "activity.tracking", {"id": "A2"})

    assert created == ["kafka:9092"]
    assert producer.sent == [
        ("fitness.exchange", {"id": "A1"}, "activity.tracking"),
        ("fitness.exchange", {"id": "A2"}, "activity.tracking"),
    ]

    publisher.close()
    assert producer.closed


def test_delivery_failures_are_logged(caplog):
    future = FakeFuture()
    producer = FakeProducer()
    producer.send = lambda topic, value=None, key=None: future
    publisher = KafkaEventPublisher("kafka:9092", producer_factory=lambda servers, options: producer)

    publisher.publish("fitness.exchange", "activity.tracking", {"id": "A1"})
    callback, args = future.errbacks[0]
    callback(*args, RuntimeError("broker rejected"))

    assert "broker rejected" in caplog.text


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_producer_options_bound_blocking():
    seen: list[dict] = []

    def factory(servers: str, options: dict) -> FakeProducer:
        seen.append(options)
        return FakeProducer()

    publisher = KafkaEventPublisher(
        "kafka:9092", producer_factory=factory, max_block_ms=500, api_version=(3, 6, 0)
    )
    publisher.publish("fitness.exchange", "activity.tracking", {"id": "A1"})

    assert seen[0]["max_block_ms"] == 500
    assert seen[0]["api_version"] == (3, 6, 0)
    assert seen[0]["request_timeout_ms"] >= 500


def test_failed_construction_is_not_retried_until_backoff_expires():
    clock = Clock()
    attempts: list[str] = []

    def factory(servers: str, options: dict):
        attempts.append(servers)
        raise NoBrokersAvailable()

    publisher = KafkaEventPublisher(
        "kafka:9092", producer_factory=factory, retry_backoff_seconds=30, clock=clock
    )

    with pytest.raises(NoBrokersAvailable):
        publisher.publish("fitness.exchange", "activity.tracking", {"id": "A1"})
    with pytest.raises(PublisherUnavailableError):
        publisher.publish("fitness.exchange", "activity.tracking", {"id": "A2"})
    assert attempts == ["kafka:9092"]

    clock.now += 30
    with pytest.raises(NoBrokersAvailable):
        publisher.publish("fitness.exchange", "activity.tracking", {"id": "A3"})
    assert len(attempts) == 2


def test_send_timeout_suspends_publishing():
    clock = Clock()
    producer = FakeProducer()
    calls: list[dict] = []

    def send(topic, value=None, key=None):
        calls.append(value)
        raise KafkaTimeoutError("Failed to update metadata after 1.0 secs.")

    producer.send = send
    publisher = KafkaEventPublisher(
        "kafka:9092",
        producer_factory=lambda servers, options: producer,
        retry_backoff_seconds=30,
        clock=clock,
    )

    with pytest.raises(KafkaTimeoutError):
        publisher.publish("fitness.exchange", "activity.tracking", {"id": "A1"})
    with pytest.raises(PublisherUnavailableError):
        publisher.publish("fitness.exchange", "activity.tracking", {"id": "A2"})
    assert calls == [{"id": "A1"}]


def test_concurrent_publish_does_not_wait_for_slow_construction():
    entered = threading.Event()
    release = threading.Event()

    def factory(servers: str, options: dict) -> FakeProducer:
        entered.set()
        release.wait(timeout=5)
        return FakeProducer()

    publisher = KafkaEventPublisher("kafka:9092", producer_factory=factory)
    builder = threading.Thread(
        target=publisher.publish, args=("fitness.exchange", "activity.tracking", {"id": "A1"})
    )
    builder.start()
    assert entered.wait(timeout=5)

    try:
        with pytest.raises(PublisherUnavailableError):
            publisher.publish("fitness.exchange", "activity.tracking", {"id": "A2"})
    finally:
        release.set()
        builder.join(timeout=5)
