"""Database repository for recorded activities."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

import psycopg
from psycopg.rows import tuple_row
from psycopg.types.json import Json
from psycopg_pool import ConnectionPool

from fitness_schemas import ActivityType

from .domain.activity import Activity
from .domain.contracts import TrackActivityInput
from .domain.errors import ActivityStoreError

_ACTIVITY_COLUMNS = (
    "activity_id, user_id, activity_type, duration_minutes, calories_burned, "
    "start_time, additional_metrics, created_at, updated_at"
)


class ActivityRepository:
    """Postgres-backed activity persistence; metrics are kept in a JSONB column."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    yield cur
        except psycopg.Error as exc:
            raise ActivityStoreError(f"activity store unavailable: {exc}") from exc

    def create_activity(self, payload: TrackActivityInput) -> Activity:
        """Insert an activity, assigning its id and timestamps."""
        activity_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        with self._cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO activities (
                    activity_id, user_id, activity_type, duration_minutes, calories_burned,
                    start_time, additional_metrics, created_at, updated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_ACTIVITY_COLUMNS}
                """,
                (
                    activity_id,
                    payload.user_id,
                    payload.activity_type.value,
                    payload.duration_minutes,
                    payload.calories_burned,
                    payload.start_time,
                    Json(payload.additional_metrics or {}),
                    now,
                    now,
                ),
            )
            row = cur.fetchone()
            cur.connection.commit()
        return self._map_record(row)

    def get_activity(self, activity_id: str) -> Activity | None:
        """Fetch an activity by identifier or return ``None``."""
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {_ACTIVITY_COLUMNS} FROM activities WHERE activity_id = %s",
                (activity_id,),
            )
            row = cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    def list_user_activities(self, user_id: str) -> list[Activity]:
        """Return every activity recorded for ``user_id``, newest start first."""
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {_ACTIVITY_COLUMNS}
                FROM activities
                WHERE user_id = %s
                ORDER BY start_time DESC, activity_id
                """,
                (user_id,),
            )
            rows = cur.fetchall()
        return [self._map_record(row) for row in rows]

    def _map_record(self, row: tuple) -> Activity:
        """Convert a raw database tuple into the domain ``Activity`` dataclass."""
        return Activity(
            activity_id=row[0],
            user_id=row[1],
            activity_type=ActivityType(row[2]),
            duration_minutes=row[3],
            calories_burned=row[4],
            start_time=row[5],
            additional_metrics=row[6] or {},
            created_at=row[7],
            updated_at=row[8],
        )
