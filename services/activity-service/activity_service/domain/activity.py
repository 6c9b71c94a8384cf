from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fitness_schemas import ActivityType


@dataclass(slots=True)
class Activity:
    """A recorded workout. The id and timestamps are assigned by the store."""

    activity_id: str
    user_id: str
    activity_type: ActivityType
    duration_minutes: int
    calories_burned: int
    start_time: datetime
    created_at: datetime
    updated_at: datetime
    additional_metrics: dict[str, Any] = field(default_factory=dict)
