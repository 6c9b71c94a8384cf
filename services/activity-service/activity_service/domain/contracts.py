"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fitness_schemas import ActivityType


@dataclass(slots=True)
class TrackActivityInput:
    """Validated inputs required to record an activity for a user."""

    user_id: str
    activity_type: ActivityType
    duration_minutes: int
    calories_burned: int
    start_time: datetime
    additional_metrics: dict[str, Any] = field(default_factory=dict)
