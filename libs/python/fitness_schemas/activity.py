"""Shared Pydantic models for activity domain events."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityType(str, Enum):
    RUNNING = "RUNNING"
    CYCLING = "CYCLING"
    SWIMMING = "SWIMMING"
    WALKING = "WALKING"
    YOGA = "YOGA"
    WEIGHT_TRAINING = "WEIGHT_TRAINING"
    HIIT = "HIIT"
    DANCE = "DANCE"
    PILATES = "PILATES"
    ROWING = "ROWING"
    CARDIO = "CARDIO"
    CALISTHENICS = "CALISTHENICS"
    STRETCHING = "STRETCHING"
    OTHER = "OTHER"


class ActivityTracked(BaseModel):
    """Event emitted once an activity has been durably recorded.

    Consumers receive the full persisted record; ``additional_metrics`` is
    passed through untouched.
    """

    activity_id: str = Field(..., alias="id")
    user_id: str = Field(..., alias="userId")
    activity_type: ActivityType = Field(..., alias="activityType")
    duration: int
    calories_burned: int = Field(..., alias="caloriesBurned")
    start_time: datetime = Field(..., alias="startTime")
    additional_metrics: dict[str, Any] = Field(default_factory=dict, alias="additionalMetrics")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    version: str = "v1"

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)
