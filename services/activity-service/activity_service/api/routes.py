"""HTTP route definitions for the activity service."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, ConfigDict, Field

from fitness_schemas import ActivityType

from ..domain.activity import Activity
from ..domain.contracts import TrackActivityInput
from ..domain.service import ActivityService

router = APIRouter(prefix="/api/activities")


class ActivityRequest(BaseModel):
    """Payload accepted when tracking an activity."""

    user_id: str = Field(..., alias="userId", min_length=1)
    activity_type: ActivityType = Field(..., alias="type")
    duration: int = Field(..., gt=0)
    calories_burned: int = Field(..., alias="caloriesBurned", ge=0)
    start_time: datetime = Field(..., alias="startTime")
    additional_metrics: dict[str, Any] = Field(default_factory=dict, alias="additionalMetrics")

    model_config = ConfigDict(populate_by_name=True)


class ActivityResponse(BaseModel):
    """Serialised representation of an `Activity`."""

    activity_id: str = Field(..., alias="id")
    user_id: str = Field(..., alias="userId")
    activity_type: ActivityType = Field(..., alias="activityType")
    duration: int
    calories_burned: int = Field(..., alias="caloriesBurned")
    start_time: datetime = Field(..., alias="startTime")
    additional_metrics: dict[str, Any] = Field(default_factory=dict, alias="additionalMetrics")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, activity: Activity) -> "ActivityResponse":
        """Build a response model from the domain record."""
        return cls(
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


def get_service(request: Request) -> ActivityService:
    """Resolve the `ActivityService` stored on the FastAPI application state."""
    service: ActivityService = request.app.state.activity_service
    return service


@router.post("", response_model=ActivityResponse)
def track_activity(
    payload: ActivityRequest,
    service: ActivityService = Depends(get_service),
) -> ActivityResponse:
    """Record an activity after its user has been confirmed by the user service."""
    activity = service.track_activity(
        TrackActivityInput(
            user_id=payload.user_id,
            activity_type=payload.activity_type,
            duration_minutes=payload.duration,
            calories_burned=payload.calories_burned,
            start_time=payload.start_time,
            additional_metrics=payload.additional_metrics,
        )
    )
    return ActivityResponse.from_domain(activity)


@router.get("", response_model=list[ActivityResponse])
def get_user_activities(
    user_id: str = Header(..., alias="X-User-ID"),
    service: ActivityService = Depends(get_service),
) -> list[ActivityResponse]:
    """List activities for the user named by the (trusted) identity header."""
    return [ActivityResponse.from_domain(activity) for activity in service.get_user_activities(user_id)]


@router.get("/{activity_id}", response_model=ActivityResponse)
def get_activity(
    activity_id: str,
    service: ActivityService = Depends(get_service),
) -> ActivityResponse:
    return ActivityResponse.from_domain(service.get_activity(activity_id))
