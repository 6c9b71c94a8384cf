"""Shared schema exports."""

from .activity import ActivityTracked, ActivityType
from .user import UserProfile

__all__ = [
    "ActivityTracked",
    "ActivityType",
    "UserProfile",
]
