"""Error taxonomy for activity ingestion.

Caller-correctable problems, missing resources and unavailable dependencies
each get their own branch so the API layer can answer with a distinct status.
"""

from __future__ import annotations


class ActivityServiceError(Exception):
    """Base class for ingestion failures."""


class InvalidUserError(ActivityServiceError):
    """The user directory did not confirm the submitting user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"invalid user id: {user_id}")
        self.user_id = user_id


class InvalidUserRequestError(ActivityServiceError):
    """The user directory rejected the lookup as malformed."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"invalid request for user: {user_id!r}")
        self.user_id = user_id


class UserNotFoundError(ActivityServiceError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class ActivityNotFoundError(ActivityServiceError):
    def __init__(self, activity_id: str) -> None:
        super().__init__(f"activity not found: {activity_id}")
        self.activity_id = activity_id


class DependencyError(ActivityServiceError):
    """A backing service needed to finish the call is unavailable."""


class ActivityStoreError(DependencyError):
    pass
