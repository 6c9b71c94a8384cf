"""Errors raised by user workflows and mapped to HTTP statuses by the API layer."""

from __future__ import annotations


class UserServiceError(Exception):
    """Base class for user directory failures."""


class DuplicateEmailError(UserServiceError):
    def __init__(self, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email


class UserNotFoundError(UserServiceError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"user not found: {user_id}")
        self.user_id = user_id


class InvalidUserIdError(UserServiceError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"invalid user id: {user_id!r}")
        self.user_id = user_id
