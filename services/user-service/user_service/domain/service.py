"""User directory service: registration, profile lookup and id validation."""

from __future__ import annotations

import logging
import uuid

from .contracts import RegisterUserInput
from .errors import DuplicateEmailError, InvalidUserIdError, UserNotFoundError
from .user import User
from ..repository import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """User workflows backed by Postgres storage."""

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository

    def register(self, payload: RegisterUserInput) -> User:
        """Create a user, rejecting emails that are already registered.

        The repository enforces uniqueness as well, so two concurrent
        registrations for one email still leave a single record.
        """
        if self._repository.exists_by_email(payload.email):
            raise DuplicateEmailError(payload.email)
        user = self._repository.create_user(payload)
        logger.info("registered user %s", user.user_id)
        return user

    def get_user(self, user_id: str) -> User:
        user = self._repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def validate_user(self, user_id: str) -> bool:
        """Return whether ``user_id`` names a registered user.

        Raises
        ------
        InvalidUserIdError
            When the identifier is not a well-formed UUID.
        """
        try:
            uuid.UUID(user_id)
        except ValueError as exc:
            raise InvalidUserIdError(user_id) from exc
        return self._repository.exists_by_id(user_id)
