"""Synchronous client for the user-service validation endpoint."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from ..domain.errors import InvalidUserRequestError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserDirectoryClient:
    """Asks the user directory whether a user id may own activities.

    A confirmed 404 or 400 from the directory aborts ingestion loudly. Every
    other failure (timeouts, connection errors, 5xx, unreadable bodies) is
    logged and answered with ``False`` so ingestion fails closed.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_url(cls, base_url: str, timeout_seconds: float) -> "UserDirectoryClient":
        """Build a client with its own connection pool bounded by ``timeout_seconds``."""
        return cls(httpx.Client(base_url=base_url, timeout=httpx.Timeout(timeout_seconds)))

    def validate(self, user_id: str) -> bool:
        """Return the directory's verdict for ``user_id``.

        Raises
        ------
        UserNotFoundError
            The directory answered 404.
        InvalidUserRequestError
            ``user_id`` is blank or a dot segment, or the directory answered 400.
        """
        if not user_id or not user_id.strip() or user_id in (".", ".."):
            raise InvalidUserRequestError(user_id)

        logger.info("calling user validation api for user_id=%s", user_id)
        try:
            resp = self._client.get(f"/api/users/{quote(user_id, safe='')}/validate")
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            if status_code == httpx.codes.NOT_FOUND:
                raise UserNotFoundError(user_id) from exc
            if status_code == httpx.codes.BAD_REQUEST:
                raise InvalidUserRequestError(user_id) from exc
            logger.warning("user validation failed for %s with status %s", user_id, status_code)
            return False
        except httpx.HTTPError as exc:
            logger.warning("user validation unavailable for %s: %s", user_id, exc)
            return False

        try:
            verdict = resp.json()
        except ValueError:
            logger.warning("user validation returned a non-JSON body for %s", user_id)
            return False
        return verdict is True

    def close(self) -> None:
        self._client.close()
