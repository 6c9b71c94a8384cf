"""HTTP route definitions for the user service."""

from __future__ import annotations

import logging

import redis
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from fitness_schemas import UserProfile

from ..config import get_settings
from ..domain.contracts import RegisterUserInput
from ..domain.errors import DuplicateEmailError, InvalidUserIdError, UserNotFoundError
from ..domain.service import UserService
from ..domain.user import User
from ..security.rate_limiter import SlidingWindowRateLimiter
from ..security.redis_rate_limiter import RedisSlidingWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users")


class RegisterRequest(BaseModel):
    """Payload accepted when registering a user."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


def to_profile(user: User) -> UserProfile:
    """Build the public profile view; the stored password is left out."""
    return UserProfile(
        user_id=user.user_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


settings = get_settings()


def _build_rate_limiter() -> SlidingWindowRateLimiter | RedisSlidingWindowRateLimiter:
    """Instantiate the configured rate limiter backend, preferring Redis when available."""
    if settings.rate_limit_backend == "redis" and settings.redis_url:
        try:
            client = redis.from_url(settings.redis_url)
            client.ping()
            logger.info("rate limiter configured for redis backend at %s", settings.redis_url)
            return RedisSlidingWindowRateLimiter(
                client,
                max_requests=settings.rate_limit_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )
        except redis.RedisError as exc:
            logger.warning("redis rate limiter unavailable, falling back to in-memory: %s", exc)

    logger.info("rate limiter using in-memory backend")
    return SlidingWindowRateLimiter(
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )


rate_limiter = _build_rate_limiter()


def get_service(request: Request) -> UserService:
    """Resolve the `UserService` stored on the FastAPI application state."""
    service: UserService = request.app.state.user_service
    return service


@router.post("/register", response_model=UserProfile)
def register_user(
    request: Request,
    payload: RegisterRequest,
    service: UserService = Depends(get_service),
) -> UserProfile:
    """Register a user; a second registration for the same email is rejected."""
    client_host = request.client.host if request.client else "unknown"
    if not rate_limiter.allow(f"register:{client_host}"):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")
    try:
        user = service.register(
            RegisterUserInput(
                email=payload.email,
                password=payload.password,
                first_name=payload.first_name,
                last_name=payload.last_name,
            )
        )
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="email already exists") from exc
    return to_profile(user)


@router.get("/{user_id}", response_model=UserProfile)
def get_user_profile(
    user_id: str,
    service: UserService = Depends(get_service),
) -> UserProfile:
    try:
        user = service.get_user(user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found") from exc
    return to_profile(user)


@router.get("/{user_id}/validate", response_model=bool)
def validate_user(
    user_id: str,
    service: UserService = Depends(get_service),
) -> bool:
    """Answer whether the id belongs to a registered user; malformed ids get a 400."""
    try:
        return service.validate_user(user_id)
    except InvalidUserIdError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
