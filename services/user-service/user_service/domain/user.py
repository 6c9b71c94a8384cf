from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class User:
    """Aggregate root for a registered user."""

    user_id: str
    email: str
    password: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
