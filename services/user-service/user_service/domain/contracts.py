"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterUserInput:
    """Validated inputs required to register a user."""

    email: str
    password: str
    first_name: str
    last_name: str
