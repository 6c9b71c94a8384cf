"""Database repository for user directory data."""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.contracts import RegisterUserInput
from .domain.errors import DuplicateEmailError
from .domain.user import User

_USER_COLUMNS = "user_id, email, password, first_name, last_name, created_at, updated_at"


class UserRepository:
    """Postgres-backed user persistence with a unique email constraint."""

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def _hash_email(self, email: str) -> bytes:
        """Normalise an email address and return its SHA-256 digest."""
        return hashlib.sha256(email.strip().lower().encode("utf-8")).digest()

    def create_user(self, payload: RegisterUserInput) -> User:
        """Insert a user row, raising ``DuplicateEmailError`` on a unique violation."""
        user_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO users (user_id, email_hash, email, password, first_name, last_name, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING {_USER_COLUMNS}
                        """,
                        (
                            user_id,
                            self._hash_email(payload.email),
                            payload.email,
                            payload.password,
                            payload.first_name,
                            payload.last_name,
                            now,
                            now,
                        ),
                    )
                    row = cur.fetchone()
                    conn.commit()
        except errors.UniqueViolation as exc:
            raise DuplicateEmailError(payload.email) from exc
        return self._map_record(row)

    def get_user(self, user_id: str) -> User | None:
        """Fetch a user by identifier or return ``None``."""
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=tuple_row) as cur:
                cur.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()
                if not row:
                    return None
        return self._map_record(row)

    def exists_by_email(self, email: str) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT EXISTS (SELECT 1 FROM users WHERE email_hash = %s)",
                    (self._hash_email(email),),
                )
                return bool(cur.fetchone()[0])

    def exists_by_id(self, user_id: str) -> bool:
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT EXISTS (SELECT 1 FROM users WHERE user_id = %s)", (user_id,))
                return bool(cur.fetchone()[0])

    def _map_record(self, row: tuple) -> User:
        """Convert a raw database tuple into the domain ``User`` dataclass."""
        return User(
            user_id=row[0],
            email=row[1],
            password=row[2],
            first_name=row[3],
            last_name=row[4],
            created_at=row[5],
            updated_at=row[6],
        )
