import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLES = (ROLE_STUDENT, ROLE_INSTRUCTOR)


@dataclass(frozen=True)
class Identity:
    """An already-authenticated caller."""

    user_id: uuid.UUID
    role: str

    @property
    def is_instructor(self) -> bool:
        return self.role == ROLE_INSTRUCTOR


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def create_access_token(subject: str, role: str, secret: str, expires_seconds: int = 3600) -> str:
    expire_at = now_utc() + timedelta(seconds=expires_seconds)
    payload: dict[str, Any] = {"sub": subject, "role": role, "exp": expire_at, "type": "access"}
    return jwt.encode(payload, secret, algorithm="HS256")


def decode_access_token(token: str, secret: str) -> dict[str, Any]:
    return jwt.decode(token, secret, algorithms=["HS256"])
