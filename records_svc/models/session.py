"""
Domain model for server-side login sessions.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from core.datetime_utils import from_db_string, utc_now
from models.enums import Role


@dataclass
class Session:
    """An opaque session id bound to a user and the role they logged in with."""

    id: str
    user_id: int
    role: Role
    created_at: datetime
    expires_at: datetime

    def is_expired(self) -> bool:
        return self.expires_at <= utc_now()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Session":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            role=Role(row["role"]),
            created_at=from_db_string(row["created_at"]),
            expires_at=from_db_string(row["expires_at"]),
        )
