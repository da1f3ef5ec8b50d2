"""
Domain model for users (staff accounts).
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from core.datetime_utils import from_db_string
from models.enums import Role


@dataclass
class User:
    id: int
    name: str
    email: str
    role: Role
    password_hash: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=Role(row["role"]),
            password_hash=row["password_hash"],
            created_at=from_db_string(row["created_at"]),
            updated_at=from_db_string(row["updated_at"]),
        )
