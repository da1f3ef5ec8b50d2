"""
Domain model for patients.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from core.datetime_utils import from_db_string
from models.enums import BloodGroup, Sex


def row_value(row: Mapping[str, Any], key: str) -> Any:
    """Value of an optional (joined) column, None when the query did not select it."""
    return row[key] if key in row.keys() else None


@dataclass
class Patient:
    """A patient and, when joined, the name of the user who owns the record."""

    id: int
    full_name: str
    sex: Sex
    created_at: datetime
    updated_at: datetime
    date_of_birth: Optional[datetime] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    blood_group: Optional[BloodGroup] = None
    user_id: Optional[int] = None
    created_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Patient":
        """
        Create a Patient from a sqlite3.Row of the patients table.

        Args:
            row: Row with the patients columns and optionally `created_by`.
        """
        blood_group = row["blood_group"]
        return cls(
            id=row["id"],
            full_name=row["full_name"],
            sex=Sex(row["sex"]),
            date_of_birth=from_db_string(row["date_of_birth"]),
            phone=row["phone"],
            email=row["email"],
            address=row["address"],
            blood_group=BloodGroup(blood_group) if blood_group else None,
            user_id=row["user_id"],
            created_at=from_db_string(row["created_at"]),
            updated_at=from_db_string(row["updated_at"]),
            created_by=row_value(row, "created_by"),
        )
