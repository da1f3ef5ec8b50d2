"""
Domain model for lab results.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from core.datetime_utils import from_db_string
from models.patient import row_value


@dataclass
class LabResult:
    """A test outcome recorded by a user for a patient."""

    id: int
    test_name: str
    result: str
    performed_at: datetime
    patient_id: int
    user_id: Optional[int]
    created_at: datetime
    notes: Optional[str] = None
    # Joined display fields
    patient_full_name: Optional[str] = None
    created_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LabResult":
        return cls(
            id=row["id"],
            test_name=row["test_name"],
            result=row["result"],
            notes=row["notes"],
            performed_at=from_db_string(row["performed_at"]),
            patient_id=row["patient_id"],
            user_id=row["user_id"],
            created_at=from_db_string(row["created_at"]),
            patient_full_name=row_value(row, "patient_full_name"),
            created_by=row_value(row, "created_by"),
        )
