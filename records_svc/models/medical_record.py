"""
Domain model for medical records.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from core.datetime_utils import from_db_string
from models.patient import row_value


@dataclass
class MedicalRecord:
    """A diagnosis written by a user about a patient."""

    id: int
    diagnosis: str
    patient_id: int
    user_id: Optional[int]
    created_at: datetime
    notes: Optional[str] = None
    # Joined display fields
    patient_full_name: Optional[str] = None
    created_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MedicalRecord":
        return cls(
            id=row["id"],
            diagnosis=row["diagnosis"],
            notes=row["notes"],
            patient_id=row["patient_id"],
            user_id=row["user_id"],
            created_at=from_db_string(row["created_at"]),
            patient_full_name=row_value(row, "patient_full_name"),
            created_by=row_value(row, "created_by"),
        )
