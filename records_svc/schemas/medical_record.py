"""
Pydantic schemas for medical record responses.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.base import CamelModel


class MedicalRecordResponse(CamelModel):
    id: int
    diagnosis: str = Field(..., examples=["Seasonal influenza"])
    notes: Optional[str] = None
    patient_id: int
    user_id: Optional[int] = Field(None, description="Author")
    created_at: datetime
    patient_full_name: Optional[str] = None
    created_by: Optional[str] = Field(None, description="Name of the author")
