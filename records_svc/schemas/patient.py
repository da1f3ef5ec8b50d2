"""
Pydantic schemas for patient responses.

Patient create/update bodies are accepted as raw JSON and coerced in the
service layer (core.validation), so that missing fields produce the
documented 400 messages instead of framework validation errors.
"""
from datetime import datetime
from typing import Dict, Optional

from pydantic import Field

from models import BloodGroup, Sex
from schemas.base import CamelModel


class PatientResponse(CamelModel):
    """A patient as returned by the API."""

    id: int = Field(..., description="Unique patient identifier", examples=[1])
    full_name: str = Field(..., description="Patient full name", examples=["John Doe"])
    date_of_birth: Optional[datetime] = Field(None, description="Date of birth (UTC)")
    phone: Optional[str] = Field(None, examples=["1234567890"])
    email: Optional[str] = Field(None, examples=["john.doe@example.com"])
    address: Optional[str] = Field(None, examples=["123 Main St"])
    sex: Sex = Field(..., examples=["MALE"])
    blood_group: Optional[BloodGroup] = Field(None, examples=["A_PLUS"])
    user_id: Optional[int] = Field(None, description="Owning user")
    created_at: datetime
    updated_at: datetime
    created_by: Optional[str] = Field(None, description="Name of the owning user")


class PatientStatistics(CamelModel):
    """Aggregate counts across the patient register."""

    total_patients: int
    by_sex: Dict[str, int]
    by_blood_group: Dict[str, int]
    total_medical_records: int
    total_lab_results: int
