"""
Pydantic schemas for lab result responses.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.base import CamelModel


class LabResultResponse(CamelModel):
    id: int
    test_name: str = Field(..., examples=["HbA1c"])
    result: str = Field(..., examples=["6.1%"])
    notes: Optional[str] = None
    performed_at: datetime = Field(..., description="When the test was performed (UTC)")
    patient_id: int
    user_id: Optional[int] = Field(None, description="Author")
    created_at: datetime
    patient_full_name: Optional[str] = None
    created_by: Optional[str] = Field(None, description="Name of the author")
