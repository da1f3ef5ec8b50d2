"""
Pydantic schemas for user responses. Password hashes are never exposed.
"""
from datetime import datetime

from pydantic import Field

from models import Role
from schemas.base import CamelModel


class UserResponse(CamelModel):
    id: int
    name: str = Field(..., examples=["Dr. Jane Smith"])
    email: str = Field(..., examples=["jane.smith@example.com"])
    role: Role = Field(..., examples=["DOCTOR"])
    created_at: datetime
    updated_at: datetime
