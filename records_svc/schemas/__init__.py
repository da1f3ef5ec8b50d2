"""
Pydantic schemas for API responses.
"""
from schemas.patient import PatientResponse, PatientStatistics
from schemas.medical_record import MedicalRecordResponse
from schemas.lab_result import LabResultResponse
from schemas.user import UserResponse

__all__ = [
    "PatientResponse",
    "PatientStatistics",
    "MedicalRecordResponse",
    "LabResultResponse",
    "UserResponse",
]
