"""
Service layer for the Medical Records Service.

Services hold the request pipeline: coerce and validate raw input, check
the caller's identity, build sparse payloads and call the repositories.
"""
from services.patient_service import PatientService
from services.medical_record_service import MedicalRecordService
from services.lab_result_service import LabResultService
from services.auth_service import AuthService
from services.user_service import UserService

__all__ = [
    "PatientService",
    "MedicalRecordService",
    "LabResultService",
    "AuthService",
    "UserService",
]
