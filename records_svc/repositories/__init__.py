"""
Repository layer for database access.

All SQL lives in this package - no SQL in service or API layers.
"""
from repositories.base import Database
from repositories.user_repository import UserRepository
from repositories.patient_repository import PatientRepository
from repositories.medical_record_repository import MedicalRecordRepository
from repositories.lab_result_repository import LabResultRepository
from repositories.session_repository import SessionRepository

__all__ = [
    "Database",
    "UserRepository",
    "PatientRepository",
    "MedicalRecordRepository",
    "LabResultRepository",
    "SessionRepository",
]
