"""
Domain models for the medical records service.

Plain dataclasses built from database rows; no behaviour beyond conversion.
"""
from models.enums import BloodGroup, Role, Sex
from models.user import User
from models.patient import Patient
from models.medical_record import MedicalRecord
from models.lab_result import LabResult
from models.session import Session

__all__ = [
    "BloodGroup",
    "Role",
    "Sex",
    "User",
    "Patient",
    "MedicalRecord",
    "LabResult",
    "Session",
]
