"""
FastAPI dependency injection configuration.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (Business Logic)
         ↓ Injected
    Repository Layer (Data Access)
         ↓ Injected
    Database (SQLite)

Testing:
    app.dependency_overrides[get_database] = lambda: test_database
"""
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance, creating it on first use.

    Import happens here to avoid circular imports with repositories.
    """
    global _database_instance

    if _database_instance is None:
        from repositories import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.medrec_svc_db_busy_timeout
        )

    return _database_instance


def reset_database() -> None:
    """Drop the cached database instance (for testing only)."""
    global _database_instance
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_user_repository() -> "UserRepository":
    from repositories import UserRepository
    return UserRepository(db=get_database())


def get_patient_repository() -> "PatientRepository":
    from repositories import PatientRepository
    return PatientRepository(db=get_database())


def get_medical_record_repository() -> "MedicalRecordRepository":
    from repositories import MedicalRecordRepository
    return MedicalRecordRepository(db=get_database())


def get_lab_result_repository() -> "LabResultRepository":
    from repositories import LabResultRepository
    return LabResultRepository(db=get_database())


def get_session_repository() -> "SessionRepository":
    from repositories import SessionRepository
    return SessionRepository(db=get_database())


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_patient_service() -> "PatientService":
    """
    Get a PatientService with its repositories injected.

    Returns:
        PatientService: Service for patient operations.
    """
    from services import PatientService

    return PatientService(
        patient_repository=get_patient_repository(),
        medical_record_repository=get_medical_record_repository(),
        lab_result_repository=get_lab_result_repository(),
    )


def get_medical_record_service() -> "MedicalRecordService":
    from services import MedicalRecordService

    return MedicalRecordService(
        medical_record_repository=get_medical_record_repository(),
        patient_repository=get_patient_repository(),
    )


def get_lab_result_service() -> "LabResultService":
    from services import LabResultService

    return LabResultService(
        lab_result_repository=get_lab_result_repository(),
        patient_repository=get_patient_repository(),
    )


def get_auth_service() -> "AuthService":
    """
    Get an AuthService wired to the user and session stores.

    Session lifetime comes from settings.
    """
    from services import AuthService

    return AuthService(
        user_repository=get_user_repository(),
        session_repository=get_session_repository(),
        session_ttl_seconds=settings.medrec_svc_session_ttl,
    )


def get_user_service() -> "UserService":
    from services import UserService

    return UserService(user_repository=get_user_repository())
