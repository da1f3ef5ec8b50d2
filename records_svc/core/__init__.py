"""
Core module for configuration, logging and the request pipeline.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Error kinds, exception classes and their HTTP status mapping
- Payload/validation: Sparse payloads and coercion of raw request input
- Datetime utilities: UTC-first datetime handling
"""
from core.config import settings, Settings

# Dependency injection - import functions for FastAPI Depends()
from core.dependencies import (
    get_database,
    get_user_repository,
    get_patient_repository,
    get_medical_record_repository,
    get_lab_result_repository,
    get_session_repository,
    get_patient_service,
    get_medical_record_service,
    get_lab_result_service,
    get_auth_service,
    get_user_service,
    reset_database,
)

# Exception classes for consistent error handling
from core.exceptions import (
    ErrorKind,
    STATUS_BY_KIND,
    RecordsServiceError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    UnclassifiedError,
    DatabaseError,
    setup_exception_handlers,
)

from core.payload import UNSET, build_partial, has_any_field

# UTC datetime utilities
from core.datetime_utils import (
    utc_now,
    to_utc,
    parse_datetime,
    format_iso,
    from_db_string,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_database",
    "get_user_repository",
    "get_patient_repository",
    "get_medical_record_repository",
    "get_lab_result_repository",
    "get_session_repository",
    "get_patient_service",
    "get_medical_record_service",
    "get_lab_result_service",
    "get_auth_service",
    "get_user_service",
    "reset_database",
    # Exceptions
    "ErrorKind",
    "STATUS_BY_KIND",
    "RecordsServiceError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "UnclassifiedError",
    "DatabaseError",
    "setup_exception_handlers",
    # Payloads
    "UNSET",
    "build_partial",
    "has_any_field",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "parse_datetime",
    "format_iso",
    "from_db_string",
]
