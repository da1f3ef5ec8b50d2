"""
Error kinds, exception classes and FastAPI exception handlers.

Every failure a handler can report is raised as a RecordsServiceError
subclass carrying an ErrorKind. The HTTP status is looked up from the kind
in STATUS_BY_KIND, never from the message text, so messages can change
without changing the status a client sees.

Usage:
    from core.exceptions import ValidationError, NotFoundError

    raise ValidationError("Full name is required")   # -> 400
    raise NotFoundError("Patient not found")         # -> 404

    # In main.py
    setup_exception_handlers(app)

Every error response has the body {"error": <message>}.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR KINDS
# =============================================================================

class ErrorKind(str, Enum):
    """Classification of a failure, independent of its message."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNCLASSIFIED = "unclassified"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNCLASSIFIED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
INVALID_BODY_MESSAGE = "Invalid request body"


def status_for(kind: ErrorKind) -> int:
    """HTTP status code for an error kind."""
    return STATUS_BY_KIND[kind]


# =============================================================================
# EXCEPTION CLASSES
# =============================================================================

class RecordsServiceError(Exception):
    """
    Base exception for all Medical Records Service errors.

    Subclasses set `kind` and a default `message`; raise sites usually pass
    the exact message the client should see.
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED
    message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.__class__.message
        self.context = context
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return status_for(self.kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the JSON error body."""
        return {"error": self.message}


class ValidationError(RecordsServiceError):
    """Missing or malformed caller input."""

    kind = ErrorKind.VALIDATION
    message = "Invalid input"


class UnauthorizedError(RecordsServiceError):
    """No authenticated session for an operation that needs one."""

    kind = ErrorKind.UNAUTHORIZED
    message = "Unauthorized: No user ID found in session"


class ForbiddenError(RecordsServiceError):
    """Authenticated, but the caller's role may not perform the operation."""

    kind = ErrorKind.FORBIDDEN
    message = "Forbidden: Admin role required"


class NotFoundError(RecordsServiceError):
    """A referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND
    message = "Not found"


class ConflictError(RecordsServiceError):
    """The write would violate a uniqueness rule."""

    kind = ErrorKind.CONFLICT
    message = "Already exists"


class UnclassifiedError(RecordsServiceError):
    """Any other failure."""

    kind = ErrorKind.UNCLASSIFIED


class DatabaseError(UnclassifiedError):
    """
    Raised when a database operation fails.

    The operation name goes to the logs only; clients get the generic
    internal error message.
    """

    def __init__(self, operation: Optional[str] = None, **context: Any):
        super().__init__(INTERNAL_ERROR_MESSAGE, operation=operation, **context)
        self.operation = operation


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def records_service_exception_handler(
    request: Request,
    exc: RecordsServiceError
) -> JSONResponse:
    """Translate a classified error into its status code and error body."""
    log_level = logging.ERROR if exc.kind is ErrorKind.UNCLASSIFIED else logging.WARNING
    logger.log(
        log_level,
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "kind": exc.kind.value,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context,
        },
        exc_info=exc if exc.__cause__ is not None else None,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies (e.g. invalid JSON) are caller errors, not 422s."""
    logger.warning(
        "Request body rejected by parser",
        extra={"path": request.url.path, "method": request.method, "errors": exc.errors()},
    )
    return JSONResponse(
        status_code=status_for(ErrorKind.VALIDATION),
        content={"error": INVALID_BODY_MESSAGE},
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Log unexpected exceptions in full; return a message that leaks nothing."""
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={"path": request.url.path, "method": request.method}
    )
    return JSONResponse(
        status_code=status_for(ErrorKind.UNCLASSIFIED),
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(RecordsServiceError, records_service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
