"""
Session authentication for the Medical Records Service API.

The session cookie carries only an opaque id. It is resolved once per
request into a CallerIdentity, which handlers receive explicitly and pass
to the service layer; nothing below the router reads the request.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyCookie

from core.config import SESSION_COOKIE_NAME
from core.dependencies import get_session_repository
from core.exceptions import ForbiddenError, UnauthorizedError
from core.logging_config import set_user_id
from models import Role
from repositories import SessionRepository

logger = logging.getLogger(__name__)

NO_SESSION_MESSAGE = "Unauthorized: No user ID found in session"
ADMIN_REQUIRED_MESSAGE = "Forbidden: Admin role required"

session_cookie = APIKeyCookie(
    name=SESSION_COOKIE_NAME,
    auto_error=False,
    description="Opaque session id set by POST /api/v1/auth/login.",
)


@dataclass(frozen=True)
class CallerIdentity:
    """Who is making the request; both fields are None for anonymous callers."""

    user_id: Optional[int] = None
    role: Optional[Role] = None
    session_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def require_user_id(self) -> int:
        """
        Raises:
            UnauthorizedError: If the request carries no valid session.
        """
        if self.user_id is None:
            raise UnauthorizedError(NO_SESSION_MESSAGE)
        return self.user_id

    def require_role(self, role: Role) -> int:
        """
        Raises:
            UnauthorizedError: If anonymous.
            ForbiddenError: If authenticated with a different role.
        """
        user_id = self.require_user_id()
        if self.role is not role:
            message = ADMIN_REQUIRED_MESSAGE if role is Role.ADMIN else f"Forbidden: {role.value} role required"
            raise ForbiddenError(message)
        return user_id


ANONYMOUS = CallerIdentity()


async def get_caller_identity(
    session_id: Optional[str] = Security(session_cookie),
    sessions: SessionRepository = Depends(get_session_repository),
) -> CallerIdentity:
    """
    Resolve the session cookie into a CallerIdentity.

    Unknown and expired sessions resolve to the anonymous identity; expired
    ones are removed from the store.
    """
    if not session_id:
        return ANONYMOUS

    session = sessions.get(session_id)
    if session is None:
        logger.info("Request with unknown session id")
        return ANONYMOUS

    if session.is_expired():
        logger.info("Request with expired session", extra={"user_id": session.user_id})
        sessions.delete(session_id)
        return ANONYMOUS

    set_user_id(session.user_id)
    return CallerIdentity(user_id=session.user_id, role=session.role, session_id=session.id)
