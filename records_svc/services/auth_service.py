"""
Service layer for registration, login and logout.

Sessions are stored server side (SessionRepository); the router only ever
hands the opaque session id to the client as a cookie.
"""
import logging
import sqlite3
from typing import Any, Mapping, Optional, Tuple

from core.auth import ANONYMOUS, CallerIdentity
from core.exceptions import ConflictError, DatabaseError, ForbiddenError, UnauthorizedError
from core.security import hash_password, verify_password
from core.validation import optional_enum, require_string
from models import Role, Session
from repositories import SessionRepository, UserRepository
from schemas import UserResponse

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already registered"
INVALID_CREDENTIALS = "Invalid email or password"
DEFAULT_ROLE = Role.DOCTOR
ADMIN_SELF_ASSIGN = "Forbidden: Only an admin can register an admin account"


class AuthService:
    """Account registration and session lifecycle."""

    def __init__(
        self,
        user_repository: UserRepository,
        session_repository: SessionRepository,
        session_ttl_seconds: int,
        password_iterations: Optional[int] = None,
    ):
        """
        Args:
            user_repository: Data access for user accounts.
            session_repository: Server-side session store.
            session_ttl_seconds: Lifetime of a new session.
            password_iterations: PBKDF2 iterations for new hashes; None uses
                the configured default.
        """
        self._users = user_repository
        self._sessions = session_repository
        self._session_ttl = session_ttl_seconds
        self._password_iterations = password_iterations

    def register(
        self,
        body: Optional[Mapping[str, Any]],
        caller: CallerIdentity = ANONYMOUS
    ) -> UserResponse:
        """
        Create a user account.

        The ADMIN role is only granted when an admin is registering the
        account, or when it is the very first account in the system.

        Args:
            body: Raw JSON body with name, email, password and optional role
                (defaults to DOCTOR).
            caller: Identity of the requester; anonymous for self-registration.

        Raises:
            ValidationError: If a field is missing or the role is unknown.
            ForbiddenError: If a non-admin asks for the ADMIN role.
            ConflictError: If the e-mail is already registered.
        """
        name = require_string(body, "name", "Name")
        email = require_string(body, "email", "Email")
        password = require_string(body, "password", "Password", strip=False)
        role = optional_enum(body, "role", Role, "Role") or DEFAULT_ROLE

        if role is Role.ADMIN and caller.role is not Role.ADMIN and self._has_users():
            logger.warning("Rejected self-assigned admin role", extra={"caller": caller.user_id})
            raise ForbiddenError(ADMIN_SELF_ASSIGN)

        if self._users.get_by_email(email) is not None:
            logger.warning("Registration with an existing e-mail", extra={"role": role.value})
            raise ConflictError(EMAIL_TAKEN)

        try:
            user = self._users.add(
                name=name,
                email=email,
                password_hash=hash_password(password, self._password_iterations),
                role=role,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error registering user: {e}", exc_info=True)
            raise DatabaseError(operation="register") from e

        # Lost a race with a concurrent registration
        if user is None:
            raise ConflictError(EMAIL_TAKEN)

        logger.info(f"User registered: id={user.id}, role={user.role.value}")
        return UserResponse.model_validate(user)

    def _has_users(self) -> bool:
        try:
            return bool(self._users.get_all())
        except sqlite3.Error as e:
            logger.error(f"Database error counting users: {e}", exc_info=True)
            raise DatabaseError(operation="register") from e

    def login(self, body: Optional[Mapping[str, Any]]) -> Tuple[UserResponse, Session]:
        """
        Check credentials and open a session.

        Returns:
            The logged-in user and the new session (whose id goes in the cookie).

        Raises:
            ValidationError: If email or password is missing.
            UnauthorizedError: If the credentials do not match.
        """
        email = require_string(body, "email", "Email")
        password = require_string(body, "password", "Password", strip=False)

        user = self._users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        purged = self._sessions.delete_expired()
        if purged:
            logger.debug(f"Purged {purged} expired sessions")

        session = self._sessions.create(user.id, user.role, self._session_ttl)
        logger.info(f"User logged in: id={user.id}")
        return UserResponse.model_validate(user), session

    def logout(self, caller: CallerIdentity) -> None:
        """End the caller's session; a no-op for anonymous callers."""
        if caller.session_id and self._sessions.delete(caller.session_id):
            logger.info(f"User logged out: id={caller.user_id}")

    def current_user(self, caller: CallerIdentity) -> UserResponse:
        """
        Raises:
            UnauthorizedError: If the caller has no session or the account is gone.
        """
        user_id = caller.require_user_id()
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UnauthorizedError()
        return UserResponse.model_validate(user)
