"""
Service layer for user administration (ADMIN only).
"""
import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from core.auth import CallerIdentity
from core.exceptions import ConflictError, DatabaseError, NotFoundError
from core.payload import build_partial
from core.validation import optional_enum, parse_id, require_update_fields, updated_string
from models import Role
from repositories import UserRepository
from schemas import UserResponse
from services.auth_service import EMAIL_TAKEN

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


class UserService:
    def __init__(self, user_repository: UserRepository):
        self._repo = user_repository

    def list_users(self, caller: CallerIdentity) -> List[UserResponse]:
        caller.require_role(Role.ADMIN)
        return [UserResponse.model_validate(u) for u in self._repo.get_all()]

    def update_user(
        self,
        raw_id: Any,
        body: Optional[Mapping[str, Any]],
        caller: CallerIdentity
    ) -> UserResponse:
        """
        Partial update of a user's name, email or role.

        Raises:
            ValidationError: Invalid id or values, or no field supplied.
            UnauthorizedError / ForbiddenError: Caller is not an admin.
            NotFoundError: No user has this id.
            ConflictError: The new e-mail belongs to another user.
        """
        user_id = parse_id(raw_id)
        candidate = {
            "name": updated_string(body, "name", "Name"),
            "email": updated_string(body, "email", "Email"),
            "role": optional_enum(body, "role", Role, "Role", nullable=False),
        }
        require_update_fields(candidate)
        caller.require_role(Role.ADMIN)

        fields = build_partial(candidate)
        try:
            user = self._repo.update(user_id, fields)
        except sqlite3.IntegrityError as e:
            raise ConflictError(EMAIL_TAKEN, user_id=user_id) from e
        except sqlite3.Error as e:
            logger.error(f"Database error updating user {user_id}: {e}", exc_info=True)
            raise DatabaseError(operation="update_user") from e

        if user is None:
            raise NotFoundError(USER_NOT_FOUND, user_id=user_id)

        logger.info(f"User updated: id={user_id}, fields={sorted(fields)}")
        return UserResponse.model_validate(user)

    def delete_user(self, raw_id: Any, caller: CallerIdentity) -> UserResponse:
        user_id = parse_id(raw_id)
        caller.require_role(Role.ADMIN)

        try:
            user = self._repo.delete(user_id)
        except sqlite3.Error as e:
            logger.error(f"Database error deleting user {user_id}: {e}", exc_info=True)
            raise DatabaseError(operation="delete_user") from e

        if user is None:
            raise NotFoundError(USER_NOT_FOUND, user_id=user_id)

        logger.info(f"User deleted: id={user_id}")
        return UserResponse.model_validate(user)
