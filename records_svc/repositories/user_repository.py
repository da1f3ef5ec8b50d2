"""
Repository for user accounts.
"""
import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from core.datetime_utils import format_iso, utc_now
from models import Role, User
from repositories.base import Database, build_set_clause, to_db_values

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("name", "email", "role", "password_hash")


class UserRepository:
    """Repository for user CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def add(self, name: str, email: str, password_hash: str, role: Role) -> Optional[User]:
        """
        Insert a user.

        Returns:
            The created user, or None if the e-mail is already registered
            (UNIQUE constraint violation).
        """
        now = format_iso(utc_now())
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                """
                INSERT INTO users (name, email, password_hash, role, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (name, email, password_hash, role.value, now, now),
            )
            row = conn.execute("SELECT * FROM users WHERE id = ?", (cursor.lastrowid,)).fetchone()
            conn.commit()
            return User.from_row(row)
        except sqlite3.IntegrityError:
            return None
        finally:
            conn.close()

    def get_by_id(self, user_id: int) -> Optional[User]:
        conn = self._db.get_connection()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return User.from_row(row) if row else None
        finally:
            conn.close()

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive e-mail lookup."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM users WHERE lower(email) = lower(?)", (email,)
            ).fetchone()
            return User.from_row(row) if row else None
        finally:
            conn.close()

    def get_all(self) -> List[User]:
        conn = self._db.get_connection()
        try:
            rows = conn.execute("SELECT * FROM users ORDER BY name ASC, id ASC").fetchall()
            return [User.from_row(row) for row in rows]
        finally:
            conn.close()

    def update(self, user_id: int, fields: Mapping[str, Any]) -> Optional[User]:
        """
        Returns:
            The updated user, or None if no user has this id.

        Raises:
            sqlite3.IntegrityError: If the new e-mail belongs to another user.
        """
        values = to_db_values(fields)
        values["updated_at"] = format_iso(utc_now())
        clause, params = build_set_clause(values, UPDATABLE_COLUMNS + ("updated_at",))
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(f"UPDATE users SET {clause} WHERE id = ?", params + [user_id])
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            conn.commit()
            return User.from_row(row)
        finally:
            conn.close()

    def delete(self, user_id: int) -> Optional[User]:
        conn = self._db.get_connection()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if row is None:
                return None
            conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            conn.commit()
            return User.from_row(row)
        finally:
            conn.close()
