"""
Server-side session store.

The client only ever holds the opaque session id (in a cookie); the user id
and role live here.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from core.datetime_utils import format_iso, utc_now
from models import Role, Session
from repositories.base import Database

logger = logging.getLogger(__name__)


class SessionRepository:
    """Create, resolve and revoke login sessions."""

    def __init__(self, db: Database):
        self._db = db

    def create(self, user_id: int, role: Role, ttl_seconds: int) -> Session:
        """Create a session with a fresh random id that expires after `ttl_seconds`."""
        session_id = secrets.token_urlsafe(32)
        created_at = utc_now()
        expires_at = created_at + timedelta(seconds=ttl_seconds)
        conn = self._db.get_connection()
        try:
            conn.execute(
                "INSERT INTO sessions (id, user_id, role, created_at, expires_at) VALUES (?, ?, ?, ?, ?)",
                (session_id, user_id, role.value, format_iso(created_at), format_iso(expires_at)),
            )
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            conn.commit()
            return Session.from_row(row)
        finally:
            conn.close()

    def get(self, session_id: str) -> Optional[Session]:
        conn = self._db.get_connection()
        try:
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            return Session.from_row(row) if row else None
        finally:
            conn.close()

    def delete(self, session_id: str) -> bool:
        """Returns True if a session was removed."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def delete_expired(self) -> int:
        """Purge expired sessions; returns how many were removed."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM sessions WHERE expires_at <= ?", (format_iso(utc_now()),)
            )
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()
