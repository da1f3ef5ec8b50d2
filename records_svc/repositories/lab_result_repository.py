"""
Repository for lab result database operations.
"""
import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from core.datetime_utils import format_iso, utc_now
from models import LabResult
from repositories.base import Database, build_set_clause, build_where_clause, to_db_values

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("patient_id", "test_name", "result", "notes", "performed_at")
FILTER_COLUMNS = ("patient_id", "test_name", "result", "user_id")

_SELECT = """
    SELECT l.*, p.full_name AS patient_full_name, u.name AS created_by
    FROM lab_results l
    JOIN patients p ON p.id = l.patient_id
    LEFT JOIN users u ON u.id = l.user_id
"""


class LabResultRepository:
    """Repository for lab result CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def _fetch_one(self, conn, lab_result_id: int) -> Optional[LabResult]:
        row = conn.execute(f"{_SELECT} WHERE l.id = ?", (lab_result_id,)).fetchone()
        return LabResult.from_row(row) if row else None

    def add(
        self,
        patient_id: int,
        user_id: int,
        test_name: str,
        result: str,
        performed_at: datetime,
        notes: Optional[str] = None
    ) -> LabResult:
        """Insert a lab result and return it with joined names."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                """
                INSERT INTO lab_results
                (test_name, result, notes, performed_at, user_id, patient_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    test_name,
                    result,
                    notes,
                    format_iso(performed_at),
                    user_id,
                    patient_id,
                    format_iso(utc_now()),
                ),
            )
            lab_result = self._fetch_one(conn, cursor.lastrowid)
            conn.commit()
            return lab_result
        finally:
            conn.close()

    def get_by_id(self, lab_result_id: int) -> Optional[LabResult]:
        conn = self._db.get_connection()
        try:
            return self._fetch_one(conn, lab_result_id)
        finally:
            conn.close()

    def find(self, filters: Optional[Mapping[str, Any]] = None) -> List[LabResult]:
        """
        Lab results matching the equality filters, most recent first.

        Args:
            filters: Sparse payload of FILTER_COLUMNS values; empty means all.
        """
        where, params = build_where_clause(to_db_values(filters or {}), FILTER_COLUMNS, "l")
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                f"{_SELECT}{where} ORDER BY l.performed_at DESC, l.id DESC", params
            ).fetchall()
            return [LabResult.from_row(row) for row in rows]
        finally:
            conn.close()

    def update(self, lab_result_id: int, fields: Mapping[str, Any]) -> Optional[LabResult]:
        """
        Returns:
            The updated lab result, or None if no lab result has this id.
        """
        clause, params = build_set_clause(to_db_values(fields), UPDATABLE_COLUMNS)
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                f"UPDATE lab_results SET {clause} WHERE id = ?", params + [lab_result_id]
            )
            if cursor.rowcount == 0:
                return None
            lab_result = self._fetch_one(conn, lab_result_id)
            conn.commit()
            return lab_result
        finally:
            conn.close()

    def delete(self, lab_result_id: int) -> Optional[LabResult]:
        conn = self._db.get_connection()
        try:
            lab_result = self._fetch_one(conn, lab_result_id)
            if lab_result is None:
                return None
            conn.execute("DELETE FROM lab_results WHERE id = ?", (lab_result_id,))
            conn.commit()
            return lab_result
        finally:
            conn.close()
