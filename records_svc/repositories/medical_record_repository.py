"""
Repository for medical record database operations.

Reads join the patient's full name and the author's name so list and
detail responses can display them without extra lookups.
"""
import logging
from typing import Any, List, Mapping, Optional

from core.datetime_utils import format_iso, utc_now
from models import MedicalRecord
from repositories.base import Database, build_set_clause, to_db_values

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = ("diagnosis", "notes", "patient_id")

_SELECT = """
    SELECT m.*, p.full_name AS patient_full_name, u.name AS created_by
    FROM medical_records m
    JOIN patients p ON p.id = m.patient_id
    LEFT JOIN users u ON u.id = m.user_id
"""


class MedicalRecordRepository:
    """Repository for medical record CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def _fetch_one(self, conn, record_id: int) -> Optional[MedicalRecord]:
        row = conn.execute(f"{_SELECT} WHERE m.id = ?", (record_id,)).fetchone()
        return MedicalRecord.from_row(row) if row else None

    def _fetch_many(self, where: str = "", params: tuple = ()) -> List[MedicalRecord]:
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                f"{_SELECT}{where} ORDER BY m.created_at DESC, m.id DESC", params
            ).fetchall()
            return [MedicalRecord.from_row(row) for row in rows]
        finally:
            conn.close()

    def add(
        self,
        patient_id: int,
        user_id: int,
        diagnosis: str,
        notes: Optional[str] = None
    ) -> MedicalRecord:
        """Insert a medical record and return it with joined names."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                """
                INSERT INTO medical_records (diagnosis, notes, user_id, patient_id, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (diagnosis, notes, user_id, patient_id, format_iso(utc_now())),
            )
            record = self._fetch_one(conn, cursor.lastrowid)
            conn.commit()
            return record
        finally:
            conn.close()

    def get_by_id(self, record_id: int) -> Optional[MedicalRecord]:
        conn = self._db.get_connection()
        try:
            return self._fetch_one(conn, record_id)
        finally:
            conn.close()

    def get_all(self) -> List[MedicalRecord]:
        return self._fetch_many()

    def get_by_patient(self, patient_id: int) -> List[MedicalRecord]:
        return self._fetch_many(" WHERE m.patient_id = ?", (patient_id,))

    def get_by_patient_owner(self, user_id: int) -> List[MedicalRecord]:
        """Records of every patient owned by the given user."""
        return self._fetch_many(" WHERE p.user_id = ?", (user_id,))

    def update(self, record_id: int, fields: Mapping[str, Any]) -> Optional[MedicalRecord]:
        """
        Apply a sparse update.

        Returns:
            The updated record, or None if no record has this id.
        """
        clause, params = build_set_clause(to_db_values(fields), UPDATABLE_COLUMNS)
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                f"UPDATE medical_records SET {clause} WHERE id = ?", params + [record_id]
            )
            if cursor.rowcount == 0:
                return None
            record = self._fetch_one(conn, record_id)
            conn.commit()
            return record
        finally:
            conn.close()

    def delete(self, record_id: int) -> Optional[MedicalRecord]:
        """
        Returns:
            The deleted record, or None if no record has this id.
        """
        conn = self._db.get_connection()
        try:
            record = self._fetch_one(conn, record_id)
            if record is None:
                return None
            conn.execute("DELETE FROM medical_records WHERE id = ?", (record_id,))
            conn.commit()
            return record
        finally:
            conn.close()
