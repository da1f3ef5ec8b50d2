"""
Repository for patient database operations.

All SQL for the patients table lives here. Reads join the owning user so
responses can show who created the patient.

Architecture:
    PatientRepository is injected via core.dependencies.get_patient_repository().
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from core.datetime_utils import format_iso, utc_now
from models import Patient
from repositories.base import Database, build_set_clause, build_where_clause, to_db_values

logger = logging.getLogger(__name__)

PATIENT_COLUMNS = (
    "full_name", "date_of_birth", "phone", "email",
    "address", "sex", "blood_group", "user_id",
)
FILTER_COLUMNS = ("full_name", "sex", "blood_group", "user_id")

_SELECT = """
    SELECT p.*, u.name AS created_by
    FROM patients p
    LEFT JOIN users u ON u.id = p.user_id
"""


class PatientRepository:
    """
    Repository for patient CRUD operations.

    Lookups return None when no row matches; update and delete return None
    when the target row does not exist.
    """

    def __init__(self, db: Database):
        """
        Args:
            db: Database instance, injected via core.dependencies.get_patient_repository().
        """
        self._db = db

    def _fetch_one(self, conn, patient_id: int) -> Optional[Patient]:
        row = conn.execute(f"{_SELECT} WHERE p.id = ?", (patient_id,)).fetchone()
        return Patient.from_row(row) if row else None

    def add(self, fields: Mapping[str, Any]) -> Patient:
        """
        Insert a patient and return the stored row.

        Args:
            fields: Column values; keys must be in PATIENT_COLUMNS.
        """
        values = to_db_values(fields)
        unknown = set(values) - set(PATIENT_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown patient columns: {sorted(unknown)}")

        now = format_iso(utc_now())
        values["created_at"] = now
        values["updated_at"] = now
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)

        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                f"INSERT INTO patients ({columns}) VALUES ({placeholders})",
                list(values.values()),
            )
            patient = self._fetch_one(conn, cursor.lastrowid)
            conn.commit()
            return patient
        finally:
            conn.close()

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        conn = self._db.get_connection()
        try:
            return self._fetch_one(conn, patient_id)
        finally:
            conn.close()

    def get_first_by_full_name(self, full_name: str) -> Optional[Patient]:
        """First patient (lowest id) whose full name matches exactly."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                f"{_SELECT} WHERE p.full_name = ? ORDER BY p.id ASC LIMIT 1",
                (full_name,),
            ).fetchone()
            return Patient.from_row(row) if row else None
        finally:
            conn.close()

    def get_all(self, filters: Optional[Mapping[str, Any]] = None) -> List[Patient]:
        """
        All patients matching the equality filters, alphabetically.

        Args:
            filters: Sparse payload of FILTER_COLUMNS values.
        """
        where, params = build_where_clause(to_db_values(filters or {}), FILTER_COLUMNS, "p")
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                f"{_SELECT}{where} ORDER BY p.full_name ASC, p.id ASC", params
            ).fetchall()
            return [Patient.from_row(row) for row in rows]
        finally:
            conn.close()

    def search_by_name(self, term: str) -> List[Patient]:
        """Case-insensitive substring match on full name."""
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                f"{_SELECT} WHERE p.full_name LIKE ? ESCAPE '\\' "
                "ORDER BY p.full_name ASC, p.id ASC",
                (f"%{escaped}%",),
            ).fetchall()
            return [Patient.from_row(row) for row in rows]
        finally:
            conn.close()

    def update(self, patient_id: int, fields: Mapping[str, Any]) -> Optional[Patient]:
        """
        Apply a sparse update.

        Returns:
            The updated patient, or None if no patient has this id.
        """
        values = to_db_values(fields)
        values["updated_at"] = format_iso(utc_now())
        clause, params = build_set_clause(values, PATIENT_COLUMNS + ("updated_at",))

        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                f"UPDATE patients SET {clause} WHERE id = ?", params + [patient_id]
            )
            if cursor.rowcount == 0:
                return None
            patient = self._fetch_one(conn, patient_id)
            conn.commit()
            return patient
        finally:
            conn.close()

    def delete(self, patient_id: int) -> Optional[Patient]:
        """
        Delete a patient; medical records and lab results go with it.

        Returns:
            The deleted patient, or None if no patient has this id.
        """
        conn = self._db.get_connection()
        try:
            patient = self._fetch_one(conn, patient_id)
            if patient is None:
                return None
            conn.execute("DELETE FROM patients WHERE id = ?", (patient_id,))
            conn.commit()
            return patient
        finally:
            conn.close()

    def statistics(self) -> Dict[str, Any]:
        """Counts of patients by sex and blood group plus record totals."""
        conn = self._db.get_connection()
        try:
            total = conn.execute("SELECT COUNT(*) FROM patients").fetchone()[0]
            by_sex = {
                row["sex"]: row["n"]
                for row in conn.execute(
                    "SELECT sex, COUNT(*) AS n FROM patients GROUP BY sex ORDER BY sex"
                )
            }
            by_blood_group = {
                (row["blood_group"] or "UNKNOWN"): row["n"]
                for row in conn.execute(
                    "SELECT blood_group, COUNT(*) AS n FROM patients "
                    "GROUP BY blood_group ORDER BY blood_group"
                )
            }
            records = conn.execute("SELECT COUNT(*) FROM medical_records").fetchone()[0]
            labs = conn.execute("SELECT COUNT(*) FROM lab_results").fetchone()[0]
        finally:
            conn.close()

        return {
            "total_patients": total,
            "by_sex": by_sex,
            "by_blood_group": by_blood_group,
            "total_medical_records": records,
            "total_lab_results": labs,
        }
