"""
Base database connection and schema initialization.

SQLite with WAL journal mode and a busy timeout; foreign keys are enforced
on every connection. Rows come back as sqlite3.Row so repositories can read
columns by name.

IMPORTANT: Database instantiation should go through the DI layer
(core.dependencies.get_database()) so tests can substitute their own.
"""
import logging
import sqlite3
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.config import DATABASE_PATH, DATABASE_BUSY_TIMEOUT
from core.datetime_utils import format_iso

logger = logging.getLogger(__name__)


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS patients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        full_name TEXT NOT NULL,
        date_of_birth TEXT,
        phone TEXT,
        email TEXT,
        address TEXT,
        sex TEXT NOT NULL,
        blood_group TEXT,
        user_id INTEGER,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE SET NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medical_records (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        diagnosis TEXT NOT NULL,
        notes TEXT,
        user_id INTEGER,
        patient_id INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE SET NULL,
        FOREIGN KEY (patient_id) REFERENCES patients(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lab_results (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        test_name TEXT NOT NULL,
        result TEXT NOT NULL,
        notes TEXT,
        performed_at TEXT NOT NULL,
        user_id INTEGER,
        patient_id INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE SET NULL,
        FOREIGN KEY (patient_id) REFERENCES patients(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL,
        role TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_patients_full_name ON patients(full_name)",
    "CREATE INDEX IF NOT EXISTS idx_patients_user_id ON patients(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_medical_records_patient_id ON medical_records(patient_id)",
    "CREATE INDEX IF NOT EXISTS idx_lab_results_patient_id ON lab_results(patient_id)",
    "CREATE INDEX IF NOT EXISTS idx_lab_results_user_id ON lab_results(user_id)",
]


class Database:
    """
    SQLite database connection manager.

    Usage:
        # Via dependency injection (recommended):
        from core.dependencies import get_database
        db = get_database()

        # Direct instantiation (for testing):
        db = Database(db_path="/tmp/test.db")
    """

    def __init__(self, db_path: Optional[str] = None, busy_timeout: Optional[int] = None):
        """
        Initialize the database and create the schema if needed.

        Args:
            db_path: Path to SQLite database file. Defaults to config DATABASE_PATH.
            busy_timeout: SQLite busy timeout in milliseconds. Defaults to config value.
        """
        self.db_path = db_path or DATABASE_PATH
        self.busy_timeout = busy_timeout if busy_timeout is not None else DATABASE_BUSY_TIMEOUT

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        conn.row_factory = sqlite3.Row
        conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout}")
        conn.execute("PRAGMA foreign_keys = ON")

    def _init_db(self) -> None:
        """Enable WAL mode and create tables and indexes."""
        conn = self.get_connection()
        try:
            mode = conn.execute("PRAGMA journal_mode = WAL").fetchone()
            if mode and mode[0].lower() == "wal":
                logger.info(f"SQLite WAL mode enabled for {self.db_path}")
            else:
                logger.warning(f"Failed to enable WAL mode, current mode: {mode[0] if mode else None}")

            for statement in SCHEMA:
                conn.execute(statement)
            conn.commit()
        finally:
            conn.close()

        logger.info(
            f"Database initialized: {self.db_path} "
            f"(busy_timeout={self.busy_timeout}ms)"
        )

    def get_connection(self) -> sqlite3.Connection:
        """
        Get a new database connection.

        Returns:
            sqlite3.Connection: Connection with foreign keys on, busy timeout
                set and sqlite3.Row as row factory.
        """
        conn = sqlite3.connect(self.db_path)
        self._configure_connection(conn)
        return conn


def build_set_clause(
    fields: Mapping[str, Any],
    allowed: Iterable[str]
) -> Tuple[str, List[Any]]:
    """
    Build the SET part of an UPDATE from a sparse payload.

    Column names come from the payload keys, so they are checked against
    the repository's allow-list before being interpolated.

    Raises:
        ValueError: If the payload is empty or names a column outside `allowed`.
    """
    allowed = set(allowed)
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Columns not updatable: {sorted(unknown)}")
    if not fields:
        raise ValueError("Empty update payload")
    clause = ", ".join(f"{column} = ?" for column in fields)
    return clause, list(fields.values())


def build_where_clause(
    filters: Mapping[str, Any],
    allowed: Iterable[str],
    table_alias: str = ""
) -> Tuple[str, List[Any]]:
    """Equality WHERE clause (with leading ' WHERE ') for a sparse filter payload."""
    allowed = set(allowed)
    unknown = set(filters) - allowed
    if unknown:
        raise ValueError(f"Columns not filterable: {sorted(unknown)}")
    if not filters:
        return "", []
    prefix = f"{table_alias}." if table_alias else ""
    clause = " AND ".join(f"{prefix}{column} = ?" for column in filters)
    return f" WHERE {clause}", list(filters.values())


def to_db_values(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert enum and datetime values in a payload to their stored form."""
    converted: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = format_iso(value)
        converted[key] = value
    return converted
