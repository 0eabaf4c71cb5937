# partner_kyc/database.py
from __future__ import annotations
import json
import logging
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from .form_data_builder import PAYLOAD_FIELDS, SubmissionPayload

logger = logging.getLogger(__name__)

# Render provides a persistent disk; KYC_DATA_DIR wins when both are set.
DATA_DIR: Path = Path(os.environ.get('KYC_DATA_DIR', os.environ.get('RENDER_DISK_PATH', '.')))
DB_PATH: Path = DATA_DIR / "kyc_submissions.db"
UPLOAD_DIR: Path = DATA_DIR / "uploads"

_JSON_COLUMNS: frozenset[str] = frozenset({'addresses'})
_BOOL_COLUMNS: frozenset[str] = frozenset({'declaration'})


class SubmissionRepository(Protocol):
    """Anything that can store one submission row and hand back its id."""
    def insert(self, payload: SubmissionPayload) -> int: ...


def _column_type(column: str) -> str:
    if column in _BOOL_COLUMNS:
        return 'INTEGER NOT NULL DEFAULT 0'
    return 'TEXT'


class SqliteSubmissionRepository:
    def __init__(self, db_path: Path = DB_PATH) -> None:
        self.db_path = db_path

    def get_db_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def setup_database(self) -> None:
        logger.info(f"Setting up database at: {self.db_path}")
        columns_sql = ',\n'.join(f"    {column} {_column_type(column)}" for column in PAYLOAD_FIELDS)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self.get_db_connection() as conn:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS submissions (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        created_at TEXT NOT NULL,
                    {columns_sql}
                    );
                """)
                conn.commit()
            logger.info("Database setup successful.")
        except sqlite3.Error as e:
            logger.error(f"Database setup failed: {e}"); raise

    def insert(self, payload: SubmissionPayload) -> int:
        values: list[Any] = [datetime.now(timezone.utc).isoformat()]
        for column in PAYLOAD_FIELDS:
            value = payload[column]  # type: ignore[literal-required]
            if column in _JSON_COLUMNS and value is not None:
                value = json.dumps(value)
            elif column in _BOOL_COLUMNS:
                value = int(bool(value))
            values.append(value)

        placeholders = ', '.join('?' for _ in values)
        column_list = ', '.join(('created_at', *PAYLOAD_FIELDS))
        with self.get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"INSERT INTO submissions ({column_list}) VALUES ({placeholders})", values)
            conn.commit()
            record_id = cursor.lastrowid
        if record_id is None:
            raise sqlite3.DatabaseError("Insert did not return a row id.")
        logger.info(f"Stored submission #{record_id} for '{payload['business_name']}'.")
        return record_id

    def fetch(self, record_id: int) -> dict[str, Any] | None:
        with self.get_db_connection() as conn:
            row = conn.execute("SELECT * FROM submissions WHERE id = ?", (record_id,)).fetchone()
        if row is None:
            return None
        result = dict(row)
        for column in _JSON_COLUMNS:
            if result.get(column) is not None:
                result[column] = json.loads(result[column])
        for column in _BOOL_COLUMNS:
            result[column] = bool(result[column])
        return result
