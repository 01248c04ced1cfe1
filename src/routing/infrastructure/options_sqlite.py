import json
import sqlite3
from pathlib import Path
from typing import Any

from src.config.logger_config import logger


class SQLiteOptionsStore:
    """Host options table; values are stored as JSON text."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.init_schema()

    def init_schema(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS options (
                name TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
        self.conn.commit()

    def get(self, name: str, default: Any = None) -> Any:
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM options WHERE name = ?", (name,))
        row = cursor.fetchone()
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Option {} holds invalid JSON, returning raw text", name)
            return row[0]

    def set(self, name: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        try:
            self.conn.execute(
                """
                INSERT INTO options (name, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(name) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (name, payload),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def delete(self, name: str) -> None:
        self.conn.execute("DELETE FROM options WHERE name = ?", (name,))
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()
