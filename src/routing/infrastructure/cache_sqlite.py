import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable

from src.config.logger_config import logger


class SQLiteCacheStore:
    """Expiring key/value cache. A ttl of 0 or less never expires."""

    def __init__(self, db_path: str | Path, clock: Callable[[], float] = time.time) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.clock = clock
        self.conn = sqlite3.connect(self.db_path)
        self.init_schema()

    def init_schema(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS cache_entries (
                cache_key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                expires_at REAL
            )
            """
        )
        self.conn.commit()

    def get(self, key: str) -> Any | None:
        cursor = self.conn.cursor()
        cursor.execute("SELECT value, expires_at FROM cache_entries WHERE cache_key = ?", (key,))
        row = cursor.fetchone()
        if row is None:
            return None
        value, expires_at = row
        if expires_at is not None and expires_at <= self.clock():
            self.delete(key)
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Cache entry {} is not valid JSON, dropping it", key)
            self.delete(key)
            return None

    def set(self, key: str, value: Any, ttl: int) -> None:
        expires_at = self.clock() + ttl if ttl > 0 else None
        payload = json.dumps(value, ensure_ascii=False)
        try:
            self.conn.execute(
                """
                INSERT INTO cache_entries (cache_key, value, expires_at)
                VALUES (?, ?, ?)
                ON CONFLICT(cache_key) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (key, payload, expires_at),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def delete(self, key: str) -> None:
        self.conn.execute("DELETE FROM cache_entries WHERE cache_key = ?", (key,))
        self.conn.commit()

    def purge_expired(self) -> int:
        cursor = self.conn.execute(
            "DELETE FROM cache_entries WHERE expires_at IS NOT NULL AND expires_at <= ?",
            (self.clock(),),
        )
        self.conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        self.conn.close()
