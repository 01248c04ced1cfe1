import sqlite3
from pathlib import Path
from typing import Sequence

from src.routing.domain.models import RewriteRule

GALLERY_OWNER = "gallery"
HOST_OWNER = "host"


class SQLiteRouteTable:
    """Published rewrite table. Gallery rules are kept ahead of every other rule."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.init_schema()

    def init_schema(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS rewrite_rules (
                position INTEGER PRIMARY KEY,
                pattern TEXT NOT NULL,
                target TEXT NOT NULL,
                owner TEXT NOT NULL
            )
            """
        )
        self.conn.commit()

    def add_rule(self, pattern: str, target: str, owner: str = HOST_OWNER) -> None:
        """Append a non-gallery rule, e.g. one registered by the host."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT COALESCE(MAX(position), -1) + 1 FROM rewrite_rules")
        position = int(cursor.fetchone()[0])
        cursor.execute(
            "INSERT INTO rewrite_rules (position, pattern, target, owner) VALUES (?, ?, ?, ?)",
            (position, pattern, target, owner),
        )
        self.conn.commit()

    def publish(self, rules: Sequence[RewriteRule]) -> None:
        gallery = [rule.as_entry() for rule in rules]
        gallery_patterns = {pattern for pattern, _ in gallery}
        cursor = self.conn.cursor()
        try:
            cursor.execute("BEGIN IMMEDIATE")
            cursor.execute(
                "SELECT pattern, target, owner FROM rewrite_rules WHERE owner != ? ORDER BY position",
                (GALLERY_OWNER,),
            )
            # a gallery pattern replaces any foreign rule with the same pattern
            others = [row for row in cursor.fetchall() if row[0] not in gallery_patterns]
            cursor.execute("DELETE FROM rewrite_rules")
            rows = [(pattern, target, GALLERY_OWNER) for pattern, target in gallery] + others
            cursor.executemany(
                "INSERT INTO rewrite_rules (position, pattern, target, owner) VALUES (?, ?, ?, ?)",
                [(position, *row) for position, row in enumerate(rows)],
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def load(self) -> list[tuple[str, str]]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT pattern, target FROM rewrite_rules ORDER BY position")
        return [(row[0], row[1]) for row in cursor.fetchall()]

    def close(self) -> None:
        self.conn.close()
