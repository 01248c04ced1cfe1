import sqlite3
from pathlib import Path

from src.routing.domain.models import PageRecord

_COLUMNS = "id, slug, title, content, status, path"


class SQLitePageRepository:
    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.init_schema()

    def init_schema(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS pages (
                id INTEGER PRIMARY KEY,
                slug TEXT NOT NULL,
                title TEXT NOT NULL DEFAULT '',
                content TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT 'draft',
                path TEXT NOT NULL DEFAULT ''
            )
            """
        )
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_pages_slug ON pages(slug)")
        self.conn.commit()

    def upsert_page(self, page: PageRecord) -> PageRecord:
        cursor = self.conn.cursor()
        try:
            cursor.execute(
                f"""
                INSERT INTO pages ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    slug = excluded.slug,
                    title = excluded.title,
                    content = excluded.content,
                    status = excluded.status,
                    path = excluded.path
                """,
                (page.id, page.slug, page.title, page.content, page.status, page.path),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise
        return page

    def find_pages_with_marker(self, marker: str) -> list[PageRecord]:
        # plain substring match, no LIKE wildcards
        cursor = self.conn.cursor()
        cursor.execute(
            f"SELECT {_COLUMNS} FROM pages WHERE status = 'publish' AND instr(content, ?) > 0 ORDER BY id",
            (marker,),
        )
        return [self._to_record(row) for row in cursor.fetchall()]

    def find_page_by_slug(self, slug: str) -> PageRecord | None:
        cursor = self.conn.cursor()
        cursor.execute(
            f"SELECT {_COLUMNS} FROM pages WHERE slug = ? ORDER BY status = 'publish' DESC, id LIMIT 1",
            (slug,),
        )
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    def find_page_by_path(self, path: str) -> PageRecord | None:
        normalized = path.strip("/")
        if not normalized:
            return None
        cursor = self.conn.cursor()
        cursor.execute(
            f"""
            SELECT {_COLUMNS} FROM pages
            WHERE path = ? OR (path = '' AND slug = ?)
            ORDER BY status = 'publish' DESC, id LIMIT 1
            """,
            (normalized, normalized),
        )
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    def get_page(self, page_id: int) -> PageRecord | None:
        cursor = self.conn.cursor()
        cursor.execute(f"SELECT {_COLUMNS} FROM pages WHERE id = ?", (int(page_id),))
        row = cursor.fetchone()
        return self._to_record(row) if row else None

    @staticmethod
    def _to_record(row: tuple) -> PageRecord:
        return PageRecord(
            id=int(row[0]),
            slug=row[1],
            title=row[2],
            content=row[3],
            status=row[4],
            path=row[5],
        )

    def close(self) -> None:
        self.conn.close()
