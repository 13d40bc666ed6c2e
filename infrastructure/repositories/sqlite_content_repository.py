import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from errors import DataServiceError
from infrastructure.repositories.data_client import TABLE_COLUMNS, Row

log = logging.getLogger(__name__)

BOOLEAN_COLUMNS = {"is_admin", "published", "approved"}


class SQLiteContentRepository:
    """Local stand-in for the hosted data API, same collections and modifiers."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _get_current_version(self, conn) -> int:
        row = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='schema_info'").fetchone()
        if row:
            version_row = conn.execute("SELECT version FROM schema_info").fetchone()
            if version_row:
                return version_row[0]
        return 0

    def _migrate_v1(self, conn):
        """Baseline schema (v1)."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL,
                full_name TEXT NOT NULL DEFAULT '',
                is_admin INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS blog_posts (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                slug TEXT NOT NULL,
                content TEXT NOT NULL,
                excerpt TEXT NOT NULL DEFAULT '',
                featured_image TEXT,
                author_id TEXT REFERENCES profiles(id) ON DELETE SET NULL,
                published INTEGER NOT NULL DEFAULT 0,
                published_at TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS comments (
                id TEXT PRIMARY KEY,
                blog_post_id TEXT NOT NULL REFERENCES blog_posts(id) ON DELETE CASCADE,
                author_name TEXT NOT NULL,
                author_email TEXT NOT NULL,
                content TEXT NOT NULL,
                approved INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS testimonies (
                id TEXT PRIMARY KEY,
                author_name TEXT NOT NULL,
                author_email TEXT NOT NULL,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                approved INTEGER NOT NULL DEFAULT 0,
                approved_at TEXT,
                created_at TEXT NOT NULL
            )
        """)

    def _migrate_v2(self, conn):
        """Comments carry an approval timestamp like testimonies."""
        cols = [c[1] for c in conn.execute("PRAGMA table_info(comments)").fetchall()]
        if "approved_at" not in cols:
            conn.execute("ALTER TABLE comments ADD COLUMN approved_at TEXT")
        conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_blog_posts_slug ON blog_posts(slug)")

    def init_db(self):
        MIGRATIONS = [self._migrate_v1, self._migrate_v2]

        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER NOT NULL
                )
            """)

            current_version = self._get_current_version(conn)

            has_version_row = conn.execute("SELECT COUNT(*) FROM schema_info").fetchone()[0] > 0
            if not has_version_row:
                conn.execute("INSERT INTO schema_info (version) VALUES (?)", (current_version,))

            for i in range(current_version, len(MIGRATIONS)):
                target_version = i + 1
                try:
                    MIGRATIONS[i](conn)
                    conn.execute("UPDATE schema_info SET version = ?", (target_version,))
                except Exception as e:
                    raise RuntimeError(f"Content database migration to v{target_version} failed: {e}") from e

            conn.commit()

    def _check_columns(self, table: str, columns) -> None:
        allowed = TABLE_COLUMNS.get(table)
        if allowed is None:
            raise DataServiceError(f"Unknown collection: {table}")
        unknown = [c for c in columns if c not in allowed]
        if unknown:
            raise DataServiceError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    def _encode(self, value: Any) -> Any:
        return int(value) if isinstance(value, bool) else value

    def _decode(self, row: sqlite3.Row) -> Row:
        data = dict(row)
        for col in BOOLEAN_COLUMNS.intersection(data):
            data[col] = bool(data[col])
        return data

    def _where(self, filters: Optional[Row]):
        clauses, params = [], []
        for column, value in (filters or {}).items():
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(self._encode(value))
        sql = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        return sql, params

    def _execute(self, action: str, table: str, fn):
        try:
            with self._conn() as conn:
                return fn(conn)
        except sqlite3.Error as e:
            log.error(f"❌ {action} on {table} failed: {e}")
            raise DataServiceError(f"{action} on {table} failed: {e}") from e

    def select(self, table: str, *, filters: Optional[Row] = None, order: Optional[str] = None,
               descending: bool = True, limit: Optional[int] = None) -> List[Row]:
        self._check_columns(table, list(filters or {}) + ([order] if order else []))
        where, params = self._where(filters)
        query = f"SELECT * FROM {table}{where}"
        if order:
            direction = "DESC" if descending else "ASC"
            query += f" ORDER BY {order} {direction}, rowid {direction}"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        return self._execute("select", table, lambda conn: [self._decode(r) for r in conn.execute(query, params).fetchall()])

    def insert(self, table: str, row: Row) -> Row:
        data = dict(row)
        data.setdefault("id", str(uuid.uuid4()))
        self._check_columns(table, data)
        columns = list(data)
        placeholders = ", ".join("?" for _ in columns)

        def run(conn):
            conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                [self._encode(data[c]) for c in columns],
            )
            conn.commit()
            return self._decode(conn.execute(f"SELECT * FROM {table} WHERE id = ?", (data["id"],)).fetchone())

        return self._execute("insert", table, run)

    def update(self, table: str, values: Row, *, filters: Row) -> List[Row]:
        if not filters:
            raise DataServiceError(f"Refusing unfiltered update on {table}")
        self._check_columns(table, list(values) + list(filters))
        assignments = ", ".join(f"{c} = ?" for c in values)
        where, where_params = self._where(filters)

        def run(conn):
            ids = [r["id"] for r in conn.execute(f"SELECT id FROM {table}{where}", where_params).fetchall()]
            if not ids:
                return []
            conn.execute(
                f"UPDATE {table} SET {assignments}{where}",
                [self._encode(v) for v in values.values()] + where_params,
            )
            conn.commit()
            marks = ", ".join("?" for _ in ids)
            return [self._decode(r) for r in conn.execute(f"SELECT * FROM {table} WHERE id IN ({marks})", ids).fetchall()]

        return self._execute("update", table, run)

    def delete(self, table: str, *, filters: Row) -> None:
        if not filters:
            raise DataServiceError(f"Refusing unfiltered delete on {table}")
        self._check_columns(table, filters)
        where, params = self._where(filters)

        def run(conn):
            conn.execute(f"DELETE FROM {table}{where}", params)
            conn.commit()

        self._execute("delete", table, run)
