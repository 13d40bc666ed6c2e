import sqlite3

import pytest

from errors import DataServiceError
from infrastructure.repositories.sqlite_content_repository import SQLiteContentRepository


def create_v1_schema(db_path: str):
    """A v1 database: comments without approved_at, slugs not yet unique."""
    with sqlite3.connect(db_path) as conn:
        conn.execute("CREATE TABLE schema_info (version INTEGER NOT NULL)")
        conn.execute("INSERT INTO schema_info (version) VALUES (1)")
        conn.execute("""
            CREATE TABLE profiles (
                id TEXT PRIMARY KEY, email TEXT NOT NULL, full_name TEXT NOT NULL DEFAULT '',
                is_admin INTEGER NOT NULL DEFAULT 0, created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE blog_posts (
                id TEXT PRIMARY KEY, title TEXT NOT NULL, slug TEXT NOT NULL, content TEXT NOT NULL,
                excerpt TEXT NOT NULL DEFAULT '', featured_image TEXT, author_id TEXT,
                published INTEGER NOT NULL DEFAULT 0, published_at TEXT,
                created_at TEXT NOT NULL, updated_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE comments (
                id TEXT PRIMARY KEY, blog_post_id TEXT NOT NULL, author_name TEXT NOT NULL,
                author_email TEXT NOT NULL, content TEXT NOT NULL,
                approved INTEGER NOT NULL DEFAULT 0, created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE testimonies (
                id TEXT PRIMARY KEY, author_name TEXT NOT NULL, author_email TEXT NOT NULL,
                title TEXT NOT NULL, content TEXT NOT NULL, approved INTEGER NOT NULL DEFAULT 0,
                approved_at TEXT, created_at TEXT NOT NULL
            )
        """)
        conn.execute(
            "INSERT INTO comments VALUES ('c1', 'p1', 'Ann', 'ann@example.com', 'Hi', 1, '2024-01-01')"
        )
        conn.commit()


def _version(db_path):
    with sqlite3.connect(db_path) as conn:
        return conn.execute("SELECT version FROM schema_info").fetchone()[0]


def test_migration_from_empty(tmp_path):
    db_file = str(tmp_path / "empty.db")
    repo = SQLiteContentRepository(db_file)
    repo.init_db()

    assert _version(db_file) == 2
    with sqlite3.connect(db_file) as conn:
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        comment_cols = [r[1] for r in conn.execute("PRAGMA table_info(comments)")]
    assert {"profiles", "blog_posts", "comments", "testimonies"} <= tables
    assert "approved_at" in comment_cols


def test_migration_from_v1_keeps_rows(tmp_path):
    db_file = str(tmp_path / "v1.db")
    create_v1_schema(db_file)

    repo = SQLiteContentRepository(db_file)
    repo.init_db()

    assert _version(db_file) == 2
    rows = repo.select("comments", filters={"id": "c1"})
    assert rows[0]["approved"] is True
    assert rows[0]["approved_at"] is None


def test_init_db_is_idempotent(tmp_path):
    db_file = str(tmp_path / "twice.db")
    repo = SQLiteContentRepository(db_file)
    repo.init_db()
    repo.insert("testimonies", {"author_name": "A", "author_email": "a@b.co", "title": "T", "content": "C",
                                "approved": False, "created_at": "2024-01-01"})
    repo.init_db()

    assert _version(db_file) == 2
    assert len(repo.select("testimonies")) == 1


def test_unknown_collection_and_column_rejected(content_repo):
    with pytest.raises(DataServiceError):
        content_repo.select("users")
    with pytest.raises(DataServiceError):
        content_repo.select("testimonies", filters={"password": "x"})
    with pytest.raises(DataServiceError):
        content_repo.insert("profiles", {"id": "p", "email": "e", "role": "admin", "created_at": "now"})


def test_unfiltered_writes_refused(content_repo):
    with pytest.raises(DataServiceError):
        content_repo.update("testimonies", {"approved": True}, filters={})
    with pytest.raises(DataServiceError):
        content_repo.delete("testimonies", filters={})


def test_booleans_round_trip_and_null_filter(content_repo):
    content_repo.insert("profiles", {"id": "p1", "email": "a@b.co", "full_name": "A", "is_admin": True,
                                     "created_at": "2024-01-01"})
    content_repo.insert("testimonies", {"author_name": "A", "author_email": "a@b.co", "title": "T",
                                        "content": "C", "approved": False, "approved_at": None,
                                        "created_at": "2024-01-01"})

    assert content_repo.select("profiles", filters={"is_admin": True})[0]["is_admin"] is True
    assert len(content_repo.select("testimonies", filters={"approved_at": None})) == 1
    assert content_repo.update("profiles", {"is_admin": False}, filters={"id": "missing"}) == []
