import json
import sqlite3


class SQLiteAccountRepository:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

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
            CREATE TABLE IF NOT EXISTS accounts (
                id TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                password_salt TEXT NOT NULL,
                password_hash TEXT NOT NULL,
                metadata_json TEXT NOT NULL DEFAULT '{}',
                email_confirmed INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                token TEXT PRIMARY KEY,
                account_id TEXT NOT NULL,
                expires_at TEXT NOT NULL,
                created_at TEXT NOT NULL,
                last_seen_at TEXT NOT NULL
            )
        """)

    def init_db(self):
        MIGRATIONS = [self._migrate_v1]

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
                    # The surrounding connection context rolls back the whole init on error.
                    raise RuntimeError(f"Account database migration to v{target_version} failed: {e}") from e

            conn.commit()

    def _row_to_dict(self, row):
        if not row:
            return None
        return {
            "id": row[0], "email": row[1], "password_salt": row[2], "password_hash": row[3],
            "user_metadata": json.loads(row[4] or "{}"), "email_confirmed": bool(row[5]), "created_at": row[6],
        }

    def get_account_by_email(self, email: str):
        with self._conn() as conn:
            row = conn.execute("""
                SELECT id, email, password_salt, password_hash, metadata_json, email_confirmed, created_at
                FROM accounts WHERE email = ?
            """, (email,)).fetchone()
            return self._row_to_dict(row)

    def get_account_by_id(self, account_id: str):
        with self._conn() as conn:
            row = conn.execute("""
                SELECT id, email, password_salt, password_hash, metadata_json, email_confirmed, created_at
                FROM accounts WHERE id = ?
            """, (account_id,)).fetchone()
            return self._row_to_dict(row)

    def create_account(self, account_id, email, salt_hex, pw_hash, metadata, email_confirmed, created_at):
        with self._conn() as conn:
            try:
                conn.execute("""
                    INSERT INTO accounts (id, email, password_salt, password_hash, metadata_json, email_confirmed, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (account_id, email, salt_hex, pw_hash, json.dumps(metadata or {}), int(email_confirmed), created_at))
                conn.commit()
                return True, None
            except sqlite3.IntegrityError:
                return False, "integrity_error"

    def confirm_email(self, account_id: str):
        with self._conn() as conn:
            conn.execute("UPDATE accounts SET email_confirmed = 1 WHERE id = ?", (account_id,))
            conn.commit()

    def create_session(self, token, account_id, expires_iso, now_iso):
        with self._conn() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO sessions (token, account_id, expires_at, created_at, last_seen_at)
                VALUES (?, ?, ?, ?, ?)
            """, (token, account_id, expires_iso, now_iso, now_iso))
            conn.commit()

    def get_session(self, token):
        with self._conn() as conn:
            return conn.execute("SELECT account_id, expires_at FROM sessions WHERE token = ?", (token,)).fetchone()

    def update_session_last_seen(self, token, now_iso):
        with self._conn() as conn:
            conn.execute("UPDATE sessions SET last_seen_at = ? WHERE token = ?", (now_iso, token))
            conn.commit()

    def delete_session(self, token):
        with self._conn() as conn:
            conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
            conn.commit()
