import sqlite3
import json
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime, timezone
import logging
from enum import Enum

log = logging.getLogger(__name__)

class AuditAction(str, Enum):
    SIGN_IN_SUCCESS = "SIGN_IN_SUCCESS"
    SIGN_IN_FAIL = "SIGN_IN_FAIL"
    SIGN_UP = "SIGN_UP"
    SIGN_OUT = "SIGN_OUT"
    ADMIN_DENIED = "ADMIN_DENIED"
    ITEM_APPROVED = "ITEM_APPROVED"
    ITEM_UNAPPROVED = "ITEM_UNAPPROVED"
    ITEM_DELETED = "ITEM_DELETED"
    POST_SAVED = "POST_SAVED"
    POST_DELETED = "POST_DELETED"
    DEMO_ADMIN_LOGIN = "DEMO_ADMIN_LOGIN"
    SYSTEM_ERROR = "SYSTEM_ERROR"

ALLOWED_METADATA_KEYS = {
    "reason", "target_action", "published", "approved", "error_message", "pending_verification",
}

class SQLiteAuditRepository:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audit_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    ts TEXT NOT NULL,
                    actor_id TEXT,
                    actor_email TEXT,
                    action TEXT NOT NULL,
                    target_type TEXT NOT NULL,
                    target_id TEXT,
                    metadata_json TEXT,
                    result TEXT NOT NULL
                )
            """)
            conn.commit()

    def log_action(
        self,
        action: Any,
        target_type: str,
        actor_id: Optional[str] = None,
        actor_email: Optional[str] = None,
        target_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        result: str = "success"
    ):
        """Logs an action to the audit repository. Metadata is JSON serialized and constrained."""
        try:
            meta_str = None
            if metadata is not None:
                safe_meta = {}
                for k, v in metadata.items():
                    if k in ALLOWED_METADATA_KEYS and "password" not in str(v).lower() and "token" not in str(v).lower():
                        safe_meta[k] = v
                try:
                    meta_str = json.dumps(safe_meta)
                    if len(meta_str) > 2000:
                        safe_meta["truncated"] = True
                        meta_str = json.dumps(safe_meta)[:2000]
                except (TypeError, ValueError):
                    meta_str = "{\"error\": \"unserializable\"}"

            ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
            action_val = action.value if hasattr(action, "value") else str(action)[:50]
            if not action_val: action_val = "UNKNOWN"

            target_type = str(target_type)[:50] if target_type else "UNKNOWN"
            actor_id = str(actor_id)[:64] if actor_id is not None else None
            actor_email = str(actor_email)[:254] if actor_email is not None else None
            target_id = str(target_id)[:100] if target_id is not None else None
            result = str(result)[:20] if result else "unknown"

            with self._conn() as conn:
                conn.execute("""
                    INSERT INTO audit_log
                    (ts, actor_id, actor_email, action, target_type, target_id, metadata_json, result)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (ts, actor_id, actor_email, action_val, target_type, target_id, meta_str, result))
                conn.commit()
        except Exception as e:
            # Audit failures must not break the user action being audited
            log.error(f"Audit log failed for action {action}: {e}", exc_info=True)

    def get_logs(self, limit: int = 100, action_filter: Optional[str] = None) -> List[Tuple]:
        """Fetches the most recent audit entries for the admin view."""
        try:
            with self._conn() as conn:
                query = """
                    SELECT id, ts, COALESCE(actor_email, actor_id, 'SYSTEM'),
                           action, target_type, target_id, metadata_json, result
                    FROM audit_log
                    WHERE 1=1
                """
                params = []
                if action_filter and action_filter != "All":
                    query += " AND action = ?"
                    params.append(action_filter)

                query += " ORDER BY id DESC LIMIT ?"
                params.append(limit)

                return conn.execute(query, tuple(params)).fetchall()
        except Exception as e:
            log.error(f"Failed to fetch audit logs: {e}", exc_info=True)
            return []
