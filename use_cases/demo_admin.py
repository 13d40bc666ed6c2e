"""Read-only demo admin access, kept apart from the real session store.

A single static credential pair, configured through DEMO_ADMIN_EMAIL and
DEMO_ADMIN_PASSWORD, unlocks a per-session flag. The flag grants no data
privileges; the demo dashboard only reads public collections.
"""

import hmac
import logging
from typing import MutableMapping, Optional

import auth
from infrastructure.repositories.sqlite_audit_repository import AuditAction

log = logging.getLogger(__name__)

FLAG_KEY = "demo_admin_authenticated"


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class DemoAdminGate:
    def __init__(self, flag_store: MutableMapping, email: Optional[str], password: Optional[str]):
        self.flag_store = flag_store
        self.email = (email or "").strip().lower()
        self.password = password or ""

    @property
    def enabled(self) -> bool:
        return bool(self.email and self.password)

    def login(self, email: str, password: str) -> bool:
        if not self.enabled:
            log.warning("Demo admin login attempted but no demo credentials are configured")
            return False

        email_ok = _same((email or "").strip().lower(), self.email)
        password_ok = _same(password or "", self.password)
        ok = email_ok and password_ok

        auth.get_audit_repo().log_action(
            AuditAction.DEMO_ADMIN_LOGIN,
            target_type="demo_admin",
            actor_email=(email or "").strip() or None,
            result="success" if ok else "fail",
        )
        if ok:
            self.flag_store[FLAG_KEY] = True
        return ok

    def is_authenticated(self) -> bool:
        return self.enabled and bool(self.flag_store.get(FLAG_KEY))

    def logout(self) -> None:
        self.flag_store.pop(FLAG_KEY, None)
