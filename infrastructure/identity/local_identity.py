"""SQLite-backed identity client for local development and tests."""

import hashlib
import hmac
import logging
import os
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from errors import AuthenticationError
from infrastructure.identity.base import SessionNotifier
from infrastructure.repositories.sqlite_account_repository import SQLiteAccountRepository
from use_cases.domain_models import Account, AuthSession, SignUpResult

log = logging.getLogger(__name__)

PASSWORD_ITERATIONS = 200_000
SESSION_TTL_DAYS = 30


def _hash_password(password, salt_hex):
    salt = bytes.fromhex(salt_hex)
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PASSWORD_ITERATIONS).hex()


def _make_password(password):
    salt_hex = os.urandom(16).hex()
    return salt_hex, _hash_password(password, salt_hex)


def _verify_password(password, salt_hex, expected_hash):
    candidate = _hash_password(password, salt_hex)
    return hmac.compare_digest(candidate, expected_hash)


class LocalIdentityClient(SessionNotifier):
    def __init__(self, db_path: str, require_verification: bool = False):
        super().__init__()
        self.repo = SQLiteAccountRepository(db_path)
        self.require_verification = require_verification

    def init_db(self):
        self.repo.init_db()

    def _to_account(self, row) -> Account:
        return Account(
            id=row["id"],
            email=row["email"],
            user_metadata=row["user_metadata"],
            email_confirmed=row["email_confirmed"],
        )

    def _open_session(self, account: Account) -> AuthSession:
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(days=SESSION_TTL_DAYS)
        token = secrets.token_urlsafe(32)
        self.repo.create_session(token, account.id, expires_at.isoformat(), now.isoformat())
        return AuthSession(access_token=token, account=account, expires_at=int(expires_at.timestamp()))

    def find_account(self, email: str) -> Optional[Account]:
        row = self.repo.get_account_by_email(email.strip().lower())
        return self._to_account(row) if row else None

    def create_account(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None,
                       confirmed: bool = False) -> Account:
        """Store a new account without signing it in."""
        email = email.strip().lower()
        salt_hex, pw_hash = _make_password(password)
        account_id = str(uuid.uuid4())
        success, err = self.repo.create_account(
            account_id, email, salt_hex, pw_hash, metadata or {}, confirmed,
            datetime.now(timezone.utc).isoformat(),
        )
        if not success:
            if err == "integrity_error":
                raise AuthenticationError("User already registered")
            raise AuthenticationError(f"Sign-up failed: {err}")
        return self._to_account(self.repo.get_account_by_id(account_id))

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> SignUpResult:
        account = self.create_account(email, password, metadata, confirmed=not self.require_verification)
        if not account.email_confirmed:
            log.info(f"Account {email} created, awaiting email verification")
            return SignUpResult(account=account)

        session = self._open_session(account)
        self._set_session("SIGNED_IN", session)
        return SignUpResult(account=account, session=session)

    def sign_in(self, email: str, password: str) -> AuthSession:
        row = self.repo.get_account_by_email(email.strip().lower())
        if not row or not _verify_password(password, row["password_salt"], row["password_hash"]):
            raise AuthenticationError("Invalid login credentials")
        if not row["email_confirmed"]:
            raise AuthenticationError("Email not confirmed")

        session = self._open_session(self._to_account(row))
        self._set_session("SIGNED_IN", session)
        return session

    def sign_out(self) -> None:
        session = self._session
        if session is None:
            return
        try:
            self.repo.delete_session(session.access_token)
        except Exception as e:
            raise AuthenticationError(f"Failed to revoke session: {e}") from e
        finally:
            self._set_session("SIGNED_OUT", None)

    def get_session(self) -> Optional[AuthSession]:
        session = self._session
        if session is None:
            return None

        row = self.repo.get_session(session.access_token)
        now = datetime.now(timezone.utc)
        if not row or datetime.fromisoformat(row[1]) <= now:
            self.repo.delete_session(session.access_token)
            self._set_session("SIGNED_OUT", None)
            return None

        self.repo.update_session_last_seen(session.access_token, now.isoformat())
        return session

    def resend_verification(self, email: str) -> None:
        row = self.repo.get_account_by_email(email.strip().lower())
        if row and not row["email_confirmed"]:
            # No mail transport locally; operators confirm with confirm_email().
            log.info(f"Verification requested for {row['email']}")

    def confirm_email(self, email: str) -> bool:
        row = self.repo.get_account_by_email(email.strip().lower())
        if not row:
            return False
        self.repo.confirm_email(row["id"])
        return True
