"""Session and role state for one browser session (application layer).

The store mirrors the identity service: every session change is resolved into
an immutable SessionState (account, profile, is_admin, loading). Resolutions
are numbered; a resolution only commits if no newer one has started, so the
last session seen wins even when an older profile lookup finishes later.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

import auth
from errors import AuthenticationError, DataServiceError
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.domain_models import Account, AuthSession, Profile, SignUpResult

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    account: Optional[Account] = None
    profile: Optional[Profile] = None
    is_admin: bool = False
    loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None

    @property
    def display_name(self) -> str:
        if self.profile is not None and self.profile.full_name:
            return self.profile.full_name
        if self.account is not None:
            return self.account.full_name or self.account.email
        return ""


StateListener = Callable[[SessionState], None]


def _audit(action: AuditAction, account: Optional[Account], metadata=None, result: str = "success") -> None:
    auth.get_audit_repo().log_action(
        action,
        target_type="session",
        actor_id=account.id if account else None,
        actor_email=account.email if account else None,
        metadata=metadata,
        result=result,
    )


class SessionStore:
    def __init__(self, identity, profiles):
        self.identity = identity
        self.profiles = profiles
        self._state = SessionState()
        self._token: Optional[str] = None
        self._generation = 0
        self._lock = threading.Lock()
        self._listeners: List[StateListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    # --- lifecycle ---

    def start(self) -> SessionState:
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_session_change(self._on_session_change)
        return self._resolve(self.identity.get_session())

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        with self._lock:
            self._listeners.clear()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def refresh(self, force: bool = False) -> SessionState:
        """Re-read the identity session; force also re-reads the profile."""
        return self._resolve(self.identity.get_session(), force=force)

    # --- resolution ---

    def _on_session_change(self, event: str, session: Optional[AuthSession]) -> None:
        log.debug(f"Identity event {event}")
        self._resolve(session)

    def _resolve(self, session: Optional[AuthSession], force: bool = False) -> SessionState:
        token = session.access_token if session else None
        with self._lock:
            if not force and not self._state.loading and token == self._token:
                return self._state
            self._generation += 1
            generation = self._generation

        if session is None:
            new_state = SessionState(loading=False)
        else:
            profile = None
            try:
                profile = self.profiles.ensure_profile(session.account)
            except DataServiceError as e:
                log.error(f"Profile lookup failed for account {session.account.id}: {e}")
            new_state = SessionState(
                account=session.account,
                profile=profile,
                is_admin=bool(profile is not None and profile.is_admin),
                loading=False,
            )

        return self._commit(generation, token, new_state)

    def _commit(self, generation: int, token: Optional[str], new_state: SessionState) -> SessionState:
        with self._lock:
            if generation != self._generation:
                log.debug(f"Dropping stale session resolution {generation} (current {self._generation})")
                return self._state
            self._state = new_state
            self._token = token
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(new_state)
            except Exception as e:
                log.error(f"Session state listener failed: {e}", exc_info=True)
        return new_state

    # --- operations ---

    def sign_up(self, email: str, password: str, full_name: str, confirm_password: Optional[str] = None) -> SignUpResult:
        auth.validate_sign_up(email, password, full_name, confirm_password)

        result = self.identity.sign_up(email.strip(), password, {"full_name": full_name.strip()})
        _audit(AuditAction.SIGN_UP, result.account, metadata={"pending_verification": result.pending_verification})

        if result.session is not None:
            self._resolve(result.session)
        return result

    def sign_in(self, email: str, password: str) -> SessionState:
        auth.validate_sign_in(email, password)
        try:
            session = self.identity.sign_in(email.strip(), password)
        except AuthenticationError as e:
            auth.get_audit_repo().log_action(
                AuditAction.SIGN_IN_FAIL,
                target_type="session",
                actor_email=email.strip(),
                metadata={"reason": str(e)},
                result="fail",
            )
            raise

        _audit(AuditAction.SIGN_IN_SUCCESS, session.account)
        return self._resolve(session)

    def sign_out(self) -> None:
        """Revoke the session remotely; local state is cleared even when that fails."""
        account = self._state.account
        try:
            self.identity.sign_out()
        except AuthenticationError as e:
            _audit(AuditAction.SIGN_OUT, account, metadata={"error_message": str(e)}, result="error")
            raise
        else:
            _audit(AuditAction.SIGN_OUT, account)
        finally:
            self._resolve(None, force=True)

    def resend_verification(self, email: str) -> None:
        auth.validate_email_only(email)
        self.identity.resend_verification(email.strip())
