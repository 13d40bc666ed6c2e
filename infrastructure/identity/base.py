"""Identity client contract and the session-change notifier shared by implementations."""

import logging
import threading
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol

from use_cases.domain_models import Account, AuthSession, SignUpResult

log = logging.getLogger(__name__)

SessionEvent = Literal["SIGNED_IN", "SIGNED_OUT", "TOKEN_REFRESHED"]
SessionListener = Callable[[SessionEvent, Optional[AuthSession]], None]


class IdentityClient(Protocol):
    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> SignUpResult: ...

    def sign_in(self, email: str, password: str) -> AuthSession: ...

    def sign_out(self) -> None: ...

    def get_session(self) -> Optional[AuthSession]: ...

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]: ...

    def resend_verification(self, email: str) -> None: ...

    def access_token(self) -> Optional[str]: ...


class SessionNotifier:
    """Holds the client-side current session and fans out change events."""

    def __init__(self):
        self._session: Optional[AuthSession] = None
        self._listeners: List[SessionListener] = []
        self._lock = threading.Lock()

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def access_token(self) -> Optional[str]:
        session = self._session
        return session.access_token if session else None

    def _set_session(self, event: SessionEvent, session: Optional[AuthSession]) -> None:
        self._session = session
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception as e:
                # One broken subscriber must not block the others from seeing the change.
                log.error(f"Session listener failed on {event}: {e}", exc_info=True)
