import logging
import time
from typing import Any, Dict, Optional

import requests

from errors import AuthenticationError
from infrastructure.identity.base import SessionNotifier
from use_cases.domain_models import Account, AuthSession, SignUpResult

log = logging.getLogger(__name__)


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"HTTP {resp.status_code}"
    )


class SupabaseIdentityClient(SessionNotifier):
    """GoTrue REST client keeping the signed-in session in memory."""

    def __init__(self, url: str, anon_key: str, timeout: float = 10):
        super().__init__()
        self.base_url = url.rstrip("/") + "/auth/v1"
        self.anon_key = anon_key
        self.timeout = timeout

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.anon_key, "Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _post(self, path: str, payload: Dict[str, Any], token: Optional[str] = None, params=None):
        try:
            return requests.post(
                f"{self.base_url}{path}",
                headers=self._headers(token),
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"❌ Network error calling identity service {path}: {e}")
            raise AuthenticationError(f"Identity service unavailable: {e}") from e

    def _session_from_payload(self, body: Dict[str, Any]) -> AuthSession:
        expires_at = body.get("expires_at")
        if expires_at is None and body.get("expires_in"):
            expires_at = int(time.time()) + int(body["expires_in"])
        return AuthSession(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
            expires_at=expires_at,
            account=Account.from_payload(body["user"]),
        )

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> SignUpResult:
        resp = self._post("/signup", {"email": email.strip(), "password": password, "data": metadata or {}})
        if resp.status_code not in (200, 201):
            raise AuthenticationError(_error_message(resp))

        body = resp.json()
        if body.get("access_token"):
            session = self._session_from_payload(body)
            self._set_session("SIGNED_IN", session)
            return SignUpResult(account=session.account, session=session)

        # Email confirmation enabled: GoTrue returns the bare user object.
        user = body.get("user") or body
        log.info(f"Sign-up for {email} awaiting email verification")
        return SignUpResult(account=Account.from_payload(user))

    def sign_in(self, email: str, password: str) -> AuthSession:
        resp = self._post("/token", {"email": email.strip(), "password": password}, params={"grant_type": "password"})
        if resp.status_code != 200:
            raise AuthenticationError(_error_message(resp))
        session = self._session_from_payload(resp.json())
        self._set_session("SIGNED_IN", session)
        return session

    def sign_out(self) -> None:
        session = self._session
        if session is None:
            return
        try:
            resp = self._post("/logout", {}, token=session.access_token)
            if resp.status_code not in (200, 204):
                raise AuthenticationError(_error_message(resp))
        finally:
            self._set_session("SIGNED_OUT", None)

    def _refresh(self, session: AuthSession) -> Optional[AuthSession]:
        if not session.refresh_token:
            return None
        try:
            resp = self._post("/token", {"refresh_token": session.refresh_token}, params={"grant_type": "refresh_token"})
        except AuthenticationError:
            return None
        if resp.status_code != 200:
            log.info(f"Session refresh rejected: {_error_message(resp)}")
            return None
        return self._session_from_payload(resp.json())

    def get_session(self) -> Optional[AuthSession]:
        session = self._session
        if session is None or not session.is_expired():
            return session

        refreshed = self._refresh(session)
        if refreshed is None:
            self._set_session("SIGNED_OUT", None)
            return None
        self._set_session("TOKEN_REFRESHED", refreshed)
        return refreshed

    def resend_verification(self, email: str) -> None:
        resp = self._post("/resend", {"type": "signup", "email": email.strip()})
        if resp.status_code not in (200, 204):
            raise AuthenticationError(_error_message(resp))
