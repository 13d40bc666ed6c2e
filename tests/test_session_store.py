import threading
from unittest.mock import MagicMock

import pytest

from errors import AuthenticationError, DataServiceError, ValidationError
from infrastructure.identity.base import SessionNotifier
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.domain_models import Account, AuthSession, Profile
from use_cases.session_store import SessionState, SessionStore

PASSWORD = "Valid1Password"


def _session(token, account_id="acc-1", email="jane@example.com"):
    return AuthSession(access_token=token, account=Account(id=account_id, email=email))


def _profile(account_id="acc-1", is_admin=False):
    return Profile(id=account_id, email="jane@example.com", full_name="Jane", is_admin=is_admin, created_at="")


class FakeIdentity(SessionNotifier):
    def __init__(self, session=None):
        super().__init__()
        self._session = session
        self.sign_out_error = None

    def get_session(self):
        return self._session

    def emit(self, event, session):
        self._set_session(event, session)

    def sign_out(self):
        try:
            if self.sign_out_error:
                raise self.sign_out_error
        finally:
            self._set_session("SIGNED_OUT", None)


def test_initial_state_is_loading():
    store = SessionStore(FakeIdentity(), MagicMock())
    assert store.state == SessionState()
    assert store.state.loading is True
    assert store.state.account is None


def test_start_without_session_resolves_signed_out():
    store = SessionStore(FakeIdentity(), MagicMock())
    state = store.start()
    assert state.loading is False
    assert state.account is None and state.profile is None and state.is_admin is False


def test_start_with_session_derives_role_from_profile():
    profiles = MagicMock()
    profiles.ensure_profile.return_value = _profile(is_admin=True)
    store = SessionStore(FakeIdentity(_session("t1")), profiles)

    state = store.start()

    assert state.account.id == "acc-1"
    assert state.is_admin is True
    assert state.display_name == "Jane"


def test_profile_failure_fails_closed():
    profiles = MagicMock()
    profiles.ensure_profile.side_effect = DataServiceError("boom")
    store = SessionStore(FakeIdentity(_session("t1")), profiles)

    state = store.start()

    assert state.account is not None
    assert state.profile is None
    assert state.is_admin is False
    assert state.loading is False


def test_identity_events_update_state_and_notify_listeners():
    identity = FakeIdentity()
    profiles = MagicMock()
    profiles.ensure_profile.return_value = _profile()
    store = SessionStore(identity, profiles)
    store.start()
    seen = []
    store.subscribe(seen.append)

    identity.emit("SIGNED_IN", _session("t1"))
    assert store.state.account.id == "acc-1"

    identity.emit("SIGNED_OUT", None)
    assert store.state.account is None
    assert [s.account is not None for s in seen] == [True, False]


def test_same_token_is_not_resolved_twice():
    identity = FakeIdentity(_session("t1"))
    profiles = MagicMock()
    profiles.ensure_profile.return_value = _profile()
    store = SessionStore(identity, profiles)
    store.start()

    identity.emit("SIGNED_IN", _session("t1"))
    store.refresh()
    assert profiles.ensure_profile.call_count == 1

    store.refresh(force=True)
    assert profiles.ensure_profile.call_count == 2


def test_forced_refresh_picks_up_promotion():
    profiles = MagicMock()
    profiles.ensure_profile.return_value = _profile(is_admin=False)
    store = SessionStore(FakeIdentity(_session("t1")), profiles)
    assert store.start().is_admin is False

    profiles.ensure_profile.return_value = _profile(is_admin=True)
    assert store.refresh().is_admin is False
    assert store.refresh(force=True).is_admin is True


def test_last_resolved_session_wins_over_slow_earlier_resolution():
    identity = FakeIdentity()
    release_first = threading.Event()
    first_started = threading.Event()

    def ensure_profile(account):
        if account.id == "old":
            first_started.set()
            release_first.wait(timeout=5)
        return _profile(account_id=account.id, is_admin=account.id == "old")

    profiles = MagicMock()
    profiles.ensure_profile.side_effect = ensure_profile
    store = SessionStore(identity, profiles)
    store.start()

    worker = threading.Thread(target=identity.emit, args=("SIGNED_IN", _session("t-old", account_id="old")))
    worker.start()
    assert first_started.wait(timeout=5)

    identity.emit("SIGNED_IN", _session("t-new", account_id="new"))
    release_first.set()
    worker.join(timeout=5)

    assert store.state.account.id == "new"
    assert store.state.is_admin is False


def test_stop_unsubscribes_from_identity():
    identity = FakeIdentity()
    store = SessionStore(identity, MagicMock())
    store.start()
    store.stop()

    identity.emit("SIGNED_IN", _session("t1"))
    assert store.state.account is None


def test_listener_errors_do_not_block_other_listeners():
    identity = FakeIdentity()
    store = SessionStore(identity, MagicMock())
    seen = []
    store.subscribe(MagicMock(side_effect=RuntimeError("listener down")))
    store.subscribe(seen.append)

    store.start()
    assert len(seen) == 1


def test_sign_out_clears_state_even_when_revoke_fails(audit_repo):
    identity = FakeIdentity(_session("t1"))
    identity.sign_out_error = AuthenticationError("network down")
    profiles = MagicMock()
    profiles.ensure_profile.return_value = _profile()
    store = SessionStore(identity, profiles)
    store.start()

    with pytest.raises(AuthenticationError):
        store.sign_out()

    assert store.state.account is None
    assert store.state.loading is False
    entry = audit_repo.get_logs(limit=1)[0]
    assert entry[3] == AuditAction.SIGN_OUT.value
    assert entry[7] == "error"


def test_sign_out_clears_state_when_identity_stays_silent():
    identity = MagicMock()
    identity.get_session.return_value = _session("t1")
    identity.sign_out.side_effect = AuthenticationError("revoke failed")
    profiles = MagicMock()
    profiles.ensure_profile.return_value = _profile()
    store = SessionStore(identity, profiles)
    store.start()

    with pytest.raises(AuthenticationError):
        store.sign_out()
    assert store.state.account is None


# --- against the local identity backend ---

def test_sign_up_then_sign_in_creates_profile_once(identity, profiles, audit_repo):
    store = SessionStore(identity, profiles)
    store.start()

    result = store.sign_up("new@example.com", PASSWORD, "New Member", PASSWORD)

    assert result.pending_verification is False
    assert store.state.account.email == "new@example.com"
    assert store.state.profile.full_name == "New Member"
    assert store.state.is_admin is False

    store.sign_out()
    assert store.state.account is None

    state = store.sign_in("new@example.com", PASSWORD)
    assert state.profile.id == result.account.id
    actions = [row[3] for row in audit_repo.get_logs()]
    assert AuditAction.SIGN_UP.value in actions
    assert AuditAction.SIGN_IN_SUCCESS.value in actions


def test_sign_up_pending_verification_creates_no_profile(tmp_path, profiles):
    from infrastructure.identity.local_identity import LocalIdentityClient

    identity = LocalIdentityClient(str(tmp_path / "verify.db"), require_verification=True)
    identity.init_db()
    store = SessionStore(identity, profiles)
    store.start()

    result = store.sign_up("pending@example.com", PASSWORD, "Pending Person")

    assert result.pending_verification is True
    assert store.state.account is None
    assert profiles.get_profile(result.account.id) is None


def test_sign_up_validation_happens_before_identity_call():
    identity = MagicMock()
    store = SessionStore(identity, MagicMock())

    with pytest.raises(ValidationError):
        store.sign_up("bad", "abc", "")
    identity.sign_up.assert_not_called()


def test_sign_in_wrong_password_is_audited(identity, profiles, audit_repo):
    store = SessionStore(identity, profiles)
    store.start()
    store.sign_up("jane@example.com", PASSWORD, "Jane Doe")
    store.sign_out()

    with pytest.raises(AuthenticationError):
        store.sign_in("jane@example.com", "Wrong1Password")

    assert store.state.account is None
    latest = audit_repo.get_logs(limit=1)[0]
    assert latest[3] == AuditAction.SIGN_IN_FAIL.value
    assert latest[7] == "fail"


def test_resend_verification_validates_email():
    identity = MagicMock()
    store = SessionStore(identity, MagicMock())

    with pytest.raises(ValidationError):
        store.resend_verification("not-an-email")
    store.resend_verification(" jane@example.com ")
    identity.resend_verification.assert_called_once_with("jane@example.com")
