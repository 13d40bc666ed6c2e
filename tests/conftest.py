import pytest
import streamlit as st

import auth
from infrastructure.identity.local_identity import LocalIdentityClient
from infrastructure.repositories.sqlite_audit_repository import SQLiteAuditRepository
from infrastructure.repositories.sqlite_content_repository import SQLiteContentRepository
from services.profile_service import ProfileService


class FakeSessionState(dict):
    """Dict with attribute access, standing in for st.session_state outside `streamlit run`."""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError:
            raise AttributeError(key) from None

    def __setattr__(self, key, value):
        self[key] = value

    def __delattr__(self, key):
        del self[key]


@pytest.fixture
def session_state(monkeypatch):
    state = FakeSessionState()
    monkeypatch.setattr(st, "session_state", state)
    return state


@pytest.fixture(autouse=True)
def audit_repo(tmp_path, monkeypatch):
    repo = SQLiteAuditRepository(str(tmp_path / "audit.db"))
    repo.init_db()
    monkeypatch.setattr(auth, "get_audit_repo", lambda: repo)
    return repo


@pytest.fixture
def content_repo(tmp_path):
    repo = SQLiteContentRepository(str(tmp_path / "content.db"))
    repo.init_db()
    return repo


@pytest.fixture
def identity(tmp_path):
    client = LocalIdentityClient(str(tmp_path / "auth.db"))
    client.init_db()
    return client


@pytest.fixture
def profiles(content_repo):
    return ProfileService(content_repo)


class Clock:
    """Deterministic, strictly increasing ISO timestamps."""

    def __init__(self):
        self.tick = 0

    def __call__(self):
        self.tick += 1
        return f"2024-01-01T00:00:{self.tick:02d}+00:00"


@pytest.fixture
def clock():
    return Clock()
