from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from use_cases import route_guard
from use_cases.domain_models import Account
from use_cases.moderation import TESTIMONIES, ModerationWorkflow
from use_cases.navigation import Page, Route
from use_cases.session_store import SessionState
from views import testimonies_view


@pytest.fixture
def services(content_repo, clock):
    return SimpleNamespace(
        testimonies=ModerationWorkflow(content_repo, TESTIMONIES, clock=clock),
        session=SimpleNamespace(state=SessionState(loading=False)),
    )


def _fake_streamlit(name, email, title, content, submitted=True):
    st = MagicMock()
    name_col, email_col = MagicMock(), MagicMock()
    name_col.text_input.return_value = name
    email_col.text_input.return_value = email
    st.columns.return_value = (name_col, email_col)
    st.text_input.return_value = title
    st.text_area.return_value = content
    st.form_submit_button.return_value = submitted
    return st


def test_submission_defaults():
    assert testimonies_view.submission_defaults(SessionState(loading=False)) == ("", "")

    member = Account(id="acc-1", email="member@example.com", user_metadata={"full_name": "Grace"})
    assert testimonies_view.submission_defaults(SessionState(account=member, loading=False)) == \
        ("Grace", "member@example.com")


def test_public_testimonies_page_needs_no_sign_in():
    assert Route(Page.TESTIMONIES).access == "public"
    assert route_guard.evaluate(False, SessionState(loading=False)).status == "PERMIT"


def test_signed_out_visitor_submits_from_public_page(services, content_repo):
    st = _fake_streamlit("Visitor", "visitor@example.com", "Found Hope", "A story of hope.")

    with patch("views.testimonies_view.st", st), \
            patch("views.testimonies_view.session_manager.get_services", return_value=services):
        testimonies_view.render_testimonies()

    st.success.assert_called_once()
    st.error.assert_not_called()
    name_col, _ = st.columns.return_value
    assert name_col.text_input.call_args.kwargs["value"] == ""

    rows = content_repo.select("testimonies")
    assert [(r["author_name"], r["title"], bool(r["approved"])) for r in rows] == [("Visitor", "Found Hope", False)]
    assert services.testimonies.list_public() == []


def test_invalid_public_submission_shows_field_errors(services, content_repo):
    st = _fake_streamlit("Visitor", "not-an-email", "Found Hope", "")

    with patch("views.testimonies_view.st", st), \
            patch("views.testimonies_view.session_manager.get_services", return_value=services):
        testimonies_view.render_testimonies()

    assert st.error.call_count == 2
    st.success.assert_not_called()
    assert content_repo.select("testimonies") == []
