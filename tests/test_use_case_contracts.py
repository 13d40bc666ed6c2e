import use_cases
from use_cases import bootstrap
from use_cases.moderation import BLOG_POSTS, COMMENTS, TESTIMONIES
from use_cases.session_store import SessionState


def test_package_exports_resolve() -> None:
    for name in use_cases.__all__:
        assert hasattr(use_cases, name), name


def test_startup_result_contract() -> None:
    result = bootstrap.StartupResult(status="CONTINUE", planned_steps=("init_session_state",))
    assert result.status in {"CONTINUE", "STOP"}
    assert isinstance(result.planned_steps, tuple)
    assert result.error is None


def test_session_state_defaults_to_loading() -> None:
    state = SessionState()
    assert state.loading is True
    assert state.is_authenticated is False
    assert state.is_admin is False
    assert state.display_name == ""


def test_moderation_policies_contract() -> None:
    assert COMMENTS.table == "comments" and COMMENTS.flag_field == "approved"
    assert TESTIMONIES.table == "testimonies" and TESTIMONIES.timestamp_field == "approved_at"
    assert BLOG_POSTS.flag_field == "published" and BLOG_POSTS.timestamp_field == "published_at"
    assert TESTIMONIES.public_order == "approved_at"
    assert COMMENTS.public_order == "created_at"
    assert BLOG_POSTS.submit_fields == ()
