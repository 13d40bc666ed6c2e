import time
from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import AuthenticationError, DataServiceError
from infrastructure.identity.supabase_identity import SupabaseIdentityClient
from infrastructure.repositories.supabase_data_client import SupabaseDataClient

URL = "https://project.supabase.co"
ANON = "anon-key"
USER = {"id": "u1", "email": "jane@example.com", "user_metadata": {"full_name": "Jane"},
        "email_confirmed_at": "2024-01-01T00:00:00Z"}


def _response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body if body is not None else {}
    resp.text = ""
    return resp


def _token_body(access="tok-1", expires_in=3600):
    return {"access_token": access, "refresh_token": "ref-1", "expires_in": expires_in, "user": USER}


# --- PostgREST data client ---

@patch("infrastructure.repositories.supabase_data_client.requests.request")
def test_select_builds_postgrest_params(mock_request):
    mock_request.return_value = _response(body=[{"id": "t1"}])
    client = SupabaseDataClient(URL, ANON, token_provider=lambda: "user-token")

    rows = client.select("testimonies", filters={"approved": True, "approved_at": None, "id": "t1"},
                         order="approved_at", limit=6)

    assert rows == [{"id": "t1"}]
    args, kwargs = mock_request.call_args
    assert args == ("GET", f"{URL}/rest/v1/testimonies")
    assert kwargs["params"] == {
        "select": "*",
        "approved": "eq.true",
        "approved_at": "is.null",
        "id": "eq.t1",
        "order": "approved_at.desc",
        "limit": 6,
    }
    assert kwargs["headers"]["Authorization"] == "Bearer user-token"
    assert kwargs["headers"]["apikey"] == ANON


@patch("infrastructure.repositories.supabase_data_client.requests.request")
def test_anonymous_requests_use_anon_key(mock_request):
    mock_request.return_value = _response(body=[])
    SupabaseDataClient(URL, ANON, token_provider=lambda: None).select("blog_posts", order="created_at",
                                                                      descending=False)
    _, kwargs = mock_request.call_args
    assert kwargs["headers"]["Authorization"] == f"Bearer {ANON}"
    assert kwargs["params"]["order"] == "created_at.asc"


@patch("infrastructure.repositories.supabase_data_client.requests.request")
def test_writes_ask_for_representation(mock_request):
    mock_request.return_value = _response(status=201, body=[{"id": "c1", "approved": False}])
    client = SupabaseDataClient(URL, ANON)

    assert client.insert("comments", {"content": "Amen"}) == {"id": "c1", "approved": False}
    _, kwargs = mock_request.call_args
    assert kwargs["headers"]["Prefer"] == "return=representation"
    assert kwargs["json"] == {"content": "Amen"}

    mock_request.return_value = _response(body=[{"id": "c1", "approved": True}])
    assert client.update("comments", {"approved": True}, filters={"id": "c1"})[0]["approved"] is True
    args, kwargs = mock_request.call_args
    assert args[0] == "PATCH"
    assert kwargs["params"] == {"id": "eq.c1"}


@patch("infrastructure.repositories.supabase_data_client.requests.request")
def test_http_errors_raise_data_service_error(mock_request):
    mock_request.return_value = _response(status=401, body={"message": "JWT expired"})
    with pytest.raises(DataServiceError, match="JWT expired") as excinfo:
        SupabaseDataClient(URL, ANON).select("profiles")
    assert excinfo.value.status_code == 401


@patch("infrastructure.repositories.supabase_data_client.requests.request")
def test_network_errors_raise_data_service_error(mock_request):
    mock_request.side_effect = requests.ConnectionError("boom")
    with pytest.raises(DataServiceError, match="unavailable"):
        SupabaseDataClient(URL, ANON).delete("comments", filters={"id": "c1"})


def test_unfiltered_writes_never_reach_the_network():
    client = SupabaseDataClient(URL, ANON)
    with patch("infrastructure.repositories.supabase_data_client.requests.request") as mock_request:
        with pytest.raises(DataServiceError):
            client.update("comments", {"approved": True}, filters={})
        with pytest.raises(DataServiceError):
            client.delete("comments", filters={})
        mock_request.assert_not_called()


@patch("infrastructure.repositories.supabase_data_client.requests.request")
def test_insert_without_returned_row_is_an_error(mock_request):
    mock_request.return_value = _response(status=201, body=[])
    with pytest.raises(DataServiceError):
        SupabaseDataClient(URL, ANON).insert("testimonies", {"title": "x"})


# --- GoTrue identity client ---

@patch("infrastructure.identity.supabase_identity.requests.post")
def test_sign_in_stores_session_and_notifies(mock_post):
    mock_post.return_value = _response(body=_token_body())
    client = SupabaseIdentityClient(URL, ANON)
    events = []
    client.on_session_change(lambda event, session: events.append(event))

    session = client.sign_in(" jane@example.com ", "Valid1Password")

    assert session.account.full_name == "Jane"
    assert client.access_token() == "tok-1"
    assert events == ["SIGNED_IN"]
    args, kwargs = mock_post.call_args
    assert args[0] == f"{URL}/auth/v1/token"
    assert kwargs["params"] == {"grant_type": "password"}
    assert kwargs["json"]["email"] == "jane@example.com"


@patch("infrastructure.identity.supabase_identity.requests.post")
def test_sign_in_error_message_is_surfaced(mock_post):
    mock_post.return_value = _response(status=400, body={"error_description": "Invalid login credentials"})
    with pytest.raises(AuthenticationError, match="Invalid login credentials"):
        SupabaseIdentityClient(URL, ANON).sign_in("jane@example.com", "nope")


@patch("infrastructure.identity.supabase_identity.requests.post")
def test_sign_up_pending_verification(mock_post):
    mock_post.return_value = _response(body=dict(USER, email_confirmed_at=None))
    client = SupabaseIdentityClient(URL, ANON)

    result = client.sign_up("jane@example.com", "Valid1Password", {"full_name": "Jane"})

    assert result.pending_verification is True
    assert result.account.id == "u1"
    assert client.access_token() is None
    assert mock_post.call_args[1]["json"]["data"] == {"full_name": "Jane"}


@patch("infrastructure.identity.supabase_identity.requests.post")
def test_expired_session_is_refreshed(mock_post):
    client = SupabaseIdentityClient(URL, ANON)
    mock_post.return_value = _response(body=dict(_token_body(), expires_in=None, expires_at=int(time.time()) - 5))
    client.sign_in("jane@example.com", "Valid1Password")

    events = []
    client.on_session_change(lambda event, session: events.append(event))
    mock_post.return_value = _response(body=_token_body(access="tok-2"))

    session = client.get_session()

    assert session.access_token == "tok-2"
    assert events == ["TOKEN_REFRESHED"]
    assert mock_post.call_args[1]["params"] == {"grant_type": "refresh_token"}


@patch("infrastructure.identity.supabase_identity.requests.post")
def test_rejected_refresh_signs_out(mock_post):
    client = SupabaseIdentityClient(URL, ANON)
    mock_post.return_value = _response(body=dict(_token_body(), expires_in=None, expires_at=int(time.time()) - 5))
    client.sign_in("jane@example.com", "Valid1Password")
    mock_post.return_value = _response(status=400, body={"error_description": "Invalid Refresh Token"})

    assert client.get_session() is None
    assert client.access_token() is None


@patch("infrastructure.identity.supabase_identity.requests.post")
def test_sign_out_clears_session_even_when_server_fails(mock_post):
    mock_post.return_value = _response(body=_token_body())
    client = SupabaseIdentityClient(URL, ANON)
    client.sign_in("jane@example.com", "Valid1Password")

    mock_post.side_effect = requests.Timeout("slow")
    with pytest.raises(AuthenticationError):
        client.sign_out()

    assert client.get_session() is None
