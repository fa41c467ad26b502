"""
Tests for the Fathom API client

Tests cover:
- Query string building
- Request URLs and headers
- Error mapping for non-2xx responses
- Passthrough of success bodies exactly as received
- Request timeouts
- Propagation of transport and parsing failures
"""

from unittest.mock import patch
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from src.config import Settings
from src.fathom.client import (
    FathomApiError,
    FathomClient,
    build_query_string,
    create_fathom_client,
)

BASE_URL = "https://api.fathom.ai/external/v1"


def _query_pairs(url):
    return parse_qsl(urlsplit(url).query)


# ============================================================================
# Query String Tests
# ============================================================================

def test_build_query_string_empty():
    assert build_query_string({}) == ""
    assert build_query_string({"cursor": None, "limit": None}) == ""


def test_build_query_string_omits_none_and_keeps_order():
    query = build_query_string({"limit": 5, "cursor": None, "include_summary": False})
    assert query == "?limit=5&include_summary=false"


def test_build_query_string_repeats_array_keys_in_order():
    query = build_query_string({
        "calendar_invitees": ["b@acme.com", "a@acme.com"],
        "teams": ["Sales"],
    })
    assert parse_qsl(query[1:]) == [
        ("calendar_invitees[]", "b@acme.com"),
        ("calendar_invitees[]", "a@acme.com"),
        ("teams[]", "Sales"),
    ]


def test_build_query_string_renders_booleans_lowercase():
    query = build_query_string({"include_transcript": True, "include_crm_matches": False})
    assert query == "?include_transcript=true&include_crm_matches=false"


# ============================================================================
# Client Tests
# ============================================================================

def test_client_requires_api_key():
    with pytest.raises(ValueError):
        FathomClient("")


@patch("src.fathom.client.requests.get")
def test_list_meetings_request(mock_get, make_response):
    body = {
        "limit": 5,
        "next_cursor": None,
        "items": [{"title": "Weekly sync", "recording_id": 42, "share_url": "https://fathom.video/share/x"}],
    }
    mock_get.return_value = make_response(200, body)

    client = FathomClient("Tkey-0123456789")
    result = client.list_meetings({"limit": 5, "include_summary": False})

    mock_get.assert_called_once()
    url = mock_get.call_args.args[0]
    headers = mock_get.call_args.kwargs["headers"]
    assert url == f"{BASE_URL}/meetings?limit=5&include_summary=false"
    assert headers["X-Api-Key"] == "Tkey-0123456789"
    assert headers["Content-Type"] == "application/json"

    assert mock_get.call_args.kwargs["timeout"] is None
    assert result == body


@patch("src.fathom.client.requests.get")
def test_list_meetings_without_params(mock_get, make_response):
    mock_get.return_value = make_response(200, {"limit": None, "next_cursor": None, "items": []})

    FathomClient("Tkey-0123456789").list_meetings()

    assert mock_get.call_args.args[0] == f"{BASE_URL}/meetings"


@patch("src.fathom.client.requests.get")
def test_list_meetings_keeps_unknown_fields(mock_get, make_response):
    body = {"items": [{"title": "Demo", "new_upstream_field": {"nested": 1}}], "next_cursor": "abc"}
    mock_get.return_value = make_response(200, body)

    result = FathomClient("Tkey-0123456789").list_meetings()

    assert result == body


@patch("src.fathom.client.requests.get")
def test_get_summary(mock_get, make_response):
    mock_get.return_value = make_response(200, {"template_name": "General", "markdown_formatted": "## Notes"})

    result = FathomClient("Tkey-0123456789").get_summary(123)

    assert mock_get.call_args.args[0] == f"{BASE_URL}/recordings/123/summary"
    assert result["markdown_formatted"] == "## Notes"


@patch("src.fathom.client.requests.get")
def test_get_transcript_preserves_order(mock_get, make_response):
    entries = [
        {"speaker": {"display_name": "Ana"}, "text": "Hello", "timestamp": "00:00:01"},
        {"speaker": {"display_name": "Ben", "matched_calendar_invitee_email": "ben@acme.com"},
         "text": "Hi", "timestamp": "00:00:03"},
        {"speaker": {"display_name": "Ana"}, "text": "Let's start", "timestamp": "00:00:02"},
    ]
    mock_get.return_value = make_response(200, entries)

    result = FathomClient("Tkey-0123456789").get_transcript(7)

    assert mock_get.call_args.args[0] == f"{BASE_URL}/recordings/7/transcript"
    assert [entry["text"] for entry in result] == ["Hello", "Hi", "Let's start"]
    assert result == entries


@patch("src.fathom.client.requests.get")
def test_list_teams_forwards_cursor_verbatim(mock_get, make_response):
    cursor = "eyJwYWdlIjoyfQ==/+x"
    mock_get.return_value = make_response(200, {
        "limit": 10,
        "next_cursor": "opaque-next-cursor==",
        "items": [{"id": "team_1", "name": "Sales"}],
    })

    result = FathomClient("Tkey-0123456789").list_teams(cursor)

    url = mock_get.call_args.args[0]
    assert urlsplit(url).path.endswith("/teams")
    assert _query_pairs(url) == [("cursor", cursor)]
    assert result["next_cursor"] == "opaque-next-cursor=="
    assert result["items"] == [{"id": "team_1", "name": "Sales"}]


@patch("src.fathom.client.requests.get")
def test_list_teams_without_cursor(mock_get, make_response):
    mock_get.return_value = make_response(200, {"limit": 10, "next_cursor": None, "items": []})

    FathomClient("Tkey-0123456789").list_teams()

    assert mock_get.call_args.args[0] == f"{BASE_URL}/teams"


@patch("src.fathom.client.requests.get")
def test_list_team_members(mock_get, make_response):
    mock_get.return_value = make_response(200, {
        "limit": 10,
        "next_cursor": None,
        "items": [{"id": "m1", "name": "Ana", "email": "ana@acme.com", "team_id": "team_1"}],
    })

    result = FathomClient("Tkey-0123456789").list_team_members("team_1", cursor="c2")

    assert mock_get.call_args.args[0] == f"{BASE_URL}/teams/team_1/members?cursor=c2"
    assert result["items"][0]["email"] == "ana@acme.com"


def test_custom_base_url():
    client = FathomClient("Tkey-0123456789", base_url="http://localhost:9000/v1/")
    assert client.base_url == "http://localhost:9000/v1"


PASSTHROUGH_MEETING = {
    "title": "Renewal call",
    "recording_id": "123",
    "calendar_invitees": None,
    "action_items": [
        {
            "description": "Send the quote",
            "completed": False,
            "assignee": {"name": "Ana", "email": "ana@acme.com", "team": None},
            "recording_timestamp": "00:12:04",
        }
    ],
    "crm_matches": {
        "contacts": None,
        "companies": None,
        "deals": [{"name": "Acme renewal", "amount": 5000, "record_url": "https://crm.test/d/1"}],
        "error": None,
    },
}


@patch("src.fathom.client.requests.get")
def test_list_meetings_returns_body_as_received(mock_get, make_response):
    body = {"limit": None, "next_cursor": None, "items": [PASSTHROUGH_MEETING]}
    mock_get.return_value = make_response(200, body)

    result = FathomClient("Tkey-0123456789").list_meetings({"include_crm_matches": True})

    assert result == body
    meeting = result["items"][0]
    assert meeting["recording_id"] == "123"
    assert meeting["calendar_invitees"] is None
    assert meeting["crm_matches"]["deals"][0]["amount"] == 5000
    assert isinstance(meeting["crm_matches"]["deals"][0]["amount"], int)


@patch("src.fathom.client.requests.get")
def test_null_items_page_is_returned_unchanged(mock_get, make_response):
    mock_get.return_value = make_response(200, {"limit": 10, "next_cursor": None, "items": None})

    result = FathomClient("Tkey-0123456789").list_teams()

    assert result == {"limit": 10, "next_cursor": None, "items": None}


@patch("src.fathom.client.requests.get")
def test_request_timeout_is_passed_to_requests(mock_get, make_response):
    mock_get.return_value = make_response(200, {"template_name": "General"})

    FathomClient("Tkey-0123456789", timeout=12.5).get_summary(1)

    assert mock_get.call_args.kwargs["timeout"] == 12.5


# ============================================================================
# Error Mapping Tests
# ============================================================================

@patch("src.fathom.client.requests.get")
def test_json_error_body_maps_to_fathom_api_error(mock_get, make_response):
    mock_get.return_value = make_response(
        404, {"error": {"code": 1002, "message": "Not found"}}, reason="Not Found"
    )

    with pytest.raises(FathomApiError) as exc_info:
        FathomClient("Tkey-0123456789").get_summary(999)

    assert exc_info.value.status == 404
    assert exc_info.value.code == 1002
    assert exc_info.value.message == "Not found"


@patch("src.fathom.client.requests.get")
def test_non_json_error_uses_status_text(mock_get, make_response):
    mock_get.return_value = make_response(500, text="<html>oops</html>", reason="Internal Server Error")

    with pytest.raises(FathomApiError) as exc_info:
        FathomClient("Tkey-0123456789").list_teams()

    assert exc_info.value.status == 500
    assert exc_info.value.message == "Internal Server Error"
    assert exc_info.value.code is None


@patch("src.fathom.client.requests.get")
def test_json_error_without_message_falls_back_to_status(mock_get, make_response):
    mock_get.return_value = make_response(401, {"detail": "nope"}, reason="Unauthorized")

    with pytest.raises(FathomApiError) as exc_info:
        FathomClient("Tkey-0123456789").list_teams()

    assert exc_info.value.message == "HTTP 401"
    assert exc_info.value.code is None


@patch("src.fathom.client.requests.get")
def test_connection_error_propagates(mock_get):
    mock_get.side_effect = requests.ConnectionError("Name or service not known")

    with pytest.raises(requests.ConnectionError):
        FathomClient("Tkey-0123456789").list_teams()


@patch("src.fathom.client.requests.get")
def test_malformed_success_body_is_not_an_api_error(mock_get, make_response):
    mock_get.return_value = make_response(200, text="not json")

    with pytest.raises(ValueError) as exc_info:
        FathomClient("Tkey-0123456789").list_teams()

    assert not isinstance(exc_info.value, FathomApiError)


@patch("src.fathom.client.requests.get")
def test_timeout_error_propagates(mock_get):
    mock_get.side_effect = requests.Timeout("read timed out")

    with pytest.raises(requests.Timeout):
        FathomClient("Tkey-0123456789", timeout=2.0).list_teams()


# ============================================================================
# Configuration Tests
# ============================================================================

def test_create_fathom_client_requires_configured_key():
    with pytest.raises(ValueError):
        create_fathom_client(Settings(fathom_api_key=None))


def test_create_fathom_client_from_environment(monkeypatch):
    monkeypatch.setenv("FATHOM_API_KEY", "Tenv-key-0123456")
    monkeypatch.setenv("FATHOM_API_BASE", "http://fathom.test/v1")

    client = create_fathom_client()

    assert client.api_key == "Tenv-key-0123456"
    assert client.base_url == "http://fathom.test/v1"
    assert client.timeout == 60.0
