"""
Fathom API Client

Thin synchronous wrapper around the Fathom external REST API. Each method
performs exactly one GET request and returns the decoded JSON body exactly as
Fathom sent it, or raises FathomApiError when Fathom answers with a non-2xx
status.

Transport failures (DNS, connection refused, timeouts) and non-JSON success
bodies are not translated; they propagate as whatever requests raised.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

import requests

from ..config import DEFAULT_FATHOM_API_BASE, Settings, get_settings
from .models import MeetingPage, Summary, TeamMemberPage, TeamPage, TranscriptEntry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = DEFAULT_FATHOM_API_BASE
API_KEY_HEADER = "X-Api-Key"


class FathomApiError(Exception):
    """Fathom answered with a non-success HTTP status."""

    def __init__(self, message: str, status: int, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __repr__(self) -> str:
        return f"FathomApiError(status={self.status}, code={self.code}, message={self.message!r})"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(params: Mapping[str, Any]) -> str:
    """
    Serialize options into a query string.

    None values are dropped, lists become repeated ``key[]=value`` pairs in
    element order, everything else becomes ``key=value``. Keys keep the order
    of the mapping.

    Returns:
        "" when no parameter survives, otherwise the query prefixed with "?"
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                pairs.append((f"{key}[]", _format_value(item)))
        else:
            pairs.append((key, _format_value(value)))

    query = urlencode(pairs)
    return f"?{query}" if query else ""


class FathomClient:
    """Client for the Fathom external API, bound to one API key."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: Optional[float] = None):
        """
        Args:
            api_key: Fathom API key sent as X-Api-Key
            base_url: API root, without a trailing slash
            timeout: Seconds before a hung request is abandoned (None waits forever)
        """
        if not api_key:
            raise ValueError("Fathom API key is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(self, endpoint: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        headers = {
            API_KEY_HEADER: self.api_key,
            "Content-Type": "application/json",
        }

        logger.debug(f"GET {url}")
        response = requests.get(url, headers=headers, timeout=self.timeout)

        if not 200 <= response.status_code < 300:
            raise self._error_from_response(response)

        return response.json()

    @staticmethod
    def _error_from_response(response: requests.Response) -> FathomApiError:
        message = f"HTTP {response.status_code}"
        code: Optional[int] = None

        try:
            data = response.json()
        except ValueError:
            # Not JSON: fall back to the reason phrase
            message = response.reason or message
        else:
            error = data.get("error") if isinstance(data, dict) else None
            if isinstance(error, dict):
                message = error.get("message") or message
                code = error.get("code")

        return FathomApiError(message, response.status_code, code)

    def list_meetings(self, params: Optional[Dict[str, Any]] = None) -> MeetingPage:
        """
        List meetings with optional filters.

        Args:
            params: Fathom list options (calendar_invitees, created_after,
                include_summary, limit, cursor, meeting_type, ...). Array
                options are sent as ``key[]``.
        """
        query = build_query_string(params or {})
        return self._request(f"/meetings{query}")

    def get_summary(self, recording_id: int) -> Summary:
        """Get the meeting summary for a recording."""
        return self._request(f"/recordings/{recording_id}/summary")

    def get_transcript(self, recording_id: int) -> List[TranscriptEntry]:
        """Get the transcript for a recording, in the order Fathom returns it."""
        return self._request(f"/recordings/{recording_id}/transcript")

    def list_teams(self, cursor: Optional[str] = None) -> TeamPage:
        query = build_query_string({"cursor": cursor} if cursor else {})
        return self._request(f"/teams{query}")

    def list_team_members(self, team_id: str, cursor: Optional[str] = None) -> TeamMemberPage:
        query = build_query_string({"cursor": cursor} if cursor else {})
        return self._request(f"/teams/{quote(team_id, safe='')}/members{query}")


def create_fathom_client(settings: Optional[Settings] = None) -> FathomClient:
    """
    Create a client from configuration (FATHOM_API_KEY / FATHOM_API_BASE).

    Raises:
        ValueError: If FATHOM_API_KEY is not configured
    """
    settings = settings or get_settings()

    if not settings.fathom_api_key:
        raise ValueError("FATHOM_API_KEY environment variable is required")
    return FathomClient(
        settings.fathom_api_key,
        base_url=settings.fathom_api_base,
        timeout=settings.max_duration,
    )
