"""
Fathom API

Client and response shapes for the Fathom external REST API:
- client: FathomClient, FathomApiError, build_query_string
- models: typed shapes of Meeting, Summary, TranscriptEntry, Team, TeamMember and page responses
"""

from .client import FathomApiError, FathomClient, build_query_string, create_fathom_client

__all__ = [
    "FathomApiError",
    "FathomClient",
    "build_query_string",
    "create_fathom_client",
]
