"""
Model Context Protocol (MCP) Server

This package implements an MCP server that exposes the Fathom API as tools:
- list_meetings, get_summary, get_transcript, list_teams, list_team_members

Callers authenticate with their Fathom API key as a bearer token; the server
forwards it to Fathom for the duration of one request.
"""

__version__ = "0.1.0"
