"""Shared fixtures: fake Fathom HTTP responses and pinned configuration."""

import json

import pytest
import requests


BASE_URL = "https://api.fathom.ai/external/v1"


def build_response(status_code=200, json_body=None, text=None, reason=None):
    """Build a real requests.Response with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
        response.headers["Content-Type"] = "text/html"
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture(autouse=True)
def fathom_env(monkeypatch):
    """Pin configuration so a developer's .env does not leak into tests."""
    monkeypatch.setenv("FATHOM_API_BASE", BASE_URL)
    monkeypatch.delenv("FATHOM_API_KEY", raising=False)
    monkeypatch.delenv("MCP_MAX_DURATION", raising=False)
