"""
Runtime configuration for the Fathom MCP server.

Values come from the environment (a local .env file is loaded first).
get_settings() reads the environment on every call so the server and tests
always see the current values.
"""

import os
from typing import Optional

import dotenv
from pydantic import BaseModel, Field

dotenv.load_dotenv()

DEFAULT_FATHOM_API_BASE = "https://api.fathom.ai/external/v1"


class Settings(BaseModel):
    """Server and client settings."""
    fathom_api_base: str = Field(DEFAULT_FATHOM_API_BASE, description="Base URL of the Fathom external API")
    fathom_api_key: Optional[str] = Field(None, description="Default Fathom API key for standalone use")
    max_duration: float = Field(60.0, gt=0, description="Per-request execution ceiling in seconds")
    verbose_logs: bool = Field(False, description="Enable DEBUG logging in the HTTP handler")


def get_settings() -> Settings:
    """Build Settings from environment variables."""
    return Settings(
        fathom_api_base=os.getenv("FATHOM_API_BASE", DEFAULT_FATHOM_API_BASE),
        fathom_api_key=os.getenv("FATHOM_API_KEY") or None,
        max_duration=float(os.getenv("MCP_MAX_DURATION", "60")),
        verbose_logs=os.getenv("VERBOSE_LOGS", "false").lower() == "true",
    )
