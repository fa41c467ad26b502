"""
MCP Tool Endpoint Handlers

Handles tool listing and execution for MCP protocol.
Exposes Fathom tools: list_meetings, get_summary, get_transcript, list_teams,
list_team_members
"""

import asyncio
import json
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional, Type

from pydantic import ValidationError

from src.config import get_settings
from src.fathom.client import FathomApiError, FathomClient
from ..models import (
    AuthInfo,
    ListMeetingsArguments,
    ListTeamMembersArguments,
    ListTeamsArguments,
    RecordingArguments,
    ToolArguments,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
    ToolListResponse,
)

logger = logging.getLogger(__name__)


class MissingCredentialError(Exception):
    """A tool was called without a Fathom API key attached to the request."""


class UnknownToolError(ValueError):
    """No tool is registered under the requested name."""


class ToolArgumentError(ValueError):
    """Tool arguments failed schema validation."""

    def __init__(self, tool_name: str, validation_error: ValidationError):
        self.tool_name = tool_name
        self.errors = validation_error.errors(include_url=False, include_context=False)
        super().__init__(f"Invalid arguments for tool '{tool_name}': {validation_error}")


# ============================================================================
# Tool runners
# ============================================================================
# Each runner takes a client plus the validated arguments and the raw argument
# dict, and returns the decoded Fathom response.

def _list_meetings(client: FathomClient, args: ListMeetingsArguments, raw: Dict[str, Any]):
    # Validated options only, in the caller's order
    validated = args.model_dump(exclude_none=True)
    params = {key: validated[key] for key in raw if key in validated}
    return client.list_meetings(params)


def _get_summary(client: FathomClient, args: RecordingArguments, raw: Dict[str, Any]):
    return client.get_summary(args.recording_id)


def _get_transcript(client: FathomClient, args: RecordingArguments, raw: Dict[str, Any]):
    return client.get_transcript(args.recording_id)


def _list_teams(client: FathomClient, args: ListTeamsArguments, raw: Dict[str, Any]):
    return client.list_teams(args.cursor)


def _list_team_members(client: FathomClient, args: ListTeamMembersArguments, raw: Dict[str, Any]):
    return client.list_team_members(args.team_id, args.cursor)


# Tool registry with metadata
TOOL_REGISTRY: Dict[str, Dict[str, Any]] = {
    "list_meetings": {
        "description": "List meetings with optional filters including calendar invitees, date ranges, and content options",
        "arguments": ListMeetingsArguments,
        "run": _list_meetings,
    },
    "get_summary": {
        "description": "Get meeting summary by recording ID",
        "arguments": RecordingArguments,
        "run": _get_summary,
    },
    "get_transcript": {
        "description": "Get meeting transcript by recording ID with speaker information and timestamps",
        "arguments": RecordingArguments,
        "run": _get_transcript,
    },
    "list_teams": {
        "description": "List all teams in the organization",
        "arguments": ListTeamsArguments,
        "run": _list_teams,
    },
    "list_team_members": {
        "description": "List team members for a specific team",
        "arguments": ListTeamMembersArguments,
        "run": _list_team_members,
    },
}


def _input_schema(arguments_model: Type[ToolArguments]) -> Dict[str, Any]:
    schema = arguments_model.model_json_schema()
    schema.pop("title", None)
    return schema


async def list_tools() -> ToolListResponse:
    """
    List all available tools.

    Returns:
        ToolListResponse with list of tool definitions
    """
    tools = [
        ToolDefinition(
            name=name,
            description=metadata["description"],
            inputSchema=_input_schema(metadata["arguments"])
        )
        for name, metadata in TOOL_REGISTRY.items()
    ]

    return ToolListResponse(tools=tools)


async def call_tool(request: ToolCallRequest, auth_info: Optional[AuthInfo]) -> ToolCallResult:
    """
    Execute a tool call against the Fathom API with the caller's credential.

    Args:
        request: Tool call request with name and arguments
        auth_info: Credential attached by the auth gate

    Returns:
        ToolCallResult with the Fathom response, or an error-flagged result
        if Fathom rejected the request

    Raises:
        UnknownToolError: If tool name is not found
        ToolArgumentError: If arguments fail validation
        MissingCredentialError: If no API key is attached to the request
        asyncio.TimeoutError: If the call exceeds the configured max duration
    """
    tool_name = request.name

    if tool_name not in TOOL_REGISTRY:
        raise UnknownToolError(f"Tool '{tool_name}' not found. Available tools: {list(TOOL_REGISTRY.keys())}")

    metadata = TOOL_REGISTRY[tool_name]

    try:
        args = metadata["arguments"].model_validate(request.arguments)
    except ValidationError as e:
        raise ToolArgumentError(tool_name, e) from e

    api_key = auth_info.token if auth_info else None
    if not api_key:
        raise MissingCredentialError("Fathom API key is required")

    settings = get_settings()
    client = FathomClient(api_key, base_url=settings.fathom_api_base, timeout=settings.max_duration)
    run: Callable[..., Any] = metadata["run"]

    logger.info(f"Calling tool '{tool_name}'")

    try:
        # Run in executor to avoid blocking
        loop = asyncio.get_running_loop()
        result = await asyncio.wait_for(
            loop.run_in_executor(None, partial(run, client, args, request.arguments)),
            timeout=settings.max_duration,
        )
    except FathomApiError as e:
        logger.warning(f"Fathom API error in tool '{tool_name}': {e.status} {e.message}")
        return ToolCallResult(
            content=[{
                "type": "text",
                "text": f"Fathom API Error ({e.status}): {e.message}"
            }],
            isError=True
        )

    return ToolCallResult(
        content=[{
            "type": "text",
            "text": json.dumps(result, indent=2)
        }],
        structuredContent=result,
        isError=False
    )
