"""
MCP Protocol Request/Response Models

This module defines Pydantic models for the JSON-RPC messages the MCP endpoint
exchanges, the tool result envelope, and the argument schemas of the Fathom
tools.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============================================================================
# JSON-RPC Models
# ============================================================================

class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request or notification (notifications carry no id)."""
    jsonrpc: Literal["2.0"] = Field(..., description="Protocol version")
    id: Optional[Union[int, str]] = Field(None, description="Request id, absent for notifications")
    method: str = Field(..., description="Method name, e.g. 'tools/call'")
    params: Optional[Dict[str, Any]] = Field(None, description="Method parameters")

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """JSON-RPC error object."""
    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional error data")


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response carrying either a result or an error."""
    jsonrpc: Literal["2.0"] = "2.0"
    id: Optional[Union[int, str]] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[JsonRpcError] = None

    def to_json(self) -> Dict[str, Any]:
        """Serialize with exactly one of result or error."""
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.model_dump(exclude_none=True)
        else:
            message["result"] = self.result if self.result is not None else {}
        return message


# ============================================================================
# Auth Models
# ============================================================================

class AuthInfo(BaseModel):
    """Credential attached to an authenticated request."""
    token: str = Field(..., description="Bearer token, used as the Fathom API key")
    client_id: str = Field(..., description="Client identifier")
    scopes: List[str] = Field(default_factory=list, description="Granted scopes")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Additional auth data")


# ============================================================================
# Tool Models
# ============================================================================

class ToolDefinition(BaseModel):
    """MCP tool definition schema."""
    name: str = Field(..., description="Tool name/identifier")
    description: str = Field(..., description="Tool description")
    inputSchema: Dict[str, Any] = Field(..., description="JSON schema for tool inputs")


class ToolListResponse(BaseModel):
    """Response for listing available tools."""
    tools: List[ToolDefinition] = Field(..., description="List of available tools")


class ToolCallRequest(BaseModel):
    """Request to call a tool."""
    name: str = Field(..., description="Tool name to call")
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ToolCallResult(BaseModel):
    """Result of a tool call."""
    content: List[Dict[str, Any]] = Field(..., description="Tool output content")
    structuredContent: Optional[Any] = Field(None, description="Tool output as structured data")
    isError: bool = Field(default=False, description="Whether the result is an error")


# ============================================================================
# Tool Argument Models
# ============================================================================

class ToolArguments(BaseModel):
    """Base for tool arguments: no type coercion apart from integral floats, unknown keys ignored."""
    model_config = ConfigDict(strict=True, extra="ignore")


UTC_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def _check_datetime(value: Optional[str]) -> Optional[str]:
    """Accept UTC date-times with a Z suffix, e.g. 2024-01-01T00:00:00Z."""
    if value is None:
        return value
    if not UTC_DATETIME_PATTERN.match(value):
        raise ValueError("must be an ISO 8601 UTC date-time, e.g. 2024-01-01T00:00:00Z")
    try:
        datetime.strptime(value[:19], "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        raise ValueError(f"{value!r} is not a valid date-time")
    return value


def _integral_float_to_int(value: Any) -> Any:
    # JSON has one number type: 5.0 is the integer 5, 5.5 is still rejected
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class ListMeetingsArguments(ToolArguments):
    calendar_invitees: Optional[List[EmailStr]] = Field(
        None, description="Email addresses of calendar invitees to filter by"
    )
    calendar_invitees_domains: Optional[List[str]] = Field(None, description="Company domains to filter by")
    calendar_invitees_domains_type: Optional[Literal["all", "only_internal", "one_or_more_external"]] = Field(
        None, description="Filter by whether calendar invitee list includes external email domains"
    )
    created_after: Optional[str] = Field(
        None, description="Filter to meetings created after this timestamp (ISO 8601)"
    )
    created_before: Optional[str] = Field(
        None, description="Filter to meetings created before this timestamp (ISO 8601)"
    )
    include_transcript: Optional[bool] = Field(None, description="Include the transcript for each meeting")
    include_summary: Optional[bool] = Field(None, description="Include the summary for each meeting")
    include_action_items: Optional[bool] = Field(None, description="Include action items for each meeting")
    include_crm_matches: Optional[bool] = Field(None, description="Include CRM matches for each meeting")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum number of meetings to return")
    cursor: Optional[str] = Field(None, description="Cursor for pagination")
    recorded_by: Optional[List[EmailStr]] = Field(
        None, description="Email addresses of users who recorded meetings"
    )
    teams: Optional[List[str]] = Field(None, description="Team names to filter by")

    @field_validator("created_after", "created_before")
    @classmethod
    def check_created_timestamps(cls, value: Optional[str]) -> Optional[str]:
        return _check_datetime(value)

    @field_validator("limit", mode="before")
    @classmethod
    def check_limit_is_integral(cls, value: Any) -> Any:
        return _integral_float_to_int(value)


class RecordingArguments(ToolArguments):
    recording_id: int = Field(..., gt=0, description="The recording ID of the meeting")

    @field_validator("recording_id", mode="before")
    @classmethod
    def check_recording_id_is_integral(cls, value: Any) -> Any:
        return _integral_float_to_int(value)


class ListTeamsArguments(ToolArguments):
    cursor: Optional[str] = Field(None, description="Cursor for pagination")


class ListTeamMembersArguments(ToolArguments):
    team_id: str = Field(..., min_length=1, description="The ID of the team")
    cursor: Optional[str] = Field(None, description="Cursor for pagination")
