"""
MCP Server - Main FastAPI Application

Implements a Model Context Protocol server exposing the Fathom API as tools:
- /api/mcp: JSON-RPC endpoint (initialize, ping, tools/list, tools/call)
- /health and /: service information

The server is stateless. Every request carries its own bearer token, which is
used as the Fathom API key for that request only.
"""

import json
import logging
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, Request, Response, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.config import get_settings
from .auth import require_auth
from .models import (
    AuthInfo,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolCallRequest,
)
from .handlers import tools
from . import __version__

settings = get_settings()

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.verbose_logs else logging.INFO)
logger = logging.getLogger(__name__)

SERVER_NAME = "fathom-mcp"
MCP_PATH = "/api/mcp"
DEFAULT_PROTOCOL_VERSION = "2025-06-18"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000

# Initialize FastAPI app
app = FastAPI(
    title="MCP Server - Fathom",
    description="Model Context Protocol server exposing Fathom meetings, transcripts, summaries and teams",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware for cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Api-Key", "MCP-Session-Id"],
)


class JsonRpcException(Exception):
    """Raised inside dispatch to answer with a JSON-RPC error."""

    def __init__(self, code: int, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def _error_response(
    request_id: Optional[Union[int, str]],
    code: int,
    message: str,
    status_code: int = 200,
    data: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = JsonRpcResponse(
        id=request_id,
        error=JsonRpcError(code=code, message=message, data=data),
    )
    return JSONResponse(status_code=status_code, content=body.to_json())


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "MCP Server",
        "version": __version__
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "MCP Server - Fathom",
        "version": __version__,
        "protocol": "Model Context Protocol",
        "endpoints": {
            "mcp": MCP_PATH,
            "tools": list(tools.TOOL_REGISTRY.keys()),
            "docs": "/docs"
        }
    }


# ============================================================================
# JSON-RPC dispatch
# ============================================================================

async def _initialize(params: Dict[str, Any], auth_info: AuthInfo) -> Dict[str, Any]:
    return {
        "protocolVersion": params.get("protocolVersion") or DEFAULT_PROTOCOL_VERSION,
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": SERVER_NAME, "version": __version__},
    }


async def _ping(params: Dict[str, Any], auth_info: AuthInfo) -> Dict[str, Any]:
    return {}


async def _tools_list(params: Dict[str, Any], auth_info: AuthInfo) -> Dict[str, Any]:
    response = await tools.list_tools()
    return response.model_dump()


async def _tools_call(params: Dict[str, Any], auth_info: AuthInfo) -> Dict[str, Any]:
    try:
        call_request = ToolCallRequest.model_validate(params)
    except ValidationError as e:
        raise JsonRpcException(INVALID_PARAMS, f"Invalid tools/call params: {e}")

    result = await tools.call_tool(call_request, auth_info)
    return result.model_dump(exclude_unset=True)


METHOD_HANDLERS = {
    "initialize": _initialize,
    "ping": _ping,
    "tools/list": _tools_list,
    "tools/call": _tools_call,
}


async def dispatch(rpc_request: JsonRpcRequest, auth_info: AuthInfo) -> JsonRpcResponse:
    """
    Route one JSON-RPC request to its handler.

    Remote Fathom errors never reach this level: tools/call reports them as an
    error-flagged result. Anything raised here becomes a JSON-RPC error.
    """
    handler = METHOD_HANDLERS.get(rpc_request.method)
    if handler is None:
        raise JsonRpcException(METHOD_NOT_FOUND, f"Method not found: {rpc_request.method}")

    result = await handler(rpc_request.params or {}, auth_info)
    return JsonRpcResponse(id=rpc_request.id, result=result)


# ============================================================================
# MCP Endpoint
# ============================================================================

@app.post(MCP_PATH, tags=["MCP"], summary="Send an MCP JSON-RPC message")
async def mcp_post_endpoint(request: Request, auth_info: AuthInfo = Security(require_auth)):
    """
    Handle one MCP JSON-RPC message.

    Notifications are acknowledged with 202 and no body.
    """
    try:
        body = json.loads(await request.body())
    except ValueError:
        return _error_response(None, PARSE_ERROR, "Parse error", status_code=400)

    try:
        rpc_request = JsonRpcRequest.model_validate(body)
    except ValidationError:
        request_id = body.get("id") if isinstance(body, dict) else None
        return _error_response(request_id, INVALID_REQUEST, "Invalid Request", status_code=400)

    if rpc_request.is_notification:
        logger.debug(f"Received notification: {rpc_request.method}")
        return Response(status_code=202)

    try:
        response = await dispatch(rpc_request, auth_info)
    except JsonRpcException as e:
        return _error_response(rpc_request.id, e.code, e.message, data=e.data)
    except tools.ToolArgumentError as e:
        return _error_response(rpc_request.id, INVALID_PARAMS, str(e), data={"errors": e.errors})
    except tools.UnknownToolError as e:
        return _error_response(rpc_request.id, INVALID_PARAMS, str(e))
    except Exception as e:
        logger.error(f"Error handling '{rpc_request.method}': {e}", exc_info=True)
        return _error_response(
            rpc_request.id,
            INTERNAL_ERROR,
            "Internal error",
            data={"type": type(e).__name__, "detail": str(e)},
        )

    return JSONResponse(content=response.to_json())


@app.get(MCP_PATH, tags=["MCP"], summary="Open an SSE stream (not supported)")
async def mcp_get_endpoint(auth_info: AuthInfo = Security(require_auth)):
    """Stateless server: there is no server-initiated stream to open."""
    return _error_response(None, SERVER_ERROR, "Method not allowed.", status_code=405)


@app.delete(MCP_PATH, tags=["MCP"], summary="Terminate a session (not supported)")
async def mcp_delete_endpoint(auth_info: AuthInfo = Security(require_auth)):
    """Stateless server: there is no session to terminate."""
    return _error_response(None, SERVER_ERROR, "Method not allowed.", status_code=405)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3000)
