"""
MCP Protocol Helpers
====================
JSON-RPC 2.0 message parsing, envelope construction and the static
catalogs (server info, tools) served by the MCP router.
"""

import copy
import json
from typing import Any, Dict, List, Optional

from thebrain_mcp import __version__
from thebrain_mcp.core.exceptions import ProtocolError

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "thebrain-mcp"

# MCP methods
INITIALIZE = "initialize"
LIST_TOOLS = "tools/list"
CALL_TOOL = "tools/call"
LIST_RESOURCES = "resources/list"
READ_RESOURCE = "resources/read"

THOUGHT_URI_PREFIX = "thought://thought/"
RESOURCE_MIME_TYPE = "text/plain"
DESCRIPTION_PREVIEW_CHARS = 100

_THOUGHT_ID_PROPERTY = {
    "type": "string",
    "description": "Unique identifier of the thought",
}

TOOLS = (
    {
        "name": "search_thoughts",
        "description": "Search for thoughts in TheBrain",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results",
                    "default": 10,
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": "get_thought",
        "description": "Get a specific thought by ID",
        "inputSchema": {
            "type": "object",
            "properties": {"thought_id": _THOUGHT_ID_PROPERTY},
            "required": ["thought_id"],
        },
    },
    {
        "name": "create_thought",
        "description": "Create a new thought",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Name of the thought"},
                "notes": {"type": "string", "description": "Notes content for the thought"},
                "parent_id": {"type": "string", "description": "ID of the parent thought"},
            },
            "required": ["name"],
        },
    },
    {
        "name": "update_thought",
        "description": "Update an existing thought",
        "inputSchema": {
            "type": "object",
            "properties": {
                "thought_id": _THOUGHT_ID_PROPERTY,
                "name": {"type": "string", "description": "New name for the thought"},
                "notes": {"type": "string", "description": "New notes content"},
            },
            "required": ["thought_id"],
        },
    },
    {
        "name": "delete_thought",
        "description": "Delete a thought",
        "inputSchema": {
            "type": "object",
            "properties": {
                "thought_id": {
                    "type": "string",
                    "description": "Unique identifier of the thought to delete",
                },
            },
            "required": ["thought_id"],
        },
    },
)

TOOL_NAMES = tuple(tool["name"] for tool in TOOLS)


def parse_message(raw: str) -> Dict[str, Any]:
    """
    Decode and validate one incoming line.

    Returns the decoded object unchanged.

    Raises:
        ProtocolError: On malformed JSON, a non-object message, a wrong
            jsonrpc version or a non-string method, checked in that order.
    """
    try:
        message = json.loads(raw)
    except ValueError as exc:
        raise ProtocolError(f"Invalid JSON: {exc}") from exc

    if not isinstance(message, dict):
        raise ProtocolError("Message must be a map")
    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise ProtocolError("Invalid JSON-RPC version")
    if not isinstance(message.get("method"), str):
        raise ProtocolError("Method must be a string")
    return message


def success_response(request_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(
    request_id: Any,
    code: int,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def initialize_result() -> Dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {}, "resources": {}},
        "serverInfo": {"name": SERVER_NAME, "version": __version__},
    }


def tools_list_result() -> Dict[str, Any]:
    # Copies, so a caller mutating the result cannot alter the catalog.
    return {"tools": copy.deepcopy(list(TOOLS))}


def thought_uri(thought_id: Any) -> str:
    return f"{THOUGHT_URI_PREFIX}{thought_id}"


def resource_descriptor(thought: Dict[str, Any]) -> Dict[str, Any]:
    notes = thought.get("notes")
    return {
        "uri": thought_uri(thought.get("id")),
        "name": thought.get("name"),
        "description": str(notes)[:DESCRIPTION_PREVIEW_CHARS] if notes else None,
        "mimeType": RESOURCE_MIME_TYPE,
    }


def extract_thoughts(results: Any) -> List[Dict[str, Any]]:
    """Search results arrive either as a list or wrapped under 'thoughts'/'data'."""
    if isinstance(results, list):
        return results
    if isinstance(results, dict):
        return results.get("thoughts") or results.get("data") or []
    return []
