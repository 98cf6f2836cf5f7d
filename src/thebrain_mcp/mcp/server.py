"""
thebrain-mcp MCP Server
=======================
JSON-RPC router exposing TheBrain thoughts as MCP tools and resources over
line-delimited stdio.

Every non-blank input line yields exactly one response line. No exception
escapes handle_line: protocol errors become -32600, upstream API errors
-32000, everything else a fixed "Internal error" (-32603).
"""

import json
import sys
from typing import Any, Callable, Dict, Optional, TextIO

from loguru import logger

from thebrain_mcp.core.config import BridgeConfig, MCPConfig, get_config
from thebrain_mcp.core.exceptions import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    ConfigurationError,
    InvalidParamsError,
    ProtocolError,
    ThoughtBridgeAPIError,
    jsonrpc_code,
)
from thebrain_mcp.core.logging_config import configure_logging
from thebrain_mcp.mcp import protocol
from thebrain_mcp.mcp.adapters.api_adapter import TheBrainAPIAdapter
from thebrain_mcp.mcp.schemas import (
    CreateThoughtInput,
    JsonRpcRequest,
    ReadResourceParams,
    SearchThoughtsInput,
    ThoughtIdInput,
    ToolCallParams,
    ToolResult,
    UpdateThoughtInput,
    validate_arguments,
)

Envelope = Dict[str, Any]


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _field(thought: Any, key: str) -> Any:
    return thought.get(key) if isinstance(thought, dict) else None


def render_thought_markdown(thought: Dict[str, Any]) -> str:
    """Render a thought as the markdown document served by resources/read."""
    content = f"# {thought.get('name')}\n\n"

    notes = thought.get("notes")
    if notes:
        content += f"## Notes\n\n{notes}\n\n"

    links = thought.get("links")
    if links:
        content += "## Links\n\n"
        for link in links:
            content += f"- {link.get('name')} ({link.get('type')})\n"
        content += "\n"

    if thought.get("created_at"):
        content += f"**Created:** {thought['created_at']}\n"
    if thought.get("modified_at"):
        content += f"**Modified:** {thought['modified_at']}\n"

    return content


class MCPServer:
    """
    Stateless MCP router over a TheBrainAPIAdapter.

    ``method_handlers`` and ``tool_handlers`` are the complete dispatch
    tables; anything not in them is "Method not found" / "Unknown tool".
    """

    def __init__(
        self,
        adapter: TheBrainAPIAdapter,
        config: Optional[MCPConfig] = None,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
    ):
        self.adapter = adapter
        self.config = config or MCPConfig()
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout

        self.method_handlers: Dict[str, Callable[[JsonRpcRequest], Envelope]] = {
            protocol.INITIALIZE: self._handle_initialize,
            protocol.LIST_TOOLS: self._handle_list_tools,
            protocol.CALL_TOOL: self._handle_call_tool,
            protocol.LIST_RESOURCES: self._handle_list_resources,
            protocol.READ_RESOURCE: self._handle_read_resource,
        }
        self.tool_handlers: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "search_thoughts": self.search_thoughts,
            "get_thought": self.get_thought,
            "create_thought": self.create_thought,
            "update_thought": self.update_thought,
            "delete_thought": self.delete_thought,
        }

    # ------------------------------------------------------------------
    # Transport loop
    # ------------------------------------------------------------------

    def serve(self) -> None:
        """Read requests line by line until EOF, answering each in order."""
        logger.info("Starting thebrain-mcp server on stdio")
        try:
            for line in self.input_stream:
                response = self.handle_line(line)
                if response is not None:
                    self.output_stream.write(response + "\n")
                    self.output_stream.flush()
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, shutting down...")
        finally:
            logger.info("thebrain-mcp server stopped")

    def handle_line(self, line: str) -> Optional[str]:
        """Handle one raw input line; returns the response line or None for blank input."""
        if not line.strip():
            return None

        response = self.handle_request(line)
        try:
            return json.dumps(response, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Response could not be serialized")
            return json.dumps(
                protocol.error_response(response.get("id"), INTERNAL_ERROR, "Internal error")
            )

    def handle_request(self, raw: str) -> Envelope:
        """Parse, dispatch and translate errors for one message."""
        request_id = None
        try:
            message = protocol.parse_message(raw)
            request_id = message.get("id")
            logger.debug(f"Received message: {message['method']}")
            return self.dispatch(message)
        except (ProtocolError, InvalidParamsError) as exc:
            logger.error(f"Protocol error: {exc.message}")
            return protocol.error_response(request_id, jsonrpc_code(exc), exc.message)
        except ThoughtBridgeAPIError as exc:
            logger.error(f"API error ({exc.status_code}): {exc.message}")
            return protocol.error_response(
                request_id,
                jsonrpc_code(exc),
                exc.message,
                {"status_code": exc.status_code},
            )
        except Exception:
            logger.exception("Unexpected error while handling request")
            return protocol.error_response(request_id, INTERNAL_ERROR, "Internal error")

    def dispatch(self, message: Dict[str, Any]) -> Envelope:
        params = message.get("params")
        if params is not None and not isinstance(params, dict):
            raise ProtocolError("Params must be a map")

        request = JsonRpcRequest.model_validate(message)
        handler = self.method_handlers.get(request.method)
        if handler is None:
            return protocol.error_response(
                request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}"
            )
        return handler(request)

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    def _handle_initialize(self, request: JsonRpcRequest) -> Envelope:
        logger.info("Handling initialize request")
        return protocol.success_response(request.id, protocol.initialize_result())

    def _handle_list_tools(self, request: JsonRpcRequest) -> Envelope:
        return protocol.success_response(request.id, protocol.tools_list_result())

    def _handle_call_tool(self, request: JsonRpcRequest) -> Envelope:
        params = validate_arguments(ToolCallParams, request.params or {})
        logger.info(f"Handling tool call: {params.name}")

        tool = self.tool_handlers.get(params.name or "")
        if tool is None:
            raise ProtocolError(f"Unknown tool: {params.name or ''}")

        result = tool(params.arguments or {})
        return protocol.success_response(request.id, result)

    def _handle_list_resources(self, request: JsonRpcRequest) -> Envelope:
        results = self.adapter.search("", limit=100)
        resources = [
            protocol.resource_descriptor(thought)
            for thought in protocol.extract_thoughts(results)
            if isinstance(thought, dict)
        ]
        return protocol.success_response(request.id, {"resources": resources})

    def _handle_read_resource(self, request: JsonRpcRequest) -> Envelope:
        uri = (request.params or {}).get("uri")
        params = ReadResourceParams(uri=uri if isinstance(uri, str) else None)
        logger.info(f"Handling read resource: {uri}")

        thought_id = None
        if params.uri and params.uri.startswith(protocol.THOUGHT_URI_PREFIX):
            thought_id = params.uri.rsplit("/", 1)[-1]
        if not thought_id:
            raise InvalidParamsError(f"Invalid resource URI: {uri}")

        thought = self.adapter.get(thought_id)
        contents = [{
            "uri": params.uri,
            "mimeType": protocol.RESOURCE_MIME_TYPE,
            "text": render_thought_markdown(thought if isinstance(thought, dict) else {}),
        }]
        return protocol.success_response(request.id, {"contents": contents})

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def search_thoughts(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(SearchThoughtsInput, arguments)
        results = self.adapter.search(args.query, limit=args.limit)
        thoughts = protocol.extract_thoughts(results)
        return ToolResult.from_texts(
            f"Found {len(thoughts)} thoughts matching '{args.query}'",
            _pretty(results),
        ).model_dump()

    def get_thought(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(ThoughtIdInput, arguments)

        thought = self.adapter.get(args.thought_id)
        return ToolResult.from_texts(
            f"Retrieved thought: {_field(thought, 'name')}",
            _pretty(thought),
        ).model_dump()

    def create_thought(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(CreateThoughtInput, arguments)

        thought = self.adapter.create(**args.model_dump(exclude_none=True))
        return ToolResult.from_texts(
            f"Created thought: {_field(thought, 'name')} (ID: {_field(thought, 'id')})",
            _pretty(thought),
        ).model_dump()

    def update_thought(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(UpdateThoughtInput, arguments)

        thought = self.adapter.update(args.thought_id, **args.update_fields())
        texts = [f"Updated thought: {_field(thought, 'name') or args.thought_id}"]
        if thought:
            texts.append(_pretty(thought))
        return ToolResult.from_texts(*texts).model_dump()

    def delete_thought(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(ThoughtIdInput, arguments)

        if self.adapter.delete(args.thought_id):
            text = f"Successfully deleted thought: {args.thought_id}"
        else:
            text = f"Failed to delete thought: {args.thought_id}"
        return ToolResult.from_texts(text).model_dump()


def build_server(
    config: Optional[BridgeConfig] = None,
    input_stream: Optional[TextIO] = None,
    output_stream: Optional[TextIO] = None,
) -> MCPServer:
    cfg = config or get_config()
    adapter = TheBrainAPIAdapter(config=cfg.mcp)
    return MCPServer(
        adapter,
        config=cfg.mcp,
        input_stream=input_stream,
        output_stream=output_stream,
    )


def main() -> None:
    try:
        cfg = get_config()
        configure_logging(cfg.observability.log_level, cfg.observability.json_logs)
        server = build_server(cfg)
    except ConfigurationError as exc:
        logger.error(f"Cannot start thebrain-mcp: {exc.message}")
        sys.exit(1)

    with server.adapter:
        server.serve()


if __name__ == "__main__":
    main()
