"""
MCP Server Base Classes

Tool registration, parameter validation and dispatch for the Fathom MCP
server. The dispatcher is transport-agnostic: stdio, streamable HTTP and
legacy SSE sessions all hand it decoded JSON-RPC messages and get back the
response (or ``None`` for notifications).

Usage:
    server = MCPServer(
        name="mcp-fathom-server",
        version="2.0.0",
        tools=[ListMeetings(client), SearchMeetings(client)],
    )
    response = await server.handle_message(message, context)
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .json_rpc import (
    error_response,
    is_notification,
    is_response,
    is_valid_request,
    notification,
    success_response,
)

logger = logging.getLogger(__name__)

# ─── Type Variables ──────────────────────────────────────────────────────────

TParams = TypeVar("TParams", bound=BaseModel)
TResult = TypeVar("TResult", bound=BaseModel)

SUPPORTED_PROTOCOL_VERSIONS: tuple[str, ...] = ("2025-03-26", "2024-11-05")
LATEST_PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]

Notifier = Callable[[dict[str, Any]], Awaitable[None]]

# ─── Result & Error Types ────────────────────────────────────────────────────


@dataclass
class MCPResult(Generic[TResult]):
    """Result returned by a tool execution.

    ``data`` is either a pydantic model (serialized to JSON) or plain text.
    A failed result carries ``error`` instead and is rendered as a
    tool-result error, which keeps the session usable.
    """

    success: bool
    data: TResult | str | None = None
    error: str | None = None

    @classmethod
    def failure(cls, message: str) -> MCPResult[Any]:
        return cls(success=False, error=message)

    def to_content(self) -> dict[str, Any]:
        """Render the uniform ``tools/call`` envelope."""
        if not self.success:
            payload = json.dumps({"error": self.error or "Unknown error occurred"}, indent=2)
            return {"content": [{"type": "text", "text": payload}], "isError": True}

        if isinstance(self.data, BaseModel):
            text = json.dumps(self.data.model_dump(mode="json", exclude_none=True), indent=2)
        elif isinstance(self.data, str):
            text = self.data
        else:
            text = json.dumps(self.data, indent=2)
        return {"content": [{"type": "text", "text": text}]}


class MCPError(Exception):
    """Structured error for MCP protocol failures."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code


class ErrorCodes:
    """Standard JSON-RPC / MCP error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # Implementation-defined server errors
    SERVER_ERROR = -32000


@dataclass
class RequestContext:
    """Per-message context handed to the dispatcher by a transport."""

    session_id: str | None = None
    notify: Notifier | None = None

    async def send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        if self.notify is not None:
            await self.notify(notification(method, params))


# ─── Tool Base Classes ───────────────────────────────────────────────────────


class ToolParams(BaseModel):
    """Base for tool argument models: unknown fields and loose types are rejected."""

    model_config = ConfigDict(extra="forbid", strict=True)


class MCPTool(ABC, Generic[TParams, TResult]):
    """
    Abstract base class for MCP tools.

    Every tool must define:
    - name: the tool name the assistant calls (e.g., 'list_meetings')
    - description: for the LLM
    - Params type: pydantic model for input validation
    - Result type: pydantic model for output structure
    - execute(): the implementation
    """

    name: str = ""
    description: str = ""

    @abstractmethod
    async def execute(self, params: TParams) -> MCPResult[TResult]:
        """Execute the tool with validated parameters."""
        ...

    def get_params_model(self) -> type[BaseModel]:
        """Get the Pydantic model class for params validation."""
        # Walk the class hierarchy for the first parametrized generic base
        for cls in type(self).__mro__:
            for base in getattr(cls, "__orig_bases__", ()):
                args = getattr(base, "__args__", ())
                if args and isinstance(args[0], type) and issubclass(args[0], BaseModel):
                    return args[0]
        raise TypeError(f"Tool {self.name} must specify Generic params type")

    def get_input_schema(self) -> dict[str, Any]:
        """Generate JSON Schema from the Pydantic params model."""
        model = self.get_params_model()
        return model.model_json_schema()

    def to_definition(self) -> dict[str, Any]:
        """Generate the MCP tool definition returned by ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.get_input_schema(),
        }


# ─── MCP Server ──────────────────────────────────────────────────────────────


class MCPServer:
    """
    Tool registry and JSON-RPC dispatcher.

    Holds no per-session state, so a single instance is shared by every
    transport and every session.
    """

    def __init__(self, name: str, version: str, tools: list[MCPTool[Any, Any]]) -> None:
        self.name = name
        self.version = version
        self.tools: dict[str, MCPTool[Any, Any]] = {}

        for tool in tools:
            self.tools[tool.name] = tool

    def _build_init_result(self, requested_version: Any) -> dict[str, Any]:
        """Build the initialization result payload."""
        if requested_version in SUPPORTED_PROTOCOL_VERSIONS:
            protocol_version = requested_version
        else:
            protocol_version = LATEST_PROTOCOL_VERSION
        return {
            "protocolVersion": protocol_version,
            "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
            "serverInfo": {"name": self.name, "version": self.version},
        }

    async def handle_message(
        self, message: Any, context: RequestContext | None = None
    ) -> dict[str, Any] | None:
        """Dispatch one decoded JSON-RPC message.

        Returns the response, or ``None`` when the message expects none
        (notifications and client responses).
        """
        context = context or RequestContext()

        if is_notification(message):
            logger.debug("Notification %s (session=%s)", message["method"], context.session_id)
            return None
        if is_response(message):
            return None
        if not is_valid_request(message):
            request_id = message.get("id") if isinstance(message, dict) else None
            return error_response(request_id, ErrorCodes.INVALID_REQUEST, "Invalid Request")

        method = message["method"]
        request_id = message["id"]
        params = message.get("params") or {}

        try:
            result = await self._route(method, params, context)
        except MCPError as e:
            logger.info("Rejected %s request: %s", method, e)
            return error_response(request_id, e.code, str(e))
        return success_response(request_id, result)

    async def _route(self, method: str, params: Any, context: RequestContext) -> Any:
        """Return the result for one request; protocol failures raise ``MCPError``."""
        if method == "initialize":
            requested = params.get("protocolVersion") if isinstance(params, dict) else None
            return self._build_init_result(requested)

        if method == "tools/call":
            if not isinstance(params, dict):
                raise MCPError(ErrorCodes.INVALID_PARAMS, "params must be an object")
            return await self._handle_tool_call(params, context)

        if method == "tools/list":
            return self._handle_tool_list()

        if method == "resources/list":
            return {"resources": []}

        if method == "prompts/list":
            return {"prompts": []}

        if method == "ping":
            return {}

        raise MCPError(ErrorCodes.METHOD_NOT_FOUND, f"Unknown method: {method}")

    async def _handle_tool_call(self, params: dict[str, Any], context: RequestContext) -> dict[str, Any]:
        """Handle a tools/call request; every failure becomes a tool-result error."""
        tool_name = params.get("name", "")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        meta = params.get("_meta")
        progress_token = meta.get("progressToken") if isinstance(meta, dict) else None

        result = await self.call_tool(tool_name, arguments, context, progress_token)
        return result.to_content()

    async def call_tool(
        self,
        tool_name: str,
        arguments: Any,
        context: RequestContext | None = None,
        progress_token: str | int | None = None,
    ) -> MCPResult[Any]:
        """Validate and run one tool, converting any failure into ``MCPResult.failure``."""
        context = context or RequestContext()

        if not isinstance(tool_name, str):
            logger.warning("Non-string tool name requested: %r", tool_name)
            return MCPResult.failure(f"Unknown tool: {tool_name!r}")

        tool = self.tools.get(tool_name)
        if not tool:
            logger.warning("Unknown tool requested: %s", tool_name)
            return MCPResult.failure(f"Unknown tool: {tool_name}")

        # Validate params
        try:
            params_model = tool.get_params_model()
            validated_params = params_model.model_validate(arguments)
        except ValidationError as e:
            logger.info("Rejected arguments for %s: %s", tool_name, e)
            return MCPResult.failure(f"Invalid parameters: {e}")

        if progress_token is not None:
            await self._send_progress(context, progress_token, 0)

        # Execute tool
        try:
            result = await tool.execute(validated_params)
        except Exception as e:
            logger.error("Error in %s: %s", tool_name, e)
            result = MCPResult.failure(str(e) or "Unknown error occurred")

        if progress_token is not None:
            await self._send_progress(context, progress_token, 1)
        return result

    async def _send_progress(self, context: RequestContext, token: str | int, progress: int) -> None:
        await context.send_notification(
            "notifications/progress",
            {"progressToken": token, "progress": progress, "total": 1},
        )

    def _handle_tool_list(self) -> dict[str, Any]:
        """Handle a tools/list request."""
        return {"tools": [tool.to_definition() for tool in self.tools.values()]}
