"""
thebrain-mcp Exceptions
=======================

Error taxonomy shared by the API adapter and the MCP router.

Exception Hierarchy:
    ThoughtBridgeError (base)
    ├── ConfigurationError          (fatal at construction)
    ├── ProtocolError               (bad caller input, -32600)
    ├── InvalidParamsError          (malformed params, -32602)
    └── ThoughtBridgeAPIError       (upstream HTTP failure, -32000)
        ├── AuthenticationError     (401)
        ├── ThoughtNotFoundError    (404)
        └── RateLimitError          (429)

Every exception carries an ErrorKind. The router never inspects exception
classes to pick a wire code; it looks the kind up in JSONRPC_ERROR_CODES.
Anything that is not a ThoughtBridgeError is treated as ErrorKind.INTERNAL.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Classification used for wire-code translation and logging."""
    CONFIGURATION = "CONFIGURATION"
    PROTOCOL = "PROTOCOL"
    INVALID_PARAMS = "INVALID_PARAMS"
    AUTHENTICATION = "AUTHENTICATION"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT = "RATE_LIMIT"
    API = "API"
    INTERNAL = "INTERNAL"


# JSON-RPC error codes
PARSE_OR_INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
UPSTREAM_API_ERROR = -32000

JSONRPC_ERROR_CODES = {
    ErrorKind.PROTOCOL: PARSE_OR_INVALID_REQUEST,
    ErrorKind.INVALID_PARAMS: INVALID_PARAMS,
    ErrorKind.AUTHENTICATION: UPSTREAM_API_ERROR,
    ErrorKind.NOT_FOUND: UPSTREAM_API_ERROR,
    ErrorKind.RATE_LIMIT: UPSTREAM_API_ERROR,
    ErrorKind.API: UPSTREAM_API_ERROR,
    ErrorKind.CONFIGURATION: INTERNAL_ERROR,
    ErrorKind.INTERNAL: INTERNAL_ERROR,
}


class ThoughtBridgeError(Exception):
    """
    Base exception for all thebrain-mcp errors.

    Attributes:
        message: Human-readable error message (what goes on the wire)
        context: Additional diagnostic context (logged, never sent)
        kind: ErrorKind used for wire-code translation
        recoverable: Whether retrying the same call may succeed
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    recoverable: bool = False

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message

    def to_dict(self) -> dict:
        result = {
            "error": self.message,
            "kind": self.kind.value,
            "recoverable": self.recoverable,
        }
        if self.context:
            result["context"] = self.context
        return result


class ConfigurationError(ThoughtBridgeError):
    """Raised when configuration is invalid or a required value is missing."""
    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key


class ProtocolError(ThoughtBridgeError):
    """Raised when an incoming MCP message or tool argument is invalid."""
    kind = ErrorKind.PROTOCOL


class InvalidParamsError(ThoughtBridgeError):
    """Raised when request params are well-formed JSON but unusable."""
    kind = ErrorKind.INVALID_PARAMS


# =============================================================================
# Upstream API Errors
# =============================================================================

class ThoughtBridgeAPIError(ThoughtBridgeError):
    """
    Raised when the knowledge-graph API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status of the response that triggered the error.
        response_body: Decoded (or raw text) response body, for diagnostics.
    """
    kind = ErrorKind.API

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ):
        ctx = {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message, ctx)
        self.status_code = status_code
        self.response_body = response_body


class AuthenticationError(ThoughtBridgeAPIError):
    """Raised on HTTP 401."""
    kind = ErrorKind.AUTHENTICATION


class ThoughtNotFoundError(ThoughtBridgeAPIError):
    """Raised on HTTP 404."""
    kind = ErrorKind.NOT_FOUND


class RateLimitError(ThoughtBridgeAPIError):
    """Raised on HTTP 429."""
    kind = ErrorKind.RATE_LIMIT
    recoverable = True


def error_kind(exc: BaseException) -> ErrorKind:
    """Return the ErrorKind of any exception; foreign exceptions are INTERNAL."""
    if isinstance(exc, ThoughtBridgeError):
        return exc.kind
    return ErrorKind.INTERNAL


def jsonrpc_code(exc: BaseException) -> int:
    """Translate an exception into its JSON-RPC error code."""
    return JSONRPC_ERROR_CODES[error_kind(exc)]


__all__ = [
    "ErrorKind",
    "JSONRPC_ERROR_CODES",
    "PARSE_OR_INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "UPSTREAM_API_ERROR",
    "ThoughtBridgeError",
    "ConfigurationError",
    "ProtocolError",
    "InvalidParamsError",
    "ThoughtBridgeAPIError",
    "AuthenticationError",
    "ThoughtNotFoundError",
    "RateLimitError",
    "error_kind",
    "jsonrpc_code",
]
