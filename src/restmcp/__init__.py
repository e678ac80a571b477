"""restmcp - REST and GraphQL requests as MCP tools for AI agents.

Two tools, `rest_api_request` and `rest_api_graphql`, turn validated
arguments into an HTTP call and hand back a structured envelope the agent can
branch on: `{status, statusText, headers, data}` on success,
`{error: true, message, ...}` on failure.

Serving over MCP:
    $ restmcp                                   # stdio
    $ restmcp --transport sse --port 8080

    >>> from restmcp.mcp import create_server
    >>> create_server().run()

Calling tools directly:
    >>> from restmcp import default_registry, dispatch
    >>> registry = default_registry()
    >>> await dispatch(registry, "rest_api_request", {"url": "https://api.example.com/posts/1"})
    {'status': 200, 'statusText': 'OK', 'headers': {...}, 'data': {...}}

Building requests without sending them:
    >>> from restmcp import RequestSpec, build_descriptor
    >>> build_descriptor(RequestSpec(url="https://example.com/token", method="POST",
    ...                              body={"grant_type": "client_credentials"})).encoding
    <BodyEncoding.FORM: 'form-urlencoded'>
"""

from __future__ import annotations

__version__ = "1.3.0"

# Configuration
from .foundation.config import RestMcpSettings, get_settings

# Errors
from .foundation.errors import (
    AttachmentReadError,
    Err,
    ErrorCode,
    LocalIOError,
    Ok,
    ResponseWriteError,
    RestBridgeError,
    Result,
)

# Request construction
from .core import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    BodyEncoding,
    FileAttachment,
    GraphQLRequestParams,
    NoAuth,
    RequestSpec,
    RestApiRequestParams,
    TransportDescriptor,
    build_descriptor,
    infer_encoding,
)

# Runtime
from .runtime.retry import ExponentialBackoff, RetryPolicy, execute_with_retry
from .runtime.transport import HttpReply, HttpTransport, TransportFailure

# Envelopes
from .io import FailureEnvelope, SavedEnvelope, SuccessEnvelope, normalize

# Tools
from .tools import BaseTool, GraphQLTool, RestApiRequestTool, ToolMetadata
from .registry import ToolRegistry, default_registry, dispatch

__all__ = [
    "__version__",
    # Configuration
    "RestMcpSettings",
    "get_settings",
    # Errors
    "ErrorCode",
    "RestBridgeError",
    "LocalIOError",
    "AttachmentReadError",
    "ResponseWriteError",
    "Result",
    "Ok",
    "Err",
    # Request construction
    "RequestSpec",
    "RestApiRequestParams",
    "GraphQLRequestParams",
    "FileAttachment",
    "NoAuth",
    "ApiKeyAuth",
    "BearerAuth",
    "BasicAuth",
    "BodyEncoding",
    "infer_encoding",
    "TransportDescriptor",
    "build_descriptor",
    # Runtime
    "RetryPolicy",
    "ExponentialBackoff",
    "execute_with_retry",
    "HttpTransport",
    "HttpReply",
    "TransportFailure",
    # Envelopes
    "SuccessEnvelope",
    "SavedEnvelope",
    "FailureEnvelope",
    "normalize",
    # Tools
    "BaseTool",
    "ToolMetadata",
    "RestApiRequestTool",
    "GraphQLTool",
    "ToolRegistry",
    "default_registry",
    "dispatch",
]
