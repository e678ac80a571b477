"""Error codes and exception taxonomy for the request bridge.

Network and HTTP failures are not exceptions here: the transport returns them
as values (see `runtime.transport.TransportFailure`). Exceptions are reserved
for local failures that abort a call outright, e.g. an attachment that cannot
be read or a response that cannot be written to disk.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Machine-readable failure classes.

    Used for logging and retry decisions; the agent-facing envelope only
    carries the message and, where available, the HTTP response.
    """
    INVALID_PARAMS = "INVALID_PARAMS"
    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    IO_ERROR = "IO_ERROR"
    UNKNOWN = "UNKNOWN"


class RestBridgeError(Exception):
    """Base exception carrying an ErrorCode."""

    __slots__ = ("message", "code")

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class LocalIOError(RestBridgeError):
    """Filesystem failure. Terminal: never retried."""

    __slots__ = ("path",)

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message, ErrorCode.IO_ERROR)


class AttachmentReadError(LocalIOError):
    """A multipart attachment could not be read from disk."""


class ResponseWriteError(LocalIOError):
    """A response body could not be written to its target path."""
