"""Error handling for restmcp.

- ErrorCode: failure classes used for logging and retry decisions
- RestBridgeError and subclasses: local failures that abort a call
- Result/Ok/Err: value-level outcomes returned by the transport
"""

from .errors import (
    AttachmentReadError,
    ErrorCode,
    LocalIOError,
    ResponseWriteError,
    RestBridgeError,
)
from .result import Err, Ok, Result

__all__ = [
    "ErrorCode",
    "RestBridgeError", "LocalIOError", "AttachmentReadError", "ResponseWriteError",
    "Result", "Ok", "Err",
]
