"""Response normalization: transport outcome in, envelope out.

Example:
    >>> outcome = await transport.execute(descriptor)
    >>> envelope = await normalize(outcome, descriptor.response_mode, spec.save_to)
    >>> envelope.to_dict()
    {'status': 200, 'statusText': 'OK', 'headers': {...}, 'data': {'id': 1}}
"""

from __future__ import annotations

import asyncio
import codecs
import json
import logging
from email.message import Message
from pathlib import Path
from typing import TYPE_CHECKING, Any

from restmcp.core.descriptor import ResponseMode
from restmcp.foundation.errors import ResponseWriteError

from .envelope import Envelope, FailureEnvelope, SavedEnvelope, SuccessEnvelope

if TYPE_CHECKING:
    from collections.abc import Mapping

    from restmcp.runtime.transport import HttpReply, TransportOutcome

logger = logging.getLogger("restmcp.normalizer")


def _charset(headers: Mapping[str, str]) -> str:
    """Charset from the Content-Type header, utf-8 when absent or unknown."""
    content_type = next((v for k, v in headers.items() if k.lower() == "content-type"), None)
    if not content_type:
        return "utf-8"
    msg = Message()
    msg["content-type"] = content_type
    charset = msg.get_param("charset")
    if not isinstance(charset, str):
        return "utf-8"
    try:
        return codecs.lookup(charset).name
    except LookupError:
        return "utf-8"


def decode_body(content: bytes, headers: Mapping[str, str]) -> Any:
    """Parsed JSON when the body is JSON, otherwise the decoded text."""
    if not content:
        return ""
    text = content.decode(_charset(headers), errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


def _write(path: Path, content: bytes) -> None:
    path.write_bytes(content)


async def save_body(reply: HttpReply, target: str) -> SavedEnvelope:
    """Write the raw response bytes to `target`, overwriting any existing file."""
    path = Path(target).expanduser().resolve()
    try:
        await asyncio.to_thread(_write, path, reply.content)
    except OSError as e:
        raise ResponseWriteError(
            f"Failed to save response to '{target}': {e.strerror or e}", str(path)
        ) from e
    logger.debug(f"Saved {len(reply.content)} bytes to {path}")
    return SavedEnvelope(
        status=reply.status,
        status_text=reply.status_text,
        headers=reply.headers,
        saved_to=str(path),
        size=len(reply.content),
    )


async def normalize(
    outcome: TransportOutcome,
    mode: ResponseMode = ResponseMode.TEXT,
    save_to: str | None = None,
) -> Envelope:
    """Turn a transport outcome into its envelope.

    Args:
        outcome: Result of the last transport attempt
        mode: TEXT decodes the body into `data`; BINARY writes the raw bytes to `save_to`
        save_to: Destination for BINARY responses

    Raises:
        ValueError: BINARY mode without a destination
        ResponseWriteError: the destination cannot be written
    """
    if outcome.is_err():
        failure = outcome.unwrap_err()
        if failure.reply is None:
            return FailureEnvelope(message=failure.message)
        reply = failure.reply
        return FailureEnvelope(
            message=failure.message,
            status=reply.status,
            status_text=reply.status_text,
            headers=reply.headers,
            data=decode_body(reply.content, reply.headers),
        )

    reply = outcome.unwrap()
    if mode is ResponseMode.BINARY:
        if not save_to:
            raise ValueError("binary responses need a save_to path")
        return await save_body(reply, save_to)
    return SuccessEnvelope(
        status=reply.status,
        status_text=reply.status_text,
        headers=reply.headers,
        data=decode_body(reply.content, reply.headers),
    )
