"""httpx-backed execution of transport descriptors.

`HttpTransport.execute` never raises for network or HTTP failures: it returns
`Ok(HttpReply)` for 2xx responses and `Err(TransportFailure)` otherwise, with
the received response attached whenever there was one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from restmcp.core.content_type import BodyEncoding
from restmcp.foundation.errors import Err, ErrorCode, Ok, Result

if TYPE_CHECKING:
    from restmcp.core.descriptor import TransportDescriptor
    from restmcp.foundation.config import HttpSettings

logger = logging.getLogger("restmcp.transport")


@dataclass(frozen=True, slots=True)
class HttpReply:
    """A received HTTP response, body unread into any particular shape."""
    status: int
    status_text: str
    headers: dict[str, str] = field(repr=False)
    content: bytes = field(repr=False)
    url: str = ""

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500


@dataclass(frozen=True, slots=True)
class TransportFailure:
    """A failed execution: network/timeout (no reply) or a non-2xx reply."""
    message: str
    code: ErrorCode
    reply: HttpReply | None = None

    @property
    def is_transient(self) -> bool:
        """4xx responses are terminal; everything else may succeed on retry."""
        return not (self.reply is not None and self.reply.is_client_error)


TransportOutcome = Result[HttpReply, TransportFailure]


def _multipart_parts(descriptor: TransportDescriptor) -> list[tuple[str, tuple[str | None, bytes | str, str | None]]]:
    """Text fields first, then files. A `None` filename makes httpx emit a plain form field."""
    parts: list[tuple[str, tuple[str | None, bytes | str, str | None]]] = [
        (name, (None, value, None)) for name, value in descriptor.form_fields
    ]
    parts.extend((f.field_name, (f.filename, f.content, f.mime_type)) for f in descriptor.files)
    return parts


class HttpTransport:
    """Executes descriptors with a lazily created httpx.AsyncClient.

    Example:
        >>> transport = HttpTransport()
        >>> outcome = await transport.execute(build_descriptor(spec))
        >>> await transport.aclose()
    """

    __slots__ = ("_verify", "_follow_redirects", "_max_redirects", "_user_agent", "_transport", "_client")

    def __init__(
        self,
        *,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
        max_redirects: int = 5,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._verify = verify_ssl
        self._follow_redirects = follow_redirects
        self._max_redirects = max_redirects
        self._user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: HttpSettings, *, transport: httpx.AsyncBaseTransport | None = None) -> HttpTransport:
        return cls(
            verify_ssl=settings.verify_ssl,
            follow_redirects=settings.follow_redirects,
            max_redirects=settings.max_redirects,
            user_agent=settings.user_agent,
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=self._verify,
                follow_redirects=self._follow_redirects,
                max_redirects=self._max_redirects,
                headers={"User-Agent": self._user_agent} if self._user_agent else None,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def execute(self, descriptor: TransportDescriptor) -> TransportOutcome:
        """Send one request. One call, one attempt; retries live elsewhere."""
        kwargs: dict[str, object] = {
            "headers": list(descriptor.headers),
            "params": list(descriptor.params) or None,
            "timeout": descriptor.timeout_seconds,
        }
        if descriptor.encoding is BodyEncoding.MULTIPART:
            parts = _multipart_parts(descriptor)
            if parts:
                kwargs["files"] = parts
            else:
                kwargs["content"] = f"--{descriptor.boundary}--\r\n".encode("ascii")
        elif descriptor.content is not None:
            kwargs["content"] = descriptor.content
        if descriptor.basic_auth is not None:
            kwargs["auth"] = httpx.BasicAuth(*descriptor.basic_auth)

        logger.debug(f"{descriptor.method} {descriptor.url}")
        client = await self._get_client()
        try:
            response = await client.request(descriptor.method, descriptor.url, **kwargs)  # type: ignore[arg-type]
        except httpx.TimeoutException:
            return Err(TransportFailure(f"timeout of {descriptor.timeout_ms}ms exceeded", ErrorCode.TIMEOUT))
        except httpx.TransportError as e:
            return Err(TransportFailure(str(e) or type(e).__name__, ErrorCode.NETWORK_ERROR))
        except httpx.HTTPError as e:
            return Err(TransportFailure(str(e) or type(e).__name__, ErrorCode.UNKNOWN))

        reply = HttpReply(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            content=response.content,
            url=str(response.url),
        )
        logger.debug(f"{descriptor.method} {descriptor.url} -> {reply.status} ({len(reply.content)} bytes)")
        if not response.is_success:
            return Err(TransportFailure(
                f"Request failed with status code {reply.status}", ErrorCode.HTTP_ERROR, reply,
            ))
        return Ok(reply)
