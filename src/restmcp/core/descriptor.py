"""Transport descriptor and the staged builder that produces it.

`build_descriptor` threads an immutable `RequestDraft` through a fixed
sequence of pure stages. Each stage returns a new draft, so header precedence
is decided by stage order alone:

    defaults -> body encoding -> auth -> caller headers -> multipart boundary

Caller headers win every conflict except the multipart Content-Type, whose
boundary must match the encoded payload.

Example:
    >>> spec = RequestSpec(url="https://api.example.com/posts", method="POST", body={"title": "x"})
    >>> d = build_descriptor(spec)
    >>> d.header("content-type"), d.content
    ('application/json', b'{"title":"x"}')
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import assert_never
from urllib.parse import urlencode

from restmcp.foundation.errors import AttachmentReadError

from .auth import apply_auth
from .content_type import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    BodyEncoding,
    resolve_encoding,
)
from .models import FileAttachment, QueryValue, RequestSpec

Header = tuple[str, str]


class ResponseMode(StrEnum):
    """How the transport hands back the response body."""
    TEXT = "text/json"
    BINARY = "binary-buffer"


@dataclass(frozen=True, slots=True)
class MultipartFile:
    """One encoded file part."""
    field_name: str
    filename: str
    content: bytes = field(repr=False)
    mime_type: str | None = None


@dataclass(frozen=True, slots=True)
class TransportDescriptor:
    """Fully resolved request, ready for the transport. Never mutated."""
    method: str
    url: str
    headers: tuple[Header, ...]
    params: tuple[tuple[str, QueryValue], ...]
    timeout_ms: int
    encoding: BodyEncoding | None = None
    content: bytes | None = field(default=None, repr=False)
    files: tuple[MultipartFile, ...] = ()
    form_fields: tuple[Header, ...] = ()
    boundary: str | None = None
    basic_auth: tuple[str, str] | None = field(default=None, repr=False)
    response_mode: ResponseMode = ResponseMode.TEXT

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _find_header(self.headers, name)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


# ─────────────────────────────────────────────────────────────────────────────
# Draft
# ─────────────────────────────────────────────────────────────────────────────

def _find_header(headers: tuple[Header, ...], name: str) -> str | None:
    lname = name.lower()
    return next((v for k, v in headers if k.lower() == lname), None)


@dataclass(frozen=True, slots=True)
class RequestDraft:
    """In-progress descriptor. Every `with_*` returns a new draft."""
    method: str
    url: str
    timeout_ms: int
    params: tuple[tuple[str, QueryValue], ...] = ()
    headers: tuple[Header, ...] = ()
    encoding: BodyEncoding | None = None
    content: bytes | None = None
    files: tuple[MultipartFile, ...] = ()
    form_fields: tuple[Header, ...] = ()
    boundary: str | None = None
    basic_auth: tuple[str, str] | None = None
    response_mode: ResponseMode = ResponseMode.TEXT

    def with_header(self, name: str, value: str) -> RequestDraft:
        """Set a header, replacing any existing one regardless of case."""
        lname = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lname)
        return replace(self, headers=(*kept, (name, value)))

    def with_basic_auth(self, username: str, password: str) -> RequestDraft:
        return replace(self, basic_auth=(username, password))

    def finalize(self) -> TransportDescriptor:
        return TransportDescriptor(
            method=self.method,
            url=self.url,
            headers=self.headers,
            params=self.params,
            timeout_ms=self.timeout_ms,
            encoding=self.encoding,
            content=self.content,
            files=self.files,
            form_fields=self.form_fields,
            boundary=self.boundary,
            basic_auth=self.basic_auth,
            response_mode=self.response_mode,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Encoding helpers
# ─────────────────────────────────────────────────────────────────────────────

def _serialize(body: object) -> bytes:
    """Strings and bytes go out verbatim, everything else as compact JSON."""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _text_value(value: object) -> str:
    """Render a scalar the way form encoders on the web do (true/false/null)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _read_attachment(attachment: FileAttachment) -> MultipartFile:
    path = Path(attachment.path).expanduser().resolve()
    try:
        content = path.read_bytes()
    except OSError as e:
        raise AttachmentReadError(
            f"Failed to read attachment '{attachment.path}': {e.strerror or e}", str(path)
        ) from e
    return MultipartFile(
        field_name=attachment.field_name,
        filename=attachment.filename or path.name,
        content=content,
        mime_type=attachment.mime_type,
    )


def _multipart_fields(body: Mapping[str, object]) -> tuple[Header, ...]:
    """Text parts: the `fields` mapping plus any other top-level keys."""
    pairs: dict[str, str] = {}
    extra = body.get("fields")
    if isinstance(extra, Mapping):
        pairs.update((str(k), _text_value(v)) for k, v in extra.items())
    for key, value in body.items():
        if key not in ("files", "fields"):
            pairs[str(key)] = _text_value(value)
    return tuple(pairs.items())


def _boundary(files: tuple[MultipartFile, ...], fields: tuple[Header, ...]) -> str:
    """Derive the boundary from the parts so identical input encodes identically."""
    digest = hashlib.sha256()
    for part in files:
        for chunk in (part.field_name, part.filename, part.mime_type or ""):
            digest.update(chunk.encode("utf-8"))
            digest.update(b"\0")
        digest.update(part.content)
    for name, value in fields:
        digest.update(f"{name}\0{value}\0".encode("utf-8"))
    return f"restmcp-{digest.hexdigest()[:32]}"


# ─────────────────────────────────────────────────────────────────────────────
# Stages
# ─────────────────────────────────────────────────────────────────────────────

def _seed(spec: RequestSpec) -> RequestDraft:
    return RequestDraft(
        method=spec.method,
        url=spec.url,
        timeout_ms=spec.timeout_ms,
        params=tuple(spec.query_params.items()),
    )


def _with_defaults(draft: RequestDraft, spec: RequestSpec) -> RequestDraft:
    # Binary endpoints (image generation etc.) reject a strict JSON Accept
    if not any(k.lower() == "accept" for k in spec.headers):
        return draft.with_header("Accept", "*/*")
    return draft


def _with_body(draft: RequestDraft, spec: RequestSpec) -> RequestDraft:
    encoding = resolve_encoding(spec.body, spec.content_type)
    if encoding is None:
        return draft

    match encoding:
        case BodyEncoding.MULTIPART:
            files = tuple(_read_attachment(a) for a in spec.attachments)
            fields = _multipart_fields(spec.body)
            return replace(
                draft,
                encoding=encoding,
                files=files,
                form_fields=fields,
                boundary=_boundary(files, fields),
            )
        case BodyEncoding.FORM:
            pairs = [(str(k), _text_value(v)) for k, v in spec.body.items()]
            encoded = replace(draft, encoding=encoding, content=urlencode(pairs).encode("ascii"))
            return encoded.with_header("Content-Type", spec.content_type or FORM_CONTENT_TYPE)
        case BodyEncoding.JSON | BodyEncoding.RAW:
            encoded = replace(draft, encoding=encoding, content=_serialize(spec.body))
            return encoded.with_header("Content-Type", spec.content_type or JSON_CONTENT_TYPE)
        case _:
            assert_never(encoding)


def _with_caller_headers(draft: RequestDraft, spec: RequestSpec) -> RequestDraft:
    for name, value in spec.headers.items():
        draft = draft.with_header(name, value)
    # httpx would overwrite an explicit Authorization with the basic credentials
    if draft.basic_auth is not None and any(k.lower() == "authorization" for k in spec.headers):
        draft = replace(draft, basic_auth=None)
    return draft


def _with_boundary(draft: RequestDraft) -> RequestDraft:
    if draft.boundary is None:
        return draft
    return draft.with_header("Content-Type", f"{MULTIPART_CONTENT_TYPE}; boundary={draft.boundary}")


def _with_response_mode(draft: RequestDraft, spec: RequestSpec) -> RequestDraft:
    return replace(draft, response_mode=ResponseMode.BINARY) if spec.save_to else draft


def build_descriptor(spec: RequestSpec) -> TransportDescriptor:
    """Build the transport descriptor for a validated request.

    Total apart from local I/O: raises AttachmentReadError when a multipart
    attachment cannot be read.
    """
    draft = _seed(spec)
    draft = _with_defaults(draft, spec)
    draft = _with_body(draft, spec)
    draft = apply_auth(spec.auth, draft)
    draft = _with_caller_headers(draft, spec)
    draft = _with_boundary(draft)
    draft = _with_response_mode(draft, spec)
    return draft.finalize()
