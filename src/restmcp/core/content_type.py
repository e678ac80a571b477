"""Body encoding resolution.

`infer_encoding` guesses how an untyped body should go over the wire when the
caller gave no content-type. The form-urlencoded rule is a heuristic: any flat
scalar mapping with an underscored key (or a known OAuth field) is treated as
a form post, which also catches snake_case JSON payloads. Callers that need a
specific encoding pass an explicit content-type, which skips inference.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class BodyEncoding(StrEnum):
    JSON = "json"
    FORM = "form-urlencoded"
    MULTIPART = "multipart"
    RAW = "raw"


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
JSON_CONTENT_TYPE = "application/json"

# OAuth2 token-endpoint fields (RFC 6749, RFC 7636)
OAUTH_FORM_FIELDS: frozenset[str] = frozenset({
    "grant_type",
    "client_id",
    "client_secret",
    "refresh_token",
    "redirect_uri",
    "code_verifier",
})

_SCALARS = (str, int, float, bool, type(None))


def has_files(body: object) -> bool:
    """Whether body is a mapping with a `files` list."""
    return isinstance(body, Mapping) and isinstance(body.get("files"), list)


def _looks_like_form(body: Mapping[object, object]) -> bool:
    if not body or not all(isinstance(v, _SCALARS) for v in body.values()):
        return False
    return any(isinstance(k, str) and ("_" in k or k in OAUTH_FORM_FIELDS) for k in body)


def infer_encoding(body: object) -> BodyEncoding | None:
    """Infer wire encoding from body shape. First match wins.

    Returns None when there is no body to encode.
    """
    if body is None:
        return None
    if has_files(body):
        return BodyEncoding.MULTIPART
    if isinstance(body, Mapping) and _looks_like_form(body):
        return BodyEncoding.FORM
    return BodyEncoding.JSON


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def resolve_encoding(body: object, content_type: str | None) -> BodyEncoding | None:
    """Resolve encoding, letting an explicit content-type bypass inference."""
    if body is None:
        return None
    if not content_type:
        return infer_encoding(body)

    media = _media_type(content_type)
    if media == MULTIPART_CONTENT_TYPE and has_files(body):
        return BodyEncoding.MULTIPART
    if media == FORM_CONTENT_TYPE and isinstance(body, Mapping):
        return BodyEncoding.FORM
    if media == JSON_CONTENT_TYPE or media.endswith("+json"):
        return BodyEncoding.JSON
    return BodyEncoding.RAW
