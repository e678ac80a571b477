"""Validated request models.

The tool parameter models (`RestApiRequestParams`, `GraphQLRequestParams`)
are the agent-facing schemas: camelCase field names, defaults, and
validation. Each one converts into a `RequestSpec`, the frozen canonical
description the descriptor builder consumes.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .auth import (
    DEFAULT_API_KEY_HEADER,
    HEADER_NAME_PATTERN,
    AuthStrategy,
    AuthType,
    AuthVariant,
    NoAuth,
    auth_from_fields,
)
from .content_type import JSON_CONTENT_TYPE, has_files

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
QueryValue = str | int | float | bool

DEFAULT_TIMEOUT_MS = 30_000


def _check_url(v: object) -> object:
    """Require an absolute http(s) URL."""
    if not isinstance(v, str):
        return v
    v = v.strip()
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https"):
        raise ValueError("URL must start with http:// or https://")
    if not parsed.netloc:
        raise ValueError("URL must include a host")
    return v


# ─────────────────────────────────────────────────────────────────────────────
# Attachments & canonical request
# ─────────────────────────────────────────────────────────────────────────────

class FileAttachment(BaseModel):
    """One file for a multipart upload."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    path: Annotated[str, Field(min_length=1, description="Path of the file to upload")]
    field_name: str = Field(default="file", description="Multipart field name")
    filename: str | None = Field(default=None, description="Filename sent to the server")
    mime_type: str | None = Field(default=None, description="Content type of the part")


FileAttachments: TypeAdapter[list[FileAttachment]] = TypeAdapter(list[FileAttachment])


class RequestSpec(BaseModel):
    """Canonical description of one outbound call. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    url: str
    method: HttpMethod = "GET"
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    query_params: dict[str, QueryValue] = Field(default_factory=dict, repr=False)
    body: Any = Field(default=None, repr=False)
    content_type: str | None = None
    timeout_ms: PositiveInt = DEFAULT_TIMEOUT_MS
    auth: AuthStrategy = Field(default_factory=NoAuth)
    save_to: str | None = None

    @property
    def attachments(self) -> list[FileAttachment]:
        """File descriptors from a `{files: [...]}` body, else empty."""
        return FileAttachments.validate_python(self.body["files"]) if has_files(self.body) else []


# ─────────────────────────────────────────────────────────────────────────────
# Tool parameters
# ─────────────────────────────────────────────────────────────────────────────

class _ToolParams(BaseModel):
    """Fields shared by both tools: target, headers, timeout, credentials."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    url: str = Field(description="Absolute http(s) URL to call")
    headers: dict[str, str] | None = Field(default=None, description="Request headers; override defaults")
    query_params: dict[str, QueryValue] | None = Field(default=None, description="URL query parameters")
    timeout: PositiveInt = Field(default=DEFAULT_TIMEOUT_MS, description="Request timeout in milliseconds")
    auth_type: AuthType = Field(default="none", description="Authentication strategy")
    api_key: str | None = Field(default=None, description="API key for authType=api-key", repr=False)
    api_key_header: str = Field(
        default=DEFAULT_API_KEY_HEADER, pattern=HEADER_NAME_PATTERN, description="Header carrying the API key",
    )
    bearer_token: str | None = Field(default=None, description="Token for authType=bearer", repr=False)
    username: str | None = Field(default=None, description="Username for authType=basic")
    password: str | None = Field(default=None, description="Password for authType=basic", repr=False)

    @field_validator("url", mode="before")
    @classmethod
    def _validate_url(cls, v: object) -> object:
        return _check_url(v)

    @field_validator("auth_type", mode="before")
    @classmethod
    def _lower_auth_type(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v

    def auth(self) -> AuthVariant:
        return auth_from_fields(
            self.auth_type,
            api_key=self.api_key,
            api_key_header=self.api_key_header,
            bearer_token=self.bearer_token,
            username=self.username,
            password=self.password,
        )


class RestApiRequestParams(_ToolParams):
    """Arguments of the `rest_api_request` tool."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"url": "https://api.example.com/posts/1", "method": "GET"},
                {"url": "https://api.example.com/posts", "method": "POST",
                 "body": {"title": "x"}, "authType": "bearer", "bearerToken": "..."},
                {"url": "https://api.example.com/upload", "method": "POST",
                 "body": {"files": [{"path": "./report.pdf"}]}},
            ],
        },
    )

    method: HttpMethod = Field(default="GET", description="HTTP method")
    body: Any = Field(default=None, description="Request body: object, array, or raw string")
    content_type: str | None = Field(default=None, description="Explicit Content-Type; skips inference")
    save_response_to: str | None = Field(default=None, description="Write the raw response body to this path")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _validate_attachments(self) -> RestApiRequestParams:
        """Reject malformed file descriptors before anything is read."""
        if has_files(self.body):
            FileAttachments.validate_python(self.body["files"])
        return self

    def to_spec(self) -> RequestSpec:
        return RequestSpec(
            url=self.url,
            method=self.method,
            headers=dict(self.headers or {}),
            query_params=dict(self.query_params or {}),
            body=self.body,
            content_type=self.content_type,
            timeout_ms=self.timeout,
            auth=self.auth(),
            save_to=self.save_response_to,
        )


class GraphQLRequestParams(_ToolParams):
    """Arguments of the `rest_api_graphql` tool."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{
                "url": "https://countries.trevorblades.com/",
                "query": "query GetCountry($code: ID!) { country(code: $code) { name } }",
                "variables": {"code": "US"},
            }],
        },
    )

    query: Annotated[str, Field(min_length=1, description="GraphQL query or mutation document")]
    variables: dict[str, Any] | None = Field(default=None, description="Operation variables")
    operation_name: str | None = Field(default=None, description="Operation to run in a multi-operation document")
    http_method: Literal["GET", "POST"] = Field(default="POST", description="GET sends the query in the URL")

    @field_validator("http_method", mode="before")
    @classmethod
    def _upper_method(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    def to_spec(self) -> RequestSpec:
        """GET folds the operation into query params; POST sends a JSON body."""
        common = dict(
            url=self.url,
            headers=dict(self.headers or {}),
            timeout_ms=self.timeout,
            auth=self.auth(),
        )
        if self.http_method == "GET":
            params: dict[str, QueryValue] = {**(self.query_params or {}), "query": self.query}
            if self.variables is not None:
                params["variables"] = json.dumps(self.variables, separators=(",", ":"))
            if self.operation_name:
                params["operationName"] = self.operation_name
            return RequestSpec(method="GET", query_params=params, **common)

        body: dict[str, Any] = {"query": self.query}
        if self.variables is not None:
            body["variables"] = self.variables
        if self.operation_name:
            body["operationName"] = self.operation_name
        return RequestSpec(
            method="POST",
            query_params=dict(self.query_params or {}),
            body=body,
            content_type=JSON_CONTENT_TYPE,
            **common,
        )
