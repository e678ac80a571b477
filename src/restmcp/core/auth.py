"""Authentication strategies and the injector that applies them.

The strategy set is closed: `AuthStrategy` is a discriminated union over the
four variants below and `apply_auth` matches on it exhaustively. Credentials
are optional on purpose; a bearer strategy without a token sends the request
unauthenticated and lets the agent read the resulting 401.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal, assert_never

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_serializer

if TYPE_CHECKING:
    from .descriptor import RequestDraft

AuthType = Literal["none", "api-key", "bearer", "basic"]

DEFAULT_API_KEY_HEADER = "X-API-Key"
# RFC 9110 token characters
HEADER_NAME_PATTERN = r"^[A-Za-z0-9!#$%&'*+.^_`|~-]+$"


def _mask(v: SecretStr | None) -> str | None:
    return None if v is None else "***"


# ─────────────────────────────────────────────────────────────────────────────
# Strategies
# ─────────────────────────────────────────────────────────────────────────────

class NoAuth(BaseModel):
    """No authentication."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")
    auth_type: Literal["none"] = "none"


class ApiKeyAuth(BaseModel):
    """API key sent in a request header."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
    )
    auth_type: Literal["api-key"] = "api-key"
    key: SecretStr | None = None
    header_name: Annotated[str, Field(
        default=DEFAULT_API_KEY_HEADER,
        pattern=HEADER_NAME_PATTERN,
        description="HTTP header name for the key",
    )]

    @field_serializer("key", when_used="json")
    def _mask_key(self, v: SecretStr | None) -> str | None:
        return _mask(v)


class BearerAuth(BaseModel):
    """Bearer token authentication (OAuth2, JWT)."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")
    auth_type: Literal["bearer"] = "bearer"
    token: SecretStr | None = None

    @field_serializer("token", when_used="json")
    def _mask_token(self, v: SecretStr | None) -> str | None:
        return _mask(v)


class BasicAuth(BaseModel):
    """HTTP Basic authentication, encoded by the transport."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")
    auth_type: Literal["basic"] = "basic"
    username: str | None = None
    password: SecretStr | None = None

    @field_serializer("password", when_used="json")
    def _mask_password(self, v: SecretStr | None) -> str | None:
        return _mask(v)


AuthVariant = NoAuth | ApiKeyAuth | BearerAuth | BasicAuth

AuthStrategy = Annotated[
    AuthVariant,
    Field(discriminator="auth_type"),
]


def auth_from_fields(
    auth_type: AuthType,
    *,
    api_key: str | None = None,
    api_key_header: str = DEFAULT_API_KEY_HEADER,
    bearer_token: str | None = None,
    username: str | None = None,
    password: str | None = None,
) -> AuthVariant:
    """Build a strategy from the flat credential fields tools accept."""
    match auth_type:
        case "none":
            return NoAuth()
        case "api-key":
            return ApiKeyAuth(key=api_key, header_name=api_key_header)
        case "bearer":
            return BearerAuth(token=bearer_token)
        case "basic":
            return BasicAuth(username=username, password=password)
        case _:
            assert_never(auth_type)


# ─────────────────────────────────────────────────────────────────────────────
# Injector
# ─────────────────────────────────────────────────────────────────────────────

def apply_auth(auth: AuthVariant, draft: RequestDraft) -> RequestDraft:
    """Return a new draft carrying the strategy's credentials.

    Only headers and transport-level credentials change; the body is never
    touched. Basic credentials are handed to the transport rather than
    base64-encoded here.
    """
    match auth:
        case NoAuth():
            return draft
        case ApiKeyAuth(key=key, header_name=header_name):
            if key is not None and key.get_secret_value():
                return draft.with_header(header_name, key.get_secret_value())
            return draft
        case BearerAuth(token=token):
            if token is not None and token.get_secret_value():
                return draft.with_header("Authorization", f"Bearer {token.get_secret_value()}")
            return draft
        case BasicAuth(username=username, password=password):
            if username and password is not None and password.get_secret_value():
                return draft.with_basic_auth(username, password.get_secret_value())
            return draft
        case _:
            assert_never(auth)
