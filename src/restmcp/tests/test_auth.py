"""Tests for authentication strategies and the injector."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from restmcp.core.auth import (
    ApiKeyAuth,
    AuthStrategy,
    BasicAuth,
    BearerAuth,
    NoAuth,
    apply_auth,
    auth_from_fields,
)
from restmcp.core.descriptor import RequestDraft


@pytest.fixture
def draft() -> RequestDraft:
    return RequestDraft(method="GET", url="https://api.test/x", timeout_ms=1000).with_header("Accept", "*/*")


def test_none_is_a_no_op(draft: RequestDraft) -> None:
    assert apply_auth(NoAuth(), draft) == draft


def test_api_key_uses_default_header(draft: RequestDraft) -> None:
    out = apply_auth(ApiKeyAuth(key="k1"), draft)
    assert out.headers[-1] == ("X-API-Key", "k1")


def test_api_key_custom_header_replaces_case_insensitively(draft: RequestDraft) -> None:
    draft = draft.with_header("x-token", "old")
    out = apply_auth(ApiKeyAuth(key="k1", header_name="X-Token"), draft)
    assert [h for h in out.headers if h[0].lower() == "x-token"] == [("X-Token", "k1")]


def test_bearer(draft: RequestDraft) -> None:
    out = apply_auth(BearerAuth(token="t"), draft)
    assert dict(out.headers)["Authorization"] == "Bearer t"


def test_basic_goes_to_transport_not_headers(draft: RequestDraft) -> None:
    out = apply_auth(BasicAuth(username="u", password="p"), draft)
    assert out.basic_auth == ("u", "p")
    assert out.headers == draft.headers


@pytest.mark.parametrize(
    "auth",
    [
        ApiKeyAuth(),
        ApiKeyAuth(key=""),
        BearerAuth(),
        BearerAuth(token=""),
        BasicAuth(username="u"),
        BasicAuth(password="p"),
        BasicAuth(username="", password="p"),
    ],
)
def test_missing_credentials_send_unauthenticated(auth: object, draft: RequestDraft) -> None:
    assert apply_auth(auth, draft) == draft  # type: ignore[arg-type]


def test_injector_does_not_mutate_input(draft: RequestDraft) -> None:
    before = draft.headers
    apply_auth(BearerAuth(token="t"), draft)
    assert draft.headers == before


def test_discriminated_union_rejects_unknown_tag() -> None:
    adapter: TypeAdapter = TypeAdapter(AuthStrategy)
    assert isinstance(adapter.validate_python({"auth_type": "bearer", "token": "t"}), BearerAuth)
    with pytest.raises(ValidationError):
        adapter.validate_python({"auth_type": "oauth"})


def test_invalid_header_name_rejected() -> None:
    with pytest.raises(ValidationError):
        ApiKeyAuth(key="k", header_name="Bad Header")


def test_secrets_masked() -> None:
    auth = BasicAuth(username="u", password="hunter2")
    assert "hunter2" not in repr(auth)
    assert "hunter2" not in auth.model_dump_json()
    assert "s3cr3t" not in BearerAuth(token="s3cr3t").model_dump_json()


@pytest.mark.parametrize(
    ("auth_type", "expected"),
    [("none", NoAuth), ("api-key", ApiKeyAuth), ("bearer", BearerAuth), ("basic", BasicAuth)],
)
def test_auth_from_fields(auth_type: str, expected: type) -> None:
    auth = auth_from_fields(auth_type, api_key="k", bearer_token="t", username="u", password="p")  # type: ignore[arg-type]
    assert isinstance(auth, expected)
