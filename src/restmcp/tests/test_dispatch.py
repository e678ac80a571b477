"""End-to-end tool calls through the registry with stubbed HTTP."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest
from conftest import SleepRecorder, StubServer, make_registry

from restmcp.core.descriptor import build_descriptor
from restmcp.foundation.config import RestMcpSettings, RetrySettings
from restmcp.registry import ToolRegistry, default_registry, dispatch
from restmcp.runtime.retry import RetryPolicy, execute_with_retry
from restmcp.tools import GraphQLTool, RestApiRequestTool


# ═════════════════════════════════════════════════════════════════════════════
# Scenarios
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_get_returns_success_envelope() -> None:
    stub = StubServer(httpx.Response(200, json={"id": 1}))
    envelope = await dispatch(make_registry(stub), "rest_api_request",
                              {"url": "https://api.test/posts/1", "method": "GET"})

    assert envelope["status"] == 200
    assert envelope["statusText"] == "OK"
    assert envelope["headers"]["content-type"] == "application/json"
    assert envelope["data"] == {"id": 1}
    assert "error" not in envelope


@pytest.mark.asyncio
async def test_post_with_bearer_token() -> None:
    stub = StubServer(httpx.Response(201, json={"id": 2}))
    envelope = await dispatch(make_registry(stub), "rest_api_request", {
        "url": "https://api.test/posts", "method": "POST", "body": {"title": "x"},
        "authType": "bearer", "bearerToken": "t",
    })

    assert envelope["status"] == 201
    assert stub.last.headers["authorization"] == "Bearer t"
    assert json.loads(stub.last.content) == {"title": "x"}
    assert stub.last.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_three_5xx_then_success(sleep: SleepRecorder) -> None:
    stub = StubServer(httpx.Response(500), httpx.Response(500), httpx.Response(500), httpx.Response(200, json={"ok": True}))
    transport = stub.transport()
    params = RestApiRequestTool.params_schema.model_validate({"url": "https://api.test/flaky"})
    descriptor = build_descriptor(params.to_spec())

    outcome = await execute_with_retry(
        lambda: transport.execute(descriptor), RetryPolicy(max_retries=3), "rest_api_request", sleep=sleep,
    )

    assert outcome.unwrap().status == 200
    assert stub.calls == 4
    assert sleep.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_three_5xx_then_success_through_dispatch() -> None:
    stub = StubServer(httpx.Response(500), httpx.Response(500), httpx.Response(500), httpx.Response(200, json={"ok": True}))
    envelope = await dispatch(make_registry(stub), "rest_api_request", {"url": "https://api.test/flaky"})
    assert envelope["data"] == {"ok": True}
    assert stub.calls == 4


@pytest.mark.asyncio
async def test_graphql_get_sends_query_in_url() -> None:
    stub = StubServer(httpx.Response(200, json={"data": {"a": 1}}))
    envelope = await dispatch(make_registry(stub), "rest_api_graphql",
                              {"url": "https://gql.test/graphql", "query": "{ a }", "httpMethod": "GET"})

    assert envelope["data"] == {"data": {"a": 1}}
    assert stub.last.method == "GET"
    assert stub.last.url.params["query"] == "{ a }"
    assert stub.last.content == b""


@pytest.mark.asyncio
async def test_graphql_post_sends_json() -> None:
    stub = StubServer(httpx.Response(200, json={"data": {}}))
    await dispatch(make_registry(stub), "rest_api_graphql", {
        "url": "https://gql.test/graphql", "query": "mutation { m }", "variables": {"x": 1},
        "authType": "api-key", "apiKey": "k",
    })

    assert stub.last.method == "POST"
    assert json.loads(stub.last.content) == {"query": "mutation { m }", "variables": {"x": 1}}
    assert stub.last.headers["x-api-key"] == "k"
    assert stub.last.headers["accept"] == "*/*"


# ═════════════════════════════════════════════════════════════════════════════
# Failures
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_client_error_envelope_not_retried() -> None:
    stub = StubServer(httpx.Response(404, json={"detail": "nope"}))
    envelope = await dispatch(make_registry(stub), "rest_api_request", {"url": "https://api.test/missing"})

    assert envelope == {
        "error": True,
        "message": "Request failed with status code 404",
        "status": 404,
        "statusText": "Not Found",
        "headers": envelope["headers"],
        "data": {"detail": "nope"},
    }
    assert stub.calls == 1


@pytest.mark.asyncio
async def test_network_failure_envelope() -> None:
    stub = StubServer(httpx.ConnectError("connection refused"))
    envelope = await dispatch(make_registry(stub), "rest_api_request", {"url": "https://api.test"})
    assert envelope == {"error": True, "message": "connection refused"}
    assert stub.calls == 4


@pytest.mark.asyncio
async def test_unknown_tool() -> None:
    stub = StubServer()
    envelope = await dispatch(make_registry(stub), "rest_api_teleport", {"url": "https://api.test"})
    assert envelope == {"error": True, "message": "Unknown tool: rest_api_teleport"}
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_validation_error_names_field() -> None:
    stub = StubServer()
    envelope = await dispatch(make_registry(stub), "rest_api_request", {"url": "ftp://x", "method": "TRACE"})

    assert envelope["error"] is True
    assert envelope["message"].startswith("Invalid arguments for rest_api_request: ")
    assert "url: " in envelope["message"] and "method: " in envelope["message"]
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_bad_api_key_header_is_a_validation_error(caplog: pytest.LogCaptureFixture) -> None:
    stub = StubServer()
    with caplog.at_level(logging.INFO, logger="restmcp.dispatch"):
        envelope = await dispatch(make_registry(stub), "rest_api_request", {
            "url": "https://api.test", "authType": "api-key", "apiKey": "k", "apiKeyHeader": "Bad Header",
        })

    assert envelope["error"] is True
    assert envelope["message"].startswith("Invalid arguments for rest_api_request: apiKeyHeader: ")
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_multipart_fields_without_files() -> None:
    stub = StubServer()
    await dispatch(make_registry(stub), "rest_api_request", {
        "url": "https://api.test/upload", "method": "POST", "body": {"files": [], "note": "x"},
    })
    assert stub.last.headers["content-type"].startswith("multipart/form-data; boundary=")
    assert b'name="note"' in stub.last.content
    assert b"note=x" not in stub.last.content


@pytest.mark.asyncio
async def test_missing_arguments() -> None:
    envelope = await dispatch(make_registry(StubServer()), "rest_api_graphql", None)
    assert envelope["error"] is True
    assert "url: Field required" in envelope["message"]
    assert "query: Field required" in envelope["message"]


@pytest.mark.asyncio
async def test_unreadable_attachment(tmp_path: Path) -> None:
    stub = StubServer()
    envelope = await dispatch(make_registry(stub), "rest_api_request", {
        "url": "https://api.test/upload", "method": "POST",
        "body": {"files": [{"path": str(tmp_path / "absent.pdf")}]},
    })
    assert envelope["error"] is True
    assert "absent.pdf" in envelope["message"]
    assert stub.calls == 0


@pytest.mark.asyncio
async def test_save_response_to_disk(tmp_path: Path) -> None:
    payload = b"\x00\x01binary\xff"
    stub = StubServer(httpx.Response(200, content=payload, headers={"Content-Type": "application/octet-stream"}))
    target = tmp_path / "download.bin"

    envelope = await dispatch(make_registry(stub), "rest_api_request", {
        "url": "https://api.test/render", "method": "POST", "body": {"prompt": "cat"},
        "saveResponseTo": str(target),
    })

    assert envelope["savedTo"] == str(target.resolve())
    assert envelope["size"] == len(payload)
    assert target.read_bytes() == payload
    assert "data" not in envelope


@pytest.mark.asyncio
async def test_save_failure_becomes_envelope(tmp_path: Path) -> None:
    stub = StubServer(httpx.Response(200, content=b"x"))
    envelope = await dispatch(make_registry(stub), "rest_api_request", {
        "url": "https://api.test/render", "saveResponseTo": str(tmp_path / "no" / "such" / "dir.bin"),
    })
    assert envelope["error"] is True
    assert "Failed to save response" in envelope["message"]


@pytest.mark.asyncio
async def test_unexpected_exception_is_logged_and_enveloped(caplog: pytest.LogCaptureFixture) -> None:
    def explode(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("handler blew up")

    stub = StubServer(explode)
    with caplog.at_level(logging.ERROR, logger="restmcp.dispatch"):
        envelope = await dispatch(make_registry(stub), "rest_api_request", {"url": "https://api.test"})

    assert envelope == {"error": True, "message": "handler blew up"}
    assert any(r.exc_info for r in caplog.records if r.name == "restmcp.dispatch")


# ═════════════════════════════════════════════════════════════════════════════
# Registry
# ═════════════════════════════════════════════════════════════════════════════


def test_default_registry_contents() -> None:
    registry = default_registry(RestMcpSettings())
    assert set(registry.tools) == {"rest_api_request", "rest_api_graphql"}
    assert len(registry) == 2
    assert isinstance(registry["rest_api_graphql"], GraphQLTool)
    assert registry.get("nope") is None


def test_registry_is_read_only() -> None:
    registry = default_registry(RestMcpSettings())
    with pytest.raises(TypeError):
        registry.tools["extra"] = registry["rest_api_request"]  # type: ignore[index]


def test_duplicate_names_rejected() -> None:
    transport = StubServer().transport()
    with pytest.raises(ValueError, match="registered twice"):
        ToolRegistry([RestApiRequestTool(transport), RestApiRequestTool(transport)])


def test_registry_uses_settings_for_retry() -> None:
    settings = RestMcpSettings(retry=RetrySettings(max_retries=1, idempotent_only=True))
    tool = default_registry(settings)["rest_api_request"]
    assert tool.retry_policy.max_retries == 1
    assert tool.retry_policy.idempotent_only


def test_input_schema_uses_camel_case() -> None:
    schema = default_registry(RestMcpSettings())["rest_api_request"].input_schema()
    props = schema["properties"]
    assert {"url", "method", "queryParams", "saveResponseTo", "authType", "bearerToken"} <= set(props)
    assert schema["required"] == ["url"]
    assert props["authType"]["enum"] == ["none", "api-key", "bearer", "basic"]
