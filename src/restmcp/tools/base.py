"""Tool abstractions: ToolMetadata and the request-executing BaseTool.

A tool validates its arguments into a pydantic params model, turns them into
a `RequestSpec`, and runs the shared pipeline:

    build_descriptor -> execute_with_retry(transport.execute) -> normalize
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from restmcp.core.descriptor import build_descriptor
from restmcp.io.normalizer import normalize
from restmcp.runtime.retry import RetryPolicy, execute_with_retry

if TYPE_CHECKING:
    from collections.abc import Mapping

    from restmcp.core.models import RequestSpec
    from restmcp.io.envelope import Envelope
    from restmcp.runtime.transport import HttpTransport


class ToolMetadata(BaseModel):
    """Metadata describing a tool to MCP clients.

    Attributes:
        name: Unique identifier (snake_case, e.g., "rest_api_request")
        description: Usage guide shown to the agent for tool selection
        category: Grouping category
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="http")


TParams = TypeVar("TParams", bound=BaseModel)


class BaseTool(ABC, Generic[TParams]):
    """Abstract base for request tools.

    Subclasses must:
    - Define `metadata` class variable with ToolMetadata
    - Define `params_schema` class variable with the pydantic model type
    - Implement `to_spec(params)` returning the canonical RequestSpec

    Example:
        >>> tool = RestApiRequestTool(HttpTransport())
        >>> params = tool.validate({"url": "https://api.example.com/posts/1"})
        >>> envelope = await tool.arun(params)
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[BaseModel]]

    __slots__ = ("_transport", "_retry_policy")

    def __init__(self, transport: HttpTransport, retry_policy: RetryPolicy | None = None) -> None:
        self._transport = transport
        self._retry_policy = retry_policy or RetryPolicy()

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def validate(self, arguments: Mapping[str, Any]) -> TParams:
        """Validate raw arguments. Raises pydantic.ValidationError."""
        return self.params_schema.model_validate(arguments)  # type: ignore[return-value]

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the arguments, camelCase names."""
        schema = self.params_schema.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return schema

    @abstractmethod
    def to_spec(self, params: TParams) -> RequestSpec:
        ...

    async def arun(self, params: TParams) -> Envelope:
        """Execute one validated call.

        Network and HTTP failures come back as failure envelopes. Local I/O
        failures (unreadable attachment, unwritable save path) raise
        LocalIOError subclasses.
        """
        spec = self.to_spec(params)
        descriptor = await asyncio.to_thread(build_descriptor, spec)
        outcome = await execute_with_retry(
            lambda: self._transport.execute(descriptor),
            self._retry_policy,
            self.metadata.name,
            method=descriptor.method,
        )
        return await normalize(outcome, descriptor.response_mode, spec.save_to)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.metadata.name!r})"
