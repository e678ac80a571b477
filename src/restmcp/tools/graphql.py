"""`rest_api_graphql`: GraphQL queries and mutations over GET or POST."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from restmcp.core.models import GraphQLRequestParams

from .base import BaseTool, ToolMetadata

if TYPE_CHECKING:
    from restmcp.core.models import RequestSpec

DESCRIPTION = (
    "Execute GraphQL queries and mutations. IMPORTANT: Read API docs first. Supports queries, "
    "mutations, variables, operation names, GET/POST methods, all auth types. "
    "Example: {url, query, variables, bearerToken}"
)


class GraphQLTool(BaseTool[GraphQLRequestParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="rest_api_graphql",
        description=DESCRIPTION,
        category="graphql",
    )
    params_schema: ClassVar[type[GraphQLRequestParams]] = GraphQLRequestParams

    def to_spec(self, params: GraphQLRequestParams) -> RequestSpec:
        return params.to_spec()
