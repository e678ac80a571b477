"""`rest_api_request`: arbitrary HTTP calls with inferred body encoding."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from restmcp.core.models import RestApiRequestParams

from .base import BaseTool, ToolMetadata

if TYPE_CHECKING:
    from restmcp.core.models import RequestSpec

DESCRIPTION = (
    "Universal REST API request tool. Handles ALL HTTP methods (GET, POST, PUT, PATCH, DELETE) "
    "and automatically detects content types and response types. IMPORTANT: Before using, read "
    "the API documentation. Features: Supports JSON, form-urlencoded, multipart file uploads; "
    "Saves raw responses (e.g. binary downloads) if saveResponseTo provided; Handles auth; "
    "Automatic retry. "
    'Examples: GET {url, method:"GET"}; '
    'POST {url, method:"POST", body:{data}, bearerToken}; '
    'Upload {url, method:"POST", body:{files:[{path}]}}; '
    'Download {url, method:"POST", body:{prompt}, saveResponseTo, bearerToken}; '
    'Form {url, method:"POST", body:{grant_type}, contentType:"application/x-www-form-urlencoded"}'
)


class RestApiRequestTool(BaseTool[RestApiRequestParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="rest_api_request",
        description=DESCRIPTION,
        category="http",
    )
    params_schema: ClassVar[type[RestApiRequestParams]] = RestApiRequestParams

    def to_spec(self, params: RestApiRequestParams) -> RequestSpec:
        return params.to_spec()
