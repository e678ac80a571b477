"""Request construction: models, content-type inference, auth, descriptors."""

from .auth import (
    ApiKeyAuth,
    AuthStrategy,
    AuthType,
    AuthVariant,
    BasicAuth,
    BearerAuth,
    NoAuth,
    apply_auth,
    auth_from_fields,
)
from .content_type import BodyEncoding, infer_encoding, resolve_encoding
from .descriptor import MultipartFile, RequestDraft, ResponseMode, TransportDescriptor, build_descriptor
from .models import (
    FileAttachment,
    GraphQLRequestParams,
    HttpMethod,
    RequestSpec,
    RestApiRequestParams,
)

__all__ = [
    # Auth
    "AuthType",
    "AuthStrategy",
    "AuthVariant",
    "NoAuth",
    "ApiKeyAuth",
    "BearerAuth",
    "BasicAuth",
    "auth_from_fields",
    "apply_auth",
    # Encoding
    "BodyEncoding",
    "infer_encoding",
    "resolve_encoding",
    # Models
    "HttpMethod",
    "FileAttachment",
    "RequestSpec",
    "RestApiRequestParams",
    "GraphQLRequestParams",
    # Descriptor
    "ResponseMode",
    "MultipartFile",
    "RequestDraft",
    "TransportDescriptor",
    "build_descriptor",
]
