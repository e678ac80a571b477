"""The two request tools and their shared base."""

from .base import BaseTool, ToolMetadata
from .graphql import GraphQLTool
from .rest import RestApiRequestTool

__all__ = ["BaseTool", "ToolMetadata", "RestApiRequestTool", "GraphQLTool"]
