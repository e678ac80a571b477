from .registry import ToolRegistry, default_registry, dispatch, format_validation_error

__all__ = ["ToolRegistry", "default_registry", "dispatch", "format_validation_error"]
