# Custom exceptions for typeshape

from typing import List, Optional


class TypeShapeError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ContractViolationError(TypeShapeError, ValueError):
    """Raised when a caller breaks an API contract (missing sink, bad indentation, ...)."""
    pass


class TypeNotFoundError(TypeShapeError):
    """Raised when a type name cannot be resolved by any lookup strategy."""
    def __init__(self, type_name: str, strategies: Optional[List[str]] = None):
        self.type_name = type_name
        self.strategies = strategies or []
        message = f"Type '{type_name}' could not be resolved"
        if self.strategies:
            message += f" (tried: {', '.join(self.strategies)})"
        super().__init__(message)


class MetadataError(TypeShapeError):
    """Raised when a metadata provider fails to describe a type."""
    def __init__(self, type_name: str, message: str):
        self.type_name = type_name
        self.message = message
        super().__init__(f"Failed to describe {type_name}: {message}")


class SchemaError(MetadataError):
    """Raised for malformed or inconsistent schema documents."""
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(source, message)


class SinkClosedError(TypeShapeError):
    """Raised when writing to an output sink that has already been closed."""
    pass


class ConfigError(TypeShapeError):
    """Raised for configuration-related problems."""
    pass
