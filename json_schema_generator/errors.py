"""
Error types raised by the schema generator.

Generation errors abort the whole call and carry the type/member path that
led to the failing declaration. Configuration errors are raised before any
generation work starts.
"""

from __future__ import annotations

from typing import Any


class SchemaGenerationError(Exception):
    """Raised when a schema cannot be generated.

    Attributes:
        path: Type and member names leading from the requested root type to
            the declaration that caused the failure (outermost first)
    """

    def __init__(self, message: str, path: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.path: list[str] = list(path) if path else []

    def add_context(self, element: str) -> None:
        """Prepend a path element while the error propagates outwards."""
        if not self.path or self.path[0] != element:
            self.path.insert(0, element)

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.message} (at {' -> '.join(self.path)})"


class UnresolvedTypeVariable(SchemaGenerationError):
    """Raised when a generic parameter has neither a binding nor a bound."""

    def __init__(self, type_variable: Any, declaring_type: Any = None):
        location = f" in {getattr(declaring_type, '__qualname__', declaring_type)}" if declaring_type else ""
        super().__init__(f"Cannot resolve type variable {type_variable!r}{location}: no binding and no declared bound")
        self.type_variable = type_variable
        self.declaring_type = declaring_type


class CircularDefinitionError(SchemaGenerationError):
    """Raised when a definition depends on itself without going through a cache hit.

    Attributes:
        chain: Descriptions of the definitions in progress, from the outermost
            to the one that was requested again
    """

    def __init__(self, chain: list[str]):
        super().__init__(f"Definition cannot be fulfilled due to a circular reference: {' -> '.join(chain)}")
        self.chain = chain


class DuplicateDefinitionNameError(SchemaGenerationError):
    """Raised when the naming strategy produces the same key for different definitions."""

    pass


class ConfigurationError(Exception):
    """Raised for invalid generator configuration.

    This can happen when:
    - An option, preset or module name is unknown
    - A requested type name cannot be imported
    - A config file contains unsupported values
    """

    pass
