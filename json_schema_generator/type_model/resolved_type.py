"""
Canonical identity of a (possibly generic) Python type.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass, field, replace
from typing import Any

NONE_TYPE = type(None)
UNION = typing.Union
LITERAL = typing.Literal


@dataclass(frozen=True)
class ResolvedType:
    """A type with all generic parameters substituted.

    Two instances are equal iff their erasure, literal values and all type
    parameters (recursively) are equal. Declaration-site metadata is carried
    along but is not part of the identity, so a cached definition is shared
    between `str` and `Annotated[str, ...]`.
    """

    erased_type: Any  # class, or typing.Union / typing.Literal
    type_parameters: tuple[ResolvedType, ...] = ()
    literal_values: tuple[Any, ...] = ()  # only for typing.Literal
    metadata: tuple[Any, ...] = field(default=(), compare=False)  # Annotated[...] extras

    @property
    def is_union(self) -> bool:
        return self.erased_type is UNION

    @property
    def is_literal(self) -> bool:
        return self.erased_type is LITERAL

    @property
    def is_none(self) -> bool:
        return self.erased_type is NONE_TYPE

    @property
    def is_any(self) -> bool:
        return self.erased_type is object

    @property
    def has_parameter_metadata(self) -> bool:
        """Whether any (nested) type parameter carries `Annotated[...]` metadata."""
        return any(param.metadata or param.has_parameter_metadata for param in self.type_parameters)

    def is_instance_of(self, cls: type) -> bool:
        """Whether the erased type is a subclass of the given class."""
        return isinstance(self.erased_type, type) and issubclass(self.erased_type, cls)

    def with_metadata(self, *markers: Any) -> ResolvedType:
        if not markers:
            return self
        return replace(self, metadata=self.metadata + tuple(markers))

    def without_metadata(self) -> ResolvedType:
        return replace(self, metadata=()) if self.metadata else self

    def describe(self, qualified: bool = False) -> str:
        """Human readable description, e.g. `Box[list[int]]`."""
        if self.is_union:
            return " | ".join(param.describe(qualified) for param in self.type_parameters)
        if self.is_literal:
            return f"Literal[{', '.join(repr(value) for value in self.literal_values)}]"
        if self.is_none:
            return "None"
        name = _type_name(self.erased_type, qualified)
        if self.type_parameters:
            name += f"[{', '.join(param.describe(qualified) for param in self.type_parameters)}]"
        return name

    def __repr__(self) -> str:
        return self.describe()


def _type_name(erased_type: Any, qualified: bool) -> str:
    name = getattr(erased_type, "__qualname__", None) or getattr(erased_type, "__name__", None) or repr(erased_type)
    if not qualified:
        return name.rsplit(".", 1)[-1]
    module = getattr(erased_type, "__module__", None)
    if not module or module == "builtins":
        return name
    return f"{module}.{name}"
