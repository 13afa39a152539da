"""
Raw member descriptions collected from a class hierarchy.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .resolved_type import ResolvedType

MISSING = dataclasses.MISSING


class MethodKind(str, Enum):
    """How an argument-free method is declared."""

    PROPERTY = "property"
    INSTANCE = "instance"
    STATIC = "static"
    CLASS = "class"


@dataclass(frozen=True)
class RawField:
    """An annotated class attribute."""

    name: str
    declaring_class: type
    hint: Any = field(compare=False)  # ClassVar/Final wrappers already stripped
    is_static: bool = field(default=False, compare=False)  # ClassVar, or Final with a class-level value
    is_final: bool = field(default=False, compare=False)
    default: Any = field(default_factory=lambda: MISSING, compare=False)  # class-level value, if any
    dataclass_field: dataclasses.Field | None = field(default=None, compare=False)

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    @property
    def has_default(self) -> bool:
        if self.default is not MISSING:
            return True
        if self.dataclass_field is None:
            return False
        return self.dataclass_field.default is not MISSING or self.dataclass_field.default_factory is not MISSING


@dataclass(frozen=True)
class RawMethod:
    """A public method that can be called without arguments, or a property."""

    name: str
    declaring_class: type
    kind: MethodKind
    return_hint: Any = field(compare=False)
    function: Any = field(default=None, compare=False)

    @property
    def is_static(self) -> bool:
        return self.kind in (MethodKind.STATIC, MethodKind.CLASS)

    @property
    def is_property(self) -> bool:
        return self.kind == MethodKind.PROPERTY

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")


@dataclass
class ResolvedTypeWithMembers:
    """A resolved type together with the members declared along its hierarchy.

    Attributes:
        type: The resolved type the members belong to
        member_fields: Instance fields, most derived declaration first
        static_fields: ClassVar/Final class attributes
        member_methods: Instance methods and properties
        static_methods: Static and class methods
        bindings: Positional type arguments per class of the hierarchy (None = unbound)
    """

    type: ResolvedType
    member_fields: list[RawField] = field(default_factory=list)
    static_fields: list[RawField] = field(default_factory=list)
    member_methods: list[RawMethod] = field(default_factory=list)
    static_methods: list[RawMethod] = field(default_factory=list)
    bindings: dict[type, tuple[ResolvedType | None, ...]] = field(default_factory=dict)

    def all_fields(self) -> list[RawField]:
        return self.member_fields + self.static_fields

    def all_methods(self) -> list[RawMethod]:
        return self.member_methods + self.static_methods

    def find_method(self, name: str) -> RawMethod | None:
        for method in self.all_methods():
            if method.name == name:
                return method
        return None

    def find_field(self, name: str) -> RawField | None:
        for raw_field in self.all_fields():
            if raw_field.name == name:
                return raw_field
        return None
