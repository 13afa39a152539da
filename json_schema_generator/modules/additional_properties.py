"""
The "additionalProperties" policy of object schemas.

Resolvers return a type: `NoneType` forbids additional properties (false),
`object` leaves the keyword out, any other type is referenced as the schema
of the additional property values.
"""

from __future__ import annotations

import collections.abc
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..config import Module
from ..config.config_parts import AttributeKind
from ..type_model import NONE_TYPE, ResolvedType, TypeScope

if TYPE_CHECKING:
    from ..config import ConfigBuilder


def map_value_type(scope: TypeScope) -> ResolvedType | type | None:
    """The value type of a mapping; `object` for a mapping without type arguments."""
    if not scope.is_map_type():
        return None
    value_type = scope.get_type_parameter_for(collections.abc.Mapping, 1)
    return object if value_type is None else value_type


def forbidden_unless_container(scope: TypeScope) -> Any:
    if scope.is_container_type():
        return None
    return NONE_TYPE


class AdditionalPropertiesModule(Module):
    """Registers a type-level additionalProperties resolver.

    Args:
        resolver: Returns the policy type for a type scope, or None for no opinion
    """

    def __init__(self, resolver: Callable[[TypeScope], Any]):
        self.resolver = resolver

    @staticmethod
    def for_map_values() -> AdditionalPropertiesModule:
        """Mappings allow additional properties of their value type."""
        return AdditionalPropertiesModule(map_value_type)

    @staticmethod
    def forbidden_for_all_objects() -> AdditionalPropertiesModule:
        """Every object schema forbids additional properties."""
        return AdditionalPropertiesModule(forbidden_unless_container)

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_types_in_general().with_resolver(AttributeKind.ADDITIONAL_PROPERTIES, self.resolver)

    def __repr__(self) -> str:
        return f"AdditionalPropertiesModule({self.resolver.__name__})"
