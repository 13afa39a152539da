"""
Enums described by their allowed values instead of as objects.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..config import CustomDefinition, Module
from ..generation import to_json_value
from ..keywords import SchemaKeyword, SchemaType
from ..type_model import ResolvedType
from .simple_type import json_type

if TYPE_CHECKING:
    from ..config import ConfigBuilder
    from ..generation import GenerationContext


class EnumModule(Module):
    """Flattens Enum subclasses into an "enum" of their members' JSON values.

    Args:
        member_value: Maps an enum member to the value listed in the schema
    """

    def __init__(self, member_value: Callable[[enum.Enum], Any]):
        self.member_value = member_value

    @staticmethod
    def as_values() -> EnumModule:
        """Members are represented by their `.value`."""
        return EnumModule(lambda member: member.value)

    @staticmethod
    def as_names() -> EnumModule:
        """Members are represented by their `.name`."""
        return EnumModule(lambda member: member.name)

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_types_in_general().with_custom_definition_provider(self.provide_custom_definition)

    def provide_custom_definition(self, resolved: ResolvedType, context: GenerationContext) -> CustomDefinition | None:
        if not resolved.is_instance_of(enum.Enum):
            return None
        values = self.extract_values(resolved.erased_type)
        if not values:
            return None
        node: dict[str, Any] = {}
        present = {json_type(to_json_value(value)) for value in values}
        schema_types = [schema_type.value for schema_type in SchemaType if schema_type in present]
        if len(schema_types) == 1:
            node[context.keyword(SchemaKeyword.TAG_TYPE)] = schema_types[0]
        context.attribute_collector.set_enum(node, values)
        return CustomDefinition(node)

    def extract_values(self, enum_class: type[enum.Enum]) -> list[Any]:
        values = []
        for member in enum_class:
            value = self.member_value(member)
            if value not in values:
                values.append(value)
        return values
