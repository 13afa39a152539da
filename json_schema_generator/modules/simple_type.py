"""
Fixed schemas for types that are described by a single JSON type.
"""

from __future__ import annotations

import datetime
import decimal
import fractions
import ipaddress
import pathlib
import re
import uuid
from typing import TYPE_CHECKING, Any

from ..config import CustomDefinition, DefinitionType, Module
from ..config.config_parts import AttributeKind
from ..generation import to_json_value
from ..keywords import SchemaKeyword, SchemaType
from ..type_model import NONE_TYPE, ResolvedType, TypeScope

if TYPE_CHECKING:
    from ..config import ConfigBuilder
    from ..generation import GenerationContext

# None marks the empty schema (anything allowed)
_EMPTY_SCHEMA = None


class SimpleTypeModule(Module):
    """Maps classes to a fixed "type" (and optionally an OpenAPI "format").

    Use the factory methods for the standard sets; further classes can be
    added with the `with_*_type()` methods before the module is registered.
    """

    def __init__(self):
        self.fixed_types: dict[Any, SchemaType | None] = {}
        self.format_values: dict[Any, str] = {}

    @staticmethod
    def for_primitive_types() -> SimpleTypeModule:
        module = SimpleTypeModule()
        module.with_empty_schema(object)
        module.with_type(NONE_TYPE, SchemaType.NULL)
        module.with_string_type(str)
        module.with_string_type(bytes, "byte")
        module.with_boolean_type(bool)
        module.with_integer_type(int, "int64")
        module.with_number_type(float, "double")
        return module

    @staticmethod
    def for_primitive_and_additional_types() -> SimpleTypeModule:
        module = SimpleTypeModule.for_primitive_types()
        module.with_string_type(datetime.datetime, "date-time")
        module.with_string_type(datetime.date, "date")
        module.with_string_type(datetime.time, "time")
        module.with_string_type(datetime.timedelta, "duration")
        module.with_string_type(uuid.UUID, "uuid")
        module.with_string_type(pathlib.PurePath)
        module.with_string_type(pathlib.Path)
        module.with_string_type(ipaddress.IPv4Address, "ipv4")
        module.with_string_type(ipaddress.IPv6Address, "ipv6")
        module.with_string_type(re.Pattern, "regex")
        module.with_number_type(decimal.Decimal)
        module.with_number_type(fractions.Fraction)
        return module

    def with_type(self, cls: Any, schema_type: SchemaType | None, format_value: str | None = None) -> SimpleTypeModule:
        self.fixed_types[cls] = schema_type
        if format_value is not None:
            self.format_values[cls] = format_value
        return self

    def with_empty_schema(self, cls: Any) -> SimpleTypeModule:
        return self.with_type(cls, _EMPTY_SCHEMA)

    def with_string_type(self, cls: Any, format_value: str | None = None) -> SimpleTypeModule:
        return self.with_type(cls, SchemaType.STRING, format_value)

    def with_boolean_type(self, cls: Any) -> SimpleTypeModule:
        return self.with_type(cls, SchemaType.BOOLEAN)

    def with_integer_type(self, cls: Any, format_value: str | None = None) -> SimpleTypeModule:
        return self.with_type(cls, SchemaType.INTEGER, format_value)

    def with_number_type(self, cls: Any, format_value: str | None = None) -> SimpleTypeModule:
        return self.with_type(cls, SchemaType.NUMBER, format_value)

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        general = builder.for_types_in_general()
        general.with_resolver(AttributeKind.ADDITIONAL_PROPERTIES, self._resolve_additional_properties)
        general.with_resolver(AttributeKind.PATTERN_PROPERTIES, self._resolve_pattern_properties)
        general.with_custom_definition_provider(self.provide_custom_definition)

    def _is_empty_schema(self, resolved: ResolvedType) -> bool:
        return (
            not resolved.type_parameters
            and resolved.erased_type in self.fixed_types
            and self.fixed_types[resolved.erased_type] is _EMPTY_SCHEMA
        )

    def _resolve_additional_properties(self, scope: TypeScope) -> Any:
        # "object" leaves additionalProperties out
        return object if self._is_empty_schema(scope.type) else None

    def _resolve_pattern_properties(self, scope: TypeScope) -> dict | None:
        return {} if self._is_empty_schema(scope.type) else None

    def provide_custom_definition(self, resolved: ResolvedType, context: GenerationContext) -> CustomDefinition | None:
        if resolved.is_literal:
            return self._literal_definition(resolved, context)
        if resolved.type_parameters or resolved.erased_type not in self.fixed_types:
            return None
        schema_type = self.fixed_types[resolved.erased_type]
        node: dict[str, Any] = {}
        if schema_type is not _EMPTY_SCHEMA:
            node[context.keyword(SchemaKeyword.TAG_TYPE)] = schema_type.value
        if context.config.should_include_extra_open_api_format_values:
            format_value = self.format_values.get(resolved.erased_type)
            if format_value is not None:
                node[context.keyword(SchemaKeyword.TAG_FORMAT)] = format_value
        return CustomDefinition(node, DefinitionType.INLINE)

    def _literal_definition(self, resolved: ResolvedType, context: GenerationContext) -> CustomDefinition:
        node: dict[str, Any] = {}
        values = [to_json_value(value) for value in resolved.literal_values]
        present = {json_type(value) for value in values}
        schema_types = [schema_type.value for schema_type in SchemaType if schema_type in present]
        if len(schema_types) == 1:
            node[context.keyword(SchemaKeyword.TAG_TYPE)] = schema_types[0]
        elif schema_types:
            node[context.keyword(SchemaKeyword.TAG_TYPE)] = schema_types
        context.attribute_collector.set_enum(node, resolved.literal_values)
        return CustomDefinition(node, DefinitionType.INLINE)

    def __repr__(self) -> str:
        return f"SimpleTypeModule({len(self.fixed_types)} types)"


def json_type(value: Any) -> SchemaType | None:
    """JSON type of a plain value (None for values without a JSON representation)."""
    if value is None:
        return SchemaType.NULL
    if isinstance(value, bool):
        return SchemaType.BOOLEAN
    if isinstance(value, int):
        return SchemaType.INTEGER
    if isinstance(value, float):
        return SchemaType.NUMBER
    if isinstance(value, str):
        return SchemaType.STRING
    if isinstance(value, list):
        return SchemaType.ARRAY
    if isinstance(value, dict):
        return SchemaType.OBJECT
    return None
