import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Literal, TypeVar

import pytest

from json_schema_generator import (
    PLAIN_JSON,
    CircularDefinitionError,
    ConfigBuilder,
    CustomDefinition,
    CustomPropertyDefinition,
    DefinitionType,
    DuplicateDefinitionNameError,
    Option,
    SchemaGenerator,
    SchemaVersion,
    UnresolvedTypeVariable,
)
from json_schema_generator.config import DefinitionNamingStrategy

SCHEMA_2020_12 = "https://json-schema.org/draft/2020-12/schema"

T = TypeVar("T")


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Person:
    name: str
    home: Address
    work: Address | None = None
    tags: list[str] = field(default_factory=list)


@dataclass
class Tag:
    label: str


@dataclass
class Pair:
    first: Address
    second: Tag


@dataclass
class Node:
    value: int
    children: list["Node"]


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Solo(Enum):
    ONLY = "only"


@dataclass
class Paint:
    color: Color
    finish: Solo
    mode: Literal["matte", "gloss"]


@dataclass
class Box(Generic[T]):
    value: T


@dataclass
class Inventory:
    counts: dict[str, int]
    extra: dict


@dataclass
class Note:
    text: str | None = None


class Money:
    amount: int


@dataclass
class Invoice:
    total: Money
    paid: Money | None = None


@dataclass
class Position:
    coords: tuple[int, str]


@dataclass
class Loop:
    value: int


ADDRESS_SCHEMA = {
    "type": "object",
    "properties": {"city": {"type": "string"}, "street": {"type": "string"}},
    "required": ["city", "street"],
}


def plain_json(*options: Option) -> ConfigBuilder:
    return ConfigBuilder(SchemaVersion.DRAFT_2020_12, PLAIN_JSON).with_option(*options)


def generate(target, builder: ConfigBuilder | None = None, *additional):
    config = (builder or plain_json()).build()
    return SchemaGenerator(config).generate_schema(target, *additional)


class TestObjects:
    def test_single_dataclass(self):
        assert generate(Address) == {"$schema": SCHEMA_2020_12, **ADDRESS_SCHEMA}

    def test_shared_definition(self):
        schema = generate(Person)
        assert schema == {
            "$schema": SCHEMA_2020_12,
            "$defs": {"Address": ADDRESS_SCHEMA},
            "type": "object",
            "properties": {
                "home": {"$ref": "#/$defs/Address"},
                "name": {"type": "string"},
                "tags": {"default": [], "type": "array", "items": {"type": "string"}},
                "work": {"anyOf": [{"type": "null"}, {"$ref": "#/$defs/Address"}]},
            },
            "required": ["home", "name"],
        }

    def test_single_reference_inlined(self):
        schema = generate(Pair)
        assert "$defs" not in schema
        assert schema["properties"]["first"] == ADDRESS_SCHEMA
        assert schema["properties"]["second"] == {
            "type": "object",
            "properties": {"label": {"type": "string"}},
            "required": ["label"],
        }

    def test_nullable_simple_type(self):
        assert generate(Note)["properties"] == {"text": {"type": ["string", "null"]}}

    def test_nullable_as_alternative(self):
        schema = generate(Note, plain_json().without_option(Option.FLATTENED_OPTIONALS))
        assert schema["properties"]["text"] == {"anyOf": [{"type": "string"}, {"type": "null"}]}

    def test_recursive_type(self):
        assert generate(Node) == {
            "$schema": SCHEMA_2020_12,
            "type": "object",
            "properties": {
                "children": {"type": "array", "items": {"$ref": "#"}},
                "value": {"type": "integer"},
            },
            "required": ["children", "value"],
        }

    def test_property_order(self):
        schema = generate(Person)
        assert list(schema["properties"]) == ["home", "name", "tags", "work"]

    def test_deterministic(self):
        generator = SchemaGenerator(plain_json().build())
        first = json.dumps(generator.generate_schema(Person))
        second = json.dumps(generator.generate_schema(Person))
        assert first == second


class TestValues:
    def test_enums_and_literals(self):
        assert generate(Paint)["properties"] == {
            "color": {"type": "string", "enum": ["red", "green"]},
            "finish": {"type": "string", "const": "only"},
            "mode": {"type": "string", "enum": ["matte", "gloss"]},
        }

    def test_enum_keyword_for_single_value(self):
        schema = generate(Paint, plain_json(Option.ENUM_KEYWORD_FOR_SINGLE_VALUES))
        assert schema["properties"]["finish"] == {"type": "string", "enum": ["only"]}

    def test_const_unsupported_in_draft_4(self):
        schema = generate(Paint, ConfigBuilder(SchemaVersion.DRAFT_4, PLAIN_JSON))
        assert schema["$schema"] == "http://json-schema.org/draft-04/schema#"
        assert schema["properties"]["finish"] == {"type": "string", "enum": ["only"]}

    def test_maps(self):
        assert generate(Inventory)["properties"] == {
            "counts": {"type": "object", "additionalProperties": {"type": "integer"}},
            "extra": {"type": "object"},
        }

    def test_fixed_tuple_items(self):
        assert generate(Position)["properties"] == {
            "coords": {"type": "array", "items": {"anyOf": [{"type": "integer"}, {"type": "string"}]}},
        }

    def test_forbidden_additional_properties(self):
        schema = generate(Address, plain_json(Option.FORBIDDEN_ADDITIONAL_PROPERTIES_BY_DEFAULT))
        assert schema["additionalProperties"] is False
        assert "additionalProperties" not in schema["properties"]["city"]


class TestDefinitions:
    def test_definitions_for_all_objects(self):
        schema = generate(Pair, plain_json(Option.DEFINITIONS_FOR_ALL_OBJECTS))
        assert set(schema["$defs"]) == {"Address", "Tag"}
        assert schema["properties"]["first"] == {"$ref": "#/$defs/Address"}

    def test_full_documentation_defaults(self):
        schema = SchemaGenerator().generate_schema(Person)
        assert "$schema" not in schema
        assert "required" not in schema
        assert schema["$defs"] == {
            "Address": {
                "type": "object",
                "properties": {"city": {"type": "string"}, "street": {"type": "string"}},
            },
            "Address-nullable": {"anyOf": [{"type": "null"}, {"$ref": "#/$defs/Address"}]},
        }
        assert schema["properties"]["home"] == {"$ref": "#/$defs/Address"}
        assert schema["properties"]["work"] == {"$ref": "#/$defs/Address-nullable"}

    def test_definition_for_main_schema(self):
        schema = generate(Person, plain_json(Option.DEFINITION_FOR_MAIN_SCHEMA))
        assert schema["$ref"] == "#/$defs/Person"
        assert set(schema["$defs"]) == {"Address", "Person"}
        assert "properties" not in schema

    def test_additional_types(self):
        schema = generate(Person, plain_json(), Tag)
        assert set(schema["$defs"]) == {"Address", "Tag"}
        assert schema["$defs"]["Tag"]["required"] == ["label"]

    def test_draft_7_definitions(self):
        schema = generate(Person, ConfigBuilder(SchemaVersion.DRAFT_7, PLAIN_JSON))
        assert schema["$schema"] == "http://json-schema.org/draft-07/schema#"
        assert "Address" in schema["definitions"]
        assert schema["properties"]["home"] == {"$ref": "#/definitions/Address"}

    def test_inline_all_schemas(self):
        schema = generate(Person, plain_json(Option.INLINE_ALL_SCHEMAS))
        assert "$defs" not in schema
        assert schema["properties"]["home"] == ADDRESS_SCHEMA
        assert schema["properties"]["work"] == {**ADDRESS_SCHEMA, "type": ["object", "null"]}

    def test_inline_all_schemas_with_recursion(self):
        with pytest.raises(CircularDefinitionError):
            generate(Node, plain_json(Option.INLINE_ALL_SCHEMAS))

    def test_generic_type(self):
        schema = generate(Box[int])
        assert schema["properties"] == {"value": {"type": "integer"}}

    def test_unbound_type_variable(self):
        with pytest.raises(UnresolvedTypeVariable) as exc_info:
            generate(Box)
        assert exc_info.value.path == ["Box", "Box.value"]
        assert "Box -> Box.value" in str(exc_info.value)


class SameName(DefinitionNamingStrategy):
    def get_definition_name_for_key(self, key, context):
        return "Same"


class SameNameWithoutAdjustment(SameName):
    def adjust_duplicate_names(self, names, context):
        pass


class TestNaming:
    def test_duplicates_adjusted(self):
        builder = plain_json(Option.DEFINITIONS_FOR_ALL_OBJECTS)
        builder.for_types_in_general().with_definition_naming_strategy(SameName())
        schema = generate(Pair, builder)
        assert set(schema["$defs"]) == {"Same-2", "Same-3"}

    def test_duplicates_rejected(self):
        builder = plain_json(Option.DEFINITIONS_FOR_ALL_OBJECTS)
        builder.for_types_in_general().with_definition_naming_strategy(SameNameWithoutAdjustment())
        with pytest.raises(DuplicateDefinitionNameError):
            generate(Pair, builder)

    def test_generic_definition_names(self):
        @dataclass
        class Holder:
            first: Box[int]
            second: Box[int]

        schema = generate(Holder)
        assert set(schema["$defs"]) == {"Box(int)"}
        plain = generate(Holder, plain_json(Option.PLAIN_DEFINITION_KEYS))
        assert set(plain["$defs"]) == {"Box_int_"}


def money_definition(resolved, context):
    if resolved.erased_type is Money:
        return CustomDefinition({"type": "string", "pattern": "^\\d+\\.\\d{2}$"}, DefinitionType.INLINE)
    return None


class CountingProvider:
    """Provider without opinion that counts its calls per generation run"""

    def __init__(self):
        self.calls = 0
        self.resets = 0

    def __call__(self, resolved, context):
        self.calls += 1
        return None

    def reset_after_schema_generation_finished(self):
        self.calls = 0
        self.resets += 1


class TestCustomDefinitions:
    def test_inline_custom_definition(self):
        builder = plain_json()
        builder.for_types_in_general().with_custom_definition_provider(money_definition)
        schema = generate(Invoice, builder)
        assert schema["properties"] == {
            "paid": {"type": ["string", "null"], "pattern": "^\\d+\\.\\d{2}$"},
            "total": {"type": "string", "pattern": "^\\d+\\.\\d{2}$"},
        }

    def test_always_referenced_definition(self):
        def tag_definition(resolved, context):
            if resolved.erased_type is Tag:
                return CustomDefinition({"type": "object", "description": "custom"}, DefinitionType.ALWAYS_REF)
            return None

        builder = plain_json()
        builder.for_types_in_general().with_custom_definition_provider(tag_definition)
        schema = generate(Pair, builder)
        assert schema["$defs"] == {"Tag": {"type": "object", "description": "custom"}}
        assert schema["properties"]["second"] == {"$ref": "#/$defs/Tag"}
        assert schema["properties"]["first"] == ADDRESS_SCHEMA

    def test_standard_definition_extended(self):
        def described_address(resolved, context):
            if resolved.erased_type is not Address:
                return None
            definition = context.create_standard_definition(resolved, described_address)
            definition["description"] = "extended"
            return CustomDefinition(definition)

        builder = plain_json()
        builder.for_types_in_general().with_custom_definition_provider(described_address)
        schema = generate(Person, builder)
        assert schema["$defs"]["Address"] == {**ADDRESS_SCHEMA, "description": "extended"}

    def test_custom_property_definition(self):
        def email_street(member, context):
            if member.declared_name == "street":
                return CustomPropertyDefinition({"type": "string", "format": "email"})
            return None

        builder = plain_json()
        builder.for_fields().with_custom_definition_provider(email_street)
        schema = generate(Address, builder)
        assert schema["properties"]["street"] == {"type": "string", "format": "email"}
        assert schema["properties"]["city"] == {"type": "string"}

    def test_reset_after_each_run(self):
        provider = CountingProvider()
        builder = plain_json()
        builder.for_types_in_general().with_custom_definition_provider(provider)
        generator = SchemaGenerator(builder.build())
        generator.generate_schema(Person)
        generator.generate_schema(Address)
        assert provider.resets == 2
        assert provider.calls == 0

    def test_provider_defining_its_own_type(self):
        def looping_definition(resolved, context):
            if resolved.erased_type is Loop:
                return CustomDefinition(context.create_definition(resolved))
            return None

        builder = plain_json()
        builder.for_types_in_general().with_custom_definition_provider(looping_definition)
        with pytest.raises(CircularDefinitionError) as exc_info:
            generate(Loop, builder)
        assert "Loop -> Loop" in str(exc_info.value)


class TestMultipleSchemaBuilder:
    def test_shared_definitions(self):
        builder = SchemaGenerator(plain_json().build()).build_multiple_schema_definitions()
        person = builder.create_schema_reference(Person)
        address = builder.create_schema_reference(Address)
        definitions = builder.collect_definitions("components/schemas")
        assert definitions == {"Address": ADDRESS_SCHEMA}
        assert address == {"$ref": "#/components/schemas/Address"}
        assert person["properties"]["home"] == {"$ref": "#/components/schemas/Address"}

    def test_single_use(self):
        builder = SchemaGenerator(plain_json().build()).build_multiple_schema_definitions()
        builder.create_schema_reference(Address)
        builder.collect_definitions("components/schemas")
        with pytest.raises(RuntimeError):
            builder.collect_definitions("components/schemas")
        with pytest.raises(RuntimeError):
            builder.create_schema_reference(Tag)


class TestLogging:
    def test_generation_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="json_schema_generator.generator"):
            generate(Address)
        assert "generating schema for" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__])
