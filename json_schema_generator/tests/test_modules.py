import datetime
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, ClassVar

import pytest

from json_schema_generator import PLAIN_JSON, ConfigBuilder, Option, SchemaGenerator, SchemaType, SchemaVersion
from json_schema_generator.markers import Description, Ignore, MaxLength, MinItems, Minimum, MinLength, PropertyName
from json_schema_generator.modules import (
    AnnotatedMetadataModule,
    FieldExclusionModule,
    MethodExclusionModule,
    SubclassResolver,
)
from json_schema_generator.modules.annotated_metadata import class_docstring
from json_schema_generator.modules.dataclass_fields import field_default, is_json_compatible, is_required_field
from json_schema_generator.modules.fields_from_methods import derive_field_name
from json_schema_generator.modules.simple_type import json_type
from json_schema_generator.modules.subclasses import concrete_subclasses
from json_schema_generator.type_model import TypeContext


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Shipment:
    origin: Annotated[Address, Description("Sender")]
    destination: Address


@dataclass
class Product:
    """A product in the catalog.

    Listed with its price.
    """

    name: Annotated[str, MinLength(1), Description("Product name")]
    price: Annotated[float, Minimum(0)]
    tags: Annotated[list[Annotated[str, MaxLength(10)]], MinItems(1)]
    sku: Annotated[str, PropertyName("SKU")]
    secret: Annotated[str, Ignore()] = ""


class Shape:
    pass


@dataclass
class Circle(Shape):
    radius: float


@dataclass
class Square(Shape):
    side: float


@dataclass
class Drawing:
    main: Shape


class Vehicle:
    pass


@dataclass
class Car(Vehicle):
    wheels: int


@dataclass
class Garage:
    vehicle: Vehicle


class Animal(ABC):
    @abstractmethod
    def sound(self) -> str:
        pass


class Mammal(Animal):
    pass


class Dog(Mammal):
    def sound(self) -> str:
        return "woof"


class Cat(Animal):
    def sound(self) -> str:
        return "meow"


@dataclass
class Basket:
    items: list[int]


@dataclass
class Settings:
    retries: int = 3
    tags: list[str] = field(default_factory=list)
    created: datetime.datetime = field(default_factory=datetime.datetime.now)
    label: str | None = None
    name: str = field(default="main", metadata={"description": "Configuration name"})


class Limits:
    VERSION: ClassVar[int] = 2
    _INTERNAL: ClassVar[str] = "x"
    name: str
    _secret: str

    def get_secret(self) -> str:
        return self._secret

    def is_empty(self) -> bool:
        return not self.name

    def clear(self) -> None:
        self.name = ""

    def describe(self) -> str:
        return self.name

    @property
    def size(self) -> int:
        return len(self.name)

    @staticmethod
    def default() -> "Limits":
        return Limits()


@dataclass
class Event:
    at: datetime.datetime
    id: uuid.UUID
    count: int


class Priority(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Ticket:
    priority: Priority
    reference: int | str
    history: list[int | str]


def plain_json(*options: Option) -> ConfigBuilder:
    return ConfigBuilder(SchemaVersion.DRAFT_2020_12, PLAIN_JSON).with_option(*options)


def generate(target, builder: ConfigBuilder):
    return SchemaGenerator(builder.build()).generate_schema(target)


def circle_schema():
    return {"type": "object", "properties": {"radius": {"type": "number"}}, "required": ["radius"]}


def square_schema():
    return {"type": "object", "properties": {"side": {"type": "number"}}, "required": ["side"]}


class TestSubclasses:
    def test_concrete_subclasses(self):
        assert concrete_subclasses(Shape) == [Circle, Square]

    def test_abstract_classes_skipped(self):
        assert concrete_subclasses(Animal) == [Dog, Cat]
        assert concrete_subclasses(Dog) == []

    def test_member_as_alternatives(self):
        schema = generate(Drawing, plain_json().with_module(SubclassResolver(Shape)))
        assert schema["properties"]["main"] == {"anyOf": [circle_schema(), square_schema()]}
        assert schema["required"] == ["main"]

    def test_root_as_alternatives(self):
        schema = generate(Shape, plain_json().with_module(SubclassResolver(Shape)))
        assert schema["anyOf"] == [circle_schema(), square_schema()]

    def test_single_subclass(self):
        schema = generate(Garage, plain_json().with_module(SubclassResolver(Vehicle)))
        assert schema["properties"]["vehicle"] == {
            "type": "object",
            "properties": {"wheels": {"type": "integer"}},
            "required": ["wheels"],
        }

    def test_unconfigured_base_untouched(self):
        resolver = SubclassResolver(Vehicle)
        assert resolver.resolve_subtypes(TypeContext().resolve(Shape), None) is None
        assert repr(resolver) == "SubclassResolver(Vehicle)"


class TestAnnotatedMetadata:
    def builder(self) -> ConfigBuilder:
        return plain_json().with_module(AnnotatedMetadataModule())

    def test_member_markers(self):
        schema = generate(Product, self.builder())
        assert schema["description"] == "A product in the catalog.\n\nListed with its price."
        assert schema["properties"] == {
            "SKU": {"type": "string"},
            "name": {"type": "string", "description": "Product name", "minLength": 1},
            "price": {"type": "number", "minimum": 0},
            "tags": {"minItems": 1, "type": "array", "items": {"type": "string", "maxLength": 10}},
        }
        assert schema["required"] == ["SKU", "name", "price", "tags"]

    def test_markers_next_to_reference(self):
        schema = generate(Shipment, self.builder())
        assert schema["properties"]["origin"] == {"$ref": "#/$defs/Address", "description": "Sender"}
        assert schema["properties"]["destination"] == {"$ref": "#/$defs/Address"}

    def test_docstrings_optional(self):
        schema = generate(Product, plain_json().with_module(AnnotatedMetadataModule(include_docstrings=False)))
        assert "description" not in schema

    def test_class_docstring(self):
        context = TypeContext()
        scope = context.create_type_scope(context.resolve(Product))
        assert class_docstring(scope).startswith("A product in the catalog.")
        assert class_docstring(context.create_type_scope(context.resolve(Address))) is None
        assert class_docstring(context.create_type_scope(context.resolve(str))) is None
        assert class_docstring(context.create_type_scope(context.resolve(list[Product]))) is None


class TestSingleValueAsArray:
    def test_array_member_accepts_item(self):
        schema = generate(Basket, plain_json(Option.ACCEPT_SINGLE_VALUE_AS_ARRAY))
        assert schema["properties"]["items"] == {
            "anyOf": [{"type": "integer"}, {"type": "array", "items": {"type": "integer"}}]
        }

    def test_disabled_by_default(self):
        schema = generate(Basket, plain_json())
        assert schema["properties"]["items"] == {"type": "array", "items": {"type": "integer"}}


class TestDataclassFields:
    def setup_method(self):
        self.context = TypeContext()
        self.members = self.context.resolve_with_members(self.context.resolve(Settings))

    def scope(self, name: str):
        return self.context.create_field_scope(self.members.find_field(name), self.members)

    def test_json_compatible_values(self):
        assert is_json_compatible(None)
        assert is_json_compatible([1, "a", {"b": 2.5}])
        assert is_json_compatible(Priority.LOW)
        assert not is_json_compatible({1: "a"})
        assert not is_json_compatible(datetime.date(2024, 1, 1))

    def test_field_defaults(self):
        assert field_default(self.scope("retries")) == 3
        assert field_default(self.scope("tags")) == []
        assert field_default(self.scope("created")) is None
        assert field_default(self.scope("label")) is None

    def test_required(self):
        members = self.context.resolve_with_members(self.context.resolve(Address))
        street = self.context.create_field_scope(members.find_field("street"), members)
        assert is_required_field(street) is True
        assert is_required_field(self.scope("retries")) is None

    def test_schema(self):
        schema = generate(Settings, plain_json())
        assert "required" not in schema
        assert schema["properties"]["retries"] == {"default": 3, "type": "integer"}
        assert schema["properties"]["name"] == {
            "default": "main",
            "description": "Configuration name",
            "type": "string",
        }
        assert schema["properties"]["label"] == {"type": ["string", "null"]}


class TestMemberSelection:
    def setup_method(self):
        self.context = TypeContext()
        self.members = self.context.resolve_with_members(self.context.resolve(Limits))

    def field_scope(self, name: str):
        return self.context.create_field_scope(self.members.find_field(name), self.members)

    def method_scope(self, name: str):
        return self.context.create_method_scope(self.members.find_method(name), self.members)

    def test_field_exclusion(self):
        assert FieldExclusionModule.for_public_static_fields().should_exclude(self.field_scope("VERSION"))
        assert not FieldExclusionModule.for_public_static_fields().should_exclude(self.field_scope("_INTERNAL"))
        assert FieldExclusionModule.for_nonpublic_static_fields().should_exclude(self.field_scope("_INTERNAL"))
        assert FieldExclusionModule.for_public_nonstatic_fields().should_exclude(self.field_scope("name"))
        with_getter = FieldExclusionModule.for_nonpublic_nonstatic_fields_with_getter()
        assert with_getter.should_exclude(self.field_scope("_secret"))
        without_getter = FieldExclusionModule.for_nonpublic_nonstatic_fields_without_getter()
        assert not without_getter.should_exclude(self.field_scope("_secret"))

    def test_method_exclusion(self):
        assert MethodExclusionModule.for_static_methods().should_exclude(self.method_scope("default"))
        assert MethodExclusionModule.for_void_methods().should_exclude(self.method_scope("clear"))
        getters = MethodExclusionModule.for_getter_methods()
        assert getters.should_exclude(self.method_scope("get_secret"))
        assert getters.should_exclude(self.method_scope("size"))
        assert not getters.should_exclude(self.method_scope("describe"))
        others = MethodExclusionModule.for_nonstatic_nonvoid_nongetter_methods()
        assert others.should_exclude(self.method_scope("describe"))
        assert not others.should_exclude(self.method_scope("clear"))

    def test_derived_field_names(self):
        assert derive_field_name(self.method_scope("get_secret")) == "secret"
        assert derive_field_name(self.method_scope("is_empty")) == "empty"
        assert derive_field_name(self.method_scope("describe")) == "describe"
        assert derive_field_name(self.method_scope("size")) is None

    def test_constant_values(self):
        schema = generate(Limits, plain_json(Option.PUBLIC_STATIC_FIELDS))
        assert schema["properties"]["VERSION"] == {"type": "integer", "const": 2}
        assert "_INTERNAL" not in schema["properties"]

    def test_constant_values_disabled(self):
        builder = plain_json(Option.PUBLIC_STATIC_FIELDS).without_option(Option.VALUES_FROM_CONSTANT_FIELDS)
        schema = generate(Limits, builder)
        assert schema["properties"]["VERSION"] == {"type": "integer"}

    def test_plain_json_has_fields_only(self):
        schema = generate(Limits, plain_json())
        assert list(schema["properties"]) == ["_secret", "name"]


class TestSimpleTypes:
    def test_additional_types(self):
        schema = generate(Event, plain_json())
        assert schema["properties"] == {
            "at": {"type": "string"},
            "count": {"type": "integer"},
            "id": {"type": "string"},
        }

    def test_open_api_formats(self):
        schema = generate(Event, plain_json(Option.EXTRA_OPEN_API_FORMAT_VALUES))
        assert schema["properties"] == {
            "at": {"type": "string", "format": "date-time"},
            "count": {"type": "integer", "format": "int64"},
            "id": {"type": "string", "format": "uuid"},
        }

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, SchemaType.NULL),
            (True, SchemaType.BOOLEAN),
            (3, SchemaType.INTEGER),
            (2.5, SchemaType.NUMBER),
            ("a", SchemaType.STRING),
            ([1], SchemaType.ARRAY),
            ({"a": 1}, SchemaType.OBJECT),
            (object(), None),
        ],
    )
    def test_json_type(self, value, expected):
        assert json_type(value) is expected


class TestEnumsAndUnions:
    def test_integer_enum(self):
        schema = generate(Ticket, plain_json())
        assert schema["properties"]["priority"] == {"type": "integer", "enum": [1, 2]}

    def test_enum_from_names(self):
        schema = generate(Ticket, plain_json(Option.FLATTENED_ENUMS_FROM_NAME))
        assert schema["properties"]["priority"] == {"type": "string", "enum": ["LOW", "HIGH"]}

    def test_union_member(self):
        schema = generate(Ticket, plain_json())
        assert schema["properties"]["reference"] == {"anyOf": [{"type": "integer"}, {"type": "string"}]}

    def test_union_items(self):
        schema = generate(Ticket, plain_json())
        assert schema["properties"]["history"] == {
            "type": "array",
            "items": {"anyOf": [{"type": "integer"}, {"type": "string"}]},
        }


if __name__ == "__main__":
    pytest.main([__file__])
