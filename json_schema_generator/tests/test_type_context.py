import unittest
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Generic, Literal, NamedTuple, Optional, TypeVar, Union

import pytest

from json_schema_generator.errors import SchemaGenerationError, UnresolvedTypeVariable
from json_schema_generator.markers import Description, MaxLength, MinLength, Title
from json_schema_generator.type_model import (
    MISSING,
    NONE_TYPE,
    ContainerKind,
    FieldScope,
    MemberScope,
    MethodScope,
    RawField,
    ResolvedType,
    TypeContext,
    is_opaque_class,
)

T = TypeVar("T")
N = TypeVar("N", bound=float)


@dataclass
class Box(Generic[T]):
    value: T


class IntBox(Box[int]):
    pass


@dataclass
class Measure(Generic[N]):
    amount: N


class Point(NamedTuple):
    x: int
    y: int


class Account:
    VERSION: ClassVar[int] = 1

    owner: str
    _balance: int

    def get_balance(self) -> int:
        return self._balance

    @property
    def label(self) -> str:
        return self.owner

    def reset(self) -> None:
        self._balance = 0

    def transfer(self, amount: int) -> None:
        self._balance -= amount

    @staticmethod
    def create() -> "Account":
        return Account()


class Product:
    name: Annotated[str, Description("Product name")]
    tags: list[Annotated[str, MaxLength(3)]]
    _code: Annotated[str, Title("Code")]

    @property
    def code(self) -> str:
        return self._code


class TestResolve(unittest.TestCase):
    """Type hints to ResolvedType"""

    def setUp(self):
        self.context = TypeContext()

    def test_plain_class(self):
        self.assertEqual(self.context.resolve(int), ResolvedType(int))

    def test_any_and_object(self):
        self.assertTrue(self.context.resolve(Any).is_any)
        self.assertTrue(self.context.resolve(object).is_any)

    def test_optional(self):
        resolved = self.context.resolve(int | None)
        self.assertTrue(resolved.is_union)
        self.assertEqual(resolved.type_parameters, (ResolvedType(int), ResolvedType(NONE_TYPE)))
        self.assertEqual(self.context.resolve(Optional[int]), resolved)

    def test_nested_unions_collapse(self):
        resolved = self.context.resolve(Union[int, Union[str, int]])
        self.assertEqual(resolved.type_parameters, (ResolvedType(int), ResolvedType(str)))

    def test_single_option_union(self):
        self.assertEqual(self.context.resolve(Union[int, int]), ResolvedType(int))

    def test_literal(self):
        resolved = self.context.resolve(Literal["a", "b"])
        self.assertTrue(resolved.is_literal)
        self.assertEqual(resolved.literal_values, ("a", "b"))

    def test_annotated_metadata_not_part_of_identity(self):
        resolved = self.context.resolve(Annotated[str, MinLength(1)])
        self.assertEqual(resolved.metadata, (MinLength(1),))
        self.assertEqual(resolved, ResolvedType(str))
        self.assertEqual(hash(resolved), hash(ResolvedType(str)))

    def test_parameter_metadata(self):
        self.assertTrue(self.context.resolve(list[Annotated[str, MinLength(1)]]).has_parameter_metadata)
        self.assertFalse(self.context.resolve(list[str]).has_parameter_metadata)

    def test_explicit_type_parameters(self):
        self.assertEqual(self.context.resolve(Box, int), self.context.resolve(Box[int]))

    def test_type_parameters_need_a_class(self):
        with self.assertRaises(SchemaGenerationError):
            self.context.resolve(int | None, str)

    def test_forward_reference_rejected(self):
        with self.assertRaises(SchemaGenerationError):
            self.context.resolve("Account")

    def test_describe(self):
        self.assertEqual(self.context.resolve(Box[list[int]]).describe(), "Box[list[int]]")
        self.assertEqual(self.context.resolve(int | None).describe(), "int | None")
        self.assertTrue(self.context.resolve(Box[int]).describe(qualified=True).endswith(".Box[int]"))


class TestContainers(unittest.TestCase):
    def setUp(self):
        self.context = TypeContext()

    def test_container_kinds(self):
        self.assertEqual(self.context.container_kind(self.context.resolve(list[int])), ContainerKind.ARRAY)
        self.assertEqual(self.context.container_kind(self.context.resolve(set[int])), ContainerKind.ARRAY)
        self.assertEqual(self.context.container_kind(self.context.resolve(dict[str, int])), ContainerKind.MAP)
        self.assertIsNone(self.context.container_kind(self.context.resolve(str)))
        self.assertIsNone(self.context.container_kind(self.context.resolve(bytes)))
        self.assertIsNone(self.context.container_kind(self.context.resolve(Point)))

    def test_item_types(self):
        self.assertEqual(self.context.get_container_item_type(self.context.resolve(list[int])), ResolvedType(int))
        self.assertEqual(self.context.get_container_item_type(self.context.resolve(list)), ResolvedType(object))
        self.assertEqual(
            self.context.get_container_item_type(self.context.resolve(tuple[int, ...])), ResolvedType(int)
        )
        self.assertIsNone(self.context.get_container_item_type(self.context.resolve(dict[str, int])))

    def test_fixed_tuple_item_type_is_union(self):
        item_type = self.context.get_container_item_type(self.context.resolve(tuple[int, str]))
        self.assertEqual(item_type, ResolvedType(Union, (ResolvedType(int), ResolvedType(str))))

    def test_map_parameters(self):
        resolved = self.context.resolve(dict[str, list[int]])
        self.assertEqual(self.context.get_map_key_type(resolved), ResolvedType(str))
        self.assertEqual(self.context.get_map_value_type(resolved), ResolvedType(list, (ResolvedType(int),)))
        self.assertIsNone(self.context.get_map_value_type(self.context.resolve(dict)))


class TestGenericMembers:
    """Type variables substituted through the class hierarchy"""

    def field_type(self, context: TypeContext, hint, name: str) -> ResolvedType:
        members = context.resolve_with_members(context.resolve(hint))
        return context.create_field_scope(members.find_field(name), members).type

    def test_bound_parameter(self):
        context = TypeContext()
        assert self.field_type(context, Box[int], "value") == ResolvedType(int)
        assert self.field_type(context, Box[list[str]], "value") == ResolvedType(list, (ResolvedType(str),))

    def test_parameter_bound_by_subclass(self):
        assert self.field_type(TypeContext(), IntBox, "value") == ResolvedType(int)

    def test_unbound_parameter_falls_back_to_bound(self):
        assert self.field_type(TypeContext(), Measure, "amount") == ResolvedType(float)

    def test_unbound_parameter_without_bound(self):
        with pytest.raises(UnresolvedTypeVariable) as exc_info:
            self.field_type(TypeContext(), Box, "value")
        assert exc_info.value.type_variable is T
        assert exc_info.value.declaring_type is Box

    def test_members_cached(self):
        context = TypeContext()
        resolved = context.resolve(Box[int])
        assert context.resolve_with_members(resolved) is context.resolve_with_members(resolved)

    def test_annotated_parameters_not_cached(self):
        context = TypeContext()
        resolved = context.resolve(Box[Annotated[str, MinLength(2)]])
        members = context.resolve_with_members(resolved)
        assert context.resolve_with_members(resolved) is not members
        scope = context.create_field_scope(members.find_field("value"), members)
        assert scope.get_metadata(MinLength) == MinLength(2)


class TestMemberCollection:
    def setup_method(self):
        self.context = TypeContext()
        self.members = self.context.resolve_with_members(self.context.resolve(Account))

    def test_fields(self):
        assert [f.name for f in self.members.member_fields] == ["owner", "_balance"]
        assert [f.name for f in self.members.static_fields] == ["VERSION"]
        assert self.members.static_fields[0].default == 1

    def test_methods(self):
        assert [m.name for m in self.members.member_methods] == ["get_balance", "label", "reset"]
        assert [m.name for m in self.members.static_methods] == ["create"]

    def test_opaque_classes(self):
        assert is_opaque_class(int)
        assert is_opaque_class(object)
        assert not is_opaque_class(Account)
        assert self.context.resolve_with_members(self.context.resolve(str)).member_fields == []

    def test_named_tuple_fields(self):
        members = self.context.resolve_with_members(self.context.resolve(Point))
        assert [f.name for f in members.member_fields] == ["x", "y"]

    def test_field_without_default(self):
        raw = RawField("owner", Account, str)
        assert raw.default is MISSING
        assert not raw.has_default
        assert RawField("owner", Account, str, default="") == raw


class TestScopes:
    def setup_method(self):
        self.context = TypeContext()

    def test_member_scope_is_abstract(self):
        members = self.context.resolve_with_members(self.context.resolve(Account))
        with pytest.raises(TypeError):
            MemberScope(members.find_field("owner"), self.context.resolve(str), members, self.context)

    def field_scope(self, cls: type, name: str) -> FieldScope:
        members = self.context.resolve_with_members(self.context.resolve(cls))
        return self.context.create_field_scope(members.find_field(name), members)

    def method_scope(self, cls: type, name: str) -> MethodScope:
        members = self.context.resolve_with_members(self.context.resolve(cls))
        return self.context.create_method_scope(members.find_method(name), members)

    def test_property_names(self):
        assert self.field_scope(Account, "_balance").schema_property_name == "_balance"
        assert self.method_scope(Account, "get_balance").schema_property_name == "get_balance()"
        assert self.method_scope(Account, "label").schema_property_name == "label"
        renamed = self.field_scope(Account, "owner").with_overridden_name("holder")
        assert renamed.schema_property_name == "holder"
        assert renamed.declared_name == "owner"

    def test_getter_lookup(self):
        balance = self.field_scope(Account, "_balance")
        getter = balance.find_getter()
        assert getter is not None
        assert getter.declared_name == "get_balance"
        assert getter.is_getter()
        assert getter.find_getter_field() == balance
        assert not self.field_scope(Account, "owner").has_getter()
        assert not self.method_scope(Account, "label").is_getter()

    def test_void_methods(self):
        assert self.method_scope(Account, "reset").is_void()
        assert not self.method_scope(Account, "get_balance").is_void()

    def test_static_members(self):
        assert self.field_scope(Account, "VERSION").is_static
        assert self.method_scope(Account, "create").is_static
        assert self.method_scope(Account, "create").type == ResolvedType(Account)

    def test_equality(self):
        tags = self.field_scope(Product, "tags")
        assert tags == self.field_scope(Product, "tags")
        assert hash(tags) == hash(self.field_scope(Product, "tags"))
        assert tags != tags.as_fake_container_item_scope()
        assert tags != self.field_scope(Product, "name")

    def test_member_metadata(self):
        assert self.field_scope(Product, "name").get_metadata(Description) == Description("Product name")
        assert self.field_scope(Product, "name").get_metadata(Title) is None

    def test_metadata_from_matching_field(self):
        assert self.method_scope(Product, "code").get_metadata(Title) == Title("Code")

    def test_item_scope_metadata(self):
        tags = self.field_scope(Product, "tags")
        item = tags.as_fake_container_item_scope()
        assert item.is_fake_container_item_scope()
        assert item.type == ResolvedType(str)
        assert item.schema_property_name == "tags"
        assert item.get_metadata(MaxLength) == MaxLength(3)
        assert tags.get_metadata(MaxLength) is None
        assert tags.get_container_item_metadata(MaxLength) == MaxLength(3)

    def test_item_scope_of_non_container(self):
        name = self.field_scope(Product, "name")
        assert name.as_fake_container_item_scope() is name

    def test_overridden_type(self):
        name = self.field_scope(Product, "name")
        overridden = name.with_overridden_type(ResolvedType(bytes))
        assert overridden.type == ResolvedType(bytes)
        assert overridden.declared_type == ResolvedType(str)
        assert overridden.get_metadata(Description) == Description("Product name")


if __name__ == "__main__":
    pytest.main([__file__])
