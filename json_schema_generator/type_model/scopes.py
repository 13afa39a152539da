"""
Scopes are the views resolvers receive: a whole type, or one field/method of
a declaring type (optionally narrowed to the element of a container member).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, TypeVar

from .members import RawField, RawMethod, ResolvedTypeWithMembers
from .resolved_type import ResolvedType

if TYPE_CHECKING:
    from .type_context import TypeContext

M = TypeVar("M")


def _first_marker(markers: tuple[Any, ...], marker_type: type[M]) -> M | None:
    for marker in markers:
        if isinstance(marker, marker_type):
            return marker
    return None


class TypeScope:
    """View over a resolved type."""

    def __init__(self, resolved_type: ResolvedType, context: TypeContext):
        self._type = resolved_type
        self.context = context

    @property
    def type(self) -> ResolvedType:
        return self._type

    def is_container_type(self) -> bool:
        return self.context.is_container_type(self.type)

    def is_map_type(self) -> bool:
        return self.context.is_map_type(self.type)

    def get_container_item_type(self) -> ResolvedType | None:
        return self.context.get_container_item_type(self.type)

    def get_type_parameter_for(self, supertype: type, index: int) -> ResolvedType | None:
        return self.context.get_type_parameter_for(self.type, supertype, index)

    def get_type_metadata(self, marker_type: type[M]) -> M | None:
        """Marker attached to the type itself via `Annotated[...]`."""
        return _first_marker(self.type.metadata, marker_type)

    def get_simple_type_description(self) -> str:
        return self.context.get_simple_type_description(self.type)

    def get_full_type_description(self) -> str:
        return self.context.get_full_type_description(self.type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type})"


class MemberScope(TypeScope, ABC):
    """View over one field or method of a declaring type.

    The effective type is the declared type unless a target type override
    replaced it. A "fake container item" scope describes the element of the
    container member it was derived from: it keeps the member (and its name)
    but carries the element type.
    """

    def __init__(
        self,
        raw_member: RawField | RawMethod,
        declared_type: ResolvedType,
        members: ResolvedTypeWithMembers,
        context: TypeContext,
        overridden_type: ResolvedType | None = None,
        overridden_name: str | None = None,
        fake_container_item_index: int | None = None,
        member_markers: tuple[Any, ...] | None = None,
    ):
        super().__init__(overridden_type if overridden_type is not None else declared_type, context)
        self.raw_member = raw_member
        self.declared_type = declared_type
        self.overridden_type = overridden_type
        self.overridden_name = overridden_name
        self.members = members
        self.fake_container_item_index = fake_container_item_index
        if member_markers is None:
            member_markers = declared_type.metadata
            if overridden_type is not None:
                member_markers += overridden_type.metadata
        self._member_markers = member_markers

    def _copy(self, **changes: Any) -> MemberScope:
        values = {
            "raw_member": self.raw_member,
            "declared_type": self.declared_type,
            "members": self.members,
            "context": self.context,
            "overridden_type": self.overridden_type,
            "overridden_name": self.overridden_name,
            "fake_container_item_index": self.fake_container_item_index,
            "member_markers": self._member_markers,
        }
        values.update(changes)
        return type(self)(**values)

    @property
    def effective_type(self) -> ResolvedType:
        return self.type

    @property
    def declaring_type(self) -> ResolvedType:
        return self.members.type

    @property
    def declared_name(self) -> str:
        return self.raw_member.name

    @property
    @abstractmethod
    def schema_property_name(self) -> str:
        pass

    @property
    def is_static(self) -> bool:
        return self.raw_member.is_static

    @property
    def is_public(self) -> bool:
        return self.raw_member.is_public

    def is_fake_container_item_scope(self) -> bool:
        return self.fake_container_item_index is not None

    def with_overridden_type(self, overridden_type: ResolvedType) -> MemberScope:
        markers = self._member_markers
        if not self.is_fake_container_item_scope():
            markers = self.declared_type.metadata + overridden_type.metadata
        return self._copy(overridden_type=overridden_type, member_markers=markers)

    def with_overridden_name(self, overridden_name: str) -> MemberScope:
        return self._copy(overridden_name=overridden_name)

    def as_fake_container_item_scope(self, container_type: type | None = None, index: int = 0) -> MemberScope:
        """Scope describing one element of this container member.

        Args:
            container_type: Generic supertype whose parameter is the element type
                (e.g. Mapping for map values); defaults to the array item type
            index: Position of that parameter

        Returns:
            The item scope, or this scope if the element type cannot be determined
        """
        if container_type is None:
            item_type = self.get_container_item_type()
        else:
            item_type = self.get_type_parameter_for(container_type, index)
        if item_type is None:
            return self
        return self._copy(overridden_type=item_type, fake_container_item_index=index)

    @abstractmethod
    def matching_accessor_or_field(self) -> MemberScope | None:
        pass

    def get_metadata(self, marker_type: type[M], fallback_to_member: bool = True) -> M | None:
        """Look up a marker visible on this member.

        Markers declared on the member itself win over those of its matching
        accessor (or field). For a container item scope, markers on the
        element type are consulted first; unless `fallback_to_member` is
        False, the declaring member's markers are used when the element type
        carries none.
        """
        if self.is_fake_container_item_scope():
            found = _first_marker(self.type.metadata, marker_type)
            if found is not None or not fallback_to_member:
                return found
        found = _first_marker(self._member_markers, marker_type)
        if found is None:
            counterpart = self.matching_accessor_or_field()
            if counterpart is not None:
                found = _first_marker(counterpart._member_markers, marker_type)
        return found

    def get_metadata_if_supported(self, marker_type: type[M]) -> M | None:
        """Like get_metadata(), but an item scope only sees markers of the element type."""
        return self.get_metadata(marker_type, fallback_to_member=False)

    def get_container_item_metadata(self, marker_type: type[M]) -> M | None:
        """Marker declared on the element type of this container member."""
        item_type = self.get_container_item_type()
        return None if item_type is None else _first_marker(item_type.metadata, marker_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MemberScope):
            return NotImplemented
        return (
            self.declaring_type == other.declaring_type
            and self.raw_member == other.raw_member
            and self.is_fake_container_item_scope() == other.is_fake_container_item_scope()
        )

    def __hash__(self) -> int:
        return hash((self.declaring_type, self.raw_member, self.is_fake_container_item_scope()))

    def __repr__(self) -> str:
        suffix = "[item]" if self.is_fake_container_item_scope() else ""
        return f"{self.declaring_type}.{self.declared_name}{suffix}"


class FieldScope(MemberScope):
    """View over an annotated class attribute."""

    raw_member: RawField

    @property
    def schema_property_name(self) -> str:
        return self.overridden_name or self.declared_name

    @property
    def is_final(self) -> bool:
        return self.raw_member.is_final

    def find_getter(self) -> MethodScope | None:
        """The public no-argument accessor matching this field, if any.

        Candidates are `get_<name>`, `is_<name>` (bool fields only) and, for
        non-public fields, a property named like the field without leading
        underscores.
        """
        base_name = self.declared_name.lstrip("_")
        candidates = [f"get_{base_name}"]
        if self.declared_type.erased_type is bool:
            candidates.append(f"is_{base_name}")
        if base_name != self.declared_name:
            candidates.append(base_name)
        for candidate in candidates:
            raw_method = self.members.find_method(candidate)
            if raw_method is None or not raw_method.is_public:
                continue
            if candidate == base_name and not raw_method.is_property:
                continue
            return self.context.create_method_scope(raw_method, self.members)
        return None

    def has_getter(self) -> bool:
        return self.find_getter() is not None

    def matching_accessor_or_field(self) -> MethodScope | None:
        return self.find_getter()


class MethodScope(MemberScope):
    """View over a property or an argument-free method."""

    raw_member: RawMethod

    @property
    def schema_property_name(self) -> str:
        if self.overridden_name:
            return self.overridden_name
        if self.raw_member.is_property:
            return self.declared_name
        return f"{self.declared_name}()"

    @property
    def is_property(self) -> bool:
        return self.raw_member.is_property

    def is_void(self) -> bool:
        return self.declared_type.is_none and not self.raw_member.is_property

    def find_getter_field(self) -> FieldScope | None:
        """The field this accessor exposes, if any."""
        name = self.declared_name
        if self.raw_member.is_property:
            candidates = [f"_{name}"]
        elif name.startswith("get_"):
            candidates = [name[4:], f"_{name[4:]}"]
        elif name.startswith("is_"):
            candidates = [name[3:], f"_{name[3:]}"]
        else:
            return None
        for candidate in candidates:
            raw_field = self.members.find_field(candidate)
            if raw_field is None:
                continue
            if name.startswith("is_") and not self.raw_member.is_property:
                field_type = self.context.resolve_member_type(raw_field.hint, raw_field.declaring_class, self.members)
                if field_type.erased_type is not bool:
                    continue
            return self.context.create_field_scope(raw_field, self.members)
        return None

    def is_getter(self) -> bool:
        return self.find_getter_field() is not None

    def matching_accessor_or_field(self) -> FieldScope | None:
        return self.find_getter_field()
