"""
Schema attributes from `Annotated[...]` markers and class docstrings.
"""

from __future__ import annotations

import enum
import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .. import markers
from ..config import Module
from ..config.config_parts import AttributeKind, MemberConfigPart
from ..type_model import MemberScope, TypeScope, is_opaque_class

if TYPE_CHECKING:
    from ..config import ConfigBuilder

# marker type per attribute, with the constraints' applicability
_DESCRIPTIVE_MARKERS: dict[AttributeKind, type] = {
    AttributeKind.TITLE: markers.Title,
    AttributeKind.DESCRIPTION: markers.Description,
    AttributeKind.DEFAULT: markers.Default,
}
_VALUE_MARKERS: dict[AttributeKind, type] = {
    AttributeKind.STRING_MIN_LENGTH: markers.MinLength,
    AttributeKind.STRING_MAX_LENGTH: markers.MaxLength,
    AttributeKind.STRING_PATTERN: markers.Pattern,
    AttributeKind.STRING_FORMAT: markers.Format,
    AttributeKind.NUMBER_INCLUSIVE_MINIMUM: markers.Minimum,
    AttributeKind.NUMBER_INCLUSIVE_MAXIMUM: markers.Maximum,
    AttributeKind.NUMBER_EXCLUSIVE_MINIMUM: markers.ExclusiveMinimum,
    AttributeKind.NUMBER_EXCLUSIVE_MAXIMUM: markers.ExclusiveMaximum,
    AttributeKind.NUMBER_MULTIPLE_OF: markers.MultipleOf,
}
_ARRAY_MARKERS: dict[AttributeKind, type] = {
    AttributeKind.ARRAY_MIN_ITEMS: markers.MinItems,
    AttributeKind.ARRAY_MAX_ITEMS: markers.MaxItems,
    AttributeKind.ARRAY_UNIQUE_ITEMS: markers.UniqueItems,
}


def _marker_value(marker: Any) -> Any:
    return None if marker is None else marker.value


def descriptive_resolver(marker_type: type) -> Callable[[MemberScope], Any]:
    """Title, description and default: an item scope only uses markers on the item type."""

    def resolve(member: MemberScope) -> Any:
        if member.is_fake_container_item_scope():
            return _marker_value(member.get_metadata_if_supported(marker_type))
        return _marker_value(member.get_metadata(marker_type))

    resolve.__name__ = f"resolve_{marker_type.__name__}"
    return resolve


def value_constraint_resolver(marker_type: type) -> Callable[[MemberScope], Any]:
    """String and number constraints on a container member describe its items."""

    def resolve(member: MemberScope) -> Any:
        if member.is_container_type() and not member.is_fake_container_item_scope():
            return None
        return _marker_value(member.get_metadata(marker_type))

    resolve.__name__ = f"resolve_{marker_type.__name__}"
    return resolve


def array_constraint_resolver(marker_type: type) -> Callable[[MemberScope], Any]:
    """Array constraints only apply to containers; nested ones are declared on the item type."""

    def resolve(member: MemberScope) -> Any:
        if not member.is_container_type():
            return None
        if member.is_fake_container_item_scope():
            return _marker_value(member.get_metadata_if_supported(marker_type))
        return _marker_value(member.get_metadata(marker_type))

    resolve.__name__ = f"resolve_{marker_type.__name__}"
    return resolve


def is_nullable(member: MemberScope) -> bool | None:
    if member.is_fake_container_item_scope():
        return _marker_value(member.get_metadata_if_supported(markers.Nullable))
    return _marker_value(member.get_metadata(markers.Nullable))


def is_required(member: MemberScope) -> bool | None:
    if member.is_fake_container_item_scope():
        return None
    return _marker_value(member.get_metadata(markers.Required))


def is_ignored(member: MemberScope) -> bool:
    return not member.is_fake_container_item_scope() and member.get_metadata(markers.Ignore) is not None


def is_read_only(member: MemberScope) -> bool:
    return member.get_metadata(markers.ReadOnly) is not None


def is_write_only(member: MemberScope) -> bool:
    return member.get_metadata(markers.WriteOnly) is not None


def property_name(member: MemberScope) -> str | None:
    return _marker_value(member.get_metadata(markers.PropertyName))


def class_docstring(scope: TypeScope) -> str | None:
    """The docstring a class declares itself (not inherited, not generated)."""
    cls = scope.type.erased_type
    if is_opaque_class(cls) or scope.is_container_type() or scope.is_map_type():
        return None
    doc = cls.__dict__.get("__doc__")
    if not doc:
        return None
    # dataclasses and enums generate a docstring when none is written
    if doc.startswith(f"{cls.__name__}(") or (issubclass(cls, enum.Enum) and doc == "An enumeration."):
        return None
    return inspect.cleandoc(doc)


class AnnotatedMetadataModule(Module):
    """Reads the markers of `json_schema_generator.markers` from `Annotated[...]` hints.

    Markers apply to fields and methods; on a property or getter method the
    markers of the matching field are visible as well (and vice versa).

    Args:
        include_docstrings: Use class docstrings as type-level descriptions
    """

    def __init__(self, include_docstrings: bool = True):
        self.include_docstrings = include_docstrings

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        self._apply_to_members(builder.for_fields())
        self._apply_to_members(builder.for_methods())
        if self.include_docstrings:
            builder.for_types_in_general().with_resolver(AttributeKind.DESCRIPTION, class_docstring)

    def _apply_to_members(self, part: MemberConfigPart) -> None:
        for kind, marker_type in _DESCRIPTIVE_MARKERS.items():
            part.with_resolver(kind, descriptive_resolver(marker_type))
        for kind, marker_type in _VALUE_MARKERS.items():
            part.with_resolver(kind, value_constraint_resolver(marker_type))
        for kind, marker_type in _ARRAY_MARKERS.items():
            part.with_resolver(kind, array_constraint_resolver(marker_type))
        part.with_nullable_check(is_nullable)
        part.with_required_check(is_required)
        part.with_ignore_check(is_ignored)
        part.with_resolver(AttributeKind.READ_ONLY, is_read_only)
        part.with_resolver(AttributeKind.WRITE_ONLY, is_write_only)
        part.with_property_name_override_resolver(property_name)

    def __repr__(self) -> str:
        return f"AnnotatedMetadataModule(include_docstrings={self.include_docstrings})"
