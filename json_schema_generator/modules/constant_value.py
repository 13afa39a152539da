"""
Class-level constants described by their value.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any

from ..config import Module
from ..config.config_parts import AttributeKind
from ..type_model import MISSING, FieldScope

if TYPE_CHECKING:
    from ..config import ConfigBuilder


def extract_constant_value(member: FieldScope) -> list[Any] | None:
    """The value of a ClassVar/Final class attribute, as the single allowed value."""
    raw_field = member.raw_member
    if not member.is_static or member.is_fake_container_item_scope() or raw_field.default is MISSING:
        return None
    if isinstance(raw_field.default, enum.Enum) and raw_field.declaring_class is type(raw_field.default):
        return None
    return [raw_field.default]


def is_nullable_constant(member: FieldScope) -> bool | None:
    values = extract_constant_value(member)
    if values is None:
        return None
    return values[0] is None


class ConstantValueModule(Module):
    """Lists the value of constant fields as "const" (or a one-element "enum")."""

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        fields = builder.for_fields()
        fields.with_resolver(AttributeKind.ENUM, extract_constant_value)
        fields.with_nullable_check(is_nullable_constant)
