"""
Array members that also accept a single item.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import Module
from ..type_model import MemberScope, ResolvedType

if TYPE_CHECKING:
    from ..config import ConfigBuilder


def single_value_or_array(member: MemberScope) -> list[ResolvedType] | None:
    """`list[int]` becomes the alternatives `int` and `list[int]`."""
    if member.is_fake_container_item_scope() or not member.is_container_type():
        return None
    item_type = member.get_container_item_type()
    if item_type is None:
        return None
    return [item_type, member.type]


class SingleValueAsArrayModule(Module):
    """Lets every array member be given as a lone item as well (like a lenient deserializer)."""

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_fields().with_target_type_override_resolver(single_value_or_array)
        builder.for_methods().with_target_type_override_resolver(single_value_or_array)
