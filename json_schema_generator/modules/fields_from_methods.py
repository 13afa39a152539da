"""
Argument-free methods listed like fields.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import Module
from ..type_model import MethodScope

if TYPE_CHECKING:
    from ..config import ConfigBuilder

_ACCESSOR_PREFIXES = ("get_", "is_")


def derive_field_name(method: MethodScope) -> str | None:
    """`get_size()` and `is_empty()` become `size` and `empty`; other methods lose their parentheses."""
    if method.is_property:
        return None
    name = method.declared_name
    for prefix in _ACCESSOR_PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix):
            return name[len(prefix) :]
    return name


class FieldsFromMethodsModule(Module):
    """Names method properties as if they were fields.

    A derived name that is already taken by a field is skipped like any
    other duplicate property.
    """

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_methods().with_property_name_override_resolver(derive_field_name)
