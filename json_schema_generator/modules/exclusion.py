"""
Modules leaving out groups of fields or methods.

Each option for a member group that is switched off installs one of these
modules; the generator itself includes every member it finds.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import Module
from ..type_model import FieldScope, MethodScope

if TYPE_CHECKING:
    from ..config import ConfigBuilder


class FieldExclusionModule(Module):
    """Ignores the fields matching a check.

    Args:
        should_exclude: Returns True for fields to leave out
        description: Shown in the repr
    """

    def __init__(self, should_exclude: Callable[[FieldScope], bool], description: str = "custom"):
        self.should_exclude = should_exclude
        self.description = description

    @staticmethod
    def for_public_static_fields() -> FieldExclusionModule:
        return FieldExclusionModule(lambda field: field.is_static and field.is_public, "public static fields")

    @staticmethod
    def for_public_nonstatic_fields() -> FieldExclusionModule:
        return FieldExclusionModule(lambda field: not field.is_static and field.is_public, "public fields")

    @staticmethod
    def for_nonpublic_static_fields() -> FieldExclusionModule:
        return FieldExclusionModule(lambda field: field.is_static and not field.is_public, "non-public static fields")

    @staticmethod
    def for_nonpublic_nonstatic_fields_with_getter() -> FieldExclusionModule:
        return FieldExclusionModule(
            lambda field: not field.is_static and not field.is_public and field.has_getter(),
            "non-public fields with getter",
        )

    @staticmethod
    def for_nonpublic_nonstatic_fields_without_getter() -> FieldExclusionModule:
        return FieldExclusionModule(
            lambda field: not field.is_static and not field.is_public and not field.has_getter(),
            "non-public fields without getter",
        )

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_fields().with_ignore_check(self.should_exclude)

    def __repr__(self) -> str:
        return f"FieldExclusionModule({self.description})"


def is_getter_method(method: MethodScope) -> bool:
    """Properties and `get_x()`/`is_x()` accessors of a field."""
    return method.is_property or method.is_getter()


class MethodExclusionModule(Module):
    """Ignores the methods matching a check.

    Args:
        should_exclude: Returns True for methods to leave out
        description: Shown in the repr
    """

    def __init__(self, should_exclude: Callable[[MethodScope], bool], description: str = "custom"):
        self.should_exclude = should_exclude
        self.description = description

    @staticmethod
    def for_static_methods() -> MethodExclusionModule:
        return MethodExclusionModule(lambda method: method.is_static, "static methods")

    @staticmethod
    def for_void_methods() -> MethodExclusionModule:
        return MethodExclusionModule(lambda method: method.is_void(), "methods returning None")

    @staticmethod
    def for_getter_methods() -> MethodExclusionModule:
        return MethodExclusionModule(lambda method: not method.is_static and is_getter_method(method), "getters")

    @staticmethod
    def for_nonstatic_nonvoid_nongetter_methods() -> MethodExclusionModule:
        return MethodExclusionModule(
            lambda method: not method.is_static and not method.is_void() and not is_getter_method(method),
            "other methods",
        )

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_methods().with_ignore_check(self.should_exclude)

    def __repr__(self) -> str:
        return f"MethodExclusionModule({self.description})"
