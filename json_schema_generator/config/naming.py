"""
Naming of definitions and ordering of properties.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..generation.context import GenerationContext
    from ..generation.definition_key import DefinitionKey
    from ..type_model import MemberScope


class DefinitionNamingStrategy(ABC):
    """Derives the key under which a definition is stored in "$defs"."""

    @abstractmethod
    def get_definition_name_for_key(self, key: DefinitionKey, context: GenerationContext) -> str:
        pass

    def adjust_duplicate_names(self, names: dict[DefinitionKey, str], context: GenerationContext) -> None:
        """Make the names of different definitions sharing the same name unique (in place).

        Args:
            names: Definition keys in a stable order, all mapped to the same name
            context: The generation context
        """
        for index, key in enumerate(names, start=1):
            names[key] = f"{names[key]}-{index}"

    def adjust_nullable_name(self, key: DefinitionKey, name: str, context: GenerationContext) -> str:
        """Name of the nullable variant of a definition."""
        return f"{name}-nullable"


class DefaultDefinitionNamingStrategy(DefinitionNamingStrategy):
    """Names definitions after the simple type description, e.g. `Box[int]`."""

    def get_definition_name_for_key(self, key: DefinitionKey, context: GenerationContext) -> str:
        return context.type_context.get_simple_type_description(key.type)


def uri_compatible_key(name: str) -> str:
    """Definition key that can be used in a "$ref" without escaping."""
    name = name.replace("[", "(").replace("]", ")")
    return re.sub(r"[^a-zA-Z0-9.\-_$*(),]", "", name)


def plain_key(name: str) -> str:
    """Definition key restricted to letters, digits, dots, dashes and underscores."""
    name = re.sub(r"[\[\]]", "_", name).replace(",", ".")
    return re.sub(r"[^a-zA-Z0-9.\-_]", "", name)


class CleanDefinitionNamingStrategy(DefinitionNamingStrategy):
    """Applies a key clean-up function to every name produced by another strategy."""

    def __init__(self, delegate: DefinitionNamingStrategy, cleanup: Callable[[str], str] = uri_compatible_key):
        self.delegate = delegate
        self.cleanup = cleanup

    def get_definition_name_for_key(self, key: DefinitionKey, context: GenerationContext) -> str:
        return self.cleanup(self.delegate.get_definition_name_for_key(key, context))

    def adjust_duplicate_names(self, names: dict[DefinitionKey, str], context: GenerationContext) -> None:
        self.delegate.adjust_duplicate_names(names, context)
        for key, name in names.items():
            names[key] = self.cleanup(name)

    def adjust_nullable_name(self, key: DefinitionKey, name: str, context: GenerationContext) -> str:
        return self.cleanup(self.delegate.adjust_nullable_name(key, name, context))

    def reset_after_schema_generation_finished(self) -> None:
        reset = getattr(self.delegate, "reset_after_schema_generation_finished", None)
        if reset is not None:
            reset()


def default_property_sort_key(member: MemberScope) -> Any:
    """Fields before methods, then alphabetically by property name."""
    name = member.schema_property_name
    return (name.endswith(")"), name)
