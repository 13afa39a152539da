"""
Custom definition protocol: whole-shape overrides for a type or a member.

Providers, subtype resolvers and attribute overrides are plain callables. A
provider that keeps per-run state exposes `reset_after_schema_generation_finished()`
(see StatefulConfig), which is called once every generation run completes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..type_model import MemberScope, ResolvedType, TypeScope

if TYPE_CHECKING:
    from ..generation.context import GenerationContext

SchemaNode = dict[str, Any]


class DefinitionType(str, Enum):
    """Where a custom definition ends up in the generated document."""

    INLINE = "inline"  # applied directly at each reference site
    STANDARD = "standard"  # shared definition, inlined only if referenced once
    ALWAYS_REF = "always_ref"  # always a named definition, even if referenced once


class AttributeInclusion(str, Enum):
    """Whether the standard attribute collection is still merged into a custom definition."""

    YES = "yes"
    NO = "no"


@dataclass
class CustomDefinition:
    """Result of a custom definition provider.

    Attributes:
        value: The schema fragment replacing the standard derivation
        definition_type: Inline fragment or shared definition
        attribute_inclusion: Whether titles, descriptions and constraints from the
            resolver chain are still added
    """

    value: SchemaNode = field(default_factory=dict)
    definition_type: DefinitionType = DefinitionType.STANDARD
    attribute_inclusion: AttributeInclusion = AttributeInclusion.YES

    @property
    def is_meant_to_be_inline(self) -> bool:
        return self.definition_type == DefinitionType.INLINE

    @property
    def should_include_attributes(self) -> bool:
        return self.attribute_inclusion == AttributeInclusion.YES


@dataclass
class CustomPropertyDefinition(CustomDefinition):
    """Member-level custom definition; always applied inline."""

    def __post_init__(self):
        self.definition_type = DefinitionType.INLINE


@runtime_checkable
class StatefulConfig(Protocol):
    """A configuration callable holding state for the duration of one generation run."""

    def reset_after_schema_generation_finished(self) -> None: ...


# (type, context) -> custom definition or None for "no opinion"
CustomDefinitionProvider = Callable[[ResolvedType, "GenerationContext"], CustomDefinition | None]

# (member, context) -> member-level custom definition or None
CustomPropertyDefinitionProvider = Callable[[MemberScope, "GenerationContext"], CustomPropertyDefinition | None]

# (declared type, context) -> substitutes, or None to let the next resolver decide
SubtypeResolver = Callable[[ResolvedType, "GenerationContext"], list[ResolvedType] | None]

# (collected type node, type scope, context) -> None, modifies the node in place
TypeAttributeOverride = Callable[[SchemaNode, TypeScope, "GenerationContext"], None]

# (collected member attributes, member scope, context) -> None, modifies the node in place
InstanceAttributeOverride = Callable[[SchemaNode, MemberScope, "GenerationContext"], None]


def stateful_target(candidate: Any) -> StatefulConfig | None:
    """The object to reset for a registered callable (bound methods reset their instance)."""
    target = getattr(candidate, "__self__", candidate)
    return target if isinstance(target, StatefulConfig) else None
