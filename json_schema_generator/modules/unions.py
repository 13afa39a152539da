"""
Unions (`X | Y`, `Optional[X]`) as alternatives of their options.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..config import CustomDefinition, DefinitionType, Module
from ..keywords import SchemaKeyword
from ..type_model import MemberScope, ResolvedType

if TYPE_CHECKING:
    from ..config import ConfigBuilder
    from ..generation import GenerationContext


class UnionModule(Module):
    """Describes union-typed members by their options.

    A member whose declared type is a union gets one target type override
    per option, which the generator turns into an anyOf. Flattened, `None`
    is not an option of its own but makes the member nullable, so
    `int | None` becomes `{"type": ["integer", "null"]}`. Everywhere else
    (array items, root types) a union is described as an inline anyOf.

    Args:
        flattened: Whether `None` in a member's union marks the member nullable
    """

    def __init__(self, flattened: bool = True):
        self.flattened = flattened

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        for part in (builder.for_fields(), builder.for_methods()):
            part.with_target_type_override_resolver(self._resolve_options)
            if self.flattened:
                part.with_nullable_check(self._is_nullable)
        builder.for_types_in_general().with_custom_definition_provider(self.provide_custom_definition)

    def _resolve_options(self, member: MemberScope) -> list[ResolvedType] | None:
        # items keep their union, which is described at type level
        if not member.type.is_union or member.is_fake_container_item_scope():
            return None
        if not self.flattened:
            return list(member.type.type_parameters)
        return [option for option in member.type.type_parameters if not option.is_none]

    def _is_nullable(self, member: MemberScope) -> bool | None:
        if not member.type.is_union or member.is_fake_container_item_scope():
            return None
        return True if any(option.is_none for option in member.type.type_parameters) else None

    def provide_custom_definition(self, resolved: ResolvedType, context: GenerationContext) -> CustomDefinition | None:
        if not resolved.is_union:
            return None
        options: list[Any] = [context.create_definition_reference(option) for option in resolved.type_parameters]
        return CustomDefinition({context.keyword(SchemaKeyword.TAG_ANYOF): options}, DefinitionType.INLINE)

    def __repr__(self) -> str:
        return f"UnionModule(flattened={self.flattened})"
