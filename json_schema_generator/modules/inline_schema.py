"""
Every schema inlined, none placed into "$defs".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import CustomDefinition, DefinitionType, Module
from ..type_model import ResolvedType

if TYPE_CHECKING:
    from ..config import ConfigBuilder
    from ..generation import GenerationContext


class InlineSchemaModule(Module):
    """Replaces every definition by its standard derivation, inlined at each use.

    The generation context keeps the chain of definitions being inlined; a
    type reaching itself raises a CircularDefinitionError, as there is no
    way to express the recursion without a reference.
    """

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_types_in_general().with_custom_definition_provider(self.provide_custom_definition)

    def provide_custom_definition(self, resolved: ResolvedType, context: GenerationContext) -> CustomDefinition | None:
        # containers are inlined anyway
        if context.type_context.is_container_type(resolved):
            return None
        definition = context.create_standard_definition(resolved, self.provide_custom_definition)
        return CustomDefinition(definition, DefinitionType.INLINE)
