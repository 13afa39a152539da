"""
Subtype resolution through `__subclasses__()`.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

from ..config import Module
from ..type_model import ResolvedType

if TYPE_CHECKING:
    from ..config import ConfigBuilder
    from ..generation import GenerationContext

logger = logging.getLogger(__name__)


def concrete_subclasses(base_class: type) -> list[type]:
    """All non-abstract descendants of a class, depth first, without duplicates."""
    found: list[type] = []
    pending = list(base_class.__subclasses__())
    while pending:
        subclass = pending.pop(0)
        if subclass in found:
            continue
        if not inspect.isabstract(subclass):
            found.append(subclass)
        pending[0:0] = subclass.__subclasses__()
    return found


class SubclassResolver(Module):
    """Describes the configured base classes as the alternatives of their subclasses.

    Wherever one of the base classes is declared, the schema lists the
    subclasses known at generation time instead (a single subclass as allOf,
    several as anyOf). Subclasses must be imported before generating.

    Args:
        base_classes: Classes to replace by their subclasses
    """

    def __init__(self, *base_classes: type):
        self.base_classes = base_classes

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        builder.for_types_in_general().with_subtype_resolver(self.resolve_subtypes)

    def resolve_subtypes(self, resolved: ResolvedType, context: GenerationContext) -> list[ResolvedType] | None:
        if resolved.erased_type not in self.base_classes:
            return None
        subclasses = concrete_subclasses(resolved.erased_type)
        if not subclasses:
            logger.debug(f"no subclasses found for {resolved}")
            return None
        return [context.type_context.resolve(subclass) for subclass in subclasses]

    def __repr__(self) -> str:
        names = ", ".join(base_class.__name__ for base_class in self.base_classes)
        return f"SubclassResolver({names})"
