"""
SchemaGenerator: the entry point turning Python types into JSON Schema documents.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import ConfigBuilder, GeneratorConfig
from .generation import SchemaBuilder
from .type_model import TypeContext

logger = logging.getLogger(__name__)


class MultipleSchemaBuilder:
    """Collects references to several types and returns their definitions together.

    Meant for documents embedding many schemas (e.g. the components of an
    OpenAPI description): ask for a reference per type first, then collect
    the definitions for the place they will be stored at.

        builder = generator.build_multiple_schema_definitions()
        request = builder.create_schema_reference(OrderRequest)
        response = builder.create_schema_reference(OrderResponse)
        schemas = builder.collect_definitions("components/schemas")
    """

    def __init__(self, config: GeneratorConfig, type_context: TypeContext):
        self._builder = SchemaBuilder(config, type_context)
        self._collected = False

    def create_schema_reference(self, target_type: Any) -> dict[str, Any]:
        """A node that collect_definitions() turns into a reference (or the inlined schema)."""
        if self._collected:
            raise RuntimeError("collect_definitions() was already called on this builder")
        return self._builder.create_schema_reference(target_type)

    def collect_definitions(self, designated_definition_path: str) -> dict[str, Any]:
        if self._collected:
            raise RuntimeError("collect_definitions() can only be called once per builder")
        self._collected = True
        return self._builder.collect_definitions(designated_definition_path)


class SchemaGenerator:
    """Generates JSON Schema documents from Python types.

    One generator can be used for any number of calls; each call runs with a
    fresh definition cache, while the resolution of types and class members
    is shared.

    Args:
        config: The configuration built by a ConfigBuilder (default: FULL_DOCUMENTATION)
        type_context: Type resolution to share with other generators
    """

    def __init__(self, config: GeneratorConfig | None = None, type_context: TypeContext | None = None):
        self.config = config if config is not None else ConfigBuilder().build()
        self.type_context = type_context if type_context is not None else TypeContext()

    def generate_schema(self, main_type: Any, *additional_types: Any) -> dict[str, Any]:
        """Generate the schema document for a type.

        Args:
            main_type: The type the document describes
            additional_types: Further types to include in the definitions

        Returns:
            The JSON Schema document, ready for json.dumps()

        Raises:
            SchemaGenerationError: If any reachable type cannot be described
        """
        logger.info(f"generating schema for {main_type!r}")
        return SchemaBuilder.create_single_type_schema(self.config, self.type_context, main_type, *additional_types)

    def build_multiple_schema_definitions(self) -> MultipleSchemaBuilder:
        return MultipleSchemaBuilder(self.config, self.type_context)
