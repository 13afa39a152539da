"""
SchemaBuilder: runs one generation call from root types to the finished document.

The builder walks Resolving -> Building -> Finalizing -> CleanUp. Finalizing
decides per collected definition whether it becomes an entry in "$defs"
(shared or explicitly requested) or is copied into every place referencing it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..errors import DuplicateDefinitionNameError
from ..keywords import SchemaKeyword
from ..type_model import ResolvedType, TypeContext
from .attribute_collector import merge_missing_attributes
from .cleanup import SchemaCleanUp
from .context import GenerationContext
from .definition_key import DefinitionKey

if TYPE_CHECKING:
    from ..config import GeneratorConfig

logger = logging.getLogger(__name__)

SchemaNode = dict[str, Any]


class SchemaBuilder:
    """Builder for a single generation call (or a sequence of them sharing definitions).

    Args:
        config: The frozen generator configuration
        type_context: Type resolution shared with the generator
    """

    def __init__(self, config: GeneratorConfig, type_context: TypeContext):
        self.config = config
        self.type_context = type_context
        self.generation_context = GenerationContext(config, type_context)
        self.naming_strategy = config.definition_naming_strategy
        # nodes the clean-up passes start from
        self.schema_nodes: list[SchemaNode] = []

    @classmethod
    def create_single_type_schema(
        cls, config: GeneratorConfig, type_context: TypeContext, main_type: Any, *additional_types: Any
    ) -> SchemaNode:
        """Generate the document for a main type; additional types only contribute to "$defs"."""
        return cls(config, type_context).create_schema_for_single_type(main_type, *additional_types)

    def create_schema_for_single_type(self, main_type: Any, *additional_types: Any) -> SchemaNode:
        resolved_main = self._resolve(main_type)
        main_key = self.generation_context.parse_type(resolved_main)
        forced_keys = {self.generation_context.parse_type(self._resolve(extra)) for extra in additional_types}
        forced_keys.discard(main_key)

        result: SchemaNode = {}
        if self.config.should_include_schema_version_indicator:
            result[self.config.keyword(SchemaKeyword.TAG_SCHEMA)] = self.config.schema_version.identifier
        main_in_definitions = self.config.should_create_definition_for_main_schema
        if main_in_definitions:
            self.generation_context.add_reference(resolved_main, result)
        definitions_tag = self.config.keyword(SchemaKeyword.TAG_DEFINITIONS)
        reference_prefix = self._reference_prefix(definitions_tag)
        definitions = self._build_definitions_and_resolve_references(reference_prefix, main_key, forced_keys)
        if definitions:
            result[definitions_tag] = definitions
        if not main_in_definitions:
            result.update(self.generation_context.get_definition(main_key))
            self.schema_nodes.append(result)
        self._perform_cleanup(definitions, reference_prefix)
        self.config.reset_after_schema_generation_finished()
        return result

    def create_schema_reference(self, target_type: Any) -> SchemaNode:
        """A reference node to a type whose definition is collected later by collect_definitions()."""
        node = self.generation_context.create_definition_reference(self._resolve(target_type))
        self.schema_nodes.append(node)
        self.config.reset_after_schema_generation_finished()
        return node

    def collect_definitions(self, designated_definition_path: str) -> SchemaNode:
        """Finalize all references created so far.

        Args:
            designated_definition_path: Where the caller will place the returned
                definitions, relative to the document root (e.g. "components/schemas")

        Returns:
            The definitions by name
        """
        reference_prefix = self._reference_prefix(designated_definition_path)
        definitions = self._build_definitions_and_resolve_references(reference_prefix, None, set())
        self._perform_cleanup(definitions, reference_prefix)
        return definitions

    def _resolve(self, target_type: Any) -> ResolvedType:
        if isinstance(target_type, ResolvedType):
            return target_type
        return self.type_context.resolve(target_type)

    def _reference_prefix(self, definitions_path: str) -> str:
        return f"{self.config.keyword(SchemaKeyword.TAG_REF_MAIN)}/{definitions_path}/"

    def _perform_cleanup(self, definitions: SchemaNode, reference_prefix: str) -> None:
        cleanup = SchemaCleanUp(self.config)
        if self.config.should_clean_up_all_of_nodes:
            cleanup.reduce_all_of_nodes(self.schema_nodes)
        cleanup.reduce_any_of_nodes(self.schema_nodes)
        if self.config.should_clean_up_duplicate_member_attributes:
            cleanup.reduce_redundant_member_attributes(self.schema_nodes, definitions, reference_prefix)
        if self.config.should_include_strict_type_info:
            cleanup.set_strict_type_info(self.schema_nodes, True)
            # "null" may have introduced new anyOf wrappers
            cleanup.reduce_any_of_nodes(self.schema_nodes)

    # ------------------------------------------------------------------
    # Finalizing
    # ------------------------------------------------------------------

    def _build_definitions_and_resolve_references(
        self, reference_prefix: str, main_key: DefinitionKey | None, forced_keys: set[DefinitionKey]
    ) -> SchemaNode:
        definitions: SchemaNode = {}
        only_direct_references = False
        context = self.generation_context

        def should_produce(key: DefinitionKey) -> bool:
            if context.should_never_inline_definition(key) or key in forced_keys:
                return True
            if self.config.should_inline_all_schemas:
                return False
            if self.config.should_create_definitions_for_all_objects or key == main_key:
                return True
            references = context.get_references(key)
            if only_direct_references and not references:
                return False
            return len(references) + len(context.get_nullable_references(key)) > 1

        names = self._get_reference_keys(main_key, should_produce)
        only_direct_references = True
        for key, name in names.items():
            reference_key = self._update_references(key, name, main_key, reference_prefix, definitions, should_produce)
            nullable_references = context.get_nullable_references(key)
            if nullable_references:
                self._update_nullable_references(
                    key, name, nullable_references, reference_key, reference_prefix, definitions
                )
        self.schema_nodes.extend(definitions.values())
        return definitions

    def _update_references(
        self,
        key: DefinitionKey,
        name: str,
        main_key: DefinitionKey | None,
        reference_prefix: str,
        definitions: SchemaNode,
        should_produce: Callable[[DefinitionKey], bool],
    ) -> str | None:
        references = self.generation_context.get_references(key)
        if not should_produce(key):
            definition = self.generation_context.get_definition(key)
            for node in references:
                merge_missing_attributes(node, definition)
            return None
        if key == main_key and not self.config.should_create_definition_for_main_schema:
            reference_key = self.config.keyword(SchemaKeyword.TAG_REF_MAIN)
        else:
            definitions[name] = self.generation_context.get_definition(key)
            reference_key = reference_prefix + name
        ref_tag = self.config.keyword(SchemaKeyword.TAG_REF)
        for node in references:
            node[ref_tag] = reference_key
        return reference_key

    def _update_nullable_references(
        self,
        key: DefinitionKey,
        name: str,
        nullable_references: list[SchemaNode],
        reference_key: str | None,
        reference_prefix: str,
        definitions: SchemaNode,
    ) -> None:
        ref_tag = self.config.keyword(SchemaKeyword.TAG_REF)
        if reference_key is None:
            definition = dict(self.generation_context.get_definition(key))
        else:
            definition = {ref_tag: reference_key}
        self.generation_context.make_nullable(definition)
        if self._should_create_nullable_definition(key, nullable_references):
            nullable_name = self.naming_strategy.adjust_nullable_name(key, name, self.generation_context)
            definitions[nullable_name] = definition
            for node in nullable_references:
                node[ref_tag] = reference_prefix + nullable_name
        else:
            for node in nullable_references:
                merge_missing_attributes(node, definition)

    def _should_create_nullable_definition(self, key: DefinitionKey, nullable_references: list[SchemaNode]) -> bool:
        if self.config.should_inline_nullable_schemas:
            return False
        if self.generation_context.should_never_inline_definition(key):
            return True
        if self.config.should_inline_all_schemas:
            return False
        return self.config.should_create_definitions_for_all_objects or len(nullable_references) > 1

    def _get_reference_keys(
        self, main_key: DefinitionKey | None, should_produce: Callable[[DefinitionKey], bool]
    ) -> dict[DefinitionKey, str]:
        """Name every definition; an empty name marks one that will not end up in "$defs"."""
        context = self.generation_context
        groups: dict[str, list[DefinitionKey]] = {}
        for key in context.defined_keys:
            groups.setdefault(self.naming_strategy.get_definition_name_for_key(key, context), []).append(key)
        names: dict[DefinitionKey, str] = {}
        for base_name in sorted(groups):
            group = groups[base_name]
            for key in group:
                names[key] = ""
            produced = [key for key in group if should_produce(key)]
            if self._are_definition_keys_distinct(main_key, produced):
                for key in produced:
                    names[key] = base_name
                continue
            adjusted = {key: base_name for key in produced}
            self.naming_strategy.adjust_duplicate_names(adjusted, context)
            if len(adjusted) != len(produced):
                raise DuplicateDefinitionNameError(
                    f"{type(self.naming_strategy).__name__} altered the definitions named {base_name!r}"
                )
            names.update(adjusted)
        # the main schema stays at the document root unless configured otherwise
        in_definitions = [
            name
            for key, name in names.items()
            if name and (key != main_key or self.config.should_create_definition_for_main_schema)
        ]
        duplicates = sorted({name for name in in_definitions if in_definitions.count(name) > 1})
        if duplicates:
            raise DuplicateDefinitionNameError(
                f"{type(self.naming_strategy).__name__} produced duplicate keys: {', '.join(duplicates)}"
            )
        logger.debug(f"definition names: {[name for name in names.values() if name]}")
        return names

    def _are_definition_keys_distinct(self, main_key: DefinitionKey | None, keys: list[DefinitionKey]) -> bool:
        return len(keys) == 1 or (
            len(keys) == 2 and not self.config.should_create_definition_for_main_schema and main_key in keys
        )
