"""
Post-processing passes over generated schema nodes.

All passes work in place, visit every sub-schema reachable through the
schema-carrying keywords and leave a node untouched whenever a merge is not
provably equivalent. Running a pass twice yields the same result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from ..keywords import SchemaKeyword, SchemaType, SchemaVersion, TagContent

if TYPE_CHECKING:
    from ..config import GeneratorConfig

logger = logging.getLogger(__name__)

SchemaNode = dict[str, Any]

# a merge function either returns the merged value or _ABORT
_ABORT = object()

_UPPER_BOUND_KEYWORDS = (
    SchemaKeyword.TAG_ITEMS_MAX,
    SchemaKeyword.TAG_PROPERTIES_MAX,
    SchemaKeyword.TAG_MAXIMUM,
    SchemaKeyword.TAG_MAXIMUM_EXCLUSIVE,
    SchemaKeyword.TAG_LENGTH_MAX,
)
_LOWER_BOUND_KEYWORDS = (
    SchemaKeyword.TAG_ITEMS_MIN,
    SchemaKeyword.TAG_PROPERTIES_MIN,
    SchemaKeyword.TAG_MINIMUM,
    SchemaKeyword.TAG_MINIMUM_EXCLUSIVE,
    SchemaKeyword.TAG_LENGTH_MIN,
)
_SUB_SCHEMA_KEYWORDS = (
    SchemaKeyword.TAG_ITEMS,
    SchemaKeyword.TAG_UNEVALUATED_ITEMS,
    SchemaKeyword.TAG_ADDITIONAL_PROPERTIES,
    SchemaKeyword.TAG_UNEVALUATED_PROPERTIES,
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _same(left: Any, right: Any) -> bool:
    # json equality: True must not match 1
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(_same(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(_same(a, b) for a, b in zip(left, right))
    if _is_number(left) and _is_number(right):
        return left == right
    return type(left) is type(right) and left == right


class SchemaCleanUp:
    """Clean-up passes for the schemas of one configuration.

    Args:
        config: The generator configuration (dialect and keywords)
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.version: SchemaVersion = config.schema_version
        self._merge_functions = self._prepare_merge_functions()

    def _keyword(self, keyword: SchemaKeyword) -> str:
        return self.config.keyword(keyword)

    def _prepare_merge_functions(self) -> dict[SchemaKeyword, Callable[[list[Any]], Any]]:
        functions: dict[SchemaKeyword, Callable[[list[Any]], Any]] = {
            SchemaKeyword.TAG_ALLOF: self._merge_arrays,
            SchemaKeyword.TAG_REQUIRED: self._merge_arrays,
            SchemaKeyword.TAG_PROPERTIES: self._merge_object_properties,
            SchemaKeyword.TAG_DEPENDENT_REQUIRED: self._merge_dependent_required,
            SchemaKeyword.TAG_DEPENDENT_SCHEMAS: self._merge_dependent_schemas,
            SchemaKeyword.TAG_TYPE: self._overlap_of_types,
        }
        for keyword in _SUB_SCHEMA_KEYWORDS:
            functions[keyword] = self._merge_sub_schemas
        for keyword in _UPPER_BOUND_KEYWORDS:
            functions[keyword] = self._minimum_number
        for keyword in _LOWER_BOUND_KEYWORDS:
            functions[keyword] = self._maximum_number
        return functions

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def reduce_all_of_nodes(self, schemas: Iterable[SchemaNode]) -> None:
        """Merge allOf parts into their parent node where their keywords do not conflict."""
        all_of_tag = self._keyword(SchemaKeyword.TAG_ALLOF)
        reverse_tag_map = SchemaKeyword.get_reverse_tag_map(self.version)
        self._visit(schemas, lambda node: self._merge_all_of_parts(node, all_of_tag, reverse_tag_map))

    def reduce_any_of_nodes(self, schemas: Iterable[SchemaNode]) -> None:
        """Replace anyOf entries that only hold another anyOf by that anyOf's entries."""
        any_of_tag = self._keyword(SchemaKeyword.TAG_ANYOF)
        self._visit(schemas, lambda node: self._flatten_any_of(node, any_of_tag))

    def reduce_redundant_member_attributes(
        self, schemas: Iterable[SchemaNode], definitions: SchemaNode, reference_prefix: str
    ) -> None:
        """Drop property attributes next to a "$ref" that the referenced definition already has.

        Args:
            schemas: Nodes to visit
            definitions: The collected definitions by name
            reference_prefix: Prefix turning a definition name into a "$ref" value
        """
        by_reference = {reference_prefix + name: definition for name, definition in definitions.items()}
        properties_tag = self._keyword(SchemaKeyword.TAG_PROPERTIES)
        ref_tag = self._keyword(SchemaKeyword.TAG_REF)
        self._visit(
            schemas, lambda node: self._reduce_redundant_properties(node, properties_tag, ref_tag, by_reference)
        )

    def set_strict_type_info(self, schemas: Iterable[SchemaNode], include_null: bool) -> None:
        """Add the "type" implied by the other keywords of a node that declares none.

        Args:
            schemas: Nodes to visit
            include_null: Whether "null" is added to every injected type
        """
        type_tag = self._keyword(SchemaKeyword.TAG_TYPE)
        reverse_tag_map = SchemaKeyword.get_reverse_tag_map(self.version, lambda keyword: bool(keyword.implied_types))
        self._visit(schemas, lambda node: self._add_type_where_missing(node, type_tag, include_null, reverse_tag_map))

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _tags_holding(self, content: TagContent) -> list[str]:
        return list(
            SchemaKeyword.get_reverse_tag_map(self.version, lambda keyword: keyword.content_type == content)
        )

    def _visit(self, schemas: Iterable[SchemaNode], action: Callable[[SchemaNode], None]) -> None:
        schema_tags = self._tags_holding(TagContent.SCHEMA)
        array_tags = self._tags_holding(TagContent.ARRAY_OF_SCHEMAS)
        named_tags = self._tags_holding(TagContent.NAMED_SCHEMAS)
        pending = [node for node in schemas if isinstance(node, dict)]
        seen: set[int] = set()
        while pending:
            node = pending.pop(0)
            # shared nodes are visited once
            if id(node) in seen:
                continue
            seen.add(id(node))
            action(node)
            for tag in schema_tags:
                if isinstance(node.get(tag), dict):
                    pending.append(node[tag])
            for tag in array_tags:
                if isinstance(node.get(tag), list):
                    pending.extend(item for item in node[tag] if isinstance(item, dict))
            for tag in named_tags:
                if isinstance(node.get(tag), dict):
                    pending.extend(item for item in node[tag].values() if isinstance(item, dict))

    # ------------------------------------------------------------------
    # allOf
    # ------------------------------------------------------------------

    def _merge_all_of_parts(self, node: Any, all_of_tag: str, reverse_tag_map: dict[str, SchemaKeyword]) -> None:
        if not isinstance(node, dict) or not isinstance(node.get(all_of_tag), list):
            return
        for part in node[all_of_tag]:
            self._merge_all_of_parts(part, all_of_tag, reverse_tag_map)
        merged = self._merge_schemas(node, [node, *node[all_of_tag]], reverse_tag_map)
        if merged is _ABORT:
            return
        del node[all_of_tag]
        node.update(merged)

    def _merge_schemas(
        self, main_node: SchemaNode | None, nodes: list[Any], reverse_tag_map: dict[str, SchemaKeyword]
    ) -> Any:
        if any(part is False for part in nodes):
            return _ABORT
        parts = [part for part in nodes if isinstance(part, dict)]
        values_by_tag: dict[str, list[Any]] = {}
        for part in parts:
            for tag, value in part.items():
                values_by_tag.setdefault(tag, []).append(value)
        if self._should_skip_merge(main_node, parts, values_by_tag):
            return _ABORT
        unsupported = {tag: values for tag, values in values_by_tag.items() if tag not in reverse_tag_map}
        if any(len(values) > 1 for values in unsupported.values()):
            return _ABORT
        supported = {
            reverse_tag_map[tag]: values for tag, values in values_by_tag.items() if tag in reverse_tag_map
        }
        if SchemaKeyword.TAG_IF in supported:
            return _ABORT
        merged: SchemaNode = {}
        for keyword, values in supported.items():
            if keyword is SchemaKeyword.TAG_ALLOF and main_node is not None:
                if len(values) == 1:
                    continue
                # the main node's own allOf is the one being dissolved
                values = values[1:]
            value = self._merge_values(keyword, values)
            if value is _ABORT:
                return _ABORT
            merged[self._keyword(keyword)] = value
        for tag, values in unsupported.items():
            merged[tag] = values[0]
        return merged

    def _should_skip_merge(self, main_node: SchemaNode | None, parts: list[SchemaNode], values_by_tag: dict) -> bool:
        # drafts 6 and 7 ignore every keyword next to "$ref"
        if self.version not in (SchemaVersion.DRAFT_6, SchemaVersion.DRAFT_7):
            return False
        if self._keyword(SchemaKeyword.TAG_REF) not in values_by_tag:
            return False
        if main_node is None:
            return len(parts) > 1
        return len(main_node) > 1 or len(parts) > 2

    def _merge_values(self, keyword: SchemaKeyword, values: list[Any]) -> Any:
        if len(values) == 1:
            return values[0]
        merge_function = self._merge_functions.get(keyword)
        if merge_function is None:
            return self._one_if_all_equal(values)
        return merge_function(values)

    def _merge_arrays(self, values: list[Any]) -> Any:
        if not all(isinstance(value, list) for value in values):
            return _ABORT
        merged: list[Any] = []
        for value in values:
            for item in value:
                if not any(_same(item, existing) for existing in merged):
                    merged.append(item)
        return merged

    def _merge_object_properties(self, values: list[Any]) -> Any:
        if not all(isinstance(value, dict) for value in values):
            return _ABORT
        merged: SchemaNode = {}
        for value in values:
            for name, schema in value.items():
                if name not in merged:
                    merged[name] = schema
                elif not _same(merged[name], schema):
                    return _ABORT
        return merged

    def _merge_dependent_required(self, values: list[Any]) -> Any:
        names: dict[str, list[str]] = {}
        for value in values:
            if not isinstance(value, dict):
                return _ABORT
            for lead, dependents in value.items():
                if not isinstance(dependents, list) or not all(isinstance(item, str) for item in dependents):
                    return _ABORT
                collected = names.setdefault(lead, [])
                collected.extend(item for item in dependents if item not in collected)
        return names

    def _merge_dependent_schemas(self, values: list[Any]) -> Any:
        if self.version in (SchemaVersion.DRAFT_6, SchemaVersion.DRAFT_7):
            # "dependencies" covers both the required and the schema variant
            merged = self._merge_dependent_required(values)
            if merged is not _ABORT:
                return merged
        return self._merge_object_properties(values)

    def _merge_sub_schemas(self, values: list[Any]) -> Any:
        return self._merge_schemas(None, values, SchemaKeyword.get_reverse_tag_map(self.version))

    def _overlap_of_types(self, values: list[Any]) -> Any:
        overlap = _string_list(values[0])
        if overlap is None:
            return _ABORT
        for value in values[1:]:
            other = _string_list(value)
            if other is None:
                return _ABORT
            overlap = [item for item in overlap if item in other]
            if not overlap:
                return _ABORT
        return overlap[0] if len(overlap) == 1 else overlap

    def _minimum_number(self, values: list[Any]) -> Any:
        if not all(_is_number(value) for value in values):
            return _ABORT
        return min(values)

    def _maximum_number(self, values: list[Any]) -> Any:
        if not all(_is_number(value) for value in values):
            return _ABORT
        return max(values)

    def _one_if_all_equal(self, values: list[Any]) -> Any:
        if all(_same(values[0], value) for value in values[1:]):
            return values[0]
        return _ABORT

    # ------------------------------------------------------------------
    # anyOf
    # ------------------------------------------------------------------

    def _flatten_any_of(self, node: Any, any_of_tag: str) -> None:
        if not isinstance(node, dict) or not isinstance(node.get(any_of_tag), list):
            return
        entries = node[any_of_tag]
        for entry in entries:
            self._flatten_any_of(entry, any_of_tag)
        flattened: list[Any] = []
        for entry in entries:
            if isinstance(entry, dict) and len(entry) == 1 and isinstance(entry.get(any_of_tag), list):
                flattened.extend(entry[any_of_tag])
            else:
                flattened.append(entry)
        entries[:] = flattened

    # ------------------------------------------------------------------
    # Member attributes
    # ------------------------------------------------------------------

    def _reduce_redundant_properties(
        self, node: SchemaNode, properties_tag: str, ref_tag: str, definitions: dict[str, SchemaNode]
    ) -> None:
        properties = node.get(properties_tag)
        if not isinstance(properties, dict):
            return
        for member_schema in properties.values():
            if not isinstance(member_schema, dict) or ref_tag not in member_schema:
                continue
            definition = definitions.get(member_schema[ref_tag])
            if isinstance(definition, dict):
                self._reduce_redundant_attributes(member_schema, definition)

    def _reduce_redundant_attributes(self, member_schema: SchemaNode, definition: SchemaNode) -> None:
        conditional_tags = [
            self._keyword(keyword)
            for keyword in (SchemaKeyword.TAG_IF, SchemaKeyword.TAG_THEN, SchemaKeyword.TAG_ELSE)
        ]
        skipped: set[str] = set()
        if any(not _same(member_schema.get(tag), definition.get(tag)) for tag in conditional_tags):
            skipped.update(conditional_tags)
        for tag in list(member_schema):
            if tag in skipped or tag not in definition:
                continue
            if _same(member_schema[tag], definition[tag]):
                del member_schema[tag]

    # ------------------------------------------------------------------
    # Strict type info
    # ------------------------------------------------------------------

    def _add_type_where_missing(
        self, node: SchemaNode, type_tag: str, include_null: bool, reverse_tag_map: dict[str, SchemaKeyword]
    ) -> None:
        if type_tag in node:
            return
        implied: set[SchemaType] = set()
        for tag, keyword in reverse_tag_map.items():
            if tag in node:
                implied.update(keyword.implied_types)
        if not implied:
            return
        ordered = [schema_type.value for schema_type in SchemaType if schema_type in implied]
        if include_null:
            ordered.append(SchemaType.NULL.value)
        node[type_tag] = ordered[0] if len(ordered) == 1 else ordered


def _string_list(value: Any) -> list[str] | None:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    return None
