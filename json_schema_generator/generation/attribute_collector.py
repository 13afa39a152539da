"""
Collects the resolver chain results for a type or a member into schema keywords.
"""

from __future__ import annotations

import enum
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ..config.config_parts import AttributeKind
from ..keywords import SchemaKeyword, SchemaType, SchemaVersion
from ..type_model import NONE_TYPE, MemberScope, ResolvedType, TypeScope

if TYPE_CHECKING:
    from .context import GenerationContext

logger = logging.getLogger(__name__)

SchemaNode = dict[str, Any]

_PLAIN_ATTRIBUTES: dict[AttributeKind, SchemaKeyword] = {
    AttributeKind.ID: SchemaKeyword.TAG_ID,
    AttributeKind.ANCHOR: SchemaKeyword.TAG_ANCHOR,
    AttributeKind.TITLE: SchemaKeyword.TAG_TITLE,
    AttributeKind.DESCRIPTION: SchemaKeyword.TAG_DESCRIPTION,
    AttributeKind.STRING_MIN_LENGTH: SchemaKeyword.TAG_LENGTH_MIN,
    AttributeKind.STRING_MAX_LENGTH: SchemaKeyword.TAG_LENGTH_MAX,
    AttributeKind.STRING_FORMAT: SchemaKeyword.TAG_FORMAT,
    AttributeKind.STRING_PATTERN: SchemaKeyword.TAG_PATTERN,
    AttributeKind.NUMBER_INCLUSIVE_MINIMUM: SchemaKeyword.TAG_MINIMUM,
    AttributeKind.NUMBER_INCLUSIVE_MAXIMUM: SchemaKeyword.TAG_MAXIMUM,
    AttributeKind.NUMBER_MULTIPLE_OF: SchemaKeyword.TAG_MULTIPLE_OF,
    AttributeKind.ARRAY_MIN_ITEMS: SchemaKeyword.TAG_ITEMS_MIN,
    AttributeKind.ARRAY_MAX_ITEMS: SchemaKeyword.TAG_ITEMS_MAX,
    AttributeKind.ARRAY_UNIQUE_ITEMS: SchemaKeyword.TAG_ITEMS_UNIQUE,
}

_OBJECT_ATTRIBUTES = (AttributeKind.ADDITIONAL_PROPERTIES, AttributeKind.PATTERN_PROPERTIES)
_STRING_ATTRIBUTES = (
    AttributeKind.STRING_MIN_LENGTH,
    AttributeKind.STRING_MAX_LENGTH,
    AttributeKind.STRING_FORMAT,
    AttributeKind.STRING_PATTERN,
)
_NUMBER_ATTRIBUTES = (
    AttributeKind.NUMBER_INCLUSIVE_MINIMUM,
    AttributeKind.NUMBER_EXCLUSIVE_MINIMUM,
    AttributeKind.NUMBER_INCLUSIVE_MAXIMUM,
    AttributeKind.NUMBER_EXCLUSIVE_MAXIMUM,
    AttributeKind.NUMBER_MULTIPLE_OF,
)
_ARRAY_ATTRIBUTES = (AttributeKind.ARRAY_MIN_ITEMS, AttributeKind.ARRAY_MAX_ITEMS, AttributeKind.ARRAY_UNIQUE_ITEMS)
_GENERAL_ATTRIBUTES = (
    AttributeKind.ID,
    AttributeKind.ANCHOR,
    AttributeKind.TITLE,
    AttributeKind.DESCRIPTION,
    AttributeKind.DEFAULT,
    AttributeKind.ENUM,
)
_MEMBER_ATTRIBUTES = (
    (
        AttributeKind.TITLE,
        AttributeKind.DESCRIPTION,
        AttributeKind.DEFAULT,
        AttributeKind.ENUM,
        AttributeKind.READ_ONLY,
        AttributeKind.WRITE_ONLY,
    )
    + _OBJECT_ATTRIBUTES
    + _STRING_ATTRIBUTES
    + _NUMBER_ATTRIBUTES
    + _ARRAY_ATTRIBUTES
)


def merge_missing_attributes(target: SchemaNode, attributes: SchemaNode | None) -> None:
    """Copy every attribute the target does not have yet (values are shared, not copied)."""
    if not attributes:
        return
    for key, value in attributes.items():
        if key not in target:
            target[key] = value


def to_json_value(value: Any) -> Any:
    """Convert a Python value into something the json module can write."""
    if isinstance(value, enum.Enum):
        return to_json_value(value.value)
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((to_json_value(item) for item in value), key=repr)
    if isinstance(value, dict):
        return {str(key): to_json_value(item) for key, item in value.items()}
    return value


def is_supported_enum_value(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str, Decimal, enum.Enum))


class AttributeCollector:
    """Turns resolver chain results into keywords on a schema node.

    Args:
        context: The generation context (for keywords and sub-schema references)
    """

    def __init__(self, context: GenerationContext):
        self.context = context
        self.config = context.config

    def collect_member_attributes(self, member: MemberScope) -> SchemaNode:
        """Member-level attributes, followed by the instance attribute overrides."""
        node: SchemaNode = {}
        for kind in _MEMBER_ATTRIBUTES:
            self.set_attribute(node, kind, self.config.resolve_member_attribute(kind, member))
        for override in self.config.instance_attribute_overrides(member):
            override(node, member, self.context)
        return node

    def collect_type_attributes(self, scope: TypeScope, allowed_types: set[str]) -> SchemaNode:
        """Type-level attributes, restricted to the keywords applicable to the allowed schema types.

        Args:
            scope: The type to collect attributes for
            allowed_types: Values of the "type" keyword already present (empty: anything goes)

        Returns:
            The collected attributes
        """
        node: SchemaNode = {}
        kinds = list(_GENERAL_ATTRIBUTES)
        if _allows(allowed_types, SchemaType.OBJECT):
            kinds += _OBJECT_ATTRIBUTES
        if _allows(allowed_types, SchemaType.STRING):
            kinds += _STRING_ATTRIBUTES
        if _allows(allowed_types, SchemaType.INTEGER, SchemaType.NUMBER):
            kinds += _NUMBER_ATTRIBUTES
        if _allows(allowed_types, SchemaType.ARRAY):
            kinds += _ARRAY_ATTRIBUTES
        for kind in kinds:
            self.set_attribute(node, kind, self.config.resolve_type_attribute(kind, scope))
        return node

    def set_attribute(self, node: SchemaNode, kind: AttributeKind, value: Any) -> None:
        """Write a single resolved attribute; None (or False for flags) writes nothing."""
        if value is None:
            return
        if kind in _PLAIN_ATTRIBUTES:
            node[self.context.keyword(_PLAIN_ATTRIBUTES[kind])] = to_json_value(value)
        elif kind is AttributeKind.DEFAULT:
            node[self.context.keyword(SchemaKeyword.TAG_DEFAULT)] = to_json_value(value)
        elif kind is AttributeKind.ENUM:
            self.set_enum(node, value)
        elif kind is AttributeKind.READ_ONLY:
            self._set_flag(node, SchemaKeyword.TAG_READ_ONLY, value)
        elif kind is AttributeKind.WRITE_ONLY:
            self._set_flag(node, SchemaKeyword.TAG_WRITE_ONLY, value)
        elif kind is AttributeKind.ADDITIONAL_PROPERTIES:
            self.set_additional_properties(node, value)
        elif kind is AttributeKind.PATTERN_PROPERTIES:
            self.set_pattern_properties(node, value)
        elif kind is AttributeKind.NUMBER_EXCLUSIVE_MINIMUM:
            self._set_exclusive_bound(node, SchemaKeyword.TAG_MINIMUM_EXCLUSIVE, SchemaKeyword.TAG_MINIMUM, value)
        elif kind is AttributeKind.NUMBER_EXCLUSIVE_MAXIMUM:
            self._set_exclusive_bound(node, SchemaKeyword.TAG_MAXIMUM_EXCLUSIVE, SchemaKeyword.TAG_MAXIMUM, value)

    def _set_flag(self, node: SchemaNode, keyword: SchemaKeyword, value: bool) -> None:
        if value and keyword.is_supported(self.config.schema_version):
            node[self.context.keyword(keyword)] = True

    def _set_exclusive_bound(
        self, node: SchemaNode, exclusive: SchemaKeyword, inclusive: SchemaKeyword, value: Any
    ) -> None:
        value = to_json_value(value)
        if self.config.schema_version != SchemaVersion.DRAFT_4:
            node[self.context.keyword(exclusive)] = value
            return
        # draft 4 only knows boolean flags next to minimum/maximum
        inclusive_tag = self.context.keyword(inclusive)
        if inclusive_tag in node:
            logger.debug(f"exclusive bound {value} dropped in favor of inclusive {node[inclusive_tag]}")
            return
        node[inclusive_tag] = value
        node[self.context.keyword(exclusive)] = True

    def set_enum(self, node: SchemaNode, values: Any) -> None:
        """Write "const" for a single allowed value, "enum" for several; unsupported values are skipped."""
        allowed = []
        for value in values:
            if not is_supported_enum_value(value):
                logger.debug(f"skipping unsupported enum value {value!r}")
                continue
            value = to_json_value(value)
            if value not in allowed:
                allowed.append(value)
        if not allowed:
            return
        use_const = (
            len(allowed) == 1
            and self.config.should_represent_single_allowed_value_as_const
            and SchemaKeyword.TAG_CONST.is_supported(self.config.schema_version)
        )
        if use_const:
            node[self.context.keyword(SchemaKeyword.TAG_CONST)] = allowed[0]
        else:
            node[self.context.keyword(SchemaKeyword.TAG_ENUM)] = allowed

    def set_additional_properties(self, node: SchemaNode, value: Any) -> None:
        """Three-way additionalProperties.

        NoneType means forbidden (false), `object`/Any means unconstrained (the
        keyword is omitted), any other type is referenced as the value schema.
        """
        resolved = value if isinstance(value, ResolvedType) else self.context.type_context.resolve(value)
        keyword = self.context.keyword(SchemaKeyword.TAG_ADDITIONAL_PROPERTIES)
        if resolved.erased_type is NONE_TYPE:
            node[keyword] = False
        elif not resolved.is_any:
            node[keyword] = self.context.create_definition_reference(resolved)

    def set_pattern_properties(self, node: SchemaNode, patterns: dict[str, Any]) -> None:
        if not patterns:
            return
        pattern_node: SchemaNode = {}
        for pattern, value in patterns.items():
            resolved = value if isinstance(value, ResolvedType) else self.context.type_context.resolve(value)
            pattern_node[pattern] = self.context.create_definition_reference(resolved)
        node[self.context.keyword(SchemaKeyword.TAG_PATTERN_PROPERTIES)] = pattern_node


def _allows(allowed_types: set[str], *candidates: SchemaType) -> bool:
    return not allowed_types or any(candidate.value in allowed_types for candidate in candidates)
