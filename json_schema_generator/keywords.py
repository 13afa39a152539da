"""
JSON Schema dialects and the keywords the generator emits.

Each keyword knows its literal tag per dialect, which schema types its
presence implies and whether its value contains sub-schemas. The clean-up
passes rely on the latter two to walk and merge generated nodes.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum


class SchemaVersion(str, Enum):
    """Target JSON Schema dialect."""

    DRAFT_4 = "draft-04"
    DRAFT_6 = "draft-06"
    DRAFT_7 = "draft-07"
    DRAFT_2019_09 = "draft-2019-09"
    DRAFT_2020_12 = "draft-2020-12"

    @property
    def identifier(self) -> str:
        """Value of the "$schema" keyword for this dialect."""
        return _VERSION_IDENTIFIERS[self]

    @property
    def order(self) -> int:
        return list(SchemaVersion).index(self)

    def is_at_least(self, other: SchemaVersion) -> bool:
        return self.order >= other.order


_VERSION_IDENTIFIERS = {
    SchemaVersion.DRAFT_4: "http://json-schema.org/draft-04/schema#",
    SchemaVersion.DRAFT_6: "http://json-schema.org/draft-06/schema#",
    SchemaVersion.DRAFT_7: "http://json-schema.org/draft-07/schema#",
    SchemaVersion.DRAFT_2019_09: "https://json-schema.org/draft/2019-09/schema",
    SchemaVersion.DRAFT_2020_12: "https://json-schema.org/draft/2020-12/schema",
}


class SchemaType(str, Enum):
    """Values of the "type" keyword, in the order used for strict type info."""

    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"
    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"


class TagContent(Enum):
    """What kind of value a keyword holds."""

    NONE = "none"  # plain value, never a schema
    SCHEMA = "schema"  # a single sub-schema
    ARRAY_OF_SCHEMAS = "array"  # a list of sub-schemas
    NAMED_SCHEMAS = "named"  # an object whose values are sub-schemas


class SchemaKeyword(Enum):
    """Keywords the generator emits or recognizes during clean-up."""

    TAG_SCHEMA = "$schema"
    TAG_ID = "$id"
    TAG_ANCHOR = "$anchor"
    TAG_DEFINITIONS = "$defs"
    TAG_REF = "$ref"
    TAG_REF_MAIN = "#"
    TAG_TYPE = "type"
    TAG_TITLE = "title"
    TAG_DESCRIPTION = "description"
    TAG_CONST = "const"
    TAG_ENUM = "enum"
    TAG_DEFAULT = "default"
    TAG_READ_ONLY = "readOnly"
    TAG_WRITE_ONLY = "writeOnly"

    TAG_ITEMS = "items"
    TAG_PREFIX_ITEMS = "prefixItems"
    TAG_UNEVALUATED_ITEMS = "unevaluatedItems"
    TAG_ITEMS_MIN = "minItems"
    TAG_ITEMS_MAX = "maxItems"
    TAG_ITEMS_UNIQUE = "uniqueItems"

    TAG_PROPERTIES = "properties"
    TAG_REQUIRED = "required"
    TAG_ADDITIONAL_PROPERTIES = "additionalProperties"
    TAG_PATTERN_PROPERTIES = "patternProperties"
    TAG_UNEVALUATED_PROPERTIES = "unevaluatedProperties"
    TAG_DEPENDENT_REQUIRED = "dependentRequired"
    TAG_DEPENDENT_SCHEMAS = "dependentSchemas"
    TAG_PROPERTIES_MIN = "minProperties"
    TAG_PROPERTIES_MAX = "maxProperties"

    TAG_ALLOF = "allOf"
    TAG_ANYOF = "anyOf"
    TAG_ONEOF = "oneOf"
    TAG_NOT = "not"
    TAG_IF = "if"
    TAG_THEN = "then"
    TAG_ELSE = "else"

    TAG_FORMAT = "format"
    TAG_PATTERN = "pattern"
    TAG_LENGTH_MIN = "minLength"
    TAG_LENGTH_MAX = "maxLength"

    TAG_MINIMUM = "minimum"
    TAG_MINIMUM_EXCLUSIVE = "exclusiveMinimum"
    TAG_MAXIMUM = "maximum"
    TAG_MAXIMUM_EXCLUSIVE = "exclusiveMaximum"
    TAG_MULTIPLE_OF = "multipleOf"

    def for_version(self, version: SchemaVersion) -> str:
        """Literal tag of this keyword in the given dialect."""
        overrides = _VERSION_OVERRIDES.get(self)
        if overrides:
            for max_version, tag in overrides:
                if max_version.is_at_least(version):
                    return tag
        return self.value

    def is_supported(self, version: SchemaVersion) -> bool:
        """Whether the dialect knows this keyword at all."""
        min_version = _MIN_VERSIONS.get(self)
        return min_version is None or version.is_at_least(min_version)

    @property
    def implied_types(self) -> tuple[SchemaType, ...]:
        """Schema types a node carrying this keyword is meant to have."""
        return _IMPLIED_TYPES.get(self, ())

    @property
    def content_type(self) -> TagContent:
        return _CONTENT_TYPES.get(self, TagContent.NONE)

    @staticmethod
    def get_reverse_tag_map(
        version: SchemaVersion, keyword_filter: Callable[[SchemaKeyword], bool] = lambda _: True
    ) -> dict[str, SchemaKeyword]:
        """Map literal tags back to keywords, the first keyword winning on shared tags.

        Args:
            version: Dialect determining the literal tags
            keyword_filter: Only keywords matching this are included

        Returns:
            Dictionary from tag to keyword
        """
        result: dict[str, SchemaKeyword] = {}
        for keyword in SchemaKeyword:
            if keyword is SchemaKeyword.TAG_REF_MAIN or not keyword.is_supported(version):
                continue
            if not keyword_filter(keyword):
                continue
            result.setdefault(keyword.for_version(version), keyword)
        return result


# (last dialect using the tag, tag) pairs, checked in order
_VERSION_OVERRIDES: dict[SchemaKeyword, list[tuple[SchemaVersion, str]]] = {
    SchemaKeyword.TAG_ID: [(SchemaVersion.DRAFT_4, "id")],
    SchemaKeyword.TAG_DEFINITIONS: [(SchemaVersion.DRAFT_7, "definitions")],
    SchemaKeyword.TAG_PREFIX_ITEMS: [(SchemaVersion.DRAFT_2019_09, "items")],
    SchemaKeyword.TAG_DEPENDENT_REQUIRED: [(SchemaVersion.DRAFT_7, "dependencies")],
    SchemaKeyword.TAG_DEPENDENT_SCHEMAS: [(SchemaVersion.DRAFT_7, "dependencies")],
}

_MIN_VERSIONS: dict[SchemaKeyword, SchemaVersion] = {
    SchemaKeyword.TAG_CONST: SchemaVersion.DRAFT_6,
    SchemaKeyword.TAG_READ_ONLY: SchemaVersion.DRAFT_7,
    SchemaKeyword.TAG_WRITE_ONLY: SchemaVersion.DRAFT_7,
    SchemaKeyword.TAG_IF: SchemaVersion.DRAFT_7,
    SchemaKeyword.TAG_THEN: SchemaVersion.DRAFT_7,
    SchemaKeyword.TAG_ELSE: SchemaVersion.DRAFT_7,
    SchemaKeyword.TAG_ANCHOR: SchemaVersion.DRAFT_2019_09,
    SchemaKeyword.TAG_UNEVALUATED_ITEMS: SchemaVersion.DRAFT_2019_09,
    SchemaKeyword.TAG_UNEVALUATED_PROPERTIES: SchemaVersion.DRAFT_2019_09,
}

_OBJECT = (SchemaType.OBJECT,)
_ARRAY = (SchemaType.ARRAY,)
_STRING = (SchemaType.STRING,)
_NUMERIC = (SchemaType.INTEGER, SchemaType.NUMBER)

_IMPLIED_TYPES: dict[SchemaKeyword, tuple[SchemaType, ...]] = {
    SchemaKeyword.TAG_PROPERTIES: _OBJECT,
    SchemaKeyword.TAG_REQUIRED: _OBJECT,
    SchemaKeyword.TAG_ADDITIONAL_PROPERTIES: _OBJECT,
    SchemaKeyword.TAG_PATTERN_PROPERTIES: _OBJECT,
    SchemaKeyword.TAG_UNEVALUATED_PROPERTIES: _OBJECT,
    SchemaKeyword.TAG_DEPENDENT_REQUIRED: _OBJECT,
    SchemaKeyword.TAG_DEPENDENT_SCHEMAS: _OBJECT,
    SchemaKeyword.TAG_PROPERTIES_MIN: _OBJECT,
    SchemaKeyword.TAG_PROPERTIES_MAX: _OBJECT,
    SchemaKeyword.TAG_ITEMS: _ARRAY,
    SchemaKeyword.TAG_PREFIX_ITEMS: _ARRAY,
    SchemaKeyword.TAG_UNEVALUATED_ITEMS: _ARRAY,
    SchemaKeyword.TAG_ITEMS_MIN: _ARRAY,
    SchemaKeyword.TAG_ITEMS_MAX: _ARRAY,
    SchemaKeyword.TAG_ITEMS_UNIQUE: _ARRAY,
    SchemaKeyword.TAG_FORMAT: _STRING,
    SchemaKeyword.TAG_PATTERN: _STRING,
    SchemaKeyword.TAG_LENGTH_MIN: _STRING,
    SchemaKeyword.TAG_LENGTH_MAX: _STRING,
    SchemaKeyword.TAG_MINIMUM: _NUMERIC,
    SchemaKeyword.TAG_MINIMUM_EXCLUSIVE: _NUMERIC,
    SchemaKeyword.TAG_MAXIMUM: _NUMERIC,
    SchemaKeyword.TAG_MAXIMUM_EXCLUSIVE: _NUMERIC,
    SchemaKeyword.TAG_MULTIPLE_OF: _NUMERIC,
}

_CONTENT_TYPES: dict[SchemaKeyword, TagContent] = {
    SchemaKeyword.TAG_ITEMS: TagContent.SCHEMA,
    SchemaKeyword.TAG_UNEVALUATED_ITEMS: TagContent.SCHEMA,
    SchemaKeyword.TAG_ADDITIONAL_PROPERTIES: TagContent.SCHEMA,
    SchemaKeyword.TAG_UNEVALUATED_PROPERTIES: TagContent.SCHEMA,
    SchemaKeyword.TAG_NOT: TagContent.SCHEMA,
    SchemaKeyword.TAG_IF: TagContent.SCHEMA,
    SchemaKeyword.TAG_THEN: TagContent.SCHEMA,
    SchemaKeyword.TAG_ELSE: TagContent.SCHEMA,
    SchemaKeyword.TAG_PREFIX_ITEMS: TagContent.ARRAY_OF_SCHEMAS,
    SchemaKeyword.TAG_ALLOF: TagContent.ARRAY_OF_SCHEMAS,
    SchemaKeyword.TAG_ANYOF: TagContent.ARRAY_OF_SCHEMAS,
    SchemaKeyword.TAG_ONEOF: TagContent.ARRAY_OF_SCHEMAS,
    SchemaKeyword.TAG_PROPERTIES: TagContent.NAMED_SCHEMAS,
    SchemaKeyword.TAG_PATTERN_PROPERTIES: TagContent.NAMED_SCHEMAS,
    SchemaKeyword.TAG_DEFINITIONS: TagContent.NAMED_SCHEMAS,
    SchemaKeyword.TAG_DEPENDENT_SCHEMAS: TagContent.NAMED_SCHEMAS,
}
