"""
Immutable configuration snapshot consumed by the generation context.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..keywords import SchemaKeyword, SchemaVersion
from ..type_model import MemberScope, MethodScope, ResolvedType, TypeScope
from .config_parts import AttributeKind, GeneralConfigPart, MemberConfigPart
from .custom_definition import (
    CustomDefinition,
    CustomPropertyDefinition,
    InstanceAttributeOverride,
    TypeAttributeOverride,
    stateful_target,
)
from .naming import (
    CleanDefinitionNamingStrategy,
    DefaultDefinitionNamingStrategy,
    DefinitionNamingStrategy,
    default_property_sort_key,
    plain_key,
    uri_compatible_key,
)
from .options import Option

if TYPE_CHECKING:
    from ..generation.context import GenerationContext

logger = logging.getLogger(__name__)


class GeneratorConfig:
    """Frozen result of ConfigBuilder.build().

    Args:
        schema_version: Target dialect
        enabled_options: Options in effect (after overrides were applied)
        types_part: Type-level resolvers and providers
        fields_part: Field resolvers and providers
        methods_part: Method resolvers and providers
    """

    def __init__(
        self,
        schema_version: SchemaVersion,
        enabled_options: frozenset[Option],
        types_part: GeneralConfigPart,
        fields_part: MemberConfigPart,
        methods_part: MemberConfigPart,
    ):
        self.schema_version = schema_version
        self.enabled_options = enabled_options
        self._types_part = types_part
        self._fields_part = fields_part
        self._methods_part = methods_part
        strategy = types_part.definition_naming_strategy or DefaultDefinitionNamingStrategy()
        cleanup = plain_key if self.is_option_enabled(Option.PLAIN_DEFINITION_KEYS) else uri_compatible_key
        self.definition_naming_strategy: DefinitionNamingStrategy = CleanDefinitionNamingStrategy(strategy, cleanup)
        self.property_sort_key = types_part.property_sort_key or default_property_sort_key

    def is_option_enabled(self, option: Option) -> bool:
        return option in self.enabled_options

    def keyword(self, keyword: SchemaKeyword) -> str:
        """Literal tag of a keyword in the configured dialect."""
        return keyword.for_version(self.schema_version)

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    @property
    def should_include_schema_version_indicator(self) -> bool:
        return self.is_option_enabled(Option.SCHEMA_VERSION_INDICATOR)

    @property
    def should_create_definitions_for_all_objects(self) -> bool:
        return self.is_option_enabled(Option.DEFINITIONS_FOR_ALL_OBJECTS)

    @property
    def should_create_definition_for_main_schema(self) -> bool:
        return self.is_option_enabled(Option.DEFINITION_FOR_MAIN_SCHEMA)

    @property
    def should_inline_all_schemas(self) -> bool:
        return self.is_option_enabled(Option.INLINE_ALL_SCHEMAS)

    @property
    def should_inline_nullable_schemas(self) -> bool:
        return self.is_option_enabled(Option.INLINE_NULLABLE_SCHEMAS)

    @property
    def should_include_static_fields(self) -> bool:
        return self.is_option_enabled(Option.PUBLIC_STATIC_FIELDS) or self.is_option_enabled(
            Option.NONPUBLIC_STATIC_FIELDS
        )

    @property
    def should_include_static_methods(self) -> bool:
        return self.is_option_enabled(Option.STATIC_METHODS)

    @property
    def should_include_extra_open_api_format_values(self) -> bool:
        return self.is_option_enabled(Option.EXTRA_OPEN_API_FORMAT_VALUES)

    @property
    def should_represent_single_allowed_value_as_const(self) -> bool:
        return not self.is_option_enabled(Option.ENUM_KEYWORD_FOR_SINGLE_VALUES)

    @property
    def should_allow_nullable_array_items(self) -> bool:
        return self.is_option_enabled(Option.NULLABLE_ARRAY_ITEMS_ALLOWED)

    @property
    def should_clean_up_all_of_nodes(self) -> bool:
        return self.is_option_enabled(Option.ALLOF_CLEANUP_AT_THE_END)

    @property
    def should_clean_up_duplicate_member_attributes(self) -> bool:
        return self.is_option_enabled(Option.DUPLICATE_MEMBER_ATTRIBUTE_CLEANUP_AT_THE_END)

    @property
    def should_include_strict_type_info(self) -> bool:
        return self.is_option_enabled(Option.STRICT_TYPE_INFO)

    # ------------------------------------------------------------------
    # Custom definitions and subtypes
    # ------------------------------------------------------------------

    def get_custom_definition(
        self, resolved_type: ResolvedType, context: GenerationContext, ignored_provider: Any = None
    ) -> CustomDefinition | None:
        """First non-None result of the type-level providers after the ignored one."""
        return _first_definition(
            self._types_part.custom_definition_providers, ignored_provider, resolved_type, context
        )

    def get_custom_property_definition(
        self, member: MemberScope, context: GenerationContext, ignored_provider: Any = None
    ) -> CustomPropertyDefinition | None:
        """First non-None result of the member-level providers after the ignored one."""
        providers = self._member_part(member).custom_definition_providers
        return _first_definition(providers, ignored_provider, member, context)

    def resolve_subtypes(self, resolved_type: ResolvedType, context: GenerationContext) -> list[ResolvedType]:
        for resolver in self._types_part.subtype_resolvers:
            subtypes = resolver(resolved_type, context)
            if subtypes is not None:
                return list(subtypes)
        return []

    @property
    def type_attribute_overrides(self) -> tuple[TypeAttributeOverride, ...]:
        return tuple(self._types_part.type_attribute_overrides)

    def instance_attribute_overrides(self, member: MemberScope) -> tuple[InstanceAttributeOverride, ...]:
        return tuple(self._member_part(member).instance_attribute_overrides)

    # ------------------------------------------------------------------
    # Resolver chains
    # ------------------------------------------------------------------

    def _member_part(self, member: MemberScope) -> MemberConfigPart:
        return self._methods_part if isinstance(member, MethodScope) else self._fields_part

    def resolve_type_attribute(self, kind: AttributeKind, scope: TypeScope) -> Any:
        return self._types_part.resolve(kind, scope)

    def resolve_member_attribute(self, kind: AttributeKind, member: MemberScope) -> Any:
        return self._member_part(member).resolve(kind, member)

    def should_ignore(self, member: MemberScope) -> bool:
        return bool(self.resolve_member_attribute(AttributeKind.IGNORE, member))

    def is_nullable(self, member: MemberScope) -> bool:
        """Explicit nullable checks, else the option default for non-item members."""
        result = self.resolve_member_attribute(AttributeKind.NULLABLE, member)
        if result is not None:
            return result
        if member.is_fake_container_item_scope():
            return False
        if isinstance(member, MethodScope):
            return self.is_option_enabled(Option.NULLABLE_METHOD_RETURN_VALUES_BY_DEFAULT)
        return self.is_option_enabled(Option.NULLABLE_FIELDS_BY_DEFAULT)

    def is_required(self, member: MemberScope) -> bool:
        result = self.resolve_member_attribute(AttributeKind.REQUIRED, member)
        if result is not None:
            return result
        if self.is_option_enabled(Option.REQUIRED_UNLESS_NULLABLE):
            return not self.is_nullable(member)
        return False

    def is_read_only(self, member: MemberScope) -> bool:
        return bool(self.resolve_member_attribute(AttributeKind.READ_ONLY, member))

    def is_write_only(self, member: MemberScope) -> bool:
        return bool(self.resolve_member_attribute(AttributeKind.WRITE_ONLY, member))

    def resolve_target_type_overrides(self, member: MemberScope) -> list[ResolvedType] | None:
        overrides = self.resolve_member_attribute(AttributeKind.TARGET_TYPE_OVERRIDES, member)
        return None if overrides is None else list(overrides)

    def resolve_property_name_override(self, member: MemberScope) -> str | None:
        return self.resolve_member_attribute(AttributeKind.PROPERTY_NAME_OVERRIDE, member)

    def sort_properties(self, members: list[MemberScope]) -> list[MemberScope]:
        return sorted(members, key=self.property_sort_key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset_after_schema_generation_finished(self) -> None:
        """Reset every stateful callable registered on any config part (once each)."""
        seen: set[int] = set()
        for part in (self._types_part, self._fields_part, self._methods_part):
            for candidate in part.registered_callables():
                target = stateful_target(candidate)
                if target is None or id(target) in seen:
                    continue
                seen.add(id(target))
                target.reset_after_schema_generation_finished()
        target = stateful_target(self.definition_naming_strategy)
        if target is not None and id(target) not in seen:
            target.reset_after_schema_generation_finished()


def _first_definition(providers, ignored_provider, subject, context):
    start = 0
    if ignored_provider is not None:
        for index, provider in enumerate(providers):
            if provider == ignored_provider:
                start = index + 1
                break
    for provider in providers[start:]:
        result = provider(subject, context)
        if result is not None:
            logger.debug(f"custom definition from {provider!r} applied to {subject!r}")
            return result
    return None
