"""
Resolver chains: ordered, per-attribute lists of resolver functions.

A config part holds one chain per attribute kind. Resolvers receive a scope
(TypeScope for the general part, FieldScope/MethodScope for the member parts)
and return None when they have no opinion.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any, Generic, TypeVar

from ..errors import ConfigurationError
from .custom_definition import (
    CustomDefinitionProvider,
    CustomPropertyDefinitionProvider,
    InstanceAttributeOverride,
    SubtypeResolver,
    TypeAttributeOverride,
)

S = TypeVar("S")


class Combination(Enum):
    """How the results of a chain are combined."""

    FIRST_NON_NULL = "first"  # first resolver returning something other than None wins
    ANY_MATCH = "any"  # true as soon as one resolver returns a truthy value
    ANY_TRUE = "any_true"  # None if no resolver has an opinion, else whether any said True


class AttributeKind(str, Enum):
    """Attributes that can be contributed through a resolver chain."""

    # type-level and member-level
    TITLE = "title"
    DESCRIPTION = "description"
    DEFAULT = "default"
    ENUM = "enum"
    ADDITIONAL_PROPERTIES = "additional_properties"
    PATTERN_PROPERTIES = "pattern_properties"
    STRING_MIN_LENGTH = "string_min_length"
    STRING_MAX_LENGTH = "string_max_length"
    STRING_FORMAT = "string_format"
    STRING_PATTERN = "string_pattern"
    NUMBER_INCLUSIVE_MINIMUM = "number_inclusive_minimum"
    NUMBER_EXCLUSIVE_MINIMUM = "number_exclusive_minimum"
    NUMBER_INCLUSIVE_MAXIMUM = "number_inclusive_maximum"
    NUMBER_EXCLUSIVE_MAXIMUM = "number_exclusive_maximum"
    NUMBER_MULTIPLE_OF = "number_multiple_of"
    ARRAY_MIN_ITEMS = "array_min_items"
    ARRAY_MAX_ITEMS = "array_max_items"
    ARRAY_UNIQUE_ITEMS = "array_unique_items"

    # general (type-level) only
    ID = "id"
    ANCHOR = "anchor"

    # member-level only
    IGNORE = "ignore"
    REQUIRED = "required"
    NULLABLE = "nullable"
    READ_ONLY = "read_only"
    WRITE_ONLY = "write_only"
    TARGET_TYPE_OVERRIDES = "target_type_overrides"
    PROPERTY_NAME_OVERRIDE = "property_name_override"

    @property
    def combination(self) -> Combination:
        if self in (AttributeKind.IGNORE, AttributeKind.READ_ONLY, AttributeKind.WRITE_ONLY):
            return Combination.ANY_MATCH
        if self is AttributeKind.NULLABLE:
            return Combination.ANY_TRUE
        return Combination.FIRST_NON_NULL


_GENERAL_ONLY = {AttributeKind.ID, AttributeKind.ANCHOR}
_MEMBER_ONLY = {
    AttributeKind.IGNORE,
    AttributeKind.REQUIRED,
    AttributeKind.NULLABLE,
    AttributeKind.READ_ONLY,
    AttributeKind.WRITE_ONLY,
    AttributeKind.TARGET_TYPE_OVERRIDES,
    AttributeKind.PROPERTY_NAME_OVERRIDE,
}
COMMON_ATTRIBUTES = frozenset(AttributeKind) - _GENERAL_ONLY - _MEMBER_ONLY
GENERAL_ATTRIBUTES = COMMON_ATTRIBUTES | _GENERAL_ONLY
MEMBER_ATTRIBUTES = COMMON_ATTRIBUTES | _MEMBER_ONLY


class ResolverChain(Generic[S]):
    """Ordered resolvers for one attribute kind, consulted in registration order."""

    def __init__(self, kind: AttributeKind, resolvers: tuple[Callable[[S], Any], ...] = ()):
        self.kind = kind
        self._resolvers = tuple(resolvers)

    def appended(self, resolver: Callable[[S], Any]) -> ResolverChain[S]:
        return ResolverChain(self.kind, self._resolvers + (resolver,))

    def resolve(self, scope: S) -> Any:
        combination = self.kind.combination
        if combination is Combination.ANY_MATCH:
            return any(resolver(scope) for resolver in self._resolvers)
        if combination is Combination.ANY_TRUE:
            results = [result for result in (resolver(scope) for resolver in self._resolvers) if result is not None]
            return any(results) if results else None
        for resolver in self._resolvers:
            result = resolver(scope)
            if result is not None:
                return result
        return None

    def __iter__(self) -> Iterator[Callable[[S], Any]]:
        return iter(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)


class ConfigPart(Generic[S]):
    """Resolver chains for one kind of scope.

    Parts are filled while the ConfigBuilder is open and frozen by build();
    registering on a frozen part raises a ConfigurationError.
    """

    supported_attributes: frozenset[AttributeKind] = COMMON_ATTRIBUTES

    def __init__(self, name: str):
        self.name = name
        self._chains: dict[AttributeKind, ResolverChain[S]] = {}
        self._frozen = False

    def _check_open(self) -> None:
        if self._frozen:
            raise ConfigurationError(f"The {self.name} configuration is frozen; register resolvers before build()")

    def with_resolver(self, kind: AttributeKind, resolver: Callable[[S], Any]) -> ConfigPart[S]:
        """Append a resolver to the chain of the given attribute kind.

        Args:
            kind: The attribute the resolver contributes
            resolver: Callable taking the scope and returning a value or None

        Returns:
            This part, for chaining
        """
        self._check_open()
        if kind not in self.supported_attributes:
            raise ConfigurationError(f"Attribute '{kind.value}' cannot be configured for {self.name}")
        chain = self._chains.get(kind) or ResolverChain(kind)
        self._chains[kind] = chain.appended(resolver)
        return self

    def resolve(self, kind: AttributeKind, scope: S) -> Any:
        chain = self._chains.get(kind)
        if chain is None:
            return False if kind.combination is Combination.ANY_MATCH else None
        return chain.resolve(scope)

    def chain(self, kind: AttributeKind) -> ResolverChain[S]:
        return self._chains.get(kind) or ResolverChain(kind)

    def freeze(self) -> None:
        self._frozen = True

    def registered_callables(self) -> Iterator[Any]:
        """Every resolver registered on this part (used for the reset lifecycle)."""
        for chain in self._chains.values():
            yield from chain


class GeneralConfigPart(ConfigPart[S]):
    """Type-level attributes, resolved against a TypeScope.

    Also holds the type-level custom definition providers, subtype resolvers,
    type attribute overrides, the definition naming strategy and the property
    sort key.
    """

    supported_attributes = GENERAL_ATTRIBUTES

    def __init__(self, name: str):
        super().__init__(name)
        self.custom_definition_providers: list[CustomDefinitionProvider] = []
        self.subtype_resolvers: list[SubtypeResolver] = []
        self.type_attribute_overrides: list[TypeAttributeOverride] = []
        self.definition_naming_strategy: Any = None
        self.property_sort_key: Callable[[Any], Any] | None = None

    def with_custom_definition_provider(self, provider: CustomDefinitionProvider) -> GeneralConfigPart[S]:
        self._check_open()
        self.custom_definition_providers.append(provider)
        return self

    def with_subtype_resolver(self, resolver: SubtypeResolver) -> GeneralConfigPart[S]:
        self._check_open()
        self.subtype_resolvers.append(resolver)
        return self

    def with_type_attribute_override(self, override: TypeAttributeOverride) -> GeneralConfigPart[S]:
        self._check_open()
        self.type_attribute_overrides.append(override)
        return self

    def with_definition_naming_strategy(self, strategy: Any) -> GeneralConfigPart[S]:
        """Replace the naming strategy for definition keys (last registration wins)."""
        self._check_open()
        self.definition_naming_strategy = strategy
        return self

    def with_property_sort_key(self, sort_key: Callable[[Any], Any]) -> GeneralConfigPart[S]:
        """Replace the sort key applied to the collected member scopes (last registration wins)."""
        self._check_open()
        self.property_sort_key = sort_key
        return self

    def freeze(self) -> None:
        super().freeze()
        self.custom_definition_providers = tuple(self.custom_definition_providers)
        self.subtype_resolvers = tuple(self.subtype_resolvers)
        self.type_attribute_overrides = tuple(self.type_attribute_overrides)

    def registered_callables(self) -> Iterator[Any]:
        yield from super().registered_callables()
        yield from self.custom_definition_providers
        yield from self.subtype_resolvers
        yield from self.type_attribute_overrides


class MemberConfigPart(ConfigPart[S]):
    """Member-level attributes for either fields or methods.

    Besides the resolver chains, a member part holds the member-level custom
    definition providers and the instance attribute overrides.
    """

    supported_attributes = MEMBER_ATTRIBUTES

    def __init__(self, name: str):
        super().__init__(name)
        self.custom_definition_providers: list[CustomPropertyDefinitionProvider] = []
        self.instance_attribute_overrides: list[InstanceAttributeOverride] = []

    def with_custom_definition_provider(self, provider: CustomPropertyDefinitionProvider) -> MemberConfigPart[S]:
        self._check_open()
        self.custom_definition_providers.append(provider)
        return self

    def with_instance_attribute_override(self, override: InstanceAttributeOverride) -> MemberConfigPart[S]:
        self._check_open()
        self.instance_attribute_overrides.append(override)
        return self

    # Shortcuts for the member checks every module needs

    def with_ignore_check(self, check: Callable[[S], bool]) -> MemberConfigPart[S]:
        return self.with_resolver(AttributeKind.IGNORE, check)

    def with_required_check(self, check: Callable[[S], bool | None]) -> MemberConfigPart[S]:
        return self.with_resolver(AttributeKind.REQUIRED, check)

    def with_nullable_check(self, check: Callable[[S], bool | None]) -> MemberConfigPart[S]:
        return self.with_resolver(AttributeKind.NULLABLE, check)

    def with_target_type_override_resolver(self, resolver: Callable[[S], list | None]) -> MemberConfigPart[S]:
        return self.with_resolver(AttributeKind.TARGET_TYPE_OVERRIDES, resolver)

    def with_property_name_override_resolver(self, resolver: Callable[[S], str | None]) -> MemberConfigPart[S]:
        return self.with_resolver(AttributeKind.PROPERTY_NAME_OVERRIDE, resolver)

    def freeze(self) -> None:
        super().freeze()
        self.custom_definition_providers = tuple(self.custom_definition_providers)
        self.instance_attribute_overrides = tuple(self.instance_attribute_overrides)

    def registered_callables(self) -> Iterator[Any]:
        yield from super().registered_callables()
        yield from self.custom_definition_providers
        yield from self.instance_attribute_overrides
