"""
Generation context: the run-scoped definition cache and reference bookkeeping.

Every type reached during one generation run is described once. Shared
definitions are stored under their DefinitionKey before their content is
generated, so recursive structures terminate on the cache. All other places
using a type receive an empty reference node that the SchemaBuilder later
turns into a "$ref" or fills with the (inlined) definition.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ..config.custom_definition import DefinitionType
from ..errors import CircularDefinitionError, SchemaGenerationError
from ..keywords import SchemaKeyword, SchemaType
from ..type_model import MemberScope, MethodScope, RawField, RawMethod, ResolvedType, TypeContext, TypeScope
from .attribute_collector import AttributeCollector, merge_missing_attributes
from .definition_key import DefinitionKey

if TYPE_CHECKING:
    from ..config import CustomDefinition, GeneratorConfig

logger = logging.getLogger(__name__)

SchemaNode = dict[str, Any]

# keywords whose content cannot be extended with "null" by adjusting "type"
_COMPOSITE_KEYWORDS = (
    SchemaKeyword.TAG_REF,
    SchemaKeyword.TAG_ALLOF,
    SchemaKeyword.TAG_ANYOF,
    SchemaKeyword.TAG_ONEOF,
    SchemaKeyword.TAG_CONST,
    SchemaKeyword.TAG_ENUM,
)


class GenerationContext:
    """State of one generation run.

    Args:
        config: The frozen generator configuration
        type_context: Type resolution shared with the generator
    """

    def __init__(self, config: GeneratorConfig, type_context: TypeContext):
        self.config = config
        self.type_context = type_context
        self._definitions: dict[DefinitionKey, SchemaNode] = {}
        self._references: dict[DefinitionKey, list[SchemaNode]] = {}
        self._nullable_references: dict[DefinitionKey, list[SchemaNode]] = {}
        # definitions being built inline, since the last shared definition that was cached
        self._ancestor_chain: list[DefinitionKey] = []
        self.attribute_collector = AttributeCollector(self)

    def keyword(self, keyword: SchemaKeyword) -> str:
        return self.config.keyword(keyword)

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def parse_type(self, resolved: ResolvedType) -> DefinitionKey:
        """Generate the definition of a root type (and everything it references)."""
        try:
            self._traverse(self.type_context.create_type_scope(resolved), None, False, False, None)
        except SchemaGenerationError as e:
            e.add_context(resolved.describe())
            raise
        return DefinitionKey(resolved)

    def put_definition(self, resolved: ResolvedType, node: SchemaNode, ignored_provider: Any = None) -> None:
        self._definitions[DefinitionKey(resolved, ignored_provider)] = node

    def contains_definition(self, resolved: ResolvedType, ignored_provider: Any = None) -> bool:
        return DefinitionKey(resolved, ignored_provider) in self._definitions

    def get_definition(self, key: DefinitionKey) -> SchemaNode | None:
        return self._definitions.get(key)

    @property
    def defined_keys(self) -> list[DefinitionKey]:
        """Keys of all stored definitions, in the order they were created."""
        return list(self._definitions)

    def add_reference(
        self, resolved: ResolvedType, node: SchemaNode, ignored_provider: Any = None, nullable: bool = False
    ) -> None:
        """Record a node that should end up pointing at (or containing) the definition of a type."""
        target = self._nullable_references if nullable else self._references
        target.setdefault(DefinitionKey(resolved, ignored_provider), []).append(node)

    def get_references(self, key: DefinitionKey) -> list[SchemaNode]:
        return list(self._references.get(key, ()))

    def get_nullable_references(self, key: DefinitionKey) -> list[SchemaNode]:
        return list(self._nullable_references.get(key, ()))

    def should_never_inline_definition(self, key: DefinitionKey) -> bool:
        """Whether a custom definition demanded a named definition for this key."""
        custom_definition = self.config.get_custom_definition(key.type, self, key.ignored_provider)
        return custom_definition is not None and custom_definition.definition_type == DefinitionType.ALWAYS_REF

    # ------------------------------------------------------------------
    # API for custom definition providers
    # ------------------------------------------------------------------

    def create_definition(self, resolved: ResolvedType) -> SchemaNode:
        """The full (inline) definition of a type, custom definitions included."""
        return self.create_standard_definition(resolved, None)

    def create_definition_reference(self, resolved: ResolvedType) -> SchemaNode:
        """A reference node to the definition of a type."""
        return self.create_standard_definition_reference(resolved, None)

    def create_standard_definition(self, target: ResolvedType | MemberScope, ignored_provider: Any = None) -> Any:
        """The inline definition of a type or member, skipping custom definitions up to the ignored provider.

        Args:
            target: A resolved type or a member scope
            ignored_provider: The calling provider; it and all providers before it are skipped

        Returns:
            The schema node (False for a method without return value)
        """
        if isinstance(target, MemberScope):
            return self._create_member_schema(target, False, True, ignored_provider)
        node: SchemaNode = {}
        self._traverse(self.type_context.create_type_scope(target), node, False, True, ignored_provider)
        return node

    def create_standard_definition_reference(
        self, target: ResolvedType | MemberScope, ignored_provider: Any = None
    ) -> Any:
        """Like create_standard_definition(), but shared definitions are referenced instead of inlined."""
        if isinstance(target, MemberScope):
            return self._create_member_schema(target, False, False, ignored_provider)
        node: SchemaNode = {}
        self._traverse(self.type_context.create_type_scope(target), node, False, False, ignored_provider)
        return node

    def make_nullable(self, node: SchemaNode) -> SchemaNode:
        """Allow null in addition to what the node describes (in place).

        Nodes with references, compositions or fixed values are wrapped into
        an anyOf with a null schema; otherwise "null" is added to "type".
        """
        type_tag = self.keyword(SchemaKeyword.TAG_TYPE)
        null_type = SchemaType.NULL.value
        if any(self.keyword(keyword) in node for keyword in _COMPOSITE_KEYWORDS):
            wrapped = dict(node)
            node.clear()
            node[self.keyword(SchemaKeyword.TAG_ANYOF)] = [{type_tag: null_type}, wrapped]
            return node
        declared = node.get(type_tag)
        if isinstance(declared, list):
            if null_type not in declared:
                node[type_tag] = declared + [null_type]
        elif isinstance(declared, str) and declared != null_type:
            node[type_tag] = [declared, null_type]
        return node

    # ------------------------------------------------------------------
    # Cycle detection
    # ------------------------------------------------------------------

    @contextmanager
    def _building(self, key: DefinitionKey) -> Iterator[None]:
        if key in self._ancestor_chain:
            start = self._ancestor_chain.index(key)
            chain = [ancestor.describe() for ancestor in self._ancestor_chain[start:]] + [key.describe()]
            raise CircularDefinitionError(chain)
        self._ancestor_chain.append(key)
        try:
            yield
        finally:
            self._ancestor_chain.pop()

    @contextmanager
    def _behind_cached_definition(self) -> Iterator[None]:
        # any path back to an ancestor goes through a cached definition from here on
        saved = self._ancestor_chain
        self._ancestor_chain = []
        try:
            yield
        finally:
            self._ancestor_chain = saved

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _traverse(
        self,
        scope: TypeScope,
        target_node: SchemaNode | None,
        is_nullable: bool,
        force_inline: bool,
        ignored_provider: Any,
    ) -> None:
        target_type = scope.type
        if not force_inline and self.contains_definition(target_type, ignored_provider):
            logger.debug(f"adding reference to existing definition of {target_type}")
            self.add_reference(target_type, target_node, ignored_provider, is_nullable)
            return
        key = DefinitionKey(target_type, ignored_provider)
        with self._building(key):
            custom_definition = self.config.get_custom_definition(target_type, self, ignored_provider)
            if custom_definition is not None and (custom_definition.is_meant_to_be_inline or force_inline):
                definition = self._apply_inline_custom_definition(
                    custom_definition, key, target_node, is_nullable
                )
                include_type_attributes = custom_definition.should_include_attributes
            else:
                is_container = self.type_context.is_container_type(target_type)
                if force_inline or (is_container and target_node is not None and custom_definition is None):
                    definition = target_node
                    include_type_attributes = self._fill_definition(scope, definition, custom_definition, is_nullable)
                else:
                    definition = {}
                    self.put_definition(target_type, definition, ignored_provider)
                    if target_node is not None:
                        self.add_reference(target_type, target_node, ignored_provider, is_nullable)
                    with self._behind_cached_definition():
                        include_type_attributes = self._fill_definition(
                            scope, definition, custom_definition, is_nullable
                        )
            if include_type_attributes:
                allowed_types = self._collect_allowed_schema_types(definition)
                type_attributes = self.attribute_collector.collect_type_attributes(scope, allowed_types)
                # existing entries win over collected ones
                type_attributes.update(definition)
                definition.update(type_attributes)
            for override in self.config.type_attribute_overrides:
                override(definition, scope, self)

    def _apply_inline_custom_definition(
        self,
        custom_definition: CustomDefinition,
        key: DefinitionKey,
        target_node: SchemaNode | None,
        is_nullable: bool,
    ) -> SchemaNode:
        if target_node is None:
            logger.debug(f"storing custom inline definition of {key.type} as main schema")
            definition = custom_definition.value
            self.put_definition(key.type, definition, key.ignored_provider)
        else:
            logger.debug(f"applying custom inline definition of {key.type}")
            target_node.update(custom_definition.value)
            definition = target_node
        if is_nullable:
            self.make_nullable(definition)
        return definition

    def _fill_definition(
        self,
        scope: TypeScope,
        definition: SchemaNode,
        custom_definition: CustomDefinition | None,
        is_nullable: bool,
    ) -> bool:
        """Generate the content of a definition; returns whether type attributes should be added."""
        if custom_definition is not None:
            logger.debug(f"applying custom definition of {scope.type}")
            definition.update(custom_definition.value)
            return custom_definition.should_include_attributes
        if self.type_context.is_container_type(scope.type):
            logger.debug(f"generating array definition for {scope.type}")
            self._generate_array_definition(scope, definition, is_nullable)
            return True
        logger.debug(f"generating definition for {scope.type}")
        return not self._add_subtype_references(scope.type, definition)

    def _add_subtype_references(self, target_type: ResolvedType, definition: SchemaNode) -> bool:
        subtypes = self.config.resolve_subtypes(target_type, self)
        if not subtypes:
            self._generate_object_definition(target_type, definition)
            return False
        # always wrapped, so the subtype never shares its node with the supertype
        keyword = SchemaKeyword.TAG_ALLOF if len(subtypes) == 1 else SchemaKeyword.TAG_ANYOF
        options: list[SchemaNode] = []
        definition[self.keyword(keyword)] = options
        for subtype in subtypes:
            option: SchemaNode = {}
            options.append(option)
            self._traverse(self.type_context.create_type_scope(subtype), option, False, False, None)
        return True

    def _collect_allowed_schema_types(self, definition: SchemaNode) -> set[str]:
        declared = definition.get(self.keyword(SchemaKeyword.TAG_TYPE))
        if declared is None:
            return set()
        if isinstance(declared, str):
            return {declared}
        return set(declared)

    def _generate_array_definition(self, scope: TypeScope, definition: SchemaNode, is_nullable: bool) -> None:
        type_tag = self.keyword(SchemaKeyword.TAG_TYPE)
        if is_nullable:
            definition[type_tag] = [SchemaType.ARRAY.value, SchemaType.NULL.value]
        else:
            definition[type_tag] = SchemaType.ARRAY.value
        items_tag = self.keyword(SchemaKeyword.TAG_ITEMS)
        if isinstance(scope, MemberScope) and not scope.is_fake_container_item_scope():
            definition[items_tag] = self._populate_member_schema(scope.as_fake_container_item_scope())
        else:
            items: SchemaNode = {}
            definition[items_tag] = items
            item_scope = self.type_context.create_type_scope(scope.get_container_item_type())
            self._traverse(item_scope, items, False, False, None)

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def _generate_object_definition(self, target_type: ResolvedType, definition: SchemaNode) -> None:
        definition[self.keyword(SchemaKeyword.TAG_TYPE)] = SchemaType.OBJECT.value
        properties: dict[str, MemberScope] = {}
        required: set[str] = set()
        self._collect_object_properties(target_type, properties, required)
        if not properties:
            return
        sorted_members = self.config.sort_properties(list(properties.values()))
        properties_node: SchemaNode = {}
        for member in sorted_members:
            properties_node[member.schema_property_name] = self._populate_member_schema(member)
        definition[self.keyword(SchemaKeyword.TAG_PROPERTIES)] = properties_node
        # same order as the properties
        required_names = [
            member.schema_property_name for member in sorted_members if member.schema_property_name in required
        ]
        if required_names:
            definition[self.keyword(SchemaKeyword.TAG_REQUIRED)] = required_names

    def _collect_object_properties(
        self, target_type: ResolvedType, properties: dict[str, MemberScope], required: set[str]
    ) -> None:
        logger.debug(f"collecting fields and methods from {target_type}")
        members = self.type_context.resolve_with_members(target_type)
        raw_members: list[RawField | RawMethod] = [*members.member_fields, *members.member_methods]
        if self.config.should_include_static_fields:
            raw_members += members.static_fields
        if self.config.should_include_static_methods:
            raw_members += members.static_methods
        for raw_member in raw_members:
            try:
                if isinstance(raw_member, RawField):
                    member = self.type_context.create_field_scope(raw_member, members)
                else:
                    member = self.type_context.create_method_scope(raw_member, members)
            except SchemaGenerationError as e:
                e.add_context(f"{target_type}.{raw_member.name}")
                raise
            self._collect_member(member, properties, required)

    def _collect_member(self, member: MemberScope, properties: dict[str, MemberScope], required: set[str]) -> None:
        if self.config.should_ignore(member):
            return
        name_override = self.config.resolve_property_name_override(member)
        if name_override is not None:
            member = member.with_overridden_name(name_override)
        name = member.schema_property_name
        if self.config.is_required(member):
            required.add(name)
        if name in properties:
            logger.debug(f"ignoring overridden {member.declaring_type}.{member.declared_name}")
            return
        properties[name] = member

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def _populate_member_schema(self, member: MemberScope) -> Any:
        try:
            return self._populate_member_options(member)
        except SchemaGenerationError as e:
            e.add_context(f"{member.declaring_type}.{member.declared_name}")
            raise

    def _populate_member_options(self, member: MemberScope) -> Any:
        is_void = isinstance(member, MethodScope) and member.is_void()
        type_overrides = self.config.resolve_target_type_overrides(member)
        if type_overrides is None and not is_void:
            type_overrides = self.config.resolve_subtypes(member.type, self)
        options = [member.with_overridden_type(option) for option in type_overrides] if type_overrides else [member]
        # nullability is determined on the declared type
        is_nullable = is_void or (
            (not member.is_fake_container_item_scope() or self.config.should_allow_nullable_array_items)
            and self.config.is_nullable(member)
        )
        if len(options) == 1:
            return self._create_member_schema(options[0], is_nullable, False, None)
        any_of: list[Any] = []
        if is_nullable:
            any_of.append({self.keyword(SchemaKeyword.TAG_TYPE): SchemaType.NULL.value})
        any_of.extend(self._create_member_schema(option, False, False, None) for option in options)
        return {self.keyword(SchemaKeyword.TAG_ANYOF): any_of}

    def _create_member_schema(
        self, member: MemberScope, is_nullable: bool, force_inline: bool, ignored_provider: Any
    ) -> Any:
        if isinstance(member, MethodScope) and member.is_void():
            return False
        node: SchemaNode = {}
        attributes = self.attribute_collector.collect_member_attributes(member)
        self._fill_member_schema(member, node, is_nullable, force_inline, attributes, ignored_provider)
        return node

    def _fill_member_schema(
        self,
        member: MemberScope,
        target_node: SchemaNode,
        is_nullable: bool,
        force_inline: bool,
        attributes: SchemaNode,
        ignored_provider: Any,
    ) -> None:
        custom_definition = self.config.get_custom_property_definition(member, self, ignored_provider)
        if custom_definition is None:
            custom_definition = self.config.get_custom_definition(member.type, self, None)
        if custom_definition is not None and custom_definition.is_meant_to_be_inline:
            target_node.update(custom_definition.value)
            if custom_definition.should_include_attributes:
                merge_missing_attributes(target_node, attributes)
                allowed_types = self._collect_allowed_schema_types(target_node)
                merge_missing_attributes(
                    target_node, self.attribute_collector.collect_type_attributes(member, allowed_types)
                )
            if is_nullable:
                self.make_nullable(target_node)
            return
        if (custom_definition is not None and not custom_definition.should_include_attributes) or not attributes:
            reference_container = target_node
        elif custom_definition is None and member.is_container_type():
            reference_container = target_node
            merge_missing_attributes(target_node, attributes)
        else:
            # keep a potential "$ref" apart from the member's own attributes
            reference_container = {}
            target_node[self.keyword(SchemaKeyword.TAG_ALLOF)] = [reference_container, attributes]
        self._traverse(member, reference_container, is_nullable, force_inline, None)
