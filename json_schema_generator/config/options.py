"""
Named boolean options and the presets enabling a sensible subset of them.

Options have no behavior of their own: enabling (or disabling) one installs
the module listed for it when the configuration is built. Pure flags are read
by the generation context through GeneratorConfig.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from ..errors import ConfigurationError
from .module import Module


class Option(str, Enum):
    """Generator options. The value is the name used in CLI and config files."""

    SCHEMA_VERSION_INDICATOR = "schema_version_indicator"
    ADDITIONAL_FIXED_TYPES = "additional_fixed_types"
    EXTRA_OPEN_API_FORMAT_VALUES = "extra_open_api_format_values"
    FLATTENED_ENUMS = "flattened_enums"
    FLATTENED_ENUMS_FROM_NAME = "flattened_enums_from_name"
    FLATTENED_OPTIONALS = "flattened_optionals"
    VALUES_FROM_CONSTANT_FIELDS = "values_from_constant_fields"
    PUBLIC_STATIC_FIELDS = "public_static_fields"
    PUBLIC_NONSTATIC_FIELDS = "public_nonstatic_fields"
    NONPUBLIC_STATIC_FIELDS = "nonpublic_static_fields"
    NONPUBLIC_NONSTATIC_FIELDS_WITH_GETTERS = "nonpublic_nonstatic_fields_with_getters"
    NONPUBLIC_NONSTATIC_FIELDS_WITHOUT_GETTERS = "nonpublic_nonstatic_fields_without_getters"
    STATIC_METHODS = "static_methods"
    VOID_METHODS = "void_methods"
    GETTER_METHODS = "getter_methods"
    NONSTATIC_NONVOID_NONGETTER_METHODS = "nonstatic_nonvoid_nongetter_methods"
    NULLABLE_FIELDS_BY_DEFAULT = "nullable_fields_by_default"
    NULLABLE_METHOD_RETURN_VALUES_BY_DEFAULT = "nullable_method_return_values_by_default"
    NULLABLE_ARRAY_ITEMS_ALLOWED = "nullable_array_items_allowed"
    REQUIRED_UNLESS_NULLABLE = "required_unless_nullable"
    FIELDS_DERIVED_FROM_ARGUMENTFREE_METHODS = "fields_derived_from_argumentfree_methods"
    MAP_VALUES_AS_ADDITIONAL_PROPERTIES = "map_values_as_additional_properties"
    ENUM_KEYWORD_FOR_SINGLE_VALUES = "enum_keyword_for_single_values"
    FORBIDDEN_ADDITIONAL_PROPERTIES_BY_DEFAULT = "forbidden_additional_properties_by_default"
    DEFINITIONS_FOR_ALL_OBJECTS = "definitions_for_all_objects"
    DEFINITION_FOR_MAIN_SCHEMA = "definition_for_main_schema"
    INLINE_ALL_SCHEMAS = "inline_all_schemas"
    INLINE_NULLABLE_SCHEMAS = "inline_nullable_schemas"
    PLAIN_DEFINITION_KEYS = "plain_definition_keys"
    ACCEPT_SINGLE_VALUE_AS_ARRAY = "accept_single_value_as_array"
    ALLOF_CLEANUP_AT_THE_END = "allof_cleanup_at_the_end"
    DUPLICATE_MEMBER_ATTRIBUTE_CLEANUP_AT_THE_END = "duplicate_member_attribute_cleanup_at_the_end"
    STRICT_TYPE_INFO = "strict_type_info"
    DATACLASS_FIELD_DEFAULTS = "dataclass_field_defaults"

    @property
    def overridden_options(self) -> frozenset[Option]:
        """Options that are ignored while this one is enabled."""
        return _OVERRIDES.get(self, frozenset())

    def create_module(self, enabled: bool) -> Module | None:
        """The module to install for this option's state, if any."""
        factories = _module_factories().get(self)
        if factories is None:
            return None
        factory = factories[0] if enabled else factories[1]
        return factory() if factory is not None else None

    @classmethod
    def from_name(cls, name: str) -> Option:
        """Look up an option by value or member name (case-insensitive)."""
        normalized = name.strip().lower().replace("-", "_")
        for option in cls:
            if option.value == normalized:
                return option
        raise ConfigurationError(f"Unknown option: '{name}'")


_OVERRIDES: dict[Option, frozenset[Option]] = {
    Option.FLATTENED_ENUMS_FROM_NAME: frozenset({Option.FLATTENED_ENUMS}),
    Option.INLINE_ALL_SCHEMAS: frozenset({Option.DEFINITIONS_FOR_ALL_OBJECTS, Option.DEFINITION_FOR_MAIN_SCHEMA}),
}


def _module_factories() -> dict[Option, tuple[Callable[[], Module] | None, Callable[[], Module] | None]]:
    """(when enabled, when disabled) module factories per option."""
    from .. import modules

    return {
        Option.ADDITIONAL_FIXED_TYPES: (
            modules.SimpleTypeModule.for_primitive_and_additional_types,
            modules.SimpleTypeModule.for_primitive_types,
        ),
        Option.FLATTENED_ENUMS: (modules.EnumModule.as_values, None),
        Option.FLATTENED_ENUMS_FROM_NAME: (modules.EnumModule.as_names, None),
        Option.FLATTENED_OPTIONALS: (
            lambda: modules.UnionModule(flattened=True),
            lambda: modules.UnionModule(flattened=False),
        ),
        Option.VALUES_FROM_CONSTANT_FIELDS: (modules.ConstantValueModule, None),
        Option.PUBLIC_STATIC_FIELDS: (None, modules.FieldExclusionModule.for_public_static_fields),
        Option.PUBLIC_NONSTATIC_FIELDS: (None, modules.FieldExclusionModule.for_public_nonstatic_fields),
        Option.NONPUBLIC_STATIC_FIELDS: (None, modules.FieldExclusionModule.for_nonpublic_static_fields),
        Option.NONPUBLIC_NONSTATIC_FIELDS_WITH_GETTERS: (
            None,
            modules.FieldExclusionModule.for_nonpublic_nonstatic_fields_with_getter,
        ),
        Option.NONPUBLIC_NONSTATIC_FIELDS_WITHOUT_GETTERS: (
            None,
            modules.FieldExclusionModule.for_nonpublic_nonstatic_fields_without_getter,
        ),
        Option.STATIC_METHODS: (None, modules.MethodExclusionModule.for_static_methods),
        Option.VOID_METHODS: (None, modules.MethodExclusionModule.for_void_methods),
        Option.GETTER_METHODS: (None, modules.MethodExclusionModule.for_getter_methods),
        Option.NONSTATIC_NONVOID_NONGETTER_METHODS: (
            None,
            modules.MethodExclusionModule.for_nonstatic_nonvoid_nongetter_methods,
        ),
        Option.FIELDS_DERIVED_FROM_ARGUMENTFREE_METHODS: (modules.FieldsFromMethodsModule, None),
        Option.MAP_VALUES_AS_ADDITIONAL_PROPERTIES: (modules.AdditionalPropertiesModule.for_map_values, None),
        Option.FORBIDDEN_ADDITIONAL_PROPERTIES_BY_DEFAULT: (
            modules.AdditionalPropertiesModule.forbidden_for_all_objects,
            None,
        ),
        Option.INLINE_ALL_SCHEMAS: (modules.InlineSchemaModule, None),
        Option.ACCEPT_SINGLE_VALUE_AS_ARRAY: (modules.SingleValueAsArrayModule, None),
        Option.DATACLASS_FIELD_DEFAULTS: (modules.DataclassModule, None),
    }


class OptionPreset:
    """A named set of options enabled unless explicitly switched off.

    Args:
        name: Name used on the command line
        enabled_options: Options enabled by default under this preset
    """

    def __init__(self, name: str, *enabled_options: Option):
        self.name = name
        self.enabled_options = frozenset(enabled_options)

    def is_enabled_by_default(self, option: Option) -> bool:
        return option in self.enabled_options

    def __repr__(self) -> str:
        return f"OptionPreset({self.name!r})"

    @staticmethod
    def from_name(name: str) -> OptionPreset:
        preset = PRESETS.get(name.strip().lower().replace("-", "_"))
        if preset is None:
            raise ConfigurationError(f"Unknown preset: '{name}'. Expected one of: {', '.join(PRESETS)}")
        return preset


# Everything documented, including methods and class-level constants
FULL_DOCUMENTATION = OptionPreset(
    "full_documentation",
    Option.VALUES_FROM_CONSTANT_FIELDS,
    Option.PUBLIC_STATIC_FIELDS,
    Option.PUBLIC_NONSTATIC_FIELDS,
    Option.NONPUBLIC_STATIC_FIELDS,
    Option.NONPUBLIC_NONSTATIC_FIELDS_WITH_GETTERS,
    Option.NONPUBLIC_NONSTATIC_FIELDS_WITHOUT_GETTERS,
    Option.STATIC_METHODS,
    Option.VOID_METHODS,
    Option.GETTER_METHODS,
    Option.NONSTATIC_NONVOID_NONGETTER_METHODS,
    Option.FLATTENED_ENUMS,
    Option.FLATTENED_OPTIONALS,
    Option.DEFINITIONS_FOR_ALL_OBJECTS,
    Option.ALLOF_CLEANUP_AT_THE_END,
)

# The shape of the instance data as it would be serialized to JSON
PLAIN_JSON = OptionPreset(
    "plain_json",
    Option.SCHEMA_VERSION_INDICATOR,
    Option.ADDITIONAL_FIXED_TYPES,
    Option.FLATTENED_ENUMS,
    Option.FLATTENED_OPTIONALS,
    Option.VALUES_FROM_CONSTANT_FIELDS,
    Option.PUBLIC_NONSTATIC_FIELDS,
    Option.NONPUBLIC_NONSTATIC_FIELDS_WITH_GETTERS,
    Option.NONPUBLIC_NONSTATIC_FIELDS_WITHOUT_GETTERS,
    Option.NULLABLE_ARRAY_ITEMS_ALLOWED,
    Option.MAP_VALUES_AS_ADDITIONAL_PROPERTIES,
    Option.DATACLASS_FIELD_DEFAULTS,
    Option.ALLOF_CLEANUP_AT_THE_END,
)

# Public API of the classes: public fields and methods, static ones included
PYTHON_OBJECT = OptionPreset(
    "python_object",
    Option.VALUES_FROM_CONSTANT_FIELDS,
    Option.PUBLIC_STATIC_FIELDS,
    Option.PUBLIC_NONSTATIC_FIELDS,
    Option.STATIC_METHODS,
    Option.VOID_METHODS,
    Option.GETTER_METHODS,
    Option.NONSTATIC_NONVOID_NONGETTER_METHODS,
    Option.FLATTENED_ENUMS,
    Option.FLATTENED_OPTIONALS,
    Option.ALLOF_CLEANUP_AT_THE_END,
)

PRESETS: dict[str, OptionPreset] = {
    preset.name: preset for preset in (FULL_DOCUMENTATION, PLAIN_JSON, PYTHON_OBJECT)
}
