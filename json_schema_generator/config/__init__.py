"""
Generator configuration: options, presets, resolver chains and custom definitions.
"""

from .builder import ConfigBuilder
from .config_parts import AttributeKind, Combination, GeneralConfigPart, MemberConfigPart, ResolverChain
from .custom_definition import (
    AttributeInclusion,
    CustomDefinition,
    CustomDefinitionProvider,
    CustomPropertyDefinition,
    CustomPropertyDefinitionProvider,
    DefinitionType,
    InstanceAttributeOverride,
    StatefulConfig,
    SubtypeResolver,
    TypeAttributeOverride,
)
from .generator_config import GeneratorConfig
from .module import Module
from .naming import (
    CleanDefinitionNamingStrategy,
    DefaultDefinitionNamingStrategy,
    DefinitionNamingStrategy,
    plain_key,
    uri_compatible_key,
)
from .options import FULL_DOCUMENTATION, PLAIN_JSON, PRESETS, PYTHON_OBJECT, Option, OptionPreset

__all__ = [
    "AttributeInclusion",
    "AttributeKind",
    "CleanDefinitionNamingStrategy",
    "Combination",
    "ConfigBuilder",
    "CustomDefinition",
    "CustomDefinitionProvider",
    "CustomPropertyDefinition",
    "CustomPropertyDefinitionProvider",
    "DefaultDefinitionNamingStrategy",
    "DefinitionNamingStrategy",
    "DefinitionType",
    "FULL_DOCUMENTATION",
    "GeneralConfigPart",
    "GeneratorConfig",
    "InstanceAttributeOverride",
    "MemberConfigPart",
    "Module",
    "Option",
    "OptionPreset",
    "PLAIN_JSON",
    "PRESETS",
    "PYTHON_OBJECT",
    "ResolverChain",
    "StatefulConfig",
    "SubtypeResolver",
    "TypeAttributeOverride",
    "plain_key",
    "uri_compatible_key",
]
