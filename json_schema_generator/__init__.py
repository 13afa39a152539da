"""JSON Schema Generator

A Python package for generating JSON Schema documents from Python types:
dataclasses, plain classes, enums, generics, unions and Annotated metadata.
Supports draft 4 up to draft 2020-12 with a configurable set of options,
modules and custom definitions.
"""

__version__ = "1.0.0"

from .config import (
    FULL_DOCUMENTATION,
    PLAIN_JSON,
    PYTHON_OBJECT,
    ConfigBuilder,
    CustomDefinition,
    CustomPropertyDefinition,
    DefinitionType,
    GeneratorConfig,
    Module,
    Option,
    OptionPreset,
)
from .errors import (
    CircularDefinitionError,
    ConfigurationError,
    DuplicateDefinitionNameError,
    SchemaGenerationError,
    UnresolvedTypeVariable,
)
from .generator import MultipleSchemaBuilder, SchemaGenerator
from .keywords import SchemaKeyword, SchemaType, SchemaVersion

__all__ = [
    "SchemaGenerator",
    "MultipleSchemaBuilder",
    "ConfigBuilder",
    "GeneratorConfig",
    "Option",
    "OptionPreset",
    "FULL_DOCUMENTATION",
    "PLAIN_JSON",
    "PYTHON_OBJECT",
    "Module",
    "CustomDefinition",
    "CustomPropertyDefinition",
    "DefinitionType",
    "SchemaVersion",
    "SchemaKeyword",
    "SchemaType",
    "SchemaGenerationError",
    "UnresolvedTypeVariable",
    "CircularDefinitionError",
    "DuplicateDefinitionNameError",
    "ConfigurationError",
]
