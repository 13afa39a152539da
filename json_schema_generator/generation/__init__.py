"""
Generation engine: definition cache, schema assembly and clean-up passes.
"""

from .attribute_collector import AttributeCollector, merge_missing_attributes, to_json_value
from .cleanup import SchemaCleanUp
from .context import GenerationContext
from .definition_key import DefinitionKey
from .schema_builder import SchemaBuilder

__all__ = [
    "AttributeCollector",
    "DefinitionKey",
    "GenerationContext",
    "SchemaBuilder",
    "SchemaCleanUp",
    "merge_missing_attributes",
    "to_json_value",
]
