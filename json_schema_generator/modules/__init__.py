"""
Built-in modules. Most of them are installed through options; the
AnnotatedMetadataModule and the SubclassResolver are added explicitly.
"""

from .additional_properties import AdditionalPropertiesModule
from .annotated_metadata import AnnotatedMetadataModule
from .constant_value import ConstantValueModule
from .dataclass_fields import DataclassModule
from .enums import EnumModule
from .exclusion import FieldExclusionModule, MethodExclusionModule
from .fields_from_methods import FieldsFromMethodsModule
from .inline_schema import InlineSchemaModule
from .simple_type import SimpleTypeModule
from .single_value_as_array import SingleValueAsArrayModule
from .subclasses import SubclassResolver
from .unions import UnionModule

__all__ = [
    "AdditionalPropertiesModule",
    "AnnotatedMetadataModule",
    "ConstantValueModule",
    "DataclassModule",
    "EnumModule",
    "FieldExclusionModule",
    "FieldsFromMethodsModule",
    "InlineSchemaModule",
    "MethodExclusionModule",
    "SimpleTypeModule",
    "SingleValueAsArrayModule",
    "SubclassResolver",
    "UnionModule",
]
