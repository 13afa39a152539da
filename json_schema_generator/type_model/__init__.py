"""
Type model: canonical type identities, member collection and scopes.
"""

from .members import MISSING, MethodKind, RawField, RawMethod, ResolvedTypeWithMembers
from .resolved_type import LITERAL, NONE_TYPE, UNION, ResolvedType
from .scopes import FieldScope, MemberScope, MethodScope, TypeScope
from .type_context import ContainerKind, TypeContext, is_opaque_class

__all__ = [
    "ContainerKind",
    "FieldScope",
    "LITERAL",
    "MISSING",
    "MemberScope",
    "MethodKind",
    "MethodScope",
    "NONE_TYPE",
    "RawField",
    "RawMethod",
    "ResolvedType",
    "ResolvedTypeWithMembers",
    "TypeContext",
    "TypeScope",
    "UNION",
    "is_opaque_class",
]
