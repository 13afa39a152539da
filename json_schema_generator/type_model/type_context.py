"""
Type resolution and member collection.

The TypeContext turns typing hints into ResolvedType identities, substitutes
type variables through generic class hierarchies and collects the fields and
argument-free methods a class exposes.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import logging
import types
import typing
from enum import Enum
from typing import (
    Annotated,
    Any,
    ClassVar,
    Final,
    ForwardRef,
    Generic,
    NewType,
    Protocol,
    TypeAliasType,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from ..errors import SchemaGenerationError, UnresolvedTypeVariable
from .members import MISSING, MethodKind, RawField, RawMethod, ResolvedTypeWithMembers
from .resolved_type import LITERAL, NONE_TYPE, UNION, ResolvedType
from .scopes import FieldScope, MethodScope, TypeScope

logger = logging.getLogger(__name__)

# Classes from these modules are never broken down into properties
OPAQUE_MODULES = frozenset(
    {
        "builtins",
        "typing",
        "typing_extensions",
        "collections",
        "collections.abc",
        "_collections_abc",
        "abc",
        "enum",
        "dataclasses",
        "types",
        "datetime",
        "decimal",
        "fractions",
        "numbers",
        "uuid",
        "pathlib",
        "ipaddress",
        "re",
    }
)

_STANDARD_CONTAINER_MODULES = frozenset({"builtins", "collections", "collections.abc", "_collections_abc", "typing"})
_STRING_LIKE = (str, bytes, bytearray, memoryview)
_ARRAY_LIKE = (collections.abc.Sequence, collections.abc.Set)
_ITERABLE_ONLY = (collections.abc.Iterable, collections.abc.Collection, collections.abc.Iterator)
_TYPE_QUALIFIERS = tuple(
    qualifier
    for qualifier in (
        getattr(typing, "Required", None),
        getattr(typing, "NotRequired", None),
        getattr(typing, "ReadOnly", None),
    )
    if qualifier is not None
)


class ContainerKind(str, Enum):
    """Structural classification of container types."""

    ARRAY = "array"  # list, tuple, set, sequences
    MAP = "map"  # dict and other mappings


def is_opaque_class(cls: Any) -> bool:
    """Whether a class is treated as a value rather than an object with properties."""
    return not isinstance(cls, type) or cls is object or getattr(cls, "__module__", None) in OPAQUE_MODULES


def union_of(resolved_options: list[ResolvedType] | tuple[ResolvedType, ...]) -> ResolvedType:
    """Union of already resolved types; nested unions are flattened and duplicates dropped."""
    options: list[ResolvedType] = []
    for resolved in resolved_options:
        for option in resolved.type_parameters if resolved.is_union else (resolved,):
            if option not in options:
                options.append(option)
    if len(options) == 1:
        return options[0]
    return ResolvedType(UNION, tuple(options))


class TypeContext:
    """Resolves type hints and collects class members.

    Results are cached per instance. One instance can be shared by several
    generation runs of the same generator.
    """

    def __init__(self):
        self._members_cache: dict[ResolvedType, ResolvedTypeWithMembers] = {}
        self._bindings_cache: dict[ResolvedType, dict[type, tuple[ResolvedType | None, ...]]] = {}
        self._class_hints_cache: dict[type, dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, hint: Any, *type_parameters: Any) -> ResolvedType:
        """Resolve a type hint, optionally parameterizing a generic class.

        Args:
            hint: A class or typing construct (e.g. `list[int]`, `Box[str] | None`)
            type_parameters: Type arguments for a bare generic class

        Returns:
            The canonical ResolvedType
        """
        if type_parameters:
            if not isinstance(hint, type):
                raise SchemaGenerationError(f"Type parameters can only be applied to a class, got {hint!r}")
            return ResolvedType(hint, tuple(self.resolve(parameter) for parameter in type_parameters))
        return self._resolve(hint, None, ())

    def resolve_member_type(self, hint: Any, declaring_class: type, members: ResolvedTypeWithMembers) -> ResolvedType:
        """Resolve a member's hint with the type variable bindings of its declaring class."""
        return self._resolve(hint, declaring_class, members.bindings.get(declaring_class, ()))

    def _resolve(self, hint: Any, owner: type | None, owner_args: tuple[ResolvedType | None, ...]) -> ResolvedType:
        if isinstance(hint, TypeVar):
            return self._resolve_type_variable(hint, owner, owner_args)
        if hint is Any or hint is object:
            return ResolvedType(object)
        if hint is None or hint is NONE_TYPE:
            return ResolvedType(NONE_TYPE)
        if isinstance(hint, (str, ForwardRef)):
            raise SchemaGenerationError(f"Unresolved forward reference {hint!r}")
        if isinstance(hint, TypeAliasType):
            return self._resolve(hint.__value__, owner, owner_args)
        if isinstance(hint, NewType):
            return self._resolve(hint.__supertype__, owner, owner_args)

        origin = get_origin(hint)
        if origin is Annotated:
            return self._resolve(hint.__origin__, owner, owner_args).with_metadata(*hint.__metadata__)
        if origin is typing.Union or origin is types.UnionType:
            return self._resolve_union(get_args(hint), owner, owner_args)
        if origin is typing.Literal:
            return ResolvedType(LITERAL, literal_values=get_args(hint))
        if origin in (ClassVar, Final) or origin in _TYPE_QUALIFIERS:
            args = get_args(hint)
            return self._resolve(args[0] if args else Any, owner, owner_args)
        if hint in (ClassVar, Final):
            return ResolvedType(object)
        if origin is collections.abc.Callable or origin is type:
            return ResolvedType(origin)
        if origin is not None:
            if not isinstance(origin, type):
                raise SchemaGenerationError(f"Unsupported type hint {hint!r}")
            parameters = self._resolve_arguments(origin, get_args(hint), owner, owner_args)
            return ResolvedType(origin, parameters)
        if isinstance(hint, type):
            return ResolvedType(hint)
        raise SchemaGenerationError(f"Unsupported type hint {hint!r}")

    def _resolve_arguments(
        self, origin: type, args: tuple[Any, ...], owner: type | None, owner_args: tuple[ResolvedType | None, ...]
    ) -> tuple[ResolvedType, ...]:
        if issubclass(origin, tuple):
            if len(args) == 2 and args[1] is Ellipsis:
                args = args[:1]
            elif args == ((),):
                args = ()
        return tuple(self._resolve(arg, owner, owner_args) for arg in args)

    def _resolve_union(
        self, args: tuple[Any, ...], owner: type | None, owner_args: tuple[ResolvedType | None, ...]
    ) -> ResolvedType:
        return union_of([self._resolve(arg, owner, owner_args) for arg in args])

    def _resolve_type_variable(
        self, variable: TypeVar, owner: type | None, owner_args: tuple[ResolvedType | None, ...]
    ) -> ResolvedType:
        if owner is not None:
            variables = _type_variables(owner)
            if variable in variables:
                index = variables.index(variable)
                if index < len(owner_args) and owner_args[index] is not None:
                    return owner_args[index]
        fallback = self._fallback_for_variable(variable)
        if fallback is None:
            raise UnresolvedTypeVariable(variable, owner)
        return fallback

    def _fallback_for_variable(self, variable: TypeVar) -> ResolvedType | None:
        has_default = getattr(variable, "has_default", None)
        if has_default is not None and has_default():
            return self._resolve(variable.__default__, None, ())
        if variable.__bound__ is not None:
            return self._resolve(variable.__bound__, None, ())
        if variable.__constraints__:
            return self._resolve_union(variable.__constraints__, None, ())
        return None

    def _resolve_leniently(
        self, hint: Any, owner: type, owner_args: tuple[ResolvedType | None, ...]
    ) -> ResolvedType | None:
        try:
            return self._resolve(hint, owner, owner_args)
        except UnresolvedTypeVariable:
            return None

    # ------------------------------------------------------------------
    # Generic hierarchy
    # ------------------------------------------------------------------

    def get_hierarchy_bindings(self, resolved: ResolvedType) -> dict[type, tuple[ResolvedType | None, ...]]:
        """Positional type arguments of every generic class along the hierarchy, most derived first."""
        # cache keys ignore metadata, so types with annotated arguments bypass the cache
        cacheable = not resolved.has_parameter_metadata
        bindings = self._bindings_cache.get(resolved) if cacheable else None
        if bindings is None:
            bindings = {}
            if isinstance(resolved.erased_type, type):
                self._collect_bindings(resolved.erased_type, resolved.type_parameters, bindings)
            if cacheable:
                self._bindings_cache[resolved] = bindings
        return bindings

    def _collect_bindings(
        self, cls: type, args: tuple[ResolvedType | None, ...], result: dict[type, tuple[ResolvedType | None, ...]]
    ) -> None:
        if cls in result:
            return
        result[cls] = tuple(args)
        for base in cls.__dict__.get("__orig_bases__", cls.__bases__):
            base_origin = get_origin(base) or base
            if not isinstance(base_origin, type) or base_origin in (Generic, Protocol, object):
                continue
            raw_args = get_args(base)
            if issubclass(base_origin, tuple) and len(raw_args) == 2 and raw_args[1] is Ellipsis:
                raw_args = raw_args[:1]
            base_args = tuple(self._resolve_leniently(arg, cls, result[cls]) for arg in raw_args)
            self._collect_bindings(base_origin, base_args, result)

    def get_type_parameter_for(self, resolved: ResolvedType, supertype: type, index: int) -> ResolvedType | None:
        """Type argument at the given position, as seen from a (standard) supertype.

        Args:
            resolved: The type to look up the binding for
            supertype: Generic class or ABC whose parameter is requested (e.g. Mapping)
            index: Position of the parameter

        Returns:
            The bound type or None if the parameter is not bound
        """
        bindings = self.get_hierarchy_bindings(resolved)
        args = bindings.get(supertype)
        if not args:
            args = next(
                (
                    candidate
                    for cls, candidate in bindings.items()
                    if candidate and cls.__module__ in _STANDARD_CONTAINER_MODULES and issubclass(cls, supertype)
                ),
                None,
            )
        if not args or index >= len(args):
            return None
        return args[index]

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def container_kind(self, resolved: ResolvedType) -> ContainerKind | None:
        erased = resolved.erased_type
        if not isinstance(erased, type) or issubclass(erased, _STRING_LIKE):
            return None
        if typing.is_typeddict(erased) or (issubclass(erased, tuple) and hasattr(erased, "_fields")):
            return None
        if issubclass(erased, collections.abc.Mapping):
            return ContainerKind.MAP
        if issubclass(erased, _ARRAY_LIKE) or erased in _ITERABLE_ONLY:
            return ContainerKind.ARRAY
        return None

    def is_container_type(self, resolved: ResolvedType) -> bool:
        """Whether the type is described as a JSON array."""
        return self.container_kind(resolved) == ContainerKind.ARRAY

    def is_map_type(self, resolved: ResolvedType) -> bool:
        return self.container_kind(resolved) == ContainerKind.MAP

    def get_container_item_type(self, resolved: ResolvedType) -> ResolvedType | None:
        """Element type of an array-like type; a fixed-size tuple yields the union of its entries."""
        if not self.is_container_type(resolved):
            return None
        if resolved.erased_type is tuple and len(resolved.type_parameters) > 1:
            return union_of(resolved.type_parameters)
        item_type = self.get_type_parameter_for(resolved, collections.abc.Iterable, 0)
        return ResolvedType(object) if item_type is None else item_type

    def get_map_key_type(self, resolved: ResolvedType) -> ResolvedType | None:
        return self.get_type_parameter_for(resolved, collections.abc.Mapping, 0) if self.is_map_type(resolved) else None

    def get_map_value_type(self, resolved: ResolvedType) -> ResolvedType | None:
        return self.get_type_parameter_for(resolved, collections.abc.Mapping, 1) if self.is_map_type(resolved) else None

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def resolve_with_members(self, resolved: ResolvedType) -> ResolvedTypeWithMembers:
        """Collect fields and argument-free methods along the class hierarchy (cached)."""
        cacheable = not resolved.has_parameter_metadata
        members = self._members_cache.get(resolved) if cacheable else None
        if members is None:
            members = self._collect_members(resolved)
            if cacheable:
                self._members_cache[resolved] = members
        return members

    def _collect_members(self, resolved: ResolvedType) -> ResolvedTypeWithMembers:
        members = ResolvedTypeWithMembers(resolved, bindings=self.get_hierarchy_bindings(resolved))
        cls = resolved.erased_type
        if is_opaque_class(cls):
            return members
        seen_fields: set[str] = set()
        seen_methods: set[str] = set()
        for klass in cls.__mro__:
            if is_opaque_class(klass):
                continue
            for raw_field in self._collect_fields(klass):
                if raw_field.name in seen_fields:
                    continue
                seen_fields.add(raw_field.name)
                target = members.static_fields if raw_field.is_static else members.member_fields
                target.append(raw_field)
            for raw_method in self._collect_methods(klass):
                if raw_method.name in seen_methods or raw_method.name in seen_fields:
                    continue
                seen_methods.add(raw_method.name)
                target = members.static_methods if raw_method.is_static else members.member_methods
                target.append(raw_method)
        logger.debug(
            f"collected {len(members.member_fields)} fields and {len(members.member_methods)} methods from {resolved}"
        )
        return members

    def _class_hints(self, klass: type) -> dict[str, Any]:
        hints = self._class_hints_cache.get(klass)
        if hints is None:
            try:
                hints = get_type_hints(klass, localns={klass.__name__: klass}, include_extras=True)
            except (NameError, TypeError) as e:
                raise SchemaGenerationError(f"Cannot evaluate annotations of {klass.__qualname__}: {e}") from e
            self._class_hints_cache[klass] = hints
        return hints

    def _collect_fields(self, klass: type) -> list[RawField]:
        own_annotations = inspect.get_annotations(klass)
        if not own_annotations:
            return []
        hints = self._class_hints(klass)
        dataclass_fields = {f.name: f for f in dataclasses.fields(klass)} if dataclasses.is_dataclass(klass) else {}
        fields = []
        for name, annotation in own_annotations.items():
            hint = hints.get(name, annotation)
            if isinstance(hint, dataclasses.InitVar):
                continue
            hint, is_class_var, is_final = _unwrap_qualifiers(hint)
            default = klass.__dict__.get(name, MISSING)
            if isinstance(default, (types.MemberDescriptorType, dataclasses.Field)):
                default = MISSING
            if hint is Final or (is_final and hint is Any and default is not MISSING):
                hint = type(default) if default is not MISSING else Any
            is_static = is_class_var or (is_final and default is not MISSING and name not in dataclass_fields)
            fields.append(
                RawField(
                    name=name,
                    declaring_class=klass,
                    hint=hint,
                    is_static=is_static,
                    is_final=is_final,
                    default=default,
                    dataclass_field=dataclass_fields.get(name),
                )
            )
        return fields

    def _collect_methods(self, klass: type) -> list[RawMethod]:
        methods = []
        for name, attribute in klass.__dict__.items():
            if name.startswith("_"):
                continue
            if isinstance(attribute, property):
                kind, function = MethodKind.PROPERTY, attribute.fget
            elif isinstance(attribute, staticmethod):
                kind, function = MethodKind.STATIC, attribute.__func__
            elif isinstance(attribute, classmethod):
                kind, function = MethodKind.CLASS, attribute.__func__
            elif inspect.isfunction(attribute):
                kind, function = MethodKind.INSTANCE, attribute
            else:
                continue
            if function is None or not _is_argument_free(function, skip_first=kind != MethodKind.STATIC):
                continue
            methods.append(
                RawMethod(
                    name=name,
                    declaring_class=klass,
                    kind=kind,
                    return_hint=_return_hint(function),
                    function=function,
                )
            )
        return methods

    # ------------------------------------------------------------------
    # Scopes and descriptions
    # ------------------------------------------------------------------

    def create_type_scope(self, resolved: ResolvedType) -> TypeScope:
        return TypeScope(resolved, self)

    def create_field_scope(self, raw_field: RawField, members: ResolvedTypeWithMembers) -> FieldScope:
        declared_type = self.resolve_member_type(raw_field.hint, raw_field.declaring_class, members)
        return FieldScope(raw_field, declared_type, members, self)

    def create_method_scope(self, raw_method: RawMethod, members: ResolvedTypeWithMembers) -> MethodScope:
        declared_type = self.resolve_member_type(raw_method.return_hint, raw_method.declaring_class, members)
        return MethodScope(raw_method, declared_type, members, self)

    def get_simple_type_description(self, resolved: ResolvedType) -> str:
        return resolved.describe()

    def get_full_type_description(self, resolved: ResolvedType) -> str:
        return resolved.describe(qualified=True)


def _type_variables(cls: type) -> tuple[TypeVar, ...]:
    return tuple(variable for variable in getattr(cls, "__parameters__", ()) if isinstance(variable, TypeVar))


def _unwrap_qualifiers(hint: Any) -> tuple[Any, bool, bool]:
    """Strip ClassVar/Final/Required wrappers from a field annotation."""
    is_class_var = False
    is_final = False
    while True:
        origin = get_origin(hint)
        if hint is ClassVar:
            return Any, True, is_final
        if hint is Final:
            return Final, is_class_var, True
        if origin is ClassVar:
            is_class_var = True
        elif origin is Final:
            is_final = True
        elif origin is None or origin not in _TYPE_QUALIFIERS:
            return hint, is_class_var, is_final
        args = get_args(hint)
        hint = args[0] if args else Any


def _is_argument_free(function: Any, skip_first: bool) -> bool:
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return False
    if skip_first:
        parameters = parameters[1:]
    return all(
        parameter.default is not inspect.Parameter.empty
        or parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for parameter in parameters
    )


def _return_hint(function: Any) -> Any:
    try:
        hints = get_type_hints(function, include_extras=True)
    except (NameError, TypeError) as e:
        raise SchemaGenerationError(f"Cannot evaluate return annotation of {function.__qualname__}: {e}") from e
    return hints.get("return", Any)
