"""
Required flags, defaults and descriptions taken from dataclass fields.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ..config import Module
from ..config.config_parts import AttributeKind
from ..type_model import MISSING, FieldScope

if TYPE_CHECKING:
    from ..config import ConfigBuilder

logger = logging.getLogger(__name__)

# factories that are cheap and side-effect free to call
_SAFE_FACTORIES = (list, dict, set, frozenset, tuple)

# keys looked up in `field(metadata=...)`
DESCRIPTION_KEY = "description"
TITLE_KEY = "title"


def _dataclass_field(member: FieldScope) -> dataclasses.Field | None:
    if member.is_fake_container_item_scope():
        return None
    return member.raw_member.dataclass_field


def is_json_compatible(value: Any) -> bool:
    """Whether a value can be written as a JSON literal."""
    if value is None or isinstance(value, (bool, int, float, str, Decimal, enum.Enum)):
        return True
    if isinstance(value, (list, tuple, set, frozenset)):
        return all(is_json_compatible(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(key, str) and is_json_compatible(item) for key, item in value.items())
    return False


def is_required_field(member: FieldScope) -> bool | None:
    """Dataclass fields without default are required; others have no opinion."""
    data_field = _dataclass_field(member)
    if data_field is None:
        return None
    if data_field.default is MISSING and data_field.default_factory is MISSING:
        return True
    return None


def field_default(member: FieldScope) -> Any:
    data_field = _dataclass_field(member)
    if data_field is None:
        return None
    if data_field.default is not MISSING:
        value = data_field.default
    elif data_field.default_factory in _SAFE_FACTORIES:
        value = data_field.default_factory()
    else:
        return None
    if value is None or not is_json_compatible(value):
        logger.debug(f"no default written for {member!r}: {value!r}")
        return None
    return value


def field_metadata(key: str):
    """Resolver reading one key of a dataclass field's metadata mapping."""

    def resolve(member: FieldScope) -> Any:
        data_field = _dataclass_field(member)
        if data_field is None:
            return None
        return data_field.metadata.get(key)

    resolve.__name__ = f"field_metadata_{key}"
    return resolve


class DataclassModule(Module):
    """Reads dataclass field declarations.

    A field without default (or default factory) is required. Defaults are
    written when they are JSON-compatible; default factories only when they
    are one of the builtin collection types. "description" and "title" keys
    of `field(metadata=...)` are used as member attributes.
    """

    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        fields = builder.for_fields()
        fields.with_required_check(is_required_field)
        fields.with_resolver(AttributeKind.DEFAULT, field_default)
        fields.with_resolver(AttributeKind.DESCRIPTION, field_metadata(DESCRIPTION_KEY))
        fields.with_resolver(AttributeKind.TITLE, field_metadata(TITLE_KEY))
