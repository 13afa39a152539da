"""
Metadata markers for `Annotated[...]` hints.

    class Order:
        id: Annotated[int, Minimum(1), Description("Order number")]
        note: Annotated[str | None, MaxLength(200)] = None
        tags: Annotated[list[Annotated[str, MinLength(1)]], MinItems(1), UniqueItems()]

Markers only carry values; the AnnotatedMetadataModule turns them into
schema attributes. Markers on an item type (`list[Annotated[str, ...]]`)
describe the items, markers on the member describe the member itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Title:
    value: str


@dataclass(frozen=True)
class Description:
    value: str


@dataclass(frozen=True)
class Default:
    value: Any


@dataclass(frozen=True)
class MinLength:
    value: int


@dataclass(frozen=True)
class MaxLength:
    value: int


@dataclass(frozen=True)
class Pattern:
    value: str


@dataclass(frozen=True)
class Format:
    value: str


@dataclass(frozen=True)
class Minimum:
    value: int | float


@dataclass(frozen=True)
class Maximum:
    value: int | float


@dataclass(frozen=True)
class ExclusiveMinimum:
    value: int | float


@dataclass(frozen=True)
class ExclusiveMaximum:
    value: int | float


@dataclass(frozen=True)
class MultipleOf:
    value: int | float


@dataclass(frozen=True)
class MinItems:
    value: int


@dataclass(frozen=True)
class MaxItems:
    value: int


@dataclass(frozen=True)
class UniqueItems:
    value: bool = True


@dataclass(frozen=True)
class ReadOnly:
    pass


@dataclass(frozen=True)
class WriteOnly:
    pass


@dataclass(frozen=True)
class Required:
    """Marks a member as required (or, with False, as optional)."""

    value: bool = True


@dataclass(frozen=True)
class Nullable:
    """Marks a member as nullable (or, with False, as not nullable)."""

    value: bool = True


@dataclass(frozen=True)
class Ignore:
    """Leaves the member out of the schema."""

    pass


@dataclass(frozen=True)
class PropertyName:
    """Name of the member in the schema."""

    value: str
