"""
Cache key of a generated definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..type_model import ResolvedType


@dataclass(frozen=True)
class DefinitionKey:
    """A resolved type plus the custom definition provider to skip when deriving it.

    Attributes:
        type: The resolved type
        ignored_provider: Provider treated as already consulted (None for the
            regular lookup). A provider asking for the standard definition of
            its own type passes itself here, which yields a distinct key.
    """

    type: ResolvedType
    ignored_provider: Any = None

    def describe(self) -> str:
        if self.ignored_provider is None:
            return self.type.describe()
        return f"{self.type.describe()} (ignoring {self.ignored_provider!r})"
