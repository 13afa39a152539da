"""
Base class for modules: bundles of resolvers registered on a ConfigBuilder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .builder import ConfigBuilder


class Module(ABC):
    """A collaborator contributing resolvers and custom definition providers.

    Modules only register callables; they are applied once, in registration
    order, so a module registered earlier takes precedence on first-wins
    attributes.
    """

    @abstractmethod
    def apply_to_config_builder(self, builder: ConfigBuilder) -> None:
        """Register this module's resolvers on the builder."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
