"""
ConfigBuilder: collects options, modules and resolvers, then freezes them.
"""

from __future__ import annotations

import logging

from ..errors import ConfigurationError
from ..keywords import SchemaVersion
from .config_parts import GeneralConfigPart, MemberConfigPart
from .generator_config import GeneratorConfig
from .module import Module
from .options import FULL_DOCUMENTATION, Option, OptionPreset

logger = logging.getLogger(__name__)


class ConfigBuilder:
    """Builder for a GeneratorConfig.

    Modules passed to with_module() are applied immediately; the modules
    belonging to options are applied by build(), after all explicitly added
    ones. Resolvers registered earlier take precedence on first-wins
    attributes.

    Args:
        schema_version: Target dialect
        preset: Options enabled unless switched off explicitly
    """

    def __init__(
        self,
        schema_version: SchemaVersion = SchemaVersion.DRAFT_2020_12,
        preset: OptionPreset = FULL_DOCUMENTATION,
    ):
        self.schema_version = schema_version
        self.preset = preset
        self._options: dict[Option, bool] = {}
        self._modules: list[Module] = []
        self._types_part = GeneralConfigPart("types in general")
        self._fields_part = MemberConfigPart("fields")
        self._methods_part = MemberConfigPart("methods")
        self._built = False

    def with_option(self, *options: Option) -> ConfigBuilder:
        for option in options:
            self._options[option] = True
        return self

    def without_option(self, *options: Option) -> ConfigBuilder:
        for option in options:
            self._options[option] = False
        return self

    def with_module(self, module: Module) -> ConfigBuilder:
        if self._built:
            raise ConfigurationError("Modules must be added before build()")
        module.apply_to_config_builder(self)
        self._modules.append(module)
        return self

    def for_types_in_general(self) -> GeneralConfigPart:
        return self._types_part

    def for_fields(self) -> MemberConfigPart:
        return self._fields_part

    def for_methods(self) -> MemberConfigPart:
        return self._methods_part

    def is_option_enabled(self, option: Option) -> bool:
        """Whether an option is set explicitly or by the preset (overrides not considered)."""
        return self._options.get(option, self.preset.is_enabled_by_default(option))

    @property
    def modules(self) -> list[Module]:
        return list(self._modules)

    def build(self) -> GeneratorConfig:
        """Apply the option modules and freeze the configuration.

        Returns:
            The immutable GeneratorConfig
        """
        if self._built:
            raise ConfigurationError("build() can only be called once per ConfigBuilder")
        enabled = {option for option in Option if self.is_option_enabled(option)}
        overridden: set[Option] = set()
        for option in enabled:
            overridden |= option.overridden_options
        for option in sorted(overridden, key=list(Option).index):
            if self._options.get(option):
                logger.warning(f"Option {option.name} is ignored because another enabled option overrides it")
        for option in Option:
            if option in overridden:
                continue
            module = option.create_module(option in enabled)
            if module is not None:
                module.apply_to_config_builder(self)
        for part in (self._types_part, self._fields_part, self._methods_part):
            part.freeze()
        self._built = True
        enabled_options = frozenset(enabled - overridden)
        option_names = sorted(option.value for option in enabled_options)
        logger.debug(f"built configuration for {self.schema_version.value} with options {option_names}")
        return GeneratorConfig(
            self.schema_version, enabled_options, self._types_part, self._fields_part, self._methods_part
        )
