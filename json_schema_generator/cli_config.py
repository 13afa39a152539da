"""
Configuration file of the command line front end.

    {
        "schema_version": "draft-07",
        "preset": "plain_json",
        "with_options": ["definitions_for_all_objects"],
        "without_options": ["schema_version_indicator"],
        "modules": ["annotated_metadata", "mypackage.schema:TimestampModule"],
        "subtypes_of": ["mypackage.shapes:Shape"],
        "file_pattern": "{{ type_name | lower }}.schema.json",
        "output": {"mode": "force"}
    }
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .cli_utils import load_object, resolve_type_names
from .config import ConfigBuilder, GeneratorConfig, Module, Option, OptionPreset
from .errors import ConfigurationError
from .keywords import SchemaVersion
from .modules import AnnotatedMetadataModule, SubclassResolver
from .output import OutputConfig, OutputMode

# Modules that are not tied to an option, by the name used on the command line
BUILTIN_MODULES: dict[str, Callable[[], Module]] = {
    "annotated_metadata": AnnotatedMetadataModule,
    "annotated_metadata_without_docstrings": lambda: AnnotatedMetadataModule(include_docstrings=False),
}


def create_module(name: str) -> Module:
    """A built-in module by name, or an instance of the Module subclass given as "module:ClassName"."""
    factory = BUILTIN_MODULES.get(name)
    if factory is not None:
        return factory()
    if ":" not in name:
        raise ConfigurationError(f"Unknown module: '{name}'. Expected one of: {', '.join(BUILTIN_MODULES)}")
    module_class = load_object(name)
    if not isinstance(module_class, type) or not issubclass(module_class, Module):
        raise ConfigurationError(f"'{name}' is not a Module subclass")
    return module_class()


def parse_schema_version(value: str | SchemaVersion) -> SchemaVersion:
    if isinstance(value, SchemaVersion):
        return value
    normalized = value.strip().lower().replace("_", "-")
    for version in SchemaVersion:
        if normalized in (version.value, version.name.lower().replace("_", "-")):
            return version
    raise ConfigurationError(f"Unknown schema version: '{value}'")


@dataclass
class GeneratorCliConfig:
    """Configuration options of the command line front end."""

    # Target dialect
    schema_version: SchemaVersion = SchemaVersion.DRAFT_2020_12

    # Named option preset
    preset: str = "full_documentation"

    # Options switched on/off on top of the preset
    with_options: list[str] = field(default_factory=list)
    without_options: list[str] = field(default_factory=list)

    # Modules added before the option modules
    modules: list[str] = field(default_factory=lambda: ["annotated_metadata"])

    # Base classes described by their subclasses ("module:QualifiedName")
    subtypes_of: list[str] = field(default_factory=list)

    # Jinja2 template of the output file name
    file_pattern: str = "{{ type_name }}.schema.json"

    # JSON indentation of the written files
    indent: int = 2

    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorCliConfig:
        """Create a config from a dictionary."""
        config = GeneratorCliConfig()
        for k, v in d.items():
            if k == "schema_version":
                config.schema_version = parse_schema_version(v)
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
            else:
                raise ConfigurationError(f"Unknown configuration key: '{k}'")
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "schema_version": self.schema_version.value,
            "preset": self.preset,
            "with_options": self.with_options,
            "without_options": self.without_options,
            "modules": self.modules,
            "subtypes_of": self.subtypes_of,
            "file_pattern": self.file_pattern,
            "indent": self.indent,
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }

    def build_generator_config(self) -> GeneratorConfig:
        """Translate the names into a GeneratorConfig.

        Raises:
            ConfigurationError: If an option, preset, module or type name is unknown
        """
        builder = ConfigBuilder(self.schema_version, OptionPreset.from_name(self.preset))
        builder.with_option(*(Option.from_name(name) for name in self.with_options))
        builder.without_option(*(Option.from_name(name) for name in self.without_options))
        for name in self.modules:
            builder.with_module(create_module(name))
        if self.subtypes_of:
            builder.with_module(SubclassResolver(*resolve_type_names(self.subtypes_of)))
        return builder.build()
