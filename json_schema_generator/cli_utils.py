"""
CLI utilities for command line reconstruction and importing types by name.
"""

from __future__ import annotations

import importlib
import inspect
from enum import Enum
from pathlib import Path
from typing import Any

import click

from .errors import ConfigurationError

COMMAND_NAME = "json_schema_generator"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return COMMAND_NAME

    if not cli_args:
        return COMMAND_NAME

    cmd_parts = [COMMAND_NAME]
    arguments = []
    options = []

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]
        if not value:
            continue

        if isinstance(param, click.Argument):
            values = value if isinstance(value, (list, tuple)) else [value]
            arguments.extend(_format_value(item) for item in values)

        elif isinstance(param, click.Option):
            # Skip if it's the default value
            if value == param.default or (isinstance(value, tuple) and not value):
                continue
            flag = param.opts[0] if param.opts else f"--{param_name}"
            if param.is_flag:
                options.append(flag)
            elif isinstance(value, (list, tuple)):
                for item in value:
                    options.extend([flag, _format_value(item)])
            else:
                options.extend([flag, _format_value(value)])

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)

    return " ".join(cmd_parts)


def _format_value(value: Any) -> str:
    # file paths are shortened to their names for a cleaner display
    if isinstance(value, Path) or (isinstance(value, str) and "/" in value):
        path_obj = Path(str(value))
        return path_obj.name if path_obj.exists() else str(value)
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def import_module(module_name: str) -> Any:
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}") from e


def load_object(reference: str) -> Any:
    """Import an object given as "package.module:QualifiedName".

    Args:
        reference: Module path and qualified name, separated by a colon

    Returns:
        The imported object
    """
    module_name, separator, qualified_name = reference.partition(":")
    if not separator or not module_name or not qualified_name:
        raise ConfigurationError(f"Expected 'module:QualifiedName', got '{reference}'")
    target = import_module(module_name)
    for part in qualified_name.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigurationError(f"Module '{module_name}' has no attribute '{qualified_name}'") from e
    return target


def classes_of_module(module_name: str) -> list[type]:
    """Classes defined (not imported) in a module, in definition order."""
    module = import_module(module_name)
    return [
        value
        for value in vars(module).values()
        if inspect.isclass(value) and value.__module__ == module.__name__ and not value.__name__.startswith("_")
    ]


def resolve_type_names(names: list[str] | tuple[str, ...]) -> list[type]:
    """Import the types to generate schemas for.

    Accepts "package.module:QualifiedName" for a single type and
    "package.module.*" for every public class defined in a module.

    Raises:
        ConfigurationError: If a name cannot be imported or does not denote a type
    """
    types: list[type] = []
    for name in names:
        if name.endswith(".*"):
            found = classes_of_module(name[:-2])
            if not found:
                raise ConfigurationError(f"No classes found in module '{name[:-2]}'")
            types.extend(found)
            continue
        target = load_object(name)
        if not inspect.isclass(target):
            raise ConfigurationError(f"'{name}' is not a class")
        types.append(target)
    return types
