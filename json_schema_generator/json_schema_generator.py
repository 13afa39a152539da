import json
import logging
from pathlib import Path

import click
import jinja2

from .cli_config import GeneratorCliConfig, parse_schema_version
from .cli_utils import reconstruct_command_line, resolve_type_names
from .config import PRESETS
from .errors import ConfigurationError, SchemaGenerationError
from .generator import SchemaGenerator
from .keywords import SchemaVersion
from .output import OutputMode, SchemaWriteError, write_schema

logger = logging.getLogger(__name__)


def render_file_name(file_pattern: str, target_type: type) -> str:
    """Render the output file name of a type from a jinja2 template."""
    jinja_env = jinja2.Environment(undefined=jinja2.StrictUndefined)
    try:
        template = jinja_env.from_string(file_pattern)
        return template.render(
            type_name=target_type.__name__,
            module=target_type.__module__,
            qualified_name=f"{target_type.__module__}.{target_type.__qualname__}",
        )
    except jinja2.TemplateError as e:
        raise ConfigurationError(f"Invalid file pattern '{file_pattern}': {e}") from e


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "--schema-version",
    "-s",
    default=None,
    type=click.Choice([version.value for version in SchemaVersion]),
    help="Target JSON Schema dialect (default: draft-2020-12)",
)
@click.option("--preset", "-p", default=None, type=click.Choice(list(PRESETS)), help="Options enabled by default")
@click.option("--with", "with_options", multiple=True, help="Enable an option (repeatable)")
@click.option("--without", "without_options", multiple=True, help="Disable an option (repeatable)")
@click.option(
    "--module",
    "-m",
    "modules",
    multiple=True,
    help="Add a module: a built-in name or 'package.module:ModuleClass' (repeatable)",
)
@click.option(
    "--subtypes-of",
    multiple=True,
    help="Describe a base class ('package.module:ClassName') by its subclasses (repeatable)",
)
@click.option("--output-dir", "-o", default=None, type=click.Path(file_okay=False, resolve_path=True))
@click.option("--file-pattern", default=None, type=str, help="Jinja2 template of the file names")
@click.option(
    "--mode",
    default=None,
    type=click.Choice([mode.value for mode in OutputMode]),
    help="Behavior when an output file exists",
)
@click.option("--verbose", "-v", count=True)
@click.argument("types", nargs=-1, required=True)
def json_schema_generator(
    config,
    schema_version,
    preset,
    with_options,
    without_options,
    modules,
    subtypes_of,
    output_dir,
    file_pattern,
    mode,
    verbose,
    types,
):
    """Generate JSON Schema documents for Python types.

    TYPES are given as 'package.module:ClassName' or 'package.module.*'.
    Without --output-dir, the schemas are printed.
    """
    logging.basicConfig(level=logging.DEBUG if verbose > 1 else logging.INFO if verbose else logging.WARNING)
    logger.info(reconstruct_command_line(json_schema_generator))

    try:
        if config is not None:
            with open(config) as f:
                cli_config = GeneratorCliConfig.from_dict(json.load(f))
        else:
            cli_config = GeneratorCliConfig()

        # command line values override the config file
        if schema_version is not None:
            cli_config.schema_version = parse_schema_version(schema_version)
        if preset is not None:
            cli_config.preset = preset
        cli_config.with_options += list(with_options)
        cli_config.without_options += list(without_options)
        cli_config.modules += list(modules)
        cli_config.subtypes_of += list(subtypes_of)
        if file_pattern is not None:
            cli_config.file_pattern = file_pattern
        if mode is not None:
            cli_config.output.mode = OutputMode(mode)

        target_types = resolve_type_names(types)
        generator = SchemaGenerator(cli_config.build_generator_config())
        file_names = {
            target_type: render_file_name(cli_config.file_pattern, target_type) for target_type in target_types
        }
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e

    for target_type in target_types:
        try:
            schema = generator.generate_schema(target_type)
        except SchemaGenerationError as e:
            raise click.ClickException(f"{target_type.__qualname__}: {e}") from e
        content = json.dumps(schema, indent=cli_config.indent)
        if output_dir is None:
            click.echo(content)
            continue
        path = Path(output_dir) / file_names[target_type]
        try:
            write_schema(path, content + "\n", cli_config.output)
        except SchemaWriteError as e:
            raise click.ClickException(str(e)) from e
        logger.info(f"wrote {path}")
