import json
import logging
from pathlib import Path

import click
from click.core import ParameterSource

from .pipeline import CodeGeneratorConfig, OutputMode, OutputValidationError, PipelineGenerator, SchemaParseError, write_outputs
from .pipeline.backends import list_backends


def _list_languages(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    for language in list_backends():
        click.echo(language)
    ctx.exit()


def _split_types(types: str | None) -> list[str]:
    if not types:
        return []
    return [name.strip() for name in types.split(",") if name.strip()]


@click.command()
@click.option("--language", "-l", default="kotlin", type=click.Choice(list_backends()), help="Target language")
@click.option("--types", "-t", default=None, type=str, help="Comma-separated type names to generate (default: all)")
@click.option("--proposed", is_flag=True, default=False, help="Include proposed (unstable) types and methods")
@click.option(
    "--resolve-deps/--no-resolve-deps",
    default=True,
    help="Also generate every type the requested types reference",
)
@click.option("--package", "-p", default=None, type=str, help="Target package name")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--force", is_flag=True, default=False, help="Overwrite existing output files")
@click.option("--dry-run", is_flag=True, default=False, help="Print the generated files instead of writing them")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.option(
    "--list-languages",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_list_languages,
    help="List the available target languages and exit",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path())
def metamodel_to_code(language, types, proposed, resolve_deps, package, config, force, dry_run, verbose, path, output):
    """Generate typed source for PATH (a metaModel.json) into OUTPUT.

    OUTPUT may be a directory (ending in "/" or existing) or a file path.
    Without OUTPUT the generated files are printed to stdout.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        try:
            with open(config) as f:
                config = CodeGeneratorConfig.from_dict(json.load(f))
        except ValueError as e:
            # JSONDecodeError and unknown output modes
            raise click.ClickException(f"Invalid config file {config}: {e}") from e
    else:
        config = CodeGeneratorConfig()

    # Command line flags override the config file
    ctx = click.get_current_context()
    if types:
        config.types = _split_types(types)
    if proposed:
        config.include_proposed = True
    if ctx.get_parameter_source("resolve_deps") != ParameterSource.DEFAULT:
        config.resolve_deps = resolve_deps
    if package:
        config.package_name = package
    if force:
        config.output.mode = OutputMode.FORCE
    if not config.source:
        config.source = Path(path).name

    try:
        files = PipelineGenerator(Path(path).read_bytes(), config, language).generate()
    except SchemaParseError as e:
        raise click.ClickException(f"Invalid metaModel: {e}") from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if output is None or dry_run:
        for name in sorted(files):
            if len(files) > 1:
                click.echo(f"// {name}")
            click.echo(files[name].decode("utf-8"), nl=False)
        return

    try:
        written = write_outputs(files, output, config.output)
    except (FileExistsError, ValueError, OutputValidationError) as e:
        raise click.ClickException(str(e)) from e

    for written_path in written:
        click.echo(f"Wrote {written_path}", err=True)
