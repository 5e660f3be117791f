from pathlib import Path
from typing import List, Optional

import typer

from typeshape.cli.common import (
    build_indentation,
    build_providers,
    load_settings_or_exit,
    open_output,
    resolve_or_exit,
)
from typeshape.cli.config import CLIConfig
from typeshape.cli.output import echo, print_error, print_summary
from typeshape.exceptions import MetadataError
from typeshape.logging_config import logger, setup_logging
from typeshape.visitor import TypeStructureVisitor

app = typer.Typer(no_args_is_help=True)


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: console logging and a summary table on stderr (also via TYPESHAPE_HUMAN_MODE env var)"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log at DEBUG level in human mode (default: TYPESHAPE_LOG_LEVEL or INFO)."
    ),
):
    """
    TypeShape: render the member structure of a type as an indented tree.

    Machine mode is DEFAULT (tree text only).
    Use --human/-H for logging and a visit summary.
    """
    if human:
        CLIConfig.set_machine_mode(False)

    # stdout carries the tree; logging only ever goes to stderr, and only for humans
    setup_logging(level="DEBUG" if verbose else None, suppress_console=CLIConfig.is_machine_mode(), force=True)


# Negative depth limits ("-1") must reach DEPTH_LIMIT instead of being parsed as options
@app.command(context_settings={"ignore_unknown_options": True})
def visit(
    type_name: str = typer.Argument(..., help="Type to visit, e.g. 'collections.OrderedDict' or 'Account'."),
    depth_limit: Optional[int] = typer.Argument(
        None, help="Maximum depth to render; -1 for unlimited (default from configuration)."
    ),
    schema: Optional[List[Path]] = typer.Option(
        None, "--schema", "-s", help="JSON schema document or directory to describe types from. Can be used multiple times."
    ),
    path: Optional[List[Path]] = typer.Option(
        None, "--path", "-p", help="Python file or directory to load when the type is not importable. Can be used multiple times."
    ),
    output: Optional[List[Path]] = typer.Option(
        None, "--output", "-o", help="Also write the tree to this file. Can be used multiple times.", dir_okay=False
    ),
    no_stdout: bool = typer.Option(False, "--no-stdout", help="Do not write the tree to stdout."),
    indent_unit: Optional[str] = typer.Option(None, "--indent-unit", help="Indentation unit string."),
    indent_repeat: Optional[int] = typer.Option(None, "--indent-repeat", help="Units per depth level."),
    include_inherited: Optional[bool] = typer.Option(
        None, "--include-inherited/--own-members", help="Report members inherited through the MRO."
    ),
    expand_builtins: Optional[bool] = typer.Option(
        None, "--expand-builtins/--opaque-builtins", help="Describe builtins types instead of treating them as leaves."
    ),
):
    """
    Writes the structure tree of a type: fields, properties, methods,
    constructors, events and nested types, recursively.
    """
    settings = load_settings_or_exit()
    if depth_limit is not None:
        settings.depth_limit = depth_limit
    if indent_unit is not None:
        settings.indent_unit = indent_unit
    if indent_repeat is not None:
        settings.indent_repeat = indent_repeat
    if include_inherited is not None:
        settings.include_inherited = include_inherited
    if expand_builtins is not None:
        settings.expand_builtins = expand_builtins

    if settings.depth_limit < -1:
        raise typer.BadParameter(f"must be -1 or a non-negative integer, got {settings.depth_limit}", param_hint="DEPTH_LIMIT")
    option = build_indentation(settings)

    providers = build_providers(settings, schema)
    resolution = resolve_or_exit(type_name, providers, load_paths=path)
    logger.info(f"Visiting {resolution.ref.name} (resolved via {resolution.strategy})")

    visitor = TypeStructureVisitor(resolution.provider, option=option, depth_limit=settings.depth_limit)
    sink = open_output(output, no_stdout)
    try:
        visitor.visit(resolution.ref, sink)
    except MetadataError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    finally:
        sink.close()

    print_summary(resolution.ref.name, visitor.last_stats.to_dict(), settings.to_dict())


@app.command()
def resolve(
    type_name: str = typer.Argument(..., help="Type name to resolve."),
    schema: Optional[List[Path]] = typer.Option(
        None, "--schema", "-s", help="JSON schema document or directory to resolve against. Can be used multiple times."
    ),
    path: Optional[List[Path]] = typer.Option(
        None, "--path", "-p", help="Python file or directory to load when the type is not importable. Can be used multiple times."
    ),
):
    """
    Prints the qualified name a type name resolves to and the strategy that found it.
    """
    settings = load_settings_or_exit()
    providers = build_providers(settings, schema)
    resolution = resolve_or_exit(type_name, providers, load_paths=path)
    echo(f"{resolution.ref.name}\t{resolution.strategy}\t{resolution.provider.kind}")


@app.command()
def version():
    """
    Prints the current version of TypeShape.
    """
    from typeshape import __version__
    echo(f"TypeShape v{__version__}")


if __name__ == "__main__":
    app()
