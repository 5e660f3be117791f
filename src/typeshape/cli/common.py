"""
Common CLI helpers.

Turns command-line options into the objects the core works with:
settings, metadata providers, a resolved root type and the output sink.
"""

import sys
from pathlib import Path
from typing import List, Optional

import typer

from typeshape.config import VisitorSettings
from typeshape.exceptions import ConfigError, MetadataError, TypeNotFoundError
from typeshape.logging_config import logger
from typeshape.metadata import (
    MetadataProvider,
    ReflectionProvider,
    Resolution,
    SchemaProvider,
    TypeNameResolver,
)
from typeshape.visitor import IndentationOption, MultiSink, OutputSink, StreamSink, open_file_sink
from .output import print_error


def load_settings_or_exit() -> VisitorSettings:
    """Load layered settings, exiting with code 1 on invalid configuration."""
    try:
        return VisitorSettings.load()
    except ConfigError as e:
        print_error(str(e), hint="check ~/.typeshape/config.json, .typeshape/config.json and TYPESHAPE_* variables")
        raise typer.Exit(code=1)


def build_providers(settings: VisitorSettings, schemas: Optional[List[Path]] = None) -> List[MetadataProvider]:
    """
    Schema files select the schema provider; otherwise native reflection.

    Raises:
        typer.Exit: If a schema file cannot be loaded
    """
    if schemas:
        provider = SchemaProvider()
        for schema in schemas:
            try:
                if not provider.load_path(schema):
                    print_error(f"No schema document found at {schema}")
                    raise typer.Exit(code=1)
            except MetadataError as e:
                print_error(str(e))
                raise typer.Exit(code=1)
        logger.debug(f"Schema provider loaded {len(provider.type_names)} types")
        return [provider]

    return [
        ReflectionProvider(
            include_inherited=settings.include_inherited,
            expand_builtins=settings.expand_builtins,
        )
    ]


def resolve_or_exit(
    type_name: str,
    providers: List[MetadataProvider],
    load_paths: Optional[List[Path]] = None,
) -> Resolution:
    """
    Resolve a type name or exit with code 1.

    The core is never invoked for a name that does not resolve.
    """
    # Let bare module names in the working directory import.
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        return TypeNameResolver(providers, load_paths=load_paths).resolve(type_name)
    except TypeNotFoundError as e:
        print_error(str(e), hint="pass --path with the file or directory that defines the type")
        raise typer.Exit(code=1)


def build_indentation(settings: VisitorSettings) -> IndentationOption:
    """
    Raises:
        typer.BadParameter: If the unit or repeat count is unusable
    """
    try:
        return IndentationOption(unit=settings.indent_unit, repeat=settings.indent_repeat)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def open_output(outputs: Optional[List[Path]] = None, no_stdout: bool = False) -> OutputSink:
    """
    Sink for a visit: stdout plus every --output file, in that order.

    Raises:
        typer.BadParameter: If --no-stdout leaves no destination at all
    """
    targets: List[OutputSink] = []
    if not no_stdout:
        targets.append(StreamSink(sys.stdout))

    try:
        for path in outputs or []:
            targets.append(open_file_sink(path))
    except OSError as e:
        for target in targets:
            target.close()
        print_error(f"Cannot open output file: {e}")
        raise typer.Exit(code=1)

    if not targets:
        raise typer.BadParameter("--no-stdout requires at least one --output file")
    if len(targets) == 1:
        return targets[0]
    return MultiSink(targets)
