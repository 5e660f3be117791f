"""
CLI Output Utilities

Machine-aware output functions. Tree lines always go out as plain text;
tables and styled errors appear only in human mode.
"""

from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from typeshape.cli.config import CLIConfig


# Diagnostics console; stdout is reserved for the tree itself.
_console = Console(stderr=True)


def echo(message: str = "", **kwargs) -> None:
    """Print a plain line to stdout."""
    typer.echo(message, **kwargs)


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print an error message to stderr.

    Args:
        message: Error message (printed as ``Error: <message>``)
        hint: Optional follow-up suggestion
    """
    if CLIConfig.is_machine_mode():
        typer.echo(f"Error: {message}", err=True)
        if hint:
            typer.echo(f"Try: {hint}", err=True)
    else:
        _console.print(f"[bold red]Error:[/bold red] {escape(message)}")
        if hint:
            _console.print(f"[dim]Try: {escape(hint)}[/dim]")


def build_summary_table(type_name: str, stats: Dict[str, Any], settings: Dict[str, Any]) -> Table:
    """Summary of one visit: traversal counters plus the settings used."""
    table = Table(title=f"Visit Summary for '{type_name}'")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="magenta")

    for key, value in stats.items():
        table.add_row(key.replace("_", " ").title(), str(value))
    for key, value in settings.items():
        table.add_row(f"[dim]{key}[/dim]", escape(repr(value)))
    return table


def print_summary(type_name: str, stats: Dict[str, Any], settings: Dict[str, Any]) -> None:
    """Show the visit summary table; machine mode prints nothing."""
    if CLIConfig.is_machine_mode():
        return
    _console.print(build_summary_table(type_name, stats, settings))
