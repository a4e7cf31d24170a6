"""Rich console output shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]![/yellow] {escape(message)}")


def print_error(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_key_values(title: str, values: Mapping[str, object]) -> None:
    """Print a two-column table of keys and values."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(escape(str(key)), escape("" if value is None else str(value)))
    console.print(table)
