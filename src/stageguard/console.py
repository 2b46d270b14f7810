"""Rich console utilities for the stageguard CLI."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from stageguard.domain.models import TaskMappingEntry

# Shared console instances
console = Console()
error_console = Console(stderr=True)


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_sessions(entries: Iterable[TaskMappingEntry]) -> None:
    """Print the task mapping as a table, oldest first."""
    table = Table(show_header=True, box=None)
    table.add_column("Session", style="cyan")
    table.add_column("Task", style="magenta")
    table.add_column("Created", style="dim")
    table.add_column("Objective")

    for entry in sorted(entries, key=lambda e: e.created_at):
        # Objective can be long; first line only
        objective = entry.objective.split("\n")[0][:80]
        table.add_row(entry.session_id, entry.task_name, entry.created_at[:19], objective)

    console.print(table)
