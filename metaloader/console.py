"""Rich console output for the metaloader CLI.

All command output goes through this module so colour handling (NO_COLOR,
CI) lives in one place.
"""

from __future__ import annotations

import os
from typing import Any, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

_console: Optional[Console] = None


def get_console() -> Console:
    """Get or create the singleton Rich Console instance.

    Colour is disabled when NO_COLOR is set, and terminal codes are not
    forced in CI.
    """
    global _console
    if _console is None:
        no_color = os.getenv("NO_COLOR", "").lower() in ("1", "true", "yes")
        is_ci = os.getenv("CI", "").lower() in ("1", "true", "yes")

        _console = Console(
            force_terminal=not (no_color or is_ci),
            no_color=no_color,
            highlight=False,
        )
    return _console


def success(message: str) -> None:
    get_console().print(f"[green]✓ {escape(message)}[/green]")


def error(message: str) -> None:
    get_console().print(f"[red]✗ {escape(message)}[/red]")


def warning(message: str) -> None:
    get_console().print(f"[yellow]⚠ {escape(message)}[/yellow]")


def info(message: str, bold: bool = False) -> None:
    get_console().print(escape(message), style="bold" if bold else "")


def newline() -> None:
    get_console().print()


def table(
    data: List[List[Any]],
    headers: List[str],
    title: Optional[str] = None,
) -> None:
    """Display rows in a Rich table; count-like columns are right aligned.

    Args:
        data: List of rows (each row is a list of values)
        headers: Column headers
        title: Optional table title
    """
    rich_table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )

    for header in headers:
        numeric = any(word in header.lower() for word in ("count", "size", "order"))
        rich_table.add_column(header, justify="right" if numeric else "left")

    for row in data:
        rich_table.add_row(*["" if cell is None else str(cell) for cell in row])

    get_console().print(rich_table)
