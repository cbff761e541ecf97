#!/usr/bin/env python3
"""
UI components for the terratin command line.

This module provides the themed console and the message and table helpers
used by every command.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

logger = logging.getLogger(__name__)

# Create a custom theme
terratin_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "filename": "bold blue",
    "value": "green",
    "key": "cyan",
    "header": "bold magenta",
})

console = Console(theme=terratin_theme)


def print_rich_table(data: List[Dict[str, Any]], title: str,
                     columns: Optional[List[Tuple[str, str]]] = None) -> None:
    """
    Print data as a rich table.

    Args:
        data: List of dictionaries with row data.
        title: Table title.
        columns: Optional list of (column_name, style) tuples.
    """
    table = Table(title=title)

    # Use first row to determine columns
    if not columns:
        columns = [(key, "cyan") for key in data[0].keys()] if data else []

    for name, style in columns:
        table.add_column(name, style=style)

    for row in data:
        table.add_row(*[str(row.get(col[0], "")) for col in columns])

    console.print(table)


def print_key_values(values: Dict[str, Any], title: str) -> None:
    """
    Print a two column property table.

    Args:
        values: Mapping of property name to value.
        title: Table title.
    """
    table = Table(title=title)
    table.add_column("Property", style="key", no_wrap=True)
    table.add_column("Value", style="value")

    for key, value in values.items():
        if isinstance(value, float):
            formatted_value = f"{value:.6g}"
        else:
            formatted_value = str(value)
        table.add_row(str(key), formatted_value)

    console.print(table)


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]Warning:[/warning] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]Error:[/error] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/success]")
