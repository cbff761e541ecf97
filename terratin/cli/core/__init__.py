"""Shared console and UI helpers for the terratin command line."""

from .ui import (
    console,
    print_rich_table,
    print_key_values,
    print_warning,
    print_error,
    print_success
)

__all__ = [
    'console',
    'print_rich_table',
    'print_key_values',
    'print_warning',
    'print_error',
    'print_success'
]
