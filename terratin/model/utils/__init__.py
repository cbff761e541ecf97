"""Model utility functions."""

from .validation import (
    validate_vertices,
    validate_faces,
    validate_mesh,
    ensure_directory_exists
)
from .logging import StructuredLogger, configure_logging

# Define package exports
__all__ = [
    'validate_vertices',
    'validate_faces',
    'validate_mesh',
    'ensure_directory_exists',
    'StructuredLogger',
    'configure_logging'
]
