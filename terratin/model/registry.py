"""
Registry for terratin mesh writers.

Writers register themselves with the register_exporter decorator when the
formats package is imported; lookups accept a format name or a file extension.
"""

import logging
from typing import Dict, List, Type

from .base import ModelExporter
from ..exceptions import ExportError

# Set up logging
logger = logging.getLogger(__name__)

# Format registry
_FORMAT_REGISTRY: Dict[str, Type[ModelExporter]] = {}
_EXTENSION_MAP: Dict[str, str] = {}


def register_format(format_name: str, exporter_class: Type[ModelExporter]) -> None:
    """Register a format exporter under its name and file extensions."""
    format_name = format_name.lower()  # Ensure lowercase for consistent lookup
    _FORMAT_REGISTRY[format_name] = exporter_class
    for ext in exporter_class.file_extensions:
        _EXTENSION_MAP[ext.lower().lstrip('.')] = format_name
    logger.debug(f"Registered format exporter: {format_name} ({exporter_class.__name__})")


def get_exporter(format_name: str) -> Type[ModelExporter]:
    """
    Get exporter class for a format name or file extension.

    Raises:
        ExportError: If no exporter handles the format
    """
    key = format_name.lower().lstrip('.')
    if key in _FORMAT_REGISTRY:
        return _FORMAT_REGISTRY[key]
    if key in _EXTENSION_MAP:
        return _FORMAT_REGISTRY[_EXTENSION_MAP[key]]

    raise ExportError(f"Unknown format: {format_name}. Available formats: {get_available_formats()}")


def get_available_formats() -> List[str]:
    """Get sorted list of available export formats."""
    return sorted(_FORMAT_REGISTRY.keys())


def register_exporter(cls: Type[ModelExporter]) -> Type[ModelExporter]:
    """Decorator to register a model exporter."""
    register_format(cls.format_name, cls)
    return cls
