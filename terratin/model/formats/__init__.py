"""Mesh writers package."""
import os
import logging
from typing import Optional

from ..base import MeshData
from ..config import ExportConfig
from ..registry import get_available_formats, get_exporter
from ...exceptions import ExportError

# Import format modules to register them via decorators
from . import stl
from . import obj
from . import ply

logger = logging.getLogger(__name__)


def write_mesh_to_file(
    mesh: MeshData,
    filename: str,
    format_name: Optional[str] = None,
    config: Optional[ExportConfig] = None
) -> str:
    """
    Write a mesh with the writer for the given format.

    Args:
        mesh: Mesh to write
        filename: Output filename
        format_name: Format name; inferred from the filename extension if omitted
        config: Export configuration, defaults to ExportConfig()

    Returns:
        Path of the written file

    Raises:
        ExportError: If the format is unknown or the file cannot be written
    """
    if format_name is None:
        format_name = os.path.splitext(filename)[1].lstrip('.')
        if not format_name:
            raise ExportError(f"Can not infer a format from {filename}; pass format_name")

    exporter = get_exporter(format_name)
    config = config if config is not None else ExportConfig()
    logger.debug(f"Writing {mesh} with {exporter.__name__} to {filename}")
    return exporter.export(mesh, filename, config)


__all__ = [
    'get_available_formats',
    'get_exporter',
    'write_mesh_to_file'
]
