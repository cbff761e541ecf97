"""
Wavefront OBJ writer.

OBJ is a text format understood by practically every 3D package; vertices and
normals are written once and faces reference them by 1-based index.
"""

import logging
from typing import Optional

import numpy as np

from ..base import ModelExporter, MeshData
from ..config import ExportConfig
from ..registry import register_exporter
from ..utils.validation import ensure_directory_exists
from ...exceptions import ExportError

# Set up logging
logger = logging.getLogger(__name__)


@register_exporter
class OBJExporter(ModelExporter):
    """Exporter for OBJ format."""
    format_name = "obj"
    file_extensions = ["obj"]
    binary_supported = False  # OBJ is a text-based format

    @classmethod
    def export(cls, mesh: MeshData, filename: str, config: ExportConfig) -> str:
        filename = cls.ensure_extension(filename)
        ensure_directory_exists(filename)

        # Normals must describe the scaled surface
        vertices = cls.scaled_vertices(mesh, config)
        scaled = MeshData(vertices, mesh.faces, mesh.normals if config.z_scale == 1.0 else None)

        normals = None
        if config.calculate_normals:
            scaled.ensure_normals()
            normals = scaled.normals

        try:
            write_obj(vertices, mesh.faces, filename, normals)
        except OSError as e:
            raise ExportError(f"Failed to write OBJ file {filename}: {e}") from e

        logger.info(f"Successfully exported OBJ file: {filename}")
        return filename


def write_obj(
    vertices: np.ndarray,
    faces: np.ndarray,
    filename: str,
    normals: Optional[np.ndarray] = None
) -> None:
    """
    Write mesh data to an OBJ file.

    Args:
        vertices: Array of vertex coordinates
        faces: Array of 0-based face indices
        filename: Output filename
        normals: Optional array of vertex normals, one per vertex
    """
    with open(filename, 'w') as f:
        # Write header
        f.write("# OBJ file generated by terratin\n")
        f.write(f"# vertices: {len(vertices)}, faces: {len(faces)}\n")
        f.write("o TIN\n")

        for v in vertices:
            f.write(f"v {v[0]:.6f} {v[1]:.6f} {v[2]:.6f}\n")

        if normals is not None:
            for n in normals:
                f.write(f"vn {n[0]:.6f} {n[1]:.6f} {n[2]:.6f}\n")

        # OBJ indices are 1-based
        for face in faces:
            a, b, c = (int(i) + 1 for i in face)
            if normals is not None:
                f.write(f"f {a}//{a} {b}//{b} {c}//{c}\n")
            else:
                f.write(f"f {a} {b} {c}\n")
