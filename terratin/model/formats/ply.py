"""
PLY writer for triangulated meshes.

Writes the Stanford polygon format in either ascii or binary little endian
encoding with float coordinates, optional vertex normals and one
`uchar int` index list per face.
"""

import struct
import logging
from typing import BinaryIO, Optional, TextIO

import numpy as np

from ..base import ModelExporter, MeshData
from ..config import ExportConfig
from ..registry import register_exporter
from ..utils.validation import ensure_directory_exists
from ...exceptions import ExportError

# Set up logging
logger = logging.getLogger(__name__)


@register_exporter
class PLYExporter(ModelExporter):
    """PLY format exporter."""
    format_name = "ply"
    file_extensions = ["ply"]
    binary_supported = True

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

        binary = config.binary if config.binary is not None else True
        try:
            if binary:
                with open(filename, 'wb') as f:
                    _write_binary_ply(f, vertices, mesh.faces, normals)
            else:
                with open(filename, 'w') as f:
                    _write_ascii_ply(f, vertices, mesh.faces, normals)
        except OSError as e:
            raise ExportError(f"Failed to write PLY file {filename}: {e}") from e

        logger.info(f"Successfully exported PLY file: {filename}")
        return filename


def _header(encoding: str, vertex_count: int, face_count: int, with_normals: bool) -> str:
    lines = [
        "ply",
        f"format {encoding} 1.0",
        "comment generated by terratin",
        f"element vertex {vertex_count}",
        "property float x",
        "property float y",
        "property float z",
    ]
    if with_normals:
        lines += ["property float nx", "property float ny", "property float nz"]
    lines += [
        f"element face {face_count}",
        "property list uchar int vertex_indices",
        "end_header",
    ]
    return "\n".join(lines) + "\n"


def _write_binary_ply(
    file_obj: BinaryIO,
    vertices: np.ndarray,
    faces: np.ndarray,
    normals: Optional[np.ndarray] = None
) -> None:
    """
    Write mesh data as a binary PLY file.

    Args:
        file_obj: Open binary file object to write to
        vertices: Nx3 numpy array of vertex positions
        faces: Mx3 numpy array of face indices
        normals: Nx3 numpy array of vertex normals (optional)
    """
    file_obj.write(_header("binary_little_endian", len(vertices), len(faces), normals is not None).encode())

    # Write vertex data
    for i in range(len(vertices)):
        file_obj.write(struct.pack('<fff', vertices[i, 0], vertices[i, 1], vertices[i, 2]))
        if normals is not None:
            file_obj.write(struct.pack('<fff', normals[i, 0], normals[i, 1], normals[i, 2]))

    # Write face data
    for face in faces:
        file_obj.write(struct.pack('<Biii', 3, face[0], face[1], face[2]))


def _write_ascii_ply(
    file_obj: TextIO,
    vertices: np.ndarray,
    faces: np.ndarray,
    normals: Optional[np.ndarray] = None
) -> None:
    """Write mesh data as an ascii PLY file."""
    file_obj.write(_header("ascii", len(vertices), len(faces), normals is not None))

    for i in range(len(vertices)):
        line = f"{vertices[i, 0]:.6f} {vertices[i, 1]:.6f} {vertices[i, 2]:.6f}"
        if normals is not None:
            line += f" {normals[i, 0]:.6f} {normals[i, 1]:.6f} {normals[i, 2]:.6f}"
        file_obj.write(line + "\n")

    for face in faces:
        file_obj.write(f"3 {face[0]} {face[1]} {face[2]}\n")
