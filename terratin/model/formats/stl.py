"""STL writer for triangulated meshes."""

import struct
import logging

from ..base import ModelExporter, MeshData
from ..config import ExportConfig
from ..registry import register_exporter
from ..utils.validation import ensure_directory_exists
from ...exceptions import ExportError

logger = logging.getLogger(__name__)


@register_exporter
class STLExporter(ModelExporter):
    """STL format exporter."""
    format_name = "stl"
    file_extensions = ["stl"]
    binary_supported = True

    @classmethod
    def export(cls, mesh: MeshData, filename: str, config: ExportConfig) -> str:
        """Write mesh as STL file, binary unless config.binary is False."""
        filename = cls.ensure_extension(filename)
        ensure_directory_exists(filename)

        vertices = cls.scaled_vertices(mesh, config)
        scaled = MeshData(vertices, mesh.faces)

        binary = config.binary if config.binary is not None else True
        try:
            if binary:
                write_binary_stl(scaled, filename)
            else:
                write_ascii_stl(scaled, filename)
        except OSError as e:
            raise ExportError(f"Failed to write STL file {filename}: {e}") from e

        logger.info(f"Successfully exported STL file: {filename}")
        return filename


def write_binary_stl(mesh: MeshData, filename: str) -> None:
    """Write mesh data to a binary STL file."""
    normals = mesh.face_normals()
    with open(filename, 'wb') as f:
        # Write header
        header = b'terratin mesh'
        f.write(header + b' ' * (80 - len(header)))

        # Write triangle count
        f.write(struct.pack('<I', len(mesh.faces)))

        # Write each triangle
        for normal, face in zip(normals, mesh.faces):
            f.write(struct.pack('<fff', *normal))
            for index in face:
                f.write(struct.pack('<fff', *mesh.vertices[index]))
            f.write(struct.pack('<H', 0))


def write_ascii_stl(mesh: MeshData, filename: str) -> None:
    """Write mesh data to an ASCII STL file."""
    normals = mesh.face_normals()
    with open(filename, 'w') as f:
        f.write("solid terratin\n")

        for normal, face in zip(normals, mesh.faces):
            f.write(f"  facet normal {normal[0]:.6e} {normal[1]:.6e} {normal[2]:.6e}\n")
            f.write("    outer loop\n")
            for index in face:
                v = mesh.vertices[index]
                f.write(f"      vertex {v[0]:.6e} {v[1]:.6e} {v[2]:.6e}\n")
            f.write("    endloop\n")
            f.write("  endfacet\n")

        f.write("endsolid terratin\n")

