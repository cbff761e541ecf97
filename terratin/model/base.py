"""Base classes for mesh data and mesh writers."""

import os
import numpy as np
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple, Union

if TYPE_CHECKING:
    from .config import ExportConfig
    from .triangulation.greedy import TerraMesh

# Set up logging
logger = logging.getLogger(__name__)

# Type definitions
Vertex = Tuple[float, float, float]
VertexList = List[Vertex]
Face = List[int]
FaceList = List[Face]


class MeshData:
    """Container for a triangle mesh with vertices, faces and optional vertex normals."""

    def __init__(self,
                 vertices: Union[VertexList, np.ndarray],
                 faces: Union[FaceList, np.ndarray],
                 normals: Optional[np.ndarray] = None):
        """
        Initialize mesh data container.

        Args:
            vertices: List of (x, y, z) vertices or numpy array
            faces: List of face indices or numpy array
            normals: Optional (N, 3) array of vertex normals
        """
        # World coordinates can be large, keep double precision until writing
        self.vertices = np.array(vertices, dtype=np.float64).reshape(-1, 3)
        self.faces = np.array(faces, dtype=np.int64).reshape(-1, 3)
        self.normals = np.array(normals, dtype=np.float64) if normals is not None else None

    @classmethod
    def from_terra_mesh(cls, terra_mesh: "TerraMesh") -> "MeshData":
        """Build mesh data from a greedy insertion result."""
        vertices, faces = terra_mesh.convert_to_mesh()
        return cls(vertices, faces)

    @property
    def vertex_count(self) -> int:
        """Get the number of vertices in the mesh."""
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        """Get the number of faces in the mesh."""
        return len(self.faces)

    def face_normals(self) -> np.ndarray:
        """
        Unit normal of each face following its winding.

        Returns:
            (M, 3) array; degenerate faces get (0, 0, 1)
        """
        if not self.face_count:
            return np.zeros((0, 3), dtype=np.float64)

        v0 = self.vertices[self.faces[:, 0]]
        v1 = self.vertices[self.faces[:, 1]]
        v2 = self.vertices[self.faces[:, 2]]
        normals = np.cross(v1 - v0, v2 - v0)

        lengths = np.linalg.norm(normals, axis=1)
        degenerate = lengths < 1e-12
        normals[degenerate] = (0.0, 0.0, 1.0)
        lengths[degenerate] = 1.0
        return normals / lengths[:, None]

    def ensure_normals(self, force_recalculate: bool = False) -> None:
        """
        Ensure the mesh has vertex normals, calculating them if needed.

        Vertex normals are the area-weighted sum of the adjacent face normals.

        Args:
            force_recalculate: If True, recalculate normals even if already present
        """
        if self.normals is not None and not force_recalculate:
            return

        normals = np.zeros_like(self.vertices)
        if self.face_count:
            v0 = self.vertices[self.faces[:, 0]]
            v1 = self.vertices[self.faces[:, 1]]
            v2 = self.vertices[self.faces[:, 2]]
            # Cross product length is twice the face area
            weighted = np.cross(v1 - v0, v2 - v0)
            for i in range(3):
                np.add.at(normals, self.faces[:, i], weighted)

        lengths = np.linalg.norm(normals, axis=1)
        unused = lengths < 1e-12
        normals[unused] = (0.0, 0.0, 1.0)
        lengths[unused] = 1.0
        self.normals = normals / lengths[:, None]

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Axis aligned bounding box of the vertices.

        Returns:
            Tuple of (min_xyz, max_xyz)
        """
        if not self.vertex_count:
            return np.zeros(3), np.zeros(3)
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    def as_dict(self) -> Dict[str, Any]:
        """
        Get mesh data as a dictionary.

        Returns:
            Dictionary with mesh components
        """
        result = {
            'vertices': self.vertices,
            'faces': self.faces
        }

        if self.normals is not None:
            result['normals'] = self.normals

        return result

    def __repr__(self) -> str:
        """String representation of the mesh."""
        attrs = [f"vertices={self.vertex_count}", f"faces={self.face_count}"]
        if self.normals is not None:
            attrs.append("normals=True")

        return f"MeshData({', '.join(attrs)})"


class ModelExporter(ABC):
    """
    Abstract base class for all mesh writers.

    Concrete exporters implement export() and register themselves with the
    exporter registry through the register_exporter decorator.
    """
    # Class attributes to be defined by subclasses
    format_name: ClassVar[str] = ""
    file_extensions: ClassVar[List[str]] = []
    binary_supported: ClassVar[bool] = False

    @classmethod
    @abstractmethod
    def export(cls,
               mesh: MeshData,
               filename: str,
               config: "ExportConfig") -> str:
        """
        Write a mesh to a file.

        Args:
            mesh: Mesh to write
            filename: Output filename
            config: Export configuration parameters

        Returns:
            Path to the created file

        Raises:
            ExportError: If the file cannot be written
        """
        pass

    @classmethod
    def ensure_extension(cls, filename: str) -> str:
        """
        Ensure filename has the correct extension for this format.

        Args:
            filename: Original filename

        Returns:
            Filename with correct extension
        """
        # Use the first extension if multiple are supported
        if not cls.file_extensions:
            return filename

        if any(filename.lower().endswith(f".{ext.lower()}") for ext in cls.file_extensions):
            return filename

        return f"{os.path.splitext(filename)[0]}.{cls.file_extensions[0]}"

    @staticmethod
    def scaled_vertices(mesh: MeshData, config: "ExportConfig") -> np.ndarray:
        """Vertices with the configured vertical exaggeration applied."""
        vertices = mesh.vertices.copy()
        vertices[:, 2] *= config.z_scale
        return vertices
