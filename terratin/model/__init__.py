"""Triangulation and mesh export package for terratin."""
from .base import ModelExporter, MeshData
from .config import TriangulationConfig, ExportConfig, load_config, save_config
from .registry import get_available_formats, get_exporter
from .triangulation import GreedyTriangulator, TerraMesh, greedy_insert, convert_to_mesh, triangulate_grid

# Import formats package last to register exporters
from . import formats
from .formats import write_mesh_to_file

__all__ = [
    'ModelExporter',
    'MeshData',
    'TriangulationConfig',
    'ExportConfig',
    'load_config',
    'save_config',
    'get_available_formats',
    'get_exporter',
    'GreedyTriangulator',
    'TerraMesh',
    'greedy_insert',
    'convert_to_mesh',
    'triangulate_grid',
    'write_mesh_to_file'
]
