"""
terratin package.

Converts regular elevation rasters (DEMs) into triangulated irregular
networks by greedy insertion: vertices are added where the terrain deviates
most from the current mesh until every sample lies within a vertical error
budget.
"""

__version__ = "0.1.0"

# Import the main exception classes for easy access
from terratin.exceptions import (
    TerraTinException,
    RasterError,
    RasterFileError,
    RasterDataError,
    TriangulationError,
    MeshInvariantError,
    ExportError
)

from terratin.raster import ElevationGrid, load_raster_file
from terratin.model import (
    MeshData,
    ExportConfig,
    TriangulationConfig,
    GreedyTriangulator,
    TerraMesh,
    greedy_insert,
    convert_to_mesh,
    triangulate_grid,
    write_mesh_to_file
)
