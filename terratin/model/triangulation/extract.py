"""
Conversion of a refined mesh into flat vertex and face arrays.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from ...exceptions import MeshInvariantError
from ...raster.grid import ElevationGrid

if TYPE_CHECKING:
    from .greedy import TerraMesh

logger = logging.getLogger(__name__)


def convert_to_mesh(
    terra_mesh: "TerraMesh",
    elevation_grid: Optional[ElevationGrid] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert a greedy insertion result into vertex and face arrays.

    Vertices are the used cells, numbered in row-major order and placed at
    world coordinates. A used cell with no data in ``elevation_grid`` takes
    the repaired elevation from the grid the run worked on. Faces are counter-clockwise when
    viewed from above, so their normals point up.

    Args:
        terra_mesh: Result of greedy insertion
        elevation_grid: Grid to take elevations and georeferencing from;
            defaults to the grid the run worked on

    Returns:
        Tuple of (vertices, faces) with shapes (N, 3) float64 and (M, 3) int64

    Raises:
        MeshInvariantError: If a face references a cell that was never used
    """
    grid = elevation_grid if elevation_grid is not None else terra_mesh.grid
    used = terra_mesh.used
    if grid.shape != used.shape:
        raise MeshInvariantError(
            f"Grid shape {grid.shape} does not match the usage grid {used.shape}"
        )

    # Used cells with no data in the supplied grid were repaired in the
    # working grid, so their elevation comes from there
    supplied_valid = grid.valid_mask()
    working = terra_mesh.grid
    vertex_cells = used & (supplied_valid | working.valid_mask())

    # Dense row-major numbering of vertex cells
    rows, cols = np.nonzero(vertex_cells)
    vertex_index = np.full(grid.shape, -1, dtype=np.int64)
    vertex_index[rows, cols] = np.arange(len(rows), dtype=np.int64)

    elevations = np.where(
        supplied_valid[rows, cols],
        grid.values[rows, cols],
        working.values[rows, cols],
    )
    vertices = np.column_stack([
        grid.x_origin + cols * grid.cell_size,
        grid.y_origin + (grid.height - 1 - rows) * grid.cell_size,
        elevations,
    ]).astype(np.float64)

    corners = [terra_mesh.mesh.points(t) for t in terra_mesh.mesh.traverse()]
    if not corners:
        return vertices, np.zeros((0, 3), dtype=np.int64)

    corners = np.asarray(corners, dtype=np.int64)  # (M, 3, 2) of (x, y)
    faces = vertex_index[corners[:, :, 1], corners[:, :, 0]]

    missing = np.argwhere(faces < 0)
    if len(missing):
        face, corner = missing[0]
        x, y = corners[face, corner]
        raise MeshInvariantError(f"Face {face} references cell ({x}, {y}) which is not a mesh vertex")

    # Normalise winding with the signed area in world coordinates
    a, b, c = (vertices[faces[:, i]] for i in range(3))
    signed_area = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    clockwise = signed_area < 0
    faces[clockwise] = faces[clockwise][:, ::-1]

    logger.debug(f"Extracted {len(vertices)} vertices and {len(faces)} faces")
    return vertices, faces
