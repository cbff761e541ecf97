"""Raster repair and orientation utilities."""

import logging
from typing import Iterable, Tuple

import numpy as np
from scipy.ndimage import distance_transform_edt

from .grid import ElevationGrid
from ..exceptions import RasterDataError

logger = logging.getLogger(__name__)


def _nearest_valid_indices(grid: ElevationGrid) -> Tuple[np.ndarray, np.ndarray]:
    """
    For every cell, the (row, col) of the nearest valid sample.

    Raises:
        RasterDataError: If the raster has no valid sample at all
    """
    valid = grid.valid_mask()
    if not valid.any():
        raise RasterDataError("Raster holds no valid elevation samples")

    # distance_transform_edt measures distance to the nearest zero element,
    # so invalid cells must be the non-zero ones
    indices = distance_transform_edt(~valid, return_distances=False, return_indices=True)
    return indices[0], indices[1]


def repair_points(grid: ElevationGrid, points: Iterable[Tuple[int, int]]) -> ElevationGrid:
    """
    Replace no-data samples at the given (col, row) points with the nearest valid sample.

    Args:
        grid: Source grid, left untouched
        points: Iterable of (col, row) cells to repair

    Returns:
        The source grid if nothing needed repair, otherwise a repaired copy
    """
    broken = [(col, row) for col, row in points if grid.is_no_data(grid.value(row, col))]
    if not broken:
        return grid

    rows, cols = _nearest_valid_indices(grid)
    values = grid.values.copy()
    for col, row in broken:
        src_row, src_col = int(rows[row, col]), int(cols[row, col])
        values[row, col] = values[src_row, src_col]
        logger.warning(
            f"Repaired no-data sample at ({col}, {row}) with value "
            f"{values[row, col]} from ({src_col}, {src_row})"
        )

    return grid.copy_with_values(values)


def repair_point(grid: ElevationGrid, col: int, row: int) -> ElevationGrid:
    """Repair a single (col, row) sample; see repair_points."""
    return repair_points(grid, [(col, row)])


def repair_corners(grid: ElevationGrid) -> ElevationGrid:
    """Ensure the four corner samples hold valid elevations."""
    w, h = grid.width, grid.height
    return repair_points(grid, [(0, 0), (0, h - 1), (w - 1, h - 1), (w - 1, 0)])


def flip_data_x(grid: ElevationGrid) -> ElevationGrid:
    """Mirror the column order of the grid."""
    return grid.copy_with_values(grid.values[:, ::-1])


def flip_data_y(grid: ElevationGrid) -> ElevationGrid:
    """Mirror the row order of the grid."""
    return grid.copy_with_values(grid.values[::-1, :])
