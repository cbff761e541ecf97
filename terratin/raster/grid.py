"""
Elevation grid container.

An ElevationGrid wraps a 2D array of elevations together with the information
needed to place each cell in world coordinates and to recognise missing
samples. The triangulation core only ever reads from it.
"""

import math
import logging
from typing import Optional, Tuple

import numpy as np

from ..exceptions import RasterDataError

# Set up logging
logger = logging.getLogger(__name__)


def is_no_data(z: float, no_data_value: Optional[float]) -> bool:
    """Return True if z is NaN or equals the no-data sentinel."""
    if math.isnan(z):
        return True
    return no_data_value is not None and z == no_data_value


class ElevationGrid:
    """
    Regular grid of elevations addressed by (row, column).

    Row 0 is the northern edge of the raster. World coordinates are measured
    from the centre of the lower-left cell (x_origin, y_origin) in steps of
    cell_size.
    """

    def __init__(
        self,
        values: np.ndarray,
        cell_size: float = 1.0,
        x_origin: float = 0.0,
        y_origin: float = 0.0,
        no_data_value: Optional[float] = None
    ):
        """
        Initialize the grid.

        Args:
            values: 2D array of elevations, indexed values[row, col]
            cell_size: Size of one cell in world units
            x_origin: World x of the centre of the lower-left cell
            y_origin: World y of the centre of the lower-left cell
            no_data_value: Sentinel marking missing samples (NaN always does)

        Raises:
            RasterDataError: If the values are not a non-empty 2D array or the
                cell size is not positive
        """
        if values is None:
            raise RasterDataError("Elevation values are required")

        values = np.array(values, dtype=np.float64)
        if values.ndim != 2:
            raise RasterDataError(f"Elevation values must be 2D, got {values.ndim}D")
        if values.size == 0:
            raise RasterDataError(f"Elevation grid must not be empty, got shape {values.shape}")
        if not cell_size > 0:
            raise RasterDataError(f"cell_size must be positive, got {cell_size}")

        self.values = values
        self.cell_size = float(cell_size)
        self.x_origin = float(x_origin)
        self.y_origin = float(y_origin)
        self.no_data_value = None if no_data_value is None else float(no_data_value)

    @property
    def width(self) -> int:
        """Number of columns."""
        return self.values.shape[1]

    @property
    def height(self) -> int:
        """Number of rows."""
        return self.values.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def value(self, row: int, col: int) -> float:
        return float(self.values[row, col])

    def is_no_data(self, z: float) -> bool:
        return is_no_data(z, self.no_data_value)

    def valid_mask(self) -> np.ndarray:
        """Boolean array, True where the sample holds a usable elevation."""
        mask = ~np.isnan(self.values)
        if self.no_data_value is not None:
            mask &= self.values != self.no_data_value
        return mask

    def col2x(self, col: int) -> float:
        return self.x_origin + col * self.cell_size

    def row2y(self, row: int) -> float:
        return self.y_origin + (self.height - 1 - row) * self.cell_size

    def copy_with_values(self, values: np.ndarray) -> 'ElevationGrid':
        """Return a new grid holding values with the same georeference."""
        return ElevationGrid(
            values,
            cell_size=self.cell_size,
            x_origin=self.x_origin,
            y_origin=self.y_origin,
            no_data_value=self.no_data_value
        )

    def get_stats(self) -> dict:
        """Summary statistics over the valid samples."""
        mask = self.valid_mask()
        valid = self.values[mask]
        stats = {
            'width': self.width,
            'height': self.height,
            'cell_size': self.cell_size,
            'x_origin': self.x_origin,
            'y_origin': self.y_origin,
            'no_data_value': self.no_data_value,
            'no_data_count': int(mask.size - np.count_nonzero(mask)),
        }
        if valid.size:
            stats.update({
                'min': float(np.min(valid)),
                'max': float(np.max(valid)),
                'mean': float(np.mean(valid)),
            })
        return stats

    def __repr__(self) -> str:
        return (
            f"ElevationGrid(width={self.width}, height={self.height}, "
            f"cell_size={self.cell_size}, origin=({self.x_origin}, {self.y_origin}), "
            f"no_data_value={self.no_data_value})"
        )
