"""
Base triangulator module for raster triangulation.

This module provides an abstract base class for triangulation algorithms,
holding the parameters, statistics and progress reporting they share.
"""

import math
import time
import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Union

from ...exceptions import RasterDataError
from ...raster.grid import ElevationGrid

# Set up logging
logger = logging.getLogger(__name__)


class BaseTriangulator(ABC):
    """Abstract base class for raster triangulation algorithms."""

    def __init__(
        self,
        grid: Union[ElevationGrid, np.ndarray],
        max_error: float = 1.0,
        progress_callback: Optional[Callable[[float], None]] = None
    ):
        """Initialize the base triangulator."""
        self.grid = self._validate_grid(grid)
        self.max_error = self._validate_max_error(max_error)
        self.progress_callback = progress_callback
        self.stats = self._init_stats()
        self.start_time = time.time()

    @staticmethod
    def _validate_grid(grid: Union[ElevationGrid, np.ndarray]) -> ElevationGrid:
        """
        Validate the raster and wrap bare arrays in an ElevationGrid.

        Raises:
            RasterDataError: If the raster is smaller than 2x2
        """
        if not isinstance(grid, ElevationGrid):
            grid = ElevationGrid(grid)

        if grid.width < 2 or grid.height < 2:
            raise RasterDataError(
                f"Raster must be at least 2x2 to triangulate, got {grid.width}x{grid.height}"
            )
        return grid

    @staticmethod
    def _validate_max_error(max_error: float) -> float:
        max_error = float(max_error)
        if not math.isfinite(max_error) or max_error < 0:
            raise ValueError(f"max_error must be a non-negative number, got {max_error}")
        return max_error

    def _init_stats(self) -> Dict[str, Any]:
        """Initialize statistics dictionary."""
        return {
            "raster_points": self.grid.width * self.grid.height,
            "max_error": self.max_error,
            "final_triangles": 0,
            "final_vertices": 0,
            "processing_time": 0.0,
            "compression_ratio": 0.0
        }

    @abstractmethod
    def triangulate(self) -> Any:
        """Run the triangulation algorithm."""
        pass

    def finalize_stats(self, vertex_count: int, triangle_count: int) -> None:
        """Update statistics after triangulation is complete."""
        self.stats["final_triangles"] = triangle_count
        self.stats["final_vertices"] = vertex_count
        self.stats["processing_time"] = time.time() - self.start_time

        # Input size / output size
        input_size = self.stats["raster_points"]
        output_size = vertex_count + triangle_count * 3
        self.stats["compression_ratio"] = input_size / max(1, output_size)

        logger.info(
            f"Triangulation complete. Generated {triangle_count} triangles from "
            f"{input_size} raster points in {self.stats['processing_time']:.2f}s. "
            f"Compression ratio: {self.stats['compression_ratio']:.2f}x"
        )

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the triangulation.

        Returns:
            Dictionary with statistics
        """
        return self.stats.copy()

    def report_progress(self, progress: float) -> None:
        """
        Report progress to callback if provided.

        Args:
            progress: Progress value between 0.0 and 1.0
        """
        if self.progress_callback:
            self.progress_callback(max(0.0, min(1.0, progress)))
