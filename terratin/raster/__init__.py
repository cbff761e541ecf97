"""Elevation raster input for terratin."""

from .grid import ElevationGrid, is_no_data
from .tools import repair_point, repair_points, repair_corners, flip_data_x, flip_data_y
from .io import load_raster_file

__all__ = [
    'ElevationGrid',
    'is_no_data',
    'repair_point',
    'repair_points',
    'repair_corners',
    'flip_data_x',
    'flip_data_y',
    'load_raster_file'
]
