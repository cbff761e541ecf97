"""
Raster triangulation algorithms.

This package converts elevation grids into triangulated irregular networks
by greedy insertion of the worst-approximated samples.
"""

from .base import BaseTriangulator
from .mesh import TriangulatedMesh, Triangle, orient, in_circumcircle
from .candidates import Candidate, CandidateQueue
from .scan import Plane, fit_plane, scan_row, scan_column, TriangleScanner
from .greedy import (
    EDGE_ERROR_FACTOR,
    GreedyTriangulator,
    TerraMesh,
    TriangulatorState,
    greedy_insert,
    triangulate_grid
)
from .extract import convert_to_mesh

# Define package exports
__all__ = [
    'BaseTriangulator',
    'TriangulatedMesh',
    'Triangle',
    'orient',
    'in_circumcircle',
    'Candidate',
    'CandidateQueue',
    'Plane',
    'fit_plane',
    'scan_row',
    'scan_column',
    'TriangleScanner',
    'EDGE_ERROR_FACTOR',
    'GreedyTriangulator',
    'TerraMesh',
    'TriangulatorState',
    'greedy_insert',
    'triangulate_grid',
    'convert_to_mesh'
]
