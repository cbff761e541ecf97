"""
Greedy insertion triangulator.

Starting from two triangles spanning the raster, the triangulator repeatedly
inserts the raster sample that deviates most from the current triangulated
surface, until no sample deviates by more than the error budget. Flat areas
end up with few large triangles and rugged areas with many small ones.

Samples on the raster's outer rectangle are held to half the budget
(EDGE_ERROR_FACTOR) because they are shared with neighbouring tiles.
"""

import enum
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Union

import numpy as np

from .base import BaseTriangulator
from .candidates import Candidate, CandidateQueue
from .mesh import TriangulatedMesh
from .scan import TriangleScanner
from ...exceptions import MeshInvariantError
from ...raster.grid import ElevationGrid
from ...raster.tools import repair_corners

# Set up logging
logger = logging.getLogger(__name__)

# Boundary candidates are inserted once they deviate by this fraction of max_error
EDGE_ERROR_FACTOR = 0.5


class TriangulatorState(enum.Enum):
    """Phases of a greedy insertion run."""
    SEEDING = "seeding"
    SCANNING = "scanning"
    ITERATING = "iterating"
    DONE = "done"


class TerraMesh:
    """
    Result of a greedy insertion run.

    Holds the triangulated mesh, the usage grid marking which raster cells
    became vertices, and the grid the run worked on (the input grid with its
    corners repaired if they held no data).
    """

    def __init__(self, mesh: TriangulatedMesh, used: np.ndarray, grid: ElevationGrid):
        self.mesh = mesh
        self.used = used
        self.grid = grid

    @property
    def vertex_count(self) -> int:
        return int(np.count_nonzero(self.used))

    @property
    def triangle_count(self) -> int:
        return len(self.mesh)

    def convert_to_mesh(self, elevation_grid: Optional[ElevationGrid] = None) -> Tuple[np.ndarray, np.ndarray]:
        """Flat vertex and face arrays; see extract.convert_to_mesh."""
        from .extract import convert_to_mesh
        return convert_to_mesh(self, elevation_grid)

    def __repr__(self) -> str:
        return f"TerraMesh(vertices={self.vertex_count}, triangles={self.triangle_count})"


class GreedyTriangulator(BaseTriangulator):
    """
    Greedy insertion of raster samples into a Delaunay triangulation.

    One instance performs one run and owns all of its state; it is not safe to
    share between threads.
    """

    def __init__(
        self,
        grid: Union[ElevationGrid, np.ndarray],
        max_error: float = 1.0,
        max_vertices: Optional[int] = None,
        progress_callback: Optional[Callable[[float], None]] = None
    ):
        """
        Initialize the greedy triangulator.

        Args:
            grid: Elevation grid (or 2D array) to triangulate; never modified
            max_error: Largest vertical deviation tolerated, in elevation units
            max_vertices: Optional cap on the number of mesh vertices
            progress_callback: Optional callback function for progress reporting

        Raises:
            RasterDataError: If the raster is smaller than 2x2
            ValueError: If max_error is negative or not finite, or max_vertices < 4
        """
        super().__init__(grid=grid, max_error=max_error, progress_callback=progress_callback)

        if max_vertices is not None and max_vertices < 4:
            raise ValueError(f"max_vertices must be at least 4, got {max_vertices}")
        self.max_vertices = max_vertices

        self.state = TriangulatorState.SEEDING
        self.mesh = TriangulatedMesh()
        self.candidates = CandidateQueue()
        self.working_grid: Optional[ElevationGrid] = None
        self.used: Optional[np.ndarray] = None
        self.tokens: Optional[np.ndarray] = None
        self.scanner: Optional[TriangleScanner] = None
        self._vertex_count = 0

        self.stats.update({
            "inserted_points": 0,
            "discarded_candidates": 0,
            "stale_candidates": 0,
        })

    def triangulate(self) -> TerraMesh:
        """
        Run greedy insertion to completion.

        Returns:
            TerraMesh holding the refined mesh
        """
        if self.state is not TriangulatorState.SEEDING:
            raise MeshInvariantError("A GreedyTriangulator can only run once")

        w, h = self.grid.width, self.grid.height
        logger.info(f"starting greedy insertion with raster width: {w}, height: {h}")
        self.report_progress(0.0)

        self._seed()

        self.state = TriangulatorState.SCANNING
        for t in list(self.mesh.traverse()):
            self._scan(t)

        self.state = TriangulatorState.ITERATING
        self._iterate()

        self.state = TriangulatorState.DONE
        self.finalize_stats(self._vertex_count, len(self.mesh))
        self.report_progress(1.0)
        logger.info("finished greedy insertion")

        return TerraMesh(self.mesh, self.used, self.working_grid)

    run = triangulate

    def _seed(self) -> None:
        w, h = self.grid.width, self.grid.height

        # The four corners must hold data, otherwise the seed mesh has no elevation
        self.working_grid = repair_corners(self.grid)

        self.used = np.zeros((h, w), dtype=bool)
        self.tokens = np.zeros((h, w), dtype=np.int64)
        self.scanner = TriangleScanner(self.working_grid, self.used, self.tokens)

        logger.info("initialize the mesh with four corner points")
        self.mesh.initialize((0, 0), (0, h - 1), (w - 1, h - 1), (w - 1, 0))

        for x, y in ((0, 0), (0, h - 1), (w - 1, h - 1), (w - 1, 0)):
            self.used[y, x] = True
        self._vertex_count = 4

    def _scan(self, t: int) -> None:
        for candidate in self.scanner.scan_triangle(self.mesh, t):
            self.candidates.push(candidate)

    def _iterate(self) -> None:
        valid_points = max(1, int(np.count_nonzero(self.working_grid.valid_mask())))
        floor = self.max_error * EDGE_ERROR_FACTOR
        iterations = 0

        while self.candidates:
            candidate = self.candidates.pop_max()
            iterations += 1

            # Nothing left in the queue can pass either threshold
            if candidate.importance < floor:
                self.stats["discarded_candidates"] += len(self.candidates) + 1
                self.candidates.clear()
                break

            if candidate.importance < self.max_error * (EDGE_ERROR_FACTOR if candidate.edge else 1.0):
                self.stats["discarded_candidates"] += 1
                continue

            # Skip if the candidate is not the latest proposed for its cell
            if self.tokens[candidate.y, candidate.x] != candidate.token:
                self.stats["stale_candidates"] += 1
                continue

            # Skip if its triangle was replaced since the scan; the replacement was scanned
            if not self.mesh.is_live(candidate.triangle, candidate.generation):
                self.stats["stale_candidates"] += 1
                continue

            if self.max_vertices is not None and self._vertex_count >= self.max_vertices:
                logger.info(f"Reached maximum vertex count ({self.max_vertices})")
                break

            self._insert(candidate)

            if iterations % 1000 == 0:
                logger.debug(
                    f"Processed {iterations} candidates, vertices: {self._vertex_count}, "
                    f"triangles: {len(self.mesh)}, queued: {len(self.candidates)}"
                )
                self.report_progress(self._vertex_count / valid_points)

    def _insert(self, candidate: Candidate) -> None:
        x, y = candidate.x, candidate.y
        if self.used[y, x]:
            raise MeshInvariantError(f"Point ({x}, {y}) is already a mesh vertex")

        self.used[y, x] = True
        self._vertex_count += 1
        self.stats["inserted_points"] += 1

        for t in self.mesh.insert((x, y), candidate.triangle):
            self._scan(t)


def greedy_insert(
    elevation_grid: Union[ElevationGrid, np.ndarray],
    max_error: float,
    max_vertices: Optional[int] = None,
    progress_callback: Optional[Callable[[float], None]] = None
) -> TerraMesh:
    """
    Triangulate an elevation grid by greedy insertion.

    Args:
        elevation_grid: Grid (or 2D array) to triangulate; borrowed, never modified
        max_error: Largest vertical deviation tolerated; 0 inserts every valid sample
        max_vertices: Optional cap on the number of mesh vertices
        progress_callback: Optional callback function for progress reporting

    Returns:
        TerraMesh ready for convert_to_mesh
    """
    triangulator = GreedyTriangulator(
        elevation_grid,
        max_error=max_error,
        max_vertices=max_vertices,
        progress_callback=progress_callback
    )
    return triangulator.triangulate()


def triangulate_grid(
    elevation_grid: Union[ElevationGrid, np.ndarray],
    max_error: float,
    max_vertices: Optional[int] = None,
    progress_callback: Optional[Callable[[float], None]] = None
) -> Tuple[np.ndarray, np.ndarray, Dict[str, Any]]:
    """
    Convenience function to triangulate a grid in one call.

    Returns:
        Tuple of (vertices, faces, statistics)
    """
    triangulator = GreedyTriangulator(
        elevation_grid,
        max_error=max_error,
        max_vertices=max_vertices,
        progress_callback=progress_callback
    )
    terra_mesh = triangulator.triangulate()
    vertices, faces = terra_mesh.convert_to_mesh()
    return vertices, faces, triangulator.get_statistics()
