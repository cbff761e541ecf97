"""
Plane fitting and scan conversion of triangles against the raster.

Each triangle of the mesh approximates the terrain by the plane through its
three vertices. Scanning a triangle visits the raster samples under its
footprint and records the one whose elevation deviates most from that plane.
"""

import math
import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .candidates import Candidate
from .mesh import TriangulatedMesh
from ...exceptions import MeshInvariantError
from ...raster.grid import ElevationGrid

logger = logging.getLogger(__name__)

Sample = Tuple[float, float, float]


@dataclass
class Plane:
    """Plane z = a*x + b*y + c over grid coordinates."""
    a: float = 0.0
    b: float = 0.0
    c: float = 0.0

    def eval(self, x: float, y: float) -> float:
        return self.a * x + self.b * y + self.c


def fit_plane(p: Sample, q: Sample, r: Sample) -> Plane:
    """
    Compute the plane through three (x, y, z) samples.

    Raises:
        MeshInvariantError: If the samples are collinear in x and y
    """
    ux, uy, uz = q[0] - p[0], q[1] - p[1], q[2] - p[2]
    vx, vy, vz = r[0] - p[0], r[1] - p[1], r[2] - p[2]
    den = ux * vy - uy * vx
    if den == 0:
        raise MeshInvariantError(f"Can not fit a plane through collinear points {p}, {q}, {r}")

    a = (uz * vy - uy * vz) / den
    b = (ux * vz - uz * vx) / den
    c = p[2] - a * p[0] - b * p[1]
    return Plane(a, b, c)


def _best_sample(
    z: np.ndarray,
    predicted: np.ndarray,
    unused: np.ndarray,
    no_data_value: Optional[float]
) -> Optional[Tuple[int, float]]:
    """Offset and deviation of the worst usable sample in a run, None if none is usable."""
    mask = unused & ~np.isnan(z)
    if no_data_value is not None:
        mask &= z != no_data_value
    if not mask.any():
        return None

    diff = np.where(mask, np.abs(z - predicted), -np.inf)
    # argmax returns the first maximum, so earlier samples win ties
    i = int(np.argmax(diff))
    return i, float(diff[i])


def scan_row(
    plane: Plane,
    y: int,
    x1: float,
    x2: float,
    candidate: Candidate,
    values: np.ndarray,
    used: np.ndarray,
    no_data_value: Optional[float] = None,
    x_limits: Optional[Tuple[int, int]] = None
) -> None:
    """
    Sweep row y between x1 and x2 and fold each usable sample into the candidate.

    Every integer x in [ceil(min(x1, x2)), floor(max(x1, x2))] that is not yet a
    mesh vertex and holds valid data is compared against the plane; the
    candidate keeps the largest absolute deviation seen.

    Args:
        plane: Plane of the triangle being scanned
        y: Row to sweep
        x1, x2: Span end points, in either order
        candidate: Candidate updated in place
        values: Elevation array indexed [row, col]
        used: Boolean usage array indexed [row, col]
        no_data_value: Sentinel for missing samples (NaN is always missing)
        x_limits: Optional inclusive column range the span is clipped to
    """
    start = math.ceil(min(x1, x2))
    end = math.floor(max(x1, x2))
    if x_limits is not None:
        start = max(start, x_limits[0])
        end = min(end, x_limits[1])
    if start > end:
        return

    z = values[y, start:end + 1]
    xs = np.arange(start, end + 1, dtype=np.float64)
    predicted = plane.a * xs + (plane.b * y + plane.c)

    best = _best_sample(z, predicted, ~used[y, start:end + 1], no_data_value)
    if best is not None:
        i, diff = best
        candidate.consider(start + i, y, float(z[i]), diff)


def scan_column(
    plane: Plane,
    x: int,
    y1: float,
    y2: float,
    candidate: Candidate,
    values: np.ndarray,
    used: np.ndarray,
    no_data_value: Optional[float] = None
) -> None:
    """Sweep column x between y1 and y2; the vertical counterpart of scan_row."""
    start = math.ceil(min(y1, y2))
    end = math.floor(max(y1, y2))
    if start > end:
        return

    z = values[start:end + 1, x]
    ys = np.arange(start, end + 1, dtype=np.float64)
    predicted = plane.b * ys + (plane.a * x + plane.c)

    best = _best_sample(z, predicted, ~used[start:end + 1, x], no_data_value)
    if best is not None:
        i, diff = best
        candidate.consider(x, start + i, float(z[i]), diff)


def _edge_x(xa: int, ya: int, xb: int, yb: int, y: int) -> Fraction:
    """Exact x of the edge (xa, ya)-(xb, yb) at row y; requires ya != yb."""
    return Fraction(xa * (yb - ya) + (y - ya) * (xb - xa), yb - ya)


class TriangleScanner:
    """
    Scans mesh triangles for their worst-approximated samples.

    The scanner shares the driver's usage and token grids and owns the token
    counter of one triangulation run. Tokens start at 1 and strictly increase;
    a token grid value of 0 means no candidate was ever proposed for the cell.
    """

    def __init__(self, grid: ElevationGrid, used: np.ndarray, tokens: np.ndarray):
        self.grid = grid
        self.values = grid.values
        self.no_data_value = grid.no_data_value
        self.used = used
        self.tokens = tokens
        self.last_col = grid.width - 1
        self.last_row = grid.height - 1
        self._counter = 1
        self.scanned = 0

    @property
    def counter(self) -> int:
        """Token the next candidate will receive."""
        return self._counter

    def next_token(self) -> int:
        token = self._counter
        self._counter += 1
        return token

    def plane_for(self, points: Sequence[Tuple[int, int]]) -> Plane:
        """Fit the plane through the current elevations at three grid vertices."""
        return fit_plane(*[(x, y, float(self.values[y, x])) for x, y in points])

    def scan_triangle(self, mesh: TriangulatedMesh, index: int) -> List[Candidate]:
        """
        Find the candidates of one live triangle.

        Edges lying on the raster's outer columns or rows are swept first and
        give at most one vertical and one horizontal boundary candidate. The
        footprint is then rasterised, skipping the outer rectangle, for one
        interior candidate. Each candidate found gets a fresh token which is
        also written into the token grid at its cell.

        Returns:
            The candidates found, boundary ones first
        """
        pts = mesh.points(index)
        generation = mesh.generation(index)
        plane = self.plane_for(pts)
        self.scanned += 1

        by_y = sorted(pts, key=lambda p: p[1])

        candidate_v = Candidate(triangle=index, generation=generation, edge=True)
        candidate_h = Candidate(triangle=index, generation=generation, edge=True)

        for i in range(3):
            a, b = by_y[i], by_y[(i + 1) % 3]
            if (a[0] == 0 and b[0] == 0) or (a[0] == self.last_col and b[0] == self.last_col):
                # edge left/right
                scan_column(plane, a[0], a[1], b[1], candidate_v,
                            self.values, self.used, self.no_data_value)
            elif (a[1] == 0 and b[1] == 0) or (a[1] == self.last_row and b[1] == self.last_row):
                # edge top/bottom
                scan_row(plane, a[1], a[0], b[0], candidate_h,
                         self.values, self.used, self.no_data_value)

        candidate = Candidate(triangle=index, generation=generation)
        self._scan_interior(plane, by_y, candidate)

        found = []
        for c in (candidate_v, candidate_h, candidate):
            if not c.found:
                continue
            c.token = self.next_token()
            self.tokens[c.y, c.x] = c.token
            found.append(c)
        return found

    def _scan_interior(self, plane: Plane, by_y: Sequence[Tuple[int, int]], candidate: Candidate) -> None:
        # Spans are half-open, [left, right) by column and [y0, y2) by row, so a
        # sample on an edge shared by two triangles is scanned by exactly one of them.
        (x0, y0), (x1, y1), (x2, y2) = by_y
        first_row, last_row = 1, self.last_row - 1

        # Upper sub-triangle, rows [y0, y1)
        if y1 != y0:
            for y in range(max(y0, first_row), min(y1 - 1, last_row) + 1):
                self._scan_span(plane, y, _edge_x(x0, y0, x1, y1, y), _edge_x(x0, y0, x2, y2, y), candidate)

        # Lower sub-triangle, rows [y1, y2)
        if y2 != y1:
            for y in range(max(y1, first_row), min(y2 - 1, last_row) + 1):
                self._scan_span(plane, y, _edge_x(x1, y1, x2, y2, y), _edge_x(x0, y0, x2, y2, y), candidate)

    def _scan_span(self, plane: Plane, y: int, xa: Fraction, xb: Fraction, candidate: Candidate) -> None:
        right = math.ceil(max(xa, xb)) - 1
        limits = (1, min(right, self.last_col - 1))
        scan_row(plane, y, xa, xb, candidate, self.values, self.used, self.no_data_value, limits)
