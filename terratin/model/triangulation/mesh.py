"""
Triangulated mesh over raster grid coordinates.

Triangles are stored in an arena and addressed by integer index. When an
insertion splits a triangle its slot goes on a free list and is reused for a
later triangle; the per-slot generation counter lets holders of an old index
tell that the triangle they referenced no longer exists.

Every stored triangle has positive orientation and knows the neighbour across
each of its edges, edge i running from vertex i to vertex i+1. Live triangles
are chained through a "first face" list so the whole mesh can be walked
without scanning free slots.
"""

import logging
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from ...exceptions import MeshInvariantError

logger = logging.getLogger(__name__)

Point = Tuple[int, int]
TrianglePoints = Tuple[Point, Point, Point]

NO_NEIGHBOR = -1


def orient(a: Point, b: Point, c: Point) -> int:
    """Twice the signed area of (a, b, c); positive for counter-clockwise order."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def in_circumcircle(a: Point, b: Point, c: Point, d: Point) -> bool:
    """
    Check whether d lies strictly inside the circumcircle of (a, b, c).

    Assumes (a, b, c) has positive orientation. Exact for integer coordinates.
    """
    adx = a[0] - d[0]
    ady = a[1] - d[1]
    bdx = b[0] - d[0]
    bdy = b[1] - d[1]
    cdx = c[0] - d[0]
    cdy = c[1] - d[1]

    ad_sq = adx * adx + ady * ady
    bd_sq = bdx * bdx + bdy * bdy
    cd_sq = cdx * cdx + cdy * cdy

    det = adx * (bdy * cd_sq - cdy * bd_sq) \
        - ady * (bdx * cd_sq - cdx * bd_sq) \
        + ad_sq * (bdx * cdy - cdx * bdy)

    return det > 0


class Triangle(NamedTuple):
    """Read-only view of one live triangle."""
    index: int
    generation: int
    points: TrianglePoints
    neighbors: Tuple[int, int, int]

    @property
    def point1(self) -> Point:
        return self.points[0]

    @property
    def point2(self) -> Point:
        return self.points[1]

    @property
    def point3(self) -> Point:
        return self.points[2]


class TriangulatedMesh:
    """
    Planar triangulation of a raster rectangle refined by point insertion.

    The mesh is not safe to share between threads; each triangulation run owns
    its own instance.
    """

    def __init__(self):
        self._points: List[Optional[TrianglePoints]] = []
        self._neighbors: List[List[int]] = []
        self._generation: List[int] = []
        self._next: List[int] = []
        self._prev: List[int] = []
        self._free: List[int] = []
        self._first = NO_NEIGHBOR
        self._count = 0
        self._corners: Optional[Tuple[Point, Point, Point, Point]] = None

    def __len__(self) -> int:
        return self._count

    @property
    def first_face(self) -> int:
        """Index of the head of the live triangle chain, NO_NEIGHBOR if empty."""
        return self._first

    def initialize(self, p0: Point, p1: Point, p2: Point, p3: Point) -> List[int]:
        """
        Cover a rectangle with two triangles.

        Args:
            p0, p1, p2, p3: Rectangle corners in order top-left, bottom-left,
                bottom-right, top-right

        Returns:
            Indices of the two triangles
        """
        if self._count:
            raise MeshInvariantError("Mesh is already initialized")

        self._corners = (p0, p1, p2, p3)
        # Split along the top-left to bottom-right diagonal
        first = self._allocate(p0, p1, p2)
        second = self._allocate(p0, p2, p3)
        self._link_new([first, second], {})

        logger.debug(f"Initialized mesh with corners {p0}, {p1}, {p2}, {p3}")
        return [first, second]

    def traverse(self) -> Iterator[int]:
        """
        Yield the index of every live triangle along the first-face chain.

        The mesh must not be modified while the generator is consumed.
        """
        t = self._first
        while t != NO_NEIGHBOR:
            yield t
            t = self._next[t]

    def is_live(self, index: int, generation: Optional[int] = None) -> bool:
        """Check that a slot holds a triangle, optionally of a given generation."""
        if index < 0 or index >= len(self._points) or self._points[index] is None:
            return False
        return generation is None or self._generation[index] == generation

    def generation(self, index: int) -> int:
        return self._generation[index]

    def points(self, index: int) -> TrianglePoints:
        """The three vertices of a live triangle."""
        pts = self._points[index]
        if pts is None:
            raise MeshInvariantError(f"Triangle {index} is not live")
        return pts

    def neighbors(self, index: int) -> Tuple[int, int, int]:
        return tuple(self._neighbors[index])

    def triangle(self, index: int) -> Triangle:
        return Triangle(index, self._generation[index], self.points(index), self.neighbors(index))

    def triangles(self) -> List[Triangle]:
        """Snapshot of all live triangles."""
        return [self.triangle(t) for t in self.traverse()]

    def vertices(self) -> Set[Point]:
        """All distinct vertices referenced by live triangles."""
        result: Set[Point] = set()
        for t in self.traverse():
            result.update(self._points[t])
        return result

    def insert(self, point: Point, index: int) -> List[int]:
        """
        Insert a new vertex into a live triangle and restore the Delaunay condition.

        A point strictly inside the triangle splits it into three; a point on
        one of its edges splits it and the neighbour across that edge into two
        each. Edges opposite the new vertex are then flipped while the
        neighbouring vertex lies strictly inside their circumcircle.

        Args:
            point: Grid coordinates (x, y) of the new vertex
            index: Live triangle whose closed footprint contains the point

        Returns:
            Indices of the triangles created by this insertion that are still live

        Raises:
            MeshInvariantError: If the triangle is not live, the point is one of
                its vertices or lies outside it
        """
        point = (int(point[0]), int(point[1]))
        pts = self.points(index)
        if point in pts:
            raise MeshInvariantError(f"Point {point} is already a vertex of triangle {index}")

        o = [orient(pts[i], pts[(i + 1) % 3], point) for i in range(3)]
        if min(o) < 0:
            raise MeshInvariantError(f"Point {point} lies outside triangle {index} {pts}")

        on_edges = [i for i in range(3) if o[i] == 0]
        created: Dict[int, None] = {}

        if not on_edges:
            a, b, c = pts
            new = self._replace([index], [(a, b, point), (b, c, point), (c, a, point)])
        elif len(on_edges) == 1:
            new = self._split_edge(index, on_edges[0], point)
        else:
            raise MeshInvariantError(f"Point {point} coincides with a vertex of triangle {index}")

        created.update(dict.fromkeys(new))
        self._legalize(point, new, created)

        return [t for t in created if self._points[t] is not None]

    def check_invariants(self) -> None:
        """
        Verify orientation, neighbour symmetry and full coverage of the rectangle.

        Raises:
            MeshInvariantError: On the first violation found
        """
        total = 0
        seen = 0
        for t in self.traverse():
            seen += 1
            pts = self.points(t)
            area = orient(*pts)
            if area <= 0:
                raise MeshInvariantError(f"Triangle {t} {pts} is not positively oriented")
            total += area
            for i in range(3):
                n = self._neighbors[t][i]
                if n == NO_NEIGHBOR:
                    continue
                if not self.is_live(n):
                    raise MeshInvariantError(f"Triangle {t} references dead neighbour {n}")
                u, v = pts[i], pts[(i + 1) % 3]
                j = self._edge_index(n, v, u)
                if self._neighbors[n][j] != t:
                    raise MeshInvariantError(f"Neighbour links of {t} and {n} are not symmetric")

        if seen != self._count:
            raise MeshInvariantError(f"Chain holds {seen} triangles, expected {self._count}")

        if self._corners is not None:
            p0, _, p2, _ = self._corners
            expected = 2 * abs(p2[0] - p0[0]) * abs(p2[1] - p0[1])
            if total != expected:
                raise MeshInvariantError(f"Triangles cover area {total / 2}, expected {expected / 2}")

    def _split_edge(self, index: int, edge: int, point: Point) -> List[int]:
        pts = self._points[index]
        a, b, c = pts[edge], pts[(edge + 1) % 3], pts[(edge + 2) % 3]
        n = self._neighbors[index][edge]

        if n == NO_NEIGHBOR:
            return self._replace([index], [(a, point, c), (point, b, c)])

        d = self._opposite(n, b, a)
        return self._replace(
            [index, n],
            [(a, point, c), (point, b, c), (b, point, d), (point, a, d)]
        )

    def _legalize(self, point: Point, new: Sequence[int], created: Dict[int, None]) -> None:
        stack = [(t, self._generation[t]) for t in new]
        while stack:
            t, gen = stack.pop()
            if not self.is_live(t, gen):
                continue

            pts = self._points[t]
            k = pts.index(point)
            x, y = pts[(k + 1) % 3], pts[(k + 2) % 3]
            n = self._neighbors[t][(k + 1) % 3]
            if n == NO_NEIGHBOR:
                continue

            d = self._opposite(n, y, x)
            if not in_circumcircle(point, x, y, d):
                continue
            if orient(x, d, point) <= 0 or orient(d, y, point) <= 0:
                continue

            flipped = self._replace([t, n], [(x, d, point), (d, y, point)])
            created.update(dict.fromkeys(flipped))
            stack.extend((f, self._generation[f]) for f in flipped)

    def _replace(self, removed: Sequence[int], created: Sequence[TrianglePoints]) -> List[int]:
        """Swap a set of triangles for new ones covering the same area."""
        outer: Dict[Tuple[Point, Point], int] = {}
        for t in removed:
            pts = self._points[t]
            for i in range(3):
                outer[(pts[i], pts[(i + 1) % 3])] = self._neighbors[t][i]

        removed_set = set(removed)
        for t in removed:
            self._release(t)

        new = [self._allocate(*pts) for pts in created]
        self._link_new(new, outer, removed_set)
        return new

    def _link_new(
        self,
        new: Sequence[int],
        outer: Dict[Tuple[Point, Point], int],
        removed: Optional[Set[int]] = None
    ) -> None:
        edges: Dict[Tuple[Point, Point], int] = {}
        for t in new:
            pts = self._points[t]
            for i in range(3):
                edges[(pts[i], pts[(i + 1) % 3])] = t

        for t in new:
            pts = self._points[t]
            for i in range(3):
                u, v = pts[i], pts[(i + 1) % 3]
                twin = edges.get((v, u))
                if twin is not None:
                    self._neighbors[t][i] = twin
                    continue

                n = outer.get((u, v), NO_NEIGHBOR)
                if removed and n in removed:
                    raise MeshInvariantError(f"Edge {u}-{v} lost its neighbour during retriangulation")
                self._neighbors[t][i] = n
                if n != NO_NEIGHBOR:
                    self._neighbors[n][self._edge_index(n, v, u)] = t

    def _allocate(self, a: Point, b: Point, c: Point) -> int:
        area = orient(a, b, c)
        if area == 0:
            raise MeshInvariantError(f"Degenerate triangle {a}, {b}, {c}")
        if area < 0:
            b, c = c, b

        if self._free:
            t = self._free.pop()
            self._points[t] = (a, b, c)
            self._neighbors[t] = [NO_NEIGHBOR, NO_NEIGHBOR, NO_NEIGHBOR]
            self._generation[t] += 1
        else:
            t = len(self._points)
            self._points.append((a, b, c))
            self._neighbors.append([NO_NEIGHBOR, NO_NEIGHBOR, NO_NEIGHBOR])
            self._generation.append(0)
            self._next.append(NO_NEIGHBOR)
            self._prev.append(NO_NEIGHBOR)

        # Link in at the head of the chain
        self._prev[t] = NO_NEIGHBOR
        self._next[t] = self._first
        if self._first != NO_NEIGHBOR:
            self._prev[self._first] = t
        self._first = t
        self._count += 1
        return t

    def _release(self, t: int) -> None:
        prev, nxt = self._prev[t], self._next[t]
        if prev != NO_NEIGHBOR:
            self._next[prev] = nxt
        else:
            self._first = nxt
        if nxt != NO_NEIGHBOR:
            self._prev[nxt] = prev

        self._points[t] = None
        self._next[t] = NO_NEIGHBOR
        self._prev[t] = NO_NEIGHBOR
        self._free.append(t)
        self._count -= 1

    def _edge_index(self, t: int, u: Point, v: Point) -> int:
        pts = self._points[t]
        for i in range(3):
            if pts[i] == u and pts[(i + 1) % 3] == v:
                return i
        raise MeshInvariantError(f"Triangle {t} {pts} has no edge {u}-{v}")

    def _opposite(self, t: int, u: Point, v: Point) -> Point:
        """Vertex of t opposite its directed edge u-v."""
        pts = self._points[t]
        return pts[(self._edge_index(t, u, v) + 2) % 3]
