"""Tests for the greedy insertion triangulator."""

import logging
import unittest

import numpy as np
import pytest

from terratin.exceptions import MeshInvariantError, RasterDataError
from terratin.model.triangulation import (
    EDGE_ERROR_FACTOR,
    Candidate,
    GreedyTriangulator,
    TerraMesh,
    TriangulatorState,
    fit_plane,
    greedy_insert,
    orient,
    triangulate_grid
)
from terratin.raster.grid import ElevationGrid


def closure_cells(points):
    """Integer cells inside or on the boundary of a positively oriented triangle."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    for y in range(min(ys), max(ys) + 1):
        for x in range(min(xs), max(xs) + 1):
            if all(orient(points[i], points[(i + 1) % 3], (x, y)) >= 0 for i in range(3)):
                yield x, y


def assert_error_bound(terra_mesh, max_error):
    """Every unused valid sample lies within the error budget of its triangle's plane."""
    grid = terra_mesh.grid
    values = grid.values
    valid = grid.valid_mask()
    last_col, last_row = grid.width - 1, grid.height - 1

    for t in terra_mesh.mesh.traverse():
        pts = terra_mesh.mesh.points(t)
        plane = fit_plane(*[(x, y, values[y, x]) for x, y in pts])
        for x, y in closure_cells(pts):
            if terra_mesh.used[y, x] or not valid[y, x]:
                continue
            border = x in (0, last_col) or y in (0, last_row)
            limit = max_error * (EDGE_ERROR_FACTOR if border else 1.0)
            deviation = abs(values[y, x] - plane.eval(x, y))
            assert deviation <= limit + 1e-9, f"cell ({x}, {y}) deviates by {deviation}"


class TestScenarios:
    """Small rasters with hand-checked results."""

    def test_flat_grid_keeps_corners(self, flat_grid):
        terra_mesh = greedy_insert(flat_grid, 0.01)
        assert terra_mesh.vertex_count == 4
        assert terra_mesh.triangle_count == 2

        vertices, faces = terra_mesh.convert_to_mesh()
        assert vertices.shape == (4, 3)
        assert faces.shape == (2, 3)
        assert np.all(vertices[:, 2] == 7.0)

    def test_spike_is_inserted(self, spike_grid):
        terra_mesh = greedy_insert(spike_grid, 1.0)
        assert terra_mesh.vertex_count == 5
        assert terra_mesh.triangle_count == 4
        assert terra_mesh.used[1, 1]

    def test_smallest_raster(self):
        terra_mesh = greedy_insert(np.array([[1.0, 2.0], [3.0, 4.0]]), 0.0)
        assert terra_mesh.vertex_count == 4
        assert terra_mesh.triangle_count == 2

    def test_border_samples_use_half_threshold(self):
        values = np.zeros((5, 5))
        values[0, 2] = 0.7
        values[2, 2] = 0.7

        terra_mesh = greedy_insert(values, 1.0)
        assert terra_mesh.used[0, 2]
        assert not terra_mesh.used[2, 2]
        assert terra_mesh.vertex_count == 5

    def test_no_data_is_never_a_vertex(self):
        values = np.zeros((5, 5))
        values[2, 2] = -9999.0
        values[1, 1] = 5.0
        grid = ElevationGrid(values, no_data_value=-9999.0)

        terra_mesh = greedy_insert(grid, 1.0)
        assert not terra_mesh.used[2, 2]
        assert terra_mesh.used[1, 1]

        vertices, _ = terra_mesh.convert_to_mesh()
        assert not np.any(vertices[:, 2] == -9999.0)

    def test_zero_error_uses_every_sample(self, hill_grid):
        terra_mesh = greedy_insert(hill_grid, 0.0)
        assert terra_mesh.used.all()
        assert terra_mesh.vertex_count == 17 * 13
        assert terra_mesh.triangle_count == 2 * 16 * 12
        terra_mesh.mesh.check_invariants()

    def test_zero_error_skips_no_data(self, rough_grid):
        terra_mesh = greedy_insert(rough_grid, 0.0)
        valid = rough_grid.valid_mask()
        np.testing.assert_array_equal(terra_mesh.used, valid)

    def test_vertex_count_decreases_with_error(self, hill_grid):
        counts = [greedy_insert(hill_grid, e).vertex_count for e in (0.0, 2.0, 1e6)]
        assert counts[0] == 17 * 13
        assert counts[0] >= counts[1] >= counts[2]
        assert counts[2] == 4

    @pytest.mark.parametrize("max_error", [0.5, 2.0, 10.0])
    def test_error_bound_hill(self, hill_grid, max_error):
        terra_mesh = greedy_insert(hill_grid, max_error)
        terra_mesh.mesh.check_invariants()
        assert_error_bound(terra_mesh, max_error)

    @pytest.mark.parametrize("max_error", [1.0, 5.0])
    def test_error_bound_rough(self, rough_grid, max_error):
        terra_mesh = greedy_insert(rough_grid, max_error)
        terra_mesh.mesh.check_invariants()
        assert_error_bound(terra_mesh, max_error)

    def test_corner_no_data_is_repaired(self):
        values = np.arange(16, dtype=np.float64).reshape(4, 4)
        values[0, 0] = np.nan
        grid = ElevationGrid(values)

        terra_mesh = greedy_insert(grid, 0.5)
        assert terra_mesh.used[0, 0]
        assert not np.isnan(terra_mesh.grid.value(0, 0))
        # The caller's grid is left untouched
        assert np.isnan(grid.value(0, 0))

    def test_all_no_data(self):
        with pytest.raises(RasterDataError):
            greedy_insert(np.full((3, 3), np.nan), 1.0)


class QueuedTriangulator(GreedyTriangulator):
    """Triangulator that queues one extra candidate once the initial scan is done."""

    def __init__(self, values, max_error, make_candidate):
        super().__init__(values, max_error=max_error)
        self.make_candidate = make_candidate

    def _iterate(self):
        self.candidates.push(self.make_candidate(self))
        super()._iterate()


def queued_candidate(triangulator, token=None, generation_offset=0):
    """Candidate for cell (3, 1) of the seed mesh, far above any threshold."""
    mesh = triangulator.mesh
    t = next(t for t in mesh.traverse() if (3, 1) in set(closure_cells(mesh.points(t))))
    if token is None:
        token = 10 ** 6
        triangulator.tokens[1, 3] = token
    return Candidate(x=3, y=1, z=0.0, importance=1e9, token=token, triangle=t,
                     generation=mesh.generation(t) + generation_offset)


class TestStaleCandidates:
    def test_fresh_candidate_is_inserted(self):
        triangulator = QueuedTriangulator(np.zeros((5, 5)), 1.0, queued_candidate)
        terra_mesh = triangulator.triangulate()

        assert terra_mesh.used[1, 3]
        assert terra_mesh.vertex_count == 5
        assert triangulator.stats["stale_candidates"] == 0

    def test_overwritten_token_is_skipped(self):
        # Tokens handed out by the scanner start at 1
        triangulator = QueuedTriangulator(
            np.zeros((5, 5)), 1.0, lambda tr: queued_candidate(tr, token=-1)
        )
        terra_mesh = triangulator.triangulate()

        assert not terra_mesh.used[1, 3]
        assert terra_mesh.vertex_count == 4
        assert triangulator.stats["stale_candidates"] == 1
        assert triangulator.stats["inserted_points"] == 0

    def test_replaced_triangle_is_skipped(self):
        triangulator = QueuedTriangulator(
            np.zeros((5, 5)), 1.0, lambda tr: queued_candidate(tr, generation_offset=1)
        )
        terra_mesh = triangulator.triangulate()

        assert not terra_mesh.used[1, 3]
        assert terra_mesh.vertex_count == 4
        assert triangulator.stats["stale_candidates"] == 1

    def test_rough_terrain_leaves_stale_candidates(self, rough_grid):
        triangulator = GreedyTriangulator(rough_grid, max_error=0.0)
        terra_mesh = triangulator.triangulate()

        assert triangulator.stats["stale_candidates"] > 0
        # Stale entries never become vertices twice
        assert triangulator.stats["inserted_points"] == terra_mesh.vertex_count - 4
        terra_mesh.mesh.check_invariants()


class TestGreedyTriangulator(unittest.TestCase):
    """Test class for GreedyTriangulator parameters and bookkeeping."""

    def setUp(self):
        """Set up test fixtures."""
        rows, cols = np.mgrid[0:12, 0:10]
        self.values = np.sin(cols / 2.0) * 10.0 + rows * 0.5

    def test_validation(self):
        with self.assertRaises(ValueError):
            GreedyTriangulator(self.values, max_error=-1.0)
        with self.assertRaises(ValueError):
            GreedyTriangulator(self.values, max_error=float("nan"))
        with self.assertRaises(ValueError):
            GreedyTriangulator(self.values, max_error=1.0, max_vertices=3)
        with self.assertRaises(RasterDataError):
            GreedyTriangulator(np.zeros((1, 5)), max_error=1.0)

    def test_state_and_single_run(self):
        triangulator = GreedyTriangulator(self.values, max_error=1.0)
        self.assertEqual(triangulator.state, TriangulatorState.SEEDING)

        result = triangulator.run()
        self.assertIsInstance(result, TerraMesh)
        self.assertEqual(triangulator.state, TriangulatorState.DONE)

        with self.assertRaises(MeshInvariantError):
            triangulator.triangulate()

    def test_statistics(self):
        triangulator = GreedyTriangulator(self.values, max_error=1.0)
        terra_mesh = triangulator.triangulate()
        stats = triangulator.get_statistics()

        self.assertEqual(stats["raster_points"], 120)
        self.assertEqual(stats["max_error"], 1.0)
        self.assertEqual(stats["final_vertices"], terra_mesh.vertex_count)
        self.assertEqual(stats["final_triangles"], terra_mesh.triangle_count)
        self.assertEqual(stats["inserted_points"], terra_mesh.vertex_count - 4)
        self.assertGreater(stats["compression_ratio"], 0.0)
        self.assertGreaterEqual(stats["processing_time"], 0.0)

        # Statistics are returned as a copy
        stats["final_vertices"] = -1
        self.assertEqual(triangulator.get_statistics()["final_vertices"], terra_mesh.vertex_count)

    def test_max_vertices(self):
        vertices, faces, stats = triangulate_grid(self.values, 0.0, max_vertices=10)
        self.assertEqual(len(vertices), 10)
        self.assertEqual(stats["final_vertices"], 10)
        self.assertEqual(len(faces), stats["final_triangles"])

    def test_progress_callback(self):
        progress = []
        greedy_insert(self.values, 0.0, progress_callback=progress.append)

        self.assertEqual(progress[0], 0.0)
        self.assertEqual(progress[-1], 1.0)
        self.assertTrue(all(0.0 <= p <= 1.0 for p in progress))

    def test_start_is_logged(self):
        with self.assertLogs("terratin.model.triangulation.greedy", level=logging.INFO) as logs:
            greedy_insert(self.values, 1.0)
        self.assertTrue(any(
            "starting greedy insertion with raster width: 10, height: 12" in line
            for line in logs.output
        ))

    def test_repr(self):
        terra_mesh = greedy_insert(self.values, 1e6)
        self.assertEqual(repr(terra_mesh), "TerraMesh(vertices=4, triangles=2)")


if __name__ == '__main__':
    unittest.main()
