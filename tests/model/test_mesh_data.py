"""Unit tests for MeshData."""

import unittest

import numpy as np

from terratin.model import MeshData, greedy_insert


class TestMeshData(unittest.TestCase):
    """Test class for MeshData functionality."""

    def setUp(self):
        """Set up a unit square in the xy plane, wound counter-clockwise."""
        self.vertices = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 1]]
        self.faces = [[0, 1, 2], [0, 2, 3]]
        self.mesh = MeshData(self.vertices, self.faces)

    def test_arrays(self):
        self.assertEqual(self.mesh.vertices.dtype, np.float64)
        self.assertEqual(self.mesh.faces.dtype, np.int64)
        self.assertEqual(self.mesh.vertex_count, 4)
        self.assertEqual(self.mesh.face_count, 2)
        self.assertIsNone(self.mesh.normals)

    def test_flat_lists_are_reshaped(self):
        mesh = MeshData([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2])
        self.assertEqual(mesh.vertices.shape, (3, 3))
        self.assertEqual(mesh.faces.shape, (1, 3))

    def test_face_normals(self):
        normals = self.mesh.face_normals()
        np.testing.assert_allclose(normals[0], [0.0, 0.0, 1.0])
        self.assertAlmostEqual(float(np.linalg.norm(normals[1])), 1.0)
        self.assertGreater(normals[1][2], 0.0)

    def test_degenerate_face_normal(self):
        mesh = MeshData([[0, 0, 0], [1, 0, 0], [2, 0, 0]], [[0, 1, 2]])
        np.testing.assert_allclose(mesh.face_normals(), [[0.0, 0.0, 1.0]])

    def test_ensure_normals(self):
        self.mesh.ensure_normals()
        self.assertEqual(self.mesh.normals.shape, (4, 3))
        np.testing.assert_allclose(np.linalg.norm(self.mesh.normals, axis=1), 1.0)
        # Vertex 1 only touches the flat face
        np.testing.assert_allclose(self.mesh.normals[1], [0.0, 0.0, 1.0])

        existing = self.mesh.normals
        self.mesh.ensure_normals()
        self.assertIs(self.mesh.normals, existing)
        self.mesh.ensure_normals(force_recalculate=True)
        self.assertIsNot(self.mesh.normals, existing)

    def test_unreferenced_vertex_normal(self):
        mesh = MeshData([[0, 0, 0], [1, 0, 0], [0, 1, 0], [5, 5, 5]], [[0, 1, 2]])
        mesh.ensure_normals()
        np.testing.assert_allclose(mesh.normals[3], [0.0, 0.0, 1.0])

    def test_bounds(self):
        low, high = self.mesh.bounds()
        np.testing.assert_array_equal(low, [0, 0, 0])
        np.testing.assert_array_equal(high, [1, 1, 1])

        low, high = MeshData(np.zeros((0, 3)), np.zeros((0, 3))).bounds()
        np.testing.assert_array_equal(low, [0, 0, 0])

    def test_as_dict_and_repr(self):
        self.assertEqual(set(self.mesh.as_dict()), {"vertices", "faces"})
        self.assertEqual(repr(self.mesh), "MeshData(vertices=4, faces=2)")

        self.mesh.ensure_normals()
        self.assertIn("normals", self.mesh.as_dict())
        self.assertEqual(repr(self.mesh), "MeshData(vertices=4, faces=2, normals=True)")


def test_from_terra_mesh(hill_grid):
    terra_mesh = greedy_insert(hill_grid, 2.0)
    mesh = MeshData.from_terra_mesh(terra_mesh)

    assert mesh.vertex_count == terra_mesh.vertex_count
    assert mesh.face_count == terra_mesh.triangle_count
    # Terrain faces point up
    assert np.all(mesh.face_normals()[:, 2] > 0)
