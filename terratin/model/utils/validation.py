"""Validation utilities for triangulated meshes."""

import os
import numpy as np
import logging
from typing import List, Tuple, Union

# Set up logging
logger = logging.getLogger(__name__)


def validate_vertices(vertices: Union[np.ndarray, List[List[float]]]) -> bool:
    """
    Validate vertex array or list.

    Args:
        vertices: Array/list of 3D vertices to validate

    Returns:
        True if valid, False otherwise
    """
    if vertices is None:
        return False

    vertices = np.asarray(vertices)
    if vertices.ndim != 2 or vertices.shape[1] != 3:
        return False

    if not np.issubdtype(vertices.dtype, np.number):
        return False

    return bool(np.isfinite(vertices).all())


def validate_faces(faces: Union[np.ndarray, List[List[int]]], vertex_count: int = None) -> bool:
    """
    Validate face index array or list.

    Args:
        faces: Array/list of triangle indices to validate
        vertex_count: If given, every index must be below it

    Returns:
        True if valid, False otherwise
    """
    if faces is None:
        return False

    faces = np.asarray(faces)
    if faces.ndim != 2 or faces.shape[1] != 3:
        return False

    if faces.size and not np.issubdtype(faces.dtype, np.integer):
        return False

    if np.any(faces < 0):
        return False

    if vertex_count is not None and np.any(faces >= vertex_count):
        return False

    return True


def validate_mesh(
    vertices: np.ndarray,
    faces: np.ndarray
) -> Tuple[bool, List[str]]:
    """
    Validate mesh data for common issues.

    Args:
        vertices: Array of vertex positions
        faces: Array of face indices

    Returns:
        Tuple of (is_valid, issues) where issues is a list of problems found
    """
    issues = []

    # Basic validation
    if not validate_vertices(vertices):
        issues.append("Invalid vertex data")
        return False, issues

    if not validate_faces(faces, len(vertices)):
        issues.append("Invalid face data")
        return False, issues

    faces = np.asarray(faces)

    # Additional checks
    if len(vertices) == 0:
        issues.append("Empty mesh (no vertices)")

    if len(faces) == 0:
        issues.append("Empty mesh (no faces)")

    repeated = (faces[:, 0] == faces[:, 1]) | (faces[:, 1] == faces[:, 2]) | (faces[:, 2] == faces[:, 0])
    for face in np.nonzero(repeated)[0]:
        issues.append(f"Face {face} repeats a vertex: {faces[face].tolist()}")

    # Check for non-manifold edges
    edge_count = {}
    for face in faces:
        edges = [(face[0], face[1]), (face[1], face[2]), (face[2], face[0])]
        for v1, v2 in edges:
            edge = tuple(sorted((int(v1), int(v2))))
            edge_count[edge] = edge_count.get(edge, 0) + 1

    for edge, count in edge_count.items():
        if count > 2:
            issues.append(f"Non-manifold edge found: {edge}")

    return len(issues) == 0, issues


def ensure_directory_exists(filename: str) -> None:
    """
    Ensure the directory for a file exists, creating it if needed.

    Args:
        filename: Path to file
    """
    directory = os.path.dirname(os.path.abspath(filename))
    if not os.path.isdir(directory):
        logger.debug(f"Creating directory {directory}")
        os.makedirs(directory, exist_ok=True)
