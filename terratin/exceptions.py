#!/usr/bin/env python3
"""
terratin Exceptions

This module defines custom exceptions used throughout the terratin library.
"""


class TerraTinException(Exception):
    """Base class for all terratin exceptions."""
    pass


class RasterError(TerraTinException):
    """Base exception for raster input problems."""
    pass


class RasterFileError(RasterError):
    """Exception raised when a raster file cannot be found, read or parsed."""
    pass


class RasterDataError(RasterError, ValueError):
    """Exception raised when raster contents cannot be triangulated."""
    pass


class TriangulationError(TerraTinException):
    """Base exception for errors raised by the triangulation core."""
    pass


class MeshInvariantError(TriangulationError, AssertionError):
    """
    Exception raised when an internal mesh invariant is violated.

    This signals a programming error (inserting an already used point, a point
    outside its triangle, a face without a vertex), not a recoverable condition.
    """
    pass


class ExportError(TerraTinException):
    """Exception raised when a mesh cannot be written."""
    pass
