"""
terratin plotters

Visual inspection of triangulated meshes with matplotlib.
"""

from .matplotlib import TINPlotter

__all__ = ['TINPlotter']
