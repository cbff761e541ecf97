"""Command implementations for the terratin CLI."""

from .mesh import create_mesh, resolve_format

__all__ = ['create_mesh', 'resolve_format']
