"""
Matplotlib plotter for triangulated irregular networks.

Draws the TIN wireframe in world coordinates, optionally over the elevation
raster it was built from, for visual inspection of where the triangulation
concentrated its vertices.
"""

import os
import logging
from typing import Any, Optional

import numpy as np

from ..raster.grid import ElevationGrid

# Set up logger
logger = logging.getLogger(__name__)

COLORBAR_LABEL = "Elevation"


class TINPlotter:
    """Matplotlib plots of a TIN and its source raster."""

    NAME = "matplotlib"
    DEFAULT_COLORMAP = "terrain"

    def __init__(self) -> None:
        import matplotlib.pyplot as plt
        self.plt = plt

    def plot(
        self,
        grid: Optional[ElevationGrid],
        vertices: np.ndarray,
        faces: np.ndarray,
        show_heightmap: bool = True,
        title: Optional[str] = None,
        **kwargs
    ) -> Any:
        """
        Plot a TIN wireframe.

        Args:
            grid: Source raster, drawn underneath when show_heightmap is set
            vertices: (N, 3) world coordinates
            faces: (M, 3) vertex indices
            show_heightmap: Whether to draw the raster below the wireframe
            title: Plot title, defaults to a vertex and face count summary
            **kwargs: figsize, colormap, edge_color, linewidth

        Returns:
            Matplotlib Figure object
        """
        fig = self.plt.figure(figsize=kwargs.get("figsize", (10, 8)))
        ax = fig.add_subplot(111)

        if show_heightmap and grid is not None:
            half = grid.cell_size / 2.0
            extent = (
                grid.x_origin - half,
                grid.col2x(grid.width - 1) + half,
                grid.y_origin - half,
                grid.row2y(0) + half,
            )
            masked = np.ma.masked_where(~grid.valid_mask(), grid.values)
            # Row 0 is the northern edge, so the image is drawn top down
            im = ax.imshow(masked, cmap=kwargs.get("colormap", self.DEFAULT_COLORMAP),
                           origin="upper", extent=extent, interpolation="nearest")
            cbar = fig.colorbar(im, ax=ax)
            cbar.set_label(COLORBAR_LABEL)

        if len(faces):
            ax.triplot(vertices[:, 0], vertices[:, 1], faces,
                       color=kwargs.get("edge_color", "black"),
                       linewidth=kwargs.get("linewidth", 0.5))
        elif len(vertices):
            ax.plot(vertices[:, 0], vertices[:, 1], ".", color=kwargs.get("edge_color", "black"))

        ax.set_aspect("equal")
        ax.set_title(title or f"TIN: {len(vertices)} vertices, {len(faces)} triangles")
        ax.set_xlabel("X")
        ax.set_ylabel("Y")

        return fig

    def save(self, fig: Any, filename: str, dpi: int = 150) -> str:
        """
        Save a figure to a file and close it.

        Returns:
            The filename written
        """
        filename = str(filename)
        directory = os.path.dirname(os.path.abspath(filename))
        os.makedirs(directory, exist_ok=True)

        fig.savefig(filename, dpi=dpi, bbox_inches="tight")
        self.plt.close(fig)
        logger.info(f"Plot saved to {filename}")
        return filename
