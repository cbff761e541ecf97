#!/usr/bin/env python3
"""Mesh creation core functionality for the terratin CLI."""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from ..core import console, print_key_values
from ...exceptions import ExportError
from ...model.base import MeshData
from ...model.config import ExportConfig
from ...model.formats import write_mesh_to_file
from ...model.registry import get_exporter
from ...model.triangulation import GreedyTriangulator
from ...model.utils.logging import StructuredLogger
from ...raster import ElevationGrid, load_raster_file

# Set up logging
logger = logging.getLogger(__name__)
run_logger = StructuredLogger("terratin.cli.runs")


def resolve_format(output_file: Path, requested: Optional[str], config: ExportConfig) -> str:
    """
    Pick the output format: explicit option, then output extension, then config.

    Raises:
        ExportError: If an explicitly requested format is unknown
    """
    if requested:
        return get_exporter(requested).format_name

    ext = os.path.splitext(str(output_file))[1].lstrip('.')
    if ext:
        try:
            return get_exporter(ext).format_name
        except ExportError:
            logger.debug(f"Extension .{ext} is not a known format, using {config.format}")

    return get_exporter(config.format).format_name


def create_mesh(
    input_file: Path,
    output_file: Path,
    config: ExportConfig,
    format_name: Optional[str] = None,
    cell_size: Optional[float] = None,
    no_data_value: Optional[float] = None,
    plot_file: Optional[Path] = None,
    show_progress: bool = True
) -> Dict[str, Any]:
    """
    Load a raster, triangulate it and write the mesh.

    Args:
        input_file: Raster to read
        output_file: Mesh file to write
        config: Triangulation and writer options
        format_name: Output format; see resolve_format
        cell_size: Override for the raster cell size
        no_data_value: Override for the raster no-data sentinel
        plot_file: Optional image file for a wireframe plot
        show_progress: Whether to draw a progress bar

    Returns:
        Triangulation statistics plus the written filename and format
    """
    format_name = resolve_format(output_file, format_name, config)

    grid: ElevationGrid = load_raster_file(str(input_file), cell_size=cell_size, no_data_value=no_data_value)
    print_key_values(
        {
            "File": input_file.name,
            "Size": f"{grid.width} x {grid.height}",
            "Cell size": grid.cell_size,
            "Max error": config.max_error,
            "Format": format_name.upper(),
        },
        title="Triangulation"
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(complete_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
        disable=not show_progress
    ) as progress:
        task = progress.add_task("[cyan]Inserting points...", total=1.0)

        def progress_callback(fraction: float) -> None:
            progress.update(task, completed=fraction)

        triangulator = GreedyTriangulator(
            grid,
            max_error=config.max_error,
            max_vertices=config.max_vertices,
            progress_callback=progress_callback
        )
        terra_mesh = triangulator.triangulate()

    mesh = MeshData.from_terra_mesh(terra_mesh)
    written = write_mesh_to_file(mesh, str(output_file), format_name, config)

    stats = triangulator.get_statistics()
    stats.update({"output_file": written, "format": format_name})
    run_logger.info("mesh written", input=str(input_file), **stats)

    if plot_file is not None:
        from ...plotters import TINPlotter
        plotter = TINPlotter()
        fig = plotter.plot(terra_mesh.grid, mesh.vertices, mesh.faces, title=input_file.name)
        stats["plot_file"] = plotter.save(fig, str(plot_file))

    return stats
