#!/usr/bin/env python3
"""terratin command line interface."""

import logging
from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..exceptions import TerraTinException
from ..model.config import ExportConfig, load_config
from ..model.registry import get_available_formats, get_exporter
from ..model.utils.logging import configure_logging
from ..raster import load_raster_file
from .commands import create_mesh
from .core import console, print_error, print_key_values, print_rich_table, print_success, print_warning

logger = logging.getLogger(__name__)

# Create main app
app = typer.Typer(
    help="terratin - convert elevation rasters into adaptive triangulated meshes",
    add_completion=False
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level name, e.g. INFO")
):
    """Configure logging for every command."""
    configure_logging(level=log_level, verbose=verbose)


@app.command("create")
def create_command(
    input_file: Path = typer.Argument(..., help="Input raster (.npy, .npz, .asc or image)"),
    output_file: Path = typer.Argument(..., help="Output mesh file"),
    max_error: Optional[float] = typer.Option(None, "--max-error", "-e", help="Largest vertical deviation tolerated"),
    max_vertices: Optional[int] = typer.Option(None, "--max-vertices", help="Stop once the mesh has this many vertices"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format (obj, ply, stl)"),
    binary: Optional[bool] = typer.Option(None, "--binary/--ascii", help="Binary or text encoding where supported"),
    z_scale: Optional[float] = typer.Option(None, "--z-scale", help="Vertical exaggeration applied on export"),
    cell_size: Optional[float] = typer.Option(None, "--cell-size", help="Override the raster cell size"),
    no_data: Optional[float] = typer.Option(None, "--no-data", help="Override the raster no-data value"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON configuration file"),
    plot_file: Optional[Path] = typer.Option(None, "--plot", help="Also save a wireframe plot to this image"),
):
    """Triangulate a raster and write the mesh."""
    try:
        config = load_config(str(config_file)) if config_file else ExportConfig()

        # Explicit options override the config file
        overrides = {
            "max_error": max_error,
            "max_vertices": max_vertices,
            "binary": binary,
            "z_scale": z_scale,
        }
        values = config.as_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = ExportConfig.from_dict(values)
        if config.max_vertices is not None:
            print_warning(
                f"Stopping at {config.max_vertices} vertices; samples may exceed max_error {config.max_error}"
            )

        stats = create_mesh(
            input_file,
            output_file,
            config,
            format_name=format,
            cell_size=cell_size,
            no_data_value=no_data,
            plot_file=plot_file
        )
    except (TerraTinException, ValueError, IOError) as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    print_key_values(
        {
            "Vertices": stats["final_vertices"],
            "Triangles": stats["final_triangles"],
            "Inserted points": stats["inserted_points"],
            "Compression ratio": f"{stats['compression_ratio']:.2f}x",
            "Time": f"{stats['processing_time']:.2f}s",
        },
        title="Result"
    )
    print_success(f"Wrote {stats['output_file']}")


@app.command("info")
def info_command(
    input_file: Path = typer.Argument(..., help="Input raster"),
    cell_size: Optional[float] = typer.Option(None, "--cell-size", help="Override the raster cell size"),
    no_data: Optional[float] = typer.Option(None, "--no-data", help="Override the raster no-data value"),
):
    """Show raster dimensions, georeference and elevation range."""
    try:
        grid = load_raster_file(str(input_file), cell_size=cell_size, no_data_value=no_data)
    except (TerraTinException, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    stats = grid.get_stats()
    print_key_values(
        {
            "Width": stats["width"],
            "Height": stats["height"],
            "Cell size": stats["cell_size"],
            "Origin": f"({stats['x_origin']}, {stats['y_origin']})",
            "No-data value": stats["no_data_value"],
            "No-data samples": stats["no_data_count"],
            "Min": stats.get("min", "n/a"),
            "Max": stats.get("max", "n/a"),
        },
        title=f"Raster: {input_file.name}"
    )


@app.command("formats")
def formats_command():
    """List the available mesh writers."""
    rows = []
    for name in get_available_formats():
        exporter = get_exporter(name)
        rows.append({
            "Format": name,
            "Extensions": ", ".join(f".{ext}" for ext in exporter.file_extensions),
            "Binary": "yes" if exporter.binary_supported else "no",
        })
    print_rich_table(rows, title="Mesh formats")


@app.command("version")
def version_command():
    """Show the terratin version."""
    console.print(f"terratin {__version__}")


def main():
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    main()
