"""
Raster I/O utilities.

This module loads elevation rasters from numpy files, ESRI ASCII grids and
image heightmaps into ElevationGrid objects.
"""

import os
import logging
from typing import Any, Dict, Optional

import numpy as np

from .grid import ElevationGrid
from .tools import flip_data_x, flip_data_y
from ..exceptions import RasterDataError, RasterFileError

# Set up logging
logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png', '.tif', '.tiff', '.bmp', '.jpg', '.jpeg', '.pgm')
NPZ_ELEVATION_KEYS = ('elevation', 'heightmap', 'height_map', 'values')


def load_raster_npy(filepath: str) -> Dict[str, Any]:
    """Load a raw elevation array saved with numpy.save."""
    return {'values': np.load(filepath)}


def load_raster_npz(filepath: str) -> Dict[str, Any]:
    """
    Load an elevation array and optional georeference from an npz archive.

    The elevation array is taken from the first of NPZ_ELEVATION_KEYS present,
    otherwise from the first array in the archive. Scalar entries named
    cell_size, x_origin, y_origin and no_data_value are used as metadata.
    Optional signed x_scale and y_scale entries give the pixel size and
    orientation; mirrored sources are flipped into north-up, west-to-east order.
    """
    with np.load(filepath) as data:
        keys = list(data.keys())
        if not keys:
            raise RasterFileError(f"No arrays found in {filepath}")

        key = next((k for k in NPZ_ELEVATION_KEYS if k in keys), keys[0])
        result: Dict[str, Any] = {'values': data[key]}

        for name in ('cell_size', 'x_origin', 'y_origin', 'no_data_value'):
            if name in keys:
                result[name] = float(data[name])

        # Signed pixel sizes as in a GDAL geotransform; rows run north to south
        # when y_scale is negative and columns west to east when x_scale is positive
        if 'x_scale' in keys and 'y_scale' in keys:
            x_scale, y_scale = float(data['x_scale']), float(data['y_scale'])
            if abs(x_scale) != abs(y_scale):
                logger.warning(
                    f"Raster {filepath} has non-square cells ({abs(x_scale)} x {abs(y_scale)}), "
                    f"using {abs(x_scale)}"
                )
            result.setdefault('cell_size', abs(x_scale))
            result['flip_x'] = x_scale < 0
            result['flip_y'] = y_scale > 0

    return result


def load_raster_ascii_grid(filepath: str) -> Dict[str, Any]:
    """
    Load an ESRI ASCII grid (.asc).

    The header holds ncols, nrows, xllcorner/xllcenter, yllcorner/yllcenter,
    cellsize and an optional NODATA_value, followed by nrows lines of values
    starting with the northern row.
    """
    header: Dict[str, str] = {}
    with open(filepath, 'r') as f:
        for line in f:
            parts = line.split()
            if len(parts) != 2 or not parts[0][0].isalpha():
                break
            header[parts[0].lower()] = parts[1]

    try:
        ncols = int(header['ncols'])
        nrows = int(header['nrows'])
        cell_size = float(header['cellsize'])
    except (KeyError, ValueError) as e:
        raise RasterFileError(f"Invalid ASCII grid header in {filepath}: {e}") from e

    values = np.loadtxt(filepath, skiprows=len(header), dtype=np.float64, ndmin=2)
    if values.shape != (nrows, ncols):
        raise RasterFileError(
            f"ASCII grid {filepath} declares {nrows}x{ncols} cells but holds {values.shape[0]}x{values.shape[1]}"
        )

    # Corner registration refers to the outer edge of the lower-left cell
    if 'xllcenter' in header:
        x_origin = float(header['xllcenter'])
    else:
        x_origin = float(header.get('xllcorner', 0.0)) + cell_size / 2
    if 'yllcenter' in header:
        y_origin = float(header['yllcenter'])
    else:
        y_origin = float(header.get('yllcorner', 0.0)) + cell_size / 2

    result = {
        'values': values,
        'cell_size': cell_size,
        'x_origin': x_origin,
        'y_origin': y_origin,
    }
    if 'nodata_value' in header:
        result['no_data_value'] = float(header['nodata_value'])
    return result


def load_raster_image(filepath: str) -> Dict[str, Any]:
    """Load a greyscale, 16-bit or floating point image heightmap with Pillow."""
    from PIL import Image

    with Image.open(filepath) as img:
        if img.mode not in ('L', 'I', 'I;16', 'I;16B', 'F'):
            if len(img.getbands()) > 1:
                logger.warning(
                    f"Image {filepath} has {len(img.getbands())} bands, using band #1"
                )
                img = img.getchannel(0)
            else:
                img = img.convert('F')
        values = np.array(img, dtype=np.float64)

    return {'values': values}


def load_raster_file(
    filepath: str,
    cell_size: Optional[float] = None,
    no_data_value: Optional[float] = None,
    x_origin: Optional[float] = None,
    y_origin: Optional[float] = None
) -> ElevationGrid:
    """
    Load an elevation raster, dispatching on the file extension.

    Args:
        filepath: Path to a .npy, .npz, .asc or image file
        cell_size: Override for the cell size stored in the file
        no_data_value: Override for the no-data sentinel stored in the file
        x_origin: Override for the world x of the lower-left cell centre
        y_origin: Override for the world y of the lower-left cell centre

    Returns:
        ElevationGrid with the raster contents

    Raises:
        RasterFileError: If the file is missing, of unknown type or unreadable
        RasterDataError: If the contents are not a 2D raster
    """
    filepath = str(filepath)
    if not os.path.exists(filepath):
        raise RasterFileError(f"Raster file not found: {filepath}")

    logger.info(f"Opening raster file {filepath}...")

    ext = os.path.splitext(filepath)[1].lower()
    try:
        if ext == '.npy':
            data = load_raster_npy(filepath)
        elif ext == '.npz':
            data = load_raster_npz(filepath)
        elif ext == '.asc':
            data = load_raster_ascii_grid(filepath)
        elif ext in IMAGE_EXTENSIONS:
            data = load_raster_image(filepath)
        else:
            raise RasterFileError(f"Unsupported raster format: {ext or filepath}")
    except (OSError, ValueError) as e:
        if isinstance(e, RasterDataError):
            raise
        raise RasterFileError(f"Can not read raster data from {filepath}: {e}") from e

    overrides = {
        'cell_size': cell_size,
        'no_data_value': no_data_value,
        'x_origin': x_origin,
        'y_origin': y_origin,
    }
    for key, value in overrides.items():
        if value is not None:
            data[key] = value

    values = np.asarray(data.pop('values'))
    if values.ndim == 3 and values.shape[2] >= 1:
        logger.warning(f"Raster {filepath} has {values.shape[2]} bands, using band #1")
        values = values[:, :, 0]

    flip_x = data.pop('flip_x', False)
    flip_y = data.pop('flip_y', False)
    grid = ElevationGrid(values, **data)
    if flip_x:
        grid = flip_data_x(grid)
    if flip_y:
        grid = flip_data_y(grid)
    logger.info(f"Loaded raster {grid.width}x{grid.height} from {filepath}")
    return grid
