"""
Pytest fixtures shared across test modules.
"""
import matplotlib
import numpy as np
import pytest

# Plot tests must not need a display
matplotlib.use("Agg")

from terratin.raster import ElevationGrid


@pytest.fixture
def flat_grid():
    """3x3 grid with every elevation equal."""
    return ElevationGrid(np.full((3, 3), 7.0))


@pytest.fixture
def spike_grid():
    """3x3 grid of zeros with a spike of 100 in the centre."""
    values = np.zeros((3, 3))
    values[1, 1] = 100.0
    return ElevationGrid(values)


@pytest.fixture
def hill_grid():
    """Smooth 17x13 hill with georeference."""
    rows, cols = np.mgrid[0:13, 0:17]
    values = 50.0 * np.exp(-((cols - 8.0) ** 2 + (rows - 6.0) ** 2) / 20.0) + 0.3 * cols
    return ElevationGrid(values, cell_size=10.0, x_origin=1000.0, y_origin=2000.0)


@pytest.fixture
def rough_grid():
    """Seeded random terrain with a few no-data holes."""
    rng = np.random.default_rng(1234)
    values = rng.normal(0.0, 5.0, size=(9, 11)).cumsum(axis=1)
    values[4, 5] = -9999.0
    values[2, 8] = np.nan
    return ElevationGrid(values, no_data_value=-9999.0)
