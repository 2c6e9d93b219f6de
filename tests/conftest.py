"""Pytest configuration and fixtures for topoview tests."""
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import rasterio
from rasterio.transform import Affine


@pytest.fixture
def tiny_raster():
    """2x2 raster addressed directly by (lng, lat) = (col, row)."""
    from src.topoview.data_loading import Raster

    return Raster(
        width=2,
        values=np.array([100.0, 200.0, 300.0, 400.0]),
        affine_to_raster=(0.0, 1.0, 0.0, 0.0, 0.0, 1.0),
    )


@pytest.fixture
def world_dem():
    """Global 1-degree DEM (180 rows x 360 cols), north-up.

    Elevation rises with latitude from -9100 m at the south pole row to
    8800 m at the north pole row, so each row has a known value.
    """
    rows = np.linspace(8800, -9100, 180, dtype=np.float64)
    return np.repeat(rows[:, None], 360, axis=1)


@pytest.fixture
def world_transform():
    """Pixel -> world transform for the 1-degree global grid."""
    return Affine.translation(-180, 90) * Affine.scale(1, -1)


@pytest.fixture
def world_raster(world_dem, world_transform):
    """Raster built from the synthetic global DEM."""
    from src.topoview.data_loading import raster_from_array

    return raster_from_array(world_dem, world_transform)


@pytest.fixture
def world_geotiff(tmp_path, world_dem, world_transform):
    """Path to the synthetic global DEM written as a GeoTIFF."""
    path = tmp_path / "world.tif"
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=world_dem.shape[0],
        width=world_dem.shape[1],
        count=1,
        dtype="float32",
        crs="EPSG:4326",
        transform=world_transform,
        nodata=-32768,
    ) as dst:
        dst.write(world_dem.astype(np.float32), 1)
    return path


@pytest.fixture
def project_root():
    """Get the project root directory."""
    return Path(__file__).parent.parent
