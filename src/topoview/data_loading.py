"""
Data loading operations for elevation rasters.

This module contains the in-memory raster model used by the sampler and the
functions that build it from GeoTIFF files or numpy arrays.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import rasterio
from rasterio.transform import Affine

from src.config import DEFAULT_RASTER_PATTERN

logger = logging.getLogger(__name__)


class RasterMetadataError(ValueError):
    """Raised when raster georeferencing metadata cannot be used for lookups."""

    pass


@dataclass(frozen=True)
class Raster:
    """Flat row-major elevation grid with its geographic -> cell lookup."""

    width: int
    """Number of cells per row."""

    values: np.ndarray
    """Flat elevations, ``values[row * width + col]``. NaN marks nodata."""

    affine_to_raster: Tuple[float, float, float, float, float, float]
    """Coefficients mapping (lng, lat) to (col, row)."""

    def __post_init__(self):
        if self.width <= 0:
            raise RasterMetadataError(f"Raster width must be positive, got {self.width}")
        if self.values.ndim != 1:
            raise RasterMetadataError(f"Raster values must be flat, got shape {self.values.shape}")
        if self.values.size % self.width != 0:
            raise RasterMetadataError(
                f"{self.values.size} values do not fill rows of width {self.width}"
            )
        if len(self.affine_to_raster) != 6:
            raise RasterMetadataError("affine_to_raster needs exactly 6 coefficients")

    @property
    def height(self) -> int:
        return self.values.size // self.width

    def value_at(self, col: int, row: int) -> Optional[float]:
        """Elevation at cell (col, row), or None outside the grid or on nodata."""
        if not (0 <= col < self.width and 0 <= row < self.height):
            return None
        value = float(self.values[row * self.width + col])
        return None if math.isnan(value) else value


def affine_from_geotransform(
    sx: float, sy: float, origin_lng: float, origin_lat: float
) -> Tuple[float, float, float, float, float, float]:
    """
    Build the geographic -> raster lookup from pixel scale and tie point.

    Args:
        sx: Pixel width in degrees of longitude
        sy: Signed pixel height in degrees of latitude (negative for north-up)
        origin_lng: Longitude of the upper-left corner of cell (0, 0)
        origin_lat: Latitude of the upper-left corner of cell (0, 0)

    Returns:
        Tuple of 6 coefficients ``[-origin_lng/sx, 1/sx, 0, -origin_lat/sy, 0, 1/sy]``

    Raises:
        RasterMetadataError: If a pixel scale is missing, zero or not finite
    """
    for name, scale in (("sx", sx), ("sy", sy)):
        if scale is None or not math.isfinite(scale) or scale == 0:
            raise RasterMetadataError(f"Invalid pixel scale {name}={scale}")
    if not (math.isfinite(origin_lng) and math.isfinite(origin_lat)):
        raise RasterMetadataError(f"Invalid tie point ({origin_lng}, {origin_lat})")

    return (-origin_lng / sx, 1 / sx, 0.0, -origin_lat / sy, 0.0, 1 / sy)


def raster_from_array(
    data: np.ndarray, transform: Affine, nodata: Optional[float] = None
) -> Raster:
    """
    Create a Raster from a 2D elevation array and its pixel -> world transform.

    Args:
        data: 2D elevation array (rows, cols)
        transform: rasterio Affine mapping (col, row) to (lng, lat)
        nodata: Value to treat as missing (converted to NaN)

    Returns:
        Raster ready for sampling

    Raises:
        RasterMetadataError: If the array is not 2D or the transform is rotated/degenerate
    """
    if data.ndim != 2:
        raise RasterMetadataError(f"Elevation data must be 2D, got shape {data.shape}")
    if transform.b != 0 or transform.d != 0:
        raise RasterMetadataError(f"Rotated transforms are not supported: {transform}")

    affine = affine_from_geotransform(transform.a, transform.e, transform.c, transform.f)

    values = data.astype(np.float64).ravel()
    if nodata is not None and not np.isnan(nodata):
        values[values == nodata] = np.nan

    return Raster(width=int(data.shape[1]), values=values, affine_to_raster=affine)


def find_raster_file(path, pattern: str = DEFAULT_RASTER_PATTERN) -> Path:
    """
    Resolve a raster path, searching a directory for the first matching file.

    Raises:
        ValueError: If the path does not exist or a directory holds no matching file
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Raster path does not exist: {path}")
    if path.is_file():
        return path

    candidates = sorted(path.glob(pattern))
    if not candidates:
        raise ValueError(f"No files matching '{pattern}' found in {path}")
    if len(candidates) > 1:
        logger.warning(f"Found {len(candidates)} rasters in {path}, using {candidates[0].name}")
    return candidates[0]


def load_raster(path, pattern: str = DEFAULT_RASTER_PATTERN) -> Raster:
    """
    Load a single-band elevation GeoTIFF into a Raster.

    Args:
        path: Raster file, or directory searched with ``pattern``
        pattern: Glob pattern used when ``path`` is a directory

    Returns:
        Raster with nodata converted to NaN

    Raises:
        ValueError: If no raster file can be found
        RasterMetadataError: If the raster has no usable georeferencing
        rasterio.errors.RasterioIOError: If the file cannot be read
    """
    raster_file = find_raster_file(path, pattern)
    logger.info(f"Loading elevation raster: {raster_file}")

    with rasterio.open(raster_file) as ds:
        if ds.count == 0:
            raise RasterMetadataError(f"No raster bands found in {raster_file}")
        if ds.count > 1:
            logger.warning(f"{raster_file} has {ds.count} bands, using band 1")

        data = ds.read(1)
        transform = ds.transform
        nodata = ds.nodata

    if transform == Affine.identity():
        raise RasterMetadataError(f"{raster_file} has no georeferencing transform")

    raster = raster_from_array(data, transform, nodata=nodata)

    logger.info(f"  Shape: {raster.height} x {raster.width}")
    logger.info(f"  Value range: {np.nanmin(raster.values):.2f} to {np.nanmax(raster.values):.2f}")
    logger.debug(f"  Geographic -> raster affine: {raster.affine_to_raster}")
    return raster
