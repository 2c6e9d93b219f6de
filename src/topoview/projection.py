"""
Coordinate conversion between geographic, raster and screen space.

Screen space is a fixed equirectangular canvas of SCREEN_WIDTH x SCREEN_HEIGHT
pixels covering the whole globe. All functions accept scalars or numpy arrays.
"""

import numpy as np

from src.config import SCREEN_HEIGHT, SCREEN_WIDTH

X_SCALE = SCREEN_WIDTH / 360
Y_SCALE = SCREEN_HEIGHT / 180


def _unwrap(value):
    # 0-d results go back to plain Python numbers
    if np.ndim(value) == 0:
        return np.asarray(value).item()
    return value


def to_screen(lat, lng):
    """
    Project latitude/longitude onto the screen canvas.

    No bounds checking is done; wrap coordinates first if needed.

    Returns:
        tuple: (x, y) in pixels, y growing southwards
    """
    x = (np.asarray(lng, dtype=np.float64) + 180) * X_SCALE
    y = (-np.asarray(lat, dtype=np.float64) + 90) * Y_SCALE
    return _unwrap(x), _unwrap(y)


def from_screen(x, y):
    """Inverse of :func:`to_screen`, returning (lat, lng)."""
    lng = np.asarray(x, dtype=np.float64) / X_SCALE - 180
    lat = 90 - np.asarray(y, dtype=np.float64) / Y_SCALE
    return _unwrap(lat), _unwrap(lng)


def _fold(value, limit):
    value = np.asarray(value, dtype=np.float64)
    value = np.where(value > limit, -(limit - (value - limit)), value)
    return np.where(value < -limit, limit + (value + limit), value)


def wrap(lat, lng):
    """
    Fold coordinates that overshoot the globe back into range.

    This is a single fold, not a modulo: 91 becomes -89 and 181 becomes -179,
    but overshoot larger than one full range is not corrected.

    Returns:
        tuple: (lat, lng)
    """
    return _unwrap(_fold(lat, 90)), _unwrap(_fold(lng, 180))


def to_raster_index(lat, lng, affine, truncate=False):
    """
    Apply the geographic -> raster affine to a coordinate.

    Args:
        lat: Latitude(s)
        lng: Longitude(s)
        affine: 6 coefficients ``(a0..a5)`` with ``col = a0 + a1*lng + a2*lat``
            and ``row = a3 + a4*lng + a5*lat``
        truncate: Truncate both results toward zero to integer cell indices

    Returns:
        tuple: (col, row)
    """
    a0, a1, a2, a3, a4, a5 = affine
    lat = np.asarray(lat, dtype=np.float64)
    lng = np.asarray(lng, dtype=np.float64)

    col = a0 + a1 * lng + a2 * lat
    row = a3 + a4 * lng + a5 * lat
    if truncate:
        col = np.trunc(col).astype(np.int64)
        row = np.trunc(row).astype(np.int64)

    return _unwrap(col), _unwrap(row)
