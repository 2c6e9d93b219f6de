"""
Viewport sampling for elevation rasters.

Turns a view request into a bounding box, walks a lat/lng grid over it at a
zoom- and quality-dependent step, and reads the elevation under every grid
point from the raster.

Example:
    from src.topoview.sampling import ViewRequest, sample_viewport

    request = ViewRequest(center_lat=27.99, center_lng=86.92, zoom=1, quality=2)
    samples = sample_viewport(request, raster)
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple, Optional, Tuple

import numpy as np

from src.topoview.data_loading import Raster
from src.topoview.projection import to_raster_index, to_screen, wrap

logger = logging.getLogger(__name__)

# Angular window spans (degrees) at zoom 0, before halving
LAT_SPAN = 106
LNG_SPAN = 377

# Fixed coarse steps used for full-extent views
FULL_EXTENT_STEPS = (8.5, 9.5)


@dataclass(frozen=True)
class ViewRequest:
    """Parameters of a single map view."""

    center_lat: float = 0.0
    center_lng: float = 0.0
    zoom: float = 1
    quality: int = 1
    levels: int = 100
    gray_scale: bool = False
    full_extent: bool = False

    def __post_init__(self):
        if self.quality <= 0:
            raise ValueError(f"quality must be positive, got {self.quality}")
        if self.levels < 1:
            raise ValueError(f"levels must be at least 1, got {self.levels}")

    @property
    def effective_zoom(self) -> float:
        """Zoom used for sampling; full-extent views always use 1."""
        return 1 if self.full_extent else self.zoom


@dataclass(frozen=True)
class BoundingBox:
    """Geographic window walked by the sampler, from start towards end."""

    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float


class Sample(NamedTuple):
    """Screen position and elevation of one grid point (elevation None on a miss)."""

    x: float
    y: float
    elevation: Optional[float]


@dataclass
class ViewportSamples:
    """Samples of one view as parallel arrays, in walk order."""

    x: np.ndarray
    y: np.ndarray
    elevation: np.ndarray
    """Elevations, NaN where the lookup missed the raster."""

    def __len__(self) -> int:
        return int(self.x.size)

    def __iter__(self) -> Iterator[Sample]:
        for x, y, elevation in zip(self.x.tolist(), self.y.tolist(), self.elevation.tolist()):
            yield Sample(x, y, None if math.isnan(elevation) else elevation)

    @property
    def miss_count(self) -> int:
        return int(np.isnan(self.elevation).sum())

    @classmethod
    def coerce(cls, samples) -> "ViewportSamples":
        """Accept ViewportSamples as-is or build them from (x, y, elevation) tuples."""
        if isinstance(samples, cls):
            return samples

        rows = [
            (x, y, np.nan if elevation is None else elevation)
            for x, y, elevation in samples
        ]
        if not rows:
            empty = np.empty(0, dtype=np.float64)
            return cls(empty, empty.copy(), empty.copy())

        data = np.asarray(rows, dtype=np.float64)
        return cls(data[:, 0], data[:, 1], data[:, 2])


def round_half_up(value):
    """Round to the nearest integer with ties going up (towards +inf)."""
    if np.ndim(value) == 0:
        return math.floor(value + 0.5)
    return np.floor(np.asarray(value) + 0.5)


def bounding_box(request: ViewRequest) -> BoundingBox:
    """
    Compute the geographic window of a view.

    Full-extent views cover the globe. Region views extend a half window from
    the center, narrowing by a factor 10 per zoom step and halving again for
    positive zoom.
    """
    if request.full_extent:
        return BoundingBox(start_lat=-90.0, start_lng=-180.0, end_lat=90.0, end_lng=180.0)

    zoom = request.zoom
    divisor = 2 if zoom > 0 else 4
    half_lat = LAT_SPAN / 10**zoom / divisor
    half_lng = LNG_SPAN / 10**zoom / divisor

    return BoundingBox(
        start_lat=request.center_lat + half_lat,
        start_lng=request.center_lng + half_lng,
        end_lat=request.center_lat - half_lat,
        end_lng=request.center_lng - half_lng,
    )


def iteration_sizes(box: BoundingBox, zoom: float) -> Tuple[int, int]:
    """Grid extent along latitude and longitude in units of 10^-zoom degrees."""
    scale = 10**zoom
    i_size = abs(round_half_up(box.start_lat * scale - box.end_lat * scale))
    j_size = abs(round_half_up(box.start_lng * scale - box.end_lng * scale))
    return int(i_size), int(j_size)


def step_sizes(request: ViewRequest) -> Tuple[float, float]:
    """Latitude and longitude grid steps; higher quality means sparser sampling."""
    if request.full_extent:
        return FULL_EXTENT_STEPS

    quality = request.quality if request.zoom > 0 else request.quality / 2
    return 0.5 * quality, 1.0 * quality


def strided_range(stop: float, step: float) -> Iterable[float]:
    """
    Yield ``k * step`` for k = 0, 1, ... while the value stays below ``stop``.

    Each value is computed from its index, so long walks do not accumulate
    floating point error.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")

    k = 0
    while k * step < stop:
        yield k * step
        k += 1


def _walk_axis(start: float, end: float, offsets: np.ndarray, scale: float) -> np.ndarray:
    origin = round_half_up(start * scale)
    direction = -1 if start - end > 0 else 1
    return (origin + direction * offsets) / scale


def sample_viewport(request: ViewRequest, raster: Raster) -> ViewportSamples:
    """
    Walk the view grid and read the elevation under every grid point.

    Grid points are projected to screen space before they are wrapped back onto
    the globe, so screen coordinates keep the unwrapped position. Points whose
    raster cell falls outside the grid get a NaN elevation.

    Args:
        request: View to sample
        raster: Loaded elevation raster

    Returns:
        ViewportSamples in row-major walk order (latitude outer, longitude inner)
    """
    zoom = request.effective_zoom
    scale = 10**zoom
    box = bounding_box(request)
    i_size, j_size = iteration_sizes(box, zoom)
    i_step, j_step = step_sizes(request)

    logger.debug(f"Bounding box: {box}")
    logger.debug(f"Grid extent {i_size} x {j_size}, steps {i_step} x {j_step}")

    i_offsets = np.fromiter(strided_range(i_size + 1, i_step), dtype=np.float64)
    j_offsets = np.fromiter(strided_range(j_size + 1, j_step), dtype=np.float64)
    i_grid, j_grid = np.meshgrid(i_offsets, j_offsets, indexing="ij")

    lat = _walk_axis(box.start_lat, box.end_lat, i_grid.ravel(), scale)
    lng = _walk_axis(box.start_lng, box.end_lng, j_grid.ravel(), scale)

    x, y = to_screen(lat, lng)
    lat, lng = wrap(lat, lng)
    col, row = to_raster_index(lat, lng, raster.affine_to_raster, truncate=True)

    inside = (col >= 0) & (col < raster.width) & (row >= 0) & (row < raster.height)
    elevation = np.full(lat.shape, np.nan, dtype=np.float64)
    elevation[inside] = raster.values[row[inside] * raster.width + col[inside]]

    samples = ViewportSamples(x=x, y=y, elevation=elevation)
    logger.info(
        f"Sampled {len(samples)} points ({i_offsets.size} x {j_offsets.size}), "
        f"{samples.miss_count} without elevation"
    )
    return samples
