"""
Elevation classification of viewport samples.

Normalizes sampled screen positions onto the full canvas, bins elevations into
height bands and sizes the cells the renderer paints for every sample.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

from src.config import MAX_ELEVATION, SCREEN_HEIGHT, SCREEN_WIDTH
from src.topoview.color_mapping import HeightBand, band_edges, build_height_bands
from src.topoview.sampling import ViewportSamples

logger = logging.getLogger(__name__)

Point = Tuple[float, float, float]


class DegenerateViewportError(ValueError):
    """Raised when samples do not span both screen axes and cannot be normalized."""

    pass


@dataclass
class RenderPayload:
    """Grouped, screen-normalized samples and the size of one painted cell."""

    bands: List[HeightBand]
    band_groups: Dict[int, List[Point]]
    """Points per band index, in sample order. Bands without points are absent."""

    cell_delta_x: float
    cell_delta_y: float
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def height_groups(self) -> Dict[str, List[Point]]:
        """Points keyed by band color; bands sharing a color are merged in band order."""
        groups: Dict[str, List[Point]] = {}
        for band in self.bands:
            points = self.band_groups.get(band.index)
            if points:
                groups.setdefault(band.color, []).extend(points)
        return groups

    def to_dict(self) -> dict:
        """Wire representation consumed by canvas renderers."""
        return {
            "heightGroups": {
                color: [list(point) for point in points]
                for color, points in self.height_groups.items()
            },
            "cellDeltaX": self.cell_delta_x,
            "cellDeltaY": self.cell_delta_y,
        }


def _normalize(values: np.ndarray, extent: int, axis: str) -> np.ndarray:
    low, high = values.min(), values.max()
    if high == low:
        raise DegenerateViewportError(
            f"All samples share {axis}={low}; cannot normalize a zero-width viewport"
        )
    return (values - low) / (high - low) * extent


def assign_bands(elevation: np.ndarray, levels: int) -> np.ndarray:
    """
    Band index of every elevation, or -1 for misses and out-of-domain values.

    Band k holds ``edges[k] <= e < edges[k + 1]``; the top band also holds the
    domain maximum.
    """
    edges = band_edges(levels)
    index = np.searchsorted(edges, elevation, side="right") - 1
    index[elevation == MAX_ELEVATION] = levels

    valid = np.isfinite(elevation) & (index >= 0) & (index <= levels)
    return np.where(valid, index, -1)


def classify(samples, levels: int, gray_scale: bool = False) -> RenderPayload:
    """
    Bin samples into colored height bands on the normalized canvas.

    Args:
        samples: ViewportSamples or an iterable of (x, y, elevation) tuples
        levels: Number of band boundaries; ``levels + 1`` bands are built
        gray_scale: Use gray band colors instead of the spectrum

    Returns:
        RenderPayload with per-band points and cell size

    Raises:
        DegenerateViewportError: If there are no samples or they collapse onto a
            single screen column or row
    """
    samples = ViewportSamples.coerce(samples)
    if len(samples) == 0:
        raise DegenerateViewportError("No samples to classify")

    norm_x = _normalize(samples.x, SCREEN_WIDTH, "x")
    norm_y = _normalize(samples.y, SCREEN_HEIGHT, "y")

    bands = build_height_bands(levels, gray_scale)
    band_index = assign_bands(samples.elevation, levels)

    band_groups: Dict[int, List[Point]] = {}
    for index in np.unique(band_index[band_index >= 0]).tolist():
        members = np.flatnonzero(band_index == index)
        band_groups[index] = list(
            zip(
                norm_x[members].tolist(),
                norm_y[members].tolist(),
                samples.elevation[members].tolist(),
            )
        )

    distinct_x = np.unique(samples.x).size
    distinct_y = np.unique(samples.y).size

    binned = int((band_index >= 0).sum())
    stats = {
        "samples": len(samples),
        "binned": binned,
        "dropped": len(samples) - binned,
        "distinct_x": distinct_x,
        "distinct_y": distinct_y,
    }
    logger.info(
        f"Classified {binned}/{len(samples)} samples into {len(band_groups)} of "
        f"{len(bands)} bands, grid {distinct_x} x {distinct_y}"
    )

    return RenderPayload(
        bands=bands,
        band_groups=band_groups,
        cell_delta_x=SCREEN_WIDTH / distinct_x,
        cell_delta_y=SCREEN_HEIGHT / distinct_y,
        stats=stats,
    )
