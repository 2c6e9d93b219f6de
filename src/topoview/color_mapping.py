"""
Color mapping functions for elevation bands.

This module splits the fixed Earth elevation domain into equal-width bands and
assigns each band a color, either from a red -> green -> blue spectrum or from
a gray ramp. Bands can also be turned into a matplotlib colormap for legends.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from matplotlib.colors import BoundaryNorm, ListedColormap

from src.config import MAX_ELEVATION, MIN_ELEVATION

logger = logging.getLogger(__name__)

MAX_COLOR = 255
# Spectrum midpoint where red has fully faded into green
SPECTRUM_MIDPOINT = 128


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def rgb_string(rgb: Tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"rgb({r},{g},{b})"


def generate_color_range(count: int, gray_scale: bool = False) -> List[Tuple[int, int, int]]:
    """
    Generate ``count`` evenly spaced colors on a 0-255 scale.

    The spectrum fades red -> green over 0-128 and green -> blue over 128-255,
    then is reversed so the first color is the bluest. The gray ramp goes from
    black upwards and is not reversed.

    Args:
        count: Number of colors
        gray_scale: Use a gray ramp instead of the spectrum

    Returns:
        List of (r, g, b) tuples with 0-255 integer channels
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    cap = MAX_COLOR / count
    colors = []
    for level in range(count):
        current = level * cap
        if gray_scale:
            gray = _round(current)
            colors.append((gray, gray, gray))
            continue

        if current <= SPECTRUM_MIDPOINT:
            g = current / SPECTRUM_MIDPOINT
            r, b = 1 - g, 0.0
        else:
            b = (current - (SPECTRUM_MIDPOINT - 1)) / SPECTRUM_MIDPOINT
            r, g = 0.0, 1 - b
        colors.append((_round(r * MAX_COLOR), _round(g * MAX_COLOR), _round(b * MAX_COLOR)))

    return colors if gray_scale else colors[::-1]


@dataclass(frozen=True)
class HeightBand:
    """Contiguous elevation range drawn in one color."""

    index: int
    min_elev: float
    max_elev: float
    rgb: Tuple[int, int, int]
    closed: bool = False
    """Whether ``max_elev`` itself belongs to the band (top band only)."""

    @property
    def color(self) -> str:
        return rgb_string(self.rgb)

    def contains(self, elevation: float) -> bool:
        if self.closed:
            return self.min_elev <= elevation <= self.max_elev
        return self.min_elev <= elevation < self.max_elev


def band_edges(levels: int) -> np.ndarray:
    """Lower edges of the ``levels + 1`` bands followed by the domain maximum."""
    width = (MAX_ELEVATION - MIN_ELEVATION) / (levels + 1)
    edges = MIN_ELEVATION + width * np.arange(levels + 2, dtype=np.float64)
    edges[-1] = MAX_ELEVATION
    return edges


def build_height_bands(levels: int, gray_scale: bool = False) -> List[HeightBand]:
    """
    Split the elevation domain into ``levels + 1`` equal-width colored bands.

    Band 0 starts at MIN_ELEVATION; the last band ends exactly at MAX_ELEVATION
    and includes it.
    """
    if levels < 1:
        raise ValueError(f"levels must be at least 1, got {levels}")

    edges = band_edges(levels)
    colors = generate_color_range(levels + 1, gray_scale)
    bands = [
        HeightBand(
            index=index,
            min_elev=float(edges[index]),
            max_elev=float(edges[index + 1]),
            rgb=colors[index],
            closed=index == levels,
        )
        for index in range(levels + 1)
    ]

    logger.debug(
        f"Built {len(bands)} bands of {bands[0].max_elev - bands[0].min_elev:.1f} m "
        f"({'gray' if gray_scale else 'spectrum'})"
    )
    return bands


def band_colormap(bands: List[HeightBand]) -> Tuple[ListedColormap, BoundaryNorm]:
    """
    Create a matplotlib colormap and norm matching a list of height bands.

    Returns:
        tuple: (cmap, norm) usable with ``plt.colorbar`` or ``imshow``
    """
    colors = [np.asarray(band.rgb, dtype=np.float64) / MAX_COLOR for band in bands]
    cmap = ListedColormap(colors, name="height_bands")
    boundaries = [band.min_elev for band in bands] + [bands[-1].max_elev]
    norm = BoundaryNorm(boundaries, cmap.N)
    return cmap, norm
