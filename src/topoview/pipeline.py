"""
End-to-end map drawing: view settings -> samples -> colored height groups.

Example:
    from src.topoview.data_loading import load_raster
    from src.topoview.pipeline import ViewSettings, draw_map, view_request_for

    raster = load_raster("data/dem/open-topo-data.tif")
    request = view_request_for("Everest", ViewSettings(zoom=1, quality=2, levels=40))
    payload = draw_map(request, raster)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Optional

from src.config import (
    DEFAULT_LEVELS,
    DEFAULT_QUALITY,
    DEFAULT_ZOOM,
    LEVELS_RANGE,
    POINTS,
    QUALITY_RANGE,
    ZOOM_RANGE,
)
from src.topoview.classification import RenderPayload, classify
from src.topoview.data_loading import Raster
from src.topoview.sampling import ViewRequest, sample_viewport

logger = logging.getLogger(__name__)


def _clamp(value, bounds):
    low, high = bounds
    return max(low, min(high, value))


@dataclass(frozen=True)
class ViewSettings:
    """User-facing render settings, before they are bound to a location."""

    zoom: float = DEFAULT_ZOOM
    quality: int = DEFAULT_QUALITY
    levels: int = DEFAULT_LEVELS
    gray_scale: bool = False

    def clamped(self) -> ViewSettings:
        """Copy with every setting forced into the viewer's input limits."""
        settings = replace(
            self,
            zoom=_clamp(self.zoom, ZOOM_RANGE),
            quality=_clamp(self.quality, QUALITY_RANGE),
            levels=_clamp(self.levels, LEVELS_RANGE),
        )
        if settings != self:
            logger.warning(f"Settings clamped from {self} to {settings}")
        return settings


def view_request_for(point: Optional[str], settings: ViewSettings = ViewSettings()) -> ViewRequest:
    """
    Build a view request for a named point of interest, or the whole globe.

    Args:
        point: Key of ``config.POINTS``, or None for a full-extent view
        settings: Render settings, clamped before use

    Raises:
        ValueError: If ``point`` is not a known point of interest
    """
    settings = settings.clamped()

    if point is None:
        center_lat, center_lng = POINTS["Null Island"]
        full_extent = True
    elif point in POINTS:
        center_lat, center_lng = POINTS[point]
        full_extent = False
    else:
        raise ValueError(f"Unknown point '{point}'. Available: {', '.join(POINTS)}")

    return ViewRequest(
        center_lat=center_lat,
        center_lng=center_lng,
        zoom=settings.zoom,
        quality=settings.quality,
        levels=settings.levels,
        gray_scale=settings.gray_scale,
        full_extent=full_extent,
    )


def draw_map(request: ViewRequest, raster: Raster) -> RenderPayload:
    """
    Sample a view from the raster and classify it into colored height groups.

    Raises:
        DegenerateViewportError: If the sampled view collapses to one column or row
    """
    start = time.time()
    logger.info(
        f"Drawing {'full extent' if request.full_extent else 'region'} view at "
        f"({request.center_lat}, {request.center_lng}), zoom={request.effective_zoom}, "
        f"quality={request.quality}, levels={request.levels}"
    )

    samples = sample_viewport(request, raster)
    payload = classify(samples, request.levels, request.gray_scale)

    logger.info(
        f"Map ready in {time.time() - start:.2f}s: "
        f"cell {payload.cell_delta_x:.2f} x {payload.cell_delta_y:.2f} px"
    )
    return payload
