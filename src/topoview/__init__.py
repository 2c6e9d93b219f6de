"""
Elevation map viewer package.

Core functionality:
- Raster loading with a geographic -> cell affine lookup
- Equirectangular screen projection and coordinate wrapping
- Adaptive viewport sampling
- Elevation band classification and coloring
- Canvas rendering of classified maps
"""

from .data_loading import Raster, RasterMetadataError, load_raster, raster_from_array
from .sampling import BoundingBox, Sample, ViewportSamples, ViewRequest, sample_viewport
from .color_mapping import HeightBand, build_height_bands, generate_color_range
from .classification import DegenerateViewportError, RenderPayload, classify
from .pipeline import ViewSettings, draw_map, view_request_for
from .rendering import render_canvas

__all__ = [
    "Raster",
    "RasterMetadataError",
    "load_raster",
    "raster_from_array",
    "BoundingBox",
    "Sample",
    "ViewportSamples",
    "ViewRequest",
    "sample_viewport",
    "HeightBand",
    "build_height_bands",
    "generate_color_range",
    "DegenerateViewportError",
    "RenderPayload",
    "classify",
    "ViewSettings",
    "draw_map",
    "view_request_for",
    "render_canvas",
]
