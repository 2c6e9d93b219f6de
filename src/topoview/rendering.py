"""
Raster rendering of classified map payloads.

Paints one filled cell per sample onto a fixed-size RGB canvas and writes it
out as a PNG, optionally as a figure with an elevation legend.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from src.config import SCREEN_HEIGHT, SCREEN_WIDTH
from src.topoview.classification import RenderPayload
from src.topoview.color_mapping import band_colormap

logger = logging.getLogger(__name__)

_RGB_PATTERN = re.compile(r"^\s*rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)\s*$")


def parse_rgb(color: str) -> Tuple[int, int, int]:
    """
    Parse an ``rgb(r,g,b)`` color string.

    Raises:
        ValueError: If the string is malformed or a channel exceeds 255
    """
    match = _RGB_PATTERN.match(color)
    if match is None:
        raise ValueError(f"Not an rgb() color: {color!r}")

    rgb = tuple(int(channel) for channel in match.groups())
    if any(channel > 255 for channel in rgb):
        raise ValueError(f"Color channel out of range in {color!r}")
    return rgb


def _pixel(value: float) -> int:
    return int(np.floor(value + 0.5))


def paint_groups(
    groups: Iterable[Tuple[Tuple[int, int, int], Sequence]],
    cell_delta_x: float,
    cell_delta_y: float,
    width: int = SCREEN_WIDTH,
    height: int = SCREEN_HEIGHT,
    background: Tuple[int, int, int] = (255, 255, 255),
) -> np.ndarray:
    """
    Paint colored point groups onto an RGB canvas.

    Every point becomes a filled ``cell_delta_x`` x ``cell_delta_y`` rectangle
    anchored at its top-left corner, snapped to whole pixels and clipped to the
    canvas. Groups are painted in order, later groups on top.

    Args:
        groups: (rgb, points) pairs, points as (x, y, elevation) in screen space
        cell_delta_x: Cell width in screen pixels
        cell_delta_y: Cell height in screen pixels
        width: Canvas width in pixels; screen space is scaled to fit
        height: Canvas height in pixels
        background: Fill color for unpainted pixels

    Returns:
        Array of shape (height, width, 3) as uint8
    """
    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = background

    scale_x = width / SCREEN_WIDTH
    scale_y = height / SCREEN_HEIGHT
    cell_w = cell_delta_x * scale_x
    cell_h = cell_delta_y * scale_y

    painted = 0
    for rgb, points in groups:
        for x, y, _ in points:
            x0 = _pixel(x * scale_x)
            y0 = _pixel(y * scale_y)
            x1 = max(x0 + 1, _pixel(x * scale_x + cell_w))
            y1 = max(y0 + 1, _pixel(y * scale_y + cell_h))
            x0, x1 = max(x0, 0), min(x1, width)
            y0, y1 = max(y0, 0), min(y1, height)
            if x0 < x1 and y0 < y1:
                canvas[y0:y1, x0:x1] = rgb
                painted += 1

    logger.debug(f"Painted {painted} cells of {cell_w:.2f} x {cell_h:.2f} px")
    return canvas


def render_canvas(payload: RenderPayload, **kwargs) -> np.ndarray:
    """Paint a payload band by band, lowest elevation first. See :func:`paint_groups`."""
    groups = (
        (band.rgb, payload.band_groups.get(band.index, []))
        for band in payload.bands
    )
    return paint_groups(groups, payload.cell_delta_x, payload.cell_delta_y, **kwargs)


def render_payload_dict(data: dict, **kwargs) -> np.ndarray:
    """
    Paint a payload in its ``to_dict()`` wire shape, e.g. reloaded from JSON.

    Raises:
        ValueError: If a group key is not an rgb() color or a field is missing
    """
    try:
        height_groups = data["heightGroups"]
        cell_delta_x = float(data["cellDeltaX"])
        cell_delta_y = float(data["cellDeltaY"])
    except KeyError as e:
        raise ValueError(f"Payload is missing field {e}") from e

    groups = [(parse_rgb(color), points) for color, points in height_groups.items()]
    return paint_groups(groups, cell_delta_x, cell_delta_y, **kwargs)


def save_canvas(canvas: np.ndarray, output_path: Path) -> Path:
    """Write an RGB canvas to a PNG file."""
    import matplotlib.pyplot as plt

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.imsave(output_path, canvas)
    logger.info(f"Saved map to {output_path}")
    return output_path


def plot_render(
    payload: RenderPayload,
    output_path: Path,
    title: Optional[str] = None,
    dpi: int = 150,
) -> Path:
    """
    Save the painted map as a figure with a colorbar legend of the height bands.

    Args:
        payload: Classified map payload
        output_path: Path to save the figure
        title: Optional figure title
        dpi: Output resolution

    Returns:
        Path to saved figure
    """
    import matplotlib.pyplot as plt
    from matplotlib.cm import ScalarMappable

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    canvas = render_canvas(payload)
    cmap, norm = band_colormap(payload.bands)

    fig, ax = plt.subplots(figsize=(12, 7))
    ax.imshow(canvas)
    ax.set_axis_off()
    if title:
        ax.set_title(title)

    mappable = ScalarMappable(norm=norm, cmap=cmap)
    mappable.set_array([])
    fig.colorbar(mappable, ax=ax, label="Elevation (m)", fraction=0.03, pad=0.02)

    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Saved map figure to {output_path}")
    return output_path
