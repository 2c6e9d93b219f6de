"""
Command-line entry point for rendering elevation maps.

Examples:
  # Whole globe with the default raster
  topoview

  # Everest region, finer sampling, 40 gray bands, with a legend
  topoview --point Everest --quality 1 --levels 40 --gray-scale --legend

  # Every point of interest plus the full map, keeping JSON payloads
  topoview --point all --json --output-dir ./maps

  # Re-render a saved payload
  topoview --from-json maps/everest.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from src.config import (
    DEFAULT_LEVELS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_QUALITY,
    DEFAULT_RASTER,
    DEFAULT_ZOOM,
    OUTPUT_DIR,
    POINTS,
)
from src.topoview.classification import DegenerateViewportError
from src.topoview.data_loading import RasterMetadataError, load_raster
from src.topoview.pipeline import ViewSettings, draw_map, view_request_for
from src.topoview.rendering import plot_render, render_canvas, render_payload_dict, save_canvas

logger = logging.getLogger(__name__)

FULL_MAP = "full"
ALL_VIEWS = "all"


def view_slug(point: Optional[str]) -> str:
    """File-name stem for a view."""
    if point is None:
        return "full_extent"
    return point.lower().replace(" ", "_")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="topoview",
        description="Render a global elevation raster as banded color maps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1],
    )
    parser.add_argument(
        "--raster",
        type=Path,
        default=DEFAULT_RASTER,
        help=f"Elevation GeoTIFF or directory containing one (default: {DEFAULT_RASTER})",
    )
    parser.add_argument(
        "--point",
        choices=[FULL_MAP, ALL_VIEWS, *POINTS],
        default=FULL_MAP,
        help="Point of interest to center on, 'full' for the whole map, 'all' for every view",
    )
    parser.add_argument("--zoom", type=float, default=DEFAULT_ZOOM, help="Zoom level, 0-1")
    parser.add_argument("--quality", type=int, default=DEFAULT_QUALITY, help="Sampling stride, 1-6")
    parser.add_argument("--levels", type=int, default=DEFAULT_LEVELS, help="Color levels, 2-100")
    parser.add_argument("--gray-scale", action="store_true", help="Use gray bands")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=OUTPUT_DIR,
        help=f"Output directory (default: {OUTPUT_DIR})",
    )
    parser.add_argument("--json", action="store_true", help="Also write each payload as JSON")
    parser.add_argument("--legend", action="store_true", help="Save figures with an elevation legend")
    parser.add_argument("--from-json", type=Path, help="Render a saved JSON payload instead")
    parser.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Logging level")
    return parser


def _selected_points(choice: str) -> List[Optional[str]]:
    if choice == ALL_VIEWS:
        return [None, *POINTS]
    if choice == FULL_MAP:
        return [None]
    return [choice]


def render_views(args: argparse.Namespace) -> List[Path]:
    """Load the raster once and render every selected view."""
    raster = load_raster(args.raster)
    settings = ViewSettings(
        zoom=args.zoom,
        quality=args.quality,
        levels=args.levels,
        gray_scale=args.gray_scale,
    )
    args.output_dir.mkdir(parents=True, exist_ok=True)

    points = _selected_points(args.point)
    outputs = []
    for point in tqdm(points, desc="Rendering views", disable=len(points) == 1):
        request = view_request_for(point, settings)
        payload = draw_map(request, raster)
        stem = view_slug(point)

        image_path = args.output_dir / f"{stem}.png"
        if args.legend:
            plot_render(payload, image_path, title=point or "Full map")
        else:
            save_canvas(render_canvas(payload), image_path)
        outputs.append(image_path)

        if args.json:
            json_path = args.output_dir / f"{stem}.json"
            json_path.write_text(json.dumps(payload.to_dict()))
            logger.info(f"Saved payload to {json_path}")
            outputs.append(json_path)

    return outputs


def render_saved_payload(args: argparse.Namespace) -> List[Path]:
    data = json.loads(args.from_json.read_text())
    image_path = args.output_dir / f"{args.from_json.stem}.png"
    return [save_canvas(render_payload_dict(data), image_path)]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s: %(message)s",
    )

    try:
        if args.from_json is not None:
            outputs = render_saved_payload(args)
        else:
            outputs = render_views(args)
    except (RasterMetadataError, DegenerateViewportError) as e:
        logger.error(f"Cannot render map: {e}")
        return 1
    except (ValueError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1

    logger.info(f"Wrote {len(outputs)} file(s) to {args.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
