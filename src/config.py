"""Configuration module for topoview project.

Centralizes data paths, canvas geometry and viewer settings.
"""
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
DEM_DIR = DATA_DIR / "dem"
OUTPUT_DIR = DATA_DIR / "output"

# Global elevation raster rendered by default
DEFAULT_RASTER = DEM_DIR / "open-topo-data.tif"

# Fixed screen space every view is projected onto
SCREEN_WIDTH = 1920
SCREEN_HEIGHT = 1080

# Observed Earth extremes (Challenger Deep, Everest) in meters
MIN_ELEVATION = -10921
MAX_ELEVATION = 8849

# Viewer input limits (min, max)
ZOOM_RANGE = (0, 1)
QUALITY_RANGE = (1, 6)
LEVELS_RANGE = (2, 100)

# Viewer defaults
DEFAULT_ZOOM = 1
DEFAULT_QUALITY = 1
DEFAULT_LEVELS = 100

# Points of interest as (lat, lng)
POINTS = {
    "Null Island": (0.0, 0.0),
    "Everest": (27.988093, 86.924972),
    "Mariana Trench": (11.346521, 142.197337),
}

# Default settings
DEFAULT_RASTER_PATTERN = "*.tif"
DEFAULT_LOG_LEVEL = "INFO"
