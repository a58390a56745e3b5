# terragen/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the terrain
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC HEIGHTMAP.
Instead, pass a configuration dictionary to the TerrainGenerator instance.
================================================================================
"""

# --- Noise Generation ---
DEFAULT_SEED = 1
# Seeds are unsigned 64-bit integers.
MAX_SEED = 2**64 - 1

# Feature size divides the input coordinates before sampling. A larger number
# means larger, smoother features. Given in pixels (or slices for Z).
DEFAULT_FEATURE_SIZE = 25.0

# --- Output Grid ---
DEFAULT_WIDTH = 256
DEFAULT_HEIGHT = 256
# None produces a single 2D heightmap. Any integer >= 1 produces a stack of
# slices through 3D noise, one image per slice.
DEFAULT_DEPTH = None

# --- Quantization ---
# None disables quantization. Otherwise, the number of equal-width grey bands.
DEFAULT_LEVELS = None

# The byte range written to the grayscale image.
PIXEL_MIN = 0.0
PIXEL_MAX = 255.0

# --- Output & Performance ---
DEFAULT_OUTPUT_PATH = "terrain.png"
DEFAULT_WORKERS = 1
# Slices are numbered with this many digits, e.g. terrain_007.png
SLICE_INDEX_DIGITS = 3
