# terragen/quantize.py

"""
================================================================================
QUANTIZATION & PIXEL CONVERSION
================================================================================
Discretizes continuous samples into equal-width bands and converts noise into
grayscale pixel bytes.

Data Contract:
---------------
- Inputs:
    - Samples (scalars or NumPy arrays), a [min, max] range and a level count.
- Outputs:
    - quantize / quantize_array: The lower edge of each sample's band. Values
      are NOT clamped; inputs outside [min, max] map outside it too.
    - noise_to_pixels: A uint8 array, always within [0, 255].
- Side Effects: None.
================================================================================
"""

import math

import numpy as np

from . import config as DEFAULTS


def quantize(value: float, min_value: float, max_value: float, levels: int) -> float:
    """
    Snaps value down to a multiple of (max_value - min_value) / levels.
    levels == 0 yields 0.0.
    """
    if levels == 0:
        return 0.0
    step_size = (max_value - min_value) / levels
    return math.floor(value / step_size) * step_size


def quantize_array(values: np.ndarray, min_value: float, max_value: float, levels: int) -> np.ndarray:
    """Element-wise quantize for NumPy arrays."""
    values = np.asarray(values, dtype=np.float64)
    if levels == 0:
        return np.zeros_like(values)
    step_size = (max_value - min_value) / levels
    return np.floor(values / step_size) * step_size


def noise_to_pixels(noise_values: np.ndarray, levels: int = None) -> np.ndarray:
    """
    Maps noise in [-1, 1] onto grey values in [0, 255], optionally quantized
    into `levels` bands, and clamps the result into the byte range.
    """
    grey = (np.asarray(noise_values, dtype=np.float64) + 1.0) / 2.0 * DEFAULTS.PIXEL_MAX
    if levels is not None:
        grey = quantize_array(grey, DEFAULTS.PIXEL_MIN, DEFAULTS.PIXEL_MAX, levels)
    return np.clip(grey, DEFAULTS.PIXEL_MIN, DEFAULTS.PIXEL_MAX).astype(np.uint8)
