# terragen/__init__.py

# This file makes the 'terragen' directory a Python package.
# We also use it to define the public API of the package.

from .random_source import SeededGenerator
from .permutation import PermutationTable, build_permutation_table
from .noise import NoiseField
from .quantize import quantize, quantize_array, noise_to_pixels
from .generator import TerrainGenerator

__all__ = [
    "SeededGenerator",
    "PermutationTable",
    "build_permutation_table",
    "NoiseField",
    "quantize",
    "quantize_array",
    "noise_to_pixels",
    "TerrainGenerator",
]
