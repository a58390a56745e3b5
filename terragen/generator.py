# terragen/generator.py

"""
================================================================================
CORE TERRAIN GENERATOR
================================================================================
This module contains the main TerrainGenerator class, responsible for turning a
configuration into raw noise and grayscale pixel layers.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of parameters which can override the
      internal defaults. Expected keys include 'seed', 'width', 'height',
      'depth', 'feature_size_x', 'levels', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - NumPy float arrays of raw noise in [-1, 1].
    - NumPy uint8 arrays of shape (height, width), one per image or slice.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is deterministic.
================================================================================
"""

import logging
import math

import numpy as np

from . import config as DEFAULTS
from .noise import NoiseField
from .permutation import PermutationTable
from .quantize import noise_to_pixels


class TerrainGenerator:
    """
    Generates heightmap layers from seeded OpenSimplex noise.
    This class is backend-only and does not read or write any files.
    """
    def __init__(self, config: dict, logger: logging.Logger, permutation_table: PermutationTable = None):
        """
        Initializes the terrain generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            permutation_table (PermutationTable, optional): A pre-computed
                table. If None, one will be generated from the seed.

        Raises:
            ValueError: If any setting is out of range.
        """
        self.logger = logger
        self.user_config = config
        self.logger.info("TerrainGenerator initializing...")

        # --- Consolidate Configuration ---
        feature_size = self.user_config.get('feature_size', DEFAULTS.DEFAULT_FEATURE_SIZE)
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'width': self.user_config.get('width', DEFAULTS.DEFAULT_WIDTH),
            'height': self.user_config.get('height', DEFAULTS.DEFAULT_HEIGHT),
            'depth': self.user_config.get('depth', DEFAULTS.DEFAULT_DEPTH),
            'feature_size_x': self.user_config.get('feature_size_x', feature_size),
            'feature_size_y': self.user_config.get('feature_size_y', feature_size),
            'feature_size_z': self.user_config.get('feature_size_z', feature_size),
            'levels': self.user_config.get('levels', DEFAULTS.DEFAULT_LEVELS),
            'workers': self.user_config.get('workers', DEFAULTS.DEFAULT_WORKERS),
            'output_path': self.user_config.get('output_path', DEFAULTS.DEFAULT_OUTPUT_PATH),
        }
        self._validate_settings()

        # --- Public Properties for easy access ---
        self.seed = self.settings['seed']
        self.width = self.settings['width']
        self.height = self.settings['height']
        self.depth = self.settings['depth']
        self.is_volumetric = self.depth is not None

        # --- Initialize Noise ---
        if permutation_table is not None:
            self.noise_field = NoiseField(self.seed, table=permutation_table)
            self.logger.debug("Initialized with injected permutation table.")
        else:
            self.logger.debug("No permutation table provided, generating new one from seed.")
            self.noise_field = NoiseField(self.seed)

        # --- Expose the permutation table for worker processes ---
        self.permutation_table = self.noise_field.table

        self.logger.info(f"TerrainGenerator initialized with seed: {self.seed}")
        if self.is_volumetric:
            self.logger.info(f"Grid: {self.width}x{self.height}x{self.depth} (3D, {self.depth} slices)")
        else:
            self.logger.info(f"Grid: {self.width}x{self.height} (2D)")
        self.logger.debug(
            f"Feature sizes: x={self.settings['feature_size_x']}, "
            f"y={self.settings['feature_size_y']}, z={self.settings['feature_size_z']}; "
            f"levels={self.settings['levels']}"
        )

    def _validate_settings(self):
        """Rejects configurations the noise engine has no defined behavior for."""
        s = self.settings
        if not _is_integer(s['seed']) or not 0 <= s['seed'] <= DEFAULTS.MAX_SEED:
            raise ValueError(f"seed must be an unsigned 64-bit integer, got {s['seed']!r}")
        for key in ('width', 'height'):
            if not _is_integer(s[key]) or s[key] <= 0:
                raise ValueError(f"{key} must be a positive integer, got {s[key]!r}")
        if s['depth'] is not None and (not _is_integer(s['depth']) or s['depth'] < 1):
            raise ValueError(f"depth must be None or an integer >= 1, got {s['depth']!r}")
        for key in ('feature_size_x', 'feature_size_y', 'feature_size_z'):
            value = s[key]
            # NaN fails every comparison and inf flattens the field.
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or value <= 0:
                raise ValueError(f"{key} must be a positive finite number, got {value!r}")
        if s['levels'] is not None and (not _is_integer(s['levels']) or s['levels'] < 0):
            raise ValueError(f"levels must be None or a non-negative integer, got {s['levels']!r}")
        if not _is_integer(s['workers']) or s['workers'] < 1:
            raise ValueError(f"workers must be an integer >= 1, got {s['workers']!r}")

    def get_coordinate_grid(self):
        """
        Integer pixel coordinates: cell (row, col) samples the noise at (col, row).
        Returns (x_coords, y_coords), each of shape (height, width).
        """
        x_coords = np.arange(self.width, dtype=np.float64)
        y_coords = np.arange(self.height, dtype=np.float64)
        return np.meshgrid(x_coords, y_coords)

    def get_noise(self, x_coords: np.ndarray, y_coords: np.ndarray, z: float = None) -> np.ndarray:
        """
        Raw noise over the given grid. With z=None this is 2D noise, otherwise
        the slice of 3D noise at depth z.
        """
        if z is None:
            return self.noise_field.sample_2d(
                x_coords, y_coords,
                self.settings['feature_size_x'], self.settings['feature_size_y']
            )
        return self.noise_field.sample_3d(
            x_coords, y_coords, z,
            self.settings['feature_size_x'], self.settings['feature_size_y'],
            self.settings['feature_size_z']
        )

    def get_heightmap(self) -> np.ndarray:
        """The full 2D heightmap as grayscale bytes, shape (height, width)."""
        x_grid, y_grid = self.get_coordinate_grid()
        noise_values = self.get_noise(x_grid, y_grid)
        return noise_to_pixels(noise_values, self.settings['levels'])

    def get_slice(self, z_index: int) -> np.ndarray:
        """One slice of the 3D volume as grayscale bytes, shape (height, width)."""
        if not self.is_volumetric:
            raise ValueError("get_slice requires a 'depth' setting; use get_heightmap for 2D output.")
        if not 0 <= z_index < self.depth:
            raise IndexError(f"Slice index {z_index} out of range for depth {self.depth}.")
        x_grid, y_grid = self.get_coordinate_grid()
        noise_values = self.get_noise(x_grid, y_grid, z=float(z_index))
        return noise_to_pixels(noise_values, self.settings['levels'])

    def iter_layers(self):
        """
        Yields (index, layer) for every output image: a single (0, heightmap)
        in 2D mode, or one entry per slice in 3D mode.
        """
        if not self.is_volumetric:
            yield 0, self.get_heightmap()
            return
        for z_index in range(self.depth):
            yield z_index, self.get_slice(z_index)


def _is_integer(value) -> bool:
    # bool is a subclass of int, but True is not a seed or a size.
    return isinstance(value, int) and not isinstance(value, bool)
