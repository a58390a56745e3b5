# generate_terrain.py

"""
================================================================================
HEIGHTMAP GENERATOR SCRIPT
================================================================================
This script is a command-line tool for rendering seeded OpenSimplex noise to
grayscale PNG heightmaps. Without a depth it writes a single 2D heightmap;
with a depth it writes one image per slice through 3D noise.

Usage:
    python generate_terrain.py --seed 42 --width 512 --height 512 --output terrain.png
    python generate_terrain.py --config path/to/config.json --depth 32 --workers 4
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import multiprocessing

import numpy as np
from PIL import Image
from tqdm import tqdm

from terragen.generator import TerrainGenerator
from terragen import config as DEFAULTS

EXIT_OK = 0
EXIT_CONFIG_UNREADABLE = 1
EXIT_CONFIG_INVALID = 2
EXIT_WRITE_FAILED = 3

# Command-line flag -> settings key. Flags left unset fall back to the config file.
CLI_OVERRIDES = {
    'seed': 'seed',
    'width': 'width',
    'height': 'height',
    'depth': 'depth',
    'feature_size': 'feature_size',
    'feature_size_x': 'feature_size_x',
    'feature_size_y': 'feature_size_y',
    'feature_size_z': 'feature_size_z',
    'levels': 'levels',
    'workers': 'workers',
    'output': 'output_path',
}


def save_layer_image(layer: np.ndarray, file_path: str, logger: logging.Logger):
    """Encodes a (height, width) uint8 array as an 8-bit grayscale PNG."""
    if os.path.exists(file_path):
        logger.warning(f"Overwriting existing file '{file_path}'")
    # A 2D uint8 array maps to mode "L" (8-bit grayscale).
    img = Image.fromarray(layer)
    img.save(file_path, 'PNG')


def slice_path(output_path: str, index: int) -> str:
    """terrain.png -> terrain_007.png"""
    stem, ext = os.path.splitext(output_path)
    return f"{stem}_{index:0{DEFAULTS.SLICE_INDEX_DIGITS}d}{ext or '.png'}"


def prepare_output_dir(output_path: str, logger: logging.Logger):
    directory = os.path.dirname(os.path.abspath(output_path))
    if not os.path.isdir(directory):
        os.makedirs(directory, exist_ok=True)
        logger.info(f"Created output directory '{directory}' since it did not exist")


# --- Global variables for worker processes ---
worker_generator = None


def init_worker(settings, permutation_table):
    """Initializes the global state for each worker process."""
    global worker_generator

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    # Reuse the parent's table so workers skip the shuffle.
    worker_generator = TerrainGenerator(config=settings, logger=worker_logger, permutation_table=permutation_table)


def process_slice(z_index):
    """
    Computes a single slice. Returns (index, layer); the parent process does
    all file writing.
    """
    return z_index, worker_generator.get_slice(z_index)


def load_config(config_path: str, logger: logging.Logger) -> dict:
    """Reads the 'terrain_parameters' object from a JSON config file."""
    logger.info(f"Loading configuration from: {config_path}")
    with open(config_path, 'r') as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError("top-level JSON value must be an object")
    params = config.get('terrain_parameters', {})
    if not isinstance(params, dict):
        raise ValueError("'terrain_parameters' must be an object")
    return dict(params)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seeded OpenSimplex heightmap generator.")
    parser.add_argument("--config", type=str, help="Path to a JSON configuration file.")
    parser.add_argument("--seed", type=int, help="Unsigned 64-bit seed.")
    parser.add_argument("--width", type=int, help="Image width in pixels.")
    parser.add_argument("--height", type=int, help="Image height in pixels.")
    parser.add_argument("--depth", type=int, help="Number of 3D slices. Omit for a single 2D heightmap.")
    parser.add_argument("--feature-size", type=float, help="Feature size for every axis.")
    parser.add_argument("--feature-size-x", type=float, help="Feature size along x.")
    parser.add_argument("--feature-size-y", type=float, help="Feature size along y.")
    parser.add_argument("--feature-size-z", type=float, help="Feature size along z (3D only).")
    parser.add_argument("--levels", type=int, help="Quantize into this many grey levels.")
    parser.add_argument("--workers", type=int, help="Worker processes for 3D slices.")
    parser.add_argument("--output", type=str, help="Target PNG path.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def generate(generator: TerrainGenerator, logger: logging.Logger) -> list:
    """
    Renders every layer and writes it to disk. Returns the written paths.
    """
    output_path = generator.settings['output_path']
    prepare_output_dir(output_path, logger)

    if not generator.is_volumetric:
        save_layer_image(generator.get_heightmap(), output_path, logger)
        logger.info(f"Heightmap saved to: {output_path}")
        return [output_path]

    written = []
    num_workers = min(generator.settings['workers'], generator.depth)
    if num_workers == 1:
        results_iterator = generator.iter_layers()
        for z_index, layer in tqdm(results_iterator, total=generator.depth, desc="Generating Slices"):
            path = slice_path(output_path, z_index)
            save_layer_image(layer, path, logger)
            written.append(path)
    else:
        logger.info(f"Using {num_workers} worker processes.")
        init_args = (generator.settings, generator.permutation_table)
        with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=init_args) as pool:
            results_iterator = pool.imap_unordered(process_slice, range(generator.depth))
            for z_index, layer in tqdm(results_iterator, total=generator.depth, desc="Generating Slices"):
                path = slice_path(output_path, z_index)
                save_layer_image(layer, path, logger)
                written.append(path)

    logger.info(f"{len(written)} slices saved next to: {output_path}")
    return sorted(written)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("TerraGen")

    # 2. --- Load Configuration ---
    settings = {}
    if args.config:
        try:
            settings = load_config(args.config, logger)
        except (OSError, ValueError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return EXIT_CONFIG_UNREADABLE

    for arg_name, key in CLI_OVERRIDES.items():
        value = getattr(args, arg_name)
        if value is not None:
            settings[key] = value

    # 3. --- Initialize the Generator ---
    try:
        generator = TerrainGenerator(config=settings, logger=logger)
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        return EXIT_CONFIG_INVALID

    # 4. --- Generate & Write ---
    start_time = time.perf_counter()
    try:
        generate(generator, logger)
    except OSError as e:
        logger.critical(f"Failed to write output: {e}", exc_info=True)
        return EXIT_WRITE_FAILED

    end_time = time.perf_counter()
    logger.info(f"Generation complete! Total time: {end_time - start_time:.2f} seconds.")
    return EXIT_OK


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
