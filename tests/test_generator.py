import numpy as np
import pytest

from terragen import config as DEFAULTS
from terragen.generator import TerrainGenerator
from terragen.permutation import PermutationTable


def small(**overrides):
    config = {'width': 24, 'height': 16}
    config.update(overrides)
    return config


def test_defaults_applied(logger):
    gen = TerrainGenerator(config={}, logger=logger)
    assert gen.seed == DEFAULTS.DEFAULT_SEED
    assert (gen.width, gen.height) == (DEFAULTS.DEFAULT_WIDTH, DEFAULTS.DEFAULT_HEIGHT)
    assert gen.settings['feature_size_x'] == DEFAULTS.DEFAULT_FEATURE_SIZE
    assert not gen.is_volumetric


def test_feature_size_shorthand_sets_every_axis(logger):
    gen = TerrainGenerator(config=small(feature_size=40.0, feature_size_z=5.0), logger=logger)
    assert gen.settings['feature_size_x'] == 40.0
    assert gen.settings['feature_size_y'] == 40.0
    assert gen.settings['feature_size_z'] == 5.0


@pytest.mark.parametrize("overrides", [
    {'feature_size_x': 0.0},
    {'feature_size_y': -3.0},
    {'feature_size': 0},
    {'width': 0},
    {'height': -1},
    {'depth': 0},
    {'levels': -1},
    {'workers': 0},
    {'seed': -5},
    {'seed': 2**64},
    {'feature_size_x': float('nan')},
    {'feature_size': float('inf')},
    {'feature_size_z': float('-inf')},
    {'feature_size_y': True},
    {'seed': True},
    {'width': True},
    {'depth': False},
    {'levels': True},
    {'workers': True},
])
def test_invalid_settings_rejected(logger, overrides):
    with pytest.raises(ValueError):
        TerrainGenerator(config=small(**overrides), logger=logger)


def test_heightmap_shape_and_type(logger):
    layer = TerrainGenerator(config=small(), logger=logger).get_heightmap()
    assert layer.shape == (16, 24)
    assert layer.dtype == np.uint8


def test_heightmap_is_deterministic(logger):
    a = TerrainGenerator(config=small(seed=123), logger=logger).get_heightmap()
    b = TerrainGenerator(config=small(seed=123), logger=logger).get_heightmap()
    c = TerrainGenerator(config=small(seed=456), logger=logger).get_heightmap()
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_heightmap_matches_noise_field(logger):
    gen = TerrainGenerator(config=small(feature_size=8.0), logger=logger)
    layer = gen.get_heightmap()
    value = gen.noise_field.noise2d(5.0, 3.0, 8.0, 8.0)
    assert layer[3, 5] == int(np.clip((value + 1.0) / 2.0 * 255.0, 0, 255))


def test_levels_limit_grey_values(logger):
    layer = TerrainGenerator(config=small(levels=3, feature_size=4.0), logger=logger).get_heightmap()
    assert set(np.unique(layer).tolist()) <= {0, 85, 170, 255}


def test_slices(logger):
    gen = TerrainGenerator(config=small(depth=3, feature_size=6.0), logger=logger)
    assert gen.is_volumetric
    layers = list(gen.iter_layers())
    assert [index for index, _ in layers] == [0, 1, 2]
    assert all(layer.shape == (16, 24) for _, layer in layers)
    assert not np.array_equal(layers[0][1], layers[2][1])
    assert np.array_equal(layers[1][1], gen.get_slice(1))


def test_slice_requires_depth(logger):
    with pytest.raises(ValueError):
        TerrainGenerator(config=small(), logger=logger).get_slice(0)


def test_slice_index_out_of_range(logger):
    gen = TerrainGenerator(config=small(depth=2), logger=logger)
    with pytest.raises(IndexError):
        gen.get_slice(2)


def test_2d_mode_yields_single_layer(logger):
    layers = list(TerrainGenerator(config=small(), logger=logger).iter_layers())
    assert len(layers) == 1 and layers[0][0] == 0


def test_injected_permutation_table(logger):
    table = PermutationTable.from_seed(77)
    gen = TerrainGenerator(config=small(seed=1), logger=logger, permutation_table=table)
    assert gen.permutation_table is table
    seeded = TerrainGenerator(config=small(seed=77), logger=logger)
    assert np.array_equal(gen.get_heightmap(), seeded.get_heightmap())
