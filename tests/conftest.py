import logging

import pytest

from terragen.noise import NoiseField


@pytest.fixture
def logger():
    return logging.getLogger("terragen-tests")


@pytest.fixture(scope="session")
def field():
    return NoiseField(seed=1)
