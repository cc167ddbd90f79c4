from datetime import datetime, timezone

import numpy as np
import pytest

from model.advection import create_layer
from model.ephemeris import compute_solar_context
from model.simulation import create_context


def to_ms(*args):
    return datetime(*args, tzinfo=timezone.utc).timestamp() * 1000.0


@pytest.fixture
def utc_ms():
    """UTC calendar fields -> epoch milliseconds."""
    return to_ms


@pytest.fixture
def solstice():
    return compute_solar_context(to_ms(2024, 6, 21, 12, 0, 0))


@pytest.fixture
def december():
    return compute_solar_context(to_ms(2024, 12, 21, 12, 0, 0))


@pytest.fixture
def wind_layer():
    return create_layer("wind", 300, np.random.default_rng(7))


@pytest.fixture
def current_layer():
    return create_layer("current", 300, np.random.default_rng(8))


@pytest.fixture
def context():
    return create_context(virtual_time_ms=to_ms(2024, 6, 21, 12, 0, 0),
                          time_scale=600, wind_count=200, current_count=150)
