"""
Shared fixtures: a small scene that solves quickly at coarse precision.
"""
import logging

import pytest

from wakeenclosure.model import Sensor, Vessel, box


@pytest.fixture
def small_domain():
    return box([(-10, 10), (-5, 5), (-4, 4)])


@pytest.fixture
def small_sensors():
    return [Sensor(-7.0, 3.0), Sensor(-2.0, -4.0), Sensor(4.0, 1.0), Sensor(8.0, -2.0)]


@pytest.fixture
def small_vessels():
    return [Vessel(-6.0, 2.0, 2.0), Vessel(5.0, -3.0, -1.5)]


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs attach handlers to captured streams; drop them after each test."""
    yield
    logger = logging.getLogger("wakeenclosure")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
