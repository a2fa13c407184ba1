"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from stipplevec.types import DensityField, Site


@pytest.fixture
def uniform_field():
    """10x10 field of density 0.5."""
    return DensityField(np.full((10, 10), 0.5))


@pytest.fixture
def quadrant_sites():
    """One site at the center of each 5x5 quadrant of a 10x10 image."""
    return [Site(2.0, 2.0), Site(7.0, 2.0), Site(2.0, 7.0), Site(7.0, 7.0)]


@pytest.fixture
def random_field():
    """Reproducible non-uniform 24x16 field."""
    rng = np.random.default_rng(7)
    return DensityField(rng.uniform(0.05, 1.0, size=(16, 24)))
