"""Tests for core types and configuration."""
import pytest
import numpy as np

from stipplevec.types import (
    Cell,
    ConfigError,
    DensityField,
    InvalidGeometryError,
    Site,
    StippleConfig,
)


class TestDensityField:
    """Test density field validation."""

    def test_dimensions_and_indexing(self):
        """Indexing is (x, y) over a row-major grid."""
        field = DensityField(np.array([[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]))

        assert field.width == 3
        assert field.height == 2
        assert field[2, 1] == pytest.approx(0.6)

    def test_copy_on_construction(self):
        """Later changes to the source array do not leak in."""
        source = np.zeros((2, 2))
        field = DensityField(source)
        source[0, 0] = 1.0

        assert field[0, 0] == 0.0

    @pytest.mark.parametrize("data", [
        np.zeros((0, 3)),
        np.zeros(4),
        np.full((2, 2), 1.5),
        np.full((2, 2), np.nan),
    ])
    def test_invalid_data(self, data):
        """Bad shapes and out-of-range values are rejected."""
        with pytest.raises(InvalidGeometryError):
            DensityField(data)


class TestCell:
    """Test cell defaults."""

    def test_zero_initialized(self):
        """A fresh cell is empty with a (0, 0) centroid."""
        cell = Cell()

        assert cell.pixel_count == 0
        assert cell.density_mass == 0.0
        assert cell.centroid == Site(0.0, 0.0)
        assert cell.is_empty
        assert cell.mean_density == 0.0

    def test_mean_density(self):
        """Mean density is mass over pixel count."""
        assert Cell(4, 2.0, Site(1.0, 1.0)).mean_density == pytest.approx(0.5)


class TestStippleConfig:
    """Test configuration validation."""

    def test_defaults_valid(self):
        """Default thresholds are 300 and 500."""
        config = StippleConfig()
        config.validate()

        assert config.lower_threshold == 300.0
        assert config.upper_threshold == 500.0

    @pytest.mark.parametrize("kwargs", [
        {"lower_threshold": 600.0},
        {"lower_threshold": -1.0},
        {"split_count": 0},
        {"initial_sites": 0},
        {"min_path_length": 0},
        {"max_path_length": 3},
        {"max_iterations": 0},
    ])
    def test_invalid(self, kwargs):
        """Inconsistent settings raise ConfigError."""
        with pytest.raises(ConfigError):
            StippleConfig(**kwargs).validate()
