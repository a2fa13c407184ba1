"""Tests for image to density conversion."""
import pytest
import numpy as np
from PIL import Image

from stipplevec.raster_ingest import load_density, density_from_array
from stipplevec.types import ImageLoadError, InvalidGeometryError


class TestLoadDensity:
    """Test loading density fields from files."""

    def test_grayscale_png(self, tmp_path):
        """Black maps to density 1, white to 0."""
        path = tmp_path / "checker.png"
        Image.fromarray(np.array([[0, 255], [255, 0]], dtype=np.uint8)).save(path)

        field = load_density(path)

        assert (field.width, field.height) == (2, 2)
        np.testing.assert_allclose(field.data, [[1.0, 0.0], [0.0, 1.0]])

    def test_rgb_reduced_to_one_channel(self, tmp_path):
        """Color images are converted to luminance."""
        path = tmp_path / "gray.png"
        Image.new('RGB', (4, 3), (128, 128, 128)).save(path)

        field = load_density(path)

        assert (field.width, field.height) == (4, 3)
        np.testing.assert_allclose(field.data, 1.0 - 128 / 255.0)

    def test_transparent_is_empty(self, tmp_path):
        """Fully transparent pixels carry no density."""
        path = tmp_path / "clear.png"
        Image.new('RGBA', (3, 3), (0, 0, 0, 0)).save(path)

        field = load_density(path)

        assert np.all(field.data == 0.0)

    def test_missing_file(self, tmp_path):
        """Missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_density(tmp_path / "nope.png")

    def test_undecodable_file(self, tmp_path):
        """Garbage data raises ImageLoadError."""
        path = tmp_path / "bad.png"
        path.write_bytes(b"not an image")

        with pytest.raises(ImageLoadError):
            load_density(path)

    def test_directory(self, tmp_path):
        """A directory is not an image."""
        with pytest.raises(ImageLoadError):
            load_density(tmp_path)


class TestDensityFromArray:
    """Test building density fields from arrays."""

    def test_float_array(self):
        """Float brightness in [0, 1] is inverted."""
        field = density_from_array(np.array([[0.0, 0.25], [0.5, 1.0]]))
        np.testing.assert_allclose(field.data, [[1.0, 0.75], [0.5, 0.0]])

    def test_uint8_array(self):
        """Integer arrays default to a 255 maximum."""
        field = density_from_array(np.array([[255, 0]], dtype=np.uint8))
        np.testing.assert_allclose(field.data, [[0.0, 1.0]])

    def test_field_is_read_only(self):
        """The density data cannot be modified in place."""
        field = density_from_array(np.zeros((2, 2)))
        with pytest.raises(ValueError):
            field.data[0, 0] = 0.5

    def test_rejects_bad_shape(self):
        """One-dimensional input is invalid geometry."""
        with pytest.raises(InvalidGeometryError):
            density_from_array(np.zeros(5))

    def test_rejects_empty(self):
        """Zero-sized images are invalid geometry."""
        with pytest.raises(InvalidGeometryError):
            density_from_array(np.zeros((0, 4)))
