"""Raster image ingestion into a density field."""
import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np
from PIL import Image
from PIL import ImageOps

from stipplevec.types import DensityField, ImageLoadError, InvalidGeometryError

logger = logging.getLogger(__name__)


def brightness_to_density(brightness: np.ndarray, max_value: float) -> np.ndarray:
    """
    Map brightness samples to density.

    Args:
        brightness: Sample values in [0, max_value]
        max_value: Largest representable sample value

    Returns:
        Density values in [0, 1], darker pixels higher
    """
    density = 1.0 - brightness.astype(np.float64) / float(max_value)
    return np.clip(density, 0.0, 1.0)


def load_density(path: Union[str, Path]) -> DensityField:
    """
    Load an image file as a density field.

    The image is reduced to a single luminance channel; transparent
    pixels are composited on white first so they carry no density.

    Args:
        path: Path to image file

    Returns:
        DensityField with one weight per pixel

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
                img = img.convert('RGBA')
                background = Image.new('RGBA', img.size, (255, 255, 255, 255))
                img = Image.alpha_composite(background, img)

            gray = np.array(img.convert('L'))

    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}")

    logger.info(f"Loaded {path.name}: {gray.shape[1]}x{gray.shape[0]}")

    return DensityField(brightness_to_density(gray, 255.0))


def density_from_array(image: np.ndarray, max_value: Optional[float] = None) -> DensityField:
    """
    Create a DensityField from a brightness array.

    Args:
        image: Brightness array (H, W), (H, W, 3) or (H, W, 4)
        max_value: Sample maximum; 255 for integer arrays, 1.0 for floats

    Returns:
        DensityField
    """
    image = np.asarray(image)

    if image.ndim == 3:
        if image.shape[2] not in (3, 4):
            raise InvalidGeometryError(f"Expected 3 or 4 channels, got {image.shape[2]}")
        # Alpha is ignored; channels are averaged
        image = image[..., :3].mean(axis=2)

    if image.ndim != 2:
        raise InvalidGeometryError(f"Expected 2D or 3D array, got {image.ndim}D")

    if max_value is None:
        max_value = 255.0 if np.issubdtype(image.dtype, np.integer) else 1.0

    if max_value <= 0:
        raise InvalidGeometryError(f"max_value must be positive, got {max_value}")

    return DensityField(brightness_to_density(image, max_value))
