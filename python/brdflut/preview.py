"""8-bit PNG previews of BRDF lookup tables."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from . import _validate
from .lut import LutImage

logger = logging.getLogger(__name__)


def lut_to_rgb8(lut: LutImage) -> np.ndarray:
    """
    Convert a LUT to an 8-bit RGB image in texture orientation.

    Red holds the scale ``A``, green the bias ``B``, blue is zero. Values
    are clipped to [0, 1]; non-finite values become 0.

    Args:
        lut: Populated lookup table

    Returns:
        uint8 array of shape (size, size, 3)
    """
    texels = lut.to_texture().to_array()
    texels = np.nan_to_num(texels, nan=0.0, posinf=1.0, neginf=0.0)
    rgb = np.zeros((lut.size, lut.size, 3), dtype=np.float32)
    rgb[..., :2] = np.clip(texels, 0.0, 1.0)
    return np.round(rgb * 255.0).astype(np.uint8)


def save_preview_png(lut: LutImage, filepath: Union[str, Path]) -> Path:
    """Save :func:`lut_to_rgb8` output as a PNG."""
    filepath = _validate.png_path(filepath)
    image = Image.fromarray(lut_to_rgb8(lut))
    image.save(filepath)
    logger.info(f"Saved BRDF LUT preview: {filepath}")
    return filepath
