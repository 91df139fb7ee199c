"""
Image Utilities for bg-remove
=============================
"""

from pathlib import Path
from typing import Tuple, Union

import cv2
import numpy as np
from PIL import Image


def load_rgb(path: Union[str, Path]) -> np.ndarray:
    """
    Load an image as HxWx3 uint8 RGB.

    Any alpha channel is dropped.
    """
    with Image.open(path) as img:
        return np.array(img.convert("RGB"))


def save_image(
    image: np.ndarray,
    path: Union[str, Path],
) -> None:
    """
    Save an image to disk.

    Args:
        image: HxW, HxWx3 or HxWx4 array
        path: Output path (format from suffix)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Handle float images
    if image.dtype in (np.float32, np.float64):
        if image.max() <= 1.0:
            image = (image * 255).round().clip(0, 255).astype(np.uint8)
        else:
            image = image.round().clip(0, 255).astype(np.uint8)

    Image.fromarray(image).save(path)


def resize_image(image: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Lanczos resize to (width, height)."""
    return cv2.resize(image, size, interpolation=cv2.INTER_LANCZOS4)


def gaussian_blur(image: np.ndarray, sigma: float) -> np.ndarray:
    """Gaussian blur with the kernel size derived from sigma."""
    if sigma <= 0:
        return image.copy()
    return cv2.GaussianBlur(image, (0, 0), sigmaX=sigma, sigmaY=sigma)


def image_to_tensor(image: np.ndarray) -> np.ndarray:
    """
    Convert an HxWx3 uint8 image to a [1, 3, H, W] float32 tensor in 0..1.
    """
    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)
    elif image.shape[-1] == 4:
        image = image[..., :3]  # Remove alpha

    tensor = image.astype(np.float32) / 255.0

    # HWC to CHW
    tensor = np.transpose(tensor, (2, 0, 1))
    return np.ascontiguousarray(tensor[np.newaxis, ...])


def opacity_to_mask(pha: np.ndarray) -> np.ndarray:
    """Convert a float opacity map in 0..1 (any leading singleton dims) to uint8."""
    pha = np.squeeze(np.asarray(pha, dtype=np.float32))
    return np.round(np.clip(pha, 0.0, 1.0) * 255.0).astype(np.uint8)
