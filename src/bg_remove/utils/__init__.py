"""Utility helpers for bg-remove."""

from bg_remove.utils.image import (
    load_rgb,
    save_image,
    resize_image,
    gaussian_blur,
    image_to_tensor,
    opacity_to_mask,
)

__all__ = [
    "load_rgb",
    "save_image",
    "resize_image",
    "gaussian_blur",
    "image_to_tensor",
    "opacity_to_mask",
]
