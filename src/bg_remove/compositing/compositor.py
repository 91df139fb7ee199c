"""
RGBA Compositor for bg-remove
=============================

Merges each extracted color frame with its refined mask into an RGBA
frame. The mask's dimensions are authoritative: a color frame of a
different size is resampled to match.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from bg_remove.constants import FRAME_PATTERN
from bg_remove.core.errors import InvariantViolation
from bg_remove.core.events import PipelineStage, ProgressObserver, emit
from bg_remove.core.interfaces import Frame
from bg_remove.utils.image import load_rgb, resize_image, save_image

logger = logging.getLogger(__name__)


class Compositor:
    """
    RGB + alpha to RGBA.

    Example:
        >>> compositor = Compositor()
        >>> rgba = compositor.merge(rgb, mask)
        >>> rgba.shape
        (480, 640, 4)
    """

    def merge(self, rgb: np.ndarray, mask: np.ndarray) -> np.ndarray:
        """
        Interleave color and opacity.

        Args:
            rgb: HxWx3 (or HxWx4, alpha dropped) uint8 color frame
            mask: hxw uint8 opacity, defines the output size

        Returns:
            hxwx4 uint8 RGBA
        """
        if mask.ndim == 3:
            mask = mask[..., 0]
        if rgb.ndim == 2:
            rgb = np.stack([rgb] * 3, axis=-1)
        elif rgb.shape[-1] == 4:
            rgb = rgb[..., :3]  # Remove alpha

        height, width = mask.shape
        if rgb.shape[:2] != (height, width):
            rgb = resize_image(rgb, (width, height))

        rgba = np.empty((height, width, 4), dtype=np.uint8)
        rgba[..., :3] = rgb
        rgba[..., 3] = mask
        return rgba

    def composite(
        self,
        frames: Sequence[Frame],
        masks: Sequence[np.ndarray],
        output_dir: Path,
        observer: Optional[ProgressObserver] = None,
    ) -> List[Path]:
        """
        Write one RGBA PNG per (frame, mask) pair.

        Output files use the encoder's 1-based frame_%04d.png pattern.

        Raises:
            InvariantViolation: if the sequences differ in length.
        """
        if len(frames) != len(masks):
            raise InvariantViolation(
                f"Frame count mismatch: {len(frames)} frames vs {len(masks)} alpha mattes"
            )

        total = len(frames)
        paths: List[Path] = []

        for i, (frame, mask) in enumerate(zip(frames, masks)):
            emit(observer, PipelineStage.COMPOSITE, "Merging RGB + alpha...",
                 progress=i / total, frame_index=i, total_frames=total)

            rgba = self.merge(load_rgb(frame.path), mask)
            path = Path(output_dir) / (FRAME_PATTERN % (i + 1))
            save_image(rgba, path)
            paths.append(path)

        emit(observer, PipelineStage.COMPOSITE, f"Composited {total} frames", progress=1.0)
        logger.debug("Composited %d frames into %s", total, output_dir)
        return paths


def composite_frames(
    frames: Sequence[Frame],
    masks: Sequence[np.ndarray],
    output_dir: Path,
    observer: Optional[ProgressObserver] = None,
) -> List[Path]:
    """Compositing stage with default settings."""
    return Compositor().composite(frames, masks, output_dir, observer)
