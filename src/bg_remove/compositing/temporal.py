"""
Temporal Mask Refinement for bg-remove
======================================

Each mask is blended with its neighbours to suppress flicker:

    refined[i] = 0.15 * mask[i-1] + 0.70 * mask[i] + 0.15 * mask[i+1]

with the first and last masks standing in for their missing neighbours,
then lightly blurred to antialias the edges. Every output depends only on
three finished inputs, so frames can be refined concurrently.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from bg_remove.constants import EDGE_BLUR_SIGMA, TEMPORAL_WEIGHTS
from bg_remove.core.errors import InvariantViolation
from bg_remove.core.events import PipelineStage, ProgressObserver, emit
from bg_remove.utils.image import gaussian_blur, save_image

logger = logging.getLogger(__name__)


@dataclass
class TemporalRefinerConfig:
    """Temporal refinement configuration."""
    weights: Tuple[float, float, float] = TEMPORAL_WEIGHTS
    blur_sigma: float = EDGE_BLUR_SIGMA
    workers: int = 1            # >1 refines frames on a thread pool


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


class TemporalMaskRefiner:
    """
    Neighbour-weighted temporal smoothing plus edge blur.

    Example:
        >>> refiner = TemporalMaskRefiner(TemporalRefinerConfig(workers=4))
        >>> refined = refiner.refine(masks)
    """

    def __init__(self, config: Optional[TemporalRefinerConfig] = None):
        self.config = config or TemporalRefinerConfig()

    def blend_frame(self, masks: Sequence[np.ndarray], index: int) -> np.ndarray:
        """Weighted blend for one frame, before blur."""
        count = len(masks)
        current = masks[index]
        previous = masks[index - 1] if index > 0 else current
        following = masks[index + 1] if index < count - 1 else current

        w_prev, w_cur, w_next = self.config.weights
        value = (
            w_prev * previous.astype(np.float64)
            + w_cur * current.astype(np.float64)
            + w_next * following.astype(np.float64)
        )
        return _round_half_up(np.clip(value, 0.0, 255.0)).astype(np.uint8)

    def blend(self, masks: Sequence[np.ndarray]) -> List[np.ndarray]:
        """Blend every frame, without blur."""
        self._check_shapes(masks)
        return [self.blend_frame(masks, i) for i in range(len(masks))]

    def refine_frame(self, masks: Sequence[np.ndarray], index: int) -> np.ndarray:
        return gaussian_blur(self.blend_frame(masks, index), self.config.blur_sigma)

    def refine(self, masks: Sequence[np.ndarray]) -> List[np.ndarray]:
        """Blend and blur every frame; output order matches input order."""
        self._check_shapes(masks)
        count = len(masks)
        if count == 0:
            return []

        if self.config.workers > 1 and count > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                return list(executor.map(lambda i: self.refine_frame(masks, i), range(count)))

        return [self.refine_frame(masks, i) for i in range(count)]

    def _check_shapes(self, masks: Sequence[np.ndarray]) -> None:
        if not masks:
            return
        shape = masks[0].shape
        for i, mask in enumerate(masks):
            if mask.ndim != 2:
                raise InvariantViolation(f"Mask {i} is not single-channel (shape {mask.shape})")
            if mask.shape != shape:
                raise InvariantViolation(
                    f"Mask {i} has shape {mask.shape}, expected {shape}"
                )


def refine_masks(
    masks: Sequence[np.ndarray],
    output_dir: Optional[Path] = None,
    workers: int = 1,
    observer: Optional[ProgressObserver] = None,
) -> Tuple[List[np.ndarray], List[Path]]:
    """
    Temporal refinement stage.

    Returns:
        (refined masks, written paths); paths is empty without output_dir
    """
    emit(observer, PipelineStage.MASK_REFINE, "Applying temporal smoothing...")

    refiner = TemporalMaskRefiner(TemporalRefinerConfig(workers=max(1, workers)))
    refined = refiner.refine(masks)

    paths: List[Path] = []
    if output_dir is not None:
        for i, mask in enumerate(refined):
            path = Path(output_dir) / f"mask_refined_{i:04d}.png"
            save_image(mask, path)
            paths.append(path)

    emit(observer, PipelineStage.MASK_REFINE, f"Refined {len(refined)} masks", progress=1.0)
    logger.debug("Refined %d masks with %d worker(s)", len(refined), refiner.config.workers)
    return refined, paths
