"""
Mask Refinement and Compositing for bg-remove
=============================================
"""

from bg_remove.compositing.temporal import (
    TemporalMaskRefiner,
    TemporalRefinerConfig,
    refine_masks,
)
from bg_remove.compositing.compositor import (
    Compositor,
    composite_frames,
)

__all__ = [
    "TemporalMaskRefiner",
    "TemporalRefinerConfig",
    "refine_masks",
    "Compositor",
    "composite_frames",
]
