"""
Segmentation Stage for bg-remove
================================

Runs the recurrent matting network over the extracted frames.

The recurrent state produced by frame i is the only valid input for frame
i+1, so segmentation is a strict left-to-right fold:

    state_0 = zeros
    mask_i, state_{i+1} = step(frame_i, state_i)

RecurrentState is a single-owner handle: stepping consumes it and hands
back the successor. Stepping a consumed state, or stepping frames out of
order, raises InvariantViolation. This stage must never be parallelized.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from bg_remove.core.errors import InvariantViolation
from bg_remove.core.events import PipelineStage, ProgressObserver, emit
from bg_remove.core.interfaces import Frame, MattingModel, RecurrentTensors
from bg_remove.models.rvm import calculate_downsample_ratio
from bg_remove.utils.image import image_to_tensor, load_rgb, opacity_to_mask, save_image

logger = logging.getLogger(__name__)


class RecurrentState:
    """
    Single-use handle on the network's recurrent tensors.

    ``next_index`` is the frame index this state may be applied to.
    """

    def __init__(self, tensors: RecurrentTensors, next_index: int = 0):
        self._tensors = tensors
        self._consumed = False
        self.next_index = next_index

    @classmethod
    def initial(cls) -> "RecurrentState":
        return cls(RecurrentTensors.zeros(), next_index=0)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self, frame_index: int) -> RecurrentTensors:
        """Take the tensors for ``frame_index``; the handle is dead afterwards."""
        if self._consumed:
            raise InvariantViolation(
                f"Recurrent state for frame {self.next_index} was already consumed"
            )
        if frame_index != self.next_index:
            raise InvariantViolation(
                f"Frame {frame_index} processed out of order "
                f"(expected frame {self.next_index})"
            )
        self._consumed = True
        return self._tensors


class RecurrentMattingSession:
    """
    Binds a matting model to one clip's resolution.

    The downsample ratio is computed once from the source resolution.
    """

    def __init__(self, model: MattingModel, width: int, height: int):
        self.model = model
        self.downsample_ratio = calculate_downsample_ratio(width, height)

    def step(self, frame: Frame, state: RecurrentState) -> Tuple[np.ndarray, RecurrentState]:
        """Segment one frame; returns its mask and the successor state."""
        tensors = state.consume(frame.index)

        src = image_to_tensor(load_rgb(frame.path))
        pha, next_tensors = self.model.run(src, tensors, self.downsample_ratio)

        return opacity_to_mask(pha), RecurrentState(next_tensors, frame.index + 1)


@dataclass
class SegmentationOutput:
    """Masks in frame order, with the PNG each was written to."""
    masks: List[np.ndarray] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.masks)


def segment_frames(
    frames: Sequence[Frame],
    model: MattingModel,
    width: int,
    height: int,
    masks_dir: Optional[Path] = None,
    observer: Optional[ProgressObserver] = None,
) -> SegmentationOutput:
    """
    Produce one mask per frame, in order.

    Args:
        frames: Extracted frames, indices 0..N-1
        model: Loaded matting model
        width: Source video width (for the downsample ratio)
        height: Source video height
        masks_dir: If given, each mask is saved as mask_%04d.png
        observer: Progress observer

    Returns:
        SegmentationOutput with exactly len(frames) masks
    """
    session = RecurrentMattingSession(model, width, height)
    total = len(frames)
    output = SegmentationOutput()

    logger.debug("Segmenting %d frames, downsample ratio %.4f", total, session.downsample_ratio)

    state = RecurrentState.initial()
    for i, frame in enumerate(frames):
        emit(observer, PipelineStage.SEGMENT, "Processing frames...",
             progress=i / total, frame_index=i, total_frames=total)

        mask, state = session.step(frame, state)
        output.masks.append(mask)

        if masks_dir is not None:
            path = Path(masks_dir) / f"mask_{i:04d}.png"
            save_image(mask, path)
            output.paths.append(path)

    emit(observer, PipelineStage.SEGMENT, f"Segmented {total} frames", progress=1.0)
    return output
