"""
Frame Extraction for bg-remove
==============================
"""

import logging
from pathlib import Path
from typing import List, Optional

from bg_remove.core.errors import InputValidationError, InvariantViolation
from bg_remove.core.events import PipelineStage, ProgressObserver, emit
from bg_remove.core.interfaces import Frame, FrameDecoder

logger = logging.getLogger(__name__)


def extract_frames(
    path: Path,
    decoder: FrameDecoder,
    output_dir: Path,
    fps: float,
    start: Optional[float] = None,
    end: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> List[Frame]:
    """
    Decode the (trimmed) clip into numbered PNG frames.

    Raises:
        InputValidationError: if no frames came out.
        InvariantViolation: if the decoder's indices are not 0..N-1.
    """
    emit(observer, PipelineStage.EXTRACT, f"Extracting frames at {fps:g} FPS...")

    frames = decoder.extract(Path(path), Path(output_dir), fps, start, end)

    if not frames:
        raise InputValidationError(
            "No frames extracted. The clip may be too short or the time range is empty.\n"
            "Try adjusting --start, --end, or --fps.",
            parameter="start",
        )

    for expected, frame in enumerate(frames):
        if frame.index != expected:
            raise InvariantViolation(
                f"Extracted frame indices are not contiguous: got {frame.index} at position {expected}"
            )

    emit(observer, PipelineStage.EXTRACT, f"Extracted {len(frames)} frames", progress=1.0)
    logger.info("Extracted %d frames at %g fps", len(frames), fps)
    return frames
