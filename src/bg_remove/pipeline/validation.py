"""
Input Validation for bg-remove
==============================

Checks:
- File exists and is readable
- File extension is a known video format
- Video has a valid video stream and a positive duration
- start/end range is valid
- Clip length is reasonable (warns if long)
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from bg_remove.constants import MAX_CLIP_DURATION, SUPPORTED_VIDEO_EXTENSIONS
from bg_remove.core.errors import InputValidationError
from bg_remove.core.events import PipelineStage, PipelineWarning, ProgressObserver, emit
from bg_remove.core.interfaces import VideoMetadata, VideoProber

logger = logging.getLogger(__name__)


def check_input_file(path: Path) -> None:
    if not path.is_file() or not os.access(path, os.R_OK):
        raise InputValidationError(
            f"Input file not found or not readable: {path}", parameter="input"
        )

    ext = path.suffix.lower()
    if ext not in SUPPORTED_VIDEO_EXTENSIONS:
        raise InputValidationError(
            f"Unsupported video format: {ext or '(none)'}\n"
            f"Supported: {', '.join(sorted(SUPPORTED_VIDEO_EXTENSIONS))}",
            parameter="input",
        )


def check_trim_range(start: Optional[float], end: Optional[float]) -> None:
    """Checks that need no probing."""
    if start is not None and start < 0:
        raise InputValidationError(f"--start ({start}s) must not be negative", parameter="start")
    if end is not None and end <= 0:
        raise InputValidationError(f"--end ({end}s) must be positive", parameter="end")
    if start is not None and end is not None and start >= end:
        raise InputValidationError(
            f"--start ({start}s) must be before --end ({end}s)", parameter="start"
        )


def check_against_duration(
    metadata: VideoMetadata,
    start: Optional[float],
    end: Optional[float],
) -> None:
    if metadata.duration <= 0:
        raise InputValidationError("Video has zero or unknown duration.", parameter="input")

    if start is not None and start >= metadata.duration:
        raise InputValidationError(
            f"--start ({start}s) is beyond video duration ({metadata.duration:.1f}s)",
            parameter="start",
        )

    if end is not None and end > metadata.duration:
        raise InputValidationError(
            f"--end ({end}s) is beyond video duration ({metadata.duration:.1f}s)",
            parameter="end",
        )


def validate_input(
    path: Path,
    prober: VideoProber,
    start: Optional[float] = None,
    end: Optional[float] = None,
    observer: Optional[ProgressObserver] = None,
) -> Tuple[VideoMetadata, List[PipelineWarning]]:
    """
    Validate the input and probe its metadata.

    Returns:
        (metadata, non-fatal warnings)

    Raises:
        InputValidationError: naming the offending parameter.
    """
    path = Path(path)
    emit(observer, PipelineStage.VALIDATE, "Checking input file...")

    check_input_file(path)
    check_trim_range(start, end)

    emit(observer, PipelineStage.VALIDATE, "Probing video metadata...")
    metadata = prober.probe(path)
    check_against_duration(metadata, start, end)

    warnings: List[PipelineWarning] = []
    effective = (end if end is not None else metadata.duration) - (start or 0.0)
    if effective > MAX_CLIP_DURATION:
        message = (
            f"Clip is {effective:.1f}s long (>{MAX_CLIP_DURATION:.0f}s). "
            "This will produce many frames and may be slow. "
            "Consider using --start and --end to trim the clip."
        )
        logger.info(message)
        warnings.append(PipelineWarning(PipelineStage.VALIDATE, message))

    emit(observer, PipelineStage.VALIDATE,
         f"Video: {metadata.width}x{metadata.height}, {metadata.duration:.1f}s, {metadata.codec}")
    return metadata, warnings
