"""
GIF Encoding for bg-remove
==========================

Variant jobs, the encoder coordinator and the size-budget degradation
controller.
"""

from bg_remove.encoding.jobs import (
    EncodingJob,
    EncodingResult,
    Variant,
    build_jobs,
    output_filename,
)
from bg_remove.encoding.coordinator import EncoderCoordinator
from bg_remove.encoding.degradation import (
    DegradationController,
    DegradationStep,
    DEGRADATION_LADDER,
)

__all__ = [
    "EncodingJob",
    "EncodingResult",
    "Variant",
    "build_jobs",
    "output_filename",
    "EncoderCoordinator",
    "DegradationController",
    "DegradationStep",
    "DEGRADATION_LADDER",
]
