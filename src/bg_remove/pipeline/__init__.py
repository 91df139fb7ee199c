"""
Processing Pipeline for bg-remove
=================================

Validation, extraction, segmentation and the orchestrator that runs them
together with refinement, compositing and encoding.
"""

from bg_remove.pipeline.runner import (
    EmotePipeline,
    PipelineConfig,
    PipelineResult,
    PipelineTools,
    run_pipeline,
)
from bg_remove.pipeline.segmentation import (
    RecurrentMattingSession,
    RecurrentState,
    SegmentationOutput,
    segment_frames,
)
from bg_remove.pipeline.extraction import extract_frames
from bg_remove.pipeline.validation import validate_input

__all__ = [
    "EmotePipeline",
    "PipelineConfig",
    "PipelineResult",
    "PipelineTools",
    "run_pipeline",
    "RecurrentMattingSession",
    "RecurrentState",
    "SegmentationOutput",
    "segment_frames",
    "extract_frames",
    "validate_input",
]
