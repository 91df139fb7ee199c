"""
bg-remove - Video to Transparent Emote GIFs
===========================================

Turns a short video clip into transparent, loop-ready GIF emotes:

- Robust Video Matting (ONNX) removes the background, frame by frame,
  carrying its recurrent state across the clip
- Temporal smoothing and edge blur stabilize the masks
- RGBA frames are encoded at 28, 56, 112 and 512 px plus the original size
  with a two-pass ffmpeg palette and gifsicle lossy optimization
- Twitch-sized variants are degraded step by step until they fit in 1 MiB
"""

__version__ = "1.0.0"

from bg_remove.core.errors import (
    PipelineError,
    InputValidationError,
    DependencyError,
    ToolError,
    InvariantViolation,
)
from bg_remove.core.events import PipelineStage, ProgressEvent, PipelineWarning
from bg_remove.pipeline.runner import (
    EmotePipeline,
    PipelineConfig,
    PipelineResult,
    PipelineTools,
    run_pipeline,
)
from bg_remove.encoding.jobs import EncodingJob, EncodingResult

__all__ = [
    # Pipeline
    "EmotePipeline",
    "PipelineConfig",
    "PipelineResult",
    "PipelineTools",
    "run_pipeline",
    # Events
    "PipelineStage",
    "ProgressEvent",
    "PipelineWarning",
    # Encoding
    "EncodingJob",
    "EncodingResult",
    # Errors
    "PipelineError",
    "InputValidationError",
    "DependencyError",
    "ToolError",
    "InvariantViolation",
    # Meta
    "__version__",
]
