"""
Core Layer for bg-remove
========================

Errors, progress events, collaborator interfaces and session management.
"""

from bg_remove.core.errors import (
    PipelineError,
    InputValidationError,
    DependencyError,
    ToolError,
    InvariantViolation,
)
from bg_remove.core.events import (
    PipelineStage,
    ProgressEvent,
    PipelineWarning,
    ProgressObserver,
    EventRecorder,
)
from bg_remove.core.interfaces import (
    VideoMetadata,
    Frame,
    RecurrentTensors,
    VideoProber,
    FrameDecoder,
    PaletteEncoder,
    GifOptimizer,
    MattingModel,
)
from bg_remove.core.session import Session, SessionConfig, SessionPaths

__all__ = [
    # Errors
    "PipelineError",
    "InputValidationError",
    "DependencyError",
    "ToolError",
    "InvariantViolation",
    # Events
    "PipelineStage",
    "ProgressEvent",
    "PipelineWarning",
    "ProgressObserver",
    "EventRecorder",
    # Interfaces
    "VideoMetadata",
    "Frame",
    "RecurrentTensors",
    "VideoProber",
    "FrameDecoder",
    "PaletteEncoder",
    "GifOptimizer",
    "MattingModel",
    # Session
    "Session",
    "SessionConfig",
    "SessionPaths",
]
