"""
Progress Events for bg-remove
=============================

Structured progress and warning records passed to an observer instead of
being printed from inside the pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union


class PipelineStage(Enum):
    """Pipeline stages, in execution order."""
    VALIDATE = "validate"
    EXTRACT = "extract"
    SEGMENT = "segment"
    MASK_REFINE = "mask-refine"
    COMPOSITE = "composite"
    ENCODE = "encode"
    SIZE_CHECK = "size-check"


STAGE_LABELS = {
    PipelineStage.VALIDATE: "Validating input",
    PipelineStage.EXTRACT: "Extracting frames",
    PipelineStage.SEGMENT: "Removing background (AI segmentation)",
    PipelineStage.MASK_REFINE: "Refining masks",
    PipelineStage.COMPOSITE: "Compositing RGBA frames",
    PipelineStage.ENCODE: "Encoding GIFs",
    PipelineStage.SIZE_CHECK: "Checking file sizes",
}


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress update."""
    stage: PipelineStage
    message: str
    progress: Optional[float] = None       # 0..1 within the stage
    frame_index: Optional[int] = None
    total_frames: Optional[int] = None

    def describe(self) -> str:
        """Human-readable one-line description."""
        label = STAGE_LABELS.get(self.stage, self.stage.value)
        text = label
        if self.progress is not None:
            text += f" ({round(self.progress * 100)}%)"
        if self.frame_index is not None and self.total_frames is not None:
            text += f" [{self.frame_index + 1}/{self.total_frames}]"
        if self.message and self.message != label:
            text += f" - {self.message}"
        return text


@dataclass(frozen=True)
class PipelineWarning:
    """A non-fatal condition reported back to the caller."""
    stage: PipelineStage
    message: str
    variant: Optional[Union[int, str]] = None


ProgressObserver = Callable[[ProgressEvent], None]


def emit(
    observer: Optional[ProgressObserver],
    stage: PipelineStage,
    message: str,
    progress: Optional[float] = None,
    frame_index: Optional[int] = None,
    total_frames: Optional[int] = None,
) -> None:
    """Send an event to the observer, if there is one."""
    if observer is None:
        return
    observer(ProgressEvent(
        stage=stage,
        message=message,
        progress=progress,
        frame_index=frame_index,
        total_frames=total_frames,
    ))


class EventRecorder:
    """Observer that keeps every event, mostly useful for tests and logs."""

    def __init__(self):
        self.events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def stages(self) -> List[PipelineStage]:
        """Distinct stages in the order first seen."""
        seen: List[PipelineStage] = []
        for event in self.events:
            if event.stage not in seen:
                seen.append(event.stage)
        return seen
