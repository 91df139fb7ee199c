"""
Encoding Jobs and Results for bg-remove
=======================================

An EncodingJob is an immutable description of one variant encode. The
degradation ladder derives new jobs from old ones and never mutates them.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Tuple, Union

from bg_remove.constants import (
    OUTPUT_SIZES,
    RAW_MAX_COLORS,
    RAW_VARIANT,
    QualityPreset,
)

Variant = Union[int, str]


@dataclass(frozen=True)
class EncodingJob:
    """Parameters for one encode attempt of one variant."""
    variant: Variant
    label: str
    tag: str
    scale: Optional[int]        # square size, None keeps the composited size
    fps: float                  # output frame rate
    max_colors: int
    dither: str
    alpha_threshold: int
    lossy: int                  # 0 skips the optimizer
    input_fps: Optional[float] = None   # rate the frames were extracted at

    def with_params(self, **changes) -> "EncodingJob":
        """A new job with some parameters changed."""
        return replace(self, **changes)


@dataclass(frozen=True)
class EncodingResult:
    """Outcome of encoding one variant."""
    variant: Variant
    label: str
    path: Path
    size_bytes: int
    degraded: bool = False
    degradation_steps: Tuple[str, ...] = ()
    job: Optional[EncodingJob] = field(default=None, compare=False, repr=False)


def variant_label(variant: Variant) -> str:
    if variant == RAW_VARIANT:
        return "raw (original resolution)"
    return f"{variant}x{variant}"


def variant_tag(variant: Variant) -> str:
    if variant == RAW_VARIANT:
        return RAW_VARIANT
    return f"{variant}x{variant}"


def output_filename(variant: Variant) -> str:
    """Deterministic name of a variant in the user's output directory."""
    return f"emote_{variant_tag(variant)}.gif"


def build_jobs(
    preset: QualityPreset,
    source_fps: float,
    alpha_threshold: int,
    base_fps: Optional[float] = None,
) -> List[EncodingJob]:
    """
    The five variant jobs, in encode order.

    Args:
        preset: Quality preset for the sized variants
        source_fps: Rate the frames were extracted at; the raw variant keeps it
        alpha_threshold: Opacity cutoff for GIF transparency
        base_fps: Frame rate for the sized variants (defaults to the preset's)
    """
    fps = base_fps if base_fps is not None else preset.fps

    jobs = [
        EncodingJob(
            variant=size,
            label=variant_label(size),
            tag=variant_tag(size),
            scale=size,
            fps=fps,
            max_colors=preset.max_colors,
            dither=preset.dither,
            alpha_threshold=alpha_threshold,
            lossy=preset.lossy,
            input_fps=source_fps,
        )
        for size in OUTPUT_SIZES
    ]

    # Raw version: original resolution, no optimizer, source fps
    jobs.append(EncodingJob(
        variant=RAW_VARIANT,
        label=variant_label(RAW_VARIANT),
        tag=variant_tag(RAW_VARIANT),
        scale=None,
        fps=source_fps,
        max_colors=RAW_MAX_COLORS,
        dither=preset.dither,
        alpha_threshold=alpha_threshold,
        lossy=0,
        input_fps=source_fps,
    ))

    return jobs
