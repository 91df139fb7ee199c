"""
File Size Degradation for bg-remove
===================================

Twitch emote variants (28, 56, 112) must fit in 1 MiB. A variant over the
budget is re-encoded with progressively cheaper parameters:

    CHECK -> over budget? -> APPLY_STEP -> RE_ENCODE -> CHECK

until it fits or the ladder runs out. Each step is a pure transform from
one job snapshot to the next. The 512 px and raw variants are exempt.
Running out of steps is not fatal: a warning is returned and the smallest
encode achieved is kept.
"""

import logging
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Collection, List, Optional, Sequence, Tuple

from bg_remove.constants import BUDGETED_SIZES, MAX_EMOTE_BYTES
from bg_remove.core.events import (
    PipelineStage,
    PipelineWarning,
    ProgressObserver,
    emit,
)
from bg_remove.encoding.coordinator import EncoderCoordinator
from bg_remove.encoding.jobs import EncodingJob, EncodingResult, Variant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DegradationStep:
    """One rung of the ladder."""
    label: str
    apply: Callable[[EncodingJob], EncodingJob]

    def __call__(self, job: EncodingJob) -> EncodingJob:
        return self.apply(job)


def _lower(value, amount, floor):
    """value - amount, stopping at floor; a value already below floor is kept."""
    return min(value, max(floor, value - amount))


def _raise(value, amount, ceiling):
    """value + amount, stopping at ceiling; a value already above it is kept."""
    return max(value, min(ceiling, value + amount))


# Applied in order; no step ever makes the output more expensive.
DEGRADATION_LADDER: Tuple[DegradationStep, ...] = (
    DegradationStep(
        "Reduce FPS by 2",
        lambda job: job.with_params(fps=_lower(job.fps, 2, 8)),
    ),
    DegradationStep(
        "Reduce max colors by 64",
        lambda job: job.with_params(max_colors=_lower(job.max_colors, 64, 96)),
    ),
    DegradationStep(
        "Increase lossy compression by 30",
        lambda job: job.with_params(lossy=_raise(job.lossy, 30, 200)),
    ),
    DegradationStep(
        "Further reduce max colors by 32",
        lambda job: job.with_params(max_colors=_lower(job.max_colors, 32, 64)),
    ),
    DegradationStep(
        "Further reduce FPS by 2",
        lambda job: job.with_params(fps=_lower(job.fps, 2, 6)),
    ),
)


def _kb(size: int) -> str:
    return f"{size / 1024:.0f}KB"


class DegradationController:
    """
    Enforces the byte budget on the budgeted variants.

    Example:
        >>> controller = DegradationController(coordinator)
        >>> results, warnings = controller.enforce(results, composited_dir, output_dir)
    """

    def __init__(
        self,
        coordinator: EncoderCoordinator,
        budget: int = MAX_EMOTE_BYTES,
        ladder: Sequence[DegradationStep] = DEGRADATION_LADDER,
        budgeted: Collection[Variant] = BUDGETED_SIZES,
    ):
        self.coordinator = coordinator
        self.budget = budget
        self.ladder = tuple(ladder)
        self.budgeted = frozenset(budgeted)

    def is_budgeted(self, variant: Variant) -> bool:
        return variant in self.budgeted

    def needs_degradation(self, result: EncodingResult) -> bool:
        return self.is_budgeted(result.variant) and result.size_bytes > self.budget

    def degrade(
        self,
        result: EncodingResult,
        input_dir: Path,
        output_dir: Path,
        observer: Optional[ProgressObserver] = None,
    ) -> Tuple[EncodingResult, Optional[PipelineWarning]]:
        """
        Run the ladder for one over-budget result.

        Returns:
            (final result, warning if the budget was still not met)
        """
        if result.job is None:
            raise ValueError(f"{result.label} has no encoding job to degrade")

        output_dir = Path(output_dir)
        emit(observer, PipelineStage.SIZE_CHECK,
             f"{result.label} is {_kb(result.size_bytes)} (>{_kb(self.budget)}). Degrading...")

        # Re-encodes overwrite emote_<tag>.gif, so the smallest attempt is kept aside
        best_path = output_dir / f"best_{result.job.tag}.gif"
        shutil.copy2(result.path, best_path)
        best = replace(result, path=best_path)

        job = result.job
        applied: List[str] = []
        current = result

        for step in self.ladder:
            if current.size_bytes <= self.budget:
                break

            job = step(job)
            applied.append(step.label)
            emit(observer, PipelineStage.SIZE_CHECK, f"Applying: {step.label}")
            logger.debug("%s: %s -> fps=%s colors=%d lossy=%d",
                         result.label, step.label, job.fps, job.max_colors, job.lossy)

            attempt = self.coordinator.encode(job, input_dir, output_dir)
            current = replace(
                attempt,
                degraded=True,
                degradation_steps=tuple(applied),
            )

            if current.size_bytes < best.size_bytes:
                shutil.copy2(current.path, best_path)
                best = replace(current, path=best_path)

        if current.size_bytes <= self.budget:
            return current, None

        # The kept file may be the initial encode; it still went through the whole ladder
        best = replace(best, degraded=True, degradation_steps=tuple(applied))

        message = (
            f"{result.label} GIF is still {_kb(best.size_bytes)} after all degradation steps. "
            "Consider shortening the clip with --start and --end."
        )
        logger.info(message)
        return best, PipelineWarning(PipelineStage.SIZE_CHECK, message, variant=result.variant)

    def enforce(
        self,
        results: Sequence[EncodingResult],
        input_dir: Path,
        output_dir: Path,
        observer: Optional[ProgressObserver] = None,
    ) -> Tuple[List[EncodingResult], List[PipelineWarning]]:
        """Check every result; exempt and compliant ones pass through unchanged."""
        final: List[EncodingResult] = []
        warnings: List[PipelineWarning] = []

        emit(observer, PipelineStage.SIZE_CHECK, "Checking file sizes...")

        for result in results:
            if not self.needs_degradation(result):
                final.append(result)
                continue

            degraded, warning = self.degrade(result, input_dir, output_dir, observer)
            final.append(degraded)
            if warning is not None:
                warnings.append(warning)

        emit(observer, PipelineStage.SIZE_CHECK, "Size check complete", progress=1.0)
        return final, warnings
