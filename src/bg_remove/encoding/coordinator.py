"""
Encoder Coordinator for bg-remove
=================================

Encodes the composited RGBA frames into every output variant:

1. palette generation at the target size and rate
2. palette application with dithering and an opacity cutoff
3. lossy optimization, skipped when the job's lossy level is 0
"""

import logging
from pathlib import Path
from typing import List, Optional

from bg_remove.constants import QualityPreset
from bg_remove.core.events import PipelineStage, ProgressObserver, emit
from bg_remove.core.interfaces import GifOptimizer, PaletteEncoder
from bg_remove.encoding.jobs import EncodingJob, EncodingResult, build_jobs

logger = logging.getLogger(__name__)


class EncoderCoordinator:
    """
    Drives the palette encoder and optimizer for each variant.

    Example:
        >>> coordinator = EncoderCoordinator(FFmpegPaletteEncoder(), GifsicleOptimizer())
        >>> results = coordinator.encode_all(composited, output, preset, 12.0, 128)
    """

    def __init__(self, encoder: PaletteEncoder, optimizer: GifOptimizer):
        self.encoder = encoder
        self.optimizer = optimizer

    def encode(self, job: EncodingJob, input_dir: Path, output_dir: Path) -> EncodingResult:
        """
        Encode one job into ``output_dir``.

        The final artifact is always ``emote_<tag>.gif``; an encode for the
        same tag replaces the previous one.
        """
        output_dir = Path(output_dir)
        palette_path = output_dir / f"palette_{job.tag}.png"
        raw_gif_path = output_dir / f"raw_{job.tag}.gif"
        final_path = output_dir / f"emote_{job.tag}.gif"

        self.encoder.encode(
            Path(input_dir),
            raw_gif_path,
            palette_path,
            scale=job.scale,
            fps=job.fps,
            max_colors=job.max_colors,
            dither=job.dither,
            alpha_threshold=job.alpha_threshold,
            input_fps=job.input_fps,
        )

        if job.lossy > 0:
            self.optimizer.optimize(raw_gif_path, final_path, job.lossy)
        else:
            # No optimizer: the palette encoder output is the final artifact
            raw_gif_path.replace(final_path)

        size = final_path.stat().st_size
        logger.debug(
            "Encoded %s: fps=%s colors=%d lossy=%d -> %d bytes",
            job.label, job.fps, job.max_colors, job.lossy, size,
        )

        return EncodingResult(
            variant=job.variant,
            label=job.label,
            path=final_path,
            size_bytes=size,
            job=job,
        )

    def encode_all(
        self,
        input_dir: Path,
        output_dir: Path,
        preset: QualityPreset,
        source_fps: float,
        alpha_threshold: int,
        base_fps: Optional[float] = None,
        observer: Optional[ProgressObserver] = None,
    ) -> List[EncodingResult]:
        """Encode the four sized variants and the raw variant, in that order."""
        jobs = build_jobs(preset, source_fps, alpha_threshold, base_fps=base_fps)
        results: List[EncodingResult] = []

        for i, job in enumerate(jobs):
            emit(observer, PipelineStage.ENCODE, f"Encoding {job.label} GIF...",
                 progress=i / len(jobs))
            results.append(self.encode(job, input_dir, output_dir))

        emit(observer, PipelineStage.ENCODE, "All sizes encoded", progress=1.0)
        return results
