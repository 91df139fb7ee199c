"""
Emote Pipeline Orchestrator for bg-remove
=========================================

Runs the full video-to-emote pipeline:

1. Validate input
2. Extract frames
3. AI segmentation (RVM, strictly sequential)
4. Mask refinement (temporal smoothing)
5. Compositing (RGB + alpha -> RGBA)
6. GIF encoding (28, 56, 112, 512 + raw)
7. Size check + degradation

All intermediate files live in a session directory that is removed on
every exit path unless ``keep_temp`` is set. Finished variants are copied
to the output directory only after encoding and degradation complete.
"""

import logging
import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, List, Optional

from bg_remove.constants import (
    DEFAULT_ALPHA_THRESHOLD,
    DEFAULT_QUALITY,
    QUALITY_PRESETS,
    QualityPreset,
)
from bg_remove.compositing.compositor import Compositor
from bg_remove.compositing.temporal import refine_masks
from bg_remove.core.errors import InputValidationError, InvariantViolation
from bg_remove.core.events import PipelineWarning, ProgressObserver
from bg_remove.core.interfaces import (
    FrameDecoder,
    GifOptimizer,
    MattingModel,
    PaletteEncoder,
    VideoMetadata,
    VideoProber,
)
from bg_remove.core.session import Session, SessionConfig
from bg_remove.encoding.coordinator import EncoderCoordinator
from bg_remove.encoding.degradation import DegradationController
from bg_remove.encoding.jobs import EncodingResult, output_filename
from bg_remove.pipeline.extraction import extract_frames
from bg_remove.pipeline.segmentation import segment_frames
from bg_remove.pipeline.validation import validate_input

logger = logging.getLogger(__name__)

ModelFactory = Callable[[Optional[Path], str], MattingModel]

DEVICES = ("cpu", "cuda")


@dataclass
class PipelineConfig:
    """Options for one pipeline run."""
    input_path: Path
    output_dir: Optional[Path] = None       # defaults to emotes/ next to the input
    fps: Optional[int] = None               # overrides the preset fps
    start: Optional[float] = None
    end: Optional[float] = None
    quality: str = DEFAULT_QUALITY
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD
    model_path: Optional[Path] = None
    device: str = "cpu"                     # onnxruntime execution provider
    keep_temp: bool = False
    refine_workers: int = 1
    temp_directory: Optional[Path] = None   # parent of the session dir

    def __post_init__(self):
        self.input_path = Path(self.input_path)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        if self.model_path is not None:
            self.model_path = Path(self.model_path)

    def validate(self) -> None:
        """Range-check the options."""
        if self.quality not in QUALITY_PRESETS:
            raise InputValidationError(
                f"Unknown quality preset '{self.quality}' "
                f"(expected one of: {', '.join(QUALITY_PRESETS)})",
                parameter="quality",
            )
        if self.fps is not None and not 1 <= self.fps <= 30:
            raise InputValidationError(f"--fps ({self.fps}) must be between 1 and 30", parameter="fps")
        if not 0 <= self.alpha_threshold <= 255:
            raise InputValidationError(
                f"--alpha-threshold ({self.alpha_threshold}) must be between 0 and 255",
                parameter="alpha_threshold",
            )
        if self.start is not None and self.start < 0:
            raise InputValidationError(f"--start ({self.start}s) must not be negative", parameter="start")
        if self.end is not None and self.end < 0:
            raise InputValidationError(f"--end ({self.end}s) must not be negative", parameter="end")
        if self.refine_workers < 1:
            raise InputValidationError("--workers must be at least 1", parameter="workers")
        if self.device not in DEVICES:
            raise InputValidationError(
                f"Unknown device '{self.device}' (expected one of: {', '.join(DEVICES)})",
                parameter="device",
            )

    @property
    def preset(self) -> QualityPreset:
        return QUALITY_PRESETS[self.quality]

    @property
    def frame_rate(self) -> int:
        """Extraction and base encoding frame rate."""
        return self.fps if self.fps is not None else self.preset.fps

    def resolved_output_dir(self) -> Path:
        if self.output_dir is not None:
            return self.output_dir.resolve()
        return self.input_path.resolve().parent / "emotes"


def load_rvm(model_path: Optional[Path], device: str = "cpu") -> MattingModel:
    """Default model factory: resolve and load the RVM ONNX model."""
    from bg_remove.models.base import DeviceType, ModelConfig
    from bg_remove.models.rvm import RobustVideoMatting

    model = RobustVideoMatting(ModelConfig(model_path=model_path, device=DeviceType(device)))
    model.load()
    return model


@dataclass
class PipelineTools:
    """External collaborators used by the pipeline."""
    prober: VideoProber
    decoder: FrameDecoder
    encoder: PaletteEncoder
    optimizer: GifOptimizer
    model_factory: ModelFactory = load_rvm

    @classmethod
    def default(cls) -> "PipelineTools":
        """ffmpeg, gifsicle and ONNX Runtime."""
        from bg_remove.media.ffmpeg import FFmpegFrameDecoder, FFmpegPaletteEncoder, FFprobeProber
        from bg_remove.media.gifsicle import GifsicleOptimizer

        return cls(
            prober=FFprobeProber(),
            decoder=FFmpegFrameDecoder(),
            encoder=FFmpegPaletteEncoder(),
            optimizer=GifsicleOptimizer(),
        )


@dataclass
class PipelineResult:
    """Outcome of a successful run."""
    outputs: List[EncodingResult]
    frame_count: int
    metadata: VideoMetadata
    warnings: List[PipelineWarning] = field(default_factory=list)
    session_root: Optional[Path] = None     # set when temp files were kept


class EmotePipeline:
    """
    Video-to-emote pipeline.

    Example:
        >>> pipeline = EmotePipeline(PipelineConfig(input_path=Path("clip.mp4")))
        >>> result = pipeline.run(observer=print)
        >>> for output in result.outputs:
        ...     print(output.label, output.path, output.size_bytes)
    """

    def __init__(
        self,
        config: PipelineConfig,
        tools: Optional[PipelineTools] = None,
    ):
        self.config = config
        self.tools = tools or PipelineTools.default()

    def run(self, observer: Optional[ProgressObserver] = None) -> PipelineResult:
        config = self.config
        config.validate()

        preset = config.preset
        fps = config.frame_rate
        warnings: List[PipelineWarning] = []

        session = Session(SessionConfig(
            keep_temp=config.keep_temp,
            base_directory=config.temp_directory,
        ))

        with session as paths:
            # Stage 1: Validate
            metadata, validation_warnings = validate_input(
                config.input_path, self.tools.prober, config.start, config.end, observer,
            )
            warnings.extend(validation_warnings)

            # Stage 2: Extract frames
            frames = extract_frames(
                config.input_path, self.tools.decoder, paths.extracted,
                fps, config.start, config.end, observer,
            )

            # Stage 3: AI segmentation (model resolved only now)
            model = self.tools.model_factory(config.model_path, config.device)
            segmentation = segment_frames(
                frames, model, metadata.width, metadata.height, paths.masks, observer,
            )
            self._check_count("segmentation", len(frames), len(segmentation))

            # Stage 4: Mask refinement
            refined, _ = refine_masks(
                segmentation.masks, paths.masks, config.refine_workers, observer,
            )
            self._check_count("refinement", len(frames), len(refined))

            # Stage 5: Compositing
            composited = Compositor().composite(frames, refined, paths.composited, observer)
            self._check_count("compositing", len(frames), len(composited))

            # Stage 6: GIF encoding
            coordinator = EncoderCoordinator(self.tools.encoder, self.tools.optimizer)
            results = coordinator.encode_all(
                paths.composited, paths.output, preset,
                source_fps=fps,
                alpha_threshold=config.alpha_threshold,
                base_fps=fps,
                observer=observer,
            )

            # Stage 7: Size check + degradation
            controller = DegradationController(coordinator)
            results, budget_warnings = controller.enforce(
                results, paths.composited, paths.output, observer,
            )
            warnings.extend(budget_warnings)

            outputs = self._copy_outputs(results, config.resolved_output_dir())
            kept_root = paths.root if config.keep_temp else None

        logger.info("Pipeline complete: %d frames, %d outputs", len(frames), len(outputs))
        return PipelineResult(
            outputs=outputs,
            frame_count=len(frames),
            metadata=metadata,
            warnings=warnings,
            session_root=kept_root,
        )

    @staticmethod
    def _check_count(stage: str, expected: int, actual: int) -> None:
        if expected != actual:
            raise InvariantViolation(
                f"Frame count mismatch after {stage}: expected {expected}, got {actual}"
            )

    @staticmethod
    def _copy_outputs(results: List[EncodingResult], output_dir: Path) -> List[EncodingResult]:
        """Copy finished variants to the user's output directory."""
        output_dir.mkdir(parents=True, exist_ok=True)
        outputs = []
        for result in results:
            destination = output_dir / output_filename(result.variant)
            shutil.copyfile(result.path, destination)
            outputs.append(replace(result, path=destination))
        return outputs


def run_pipeline(
    config: PipelineConfig,
    observer: Optional[ProgressObserver] = None,
    tools: Optional[PipelineTools] = None,
) -> PipelineResult:
    """Run the pipeline with default collaborators unless given."""
    return EmotePipeline(config, tools).run(observer)
