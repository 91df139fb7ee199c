"""
Robust Video Matting for bg-remove
==================================

ONNX Runtime wrapper around the RVM MobileNetV3 export.

RVM is recurrent: every call takes four hidden-state tensors (r1i..r4i)
and returns updated ones (r1o..r4o) that must be fed to the next frame.
The model also emits a foreground color estimate (fgr); it carries color
artifacts and is ignored.

Reference: "Robust High-Resolution Video Matting with Temporal Guidance"
https://github.com/PeterL1n/RobustVideoMatting
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from bg_remove.constants import DOWNSAMPLE_MAX, DOWNSAMPLE_MIN, DOWNSAMPLE_TARGET
from bg_remove.core.errors import DependencyError
from bg_remove.core.interfaces import RecurrentTensors
from bg_remove.models.base import BaseModel, ModelConfig

logger = logging.getLogger(__name__)

MODEL_FILENAME = "rvm_mobilenetv3_fp32.onnx"

MODEL_URL = (
    "https://github.com/PeterL1n/RobustVideoMatting/releases/download/v1.0.0/"
    + MODEL_FILENAME
)

MODEL_ENV_VAR = "BG_REMOVE_MODEL"

# Graph input/output names of the official export
INPUT_NAMES = ("src", "r1i", "r2i", "r3i", "r4i", "downsample_ratio")
STATE_OUTPUTS = ("r1o", "r2o", "r3o", "r4o")
ALPHA_OUTPUT = "pha"


def calculate_downsample_ratio(width: int, height: int) -> float:
    """
    Downsample ratio targeting ~256-512 px on the short side.

    clamp(384 / min(width, height), 0.125, 1.0)
    """
    short_side = min(width, height)
    if short_side <= 0:
        return DOWNSAMPLE_MAX
    return max(DOWNSAMPLE_MIN, min(DOWNSAMPLE_MAX, DOWNSAMPLE_TARGET / short_side))


def _model_search_paths() -> List[Path]:
    project_root = Path(__file__).resolve().parents[3]
    return [
        Path.cwd() / "models" / MODEL_FILENAME,
        project_root / "models" / MODEL_FILENAME,
        Path.home() / ".cache" / "bg-remove" / MODEL_FILENAME,
    ]


def resolve_model_path(explicit_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Locate the RVM ONNX model.

    Search order:
    1. Explicit path (must exist)
    2. $BG_REMOVE_MODEL
    3. ./models/ under the current directory
    4. models/ next to the project root
    5. ~/.cache/bg-remove/

    Raises:
        DependencyError: with download instructions if nothing is found.
    """
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if not path.is_file():
            raise DependencyError(
                f"Model file not found: {path}\n"
                f"Download it from {MODEL_URL}"
            )
        return path.resolve()

    env_path = os.environ.get(MODEL_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        if path.is_file():
            return path.resolve()
        logger.warning("%s points to missing file %s", MODEL_ENV_VAR, path)

    for candidate in _model_search_paths():
        if candidate.is_file():
            logger.debug("Found model at %s", candidate)
            return candidate.resolve()

    raise DependencyError(
        "ONNX model not found. Download it:\n"
        "  mkdir models\n"
        f"  curl -L -o models/{MODEL_FILENAME} \\\n"
        f"    {MODEL_URL}\n\n"
        f"Or specify a path: --model-path /path/to/{MODEL_FILENAME}"
    )


class RobustVideoMatting(BaseModel):
    """
    RVM MobileNetV3 matting network on ONNX Runtime.

    Example:
        >>> with RobustVideoMatting(ModelConfig(model_path=path)) as rvm:
        ...     state = RecurrentTensors.zeros()
        ...     for src in tensors:
        ...         pha, state = rvm.run(src, state, 0.375)
    """

    def __init__(self, config: Optional[ModelConfig] = None):
        super().__init__(config)

    def load(self) -> None:
        if self._is_loaded:
            return

        model_path = resolve_model_path(self.config.model_path)

        try:
            import onnxruntime as ort
        except ImportError as e:
            raise DependencyError(
                "onnxruntime is required for segmentation: pip install onnxruntime"
            ) from e

        sess_options = ort.SessionOptions()
        sess_options.graph_optimization_level = ort.GraphOptimizationLevel(
            self.config.optimization_level
        )
        if self.config.intra_op_threads > 0:
            sess_options.intra_op_num_threads = self.config.intra_op_threads

        self.session = ort.InferenceSession(
            str(model_path),
            sess_options,
            providers=self._get_providers(),
        )
        self._is_loaded = True
        logger.info("Loaded matting model %s", model_path)

    def run(
        self,
        src: np.ndarray,
        state: RecurrentTensors,
        downsample_ratio: float,
    ) -> Tuple[np.ndarray, RecurrentTensors]:
        """Run one recurrent step."""
        if not self._is_loaded:
            self.load()

        feeds = {
            "src": src.astype(np.float32, copy=False),
            "r1i": state.r1,
            "r2i": state.r2,
            "r3i": state.r3,
            "r4i": state.r4,
            "downsample_ratio": np.array([downsample_ratio], dtype=np.float32),
        }

        wanted = [ALPHA_OUTPUT, *STATE_OUTPUTS]
        pha, r1, r2, r3, r4 = self.session.run(wanted, feeds)

        return pha, RecurrentTensors(r1, r2, r3, r4)
