"""
Base Model Interface for bg-remove
==================================

Provides the abstract base class for ONNX Runtime backed models.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class DeviceType(Enum):
    """Supported compute devices."""
    CPU = "cpu"
    CUDA = "cuda"


@dataclass
class ModelConfig:
    """Configuration for ONNX models."""
    model_path: Optional[Path] = None
    device: DeviceType = DeviceType.CPU
    optimization_level: int = 99    # ORT_ENABLE_ALL
    intra_op_threads: int = 0       # 0 lets onnxruntime decide
    device_id: int = 0


class BaseModel(ABC):
    """
    Abstract base class for inference models.

    Provides common functionality for:
    - Session creation and teardown
    - Execution provider selection (CPU/CUDA)
    - Context manager support
    """

    def __init__(self, config: Optional[ModelConfig] = None):
        self.config = config or ModelConfig()
        self.session: Any = None
        self._is_loaded = False

    @abstractmethod
    def load(self) -> None:
        """Load the model and prepare for inference."""

    def unload(self) -> None:
        """Release the inference session."""
        self.session = None
        self._is_loaded = False

    def _get_providers(self) -> List[Tuple[str, Dict]]:
        """Execution providers based on config, CPU always last."""
        providers: List[Tuple[str, Dict]] = []

        if self.config.device == DeviceType.CUDA:
            import onnxruntime as ort

            if "CUDAExecutionProvider" in ort.get_available_providers():
                providers.append((
                    "CUDAExecutionProvider",
                    {"device_id": self.config.device_id},
                ))
            else:
                logger.warning("CUDA not available, falling back to CPU")

        providers.append(("CPUExecutionProvider", {}))
        return providers

    @property
    def is_loaded(self) -> bool:
        """Check if model is loaded."""
        return self._is_loaded

    def __enter__(self):
        self.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unload()
        return False
