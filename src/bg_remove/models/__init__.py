"""
Matting Models for bg-remove
============================

- Robust Video Matting (MobileNetV3, ONNX): recurrent video matting
"""

from bg_remove.models.base import BaseModel, ModelConfig, DeviceType
from bg_remove.models.rvm import (
    RobustVideoMatting,
    calculate_downsample_ratio,
    resolve_model_path,
    MODEL_FILENAME,
    MODEL_URL,
)

__all__ = [
    "BaseModel",
    "ModelConfig",
    "DeviceType",
    "RobustVideoMatting",
    "calculate_downsample_ratio",
    "resolve_model_path",
    "MODEL_FILENAME",
    "MODEL_URL",
]
