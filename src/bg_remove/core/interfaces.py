"""
Collaborator Interfaces for bg-remove
=====================================

Narrow capability protocols for everything the pipeline delegates to
native tools or models. The concrete implementations live in
``bg_remove.media`` and ``bg_remove.models``; tests pass fakes.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, runtime_checkable

import numpy as np


@dataclass(frozen=True)
class VideoMetadata:
    """Probed properties of the input video."""
    width: int
    height: int
    duration: float     # seconds
    fps: float
    codec: str
    path: Path


@dataclass(frozen=True)
class Frame:
    """One decoded color frame on disk."""
    index: int          # 0-based, contiguous
    path: Path


@dataclass(frozen=True)
class RecurrentTensors:
    """The four recurrent tensors exchanged with the matting network."""
    r1: np.ndarray
    r2: np.ndarray
    r3: np.ndarray
    r4: np.ndarray

    @classmethod
    def zeros(cls) -> "RecurrentTensors":
        """Placeholder state before frame 0; the network expands it."""
        def z() -> np.ndarray:
            return np.zeros((1, 1, 1, 1), dtype=np.float32)
        return cls(z(), z(), z(), z())


@runtime_checkable
class VideoProber(Protocol):
    """Reads container/stream metadata."""

    def probe(self, path: Path) -> VideoMetadata:
        ...


@runtime_checkable
class FrameDecoder(Protocol):
    """Decodes a (trimmed) clip into numbered PNG frames."""

    def extract(
        self,
        path: Path,
        output_dir: Path,
        fps: float,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> List[Frame]:
        ...


@runtime_checkable
class PaletteEncoder(Protocol):
    """Two-pass palettegen/paletteuse GIF encoder."""

    def encode(
        self,
        input_dir: Path,
        output_path: Path,
        palette_path: Path,
        scale: Optional[int],
        fps: float,
        max_colors: int,
        dither: str,
        alpha_threshold: int,
        input_fps: Optional[float] = None,
    ) -> Path:
        ...


@runtime_checkable
class GifOptimizer(Protocol):
    """Lossy GIF optimizer."""

    def optimize(self, input_path: Path, output_path: Path, lossy: int) -> Path:
        ...


@runtime_checkable
class MattingModel(Protocol):
    """
    One recurrent matting step.

    Takes a [1,3,H,W] float32 source in 0..1, the previous recurrent tensors
    and the downsample ratio; returns the [H,W] float opacity and the new
    recurrent tensors. The foreground color output is not part of this
    contract.
    """

    def run(
        self,
        src: np.ndarray,
        state: RecurrentTensors,
        downsample_ratio: float,
    ) -> Tuple[np.ndarray, RecurrentTensors]:
        ...
