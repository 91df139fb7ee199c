"""
Shared fakes for the bg-remove test suite.

None of these touch ffmpeg, gifsicle or onnxruntime.
"""

import shutil
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pytest
from PIL import Image

from bg_remove.core.interfaces import Frame, RecurrentTensors, VideoMetadata
from bg_remove.media.ffmpeg import list_frames
from bg_remove.pipeline.runner import PipelineConfig, PipelineTools


FRAME_SIZE = (8, 6)     # width, height


def write_rgb_frames(directory: Path, count: int, size: Tuple[int, int] = FRAME_SIZE) -> List[Frame]:
    """Numbered RGB PNGs with a per-frame color."""
    directory.mkdir(parents=True, exist_ok=True)
    width, height = size
    for i in range(count):
        pixels = np.full((height, width, 3), (i * 7) % 256, dtype=np.uint8)
        Image.fromarray(pixels).save(directory / f"frame_{i + 1:04d}.png")
    return list_frames(directory)


class FakeProber:
    def __init__(self, duration: float = 3.0, fps: float = 24.0, width: int = 8, height: int = 6):
        self.duration = duration
        self.fps = fps
        self.width = width
        self.height = height
        self.calls: List[Path] = []

    def probe(self, path: Path) -> VideoMetadata:
        self.calls.append(path)
        return VideoMetadata(
            width=self.width,
            height=self.height,
            duration=self.duration,
            fps=self.fps,
            codec="h264",
            path=path,
        )


class FakeDecoder:
    """Writes round(clip_seconds * fps) frames."""

    def __init__(self, duration: float = 3.0, count: Optional[int] = None):
        self.duration = duration
        self.count = count
        self.calls: List[dict] = []

    def extract(self, path, output_dir, fps, start=None, end=None) -> List[Frame]:
        self.calls.append({"path": path, "fps": fps, "start": start, "end": end})
        if self.count is not None:
            count = self.count
        else:
            seconds = (end if end is not None else self.duration) - (start or 0.0)
            count = int(round(seconds * fps))
        return write_rgb_frames(Path(output_dir), count)


class FakeMattingModel:
    """
    Returns a constant opacity and a state whose r1 counts the calls.

    Records the r1 value it was given, so tests can check threading.
    """

    def __init__(self, opacity: float = 0.5):
        self.opacity = opacity
        self.received: List[float] = []
        self.ratios: List[float] = []

    def run(self, src, state: RecurrentTensors, downsample_ratio: float):
        self.received.append(float(state.r1.ravel()[0]))
        self.ratios.append(downsample_ratio)
        _, _, height, width = src.shape
        pha = np.full((1, 1, height, width), self.opacity, dtype=np.float32)
        step = len(self.received)
        nxt = np.full((1, 1, 1, 1), step, dtype=np.float32)
        return pha, RecurrentTensors(nxt, nxt.copy(), nxt.copy(), nxt.copy())


class FakePaletteEncoder:
    """
    Writes a file of scripted size.

    ``sizes`` maps a variant tag to the byte sizes of successive encodes;
    once exhausted the last size repeats. Unlisted tags get ``default_size``.
    """

    def __init__(self, sizes: Optional[Dict[str, List[int]]] = None, default_size: int = 2048):
        self.sizes = {tag: list(values) for tag, values in (sizes or {}).items()}
        self.default_size = default_size
        self.calls: List[dict] = []

    def _next_size(self, tag: str) -> int:
        values = self.sizes.get(tag)
        if not values:
            return self.default_size
        return values.pop(0) if len(values) > 1 else values[0]

    def encode(self, input_dir, output_path, palette_path, scale, fps, max_colors,
               dither, alpha_threshold, input_fps=None):
        tag = Path(output_path).stem[len("raw_"):]
        self.calls.append({
            "tag": tag,
            "scale": scale,
            "fps": fps,
            "max_colors": max_colors,
            "dither": dither,
            "alpha_threshold": alpha_threshold,
            "input_fps": input_fps,
        })
        Path(output_path).write_bytes(b"\0" * self._next_size(tag))
        return Path(output_path)


class FakeOptimizer:
    def __init__(self):
        self.calls: List[Tuple[str, int]] = []

    def optimize(self, input_path, output_path, lossy):
        self.calls.append((Path(input_path).name, lossy))
        shutil.copyfile(input_path, output_path)
        return Path(output_path)


@pytest.fixture
def video_file(tmp_path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"not really a video")
    return path


@pytest.fixture
def temp_root(tmp_path) -> Path:
    root = tmp_path / "sessions"
    root.mkdir()
    return root


@pytest.fixture
def make_tools():
    def factory(
        prober: Optional[FakeProber] = None,
        decoder: Optional[FakeDecoder] = None,
        encoder: Optional[FakePaletteEncoder] = None,
        optimizer: Optional[FakeOptimizer] = None,
        model: Optional[FakeMattingModel] = None,
        model_factory=None,
    ) -> PipelineTools:
        model = model or FakeMattingModel()
        return PipelineTools(
            prober=prober or FakeProber(),
            decoder=decoder or FakeDecoder(),
            encoder=encoder or FakePaletteEncoder(),
            optimizer=optimizer or FakeOptimizer(),
            model_factory=model_factory or (lambda path, device="cpu": model),
        )
    return factory


@pytest.fixture
def make_config(video_file, temp_root, tmp_path):
    def factory(**overrides) -> PipelineConfig:
        options = dict(
            input_path=video_file,
            output_dir=tmp_path / "out",
            temp_directory=temp_root,
        )
        options.update(overrides)
        return PipelineConfig(**options)
    return factory
