"""
FFmpeg Integration for bg-remove
================================

Probe, frame extraction and two-pass palette GIF encoding through the
ffprobe/ffmpeg command line tools.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from bg_remove.constants import FRAME_PATTERN
from bg_remove.core.errors import InputValidationError, ToolError
from bg_remove.core.interfaces import Frame, VideoMetadata
from bg_remove.media.tools import resolve_tool, run_tool

logger = logging.getLogger(__name__)

DEFAULT_FPS = 30.0


def _num(value: float) -> str:
    """Format a number for an ffmpeg argument (12.0 -> '12')."""
    return f"{value:g}"


def parse_frame_rate(rate: Optional[str], default: float = DEFAULT_FPS) -> float:
    """Parse an ffprobe rational like '30000/1001'."""
    if not rate:
        return default
    parts = str(rate).split("/")
    try:
        if len(parts) == 2:
            num, den = int(parts[0]), int(parts[1])
            return num / den if den > 0 else default
        return float(parts[0])
    except ValueError:
        return default


def parse_probe_output(data: Dict[str, Any], path: Path) -> VideoMetadata:
    """
    Build VideoMetadata from ffprobe's JSON document.

    Raises:
        InputValidationError: if the file has no video stream.
    """
    streams = data.get("streams") or []
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    if video is None:
        raise InputValidationError(f"No video stream found in {path}", parameter="input")

    fmt = data.get("format") or {}
    raw_duration = fmt.get("duration", video.get("duration", "0"))
    try:
        duration = float(raw_duration)
    except (TypeError, ValueError):
        duration = 0.0

    return VideoMetadata(
        width=int(video.get("width") or 0),
        height=int(video.get("height") or 0),
        duration=duration,
        fps=parse_frame_rate(video.get("r_frame_rate")),
        codec=video.get("codec_name") or "unknown",
        path=Path(path),
    )


def build_extract_command(
    ffmpeg: str,
    path: Path,
    output_dir: Path,
    fps: float,
    start: Optional[float] = None,
    end: Optional[float] = None,
) -> List[str]:
    """ffmpeg arguments for decoding a clip into numbered RGB PNGs."""
    cmd = [ffmpeg]

    # Input seeking (fast seek before -i)
    if start is not None:
        cmd += ["-ss", _num(start)]

    cmd += ["-i", str(path)]

    if end is not None:
        duration = end - start if start is not None else end
        cmd += ["-t", _num(duration)]

    cmd += [
        "-vf", f"fps={_num(fps)}",
        "-pix_fmt", "rgb24",
        "-y",
        str(output_dir / FRAME_PATTERN),
    ]
    return cmd


def _pre_filters(scale: Optional[int], fps: float, input_fps: Optional[float]) -> List[str]:
    """Frame-rate resampling and scaling filters applied before the palette stage."""
    filters = []
    if input_fps is not None and input_fps != fps:
        filters.append(f"fps={_num(fps)}")
    if scale is not None:
        filters.append(f"scale={scale}:{scale}:flags=lanczos")
    return filters


def build_palettegen_command(
    ffmpeg: str,
    input_dir: Path,
    palette_path: Path,
    scale: Optional[int],
    fps: float,
    max_colors: int,
    input_fps: Optional[float] = None,
) -> List[str]:
    """
    Pass 1: generate an optimal palette at the target size and rate.

    The frame sequence is read at ``input_fps`` (the extraction rate) and
    resampled to ``fps`` when the two differ.
    """
    filters = _pre_filters(scale, fps, input_fps)
    filters.append(f"palettegen=max_colors={max_colors}:reserve_transparent=1:stats_mode=diff")
    return [
        ffmpeg,
        "-framerate", _num(input_fps if input_fps is not None else fps),
        "-i", str(input_dir / FRAME_PATTERN),
        "-vf", ",".join(filters),
        "-y",
        str(palette_path),
    ]


def build_paletteuse_command(
    ffmpeg: str,
    input_dir: Path,
    palette_path: Path,
    output_path: Path,
    scale: Optional[int],
    fps: float,
    dither: str,
    alpha_threshold: int,
    input_fps: Optional[float] = None,
) -> List[str]:
    """Pass 2: apply the palette with dithering and a transparency cutoff."""
    filters = _pre_filters(scale, fps, input_fps)
    if filters:
        graph = f"[0:v]{','.join(filters)}[x];[x][1:v]"
    else:
        graph = "[0:v][1:v]"
    return [
        ffmpeg,
        "-framerate", _num(input_fps if input_fps is not None else fps),
        "-i", str(input_dir / FRAME_PATTERN),
        "-i", str(palette_path),
        "-lavfi", f"{graph}paletteuse=dither={dither}:alpha_threshold={alpha_threshold}",
        "-gifflags", "-offsetting",
        "-y",
        str(output_path),
    ]


FRAME_NAME = re.compile(r"^frame_(\d+)\.png$")


def list_frames(directory: Path) -> List[Frame]:
    """
    Numbered frame files in a directory, in frame order.

    ffmpeg numbers from 1, so frame_0001.png gets index 0. Ordering is
    numeric: frame_10000.png comes after frame_9999.png.
    """
    numbered = []
    for path in Path(directory).iterdir():
        match = FRAME_NAME.match(path.name)
        if match:
            numbered.append((int(match.group(1)), path))
    numbered.sort(key=lambda item: item[0])
    return [Frame(index=number - 1, path=path) for number, path in numbered]


class FFprobeProber:
    """VideoProber backed by ffprobe."""

    def __init__(self, executable: Optional[str] = None):
        self._executable = executable

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = resolve_tool("ffprobe")
        return self._executable

    def probe(self, path: Path) -> VideoMetadata:
        result = run_tool("ffprobe", [
            self.executable,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(path),
        ])
        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ToolError("ffprobe", f"unreadable output: {e}") from e
        return parse_probe_output(data, Path(path))


class FFmpegFrameDecoder:
    """FrameDecoder backed by ffmpeg."""

    def __init__(self, executable: Optional[str] = None):
        self._executable = executable

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = resolve_tool("ffmpeg")
        return self._executable

    def extract(
        self,
        path: Path,
        output_dir: Path,
        fps: float,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> List[Frame]:
        run_tool("ffmpeg", build_extract_command(
            self.executable, Path(path), Path(output_dir), fps, start, end,
        ))
        frames = list_frames(Path(output_dir))
        logger.debug("ffmpeg produced %d frames in %s", len(frames), output_dir)
        return frames


class FFmpegPaletteEncoder:
    """PaletteEncoder backed by ffmpeg palettegen/paletteuse."""

    def __init__(self, executable: Optional[str] = None):
        self._executable = executable

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = resolve_tool("ffmpeg")
        return self._executable

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
        run_tool("ffmpeg", build_palettegen_command(
            self.executable, Path(input_dir), Path(palette_path), scale, fps, max_colors,
            input_fps=input_fps,
        ))
        run_tool("ffmpeg", build_paletteuse_command(
            self.executable, Path(input_dir), Path(palette_path), Path(output_path),
            scale, fps, dither, alpha_threshold, input_fps=input_fps,
        ))
        return Path(output_path)
