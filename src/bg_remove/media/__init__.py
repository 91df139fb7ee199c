"""
Media Tool Integrations for bg-remove
=====================================

ffprobe/ffmpeg for probing, decoding and palette encoding, gifsicle for
lossy optimization.
"""

from bg_remove.media.ffmpeg import (
    FFprobeProber,
    FFmpegFrameDecoder,
    FFmpegPaletteEncoder,
    parse_probe_output,
    parse_frame_rate,
)
from bg_remove.media.gifsicle import GifsicleOptimizer
from bg_remove.media.tools import resolve_tool, run_tool

__all__ = [
    "FFprobeProber",
    "FFmpegFrameDecoder",
    "FFmpegPaletteEncoder",
    "GifsicleOptimizer",
    "parse_probe_output",
    "parse_frame_rate",
    "resolve_tool",
    "run_tool",
]
