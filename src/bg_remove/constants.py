"""
Constants for bg-remove
=======================

Output sizes, byte budget, quality presets and refinement weights.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple


# Twitch emote sizes - these are held to the byte budget
BUDGETED_SIZES: Tuple[int, ...] = (28, 56, 112)

# All square output sizes (512 is an export size, exempt from the budget)
OUTPUT_SIZES: Tuple[int, ...] = (28, 56, 112, 512)

RAW_VARIANT = "raw"

# 1 MiB per emote file
MAX_EMOTE_BYTES = 1_048_576

# Clips longer than this produce a warning, not an error
MAX_CLIP_DURATION = 30.0

DEFAULT_ALPHA_THRESHOLD = 128

# Raw variant always encodes with a full palette
RAW_MAX_COLORS = 256

SUPPORTED_VIDEO_EXTENSIONS: FrozenSet[str] = frozenset({
    ".mp4",
    ".mov",
    ".avi",
    ".mkv",
    ".webm",
    ".flv",
    ".wmv",
    ".m4v",
})


@dataclass(frozen=True)
class QualityPreset:
    """Base encoding parameters for the sized variants."""
    name: str
    fps: int
    max_colors: int
    dither: str
    lossy: int          # gifsicle --lossy level, 0 skips the optimizer


QUALITY_PRESETS: Dict[str, QualityPreset] = {
    "high": QualityPreset("high", fps=15, max_colors=256, dither="sierra2_4a", lossy=30),
    "balanced": QualityPreset("balanced", fps=12, max_colors=256, dither="sierra2_4a", lossy=60),
    "small": QualityPreset("small", fps=10, max_colors=192, dither="sierra2_4a", lossy=80),
}

DEFAULT_QUALITY = "balanced"

# Temporal smoothing weights (previous, current, next)
TEMPORAL_WEIGHTS: Tuple[float, float, float] = (0.15, 0.70, 0.15)

# Edge refinement Gaussian blur sigma
EDGE_BLUR_SIGMA = 0.5

# Working resolution target on the short side for the matting network
DOWNSAMPLE_TARGET = 384.0
DOWNSAMPLE_MIN = 0.125
DOWNSAMPLE_MAX = 1.0

# Subprocess timeout in seconds for external tools
DEFAULT_TOOL_TIMEOUT = 600.0

FRAME_PATTERN = "frame_%04d.png"
