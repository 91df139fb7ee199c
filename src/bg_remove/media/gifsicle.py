"""
gifsicle Integration for bg-remove
==================================
"""

from pathlib import Path
from typing import List, Optional

from bg_remove.media.tools import resolve_tool, run_tool


def build_optimize_command(
    gifsicle: str,
    input_path: Path,
    output_path: Path,
    lossy: int,
) -> List[str]:
    return [
        gifsicle,
        "-O3",
        f"--lossy={lossy}",
        "--no-comments",
        "--no-names",
        "-o", str(output_path),
        str(input_path),
    ]


class GifsicleOptimizer:
    """GifOptimizer backed by gifsicle's lossy mode."""

    def __init__(self, executable: Optional[str] = None):
        self._executable = executable

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = resolve_tool("gifsicle")
        return self._executable

    def optimize(self, input_path: Path, output_path: Path, lossy: int) -> Path:
        run_tool("gifsicle", build_optimize_command(
            self.executable, Path(input_path), Path(output_path), lossy,
        ))
        return Path(output_path)
