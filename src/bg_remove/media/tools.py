"""
External Tool Resolution for bg-remove
======================================

Locates ffmpeg, ffprobe and gifsicle and runs them with a timeout.
"""

import logging
import os
import shutil
import subprocess
import sys
from typing import Dict, Optional, Sequence

from bg_remove.constants import DEFAULT_TOOL_TIMEOUT
from bg_remove.core.errors import DependencyError, ToolError

logger = logging.getLogger(__name__)


FFMPEG_INSTALL_HINT = (
    "Install it:\n"
    "  Windows: winget install FFmpeg\n"
    "  macOS:   brew install ffmpeg\n"
    "  Linux:   sudo apt install ffmpeg"
)

GIFSICLE_INSTALL_HINT = (
    "Install it:\n"
    "  Windows: winget install gifsicle\n"
    "  macOS:   brew install gifsicle\n"
    "  Linux:   sudo apt install gifsicle"
)

TOOL_ENV_VARS: Dict[str, str] = {
    "ffmpeg": "FFMPEG_BINARY",
    "ffprobe": "FFPROBE_BINARY",
    "gifsicle": "GIFSICLE_BINARY",
}

TOOL_HINTS: Dict[str, str] = {
    "ffmpeg": f"FFmpeg not found. {FFMPEG_INSTALL_HINT}",
    "ffprobe": f"FFprobe not found. It is typically included with FFmpeg. {FFMPEG_INSTALL_HINT}",
    "gifsicle": f"gifsicle not found. {GIFSICLE_INSTALL_HINT}",
}


def resolve_tool(name: str) -> str:
    """
    Resolve an executable by name.

    The ``<NAME>_BINARY`` environment variable wins over PATH lookup.

    Raises:
        DependencyError: if the tool cannot be found.
    """
    env_var = TOOL_ENV_VARS.get(name)
    override = os.environ.get(env_var) if env_var else None
    if override:
        if shutil.which(override) is None and not os.path.isfile(override):
            raise DependencyError(
                f"{env_var} points to '{override}', which does not exist.\n"
                f"{TOOL_HINTS.get(name, '')}"
            )
        return override

    executable = f"{name}.exe" if sys.platform == "win32" else name
    found = shutil.which(executable)
    if found is None:
        raise DependencyError(TOOL_HINTS.get(name, f"{name} not found on PATH"))

    logger.debug("Resolved %s -> %s", name, found)
    return found


def tool_timeout() -> float:
    """Per-call timeout, overridable through BG_REMOVE_TOOL_TIMEOUT."""
    value = os.environ.get("BG_REMOVE_TOOL_TIMEOUT")
    if not value:
        return DEFAULT_TOOL_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("Ignoring invalid BG_REMOVE_TOOL_TIMEOUT=%r", value)
        return DEFAULT_TOOL_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_TOOL_TIMEOUT


def run_tool(
    tool: str,
    command: Sequence[str],
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """
    Run an external command and return the completed process.

    Raises:
        DependencyError: the executable vanished between resolution and use.
        ToolError: non-zero exit status or timeout.
    """
    timeout = timeout if timeout is not None else tool_timeout()
    logger.debug("Running: %s", " ".join(str(part) for part in command))

    try:
        result = subprocess.run(
            [str(part) for part in command],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise DependencyError(TOOL_HINTS.get(tool, f"{tool} not found: {e}")) from e
    except subprocess.TimeoutExpired as e:
        raise ToolError(tool, f"timed out after {timeout:.0f} seconds", command) from e

    if result.returncode != 0:
        stderr_tail = "\n".join((result.stderr or "").strip().splitlines()[-10:])
        raise ToolError(
            tool,
            f"exit status {result.returncode}\n{stderr_tail}",
            command,
            stderr=result.stderr or "",
        )

    return result
