"""
Session Management for bg-remove
================================

A session is one run's private temporary directory tree:

    <root>/extracted    decoded RGB frames
    <root>/masks        raw and refined opacity masks
    <root>/composited   RGBA frames fed to the encoder
    <root>/output       encoded GIF variants before they are copied out

The tree is created on entry and removed on exit, whatever the exit path,
unless the caller asked to keep it.
"""

import logging
import shutil
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionPaths:
    """Directory layout of a session."""
    root: Path
    extracted: Path
    masks: Path
    composited: Path
    output: Path


@dataclass
class SessionConfig:
    """Session configuration."""
    keep_temp: bool = False
    prefix: str = "bg-remove"
    base_directory: Optional[Path] = None   # defaults to the system temp dir


class Session:
    """
    Scoped temporary working directory for one pipeline run.

    Example:
        >>> with Session(SessionConfig(keep_temp=False)) as paths:
        ...     extract_frames(video, paths.extracted)
        >>> # directory tree is gone here
    """

    def __init__(self, config: Optional[SessionConfig] = None):
        self.config = config or SessionConfig()
        self.session_id = uuid.uuid4().hex[:8]
        self._paths: Optional[SessionPaths] = None

    @property
    def paths(self) -> SessionPaths:
        if self._paths is None:
            raise RuntimeError("Session has not been created")
        return self._paths

    @property
    def is_active(self) -> bool:
        return self._paths is not None

    def create(self) -> SessionPaths:
        """Allocate a uniquely named root and its subdirectories."""
        if self._paths is not None:
            return self._paths

        base = self.config.base_directory
        if base is not None:
            base.mkdir(parents=True, exist_ok=True)

        root = Path(tempfile.mkdtemp(
            prefix=f"{self.config.prefix}-{self.session_id}-",
            dir=str(base) if base is not None else None,
        ))
        paths = SessionPaths(
            root=root,
            extracted=root / "extracted",
            masks=root / "masks",
            composited=root / "composited",
            output=root / "output",
        )
        for directory in (paths.extracted, paths.masks, paths.composited, paths.output):
            directory.mkdir()

        self._paths = paths
        logger.debug("Created session directory %s", root)
        return paths

    def cleanup(self) -> None:
        """Remove the session tree. Safe to call more than once."""
        if self._paths is None:
            return
        root = self._paths.root
        self._paths = None
        shutil.rmtree(root, ignore_errors=True)
        logger.debug("Removed session directory %s", root)

    def close(self) -> Optional[Path]:
        """
        End the session honouring keep_temp.

        Returns:
            The kept root directory, or None if it was removed.
        """
        if self._paths is None:
            return None
        if self.config.keep_temp:
            root = self._paths.root
            logger.info("Temp files kept at: %s", root)
            return root
        self.cleanup()
        return None

    def __enter__(self) -> SessionPaths:
        return self.create()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_session(
    keep_temp: bool = False,
    base_directory: Optional[Union[str, Path]] = None,
) -> Session:
    """Convenience constructor."""
    return Session(SessionConfig(
        keep_temp=keep_temp,
        base_directory=Path(base_directory) if base_directory else None,
    ))
