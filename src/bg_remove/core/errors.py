"""
Error Taxonomy for bg-remove
============================

Every fatal condition raised by the pipeline derives from PipelineError,
so callers can catch one type and report the message.
"""

from typing import Optional, Sequence


class PipelineError(Exception):
    """Base class for fatal pipeline errors."""


class InputValidationError(PipelineError):
    """Bad input file or option. Raised before any expensive work."""

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter


class DependencyError(PipelineError):
    """An external tool or the matting model could not be resolved."""


class ToolError(PipelineError):
    """An external tool ran but failed or timed out."""

    def __init__(
        self,
        tool: str,
        message: str,
        command: Optional[Sequence[str]] = None,
        stderr: str = "",
    ):
        super().__init__(f"{tool} failed: {message}")
        self.tool = tool
        self.command = list(command) if command else []
        self.stderr = stderr


class InvariantViolation(PipelineError):
    """Internal consistency broken (frame counts, ordering, state reuse)."""
