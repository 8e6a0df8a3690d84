"""Exception hierarchy for the visual regression engine.

Every error raised by this package derives from ``VisualRegressionError`` so
callers can catch one type around a ``check_*`` command.
"""

from __future__ import annotations

from typing import Any


class VisualRegressionError(Exception):
    """Base exception for all visual regression errors.

    Attributes:
        message: Human-readable error message
        resolution: The viewport size or orientation being processed, if any
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        resolution: Any = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resolution = resolution
        self.context = context or {}

    def __str__(self) -> str:
        if self.resolution is not None:
            return f"{self.message} (resolution: {self.resolution})"
        return self.message


class ConfigurationError(VisualRegressionError):
    """Compare strategy, naming functions or options are missing or invalid."""


class CaptureError(VisualRegressionError):
    """The browser session or a capture primitive failed for a resolution."""


class StorageError(VisualRegressionError):
    """Reading, writing or deleting an artifact file failed."""


class ComparisonError(VisualRegressionError):
    """The image-diff primitive could not compare two images."""
