"""Resolution iterator — applies each viewport/orientation, captures, and processes.

Resolutions run strictly one after another: they all mutate the same browser
session, so only one viewport or orientation can be active at a time.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence, TypeVar, Union

from src.errors import CaptureError, ConfigurationError, VisualRegressionError
from src.executor.session import BrowserSession
from src.models.screenshot import CheckOptions, Orientation, Resolution, ScreenshotContext, ViewportSize

logger = logging.getLogger(__name__)

T = TypeVar("T")

CaptureFunction = Callable[[Resolution], Awaitable[tuple[ScreenshotContext, str]]]
ProcessFunction = Callable[[ScreenshotContext, str], Awaitable[T]]


@dataclass(frozen=True)
class ViewportMode:
    """Desktop sessions: each resolution is a viewport size to resize to."""

    resolutions: tuple[ViewportSize, ...]
    key = "viewport"

    async def apply(self, session: BrowserSession, resolution: ViewportSize) -> None:
        await session.set_viewport_size(resolution)

    def override(self, options: CheckOptions) -> "ViewportMode":
        if options.viewports is None:
            return self
        return ViewportMode(tuple(options.viewports))


@dataclass(frozen=True)
class OrientationMode:
    """Mobile sessions: each resolution is an orientation to rotate the device to."""

    resolutions: tuple[Orientation, ...]
    key = "orientation"

    async def apply(self, session: BrowserSession, resolution: Orientation) -> None:
        await session.set_orientation(resolution)

    def override(self, options: CheckOptions) -> "OrientationMode":
        if options.orientations is None:
            return self
        return OrientationMode(tuple(options.orientations))


ResolutionMode = Union[ViewportMode, OrientationMode]


def resolve_mode(
    is_mobile: bool,
    viewports: Sequence[ViewportSize],
    orientations: Sequence[Orientation],
) -> ResolutionMode:
    if is_mobile:
        return OrientationMode(tuple(orientations))
    return ViewportMode(tuple(viewports))


async def iterate(
    session: BrowserSession,
    settle_delay_ms: int,
    mode: ResolutionMode,
    capture: CaptureFunction,
    process: ProcessFunction[T],
) -> list[T]:
    """Run capture + process for every resolution of ``mode``, in order.

    Any failure aborts the whole run; results gathered for earlier
    resolutions are dropped.

    Raises:
        ConfigurationError: No resolutions, or a negative settle delay.
        CaptureError: Applying a resolution or capturing failed.
        StorageError, ComparisonError: Raised while processing, annotated
            with the failing resolution.
    """
    if not mode.resolutions:
        raise ConfigurationError("At least one resolution is required")
    if settle_delay_ms < 0:
        raise ConfigurationError(f"Settle delay must be >= 0, got {settle_delay_ms}")

    results: list[T] = []
    for resolution in mode.resolutions:
        try:
            await mode.apply(session, resolution)
            logger.debug("Applied %s %s, waiting %dms", mode.key, resolution, settle_delay_ms)
            await asyncio.sleep(settle_delay_ms / 1000)
            context, image = await capture(resolution)
        except CaptureError as e:
            _annotate(e, resolution)
            raise
        except Exception as e:
            logger.error("Capture failed at %s %s: %s", mode.key, resolution, e)
            raise CaptureError(f"Capture failed: {e}", resolution=resolution) from e

        try:
            result = await process(context, image)
        except VisualRegressionError as e:
            _annotate(e, resolution)
            logger.error("Processing failed at %s %s: %s", mode.key, resolution, e)
            raise
        except Exception as e:
            logger.error("Processing failed at %s %s: %s", mode.key, resolution, e)
            raise CaptureError(f"Processing failed: {e}", resolution=resolution) from e

        results.append(result)

    return results


def _annotate(error: VisualRegressionError, resolution: Any) -> None:
    if error.resolution is None:
        error.resolution = resolution
