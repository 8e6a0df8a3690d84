"""Local compare — keeps reference images on disk and diffs each capture against them."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

from src.compare.base import BaseCompare
from src.compare.image_diff import IGNORE_NOTHING, compare_images
from src.errors import ComparisonError, ConfigurationError
from src.models.screenshot import ComparisonResult, ScreenshotContext
from src.naming import NameFunction
from src.storage.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)

DEFAULT_MIS_MATCH_TOLERANCE = 0.01


class LocalCompare(BaseCompare):
    """Compare strategy backed by reference images on the local filesystem.

    On the first run for a context the capture becomes the reference. Later
    runs diff against that reference; a diff image is written while the two
    differ beyond tolerance and removed once they match again. The reference
    itself is never replaced here.
    """

    def __init__(
        self,
        screenshot_name: NameFunction | None,
        reference_name: NameFunction | None,
        diff_name: NameFunction | None,
        mis_match_tolerance: float = DEFAULT_MIS_MATCH_TOLERANCE,
        ignore_comparison: str = IGNORE_NOTHING,
        store: ArtifactStore | None = None,
    ):
        missing = [
            label
            for label, fn in (
                ("screenshot_name", screenshot_name),
                ("reference_name", reference_name),
                ("diff_name", diff_name),
            )
            if not callable(fn)
        ]
        if missing:
            raise ConfigurationError(
                f"LocalCompare requires naming functions: {', '.join(missing)}"
            )
        if mis_match_tolerance < 0:
            raise ConfigurationError("mis_match_tolerance must be >= 0")

        self.get_screenshot_name = screenshot_name
        self.get_reference_name = reference_name
        self.get_diff_name = diff_name
        self.mis_match_tolerance = mis_match_tolerance
        self.ignore_comparison = ignore_comparison or IGNORE_NOTHING
        self.store = store or ArtifactStore()

    async def process_screenshot(
        self, context: ScreenshotContext, base64_screenshot: str
    ) -> ComparisonResult:
        screenshot_path = Path(self.get_screenshot_name(context))
        reference_path = Path(self.get_reference_name(context))

        self.store.write_base64(screenshot_path, base64_screenshot)

        if not self.store.exists(reference_path):
            logger.info("First run - creating reference %s", reference_path)
            self.store.write_base64(reference_path, base64_screenshot)
            return ComparisonResult(
                mis_match_percentage=0,
                is_within_tolerance=True,
                is_same_dimensions=True,
                reference_existed=False,
            )

        logger.debug("Reference exists, comparing with %s", reference_path)
        ignore = context.options.ignore_comparison or self.ignore_comparison
        reference = self.store.read_file(reference_path)
        compare_data = compare_images(reference, _decode(base64_screenshot), ignore)

        is_same_dimensions = bool(compare_data.is_same_dimensions)
        try:
            mis_match_percentage = float(compare_data.mis_match_percentage)
        except (TypeError, ValueError) as e:
            raise ComparisonError(
                f"Non-numeric mismatch percentage: {compare_data.mis_match_percentage!r}"
            ) from e

        tolerance = self.resolve_tolerance(context)
        is_within_tolerance = mis_match_percentage < tolerance

        diff_path = Path(self.get_diff_name(context))
        if is_same_dimensions and is_within_tolerance:
            logger.debug("Image is within tolerance or the same")
            self.store.remove_file(diff_path)
        else:
            logger.warning(
                "Image is different! %.2f%% (tolerance %.2f%%, same dimensions: %s)",
                mis_match_percentage, tolerance, is_same_dimensions,
            )
            self.store.write_file(diff_path, compare_data.get_diff_png())

        return ComparisonResult(
            mis_match_percentage=mis_match_percentage,
            is_within_tolerance=is_within_tolerance,
            is_same_dimensions=is_same_dimensions,
            reference_existed=True,
        )

    def resolve_tolerance(self, context: ScreenshotContext) -> float:
        if context.options.tolerance is not None:
            return context.options.tolerance
        return self.mis_match_tolerance


def _decode(base64_screenshot: str) -> bytes:
    try:
        return base64.b64decode(base64_screenshot, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ComparisonError(f"Captured screenshot is not valid base64: {e}") from e
