"""Save screenshot — writes every capture as the new reference, without comparing."""

from __future__ import annotations

import logging
from pathlib import Path

from src.compare.base import BaseCompare
from src.errors import ConfigurationError
from src.models.screenshot import ComparisonResult, ScreenshotContext
from src.naming import NameFunction
from src.storage.artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


class SaveScreenshot(BaseCompare):
    """Refreshes references intentionally, e.g. after an accepted redesign."""

    def __init__(self, screenshot_name: NameFunction | None, store: ArtifactStore | None = None):
        if not callable(screenshot_name):
            raise ConfigurationError("SaveScreenshot requires a screenshot_name function")
        self.get_screenshot_name = screenshot_name
        self.store = store or ArtifactStore()

    async def process_screenshot(
        self, context: ScreenshotContext, base64_screenshot: str
    ) -> ComparisonResult:
        path = Path(self.get_screenshot_name(context))
        existed = self.store.exists(path)
        self.store.write_base64(path, base64_screenshot)
        logger.info("Saved screenshot %s", path)
        return ComparisonResult(
            mis_match_percentage=0,
            is_within_tolerance=True,
            is_same_dimensions=True,
            reference_existed=existed,
        )
