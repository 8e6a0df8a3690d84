"""Browser session seam — what the engine needs from an automation driver."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from playwright.async_api import Page

from src.models.screenshot import Orientation, ViewportSize

logger = logging.getLogger(__name__)


class BrowserSession(Protocol):
    is_mobile: bool

    async def get_url(self) -> str: ...

    async def execute(self, script: str, arg: Any = None) -> Any: ...

    async def set_viewport_size(self, size: ViewportSize) -> None: ...

    async def set_orientation(self, orientation: Orientation) -> None: ...

    async def screenshot(
        self,
        *,
        full_page: bool = False,
        selector: str | None = None,
        mask: Sequence[str] = (),
    ) -> bytes: ...


class PlaywrightSession:
    """Adapts a Playwright ``Page`` to the ``BrowserSession`` protocol.

    Playwright has no device rotation, so orientation changes swap the
    current viewport's width and height.
    """

    def __init__(self, page: Page, is_mobile: bool = False):
        self.page = page
        self.is_mobile = is_mobile

    async def get_url(self) -> str:
        return self.page.url

    async def execute(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    async def set_viewport_size(self, size: ViewportSize) -> None:
        await self.page.set_viewport_size({"width": size.width, "height": size.height})

    async def set_orientation(self, orientation: Orientation) -> None:
        current = self.page.viewport_size or {"width": 1280, "height": 720}
        short_side = min(current["width"], current["height"])
        long_side = max(current["width"], current["height"])
        if orientation == "portrait":
            width, height = short_side, long_side
        else:
            width, height = long_side, short_side
        logger.debug("Rotating to %s (%dx%d)", orientation, width, height)
        await self.page.set_viewport_size({"width": width, "height": height})

    async def screenshot(
        self,
        *,
        full_page: bool = False,
        selector: str | None = None,
        mask: Sequence[str] = (),
    ) -> bytes:
        locators = [self.page.locator(s) for s in mask]
        if selector:
            return await self.page.locator(selector).first.screenshot(mask=locators)
        return await self.page.screenshot(full_page=full_page, mask=locators)
