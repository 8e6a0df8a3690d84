"""Compare strategy interface — the hooks the launcher calls around each capture."""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.screenshot import ComparisonResult, ScreenshotContext, SessionContext

HOOK_NAMES = (
    "on_prepare",
    "before",
    "before_screenshot",
    "after_screenshot",
    "process_screenshot",
    "after",
    "on_complete",
)


class BaseCompare(ABC):
    """Base class for compare strategies.

    Only ``process_screenshot`` must be implemented; every other hook is a
    no-op unless a subclass overrides it.
    """

    async def on_prepare(self) -> None:
        return None

    async def before(self, context: SessionContext) -> None:
        return None

    async def before_screenshot(self, context: ScreenshotContext) -> None:
        return None

    async def after_screenshot(self, context: ScreenshotContext, base64_screenshot: str) -> None:
        return None

    @abstractmethod
    async def process_screenshot(
        self, context: ScreenshotContext, base64_screenshot: str
    ) -> ComparisonResult:
        ...

    async def after(self) -> None:
        return None

    async def on_complete(self) -> None:
        return None

    def implements(self, hook_name: str) -> bool:
        """Whether this strategy overrides ``hook_name`` with its own behaviour."""
        if hook_name not in HOOK_NAMES:
            return False
        return getattr(type(self), hook_name) is not getattr(BaseCompare, hook_name)
