"""Pytest configuration and shared fixtures."""

import base64
import io
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from src.compare.local_compare import LocalCompare
from src.models.config import VisualRegressionConfig
from src.models.screenshot import (
    BrowserInfo,
    CheckOptions,
    ScreenshotContext,
    ScreenshotMeta,
    ViewportSize,
)
from src.naming import make_name_function


# ============================================================================
# Image helpers
# ============================================================================


def make_png(width: int = 20, height: int = 10, color=(255, 255, 255, 255), pixels=None) -> bytes:
    """Build a PNG in memory; ``pixels`` maps (x, y) to an RGBA colour."""
    image = Image.new("RGBA", (width, height), color)
    for (x, y), value in (pixels or {}).items():
        image.putpixel((x, y), value)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def b64():
    return to_base64


@pytest.fixture
def white_png() -> bytes:
    return make_png()


@pytest.fixture
def white_base64(white_png: bytes) -> str:
    return to_base64(white_png)


# ============================================================================
# Context and strategy fixtures
# ============================================================================


def make_context(**overrides: Any) -> ScreenshotContext:
    options = overrides.pop("options", CheckOptions())
    meta = overrides.pop("meta", ScreenshotMeta(
        url="https://example.com/",
        viewport=ViewportSize(width=600, height=1000),
    ))
    fields = {
        "type": "document",
        "browser": BrowserInfo(name="Chrome", version="122.0", user_agent="Chrome/122.0"),
        "suite": "home",
        "test": "renders header",
        "meta": meta,
        "options": options,
    }
    fields.update(overrides)
    return ScreenshotContext(**fields)


@pytest.fixture
def context() -> ScreenshotContext:
    return make_context()


@pytest.fixture
def context_factory():
    return make_context


@pytest.fixture
def artifact_dirs(tmp_path: Path) -> dict[str, Path]:
    return {
        "screen": tmp_path / "screen",
        "reference": tmp_path / "reference",
        "diff": tmp_path / "diff",
    }


@pytest.fixture
def local_compare(artifact_dirs: dict[str, Path]) -> LocalCompare:
    return LocalCompare(
        screenshot_name=make_name_function(artifact_dirs["screen"]),
        reference_name=make_name_function(artifact_dirs["reference"]),
        diff_name=make_name_function(artifact_dirs["diff"]),
    )


# ============================================================================
# Browser session fixtures
# ============================================================================


class FakeSession:
    """In-memory BrowserSession that records every call."""

    def __init__(self, is_mobile: bool = False, png: bytes | None = None):
        self.is_mobile = is_mobile
        self.png = png or make_png()
        self.calls: list[tuple] = []
        self.url = "https://example.com/"
        self.user_agent = (
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/122.0.6261.94 Safari/537.36"
        )

    async def get_url(self) -> str:
        self.calls.append(("get_url",))
        return self.url

    async def execute(self, script: str, arg: Any = None) -> Any:
        self.calls.append(("execute", script, arg))
        if "navigator.userAgent" in script:
            return self.user_agent
        return None

    async def set_viewport_size(self, size: ViewportSize) -> None:
        self.calls.append(("set_viewport_size", size))

    async def set_orientation(self, orientation: str) -> None:
        self.calls.append(("set_orientation", orientation))

    async def screenshot(self, *, full_page=False, selector=None, mask=()) -> bytes:
        self.calls.append(("screenshot", full_page, selector, tuple(mask)))
        return self.png


@pytest.fixture
def session_factory():
    return FakeSession


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def mobile_session() -> FakeSession:
    return FakeSession(is_mobile=True)


@pytest.fixture
def vr_config(local_compare: LocalCompare) -> VisualRegressionConfig:
    return VisualRegressionConfig(
        compare=local_compare,
        viewport_change_pause=0,
        viewports=[ViewportSize(width=600, height=1000), ViewportSize(width=320, height=480)],
    )


@pytest.fixture
def mock_page() -> AsyncMock:
    page = AsyncMock()
    page.url = "https://example.com/page"
    page.viewport_size = {"width": 1280, "height": 720}
    return page
