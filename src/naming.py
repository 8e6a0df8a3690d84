"""Default artifact naming — derive stable file paths from a screenshot context."""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import Callable, Union

from src.models.screenshot import ScreenshotContext

NameFunction = Callable[[ScreenshotContext], Union[str, Path]]

_UNSAFE = re.compile(r"[^A-Za-z0-9.-]+")
_DIGEST_LENGTH = 10


def slugify(value: str) -> str:
    """Collapse anything that is not filename-safe into single underscores."""
    return _UNSAFE.sub("_", value).strip("_")


def context_digest(context: ScreenshotContext) -> str:
    """Short hash over the raw identifying fields.

    Slugging is lossy (``#nav`` and ``nav`` share a slug), so the hash keeps
    distinct contexts on distinct files.
    """
    resolution = context.meta.resolution
    key = json.dumps([
        context.suite,
        context.test,
        context.type,
        context.meta.element,
        context.browser.name,
        context.browser.version,
        str(resolution) if resolution is not None else None,
    ])
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]


def screenshot_filename(context: ScreenshotContext) -> str:
    """Build ``<suite>_<test>_<type>[_<element>]_<browser>_<resolution>_<digest>.png``."""
    resolution = context.meta.resolution
    parts = [
        context.suite,
        context.test,
        context.type,
        context.meta.element or "",
        f"{context.browser.name}{context.browser.version}",
        str(resolution) if resolution is not None else "",
    ]
    slug = "_".join(s for s in (slugify(p) for p in parts) if s)
    return f"{slug or 'screenshot'}_{context_digest(context)}.png"


def make_name_function(base_dir: str | Path) -> NameFunction:
    """Return a naming function that places files under ``base_dir``."""
    base = Path(base_dir)

    def name(context: ScreenshotContext) -> Path:
        return base / screenshot_filename(context)

    return name
