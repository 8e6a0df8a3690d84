"""Minimal user-agent parsing — browser name and major.minor version."""

from __future__ import annotations

import re

from src.models.screenshot import BrowserInfo

# Order matters: Edge and Opera also advertise Chrome, Chrome also advertises Safari.
_PATTERNS = (
    ("Edge", re.compile(r"Edg(?:e|A|iOS)?/([\d.]+)")),
    ("Opera", re.compile(r"OPR/([\d.]+)")),
    ("Firefox", re.compile(r"(?:Firefox|FxiOS)/([\d.]+)")),
    ("Chrome", re.compile(r"(?:Chrome|CriOS)/([\d.]+)")),
    ("Safari", re.compile(r"Version/([\d.]+).*Safari/")),
    ("PhantomJS", re.compile(r"PhantomJS/([\d.]+)")),
)


def parse_user_agent(user_agent: str) -> BrowserInfo:
    """Extract browser name and version; unknown agents keep only the raw string."""
    for name, pattern in _PATTERNS:
        match = pattern.search(user_agent)
        if match:
            version = ".".join(match.group(1).split(".")[:2])
            return BrowserInfo(name=name, version=version, user_agent=user_agent)
    return BrowserInfo(user_agent=user_agent)
