"""Screenshot capture primitives — element, full document and viewport."""

from __future__ import annotations

import base64
import logging

from src.executor.session import BrowserSession
from src.models.screenshot import CheckOptions

logger = logging.getLogger(__name__)

_APPLY_STYLE_SCRIPT = """
({selectors, property, value}) => {
    window.__visualRegressionSaved = window.__visualRegressionSaved || [];
    for (const selector of selectors) {
        document.querySelectorAll(selector).forEach((el) => {
            window.__visualRegressionSaved.push([el, property, el.style.getPropertyValue(property)]);
            el.style.setProperty(property, value);
        });
    }
}
"""

_RESTORE_STYLE_SCRIPT = """
() => {
    (window.__visualRegressionSaved || []).reverse().forEach(([el, property, previous]) => {
        if (previous) {
            el.style.setProperty(property, previous);
        } else {
            el.style.removeProperty(property);
        }
    });
    window.__visualRegressionSaved = [];
}
"""


async def capture_element(session: BrowserSession, selector: str, options: CheckOptions) -> str:
    return await _capture(session, options, selector=selector)


async def capture_document(session: BrowserSession, options: CheckOptions) -> str:
    return await _capture(session, options, full_page=True)


async def capture_viewport(session: BrowserSession, options: CheckOptions) -> str:
    return await _capture(session, options)


async def _capture(
    session: BrowserSession,
    options: CheckOptions,
    full_page: bool = False,
    selector: str | None = None,
) -> str:
    """Take a screenshot with hidden/removed elements and excluded regions applied.

    Hidden and removed elements are restored afterwards, also when the
    screenshot fails.
    """
    styled = bool(options.hide or options.remove)
    try:
        if options.hide:
            await session.execute(
                _APPLY_STYLE_SCRIPT,
                {"selectors": options.hide, "property": "visibility", "value": "hidden"},
            )
        if options.remove:
            await session.execute(
                _APPLY_STYLE_SCRIPT,
                {"selectors": options.remove, "property": "display", "value": "none"},
            )
        data = await session.screenshot(
            full_page=full_page, selector=selector, mask=options.exclude
        )
    finally:
        if styled:
            await session.execute(_RESTORE_STYLE_SCRIPT)

    logger.debug("Captured %s (%d bytes)", selector or ("document" if full_page else "viewport"), len(data))
    return base64.b64encode(data).decode("ascii")
