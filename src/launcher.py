"""Visual regression launcher — wires sessions, capture primitives and the compare strategy."""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.compare.base import HOOK_NAMES, BaseCompare
from src.errors import CaptureError, ConfigurationError
from src.executor.capture import capture_document, capture_element, capture_viewport
from src.executor.resolution_iterator import ResolutionMode, iterate, resolve_mode
from src.executor.session import BrowserSession
from src.models.config import VisualRegressionConfig, parse_check_options, validate_config
from src.models.screenshot import (
    BrowserInfo,
    CaptureType,
    CheckOptions,
    ComparisonResult,
    Resolution,
    ScreenshotContext,
    ScreenshotMeta,
    ScreenshotOwner,
    SessionContext,
)
from src.user_agent import parse_user_agent

logger = logging.getLogger(__name__)

USER_AGENT_SCRIPT = "() => navigator.userAgent"


class CompareHooks:
    """The compare strategy's hooks, resolved once; hooks left at the base no-op are skipped."""

    def __init__(self, compare: BaseCompare):
        self.compare = compare
        self.enabled = frozenset(name for name in HOOK_NAMES if compare.implements(name))
        logger.debug("Compare strategy %s implements hooks: %s",
                     type(compare).__name__, ", ".join(sorted(self.enabled)))

    async def run(self, hook_name: str, *args: Any) -> Any:
        if hook_name not in self.enabled:
            return None
        return await getattr(self.compare, hook_name)(*args)


class VisualRegressionLauncher:
    """Drives the compare strategy's lifecycle hooks and opens sessions."""

    def __init__(self, config: VisualRegressionConfig | dict):
        self.config = validate_config(config)
        self.compare: BaseCompare = self.config.compare
        self.hooks = CompareHooks(self.compare)

    async def on_prepare(self) -> None:
        await self.hooks.run("on_prepare")

    async def before(
        self,
        session: BrowserSession,
        capabilities: Optional[dict[str, Any]] = None,
        specs: Optional[list[str]] = None,
    ) -> "VisualRegressionSession":
        """Identify the browser and return a session exposing the ``check_*`` commands."""
        try:
            user_agent = await session.execute(USER_AGENT_SCRIPT)
        except Exception as e:
            raise CaptureError(f"Cannot read user agent: {e}") from e
        browser = parse_user_agent(str(user_agent or ""))
        logger.info("Visual regression session for %s %s (mobile=%s)",
                    browser.name or "unknown browser", browser.version, session.is_mobile)

        session_context = SessionContext(
            browser=browser,
            desired_capabilities=capabilities or {},
            specs=specs or [],
        )
        vr_session = VisualRegressionSession(session, self.config, self.hooks, session_context)
        await self.hooks.run("before", session_context)
        return vr_session

    async def after(self) -> None:
        await self.hooks.run("after")

    async def on_complete(self) -> None:
        await self.hooks.run("on_complete")


class VisualRegressionSession:
    """One browser session's view of the engine.

    The resolution mode (viewports or orientations) is fixed when the session
    is opened.
    """

    def __init__(
        self,
        session: BrowserSession,
        config: VisualRegressionConfig,
        hooks: CompareHooks,
        session_context: SessionContext,
    ):
        self.session = session
        self.config = config
        self.hooks = hooks
        self.session_context = session_context
        self.mode: ResolutionMode = resolve_mode(
            session.is_mobile, config.viewports, config.orientations
        )

    @property
    def browser(self) -> BrowserInfo:
        return self.session_context.browser

    async def check_element(
        self,
        selector: str,
        options: CheckOptions | dict | None = None,
        *,
        owner: ScreenshotOwner,
    ) -> list[ComparisonResult]:
        if not selector:
            raise ConfigurationError("check_element requires a selector")
        return await self._check("element", options, owner, selector)

    async def check_document(
        self, options: CheckOptions | dict | None = None, *, owner: ScreenshotOwner
    ) -> list[ComparisonResult]:
        return await self._check("document", options, owner)

    async def check_viewport(
        self, options: CheckOptions | dict | None = None, *, owner: ScreenshotOwner
    ) -> list[ComparisonResult]:
        return await self._check("viewport", options, owner)

    async def _check(
        self,
        capture_type: CaptureType,
        options: CheckOptions | dict | None,
        owner: ScreenshotOwner,
        selector: str | None = None,
    ) -> list[ComparisonResult]:
        if owner is None or owner.is_anonymous:
            raise ConfigurationError(
                f"check_{capture_type} needs an owner with a suite or test name"
            )
        opts = parse_check_options(options)
        mode = self.mode.override(opts)
        pause = (
            opts.viewport_change_pause
            if opts.viewport_change_pause is not None
            else self.config.viewport_change_pause
        )

        try:
            url = await self.session.get_url()
        except Exception as e:
            raise CaptureError(f"Cannot read current URL: {e}") from e

        logger.info("check_%s%s at %s across %d %s(s)",
                    capture_type, f" {selector}" if selector else "", url,
                    len(mode.resolutions), mode.key)

        async def take_screenshot(resolution: Resolution) -> tuple[ScreenshotContext, str]:
            meta = ScreenshotMeta(
                url=url,
                element=selector,
                exclude=opts.exclude,
                hide=opts.hide,
                remove=opts.remove,
                **{mode.key: resolution},
            )
            context = ScreenshotContext(
                type=capture_type,
                browser=self.browser,
                desired_capabilities=self.session_context.desired_capabilities,
                suite=owner.suite,
                test=owner.test,
                meta=meta,
                options=opts,
            )
            await self.hooks.run("before_screenshot", context)
            base64_screenshot = await self._capture(capture_type, opts, selector)
            await self.hooks.run("after_screenshot", context, base64_screenshot)
            return context, base64_screenshot

        async def process_screenshot(context: ScreenshotContext, base64_screenshot: str) -> ComparisonResult:
            return await self.hooks.run("process_screenshot", context, base64_screenshot)

        return await iterate(self.session, pause, mode, take_screenshot, process_screenshot)

    async def _capture(self, capture_type: CaptureType, opts: CheckOptions, selector: str | None) -> str:
        match capture_type:
            case "element":
                return await capture_element(self.session, selector, opts)
            case "document":
                return await capture_document(self.session, opts)
            case _:
                return await capture_viewport(self.session, opts)
