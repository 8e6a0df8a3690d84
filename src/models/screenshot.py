"""Screenshot capture and comparison data structures."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Orientation = Literal["portrait", "landscape"]
CaptureType = Literal["element", "document", "viewport"]


class ViewportSize(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


Resolution = Union[ViewportSize, str]


class BrowserInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: str = ""
    user_agent: str = ""


class ScreenshotOwner(BaseModel):
    """The suite and test a screenshot belongs to."""

    model_config = ConfigDict(frozen=True)

    suite: str = ""
    test: str = ""

    @property
    def is_anonymous(self) -> bool:
        return not (self.suite or self.test)


class SessionContext(BaseModel):
    """What a compare strategy learns when a browser session opens."""

    model_config = ConfigDict(frozen=True)

    browser: BrowserInfo = Field(default_factory=BrowserInfo)
    desired_capabilities: dict[str, Any] = Field(default_factory=dict)
    specs: list[str] = Field(default_factory=list)


class CheckOptions(BaseModel):
    """Per-call options accepted by the ``check_*`` commands.

    ``None`` means "use the configured default".
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude: list[str] = Field(default_factory=list)
    hide: list[str] = Field(default_factory=list)
    remove: list[str] = Field(default_factory=list)
    viewport_change_pause: Optional[int] = Field(default=None, ge=0)  # ms
    tolerance: Optional[float] = Field(default=None, ge=0)
    ignore_comparison: Optional[str] = None
    viewports: Optional[list[ViewportSize]] = None
    orientations: Optional[list[Orientation]] = None


class ScreenshotMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = ""
    element: Optional[str] = None
    exclude: list[str] = Field(default_factory=list)
    hide: list[str] = Field(default_factory=list)
    remove: list[str] = Field(default_factory=list)
    viewport: Optional[ViewportSize] = None
    orientation: Optional[Orientation] = None

    @property
    def resolution(self) -> Resolution | None:
        return self.viewport if self.viewport is not None else self.orientation


class ScreenshotContext(BaseModel):
    """Describes one capture: what was taken, where, and with which options."""

    model_config = ConfigDict(frozen=True)

    type: CaptureType
    browser: BrowserInfo = Field(default_factory=BrowserInfo)
    desired_capabilities: dict[str, Any] = Field(default_factory=dict)
    suite: str = ""
    test: str = ""
    meta: ScreenshotMeta = Field(default_factory=ScreenshotMeta)
    options: CheckOptions = Field(default_factory=CheckOptions)


class ComparisonResult(BaseModel):
    """Outcome of processing one screenshot against its reference."""

    mis_match_percentage: float = 0.0
    is_same_dimensions: bool = True
    is_within_tolerance: bool = True
    reference_existed: bool = False

    @property
    def passed(self) -> bool:
        return self.is_same_dimensions and self.is_within_tolerance
