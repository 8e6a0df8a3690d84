"""Configuration models for the visual regression engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.compare.base import BaseCompare
from src.compare.image_diff import IGNORE_NOTHING
from src.compare.local_compare import DEFAULT_MIS_MATCH_TOLERANCE, LocalCompare
from src.errors import ConfigurationError
from src.models.screenshot import CheckOptions, Orientation, ViewportSize
from src.naming import make_name_function

DEFAULT_VIEWPORT_CHANGE_PAUSE = 100  # ms


class VisualRegressionConfig(BaseModel):
    """Runtime configuration handed to the launcher."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    compare: BaseCompare
    viewport_change_pause: int = Field(default=DEFAULT_VIEWPORT_CHANGE_PAUSE, ge=0)
    viewports: list[ViewportSize] = Field(
        default_factory=lambda: [ViewportSize(width=1280, height=720)]
    )
    orientations: list[Orientation] = Field(
        default_factory=lambda: ["portrait", "landscape"]
    )

    @field_validator("viewports", "orientations")
    @classmethod
    def non_empty(cls, v: list) -> list:
        if not v:
            raise ValueError("at least one resolution is required")
        return v


class VisualRegressionSettings(BaseModel):
    """JSON-serialisable settings used to build a ``VisualRegressionConfig``."""

    viewport_change_pause: int = Field(default=DEFAULT_VIEWPORT_CHANGE_PAUSE, ge=0)
    viewports: list[ViewportSize] = Field(
        default_factory=lambda: [ViewportSize(width=1280, height=720)]
    )
    orientations: list[Orientation] = Field(
        default_factory=lambda: ["portrait", "landscape"]
    )

    # Comparison
    mis_match_tolerance: float = Field(default=DEFAULT_MIS_MATCH_TOLERANCE, ge=0)
    ignore_comparison: str = IGNORE_NOTHING

    # Artifact directories
    screenshot_dir: str = "./visual-regression/screen"
    reference_dir: str = "./visual-regression/reference"
    diff_dir: str = "./visual-regression/diff"

    @classmethod
    def load(cls, path: str | Path) -> "VisualRegressionSettings":
        """Load settings from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save settings to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def build_config(self) -> VisualRegressionConfig:
        """Wire a ``LocalCompare`` with the default naming scheme."""
        compare = LocalCompare(
            screenshot_name=make_name_function(self.screenshot_dir),
            reference_name=make_name_function(self.reference_dir),
            diff_name=make_name_function(self.diff_dir),
            mis_match_tolerance=self.mis_match_tolerance,
            ignore_comparison=self.ignore_comparison,
        )
        return VisualRegressionConfig(
            compare=compare,
            viewport_change_pause=self.viewport_change_pause,
            viewports=self.viewports,
            orientations=self.orientations,
        )


def validate_config(config: object) -> VisualRegressionConfig:
    """Ensure a usable configuration with a compare strategy was supplied."""
    if isinstance(config, VisualRegressionConfig):
        return config
    if isinstance(config, dict):
        if not isinstance(config.get("compare"), BaseCompare):
            raise ConfigurationError(
                "Please provide a visual regression configuration with a compare strategy"
            )
        try:
            return VisualRegressionConfig(**config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid visual regression configuration: {e}") from e
    raise ConfigurationError(
        "Please provide a visual regression configuration with a compare strategy"
    )


def parse_check_options(options: CheckOptions | dict | None) -> CheckOptions:
    """Validate per-call options once at the command entry point."""
    if options is None:
        return CheckOptions()
    if isinstance(options, CheckOptions):
        return options
    try:
        return CheckOptions(**options)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid check options: {e}") from e
