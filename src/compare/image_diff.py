"""Pixel-level image comparison used by the local compare strategy.

The comparison mirrors the behaviour of resemble-style diffing: each pixel is
tested against a per-channel tolerance, the mismatch percentage is reported as
a two-decimal string, and a diff visualization can be rendered on demand.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.errors import ComparisonError

logger = logging.getLogger(__name__)

IGNORE_NOTHING = "nothing"
IGNORE_COLORS = "colors"
IGNORE_ANTIALIASING = "antialiasing"
IGNORE_STRATEGIES = (IGNORE_NOTHING, IGNORE_COLORS, IGNORE_ANTIALIASING)

STRICT_CHANNEL_TOLERANCE = 16
ANTIALIASING_CHANNEL_TOLERANCE = 32

# RGBA used to paint differing pixels in the diff image
DIFF_COLOR = (255, 0, 255, 255)


@dataclass
class ImageDiffResult:
    """Outcome of comparing two images.

    ``mis_match_percentage`` is text, formatted like ``"12.34"``.
    """

    mis_match_percentage: str
    is_same_dimensions: bool
    _reference: np.ndarray
    _mask: np.ndarray

    def get_diff_image(self) -> Image.Image:
        """Render differing pixels in magenta over a faded copy of the reference."""
        faded = self._reference.copy()
        faded[..., :3] = 255 - (255 - faded[..., :3]) // 4
        faded[..., 3] = 255
        faded[self._mask] = DIFF_COLOR
        return Image.fromarray(faded)

    def get_diff_png(self) -> bytes:
        """Encode the diff image as PNG into a fully buffered byte string."""
        buffer = io.BytesIO()
        self.get_diff_image().save(buffer, format="PNG")
        return buffer.getvalue()


def resolve_ignore_strategy(ignore: str | None) -> str:
    """Map an ignore setting to a known strategy, falling back to strict."""
    if ignore in IGNORE_STRATEGIES:
        return ignore
    if ignore:
        logger.debug("Unknown ignore strategy %r, comparing strictly", ignore)
    return IGNORE_NOTHING


def _load(source: str | Path | bytes) -> Image.Image:
    try:
        if isinstance(source, (bytes, bytearray)):
            image = Image.open(io.BytesIO(source))
        else:
            image = Image.open(source)
        return image.convert("RGBA")
    except FileNotFoundError as e:
        raise ComparisonError(f"Image not found: {source}") from e
    except (UnidentifiedImageError, OSError) as e:
        label = "<bytes>" if isinstance(source, (bytes, bytearray)) else str(source)
        raise ComparisonError(f"Cannot decode image {label}: {e}") from e


def _to_canvas(image: Image.Image, width: int, height: int) -> np.ndarray:
    """Place an image at the top-left of a transparent canvas of the given size."""
    canvas = np.zeros((height, width, 4), dtype=np.int16)
    arr = np.asarray(image, dtype=np.int16)
    canvas[: arr.shape[0], : arr.shape[1]] = arr
    return canvas


def _luminance(arr: np.ndarray) -> np.ndarray:
    return 0.3 * arr[..., 0] + 0.59 * arr[..., 1] + 0.11 * arr[..., 2]


def _neighbour_match(reference: np.ndarray, captured: np.ndarray, tolerance: int) -> np.ndarray:
    """True where a captured pixel matches some reference pixel in its 3x3 neighbourhood."""
    height, width = reference.shape[:2]
    padded = np.pad(reference, ((1, 1), (1, 1), (0, 0)), mode="edge")
    matched = np.zeros((height, width), dtype=bool)
    for dy in range(3):
        for dx in range(3):
            shifted = padded[dy : dy + height, dx : dx + width]
            matched |= np.all(np.abs(shifted - captured) <= tolerance, axis=2)
    return matched


def _mismatch_mask(reference: np.ndarray, captured: np.ndarray, strategy: str) -> np.ndarray:
    if strategy == IGNORE_COLORS:
        delta = np.abs(_luminance(reference) - _luminance(captured))
        alpha = np.abs(reference[..., 3] - captured[..., 3])
        return (delta > STRICT_CHANNEL_TOLERANCE) | (alpha > STRICT_CHANNEL_TOLERANCE)

    if strategy == IGNORE_ANTIALIASING:
        differs = np.any(np.abs(reference - captured) > ANTIALIASING_CHANNEL_TOLERANCE, axis=2)
        return differs & ~_neighbour_match(reference, captured, ANTIALIASING_CHANNEL_TOLERANCE)

    return np.any(np.abs(reference - captured) > STRICT_CHANNEL_TOLERANCE, axis=2)


def compare_images(
    reference: str | Path | bytes,
    captured: str | Path | bytes,
    ignore: str | None = IGNORE_NOTHING,
) -> ImageDiffResult:
    """Compare two images and return mismatch data.

    Images of different sizes are compared on a shared canvas; the area covered
    by only one of them counts as mismatching.

    Raises:
        ComparisonError: If either image cannot be loaded or decoded.
    """
    strategy = resolve_ignore_strategy(ignore)
    ref_img = _load(reference)
    cap_img = _load(captured)

    width = max(ref_img.width, cap_img.width)
    height = max(ref_img.height, cap_img.height)
    ref_arr = _to_canvas(ref_img, width, height)
    cap_arr = _to_canvas(cap_img, width, height)

    mask = _mismatch_mask(ref_arr, cap_arr, strategy)
    if ref_img.size != cap_img.size:
        outside = np.ones((height, width), dtype=bool)
        outside[: min(ref_img.height, cap_img.height), : min(ref_img.width, cap_img.width)] = False
        mask |= outside

    total = width * height
    percentage = (np.count_nonzero(mask) / total * 100.0) if total else 0.0
    logger.debug("Compared %s vs %s (%s): %.2f%% mismatch",
                 ref_img.size, cap_img.size, strategy, percentage)

    return ImageDiffResult(
        mis_match_percentage=f"{percentage:.2f}",
        is_same_dimensions=ref_img.size == cap_img.size,
        _reference=ref_arr.astype(np.uint8),
        _mask=mask,
    )
