"""
Template Mask Segmentation.

Turns car line-art into the two artifacts the rest of the editor needs:

- an RGBA overlay drawn above all user content (exterior painted with the
  background color, outline lines kept as light grey, interior transparent)
- an interior-membership mask marking the paintable body surface

Pipeline:
    1. brightness = (R + G + B) / 3
    2. binarize at 200 (light = 255, line = 0)
    3. scanline flood fill from each light corner, marking OUTSIDE (127)
    4. classify each pixel as exterior, line, or interior
    5. render overlay, then smooth alpha-discontinuity edges with a 3x3 Gaussian

Example:
    >>> from WS_Libs.ImageEditingLib.template_mask import segment
    >>> result = segment("templates/model3.png", "#1a1a1a")
    >>> result.overlay.size == (result.width, result.height)
    True
"""

from dataclasses import dataclass, asdict
import logging
from typing import Any, Dict, Optional

import numpy as np
from PIL import Image
from scipy import ndimage

from WS_Libs.constants import (
    BRIGHTNESS_THRESHOLD,
    DEFAULT_BACKGROUND_COLOR,
    EDGE_ALPHA_DELTA,
    EDGE_SMOOTHING_KERNEL,
    EDGE_SMOOTHING_KERNEL_SUM,
    INTERIOR_VALUE,
    LIGHT_VALUE,
    LINE_MAX_INTENSITY,
    LINE_MIN_INTENSITY,
    LINE_VALUE,
    NOT_PAINTABLE_VALUE,
    OUTSIDE_VALUE,
)
from WS_Libs.errors import CancelToken
from WS_Libs.ImageEditingLib.color_space import parse_hex_color
from WS_Libs.ImageEditingLib.flood_fill import scanline_fill
from WS_Libs.ImageEditingLib.image_io import ImageSource, load_image
from WS_Libs.ImageEditingLib.image_models import RgbColor, SegmentationResult

logger = logging.getLogger(__name__)


@dataclass
class TemplateMaskConfig:
    """Configuration for template segmentation.

    Attributes:
        background_color: Hex color painted over the exterior region
        threshold: Brightness above which a pixel counts as light (0-255)
        smooth_edges: Apply the 3x3 edge smoothing pass
    """
    background_color: str = DEFAULT_BACKGROUND_COLOR
    threshold: float = BRIGHTNESS_THRESHOLD
    smooth_edges: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateMaskConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


def read_template_pixels(image: Any) -> np.ndarray:
    """
    Read template RGB pixels as a (H, W, 3) uint8 array.

    Fully transparent pixels read as black, the way a 2D canvas reports
    them, so transparent line-art backgrounds do not count as light.
    """
    rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    rgb = rgba[:, :, :3].copy()
    rgb[rgba[:, :, 3] == 0] = 0
    return rgb


def compute_brightness(rgb: np.ndarray) -> np.ndarray:
    """Per-pixel mean of R, G, B as a float32 (H, W) field."""
    return (rgb.astype(np.float64).sum(axis=2) / 3.0).astype(np.float32)


def binarize(brightness: np.ndarray, threshold: float = BRIGHTNESS_THRESHOLD) -> np.ndarray:
    """Return 255 where brightness > threshold, else 0 (uint8)."""
    return np.where(brightness > threshold, LIGHT_VALUE, LINE_VALUE).astype(np.uint8)


def mark_exterior(binary: np.ndarray, cancel_token: Optional[CancelToken] = None) -> np.ndarray:
    """
    Flood fill OUTSIDE from each light corner of the binary field.

    All four fills share one mutable copy, so the result is the union of
    every corner-reachable light region. Dark (line) pixels are never written.

    Returns:
        Region mask with values LIGHT_VALUE, LINE_VALUE, or OUTSIDE_VALUE
    """
    region = binary.copy()
    height, width = region.shape
    if height == 0 or width == 0:
        return region

    corners = ((0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1))
    for corner_x, corner_y in corners:
        if region[corner_y, corner_x] != LIGHT_VALUE:
            continue
        scanline_fill(region, corner_x, corner_y, LIGHT_VALUE, OUTSIDE_VALUE, cancel_token)

    return region


def build_interior_mask(binary: np.ndarray, region: np.ndarray) -> np.ndarray:
    """255 where a pixel is enclosed and light, 0 for exterior and lines."""
    paintable = (region != OUTSIDE_VALUE) & (binary != LINE_VALUE)
    return np.where(paintable, INTERIOR_VALUE, NOT_PAINTABLE_VALUE).astype(np.uint8)


def render_overlay(
    binary: np.ndarray,
    region: np.ndarray,
    brightness: np.ndarray,
    background_rgb: RgbColor,
) -> np.ndarray:
    """
    Render the masked overlay as a (H, W, 4) uint8 array.

    Exterior pixels take the background color, line pixels a grey
    intensity of 255 - brightness clamped to [180, 255], interior pixels
    are fully transparent.
    """
    height, width = binary.shape
    output = np.zeros((height, width, 4), dtype=np.uint8)

    exterior = region == OUTSIDE_VALUE
    line = ~exterior & (binary == LINE_VALUE)

    output[exterior, 0] = background_rgb[0]
    output[exterior, 1] = background_rgb[1]
    output[exterior, 2] = background_rgb[2]
    output[exterior, 3] = 255

    intensity = np.rint(
        np.clip(255.0 - brightness.astype(np.float64), LINE_MIN_INTENSITY, LINE_MAX_INTENSITY)
    ).astype(np.uint8)
    for channel in range(3):
        output[line, channel] = intensity[line]
    output[line, 3] = 255

    return output


def smooth_edges(rgba: np.ndarray, alpha_delta: int = EDGE_ALPHA_DELTA) -> np.ndarray:
    """
    Smooth pixels sitting on an alpha discontinuity.

    A pixel is an edge when any of its 8 neighbors differs from it in alpha
    by more than ``alpha_delta``. Edge pixels (excluding the image border)
    get the 1-2-1 weighted mean of the unsmoothed neighborhood on all four
    channels. Flat interior and exterior areas are left untouched.

    Returns:
        New (H, W, 4) uint8 array
    """
    height, width = rgba.shape[:2]
    result = rgba.copy()
    if height < 3 or width < 3:
        return result

    alpha = rgba[:, :, 3].astype(np.int16)
    neighborhood_max = ndimage.maximum_filter(alpha, size=3, mode="nearest")
    neighborhood_min = ndimage.minimum_filter(alpha, size=3, mode="nearest")
    edges = ((neighborhood_max - alpha) > alpha_delta) | ((alpha - neighborhood_min) > alpha_delta)

    edges[0, :] = False
    edges[-1, :] = False
    edges[:, 0] = False
    edges[:, -1] = False
    if not edges.any():
        return result

    kernel = np.asarray(EDGE_SMOOTHING_KERNEL, dtype=np.float64)
    for channel in range(4):
        weighted = ndimage.correlate(rgba[:, :, channel].astype(np.float64), kernel, mode="nearest")
        smoothed = np.rint(weighted / EDGE_SMOOTHING_KERNEL_SUM)
        result[:, :, channel][edges] = np.clip(smoothed[edges], 0, 255).astype(np.uint8)

    return result


def segment(
    template: ImageSource,
    background_color: str = DEFAULT_BACKGROUND_COLOR,
    threshold: float = BRIGHTNESS_THRESHOLD,
    smooth: bool = True,
    cancel_token: Optional[CancelToken] = None,
) -> SegmentationResult:
    """
    Segment a line-art template into overlay image and interior mask.

    Args:
        template: Template path, bytes, file object, or PIL Image
        background_color: Hex color for the exterior (falls back to (26, 26, 26))
        threshold: Binarization threshold on the 0-255 brightness scale
        smooth: Apply edge smoothing to the overlay
        cancel_token: Optional cooperative cancellation token

    Returns:
        SegmentationResult with overlay, read-only interior mask and dimensions

    Raises:
        DecodeError: If the template cannot be decoded
        OperationCancelled: If the token is cancelled mid-run
    """
    image = load_image(template)
    width, height = image.size

    rgb = read_template_pixels(image)
    brightness = compute_brightness(rgb)
    binary = binarize(brightness, threshold)
    _check(cancel_token)

    region = mark_exterior(binary, cancel_token)
    _check(cancel_token)

    background_rgb = parse_hex_color(background_color)
    interior_mask = build_interior_mask(binary, region)
    overlay_pixels = render_overlay(binary, region, brightness, background_rgb)
    if smooth:
        overlay_pixels = smooth_edges(overlay_pixels)
    _check(cancel_token)

    interior_mask.setflags(write=False)
    overlay = Image.fromarray(overlay_pixels)

    interior_count = int(np.count_nonzero(interior_mask))
    exterior_count = int(np.count_nonzero(region == OUTSIDE_VALUE))
    logger.info(
        f"Segmented template {width}x{height}: {interior_count} interior px, "
        f"{exterior_count} exterior px"
    )
    if interior_count == 0:
        logger.debug("Template has no enclosed region; interior mask is empty")

    return SegmentationResult(
        overlay=overlay,
        interior_mask=interior_mask,
        width=width,
        height=height,
    )


def segment_with_config(template: ImageSource, config: TemplateMaskConfig,
                        cancel_token: Optional[CancelToken] = None) -> SegmentationResult:
    """Run :func:`segment` with parameters taken from a TemplateMaskConfig."""
    return segment(
        template,
        background_color=config.background_color,
        threshold=config.threshold,
        smooth=config.smooth_edges,
        cancel_token=cancel_token,
    )


def _check(cancel_token: Optional[CancelToken]) -> None:
    if cancel_token is not None:
        cancel_token.raise_if_cancelled("segmentation")
