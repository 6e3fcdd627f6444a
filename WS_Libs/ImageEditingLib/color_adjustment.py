"""
HSL Color Adjustment.

Applies hue rotation, saturation and lightness offsets in HSL space, then
an optional contrast curve in RGB space, to every non-transparent pixel of
a layer. All four parameters are zero-centered: zero leaves the channel
unchanged.

Example:
    >>> from WS_Libs.ImageEditingLib.color_adjustment import ColorAdjustments, adjust_colors
    >>> warmer = adjust_colors(layer_image, ColorAdjustments(hue=-20, saturation=15))
"""

from dataclasses import dataclass, asdict
import logging
from typing import Any, Dict, Optional

import numpy as np
from PIL import Image

from WS_Libs.constants import ADJUSTMENT_RANGE, CONTRAST_PIVOT, HUE_RANGE
from WS_Libs.errors import CancelToken, InvalidParameter
from WS_Libs.ImageEditingLib.color_space import hsl_to_rgb, rgb_to_hsl

logger = logging.getLogger(__name__)

# Rows converted per cancellation checkpoint
ROW_BLOCK = 256


@dataclass(frozen=True)
class ColorAdjustments:
    """Zero-centered color adjustment parameters.

    Attributes:
        hue: Hue rotation in degrees (-180 to 180)
        saturation: Saturation offset in percent points (-100 to 100)
        brightness: Brightness (-100 to 100); moves lightness by half this value
        contrast: Contrast (-100 to 100)
    """
    hue: float = 0.0
    saturation: float = 0.0
    brightness: float = 0.0
    contrast: float = 0.0

    def __post_init__(self):
        _check_range("hue", self.hue, HUE_RANGE)
        _check_range("saturation", self.saturation, ADJUSTMENT_RANGE)
        _check_range("brightness", self.brightness, ADJUSTMENT_RANGE)
        _check_range("contrast", self.contrast, ADJUSTMENT_RANGE)

    @property
    def is_identity(self) -> bool:
        return self.hue == 0 and self.saturation == 0 and self.brightness == 0 and self.contrast == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorAdjustments":
        """Create from dictionary."""
        filtered = {k: float(v) for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


def _check_range(name: str, value: float, bounds) -> None:
    low, high = bounds
    if not (low <= value <= high):
        raise InvalidParameter(f"{name} must be {low:g} to {high:g}, got {value}")


def contrast_factor(contrast: float) -> float:
    """Classic contrast curve factor: 259 * (c + 255) / (255 * (259 - c))."""
    return (259.0 * (contrast + 255.0)) / (255.0 * (259.0 - contrast))


class ColorAdjustmentFilter:
    def __init__(self, adjustments: ColorAdjustments) -> None:
        self.adjustments = adjustments
        self._factor = contrast_factor(adjustments.contrast)

    def adjust_rgb(self, rgb: np.ndarray) -> np.ndarray:
        """
        Adjust an (..., 3) array of RGB values.

        Returns:
            uint8 array of the same shape
        """
        adj = self.adjustments
        hue, saturation, lightness = rgb_to_hsl(rgb[..., 0], rgb[..., 1], rgb[..., 2])

        hue = np.mod(hue + adj.hue + 360.0, 360.0)
        saturation = np.clip(saturation + adj.saturation, 0.0, 100.0)
        lightness = np.clip(lightness + adj.brightness / 2.0, 0.0, 100.0)

        red, green, blue = hsl_to_rgb(hue, saturation, lightness)
        out = np.stack([red, green, blue], axis=-1)

        if adj.contrast != 0:
            out = np.clip(self._factor * (out - CONTRAST_PIVOT) + CONTRAST_PIVOT, 0.0, 255.0)
            out = np.rint(out)

        return out.astype(np.uint8)

    def adjust_pixels(self, pixels: np.ndarray, cancel_token: Optional[CancelToken] = None) -> np.ndarray:
        """
        Adjust an (H, W, 4) RGBA array, leaving fully transparent pixels untouched.

        Returns:
            New (H, W, 4) uint8 array
        """
        result = pixels.copy()
        height = pixels.shape[0]

        for start in range(0, height, ROW_BLOCK):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("color adjustment")
            block = result[start:start + ROW_BLOCK]
            visible = block[:, :, 3] != 0
            if not visible.any():
                continue
            block[visible, :3] = self.adjust_rgb(block[visible, :3])

        return result

    def apply_to_image(self, image: Any, cancel_token: Optional[CancelToken] = None) -> 'Image.Image':
        """
        Apply the adjustments to a PIL Image.

        Args:
            image: PIL Image (converted to RGBA)
            cancel_token: Optional cooperative cancellation token

        Returns:
            New RGBA PIL Image with alpha preserved
        """
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")

        pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
        return Image.fromarray(self.adjust_pixels(pixels, cancel_token))


def adjust_colors(
    image: Any,
    adjustments: Optional[ColorAdjustments] = None,
    cancel_token: Optional[CancelToken] = None,
    **kwargs: float,
) -> 'Image.Image':
    """
    Adjust hue, saturation, brightness and contrast of a layer image.

    Adjustments can be passed as a ColorAdjustments record or as keyword
    arguments (``hue=``, ``saturation=``, ``brightness=``, ``contrast=``).

    Raises:
        InvalidParameter: If a parameter is outside its range
        TypeError: If image is not a PIL Image
    """
    if adjustments is None:
        adjustments = ColorAdjustments(**kwargs)
    elif kwargs:
        raise TypeError("Pass either a ColorAdjustments record or keyword arguments, not both")

    result = ColorAdjustmentFilter(adjustments).apply_to_image(image, cancel_token)
    logger.debug(f"Adjusted {result.size[0]}x{result.size[1]} layer with {adjustments.to_dict()}")
    return result
