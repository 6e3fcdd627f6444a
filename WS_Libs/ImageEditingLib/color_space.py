"""
Color parsing and RGB <-> HSL conversion.

The HSL helpers are vectorized: they accept numpy arrays (or scalars) and
return arrays of the same shape, so a whole image converts in one pass.
Hue is expressed in degrees [0, 360), saturation and lightness in percent
[0, 100], RGB channels in [0, 255].
"""

import logging
import re
from typing import Optional, Tuple

import numpy as np

from WS_Libs.constants import FALLBACK_BACKGROUND_RGB
from WS_Libs.ImageEditingLib.image_models import RgbColor

logger = logging.getLogger(__name__)

HEX_COLOR_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def parse_hex_color(value: str, fallback: Optional[RgbColor] = FALLBACK_BACKGROUND_RGB) -> RgbColor:
    """
    Parse a six-digit hex color string ("#1a1a1a" or "1a1a1a").

    Args:
        value: Hex color string
        fallback: Color returned when parsing fails. Pass None to raise instead.

    Returns:
        (r, g, b) tuple

    Raises:
        ValueError: If parsing fails and fallback is None
    """
    match = HEX_COLOR_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match:
        return tuple(int(group, 16) for group in match.groups())

    if fallback is None:
        raise ValueError(f"Invalid hex color: {value!r}")

    logger.warning(f"Invalid hex color {value!r}, falling back to {fallback}")
    return tuple(fallback)


def rgb_to_hsl(red, green, blue) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert RGB channels (0-255) to HSL.

    Returns:
        Tuple of (hue degrees, saturation percent, lightness percent)
    """
    r = np.asarray(red, dtype=np.float64) / 255.0
    g = np.asarray(green, dtype=np.float64) / 255.0
    b = np.asarray(blue, dtype=np.float64) / 255.0

    max_c = np.maximum(np.maximum(r, g), b)
    min_c = np.minimum(np.minimum(r, g), b)
    lightness = (max_c + min_c) / 2.0
    delta = max_c - min_c
    achromatic = delta == 0

    with np.errstate(divide="ignore", invalid="ignore"):
        safe_delta = np.where(achromatic, 1.0, delta)
        saturation = np.where(
            lightness > 0.5,
            delta / np.where(achromatic, 1.0, 2.0 - max_c - min_c),
            delta / np.where(achromatic, 1.0, max_c + min_c),
        )
        hue_r = (g - b) / safe_delta + np.where(g < b, 6.0, 0.0)
        hue_g = (b - r) / safe_delta + 2.0
        hue_b = (r - g) / safe_delta + 4.0

    saturation = np.where(achromatic, 0.0, saturation)
    hue = np.select(
        [achromatic, max_c == r, max_c == g],
        [0.0, hue_r, hue_g],
        default=hue_b,
    ) / 6.0

    return hue * 360.0, saturation * 100.0, lightness * 100.0


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 0.5, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb(hue, saturation, lightness) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert HSL (degrees, percent, percent) to RGB channels.

    Channels are rounded half-up to whole numbers in [0, 255] but returned
    as float arrays; cast with ``astype(np.uint8)`` when storing.
    """
    h = np.asarray(hue, dtype=np.float64) / 360.0
    s = np.asarray(saturation, dtype=np.float64) / 100.0
    l = np.asarray(lightness, dtype=np.float64) / 100.0

    q = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q

    grey = s == 0
    red = np.where(grey, l, _hue_to_channel(p, q, h + 1.0 / 3.0))
    green = np.where(grey, l, _hue_to_channel(p, q, h))
    blue = np.where(grey, l, _hue_to_channel(p, q, h - 1.0 / 3.0))

    return _round_channel(red), _round_channel(green), _round_channel(blue)


def _round_channel(unit: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(unit * 255.0 + 0.5), 0, 255)
