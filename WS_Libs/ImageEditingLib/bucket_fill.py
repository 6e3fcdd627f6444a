"""
Flood-Fill Bucket Tool.

Recolors the 4-connected region around a click on a flattened canvas
snapshot. Pixels join the region when every RGB channel is within
``tolerance`` of the color originally sampled at the click (not a running
average), so the region is the connected component of that predicate.

The caller flattens the visible layers first and wraps the returned image
as a new top layer afterwards; this module never sees live layers.
"""

from dataclasses import dataclass, asdict
import logging
from typing import Any, Dict

import numpy as np
from PIL import Image

from WS_Libs.constants import DEFAULT_FILL_TOLERANCE, MAX_FILL_TOLERANCE
from WS_Libs.errors import InvalidParameter
from WS_Libs.ImageEditingLib.flood_fill import scanline_fill
from WS_Libs.ImageEditingLib.image_models import RgbColor

logger = logging.getLogger(__name__)

_CANDIDATE = 1
_FILLED = 2


@dataclass
class BucketFillConfig:
    """Configuration for a bucket fill.

    Attributes:
        x: Click column on the flattened canvas
        y: Click row on the flattened canvas
        fill_color_r/g/b: Fill color components (0-255)
        tolerance: Per-channel RGB difference accepted (0-255, UI uses 0-100)
    """
    x: int = 0
    y: int = 0
    fill_color_r: int = 0
    fill_color_g: int = 0
    fill_color_b: int = 0
    tolerance: int = DEFAULT_FILL_TOLERANCE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BucketFillConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    def get_fill_color(self) -> RgbColor:
        """Get the fill color as an RGB tuple."""
        return (
            int(max(0, min(255, self.fill_color_r))),
            int(max(0, min(255, self.fill_color_g))),
            int(max(0, min(255, self.fill_color_b))),
        )


def select_fill_region(pixels: np.ndarray, x: int, y: int, tolerance: int) -> np.ndarray:
    """
    Compute the boolean region a bucket click at (x, y) would fill.

    Args:
        pixels: (H, W, 4) uint8 RGBA array
        x: Click column (must be in bounds)
        y: Click row (must be in bounds)
        tolerance: Per-channel RGB tolerance

    Returns:
        Boolean (H, W) array, True inside the connected region
    """
    target = pixels[y, x, :3].astype(np.int16)
    difference = np.abs(pixels[:, :, :3].astype(np.int16) - target)
    candidates = np.where((difference <= tolerance).all(axis=2), _CANDIDATE, 0).astype(np.uint8)

    scanline_fill(candidates, x, y, _CANDIDATE, _FILLED)
    return candidates == _FILLED


def flood_fill(
    image: Any,
    x: int,
    y: int,
    fill_color: RgbColor,
    tolerance: int = DEFAULT_FILL_TOLERANCE,
) -> 'Image.Image':
    """
    Bucket-fill a flattened canvas snapshot.

    Args:
        image: PIL Image (any mode, converted to RGBA)
        x: Click column
        y: Click row
        fill_color: (r, g, b) or (r, g, b, a); alpha is ignored, fills are opaque
        tolerance: Per-channel RGB tolerance, 0-255

    Returns:
        New RGBA image. Identical to the input when the click is out of
        bounds or the clicked color already equals the fill color.

    Raises:
        InvalidParameter: If tolerance or a fill channel is outside 0-255
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")
    if not (0 <= tolerance <= MAX_FILL_TOLERANCE):
        raise InvalidParameter(f"tolerance must be 0-{MAX_FILL_TOLERANCE}, got {tolerance}")
    if len(fill_color) < 3 or not all(0 <= int(c) <= 255 for c in fill_color[:3]):
        raise InvalidParameter(f"fill_color must be (r, g, b) with channels 0-255, got {tuple(fill_color)}")

    source = image.convert("RGBA")
    width, height = source.size
    x = int(x)
    y = int(y)
    if not (0 <= x < width and 0 <= y < height):
        logger.debug(f"Bucket fill at ({x}, {y}) is outside {width}x{height}, ignoring")
        return source.copy()

    pixels = np.array(source, dtype=np.uint8)
    fill_rgb = tuple(int(c) for c in fill_color[:3])
    if tuple(int(c) for c in pixels[y, x, :3]) == fill_rgb:
        return source.copy()

    region = select_fill_region(pixels, x, y, int(tolerance))
    pixels[region, 0] = fill_rgb[0]
    pixels[region, 1] = fill_rgb[1]
    pixels[region, 2] = fill_rgb[2]
    pixels[region, 3] = 255

    logger.debug(f"Bucket fill at ({x}, {y}) recolored {int(region.sum())} px")
    return Image.fromarray(pixels)


def flood_fill_with_config(image: Any, config: BucketFillConfig) -> 'Image.Image':
    """Run :func:`flood_fill` with parameters from a BucketFillConfig."""
    return flood_fill(image, config.x, config.y, config.get_fill_color(), config.tolerance)
