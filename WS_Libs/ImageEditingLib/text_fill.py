"""
Mask-Constrained Text Fill.

Lays out repeating copies of a text stamp on a staggered grid and keeps
only the stamps whose center falls on the template's paintable interior.

Grid layout:
    Row k sits at y = k * spacing_y. Odd rows shift right by spacing_x / 2
    (brick stagger) so repeated text does not line up in columns. The grid
    is anchored at the canvas origin and extends one spacing past every
    edge. Each stamp is rotated about its own center; the grid itself is
    never rotated, so corners of the canvas keep full coverage.

Example:
    >>> from WS_Libs.ImageEditingLib.text_fill import synthesize_text_pattern
    >>> pattern = synthesize_text_pattern(
    ...     "WRAP", 40, 100, 80, -15,
    ...     result.interior_mask, result.width, result.height,
    ... )
"""

from dataclasses import dataclass, asdict
import logging
import math
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from WS_Libs.constants import (
    DEFAULT_FONT_SIZE,
    DEFAULT_SPACING_X,
    DEFAULT_SPACING_Y,
    DEFAULT_TEXT_ROTATION,
    INTERIOR_VALUE,
    SAMPLING_CENTER,
    SAMPLING_FOOTPRINT,
    TEXT_FILL_COLOR,
)
from WS_Libs.errors import CancelToken, InvalidParameter
from WS_Libs.ImageEditingLib.fonts import load_font
from WS_Libs.ImageEditingLib.image_models import RgbaColor
from WS_Libs.PatternLib.primitives import linear_gradient, rotate_point

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
STAMP_PADDING = 2


@dataclass
class TextFillConfig:
    """Configuration for a text fill layer.

    Attributes:
        text: Text repeated across the body (empty = no fill)
        font_size: Font size in pixels
        spacing_x: Horizontal distance between stamp centers
        spacing_y: Vertical distance between rows
        rotation: Per-stamp rotation in degrees (clockwise positive)
        sampling: 'center' tests only the stamp center against the mask,
                  'footprint' also requires the rotated stamp corners inside
        gradient_colors: Optional colors for a canvas-wide gradient fill
    """
    text: str = ""
    font_size: int = DEFAULT_FONT_SIZE
    spacing_x: float = DEFAULT_SPACING_X
    spacing_y: float = DEFAULT_SPACING_Y
    rotation: float = DEFAULT_TEXT_ROTATION
    sampling: str = SAMPLING_CENTER
    gradient_colors: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextFillConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if filtered.get("gradient_colors") is not None:
            filtered["gradient_colors"] = list(filtered["gradient_colors"])
        return cls(**filtered)


def render_text_stamp(text: str, font_size: int, fill: RgbaColor = TEXT_FILL_COLOR) -> 'Image.Image':
    """
    Render one unrotated text stamp, tightly cropped with a small padding.

    The stamp center is the center of the glyph bounding box.
    """
    font = load_font(int(font_size))
    left, top, right, bottom = font.getbbox(text)
    width = max(1, right - left) + 2 * STAMP_PADDING
    height = max(1, bottom - top) + 2 * STAMP_PADDING

    stamp = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(stamp)
    draw.text((STAMP_PADDING - left, STAMP_PADDING - top), text, font=font, fill=fill)
    return stamp


def rotate_stamp(stamp: 'Image.Image', rotation_degrees: float) -> 'Image.Image':
    """Rotate a stamp about its center, clockwise for positive angles."""
    if rotation_degrees % 360 == 0:
        return stamp
    return stamp.rotate(-rotation_degrees, resample=Image.Resampling.BICUBIC, expand=True)


def iter_grid_positions(
    width: int,
    height: int,
    spacing_x: float,
    spacing_y: float,
    margin_x: Optional[float] = None,
    margin_y: Optional[float] = None,
) -> Iterator[Tuple[int, Point]]:
    """
    Yield (row_index, (x, y)) stamp centers of the staggered grid.

    Rows are visited top to bottom, columns left to right, so the order
    is fully determined by the arguments.
    """
    margin_x = spacing_x if margin_x is None else margin_x
    margin_y = spacing_y if margin_y is None else margin_y

    first_row = math.floor(-margin_y / spacing_y)
    last_row = math.ceil((height + margin_y) / spacing_y)
    for row in range(first_row, last_row):
        y = row * spacing_y
        offset = spacing_x / 2.0 if row % 2 else 0.0
        first_col = math.floor((-margin_x - offset) / spacing_x)
        last_col = math.ceil((width + margin_x - offset) / spacing_x)
        for col in range(first_col, last_col):
            yield row, (col * spacing_x + offset, y)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _mask_contains(mask: np.ndarray, x: float, y: float) -> bool:
    height, width = mask.shape
    px = _round_half_up(x)
    py = _round_half_up(y)
    return 0 <= px < width and 0 <= py < height and mask[py, px] == INTERIOR_VALUE


def _footprint_corners(center: Point, stamp_size: Tuple[int, int], rotation_degrees: float) -> List[Point]:
    half_w = stamp_size[0] / 2.0
    half_h = stamp_size[1] / 2.0
    cx, cy = center
    radians = math.radians(rotation_degrees)
    return [
        rotate_point(cx + dx, cy + dy, cx, cy, radians)
        for dx, dy in ((-half_w, -half_h), (half_w, -half_h), (half_w, half_h), (-half_w, half_h))
    ]


def as_mask_grid(interior_mask: Any, width: int, height: int) -> np.ndarray:
    """
    View an interior mask as a (height, width) uint8 array.

    Accepts a 2D array, a flat buffer of width * height values (array,
    bytes, or list), or an 'L' mode PIL Image. Boolean masks map True to
    the interior value.

    Raises:
        InvalidParameter: If the mask does not match the canvas size
    """
    if hasattr(interior_mask, "getbands"):
        interior_mask = np.asarray(interior_mask.convert("L"))

    if isinstance(interior_mask, (bytes, bytearray)):
        mask = np.frombuffer(interior_mask, dtype=np.uint8)
    else:
        mask = np.asarray(interior_mask)
    if mask.dtype == np.bool_:
        mask = np.where(mask, INTERIOR_VALUE, 0).astype(np.uint8)
    else:
        mask = mask.astype(np.uint8, copy=False)
    if mask.ndim == 1 and mask.size == width * height:
        return mask.reshape(height, width)
    if mask.shape == (height, width):
        return mask
    raise InvalidParameter(
        f"interior mask shape {mask.shape} does not match canvas {width}x{height}"
    )


def _validate(font_size: float, spacing_x: float, spacing_y: float, width: int, height: int, sampling: str) -> None:
    if width <= 0 or height <= 0:
        raise InvalidParameter(f"width and height must be positive, got {width}x{height}")
    if font_size <= 0:
        raise InvalidParameter(f"font_size must be positive, got {font_size}")
    if spacing_x <= 0 or spacing_y <= 0:
        raise InvalidParameter(f"spacing must be positive, got ({spacing_x}, {spacing_y})")
    if sampling not in (SAMPLING_CENTER, SAMPLING_FOOTPRINT):
        raise InvalidParameter(f"Unknown sampling mode: {sampling}")


def plan_text_stamps(
    width: int,
    height: int,
    spacing_x: float,
    spacing_y: float,
    interior_mask: Any,
    stamp_size: Optional[Tuple[int, int]] = None,
    rotation_degrees: float = 0.0,
    sampling: str = SAMPLING_CENTER,
    cancel_token: Optional[CancelToken] = None,
) -> List[Point]:
    """
    Compute the stamp centers that pass the interior membership test.

    Args:
        width: Canvas width
        height: Canvas height
        spacing_x: Horizontal spacing between stamps
        spacing_y: Vertical spacing between rows
        interior_mask: Interior-membership mask (255 = paintable)
        stamp_size: Unrotated stamp (width, height); required for 'footprint'
        rotation_degrees: Stamp rotation, used by 'footprint' sampling
        sampling: 'center' or 'footprint'
        cancel_token: Optional token polled once per grid row

    Returns:
        List of accepted (x, y) centers in grid order
    """
    mask = as_mask_grid(interior_mask, width, height)
    if sampling == SAMPLING_FOOTPRINT and stamp_size is None:
        raise InvalidParameter("footprint sampling requires stamp_size")

    accepted: List[Point] = []
    current_row = None
    for row, center in iter_grid_positions(width, height, spacing_x, spacing_y):
        if row != current_row:
            current_row = row
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("text fill")

        if not _mask_contains(mask, *center):
            continue
        if sampling == SAMPLING_FOOTPRINT and not all(
            _mask_contains(mask, *corner)
            for corner in _footprint_corners(center, stamp_size, rotation_degrees)
        ):
            continue
        accepted.append(center)

    return accepted


def composite_at(canvas: 'Image.Image', stamp: 'Image.Image', left: int, top: int) -> None:
    """Alpha-composite ``stamp`` onto ``canvas`` at (left, top), clipping at the edges."""
    canvas_w, canvas_h = canvas.size
    stamp_w, stamp_h = stamp.size

    src_left = max(0, -left)
    src_top = max(0, -top)
    src_right = min(stamp_w, canvas_w - left)
    src_bottom = min(stamp_h, canvas_h - top)
    if src_right <= src_left or src_bottom <= src_top:
        return

    canvas.alpha_composite(
        stamp,
        dest=(left + src_left, top + src_top),
        source=(src_left, src_top, src_right, src_bottom),
    )


def synthesize_text_pattern(
    text: str,
    font_size: int,
    spacing_x: float,
    spacing_y: float,
    rotation_degrees: float,
    interior_mask: Any,
    width: int,
    height: int,
    sampling: str = SAMPLING_CENTER,
    gradient_colors: Optional[Sequence[Any]] = None,
    fill_color: RgbaColor = TEXT_FILL_COLOR,
    cancel_token: Optional[CancelToken] = None,
) -> 'Image.Image':
    """
    Render repeating text clipped (by stamp center) to the interior mask.

    Args:
        text: Text to repeat. Empty or whitespace-only text yields a
              fully transparent image.
        font_size: Font size in pixels (> 0)
        spacing_x: Horizontal spacing (> 0)
        spacing_y: Vertical spacing (> 0)
        rotation_degrees: Rotation applied to each stamp about its center
        interior_mask: Interior-membership mask from segmentation
        width: Canvas width
        height: Canvas height
        sampling: 'center' (default) or 'footprint'
        gradient_colors: Optional gradient stops replacing the flat fill
        fill_color: RGBA fill for flat text
        cancel_token: Optional cooperative cancellation token

    Returns:
        RGBA image of size (width, height) with a transparent background

    Raises:
        InvalidParameter: For non-positive sizes/spacing or mismatched mask
    """
    _validate(font_size, spacing_x, spacing_y, width, height, sampling)
    pattern = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    if not text or not text.strip():
        return pattern

    stamp = render_text_stamp(text, font_size, fill_color)
    centers = plan_text_stamps(
        width,
        height,
        spacing_x,
        spacing_y,
        interior_mask,
        stamp_size=stamp.size,
        rotation_degrees=rotation_degrees,
        sampling=sampling,
        cancel_token=cancel_token,
    )

    rotated = rotate_stamp(stamp, rotation_degrees)
    half_w = rotated.size[0] / 2.0
    half_h = rotated.size[1] / 2.0
    for center_x, center_y in centers:
        composite_at(pattern, rotated, _round_half_up(center_x - half_w), _round_half_up(center_y - half_h))

    if gradient_colors:
        gradient = linear_gradient(width, height, gradient_colors, (0.0, 0.0), (float(width), float(height)))
        gradient.putalpha(pattern.getchannel("A"))
        pattern = gradient

    logger.debug(f"Text fill placed {len(centers)} stamps of {text!r} on {width}x{height}")
    return pattern


def synthesize_with_config(
    config: TextFillConfig,
    interior_mask: Any,
    width: int,
    height: int,
    cancel_token: Optional[CancelToken] = None,
) -> 'Image.Image':
    """Run :func:`synthesize_text_pattern` with parameters from a TextFillConfig."""
    return synthesize_text_pattern(
        config.text,
        config.font_size,
        config.spacing_x,
        config.spacing_y,
        config.rotation,
        interior_mask,
        width,
        height,
        sampling=config.sampling,
        gradient_colors=config.gradient_colors,
        cancel_token=cancel_token,
    )
