"""
Drawing primitives shared by the procedural pattern generators.

Wraps the Pillow and numpy operations the generators are built from:
color parsing, blank canvases, linear and radial gradients, and polygon
vertex computation.
"""

import math
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageColor, ImageDraw

from WS_Libs.errors import InvalidParameter
from WS_Libs.ImageEditingLib.image_models import RgbaColor

Point = Tuple[float, float]

TRANSPARENT: RgbaColor = (0, 0, 0, 0)


def to_rgba(color: Any) -> RgbaColor:
    """
    Normalize a color to an RGBA tuple.

    Accepts hex strings ("#e31937"), CSS color names understood by
    Pillow, the keyword "transparent", and 3- or 4-tuples.

    Raises:
        InvalidParameter: If the color cannot be interpreted
    """
    if isinstance(color, str):
        if color.strip().lower() == "transparent":
            return TRANSPARENT
        try:
            parsed = ImageColor.getrgb(color)
        except ValueError as e:
            raise InvalidParameter(f"Invalid color: {color!r}") from e
    elif isinstance(color, (tuple, list)) and len(color) in (3, 4):
        parsed = tuple(int(max(0, min(255, round(c)))) for c in color)
    else:
        raise InvalidParameter(f"Invalid color: {color!r}")

    if len(parsed) == 3:
        return (parsed[0], parsed[1], parsed[2], 255)
    return tuple(parsed)


def validate_size(width: int, height: int) -> Tuple[int, int]:
    """Return (width, height) as ints, raising InvalidParameter if not positive."""
    if int(width) <= 0 or int(height) <= 0:
        raise InvalidParameter(f"width and height must be positive, got {width}x{height}")
    return int(width), int(height)


def new_canvas(width: int, height: int, background: Any = "transparent") -> Tuple['Image.Image', 'ImageDraw.ImageDraw']:
    """Create an RGBA canvas and a drawing context for it."""
    width, height = validate_size(width, height)
    image = Image.new("RGBA", (width, height), to_rgba(background))
    return image, ImageDraw.Draw(image)


def _interpolate_stops(t: np.ndarray, colors: Sequence[Any]) -> np.ndarray:
    stops = [to_rgba(color) for color in colors]
    if not stops:
        raise InvalidParameter("At least one gradient color is required")
    if len(stops) == 1:
        stops = stops * 2

    positions = np.linspace(0.0, 1.0, len(stops))
    channels = [
        np.interp(t, positions, [stop[index] for stop in stops])
        for index in range(4)
    ]
    return np.rint(np.stack(channels, axis=-1)).astype(np.uint8)


def _pixel_grid(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    xs = np.arange(width, dtype=np.float64) + 0.5
    ys = np.arange(height, dtype=np.float64) + 0.5
    return np.meshgrid(xs, ys)


def linear_gradient(
    width: int,
    height: int,
    colors: Sequence[Any],
    start: Point,
    end: Point,
) -> 'Image.Image':
    """
    Render a multi-stop linear gradient between two points.

    Colors are spread evenly along the start-to-end segment; pixels beyond
    either end take the first or last color.
    """
    width, height = validate_size(width, height)
    grid_x, grid_y = _pixel_grid(width, height)

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        t = np.zeros((height, width))
    else:
        t = ((grid_x - start[0]) * dx + (grid_y - start[1]) * dy) / length_sq
    t = np.clip(t, 0.0, 1.0)

    return Image.fromarray(_interpolate_stops(t, colors))


def angled_gradient(width: int, height: int, colors: Sequence[Any], angle: float = 0.0) -> 'Image.Image':
    """Linear gradient through the canvas center at ``angle`` degrees, spanning the diagonal."""
    radians = math.radians(angle)
    half = math.hypot(width, height) / 2.0
    center_x = width / 2.0
    center_y = height / 2.0
    start = (center_x - math.cos(radians) * half, center_y - math.sin(radians) * half)
    end = (center_x + math.cos(radians) * half, center_y + math.sin(radians) * half)
    return linear_gradient(width, height, colors, start, end)


def radial_gradient(
    width: int,
    height: int,
    colors: Sequence[Any],
    center: Optional[Point] = None,
    radius: Optional[float] = None,
) -> 'Image.Image':
    """Render a radial gradient, first color at the center, last at ``radius``."""
    width, height = validate_size(width, height)
    if center is None:
        center = (width / 2.0, height / 2.0)
    if radius is None:
        radius = math.hypot(width / 2.0, height / 2.0)
    if radius <= 0:
        raise InvalidParameter(f"radius must be positive, got {radius}")

    grid_x, grid_y = _pixel_grid(width, height)
    t = np.clip(np.hypot(grid_x - center[0], grid_y - center[1]) / radius, 0.0, 1.0)
    return Image.fromarray(_interpolate_stops(t, colors))


def regular_polygon(center_x: float, center_y: float, radius: float, sides: int, rotation: float = 0.0) -> List[Point]:
    """Vertices of a regular polygon; ``rotation`` is the first vertex angle in radians."""
    return [
        (
            center_x + radius * math.cos(rotation + 2.0 * math.pi * index / sides),
            center_y + radius * math.sin(rotation + 2.0 * math.pi * index / sides),
        )
        for index in range(sides)
    ]


def rotate_point(x: float, y: float, pivot_x: float, pivot_y: float, radians: float) -> Point:
    """Rotate (x, y) about a pivot; positive angles turn clockwise on screen."""
    cos_r = math.cos(radians)
    sin_r = math.sin(radians)
    dx = x - pivot_x
    dy = y - pivot_y
    return (pivot_x + dx * cos_r - dy * sin_r, pivot_y + dx * sin_r + dy * cos_r)


def polyline_width(line_width: float) -> int:
    return max(1, int(round(line_width)))
