"""
Procedural Pattern Generators.

Each generator is a pure function of its keyword parameters returning an
RGBA PIL Image (default 800x600). They share nothing and never look at the
template mask; the composition clips them through the overlay like any
other layer.

Families:
- Stripes: racing stripes, diagonal stripes, lightning zigzag band
- Gradients: multi-stop linear gradient bands at any angle
- Geometric: triangle tessellation, hexagon honeycomb
- Textures: carbon fibre weave
- Patterns: sine waves, multi-colour waves, dot-size gradients
- Camouflage: random polygonal blobs (intentionally not reproducible
  unless a seed is passed)
- Novelty: race number roundel, flames, starfield (seeded)

Example:
    >>> from WS_Libs.PatternLib.pattern_generators import generate_hexagon_pattern
    >>> honeycomb = generate_hexagon_pattern(stroke_color="#0984e3", hex_size=25)
"""

import math
import random
from typing import List, Optional, Sequence

from PIL import Image, ImageDraw

from WS_Libs.constants import DEFAULT_PATTERN_HEIGHT, DEFAULT_PATTERN_WIDTH
from WS_Libs.errors import InvalidParameter
from WS_Libs.ImageEditingLib.fonts import load_font
from WS_Libs.PatternLib.primitives import (
    Point,
    angled_gradient,
    linear_gradient,
    new_canvas,
    polyline_width,
    radial_gradient,
    regular_polygon,
    rotate_point,
    to_rgba,
)

TRIANGLE_HEIGHT_RATIO = math.sqrt(3) / 2.0


def _require_positive(**values: float) -> None:
    for name, value in values.items():
        if value <= 0:
            raise InvalidParameter(f"{name} must be positive, got {value}")


# ============================================================================
# Stripes
# ============================================================================

def generate_racing_stripes(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    stripe_color: str = "#e31937",
    stripe_width: float = 40,
    gap: float = 20,
    offset: float = 0,
) -> 'Image.Image':
    """Two vertical stripes centered on the canvas (shifted by ``offset``)."""
    _require_positive(stripe_width=stripe_width)
    image, draw = new_canvas(width, height)
    color = to_rgba(stripe_color)

    center_x = width / 2.0 + offset
    first_x = center_x - gap / 2.0 - stripe_width
    second_x = center_x + gap / 2.0
    draw.rectangle([first_x, 0, first_x + stripe_width - 1, height], fill=color)
    draw.rectangle([second_x, 0, second_x + stripe_width - 1, height], fill=color)
    return image


def generate_diagonal_stripes(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    stripe_color: str = "#e31937",
    bg_color: str = "#1a1a1a",
    stripe_width: float = 20,
    gap: float = 40,
    angle: float = 45,
) -> 'Image.Image':
    """Parallel bands rotated by ``angle`` degrees about the canvas center."""
    _require_positive(stripe_width=stripe_width)
    if stripe_width + gap <= 0:
        raise InvalidParameter(f"stripe_width + gap must be positive, got {stripe_width + gap}")

    image, draw = new_canvas(width, height, bg_color)
    color = to_rgba(stripe_color)

    center_x = width / 2.0
    center_y = height / 2.0
    diagonal = math.hypot(width, height)
    spacing = stripe_width + gap
    stripe_count = math.ceil(diagonal / spacing) * 2
    radians = math.radians(angle)

    for index in range(-stripe_count // 2, stripe_count // 2):
        left = center_x + index * spacing
        corners = [
            (left, center_y - diagonal),
            (left + stripe_width, center_y - diagonal),
            (left + stripe_width, center_y + diagonal),
            (left, center_y + diagonal),
        ]
        draw.polygon([rotate_point(x, y, center_x, center_y, radians) for x, y in corners], fill=color)
    return image


def generate_lightning_pattern(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    color: str = "#e31937",
    bg_color: str = "#1a1a1a",
    zigzag_width: float = 100,
    zigzag_height: float = 40,
) -> 'Image.Image':
    """A horizontal band through the middle with zigzag top and bottom edges."""
    _require_positive(zigzag_width=zigzag_width)
    image, draw = new_canvas(width, height, bg_color)

    center_y = height / 2.0
    band = zigzag_height * 3
    top = center_y - band / 2.0
    bottom = center_y + band / 2.0

    points: List[Point] = [(0, top)]
    x = 0.0
    while x <= width:
        points.append((x + zigzag_width / 2.0, top - zigzag_height))
        points.append((x + zigzag_width, top))
        x += zigzag_width
    points.append((width, bottom))
    x = float(width)
    while x >= 0:
        points.append((x - zigzag_width / 2.0, bottom + zigzag_height))
        points.append((x - zigzag_width, bottom))
        x -= zigzag_width

    draw.polygon(points, fill=to_rgba(color))
    return image


# ============================================================================
# Gradients
# ============================================================================

def generate_gradient_stripes(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    colors: Sequence[str] = ("#e31937", "#ff6b6b", "#feca57"),
    angle: float = 0,
) -> 'Image.Image':
    """Evenly spaced color stops along a line through the center at ``angle`` degrees."""
    return angled_gradient(width, height, list(colors), angle)


# ============================================================================
# Geometric tilings
# ============================================================================

def generate_triangle_pattern(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    colors: Sequence[str] = ("#2d3436", "#636e72", "#b2bec3"),
    triangle_size: float = 60,
) -> 'Image.Image':
    """Equilateral triangle tessellation cycling through ``colors``."""
    _require_positive(triangle_size=triangle_size)
    if not colors:
        raise InvalidParameter("colors must not be empty")

    image, draw = new_canvas(width, height)
    palette = [to_rgba(color) for color in colors]
    row_height = triangle_size * TRIANGLE_HEIGHT_RATIO
    rows = math.ceil(height / row_height) + 1
    cols = math.ceil(width / triangle_size) + 1

    for row in range(rows):
        for col in range(cols):
            x = col * triangle_size + (triangle_size / 2.0 if row % 2 else 0.0)
            y = row * row_height
            upward = [(x, y + row_height), (x + triangle_size / 2.0, y), (x + triangle_size, y + row_height)]
            downward = [(x + triangle_size / 2.0, y), (x + triangle_size, y + row_height), (x + triangle_size * 1.5, y)]
            draw.polygon(upward, fill=palette[(row + col) % len(palette)])
            draw.polygon(downward, fill=palette[(row + col + 1) % len(palette)])
    return image


def generate_hexagon_pattern(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    hex_size: float = 30,
    fill_color: str = "#1a1a1a",
    stroke_color: str = "#e31937",
    stroke_width: float = 2,
) -> 'Image.Image':
    """Pointy-top hexagon honeycomb outlines on a solid fill."""
    _require_positive(hex_size=hex_size)
    image, draw = new_canvas(width, height, fill_color)
    stroke = to_rgba(stroke_color)
    line_width = polyline_width(stroke_width)

    hex_width = math.sqrt(3) * hex_size
    vertical_distance = hex_size * 2 * 0.75
    rows = math.ceil(height / vertical_distance) + 1
    cols = math.ceil(width / hex_width) + 1

    for row in range(rows):
        for col in range(cols):
            center_x = col * hex_width + (hex_width / 2.0 if row % 2 else 0.0)
            center_y = row * vertical_distance
            vertices = regular_polygon(center_x, center_y, hex_size, 6, rotation=-math.pi / 6)
            draw.line(vertices + [vertices[0]], fill=stroke, width=line_width, joint="curve")
    return image


# ============================================================================
# Textures
# ============================================================================

def generate_carbon_fiber(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    cell_size: float = 10,
    color1: str = "#1a1a1a",
    color2: str = "#2d2d2d",
    highlight_color: str = "#3a3a3a",
) -> 'Image.Image':
    """Checkerboard weave with a small highlight in the corner of every lit cell."""
    _require_positive(cell_size=cell_size)
    image, draw = new_canvas(width, height, color1)
    base = to_rgba(color1)
    lit = to_rgba(color2)
    highlight = to_rgba(highlight_color)

    cols = math.ceil(width / cell_size)
    rows = math.ceil(height / cell_size)
    highlight_size = cell_size * 0.3
    for row in range(rows):
        for col in range(cols):
            x = col * cell_size
            y = row * cell_size
            is_lit = (row + col) % 2 == 0
            draw.rectangle([x, y, x + cell_size - 1, y + cell_size - 1], fill=lit if is_lit else base)
            if is_lit:
                draw.rectangle([x, y, x + highlight_size - 1, y + highlight_size - 1], fill=highlight)
    return image


# ============================================================================
# Line patterns
# ============================================================================

def _wave_points(width: int, base_y: float, amplitude: float, wavelength: float, phase: float = 0.0) -> List[Point]:
    return [
        (x, base_y + math.sin((x / wavelength) * math.pi * 2 + phase) * amplitude)
        for x in range(0, width + 1, 5)
    ]


def generate_wave_pattern(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    wave_color: str = "#e31937",
    bg_color: str = "transparent",
    wave_height: float = 30,
    wave_length: float = 100,
    wave_count: int = 5,
    line_width: float = 4,
) -> 'Image.Image':
    """``wave_count`` evenly spaced sine waves."""
    _require_positive(wave_length=wave_length, wave_count=wave_count)
    image, draw = new_canvas(width, height, bg_color)
    color = to_rgba(wave_color)

    spacing = height / (wave_count + 1)
    for index in range(1, int(wave_count) + 1):
        points = _wave_points(width, spacing * index, wave_height, wave_length)
        draw.line(points, fill=color, width=polyline_width(line_width), joint="curve")
    return image


def generate_multi_wave(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    colors: Sequence[str] = ("#e31937", "#0984e3", "#f4d03f"),
    wave_height: float = 25,
    wave_length: float = 80,
    first_y: float = 150,
    spacing: float = 150,
    line_width: float = 4,
) -> 'Image.Image':
    """One sine wave per color, each phase-shifted by its index."""
    _require_positive(wave_length=wave_length)
    image, draw = new_canvas(width, height)
    for index, color in enumerate(colors):
        points = _wave_points(width, first_y + index * spacing, wave_height, wave_length, phase=index)
        draw.line(points, fill=to_rgba(color), width=polyline_width(line_width), joint="curve")
    return image


def generate_dot_gradient(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    dot_color: str = "#e31937",
    bg_color: str = "#1a1a1a",
    max_dot_size: float = 15,
    min_dot_size: float = 2,
    spacing: float = 20,
    direction: str = "horizontal",
) -> 'Image.Image':
    """
    Grid of dots whose diameter ramps from ``min_dot_size`` to ``max_dot_size``.

    ``direction`` is 'horizontal' (left to right), 'vertical' (top to
    bottom) or 'radial' (largest at the center).
    """
    _require_positive(spacing=spacing)
    if direction not in ("horizontal", "vertical", "radial"):
        raise InvalidParameter(f"Unknown dot gradient direction: {direction}")

    image, draw = new_canvas(width, height, bg_color)
    color = to_rgba(dot_color)
    cols = math.ceil(width / spacing)
    rows = math.ceil(height / spacing)
    center_x = width / 2.0
    center_y = height / 2.0
    max_distance = math.hypot(center_x, center_y)

    for row in range(rows):
        for col in range(cols):
            x = col * spacing + spacing / 2.0
            y = row * spacing + spacing / 2.0
            if direction == "horizontal":
                progress = col / cols
            elif direction == "vertical":
                progress = row / rows
            else:
                progress = 1.0 - math.hypot(x - center_x, y - center_y) / max_distance

            radius = (min_dot_size + (max_dot_size - min_dot_size) * progress) / 2.0
            if radius > 0:
                draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=color)
    return image


# ============================================================================
# Camouflage
# ============================================================================

def generate_camouflage(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    colors: Sequence[str] = ("#4a5d23", "#6b7c3f", "#8b9a5b", "#2d3a1a"),
    blob_count: int = 50,
    seed: Optional[int] = None,
) -> 'Image.Image':
    """
    Random irregular polygon blobs over the first color.

    Without a ``seed`` every call produces a different layout; this is the
    only generator that is not reproducible by default.
    """
    if not colors:
        raise InvalidParameter("colors must not be empty")
    rng = random.Random(seed)
    image, draw = new_canvas(width, height, colors[0])
    palette = [to_rgba(color) for color in colors]

    for _ in range(int(blob_count)):
        x = rng.random() * width
        y = rng.random() * height
        size = 30 + rng.random() * 100
        color = palette[int(rng.random() * len(palette))]
        vertex_count = 6 + int(rng.random() * 4)

        vertices = []
        for index in range(vertex_count):
            angle = (index / vertex_count) * math.pi * 2
            radius = size * (0.5 + rng.random() * 0.5)
            vertices.append((x + math.cos(angle) * radius, y + math.sin(angle) * radius))
        draw.polygon(vertices, fill=color)
    return image


# ============================================================================
# Novelty
# ============================================================================

def generate_race_number(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    number: str = "7",
    disc_color: str = "#ffffff",
    number_color: str = "#1a1a1a",
    ring_color: str = "#e31937",
    ring_width: float = 12,
    bg_color: str = "transparent",
    radius_ratio: float = 0.35,
) -> 'Image.Image':
    """Racing roundel: a ringed disc centered on the canvas with a number inside."""
    _require_positive(radius_ratio=radius_ratio)
    image, draw = new_canvas(width, height, bg_color)

    radius = min(width, height) * radius_ratio
    center_x = width / 2.0
    center_y = height / 2.0
    bounds = [center_x - radius, center_y - radius, center_x + radius, center_y + radius]
    draw.ellipse(bounds, fill=to_rgba(disc_color), outline=to_rgba(ring_color), width=polyline_width(ring_width))

    text = str(number)
    if text:
        font = load_font(max(1, int(radius * 1.2)))
        draw.text((center_x, center_y), text, font=font, fill=to_rgba(number_color), anchor="mm")
    return image


def _flame_tongue(base_y: float, thickness: float, length: float, amplitude: float, phase: float) -> List[Point]:
    steps = 24
    upper: List[Point] = []
    lower: List[Point] = []
    for step in range(steps + 1):
        t = step / steps
        x = t * length
        half = thickness / 2.0 * (1.0 - t) ** 0.8
        center = base_y + amplitude * math.sin(t * math.pi * 1.5 + phase) * t
        upper.append((x, center - half))
        lower.append((x, center + half))
    return upper + lower[::-1]


def generate_flames(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    colors: Sequence[str] = ("#ff4500", "#ff8c00", "#ffd700"),
    flame_count: int = 7,
    length_ratio: float = 0.75,
    bg_color: str = "transparent",
) -> 'Image.Image':
    """
    Hot-rod flames licking in from the left edge.

    Tongues are filled polygons with alternating lengths and phases, all
    painted through one horizontal gradient running base to tip.
    """
    _require_positive(flame_count=flame_count, length_ratio=length_ratio)
    image, _ = new_canvas(width, height, bg_color)

    shape = Image.new("L", (width, height), 0)
    shape_draw = ImageDraw.Draw(shape)
    spacing = height / (flame_count + 1)
    for index in range(int(flame_count)):
        length = width * length_ratio * (1.0 if index % 2 == 0 else 0.7)
        tongue = _flame_tongue(
            base_y=spacing * (index + 1),
            thickness=spacing * 1.6,
            length=length,
            amplitude=spacing * 0.6,
            phase=index * 0.9,
        )
        shape_draw.polygon(tongue, fill=255)

    gradient = linear_gradient(width, height, list(colors), (0.0, 0.0), (width * length_ratio, 0.0))
    image.paste(gradient, (0, 0), shape)
    return image


def generate_starfield(
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    bg_color: str = "#0b0d2a",
    glow_color: Optional[str] = "#1f2a6b",
    star_color: str = "#ffffff",
    star_count: int = 200,
    max_star_size: float = 3,
    sparkle_count: int = 8,
    seed: int = 42,
) -> 'Image.Image':
    """
    Seeded field of round stars plus a few four-point sparkles.

    With a ``glow_color`` the background is a radial gradient from that
    color at the center out to ``bg_color``.
    """
    _require_positive(max_star_size=max_star_size)
    rng = random.Random(seed)
    if glow_color:
        image = radial_gradient(width, height, [glow_color, bg_color])
        draw = ImageDraw.Draw(image)
    else:
        image, draw = new_canvas(width, height, bg_color)
    base = to_rgba(star_color)

    for _ in range(int(star_count)):
        x = rng.random() * width
        y = rng.random() * height
        radius = 0.5 + rng.random() * (max_star_size - 0.5) / 2.0
        brightness = 0.4 + rng.random() * 0.6
        color = (base[0], base[1], base[2], int(round(base[3] * brightness)))
        draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=color)

    for _ in range(int(sparkle_count)):
        x = rng.random() * width
        y = rng.random() * height
        outer = max_star_size * (3 + rng.random() * 3)
        inner = outer * 0.25
        points = []
        for index in range(8):
            angle = index * math.pi / 4 - math.pi / 2
            radius = outer if index % 2 == 0 else inner
            points.append((x + math.cos(angle) * radius, y + math.sin(angle) * radius))
        draw.polygon(points, fill=base)
    return image
