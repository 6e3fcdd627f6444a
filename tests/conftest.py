"""
Pytest configuration and shared fixtures for Wrap Studio tests.

Templates are drawn synthetically so the suite needs no asset files.
"""

import numpy as np
import pytest
from PIL import Image, ImageDraw


def draw_square_template(size=100, box=(20, 20, 79, 79), line_width=3, line_color=(0, 0, 0)):
    """White canvas with one closed square outline; the inside is the paintable body."""
    image = Image.new("RGB", (size, size), (255, 255, 255))
    draw = ImageDraw.Draw(image)
    draw.rectangle(box, outline=line_color, width=line_width)
    return image


@pytest.fixture
def template_factory():
    """Factory drawing square-outline templates with custom size, box or line color."""
    return draw_square_template


@pytest.fixture
def square_template():
    """
    100x100 template: black 3px square outline from (20, 20) to (79, 79).

    Exterior is x or y < 20 or > 79, lines are the 3px outline, interior
    is 23..76 on both axes.
    """
    return draw_square_template()


@pytest.fixture
def blank_template():
    """All-white template with no enclosed region."""
    return Image.new("RGB", (60, 40), (255, 255, 255))


@pytest.fixture
def full_mask():
    """200x200 interior mask that is paintable everywhere."""
    return np.full((200, 200), 255, dtype=np.uint8)


@pytest.fixture
def solid_canvas():
    """50x50 opaque red RGBA canvas."""
    return Image.new("RGBA", (50, 50), (255, 0, 0, 255))


@pytest.fixture
def split_canvas():
    """
    60x40 RGBA canvas: left half white, right half blue, with a black
    vertical divider at x = 30.
    """
    image = Image.new("RGBA", (60, 40), (255, 255, 255, 255))
    draw = ImageDraw.Draw(image)
    draw.rectangle([31, 0, 59, 39], fill=(0, 0, 255, 255))
    draw.line([(30, 0), (30, 39)], fill=(0, 0, 0, 255))
    return image
