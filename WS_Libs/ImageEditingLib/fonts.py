"""Font lookup shared by text fill and the novelty pattern generators."""

from functools import lru_cache
import logging
from typing import Any

from PIL import ImageFont

from WS_Libs.constants import FONT_CANDIDATES

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def load_font(font_size: int) -> Any:
    """
    Load a bold sans-serif font at the given pixel size.

    Tries the common system bold fonts in order and falls back to
    Pillow's bundled default font.
    """
    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, font_size)
        except OSError:
            continue

    logger.warning(f"No bold TrueType font found, using Pillow default at {font_size}px")
    return ImageFont.load_default(size=font_size)
