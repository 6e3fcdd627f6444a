"""
Image editing data models for Wrap Studio.

This module defines core data structures shared by the segmentation,
synthesis and composition code.

Classes:
    SegmentationResult: Overlay image and interior mask derived from a template

Type Aliases:
    RgbColor: A tuple of 3 integers representing RGB color values (0-255)
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from WS_Libs.constants import INTERIOR_VALUE

RgbColor = Tuple[int, int, int]
RgbaColor = Tuple[int, int, int, int]


@dataclass(frozen=True)
class SegmentationResult:
    """Output of template segmentation.

    Attributes:
        overlay: RGBA image stacked above user content (exterior and lines opaque)
        interior_mask: Read-only uint8 array of shape (height, width),
                       255 for paintable interior pixels, 0 elsewhere
        width: Template width in pixels
        height: Template height in pixels
    """
    overlay: 'Image.Image'
    interior_mask: np.ndarray
    width: int
    height: int

    @property
    def interior_pixel_count(self) -> int:
        return int(np.count_nonzero(self.interior_mask == INTERIOR_VALUE))

    @property
    def has_interior(self) -> bool:
        return self.interior_pixel_count > 0

    def overlay_png(self) -> bytes:
        """Encode the overlay image as PNG bytes."""
        from WS_Libs.ImageEditingLib.image_io import encode_png
        return encode_png(self.overlay)

    def mask_image(self) -> 'Image.Image':
        """Return the interior mask as an 'L' mode image."""
        return Image.fromarray(np.ascontiguousarray(self.interior_mask))
