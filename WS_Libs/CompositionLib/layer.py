"""
Composition layer model.

A layer is a raster plus its placement on the canvas: position of its
origin point, rotation about that point, non-uniform scale and opacity.
Layers serialize to plain dicts (images as base64 PNG) so composition
snapshots carry no live handles.
"""

import base64
from dataclasses import dataclass, field
import math
from typing import Any, Dict, Optional, Tuple

import numpy as np
from PIL import Image

from WS_Libs.constants import LAYER_KIND_IMAGE, ORIGIN_CENTER, ORIGIN_LEFT_TOP
from WS_Libs.errors import InvalidParameter
from WS_Libs.ImageEditingLib.image_io import decode_png, encode_png
from WS_Libs.ImageEditingLib.text_fill import composite_at
from WS_Libs.PatternLib.primitives import rotate_point

ORIGINS = (ORIGIN_CENTER, ORIGIN_LEFT_TOP)

# Placement attributes callers may change after a layer is created
PLACEMENT_FIELDS = ("x", "y", "origin", "rotation", "scale_x", "scale_y", "opacity", "visible", "name")


def image_to_base64(image: 'Image.Image') -> str:
    return base64.b64encode(encode_png(image)).decode("ascii")


def image_from_base64(data: str) -> 'Image.Image':
    return decode_png(base64.b64decode(data))


@dataclass
class Layer:
    """A placed raster in the composition.

    Attributes:
        layer_id: Unique id within the composition
        kind: One of the LAYER_KIND_* values
        image: RGBA raster at 1:1 scale
        x: Canvas x of the origin point
        y: Canvas y of the origin point
        origin: 'center' (image center) or 'left_top' (top-left corner)
        rotation: Clockwise rotation in degrees about the origin point
        scale_x: Horizontal scale factor (> 0)
        scale_y: Vertical scale factor (> 0)
        opacity: Opacity multiplier, 0.0-1.0
        interactive: False for the overlay and the text-fill layer
        visible: Hidden layers are skipped when flattening
        name: Display name
        source_image: Unadjusted raster kept while color adjustments apply
        adjustments: Color adjustments applied to source_image, if any
        params: Generation parameters (pattern id, text fill settings, ...)
    """
    layer_id: str
    kind: str = LAYER_KIND_IMAGE
    image: Any = None
    x: float = 0.0
    y: float = 0.0
    origin: str = ORIGIN_LEFT_TOP
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    opacity: float = 1.0
    interactive: bool = True
    visible: bool = True
    name: str = ""
    source_image: Optional[Any] = None
    adjustments: Optional[Dict[str, float]] = None
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not hasattr(self.image, "convert"):
            raise TypeError(f"Layer image must be a PIL Image, got {type(self.image)}")
        if self.image.mode != "RGBA":
            self.image = self.image.convert("RGBA")
        self.validate()

    def validate(self) -> None:
        """
        Check placement values.

        Raises:
            InvalidParameter: If origin, scale or opacity is out of range
        """
        if self.origin not in ORIGINS:
            raise InvalidParameter(f"origin must be one of {ORIGINS}, got {self.origin!r}")
        if self.scale_x <= 0 or self.scale_y <= 0:
            raise InvalidParameter(f"scale must be positive, got ({self.scale_x}, {self.scale_y})")
        if not (0.0 <= self.opacity <= 1.0):
            raise InvalidParameter(f"opacity must be 0.0-1.0, got {self.opacity}")

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def placed_image(self, canvas_scale: float = 1.0) -> Tuple['Image.Image', int, int]:
        """
        Render the layer's raster with its transform applied.

        Args:
            canvas_scale: Extra uniform scale applied to size and position
                          (used for supersampled export)

        Returns:
            (transformed RGBA image, left, top) in canvas pixels
        """
        width, height = self.image.size
        scale_x = self.scale_x * canvas_scale
        scale_y = self.scale_y * canvas_scale
        scaled_w = max(1, int(round(width * scale_x)))
        scaled_h = max(1, int(round(height * scale_y)))

        image = self.image
        if (scaled_w, scaled_h) != (width, height):
            image = image.resize((scaled_w, scaled_h), Image.Resampling.BICUBIC)

        if self.opacity < 1.0:
            pixels = np.array(image, dtype=np.uint8)
            pixels[:, :, 3] = np.rint(pixels[:, :, 3] * self.opacity).astype(np.uint8)
            image = Image.fromarray(pixels)

        if self.origin == ORIGIN_CENTER:
            pivot_x, pivot_y = scaled_w / 2.0, scaled_h / 2.0
        else:
            pivot_x, pivot_y = 0.0, 0.0

        if self.rotation % 360 != 0:
            rotated = image.rotate(-self.rotation, resample=Image.Resampling.BICUBIC, expand=True)
            offset_x, offset_y = rotate_point(
                pivot_x - scaled_w / 2.0, pivot_y - scaled_h / 2.0, 0.0, 0.0, math.radians(self.rotation)
            )
            pivot_x = rotated.size[0] / 2.0 + offset_x
            pivot_y = rotated.size[1] / 2.0 + offset_y
            image = rotated

        left = math.floor(self.x * canvas_scale - pivot_x + 0.5)
        top = math.floor(self.y * canvas_scale - pivot_y + 0.5)
        return image, left, top

    def render_onto(self, canvas: 'Image.Image', canvas_scale: float = 1.0) -> None:
        """Alpha-composite this layer onto ``canvas`` in place (no-op when hidden)."""
        if not self.visible:
            return
        image, left, top = self.placed_image(canvas_scale)
        composite_at(canvas, image, left, top)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict; rasters become base64 PNG strings."""
        return {
            "layer_id": self.layer_id,
            "kind": self.kind,
            "image": image_to_base64(self.image),
            "x": self.x,
            "y": self.y,
            "origin": self.origin,
            "rotation": self.rotation,
            "scale_x": self.scale_x,
            "scale_y": self.scale_y,
            "opacity": self.opacity,
            "interactive": self.interactive,
            "visible": self.visible,
            "name": self.name,
            "source_image": image_to_base64(self.source_image) if self.source_image is not None else None,
            "adjustments": dict(self.adjustments) if self.adjustments else None,
            "params": dict(self.params),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Layer":
        """Create from a dict produced by :meth:`to_dict`."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        filtered["image"] = image_from_base64(filtered["image"])
        if filtered.get("source_image"):
            filtered["source_image"] = image_from_base64(filtered["source_image"])
        else:
            filtered["source_image"] = None
        return cls(**filtered)
