"""
Composition Controller.

Owns the layer stack of one design: the template's masked overlay, the
single text-fill layer and every user layer, plus the segmentation result
the text fill and the export clip read from. All editor operations go
through this object; nothing is kept in module-level state.

The overlay layer is non-interactive and is moved back to the top of the
stack after every mutation, so user content only shows through the
template's interior.

Example:
    >>> composition = Composition(history=HistoryStack())
    >>> composition.load_template("templates/model3.png")
    >>> composition.add_pattern_layer("carbon-fiber")
    >>> composition.apply_text_fill(TextFillConfig(text="WRAP"))
    >>> png_bytes = composition.export_png(multiplier=2)
"""

import logging
import time
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image

from WS_Libs.constants import (
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_FILL_TOLERANCE,
    EXPORT_FILE_PREFIX,
    IMPORT_FIT_RATIO,
    INTERIOR_VALUE,
    LAYER_KIND_BUCKET_FILL,
    LAYER_KIND_IMAGE,
    LAYER_KIND_OVERLAY,
    LAYER_KIND_PATTERN,
    LAYER_KIND_TEXT_FILL,
    MAX_EXPORT_MULTIPLIER,
    ORIGIN_CENTER,
    ORIGIN_LEFT_TOP,
)
from WS_Libs.errors import CancelToken, InvalidParameter
from WS_Libs.CompositionLib.history import HistoryStack
from WS_Libs.CompositionLib.layer import PLACEMENT_FIELDS, Layer, image_from_base64, image_to_base64
from WS_Libs.ImageEditingLib.bucket_fill import flood_fill
from WS_Libs.ImageEditingLib.color_adjustment import ColorAdjustments, adjust_colors
from WS_Libs.ImageEditingLib.color_space import parse_hex_color
from WS_Libs.ImageEditingLib.image_io import ImageSource, encode_png, load_image
from WS_Libs.ImageEditingLib.image_models import RgbColor, SegmentationResult
from WS_Libs.ImageEditingLib.template_mask import segment
from WS_Libs.ImageEditingLib.text_fill import TextFillConfig, synthesize_with_config
from WS_Libs.PatternLib.pattern_registry import PatternRegistry, get_default_registry

logger = logging.getLogger(__name__)


class Composition:
    """
    Layer stack and template state for one wrap design.

    Args:
        width: Initial canvas width (replaced by the template size on load)
        height: Initial canvas height
        background_color: Canvas and template exterior color (hex)
        history: Optional HistoryStack receiving a snapshot after every mutation
        pattern_registry: Preset registry for add_pattern_layer (default registry if None)
    """

    def __init__(
        self,
        width: int = DEFAULT_CANVAS_WIDTH,
        height: int = DEFAULT_CANVAS_HEIGHT,
        background_color: str = DEFAULT_BACKGROUND_COLOR,
        history: Optional[HistoryStack] = None,
        pattern_registry: Optional[PatternRegistry] = None,
    ):
        if width <= 0 or height <= 0:
            raise InvalidParameter(f"Canvas size must be positive, got {width}x{height}")

        self.width = int(width)
        self.height = int(height)
        self.background_color = background_color
        self.history = history
        self.pattern_registry = pattern_registry

        self._layers: List[Layer] = []
        self._segmentation: Optional[SegmentationResult] = None
        self._overlay_id: Optional[str] = None
        self._text_fill_id: Optional[str] = None
        self._next_id = 1

        self._commit("new composition")

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def size(self):
        return (self.width, self.height)

    @property
    def layers(self) -> List[Layer]:
        """All layers bottom to top, overlay included (a copy of the list)."""
        return list(self._layers)

    @property
    def segmentation(self) -> Optional[SegmentationResult]:
        return self._segmentation

    @property
    def interior_mask(self) -> Optional[np.ndarray]:
        return self._segmentation.interior_mask if self._segmentation is not None else None

    @property
    def overlay_layer(self) -> Optional[Layer]:
        return self._find(self._overlay_id)

    @property
    def text_fill_layer(self) -> Optional[Layer]:
        return self._find(self._text_fill_id)

    def user_layers(self) -> List[Layer]:
        """Layers other than the overlay, bottom to top."""
        return [layer for layer in self._layers if layer.layer_id != self._overlay_id]

    def get_layer(self, layer_id: str) -> Layer:
        """
        Look up a layer by id.

        Raises:
            KeyError: If no layer has that id
        """
        layer = self._find(layer_id)
        if layer is None:
            available = ", ".join(layer.layer_id for layer in self._layers)
            raise KeyError(f"No layer '{layer_id}'. Available layers: {available}")
        return layer

    def _find(self, layer_id: Optional[str]) -> Optional[Layer]:
        if layer_id is None:
            return None
        for layer in self._layers:
            if layer.layer_id == layer_id:
                return layer
        return None

    def _new_id(self, kind: str) -> str:
        layer_id = f"{kind}-{self._next_id}"
        self._next_id += 1
        return layer_id

    def _require_user_layer(self, layer_id: str) -> Layer:
        layer = self.get_layer(layer_id)
        if layer.layer_id == self._overlay_id:
            raise InvalidParameter("The template overlay layer cannot be modified")
        return layer

    def _raise_overlay(self) -> None:
        overlay = self.overlay_layer
        if overlay is not None and self._layers[-1] is not overlay:
            self._layers.remove(overlay)
            self._layers.append(overlay)

    def _commit(self, action: str) -> None:
        self._raise_overlay()
        if self.history is not None:
            self.history.push(self.snapshot())
        logger.debug(f"Composition: {action} ({len(self._layers)} layers)")

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    def load_template(
        self,
        source: ImageSource,
        background_color: Optional[str] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> SegmentationResult:
        """
        Segment a template and install its overlay as the top layer.

        The canvas takes the template's size. The previous overlay and
        text-fill layers are discarded; user layers are kept.

        Args:
            source: Template path, bytes, file object or PIL Image
            background_color: Exterior color; defaults to the composition's
            cancel_token: Optional cooperative cancellation token

        Returns:
            The new SegmentationResult

        Raises:
            DecodeError: If the template cannot be decoded
        """
        if background_color is not None:
            self.background_color = background_color

        result = segment(source, background_color=self.background_color, cancel_token=cancel_token)

        self._layers = [
            layer for layer in self._layers
            if layer.layer_id not in (self._overlay_id, self._text_fill_id)
        ]
        self._text_fill_id = None
        self._segmentation = result
        self.width = result.width
        self.height = result.height

        overlay = Layer(
            layer_id=self._new_id(LAYER_KIND_OVERLAY),
            kind=LAYER_KIND_OVERLAY,
            image=result.overlay,
            origin=ORIGIN_LEFT_TOP,
            interactive=False,
            name="Template",
        )
        self._overlay_id = overlay.layer_id
        self._layers.append(overlay)

        self._commit("load template")
        return result

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def add_layer(self, image: Any, kind: str = LAYER_KIND_IMAGE, **attributes: Any) -> Layer:
        """
        Add a raster as the topmost user layer.

        Args:
            image: PIL Image (converted to RGBA)
            kind: Layer kind
            **attributes: Layer fields (x, y, origin, rotation, scale_x, ...)

        Returns:
            The new Layer
        """
        layer = Layer(layer_id=self._new_id(kind), kind=kind, image=image, **attributes)
        self._layers.append(layer)
        self._commit(f"add {kind} layer {layer.layer_id}")
        return layer

    def add_image_layer(self, source: ImageSource, name: str = "") -> Layer:
        """
        Import an image as a layer centered on the canvas.

        The image is scaled uniformly to fit within 60% of the smaller canvas
        dimension and is never upscaled.

        Raises:
            DecodeError: If the image cannot be decoded
        """
        image = load_image(source, mode="RGBA")
        image_w, image_h = image.size
        max_size = min(self.width, self.height) * IMPORT_FIT_RATIO
        scale = min(max_size / image_w, max_size / image_h, 1.0)

        return self.add_layer(
            image,
            kind=LAYER_KIND_IMAGE,
            x=self.width / 2.0,
            y=self.height / 2.0,
            origin=ORIGIN_CENTER,
            scale_x=scale,
            scale_y=scale,
            name=name,
        )

    def remove_layer(self, layer_id: str) -> None:
        """
        Remove a user layer.

        Raises:
            KeyError: If no layer has that id
            InvalidParameter: If the id is the overlay layer
        """
        layer = self._require_user_layer(layer_id)
        self._layers.remove(layer)
        if layer.layer_id == self._text_fill_id:
            self._text_fill_id = None
        self._commit(f"remove layer {layer_id}")

    def clear_layers(self) -> None:
        """Remove every layer except the template overlay."""
        self._layers = [layer for layer in self._layers if layer.layer_id == self._overlay_id]
        self._text_fill_id = None
        self._commit("clear layers")

    def bring_to_front(self, layer_id: str) -> None:
        """Move a user layer to the top of the user layers (the overlay stays above it)."""
        layer = self._require_user_layer(layer_id)
        self._layers.remove(layer)
        self._layers.append(layer)
        self._commit(f"bring {layer_id} to front")

    def update_layer(self, layer_id: str, **changes: Any) -> Layer:
        """
        Change placement attributes of a user layer.

        Args:
            layer_id: Layer to change
            **changes: Any of x, y, origin, rotation, scale_x, scale_y,
                       opacity, visible, name

        Raises:
            InvalidParameter: Unknown attribute, out-of-range value, or overlay layer
        """
        layer = self._require_user_layer(layer_id)
        unknown = sorted(name for name in changes if name not in PLACEMENT_FIELDS)
        if unknown:
            raise InvalidParameter(f"Cannot update layer attributes: {', '.join(unknown)}")

        previous = {name: getattr(layer, name) for name in changes}
        for name, value in changes.items():
            setattr(layer, name, value)
        try:
            layer.validate()
        except InvalidParameter:
            for name, value in previous.items():
                setattr(layer, name, value)
            raise

        self._commit(f"update layer {layer_id}")
        return layer

    # ------------------------------------------------------------------
    # Generated content
    # ------------------------------------------------------------------

    def apply_text_fill(self, config: TextFillConfig, cancel_token: Optional[CancelToken] = None) -> Optional[Layer]:
        """
        Generate (or regenerate) the single text-fill layer.

        Empty text removes the existing text-fill layer and returns None.

        Raises:
            RuntimeError: If no template is loaded
            InvalidParameter: For invalid text fill parameters
        """
        if self._segmentation is None:
            raise RuntimeError("Load a template before applying a text fill")

        # The stack changes only after synthesis succeeds
        image = None
        if config.text and config.text.strip():
            image = synthesize_with_config(
                config,
                self._segmentation.interior_mask,
                self._segmentation.width,
                self._segmentation.height,
                cancel_token=cancel_token,
            )

        previous = self.text_fill_layer
        if previous is not None:
            self._layers.remove(previous)
            self._text_fill_id = None

        if image is None:
            self._commit("remove text fill")
            return None

        layer = Layer(
            layer_id=self._new_id(LAYER_KIND_TEXT_FILL),
            kind=LAYER_KIND_TEXT_FILL,
            image=image,
            interactive=False,
            name=config.text,
            params=config.to_dict(),
        )
        self._text_fill_id = layer.layer_id
        self._layers.append(layer)
        self._commit("apply text fill")
        return layer

    def apply_bucket_fill(
        self,
        x: int,
        y: int,
        fill_color: Any,
        tolerance: int = DEFAULT_FILL_TOLERANCE,
    ) -> Optional[Layer]:
        """
        Bucket-fill the flattened canvas and add the result as a new top layer.

        The snapshot holds every visible layer over the background, template
        overlay included, so template outlines bound the fill.

        Args:
            x: Click column in canvas pixels
            y: Click row in canvas pixels
            fill_color: Hex string or RGB tuple
            tolerance: Per-channel RGB tolerance, 0-255

        Returns:
            The new layer, or None when the fill changed nothing
        """
        if isinstance(fill_color, str):
            fill_rgb: RgbColor = parse_hex_color(fill_color, fallback=None)
        else:
            fill_rgb = tuple(int(c) for c in fill_color[:3])

        snapshot = self.flatten()
        filled = flood_fill(snapshot, x, y, fill_rgb, tolerance)
        if np.array_equal(np.asarray(snapshot), np.asarray(filled)):
            logger.debug(f"Bucket fill at ({x}, {y}) changed nothing")
            return None

        return self.add_layer(
            filled,
            kind=LAYER_KIND_BUCKET_FILL,
            name="Fill",
            params={"x": int(x), "y": int(y), "fill_color": list(fill_rgb), "tolerance": int(tolerance)},
        )

    def add_pattern_layer(self, pattern_id: str, params: Optional[Dict[str, Any]] = None) -> Layer:
        """
        Render a preset pattern at canvas size and add it as a layer.

        Raises:
            KeyError: Unknown pattern id
            InvalidParameter: Unknown pattern parameter
        """
        registry = self.pattern_registry or get_default_registry()
        spec = registry.get(pattern_id)

        merged = {"width": self.width, "height": self.height}
        merged.update(params or {})
        image = spec.render(merged)

        return self.add_layer(
            image,
            kind=LAYER_KIND_PATTERN,
            name=spec.name,
            params={"pattern_id": spec.pattern_id, "params": dict(merged)},
        )

    def adjust_layer_colors(
        self,
        layer_id: str,
        adjustments: ColorAdjustments,
        cancel_token: Optional[CancelToken] = None,
    ) -> Layer:
        """
        Apply color adjustments to a layer.

        Adjustments always start from the layer's unadjusted raster, so
        repeated calls replace each other instead of accumulating. Identity
        adjustments restore the original raster.
        """
        layer = self._require_user_layer(layer_id)
        source = layer.source_image if layer.source_image is not None else layer.image

        if adjustments.is_identity:
            layer.image = source
            layer.source_image = None
            layer.adjustments = None
        else:
            layer.image = adjust_colors(source, adjustments, cancel_token=cancel_token)
            layer.source_image = source
            layer.adjustments = adjustments.to_dict()

        self._commit(f"adjust colors of {layer_id}")
        return layer

    def reset_layer_colors(self, layer_id: str) -> Layer:
        """Drop any color adjustments from a layer."""
        return self.adjust_layer_colors(layer_id, ColorAdjustments())

    # ------------------------------------------------------------------
    # Rendering and export
    # ------------------------------------------------------------------

    def flatten(
        self,
        include_overlay: bool = True,
        include_background: bool = True,
        canvas_scale: float = 1.0,
    ) -> 'Image.Image':
        """
        Render the visible layers bottom to top into one RGBA image.

        Args:
            include_overlay: Render the template overlay on top
            include_background: Start from the opaque background color
                                instead of transparency
            canvas_scale: Uniform render scale (supersampling)

        Returns:
            RGBA image of the canvas size times ``canvas_scale``
        """
        size = (
            max(1, int(round(self.width * canvas_scale))),
            max(1, int(round(self.height * canvas_scale))),
        )
        if include_background:
            background = parse_hex_color(self.background_color) + (255,)
        else:
            background = (0, 0, 0, 0)
        canvas = Image.new("RGBA", size, background)

        for layer in self._layers:
            if layer.layer_id == self._overlay_id and not include_overlay:
                continue
            layer.render_onto(canvas, canvas_scale)
        return canvas

    def export_image(self, clip_to_interior: bool = False, multiplier: int = 1) -> 'Image.Image':
        """
        Render the final design.

        Args:
            clip_to_interior: Make every pixel outside the interior mask transparent
            multiplier: Integer supersampling factor (the editor exports at 2)

        Raises:
            InvalidParameter: If multiplier is outside 1-8
            RuntimeError: If clipping is requested without a template
        """
        if not (1 <= int(multiplier) <= MAX_EXPORT_MULTIPLIER) or int(multiplier) != multiplier:
            raise InvalidParameter(f"multiplier must be an integer 1-{MAX_EXPORT_MULTIPLIER}, got {multiplier}")
        multiplier = int(multiplier)

        image = self.flatten(canvas_scale=multiplier)
        if clip_to_interior:
            if self._segmentation is None:
                raise RuntimeError("Load a template before exporting clipped to the interior")
            mask = self._segmentation.interior_mask
            if multiplier != 1:
                mask = np.repeat(np.repeat(mask, multiplier, axis=0), multiplier, axis=1)
            pixels = np.array(image, dtype=np.uint8)
            pixels[mask != INTERIOR_VALUE, 3] = 0
            image = Image.fromarray(pixels)

        logger.info(f"Exported {image.size[0]}x{image.size[1]} design")
        return image

    def export_png(self, clip_to_interior: bool = False, multiplier: int = 1) -> bytes:
        """Render the final design and encode it as PNG bytes."""
        return encode_png(self.export_image(clip_to_interior=clip_to_interior, multiplier=multiplier))

    @staticmethod
    def export_filename(timestamp_ms: Optional[int] = None) -> str:
        """Default export file name, e.g. ``wrap-design-1700000000000.png``."""
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return f"{EXPORT_FILE_PREFIX}{timestamp_ms}.png"

    # ------------------------------------------------------------------
    # Snapshots and history
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """Serialize the whole composition to a plain dict."""
        mask = None
        if self._segmentation is not None:
            mask = image_to_base64(self._segmentation.mask_image())
        return {
            "width": self.width,
            "height": self.height,
            "background_color": self.background_color,
            "layers": [layer.to_dict() for layer in self._layers],
            "overlay_id": self._overlay_id,
            "text_fill_id": self._text_fill_id,
            "next_id": self._next_id,
            "interior_mask": mask,
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Replace the composition state with a snapshot (history is not touched)."""
        layers = [Layer.from_dict(data) for data in snapshot["layers"]]
        by_id = {layer.layer_id: layer for layer in layers}

        segmentation = None
        overlay_id = snapshot.get("overlay_id")
        if snapshot.get("interior_mask") and overlay_id in by_id:
            mask = np.array(image_from_base64(snapshot["interior_mask"]).convert("L"), dtype=np.uint8)
            mask.setflags(write=False)
            segmentation = SegmentationResult(
                overlay=by_id[overlay_id].image,
                interior_mask=mask,
                width=mask.shape[1],
                height=mask.shape[0],
            )

        self.width = int(snapshot["width"])
        self.height = int(snapshot["height"])
        self.background_color = snapshot.get("background_color", DEFAULT_BACKGROUND_COLOR)
        self._layers = layers
        self._segmentation = segmentation
        self._overlay_id = overlay_id if overlay_id in by_id else None
        self._text_fill_id = snapshot.get("text_fill_id") if snapshot.get("text_fill_id") in by_id else None
        self._next_id = int(snapshot.get("next_id", len(layers) + 1))

    def undo(self) -> bool:
        """Restore the previous history entry. Returns False if there is none."""
        if self.history is None:
            return False
        entry = self.history.undo()
        if entry is None:
            return False
        self.restore(entry)
        return True

    def redo(self) -> bool:
        """Restore the next history entry. Returns False if there is none."""
        if self.history is None:
            return False
        entry = self.history.redo()
        if entry is None:
            return False
        self.restore(entry)
        return True
