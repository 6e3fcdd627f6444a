"""
Text Fill Node for the Wrap Studio pipeline.

Repeats a text stamp over a grid, keeping only stamps whose center lies in
the template interior. The interior mask is the node's input, so a Template
Mask node feeds straight into it.
"""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from WS_Libs.constants import (
    DEFAULT_FONT_SIZE,
    DEFAULT_SPACING_X,
    DEFAULT_SPACING_Y,
    DEFAULT_TEXT_ROTATION,
    NODE_TYPE_TEXT_FILL,
    SAMPLING_CENTER,
)
from WS_Libs.ImageEditingLib.image_models import SegmentationResult
from WS_Libs.ImageEditingLib.text_fill import TextFillConfig, synthesize_with_config


def _mask_and_size(value: Any) -> Tuple[Any, int, int]:
    # A Template Mask node yields (overlay, mask); take the mask
    if isinstance(value, tuple) and len(value) == 2:
        value = value[1]
    if isinstance(value, SegmentationResult):
        return value.interior_mask, value.width, value.height
    if hasattr(value, "getbands"):
        return value, value.size[0], value.size[1]

    array = np.asarray(value)
    if array.ndim != 2:
        raise TypeError(f"Expected a 2D interior mask, got shape {array.shape}")
    return array, array.shape[1], array.shape[0]


def execute_text_fill_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute text fill node in pipeline.

    Node dict should contain:
        - 'text': Text to repeat
        - 'font_size', 'spacing_x', 'spacing_y', 'rotation'
        - Optional 'sampling' ('center' or 'footprint') and 'gradient_colors'

    Inputs:
        - [0]: Interior mask ('L' image, 2D array, SegmentationResult, or the
               (overlay, mask) output of a Template Mask node)

    Returns:
        RGBA PIL Image the size of the mask

    Raises:
        ValueError: If no input or parameters are invalid
        TypeError: If the input is not a mask
    """
    if not inputs or inputs[0] is None:
        raise ValueError("Text Fill node requires an interior mask input")

    try:
        mask, width, height = _mask_and_size(inputs[0])
        config = TextFillConfig.from_dict(node)
        return synthesize_with_config(config, mask, width, height)
    except (ValueError, TypeError) as e:
        raise type(e)(f"Text Fill node error: {str(e)}") from e


def create_text_fill_node(
    node_id: str,
    text: str,
    font_size: int = DEFAULT_FONT_SIZE,
    spacing_x: float = DEFAULT_SPACING_X,
    spacing_y: float = DEFAULT_SPACING_Y,
    rotation: float = DEFAULT_TEXT_ROTATION,
    sampling: str = SAMPLING_CENTER,
    gradient_colors: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Create text fill node for graph.

    Args:
        node_id: Unique node identifier
        text: Text to repeat (empty produces a transparent image)
        font_size: Font size in pixels
        spacing_x: Horizontal spacing between stamp centers
        spacing_y: Vertical spacing between rows
        rotation: Per-stamp rotation in degrees
        sampling: 'center' or 'footprint'
        gradient_colors: Optional gradient stops for the text color

    Returns:
        Node dict for graph
    """
    config = TextFillConfig(
        text=text,
        font_size=font_size,
        spacing_x=spacing_x,
        spacing_y=spacing_y,
        rotation=rotation,
        sampling=sampling,
        gradient_colors=list(gradient_colors) if gradient_colors else None,
    )
    return {
        "id": node_id,
        "type": NODE_TYPE_TEXT_FILL,
        **config.to_dict(),
    }
