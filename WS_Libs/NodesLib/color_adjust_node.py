"""
Color Adjust Node for the Wrap Studio pipeline.

Wraps the HSL color adjustment (hue, saturation, brightness, contrast).

Example:
    >>> node = create_color_adjust_node("adjust-1", hue=30, contrast=20)
    >>> result = get_default_registry().execute("Color Adjust", node, [layer_image])
"""

from typing import Any, Dict, List

from WS_Libs.constants import NODE_TYPE_COLOR_ADJUST
from WS_Libs.ImageEditingLib.color_adjustment import ColorAdjustments, adjust_colors


def execute_color_adjust_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute color adjust node in pipeline.

    Node dict may contain 'hue', 'saturation', 'brightness' and 'contrast'
    (missing values default to 0).

    Inputs:
        - [0]: Image to adjust (PIL Image)

    Returns:
        Adjusted RGBA PIL Image

    Raises:
        ValueError: If no input or a value is out of range
        TypeError: If input not PIL Image
    """
    if not inputs or len(inputs) < 1:
        raise ValueError("Color Adjust node requires image input")

    image = inputs[0]
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    try:
        adjustments = ColorAdjustments.from_dict(node)
        return adjust_colors(image, adjustments)
    except (ValueError, TypeError) as e:
        raise type(e)(f"Color Adjust node error: {str(e)}") from e


def create_color_adjust_node(
    node_id: str,
    hue: float = 0.0,
    saturation: float = 0.0,
    brightness: float = 0.0,
    contrast: float = 0.0,
) -> Dict[str, Any]:
    """
    Create color adjust node for graph.

    Args:
        node_id: Unique node identifier
        hue: Hue rotation in degrees (-180 to 180)
        saturation: Saturation offset (-100 to 100)
        brightness: Brightness (-100 to 100)
        contrast: Contrast (-100 to 100)

    Returns:
        Node dict for graph
    """
    return {
        "id": node_id,
        "type": NODE_TYPE_COLOR_ADJUST,
        "hue": hue,
        "saturation": saturation,
        "brightness": brightness,
        "contrast": contrast,
    }
