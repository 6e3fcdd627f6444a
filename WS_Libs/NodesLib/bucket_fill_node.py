"""
Bucket Fill Node for the Wrap Studio pipeline.

Flood-fills the connected region around a point of the input image.
"""

from typing import Any, Dict, List

from WS_Libs.constants import DEFAULT_FILL_TOLERANCE, NODE_TYPE_BUCKET_FILL
from WS_Libs.ImageEditingLib.bucket_fill import BucketFillConfig, flood_fill_with_config
from WS_Libs.ImageEditingLib.image_models import RgbColor


def execute_bucket_fill_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute bucket fill node in pipeline.

    Node dict should contain:
        - 'x', 'y': Click position
        - 'fill_color_r', 'fill_color_g', 'fill_color_b': Fill color
        - 'tolerance': Per-channel tolerance (0-255)

    Inputs:
        - [0]: Flattened image (PIL Image)

    Returns:
        Filled RGBA PIL Image

    Raises:
        ValueError: If no input or tolerance out of range
        TypeError: If input not PIL Image
    """
    if not inputs or len(inputs) < 1:
        raise ValueError("Bucket Fill node requires image input")

    image = inputs[0]
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    try:
        config = BucketFillConfig.from_dict(node)
        return flood_fill_with_config(image, config)
    except (ValueError, TypeError) as e:
        raise type(e)(f"Bucket Fill node error: {str(e)}") from e


def create_bucket_fill_node(
    node_id: str,
    x: int,
    y: int,
    fill_color: RgbColor = (0, 0, 0),
    tolerance: int = DEFAULT_FILL_TOLERANCE,
) -> Dict[str, Any]:
    """
    Create bucket fill node for graph.

    Returns:
        Node dict for graph
    """
    return {
        "id": node_id,
        "type": NODE_TYPE_BUCKET_FILL,
        "x": int(x),
        "y": int(y),
        "fill_color_r": int(fill_color[0]),
        "fill_color_g": int(fill_color[1]),
        "fill_color_b": int(fill_color[2]),
        "tolerance": int(tolerance),
    }
