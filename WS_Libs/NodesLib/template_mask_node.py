"""
Template Mask Node for the Wrap Studio pipeline.

Segments a car template into the masked overlay image and the interior
mask. The template comes from the first input or from ``template_path``.

Example:
    >>> from WS_Libs.NodesLib.template_mask_node import create_template_mask_node
    >>> from WS_Libs.NodesLib.node_executors import get_default_registry
    >>>
    >>> node = create_template_mask_node("mask-1", background_color="#202020")
    >>> overlay, mask = get_default_registry().execute("Template Mask", node, [template])
"""

from typing import Any, Dict, List

from WS_Libs.constants import BRIGHTNESS_THRESHOLD, DEFAULT_BACKGROUND_COLOR, NODE_TYPE_TEMPLATE_MASK
from WS_Libs.ImageEditingLib.template_mask import TemplateMaskConfig, segment_with_config


def execute_template_mask_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute template mask node in pipeline.

    Node dict may contain:
        - 'template_path': Template file used when there is no input
        - 'background_color': Exterior color (hex)
        - 'threshold': Brightness threshold (default 200)
        - 'smooth_edges': Smooth the overlay edges (default True)
        - 'output_mask': Return (overlay, mask) instead of the overlay only

    Inputs:
        - [0]: Optional template image (PIL Image, bytes or path)

    Returns:
        (overlay RGBA image, interior mask 'L' image) or the overlay alone

    Raises:
        ValueError: If there is neither an input nor a template_path
        DecodeError: If the template cannot be decoded
    """
    source = inputs[0] if inputs else node.get("template_path")
    if source is None:
        raise ValueError("Template Mask node requires a template input or 'template_path'")

    config = TemplateMaskConfig.from_dict(node)
    try:
        result = segment_with_config(source, config)
    except (ValueError, TypeError) as e:
        raise type(e)(f"Template Mask node error: {str(e)}") from e

    if node.get("output_mask", True):
        return (result.overlay, result.mask_image())
    return result.overlay


def create_template_mask_node(
    node_id: str,
    background_color: str = DEFAULT_BACKGROUND_COLOR,
    threshold: float = BRIGHTNESS_THRESHOLD,
    smooth_edges: bool = True,
    output_mask: bool = True,
    template_path: str = "",
) -> Dict[str, Any]:
    """
    Create template mask node for graph.

    Returns:
        Node dict for graph
    """
    node = {
        "id": node_id,
        "type": NODE_TYPE_TEMPLATE_MASK,
        "background_color": background_color,
        "threshold": threshold,
        "smooth_edges": smooth_edges,
        "output_mask": output_mask,
    }
    if template_path:
        node["template_path"] = template_path
    return node
