"""
Wrap Studio Nodes Library.

Node executors exposing each raster operation to a node pipeline.

Modules:
    template_mask_node: Template segmentation (overlay + interior mask)
    text_fill_node: Mask-constrained repeating text
    bucket_fill_node: Tolerance flood fill
    color_adjust_node: HSL color adjustment
    pattern_node: Procedural pattern presets
    node_executors: Registry mapping node types to executors
"""

from WS_Libs.NodesLib.template_mask_node import (
    execute_template_mask_node,
    create_template_mask_node,
)
from WS_Libs.NodesLib.text_fill_node import (
    execute_text_fill_node,
    create_text_fill_node,
)
from WS_Libs.NodesLib.bucket_fill_node import (
    execute_bucket_fill_node,
    create_bucket_fill_node,
)
from WS_Libs.NodesLib.color_adjust_node import (
    execute_color_adjust_node,
    create_color_adjust_node,
)
from WS_Libs.NodesLib.pattern_node import (
    PatternNodeConfig,
    execute_pattern_node,
    create_pattern_node,
)
from WS_Libs.NodesLib.node_executors import (
    NodeExecutorRegistry,
    get_default_registry,
    register_default_executors,
)

__all__ = [
    "execute_template_mask_node",
    "create_template_mask_node",
    "execute_text_fill_node",
    "create_text_fill_node",
    "execute_bucket_fill_node",
    "create_bucket_fill_node",
    "execute_color_adjust_node",
    "create_color_adjust_node",
    "PatternNodeConfig",
    "execute_pattern_node",
    "create_pattern_node",
    "NodeExecutorRegistry",
    "get_default_registry",
    "register_default_executors",
]
