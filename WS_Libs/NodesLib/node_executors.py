"""
Node Executors Registry.

Central registry mapping node type names to executor functions, so a
pipeline can run any Wrap Studio operation from a plain node dict.

Classes:
    NodeExecutorRegistry: Registry for node executors

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_executors: Register all built-in node executors
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from WS_Libs.constants import (
    NODE_TYPE_BUCKET_FILL,
    NODE_TYPE_COLOR_ADJUST,
    NODE_TYPE_PATTERN,
    NODE_TYPE_TEMPLATE_MASK,
    NODE_TYPE_TEXT_FILL,
)

logger = logging.getLogger(__name__)

# Executors take (node_dict, inputs)
ExecutorFunction = Callable[[Dict[str, Any], List[Any]], Any]


class NodeExecutorRegistry:
    """
    Registry for node type executors.

    Example:
        >>> registry = NodeExecutorRegistry()
        >>> registry.register("Bucket Fill", execute_bucket_fill_node, input_count=1)
        >>> result = registry.execute("Bucket Fill", node_dict, [flattened])
    """

    def __init__(self):
        self._executors: Dict[str, ExecutorFunction] = {}
        self._node_metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        node_type: str,
        executor: ExecutorFunction,
        description: str = "",
        input_count: int = 0,
        output_count: int = 1,
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a node executor.

        Args:
            node_type: Unique identifier for the node type (e.g., "Text Fill")
            executor: Callable accepting (node_dict, inputs)
            description: Human-readable description of the node
            input_count: Expected number of inputs (0 for source nodes)
            output_count: Expected number of outputs
            tags: Optional tags for categorization (e.g., ["processing", "mask"])

        Raises:
            ValueError: If node_type is empty or executor is not callable
            RuntimeError: If node_type is already registered
        """
        node_type = str(node_type).strip()

        if not node_type:
            raise ValueError("node_type cannot be empty")

        if not callable(executor):
            raise ValueError(f"executor must be callable, got {type(executor)}")

        if node_type in self._executors:
            raise RuntimeError(
                f"Node type '{node_type}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._executors[node_type] = executor
        self._node_metadata[node_type] = {
            "description": str(description),
            "input_count": int(input_count),
            "output_count": int(output_count),
            "tags": list(tags) if tags else [],
        }

        logger.debug(f"Registered executor for node type: {node_type}")

    def unregister(self, node_type: str) -> bool:
        """
        Unregister a node executor.

        Returns:
            True if unregistered, False if node_type was not registered
        """
        node_type = str(node_type).strip()

        if node_type in self._executors:
            del self._executors[node_type]
            del self._node_metadata[node_type]
            logger.debug(f"Unregistered executor for node type: {node_type}")
            return True

        return False

    def get_executor(self, node_type: str) -> ExecutorFunction:
        """
        Get an executor for a node type.

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()

        if node_type not in self._executors:
            available = ", ".join(self.list_node_types())
            raise KeyError(
                f"No executor registered for node type '{node_type}'. "
                f"Available types: {available}"
            )

        return self._executors[node_type]

    def has_executor(self, node_type: str) -> bool:
        return str(node_type).strip() in self._executors

    def execute(self, node_type: str, node_dict: Dict[str, Any], inputs: List[Any]) -> Any:
        """
        Execute a node by looking up its executor.

        Raises:
            KeyError: If node_type is not registered
        """
        executor = self.get_executor(node_type)
        return executor(node_dict, inputs)

    def execute_node(self, node_dict: Dict[str, Any], inputs: Optional[List[Any]] = None) -> Any:
        """Execute a node dict using its own 'type' field."""
        node_type = node_dict.get("type")
        if not node_type:
            raise ValueError(f"Node {node_dict.get('id', '<unnamed>')} has no 'type'")
        return self.execute(node_type, node_dict, list(inputs or []))

    def list_node_types(self) -> List[str]:
        """Sorted list of registered node type names."""
        return sorted(self._executors.keys())

    def get_metadata(self, node_type: str) -> Dict[str, Any]:
        """
        Get metadata for a node type.

        Returns:
            Dictionary with description, input_count, output_count, tags

        Raises:
            KeyError: If node_type is not registered
        """
        node_type = str(node_type).strip()

        if node_type not in self._node_metadata:
            raise KeyError(f"No metadata for node type: {node_type}")

        return dict(self._node_metadata[node_type])

    def filter_by_tag(self, tag: str) -> List[str]:
        """Sorted node type names carrying ``tag`` (case-insensitive)."""
        tag = str(tag).strip().lower()
        return sorted(
            node_type
            for node_type, meta in self._node_metadata.items()
            if tag in [t.lower() for t in meta.get("tags", [])]
        )

    def clear(self) -> None:
        """Clear all registered executors. Use with caution."""
        self._executors.clear()
        self._node_metadata.clear()
        logger.warning("Node executor registry cleared")


# Global singleton registry
_default_registry: Optional[NodeExecutorRegistry] = None


def get_default_registry() -> NodeExecutorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers default executors.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = NodeExecutorRegistry()
        register_default_executors(_default_registry)

    return _default_registry


def register_default_executors(registry: NodeExecutorRegistry) -> None:
    """
    Register all built-in node executors.

    Args:
        registry: The registry to register executors with
    """
    from WS_Libs.NodesLib.template_mask_node import execute_template_mask_node
    from WS_Libs.NodesLib.text_fill_node import execute_text_fill_node
    from WS_Libs.NodesLib.bucket_fill_node import execute_bucket_fill_node
    from WS_Libs.NodesLib.color_adjust_node import execute_color_adjust_node
    from WS_Libs.NodesLib.pattern_node import execute_pattern_node

    registry.register(
        node_type=NODE_TYPE_TEMPLATE_MASK,
        executor=execute_template_mask_node,
        description="Segment a car template into masked overlay and interior mask",
        input_count=1,
        output_count=2,
        tags=["input", "mask", "template"],
    )

    registry.register(
        node_type=NODE_TYPE_TEXT_FILL,
        executor=execute_text_fill_node,
        description="Repeat text over the template interior",
        input_count=1,
        output_count=1,
        tags=["processing", "text", "mask"],
    )

    registry.register(
        node_type=NODE_TYPE_BUCKET_FILL,
        executor=execute_bucket_fill_node,
        description="Flood-fill a connected region within a color tolerance",
        input_count=1,
        output_count=1,
        tags=["processing", "color", "fill"],
    )

    registry.register(
        node_type=NODE_TYPE_COLOR_ADJUST,
        executor=execute_color_adjust_node,
        description="Adjust hue, saturation, brightness and contrast",
        input_count=1,
        output_count=1,
        tags=["processing", "color", "filter"],
    )

    registry.register(
        node_type=NODE_TYPE_PATTERN,
        executor=execute_pattern_node,
        description="Render a procedural pattern preset",
        input_count=0,
        output_count=1,
        tags=["input", "pattern", "source"],
    )

    logger.info("Registered default node executors")
