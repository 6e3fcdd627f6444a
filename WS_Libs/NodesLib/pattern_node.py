"""
Pattern Node for the Wrap Studio pipeline.

Source node rendering a preset from the pattern registry.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from WS_Libs.constants import DEFAULT_PATTERN_HEIGHT, DEFAULT_PATTERN_WIDTH, NODE_TYPE_PATTERN
from WS_Libs.PatternLib.pattern_registry import get_default_registry


@dataclass
class PatternNodeConfig:
    """Configuration for pattern node.

    Attributes:
        pattern_id: Preset id from the pattern registry
        width: Output width
        height: Output height
        params: Overrides of the preset parameters
    """
    pattern_id: str = "carbon-fiber"
    width: int = DEFAULT_PATTERN_WIDTH
    height: int = DEFAULT_PATTERN_HEIGHT
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pattern_id": self.pattern_id,
            "width": self.width,
            "height": self.height,
            "params": dict(self.params),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatternNodeConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "params" in filtered:
            filtered["params"] = dict(filtered["params"] or {})
        return cls(**filtered)

    def render_params(self) -> Dict[str, Any]:
        merged = {"width": self.width, "height": self.height}
        merged.update(self.params)
        return merged


def execute_pattern_node(node: Dict[str, Any], inputs: List[Any]) -> Any:
    """
    Execute pattern node in pipeline.

    Source node: inputs are ignored.

    Returns:
        RGBA PIL Image

    Raises:
        KeyError: Unknown pattern id
        ValueError: Unknown parameter or invalid size
    """
    config = PatternNodeConfig.from_dict(node)
    try:
        return get_default_registry().generate(config.pattern_id, config.render_params())
    except (ValueError, TypeError) as e:
        raise type(e)(f"Pattern node error: {str(e)}") from e


def create_pattern_node(
    node_id: str,
    pattern_id: str,
    width: int = DEFAULT_PATTERN_WIDTH,
    height: int = DEFAULT_PATTERN_HEIGHT,
    params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Create pattern node for graph.

    Returns:
        Node dict for graph
    """
    config = PatternNodeConfig(pattern_id=pattern_id, width=width, height=height, params=dict(params or {}))
    return {
        "id": node_id,
        "type": NODE_TYPE_PATTERN,
        **config.to_dict(),
    }
