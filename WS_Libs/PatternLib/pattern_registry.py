"""
Pattern Preset Registry.

Catalogue of named pattern presets. Each preset binds a generator function
from :mod:`WS_Libs.PatternLib.pattern_generators` to a category, a display
name and a set of default parameters; callers override any of those
parameters per call.

Classes:
    PatternSpec: One preset (id, category, name, defaults, generator)
    PatternRegistry: Registry of presets with category queries

Functions:
    get_default_registry: Get the global preset registry (singleton)
    register_default_patterns: Register all built-in presets
    list_patterns: List presets in a category of the default registry
    get_categories: List the known categories
    generate_pattern: Render a preset from the default registry
"""

from dataclasses import dataclass, field
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

from PIL import Image

from WS_Libs.constants import CATEGORY_ALL, PATTERN_CATEGORIES
from WS_Libs.errors import InvalidParameter
from WS_Libs.PatternLib import pattern_generators as gen
from WS_Libs.PatternLib.primitives import validate_size

logger = logging.getLogger(__name__)

GeneratorFunction = Callable[..., 'Image.Image']

CATEGORY_NAMES: Dict[str, str] = dict(PATTERN_CATEGORIES)


@dataclass(frozen=True)
class PatternSpec:
    """A named pattern preset.

    Attributes:
        pattern_id: Unique preset id (e.g. "hexagon-red")
        category: One of the PATTERN_CATEGORIES ids
        name: Display name
        generate: Generator function accepting keyword parameters
        param_defaults: Parameters passed to the generator unless overridden
        deterministic: False when repeated renders may differ
    """
    pattern_id: str
    category: str
    name: str
    generate: GeneratorFunction
    param_defaults: Dict[str, Any] = field(default_factory=dict)
    deterministic: bool = True

    def accepted_parameters(self) -> List[str]:
        return list(inspect.signature(self.generate).parameters)

    def render(self, params: Optional[Dict[str, Any]] = None) -> 'Image.Image':
        """
        Render the preset with optional parameter overrides.

        Raises:
            InvalidParameter: If an override names a parameter the generator
                does not accept, or the size is not positive
        """
        merged = dict(self.param_defaults)
        merged.update(params or {})

        accepted = self.accepted_parameters()
        unknown = sorted(name for name in merged if name not in accepted)
        if unknown:
            raise InvalidParameter(
                f"Pattern '{self.pattern_id}' does not accept: {', '.join(unknown)}"
            )

        if "width" in merged or "height" in merged:
            validate_size(merged.get("width", 1), merged.get("height", 1))

        return self.generate(**merged)

    def to_dict(self) -> Dict[str, Any]:
        """Plain description of the preset (without the generator)."""
        return {
            "id": self.pattern_id,
            "category": self.category,
            "name": self.name,
            "params": dict(self.param_defaults),
            "deterministic": self.deterministic,
        }


class PatternRegistry:
    """
    Registry of pattern presets.

    Example:
        >>> registry = PatternRegistry()
        >>> registry.register(PatternSpec("wave-red", "pattern", "Red Waves", generate_wave_pattern))
        >>> image = registry.generate("wave-red", {"wave_count": 3})
    """

    def __init__(self):
        self._patterns: Dict[str, PatternSpec] = {}

    def register(self, spec: PatternSpec) -> None:
        """
        Register a preset.

        Raises:
            ValueError: If the id is empty, the generator is not callable or
                the category is unknown
            RuntimeError: If the id is already registered
        """
        pattern_id = str(spec.pattern_id).strip()
        if not pattern_id:
            raise ValueError("pattern_id cannot be empty")
        if not callable(spec.generate):
            raise ValueError(f"generate must be callable, got {type(spec.generate)}")
        if spec.category not in CATEGORY_NAMES:
            raise ValueError(f"Unknown pattern category: {spec.category}")
        if pattern_id in self._patterns:
            raise RuntimeError(
                f"Pattern '{pattern_id}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._patterns[pattern_id] = spec
        logger.debug(f"Registered pattern: {pattern_id}")

    def unregister(self, pattern_id: str) -> bool:
        pattern_id = str(pattern_id).strip()
        if pattern_id in self._patterns:
            del self._patterns[pattern_id]
            logger.debug(f"Unregistered pattern: {pattern_id}")
            return True
        return False

    def get(self, pattern_id: str) -> PatternSpec:
        """
        Look up a preset.

        Raises:
            KeyError: If the id is not registered
        """
        pattern_id = str(pattern_id).strip()
        if pattern_id not in self._patterns:
            available = ", ".join(sorted(self._patterns))
            raise KeyError(f"Unknown pattern '{pattern_id}'. Available patterns: {available}")
        return self._patterns[pattern_id]

    def has_pattern(self, pattern_id: str) -> bool:
        return str(pattern_id).strip() in self._patterns

    def list_patterns(self, category: Optional[str] = None) -> List[PatternSpec]:
        """
        List presets in registration order.

        Args:
            category: Category id; None, "" or "all" returns every preset

        Returns:
            List of PatternSpec (empty for an unknown category)
        """
        if not category or category == CATEGORY_ALL:
            return list(self._patterns.values())
        return [spec for spec in self._patterns.values() if spec.category == category]

    def get_categories(self) -> List[Dict[str, str]]:
        """Categories as ``{"id", "name"}`` dicts, led by the "all" pseudo-category."""
        categories = [{"id": CATEGORY_ALL, "name": "All"}]
        categories.extend({"id": cat_id, "name": name} for cat_id, name in PATTERN_CATEGORIES)
        return categories

    def generate(self, pattern_id: str, params: Optional[Dict[str, Any]] = None) -> 'Image.Image':
        """Render a preset by id with optional parameter overrides."""
        return self.get(pattern_id).render(params)

    def __len__(self) -> int:
        return len(self._patterns)

    def clear(self) -> None:
        """Clear all registered presets. Use with caution."""
        self._patterns.clear()
        logger.warning("Pattern registry cleared")


# Global singleton registry
_default_registry: Optional[PatternRegistry] = None


def get_default_registry() -> PatternRegistry:
    """Get the global preset registry, creating and populating it on first call."""
    global _default_registry

    if _default_registry is None:
        _default_registry = PatternRegistry()
        register_default_patterns(_default_registry)

    return _default_registry


def register_default_patterns(registry: PatternRegistry) -> None:
    """
    Register the built-in preset catalogue.

    Args:
        registry: The registry to register presets with
    """
    presets = [
        # Stripes
        PatternSpec("racing-stripes-red", "stripes", "Racing Stripes Red", gen.generate_racing_stripes,
                    {"stripe_color": "#e31937", "stripe_width": 40, "gap": 20}),
        PatternSpec("racing-stripes-black", "stripes", "Racing Stripes Black", gen.generate_racing_stripes,
                    {"stripe_color": "#1a1a1a", "stripe_width": 50, "gap": 30}),
        PatternSpec("racing-stripes-gold", "stripes", "Racing Stripes Gold", gen.generate_racing_stripes,
                    {"stripe_color": "#f4d03f", "stripe_width": 35, "gap": 15}),
        PatternSpec("diagonal-red", "stripes", "Diagonal Red", gen.generate_diagonal_stripes,
                    {"stripe_color": "#e31937", "bg_color": "#1a1a1a"}),
        PatternSpec("diagonal-white", "stripes", "Diagonal White", gen.generate_diagonal_stripes,
                    {"stripe_color": "#ffffff", "bg_color": "#4a4a4a", "stripe_width": 15, "gap": 30}),
        PatternSpec("lightning-red", "stripes", "Lightning Red", gen.generate_lightning_pattern,
                    {"color": "#e31937", "bg_color": "#1a1a1a"}),
        PatternSpec("lightning-gold", "stripes", "Lightning Gold", gen.generate_lightning_pattern,
                    {"color": "#f4d03f", "bg_color": "#2d3436"}),
        # Gradients
        PatternSpec("gradient-sunset", "gradient", "Sunset", gen.generate_gradient_stripes,
                    {"colors": ["#e31937", "#ff6b6b", "#feca57", "#ff9f43"], "angle": 45}),
        PatternSpec("gradient-ocean", "gradient", "Ocean", gen.generate_gradient_stripes,
                    {"colors": ["#0984e3", "#74b9ff", "#81ecec", "#00cec9"], "angle": 90}),
        PatternSpec("gradient-purple", "gradient", "Purple Haze", gen.generate_gradient_stripes,
                    {"colors": ["#6c5ce7", "#a29bfe", "#fd79a8", "#e84393"], "angle": 135}),
        PatternSpec("gradient-dark", "gradient", "Dark Fade", gen.generate_gradient_stripes,
                    {"colors": ["#2d3436", "#636e72", "#b2bec3"], "angle": 0}),
        # Geometric
        PatternSpec("hexagon-red", "geometric", "Hexagon Red", gen.generate_hexagon_pattern,
                    {"stroke_color": "#e31937", "fill_color": "#1a1a1a"}),
        PatternSpec("hexagon-blue", "geometric", "Hexagon Blue", gen.generate_hexagon_pattern,
                    {"stroke_color": "#0984e3", "fill_color": "#1a1a1a"}),
        PatternSpec("hexagon-gold", "geometric", "Hexagon Gold", gen.generate_hexagon_pattern,
                    {"stroke_color": "#f4d03f", "fill_color": "#1a1a1a", "hex_size": 25}),
        PatternSpec("triangles-dark", "geometric", "Triangles Dark", gen.generate_triangle_pattern,
                    {"colors": ["#2d3436", "#636e72", "#b2bec3"]}),
        PatternSpec("triangles-colorful", "geometric", "Triangles Colorful", gen.generate_triangle_pattern,
                    {"colors": ["#e31937", "#0984e3", "#f4d03f", "#00b894"]}),
        # Textures
        PatternSpec("carbon-fiber", "texture", "Carbon Fiber", gen.generate_carbon_fiber, {}),
        PatternSpec("carbon-fiber-red", "texture", "Carbon Fiber Red", gen.generate_carbon_fiber,
                    {"color1": "#1a0a0a", "color2": "#3a1515", "highlight_color": "#5a2020"}),
        # Line patterns
        PatternSpec("wave-red", "pattern", "Red Waves", gen.generate_wave_pattern,
                    {"wave_color": "#e31937", "bg_color": "#1a1a1a"}),
        PatternSpec("wave-multi", "pattern", "Multi Waves", gen.generate_multi_wave,
                    {"colors": ["#e31937", "#0984e3", "#f4d03f"]}),
        PatternSpec("dots-radial", "pattern", "Radial Dots", gen.generate_dot_gradient,
                    {"dot_color": "#e31937", "direction": "radial"}),
        PatternSpec("dots-horizontal", "pattern", "Horizontal Dots", gen.generate_dot_gradient,
                    {"dot_color": "#0984e3", "direction": "horizontal"}),
        # Camouflage
        PatternSpec("camo-military", "camo", "Military Camo", gen.generate_camouflage,
                    {"colors": ["#4a5d23", "#6b7c3f", "#8b9a5b", "#2d3a1a"]}, deterministic=False),
        PatternSpec("camo-urban", "camo", "Urban Camo", gen.generate_camouflage,
                    {"colors": ["#2d3436", "#636e72", "#b2bec3", "#1a1a1a"]}, deterministic=False),
        PatternSpec("camo-desert", "camo", "Desert Camo", gen.generate_camouflage,
                    {"colors": ["#d4a574", "#c4956a", "#b8860b", "#8b7355"]}, deterministic=False),
        # Novelty
        PatternSpec("race-number-classic", "novelty", "Race Number", gen.generate_race_number,
                    {"number": "7"}),
        PatternSpec("race-number-black", "novelty", "Race Number Black", gen.generate_race_number,
                    {"number": "1", "disc_color": "#1a1a1a", "number_color": "#ffffff", "ring_color": "#f4d03f"}),
        PatternSpec("flames-classic", "novelty", "Classic Flames", gen.generate_flames,
                    {"colors": ["#ff4500", "#ff8c00", "#ffd700"]}),
        PatternSpec("flames-blue", "novelty", "Blue Flames", gen.generate_flames,
                    {"colors": ["#0984e3", "#74b9ff", "#ffffff"]}),
        PatternSpec("starfield-night", "novelty", "Night Sky", gen.generate_starfield, {}),
        PatternSpec("starfield-deep", "novelty", "Deep Space", gen.generate_starfield,
                    {"bg_color": "#000000", "star_count": 400, "seed": 7}),
    ]

    for spec in presets:
        registry.register(spec)

    logger.info(f"Registered {len(presets)} default pattern presets")


def list_patterns(category: Optional[str] = None) -> List[PatternSpec]:
    """List presets of the default registry, optionally limited to one category."""
    return get_default_registry().list_patterns(category)


def get_categories() -> List[Dict[str, str]]:
    return get_default_registry().get_categories()


def generate_pattern(pattern_id: str, params: Optional[Dict[str, Any]] = None) -> 'Image.Image':
    """
    Render a preset from the default registry.

    Args:
        pattern_id: Preset id (e.g. "carbon-fiber")
        params: Optional overrides of the preset parameters

    Returns:
        RGBA PIL Image

    Raises:
        KeyError: Unknown pattern id
        InvalidParameter: Unknown parameter name or non-positive size
    """
    return get_default_registry().generate(pattern_id, params)
