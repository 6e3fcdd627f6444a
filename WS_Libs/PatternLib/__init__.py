"""
PatternLib - Procedural pattern presets

Generators for stripes, gradients, tilings, textures and novelty artwork,
plus the preset registry the composition and node layers draw from.
"""

from WS_Libs.PatternLib.pattern_registry import (
    PatternRegistry,
    PatternSpec,
    generate_pattern,
    get_categories,
    get_default_registry,
    list_patterns,
)

__all__ = [
    "PatternRegistry",
    "PatternSpec",
    "generate_pattern",
    "get_categories",
    "get_default_registry",
    "list_patterns",
]
