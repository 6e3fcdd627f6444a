"""
Tests for the node executor registry and the built-in pipeline nodes.

Tests cover:
- Registry registration, lookup and error handling
- Metadata and tag filtering
- Default registry contents (singleton)
- Each built-in node run through the registry
- Chaining Template Mask into Text Fill
"""

import unittest

import numpy as np
import pytest
from PIL import Image

from WS_Libs.errors import InvalidParameter
from WS_Libs.NodesLib import (
    NodeExecutorRegistry,
    create_bucket_fill_node,
    create_color_adjust_node,
    create_pattern_node,
    create_template_mask_node,
    create_text_fill_node,
    get_default_registry,
    register_default_executors,
)
from WS_Libs.NodesLib.pattern_node import PatternNodeConfig


class TestNodeExecutorRegistry(unittest.TestCase):
    def setUp(self):
        self.registry = NodeExecutorRegistry()

    def test_register_and_execute(self):
        self.registry.register("Echo", lambda node, inputs: (node["value"], inputs))
        result = self.registry.execute("Echo", {"value": 3}, ["a"])
        self.assertEqual(result, (3, ["a"]))

    def test_register_metadata(self):
        self.registry.register(
            "Echo", lambda node, inputs: None,
            description="Echo node", input_count=2, output_count=1, tags=["Test"],
        )
        meta = self.registry.get_metadata("Echo")
        self.assertEqual(meta["description"], "Echo node")
        self.assertEqual(meta["input_count"], 2)
        self.assertEqual(meta["tags"], ["Test"])

    def test_invalid_registrations(self):
        with self.assertRaises(ValueError):
            self.registry.register("  ", lambda node, inputs: None)
        with self.assertRaises(ValueError):
            self.registry.register("Broken", "not callable")

        self.registry.register("Echo", lambda node, inputs: None)
        with self.assertRaises(RuntimeError):
            self.registry.register("Echo", lambda node, inputs: None)

    def test_unknown_type(self):
        self.registry.register("Echo", lambda node, inputs: None)
        with self.assertRaises(KeyError) as context:
            self.registry.get_executor("Missing")
        self.assertIn("Echo", str(context.exception))
        with self.assertRaises(KeyError):
            self.registry.get_metadata("Missing")

    def test_unregister(self):
        self.registry.register("Echo", lambda node, inputs: None)
        self.assertTrue(self.registry.unregister("Echo"))
        self.assertFalse(self.registry.unregister("Echo"))
        self.assertFalse(self.registry.has_executor("Echo"))

    def test_execute_node_uses_type_field(self):
        self.registry.register("Echo", lambda node, inputs: node["id"])
        self.assertEqual(self.registry.execute_node({"id": "n1", "type": "Echo"}), "n1")
        with self.assertRaises(ValueError):
            self.registry.execute_node({"id": "n2"})

    def test_filter_by_tag(self):
        self.registry.register("A", lambda node, inputs: None, tags=["Color"])
        self.registry.register("B", lambda node, inputs: None, tags=["mask"])
        self.assertEqual(self.registry.filter_by_tag("color"), ["A"])
        self.assertEqual(self.registry.filter_by_tag("none"), [])

    def test_list_sorted_and_clear(self):
        for name in ("Zeta", "Alpha", "Mid"):
            self.registry.register(name, lambda node, inputs: None)
        self.assertEqual(self.registry.list_node_types(), ["Alpha", "Mid", "Zeta"])
        self.registry.clear()
        self.assertEqual(self.registry.list_node_types(), [])


class TestDefaultRegistry(unittest.TestCase):
    def test_singleton(self):
        self.assertIs(get_default_registry(), get_default_registry())

    def test_built_in_types(self):
        registry = NodeExecutorRegistry()
        register_default_executors(registry)
        self.assertEqual(
            registry.list_node_types(),
            ["Bucket Fill", "Color Adjust", "Pattern", "Template Mask", "Text Fill"],
        )
        self.assertEqual(registry.get_metadata("Pattern")["input_count"], 0)
        self.assertEqual(registry.get_metadata("Template Mask")["output_count"], 2)
        self.assertIn("Color Adjust", registry.filter_by_tag("color"))


class TestTemplateMaskNode:
    def test_outputs_overlay_and_mask(self, square_template):
        node = create_template_mask_node("mask-1")
        overlay, mask = get_default_registry().execute_node(node, [square_template])
        assert overlay.mode == "RGBA"
        assert mask.mode == "L"
        assert mask.getpixel((50, 50)) == 255
        assert mask.getpixel((5, 5)) == 0

    def test_overlay_only(self, square_template):
        node = create_template_mask_node("mask-1", output_mask=False)
        overlay = get_default_registry().execute_node(node, [square_template])
        assert overlay.size == (100, 100)

    def test_template_path(self, tmp_path, square_template):
        path = tmp_path / "template.png"
        square_template.save(path)
        node = create_template_mask_node("mask-1", template_path=str(path))
        overlay, _mask = get_default_registry().execute_node(node, [])
        assert overlay.size == (100, 100)

    def test_requires_source(self):
        with pytest.raises(ValueError):
            get_default_registry().execute_node(create_template_mask_node("mask-1"), [])


class TestTextFillNode:
    def test_chained_after_template_mask(self, square_template):
        registry = get_default_registry()
        segmented = registry.execute_node(create_template_mask_node("mask-1"), [square_template])
        node = create_text_fill_node("text-1", "A", font_size=10, spacing_x=20, spacing_y=20, rotation=0)

        pattern = registry.execute_node(node, [segmented])

        assert pattern.size == (100, 100)
        alpha = np.array(pattern.getchannel("A"))
        assert alpha.any()
        assert not alpha[:15, :].any()

    def test_array_mask(self, full_mask):
        node = create_text_fill_node("text-1", "WRAP", font_size=20, spacing_x=50, spacing_y=50)
        pattern = get_default_registry().execute_node(node, [full_mask])
        assert pattern.size == (200, 200)

    def test_node_dict_round_trip(self):
        node = create_text_fill_node("text-1", "A", gradient_colors=("#ff0000", "#0000ff"))
        assert node["type"] == "Text Fill"
        assert node["gradient_colors"] == ["#ff0000", "#0000ff"]

    def test_errors_are_prefixed(self, full_mask):
        node = create_text_fill_node("text-1", "A", spacing_x=0)
        with pytest.raises(InvalidParameter, match="Text Fill node error"):
            get_default_registry().execute_node(node, [full_mask])

    def test_requires_input(self):
        with pytest.raises(ValueError):
            get_default_registry().execute_node(create_text_fill_node("text-1", "A"), [])

    def test_rejects_non_mask(self):
        with pytest.raises(TypeError):
            get_default_registry().execute_node(create_text_fill_node("text-1", "A"), [np.zeros((3, 3, 3))])


class TestBucketFillNode:
    def test_fill(self, split_canvas):
        node = create_bucket_fill_node("fill-1", 5, 5, fill_color=(0, 255, 0), tolerance=10)
        result = get_default_registry().execute_node(node, [split_canvas])
        assert result.getpixel((0, 0)) == (0, 255, 0, 255)
        assert result.getpixel((45, 10)) == (0, 0, 255, 255)

    def test_invalid_tolerance(self, split_canvas):
        node = create_bucket_fill_node("fill-1", 5, 5, tolerance=300)
        with pytest.raises(InvalidParameter, match="Bucket Fill node error"):
            get_default_registry().execute_node(node, [split_canvas])

    def test_requires_image(self):
        node = create_bucket_fill_node("fill-1", 0, 0)
        with pytest.raises(ValueError):
            get_default_registry().execute_node(node, [])
        with pytest.raises(TypeError):
            get_default_registry().execute_node(node, ["image.png"])


class TestColorAdjustNode:
    def test_hue_shift(self):
        node = create_color_adjust_node("adjust-1", hue=120)
        result = get_default_registry().execute_node(node, [Image.new("RGBA", (2, 2), (255, 0, 0, 255))])
        assert result.getpixel((0, 0)) == (0, 255, 0, 255)

    def test_out_of_range(self, solid_canvas):
        node = create_color_adjust_node("adjust-1", saturation=150)
        with pytest.raises(InvalidParameter, match="Color Adjust node error"):
            get_default_registry().execute_node(node, [solid_canvas])


class TestPatternNode:
    def test_renders_preset(self):
        node = create_pattern_node("pattern-1", "hexagon-red", width=64, height=48)
        image = get_default_registry().execute_node(node, [])
        assert image.size == (64, 48)
        assert image.mode == "RGBA"

    def test_params_override(self):
        node = create_pattern_node("pattern-1", "carbon-fiber", width=20, height=20, params={"cell_size": 5})
        assert node["params"] == {"cell_size": 5}
        image = get_default_registry().execute_node(node, [])
        assert image.getpixel((7, 2)) != image.getpixel((2, 2))

    def test_unknown_pattern(self):
        with pytest.raises(KeyError):
            get_default_registry().execute_node(create_pattern_node("pattern-1", "nope"), [])

    def test_unknown_param(self):
        node = create_pattern_node("pattern-1", "carbon-fiber", params={"colour": "red"})
        with pytest.raises(InvalidParameter, match="Pattern node error"):
            get_default_registry().execute_node(node, [])

    def test_config_from_dict(self):
        config = PatternNodeConfig.from_dict({"id": "p", "type": "Pattern", "pattern_id": "wave-red"})
        assert config.pattern_id == "wave-red"
        assert config.render_params() == {"width": 800, "height": 600}
