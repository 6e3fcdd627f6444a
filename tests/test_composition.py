"""
Tests for the composition controller and layer model.

Tests cover:
- Template loading and the overlay layer invariant
- Layer add/remove/clear/reorder/update
- Image import fitting
- Text fill, bucket fill, pattern and color adjustment layers
- Flatten, export and interior clipping
- Snapshots and undo/redo
"""

import io

import pytest
from PIL import Image

from WS_Libs.CompositionLib.composition import Composition
from WS_Libs.CompositionLib.history import HistoryStack
from WS_Libs.CompositionLib.layer import Layer
from WS_Libs.errors import DecodeError, InvalidParameter
from WS_Libs.ImageEditingLib.color_adjustment import ColorAdjustments
from WS_Libs.ImageEditingLib.text_fill import TextFillConfig


@pytest.fixture
def composition(square_template):
    comp = Composition(history=HistoryStack())
    comp.load_template(square_template)
    return comp


def _assert_overlay_on_top(comp):
    assert comp.layers[-1] is comp.overlay_layer


class TestTemplate:
    def test_canvas_takes_template_size(self, composition):
        assert composition.size == (100, 100)
        assert composition.overlay_layer is not None
        assert not composition.overlay_layer.interactive
        assert composition.interior_mask[50, 50] == 255

    def test_reload_replaces_overlay_and_text_fill(self, composition, square_template):
        first_overlay = composition.overlay_layer.layer_id
        composition.apply_text_fill(TextFillConfig(text="A", font_size=10, spacing_x=20, spacing_y=20))
        composition.add_layer(Image.new("RGBA", (10, 10), (255, 0, 0, 255)))

        composition.load_template(square_template)

        assert composition.overlay_layer.layer_id != first_overlay
        assert composition.text_fill_layer is None
        assert len(composition.user_layers()) == 1
        _assert_overlay_on_top(composition)

    def test_bad_template_keeps_state(self, composition):
        overlay = composition.overlay_layer
        with pytest.raises(DecodeError):
            composition.load_template(b"not an image")
        assert composition.overlay_layer is overlay


class TestLayers:
    def test_added_layers_stay_below_overlay(self, composition):
        first = composition.add_layer(Image.new("RGBA", (5, 5)))
        second = composition.add_layer(Image.new("RGBA", (5, 5)))
        assert composition.user_layers() == [first, second]
        _assert_overlay_on_top(composition)

    def test_bring_to_front(self, composition):
        first = composition.add_layer(Image.new("RGBA", (5, 5)))
        second = composition.add_layer(Image.new("RGBA", (5, 5)))
        composition.bring_to_front(first.layer_id)
        assert composition.user_layers() == [second, first]
        _assert_overlay_on_top(composition)

    def test_overlay_is_protected(self, composition):
        overlay_id = composition.overlay_layer.layer_id
        with pytest.raises(InvalidParameter):
            composition.remove_layer(overlay_id)
        with pytest.raises(InvalidParameter):
            composition.update_layer(overlay_id, x=10)
        with pytest.raises(InvalidParameter):
            composition.bring_to_front(overlay_id)

    def test_remove_and_clear(self, composition):
        layer = composition.add_layer(Image.new("RGBA", (5, 5)))
        composition.add_layer(Image.new("RGBA", (5, 5)))
        composition.remove_layer(layer.layer_id)
        assert len(composition.user_layers()) == 1

        composition.clear_layers()
        assert composition.user_layers() == []
        assert composition.overlay_layer is not None

    def test_unknown_layer(self, composition):
        with pytest.raises(KeyError):
            composition.get_layer("image-999")

    def test_update_layer(self, composition):
        layer = composition.add_layer(Image.new("RGBA", (5, 5)))
        composition.update_layer(layer.layer_id, rotation=30, scale_x=2.0, opacity=0.5)
        assert (layer.rotation, layer.scale_x, layer.opacity) == (30, 2.0, 0.5)

    def test_update_layer_rejects_bad_values(self, composition):
        layer = composition.add_layer(Image.new("RGBA", (5, 5)))
        with pytest.raises(InvalidParameter):
            composition.update_layer(layer.layer_id, opacity=1.5)
        assert layer.opacity == 1.0
        with pytest.raises(InvalidParameter):
            composition.update_layer(layer.layer_id, image=None)

    def test_import_fits_sixty_percent(self, composition):
        big = Image.new("RGB", (400, 200), (0, 255, 0))
        layer = composition.add_image_layer(big)
        assert layer.scale_x == pytest.approx(60 / 400)
        assert (layer.x, layer.y) == (50.0, 50.0)
        assert layer.origin == "center"

    def test_import_never_upscales(self, composition):
        layer = composition.add_image_layer(Image.new("RGB", (10, 10)))
        assert layer.scale_x == 1.0


class TestFlatten:
    def test_background_and_overlay(self, composition):
        flat = composition.flatten()
        assert flat.getpixel((5, 5)) == (26, 26, 26, 255)
        assert flat.getpixel((50, 50)) == (26, 26, 26, 255)

    def test_user_content_shows_only_inside(self, composition):
        composition.add_layer(Image.new("RGBA", (100, 100), (255, 0, 0, 255)))
        flat = composition.flatten()
        assert flat.getpixel((50, 50)) == (255, 0, 0, 255)
        assert flat.getpixel((5, 5)) == (26, 26, 26, 255)

    def test_center_origin_placement(self):
        comp = Composition(width=20, height=20)
        comp.add_layer(Image.new("RGBA", (4, 4), (0, 0, 255, 255)), x=10, y=10, origin="center")
        flat = comp.flatten(include_background=False)
        assert flat.getpixel((8, 8)) == (0, 0, 255, 255)
        assert flat.getpixel((11, 11)) == (0, 0, 255, 255)
        assert flat.getpixel((12, 12))[3] == 0

    def test_scale_and_opacity(self):
        comp = Composition(width=20, height=20)
        comp.add_layer(
            Image.new("RGBA", (2, 2), (255, 255, 255, 255)),
            x=0, y=0, scale_x=5, scale_y=2, opacity=0.5,
        )
        flat = comp.flatten(include_background=False)
        assert flat.getpixel((9, 3))[3] == 128
        assert flat.getpixel((11, 1))[3] == 0
        assert flat.getpixel((1, 5))[3] == 0

    def test_rotation_about_center(self):
        comp = Composition(width=40, height=40)
        comp.add_layer(
            Image.new("RGBA", (20, 2), (255, 255, 255, 255)),
            x=20, y=20, origin="center", rotation=90,
        )
        flat = comp.flatten(include_background=False)
        assert flat.getpixel((20, 12))[3] > 200
        assert flat.getpixel((12, 20))[3] == 0

    def test_hidden_layer_skipped(self):
        comp = Composition(width=10, height=10)
        layer = comp.add_layer(Image.new("RGBA", (10, 10), (0, 255, 0, 255)))
        comp.update_layer(layer.layer_id, visible=False)
        assert comp.flatten(include_background=False).getchannel("A").getbbox() is None


class TestGeneratedLayers:
    def test_text_fill_single_layer(self, composition):
        config = TextFillConfig(text="W", font_size=12, spacing_x=20, spacing_y=20, rotation=0)
        first = composition.apply_text_fill(config)
        second = composition.apply_text_fill(config)

        assert first.layer_id != second.layer_id
        assert [layer.kind for layer in composition.user_layers()] == ["text_fill"]
        assert not second.interactive
        assert second.params["text"] == "W"
        _assert_overlay_on_top(composition)

    def test_empty_text_removes_fill(self, composition):
        composition.apply_text_fill(TextFillConfig(text="W", font_size=12, spacing_x=20, spacing_y=20))
        assert composition.apply_text_fill(TextFillConfig(text="")) is None
        assert composition.text_fill_layer is None

    def test_text_fill_requires_template(self):
        with pytest.raises(RuntimeError):
            Composition().apply_text_fill(TextFillConfig(text="W"))

    def test_bucket_fill_adds_top_layer(self):
        comp = Composition(width=20, height=20)
        comp.add_layer(Image.new("RGBA", (20, 20), (255, 255, 255, 255)))
        layer = comp.apply_bucket_fill(3, 3, "#00ff00", tolerance=10)

        assert layer is comp.user_layers()[-1]
        assert layer.kind == "bucket_fill"
        assert layer.image.getpixel((19, 19)) == (0, 255, 0, 255)

    def test_bucket_fill_noop_adds_nothing(self):
        comp = Composition(width=20, height=20)
        comp.add_layer(Image.new("RGBA", (20, 20), (0, 255, 0, 255)))
        assert comp.apply_bucket_fill(3, 3, (0, 255, 0)) is None
        assert comp.apply_bucket_fill(50, 3, (255, 0, 0)) is None
        assert len(comp.user_layers()) == 1

    def test_bucket_fill_stays_inside_outline(self, composition):
        layer = composition.apply_bucket_fill(50, 50, (255, 0, 0), tolerance=0)

        assert layer is not None
        assert layer.image.getpixel((50, 50)) == (255, 0, 0, 255)
        assert layer.image.getpixel((5, 5)) == (26, 26, 26, 255)
        flat = composition.flatten()
        assert flat.getpixel((50, 50)) == (255, 0, 0, 255)
        assert flat.getpixel((5, 5)) == (26, 26, 26, 255)

    def test_bucket_fill_on_empty_canvas_sees_background(self):
        comp = Composition(width=20, height=20)
        layer = comp.apply_bucket_fill(5, 5, "#000000")

        assert layer is not None
        assert layer.image.getpixel((19, 19)) == (0, 0, 0, 255)

    def test_bucket_fill_rejects_bad_color(self):
        comp = Composition(width=20, height=20)
        with pytest.raises(InvalidParameter):
            comp.apply_bucket_fill(5, 5, (300, 0, 0))
        assert comp.user_layers() == []

    def test_failed_text_fill_keeps_previous_layer(self, composition):
        good = composition.apply_text_fill(TextFillConfig(text="W", font_size=12, spacing_x=20, spacing_y=20))

        with pytest.raises(InvalidParameter):
            composition.apply_text_fill(TextFillConfig(text="W", font_size=12, spacing_x=0, spacing_y=20))

        assert composition.text_fill_layer is good
        assert [layer.kind for layer in composition.user_layers()] == ["text_fill"]
        assert composition.history.current()["text_fill_id"] == good.layer_id

    def test_pattern_layer_uses_canvas_size(self, composition):
        layer = composition.add_pattern_layer("carbon-fiber")
        assert layer.size == (100, 100)
        assert layer.params["pattern_id"] == "carbon-fiber"
        with pytest.raises(KeyError):
            composition.add_pattern_layer("nope")

    def test_color_adjustments_not_cumulative(self, composition):
        layer = composition.add_layer(Image.new("RGBA", (4, 4), (255, 0, 0, 255)))
        composition.adjust_layer_colors(layer.layer_id, ColorAdjustments(hue=60))
        composition.adjust_layer_colors(layer.layer_id, ColorAdjustments(hue=120))
        assert layer.image.getpixel((0, 0)) == (0, 255, 0, 255)
        assert layer.adjustments["hue"] == 120

        composition.reset_layer_colors(layer.layer_id)
        assert layer.image.getpixel((0, 0)) == (255, 0, 0, 255)
        assert layer.source_image is None


class TestExport:
    def test_multiplier_doubles_size(self, composition):
        assert composition.export_image(multiplier=2).size == (200, 200)

    def test_clip_to_interior(self, composition):
        composition.add_layer(Image.new("RGBA", (100, 100), (255, 0, 0, 255)))
        image = composition.export_image(clip_to_interior=True)
        assert image.getpixel((50, 50)) == (255, 0, 0, 255)
        assert image.getpixel((5, 5))[3] == 0
        assert image.getpixel((21, 50))[3] == 0

    def test_clip_with_multiplier(self, composition):
        image = composition.export_image(clip_to_interior=True, multiplier=2)
        assert image.getpixel((10, 10))[3] == 0
        assert image.getpixel((100, 100))[3] == 255

    @pytest.mark.parametrize("multiplier", [0, 9, 1.5])
    def test_invalid_multiplier(self, composition, multiplier):
        with pytest.raises(InvalidParameter):
            composition.export_image(multiplier=multiplier)

    def test_export_png(self, composition):
        data = composition.export_png()
        assert Image.open(io.BytesIO(data)).size == (100, 100)

    def test_export_filename(self):
        assert Composition.export_filename(123) == "wrap-design-123.png"


class TestSnapshots:
    def test_snapshot_is_plain_data(self, composition):
        composition.add_pattern_layer("wave-red")
        snapshot = composition.snapshot()
        assert isinstance(snapshot["layers"][0]["image"], str)
        assert isinstance(snapshot["interior_mask"], str)

    def test_restore_round_trip(self, composition):
        composition.add_layer(Image.new("RGBA", (100, 100), (255, 0, 0, 255)))
        before = composition.flatten().tobytes()
        snapshot = composition.snapshot()

        other = Composition()
        other.restore(snapshot)

        assert other.size == (100, 100)
        assert other.flatten().tobytes() == before
        assert other.interior_mask[50, 50] == 255
        assert not other.interior_mask.flags.writeable

    def test_undo_redo(self, composition):
        layer = composition.add_layer(Image.new("RGBA", (5, 5)))
        composition.remove_layer(layer.layer_id)
        assert composition.user_layers() == []

        assert composition.undo()
        assert [l.layer_id for l in composition.user_layers()] == [layer.layer_id]
        assert composition.undo()
        assert composition.user_layers() == []
        assert composition.redo()
        assert len(composition.user_layers()) == 1

    def test_undo_without_history(self):
        assert not Composition().undo()


class TestLayerModel:
    def test_layer_round_trip(self):
        layer = Layer(
            layer_id="image-1",
            image=Image.new("RGB", (3, 2), (1, 2, 3)),
            x=4, y=5, rotation=10, params={"k": "v"},
        )
        restored = Layer.from_dict(layer.to_dict())
        assert restored.image.mode == "RGBA"
        assert restored.image.getpixel((0, 0)) == (1, 2, 3, 255)
        assert (restored.x, restored.y, restored.rotation) == (4, 5, 10)
        assert restored.params == {"k": "v"}

    def test_invalid_layer(self):
        with pytest.raises(TypeError):
            Layer(layer_id="x", image="nope")
        with pytest.raises(InvalidParameter):
            Layer(layer_id="x", image=Image.new("RGBA", (1, 1)), origin="middle")
        with pytest.raises(InvalidParameter):
            Layer(layer_id="x", image=Image.new("RGBA", (1, 1)), scale_x=0)
