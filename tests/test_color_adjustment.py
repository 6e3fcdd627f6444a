"""
Tests for HSL color adjustment.

Tests cover:
- Identity adjustments
- Hue rotation and wrap-around
- Saturation and brightness clamping
- Contrast curve
- Transparent pixels and alpha preservation
- Parameter ranges
"""

import unittest

import numpy as np
import pytest
from PIL import Image

from WS_Libs.errors import CancelToken, InvalidParameter, OperationCancelled
from WS_Libs.ImageEditingLib.color_adjustment import (
    ColorAdjustmentFilter,
    ColorAdjustments,
    adjust_colors,
    contrast_factor,
)


def _random_image(seed=1, size=(32, 24)):
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(size[1], size[0], 4), dtype=np.uint8)
    pixels[:, :, 3] = 255
    return Image.fromarray(pixels)


class TestIdentity(unittest.TestCase):
    def test_identity_within_one(self):
        image = _random_image()
        result = adjust_colors(image, ColorAdjustments())
        diff = np.abs(np.array(result, dtype=np.int16) - np.array(image, dtype=np.int16))
        self.assertLessEqual(int(diff.max()), 1)

    def test_is_identity(self):
        self.assertTrue(ColorAdjustments().is_identity)
        self.assertFalse(ColorAdjustments(contrast=5).is_identity)


class TestHue(unittest.TestCase):
    def test_red_to_green(self):
        image = Image.new("RGBA", (2, 2), (255, 0, 0, 255))
        result = adjust_colors(image, hue=120)
        self.assertEqual(result.getpixel((0, 0)), (0, 255, 0, 255))

    def test_negative_hue_wraps(self):
        image = Image.new("RGBA", (1, 1), (255, 0, 0, 255))
        result = adjust_colors(image, hue=-120)
        self.assertEqual(result.getpixel((0, 0)), (0, 0, 255, 255))

    def test_full_turn_equals_identity(self):
        image = _random_image(seed=5)
        a = np.array(adjust_colors(image, hue=180), dtype=np.int16)
        b = np.array(adjust_colors(image, hue=-180), dtype=np.int16)
        self.assertLessEqual(int(np.abs(a - b).max()), 1)


class TestSaturationBrightness(unittest.TestCase):
    def test_full_desaturation_gives_grey(self):
        result = np.array(adjust_colors(_random_image(), saturation=-100))
        self.assertTrue((result[:, :, 0] == result[:, :, 1]).all())
        self.assertTrue((result[:, :, 1] == result[:, :, 2]).all())

    def test_max_brightness_on_mid_grey_is_white(self):
        image = Image.new("RGBA", (1, 1), (128, 128, 128, 255))
        # L = 50.2 + 50 clamps to 100
        result = adjust_colors(image, brightness=100)
        self.assertEqual(result.getpixel((0, 0)), (255, 255, 255, 255))

    def test_min_brightness_on_mid_grey_is_black(self):
        image = Image.new("RGBA", (1, 1), (127, 127, 127, 255))
        result = adjust_colors(image, brightness=-100)
        self.assertEqual(result.getpixel((0, 0)), (0, 0, 0, 255))


class TestContrast(unittest.TestCase):
    def test_factor(self):
        self.assertAlmostEqual(contrast_factor(0), 1.0)
        self.assertGreater(contrast_factor(50), 1.0)
        self.assertLess(contrast_factor(-50), 1.0)

    def test_output_stays_in_range(self):
        image = _random_image(seed=9)
        for contrast in (-100, 100):
            result = np.array(adjust_colors(image, contrast=contrast))
            self.assertEqual(result.dtype, np.uint8)

    def test_contrast_pushes_away_from_pivot(self):
        image = Image.new("RGBA", (1, 1), (200, 200, 200, 255))
        result = adjust_colors(image, contrast=50)
        self.assertGreater(result.getpixel((0, 0))[0], 200)

    def test_negative_contrast_pulls_toward_pivot(self):
        image = Image.new("RGBA", (1, 1), (40, 40, 40, 255))
        result = adjust_colors(image, contrast=-50)
        self.assertGreater(result.getpixel((0, 0))[0], 40)


class TestAlpha:
    def test_transparent_pixels_untouched(self):
        image = Image.new("RGBA", (2, 1), (255, 0, 0, 255))
        image.putpixel((1, 0), (255, 0, 0, 0))
        result = adjust_colors(image, hue=120)
        assert result.getpixel((0, 0)) == (0, 255, 0, 255)
        assert result.getpixel((1, 0)) == (255, 0, 0, 0)

    def test_partial_alpha_preserved(self):
        image = Image.new("RGBA", (1, 1), (255, 0, 0, 90))
        result = adjust_colors(image, hue=120)
        assert result.getpixel((0, 0))[3] == 90

    def test_rgb_input_converted(self):
        image = Image.new("RGB", (3, 3), (10, 20, 30))
        assert adjust_colors(image, brightness=10).mode == "RGBA"


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [{"hue": 181}, {"hue": -181}, {"saturation": 101}, {"brightness": -101}, {"contrast": 100.5}],
    )
    def test_out_of_range(self, kwargs):
        with pytest.raises(InvalidParameter):
            ColorAdjustments(**kwargs)

    def test_record_and_kwargs_conflict(self, solid_canvas):
        with pytest.raises(TypeError):
            adjust_colors(solid_canvas, ColorAdjustments(), hue=10)

    def test_rejects_non_image(self):
        with pytest.raises(TypeError):
            ColorAdjustmentFilter(ColorAdjustments()).apply_to_image("image.png")

    def test_from_dict(self):
        adjustments = ColorAdjustments.from_dict({"hue": "15", "contrast": 4, "id": "n1"})
        assert adjustments == ColorAdjustments(hue=15.0, contrast=4.0)

    def test_cancellation(self, solid_canvas):
        token = CancelToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            adjust_colors(solid_canvas, ColorAdjustments(hue=10), cancel_token=token)
