"""
Tests for image decoding and encoding helpers.
"""

import io

import pytest
from PIL import Image

from WS_Libs.errors import DecodeError
from WS_Libs.ImageEditingLib.image_io import (
    decode_png,
    encode_png,
    get_supported_image_formats,
    is_supported_format,
    load_image,
)


class TestLoadImage:
    def test_from_pil_image_is_copy(self, solid_canvas):
        loaded = load_image(solid_canvas)
        assert loaded is not solid_canvas
        assert loaded.getpixel((0, 0)) == (255, 0, 0, 255)

    def test_from_path_with_mode(self, tmp_path, solid_canvas):
        path = tmp_path / "red.png"
        solid_canvas.save(path)
        loaded = load_image(path, mode="RGB")
        assert loaded.mode == "RGB"
        assert loaded.size == (50, 50)

    def test_from_string_path_and_file_object(self, tmp_path, solid_canvas):
        path = tmp_path / "red.png"
        solid_canvas.save(path)
        assert load_image(str(path)).size == (50, 50)
        with open(path, "rb") as handle:
            assert load_image(handle).size == (50, 50)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError, match="not found"):
            load_image(tmp_path / "nope.png")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(DecodeError, match="Unsupported"):
            load_image(path)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"\x89PNG garbage")
        with pytest.raises(DecodeError):
            load_image(path)

    def test_decode_error_is_os_error(self):
        with pytest.raises(OSError):
            load_image(b"")

    def test_unsupported_source_type(self):
        with pytest.raises(TypeError):
            load_image(12345)


class TestPngCodec:
    def test_encode_produces_png(self, solid_canvas):
        data = encode_png(solid_canvas)
        assert data.startswith(b"\x89PNG")
        assert Image.open(io.BytesIO(data)).format == "PNG"

    def test_decode_restores_pixels(self, solid_canvas):
        decoded = decode_png(encode_png(solid_canvas))
        assert decoded.getpixel((10, 10)) == (255, 0, 0, 255)

    def test_encode_rejects_non_image(self):
        with pytest.raises(TypeError):
            encode_png("not an image")


def test_supported_formats():
    formats = get_supported_image_formats()
    assert ".png" in formats
    assert formats == sorted(formats)
    assert is_supported_format("photo.JPG")
    assert not is_supported_format("clip.mp4")
