"""
Unit tests for image_editing_ops module.

Tests decoding of photo references, display resizing, encoding and
download naming.
"""

import base64
import io

import pytest
from PIL import Image

from SA_Libs.ImageEditingLib.image_editing_ops import (
    ImageLoadError,
    annotated_filename,
    encode_image,
    get_save_kwargs,
    load_image_source,
    parse_color,
    resize_for_display,
)


def _png_bytes(size=(8, 6), color=(10, 20, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestLoadImageSource:
    """Tests for load_image_source function."""

    def test_loads_from_path(self, photo_path):
        image = load_image_source(photo_path)
        assert image.size == (800, 600)

    def test_loads_from_string_path(self, photo_path):
        image = load_image_source(str(photo_path))
        assert image.size == (800, 600)

    def test_loads_from_bytes(self):
        image = load_image_source(_png_bytes())
        assert image.size == (8, 6)

    def test_loads_from_data_uri(self):
        uri = "data:image/png;base64," + base64.b64encode(_png_bytes()).decode("ascii")
        image = load_image_source(uri)
        assert image.getpixel((0, 0)) == (10, 20, 30)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ImageLoadError):
            load_image_source(tmp_path / "missing.png")

    def test_undecodable_bytes_raise(self):
        with pytest.raises(ImageLoadError):
            load_image_source(b"definitely not an image")

    def test_bad_base64_raises(self):
        with pytest.raises(ImageLoadError):
            load_image_source("data:image/png;base64,@@@")

    def test_load_error_is_os_error(self):
        assert issubclass(ImageLoadError, OSError)


class TestResizeForDisplay:
    """Tests for resize_for_display function."""

    def test_downscales_preserving_aspect(self):
        resized = resize_for_display(Image.new("RGB", (2400, 1200)), 1200, 1200)
        assert resized.size == (1200, 600)

    def test_never_upscales(self):
        original = Image.new("RGB", (300, 200))
        resized = resize_for_display(original, 1200, 1200)
        assert resized.size == (300, 200)
        assert resized is not original

    def test_rejects_non_positive_bounds(self):
        with pytest.raises(ValueError):
            resize_for_display(Image.new("RGB", (10, 10)), 0, 10)


class TestEncoding:
    """Tests for get_save_kwargs and encode_image."""

    def test_jpg_alias_maps_to_jpeg(self):
        assert get_save_kwargs("jpg", 80) == {"format": "JPEG", "quality": 80}

    def test_quality_is_clamped(self):
        assert get_save_kwargs("JPEG", 500)["quality"] == 100

    def test_png_has_no_quality(self):
        assert get_save_kwargs("PNG") == {"format": "PNG"}

    def test_rgba_is_flattened_for_jpeg(self):
        data = encode_image(Image.new("RGBA", (4, 4), (255, 0, 0, 128)), "JPEG", 80)
        assert data.startswith(b"\xff\xd8")

    def test_rejects_non_image(self):
        with pytest.raises(TypeError):
            encode_image("image.png")


class TestAnnotatedFilename:
    def test_prefixes_and_replaces_extension(self):
        assert annotated_filename("leak.png") == "annotated-leak.jpg"

    def test_defaults_when_empty(self):
        assert annotated_filename("") == "annotated-image.jpg"

    def test_strips_directories(self):
        assert annotated_filename("uploads/2024/roof.jpeg") == "annotated-roof.jpg"


class TestParseColor:
    def test_parses_hex(self, swatch_colors):
        for hex_color, rgba in swatch_colors:
            assert parse_color(hex_color) == rgba

    def test_rejects_unknown(self):
        with pytest.raises(ValueError):
            parse_color("not-a-color")
