"""
Unit tests for image decoding.

Tests data-URI handling, RGBA conversion and the bounded resize.
"""

import base64
import io

import numpy as np
import pytest
from PIL import Image

from palette_service.config import config
from palette_service.services.extraction import extract_palette
from palette_service.services.imaging import (
    ImageDecodeError, PayloadTooLargeError, decode_data_uri, decode_image
)
from conftest import encode_image


class TestDecodeDataUri:
    """Test base64 payload handling"""

    def test_data_uri_prefix_is_stripped(self):
        payload = "data:text/plain;base64," + base64.b64encode(b"hello").decode("ascii")
        assert decode_data_uri(payload) == b"hello"

    def test_bare_base64_accepted(self):
        assert decode_data_uri(base64.b64encode(b"hello").decode("ascii")) == b"hello"

    def test_invalid_base64(self):
        with pytest.raises(ImageDecodeError):
            decode_data_uri("data:image/png;base64,not*valid*base64")

    def test_empty_payload(self):
        with pytest.raises(ImageDecodeError):
            decode_data_uri("data:image/png;base64,")

    def test_too_large(self):
        payload = base64.b64encode(b"x" * 2048).decode("ascii")
        with pytest.raises(PayloadTooLargeError):
            decode_data_uri(payload, max_file_mb=0)


class TestBoundedResize:
    """Test aspect-preserving downscale"""

    def test_landscape(self):
        pixels = np.full((200, 400, 3), 90, dtype=np.uint8)
        decoded = decode_image(encode_image(pixels))
        assert (decoded.width, decoded.height) == (100, 50)

    def test_portrait(self):
        pixels = np.full((900, 300, 3), 90, dtype=np.uint8)
        decoded = decode_image(encode_image(pixels))
        assert (decoded.width, decoded.height) == (33, 100)

    def test_small_images_untouched(self):
        pixels = np.full((20, 40, 3), 90, dtype=np.uint8)
        decoded = decode_image(encode_image(pixels))
        assert (decoded.width, decoded.height) == (40, 20)


class TestDecodeImage:
    """Test the full decoder"""

    def test_rgb_png_gets_opaque_alpha(self, two_by_two_image):
        decoded = decode_image(encode_image(two_by_two_image))
        assert (decoded.width, decoded.height) == (2, 2)
        assert decoded.pixel_count == 4
        assert len(decoded.data) == 16
        assert decoded.data[3::4] == bytes([255] * 4)

    def test_scan_order_is_row_major(self, two_by_two_image):
        decoded = decode_image(encode_image(two_by_two_image))
        assert extract_palette(decoded.data, decoded.pixel_count) == ["#FF0000", "#00FF00", "#0000FF"]

    def test_rgba_alpha_preserved(self):
        pixels = np.zeros((3, 3, 4), dtype=np.uint8)
        pixels[..., 0] = 200
        pixels[..., 3] = 17
        decoded = decode_image(encode_image(pixels))
        assert set(decoded.data[3::4]) == {17}

    def test_grayscale_expanded_to_rgba(self):
        buffer = io.BytesIO()
        Image.new("L", (5, 4), color=128).save(buffer, format="PNG")
        payload = base64.b64encode(buffer.getvalue()).decode("ascii")
        decoded = decode_image(payload)
        assert len(decoded.data) == 5 * 4 * 4
        assert extract_palette(decoded.data, decoded.pixel_count) == ["#808080"]

    def test_large_image_is_downsized(self):
        pixels = np.full((200, 400, 3), (10, 120, 220), dtype=np.uint8)
        decoded = decode_image(encode_image(pixels))
        assert (decoded.width, decoded.height) == (100, 50)
        assert len(decoded.data) == 100 * 50 * 4

    def test_default_bound_comes_from_config(self):
        pixels = np.full((300, 300, 3), 90, dtype=np.uint8)
        decoded = decode_image(encode_image(pixels))
        assert max(decoded.width, decoded.height) == config.MAX_EDGE

    def test_custom_bound(self):
        pixels = np.full((64, 64, 3), 90, dtype=np.uint8)
        decoded = decode_image(encode_image(pixels), max_edge=16)
        assert (decoded.width, decoded.height) == (16, 16)

    def test_jpeg_decodes(self):
        pixels = np.full((20, 30, 3), (250, 250, 250), dtype=np.uint8)
        decoded = decode_image(encode_image(pixels, fmt="JPEG"))
        assert (decoded.width, decoded.height) == (30, 20)

    def test_not_an_image(self):
        with pytest.raises(ImageDecodeError):
            decode_image(base64.b64encode(b"definitely not an image").decode("ascii"))

    def test_sixteen_bit_grayscale_scaled_not_clamped(self):
        buffer = io.BytesIO()
        Image.fromarray(np.full((4, 4), 32896, dtype=np.uint16)).save(buffer, format="PNG")
        payload = base64.b64encode(buffer.getvalue()).decode("ascii")

        decoded = decode_image(payload)

        assert decoded.data[:4] == bytes([128, 128, 128, 255])
        assert extract_palette(decoded.data, decoded.pixel_count) == ["#808080"]
