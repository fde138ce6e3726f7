"""
Palette Service Imaging Utilities
Handles data-URI decoding, image opening, and the bounded RGBA raster fed to extraction.
"""
import base64
import binascii
import io
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from palette_service.config import config

WIDE_GRAY_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


class ImageDecodeError(ValueError):
    """Raised when an encoded image cannot be turned into pixel data."""


class PayloadTooLargeError(ImageDecodeError):
    """Raised when the decoded image exceeds the configured size limit."""


@dataclass(frozen=True)
class DecodedImage:
    """Raw RGBA raster produced by the decoder."""
    width: int
    height: int
    data: bytes

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


def decode_data_uri(payload: str, max_file_mb: Optional[int] = None) -> bytes:
    """
    Decode a data-URI (or bare base64 string) into raw file bytes.

    Only the content after the first comma is decoded, so both
    ``data:image/png;base64,....`` and a plain base64 string are accepted.

    Args:
        payload: Encoded image string
        max_file_mb: Size limit for the decoded bytes (default from config)

    Returns:
        Decoded file bytes

    Raises:
        ImageDecodeError: For empty or invalid base64 payloads
        PayloadTooLargeError: When the decoded bytes exceed the limit
    """
    if max_file_mb is None:
        max_file_mb = config.MAX_FILE_MB

    _, sep, encoded = payload.partition(",")
    if not sep:
        encoded = payload
    encoded = encoded.strip()
    if not encoded:
        raise ImageDecodeError("Image payload is empty")

    try:
        file_bytes = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {e}") from e

    if len(file_bytes) > max_file_mb * 1024 * 1024:
        raise PayloadTooLargeError(f"Image too large. Maximum size: {max_file_mb}MB")

    return file_bytes


def to_8bit(image: Image.Image) -> Image.Image:
    """
    Scale 16/32-bit integer grayscale images down to 8-bit "L".

    Pillow's convert() clamps these modes at 255 instead of rescaling them,
    which turns every mid-tone into white.
    """
    if image.mode not in WIDE_GRAY_MODES:
        return image
    wide = np.clip(np.asarray(image, dtype=np.int64), 0, 65535)
    return Image.fromarray((wide >> 8).astype(np.uint8))


def open_image(file_bytes: bytes) -> Image.Image:
    """Open image bytes with Pillow and apply EXIF orientation."""
    try:
        image = Image.open(io.BytesIO(file_bytes))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ImageDecodeError(f"Failed to decode image: {e}") from e

    return ImageOps.exif_transpose(image)


def to_bounded_rgba(image: Image.Image, max_edge: Optional[int] = None) -> DecodedImage:
    """
    Resize an image to fit within max_edge and expose its RGBA bytes.

    Only downscales; aspect ratio is preserved.

    Args:
        image: Opened Pillow image
        max_edge: Longest allowed side (default from config)

    Returns:
        DecodedImage with 4 channels per pixel
    """
    if max_edge is None:
        max_edge = config.MAX_EDGE

    image = to_8bit(image)
    # Adds a fully opaque alpha channel when the source has none
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    else:
        image = image.copy()

    image.thumbnail((max_edge, max_edge), Image.LANCZOS)

    return DecodedImage(width=image.width, height=image.height, data=image.tobytes())


def decode_image(payload: str, max_edge: Optional[int] = None) -> DecodedImage:
    """
    Decode an encoded image string into a bounded RGBA raster.

    Args:
        payload: Data-URI or bare base64 image string
        max_edge: Longest allowed side (default from config)

    Returns:
        DecodedImage ready for palette extraction

    Raises:
        ImageDecodeError: For invalid payloads or undecodable images
    """
    file_bytes = decode_data_uri(payload)
    image = open_image(file_bytes)
    return to_bounded_rgba(image, max_edge=max_edge)
