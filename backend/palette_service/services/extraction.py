"""
Palette extraction service.

This module implements the core palette algorithm: count exact RGB colors in
a flat RGBA buffer, drop near-black pixels, and keep the most frequent 3-5
colors as uppercase #RRGGBB strings.
"""

from typing import Dict, List, Sequence, Union

import numpy as np
from loguru import logger


DARK_THRESHOLD = 30
MIN_COLORS = 3
MAX_COLORS = 5
CHANNELS = 4

PixelBuffer = Union[bytes, bytearray, memoryview, Sequence[int], Sequence[Sequence[int]], np.ndarray]


class MalformedInputError(ValueError):
    """Raised when a pixel buffer cannot be read as RGBA channel data."""


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert red, green and blue channel values to an uppercase hex color string."""
    r, g, b = int(r), int(g), int(b)
    if not all(0 <= c <= 255 for c in (r, g, b)):
        raise MalformedInputError(f"Channel values must be within 0-255, got {(r, g, b)}")
    return f"#{r:02X}{g:02X}{b:02X}"


def _as_channels(pixels: PixelBuffer, pixel_count: int) -> np.ndarray:
    """
    Validate a pixel buffer and return it as a (pixel_count, 4) uint32 array.

    Raises:
        MalformedInputError: On a bad pixel count, a length mismatch,
            non-integer channel values or values outside 0-255
    """
    if isinstance(pixel_count, bool) or not isinstance(pixel_count, (int, np.integer)):
        raise MalformedInputError(f"pixel_count must be an integer, got {type(pixel_count).__name__}")
    if pixel_count <= 0:
        raise MalformedInputError(f"pixel_count must be positive, got {pixel_count}")

    if isinstance(pixels, (bytes, bytearray, memoryview)):
        channels = np.frombuffer(pixels, dtype=np.uint8)
    else:
        try:
            channels = np.asarray(pixels)
        except ValueError as e:
            raise MalformedInputError(f"Pixel buffer is not rectangular: {e}") from e
    channels = channels.reshape(-1)

    expected = CHANNELS * pixel_count
    if channels.size != expected:
        raise MalformedInputError(
            f"Buffer holds {channels.size} channel values, expected {expected} "
            f"({CHANNELS} per pixel for {pixel_count} pixels)"
        )

    if channels.dtype != np.uint8:
        if not np.issubdtype(channels.dtype, np.integer):
            raise MalformedInputError(f"Channel values must be integers, got dtype {channels.dtype}")
        if channels.min() < 0 or channels.max() > 255:
            raise MalformedInputError("Channel values must be within 0-255")

    return channels.astype(np.uint32).reshape(pixel_count, CHANNELS)


def build_frequency_table(pixels: PixelBuffer, pixel_count: int,
                          dark_threshold: int = DARK_THRESHOLD) -> Dict[str, int]:
    """
    Count occurrences of each exact RGB color in an RGBA buffer.

    Pixels whose red, green and blue channels are all below ``dark_threshold``
    are skipped. Alpha is ignored.

    Args:
        pixels: Flat R,G,B,A channel data (or an array of RGBA rows)
        pixel_count: Number of pixels in the buffer
        dark_threshold: Exclusive channel cutoff for near-black pixels

    Returns:
        Mapping of #RRGGBB to count, ordered by first appearance in the scan
    """
    rgba = _as_channels(pixels, pixel_count)
    rgb = rgba[:, :3]

    qualifying = rgb[~np.all(rgb < dark_threshold, axis=1)]
    logger.debug(f"Darkness filter: kept {qualifying.shape[0]}/{pixel_count} pixels")
    if qualifying.shape[0] == 0:
        return {}

    keys = (qualifying[:, 0] << 16) | (qualifying[:, 1] << 8) | qualifying[:, 2]
    unique_keys, first_seen, counts = np.unique(keys, return_index=True, return_counts=True)

    # np.unique sorts by value; restore scan order
    scan_order = np.argsort(first_seen, kind="stable")
    return {
        rgb_to_hex(unique_keys[i] >> 16, (unique_keys[i] >> 8) & 0xFF, unique_keys[i] & 0xFF): int(counts[i])
        for i in scan_order
    }


def extract_palette(pixels: PixelBuffer, pixel_count: int,
                    dark_threshold: int = DARK_THRESHOLD,
                    min_colors: int = MIN_COLORS,
                    max_colors: int = MAX_COLORS) -> List[str]:
    """
    Derive an ordered palette of representative hex colors.

    Colors are ranked by pixel count, most frequent first; equal counts keep
    the order in which the colors were first met in the scan. The palette
    requests between ``min_colors`` and ``max_colors`` entries but never pads:
    an image with fewer distinct qualifying colors returns all of them, and an
    image that is entirely near-black returns an empty list.

    Args:
        pixels: Flat R,G,B,A channel data of length 4 * pixel_count
        pixel_count: Number of pixels in the buffer
        dark_threshold: Exclusive channel cutoff for near-black pixels
        min_colors: Lower bound of the requested palette size
        max_colors: Upper bound of the requested palette size

    Returns:
        List of uppercase #RRGGBB strings

    Raises:
        MalformedInputError: If the buffer is not valid RGBA channel data
    """
    table = build_frequency_table(pixels, pixel_count, dark_threshold=dark_threshold)

    # sorted() is stable, so ties stay in first-seen order
    ranked = sorted(table.items(), key=lambda item: item[1], reverse=True)

    unique_color_count = len(ranked)
    color_count = min(max(min_colors, unique_color_count), max_colors)
    palette = [hex_color for hex_color, _ in ranked[:color_count]]

    logger.debug(f"Palette: {len(palette)} of {unique_color_count} unique colors")
    return palette
