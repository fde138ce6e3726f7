"""
Test configuration and fixtures for the palette service tests.
"""
import base64
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import create_app
from palette_service.services.store import InMemoryPaletteStore
from palette_service.utils.metrics import reset_metrics


def encode_image(pixels: np.ndarray, fmt: str = "PNG", data_uri: bool = True) -> str:
    """Encode an (H, W, C) uint8 array as a data-URI (or bare base64) string."""
    buffer = io.BytesIO()
    Image.fromarray(pixels.astype(np.uint8)).save(buffer, format=fmt)
    b64 = base64.b64encode(buffer.getvalue()).decode("ascii")
    if data_uri:
        return f"data:image/{fmt.lower()};base64,{b64}"
    return b64


@pytest.fixture
def palette_store():
    """Fresh in-memory store for each test."""
    return InMemoryPaletteStore()


@pytest.fixture
def test_client(palette_store):
    """Create test client for an app bound to the fresh store."""
    return TestClient(create_app(store=palette_store))


@pytest.fixture
def two_by_two_image():
    """2x2 image: red, red, green, blue in scan order."""
    return np.array([
        [[255, 0, 0], [255, 0, 0]],
        [[0, 255, 0], [0, 0, 255]],
    ], dtype=np.uint8)


@pytest.fixture(autouse=True)
def reset_metrics_between_tests():
    """Reset metrics before each test."""
    reset_metrics()
