"""
Test configuration and fixtures for Palette Studio tests.
"""
import numpy as np
import pytest

from palette_studio.services.colors.bitmap import Bitmap


def solid_bitmap(width: int, height: int, rgba=(255, 0, 0, 255)) -> Bitmap:
    """Create a bitmap filled with a single RGBA color."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = rgba
    return Bitmap(pixels)


@pytest.fixture
def make_bitmap():
    """Factory for solid-color bitmaps."""
    return solid_bitmap


@pytest.fixture
def red_bitmap():
    """100×100 solid red bitmap."""
    return solid_bitmap(100, 100)


@pytest.fixture
def split_bitmap():
    """
    100×100 bitmap: left 70 columns blue-ish, right 30 columns green-ish.

    The first blue column holds a distinct authentic shade so tests can tell
    a read-back pixel apart from its quantized bucket.
    """
    pixels = np.zeros((100, 100, 4), dtype=np.uint8)
    pixels[:, :70] = (10, 20, 200, 255)
    pixels[:, 70:] = (30, 220, 40, 255)
    pixels[0, 0] = (12, 25, 210, 255)
    return Bitmap(pixels)


@pytest.fixture
def rng():
    """Seeded random generator for reproducible padding."""
    return np.random.default_rng(1234)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from palette_studio.services.observability import reset_metrics
    reset_metrics()
