"""Shared fixtures: small synthetic images built in memory."""

import numpy as np
import pytest
from PIL import Image


def solid_image(width: int, height: int, color: "tuple[int, int, int]") -> Image.Image:
    return Image.new("RGB", (width, height), color)


@pytest.fixture
def black_image() -> Image.Image:
    return solid_image(100, 100, (0, 0, 0))


@pytest.fixture
def red_image() -> Image.Image:
    return solid_image(10, 10, (255, 0, 0))


@pytest.fixture
def half_black_image() -> Image.Image:
    """Left half black, right half white (100 x 60)."""
    pixels = np.full((60, 100, 3), 255, dtype=np.uint8)
    pixels[:, :50] = 0
    return Image.fromarray(pixels)


@pytest.fixture
def gradient_image() -> Image.Image:
    """Horizontal grey ramp, dark on the left (64 x 48)."""
    ramp = np.linspace(0, 255, 64).astype(np.uint8)
    pixels = np.repeat(np.tile(ramp, (48, 1))[..., np.newaxis], 3, axis=2)
    return Image.fromarray(pixels)


@pytest.fixture
def color_image() -> Image.Image:
    """Four coloured quadrants (red, green, blue, grey) on a 40 x 40 image."""
    pixels = np.zeros((40, 40, 3), dtype=np.uint8)
    pixels[:20, :20] = (255, 0, 0)
    pixels[:20, 20:] = (0, 255, 0)
    pixels[20:, :20] = (0, 0, 255)
    pixels[20:, 20:] = (90, 90, 90)
    return Image.fromarray(pixels)
