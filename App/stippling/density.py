"""Ink density model and the density field read by sampler and relaxer.

AIDEV-NOTE: Sampler and relaxer must agree on "how dense is ink here".
Both go through DensityField, which stores the per-channel sampling
threshold ``(1 - ink) ** gamma``. The sampler accepts a draw when a uniform
threshold is >= that value; the relaxer weights by its complement.
"""

import math

import numpy as np
from PIL import Image

from models import ColorMode, MIN_WEIGHT, Point


def to_black(r: int, g: int, b: int) -> float:
    """Greyscale ink density: 0 for white, 1 for black."""
    return 1.0 - max(r, g, b) / 255.0


def to_cmyk(r: int, g: int, b: int) -> "tuple[float, float, float, float]":
    """Split an RGB pixel into (C, M, Y, K) ink densities.

    Pure black has no chromatic component, so C=M=Y=0 and K=1 there
    instead of dividing by zero.
    """
    black = to_black(r, g, b)
    white = 1.0 - black

    if white == 0.0:
        return (0.0, 0.0, 0.0, 1.0)

    return (
        (1.0 - r / 255.0 - black) / white,
        (1.0 - g / 255.0 - black) / white,
        (1.0 - b / 255.0 - black) / white,
        black,
    )


def invert(densities: "np.ndarray | tuple[float, ...]") -> np.ndarray:
    """Ink densities to paper densities (1 - ink), elementwise."""
    return 1.0 - np.asarray(densities, dtype=np.float64)


def ink_densities(rgb: np.ndarray, mode: ColorMode) -> np.ndarray:
    """Vectorised ink densities for an (H, W, 3) uint8 array.

    Returns:
        Array of shape (channels, H, W) with values in [0, 1]
    """
    rgb = rgb.astype(np.float64) / 255.0
    black = 1.0 - rgb.max(axis=2)

    if mode is ColorMode.GREYSCALE:
        return black[np.newaxis]

    white = 1.0 - black
    chroma = np.zeros((3,) + black.shape)
    nonzero = white > 0.0
    for i in range(3):
        chroma[i][nonzero] = (1.0 - rgb[..., i][nonzero] - black[nonzero]) / white[nonzero]

    return np.concatenate([chroma, black[np.newaxis]])


class DensityField:
    """Per-channel ink density over an image.

    Read-only after construction, so one instance is shared by every
    worker thread.
    """

    def __init__(self, rgb: np.ndarray, gamma: float = 1.0, mode: ColorMode = ColorMode.GREYSCALE):
        if rgb.ndim != 3 or rgb.shape[2] < 3:
            raise ValueError(f"Expected an (H, W, 3) RGB array, got shape {rgb.shape}")
        if not gamma > 0:
            raise ValueError(f"gamma must be > 0, got {gamma}")

        self.gamma = gamma
        self.mode = mode
        self.height, self.width = rgb.shape[:2]

        # Probability that a draw is rejected, per channel and pixel
        self.thresholds = invert(ink_densities(rgb[..., :3], mode)) ** gamma
        self.weights = 1.0 - self.thresholds

    @classmethod
    def from_image(
        cls, image: Image.Image, gamma: float = 1.0, mode: ColorMode = ColorMode.GREYSCALE
    ) -> "DensityField":
        return cls(np.asarray(image.convert("RGB")), gamma=gamma, mode=mode)

    @property
    def channel_count(self) -> int:
        return self.thresholds.shape[0]

    def threshold(self, x: int, y: int) -> np.ndarray:
        """Sampling thresholds of every channel at pixel (x, y)."""
        return self.thresholds[:, y, x]

    def weight(self, point: Point, channel: int = 0) -> float:
        """Density at a continuous position, averaged over the 2x2 pixel block.

        AIDEV-NOTE: Positions on the far image edge (or beyond it) sample 0
        so Voronoi vertices on the boundary never read out of range.
        """
        width, height = self.width, self.height

        if math.isnan(point.x) or math.isnan(point.y):
            return 0.0
        if int(point.x) >= width - 1 or int(point.y) >= height - 1:
            return 0.0

        x = min(max(math.floor(point.x - 0.5), 0), width - 1)
        y = min(max(math.floor(point.y - 0.5), 0), height - 1)
        dx = 0 if x == width - 1 else 1
        dy = 0 if y == height - 1 else 1

        w = self.weights[channel]
        return float((w[y, x] + w[y, x + dx] + w[y + dy, x + dx] + w[y + dy, x]) / 4.0)

    def floored_weight(self, point: Point, channel: int = 0) -> float:
        return max(self.weight(point, channel), MIN_WEIGHT)
