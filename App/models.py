"""Data models, configuration records and errors for the stipple plotter core."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

# AIDEV-NOTE: Points closer than this are considered equal
POINT_EPSILON = 1e-5

# Floor for relaxation weights so a zero-density vertex still contributes
MIN_WEIGHT = 1e-10

# Stroke/marker colours, indexed by CMYK channel
CMYK_COLORS = ("cyan", "magenta", "yellow", "black")
GREYSCALE_COLORS = ("black",)


class ColorMode(Enum):
    """How pixels are split into ink channels."""

    GREYSCALE = "greyscale"  # One black channel
    CMYK = "cmyk"  # Cyan, magenta, yellow, black

    @property
    def channel_count(self) -> int:
        return 4 if self is ColorMode.CMYK else 1

    @property
    def colors(self) -> "tuple[str, ...]":
        return CMYK_COLORS if self is ColorMode.CMYK else GREYSCALE_COLORS


# --- Errors ---


class StippleError(Exception):
    """Base class for failures raised by the stippling core."""


class DegenerateGeometryError(StippleError):
    """Geometry too degenerate for the requested operation.

    AIDEV-NOTE: Raised instead of fabricating geometry. ``operation`` names
    the step that failed so callers can decide to skip it.
    """

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class PartitionError(DegenerateGeometryError):
    """Voronoi partition of a point set could not be constructed."""


class ConfigurationError(StippleError, ValueError):
    """Sampling or pipeline setting outside its valid range."""


class CalibrationError(StippleError):
    """Calibration document is missing fields or holds invalid values."""


class ChannelFormatError(StippleError):
    """Point-set document does not have the expected shape."""


# --- Geometry ---


@runtime_checkable
class Metric(Protocol):
    """Anything that can measure its distance to another instance."""

    def distance(self, other) -> float: ...


@dataclass(frozen=True, eq=False)
class Point:
    """Immutable 2D point.

    Coordinates may be image pixels, drawing-plane units or motor
    distances depending on the pipeline stage.
    """

    x: float
    y: float

    @classmethod
    def origin(cls) -> "Point":
        return cls(0.0, 0.0)

    def distance(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    @property
    def is_nan(self) -> bool:
        return math.isnan(self.x) or math.isnan(self.y)

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, scale: float) -> "Point":
        return Point(self.x * scale, self.y * scale)

    def __truediv__(self, divisor: float) -> "Point":
        return Point(self.x / divisor, self.y / divisor)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.distance(other) < POINT_EPSILON

    __hash__ = None  # type: ignore[assignment]


# --- Configuration ---


@dataclass(frozen=True)
class SamplingConfig:
    """Settings shared by the sampler and the relaxer."""

    num_points: int = 20000
    # > 1 sparsifies dark regions, < 1 densifies them
    gamma: float = 1.0
    mode: ColorMode = ColorMode.GREYSCALE
    seed: "int | None" = None

    def __post_init__(self):
        if self.num_points < 0:
            raise ConfigurationError(f"num_points must be >= 0, got {self.num_points}")
        # gamma 0 turns every threshold into 1 and no draw is ever accepted
        if not self.gamma > 0:
            raise ConfigurationError(f"gamma must be > 0, got {self.gamma}")


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for the stages that follow sampling."""

    voronoi_iterations: int = 0
    # Minimum fractional gain per 2-opt pass; 0 disables 2-opt
    tsp_improvement: float = 0.0
    draw_points: bool = False
    max_workers: "int | None" = None

    def __post_init__(self):
        if self.voronoi_iterations < 0:
            raise ConfigurationError(
                f"voronoi_iterations must be >= 0, got {self.voronoi_iterations}"
            )
        if not self.tsp_improvement >= 0:
            raise ConfigurationError(f"tsp_improvement must be >= 0, got {self.tsp_improvement}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass(frozen=True)
class Calibration:
    """Geometry of a two-motor hanging plotter.

    AIDEV-NOTE: All four values share the same unit (usually cm or mm).
    """

    # Distance between the two motor shafts
    base_width: float
    # Vertical distance from the centre of the drawing plane up to the shafts
    base_height: float
    # Largest drawing extent; output is scaled to fit, keeping aspect ratio
    drawing_width: float
    drawing_height: float


@dataclass
class StippleResult:
    """Output of the image-to-points pipeline."""

    channels: "list[list[Point]]"
    mode: ColorMode

    # Source image dimensions (pixels)
    width: int
    height: int

    # True once channels have been ordered into tours
    is_tour: bool = False

    # Total tour length per channel (pixels), filled in path mode
    lengths: "list[float]" = field(default_factory=list)
