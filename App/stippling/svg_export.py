"""SVG rendering of point sets (dots) and tours (polylines)."""

from itertools import chain
from pathlib import Path

import svg

from models import CMYK_COLORS, GREYSCALE_COLORS, Point


def channel_colors(channel_count: int) -> "tuple[str, ...]":
    """Stroke colours for a channel set: black alone, or C, M, Y, K."""
    return GREYSCALE_COLORS if channel_count == 1 else CMYK_COLORS


def _document(elements: "list[svg.Element]", width: int, height: int) -> str:
    return svg.SVG(
        viewBox=svg.ViewBoxSpec(0, 0, width, height),
        elements=elements,
    ).as_str()


def points_to_svg(channels: "list[list[Point]]", width: int, height: int) -> str:
    """One filled circle of radius 1 per point."""
    elements: list[svg.Element] = []
    for channel, color in zip(channels, channel_colors(len(channels))):
        elements.extend(svg.Circle(cx=p.x, cy=p.y, r=1.0, fill=color) for p in channel)
    return _document(elements, width, height)


def path_to_svg(channels: "list[list[Point]]", width: int, height: int) -> str:
    """One unfilled polyline per channel, in tour order."""
    elements: list[svg.Element] = []
    for channel, color in zip(channels, channel_colors(len(channels))):
        if not channel:
            continue

        # svg library expects a flat [x0, y0, x1, y1, ...] list
        path_points: list[float] = list(chain.from_iterable((p.x, p.y) for p in channel))
        elements.append(
            svg.Polyline(
                points=path_points,  # type: ignore[arg-type]
                stroke=color,
                fill="none",
                stroke_width=1.0,
            )
        )
    return _document(elements, width, height)


def write_points(path: "str | Path", channels: "list[list[Point]]", width: int, height: int) -> None:
    Path(path).write_text(points_to_svg(channels, width, height))


def write_path(path: "str | Path", channels: "list[list[Point]]", width: int, height: int) -> None:
    Path(path).write_text(path_to_svg(channels, width, height))
