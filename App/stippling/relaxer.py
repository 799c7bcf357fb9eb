"""Weighted Lloyd relaxation of point sets over a bounded Voronoi partition."""

import logging

import numpy as np
from scipy.spatial import QhullError, Voronoi

from models import DegenerateGeometryError, PartitionError, Point

from .density import DensityField

logger = logging.getLogger(__name__)


def bounded_voronoi_cells(
    points: np.ndarray, width: float, height: float
) -> "list[np.ndarray | None]":
    """Voronoi cells of ``points`` clipped to the rectangle [0, width] x [0, height].

    Args:
        points: (N, 2) array of seeds inside the rectangle

    Returns:
        One (M, 2) vertex array per seed, or None for a seed that owns no
        cell (an exact duplicate of another seed)

    Raises:
        PartitionError: If qhull cannot build the diagram

    AIDEV-NOTE: Seeds are mirrored across the four edges. The bisectors
    between a seed and its mirrors are exactly the rectangle's edges, so
    each original seed gets a closed cell already clipped to the image.
    """
    x, y = points[:, 0], points[:, 1]
    mirrored = np.concatenate(
        [
            points,
            np.column_stack([-x, y]),
            np.column_stack([2.0 * width - x, y]),
            np.column_stack([x, -y]),
            np.column_stack([x, 2.0 * height - y]),
        ]
    )

    try:
        diagram = Voronoi(mirrored)
    except (QhullError, ValueError) as e:
        raise PartitionError("relax", f"Failed to generate Voronoi diagram: {e}") from e

    cells: "list[np.ndarray | None]" = []
    for index in range(len(points)):
        region_index = diagram.point_region[index]
        region = diagram.regions[region_index] if region_index >= 0 else []
        if not region or -1 in region:
            cells.append(None)
            continue
        cells.append(diagram.vertices[region])

    return cells


def weighted_centroid(vertices: np.ndarray, field: DensityField, channel: int = 0) -> Point:
    """Density-weighted average of a cell's vertices and their plain centroid."""
    cx, cy = vertices.mean(axis=0)
    center = Point(float(cx), float(cy))
    center_weight = field.floored_weight(center, channel)

    total = center_weight
    result = center * center_weight
    for vx, vy in vertices:
        vertex = Point(float(vx), float(vy))
        weight = field.floored_weight(vertex, channel)
        result = result + vertex * weight
        total += weight

    return result / total


def relax(points: "list[Point]", field: DensityField, channel: int = 0) -> "list[Point]":
    """Move every point to the weighted centroid of its Voronoi cell.

    Args:
        points: Current point set of one channel
        field: Density field of the source image
        channel: Which channel of ``field`` weights the centroids

    Returns:
        New point list. Fewer than 3 input points are returned unchanged.

    Raises:
        DegenerateGeometryError: If fewer than 3 points survive NaN filtering
        PartitionError: If the Voronoi diagram cannot be built
    """
    if len(points) < 3:
        return list(points)

    usable = [p for p in points if not p.is_nan]
    if len(usable) != len(points):
        logger.warning("Dropped %d NaN points before relaxation", len(points) - len(usable))
    if len(usable) < 3:
        raise DegenerateGeometryError("relax", f"need at least 3 points, got {len(usable)}")

    coords = np.array([(p.x, p.y) for p in usable], dtype=np.float64)
    cells = bounded_voronoi_cells(coords, field.width, field.height)

    moved = []
    for point, cell in zip(usable, cells):
        if cell is None:
            # Duplicate seed; it stays where it is
            moved.append(point)
        else:
            moved.append(weighted_centroid(cell, field, channel))

    return moved


def relax_iterations(
    points: "list[Point]", field: DensityField, iterations: int, channel: int = 0
) -> "list[Point]":
    """Run ``iterations`` relaxation steps, each on the previous step's output."""
    for iteration in range(iterations):
        points = relax(points, field, channel)
        logger.debug("Channel %d: relaxation %d/%d done", channel, iteration + 1, iterations)
    return points
