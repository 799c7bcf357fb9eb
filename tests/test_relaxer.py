"""Tests for weighted Voronoi relaxation.

Covers the bounded partition (cells tile the image rectangle), the small
and NaN input edge cases, partition failures and attraction toward ink.
"""

import math

import numpy as np
import pytest
from scipy.spatial import ConvexHull, QhullError

from models import ColorMode, DegenerateGeometryError, PartitionError, Point, SamplingConfig
from stippling import relaxer
from stippling.density import DensityField
from stippling.relaxer import bounded_voronoi_cells, relax, relax_iterations, weighted_centroid
from stippling.sampler import sample_points


@pytest.fixture
def random_points() -> "list[Point]":
    rng = np.random.default_rng(11)
    return [Point(float(x), float(y)) for x, y in rng.random((150, 2)) * (100.0, 60.0)]


class TestBoundedCells:
    def test_cells_tile_the_rectangle(self, random_points) -> None:
        coords = np.array([(p.x, p.y) for p in random_points])
        cells = bounded_voronoi_cells(coords, 100.0, 60.0)

        assert len(cells) == len(random_points)
        area = 0.0
        for cell in cells:
            assert cell is not None
            assert cell[:, 0].min() >= -1e-9 and cell[:, 0].max() <= 100.0 + 1e-9
            assert cell[:, 1].min() >= -1e-9 and cell[:, 1].max() <= 60.0 + 1e-9
            area += ConvexHull(cell).volume
        assert area == pytest.approx(100.0 * 60.0)

    def test_duplicate_seed_does_not_break_partition(self) -> None:
        coords = np.array([(10.0, 10.0), (10.0, 10.0), (50.0, 20.0), (30.0, 50.0)])
        cells = bounded_voronoi_cells(coords, 100.0, 60.0)
        assert len(cells) == 4
        assert cells[2] is not None and cells[3] is not None


class TestWeightedCentroid:
    def test_uniform_density_interior_cell(self, black_image) -> None:
        field = DensityField.from_image(black_image)
        square = np.array([(10.0, 10.0), (30.0, 10.0), (30.0, 30.0), (10.0, 30.0)])
        assert weighted_centroid(square, field) == Point(20.0, 20.0)

    def test_zero_density_vertices_still_count(self) -> None:
        white = DensityField(np.full((50, 50, 3), 255, dtype=np.uint8))
        triangle = np.array([(0.0, 0.0), (30.0, 0.0), (0.0, 30.0)])
        # Every weight is floored to the same epsilon
        assert weighted_centroid(triangle, white) == Point(10.0, 10.0)


class TestRelax:
    def test_fewer_than_three_points_unchanged(self, black_image) -> None:
        field = DensityField.from_image(black_image)
        points = [Point(1.0, 2.0), Point(3.0, 4.0)]
        assert relax(points, field) == points
        assert relax([], field) == []

    def test_nan_points_are_dropped(self, black_image) -> None:
        field = DensityField.from_image(black_image)
        points = [Point(10.0, 10.0), Point(math.nan, 5.0), Point(80.0, 20.0), Point(40.0, 70.0)]
        moved = relax(points, field)
        assert len(moved) == 3
        assert not any(p.is_nan for p in moved)

    def test_too_few_usable_points(self, black_image) -> None:
        field = DensityField.from_image(black_image)
        points = [Point(10.0, 10.0), Point(math.nan, 5.0), Point(80.0, math.nan)]
        with pytest.raises(DegenerateGeometryError) as exc_info:
            relax(points, field)
        assert exc_info.value.operation == "relax"

    def test_partition_failure_is_reported(self, black_image, monkeypatch) -> None:
        def broken_voronoi(points):
            raise QhullError("QH6154 initial simplex is flat")

        monkeypatch.setattr(relaxer, "Voronoi", broken_voronoi)
        field = DensityField.from_image(black_image)
        points = [Point(10.0, 10.0), Point(20.0, 10.0), Point(30.0, 40.0)]
        with pytest.raises(PartitionError):
            relax(points, field)

    def test_preserves_count_and_bounds(self, half_black_image, random_points) -> None:
        field = DensityField.from_image(half_black_image)
        moved = relax(random_points, field)
        assert len(moved) == len(random_points)
        assert all(-1e-9 <= p.x <= 100.0 + 1e-9 and -1e-9 <= p.y <= 60.0 + 1e-9 for p in moved)

    def test_points_drift_toward_ink(self, half_black_image, random_points) -> None:
        field = DensityField.from_image(half_black_image)
        moved = relax_iterations(random_points, field, 3)
        before = sum(p.x for p in random_points) / len(random_points)
        after = sum(p.x for p in moved) / len(moved)
        assert after < before

    def test_cmyk_channel_selects_weights(self, color_image) -> None:
        config = SamplingConfig(num_points=200, seed=3, mode=ColorMode.CMYK)
        field = DensityField.from_image(color_image, mode=config.mode)
        channels = sample_points(field, config)
        for index, points in enumerate(channels):
            moved = relax(points, field, index)
            assert len(moved) == len(points)

    def test_zero_iterations_is_identity(self, black_image, random_points) -> None:
        field = DensityField.from_image(black_image)
        assert relax_iterations(random_points, field, 0) == random_points
