import math
import random

import numpy as np
import pytest

from sweepbot.geometry import Point
from sweepbot.occupancy import OccupancyGrid


def _cloud(n, seed=7):
    rng = random.Random(seed)
    return [Point(rng.uniform(-500, 500), rng.uniform(0, 800)) for _ in range(n)]


@pytest.mark.parametrize("cell_count", [1, 2, 7, 50])
def test_every_point_binned_once(cell_count):
    points = _cloud(300)
    grid = OccupancyGrid.build(points, cell_count)
    assert grid.total_points() == len(points)
    assert grid.counts.shape == (cell_count, cell_count)


def test_point_lands_in_cell_spans():
    points = _cloud(100)
    grid = OccupancyGrid.build(points, 10)
    for p in points:
        cell = grid.cell(*grid.cell_index(p))
        assert cell.x_span.contains(p.x)
        assert cell.y_span.contains(p.y)


def test_spans_from_bounding_box():
    grid = OccupancyGrid.build([Point(0, 0), Point(9, 19)], 2)
    assert grid.x_span == pytest.approx(5.0)
    assert grid.y_span == pytest.approx(10.0)
    assert grid.cell(1, 1).x_span.min == pytest.approx(5.0)
    assert grid.cell(1, 1).y_span.max == pytest.approx(20.0)


def test_build_is_deterministic():
    points = _cloud(500)
    a = OccupancyGrid.build(points, 20)
    b = OccupancyGrid.build(list(points), 20)
    assert np.array_equal(a.occupied, b.occupied)
    assert a.threshold == b.threshold


def test_threshold_divisor():
    points = [Point(0, 0)] * 40 + [Point(9, 9)] * 5
    default = OccupancyGrid.build(points, 2)
    assert default.max_count == 40
    assert default.threshold == 4
    assert default.is_occupied(1, 1)

    coarse = OccupancyGrid.build(points, 2, divisor=4)
    assert coarse.threshold == 10
    assert coarse.is_occupied(0, 0)
    assert not coarse.is_occupied(1, 1)


def test_render_black_occupied_white_free_transposed():
    points = [Point(0, 0)] * 10 + [Point(9, 0)] * 10 + [Point(0, 9)]
    grid = OccupancyGrid.build(points, 2)
    image = grid.render()

    assert image.dtype == np.uint8
    assert grid.is_occupied(1, 0)
    # rows follow y, columns follow x
    assert image[0, 1] == 0
    assert image[0, 0] == 0
    assert image[1, 1] == 255


def test_empty_cloud():
    grid = OccupancyGrid.build([], 4)
    assert grid.total_points() == 0
    assert grid.max_count == 0
    assert not grid.occupied.any()


def test_single_point():
    grid = OccupancyGrid.build([Point(3, 4)], 3)
    assert grid.total_points() == 1
    assert grid.cell_index(Point(3, 4)) == (0, 0)
    assert grid.is_occupied(0, 0)


def test_invalid_cell_count():
    with pytest.raises(ValueError):
        OccupancyGrid.build([Point(0, 0)], 0)


def test_half_sweep_with_negative_x():
    points = [Point.from_polar(100.0, i * math.pi / 50) for i in range(50)]
    grid = OccupancyGrid.build(points, 5)
    assert grid.total_points() == 50
    assert grid.origin_x < 0


def test_boundary_point_goes_to_upper_cell():
    points = [Point(0, 0), Point(5, 0), Point(9, 0)]
    grid = OccupancyGrid.build(points, 2)
    assert grid.x_span == pytest.approx(5.0)
    assert grid.cell_index(Point(5, 0)) == (1, 0)
    assert grid.cell(1, 0).x_span.contains(5.0)
    assert grid.counts[:, 0].tolist() == [1, 2]
