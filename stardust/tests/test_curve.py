from math import isclose

import pytest

from stardust import InvalidBeatmapData
from stardust.curve import (
    Catmull,
    Curve,
    Linear,
    MetaCurve,
    Perfect,
    get_center,
)
from stardust.position import Position


def assert_position_close(actual, expected, abs_tol=1e-6):
    assert isclose(actual.x, expected.x, abs_tol=abs_tol), (actual, expected)
    assert isclose(actual.y, expected.y, abs_tol=abs_tol), (actual, expected)


def test_linear():
    curve = Curve.from_kind_and_points(
        'L',
        [Position(0, 0), Position(100, 0)],
        100,
    )
    assert isinstance(curve, Linear)
    assert_position_close(curve(0), Position(0, 0))
    assert_position_close(curve(0.5), Position(50, 0))
    assert_position_close(curve(1), Position(100, 0))


def test_linear_extended_to_length():
    curve = Curve.from_kind_and_points(
        'L',
        [Position(0, 0), Position(100, 0)],
        150,
    )
    assert_position_close(curve(1), Position(150, 0))


def test_linear_cut_to_length():
    curve = Curve.from_kind_and_points(
        'L',
        [Position(0, 0), Position(100, 0), Position(100, 100)],
        50,
    )
    assert_position_close(curve(1), Position(50, 0))


def test_perfect():
    curve = Curve.from_kind_and_points(
        'P',
        [Position(0, 0), Position(50, 50), Position(100, 0)],
        # half of a circle with radius 50
        50 * 3.141592653589793,
    )
    assert isinstance(curve, Perfect)
    assert_position_close(curve(0), Position(0, 0))
    assert_position_close(curve(0.5), Position(50, 50))
    assert_position_close(curve(1), Position(100, 0))


def test_perfect_collinear_falls_back():
    curve = Curve.from_kind_and_points(
        'P',
        [Position(0, 0), Position(50, 0), Position(100, 0)],
        100,
    )
    assert isinstance(curve, MetaCurve)
    assert_position_close(curve(1), Position(100, 0))


def test_bezier_segments():
    # a repeated point starts a new segment
    curve = Curve.from_kind_and_points(
        'B',
        [
            Position(0, 0),
            Position(100, 0),
            Position(100, 0),
            Position(100, 100),
        ],
        200,
    )
    assert_position_close(curve(0.5), Position(100, 0), abs_tol=1)
    assert_position_close(curve(1), Position(100, 100), abs_tol=1)


def test_catmull():
    curve = Curve.from_kind_and_points(
        'C',
        [Position(0, 0), Position(100, 0)],
        100,
    )
    assert isinstance(curve, Catmull)
    assert_position_close(curve(0), Position(0, 0))
    assert_position_close(curve(1), Position(100, 0), abs_tol=1e-3)


def test_single_point_stays_on_head():
    curve = Curve.from_kind_and_points('B', [Position(10, 20)], 100)
    assert_position_close(curve(0), Position(10, 20))
    assert_position_close(curve(1), Position(10, 20))


def test_unknown_kind():
    with pytest.raises(InvalidBeatmapData):
        Curve.from_kind_and_points('Q', [Position(0, 0)], 10)


def test_get_center():
    assert_position_close(
        get_center(Position(0, 0), Position(50, 50), Position(100, 0)),
        Position(50, 0),
    )

    with pytest.raises(ValueError):
        get_center(Position(0, 0), Position(1, 1), Position(2, 2))
