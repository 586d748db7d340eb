from abc import ABCMeta, abstractmethod
import bisect
from itertools import accumulate
import math

import numpy as np
from scipy.special import comb
from toolz import sliding_window

from .errors import InvalidBeatmapData
from .position import Position
from .utils import lazyval


class Curve(metaclass=ABCMeta):
    """The path of a slider.

    Parameters
    ----------
    points : list[Position]
        The control points, starting with the slider's head.
    req_length : float
        The length of the path in osu! pixels. The curve is cut short or
        extended along its final direction to match this length.
    """
    _kind_dispatch = {}
    kinds = ()

    @classmethod
    def from_kind_and_points(cls, kind, points, req_length):
        try:
            subcls = cls._kind_dispatch[kind]
        except KeyError:
            raise InvalidBeatmapData(f'unknown curve type: {kind!r}')

        if len(points) == 1:
            # a slider without control points stays on its head
            return Linear(points * 2, req_length)

        return subcls(points, req_length)

    @abstractmethod
    def __call__(self, t):
        """Compute the position of the curve at time ``t``.

        Parameters
        ----------
        t : float
            The time along the distance of the curve in the range [0, 1]

        Returns
        -------
        position : Position
            The position of the curve.
        """
        raise NotImplementedError('__call__')

    def __init_subclass__(cls):
        for kind in cls.kinds:
            cls._kind_dispatch[kind] = cls


class Bezier(Curve):
    kinds = ()

    def __init__(self, points, req_length):
        self.points = points
        self._coordinates = np.array(points, dtype=float).T
        self.req_length = req_length

    def __call__(self, t):
        length = self.length
        if length == 0:
            return Position(*self.points[0])
        return self.at(t * (self.req_length / length))

    def at(self, t):
        n = len(self.points) - 1
        ixs = np.arange(n + 1)
        x, y = np.sum(
            comb(n, ixs) *
            (1 - t) ** (n - ixs) *
            t ** ixs *
            self._coordinates,
            axis=1,
        )
        return Position(x, y)

    @lazyval
    def length(self):
        """Approximates length as piecewise linear"""
        samples = np.array([
            self.at(t) for t in np.linspace(0, 1, num=8 * len(self.points))
        ])
        return np.sum(np.hypot(*np.diff(samples, axis=0).T))


class MetaCurve(Curve):
    """A curve made of a sequence of bezier curves.

    A control point which repeats the previous one starts a new segment.
    """
    kinds = 'B'

    def __init__(self, points, req_length):
        self.points = points
        self.req_length = req_length
        self._curves = [
            Bezier(subpoints, None)
            for subpoints in split_at_dupes(points)
            if len(subpoints) > 1
        ] or [Bezier(points[:1] * 2, None)]

    @lazyval
    def _ts(self):
        """The fraction of ``req_length`` at which each segment ends.

        Segments past ``req_length`` are dropped and the last remaining one is
        cut or stretched to end exactly at ``req_length``.
        """
        req_length = self.req_length
        lengths = [c.length for c in self._curves]
        starts = [0, *accumulate(lengths[:-1])]

        curves = []
        out = []
        for curve, start, length in zip(self._curves, starts, lengths):
            if curves and start >= req_length:
                break
            curve.req_length = length
            curves.append(curve)
            out.append((start + length) / req_length if req_length else 1)

        curves[-1].req_length = max(0, req_length - starts[len(curves) - 1])
        out[-1] = 1
        self._curves = curves
        return out

    def __call__(self, t):
        ts = self._ts
        if len(self._curves) == 1:
            # Special case where we only have one curve
            return self._curves[0](t)

        bi = min(bisect.bisect_left(ts, t), len(ts) - 1)
        if bi == 0:
            pre_t = 0
        else:
            pre_t = ts[bi - 1]

        post_t = ts[bi]

        return self._curves[bi]((t - pre_t) / (post_t - pre_t))


class Linear(MetaCurve):
    kinds = 'L'

    def __init__(self, points, req_length):
        self.points = points
        self.req_length = req_length
        self._curves = [
            Bezier(list(pair), None) for pair in sliding_window(2, points)
            if pair[0] != pair[1]
        ] or [Bezier(points[:2], None)]


class Perfect(Curve):
    kinds = 'P'

    def __new__(cls, points, req_length):
        if len(points) != 3:
            # osu! uses the bezier curve if there are not exactly 3 points
            return MetaCurve(points, req_length)

        try:
            center = get_center(*points)
        except ValueError:
            # we cannot use a perfect curve function for collinear points;
            # osu! also falls back to a bezier here
            return MetaCurve(points, req_length)

        self = super().__new__(cls)
        self._init(points, req_length, center)
        return self

    def __init__(self, points, req_length):
        # initialized in ``__new__`` so that the fallback curves are not
        # reinitialized
        pass

    def _init(self, points, req_length, center):
        self.points = points
        self.req_length = req_length
        self._center = center

        coordinates = np.array(points, dtype=float) - center

        # angles of 3 points to center
        start_angle, end_angle = np.arctan2(
            coordinates[::2, 1],
            coordinates[::2, 0],
        )

        # normalize so that self._angle is positive
        if end_angle < start_angle:
            end_angle += 2 * math.pi

        # angle of arc sector that describes slider
        self._angle = end_angle - start_angle

        # switch angle direction if necessary
        a_to_c = coordinates[2] - coordinates[0]
        ortho_a_to_c = np.array((a_to_c[1], -a_to_c[0]))
        if np.dot(ortho_a_to_c, coordinates[1] - coordinates[0]) < 0:
            self._angle = -(2 * math.pi - self._angle)

        length = abs(self._angle * np.hypot(*coordinates[0]))
        if length != 0:
            self._angle *= req_length / length

    def __call__(self, t):
        return rotate(self.points[0], self._center, self._angle * t)


class Catmull(Curve):
    """A centripetal catmull-rom spline, approximated as line segments the
    way osu! draws it.
    """
    kinds = 'C'
    detail = 50

    def __init__(self, points, req_length):
        self.points = points
        self.req_length = req_length
        self._linear = Linear(self._approximate(points), req_length)

    @classmethod
    def _approximate(cls, points):
        points = [Position(*p) for p in points]
        out = []
        for i in range(len(points) - 1):
            v1 = points[i - 1] if i > 0 else points[i]
            v2 = points[i]
            v3 = points[i + 1]
            v4 = points[i + 2] if i + 2 < len(points) else v3 + (v3 - v2)

            for c in range(cls.detail):
                out.append(_catmull_point(v1, v2, v3, v4, c / cls.detail))

        out.append(points[-1])
        return out

    def __call__(self, t):
        return self._linear(t)


def _catmull_point(v1, v2, v3, v4, t):
    t2 = t * t
    t3 = t * t2
    return Position(*(
        0.5 * (
            2 * p2 +
            (-p1 + p3) * t +
            (2 * p1 - 5 * p2 + 4 * p3 - p4) * t2 +
            (-p1 + 3 * p2 - 3 * p3 + p4) * t3
        )
        for p1, p2, p3, p4 in zip(v1, v2, v3, v4)
    ))


def get_center(a, b, c):
    """Returns the Position of the center of the circle described by the 3
    points

    Parameters
    ----------
    a, b, c : Position
        The three positions.

    Returns
    -------
    center : Position
        The center of the three points.

    Raises
    ------
    ValueError
        Raised when the points are collinear or coincide.

    Notes
    -----
    This uses the same algorithm as osu!
    https://github.com/ppy/osu/blob/7fbbe74b65e7e399072c198604e9db09fb729626/osu.Game/Rulesets/Objects/CircularArcApproximator.cs#L23  # noqa
    """
    a, b, c = np.array([a, b, c], dtype=float)

    a_squared = np.sum(np.square(b - c))
    b_squared = np.sum(np.square(a - c))
    c_squared = np.sum(np.square(a - b))

    if np.isclose([a_squared, b_squared, c_squared], 0).any():
        raise ValueError('coincident points')

    s = a_squared * (b_squared + c_squared - a_squared)
    t = b_squared * (a_squared + c_squared - b_squared)
    u = c_squared * (a_squared + b_squared - c_squared)

    sum_ = s + t + u

    if np.isclose(sum_, 0):
        raise ValueError('collinear points')

    return Position(*(s * a + t * b + u * c) / sum_)


def rotate(position, center, radians):
    """Returns a Position rotated r radians around centre c from p

    Parameters
    ----------
    position : Position
        The position to rotate.
    center : Position
        The point to rotate about.
    radians : float
        The number of radians to rotate ``position`` by.
    """
    p_x, p_y = position
    c_x, c_y = center

    x_dist = p_x - c_x
    y_dist = p_y - c_y

    return Position(
        (x_dist * math.cos(radians) - y_dist * math.sin(radians)) + c_x,
        (x_dist * math.sin(radians) + y_dist * math.cos(radians)) + c_y,
    )


def split_at_dupes(inp):
    out = []
    oldi = 0
    for i in range(1, len(inp)):
        if inp[i] == inp[i - 1]:
            out.append(inp[oldi:i])
            oldi = i
    out.append(inp[oldi:])
    return out
