from collections import namedtuple
import numpy as np


class Position(namedtuple('Position', 'x y')):
    """A position on the osu! screen.

    Parameters
    ----------
    x : int or float
        The x coordinate in the range.
    y : int or float
        The y coordinate in the range.

    Notes
    -----
    The visible region of the osu! standard playfield is [0, 512] by [0, 384].
    Positions may fall outside of this range for slider curve control points.
    Arithmetic is element-wise so positions can be used as 2d vectors.
    """
    x_max = 512
    y_max = 384

    def __eq__(self, other):
        return self.x == other.x and self.y == other.y

    def __ne__(self, other):
        return not self == other

    __hash__ = tuple.__hash__

    def __add__(self, other):
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        return Position(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar):
        return Position(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Position(self.x / scalar, self.y / scalar)

    @property
    def length(self):
        """The euclidean length of this position as a vector.
        """
        return np.hypot(self.x, self.y)

    def dot(self, other):
        return self.x * other.x + self.y * other.y

    def cross(self, other):
        """The z component of the cross product, also the determinant of the
        2x2 matrix ``[self, other]``.
        """
        return self.x * other.y - self.y * other.x

    def normalized(self):
        """This vector scaled to length 1.

        Returns
        -------
        normalized : Position
            The unit vector. The zero vector is returned unchanged.
        """
        length = self.length
        if length == 0:
            return self
        return self / length


def distance(start, end):
    return np.sqrt((start.x - end.x) ** 2 + (start.y - end.y) ** 2)
