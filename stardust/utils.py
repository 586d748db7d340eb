import numpy as np

from .errors import InvalidBeatmapData


class lazyval:
    """Decorator to lazily compute and cache a value.
    """
    def __init__(self, fget):
        self._fget = fget
        self._name = None

    def __set_name__(self, owner, name):
        self._name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self

        # this is a data descriptor so the instance dict is never consulted
        # before ``__get__``
        cache = vars(instance)
        try:
            return cache[self._name]
        except KeyError:
            value = cache[self._name] = self._fget(instance)
            return value

    def __set__(self, instance, value):
        vars(instance)[self._name] = value


class no_default:
    """Sentinel type; this should not be instantiated.

    This type is used so functions can tell the difference between no argument
    passed and an explicit value passed even if ``None`` is a valid value.

    Notes
    -----
    This is implemented as a type to make functions which use this as a default
    argument serializable.
    """
    def __new__(cls):
        raise TypeError('cannot create instances of sentinel type')


def element_at(sequence, ix):
    """Lookup ``sequence[ix]`` treating anything out of bounds as missing.

    Parameters
    ----------
    sequence : sequence
        The sequence to index.
    ix : int
        The index to read. Negative indices are out of bounds; they do not
        wrap around.

    Returns
    -------
    element : any or None
        The element or ``None`` if ``ix`` is not in ``[0, len(sequence))``.
    """
    if 0 <= ix < len(sequence):
        return sequence[ix]
    return None


def sigmoid(value, center, width, middle, height):
    """A tanh shaped curve.

    Parameters
    ----------
    value : float
        The input.
    center : float
        The input where the curve is at ``middle``.
    width : float
        How far from ``center`` the curve takes to flatten out.
    middle : float
        The output at ``center``.
    height : float
        The distance between the two asymptotes.

    Returns
    -------
    y : float
        The value of the curve at ``value``.
    """
    return np.tanh(np.e * -(value - center) / width) * (height / 2) + middle


def norm(p, *values):
    """The ``p``-norm of some non-negative values.
    """
    return sum(v ** p for v in values) ** (1 / p)


def get(cs, ix, default=no_default):
    """Lookup ``cs[ix]`` with an optional default for missing fields.
    """
    try:
        return cs[ix]
    except IndexError:
        if default is no_default:
            raise
        return default


def parse_float(value, name):
    """Parse a field written with an invariant decimal point.

    Parameters
    ----------
    value : str
        The raw field.
    name : str
        The name of the field for error messages.

    Returns
    -------
    f : float
        The parsed value.

    Raises
    ------
    InvalidBeatmapData
        Raised when ``value`` is not a finite number.
    """
    try:
        f = float(value)
    except ValueError:
        raise InvalidBeatmapData(f'{name} should be a float, got {value!r}')

    if not np.isfinite(f):
        raise InvalidBeatmapData(f'{name} should be finite, got {value!r}')
    return f


def parse_int(value, name):
    """Parse an integer field.

    Raises
    ------
    InvalidBeatmapData
        Raised when ``value`` is not an integer.
    """
    try:
        return int(value)
    except ValueError:
        raise InvalidBeatmapData(f'{name} should be an int, got {value!r}')
