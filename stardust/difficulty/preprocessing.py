from ..utils import element_at


class DifficultyHitObject:
    """A hit object wrapped with the timing information the skills need.

    Parameters
    ----------
    hit_object : HitObject
        The object being wrapped.
    last_object : HitObject
        The hit object right before ``hit_object`` in the beatmap.

    Attributes
    ----------
    index : int
        The position of this object in its calculation's sequence.
    delta_time : float
        Milliseconds since ``last_object`` started.
    start_time, end_time : float
        The start and end of ``hit_object``.

    Notes
    -----
    Objects are built fresh for each calculation and are only navigable
    with :meth:`previous` and :meth:`next` once :func:`freeze` has bound them
    to their sequence.
    """
    def __init__(self, hit_object, last_object):
        self.base_object = hit_object
        self.last_object = last_object
        self.delta_time = hit_object.time - last_object.time
        self.start_time = hit_object.time
        self.end_time = hit_object.end_time
        self.index = None
        self._objects = ()

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: #{self.index},'
            f' {self.start_time:g}ms>'
        )

    def previous(self, backwards_index):
        """The object ``backwards_index + 1`` places before this one.

        Returns
        -------
        difficulty_hit_object : DifficultyHitObject or None
            The object or ``None`` before the start of the sequence.
        """
        return element_at(self._objects, self.index - (backwards_index + 1))

    def next(self, forwards_index):
        """The object ``forwards_index + 1`` places after this one.

        Returns
        -------
        difficulty_hit_object : DifficultyHitObject or None
            The object or ``None`` after the end of the sequence.
        """
        return element_at(self._objects, self.index + forwards_index + 1)


def freeze(difficulty_hit_objects):
    """Bind difficulty objects to an immutable sequence of themselves.

    Parameters
    ----------
    difficulty_hit_objects : iterable[DifficultyHitObject]
        The objects in processing order.

    Returns
    -------
    objects : tuple[DifficultyHitObject]
        The objects, each knowing its index in the tuple.
    """
    objects = tuple(difficulty_hit_objects)
    for ix, ob in enumerate(objects):
        ob.index = ix
        ob._objects = objects
    return objects
