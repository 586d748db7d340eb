"""Colour and pattern helpers for osu!taiko hit objects.

A taiko note is a don (centre) unless it has a whistle or a clap, which make
it a kat (rim). Patterns are runs of circles with similar spacing.
"""
from .beatmap import Circle
from .bit_enum import HitSound


def is_don(hit_object):
    """Whether ``hit_object`` is hit in the centre.
    """
    return not (
        hit_object.has_hitsound(HitSound.whistle) or
        hit_object.has_hitsound(HitSound.clap)
    )


def is_kat(hit_object):
    """Whether ``hit_object`` is hit on the rim.
    """
    return not is_don(hit_object)


def is_finisher(hit_object):
    """Whether ``hit_object`` is a big note.
    """
    return hit_object.has_hitsound(HitSound.finish)


def is_mono(hit_object):
    """Whether ``hit_object`` has the same colour as the object before it.

    The first object is never mono.
    """
    previous = hit_object.prev()
    if previous is None:
        return False
    return is_don(previous) == is_don(hit_object)


def _gaps(hit_object):
    """The circles around ``hit_object``, or ``None`` where a neighbour is
    missing or is not a circle.
    """
    previous = hit_object.prev(skip_concurrent=True)
    next = hit_object.next(skip_concurrent=True)
    if not isinstance(previous, Circle):
        previous = None
    if not isinstance(next, Circle):
        next = None
    return previous, next


def is_at_beginning_of_pattern(hit_object):
    """Whether ``hit_object`` starts a pattern.

    Parameters
    ----------
    hit_object : HitObject
        The object to check.

    Returns
    -------
    beginning : bool
        True when there is no circle right before the object, or when there
        are circles on both sides and the gap after it is shorter than the
        gap before it.
    """
    previous, next = _gaps(hit_object)
    if previous is None:
        return True
    if next is None:
        return False

    gap_before = hit_object.time - previous.time
    gap_after = next.time - hit_object.time
    return gap_after < gap_before


def is_at_end_of_pattern(hit_object):
    """Whether ``hit_object`` ends a pattern.

    This mirrors :func:`is_at_beginning_of_pattern`.
    """
    previous, next = _gaps(hit_object)
    if next is None:
        return True
    if previous is None:
        return False

    gap_before = hit_object.time - previous.time
    gap_after = next.time - hit_object.time
    return gap_before < gap_after


def is_in_middle_of_pattern(hit_object):
    return (
        not is_at_beginning_of_pattern(hit_object) and
        not is_at_end_of_pattern(hit_object)
    )


def is_not_in_pattern(hit_object):
    """Whether ``hit_object`` stands alone, both beginning and ending a
    pattern.
    """
    return (
        is_at_beginning_of_pattern(hit_object) and
        is_at_end_of_pattern(hit_object)
    )
