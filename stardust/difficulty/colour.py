"""Colour pattern segmentation for osu!taiko difficulty.

Circles are grouped three ways:

1. :class:`MonoStreak`: a run of circles of the same colour.
2. :class:`AlternatingMonoPattern`: a run of mono streaks of equal length.
3. :class:`RepeatingHitPatterns`: alternating patterns which repeat every
   other pattern.

Parents own their children. Children hold a weak reference to their parent
so the hierarchy never forms an owning cycle.
"""
import logging
import weakref

from ..taiko import is_don
from ..utils import sigmoid

logger = logging.getLogger(__name__)


class _Child:
    """A pattern with a non-owning link to the pattern it belongs to.
    """
    def __init__(self):
        self.index = None
        self._parent = None

    @property
    def parent(self):
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, value):
        self._parent = weakref.ref(value)


class MonoStreak(_Child):
    """Consecutive circles of the same colour.

    Attributes
    ----------
    hit_objects : list[TaikoDifficultyHitObject]
        The circles in the streak.
    index : int
        The position of this streak in its parent.
    parent : AlternatingMonoPattern
        The pattern this streak belongs to.
    """
    def __init__(self):
        super().__init__()
        self.hit_objects = []

    def __repr__(self):
        colour = 'don' if self.is_don else 'kat'
        return f'<{type(self).__qualname__}: {self.run_length} {colour}>'

    @property
    def first_hit_object(self):
        return self.hit_objects[0]

    @property
    def last_hit_object(self):
        return self.hit_objects[-1]

    @property
    def is_don(self):
        return is_don(self.first_hit_object.base_object)

    @property
    def run_length(self):
        return len(self.hit_objects)


class AlternatingMonoPattern(_Child):
    """Consecutive mono streaks with the same run length, for example
    ``kkk ddd kkk`` but not ``kk ddd``.

    Attributes
    ----------
    mono_streaks : list[MonoStreak]
        The streaks in the pattern.
    index : int
        The position of this pattern in its parent.
    parent : RepeatingHitPatterns
        The group this pattern belongs to.
    """
    def __init__(self):
        super().__init__()
        self.mono_streaks = []

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {len(self.mono_streaks)} x'
            f' {self.mono_streaks[0].run_length}>'
        )

    @property
    def first_hit_object(self):
        return self.mono_streaks[0].first_hit_object

    def has_identical_mono_length(self, other):
        """Whether the first streaks of both patterns are the same length.
        """
        return other.mono_streaks[0].run_length == (
            self.mono_streaks[0].run_length
        )

    def is_repetition_of(self, other):
        """Whether ``other`` has the same shape and starting colour.
        """
        return (
            self.has_identical_mono_length(other) and
            len(other.mono_streaks) == len(self.mono_streaks) and
            other.mono_streaks[0].is_don == self.mono_streaks[0].is_don
        )


class RepeatingHitPatterns:
    """Alternating mono patterns grouped by repetition.

    Parameters
    ----------
    previous : RepeatingHitPatterns or None
        The group before this one.

    Attributes
    ----------
    alternating_mono_patterns : list[AlternatingMonoPattern]
        The patterns in the group.
    repetition_interval : int
        How many groups back the nearest group with the same shape is, or
        ``max_repetition_interval + 1`` when there is none close enough.
    """
    max_repetition_interval = 16

    def __init__(self, previous=None):
        self.alternating_mono_patterns = []
        self._previous = None if previous is None else weakref.ref(previous)
        self.repetition_interval = self.max_repetition_interval + 1

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}:'
            f' {len(self.alternating_mono_patterns)} patterns,'
            f' interval={self.repetition_interval}>'
        )

    @property
    def previous(self):
        if self._previous is None:
            return None
        return self._previous()

    @property
    def first_hit_object(self):
        return self.alternating_mono_patterns[0].first_hit_object

    def _is_repetition_of(self, other):
        if len(self.alternating_mono_patterns) != len(
                other.alternating_mono_patterns):
            return False

        pairs = zip(
            self.alternating_mono_patterns[:2],
            other.alternating_mono_patterns[:2],
        )
        return all(a.has_identical_mono_length(b) for a, b in pairs)

    def find_repetition_interval(self):
        """Set ``repetition_interval`` by looking back through the previous
        groups.
        """
        other = self.previous
        interval = 1
        while other is not None and interval < self.max_repetition_interval:
            if self._is_repetition_of(other):
                self.repetition_interval = interval
                return
            other = other.previous
            interval += 1

        self.repetition_interval = self.max_repetition_interval + 1


def encode_mono_streaks(notes):
    """Split circles into runs of the same colour.

    Parameters
    ----------
    notes : sequence[TaikoDifficultyHitObject]
        The circles in time order.

    Returns
    -------
    mono_streaks : list[MonoStreak]
        The streaks in time order.
    """
    mono_streaks = []
    current = None
    for note in notes:
        previous = note.previous_note(0)
        if (current is None or
                previous is None or
                is_don(note.base_object) != is_don(previous.base_object)):
            current = MonoStreak()
            mono_streaks.append(current)
        current.hit_objects.append(note)
    return mono_streaks


def encode_alternating_mono_patterns(mono_streaks):
    """Group consecutive mono streaks of the same length.
    """
    patterns = []
    current = None
    for ix, mono_streak in enumerate(mono_streaks):
        if (current is None or
                mono_streak.run_length != mono_streaks[ix - 1].run_length):
            current = AlternatingMonoPattern()
            patterns.append(current)
        current.mono_streaks.append(mono_streak)
    return patterns


def encode_repeating_hit_patterns(patterns):
    """Group alternating mono patterns which repeat every other pattern.

    Parameters
    ----------
    patterns : list[AlternatingMonoPattern]
        The patterns in time order.

    Returns
    -------
    repeating_hit_patterns : list[RepeatingHitPatterns]
        The groups in time order with their repetition intervals set.
    """
    def is_coupled(ix):
        return (
            ix < len(patterns) - 2 and
            patterns[ix].is_repetition_of(patterns[ix + 2])
        )

    groups = []
    current = None
    ix = 0
    while ix < len(patterns):
        current = RepeatingHitPatterns(current)
        if not is_coupled(ix):
            current.alternating_mono_patterns.append(patterns[ix])
        else:
            while is_coupled(ix):
                current.alternating_mono_patterns.append(patterns[ix])
                ix += 1
            current.alternating_mono_patterns.append(patterns[ix])
            current.alternating_mono_patterns.append(patterns[ix + 1])
            ix += 1

        groups.append(current)
        ix += 1

    for group in groups:
        group.find_repetition_interval()
    return groups


def process_and_assign(notes):
    """Segment circles into colour patterns and link every circle to the
    patterns it belongs to.

    Parameters
    ----------
    notes : sequence[TaikoDifficultyHitObject]
        The circles in time order.

    Returns
    -------
    repeating_hit_patterns : list[RepeatingHitPatterns]
        The top of the hierarchy. Callers must keep this alive while the
        patterns are in use.
    """
    groups = encode_repeating_hit_patterns(
        encode_alternating_mono_patterns(encode_mono_streaks(notes)),
    )

    for group in groups:
        for ix, pattern in enumerate(group.alternating_mono_patterns):
            pattern.parent = group
            pattern.index = ix
            for jx, mono_streak in enumerate(pattern.mono_streaks):
                mono_streak.parent = pattern
                mono_streak.index = jx
                for hit_object in mono_streak.hit_objects:
                    colour = hit_object.colour
                    colour.repeating_hit_patterns = group
                    colour.alternating_mono_pattern = pattern
                    colour.mono_streak = mono_streak

    logger.debug('segmented %d notes into %d repeating hit patterns',
                 len(notes), len(groups))
    return groups


def evaluate_mono_streak(mono_streak):
    return (
        sigmoid(mono_streak.index, 2, 2, 0.5, 1) *
        evaluate_alternating_mono_pattern(mono_streak.parent) *
        0.5
    )


def evaluate_alternating_mono_pattern(pattern):
    return (
        sigmoid(pattern.index, 2, 2, 0.5, 1) *
        evaluate_repeating_hit_patterns(pattern.parent)
    )


def evaluate_repeating_hit_patterns(group):
    return 2 * (1 - sigmoid(group.repetition_interval, 2, 2, 0.5, 1))


def evaluate_difficulty_of(hit_object):
    """The colour difficulty of one object.

    Each pattern adds its difficulty once, at its first object.

    Parameters
    ----------
    hit_object : TaikoDifficultyHitObject
        The object.

    Returns
    -------
    difficulty : float
        The difficulty. Objects which start no pattern are worth nothing.
    """
    colour = hit_object.colour
    difficulty = 0.0
    mono_streak = colour.mono_streak
    if (mono_streak is not None and
            mono_streak.first_hit_object is hit_object):
        difficulty += evaluate_mono_streak(mono_streak)

    pattern = colour.alternating_mono_pattern
    if pattern is not None and pattern.first_hit_object is hit_object:
        difficulty += evaluate_alternating_mono_pattern(pattern)

    group = colour.repeating_hit_patterns
    if group is not None and group.first_hit_object is hit_object:
        difficulty += evaluate_repeating_hit_patterns(group)

    return difficulty
