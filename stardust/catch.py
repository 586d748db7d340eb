"""Movement classification for osu!catch.

The catcher must reach every fruit, droplet and slider part in time. Each
pair of consecutive objects is classified by how the catcher has to move to
get from one to the other.
"""
from enum import Enum, unique
import logging

import numpy as np
from toolz import sliding_window

from .beatmap import Circle, Slider, Spinner
from .game_mode import Difficulty

logger = logging.getLogger(__name__)

#: The fraction of the catcher which can receive fruit.
allowed_catch_range = 0.8

#: The width of the catcher at 1x scale.
base_catcher_size = 106.75

#: Catcher speed in osu! pixels per millisecond.
base_dash_speed = 1.0
base_walk_speed = 0.5

#: A quarter of a frame of grace time.
quarter_frame_grace = 1000 / 60 / 4


@unique
class MovementType(Enum):
    """How the catcher moves to reach the next object.
    """
    walk = 'walk'
    dash = 'dash'
    hyperdash = 'hyperdash'


@unique
class NoteDirection(Enum):
    """The direction the catcher moves to reach the next object.
    """
    none = 'none'
    left = 'left'
    right = 'right'


@unique
class CatchNoteType(Enum):
    """What an object is in osu!catch terms.
    """
    circle = 'Fruit'
    head = 'Slider head'
    repeat = 'Slider repeat'
    tail = 'Slider tail'
    droplet = 'Droplet'
    spinner = 'Spinner'


class CatchHitObject:
    """An object the catcher interacts with.

    Parameters
    ----------
    time : float
        When the object must be caught in milliseconds.
    x : float
        The horizontal position of the object.
    note_type : CatchNoteType
        What kind of object this is.
    original : HitObject, optional
        The beatmap hit object this was derived from.

    Notes
    -----
    The movement attributes describe the move from this object to its
    ``target`` and are filled in by :func:`classify_movements`. The last
    object has no target.
    """
    def __init__(self, time, x, note_type, original=None):
        self.time = time
        self.x = x
        self.note_type = note_type
        self.original = original

        self.target = None
        self.time_to_target = None
        self.movement_type = MovementType.walk
        self.note_direction = NoteDirection.none
        self.distance_to_hyper = np.inf
        self.distance_to_dash = np.inf

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.note_type.value}'
            f' x={self.x:g}, {self.time:g}ms, {self.movement_type.value}>'
        )

    @property
    def name(self):
        """The human readable name of this object's type.
        """
        return self.note_type.value

    @property
    def is_slider(self):
        return self.note_type not in (CatchNoteType.circle,
                                      CatchNoteType.spinner)

    @property
    def is_dash(self):
        return self.movement_type == MovementType.dash

    @property
    def is_hyperdash(self):
        return self.movement_type == MovementType.hyperdash

    def is_higher_snapped(self, next, difficulty):
        """See :func:`stardust.catch.is_higher_snapped`.
        """
        return is_higher_snapped(self, next, difficulty)


def catcher_scale(circle_size):
    """The scale of the catcher for a circle size.
    """
    return 1 - 0.7 * (circle_size - 5) / 5


def catcher_width(circle_size):
    """The width of the catcher which can receive fruit in osu! pixels.

    Parameters
    ----------
    circle_size : float
        The ``CS`` attribute.

    Returns
    -------
    width : float
        The catching width.
    """
    return base_catcher_size * abs(catcher_scale(circle_size)) * (
        allowed_catch_range
    )


def _part(slider, time, note_type):
    return CatchHitObject(
        time,
        slider.unstacked_position_at(time).x,
        note_type,
        slider,
    )


def _juice_stream(slider):
    parts = []
    edge_times = slider.edge_times
    for n, time in enumerate(edge_times, start=1):
        note_type = (
            CatchNoteType.tail
            if n == len(edge_times) else
            CatchNoteType.repeat
        )
        parts.append(_part(slider, time, note_type))

    for time in slider.tick_times:
        parts.append(_part(slider, time, CatchNoteType.droplet))

    parts.sort(key=lambda part: part.time)
    return [
        CatchHitObject(
            slider.time,
            slider.unstacked_position.x,
            CatchNoteType.head,
            slider,
        ),
        *parts,
    ]


def catch_hit_objects(beatmap):
    """Build the classified osu!catch objects of a beatmap.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap to read.

    Returns
    -------
    catch_hit_objects : list[CatchHitObject]
        Fruits, bananas and juice streams in time order. Each juice stream's
        head is followed by its repeats, tail and droplets.
    """
    groups = []
    for hit_object in beatmap.hit_objects:
        if isinstance(hit_object, Circle):
            groups.append([CatchHitObject(
                hit_object.time,
                hit_object.unstacked_position.x,
                CatchNoteType.circle,
                hit_object,
            )])
        elif isinstance(hit_object, Slider):
            groups.append(_juice_stream(hit_object))
        elif isinstance(hit_object, Spinner):
            groups.append([CatchHitObject(
                hit_object.time,
                hit_object.unstacked_position.x,
                CatchNoteType.spinner,
                hit_object,
            )])

    groups.sort(key=lambda group: group[0].time)
    return classify_movements(
        [ob for group in groups for ob in group],
        beatmap.difficulty.circle_size,
    )


def classify_movements(objects, circle_size):
    """Classify the move from each object to the one after it.

    Parameters
    ----------
    objects : list[CatchHitObject]
        The objects in the order they are caught.
    circle_size : float
        The ``CS`` attribute, which sets the catcher width.

    Returns
    -------
    objects : list[CatchHitObject]
        ``objects``, with the movement attributes filled in.

    Notes
    -----
    A move is a hyperdash when the catcher cannot dash there in time. The
    distance the catcher needs to cover shrinks by the margin left over from
    the previous move when both moves go the same way. Bananas break the
    chain: moves to or from them are walks.
    """
    half_catcher_width = catcher_width(circle_size) * 0.5 / allowed_catch_range
    last_direction = NoteDirection.none
    dash_range = half_catcher_width
    hyperdashes = 0

    for current, next in sliding_window(2, objects):
        current.target = next
        current.time_to_target = next.time - current.time - quarter_frame_grace

        if (current.note_type == CatchNoteType.spinner or
                next.note_type == CatchNoteType.spinner):
            current.movement_type = MovementType.walk
            current.note_direction = NoteDirection.none
            current.distance_to_hyper = np.inf
            current.distance_to_dash = np.inf
            dash_range = half_catcher_width
            last_direction = NoteDirection.none
            continue

        # a move with no horizontal distance counts as going left so the next
        # left move keeps its margin
        if next.x > current.x:
            direction = NoteDirection.right
        else:
            direction = NoteDirection.left

        distance = abs(next.x - current.x)
        if direction == last_direction:
            distance_to_next = distance - dash_range
        else:
            distance_to_next = distance - half_catcher_width

        time_to_next = current.time_to_target
        current.distance_to_hyper = (
            time_to_next * base_dash_speed - distance_to_next
        )
        current.distance_to_dash = (
            time_to_next * base_walk_speed - distance_to_next
        )

        if current.distance_to_hyper < 0:
            current.movement_type = MovementType.hyperdash
            hyperdashes += 1
            dash_range = half_catcher_width
        else:
            if current.distance_to_dash < 0:
                current.movement_type = MovementType.dash
            else:
                current.movement_type = MovementType.walk
            dash_range = np.clip(
                current.distance_to_hyper,
                0,
                half_catcher_width,
            )

        current.note_direction = direction
        last_direction = direction

    logger.debug('classified %d catch objects, %d hyperdashes',
                 len(objects), hyperdashes)
    return objects


#: The basic snap in milliseconds by movement and difficulty. Higher snaps
#: are at least half of this.
_basic_snaps = {
    MovementType.dash: {
        Difficulty.normal: 250,
        Difficulty.hard: 125,
        Difficulty.insane: 125,
    },
    MovementType.hyperdash: {
        Difficulty.hard: 250,
        Difficulty.insane: 125,
    },
}


def basic_snap(movement_type, difficulty):
    """The basic snap for a movement in a difficulty.

    Parameters
    ----------
    movement_type : MovementType
        The movement. Walks use the same snaps as dashes.
    difficulty : Difficulty
        The difficulty tier.

    Returns
    -------
    ms : int or None
        The basic snap in milliseconds or ``None`` if the tier has no
        snapping rules.
    """
    if movement_type == MovementType.walk:
        movement_type = MovementType.dash

    snaps = _basic_snaps[movement_type]
    if difficulty not in snaps:
        # hyperdashes in tiers without them follow the dash rules
        snaps = _basic_snaps[MovementType.dash]
    return snaps.get(difficulty)


def is_higher_snapped(current, next, difficulty):
    """Check whether the move from ``current`` to ``next`` is snapped finer
    than the basic snap for its movement.

    Parameters
    ----------
    current : CatchHitObject
        The object being moved from; its ``movement_type`` is used.
    next : CatchHitObject
        The object being moved to.
    difficulty : Difficulty
        The difficulty tier to judge by.

    Returns
    -------
    higher_snapped : bool
        True when half the basic snap is at most the time between the
        objects and the time is less than the basic snap.

    Notes
    -----
    Easy, Expert and Ultra have no higher snap rules and are never higher
    snapped.
    """
    basic = basic_snap(current.movement_type, difficulty)
    if basic is None:
        return False

    ms = abs(next.time - current.time)
    return basic // 2 <= ms < basic
