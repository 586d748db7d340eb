from itertools import accumulate

from hypothesis.strategies import (
    booleans,
    composite,
    floats as _floats,
    integers,
    just,
    lists,
    one_of,
    sampled_from,
    text,
)

from stardust import Beatmap, GameMode


def floats(*args, **kwargs):
    return _floats(*args, allow_nan=False, allow_infinity=False, **kwargs)


def _format(value):
    # fields are written with an invariant decimal point
    return repr(float(value)) if isinstance(value, float) else str(value)


@composite
def timing_point_fields(draw, *, offset=None, uninherited=None):
    """Tokenized ``[TimingPoints]`` lines.
    """
    if offset is None:
        offset = draw(integers(0, 600000))
    if uninherited is None:
        uninherited = draw(booleans())

    if uninherited:
        ms_per_beat = draw(floats(100, 2000))
    else:
        ms_per_beat = draw(floats(-1000, -10))

    return [
        _format(offset),
        _format(ms_per_beat),
        _format(draw(integers(1, 7))),
        _format(draw(integers(0, 3))),
        _format(draw(integers(0, 10))),
        _format(draw(integers(0, 100))),
        '1' if uninherited else '0',
        _format(draw(sampled_from([0, 1, 8, 9]))),
    ]


@composite
def positions(draw):
    return draw(integers(0, 512)), draw(integers(0, 384))


@composite
def circle_fields(draw, time, *, hitsounds=integers(0, 15)):
    x, y = draw(positions())
    type_ = 1 | draw(sampled_from([0, 4, 4 | 16]))
    return [
        str(x),
        str(y),
        str(time),
        str(type_),
        str(draw(hitsounds)),
        '0:0:0:0:',
    ]


@composite
def slider_fields(draw, time):
    x, y = draw(positions())
    kind = draw(sampled_from(['L', 'B', 'P', 'C']))
    points = draw(lists(positions(), min_size=1, max_size=4))
    return [
        str(x),
        str(y),
        str(time),
        str(2 | draw(sampled_from([0, 4]))),
        str(draw(integers(0, 15))),
        '|'.join([kind, *(f'{px}:{py}' for px, py in points)]),
        str(draw(integers(1, 3))),
        _format(draw(floats(10, 300))),
    ]


@composite
def spinner_fields(draw, time):
    return [
        '256',
        '192',
        str(time),
        '12',
        str(draw(integers(0, 15))),
        str(time + draw(integers(0, 3000))),
        '0:0:0:0:',
    ]


def hit_object_fields(time, mode=GameMode.standard, *, reasonable=False):
    """Tokenized ``[HitObjects]`` lines for one mode.

    Parameters
    ----------
    time : int
        The time of the object.
    mode : GameMode, optional
        Taiko maps get coloured circles.
    reasonable : bool, optional
        Only generate circles.
    """
    if mode == GameMode.taiko:
        circles = circle_fields(time, hitsounds=sampled_from([0, 2, 4, 8, 12]))
    else:
        circles = circle_fields(time)

    if reasonable:
        return circles

    return one_of(circles, circles, slider_fields(time), spinner_fields(time))


@composite
def times(draw, *, min_size=0, max_size=64, max_gap=600):
    """Increasing object times in milliseconds.
    """
    gaps = draw(lists(
        integers(1, max_gap),
        min_size=min_size,
        max_size=max_size,
    ))
    start = draw(integers(0, 2000))
    return [start + gap for gap in accumulate(gaps)]


@composite
def sections(draw,
             *,
             mode=None,
             reasonable=False,
             min_objects=0,
             max_objects=64):
    """Tokenized beatmap sections accepted by
    :meth:`stardust.beatmap.Beatmap.from_sections`.
    """
    if mode is None:
        mode = draw(sampled_from([
            GameMode.standard,
            GameMode.taiko,
            GameMode.catch,
        ]))

    timing_points = [draw(timing_point_fields(offset=0, uninherited=True))]
    timing_points.extend(draw(lists(timing_point_fields(), max_size=4)))

    hit_objects = [
        draw(hit_object_fields(time, mode, reasonable=reasonable))
        for time in draw(times(min_size=min_objects, max_size=max_objects))
    ]

    return {
        'General': {
            'Mode': str(int(mode)),
            'StackLeniency': _format(draw(floats(0.2, 1))),
        },
        'Metadata': {
            'Title': draw(text('abcdefghijklmnopqrstuvwxyz ', max_size=16)),
            'Artist': draw(text('abcdefghijklmnopqrstuvwxyz ', max_size=16)),
            'Creator': draw(text('abcdefghijklmnopqrstuvwxyz', max_size=8)),
            'Version': draw(one_of(
                just('Normal'),
                just('Oni'),
                text('abcdefghijklmnopqrstuvwxyz', max_size=8),
            )),
        },
        'Difficulty': {
            'HPDrainRate': _format(draw(floats(0, 10))),
            'CircleSize': _format(draw(floats(2, 7))),
            'OverallDifficulty': _format(draw(floats(0, 10))),
            'ApproachRate': _format(draw(floats(0, 10))),
            'SliderMultiplier': _format(draw(floats(0.4, 3.6))),
            'SliderTickRate': _format(draw(sampled_from([0.5, 1.0, 2.0]))),
        },
        'TimingPoints': timing_points,
        'HitObjects': hit_objects,
    }


@composite
def beatmaps(draw, **kwargs):
    """Beatmaps built from :func:`sections`.
    """
    return Beatmap.from_sections(draw(sections(**kwargs)))
