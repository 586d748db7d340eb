"""Small built-in beatmaps in tokenized form.

Each example is a mapping of section name to its contents in the form
accepted by :meth:`stardust.beatmap.Beatmap.from_sections`.
"""
import copy

from stardust import Beatmap


def _metadata(version):
    return {
        'Title': 'Stardust',
        'Artist': 'stardust',
        'Creator': 'stardust',
        'Version': version,
    }


# 120 bpm, doubled slider velocity and kiai from 8 seconds
_timing_points = [
    ['0', '500', '4', '2', '0', '60', '1', '0'],
    ['8000', '-50', '4', '2', '0', '60', '0', '1'],
]

_standard_hit_objects = [
    ['64', '192', '0', '5', '0', '0:0:0:0:'],
    ['192', '192', '500', '1', '2', '0:0:0:0:'],
    ['320', '192', '1000', '2', '0', 'L|448:192', '1', '140'],
    ['448', '96', '2000', '1', '0', '0:0:0:0:'],
    [
        '256', '96', '2500', '6', '0', 'P|192:32|128:96', '2', '120',
        '2|0|8', '0:0|0:0|0:0', '0:0:0:0:',
    ],
    ['128', '288', '4000', '1', '8', '0:0:0:0:'],
    ['256', '288', '4250', '1', '0', '0:0:0:0:'],
    ['384', '288', '4500', '1', '0', '0:0:0:0:'],
    ['256', '192', '5000', '12', '0', '7000', '0:0:0:0:'],
    # a stack of three
    ['100', '100', '7500', '5', '0', '0:0:0:0:'],
    ['100', '100', '7600', '1', '0', '0:0:0:0:'],
    ['100', '100', '7700', '1', '0', '0:0:0:0:'],
    ['400', '300', '8000', '2', '0', 'B|450:250|450:250|500:300', '1', '210'],
    ['200', '300', '9000', '1', '4', '0:0:0:0:'],
]

_standard_versions = {
    'Normal': _standard_hit_objects,
    'Single': _standard_hit_objects[:1],
    'Empty': [],
}


def _standard(version):
    return {
        'General': {'Mode': '0', 'StackLeniency': '0.7'},
        'Metadata': _metadata(version),
        'Difficulty': {
            'HPDrainRate': '5',
            'CircleSize': '4',
            'OverallDifficulty': '6',
            'ApproachRate': '7',
            'SliderMultiplier': '1.4',
            'SliderTickRate': '1',
        },
        'TimingPoints': _timing_points,
        'HitObjects': _standard_versions[version],
    }


def _taiko_note(time, pattern):
    hitsound = {'d': '0', 'k': '2', 'D': '4', 'K': '12'}[pattern]
    return ['256', '192', str(time), '1', hitsound, '0:0:0:0:']


def _taiko_hit_objects():
    hit_objects = []
    time = 0
    # 1/4 notes with a break after each pattern
    for pattern in ('ddkddkdd', 'kkddkkdd', 'dkdkdkdk', 'dddkkkD'):
        for note in pattern:
            hit_objects.append(_taiko_note(time, note))
            time += 125
        time += 250

    # 1/2 notes
    for note in 'dkkdkkdK':
        hit_objects.append(_taiko_note(time, note))
        time += 250

    hit_objects.append(
        ['256', '192', str(time), '2', '0', 'L|356:192', '1', '140'],
    )
    time += 1000
    hit_objects.append(['256', '192', str(time), '12', '0', str(time + 1000)])
    time += 1500
    for note in 'ddkkddkk':
        hit_objects.append(_taiko_note(time, note))
        time += 125
    return hit_objects


def _taiko(version):
    return {
        'General': {'Mode': '1'},
        'Metadata': _metadata(version),
        'Difficulty': {
            'HPDrainRate': '6',
            'CircleSize': '5',
            'OverallDifficulty': '5',
            'SliderMultiplier': '1.4',
            'SliderTickRate': '1',
        },
        'TimingPoints': _timing_points,
        'HitObjects': _taiko_hit_objects(),
    }


_catch_hit_objects = [
    ['32', '192', '0', '5', '0', '0:0:0:0:'],
    # across the screen in 1/2 beat is a hyperdash
    ['480', '192', '250', '1', '0', '0:0:0:0:'],
    ['400', '192', '500', '1', '0', '0:0:0:0:'],
    ['100', '192', '1000', '6', '0', 'L|300:192', '1', '200'],
    ['420', '192', '2000', '1', '0', '0:0:0:0:'],
    ['256', '192', '3000', '12', '0', '4000', '0:0:0:0:'],
    ['256', '192', '4500', '5', '0', '0:0:0:0:'],
]


def _catch(version):
    return {
        'General': {'Mode': '2'},
        'Metadata': _metadata(version),
        'Difficulty': {
            'HPDrainRate': '5',
            'CircleSize': '4',
            'OverallDifficulty': '8',
            'ApproachRate': '8',
            'SliderMultiplier': '1.4',
            'SliderTickRate': '1',
        },
        'TimingPoints': _timing_points,
        'HitObjects': _catch_hit_objects,
    }


_examples = {
    'standard': (_standard, frozenset(_standard_versions)),
    'taiko': (_taiko, frozenset({'Oni'})),
    'catch': (_catch, frozenset({'Salad'})),
}


def example_sections(mode, version):
    """Load the tokenized sections of one of the example beatmaps.

    Parameters
    ----------
    mode : {'standard', 'taiko', 'catch'}
        The example to load.
    version : str
        The difficulty name.

    Returns
    -------
    sections : dict
        A fresh copy of the sections which the caller may modify.
    """
    try:
        build, versions = _examples[mode]
    except KeyError:
        raise ValueError(
            f'unknown example {mode}, options: {set(_examples)}',
        )

    if version not in versions:
        raise ValueError(
            f'unknown version {version}, options: {set(versions)}'
        )

    return copy.deepcopy(build(version))


def example_beatmap(mode, version):
    """Load one of the example beatmaps.

    Parameters
    ----------
    mode : {'standard', 'taiko', 'catch'}
        The example to load.
    version : str
        The difficulty name.
    """
    return Beatmap.from_sections(example_sections(mode, version))


def standard(version='Normal'):
    """Load a version of the osu!standard example.

    Parameters
    ----------
    version : {'Normal', 'Single', 'Empty'}
        The version to load. ``Single`` has one circle and ``Empty`` has no
        hit objects.

    Returns
    -------
    standard : Beatmap
        The beatmap object.
    """
    return example_beatmap('standard', version)


def taiko(version='Oni'):
    """Load the osu!taiko example.
    """
    return example_beatmap('taiko', version)


def catch(version='Salad'):
    """Load the osu!catch example.
    """
    return example_beatmap('catch', version)
