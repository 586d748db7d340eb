from math import isclose, log

import pytest

import stardust.example_data
from stardust import (
    Beatmap,
    Circle,
    GameMode,
    GeneralSettings,
    Position,
    UninheritedLine,
)
from stardust.difficulty import (
    SkillKind,
    TaikoDifficultyAttributes,
    TaikoDifficultyCalculator,
)
from stardust.difficulty.colour import evaluate_difficulty_of
from stardust.difficulty.taiko import (
    Peaks,
    closest_rhythm,
    common_rhythms,
    evaluate_stamina,
)
from stardust.taiko import is_don


@pytest.fixture
def calculator():
    return TaikoDifficultyCalculator(stardust.example_data.taiko())


@pytest.fixture
def objects(calculator):
    return calculator.create_difficulty_hit_objects()


def _taiko(times, hitsound=0):
    return Beatmap(
        general=GeneralSettings(mode=GameMode.taiko),
        timing_lines=[UninheritedLine(0, 500)],
        hit_objects=[
            Circle(Position(256, 192), time, hitsound) for time in times
        ],
    )


@pytest.mark.parametrize('delta_time,previous_length,expected', [
    (100, 100, 0),
    (200, 100, 1),
    (50, 100, 2),
    (300, 100, 3),
    (150, 100, 5),
    (75, 100, 8),
    # no previous gap
    (100, 0, 0),
])
def test_closest_rhythm(delta_time, previous_length, expected):
    rhythm = closest_rhythm(delta_time, previous_length)
    assert rhythm is common_rhythms[expected]


def test_mono_and_note_links(objects):
    notes = [ob for ob in objects if isinstance(ob.base_object, Circle)]
    for ix, note in enumerate(notes):
        assert note.note_index == ix
        if ix:
            assert note.previous_note(0) is notes[ix - 1]
        else:
            assert note.previous_note(0) is None

        previous_mono = note.previous_mono(0)
        if previous_mono is not None:
            assert is_don(previous_mono.base_object) == is_don(
                note.base_object,
            )
            assert previous_mono.next_mono(0) is note

    assert notes[-1].next_note(0) is None

    others = [ob for ob in objects if not isinstance(ob.base_object, Circle)]
    assert len(others) == 2
    for ob in others:
        assert ob.note_index is None
        assert ob.previous_note(0) is None
        assert ob.previous_mono(0) is None
        assert ob.colour.mono_streak is None


def test_mono_streak_run_lengths(calculator, objects):
    circles = sum(isinstance(ob.base_object, Circle) for ob in objects)
    mono_streaks = [
        mono_streak
        for group in calculator.colour_patterns
        for pattern in group.alternating_mono_patterns
        for mono_streak in pattern.mono_streaks
    ]
    assert sum(s.run_length for s in mono_streaks) == circles

    for mono_streak in mono_streaks:
        colours = {is_don(ob.base_object) for ob in mono_streak.hit_objects}
        assert colours == {mono_streak.is_don}

    for a, b in zip(mono_streaks, mono_streaks[1:]):
        assert a.is_don != b.is_don


def test_pattern_hierarchy(calculator, objects):
    groups = calculator.colour_patterns
    assert groups
    assert groups[0].previous is None
    for previous, group in zip(groups, groups[1:]):
        assert group.previous is previous

    for group in groups:
        assert 1 <= group.repetition_interval <= 17
        for ix, pattern in enumerate(group.alternating_mono_patterns):
            assert pattern.parent is group
            assert pattern.index == ix
            lengths = {s.run_length for s in pattern.mono_streaks}
            assert len(lengths) == 1
            for jx, mono_streak in enumerate(pattern.mono_streaks):
                assert mono_streak.parent is pattern
                assert mono_streak.index == jx
                for ob in mono_streak.hit_objects:
                    assert ob.colour.mono_streak is mono_streak
                    assert ob.colour.alternating_mono_pattern is pattern
                    assert ob.colour.repeating_hit_patterns is group


def test_colour_difficulty_only_at_pattern_starts(objects):
    for ob in objects:
        mono_streak = ob.colour.mono_streak
        if mono_streak is None or mono_streak.first_hit_object is not ob:
            assert evaluate_difficulty_of(ob) == 0
        else:
            assert evaluate_difficulty_of(ob) >= 0

    first_note = next(ob for ob in objects if ob.note_index == 0)
    assert evaluate_difficulty_of(first_note) > 0


def test_stamina():
    calculator = TaikoDifficultyCalculator(_taiko(range(0, 600, 100)))
    objects = calculator.create_difficulty_hit_objects()
    # a hand hits every other don, so the gap is to the don two back
    assert evaluate_stamina(objects[0]) == 0
    assert evaluate_stamina(objects[1]) == 0
    assert isclose(evaluate_stamina(objects[2]), 0.5 + 30 / 200)


def test_calculate(calculator):
    attributes = calculator.calculate()
    assert isinstance(attributes, TaikoDifficultyAttributes)
    assert attributes.star_rating > 0
    assert attributes.colour_rating > 0
    assert attributes.stamina_rating > 0
    assert attributes.rhythm_rating >= 0
    assert isclose(
        attributes.star_rating,
        TaikoDifficultyCalculator.rescale(attributes.peak_rating * 1.4),
    )
    assert attributes.great_hit_window == 35
    assert attributes.max_combo == 47

    peaks = attributes.strain_peaks
    assert set(peaks) == {
        SkillKind.peaks,
        SkillKind.rhythm,
        SkillKind.colour,
        SkillKind.stamina,
    }
    assert len({len(p) for p in peaks.values()}) == 1


def test_peaks_delegate_strain(calculator):
    objects = calculator.create_difficulty_hit_objects()
    peaks = Peaks()
    peaks.process(objects[0])
    assert peaks.stamina.current_strain == 0
    assert peaks.get_current_strain_peaks() == [peaks.difficulty_value()]

    with pytest.raises(TypeError):
        peaks.strain_value_at(objects[1])

    with pytest.raises(TypeError):
        peaks.calculate_initial_strain(400, objects[1])


def test_rescale():
    assert TaikoDifficultyCalculator.rescale(0) == 0
    assert TaikoDifficultyCalculator.rescale(-1) == -1
    assert isclose(TaikoDifficultyCalculator.rescale(8), 10.43 * log(2))


def test_too_few_objects():
    attributes = _taiko([0, 100]).calculate_difficulty()
    assert attributes.star_rating == 0
    assert attributes.max_combo == 2


def test_uniform_rhythm_has_no_rhythm_difficulty():
    attributes = _taiko(range(0, 2000, 100)).calculate_difficulty()
    assert attributes.rhythm_rating == 0
    assert attributes.stamina_rating > 0
