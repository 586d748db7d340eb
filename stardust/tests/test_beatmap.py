from math import isclose

import pytest

import stardust.example_data
from stardust import (
    Beatmap,
    Circle,
    Difficulty,
    GameMode,
    HitObject,
    HoldNote,
    InvalidBeatmapData,
    Position,
    Slider,
    Spinner,
    UninheritedLine,
)
from stardust.example_data import example_sections


@pytest.fixture
def beatmap():
    return stardust.example_data.standard()


def test_display_name(beatmap):
    assert beatmap.display_name == 'stardust - Stardust [Normal]'
    assert beatmap.mode == GameMode.standard
    assert beatmap.format_version == 14


def test_settings(beatmap):
    assert beatmap.general.stack_leniency == 0.7
    assert beatmap.difficulty.circle_size == 4
    assert beatmap.difficulty.approach_rate == 7
    assert beatmap.difficulty.slider_multiplier == 1.4


def test_hit_object_types(beatmap):
    assert [type(ob) for ob in beatmap.hit_objects] == [
        Circle,
        Circle,
        Slider,
        Circle,
        Slider,
        Circle,
        Circle,
        Circle,
        Spinner,
        Circle,
        Circle,
        Circle,
        Slider,
        Circle,
    ]


def test_hit_objects_sorted_and_indexed(beatmap):
    times = [ob.time for ob in beatmap.hit_objects]
    assert times == sorted(times)
    for ix, ob in enumerate(beatmap.hit_objects):
        assert ob.index == ix
        assert ob.beatmap is beatmap


def test_new_combo(beatmap):
    first = beatmap.hit_objects[0]
    assert first.new_combo
    assert first.combo_skip == 0
    assert not beatmap.hit_objects[1].new_combo


def test_end_time(beatmap):
    circle = beatmap.hit_objects[0]
    assert circle.end_time == circle.time

    spinner = beatmap.hit_objects[8]
    assert spinner.time == 5000
    assert spinner.end_time == 7000


def test_slider(beatmap):
    slider = beatmap.hit_objects[2]
    assert slider.time == 1000
    assert slider.repeat == 1
    assert slider.length == 140
    assert slider.velocity == 1
    # one beat at 120 bpm
    assert isclose(slider.num_beats, 1)
    assert isclose(slider.end_time, 1500)
    assert slider.tick_times == []
    assert slider.ticks == 2
    end = slider.unstacked_end_position
    # the path is stretched past its last control point
    assert isclose(end.x, 460)
    assert isclose(end.y, 192)


def test_repeating_slider(beatmap):
    slider = beatmap.hit_objects[4]
    assert slider.repeat == 2
    assert isclose(slider.curve_duration, 3000 / 7)
    assert isclose(slider.end_time, 2500 + 6000 / 7)
    assert slider.edge_sounds == [2, 0, 8]
    assert slider.edge_additions == ['0:0', '0:0', '0:0']
    assert slider.ticks == 3
    # an even number of spans ends at the head
    assert slider.unstacked_end_position == slider.unstacked_position


def test_slider_velocity(beatmap):
    slider = beatmap.hit_objects[12]
    assert slider.time == 8000
    assert slider.velocity == 2
    assert isclose(slider.end_time, 8375)


def test_slider_ticks():
    sections = example_sections('standard', 'Normal')
    sections['HitObjects'] = [
        ['0', '0', '0', '2', '0', 'L|400:0', '1', '350'],
    ]
    slider, = Beatmap.from_sections(sections).hit_objects
    # 2.5 beats
    assert isclose(slider.end_time, 1250)
    assert slider.tick_times == [500, 1000]
    assert slider.ticks == 4


def test_repeating_slider_ticks_are_mirrored():
    sections = example_sections('standard', 'Normal')
    sections['HitObjects'] = [
        ['0', '0', '0', '2', '0', 'L|400:0', '2', '210'],
    ]
    slider, = Beatmap.from_sections(sections).hit_objects
    assert isclose(slider.curve_duration, 750)
    assert slider.tick_times == [500, 1000]
    assert slider.edge_times == [750, 1500]


def test_slider_path(beatmap):
    slider = beatmap.hit_objects[2]
    assert slider.path_progress(1000) == 0
    assert slider.path_progress(1250) == 0.5
    assert slider.path_progress(5000) == 1
    assert isclose(slider.unstacked_position_at(1250).x, 390)

    slider = beatmap.hit_objects[4]
    duration = slider.curve_duration
    assert isclose(slider.path_progress(2500 + duration * 1.25), 0.75)


def test_stacking(beatmap):
    stack = [ob for ob in beatmap.hit_objects if 7500 <= ob.time < 8000]
    assert [ob.stack_index for ob in stack] == [2, 1, 0]

    others = [ob for ob in beatmap.hit_objects if ob not in stack]
    assert all(ob.stack_index == 0 for ob in others)


def test_stacked_position(beatmap):
    bottom = beatmap.hit_objects[9]
    assert bottom.unstacked_position == Position(100, 100)
    # circle radius at CS4 is 36.48
    offset = 2 * 36.48 * -0.1
    assert isclose(bottom.position.x, 100 + offset)
    assert isclose(bottom.position.y, 100 + offset)

    top = beatmap.hit_objects[11]
    assert top.position == top.unstacked_position


def test_stack_offset_uses_current_circle_size(beatmap):
    bottom = beatmap.hit_objects[9]
    before = bottom.position
    beatmap.difficulty.circle_size = 2
    after = bottom.position
    assert after.x < before.x
    assert isclose(bottom.stack_offset(5).x, 2 * 32 * -0.1)


def test_no_stacking_outside_standard():
    sections = example_sections('standard', 'Normal')
    sections['General']['Mode'] = '2'
    beatmap = Beatmap.from_sections(sections)
    assert all(ob.stack_index == 0 for ob in beatmap.hit_objects)


def test_old_stacking():
    sections = example_sections('standard', 'Normal')
    beatmap = Beatmap.from_sections(sections, format_version=5)
    stack = [ob for ob in beatmap.hit_objects if 7500 <= ob.time < 8000]
    assert [ob.stack_index for ob in stack] == [2, 1, 0]


def test_prev_next(beatmap):
    first, second = beatmap.hit_objects[:2]
    assert first.prev() is None
    assert first.next() is second
    assert second.prev() is first
    assert beatmap.hit_objects[-1].next() is None

    slider = beatmap.hit_objects[2]
    assert slider.prev(circles_only=True) is second
    assert slider.next(circles_only=True) is beatmap.hit_objects[3]
    assert second.next(circles_only=True) is beatmap.hit_objects[3]


def test_prev_next_skip_concurrent():
    circles = [
        Circle(Position(0, 0), 0),
        Circle(Position(0, 0), 100),
        Circle(Position(50, 0), 100),
        Circle(Position(0, 0), 200),
    ]
    beatmap = Beatmap(
        timing_lines=[UninheritedLine(0, 500)],
        hit_objects=circles,
    )
    a, b, c, d = beatmap.hit_objects
    assert c.prev() is b
    assert c.prev(skip_concurrent=True) is a
    assert b.next(skip_concurrent=True) is d


def test_unbound_hit_object():
    circle = Circle(Position(1, 2), 0)
    assert circle.prev() is None
    assert circle.next() is None
    assert circle.position == Position(1, 2)


def test_timing_lines(beatmap):
    first, second = beatmap.timing_lines
    assert first.uninherited
    assert not second.uninherited
    assert second.kiai

    assert beatmap.timing_line_at(-1) is None
    assert beatmap.timing_line_at(0) is first
    assert beatmap.timing_line_at(7999) is first
    assert beatmap.timing_line_at(8000) is second
    # inherited lines do not change the tempo
    assert beatmap.uninherited_line_at(9000) is first


def test_tempo_queries(beatmap):
    assert beatmap.bpm_at(0) == 120
    assert beatmap.bpm_at(9000) == 120
    assert beatmap.scaled_bpm_at(9000) == pytest.approx(0.5)
    assert beatmap.slider_velocity_at(0) == 1
    assert beatmap.slider_velocity_at(8000) == 2
    assert beatmap.bpm_min == beatmap.bpm_max == 120


def test_tempo_before_first_uninherited_line():
    sections = example_sections('standard', 'Normal')
    sections['TimingPoints'] = [
        ['500', '400', '4', '2', '0', '60', '1', '0'],
    ]
    sections['HitObjects'] = [['0', '0', '1000', '1', '0', '0:0:0:0:']]
    beatmap = Beatmap.from_sections(sections)
    assert beatmap.bpm_at(500) == 150

    with pytest.raises(InvalidBeatmapData):
        beatmap.bpm_at(0)


def test_max_combo(beatmap):
    # 10 circles, 1 spinner, sliders worth 2, 3 and 2
    assert beatmap.max_combo == 18


def test_taiko_max_combo():
    assert stardust.example_data.taiko().max_combo == 47


def test_hitsound(beatmap):
    assert beatmap.hit_objects[1].has_hitsound(2)
    assert not beatmap.hit_objects[1].has_hitsound(8)


def test_hold_note():
    hold_note = HitObject.parse(
        ['64', '192', '1000', '128', '0', '1500:0:0:0:0:'],
        [UninheritedLine(0, 500)],
        1.4,
        1,
    )
    assert isinstance(hold_note, HoldNote)
    assert hold_note.end_time == 1500
    assert hold_note.extras == '0:0:0:0:'


@pytest.mark.parametrize('fields', [
    ['0', '0', '0', '1'],
    ['0', '0', 'soon', '1', '0'],
    ['0', '0', '0', '64', '0'],
    ['0', '0', '0', '8', '0'],
    ['0', '0', '0', '2', '0', 'L|1:1', '0', '100'],
    ['0', '0', '0', '2', '0', 'X|1:1', '1', '100'],
    ['0', '0', '0', '2', '0', 'L|1,1', '1', '100'],
])
def test_parse_invalid_hit_object(fields):
    with pytest.raises(InvalidBeatmapData):
        HitObject.parse(fields, [UninheritedLine(0, 500)], 1.4, 1)


def test_slider_without_timing_lines():
    with pytest.raises(InvalidBeatmapData):
        HitObject.parse(
            ['0', '0', '0', '2', '0', 'L|1:1', '1', '100'],
            [],
            1.4,
            1,
        )


def test_invalid_data_names_beatmap():
    sections = example_sections('standard', 'Normal')
    sections['HitObjects'][3] = ['448', '96', 'later', '1', '0', '0:0:0:0:']
    with pytest.raises(InvalidBeatmapData) as e:
        Beatmap.from_sections(sections)

    assert e.value.beatmap == 'stardust - Stardust [Normal]'
    assert str(e.value) == (
        "stardust - Stardust [Normal]: time should be a float, got 'later'"
    )


def test_empty_sections():
    beatmap = Beatmap.from_sections({})
    assert beatmap.hit_objects == ()
    assert beatmap.timing_lines == ()
    assert beatmap.bpm_min is None


@pytest.mark.parametrize('mode,version,expected', [
    (GameMode.standard, 'Normal', Difficulty.normal),
    (GameMode.standard, "Hajime's Insane", Difficulty.insane),
    (GameMode.standard, '{HARD}', Difficulty.hard),
    (GameMode.standard, 'Normal...!??', Difficulty.normal),
    (GameMode.standard, 'Normality', None),
    (GameMode.standard, 'Extra Stage', Difficulty.expert),
    (GameMode.taiko, 'Oni', Difficulty.insane),
    (GameMode.taiko, 'Inner Oni', Difficulty.expert),
    (GameMode.taiko, 'Hell Oni', Difficulty.ultra),
    (GameMode.catch, 'Salad', Difficulty.normal),
    (GameMode.catch, 'Normal', None),
])
def test_difficulty_from_name(mode, version, expected):
    sections = {
        'General': {'Mode': str(int(mode))},
        'Metadata': {'Version': version},
    }
    assert Beatmap.from_sections(sections).difficulty_from_name() == expected


def test_difficulty_level(beatmap):
    assert beatmap.difficulty_level(consider_name=True) == Difficulty.normal
    assert beatmap.difficulty_level() == Difficulty.from_star_rating(
        beatmap.star_rating,
    )
    assert beatmap.difficulty_level(star_rating=4.5) == Difficulty.insane


def test_difficulty_level_without_calculator():
    catch = stardust.example_data.catch()
    assert catch.difficulty_attributes is None
    assert catch.star_rating == 0
    assert catch.difficulty_level() == Difficulty.easy
    assert catch.difficulty_level(consider_name=True) == Difficulty.normal
    assert catch.difficulty_level(star_rating=5.5) == Difficulty.expert

    sections = example_sections('catch', 'Salad')
    sections['Metadata']['Version'] = 'My Extra Diff'
    unnamed = Beatmap.from_sections(sections)
    assert unnamed.difficulty_level(consider_name=True) == Difficulty.easy
    assert unnamed.difficulty_level(
        consider_name=True,
        star_rating=3,
    ) == Difficulty.hard


def test_difficulty_from_star_rating():
    assert Difficulty.from_star_rating(0) == Difficulty.easy
    assert Difficulty.from_star_rating(1.99) == Difficulty.easy
    assert Difficulty.from_star_rating(2) == Difficulty.normal
    assert Difficulty.from_star_rating(2.7) == Difficulty.hard
    assert Difficulty.from_star_rating(4) == Difficulty.insane
    assert Difficulty.from_star_rating(5.3) == Difficulty.expert
    assert Difficulty.from_star_rating(6.5) == Difficulty.ultra
    assert Difficulty.from_star_rating(12) == Difficulty.ultra


def test_example_data_versions():
    assert len(stardust.example_data.standard('Single').hit_objects) == 1
    assert stardust.example_data.standard('Empty').hit_objects == ()

    with pytest.raises(ValueError):
        stardust.example_data.standard('Lunatic')

    with pytest.raises(ValueError):
        stardust.example_data.example_beatmap('mania', 'Normal')
