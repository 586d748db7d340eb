import math
from math import isclose

import pytest

import stardust.example_data
from stardust import (
    Beatmap,
    Circle,
    InvalidBeatmapData,
    Position,
    Spinner,
    UninheritedLine,
)
from stardust.difficulty import (
    OsuDifficultyAttributes,
    OsuDifficultyCalculator,
    SkillKind,
)
from stardust.difficulty.osu import Aim, LazySliderCursor, Speed
from stardust.difficulty.preprocessing import freeze
from stardust.example_data import example_sections


def _beatmap(hit_objects):
    return Beatmap(
        timing_lines=[UninheritedLine(0, 500)],
        hit_objects=hit_objects,
    )


@pytest.fixture
def line():
    return _beatmap([
        Circle(Position(100, 192), 0),
        Circle(Position(200, 192), 100),
        Circle(Position(400, 192), 300),
    ])


def _difficulty_hit_objects(beatmap):
    calculator = OsuDifficultyCalculator(beatmap)
    return freeze(calculator.create_difficulty_hit_objects())


def test_difficulty_hit_objects(line):
    first, second = _difficulty_hit_objects(line)
    assert [ob.stack_index for ob in line.hit_objects] == [0, 0, 0]
    # circle radius 32 is scaled to 52
    assert isclose(first.jump_distance, 100 * 52 / 32)
    assert isclose(second.jump_distance, 200 * 52 / 32)
    assert first.angle is None
    assert isclose(second.angle, math.pi)
    assert first.strain_time == 100
    assert second.strain_time == 200


def test_strain_time_floor():
    first, = _difficulty_hit_objects(_beatmap([
        Circle(Position(0, 0), 0),
        Circle(Position(100, 0), 20),
    ]))
    assert first.strain_time == 50


def test_aim_angle_bonus(line):
    first, second = _difficulty_hit_objects(line)
    jump_distance_exp = second.jump_distance ** 0.99
    without_bonus = jump_distance_exp / second.strain_time
    assert Aim().strain_value_of(second) > without_bonus
    # there is no angle at the first object
    assert isclose(
        Aim().strain_value_of(first),
        first.jump_distance ** 0.99 / first.strain_time,
    )


def test_spinners_have_no_strain():
    objects = _difficulty_hit_objects(_beatmap([
        Circle(Position(0, 0), 0),
        Spinner(Position(256, 192), 100, 0, 1000),
        Circle(Position(100, 0), 1100),
    ]))
    spinner = objects[0]
    assert spinner.jump_distance == 0
    assert Aim().strain_value_of(spinner) == 0
    assert Speed().strain_value_of(spinner) == 0


def test_lazy_slider_cursor():
    beatmap = stardust.example_data.standard()
    slider = beatmap.hit_objects[2]
    cursor = LazySliderCursor(slider)
    follow_radius = beatmap.difficulty.circle_radius * 3
    assert isclose(cursor.travel_distance, 140 - follow_radius)
    assert isclose(cursor.end_position.x, 460 - follow_radius)
    assert isclose(cursor.end_position.y, 192)


def test_travel_distance():
    beatmap = stardust.example_data.standard()
    objects = _difficulty_hit_objects(beatmap)
    # the object after the first slider
    after_slider = objects[2]
    assert after_slider.last_object is beatmap.hit_objects[2]
    assert after_slider.travel_distance > 0
    assert objects[0].travel_distance == 0


def test_calculate(line):
    attributes = OsuDifficultyCalculator(line).calculate()
    assert isinstance(attributes, OsuDifficultyAttributes)
    assert attributes.aim_rating > 0
    assert attributes.speed_rating > 0
    assert attributes.star_rating > 0
    aim = attributes.aim_rating
    speed = attributes.speed_rating
    assert isclose(
        attributes.star_rating,
        aim + speed + abs(aim - speed) / 2,
    )
    assert attributes.max_combo == 3
    assert attributes.hit_circle_count == 3


def test_single_object():
    beatmap = stardust.example_data.standard('Single')
    attributes = beatmap.calculate_difficulty()
    assert attributes.star_rating == 0
    assert attributes.aim_rating == 0
    assert attributes.speed_rating == 0


def test_example_attributes():
    beatmap = stardust.example_data.standard()
    attributes = beatmap.calculate_difficulty()
    assert attributes.star_rating > 0
    # one per object, none of the sliders have ticks
    assert attributes.max_combo == 14
    assert beatmap.max_combo == 18
    assert attributes.hit_circle_count == 10
    assert isclose(attributes.approach_rate, 7)
    assert isclose(attributes.overall_difficulty, 6)

    aim_peaks = attributes.peaks(SkillKind.aim)
    speed_peaks = attributes.peaks(SkillKind.speed)
    # sections of 400ms from 0 up to the section holding 9000ms
    assert len(aim_peaks) == len(speed_peaks) == 24
    assert all(peak >= 0 for peak in aim_peaks)


def test_deterministic():
    beatmap = stardust.example_data.standard()
    assert beatmap.calculate_difficulty() == beatmap.calculate_difficulty()


def test_max_combo_counts_slider_ticks():
    sections = example_sections('standard', 'Normal')
    sections['HitObjects'] = [
        ['0', '0', '0', '1', '0', '0:0:0:0:'],
        ['100', '0', '500', '2', '0', 'L|450:0', '1', '350'],
    ]
    beatmap = Beatmap.from_sections(sections)
    slider = beatmap.hit_objects[1]
    assert slider.tick_times == [1000, 1500]

    attributes = beatmap.calculate_difficulty()
    # the circle, the slider and its two ticks
    assert attributes.max_combo == 4
    # the model also counts the slider's tail
    assert beatmap.max_combo == 5


def test_circle_size_without_positive_radius():
    sections = example_sections('standard', 'Normal')
    sections['Difficulty']['CircleSize'] = '15'
    beatmap = Beatmap.from_sections(sections)
    assert beatmap.difficulty.circle_radius < 0

    with pytest.raises(InvalidBeatmapData, match='circle size 15') as e:
        beatmap.calculate_difficulty()
    assert e.value.beatmap == 'stardust - Stardust [Normal]'
