import pytest

from stardust import DifficultySettings, GameMode, GeneralSettings
from stardust import InvalidBeatmapData
from stardust.settings import (
    ar_to_ms,
    circle_radius,
    difficulty_range,
    ms_great_to_od,
    ms_to_ar,
    od_to_ms_great,
)


def test_difficulty_range():
    assert difficulty_range(0, 1800, 1200, 450) == 1800
    assert difficulty_range(5, 1800, 1200, 450) == 1200
    assert difficulty_range(10, 1800, 1200, 450) == 450
    assert difficulty_range(2.5, 1800, 1200, 450) == 1500
    assert difficulty_range(7.5, 1800, 1200, 450) == 825


@pytest.mark.parametrize('ar', [0, 2.5, 5, 7, 9.3, 10])
def test_ar_ms_inverse(ar):
    assert ms_to_ar(ar_to_ms(ar)) == pytest.approx(ar)


@pytest.mark.parametrize('od', [0, 3, 5, 8.5, 10])
def test_od_ms_inverse(od):
    assert ms_great_to_od(od_to_ms_great(od)) == pytest.approx(od)


def test_taiko_great_window():
    assert od_to_ms_great(0, mode=GameMode.taiko) == 50
    assert od_to_ms_great(5, mode=GameMode.taiko) == 35
    assert od_to_ms_great(10, mode=GameMode.taiko) == 20


def test_circle_radius():
    assert circle_radius(5) == 32
    assert circle_radius(4) == pytest.approx(36.48)
    assert circle_radius(4) > circle_radius(6)


def test_difficulty_from_section():
    settings = DifficultySettings.from_section({
        'HPDrainRate': '6',
        'CircleSize': '4.2',
        'OverallDifficulty': '8',
        'SliderMultiplier': '1.8',
    })
    assert settings.hp_drain_rate == 6
    assert settings.circle_size == 4.2
    assert settings.overall_difficulty == 8
    # old maps use the OD as the AR
    assert settings.approach_rate == 8
    assert settings.slider_multiplier == 1.8
    assert settings.slider_tick_rate == 1


def test_difficulty_values_clipped():
    settings = DifficultySettings(
        hp_drain_rate=11,
        approach_rate=-1,
        slider_multiplier=10,
        slider_tick_rate=0,
    )
    assert settings.hp_drain_rate == 10
    assert settings.approach_rate == 0
    assert settings.slider_multiplier == 3.6
    assert settings.slider_tick_rate == 0.5


def test_difficulty_derived_values():
    settings = DifficultySettings(circle_size=4, approach_rate=9)
    assert settings.circle_radius == pytest.approx(36.48)
    assert settings.preempt == 600
    assert settings.fade_in == 400
    assert settings.great_hit_window() == 50
    assert settings.great_hit_window(GameMode.taiko) == 35


@pytest.mark.parametrize('section', [
    {'CircleSize': 'big'},
    {'OverallDifficulty': 'nan'},
])
def test_difficulty_bad_value(section):
    with pytest.raises(InvalidBeatmapData):
        DifficultySettings.from_section(section)


def test_general_from_section():
    settings = GeneralSettings.from_section({
        'Mode': '1',
        'StackLeniency': '0.5',
    })
    assert settings.mode == GameMode.taiko
    assert settings.stack_leniency == 0.5

    settings = GeneralSettings.from_section({})
    assert settings.mode == GameMode.standard
    assert settings.stack_leniency == 0.7


@pytest.mark.parametrize('mode', ['4', '-1', 'taiko'])
def test_general_bad_mode(mode):
    with pytest.raises(InvalidBeatmapData):
        GeneralSettings.from_section({'Mode': mode})
