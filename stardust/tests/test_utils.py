import numpy as np
import pytest

from stardust import InvalidBeatmapData
from stardust.bit_enum import HitObjectType, HitSound
from stardust.utils import element_at, norm, parse_float, parse_int, sigmoid


def test_element_at():
    xs = [1, 2, 3]
    assert element_at(xs, 0) == 1
    assert element_at(xs, 2) == 3
    assert element_at(xs, 3) is None
    # negative indices do not wrap around
    assert element_at(xs, -1) is None
    assert element_at((), 0) is None


def test_sigmoid():
    assert sigmoid(2, 2, 2, 0.5, 1) == 0.5
    assert sigmoid(-100, 2, 2, 0.5, 1) == pytest.approx(1)
    assert sigmoid(100, 2, 2, 0.5, 1) == pytest.approx(0)


def test_norm():
    assert norm(2, 3, 4) == pytest.approx(5)
    assert norm(1, 3, 4) == pytest.approx(7)


def test_parse_float():
    assert parse_float('1.5', 'x') == 1.5
    assert parse_float('-3', 'x') == -3

    with pytest.raises(InvalidBeatmapData, match='x should be a float'):
        parse_float('1,5', 'x')

    with pytest.raises(InvalidBeatmapData, match='x should be finite'):
        parse_float('inf', 'x')


def test_parse_int():
    assert parse_int('12', 'type') == 12

    with pytest.raises(InvalidBeatmapData, match='type should be an int'):
        parse_int('1.5', 'type')


def test_bit_enum_pack_unpack():
    assert HitSound.pack(whistle=True, clap=True) == 10
    assert HitSound.unpack(10) == {
        'normal': False,
        'whistle': True,
        'finish': False,
        'clap': True,
    }

    with pytest.raises(TypeError):
        HitSound.pack(drum=True)


def test_combo_skip():
    assert HitObjectType.combo_skip(1) == 0
    assert HitObjectType.combo_skip(1 | 4 | 16 | 32) == 3
    assert HitObjectType.combo_skip(np.int64(2 | 64)) == 4
