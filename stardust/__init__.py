from .beatmap import (
    Beatmap,
    Circle,
    HitObject,
    HoldNote,
    Slider,
    Spinner,
)
from .errors import CalculationCancelled, InvalidBeatmapData
from .game_mode import Difficulty, GameMode
from .position import Position
from .settings import DifficultySettings, GeneralSettings
from .timing import InheritedLine, TimingLine, UninheritedLine

__version__ = '0.1.0'


__all__ = [
    'Beatmap',
    'CalculationCancelled',
    'Circle',
    'Difficulty',
    'DifficultySettings',
    'GameMode',
    'GeneralSettings',
    'HitObject',
    'HoldNote',
    'InheritedLine',
    'InvalidBeatmapData',
    'Position',
    'Slider',
    'Spinner',
    'TimingLine',
    'UninheritedLine',
]
