from ..game_mode import GameMode
from .attributes import (
    DifficultyAttributes,
    OsuDifficultyAttributes,
    TaikoDifficultyAttributes,
)
from .calculator import DifficultyCalculator
from .osu import OsuDifficultyCalculator
from .skills import SkillKind
from .taiko import TaikoDifficultyCalculator


calculators = {
    GameMode.standard: OsuDifficultyCalculator,
    GameMode.taiko: TaikoDifficultyCalculator,
}


def calculator_for(mode):
    """Lookup the difficulty calculator for a game mode.

    Parameters
    ----------
    mode : GameMode
        The game mode.

    Returns
    -------
    calculator : type
        The :class:`DifficultyCalculator` subclass.

    Raises
    ------
    ValueError
        Raised when there is no calculator for ``mode``.
    """
    try:
        return calculators[mode]
    except KeyError:
        raise ValueError(
            f'no difficulty calculator for {GameMode(mode).name}',
        )


def calculate(beatmap, cancel=None):
    """Compute the difficulty attributes of a beatmap.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap.
    cancel : threading.Event or callable, optional
        A cooperative cancellation flag.

    Returns
    -------
    attributes : DifficultyAttributes
        The attributes for the beatmap's mode.

    Raises
    ------
    ValueError
        Raised when there is no calculator for the beatmap's mode.
    CalculationCancelled
        Raised when ``cancel`` is set during the calculation.
    """
    return calculator_for(beatmap.mode)(beatmap, cancel=cancel).calculate()


__all__ = [
    'DifficultyAttributes',
    'DifficultyCalculator',
    'OsuDifficultyAttributes',
    'OsuDifficultyCalculator',
    'SkillKind',
    'TaikoDifficultyAttributes',
    'TaikoDifficultyCalculator',
    'calculate',
    'calculator_for',
    'calculators',
]
