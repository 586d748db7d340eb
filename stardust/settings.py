import numpy as np

from .errors import InvalidBeatmapData
from .game_mode import GameMode
from .utils import no_default


def difficulty_range(difficulty, min_, mid, max_):
    """Map a difficulty setting in [0, 10] onto a range of values.

    Parameters
    ----------
    difficulty : float
        The difficulty setting, for example the approach rate.
    min_ : float
        The value at a difficulty of 0.
    mid : float
        The value at a difficulty of 5.
    max_ : float
        The value at a difficulty of 10.

    Returns
    -------
    value : float
        The linearly interpolated value.
    """
    if difficulty > 5:
        return mid + (max_ - mid) * (difficulty - 5) / 5
    if difficulty < 5:
        return mid - (mid - min_) * (5 - difficulty) / 5
    return mid


def circle_radius(cs):
    """Compute the ``CS`` attribute into a circle radius in osu! pixels.

    Parameters
    ----------
    cs : float
        The circle size.

    Returns
    -------
    radius : float
        The radius in osu! pixels.
    """
    return (512 / 16) * (1 - 0.7 * (cs - 5) / 5)


def ar_to_ms(ar):
    """Convert an approach rate value to milliseconds of time that an element
    appears on the screen before being hit.

    Parameters
    ----------
    ar : float
        The approach rate.

    Returns
    -------
    milliseconds : float
        The number of milliseconds that an element appears on the screen before
        being hit at the given approach rate.

    See Also
    --------
    :func:`stardust.settings.ms_to_ar`
    """
    return difficulty_range(ar, 1800, 1200, 450)


def ms_to_ar(ms):
    """Convert milliseconds to hit an element into an approach rate value.

    Parameters
    ----------
    ms : float
        The number of milliseconds that an element appears on the screen before
        being hit.

    Returns
    -------
    ar : float
        The approach rate value that produces the given millisecond value.

    See Also
    --------
    :func:`stardust.settings.ar_to_ms`
    """
    # the two lines cross at ar 5 (1200ms)
    if ms > 1200:
        return (1800 - ms) / 120
    return (1200 - ms) / 150 + 5


def od_to_ms_great(od, *, mode=GameMode.standard):
    """Convert an overall difficulty value into the window to score a great.

    Parameters
    ----------
    od : float
        The overall difficulty.
    mode : GameMode, optional
        The game mode; taiko uses a narrower window.

    Returns
    -------
    ms : float
        The maximum distance in milliseconds from the object's time.
    """
    if mode == GameMode.taiko:
        return difficulty_range(od, 50, 35, 20)
    return difficulty_range(od, 80, 50, 20)


def ms_great_to_od(ms):
    """Convert a great hit window for osu! standard back into an OD value.
    """
    return (80 - ms) / 6


def _get_as_str(section, field, default=no_default):
    try:
        return section[field]
    except KeyError:
        if default is no_default:
            raise InvalidBeatmapData(f'missing field {field!r}')
        return default


def _get_as_int(section, field, default=no_default):
    v = _get_as_str(section, field, default)
    if v is default:
        return v

    try:
        return int(v)
    except ValueError:
        raise InvalidBeatmapData(
            f'field {field!r} should be an int, got {v!r}',
        )


def _get_as_float(section, field, default=no_default):
    v = _get_as_str(section, field, default)
    if v is default:
        return v

    try:
        value = float(v)
    except ValueError:
        raise InvalidBeatmapData(
            f'field {field!r} should be a float, got {v!r}',
        )

    if not np.isfinite(value):
        raise InvalidBeatmapData(
            f'field {field!r} should be finite, got {v!r}',
        )
    return value


class GeneralSettings:
    """Settings from the ``[General]`` section which change how objects are
    interpreted.

    Parameters
    ----------
    mode : GameMode
        The game mode.
    stack_leniency : float
        How often closely placed hit objects will be placed together.
    """
    def __init__(self, mode=GameMode.standard, stack_leniency=0.7):
        self.mode = GameMode(mode)
        self.stack_leniency = stack_leniency

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: mode={self.mode.name},'
            f' stack_leniency={self.stack_leniency:g}>'
        )

    @classmethod
    def from_section(cls, section):
        """Read the settings from a tokenized ``[General]`` section.

        Parameters
        ----------
        section : mapping[str, str]
            The key value pairs of the section.

        Returns
        -------
        settings : GeneralSettings
            The settings.

        Raises
        ------
        InvalidBeatmapData
            Raised when a value cannot be parsed.
        """
        mode = _get_as_int(section, 'Mode', 0)
        try:
            mode = GameMode(mode)
        except ValueError:
            raise InvalidBeatmapData(f'unknown game mode {mode!r}')

        return cls(
            mode=mode,
            stack_leniency=_get_as_float(section, 'StackLeniency', 0.7),
        )


class DifficultySettings:
    """The ``[Difficulty]`` section of a beatmap.

    Parameters
    ----------
    hp_drain_rate : float
        The ``HP`` attribute.
    circle_size : float
        The ``CS`` attribute.
    overall_difficulty : float
        The ``OD`` attribute.
    approach_rate : float
        The ``AR`` attribute.
    slider_multiplier : float
        The multiplier for slider velocity.
    slider_tick_rate : float
        How often slider ticks appear per beat.

    Notes
    -----
    Each value is clipped into the range the game accepts for it.
    """
    ranges = {
        'hp_drain_rate': (0, 10),
        'circle_size': (0, 18),
        'overall_difficulty': (0, 10),
        'approach_rate': (0, 10),
        'slider_multiplier': (0.4, 3.6),
        'slider_tick_rate': (0.5, 8),
    }

    def __init__(self,
                 hp_drain_rate=5,
                 circle_size=5,
                 overall_difficulty=5,
                 approach_rate=None,
                 slider_multiplier=1.4,
                 slider_tick_rate=1):
        if approach_rate is None:
            # old maps didn't have an AR so the OD is used as a default
            approach_rate = overall_difficulty

        ranges = self.ranges
        self.hp_drain_rate = np.clip(hp_drain_rate, *ranges['hp_drain_rate'])
        self.circle_size = np.clip(circle_size, *ranges['circle_size'])
        self.overall_difficulty = np.clip(
            overall_difficulty,
            *ranges['overall_difficulty'],
        )
        self.approach_rate = np.clip(approach_rate, *ranges['approach_rate'])
        self.slider_multiplier = np.clip(
            slider_multiplier,
            *ranges['slider_multiplier'],
        )
        self.slider_tick_rate = np.clip(
            slider_tick_rate,
            *ranges['slider_tick_rate'],
        )

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: HP{self.hp_drain_rate:g}'
            f' CS{self.circle_size:g} OD{self.overall_difficulty:g}'
            f' AR{self.approach_rate:g}>'
        )

    @classmethod
    def from_section(cls, section):
        """Read the settings from a tokenized ``[Difficulty]`` section.

        Parameters
        ----------
        section : mapping[str, str]
            The key value pairs of the section.

        Returns
        -------
        settings : DifficultySettings
            The settings.

        Raises
        ------
        InvalidBeatmapData
            Raised when a value cannot be parsed.
        """
        od = _get_as_float(section, 'OverallDifficulty', 5)
        return cls(
            hp_drain_rate=_get_as_float(section, 'HPDrainRate', 5),
            circle_size=_get_as_float(section, 'CircleSize', 5),
            overall_difficulty=od,
            approach_rate=_get_as_float(section, 'ApproachRate', od),
            slider_multiplier=_get_as_float(
                section,
                'SliderMultiplier',
                1.4,  # taken from wiki
            ),
            slider_tick_rate=_get_as_float(
                section,
                'SliderTickRate',
                1.0,  # taken from wiki
            ),
        )

    @property
    def circle_radius(self):
        """The radius of a circle in osu! pixels.
        """
        return circle_radius(self.circle_size)

    @property
    def preempt(self):
        """Milliseconds an object is visible before it must be hit.
        """
        return ar_to_ms(self.approach_rate)

    @property
    def fade_in(self):
        """Milliseconds an object takes to become fully opaque.
        """
        return difficulty_range(self.approach_rate, 1200, 800, 300)

    def great_hit_window(self, mode=GameMode.standard):
        """Milliseconds from an object's time that still scores a great.
        """
        return od_to_ms_great(self.overall_difficulty, mode=mode)
