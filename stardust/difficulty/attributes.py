from collections import namedtuple
from types import MappingProxyType

from ..game_mode import Difficulty, GameMode


_no_peaks = MappingProxyType({})


class DifficultyAttributes:
    """Behaviour shared by the attribute records of every mode.

    Notes
    -----
    Records are immutable. ``strain_peaks`` maps each
    :class:`~stardust.difficulty.skills.SkillKind` to the section peaks of
    that skill, in time order.
    """
    __slots__ = ()
    mode = None

    @property
    def difficulty(self):
        """The :class:`~stardust.game_mode.Difficulty` tier of the star
        rating.
        """
        return Difficulty.from_star_rating(self.star_rating)

    def peaks(self, kind):
        """The section peaks of one skill.

        Parameters
        ----------
        kind : SkillKind
            The skill.

        Returns
        -------
        peaks : tuple[float]
            The peaks or an empty tuple if the skill was not measured.
        """
        return self.strain_peaks.get(kind, ())


class OsuDifficultyAttributes(
        DifficultyAttributes,
        namedtuple(
            'OsuDifficultyAttributes',
            (
                'star_rating aim_rating speed_rating approach_rate'
                ' overall_difficulty max_combo hit_circle_count strain_peaks'
            ),
            defaults=(0.0, 0.0, 0.0, 0.0, 0.0, 0, 0, _no_peaks),
        )):
    """The difficulty of an osu!standard beatmap.

    Parameters
    ----------
    star_rating : float
        ``aim + speed + |aim - speed| / 2``.
    aim_rating, speed_rating : float
        The rating of each skill.
    approach_rate : float
        The approach rate recovered from the whole millisecond preempt.
    overall_difficulty : float
        The overall difficulty recovered from the whole millisecond great hit
        window.
    max_combo : int
        The number of hit objects plus the number of slider ticks.
    hit_circle_count : int
        The number of circles.
    strain_peaks : mapping[SkillKind, tuple[float]]
        The section peaks of each skill.
    """
    __slots__ = ()
    mode = GameMode.standard


class TaikoDifficultyAttributes(
        DifficultyAttributes,
        namedtuple(
            'TaikoDifficultyAttributes',
            (
                'star_rating stamina_rating rhythm_rating colour_rating'
                ' peak_rating great_hit_window max_combo strain_peaks'
            ),
            defaults=(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0, _no_peaks),
        )):
    """The difficulty of an osu!taiko beatmap.

    Parameters
    ----------
    star_rating : float
        The rescaled combined rating.
    stamina_rating, rhythm_rating, colour_rating : float
        The rating of each skill.
    peak_rating : float
        The combined rating before rescaling.
    great_hit_window : float
        Milliseconds from a note's time which still scores a great.
    max_combo : int
        The number of circles.
    strain_peaks : mapping[SkillKind, tuple[float]]
        The section peaks of each skill.
    """
    __slots__ = ()
    mode = GameMode.taiko
