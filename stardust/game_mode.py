from enum import IntEnum, unique


@unique
class GameMode(IntEnum):
    """The various game modes in osu!.
    """
    standard = 0
    taiko = 1
    catch = 2
    mania = 3


@unique
class Difficulty(IntEnum):
    """The difficulty tiers a beatmap can be ranked as.

    Tiers are ordered so that comparisons like
    ``level >= Difficulty.insane`` read naturally.
    """
    easy = 0
    normal = 1
    hard = 2
    insane = 3
    expert = 4
    ultra = 5

    @classmethod
    def from_star_rating(cls, star_rating):
        """Classify a star rating into a tier.

        Parameters
        ----------
        star_rating : float
            The star rating.

        Returns
        -------
        difficulty : Difficulty
            The tier.
        """
        for upper, difficulty in _star_bands:
            if star_rating < upper:
                return difficulty
        return cls.ultra


_star_bands = (
    (2.0, Difficulty.easy),
    (2.7, Difficulty.normal),
    (4.0, Difficulty.hard),
    (5.3, Difficulty.insane),
    (6.5, Difficulty.expert),
)
