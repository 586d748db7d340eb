import enum
from functools import reduce
import operator as op


class BitEnum(enum.IntEnum):
    """A type for enums representing bitmask field values.
    """
    @classmethod
    def pack(cls, **kwargs):
        """Pack a bitmask from explicit bit values.

        Parameters
        ----------
        kwargs
            The names of the fields and their status. Any fields not explicitly
            passed will be set to False.

        Returns
        -------
        bitmask : int
            The packed bitmask.
        """
        members = cls.__members__
        try:
            return reduce(
                op.or_,
                (members[k] * bool(v) for k, v in kwargs.items()),
                0,
            )
        except KeyError as e:
            raise TypeError(f'{e} is not a member of {cls.__qualname__}')

    @classmethod
    def unpack(cls, bitmask):
        """Unpack a bitmask into a dictionary from field name to field state.

        Parameters
        ----------
        bitmask : int
            The bitmask to unpack.

        Returns
        -------
        status : dict[str, bool]
            The mapping from field name to field status.
        """
        return {k: bool(bitmask & v) for k, v in cls.__members__.items()}


class HitSound(BitEnum):
    """The hit sound bits of a hit object.
    """
    normal = 1
    whistle = 1 << 1
    finish = 1 << 2
    clap = 1 << 3


class HitObjectType(BitEnum):
    """The type bits of a hit object.

    Bits 4 through 6 are not flags; together they hold how many combo colours
    to skip when ``new_combo`` is set.
    """
    circle = 1
    slider = 1 << 1
    new_combo = 1 << 2
    spinner = 1 << 3
    combo_skip_1 = 1 << 4
    combo_skip_2 = 1 << 5
    combo_skip_3 = 1 << 6
    hold_note = 1 << 7

    @classmethod
    def combo_skip(cls, bitmask):
        """Read the combo colour skip count out of a type bitmask.
        """
        return (bitmask >> 4) & 0b111


class Effect(BitEnum):
    """The effect bits of a timing line.
    """
    kiai = 1
    omit_first_bar_line = 1 << 3
