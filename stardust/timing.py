import numpy as np

from .bit_enum import Effect
from .errors import InvalidBeatmapData
from .utils import get, lazyval, parse_float, parse_int


def scaled_bpm(bpm):
    """Weight a bpm by how much harder it makes a pattern.

    Parameters
    ----------
    bpm : float
        The beats per minute.

    Returns
    -------
    scale : float
        The weight. 120 bpm is 0.5, 180 bpm is 1 and 240 bpm is 2.
    """
    return bpm ** 2 / 14400 - bpm / 80 + 1


class TimingLine:
    """A timing line assigns properties to an offset into a beatmap.

    Parameters
    ----------
    offset : float
        When this ``TimingLine`` takes effect in milliseconds.
    ms_per_beat : float
        The raw beat length value. Uninherited lines use this as the length
        of a beat; inherited lines use it to encode a slider velocity.
    meter : int
        The number of beats per measure.
    sample_set : int
        The set of hit sound samples that are used.
    custom_index : int
        The custom sample index, 0 for the default samples.
    volume : int
        The volume of hit sounds in the range [0, 100]. This value will be
        clipped if outside the range.
    kiai : bool
        Whether or not kiai time effects are active.
    omit_first_bar_line : bool
        Whether the first bar line of this line is hidden (taiko and mania).

    Notes
    -----
    Use :class:`UninheritedLine` or :class:`InheritedLine`;
    :meth:`TimingLine.parse` picks the right one from the fields.
    """
    uninherited = None

    def __init__(self,
                 offset,
                 ms_per_beat,
                 meter=4,
                 sample_set=0,
                 custom_index=0,
                 volume=100,
                 kiai=False,
                 omit_first_bar_line=False):
        self.offset = offset
        self.ms_per_beat = ms_per_beat
        self.meter = meter
        self.sample_set = sample_set
        self.custom_index = custom_index
        self.volume = np.clip(volume, 0, 100)
        self.kiai = kiai
        self.omit_first_bar_line = omit_first_bar_line

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.offset:g}ms>'

    @classmethod
    def parse(cls, fields):
        """Parse a timing line from its tokenized fields.

        Parameters
        ----------
        fields : sequence[str]
            The comma separated values of a line in the ``[TimingPoints]``
            section.

        Returns
        -------
        timing_line : UninheritedLine or InheritedLine
            The parsed timing line.

        Raises
        ------
        InvalidBeatmapData
            Raised when ``fields`` does not describe a timing line.
        """
        try:
            offset, ms_per_beat, *rest = fields
        except ValueError:
            raise InvalidBeatmapData(
                f'failed to parse {cls.__qualname__} from {fields!r}',
            )

        offset = parse_float(offset, 'offset')
        ms_per_beat = parse_float(ms_per_beat, 'ms_per_beat')
        meter = parse_int(get(rest, 0, '4'), 'meter')
        sample_set = parse_int(get(rest, 1, '0'), 'sample_set')
        custom_index = parse_int(get(rest, 2, '0'), 'custom_index')
        volume = parse_int(get(rest, 3, '100'), 'volume')
        # lines written before the flag existed are always uninherited
        uninherited = get(rest, 4, '1') == '1'
        effects = Effect.unpack(parse_int(get(rest, 5, '0'), 'effects'))

        subcls = UninheritedLine if uninherited else InheritedLine
        return subcls(
            offset=offset,
            ms_per_beat=ms_per_beat,
            meter=meter,
            sample_set=sample_set,
            custom_index=custom_index,
            volume=volume,
            kiai=effects['kiai'],
            omit_first_bar_line=effects['omit_first_bar_line'],
        )


class UninheritedLine(TimingLine):
    """A timing line which sets the tempo.

    Raises
    ------
    InvalidBeatmapData
        Raised when ``ms_per_beat`` is not a positive finite number.
    """
    uninherited = True

    def __init__(self, offset, ms_per_beat, *args, **kwargs):
        if not (np.isfinite(ms_per_beat) and ms_per_beat > 0):
            raise InvalidBeatmapData(
                f'ms_per_beat should be positive at {offset:g}ms,'
                f' got {ms_per_beat!r}',
            )
        super().__init__(offset, ms_per_beat, *args, **kwargs)

    @lazyval
    def bpm(self):
        """The beats per minute set by this line.
        """
        return 60000 / self.ms_per_beat

    def scaled_bpm(self):
        """:func:`scaled_bpm` of this line's bpm.
        """
        return scaled_bpm(self.bpm)


class InheritedLine(TimingLine):
    """A timing line which changes the slider velocity, volume or samples
    without changing the tempo.
    """
    uninherited = False

    @lazyval
    def slider_velocity(self):
        """The multiplier applied to the base slider velocity.

        The raw value is a negative inverse percentage; values the game would
        reject are clipped into [0.1, 10].
        """
        ms_per_beat = self.ms_per_beat
        if ms_per_beat >= 0:
            return 0.1
        return float(np.clip(-100 / ms_per_beat, 0.1, 10))
