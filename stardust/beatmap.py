import bisect
from functools import partial
import logging
import re

import numpy as np

from .bit_enum import HitObjectType
from .curve import Curve
from .errors import InvalidBeatmapData
from .game_mode import Difficulty, GameMode
from .position import Position, distance
from .settings import DifficultySettings, GeneralSettings, circle_radius
from .timing import TimingLine
from .utils import lazyval, parse_float, parse_int


logger = logging.getLogger(__name__)


class HitObject:
    """An abstract hit element.

    Parameters
    ----------
    position : Position
        Where this element appears on the screen, before stacking.
    time : float
        When this element appears in the map in milliseconds.
    hitsound : int
        The :class:`~stardust.bit_enum.HitSound` bits to play when this object
        is hit.
    new_combo : bool, optional
        Does this element start a new combo?
    combo_skip : int, optional
        The number of combo colours to skip when starting a new combo.
    extras : str, optional
        The colon delimited sample extras, kept unparsed.

    Notes
    -----
    Objects know their place in a beatmap once they are added to one;
    ``beatmap`` and ``index`` are ``None`` before that.
    """
    type_code = None

    def __init__(self,
                 position,
                 time,
                 hitsound=0,
                 new_combo=False,
                 combo_skip=0,
                 extras=''):
        self.unstacked_position = Position(*position)
        self.time = time
        self.hitsound = hitsound
        self.new_combo = new_combo
        self.combo_skip = combo_skip
        self.extras = extras
        self.stack_index = 0
        self.beatmap = None
        self.index = None

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: {self.unstacked_position},'
            f' {self.time:g}ms>'
        )

    @property
    def end_time(self):
        """When this element ends in milliseconds.
        """
        return self.time

    def stack_offset(self, circle_size=None):
        """The offset stacking applies to this object's position.

        Parameters
        ----------
        circle_size : float, optional
            The circle size to compute the offset for. Defaults to the owning
            beatmap's current circle size.

        Returns
        -------
        offset : Position
            The vector to add to the unstacked position.
        """
        if circle_size is None:
            if self.beatmap is None:
                return Position(0, 0)
            circle_size = self.beatmap.difficulty.circle_size

        offset = self.stack_index * circle_radius(circle_size) * -0.1
        return Position(offset, offset)

    @property
    def position(self):
        """Where this element is drawn, accounting for stacking.
        """
        return self.unstacked_position + self.stack_offset()

    def has_hitsound(self, hitsound):
        """Check one of the :class:`~stardust.bit_enum.HitSound` bits.
        """
        return bool(self.hitsound & hitsound)

    def prev(self, *, skip_concurrent=False, circles_only=False):
        """The hit object before this one in its beatmap.

        Parameters
        ----------
        skip_concurrent : bool, optional
            Skip objects that start at the same time as this one.
        circles_only : bool, optional
            Only consider :class:`Circle` objects.

        Returns
        -------
        hit_object : HitObject or None
            The previous object, or ``None`` at the start of the map or when
            this object is not part of a beatmap.
        """
        return self._neighbour(-1, skip_concurrent, circles_only)

    def next(self, *, skip_concurrent=False, circles_only=False):
        """The hit object after this one in its beatmap.

        See Also
        --------
        :meth:`stardust.beatmap.HitObject.prev`
        """
        return self._neighbour(1, skip_concurrent, circles_only)

    def _neighbour(self, step, skip_concurrent, circles_only):
        if self.beatmap is None:
            return None

        hit_objects = self.beatmap.hit_objects
        ix = self.index + step
        while 0 <= ix < len(hit_objects):
            candidate = hit_objects[ix]
            if skip_concurrent and candidate.time == self.time:
                ix += step
                continue
            if circles_only and not isinstance(candidate, Circle):
                ix += step
                continue
            return candidate
        return None

    @classmethod
    def parse(cls, fields, timing_lines, slider_multiplier, slider_tick_rate):
        """Parse a HitObject object from the tokenized fields of a line in the
        ``[HitObjects]`` section.

        Parameters
        ----------
        fields : sequence[str]
            The comma separated values of the line.
        timing_lines : list[TimingLine]
            The timing lines in the map, sorted by offset.
        slider_multiplier : float
            The slider multiplier for computing slider end_time and ticks.
        slider_tick_rate : float
            The slider tick rate for computing slider end_time and ticks.

        Returns
        -------
        hit_objects : HitObject
            The parsed hit object. This will be the concrete subclass given
            the type.

        Raises
        ------
        InvalidBeatmapData
            Raised when ``fields`` does not describe a ``HitObject`` object.
        """
        try:
            x, y, time, type_, hitsound, *rest = fields
        except ValueError:
            raise InvalidBeatmapData(
                f'not enough elements in line, got {fields!r}',
            )

        position = Position(parse_float(x, 'x'), parse_float(y, 'y'))
        time = parse_float(time, 'time')
        type_ = parse_int(type_, 'type')
        hitsound = parse_int(hitsound, 'hitsound')

        if type_ & Circle.type_code:
            parse = Circle._parse
        elif type_ & Slider.type_code:
            parse = partial(
                Slider._parse,
                timing_lines=timing_lines,
                slider_multiplier=slider_multiplier,
                slider_tick_rate=slider_tick_rate,
            )
        elif type_ & Spinner.type_code:
            parse = Spinner._parse
        elif type_ & HoldNote.type_code:
            parse = HoldNote._parse
        else:
            raise InvalidBeatmapData(f'unknown type code {type_!r}')

        return parse(
            position,
            time,
            hitsound,
            bool(type_ & HitObjectType.new_combo),
            HitObjectType.combo_skip(type_),
            rest,
        )


class Circle(HitObject):
    """A circle hit element.

    Parameters
    ----------
    position : Position
        Where this circle appears on the screen.
    time : float
        When this circle appears in the map.
    """
    type_code = 1

    @classmethod
    def _parse(cls, position, time, hitsound, new_combo, combo_skip, rest):
        if len(rest) > 1:
            raise InvalidBeatmapData(f'extra data: {rest!r}')

        return cls(position, time, hitsound, new_combo, combo_skip, *rest)


class Spinner(HitObject):
    """A spinner hit element

    Parameters
    ----------
    position : Position
        Where this spinner appears on the screen.
    time : float
        When this spinner appears in the map.
    end_time : float
        When this spinner ends in the map.
    """
    type_code = 8

    def __init__(self,
                 position,
                 time,
                 hitsound,
                 end_time,
                 new_combo=False,
                 combo_skip=0,
                 extras=''):
        super().__init__(
            position,
            time,
            hitsound,
            new_combo,
            combo_skip,
            extras,
        )
        self._end_time = end_time

    @property
    def end_time(self):
        return self._end_time

    @classmethod
    def _parse(cls, position, time, hitsound, new_combo, combo_skip, rest):
        try:
            end_time, *rest = rest
        except ValueError:
            raise InvalidBeatmapData('missing end_time')

        end_time = parse_float(end_time, 'end_time')

        if len(rest) > 1:
            raise InvalidBeatmapData(f'extra data: {rest!r}')

        return cls(
            position,
            time,
            hitsound,
            end_time,
            new_combo,
            combo_skip,
            *rest,
        )


class Slider(HitObject):
    """A slider hit element.

    Parameters
    ----------
    position : Position
        Where this slider appears on the screen.
    time : float
        When this slider appears in the map.
    hitsound : int
        The sound played on the body of the slider.
    curve : Curve
        The slider's curve function.
    repeat : int
        The number of times the slider is traversed, the edge amount.
    length : float
        The length of this slider in osu! pixels.
    ms_per_beat : float
        The milliseconds per beat during the segment of the beatmap that this
        slider appears in.
    velocity : float
        The slider velocity multiplier active at ``time``.
    slider_multiplier : float
        The beatmap's base slider velocity in hundreds of pixels per beat.
    tick_rate : float
        The rate at which ticks appear along sliders.
    edge_sounds : list[int]
        A list of hitsounds for each edge.
    edge_additions : list[str]
        A list of additions for each edge.
    """
    type_code = 2

    def __init__(self,
                 position,
                 time,
                 hitsound,
                 curve,
                 repeat,
                 length,
                 ms_per_beat,
                 velocity,
                 slider_multiplier,
                 tick_rate,
                 edge_sounds=(),
                 edge_additions=(),
                 new_combo=False,
                 combo_skip=0,
                 extras=''):
        super().__init__(
            position,
            time,
            hitsound,
            new_combo,
            combo_skip,
            extras,
        )
        self.curve = curve
        self.repeat = repeat
        self.length = length
        self.ms_per_beat = ms_per_beat
        self.velocity = velocity
        self.slider_multiplier = slider_multiplier
        self.tick_rate = tick_rate
        self.edge_sounds = list(edge_sounds)
        self.edge_additions = list(edge_additions)

    @lazyval
    def num_beats(self):
        """The number of beats this slider spans across all repeats.
        """
        pixels_per_beat = self.slider_multiplier * 100 * self.velocity
        return self.length * self.repeat / pixels_per_beat

    @lazyval
    def curve_duration(self):
        """Milliseconds to travel the curve once.
        """
        return self.num_beats / self.repeat * self.ms_per_beat

    @property
    def end_time(self):
        return self.time + self.curve_duration * self.repeat

    @lazyval
    def edge_times(self):
        """When the slider turns around or ends, one entry per repeat.
        """
        return [
            self.time + self.curve_duration * (n + 1)
            for n in range(self.repeat)
        ]

    @lazyval
    def _ticks_per_span(self):
        beats_per_span = self.num_beats / self.repeat
        return max(
            0,
            int(np.ceil((beats_per_span - 0.1) * self.tick_rate)) - 1,
        )

    @lazyval
    def ticks(self):
        """The combo this slider awards: its head, ticks, repeats and tail.
        """
        return self._ticks_per_span * self.repeat + self.repeat + 1

    @lazyval
    def tick_times(self):
        """When each slider tick is hit, in time order.

        Ticks are laid out along the path, so on reversed spans they are
        mirrored in time. No tick is placed within 10ms of a span's end.
        """
        duration = self.curve_duration
        tick_ms = self.ms_per_beat / self.tick_rate
        offsets = []
        if tick_ms > 0:
            offset = tick_ms
            while offset < duration - 10:
                offsets.append(offset)
                offset += tick_ms

        times = []
        for span in range(self.repeat):
            start = self.time + span * duration
            if span % 2:
                times.extend(start + duration - o for o in reversed(offsets))
            else:
                times.extend(start + o for o in offsets)
        return times

    def path_progress(self, time):
        """How far along the curve the slider ball is at ``time``.

        Parameters
        ----------
        time : float
            The time in milliseconds, clipped into the slider's duration.

        Returns
        -------
        t : float
            The position along the curve in the range [0, 1].
        """
        duration = self.curve_duration
        if duration <= 0:
            return 0.0

        progress = np.clip((time - self.time) / duration, 0, self.repeat)
        span = min(int(progress), self.repeat - 1)
        t = progress - span
        if span % 2:
            t = 1 - t
        return t

    def unstacked_position_at(self, time):
        """Where the slider ball is at ``time``, ignoring stacking.
        """
        return Position(*self.curve(self.path_progress(time)))

    def position_at(self, time):
        """Where the slider ball is drawn at ``time``.
        """
        return self.unstacked_position_at(time) + self.stack_offset()

    @property
    def unstacked_end_position(self):
        """Where the slider ends, ignoring stacking.
        """
        if self.repeat % 2 == 0:
            return self.unstacked_position
        return Position(*self.curve(1))

    @property
    def end_position(self):
        return self.unstacked_end_position + self.stack_offset()

    @classmethod
    def _parse(cls,
               position,
               time,
               hitsound,
               new_combo,
               combo_skip,
               rest,
               timing_lines,
               slider_multiplier,
               slider_tick_rate):
        try:
            group_1, *rest = rest
        except ValueError:
            raise InvalidBeatmapData(
                f'missing required slider data in {rest!r}',
            )

        try:
            slider_type, *raw_points = group_1.split('|')
        except ValueError:
            raise InvalidBeatmapData(
                'expected slider type and points in the first'
                f' element of rest, {rest!r}',
            )

        points = [position]
        for point in raw_points:
            try:
                x, y = point.split(':')
            except ValueError:
                raise InvalidBeatmapData(
                    f'expected points in the form x:y, got {point!r}',
                )

            points.append(Position(parse_float(x, 'x'), parse_float(y, 'y')))

        try:
            repeat, *rest = rest
        except ValueError:
            raise InvalidBeatmapData(f'missing repeat in {rest!r}')

        repeat = parse_int(repeat, 'repeat')
        if repeat < 1:
            raise InvalidBeatmapData(
                f'repeat should be positive, got {repeat}',
            )

        try:
            pixel_length, *rest = rest
        except ValueError:
            raise InvalidBeatmapData(f'missing pixel_length in {rest!r}')

        pixel_length = parse_float(pixel_length, 'pixel_length')

        try:
            raw_edge_sounds_grouped, *rest = rest
        except ValueError:
            raw_edge_sounds_grouped = ''

        edge_sounds = []
        if raw_edge_sounds_grouped:
            for edge_sound in raw_edge_sounds_grouped.split('|'):
                edge_sounds.append(parse_int(edge_sound, 'edge_sound'))

        try:
            edge_additions_grouped, *rest = rest
        except ValueError:
            edge_additions_grouped = ''

        if edge_additions_grouped:
            edge_additions = edge_additions_grouped.split('|')
        else:
            edge_additions = []

        if len(rest) > 1:
            raise InvalidBeatmapData(f'extra data: {rest!r}')

        uninherited = _uninherited_line_for(timing_lines, time)
        timing_line = _timing_line_for(timing_lines, time)
        if timing_line.uninherited or timing_line.offset < uninherited.offset:
            velocity = 1
        else:
            velocity = timing_line.slider_velocity

        return cls(
            position,
            time,
            hitsound,
            Curve.from_kind_and_points(slider_type, points, pixel_length),
            repeat,
            pixel_length,
            uninherited.ms_per_beat,
            velocity,
            slider_multiplier,
            slider_tick_rate,
            edge_sounds,
            edge_additions,
            new_combo,
            combo_skip,
            *rest,
        )


class HoldNote(HitObject):
    """A HoldNote hit element.

    Parameters
    ----------
    position : Position
        Where this HoldNote appears on the screen.
    time : float
        When this HoldNote appears in the map.
    end_time : float
        When this HoldNote is released.

    Notes
    -----
    A ``HoldNote`` can only appear in an osu!mania map.
    """
    type_code = 128

    def __init__(self,
                 position,
                 time,
                 hitsound,
                 end_time,
                 new_combo=False,
                 combo_skip=0,
                 extras=''):
        super().__init__(
            position,
            time,
            hitsound,
            new_combo,
            combo_skip,
            extras,
        )
        self._end_time = end_time

    @property
    def end_time(self):
        return self._end_time

    @classmethod
    def _parse(cls, position, time, hitsound, new_combo, combo_skip, rest):
        try:
            group, = rest
        except ValueError:
            raise InvalidBeatmapData(
                f'expected end_time:extras for a hold note, got {rest!r}',
            )

        end_time, _, extras = group.partition(':')
        return cls(
            position,
            time,
            hitsound,
            parse_float(end_time, 'end_time'),
            new_combo,
            combo_skip,
            extras,
        )


def _timing_line_for(timing_lines, time):
    """The last timing line at or before ``time``, or the first line when
    ``time`` is before all of them.
    """
    if not timing_lines:
        raise InvalidBeatmapData('no timing lines')

    for line in reversed(timing_lines):
        if line.offset <= time:
            return line
    return timing_lines[0]


def _uninherited_line_for(timing_lines, time):
    """Like :func:`_timing_line_for` but only for uninherited lines.
    """
    uninherited = [line for line in timing_lines if line.uninherited]
    if not uninherited:
        raise InvalidBeatmapData('no uninherited timing lines')
    return _timing_line_for(uninherited, time)


class Beatmap:
    """A beatmap for a single difficulty.

    Parameters
    ----------
    format_version : int
        The version of the beatmap file.
    general : GeneralSettings
        The game mode and stacking settings.
    difficulty : DifficultySettings
        The difficulty settings.
    title : str
        The title of the song.
    artist : str
        The name of the song artist.
    creator : str
        The username of the mapper.
    version : str
        The name of the beatmap's difficulty.
    timing_lines : list[TimingLine]
        The timing lines of the map.
    hit_objects : list[HitObject]
        The hit objects in the map.

    Notes
    -----
    Timing lines and hit objects are stored in time order; ties keep their
    order from the file. Each hit object is bound to this beatmap, so a
    hit object can belong to only one beatmap.
    """
    _difficulty_names = {
        GameMode.standard: {
            Difficulty.easy: ('Beginner', 'Easy', 'Novice'),
            Difficulty.normal: ('Basic', 'Normal', 'Medium', 'Intermediate'),
            Difficulty.hard: ('Advanced', 'Hard'),
            Difficulty.insane: ('Hyper', 'Insane'),
            Difficulty.expert: ('Expert', 'Extra', 'Extreme'),
        },
        GameMode.taiko: {
            Difficulty.easy: ('Kantan',),
            Difficulty.normal: ('Futsuu',),
            Difficulty.hard: ('Muzukashii',),
            Difficulty.insane: ('Oni',),
            Difficulty.expert: ('Inner Oni', 'Ura Oni'),
            Difficulty.ultra: ('Hell Oni',),
        },
        GameMode.catch: {
            Difficulty.easy: ('Cup',),
            Difficulty.normal: ('Salad',),
            Difficulty.hard: ('Platter',),
            Difficulty.insane: ('Rain',),
            Difficulty.expert: ('Overdose', 'Deluge'),
        },
        GameMode.mania: {
            Difficulty.easy: ('EZ', 'Beginner', 'Basic'),
            Difficulty.normal: ('NM', 'Normal', 'Novice'),
            Difficulty.hard: ('HD', 'Hyper', 'Advanced'),
            Difficulty.insane: ('MX', 'SHD', 'Another', 'Exhaust'),
            Difficulty.expert: (
                'SC',
                'EX',
                'Black Another',
                'Infinite',
                'Gravity',
                'Heavenly',
            ),
        },
    }

    def __init__(self,
                 *,
                 format_version=14,
                 general=None,
                 difficulty=None,
                 title='',
                 artist='',
                 creator='',
                 version='',
                 timing_lines=(),
                 hit_objects=()):
        self.format_version = format_version
        self.general = general if general is not None else GeneralSettings()
        self.difficulty = (
            difficulty if difficulty is not None else DifficultySettings()
        )
        self.title = title
        self.artist = artist
        self.creator = creator
        self.version = version
        self.timing_lines = tuple(
            sorted(timing_lines, key=lambda line: line.offset),
        )
        self.hit_objects = tuple(
            sorted(hit_objects, key=lambda ob: ob.time),
        )
        for ix, hit_object in enumerate(self.hit_objects):
            hit_object.beatmap = self
            hit_object.index = ix

        if self.mode == GameMode.standard:
            if format_version >= 6:
                self._resolve_stacking()
            else:
                self._resolve_stacking_old()

    @property
    def display_name(self):
        """The name of the map as it appears in game.
        """
        return f'{self.artist} - {self.title} [{self.version}]'

    @property
    def mode(self):
        return self.general.mode

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.display_name}>'

    @classmethod
    def from_sections(cls, sections, format_version=14):
        """Build a beatmap from its tokenized sections.

        Parameters
        ----------
        sections : mapping[str, any]
            ``General``, ``Metadata`` and ``Difficulty`` map keys to raw
            string values. ``TimingPoints`` and ``HitObjects`` are sequences
            of lines, each a sequence of the line's comma separated fields.
            Missing sections are treated as empty.
        format_version : int, optional
            The version of the beatmap file.

        Returns
        -------
        beatmap : Beatmap
            The beatmap.

        Raises
        ------
        InvalidBeatmapData
            Raised when any field is malformed. The error is attributed to
            the beatmap's display name.
        """
        metadata = sections.get('Metadata', {})
        kwargs = {
            'title': metadata.get('Title', ''),
            'artist': metadata.get('Artist', ''),
            'creator': metadata.get('Creator', ''),
            'version': metadata.get('Version', ''),
        }
        name = f'{kwargs["artist"]} - {kwargs["title"]} [{kwargs["version"]}]'

        try:
            general = GeneralSettings.from_section(sections.get('General', {}))
            difficulty = DifficultySettings.from_section(
                sections.get('Difficulty', {}),
            )
            timing_lines = sorted(
                map(TimingLine.parse, sections.get('TimingPoints', ())),
                key=lambda line: line.offset,
            )
            hit_objects = list(map(
                partial(
                    HitObject.parse,
                    timing_lines=timing_lines,
                    slider_multiplier=difficulty.slider_multiplier,
                    slider_tick_rate=difficulty.slider_tick_rate,
                ),
                sections.get('HitObjects', ()),
            ))
        except InvalidBeatmapData as e:
            raise InvalidBeatmapData(e.message, name) from e

        return cls(
            format_version=format_version,
            general=general,
            difficulty=difficulty,
            timing_lines=timing_lines,
            hit_objects=hit_objects,
            **kwargs,
        )

    def _resolve_stacking(self):
        """Compute the stack index of each hit object in beatmap versions 6
        and up.
        """
        stack_threshold = self.difficulty.preempt * self.general.stack_leniency
        stack_dist = 3
        stack_height = {ob: 0 for ob in self.hit_objects}
        # reverse list so it's easier to process
        hit_objects = list(reversed(self.hit_objects))

        for i, ob_i in enumerate(hit_objects):

            if stack_height[ob_i] != 0 or isinstance(ob_i, Spinner):
                continue

            if isinstance(ob_i, Circle):
                for n, ob_n in enumerate(hit_objects[i + 1:], start=i + 1):

                    if isinstance(ob_n, Spinner):
                        continue

                    if ob_i.time - ob_n.end_time > stack_threshold:
                        break

                    if (isinstance(ob_n, Slider) and
                            distance(ob_n.unstacked_end_position,
                                     ob_i.unstacked_position) < stack_dist):
                        offset = stack_height[ob_i] - stack_height[ob_n] + 1

                        for hj in hit_objects[i:n]:
                            # objects stacked under the slider end are
                            # offset below it
                            dist = distance(
                                ob_n.unstacked_end_position,
                                hj.unstacked_position,
                            )
                            if dist < stack_dist:
                                stack_height[hj] -= offset

                        # the slider is handled as a new base by the outer
                        # loop
                        break

                    if distance(ob_n.unstacked_position,
                                ob_i.unstacked_position) < stack_dist:
                        stack_height[ob_n] = stack_height[ob_i] + 1
                        ob_i = ob_n

            elif isinstance(ob_i, Slider):
                # the first slider in a possible stack; from here on
                # always stack positive
                for ob_n in hit_objects[i + 1:]:

                    if isinstance(ob_n, Spinner):
                        continue

                    if ob_i.time - ob_n.time > stack_threshold:
                        break

                    if isinstance(ob_n, Slider):
                        ob_n_end_position = ob_n.unstacked_end_position
                    else:
                        ob_n_end_position = ob_n.unstacked_position

                    if distance(ob_n_end_position,
                                ob_i.unstacked_position) < stack_dist:
                        stack_height[ob_n] = stack_height[ob_i] + 1
                        ob_i = ob_n

        self._apply_stacking(stack_height)

    def _resolve_stacking_old(self):
        """Compute the stack index of each hit object in beatmap versions 5
        and below.
        """
        stack_threshold = self.difficulty.preempt * self.general.stack_leniency
        stack_dist = 3
        hit_objects = self.hit_objects
        stack_height = {ob: 0 for ob in hit_objects}
        for i, ob_i in enumerate(hit_objects):

            if stack_height[ob_i] != 0 and not isinstance(ob_i, Slider):
                continue

            start_time = ob_i.end_time
            slider_stack = 0

            for ob_j in hit_objects[i + 1:]:

                if ob_j.time - stack_threshold > start_time:
                    break

                if distance(ob_j.unstacked_position,
                            ob_i.unstacked_position) < stack_dist:
                    stack_height[ob_i] += 1
                    start_time = ob_j.end_time

                elif (isinstance(ob_i, Slider) and
                      distance(ob_j.unstacked_position,
                               ob_i.unstacked_end_position) < stack_dist):
                    # objects on a slider end are bumped down and right
                    slider_stack += 1
                    stack_height[ob_j] -= slider_stack
                    start_time = ob_j.end_time

        self._apply_stacking(stack_height)

    def _apply_stacking(self, stack_height):
        stacked = 0
        for hit_object, height in stack_height.items():
            hit_object.stack_index = height
            stacked += height != 0

        logger.debug('%r: %d of %d objects stacked', self, stacked,
                     len(stack_height))

    def timing_line_at(self, time):
        """Get the :class:`~stardust.timing.TimingLine` active at the given
        time.

        Parameters
        ----------
        time : float
            The time to lookup the line for in milliseconds.

        Returns
        -------
        timing_line : TimingLine or None
            The last line at or before ``time``, or ``None`` if every line
            comes later.
        """
        ix = bisect.bisect_right(self._timing_line_offsets, time)
        if ix == 0:
            return None
        return self.timing_lines[ix - 1]

    @lazyval
    def _timing_line_offsets(self):
        return [line.offset for line in self.timing_lines]

    @lazyval
    def _uninherited_lines(self):
        return [line for line in self.timing_lines if line.uninherited]

    def uninherited_line_at(self, time):
        """Get the :class:`~stardust.timing.UninheritedLine` governing the
        tempo at the given time.

        Parameters
        ----------
        time : float
            The time to lookup the line for in milliseconds.

        Returns
        -------
        timing_line : UninheritedLine
            The nearest uninherited line at or before ``time``.

        Raises
        ------
        InvalidBeatmapData
            Raised when no uninherited line precedes ``time``.
        """
        lines = self._uninherited_lines
        ix = bisect.bisect_right([line.offset for line in lines], time)
        if ix == 0:
            raise InvalidBeatmapData(
                f'no uninherited timing line at or before {time:g}ms',
                self.display_name,
            )
        return lines[ix - 1]

    def bpm_at(self, time):
        """The beats per minute at ``time``.
        """
        return self.uninherited_line_at(time).bpm

    def scaled_bpm_at(self, time):
        """The :func:`~stardust.timing.scaled_bpm` at ``time``.
        """
        return self.uninherited_line_at(time).scaled_bpm()

    def slider_velocity_at(self, time):
        """The slider velocity multiplier at ``time``.

        Inherited lines only apply until the next uninherited line.
        """
        line = self.timing_line_at(time)
        if line is None or line.uninherited:
            return 1.0
        return line.slider_velocity

    @lazyval
    def bpm_min(self):
        """The minimum BPM in this beatmap.
        """
        return min(
            (line.bpm for line in self._uninherited_lines),
            default=None,
        )

    @lazyval
    def bpm_max(self):
        """The maximum BPM in this beatmap.
        """
        return max(
            (line.bpm for line in self._uninherited_lines),
            default=None,
        )

    @lazyval
    def max_combo(self):
        """The highest combo that can be achieved on this beatmap.
        """
        if self.mode == GameMode.taiko:
            return sum(isinstance(ob, Circle) for ob in self.hit_objects)

        if self.mode == GameMode.mania:
            return len(self.hit_objects)

        max_combo = 0
        for hit_object in self.hit_objects:
            if isinstance(hit_object, Slider):
                max_combo += hit_object.ticks
            else:
                max_combo += 1

        return max_combo

    def calculate_difficulty(self, cancel=None):
        """Run a fresh difficulty calculation for this beatmap.

        Parameters
        ----------
        cancel : threading.Event or callable, optional
            A cooperative cancellation flag.

        Returns
        -------
        attributes : DifficultyAttributes
            The computed attributes.

        Raises
        ------
        ValueError
            Raised when the beatmap's mode has no difficulty calculator.
        InvalidBeatmapData
            Raised when the beatmap's data cannot be rated, for example a
            circle size too large for a positive circle radius.
        CalculationCancelled
            Raised when ``cancel`` is set during the calculation.
        """
        from .difficulty import calculate

        return calculate(self, cancel=cancel)

    @lazyval
    def difficulty_attributes(self):
        """The :class:`~stardust.difficulty.attributes.DifficultyAttributes`
        of this beatmap, computed once.

        This is ``None`` for modes without a difficulty calculator.
        """
        from .difficulty import calculators

        if self.mode not in calculators:
            return None
        return self.calculate_difficulty()

    @property
    def star_rating(self):
        """The star rating of this beatmap, 0 for modes without a difficulty
        calculator.
        """
        attributes = self.difficulty_attributes
        if attributes is None:
            return 0.0
        return attributes.star_rating

    def difficulty_from_name(self):
        """Guess the difficulty tier from the difficulty's name.

        Returns
        -------
        difficulty : Difficulty or None
            The tier, or ``None`` if the name does not follow any naming
            convention for this mode.

        Notes
        -----
        Names like ``"Normal...!??"`` or ``"{HARD}"`` match but words that
        merely contain a tier name, like ``"Normality"``, do not.
        """
        # search the harder tiers first so "Inner Oni" is not read as "Oni"
        for difficulty, names in reversed(
                list(self._difficulty_names[self.mode].items())):
            for name in names:
                if _difficulty_name_regex(name).search(self.version):
                    return difficulty
        return None

    def difficulty_level(self, consider_name=False, star_rating=None):
        """The difficulty tier of this beatmap.

        Parameters
        ----------
        consider_name : bool, optional
            Prefer the tier implied by the difficulty name when there is one.
        star_rating : float, optional
            A star rating computed elsewhere, for example for a catch map. By
            default the beatmap's own :attr:`star_rating` is used.

        Returns
        -------
        difficulty : Difficulty
            The tier.
        """
        if consider_name:
            from_name = self.difficulty_from_name()
            if from_name is not None:
                return from_name

        if star_rating is None:
            star_rating = self.star_rating
        return Difficulty.from_star_rating(star_rating)


def _difficulty_name_regex(name):
    symbols = r'[!-@\[-`{-~]*'
    return re.compile(
        rf'(^| ){symbols}{re.escape(name)}{symbols}( |$)',
        re.IGNORECASE,
    )
