"""Difficulty calculation for osu!taiko.
"""
from collections import deque
import math
from types import MappingProxyType

from ..beatmap import Circle
from ..game_mode import GameMode
from ..taiko import is_don
from ..utils import element_at, norm
from .attributes import TaikoDifficultyAttributes
from .calculator import DifficultyCalculator
from .colour import evaluate_difficulty_of, process_and_assign
from .preprocessing import DifficultyHitObject
from .skills import SkillKind, StrainDecaySkill, StrainSkill


class TaikoDifficultyHitObjectRhythm:
    """A ratio between consecutive gaps and how hard it is to play.

    Parameters
    ----------
    numerator, denominator : int
        The ratio of the current gap to the previous gap.
    difficulty : float
        The difficulty of changing to this rhythm.
    """
    def __init__(self, numerator, denominator, difficulty):
        self.ratio = numerator / denominator
        self.difficulty = difficulty

    def __repr__(self):
        return (
            f'<{type(self).__qualname__}: ratio={self.ratio:.3f},'
            f' difficulty={self.difficulty:g}>'
        )


common_rhythms = (
    TaikoDifficultyHitObjectRhythm(1, 1, 0.0),
    TaikoDifficultyHitObjectRhythm(2, 1, 0.3),
    TaikoDifficultyHitObjectRhythm(1, 2, 0.5),
    TaikoDifficultyHitObjectRhythm(3, 1, 0.3),
    TaikoDifficultyHitObjectRhythm(1, 3, 0.35),
    # higher as it needs a hand switch when alternating
    TaikoDifficultyHitObjectRhythm(3, 2, 0.6),
    TaikoDifficultyHitObjectRhythm(2, 3, 0.4),
    TaikoDifficultyHitObjectRhythm(5, 4, 0.5),
    TaikoDifficultyHitObjectRhythm(4, 5, 0.7),
)


def closest_rhythm(delta_time, previous_length):
    """The common rhythm closest to the ratio of two gaps.

    Parameters
    ----------
    delta_time : float
        The current gap.
    previous_length : float
        The gap before it.

    Returns
    -------
    rhythm : TaikoDifficultyHitObjectRhythm
        One of :data:`common_rhythms`. Ratios which are not finite select
        the first one.
    """
    if previous_length == 0:
        ratio = math.inf
    else:
        ratio = delta_time / previous_length

    if not math.isfinite(ratio):
        return common_rhythms[0]
    return min(common_rhythms, key=lambda r: abs(r.ratio - ratio))


class TaikoDifficultyHitObjectColour:
    """The colour patterns an object starts or belongs to.

    Objects which are not circles belong to no patterns.
    """
    def __init__(self):
        self.mono_streak = None
        self.alternating_mono_pattern = None
        self.repeating_hit_patterns = None


class TaikoDifficultyHitObject(DifficultyHitObject):
    """A difficulty object with its rhythm, colour and links to the nearby
    notes.

    Parameters
    ----------
    hit_object : HitObject
        The object being wrapped.
    last_object : HitObject
        The previous hit object.
    last_last_object : HitObject
        The hit object before ``last_object``.
    centre_objects, rim_objects, note_objects : list
        The dons, kats and circles wrapped so far in this calculation.
        Circles append themselves to the lists they belong to.

    Attributes
    ----------
    rhythm : TaikoDifficultyHitObjectRhythm
        The closest common rhythm.
    colour : TaikoDifficultyHitObjectColour
        The colour patterns of this object.
    mono_index, note_index : int or None
        The position in the same colour and circle sequences. Objects which
        are not circles are in neither.
    """
    def __init__(self,
                 hit_object,
                 last_object,
                 last_last_object,
                 centre_objects,
                 rim_objects,
                 note_objects):
        super().__init__(hit_object, last_object)
        self.rhythm = closest_rhythm(
            self.delta_time,
            last_object.time - last_last_object.time,
        )
        self.colour = TaikoDifficultyHitObjectColour()

        self.mono_index = None
        self.note_index = None
        self._mono_objects = ()
        self._note_objects = note_objects

        if isinstance(hit_object, Circle):
            mono_objects = (
                centre_objects if is_don(hit_object) else rim_objects
            )
            self.mono_index = len(mono_objects)
            mono_objects.append(self)
            self._mono_objects = mono_objects

            self.note_index = len(note_objects)
            note_objects.append(self)

    def bind(self, centre_objects, rim_objects, note_objects):
        """Point the lookups at the finished, immutable sequences.
        """
        self._note_objects = note_objects
        if self.mono_index is not None:
            self._mono_objects = (
                centre_objects if is_don(self.base_object) else rim_objects
            )

    def previous_mono(self, backwards_index):
        """The circle of the same colour ``backwards_index + 1`` places back.
        """
        if self.mono_index is None:
            return None
        return element_at(
            self._mono_objects,
            self.mono_index - (backwards_index + 1),
        )

    def next_mono(self, forwards_index):
        if self.mono_index is None:
            return None
        return element_at(
            self._mono_objects,
            self.mono_index + forwards_index + 1,
        )

    def previous_note(self, backwards_index):
        """The circle ``backwards_index + 1`` places back.
        """
        if self.note_index is None:
            return None
        return element_at(
            self._note_objects,
            self.note_index - (backwards_index + 1),
        )

    def next_note(self, forwards_index):
        if self.note_index is None:
            return None
        return element_at(
            self._note_objects,
            self.note_index + forwards_index + 1,
        )


class Rhythm(StrainDecaySkill):
    """How hard the changes between gap lengths are.
    """
    kind = SkillKind.rhythm
    skill_multiplier = 10
    strain_decay_base = 0

    rhythm_strain_decay = 0.96
    rhythm_history_max_length = 8

    def __init__(self):
        super().__init__()
        self._rhythm_history = deque(maxlen=self.rhythm_history_max_length)
        self._current_strain = 0.0
        self._notes_since_rhythm_change = 0

    def strain_value_of(self, current):
        if not isinstance(current.base_object, Circle):
            self._reset_rhythm_and_strain()
            return 0.0

        self._current_strain *= self.rhythm_strain_decay
        self._notes_since_rhythm_change += 1

        if current.rhythm.difficulty == 0:
            # no rhythm change
            return 0.0

        object_strain = current.rhythm.difficulty
        object_strain *= self._repetition_penalties(current)
        object_strain *= self._pattern_length_penalty(
            self._notes_since_rhythm_change,
        )
        object_strain *= self._speed_penalty(current.delta_time)

        self._notes_since_rhythm_change = 0
        self._current_strain += object_strain
        return self._current_strain

    def _repetition_penalties(self, current):
        penalty = 1
        history = self._rhythm_history
        history.append(current)

        for compare in range(2, self.rhythm_history_max_length // 2 + 1):
            for start in range(len(history) - compare - 1, -1, -1):
                if not self._same_pattern(start, compare):
                    continue

                notes_since = current.index - history[start].index
                penalty *= min(1.0, 0.032 * notes_since)
                break

        return penalty

    def _same_pattern(self, start, compare):
        history = self._rhythm_history
        offset = len(history) - compare
        return all(
            history[start + i].rhythm is history[offset + i].rhythm
            for i in range(compare)
        )

    @staticmethod
    def _pattern_length_penalty(pattern_length):
        short_pattern_penalty = min(0.15 * pattern_length, 1.0)
        long_pattern_penalty = min(max(2.5 - 0.15 * pattern_length, 0), 1)
        return min(short_pattern_penalty, long_pattern_penalty)

    def _speed_penalty(self, delta_time):
        if delta_time < 80:
            return 1
        if delta_time < 210:
            return max(0, 1.4 - 0.005 * delta_time)

        self._reset_rhythm_and_strain()
        return 0.0

    def _reset_rhythm_and_strain(self):
        self._current_strain = 0.0
        self._notes_since_rhythm_change = 0


class Colour(StrainDecaySkill):
    """How hard the colour changes are.
    """
    kind = SkillKind.colour
    skill_multiplier = 0.12
    strain_decay_base = 0.8

    def strain_value_of(self, current):
        return evaluate_difficulty_of(current)


class Stamina(StrainDecaySkill):
    """How tiring the notes are to hit with alternating hands.
    """
    kind = SkillKind.stamina
    skill_multiplier = 1.1
    strain_decay_base = 0.4

    def strain_value_of(self, current):
        return evaluate_stamina(current)


def evaluate_stamina(current):
    """The stamina difficulty of one object.

    A note is played by the same finger as the note two places back in its
    colour, so the gap to that note sets the difficulty.
    """
    if not isinstance(current.base_object, Circle):
        return 0.0

    key_previous = current.previous_mono(1)
    if key_previous is None:
        return 0.0

    interval = max(current.start_time - key_previous.start_time, 50)
    return 0.5 + 30 / interval


class Peaks(StrainSkill):
    """Rhythm, colour and stamina combined section by section.
    """
    kind = SkillKind.peaks

    final_multiplier = 0.0625
    rhythm_skill_multiplier = 0.2 * final_multiplier
    colour_skill_multiplier = 0.375 * final_multiplier
    stamina_skill_multiplier = 0.375 * final_multiplier

    def __init__(self):
        super().__init__()
        self.rhythm = Rhythm()
        self.colour = Colour()
        self.stamina = Stamina()

    @property
    def children(self):
        return self.rhythm, self.colour, self.stamina

    @property
    def colour_difficulty_value(self):
        return self.colour.difficulty_value() * self.colour_skill_multiplier

    @property
    def rhythm_difficulty_value(self):
        return self.rhythm.difficulty_value() * self.rhythm_skill_multiplier

    @property
    def stamina_difficulty_value(self):
        return (
            self.stamina.difficulty_value() * self.stamina_skill_multiplier
        )

    def _combine(self, rhythm, colour, stamina):
        return norm(
            2,
            norm(
                1.5,
                colour * self.colour_skill_multiplier,
                stamina * self.stamina_skill_multiplier,
            ),
            rhythm * self.rhythm_skill_multiplier,
        )

    def process(self, current):
        for skill in self.children:
            skill.process(current)

    def save_current_peak(self):
        for skill in self.children:
            skill.save_current_peak()

    def start_new_section_from(self, time, current):
        for skill in self.children:
            skill.start_new_section_from(time, current)

    # strain is only tracked by the children; peaks are combined per section
    def strain_value_at(self, current):
        raise TypeError(f'{type(self).__name__} has no strain of its own')

    def calculate_initial_strain(self, time, current):
        raise TypeError(f'{type(self).__name__} has no strain of its own')

    def get_current_strain_peaks(self):
        return [
            self._combine(rhythm, colour, stamina)
            for rhythm, colour, stamina in zip(*(
                skill.get_current_strain_peaks() for skill in self.children
            ))
        ]


class TaikoDifficultyCalculator(DifficultyCalculator):
    """Rate an osu!taiko beatmap by its rhythm, colour and stamina.
    """
    mode = GameMode.taiko
    difficulty_multiplier = 1.35

    def __init__(self, beatmap, cancel=None):
        super().__init__(beatmap, cancel=cancel)
        self.colour_patterns = []

    def create_skills(self):
        return [Peaks()]

    def create_difficulty_hit_objects(self):
        hit_objects = self.beatmap.hit_objects
        centre_objects = []
        rim_objects = []
        note_objects = []
        difficulty_hit_objects = [
            TaikoDifficultyHitObject(
                hit_objects[i],
                hit_objects[i - 1],
                hit_objects[i - 2],
                centre_objects,
                rim_objects,
                note_objects,
            )
            for i in range(2, len(hit_objects))
        ]

        centre_objects = tuple(centre_objects)
        rim_objects = tuple(rim_objects)
        note_objects = tuple(note_objects)
        for ob in difficulty_hit_objects:
            ob.bind(centre_objects, rim_objects, note_objects)

        self.colour_patterns = process_and_assign(note_objects)
        return difficulty_hit_objects

    def default_attributes(self):
        return TaikoDifficultyAttributes()

    @staticmethod
    def rescale(star_rating):
        if star_rating < 0:
            return star_rating
        return 10.43 * math.log(star_rating / 8 + 1)

    def create_difficulty_attributes(self, skills):
        beatmap = self.beatmap
        peaks, = skills
        multiplier = self.difficulty_multiplier

        combined_rating = peaks.difficulty_value() * multiplier
        strain_peaks = dict(self.strain_peaks(skills))
        for skill in peaks.children:
            strain_peaks[skill.kind] = tuple(skill.get_current_strain_peaks())

        return TaikoDifficultyAttributes(
            star_rating=self.rescale(combined_rating * 1.4),
            stamina_rating=peaks.stamina_difficulty_value * multiplier,
            rhythm_rating=peaks.rhythm_difficulty_value * multiplier,
            colour_rating=peaks.colour_difficulty_value * multiplier,
            peak_rating=combined_rating,
            great_hit_window=beatmap.difficulty.great_hit_window(
                GameMode.taiko,
            ),
            max_combo=beatmap.max_combo,
            strain_peaks=MappingProxyType(strain_peaks),
        )
