from abc import ABCMeta, abstractmethod
from enum import Enum, unique


@unique
class SkillKind(Enum):
    """The skills a difficulty calculation can measure.

    Skills are keyed by their kind; the display name is only for people.
    """
    aim = 'aim'
    speed = 'speed'
    rhythm = 'rhythm'
    colour = 'colour'
    stamina = 'stamina'
    peaks = 'peaks'

    @property
    def display_name(self):
        return self.value.title()


def weighted_sum(strain_peaks, decay_weight):
    """Sum strain peaks from highest to lowest, each weighted by
    ``decay_weight ** rank``.

    Parameters
    ----------
    strain_peaks : iterable[float]
        The peak strain of each section. Peaks which are not positive are
        ignored.
    decay_weight : float
        How much less each successive peak counts.

    Returns
    -------
    difficulty : float
        The weighted sum.
    """
    difficulty = 0
    weight = 1
    for strain in sorted((p for p in strain_peaks if p > 0), reverse=True):
        difficulty += strain * weight
        weight *= decay_weight
    return difficulty


class Skill(metaclass=ABCMeta):
    """A sequential accumulator measuring one aspect of difficulty.

    A skill is used for a single calculation: objects are processed in
    time order and :meth:`difficulty_value` may then be read any number of
    times.
    """
    kind = None

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.difficulty_value():g}>'

    @property
    def name(self):
        return self.kind.display_name

    @abstractmethod
    def process(self, current):
        """Process the next object.

        Parameters
        ----------
        current : DifficultyHitObject
            The object; objects must be processed in time order.
        """
        raise NotImplementedError('process')

    @abstractmethod
    def difficulty_value(self):
        """The difficulty of everything processed so far.
        """
        raise NotImplementedError('difficulty_value')


class StrainSkill(Skill):
    """A skill which records the peak strain of each fixed length section of
    the beatmap.

    The calculator owns the section boundaries and tells every strain skill
    when a section ends with :meth:`save_current_peak` followed by
    :meth:`start_new_section_from`.
    """
    decay_weight = 0.9

    def __init__(self):
        self._current_section_peak = 0
        self._strain_peaks = []

    def process(self, current):
        self._current_section_peak = max(
            self.strain_value_at(current),
            self._current_section_peak,
        )

    def save_current_peak(self):
        """Record the peak of the section that just ended.
        """
        self._strain_peaks.append(self._current_section_peak)

    def start_new_section_from(self, time, current):
        """Start a new section at ``time``.

        Parameters
        ----------
        time : float
            When the section starts.
        current : DifficultyHitObject
            The first object after ``time``.
        """
        self._current_section_peak = self.calculate_initial_strain(
            time,
            current,
        )

    @abstractmethod
    def strain_value_at(self, current):
        """Update the strain for ``current`` and return it.
        """
        raise NotImplementedError('strain_value_at')

    @abstractmethod
    def calculate_initial_strain(self, time, current):
        """The strain left over at the start of a section.
        """
        raise NotImplementedError('calculate_initial_strain')

    def get_current_strain_peaks(self):
        """The peak of every finished section followed by the peak of the
        section in progress.

        Returns
        -------
        peaks : list[float]
            The peaks in time order.
        """
        return [*self._strain_peaks, self._current_section_peak]

    def difficulty_value(self):
        return weighted_sum(self.get_current_strain_peaks(), self.decay_weight)


class StrainDecaySkill(StrainSkill):
    """A strain skill whose strain decays exponentially between objects.

    Subclasses set ``skill_multiplier`` and ``strain_decay_base`` and
    implement :meth:`strain_value_of`.

    Notes
    -----
    Each object decays the strain by
    ``strain_decay_base ** (delta_time / 1000)`` and then adds
    ``strain_value_of(current) * skill_multiplier``.
    """
    skill_multiplier = None
    strain_decay_base = None

    def __init__(self):
        super().__init__()
        self.current_strain = 0

    def strain_decay(self, ms):
        return self.strain_decay_base ** (ms / 1000)

    def calculate_initial_strain(self, time, current):
        # section boundaries can fall before the previous object
        elapsed = max(0, time - current.last_object.time)
        return self.current_strain * self.strain_decay(elapsed)

    def strain_value_at(self, current):
        self.current_strain *= self.strain_decay(current.delta_time)
        self.current_strain += (
            self.strain_value_of(current) * self.skill_multiplier
        )
        return self.current_strain

    @abstractmethod
    def strain_value_of(self, current):
        """The strain added by ``current``, before the skill multiplier.
        """
        raise NotImplementedError('strain_value_of')
