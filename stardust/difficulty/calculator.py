from abc import ABCMeta, abstractmethod
from types import MappingProxyType
import logging

import numpy as np

from ..errors import CalculationCancelled, InvalidBeatmapData
from .preprocessing import freeze
from .skills import StrainSkill

logger = logging.getLogger(__name__)


def is_cancelled(cancel):
    """Check a cooperative cancellation flag.

    Parameters
    ----------
    cancel : threading.Event or callable or None
        Anything with an ``is_set`` method, or a function of no arguments
        which returns whether the calculation should stop.

    Returns
    -------
    cancelled : bool
        Whether the flag is set.
    """
    if cancel is None:
        return False
    is_set = getattr(cancel, 'is_set', None)
    if is_set is not None:
        return bool(is_set())
    return bool(cancel())


class DifficultyCalculator(metaclass=ABCMeta):
    """Compute the difficulty attributes of a beatmap.

    Parameters
    ----------
    beatmap : Beatmap
        The beatmap to rate. It must not change during the calculation.
    cancel : threading.Event or callable, optional
        A cooperative cancellation flag, checked every
        ``cancel_check_interval`` objects.

    Notes
    -----
    The beatmap's timeline is cut into ``section_length`` millisecond
    sections starting at the first hit object; every
    :class:`~stardust.difficulty.skills.StrainSkill` records its peak strain
    per section. Each call to :meth:`calculate` uses new skill and
    difficulty object instances, so calculators for different beatmaps may
    run in parallel.
    """
    mode = None
    section_length = 400
    cancel_check_interval = 64

    def __init__(self, beatmap, cancel=None):
        self.beatmap = beatmap
        self.cancel = cancel

    def __repr__(self):
        return f'<{type(self).__qualname__}: {self.beatmap.display_name}>'

    def calculate(self):
        """Run the calculation.

        Returns
        -------
        attributes : DifficultyAttributes
            The computed attributes.

        Raises
        ------
        CalculationCancelled
            Raised when the cancellation flag is set.
        InvalidBeatmapData
            Raised when the beatmap's data drives a skill's strain to a value
            which is not finite.
        """
        beatmap = self.beatmap
        if not beatmap.hit_objects:
            return self.default_attributes()

        skills = self.create_skills()
        objects = freeze(self.create_difficulty_hit_objects())
        logger.debug(
            '%r: calculating with %d hit objects, %d difficulty objects',
            self,
            len(beatmap.hit_objects),
            len(objects),
        )

        section_length = self.section_length
        current_section_end = (
            np.ceil(beatmap.hit_objects[0].time / section_length) *
            section_length
        )
        sections = 1
        strain_skills = [s for s in skills if isinstance(s, StrainSkill)]

        for ix, h in enumerate(objects):
            if ix % self.cancel_check_interval == 0:
                self._check_cancelled(ix, len(objects))

            while h.start_time > current_section_end:
                for skill in strain_skills:
                    skill.save_current_peak()
                    skill.start_new_section_from(current_section_end, h)
                current_section_end += section_length
                sections += 1

            for skill in skills:
                skill.process(h)

        self._check_finite(strain_skills)
        attributes = self.create_difficulty_attributes(skills)
        logger.debug(
            '%r: %d sections, star rating %.4f',
            self,
            sections,
            attributes.star_rating,
        )
        return attributes

    def _check_finite(self, strain_skills):
        for skill in strain_skills:
            if not np.all(np.isfinite(skill.get_current_strain_peaks())):
                raise InvalidBeatmapData(
                    f'{skill.name} strain is not finite',
                    self.beatmap.display_name,
                )

    def _check_cancelled(self, ix, count):
        if is_cancelled(self.cancel):
            logger.debug('%r: cancelled at object %d of %d', self, ix, count)
            raise CalculationCancelled(
                f'calculation for {self.beatmap.display_name!r} was'
                f' cancelled after {ix} of {count} objects',
            )

    @staticmethod
    def strain_peaks(skills):
        """The section peaks of each skill keyed by the skill's kind.
        """
        return MappingProxyType({
            skill.kind: tuple(skill.get_current_strain_peaks())
            for skill in skills
            if isinstance(skill, StrainSkill)
        })

    @abstractmethod
    def create_skills(self):
        """Create fresh skill instances for one calculation.
        """
        raise NotImplementedError('create_skills')

    @abstractmethod
    def create_difficulty_hit_objects(self):
        """Wrap the beatmap's hit objects, in time order.
        """
        raise NotImplementedError('create_difficulty_hit_objects')

    @abstractmethod
    def create_difficulty_attributes(self, skills):
        """Combine the processed skills into attributes.
        """
        raise NotImplementedError('create_difficulty_attributes')

    @abstractmethod
    def default_attributes(self):
        """The attributes of a beatmap with no hit objects.
        """
        raise NotImplementedError('default_attributes')
