"""Difficulty calculation for osu!standard.
"""
import math

from ..beatmap import Circle, Slider, Spinner
from ..errors import InvalidBeatmapData
from ..game_mode import GameMode
from ..settings import ms_great_to_od, ms_to_ar
from .attributes import OsuDifficultyAttributes
from .calculator import DifficultyCalculator
from .preprocessing import DifficultyHitObject
from .skills import SkillKind, StrainDecaySkill

#: The circle radius distances are normalized to.
normalized_radius = 52


class LazySliderCursor:
    """The path a relaxed cursor takes through a slider.

    The cursor only moves when the slider ball would leave a follow circle
    of three times the circle radius around it.

    Parameters
    ----------
    slider : Slider
        The slider to follow.
    """
    def __init__(self, slider):
        follow_radius = slider.beatmap.difficulty.circle_radius * 3
        end_position = slider.position
        travel_distance = 0

        for time in [*slider.tick_times, slider.end_time]:
            diff = slider.position_at(time) - end_position
            dist = diff.length
            if dist > follow_radius:
                dist -= follow_radius
                end_position += diff.normalized() * dist
                travel_distance += dist

        self.end_position = end_position
        self.travel_distance = travel_distance


class OsuDifficultyHitObject(DifficultyHitObject):
    """A difficulty object with the distances and angle the aim and speed
    skills read.

    Parameters
    ----------
    hit_object : HitObject
        The object being wrapped.
    last_last_object : HitObject or None
        The object two places back, if there is one.
    last_object : HitObject
        The previous object.
    slider_cursors : dict[Slider, LazySliderCursor]
        The cursor paths computed so far in this calculation.

    Attributes
    ----------
    jump_distance : float
        The normalized distance from the cursor's position at the end of the
        last object to this object. Spinners have no jump distance.
    travel_distance : float
        The normalized distance the cursor travelled through the last
        object, if it was a slider.
    angle : float or None
        The angle in radians at the last object between the movement into
        it and the movement out of it, ``None`` without a
        ``last_last_object``.
    strain_time : float
        ``delta_time`` with a floor of 50ms.
    """
    def __init__(self, hit_object, last_last_object, last_object,
                 slider_cursors):
        super().__init__(hit_object, last_object)
        self.last_last_object = last_last_object
        self._slider_cursors = slider_cursors

        self.jump_distance = 0
        self.travel_distance = 0
        self.angle = None
        self._set_distances()
        self.strain_time = max(50, self.delta_time)

    def _cursor(self, slider):
        try:
            return self._slider_cursors[slider]
        except KeyError:
            cursor = self._slider_cursors[slider] = LazySliderCursor(slider)
            return cursor

    def _end_cursor_position(self, hit_object):
        if isinstance(hit_object, Slider):
            return self._cursor(hit_object).end_position
        return hit_object.position

    def _set_distances(self):
        hit_object = self.base_object
        last_object = self.last_object

        radius = hit_object.beatmap.difficulty.circle_radius
        scaling_factor = normalized_radius / radius
        if radius < 30:
            small_circle_bonus = min(30 - radius, 5) / 50
            scaling_factor *= 1 + small_circle_bonus

        if isinstance(last_object, Slider):
            self.travel_distance = (
                self._cursor(last_object).travel_distance * scaling_factor
            )

        last_cursor_position = self._end_cursor_position(last_object)
        if not isinstance(hit_object, Spinner):
            self.jump_distance = (
                hit_object.position * scaling_factor -
                last_cursor_position * scaling_factor
            ).length

        if self.last_last_object is not None:
            last_last_cursor_position = self._end_cursor_position(
                self.last_last_object,
            )
            v1 = last_last_cursor_position - last_object.position
            v2 = hit_object.position - last_cursor_position
            self.angle = abs(math.atan2(v1.cross(v2), v1.dot(v2)))


class Aim(StrainDecaySkill):
    """How hard it is to move the cursor between objects.
    """
    kind = SkillKind.aim
    skill_multiplier = 26.25
    strain_decay_base = 0.15

    angle_bonus_begin = math.pi / 3
    timing_threshold = 107

    @staticmethod
    def apply_diminishing_exp(value):
        return value ** 0.99

    def strain_value_of(self, current):
        if isinstance(current.base_object, Spinner):
            return 0

        result = 0
        previous = current.previous(0)
        if (previous is not None and
                current.angle is not None and
                current.angle > self.angle_bonus_begin):
            scale = 90
            angle_bonus = math.sqrt(
                max(previous.jump_distance - scale, 0) *
                math.sin(current.angle - self.angle_bonus_begin) ** 2 *
                max(current.jump_distance - scale, 0)
            )
            result = (
                1.5 * self.apply_diminishing_exp(max(0, angle_bonus)) /
                max(self.timing_threshold, previous.strain_time)
            )

        jump_distance_exp = self.apply_diminishing_exp(current.jump_distance)
        travel_distance_exp = self.apply_diminishing_exp(
            current.travel_distance,
        )
        distance = (
            jump_distance_exp +
            travel_distance_exp +
            math.sqrt(travel_distance_exp * jump_distance_exp)
        )
        return max(
            result +
            distance / max(current.strain_time, self.timing_threshold),
            distance / current.strain_time,
        )


class Speed(StrainDecaySkill):
    """How hard it is to tap objects quickly.
    """
    kind = SkillKind.speed
    skill_multiplier = 1400
    strain_decay_base = 0.3

    single_spacing_threshold = 125
    angle_bonus_begin = 5 * math.pi / 6
    # ~200 bpm 1/4 streams
    min_speed_bonus = 75
    # ~330 bpm 1/4 streams
    max_speed_bonus = 45
    speed_balancing_factor = 40

    def strain_value_of(self, current):
        if isinstance(current.base_object, Spinner):
            return 0

        distance = min(
            self.single_spacing_threshold,
            current.travel_distance + current.jump_distance,
        )
        delta_time = max(self.max_speed_bonus, current.delta_time)

        speed_bonus = 1.0
        if delta_time < self.min_speed_bonus:
            speed_bonus = 1 + (
                (self.min_speed_bonus - delta_time) /
                self.speed_balancing_factor
            ) ** 2

        angle_bonus = 1.0
        angle = current.angle
        if angle is not None and angle < self.angle_bonus_begin:
            angle_bonus = 1 + math.sin(
                1.5 * (self.angle_bonus_begin - angle),
            ) ** 2 / 3.57

            if angle < math.pi / 2:
                angle_bonus = 1.28
                if distance < 90:
                    correction = (
                        (1 - angle_bonus) * min((90 - distance) / 10, 1)
                    )
                    if angle >= math.pi / 4:
                        correction *= math.sin(
                            (math.pi / 2 - angle) / (math.pi / 4),
                        )
                    angle_bonus += correction

        return (
            (1 + (speed_bonus - 1) * 0.75) *
            angle_bonus *
            (
                0.95 +
                speed_bonus *
                (distance / self.single_spacing_threshold) ** 3.5
            ) /
            current.strain_time
        )


class OsuDifficultyCalculator(DifficultyCalculator):
    """Rate an osu!standard beatmap by its aim and speed.
    """
    mode = GameMode.standard
    difficulty_multiplier = 0.0675

    def create_skills(self):
        return [Aim(), Speed()]

    def create_difficulty_hit_objects(self):
        difficulty = self.beatmap.difficulty
        if difficulty.circle_radius <= 0:
            raise InvalidBeatmapData(
                f'circle size {difficulty.circle_size:g} gives a circle radius'
                f' of {difficulty.circle_radius:g}, which should be positive',
                self.beatmap.display_name,
            )

        hit_objects = self.beatmap.hit_objects
        slider_cursors = {}
        for i in range(1, len(hit_objects)):
            yield OsuDifficultyHitObject(
                hit_objects[i],
                hit_objects[i - 2] if i > 1 else None,
                hit_objects[i - 1],
                slider_cursors,
            )

    def default_attributes(self):
        return OsuDifficultyAttributes()

    def create_difficulty_attributes(self, skills):
        beatmap = self.beatmap
        aim, speed = skills
        aim_rating = (
            math.sqrt(aim.difficulty_value()) * self.difficulty_multiplier
        )
        speed_rating = (
            math.sqrt(speed.difficulty_value()) * self.difficulty_multiplier
        )
        star_rating = (
            aim_rating + speed_rating + abs(aim_rating - speed_rating) / 2
        )

        # the game works with whole milliseconds
        great_hit_window = int(beatmap.difficulty.great_hit_window())
        preempt = int(beatmap.difficulty.preempt)

        return OsuDifficultyAttributes(
            star_rating=star_rating,
            aim_rating=aim_rating,
            speed_rating=speed_rating,
            approach_rate=ms_to_ar(preempt),
            overall_difficulty=ms_great_to_od(great_hit_window),
            max_combo=len(beatmap.hit_objects) + sum(
                len(ob.tick_times)
                for ob in beatmap.hit_objects
                if isinstance(ob, Slider)
            ),
            hit_circle_count=sum(
                isinstance(ob, Circle) for ob in beatmap.hit_objects
            ),
            strain_peaks=self.strain_peaks(skills),
        )
