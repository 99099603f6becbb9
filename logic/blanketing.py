"""Blanketing decision engine.

Four independent sub-scores (age, body weight, coat, weather) are summed into
one total and mapped onto a blanket weight. The score ranges from 4 to 16:

==========  ==============
score       blanket weight
==========  ==============
> 12        heavy
> 7         medium
> 5         light
otherwise   none
==========  ==============

``blanket_needed`` is ``score > 7`` on the same score, so it is true exactly when
the weight is medium or heavy. The engine is pure: it never reads the clock,
the network or storage.
"""

from __future__ import annotations

import math
from numbers import Real

from logic.errors import InvalidCoatCategory, InvalidInput
from models.blanketing import BlanketingFactors, BlanketingRecommendation
from models.horse import HorseAttributes
from models.taxonomy import BlanketWeight, HairLength, parse_hair_length
from models.weather import WeatherSnapshot

FREEZING_F = 32
COLD_F = 45
COOL_F = 60
WINDY_MPH = 15

BLANKET_NEEDED_ABOVE = 7
THRESHOLDS = {
    "score_bands": {"heavy": ">12", "medium": ">7", "light": ">5", "none": "<=5"},
    "temperature_bands_f": {"freezing": "<32", "cold": "<45", "cool": "<60"},
    "wind_mph": ">15",
    "precipitation_in_per_hour": ">0",
}


def _finite(field: str, value: object) -> float:
    # bool is a numbers.Real subclass but never a meaningful measurement here
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(field, value)
    number = float(value)
    if not math.isfinite(number):
        raise InvalidInput(field, value)
    return number


def age_factor(age: float) -> int:
    if age > 20:
        return 3
    if age > 15:
        return 2
    return 1


def weight_factor(weight: float) -> int:
    if weight < 800:
        return 3
    if weight < 1000:
        return 2
    return 1


def coat_factor(hair_length: HairLength | str) -> int:
    coat = parse_hair_length(hair_length)
    if coat is HairLength.CLIPPED:
        return 4
    if coat is HairLength.SHORT:
        return 3
    if coat is HairLength.MEDIUM:
        return 2
    if coat is HairLength.LONG:
        return 1
    raise InvalidCoatCategory(hair_length)


def weather_factor(temperature: float, wind_speed: float, precipitation: float) -> int:
    factor = 0
    if temperature < FREEZING_F:
        factor += 4
    elif temperature < COLD_F:
        factor += 3
    elif temperature < COOL_F:
        factor += 2

    if precipitation > 0:
        factor += 1
    if wind_speed > WINDY_MPH:
        factor += 1
    return factor


def blanket_weight_for_score(score: int) -> BlanketWeight:
    if score > 12:
        return BlanketWeight.HEAVY
    if score > 7:
        return BlanketWeight.MEDIUM
    if score > 5:
        return BlanketWeight.LIGHT
    return BlanketWeight.NONE


def calculate_blanketing(horse: HorseAttributes, weather: WeatherSnapshot) -> BlanketingRecommendation:
    """Score a horse against current conditions and recommend a blanket weight.

    Raises :class:`InvalidCoatCategory` for an unknown hair length and
    :class:`InvalidInput` for missing, non-finite or out-of-range numbers.
    """

    age = _finite("age", horse.age)
    weight = _finite("weight", horse.weight)
    temperature = _finite("temperature", weather.temperature)
    wind_speed = _finite("wind_speed", weather.wind_speed)
    precipitation = _finite("precipitation", weather.precipitation)

    if age < 0:
        raise InvalidInput("age", horse.age, "must not be negative")
    if weight <= 0:
        raise InvalidInput("weight", horse.weight, "must be positive")
    if wind_speed < 0:
        raise InvalidInput("wind_speed", weather.wind_speed, "must not be negative")
    if precipitation < 0:
        raise InvalidInput("precipitation", weather.precipitation, "must not be negative")

    factors = BlanketingFactors(
        age=age_factor(age),
        weight=weight_factor(weight),
        coat=coat_factor(horse.hair_length),
        weather=weather_factor(temperature, wind_speed, precipitation),
    )
    score = factors.total
    return BlanketingRecommendation(
        blanket_needed=score > BLANKET_NEEDED_ABOVE,
        blanket_weight=blanket_weight_for_score(score),
        factors=factors,
    )


__all__ = [
    "THRESHOLDS",
    "age_factor",
    "blanket_weight_for_score",
    "calculate_blanketing",
    "coat_factor",
    "weather_factor",
    "weight_factor",
]
