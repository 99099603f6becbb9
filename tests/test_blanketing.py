"""Blanketing decision engine scoring, thresholds and input validation."""

import math

import pytest

from logic.blanketing import (
    age_factor,
    blanket_weight_for_score,
    calculate_blanketing,
    coat_factor,
    weather_factor,
    weight_factor,
)
from logic.errors import InvalidCoatCategory, InvalidInput
from models.horse import HorseAttributes
from models.taxonomy import BlanketWeight, HairLength
from models.weather import WeatherSnapshot


def _weather(temperature: float = 70.0, wind_speed: float = 5.0, precipitation: float = 0.0) -> WeatherSnapshot:
    return WeatherSnapshot(
        temperature=temperature, condition="Clear", wind_speed=wind_speed, precipitation=precipitation
    )


def test_old_light_clipped_horse_in_freezing_wind_and_rain_needs_heavy_blanket() -> None:
    horse = HorseAttributes(age=22, weight=700, hair_length="clipped")
    weather = WeatherSnapshot(temperature=20, condition="Rain", wind_speed=20, precipitation=0.1)

    result = calculate_blanketing(horse, weather)

    assert result.factors.to_dict() == {"age": 3, "weight": 3, "coat": 4, "weather": 6}
    assert result.score == 16
    assert result.blanket_weight is BlanketWeight.HEAVY
    assert result.blanket_needed is True


def test_young_heavy_long_coated_horse_on_warm_day_needs_nothing() -> None:
    horse = HorseAttributes(age=10, weight=1200, hair_length=HairLength.LONG)

    result = calculate_blanketing(horse, _weather(temperature=70, wind_speed=5, precipitation=0))

    assert result.score == 3
    assert result.blanket_weight is BlanketWeight.NONE
    assert result.blanket_needed is False


def test_clipped_below_freezing_with_minimal_other_factors_is_medium() -> None:
    horse = HorseAttributes(age=5, weight=1100, hair_length="clipped")

    result = calculate_blanketing(horse, _weather(temperature=31, wind_speed=0))

    assert result.score == 10
    assert result.blanket_weight is BlanketWeight.MEDIUM
    assert result.blanket_needed is True


def test_identical_inputs_give_identical_results() -> None:
    horse = HorseAttributes(age=17, weight=950, hair_length="short")
    weather = _weather(temperature=40, wind_speed=16, precipitation=0.02)

    assert calculate_blanketing(horse, weather) == calculate_blanketing(horse, weather)


@pytest.mark.parametrize(
    "age, expected",
    [(0, 1), (15, 1), (15.5, 2), (20, 2), (20.1, 3), (30, 3)],
)
def test_age_factor_boundaries(age: float, expected: int) -> None:
    assert age_factor(age) == expected


@pytest.mark.parametrize(
    "weight, expected",
    [(500, 3), (799.9, 3), (800, 2), (999, 2), (1000, 1), (1400, 1)],
)
def test_weight_factor_boundaries(weight: float, expected: int) -> None:
    assert weight_factor(weight) == expected


def test_coat_factor_table_and_normalisation() -> None:
    assert coat_factor("clipped") == 4
    assert coat_factor("Short") == 3
    assert coat_factor(" medium ") == 2
    assert coat_factor(HairLength.LONG) == 1


@pytest.mark.parametrize(
    "temperature, wind, precipitation, expected",
    [
        (31.9, 0, 0, 4),
        (32, 0, 0, 3),
        (44.9, 0, 0, 3),
        (45, 0, 0, 2),
        (59.9, 0, 0, 2),
        (60, 0, 0, 0),
        (60, 15, 0, 0),
        (60, 15.1, 0, 1),
        (60, 0, 0.01, 1),
        (-10, 30, 1.0, 6),
    ],
)
def test_weather_factor(temperature: float, wind: float, precipitation: float, expected: int) -> None:
    assert weather_factor(temperature, wind, precipitation) == expected


@pytest.mark.parametrize(
    "score, expected",
    [
        (4, BlanketWeight.NONE),
        (5, BlanketWeight.NONE),
        (6, BlanketWeight.LIGHT),
        (7, BlanketWeight.LIGHT),
        (8, BlanketWeight.MEDIUM),
        (12, BlanketWeight.MEDIUM),
        (13, BlanketWeight.HEAVY),
        (16, BlanketWeight.HEAVY),
    ],
)
def test_score_bands(score: int, expected: BlanketWeight) -> None:
    assert blanket_weight_for_score(score) is expected


def test_blanket_needed_agrees_with_weight_for_every_score() -> None:
    for age in (5, 16, 21):
        for weight in (700, 900, 1100):
            for coat in HairLength:
                for temperature in (20, 40, 50, 70):
                    horse = HorseAttributes(age=age, weight=weight, hair_length=coat)
                    result = calculate_blanketing(horse, _weather(temperature=temperature))
                    assert result.blanket_needed == (
                        result.blanket_weight in {BlanketWeight.MEDIUM, BlanketWeight.HEAVY}
                    )


def test_unknown_coat_category_fails_loudly() -> None:
    horse = HorseAttributes(age=10, weight=1000, hair_length="shaggy")

    with pytest.raises(InvalidCoatCategory) as excinfo:
        calculate_blanketing(horse, _weather())

    assert excinfo.value.field == "hair_length"


@pytest.mark.parametrize(
    "horse, weather",
    [
        (HorseAttributes(age=None, weight=1000, hair_length="long"), _weather()),
        (HorseAttributes(age=math.nan, weight=1000, hair_length="long"), _weather()),
        (HorseAttributes(age=10, weight=math.inf, hair_length="long"), _weather()),
        (HorseAttributes(age="10", weight=1000, hair_length="long"), _weather()),
        (HorseAttributes(age=True, weight=1000, hair_length="long"), _weather()),
        (HorseAttributes(age=10, weight=1000, hair_length="long"), _weather(temperature=math.nan)),
        (HorseAttributes(age=10, weight=1000, hair_length="long"), _weather(wind_speed=-math.inf)),
    ],
)
def test_non_finite_or_missing_numbers_raise_invalid_input(
    horse: HorseAttributes, weather: WeatherSnapshot
) -> None:
    with pytest.raises(InvalidInput):
        calculate_blanketing(horse, weather)


@pytest.mark.parametrize(
    "horse, weather, field",
    [
        (HorseAttributes(age=-1, weight=1000, hair_length="long"), _weather(), "age"),
        (HorseAttributes(age=10, weight=0, hair_length="long"), _weather(), "weight"),
        (HorseAttributes(age=10, weight=1000, hair_length="long"), _weather(wind_speed=-1), "wind_speed"),
        (HorseAttributes(age=10, weight=1000, hair_length="long"), _weather(precipitation=-0.1), "precipitation"),
    ],
)
def test_out_of_range_numbers_raise_invalid_input(
    horse: HorseAttributes, weather: WeatherSnapshot, field: str
) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        calculate_blanketing(horse, weather)
    assert excinfo.value.field == field


def test_negative_temperatures_are_valid() -> None:
    horse = HorseAttributes(age=10, weight=1000, hair_length="medium")

    result = calculate_blanketing(horse, _weather(temperature=-15))

    assert result.factors.weather == 4
