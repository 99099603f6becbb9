"""Weather snapshot providers feeding the blanketing engine."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

import requests
from pydantic import BaseModel, Field, ValidationError

from logic.errors import WeatherUnavailable
from models.weather import WeatherSnapshot
from tools.observability import instrument_tool


LOGGER = logging.getLogger(__name__)
CURRENT_WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class WeatherLookupInput(BaseModel):
    """Input contract for current-conditions lookups."""

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class _WeatherCondition(BaseModel):
    main: str = "Unknown"
    description: str = "unknown"


class _Wind(BaseModel):
    speed: float = 0.0


class _Main(BaseModel):
    temp: float
    humidity: float | None = None


class _CurrentResponse(BaseModel):
    main: _Main
    wind: _Wind = _Wind()
    weather: List[_WeatherCondition] = []
    rain: Dict[str, float] = {}


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @instrument_tool("get_current_weather", input_model=WeatherLookupInput)
    def get_current_weather(self, *, latitude: float, longitude: float) -> WeatherSnapshot:
        """Return current conditions at a coordinate or raise :class:`WeatherUnavailable`."""

        return self._current_weather(latitude, longitude)

    @abstractmethod
    def _current_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """Fetch a snapshot for already validated coordinates."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeather current-conditions provider in imperial units with schema validation."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout_seconds: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _current_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        if not self.api_key:
            raise WeatherUnavailable("missing_api_key")

        params = {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key,
            "units": "imperial",
        }
        try:
            response = self.session.get(CURRENT_WEATHER_URL, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            parsed = _CurrentResponse.model_validate(response.json())
        except requests.RequestException as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            raise WeatherUnavailable("request_error", f"Weather API unreachable: {exc}") from exc
        except (ValidationError, ValueError) as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            raise WeatherUnavailable("schema_validation") from exc

        return WeatherSnapshot(
            temperature=parsed.main.temp,
            condition=parsed.weather[0].main if parsed.weather else "Unknown",
            wind_speed=parsed.wind.speed,
            precipitation=parsed.rain.get("1h", 0.0),
            humidity=parsed.main.humidity,
        )


class MockWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests."""

    def __init__(self, snapshot: WeatherSnapshot | None = None) -> None:
        self.snapshot = snapshot or WeatherSnapshot(
            temperature=55.0,
            condition="Clear",
            wind_speed=5.0,
            precipitation=0.0,
            humidity=40.0,
        )
        self.calls: List[tuple[float, float]] = []

    def _current_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        self.calls.append((latitude, longitude))
        LOGGER.info("Returning mock weather snapshot")
        return self.snapshot


__all__ = [
    "MockWeatherProvider",
    "OpenWeatherProvider",
    "WeatherLookupInput",
    "WeatherProvider",
]
