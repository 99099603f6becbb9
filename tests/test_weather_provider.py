"""Weather and location collaborators."""

import pytest
import requests

from barn_app.config import BarnConfig
from logic.errors import WeatherUnavailable
from models.weather import WeatherSnapshot
from tools.location_provider import Coordinates, FixedLocationProvider
from tools.weather_provider import CURRENT_WEATHER_URL, MockWeatherProvider, OpenWeatherProvider


class _FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.requests: list = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.response


def test_openweather_maps_payload_to_snapshot() -> None:
    payload = {
        "main": {"temp": 28.4, "humidity": 81},
        "weather": [{"main": "Snow", "description": "light snow"}],
        "wind": {"speed": 17.2},
        "rain": {"1h": 0.05},
    }
    session = _FakeSession(_FakeResponse(payload))
    provider = OpenWeatherProvider(api_key="key", timeout_seconds=2.5, session=session)

    snapshot = provider.get_current_weather(latitude=32.9427, longitude=-117.1837)

    assert snapshot == WeatherSnapshot(
        temperature=28.4, condition="Snow", wind_speed=17.2, precipitation=0.05, humidity=81
    )
    url, params, timeout = session.requests[0]
    assert url == CURRENT_WEATHER_URL
    assert params["units"] == "imperial"
    assert (params["lat"], params["lon"]) == (32.9427, -117.1837)
    assert timeout == 2.5


def test_openweather_defaults_missing_optional_sections() -> None:
    session = _FakeSession(_FakeResponse({"main": {"temp": 61}}))
    provider = OpenWeatherProvider(api_key="key", session=session)

    snapshot = provider.get_current_weather(latitude=0, longitude=0)

    assert snapshot.condition == "Unknown"
    assert snapshot.wind_speed == 0.0
    assert snapshot.precipitation == 0.0


def test_missing_api_key_is_unavailable_without_network() -> None:
    session = _FakeSession()
    provider = OpenWeatherProvider(api_key=None, session=session)

    with pytest.raises(WeatherUnavailable) as excinfo:
        provider.get_current_weather(latitude=1, longitude=1)

    assert excinfo.value.reason == "missing_api_key"
    assert session.requests == []


@pytest.mark.parametrize(
    "session, reason",
    [
        (_FakeSession(error=requests.ConnectionError("down")), "request_error"),
        (_FakeSession(_FakeResponse({}, status_code=500)), "request_error"),
        (_FakeSession(_FakeResponse({"weather": []})), "schema_validation"),
        (_FakeSession(_FakeResponse({"main": {"temp": "warm"}})), "schema_validation"),
        (_FakeSession(_FakeResponse(ValueError("not json"))), "schema_validation"),
    ],
)
def test_failures_surface_as_weather_unavailable(session: _FakeSession, reason: str) -> None:
    provider = OpenWeatherProvider(api_key="key", session=session)

    with pytest.raises(WeatherUnavailable) as excinfo:
        provider.get_current_weather(latitude=10, longitude=10)

    assert excinfo.value.reason == reason


def test_out_of_range_coordinates_rejected_before_lookup() -> None:
    provider = MockWeatherProvider()

    with pytest.raises(ValueError):
        provider.get_current_weather(latitude=95, longitude=0)

    assert provider.calls == []


def test_mock_provider_returns_configured_snapshot() -> None:
    snapshot = WeatherSnapshot(temperature=10, condition="Snow", wind_speed=25, precipitation=0.3)
    provider = MockWeatherProvider(snapshot)

    assert provider.get_current_weather(latitude=1, longitude=2) is snapshot
    assert provider.calls == [(1.0, 2.0)]


def test_fixed_location_comes_from_config() -> None:
    provider = FixedLocationProvider.from_config(BarnConfig(barn_latitude=45.5, barn_longitude=-122.6))

    assert provider.get_current_location() == Coordinates(45.5, -122.6)


def test_coordinates_validate_range() -> None:
    with pytest.raises(ValueError):
        Coordinates(latitude=0, longitude=200)
