"""Point-in-time weather observation consumed by the blanketing engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current conditions in imperial units.

    ``precipitation`` is the rain volume of the last hour in inches; the engine
    only cares whether it is above zero.
    """

    temperature: float
    condition: str
    wind_speed: float
    precipitation: float = 0.0
    humidity: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "temperature": self.temperature,
            "condition": self.condition,
            "wind_speed": self.wind_speed,
            "precipitation": self.precipitation,
            "humidity": self.humidity,
        }
