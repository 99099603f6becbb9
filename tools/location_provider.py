"""Barn location lookup."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from barn_app.config import BarnConfig


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"longitude out of range: {self.longitude}")


class LocationProvider(ABC):
    @abstractmethod
    def get_current_location(self) -> Coordinates:
        """Return the coordinates weather should be fetched for."""


class FixedLocationProvider(LocationProvider):
    """Always reports one configured location (the stable)."""

    def __init__(self, coordinates: Coordinates) -> None:
        self.coordinates = coordinates

    @classmethod
    def from_config(cls, config: BarnConfig) -> "FixedLocationProvider":
        return cls(Coordinates(latitude=config.barn_latitude, longitude=config.barn_longitude))

    def get_current_location(self) -> Coordinates:
        return self.coordinates


__all__ = ["Coordinates", "FixedLocationProvider", "LocationProvider"]
