"""Blanketing service: fetches barn weather and scores horses against it."""

from __future__ import annotations

import logging
import time
from typing import Dict, List

from barn_app.config import BarnConfig
from barn_app.logging_config import get_logger, log_event, operation_context
from logic.blanketing import THRESHOLDS, calculate_blanketing
from logic.errors import RecordNotFound
from models.blanketing import BlanketingRecommendation
from models.horse import Horse
from models.taxonomy import BlanketWeight
from models.weather import WeatherSnapshot
from tools.horse_store import HorseStore
from tools.location_provider import LocationProvider
from tools.weather_provider import WeatherProvider


LOGGER = get_logger(__name__)


class BlanketingAgent:
    """Combines the weather collaborator, the barn location and stored horses."""

    def __init__(
        self,
        config: BarnConfig,
        weather_provider: WeatherProvider,
        location_provider: LocationProvider,
        horse_store: HorseStore,
    ) -> None:
        self.config = config
        self.weather_provider = weather_provider
        self.location_provider = location_provider
        self.horse_store = horse_store

    def current_weather(self) -> WeatherSnapshot:
        """Raises :class:`WeatherUnavailable`; there is no stale fallback."""

        location = self.location_provider.get_current_location()
        return self.weather_provider.get_current_weather(
            latitude=location.latitude, longitude=location.longitude
        )

    @staticmethod
    def _summary(horse: Horse, weather: WeatherSnapshot, recommendation: BlanketingRecommendation) -> str:
        if recommendation.blanket_needed:
            advice = f"{recommendation.blanket_weight.value} blanket recommended"
        elif recommendation.blanket_weight is BlanketWeight.LIGHT:
            advice = "light sheet optional"
        else:
            advice = "no blanket needed"
        return (
            f"{horse.name}: {weather.condition}, {weather.temperature:.0f}°F, "
            f"wind {weather.wind_speed:.0f} mph; {advice} (score {recommendation.score})."
        )

    def _evaluate(self, horse: Horse, weather: WeatherSnapshot) -> Dict[str, object]:
        recommendation = calculate_blanketing(horse.attributes(), weather)
        return {
            "horse_id": horse.horse_id,
            "horse_name": horse.name,
            "weather": weather.to_dict(),
            "recommendation": recommendation.to_dict(),
            "user_facing_summary": self._summary(horse, weather, recommendation),
            "debug_summary": {
                "inputs": {
                    "age": horse.age,
                    "weight": horse.weight,
                    "hair_length": horse.hair_length.value,
                },
                "thresholds": THRESHOLDS,
                "factors": recommendation.factors.to_dict(),
            },
        }

    def recommend_for_horse(self, user_id: str, horse_id: str) -> Dict[str, object]:
        """Fetch current weather and return an explainable recommendation for one horse."""

        with operation_context("agent:blanketing.recommend_for_horse", horse_id=horse_id) as correlation_id:
            horse = self.horse_store.get_horse(user_id, horse_id)
            if horse is None:
                raise RecordNotFound("horse", horse_id)
            weather = self.current_weather()
            response = self._evaluate(horse, weather)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="blanketing",
                method="recommend_for_horse",
                correlation_id=correlation_id,
                horse_id=horse_id,
                score=response["recommendation"]["score"],
                blanket_weight=response["recommendation"]["blanket_weight"],
            )
            return response

    def recommend_for_stable(self, user_id: str) -> List[Dict[str, object]]:
        """One alert per horse; weather is fetched once for the whole stable."""

        with operation_context("agent:blanketing.recommend_for_stable") as correlation_id:
            horses = self.horse_store.list_horses_for_user(user_id)
            if not horses:
                return []
            weather = self.current_weather()
            now = time.time()
            alerts = []
            for horse in horses:
                evaluation = self._evaluate(horse, weather)
                alerts.append(
                    {
                        "horse_id": horse.horse_id,
                        "horse_name": horse.name,
                        "current_temp": weather.temperature,
                        "recommendation": evaluation["recommendation"],
                        "user_facing_summary": evaluation["user_facing_summary"],
                        "timestamp": now,
                    }
                )
            log_event(
                LOGGER,
                level=logging.INFO,
                event="agent_call_completed",
                agent="blanketing",
                method="recommend_for_stable",
                correlation_id=correlation_id,
                horse_count=len(alerts),
                blanketed=sum(1 for alert in alerts if alert["recommendation"]["blanket_needed"]),
            )
            return alerts


__all__ = ["BlanketingAgent"]
