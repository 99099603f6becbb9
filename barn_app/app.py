"""Application container wiring configuration, collaborators, stores and services."""

from __future__ import annotations

from datetime import date
import logging
from typing import Callable

from barn_app.config import BarnConfig
from barn_app.logging_config import configure_logging, get_logger, log_event
from agents.blanketing_agent import BlanketingAgent
from agents.journal_agent import JournalAgent
from agents.task_tracker import TaskTrackerAgent
from tools.horse_store import SQLiteHorseStore
from tools.inventory_store import SQLiteShavingsStore, SQLiteSupplementStore
from tools.journal_store import SQLiteJournalStore
from tools.location_provider import FixedLocationProvider, LocationProvider
from tools.task_store import SQLiteTaskStore
from tools.vision import PhotoAnalyzer
from tools.weather_provider import OpenWeatherProvider, WeatherProvider


LOGGER = get_logger(__name__)


class BarnTrackerApp:
    """Wires together stores, external collaborators and the services built on them.

    Collaborators can be injected, which is how tests swap in mock weather and a
    fake vision model.
    """

    def __init__(
        self,
        config: BarnConfig | None = None,
        weather_provider: WeatherProvider | None = None,
        location_provider: LocationProvider | None = None,
        photo_analyzer: PhotoAnalyzer | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or BarnConfig.from_env()
        configure_logging()

        self.weather_provider = weather_provider or OpenWeatherProvider(
            api_key=self.config.openweather_api_key,
            timeout_seconds=self.config.weather_timeout_seconds,
        )
        self.location_provider = location_provider or FixedLocationProvider.from_config(self.config)
        self.photo_analyzer = photo_analyzer or self._build_photo_analyzer()
        self.today = today

        db_path = self.config.database_path
        self.task_store = SQLiteTaskStore(db_path)
        self.horse_store = SQLiteHorseStore(db_path)
        self.supplement_store = SQLiteSupplementStore(db_path)
        self.shavings_store = SQLiteShavingsStore(db_path)
        self.journal_store = SQLiteJournalStore(db_path)

        self.blanketing = BlanketingAgent(
            config=self.config,
            weather_provider=self.weather_provider,
            location_provider=self.location_provider,
            horse_store=self.horse_store,
        )
        self.task_tracker = TaskTrackerAgent(config=self.config, task_store=self.task_store, today=today)
        self.journal = JournalAgent(
            config=self.config, journal_store=self.journal_store, analyzer=self.photo_analyzer
        )

    def _build_photo_analyzer(self) -> PhotoAnalyzer | None:
        if not self.config.google_api_key:
            log_event(
                LOGGER,
                level=logging.INFO,
                event="photo_analysis_disabled",
                reason="missing_google_api_key",
            )
            return None
        return PhotoAnalyzer(config=self.config)


__all__ = ["BarnTrackerApp"]
