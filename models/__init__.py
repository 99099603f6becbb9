"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.blanketing import BlanketingFactors, BlanketingRecommendation
from models.horse import Horse, HorseAttributes, horse_from_raw
from models.task import CompletionRecord, Task, TaskStreakState
from models.weather import WeatherSnapshot

__all__ = [
    "BlanketingFactors",
    "BlanketingRecommendation",
    "CompletionRecord",
    "Horse",
    "HorseAttributes",
    "Task",
    "TaskStreakState",
    "WeatherSnapshot",
    "horse_from_raw",
]
