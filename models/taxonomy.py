"""Canonical labels for horses, tasks, inventory and journal entries.

Every categorical value the barn tracker stores is declared here as a ``str``
enum so that it survives JSON and SQLite round trips unchanged. The parse
helpers accept loose user input (any case, surrounding whitespace, spaces for
underscores) and reject anything outside the enum.
"""

from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

from logic.errors import InvalidCoatCategory

E = TypeVar("E", bound=Enum)


class HairLength(str, Enum):
    CLIPPED = "clipped"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class BlanketWeight(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class TaskCategory(str, Enum):
    GROOMING = "grooming"
    FEEDING = "feeding"
    MEDICAL = "medical"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class TaskFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ANNUAL = "annual"
    ONCE = "once"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SupplementFrequency(str, Enum):
    DAILY = "daily"
    TWICE_DAILY = "twice_daily"
    WEEKLY = "weekly"
    AS_NEEDED = "as_needed"


class StockUnit(str, Enum):
    LBS = "lbs"
    OZ = "oz"
    KG = "kg"
    BAGS = "bags"
    SCOOPS = "scoops"


class JournalEntryType(str, Enum):
    PHOTO = "photo"
    AUDIO = "audio"
    COMBINED = "combined"
    NOTE = "note"


class JournalCategory(str, Enum):
    FEEDING = "feeding"
    CARE = "care"
    MEDICAL = "medical"
    TRAINING = "training"
    MAINTENANCE = "maintenance"
    OBSERVATION = "observation"
    OTHER = "other"


class PhotoAnalysisType(str, Enum):
    FOOD = "food"
    HORSE = "horse"
    GENERAL = "general"
    ALL = "all"


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into an enum value."""

    return value.strip().lower().replace(" ", "_").replace("-", "_")


def parse_enum(enum_cls: Type[E], value: object) -> E:
    """Coerce ``value`` into ``enum_cls`` or raise :class:`ValueError`."""

    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported {enum_cls.__name__} {value!r}")
    key = _normalize_key(value)
    try:
        return enum_cls(key)
    except ValueError:
        allowed = [member.value for member in enum_cls]
        raise ValueError(f"Unsupported {enum_cls.__name__} '{value}'. Allowed: {allowed}") from None


def parse_hair_length(value: object) -> HairLength:
    """Coat categories are a contract: anything unknown raises :class:`InvalidCoatCategory`."""

    try:
        return parse_enum(HairLength, value)
    except ValueError:
        raise InvalidCoatCategory(value) from None


__all__ = [
    "HairLength",
    "BlanketWeight",
    "TaskCategory",
    "TaskFrequency",
    "TaskPriority",
    "SupplementFrequency",
    "StockUnit",
    "JournalEntryType",
    "JournalCategory",
    "PhotoAnalysisType",
    "parse_enum",
    "parse_hair_length",
]
