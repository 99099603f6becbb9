"""Horse data model and helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.taxonomy import BlanketWeight, HairLength, parse_enum, parse_hair_length


@dataclass(frozen=True)
class HorseAttributes:
    """The physical attributes the blanketing engine reads."""

    age: float
    weight: float
    hair_length: HairLength | str


def _normalise_preferences(raw: Optional[Dict[Any, Any]]) -> Dict[str, float]:
    if not raw:
        return {}
    preferences: Dict[str, float] = {}
    for key, value in raw.items():
        weight = parse_enum(BlanketWeight, key)
        preferences[weight.value] = float(value)
    return preferences


@dataclass
class Horse:
    """A stabled horse owned by one caretaker account."""

    horse_id: str
    user_id: str
    name: str
    age: float
    weight: float
    hair_length: HairLength
    breed: Optional[str] = None
    color: Optional[str] = None
    stall: Optional[str] = None
    notes: Optional[str] = None
    blanket_preferences: Dict[str, float] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if not str(self.name).strip():
            raise ValueError("Horse name is required")
        self.name = str(self.name).strip()
        self.hair_length = parse_hair_length(self.hair_length)
        self.blanket_preferences = _normalise_preferences(self.blanket_preferences)

    def attributes(self) -> HorseAttributes:
        return HorseAttributes(age=self.age, weight=self.weight, hair_length=self.hair_length)


def horse_from_raw(metadata: Dict[str, Any]) -> Horse:
    """Factory to build a :class:`Horse` from a loose form payload."""

    required_fields = ["horse_id", "user_id", "name", "hair_length"]
    missing = [key for key in required_fields if not metadata.get(key)]
    if metadata.get("age") is None:
        missing.append("age")
    if metadata.get("weight") is None:
        missing.append("weight")
    if missing:
        raise ValueError(f"Missing required fields for Horse: {missing}")

    now = time.time()
    return Horse(
        horse_id=str(metadata["horse_id"]),
        user_id=str(metadata["user_id"]),
        name=str(metadata["name"]),
        age=float(metadata["age"]),
        weight=float(metadata["weight"]),
        hair_length=metadata["hair_length"],
        breed=metadata.get("breed"),
        color=metadata.get("color"),
        stall=metadata.get("stall"),
        notes=metadata.get("notes"),
        blanket_preferences=metadata.get("blanket_preferences") or {},
        created_at=float(metadata.get("created_at") or now),
        updated_at=float(metadata.get("updated_at") or now),
    )


__all__ = ["Horse", "HorseAttributes", "horse_from_raw"]
