"""Pydantic schemas validating request payloads before they reach the services."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.taxonomy import (
    HairLength,
    JournalCategory,
    JournalEntryType,
    TaskCategory,
    TaskFrequency,
    TaskPriority,
)


class HorseAttributesInput(BaseModel):
    """Horse attributes for an ad-hoc calculation.

    ``hair_length`` stays a plain string so that the engine, not the schema,
    reports unknown coat categories.
    """

    age: float
    weight: float
    hair_length: str


class WeatherInput(BaseModel):
    temperature: float
    condition: str = "Unknown"
    wind_speed: float = 0.0
    precipitation: float = 0.0
    humidity: Optional[float] = None


class BlanketingRequest(BaseModel):
    horse: HorseAttributesInput
    weather: WeatherInput


class HorseCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    age: float = Field(ge=0)
    weight: float = Field(gt=0)
    hair_length: HairLength
    breed: Optional[str] = None
    color: Optional[str] = None
    stall: Optional[str] = None
    notes: Optional[str] = None
    blanket_preferences: Dict[str, float] = Field(default_factory=dict)


class TaskCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: TaskCategory = TaskCategory.OTHER
    frequency: TaskFrequency = TaskFrequency.DAILY
    priority: TaskPriority = TaskPriority.HIGH


class CompletionRequest(BaseModel):
    completed: bool
    date: Optional[dt.date] = None


class ShavingsDeliveryRequest(BaseModel):
    bags_received: float = Field(gt=0)
    delivered_at: dt.date
    supplier: Optional[str] = None
    notes: Optional[str] = None


class ShavingsOrderRequest(BaseModel):
    expected_delivery_date: Optional[dt.date] = None


class SupplementDeliveryRequest(BaseModel):
    quantity: float = Field(gt=0)


class JournalEntryRequest(BaseModel):
    type: JournalEntryType = JournalEntryType.NOTE
    category: JournalCategory = JournalCategory.OBSERVATION
    title: Optional[str] = None
    notes: Optional[str] = None
    photo_urls: List[str] = Field(default_factory=list)
    related_tasks: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_private: bool = True


__all__ = [
    "BlanketingRequest",
    "CompletionRequest",
    "HorseAttributesInput",
    "HorseCreateRequest",
    "JournalEntryRequest",
    "ShavingsDeliveryRequest",
    "ShavingsOrderRequest",
    "SupplementDeliveryRequest",
    "TaskCreateRequest",
    "WeatherInput",
]
