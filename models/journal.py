"""Journal entries with photo attachments and their AI analysis."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.taxonomy import JournalCategory, JournalEntryType


class FoodItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    quantity: Optional[str] = None
    calories: Optional[float] = None
    confidence: float = 0.0


class HorseCondition(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    visible: bool = False
    coat_condition: Optional[Literal["clipped", "short", "medium", "long"]] = Field(
        default=None, alias="coatCondition"
    )
    notes: Optional[str] = None


class PhotoAnalysis(BaseModel):
    """Union of the food, horse-blanket and general barn analyses; every field optional."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    description: Optional[str] = None
    confidence: Optional[float] = None

    food_detected: Optional[bool] = Field(default=None, alias="foodDetected")
    food_items: Optional[List[FoodItem]] = Field(default=None, alias="foodItems")
    total_calories: Optional[float] = Field(default=None, alias="totalCalories")

    horse_detected: Optional[bool] = Field(default=None, alias="horseDetected")
    blanket_status: Optional[Literal["blanketed", "not_blanketed", "uncertain"]] = Field(
        default=None, alias="blanketStatus"
    )
    blanket_type: Optional[Literal["none", "light", "medium", "heavy", "uncertain"]] = Field(
        default=None, alias="blanketType"
    )
    horse_condition: Optional[HorseCondition] = Field(default=None, alias="horseCondition")

    animals_detected: Optional[List[str]] = Field(default=None, alias="animalsDetected")
    barn_activity: Optional[str] = Field(default=None, alias="barnActivity")

    analyzed_at: Optional[float] = None


class JournalPhoto(BaseModel):
    photo_id: str
    url: str
    analysis: Optional[PhotoAnalysis] = None
    analysis_status: Literal["pending", "analyzing", "completed", "failed"] = "pending"
    analysis_error: Optional[str] = None
    uploaded_at: float = Field(default_factory=time.time)


class JournalEntry(BaseModel):
    """A dated barn journal entry owned by one user."""

    entry_id: str
    user_id: str
    type: JournalEntryType = JournalEntryType.NOTE
    category: JournalCategory = JournalCategory.OBSERVATION
    title: Optional[str] = None
    notes: Optional[str] = None
    photos: List[JournalPhoto] = Field(default_factory=list)
    entry_date: float = Field(default_factory=time.time)
    related_tasks: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    weather: Optional[Dict[str, Any]] = None
    is_private: bool = True
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)

    def find_photo(self, photo_id: str) -> Optional[JournalPhoto]:
        for photo in self.photos:
            if photo.photo_id == photo_id:
                return photo
        return None


__all__ = ["FoodItem", "HorseCondition", "JournalEntry", "JournalPhoto", "PhotoAnalysis"]
