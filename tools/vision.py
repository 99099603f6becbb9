"""Journal photo analysis through a hosted Gemini vision model.

Three prompts are supported: meal/feed calorie estimation, horse blanket
detection and a general barn-scene description. The model is asked for JSON;
the first ``{...}`` block in the reply is parsed and validated into
:class:`PhotoAnalysis`. Replies without usable JSON keep the raw text as the
description.
"""

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Dict, Iterable, List, Protocol

import google.generativeai as genai
from pydantic import BaseModel, Field, ValidationError

from barn_app.config import BarnConfig
from barn_app.logging_config import get_logger, log_event
from logic.errors import PhotoAnalysisError
from models.journal import PhotoAnalysis
from models.taxonomy import PhotoAnalysisType, parse_enum
from tools.observability import instrument_tool

LOGGER = get_logger(__name__)
_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

FOOD_PROMPT = """
You are a nutrition expert analyzing a food photo. Please analyze this image and provide:

1. List of food items visible
2. Estimated portion size for each item
3. Estimated calories for each item
4. Total estimated calories for the meal

Format your response as JSON with this structure:
{
  "foodDetected": true/false,
  "foodItems": [
    {"name": "food name", "quantity": "estimated portion", "calories": estimated_number, "confidence": 0.0-1.0}
  ],
  "totalCalories": total_number,
  "description": "brief description of the meal"
}

If no food is detected, set foodDetected to false and briefly describe what you see instead.
"""

HORSE_PROMPT = """
You are an experienced equestrian analyzing a horse photo. Please provide:

1. Whether a horse is visible in the photo
2. If the horse is wearing a blanket/rug
3. If blanketed, the blanket weight (none, light, medium, heavy)
4. Visible coat condition (clipped, short, medium, long)
5. Any other relevant observations about the horse's condition

Format your response as JSON with this structure:
{
  "horseDetected": true/false,
  "blanketStatus": "blanketed" | "not_blanketed" | "uncertain",
  "blanketType": "none" | "light" | "medium" | "heavy" | "uncertain",
  "horseCondition": {"visible": true/false, "coatCondition": "clipped" | "short" | "medium" | "long", "notes": "..."},
  "description": "brief description of what you see",
  "confidence": 0.0-1.0
}

If no horse is detected, set horseDetected to false and describe what you see instead.
"""

GENERAL_PROMPT = """
You are analyzing a barn/farm photo for a barn management journal. Please provide:

1. General description of what's in the photo
2. Any animals detected (horses, dogs, cats, chickens, etc.)
3. Any barn activities or tasks visible

Format your response as JSON with this structure:
{
  "description": "detailed description of the scene",
  "animalsDetected": ["list", "of", "animals"],
  "barnActivity": "description of any activities/tasks visible",
  "confidence": 0.0-1.0
}
"""

PROMPTS: Dict[PhotoAnalysisType, str] = {
    PhotoAnalysisType.FOOD: FOOD_PROMPT,
    PhotoAnalysisType.HORSE: HORSE_PROMPT,
    PhotoAnalysisType.GENERAL: GENERAL_PROMPT,
}

# Detection flag forced to False when a typed analysis comes back without JSON.
_NOT_DETECTED_FIELD = {
    PhotoAnalysisType.FOOD: "food_detected",
    PhotoAnalysisType.HORSE: "horse_detected",
}


class PhotoAnalysisInput(BaseModel):
    image_bytes: bytes = Field(min_length=1)
    analysis_type: PhotoAnalysisType = PhotoAnalysisType.GENERAL
    mime_type: str = "image/jpeg"


class VisionModel(Protocol):
    def generate_content(self, contents: Any) -> Any:
        ...


def extract_json_block(text: str) -> Dict[str, Any] | None:
    """Return the first ``{...}`` object in ``text`` or ``None`` when there is none."""

    match = _JSON_BLOCK.search(text or "")
    if not match:
        return None
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


class PhotoAnalyzer:
    """Runs the vision prompts against an injected or configured Gemini model."""

    def __init__(self, model: VisionModel | None = None, config: BarnConfig | None = None) -> None:
        if model is None:
            config = config or BarnConfig.from_env()
            if not config.google_api_key:
                raise PhotoAnalysisError("google_api_key is required for photo analysis")
            genai.configure(api_key=config.google_api_key)
            model = genai.GenerativeModel(config.vision_model)
        self.model = model

    def _run_prompt(self, analysis_type: PhotoAnalysisType, image_bytes: bytes, mime_type: str) -> PhotoAnalysis:
        try:
            response = self.model.generate_content(
                [PROMPTS[analysis_type], {"mime_type": mime_type, "data": image_bytes}]
            )
            text = response.text
        except Exception as exc:
            raise PhotoAnalysisError(f"Failed to analyze {analysis_type.value} photo") from exc

        now = time.time()
        payload = extract_json_block(text)
        if payload is not None:
            try:
                return PhotoAnalysis.model_validate({**payload, "analyzed_at": now})
            except ValidationError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "photo_analysis_schema_mismatch",
                    analysis_type=analysis_type.value,
                    errors=[error.get("msg") for error in exc.errors()],
                )

        fallback: Dict[str, Any] = {"description": text, "analyzed_at": now}
        if analysis_type in _NOT_DETECTED_FIELD:
            fallback[_NOT_DETECTED_FIELD[analysis_type]] = False
        return PhotoAnalysis.model_validate(fallback)

    @instrument_tool("analyze_photo", input_model=PhotoAnalysisInput)
    def analyze(
        self,
        *,
        image_bytes: bytes,
        analysis_type: PhotoAnalysisType | str = PhotoAnalysisType.GENERAL,
        mime_type: str = "image/jpeg",
    ) -> PhotoAnalysis:
        """Analyse one photo; ``all`` merges the food, horse and general analyses."""

        kind = parse_enum(PhotoAnalysisType, analysis_type)
        if kind is not PhotoAnalysisType.ALL:
            return self._run_prompt(kind, image_bytes, mime_type)

        merged: Dict[str, Any] = {}
        for sub_type in (PhotoAnalysisType.FOOD, PhotoAnalysisType.HORSE, PhotoAnalysisType.GENERAL):
            try:
                result = self._run_prompt(sub_type, image_bytes, mime_type)
            except PhotoAnalysisError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "photo_sub_analysis_failed",
                    analysis_type=sub_type.value,
                    error=str(exc),
                )
                continue
            merged.update(result.model_dump(exclude_none=True))
        merged["analyzed_at"] = time.time()
        return PhotoAnalysis.model_validate(merged)

    def analyze_many(
        self, images: Iterable[bytes], analysis_type: PhotoAnalysisType | str = PhotoAnalysisType.GENERAL
    ) -> List[PhotoAnalysis]:
        return [self.analyze(image_bytes=image, analysis_type=analysis_type) for image in images]


__all__ = ["PhotoAnalyzer", "PhotoAnalysisInput", "extract_json_block"]
