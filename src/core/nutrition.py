"""
FitTrack Assistant — Nutrition estimate contract.

The JSON shape every estimator must produce, the prompt that asks an LLM for
it, and the parsing/validation shared by the estimator adapters.
"""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, Field, ValidationError

from src.data.models import NutritionEstimate
from src.ports.estimator_port import EstimationFailed

logger = logging.getLogger(__name__)


class NutritionPayload(BaseModel):
    """Estimated macros for one serving of a food.

    JSON example:
    {"calories": 105, "protein": 1.3, "carbs": 27, "fat": 0.4}
    """
    calories: float = Field(ge=0)   # kcal
    protein: float = Field(ge=0)    # grams
    carbs: float = Field(ge=0)      # grams
    fat: float = Field(ge=0)        # grams

    def to_estimate(self) -> NutritionEstimate:
        return NutritionEstimate(
            calories=self.calories, protein=self.protein, carbs=self.carbs, fat=self.fat,
        )


NUTRITION_SYSTEM_PROMPT = """\
You are a nutrition expert. Given a food item, return its estimated nutritional
values for one typical serving.

Respond with ONLY a JSON object, no explanation:
{"calories": number, "protein": number, "carbs": number, "fat": number}

- "calories" in kcal; "protein", "carbs", "fat" in grams.
- All values are non-negative numbers.
"""


def _clean_llm_response(raw: str) -> str:
    """Strip markdown code fences and whitespace around a JSON answer."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_nutrition(raw: str | dict) -> NutritionEstimate:
    """Validate an estimator answer (JSON text or decoded dict).

    Raises EstimationFailed when the answer is not a valid estimate.
    """
    try:
        data = json.loads(_clean_llm_response(raw)) if isinstance(raw, str) else raw
        if not isinstance(data, dict):
            raise EstimationFailed(f"Expected a JSON object, got {type(data).__name__}")
        return NutritionPayload(**data).to_estimate()
    except json.JSONDecodeError as exc:
        logger.warning("Estimator returned non-JSON: %r", raw)
        raise EstimationFailed("Estimator returned malformed JSON") from exc
    except ValidationError as exc:
        logger.warning("Estimator returned invalid nutrition data: %s", exc)
        raise EstimationFailed("Estimator returned invalid nutrition values") from exc
