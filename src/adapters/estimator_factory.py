"""Nutrition estimator factory — creates the right adapter based on config."""

from __future__ import annotations

from src.config import settings
from src.ports.estimator_port import NutritionEstimator


def create_nutrition_estimator() -> NutritionEstimator:
    """Return the estimator matching the NUTRITION_PROVIDER setting."""
    provider = settings.NUTRITION_PROVIDER.lower()

    if provider == "llm":
        from src.adapters.llm_estimator import LLMNutritionEstimator

        return LLMNutritionEstimator(timeout=settings.ESTIMATOR_TIMEOUT_SECONDS)

    if provider == "http":
        from src.adapters.http_estimator import HttpNutritionEstimator

        return HttpNutritionEstimator(
            url=settings.NUTRITION_FUNCTION_URL,
            api_key=settings.NUTRITION_FUNCTION_KEY,
            timeout=settings.ESTIMATOR_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown NUTRITION_PROVIDER: {provider!r}")
