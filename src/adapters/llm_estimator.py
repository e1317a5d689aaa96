"""LLM nutrition adapter — implements NutritionEstimator via src.core.llm.

Asks the configured LLM provider for a JSON macro estimate and maps provider
SDK errors onto the estimator error kinds.
"""

from __future__ import annotations

import asyncio
import logging

from src.core.llm import complete
from src.core.nutrition import NUTRITION_SYSTEM_PROMPT, parse_nutrition
from src.data.models import NutritionEstimate
from src.ports.estimator_port import (
    EstimationFailed,
    EstimatorError,
    EstimatorTimeout,
    QuotaExhausted,
    RateLimited,
)

logger = logging.getLogger(__name__)


def classify_provider_error(exc: Exception) -> EstimatorError:
    """Map an SDK exception to RateLimited / QuotaExhausted / EstimationFailed.

    SDKs disagree on naming, so this keys off the HTTP status they expose
    (`status_code` on anthropic/openai/cohere, integer `code` on google).
    """
    status = getattr(exc, "status_code", None)
    code = getattr(exc, "code", None)
    if status is None and isinstance(code, int):
        status = code

    detail = f"{code or ''} {exc}".lower()
    if status == 402 or "insufficient_quota" in detail or "credit" in detail:
        return QuotaExhausted(str(exc))
    if status == 429:
        return RateLimited(str(exc))
    return EstimationFailed(str(exc))


class LLMNutritionEstimator:
    """LLM-backed implementation of NutritionEstimator."""

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is None:
            from src.config import settings
            timeout = settings.ESTIMATOR_TIMEOUT_SECONDS
        self._timeout = timeout

    async def estimate(self, food_name: str) -> NutritionEstimate:
        try:
            raw = await complete(
                system=NUTRITION_SYSTEM_PROMPT,
                user_message=f"Estimate the nutritional values for: {food_name}",
                max_tokens=128,
                json_output=True,
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise EstimatorTimeout(f"No estimate within {self._timeout}s") from exc
        except Exception as exc:
            error = classify_provider_error(exc)
            logger.error("LLM estimate for '%s' failed (%s): %s", food_name, type(error).__name__, exc)
            raise error from exc

        estimate = parse_nutrition(raw)
        logger.info("LLM estimate for '%s': %.0f kcal", food_name, estimate.calories)
        return estimate
