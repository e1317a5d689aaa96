"""HTTP nutrition adapter — implements NutritionEstimator via a hosted proxy function.

The proxy accepts {"foodName": "..."} and answers with the nutrition JSON,
or with 429 (rate limit) / 402 (credits exhausted) from the upstream AI API.
"""

from __future__ import annotations

import logging

import httpx

from src.core.nutrition import parse_nutrition
from src.data.models import NutritionEstimate
from src.ports.estimator_port import (
    EstimationFailed,
    EstimatorTimeout,
    QuotaExhausted,
    RateLimited,
)

logger = logging.getLogger(__name__)


class HttpNutritionEstimator:
    """Calls the hosted analyze-food function."""

    def __init__(self, url: str, api_key: str = "", timeout: float = 15.0) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout

    async def estimate(self, food_name: str) -> NutritionEstimate:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json={"foodName": food_name}, headers=headers)
        except httpx.TimeoutException as exc:
            raise EstimatorTimeout(f"No estimate within {self._timeout}s") from exc
        except httpx.HTTPError as exc:
            logger.error("Nutrition function unreachable: %s", exc)
            raise EstimationFailed(str(exc)) from exc

        if resp.status_code == 429:
            raise RateLimited("Rate limit exceeded, please try again later.")
        if resp.status_code == 402:
            raise QuotaExhausted("AI credits exhausted.")
        if resp.status_code >= 400:
            logger.error("Nutrition function error %d: %s", resp.status_code, resp.text[:200])
            raise EstimationFailed(f"Nutrition function returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise EstimationFailed("Nutrition function returned malformed JSON") from exc
        return parse_nutrition(data)
