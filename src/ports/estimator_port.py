"""Nutrition estimator port — abstract interface for food-name → macros lookups.

Estimation is best-effort: callers treat every EstimatorError as recoverable
and fall back to manual entry.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import NutritionEstimate


class EstimatorError(Exception):
    """Base class for nutrition estimator failures."""


class RateLimited(EstimatorError):
    """Upstream AI provider is throttling requests."""


class QuotaExhausted(EstimatorError):
    """Upstream AI credits/quota are used up."""


class EstimationFailed(EstimatorError):
    """Any other failure: bad response, network error, provider error."""


class EstimatorTimeout(EstimationFailed):
    """The estimate did not arrive within the configured timeout."""


class NutritionEstimator(Protocol):
    """Abstract nutrition estimator used by the tracking service."""

    async def estimate(self, food_name: str) -> NutritionEstimate: ...
