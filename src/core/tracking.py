"""
FitTrack Assistant — Tracking Service.

Food, weight and health logging plus the "today" dashboard numbers.
AI autofill of nutrition values is best-effort: any estimator failure is
reported back so the user can type the values in manually.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from src.core.entitlement import is_entitlement_active, utcnow
from src.core.results import ResultKind, ServiceResult
from src.data.models import (
    MEAL_TYPES,
    DailySummary,
    FoodEntry,
    HealthEntry,
    NutritionEstimate,
    WeightEntry,
)
from src.ports.estimator_port import EstimatorError, QuotaExhausted, RateLimited
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.data.db import FoodLogDB, HealthLogDB, ProfileDB, WeightLogDB
    from src.ports.estimator_port import NutritionEstimator

logger = logging.getLogger(__name__)

_HEALTH_METRICS = ("calories_burned", "sleep_hours", "spo2_avg", "bpm_avg", "steps", "water_ml")


class AutofillKind(Enum):
    FILLED = "filled"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    FAILED = "failed"


@dataclass
class AutofillResult:
    kind: AutofillKind
    message: str
    estimate: NutritionEstimate | None = None


@dataclass
class LogResult(ServiceResult):
    entry: object | None = None


def _non_negative(value: float) -> bool:
    return math.isfinite(value) and value >= 0


def compute_bmi(weight: float | None, height_cm: float | None) -> float | None:
    if not weight or not height_cm:
        return None
    return round(weight / (height_cm / 100) ** 2, 1)


def compute_goal_progress(current_weight: float | None, goal_weight: float | None) -> int:
    """Percent of the way to goal as shown on the dashboard, capped at 100."""
    if not current_weight or not goal_weight:
        return 0
    return min(100, round(goal_weight / current_weight * 100))


class TrackingService:
    """Per-user logging and dashboard aggregation."""

    def __init__(
        self,
        profiles: ProfileDB,
        food: FoodLogDB,
        health: HealthLogDB,
        weight: WeightLogDB,
        estimator: NutritionEstimator | None = None,
    ) -> None:
        self._profiles = profiles
        self._food = food
        self._health = health
        self._weight = weight
        self._estimator = estimator

    # ------------------------------------------------------------------
    # Food
    # ------------------------------------------------------------------

    async def autofill_nutrition(self, food_name: str) -> AutofillResult:
        """Ask the estimator for macros. Never raises."""
        name = (food_name or "").strip()
        if not name:
            return AutofillResult(AutofillKind.FAILED, "Enter a food name first.")
        if self._estimator is None:
            return AutofillResult(AutofillKind.FAILED, "AI estimation is not configured.")

        try:
            estimate = await self._estimator.estimate(name)
        except RateLimited:
            return AutofillResult(
                AutofillKind.RATE_LIMITED, "Too many AI requests right now. Enter the values manually.",
            )
        except QuotaExhausted:
            return AutofillResult(
                AutofillKind.QUOTA_EXHAUSTED, "AI estimation is unavailable. Enter the values manually.",
            )
        except EstimatorError as exc:
            logger.warning("Autofill for '%s' failed: %s", name, exc)
            return AutofillResult(AutofillKind.FAILED, "Failed to analyze food. Enter the values manually.")

        return AutofillResult(AutofillKind.FILLED, "Nutrition info filled by AI!", estimate=estimate)

    def log_food(
        self,
        user_id: int,
        food_name: str,
        meal_type: str = "snack",
        calories: float = 0,
        protein: float = 0,
        carbs: float = 0,
        fat: float = 0,
        on_date: str | None = None,
    ) -> LogResult:
        name = (food_name or "").strip()
        meal = (meal_type or "").strip().lower()
        if not name:
            return LogResult(ResultKind.INVALID_INPUT, "Food name is required.")
        if meal not in MEAL_TYPES:
            return LogResult(ResultKind.INVALID_INPUT, f"Meal type must be one of: {', '.join(MEAL_TYPES)}.")
        if not all(_non_negative(v) for v in (calories, protein, carbs, fat)):
            return LogResult(ResultKind.INVALID_INPUT, "Nutrition values must be non-negative numbers.")

        entry = FoodEntry(
            user_id=user_id,
            date=on_date or date.today().isoformat(),
            food_name=name,
            meal_type=meal,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
        )
        try:
            self._food.add_entry(entry)
        except StoreError as exc:
            logger.error("log_food for user %d failed: %s", user_id, exc)
            return LogResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't save your entry.")
        return LogResult(ResultKind.SUCCESS, "Food logged!", entry=entry)

    def delete_food(self, user_id: int, entry_id: int) -> LogResult:
        try:
            deleted = self._food.delete_entry(user_id, entry_id)
        except StoreError as exc:
            logger.error("delete_food for user %d failed: %s", user_id, exc)
            return LogResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't delete the entry.")
        if not deleted:
            return LogResult(ResultKind.NOT_FOUND, f"No food entry #{entry_id}.")
        return LogResult(ResultKind.SUCCESS, "Entry deleted.")

    # ------------------------------------------------------------------
    # Weight & health
    # ------------------------------------------------------------------

    def log_weight(self, user_id: int, weight: float, on_date: str | None = None) -> LogResult:
        """Record today's (or on_date's) weight; re-logging the same date replaces it."""
        if not math.isfinite(weight) or weight <= 0:
            return LogResult(ResultKind.INVALID_INPUT, "Weight must be a positive number.")
        day = on_date or date.today().isoformat()
        try:
            entry = self._weight.upsert(user_id, day, weight)
            self._profiles.set_current_weight(user_id, weight)
        except StoreError as exc:
            logger.error("log_weight for user %d failed: %s", user_id, exc)
            return LogResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't save your weight.")
        return LogResult(ResultKind.SUCCESS, "Weight logged!", entry=entry)

    def weight_history(self, user_id: int, limit: int = 90) -> list[WeightEntry]:
        """The user's most recent weights, oldest first. Raises StoreError."""
        return self._weight.recent_entries(user_id, limit)

    def log_health(self, user_id: int, on_date: str | None = None, **metrics: float) -> LogResult:
        unknown = set(metrics) - set(_HEALTH_METRICS)
        if unknown:
            return LogResult(ResultKind.INVALID_INPUT, f"Unknown metric(s): {', '.join(sorted(unknown))}.")
        values = {k: v for k, v in metrics.items() if v is not None}
        if not values:
            return LogResult(ResultKind.INVALID_INPUT, "Provide at least one health metric.")
        if not all(_non_negative(v) for v in values.values()):
            return LogResult(ResultKind.INVALID_INPUT, "Health metrics must be non-negative numbers.")

        entry = HealthEntry(user_id=user_id, date=on_date or date.today().isoformat(), **values)
        try:
            self._health.add_entry(entry)
        except StoreError as exc:
            logger.error("log_health for user %d failed: %s", user_id, exc)
            return LogResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't save your health data.")
        return LogResult(ResultKind.SUCCESS, "Health data logged!", entry=entry)

    def set_goals(
        self, user_id: int, goal_weight: float | None = None, height_cm: float | None = None,
    ) -> LogResult:
        if goal_weight is None and height_cm is None:
            return LogResult(ResultKind.INVALID_INPUT, "Provide a goal weight and/or height.")
        if any(v is not None and (not math.isfinite(v) or v <= 0) for v in (goal_weight, height_cm)):
            return LogResult(ResultKind.INVALID_INPUT, "Goal weight and height must be positive.")
        try:
            updated = self._profiles.set_body_metrics(user_id, goal_weight, height_cm)
        except StoreError as exc:
            logger.error("set_goals for user %d failed: %s", user_id, exc)
            return LogResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't save your goals.")
        if not updated:
            return LogResult(ResultKind.NOT_FOUND, "No profile found. Send /start first.")
        return LogResult(ResultKind.SUCCESS, "Goals updated!")

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def daily_summary(self, user_id: int, on_date: str | None = None) -> DailySummary:
        """Totals for one date. Raises StoreError; the caller renders the failure."""
        day = on_date or date.today().isoformat()
        food = self._food.list_entries(user_id, day, day)
        health = self._health.list_entries(user_id, day, day)
        profile = self._profiles.get_profile(user_id)

        summary = DailySummary(
            date=day,
            calories=sum(e.calories or 0 for e in food),
            protein=sum(e.protein or 0 for e in food),
            entries=food,
        )
        if health:
            latest = health[-1]
            summary.steps = latest.steps or 0
            summary.water_ml = latest.water_ml or 0
            summary.sleep_hours = latest.sleep_hours or 0
            summary.bpm_avg = latest.bpm_avg or 0
            summary.spo2_avg = latest.spo2_avg or 0
        if profile is not None:
            summary.bmi = compute_bmi(profile.current_weight, profile.height_cm)
            summary.goal_progress = compute_goal_progress(profile.current_weight, profile.goal_weight)
            summary.premium_active = is_entitlement_active(profile, utcnow())
        return summary
