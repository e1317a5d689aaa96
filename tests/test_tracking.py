"""Tests for src.core.tracking — logging, autofill and the daily summary."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.results import ResultKind
from src.core.tracking import (
    AutofillKind,
    TrackingService,
    compute_bmi,
    compute_goal_progress,
)
from src.data.models import NutritionEstimate
from src.ports.estimator_port import (
    EstimationFailed,
    EstimatorTimeout,
    QuotaExhausted,
    RateLimited,
)
from src.ports.store_port import StoreError


@pytest.fixture
def tracking(profile_db, food_db, health_db, weight_db):
    return TrackingService(profile_db, food_db, health_db, weight_db)


class TestHelpers:
    def test_bmi(self):
        assert compute_bmi(80, 180) == 24.7

    @pytest.mark.parametrize("weight, height", [(None, 180), (80, None), (0, 180)])
    def test_bmi_missing_inputs(self, weight, height):
        assert compute_bmi(weight, height) is None

    def test_goal_progress(self):
        assert compute_goal_progress(80, 72) == 90

    def test_goal_progress_capped(self):
        assert compute_goal_progress(60, 65) == 100

    def test_goal_progress_missing(self):
        assert compute_goal_progress(None, 70) == 0


# ---------------------------------------------------------------------------
# autofill_nutrition
# ---------------------------------------------------------------------------


class TestAutofillNutrition:
    def _service(self, estimator):
        return TrackingService(MagicMock(), MagicMock(), MagicMock(), MagicMock(), estimator=estimator)

    @pytest.mark.asyncio
    async def test_filled(self):
        estimate = NutritionEstimate(calories=105, protein=1.3, carbs=27, fat=0.4)
        estimator = MagicMock()
        estimator.estimate = AsyncMock(return_value=estimate)

        result = await self._service(estimator).autofill_nutrition("  banana ")

        assert result.kind == AutofillKind.FILLED
        assert result.estimate == estimate
        estimator.estimate.assert_awaited_once_with("banana")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error, expected", [
        (RateLimited("429"), AutofillKind.RATE_LIMITED),
        (QuotaExhausted("402"), AutofillKind.QUOTA_EXHAUSTED),
        (EstimationFailed("bad json"), AutofillKind.FAILED),
        (EstimatorTimeout("slow"), AutofillKind.FAILED),
    ])
    async def test_estimator_errors_are_reported(self, error, expected):
        estimator = MagicMock()
        estimator.estimate = AsyncMock(side_effect=error)

        result = await self._service(estimator).autofill_nutrition("banana")

        assert result.kind == expected
        assert result.estimate is None
        assert "manually" in result.message

    @pytest.mark.asyncio
    async def test_blank_name(self):
        estimator = MagicMock()
        estimator.estimate = AsyncMock()
        result = await self._service(estimator).autofill_nutrition("   ")
        assert result.kind == AutofillKind.FAILED
        estimator.estimate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_estimator_configured(self):
        result = await self._service(None).autofill_nutrition("banana")
        assert result.kind == AutofillKind.FAILED


# ---------------------------------------------------------------------------
# Food
# ---------------------------------------------------------------------------


class TestLogFood:
    def test_logs_entry(self, tracking, food_db):
        result = tracking.log_food(1, "Oatmeal", "Breakfast", 300, 10, 50, 6, on_date="2024-01-01")
        assert result.ok
        assert result.entry.id is not None
        entries = food_db.list_entries(1)
        assert len(entries) == 1
        assert entries[0].meal_type == "breakfast"
        assert entries[0].calories == 300

    def test_defaults_to_today_and_snack(self, tracking, food_db):
        tracking.log_food(1, "Apple", calories=95)
        entry = food_db.list_entries(1)[0]
        assert entry.date == date.today().isoformat()
        assert entry.meal_type == "snack"

    def test_blank_name_rejected(self, tracking):
        assert tracking.log_food(1, "  ").kind == ResultKind.INVALID_INPUT

    def test_unknown_meal_rejected(self, tracking):
        assert tracking.log_food(1, "Toast", "brunch").kind == ResultKind.INVALID_INPUT

    def test_negative_values_rejected(self, tracking, food_db):
        assert tracking.log_food(1, "Toast", calories=-5).kind == ResultKind.INVALID_INPUT
        assert food_db.list_entries(1) == []

    @pytest.mark.parametrize("field", ["calories", "protein", "carbs", "fat"])
    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_values_rejected(self, tracking, food_db, field, value):
        result = tracking.log_food(1, "Toast", **{field: value})
        assert result.kind == ResultKind.INVALID_INPUT
        assert food_db.list_entries(1) == []

    def test_store_error(self):
        food = MagicMock()
        food.add_entry.side_effect = StoreError("locked")
        service = TrackingService(MagicMock(), food, MagicMock(), MagicMock())
        assert service.log_food(1, "Toast").kind == ResultKind.UPSTREAM_UNAVAILABLE


class TestDeleteFood:
    def test_delete_own_entry(self, tracking, food_db):
        entry = tracking.log_food(1, "Toast", calories=80).entry
        assert tracking.delete_food(1, entry.id).ok
        assert food_db.list_entries(1) == []

    def test_cannot_delete_other_users_entry(self, tracking, food_db):
        entry = tracking.log_food(1, "Toast", calories=80).entry
        assert tracking.delete_food(2, entry.id).kind == ResultKind.NOT_FOUND
        assert len(food_db.list_entries(1)) == 1


# ---------------------------------------------------------------------------
# Weight, health & goals
# ---------------------------------------------------------------------------


class TestLogWeight:
    def test_updates_profile_current_weight(self, tracking, profile_db, weight_db):
        profile_db.add_profile(1)
        assert tracking.log_weight(1, 81.5, on_date="2024-01-01").ok
        assert profile_db.get_profile(1).current_weight == 81.5
        assert weight_db.list_entries(1)[0].weight == 81.5

    def test_same_date_replaces(self, tracking, profile_db, weight_db):
        profile_db.add_profile(1)
        tracking.log_weight(1, 82, on_date="2024-01-01")
        tracking.log_weight(1, 81, on_date="2024-01-01")
        entries = weight_db.list_entries(1)
        assert len(entries) == 1
        assert entries[0].weight == 81

    @pytest.mark.parametrize("weight", [0, -70, float("inf"), float("nan")])
    def test_non_positive_or_non_finite_rejected(self, tracking, profile_db, weight_db, weight):
        profile_db.add_profile(1)
        assert tracking.log_weight(1, weight).kind == ResultKind.INVALID_INPUT
        assert weight_db.list_entries(1) == []
        assert profile_db.get_profile(1).current_weight is None


class TestWeightHistory:
    def test_oldest_first(self, tracking, profile_db):
        profile_db.add_profile(1)
        tracking.log_weight(1, 80, on_date="2024-01-03")
        tracking.log_weight(1, 82, on_date="2024-01-01")
        tracking.log_weight(1, 81, on_date="2024-01-02")

        history = tracking.weight_history(1)

        assert [(e.date, e.weight) for e in history] == [
            ("2024-01-01", 82), ("2024-01-02", 81), ("2024-01-03", 80),
        ]

    def test_limit_keeps_most_recent(self, tracking, profile_db):
        profile_db.add_profile(1)
        for day in range(1, 6):
            tracking.log_weight(1, 80 - day, on_date=f"2024-01-0{day}")

        history = tracking.weight_history(1, limit=3)

        assert [e.date for e in history] == ["2024-01-03", "2024-01-04", "2024-01-05"]

    def test_only_own_entries(self, tracking, profile_db):
        profile_db.add_profile(1)
        tracking.log_weight(1, 80, on_date="2024-01-01")
        assert tracking.weight_history(2) == []

    def test_store_error_propagates(self):
        weight = MagicMock()
        weight.recent_entries.side_effect = StoreError("locked")
        service = TrackingService(MagicMock(), MagicMock(), MagicMock(), weight)
        with pytest.raises(StoreError):
            service.weight_history(1)


class TestLogHealth:
    def test_logs_metrics(self, tracking, health_db):
        result = tracking.log_health(1, on_date="2024-01-01", steps=8000, sleep_hours=7.5)
        assert result.ok
        entry = health_db.list_entries(1)[0]
        assert entry.steps == 8000
        assert entry.sleep_hours == 7.5
        assert entry.calories_burned is None

    def test_requires_a_metric(self, tracking):
        assert tracking.log_health(1).kind == ResultKind.INVALID_INPUT

    def test_unknown_metric(self, tracking):
        assert tracking.log_health(1, mood=5).kind == ResultKind.INVALID_INPUT

    def test_negative_metric(self, tracking):
        assert tracking.log_health(1, steps=-1).kind == ResultKind.INVALID_INPUT

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_metric(self, tracking, health_db, value):
        assert tracking.log_health(1, sleep_hours=value).kind == ResultKind.INVALID_INPUT
        assert health_db.list_entries(1) == []


class TestSetGoals:
    def test_partial_update(self, tracking, profile_db):
        profile_db.add_profile(1)
        tracking.set_goals(1, height_cm=175)
        tracking.set_goals(1, goal_weight=70)
        profile = profile_db.get_profile(1)
        assert profile.height_cm == 175
        assert profile.goal_weight == 70

    def test_nothing_to_update(self, tracking):
        assert tracking.set_goals(1).kind == ResultKind.INVALID_INPUT

    def test_non_finite_goal_rejected(self, tracking):
        assert tracking.set_goals(1, goal_weight=float("inf")).kind == ResultKind.INVALID_INPUT
        assert tracking.set_goals(1, height_cm=float("nan")).kind == ResultKind.INVALID_INPUT

    def test_unknown_user(self, tracking):
        assert tracking.set_goals(404, goal_weight=70).kind == ResultKind.NOT_FOUND


# ---------------------------------------------------------------------------
# Daily summary
# ---------------------------------------------------------------------------


class TestDailySummary:
    def test_totals_and_profile_metrics(self, tracking, profile_db):
        profile_db.add_profile(1, "Dana")
        profile_db.set_premium(1, True, datetime.now(timezone.utc) + timedelta(days=3))
        tracking.set_goals(1, goal_weight=72, height_cm=180)
        tracking.log_weight(1, 80, on_date="2024-01-01")
        tracking.log_food(1, "Eggs", calories=200, protein=14, on_date="2024-01-01")
        tracking.log_food(1, "Rice", calories=300, protein=5, on_date="2024-01-01")
        tracking.log_food(1, "Cake", calories=500, on_date="2024-01-02")
        tracking.log_health(1, on_date="2024-01-01", steps=4000)
        tracking.log_health(1, on_date="2024-01-01", steps=9000, water_ml=1500)

        summary = tracking.daily_summary(1, "2024-01-01")

        assert summary.calories == 500
        assert summary.protein == 19
        assert len(summary.entries) == 2
        assert summary.steps == 9000
        assert summary.water_ml == 1500
        assert summary.bmi == 24.7
        assert summary.goal_progress == 90
        assert summary.premium_active is True

    def test_empty_day(self, tracking):
        summary = tracking.daily_summary(1, "2024-01-01")
        assert summary.calories == 0
        assert summary.entries == []
        assert summary.bmi is None
        assert summary.premium_active is False

    def test_store_error_propagates(self):
        food = MagicMock()
        food.list_entries.side_effect = StoreError("locked")
        service = TrackingService(MagicMock(), food, MagicMock(), MagicMock())
        with pytest.raises(StoreError):
            service.daily_summary(1, "2024-01-01")
