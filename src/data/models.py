"""
FitTrack Assistant — Data Models.

Plain records shared by the stores and the services. Timestamps are
timezone-aware UTC datetimes; calendar dates are ISO strings (YYYY-MM-DD),
so lexicographic order is also chronological order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")


@dataclass
class Identity:
    """Who is calling. Passed explicitly into every service call."""

    user_id: int
    role: str = "user"     # "user" | "admin"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class Profile:
    """One per user. Premium is only *active* while premium_expiry is in the future."""

    user_id: int
    full_name: str | None = None
    is_premium: bool = False
    premium_expiry: datetime | None = None
    suspended: bool = False
    current_weight: float | None = None
    goal_weight: float | None = None
    height_cm: float | None = None
    created_at: datetime | None = None


@dataclass
class Voucher:
    """A redeemable code granting duration_days of premium.

    Redeemable iff active, not past expiry_date, and used_count < usage_limit.
    """

    id: int
    code: str                  # always upper-case
    duration_days: int
    usage_limit: int
    expiry_date: datetime
    used_count: int = 0
    active: bool = True
    created_at: datetime | None = None


@dataclass
class FoodEntry:
    date: str
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    food_name: str = ""
    meal_type: str = "snack"
    user_id: int | None = None
    id: int | None = None


@dataclass
class HealthEntry:
    date: str
    calories_burned: float | None = None
    sleep_hours: float | None = None
    spo2_avg: float | None = None
    bpm_avg: float | None = None
    steps: int | None = None
    water_ml: int | None = None
    user_id: int | None = None
    id: int | None = None


@dataclass
class WeightEntry:
    """At most one per (user_id, date); re-logging a date replaces the weight."""

    date: str
    weight: float
    user_id: int | None = None
    id: int | None = None


@dataclass
class NutritionEstimate:
    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass
class DailyReport:
    """One row of the merged per-day report."""

    date: str
    calories_taken: float
    calories_burned: float
    deficit: float
    weight_change_pct: str        # "-2.50%" or WEIGHT_CHANGE_UNAVAILABLE
    sleep_hours: float
    spo2_avg: float | None = None


@dataclass
class DailySummary:
    """Dashboard numbers for a single date."""

    date: str
    calories: float = 0
    protein: float = 0
    steps: int = 0
    water_ml: int = 0
    sleep_hours: float = 0
    bpm_avg: float = 0
    spo2_avg: float = 0
    bmi: float | None = None
    goal_progress: int = 0
    premium_active: bool = False
    entries: list[FoodEntry] = field(default_factory=list)
