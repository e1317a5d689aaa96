"""
FitTrack Assistant — Aggregation Reporter.

Joins the three independent per-day logs (food, health, weight) into one
report row per date, adding the caloric deficit and day-over-day weight
change. build_report() is a pure function; ReportService fetches the inputs.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date
from typing import TYPE_CHECKING, Iterable

from src.core.results import ReportResult, ResultKind
from src.data.models import DailyReport, FoodEntry, HealthEntry, WeightEntry
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.ports.store_port import FoodLogStore, HealthLogStore, WeightLogStore

logger = logging.getLogger(__name__)

WEIGHT_CHANGE_UNAVAILABLE = "unavailable"


def _weight_change_pct(current: float, previous: float) -> str:
    return f"{(current - previous) / previous * 100:.2f}%"


def build_report(
    food_entries: Iterable[FoodEntry],
    health_entries: Iterable[HealthEntry],
    weight_entries: Iterable[WeightEntry],
) -> list[DailyReport]:
    """Merge the three logs into ascending per-date report rows.

    Only dates with at least one observation appear. Weight change is taken
    against the most recent earlier date that has a weight, which need not
    be the previous day.
    """
    calories_by_date: dict[str, float] = {}
    for entry in food_entries:
        calories_by_date[entry.date] = calories_by_date.get(entry.date, 0) + (entry.calories or 0)

    health_by_date: dict[str, HealthEntry] = {}
    for entry in health_entries:
        health_by_date[entry.date] = entry      # last seen wins

    weight_by_date: dict[str, float] = {}
    for entry in weight_entries:
        weight_by_date[entry.date] = entry.weight

    dates = sorted(set(calories_by_date) | set(health_by_date) | set(weight_by_date))

    rows: list[DailyReport] = []
    previous_weight: float | None = None
    for day in dates:
        taken = calories_by_date.get(day, 0)
        health = health_by_date.get(day)
        burned = (health.calories_burned or 0) if health else 0

        change = WEIGHT_CHANGE_UNAVAILABLE
        current_weight = weight_by_date.get(day)
        if current_weight is not None:
            if previous_weight is not None and previous_weight > 0:
                change = _weight_change_pct(current_weight, previous_weight)
            previous_weight = current_weight

        rows.append(DailyReport(
            date=day,
            calories_taken=taken,
            calories_burned=burned,
            deficit=taken - burned,
            weight_change_pct=change,
            sleep_hours=(health.sleep_hours or 0) if health else 0,
            spo2_avg=health.spo2_avg if health else None,
        ))

    return rows


class ReportService:
    """Fetches a user's logs and builds the daily report.

    The three fetches run concurrently; if any of them fails or times out
    the whole report fails. Partial reports are never returned.
    """

    def __init__(
        self,
        food: FoodLogStore,
        health: HealthLogStore,
        weight: WeightLogStore,
        timeout: float | None = None,
    ) -> None:
        if timeout is None:
            from src.config import settings
            timeout = settings.STORE_TIMEOUT_SECONDS

        self._food = food
        self._health = health
        self._weight = weight
        self._timeout = timeout

    def report_for(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> ReportResult:
        """Build the report for user_id over [start, end] (ISO dates, inclusive)."""
        try:
            start_day = date.fromisoformat(start) if start is not None else None
            end_day = date.fromisoformat(end) if end is not None else None
        except (TypeError, ValueError):
            return ReportResult(ResultKind.INVALID_INPUT, "Dates must be in YYYY-MM-DD format.")
        if start_day and end_day and start_day > end_day:
            return ReportResult(ResultKind.INVALID_INPUT, "Start date is after end date.")
        # Stored dates are compared as text, so pass the canonical form down.
        start = start_day.isoformat() if start_day else None
        end = end_day.isoformat() if end_day else None

        pool = ThreadPoolExecutor(max_workers=3, thread_name_prefix="report-fetch")
        try:
            futures = [
                pool.submit(store.list_entries, user_id, start, end)
                for store in (self._food, self._health, self._weight)
            ]
            _, pending = wait(futures, timeout=self._timeout)
            if pending:
                logger.error("Report fetch for user %d timed out after %.1fs", user_id, self._timeout)
                return ReportResult(ResultKind.UPSTREAM_UNAVAILABLE, "Loading your logs took too long.")
            food, health, weight = (f.result() for f in futures)
        except StoreError as exc:
            logger.error("Report fetch for user %d failed: %s", user_id, exc)
            return ReportResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't load your logs.")
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        rows = build_report(food, health, weight)
        logger.info("Report for user %d: %d rows (%s..%s)", user_id, len(rows), start, end)
        return ReportResult(ResultKind.SUCCESS, rows=rows)
