"""Tests for src.data.models — record defaults."""

from dataclasses import asdict
from datetime import datetime, timezone

from src.data.models import DailySummary, FoodEntry, Identity, Profile, Voucher


def test_identity_defaults_to_user():
    identity = Identity(user_id=1)
    assert identity.role == "user"
    assert identity.is_admin is False


def test_identity_admin():
    assert Identity(user_id=1, role="admin").is_admin is True


def test_profile_defaults():
    profile = Profile(user_id=7)
    assert profile.is_premium is False
    assert profile.premium_expiry is None
    assert profile.suspended is False
    assert profile.current_weight is None


def test_voucher_defaults():
    voucher = Voucher(
        id=1,
        code="FIT2026",
        duration_days=30,
        usage_limit=5,
        expiry_date=datetime(2026, 12, 31, tzinfo=timezone.utc),
    )
    assert voucher.used_count == 0
    assert voucher.active is True


def test_food_entry_defaults():
    entry = FoodEntry(date="2024-01-01")
    assert entry.meal_type == "snack"
    assert entry.calories is None
    assert entry.id is None


def test_daily_summary_entries_not_shared():
    a = DailySummary(date="2024-01-01")
    b = DailySummary(date="2024-01-02")
    a.entries.append(FoodEntry(date="2024-01-01"))
    assert b.entries == []


def test_food_entry_asdict():
    entry = FoodEntry(date="2024-01-01", calories=95, food_name="Apple", user_id=3)
    d = asdict(entry)
    assert d["food_name"] == "Apple"
    assert d["calories"] == 95
    assert d["user_id"] == 3
