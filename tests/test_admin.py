"""Tests for src.core.admin — voucher management and analytics."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from src.core.admin import AdminService
from src.core.results import ResultKind
from src.data.models import FoodEntry
from src.ports.store_port import StoreError


@pytest.fixture
def admin(profile_db, voucher_db, food_db):
    return AdminService(profile_db, voucher_db, food_db)


class TestCreateVoucher:
    def test_creates_upper_cased_voucher(self, admin, voucher_db):
        before = datetime.now(timezone.utc)
        result = admin.create_voucher("summer25", duration_days=30, usage_limit=10, expiry_days=14)

        assert result.ok
        assert result.voucher.code == "SUMMER25"
        stored = voucher_db.get_by_code("SUMMER25")
        assert stored.usage_limit == 10
        assert stored.used_count == 0
        assert stored.active is True
        assert before + timedelta(days=14) <= stored.expiry_date <= datetime.now(timezone.utc) + timedelta(days=14)

    def test_uses_default_expiry(self, admin, voucher_db):
        from src.config import settings

        admin.create_voucher("PROMO", duration_days=7, usage_limit=1)
        stored = voucher_db.get_by_code("PROMO")
        assert stored.expiry_date > datetime.now(timezone.utc) + timedelta(days=settings.DEFAULT_VOUCHER_EXPIRY_DAYS - 1)

    def test_duplicate_code_conflicts(self, admin):
        admin.create_voucher("PROMO", 7, 1, 30)
        assert admin.create_voucher("promo", 7, 1, 30).kind == ResultKind.CONFLICT

    @pytest.mark.parametrize("code, days, limit, expiry", [
        ("", 7, 1, 30),
        ("PROMO", 0, 1, 30),
        ("PROMO", 7, 0, 30),
        ("PROMO", 7, 1, -1),
        ("PROMO", 10_000_000, 1, 30),
        ("PROMO", 7, 1, 10_000_000),
        ("PROMO", 7, 10**20, 30),
    ])
    def test_invalid_input(self, admin, code, days, limit, expiry):
        assert admin.create_voucher(code, days, limit, expiry).kind == ResultKind.INVALID_INPUT

    def test_out_of_range_values_write_nothing(self, admin, voucher_db):
        admin.create_voucher("BIG", 7, 10**20, 30)
        admin.create_voucher("LONG", 10_000_000, 1, 30)
        assert voucher_db.list_vouchers() == []

    def test_largest_allowed_values(self, admin, voucher_db):
        from src.core.admin import MAX_USAGE_LIMIT
        from src.core.entitlement import MAX_DURATION_DAYS

        result = admin.create_voucher("MAX", MAX_DURATION_DAYS, MAX_USAGE_LIMIT, MAX_DURATION_DAYS)

        assert result.ok
        assert voucher_db.get_by_code("MAX").usage_limit == MAX_USAGE_LIMIT

    def test_store_error(self):
        vouchers = MagicMock()
        vouchers.get_by_code.side_effect = StoreError("locked")
        service = AdminService(MagicMock(), vouchers, MagicMock())
        assert service.create_voucher("PROMO", 7, 1, 30).kind == ResultKind.UPSTREAM_UNAVAILABLE


class TestManageVouchers:
    def test_disable_and_enable(self, admin, voucher_db):
        admin.create_voucher("PROMO", 7, 1, 30)

        assert admin.set_voucher_active("promo", False).ok
        assert voucher_db.get_by_code("PROMO").active is False
        assert admin.set_voucher_active("PROMO", True).ok
        assert voucher_db.get_by_code("PROMO").active is True

    def test_toggle_unknown(self, admin):
        assert admin.set_voucher_active("NOPE", False).kind == ResultKind.NOT_FOUND

    def test_delete(self, admin, voucher_db):
        admin.create_voucher("PROMO", 7, 1, 30)
        assert admin.delete_voucher("promo").ok
        assert voucher_db.get_by_code("PROMO") is None
        assert admin.delete_voucher("PROMO").kind == ResultKind.NOT_FOUND

    def test_list_vouchers(self, admin):
        admin.create_voucher("A1", 7, 1, 30)
        admin.create_voucher("B2", 7, 1, 30)
        assert {v.code for v in admin.list_vouchers()} == {"A1", "B2"}


class TestStats:
    def test_platform_stats(self, admin, profile_db, food_db):
        profile_db.add_profile(1, "Dana")
        profile_db.add_profile(2, "Amit")
        profile_db.set_premium(1, True, datetime.now(timezone.utc) + timedelta(days=1))
        admin.create_voucher("A1", 7, 1, 30)
        admin.create_voucher("B2", 7, 1, 30)
        admin.set_voucher_active("B2", False)
        food_db.add_entry(FoodEntry(user_id=1, date="2024-01-01", food_name="Eggs", calories=150))

        stats = admin.platform_stats()

        assert stats.total_users == 2
        assert stats.premium_users == 1
        assert stats.active_vouchers == 1
        assert stats.total_food_logs == 1

    def test_analytics(self, admin, profile_db, food_db):
        profile_db.add_profile(1, "Dana")
        for _ in range(3):
            food_db.add_entry(FoodEntry(user_id=1, date="2024-01-01", food_name="Eggs"))
        food_db.add_entry(FoodEntry(user_id=123456789012, date="2024-01-01", food_name="Tea"))

        analytics = admin.analytics(top_n=5)

        assert [(t.name, t.logs) for t in analytics.top_loggers] == [("Dana", 3), ("12345678", 1)]
        assert sum(n for _, n in analytics.signups_by_day) == 1

    def test_list_users(self, admin, profile_db):
        profile_db.add_profile(1, "Dana")
        assert [p.user_id for p in admin.list_users()] == [1]
