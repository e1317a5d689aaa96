"""
FitTrack Assistant — Admin Service.

Voucher management and platform analytics for administrators. Premium
grants and suspensions live in the entitlement engine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from src.core.entitlement import MAX_DURATION_DAYS, normalize_code, utcnow
from src.core.results import ResultKind, ServiceResult
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.data.db import FoodLogDB, ProfileDB, VoucherDB
    from src.data.models import Profile, Voucher

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value.
MAX_USAGE_LIMIT = 2**63 - 1


@dataclass
class VoucherResult(ServiceResult):
    voucher: Voucher | None = None


@dataclass
class PlatformStats:
    total_users: int
    premium_users: int
    active_vouchers: int
    total_food_logs: int


@dataclass
class TopLogger:
    name: str
    logs: int


@dataclass
class Analytics:
    signups_by_day: list[tuple[str, int]] = field(default_factory=list)
    top_loggers: list[TopLogger] = field(default_factory=list)


class AdminService:
    """Administrator operations. Callers must check Identity.is_admin first."""

    def __init__(self, profiles: ProfileDB, vouchers: VoucherDB, food: FoodLogDB) -> None:
        self._profiles = profiles
        self._vouchers = vouchers
        self._food = food

    # ------------------------------------------------------------------
    # Vouchers
    # ------------------------------------------------------------------

    def create_voucher(
        self,
        code: str,
        duration_days: int,
        usage_limit: int,
        expiry_days: int | None = None,
    ) -> VoucherResult:
        """Create a voucher redeemable until now + expiry_days."""
        if expiry_days is None:
            from src.config import settings
            expiry_days = settings.DEFAULT_VOUCHER_EXPIRY_DAYS

        normalized = normalize_code(code)
        if not normalized:
            return VoucherResult(ResultKind.INVALID_INPUT, "Voucher code is required.")
        if min(duration_days, usage_limit, expiry_days) <= 0:
            return VoucherResult(
                ResultKind.INVALID_INPUT, "Duration, usage limit and expiry must be positive.",
            )
        if max(duration_days, expiry_days) > MAX_DURATION_DAYS:
            return VoucherResult(
                ResultKind.INVALID_INPUT, f"Duration and expiry can be at most {MAX_DURATION_DAYS} days.",
            )
        if usage_limit > MAX_USAGE_LIMIT:
            return VoucherResult(ResultKind.INVALID_INPUT, "Usage limit is too large.")

        try:
            if self._vouchers.get_by_code(normalized) is not None:
                return VoucherResult(ResultKind.CONFLICT, f"Voucher {normalized} already exists.")
            voucher = self._vouchers.add_voucher(
                normalized, duration_days, usage_limit, utcnow() + timedelta(days=expiry_days),
            )
        except StoreError as exc:
            logger.error("create_voucher '%s' failed: %s", normalized, exc)
            return VoucherResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't save the voucher.")
        return VoucherResult(ResultKind.SUCCESS, "Voucher created!", voucher=voucher)

    def delete_voucher(self, code: str) -> VoucherResult:
        try:
            deleted = self._vouchers.delete_voucher(normalize_code(code))
        except StoreError as exc:
            logger.error("delete_voucher '%s' failed: %s", code, exc)
            return VoucherResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't delete the voucher.")
        if not deleted:
            return VoucherResult(ResultKind.NOT_FOUND, "Voucher not found.")
        return VoucherResult(ResultKind.SUCCESS, "Voucher deleted.")

    def set_voucher_active(self, code: str, active: bool) -> VoucherResult:
        try:
            updated = self._vouchers.set_active(normalize_code(code), active)
        except StoreError as exc:
            logger.error("set_voucher_active '%s' failed: %s", code, exc)
            return VoucherResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't update the voucher.")
        if not updated:
            return VoucherResult(ResultKind.NOT_FOUND, "Voucher not found.")
        logger.info("Voucher '%s' %s", normalize_code(code), "enabled" if active else "disabled")
        return VoucherResult(ResultKind.SUCCESS, "Voucher enabled." if active else "Voucher disabled.")

    def list_vouchers(self) -> list[Voucher]:
        return self._vouchers.list_vouchers()

    # ------------------------------------------------------------------
    # Users & analytics
    # ------------------------------------------------------------------

    def list_users(self) -> list[Profile]:
        return self._profiles.list_profiles()

    def platform_stats(self) -> PlatformStats:
        return PlatformStats(
            total_users=len(self._profiles.list_profiles()),
            premium_users=self._profiles.count_premium(),
            active_vouchers=self._vouchers.count_active(),
            total_food_logs=self._food.count_all(),
        )

    def signups_by_day(self) -> list[tuple[str, int]]:
        return self._profiles.signups_by_day()

    def top_loggers(self, limit: int = 5) -> list[TopLogger]:
        """Users with the most food entries; unnamed users show a short id."""
        top: list[TopLogger] = []
        for user_id, count in self._food.top_loggers(limit):
            profile = self._profiles.get_profile(user_id)
            name = (profile.full_name if profile else None) or str(user_id)[:8]
            top.append(TopLogger(name=name, logs=count))
        return top

    def analytics(self, top_n: int = 5) -> Analytics:
        return Analytics(signups_by_day=self.signups_by_day(), top_loggers=self.top_loggers(top_n))
