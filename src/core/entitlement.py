"""
FitTrack Assistant — Entitlement Engine.

Owns the premium rules: redeeming voucher codes, administrator grants and
suspensions, and deciding whether a profile is premium *right now*.

The caller's identity is always an explicit user_id argument. Every outcome
is returned as an EntitlementResult; nothing here retries.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

from src.core.results import EntitlementResult, ResultKind
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.data.models import Profile
    from src.ports.store_port import ProfileStore, VoucherStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Longest premium period an admin or voucher may grant (about 100 years).
MAX_DURATION_DAYS = 36500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_code(raw_code: str | None) -> str:
    return (raw_code or "").strip().upper()


def is_entitlement_active(profile: Profile | None, now: datetime | None = None) -> bool:
    """True only while the premium flag is set and the expiry is strictly in the future."""
    if profile is None or not profile.is_premium or profile.premium_expiry is None:
        return False
    return profile.premium_expiry > (now or utcnow())


class EntitlementService:
    """Voucher redemption and premium/suspension administration."""

    def __init__(
        self,
        profiles: ProfileStore,
        vouchers: VoucherStore,
        clock: Clock = utcnow,
        default_premium_days: int | None = None,
    ) -> None:
        if default_premium_days is None:
            from src.config import settings
            default_premium_days = settings.DEFAULT_PREMIUM_DAYS

        self._profiles = profiles
        self._vouchers = vouchers
        self._clock = clock
        self._default_premium_days = default_premium_days

    # ------------------------------------------------------------------
    # Redemption
    # ------------------------------------------------------------------

    def redeem_voucher(self, user_id: int, raw_code: str) -> EntitlementResult:
        """Redeem a voucher code for a user.

        On success the profile's premium expiry becomes now + duration_days.
        An already-running premium period is replaced, not extended.
        """
        code = normalize_code(raw_code)
        if not code:
            return EntitlementResult(ResultKind.INVALID_INPUT, "Please enter a voucher code.")

        now = self._clock()
        try:
            voucher = self._vouchers.get_by_code(code)
            if voucher is None or not voucher.active:
                logger.warning("Redeem: unknown or inactive code '%s' (user %d)", code, user_id)
                return EntitlementResult(ResultKind.NOT_FOUND, "Invalid voucher code.")
            if now > voucher.expiry_date:
                return EntitlementResult(ResultKind.EXPIRED, "Voucher has expired.")
            if voucher.used_count >= voucher.usage_limit:
                return EntitlementResult(ResultKind.EXHAUSTED, "Voucher usage limit reached.")

            if self._profiles.get_profile(user_id) is None:
                return EntitlementResult(ResultKind.NOT_FOUND, "No profile found. Send /start first.")

            try:
                new_expiry = now + timedelta(days=voucher.duration_days)
            except OverflowError:
                logger.warning("Redeem: voucher '%s' has an out-of-range duration", code)
                return EntitlementResult(ResultKind.INVALID_INPUT, "Voucher duration is out of range.")
            if not self._vouchers.redeem(voucher.id, user_id, new_expiry, now):
                return self._classify_lost_redemption(voucher.id, now)
        except StoreError as exc:
            logger.error("Redeem '%s' for user %d failed: %s", code, user_id, exc)
            return EntitlementResult(
                ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't reach the database. Please try again.",
            )

        logger.info(
            "Voucher '%s' redeemed by user %d, premium until %s",
            code, user_id, new_expiry.isoformat(),
        )
        return EntitlementResult(ResultKind.SUCCESS, "Premium activated!", new_expiry=new_expiry)

    def _classify_lost_redemption(self, voucher_id: int, now: datetime) -> EntitlementResult:
        """The voucher passed the checks but changed before the write landed."""
        current = self._vouchers.get_voucher(voucher_id)
        if current is None:
            return EntitlementResult(ResultKind.NOT_FOUND, "Invalid voucher code.")
        if not current.active:
            return EntitlementResult(ResultKind.INACTIVE, "Voucher was disabled.")
        if now > current.expiry_date:
            return EntitlementResult(ResultKind.EXPIRED, "Voucher has expired.")
        logger.warning("Redemption race lost on voucher #%d", voucher_id)
        return EntitlementResult(
            ResultKind.CONFLICT, "Someone else just used the last redemption of this voucher.",
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def premium_status(self, user_id: int) -> EntitlementResult:
        """Report whether the user's premium is active, with its expiry."""
        try:
            profile = self._profiles.get_profile(user_id)
        except StoreError as exc:
            logger.error("premium_status for user %d failed: %s", user_id, exc)
            return EntitlementResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't reach the database.")
        if profile is None:
            return EntitlementResult(ResultKind.NOT_FOUND, "No profile found.")
        if is_entitlement_active(profile, self._clock()):
            return EntitlementResult(ResultKind.SUCCESS, "Premium active.", new_expiry=profile.premium_expiry)
        return EntitlementResult(ResultKind.INACTIVE, "Premium not active.")

    # ------------------------------------------------------------------
    # Administrator paths
    # ------------------------------------------------------------------

    def set_premium(
        self, user_id: int, active: bool, duration_days: int | None = None,
    ) -> EntitlementResult:
        """Grant (now + duration_days) or revoke premium. Vouchers are not involved."""
        expiry: datetime | None = None
        if active:
            days = self._default_premium_days if duration_days is None else duration_days
            if not 0 < days <= MAX_DURATION_DAYS:
                return EntitlementResult(
                    ResultKind.INVALID_INPUT, f"Duration must be between 1 and {MAX_DURATION_DAYS} days.",
                )
            expiry = self._clock() + timedelta(days=days)

        try:
            updated = self._profiles.set_premium(user_id, active, expiry)
        except StoreError as exc:
            logger.error("set_premium for user %d failed: %s", user_id, exc)
            return EntitlementResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't reach the database.")
        if not updated:
            return EntitlementResult(ResultKind.NOT_FOUND, f"User {user_id} not found.")

        logger.info("Premium %s for user %d", "granted" if active else "revoked", user_id)
        message = "Premium activated." if active else "Premium revoked."
        return EntitlementResult(ResultKind.SUCCESS, message, new_expiry=expiry)

    def set_suspended(self, user_id: int, suspended: bool) -> EntitlementResult:
        """Toggle the suspended flag. Enforcement happens at the bot's auth layer."""
        try:
            updated = self._profiles.set_suspended(user_id, suspended)
        except StoreError as exc:
            logger.error("set_suspended for user %d failed: %s", user_id, exc)
            return EntitlementResult(ResultKind.UPSTREAM_UNAVAILABLE, "Couldn't reach the database.")
        if not updated:
            return EntitlementResult(ResultKind.NOT_FOUND, f"User {user_id} not found.")

        logger.info("User %d %s", user_id, "suspended" if suspended else "unsuspended")
        return EntitlementResult(
            ResultKind.SUCCESS, "User suspended." if suspended else "User unsuspended.",
        )
