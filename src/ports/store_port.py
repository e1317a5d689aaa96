"""Store port — abstract interfaces for persisted fitness data.

Core services depend on these protocols, never on a specific backend.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.data.models import FoodEntry, HealthEntry, Profile, Voucher, WeightEntry


class StoreError(Exception):
    """Raised when any store operation fails or times out."""


class ProfileStore(Protocol):
    def get_profile(self, user_id: int) -> Profile | None: ...

    def add_profile(self, user_id: int, full_name: str | None = None) -> Profile: ...

    def set_premium(self, user_id: int, is_premium: bool, expiry: datetime | None) -> bool: ...

    def set_suspended(self, user_id: int, suspended: bool) -> bool: ...

    def set_current_weight(self, user_id: int, weight: float) -> None: ...

    def list_profiles(self) -> list[Profile]: ...


class VoucherStore(Protocol):
    def get_by_code(self, code: str) -> Voucher | None: ...

    def get_voucher(self, voucher_id: int) -> Voucher | None: ...

    def redeem(self, voucher_id: int, user_id: int, new_expiry: datetime, now: datetime) -> bool:
        """Atomically consume one use and grant premium.

        Returns False (and writes nothing) when the voucher is no longer
        redeemable at write time.
        """
        ...


class FoodLogStore(Protocol):
    def list_entries(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> list[FoodEntry]: ...


class HealthLogStore(Protocol):
    def list_entries(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> list[HealthEntry]: ...


class WeightLogStore(Protocol):
    def list_entries(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> list[WeightEntry]: ...

    def recent_entries(self, user_id: int, limit: int = 90) -> list[WeightEntry]: ...
