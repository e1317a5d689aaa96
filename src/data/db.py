"""
FitTrack Assistant — SQLite Stores.

Profiles, vouchers and the three per-day logs (food, health, weight) live in
one SQLite file. Each store class owns one table; they share the schema so
any store can be pointed at a fresh file.

Every sqlite3 failure (including lock timeouts) surfaces as StoreError.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from src.data.models import FoodEntry, HealthEntry, Profile, Voucher, WeightEntry
from src.ports.store_port import StoreError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS profiles (
    user_id         INTEGER PRIMARY KEY,
    full_name       TEXT,
    is_premium      INTEGER NOT NULL DEFAULT 0,
    premium_expiry  TEXT,
    suspended       INTEGER NOT NULL DEFAULT 0,
    current_weight  REAL,
    goal_weight     REAL,
    height_cm       REAL,
    created_at      TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS vouchers (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    code            TEXT    NOT NULL UNIQUE,
    duration_days   INTEGER NOT NULL,
    usage_limit     INTEGER NOT NULL DEFAULT 1,
    used_count      INTEGER NOT NULL DEFAULT 0,
    expiry_date     TEXT    NOT NULL,
    active          INTEGER NOT NULL DEFAULT 1,
    created_at      TEXT    NOT NULL,
    CHECK (used_count <= usage_limit)
);

CREATE TABLE IF NOT EXISTS food_logs (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id         INTEGER NOT NULL,
    date            TEXT    NOT NULL,
    food_name       TEXT    NOT NULL,
    meal_type       TEXT    NOT NULL,
    calories        REAL,
    protein         REAL,
    carbs           REAL,
    fat             REAL,
    created_at      TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS health_logs (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id         INTEGER NOT NULL,
    date            TEXT    NOT NULL,
    calories_burned REAL,
    sleep_hours     REAL,
    spo2_avg        REAL,
    bpm_avg         REAL,
    steps           INTEGER,
    water_ml        INTEGER,
    created_at      TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS weight_logs (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id         INTEGER NOT NULL,
    date            TEXT    NOT NULL,
    weight          REAL    NOT NULL,
    created_at      TEXT    NOT NULL,
    UNIQUE (user_id, date)
);
"""


def to_iso(dt: datetime) -> str:
    """Fixed-width UTC ISO string, so stored timestamps compare correctly as text."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _range_clause(start: str | None, end: str | None, params: list) -> str:
    clause = ""
    if start is not None:
        clause += " AND date >= ?"
        params.append(start)
    if end is not None:
        clause += " AND date <= ?"
        params.append(end)
    return clause


class _SQLiteStore:
    """Shared connection handling for the table stores."""

    def __init__(self, db_path: str | None = None, timeout: float | None = None) -> None:
        if db_path is None or timeout is None:
            from src.config import settings
            db_path = db_path or settings.DATABASE_PATH
            timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout

        self._db_path = db_path
        self._timeout = timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("%s initialized at %s", type(self).__name__, self._db_path)

    @contextmanager
    def _connect(self, immediate: bool = False) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on any error.

        With immediate=True the whole block runs inside BEGIN IMMEDIATE, which
        takes the write lock up front and serializes competing writers.
        """
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            if immediate:
                conn.isolation_level = None
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class ProfileDB(_SQLiteStore):
    """SQLite-backed storage for user profiles."""

    @staticmethod
    def _row_to_profile(row: sqlite3.Row) -> Profile:
        return Profile(
            user_id=row["user_id"],
            full_name=row["full_name"],
            is_premium=bool(row["is_premium"]),
            premium_expiry=from_iso(row["premium_expiry"]),
            suspended=bool(row["suspended"]),
            current_weight=row["current_weight"],
            goal_weight=row["goal_weight"],
            height_cm=row["height_cm"],
            created_at=from_iso(row["created_at"]),
        )

    def add_profile(self, user_id: int, full_name: str | None = None) -> Profile:
        """Create the profile for a newly signed-up user."""
        now = _utcnow()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO profiles (user_id, full_name, created_at) VALUES (?, ?, ?)",
                (user_id, full_name, to_iso(now)),
            )
        logger.info("Profile created: %d '%s'", user_id, full_name or "")
        return Profile(user_id=user_id, full_name=full_name, created_at=now)

    def get_profile(self, user_id: int) -> Profile | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM profiles WHERE user_id = ?", (user_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_profile(row)

    def ensure_profile(self, user_id: int, full_name: str | None = None) -> Profile:
        """Return the existing profile, creating it on first contact."""
        profile = self.get_profile(user_id)
        if profile is not None:
            return profile
        return self.add_profile(user_id, full_name)

    def set_premium(self, user_id: int, is_premium: bool, expiry: datetime | None) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE profiles SET is_premium = ?, premium_expiry = ? WHERE user_id = ?",
                (int(is_premium), to_iso(expiry) if expiry else None, user_id),
            )
        return cursor.rowcount > 0

    def set_suspended(self, user_id: int, suspended: bool) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE profiles SET suspended = ? WHERE user_id = ?",
                (int(suspended), user_id),
            )
        return cursor.rowcount > 0

    def set_current_weight(self, user_id: int, weight: float) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE profiles SET current_weight = ? WHERE user_id = ?",
                (weight, user_id),
            )

    def set_body_metrics(
        self,
        user_id: int,
        goal_weight: float | None = None,
        height_cm: float | None = None,
    ) -> bool:
        """Update goal weight and/or height; None leaves a field unchanged."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE profiles
                   SET goal_weight = COALESCE(?, goal_weight),
                       height_cm   = COALESCE(?, height_cm)
                 WHERE user_id = ?
                """,
                (goal_weight, height_cm, user_id),
            )
        return cursor.rowcount > 0

    def list_profiles(self) -> list[Profile]:
        """Return all profiles, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM profiles ORDER BY created_at DESC"
            ).fetchall()
        return [self._row_to_profile(r) for r in rows]

    def count_premium(self) -> int:
        """Profiles with the premium flag set (expired or not)."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM profiles WHERE is_premium = 1"
            ).fetchone()
        return row[0]

    def signups_by_day(self) -> list[tuple[str, int]]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT substr(created_at, 1, 10) AS day, COUNT(*) AS n
                  FROM profiles
                 GROUP BY day
                 ORDER BY day
                """
            ).fetchall()
        return [(r["day"], r["n"]) for r in rows]


class VoucherDB(_SQLiteStore):
    """SQLite-backed storage for premium vouchers."""

    @staticmethod
    def _row_to_voucher(row: sqlite3.Row) -> Voucher:
        return Voucher(
            id=row["id"],
            code=row["code"],
            duration_days=row["duration_days"],
            usage_limit=row["usage_limit"],
            used_count=row["used_count"],
            expiry_date=from_iso(row["expiry_date"]),
            active=bool(row["active"]),
            created_at=from_iso(row["created_at"]),
        )

    def add_voucher(
        self,
        code: str,
        duration_days: int,
        usage_limit: int,
        expiry_date: datetime,
    ) -> Voucher:
        """Insert a new voucher. The code is stored upper-cased."""
        code = code.strip().upper()
        now = _utcnow()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO vouchers
                    (code, duration_days, usage_limit, used_count, expiry_date, active, created_at)
                VALUES (?, ?, ?, 0, ?, 1, ?)
                """,
                (code, duration_days, usage_limit, to_iso(expiry_date), to_iso(now)),
            )
            voucher_id = cursor.lastrowid

        logger.info(
            "Voucher added: #%d '%s' (%d days, %d uses)",
            voucher_id, code, duration_days, usage_limit,
        )
        return Voucher(
            id=voucher_id,
            code=code,
            duration_days=duration_days,
            usage_limit=usage_limit,
            expiry_date=expiry_date,
            created_at=now,
        )

    def get_by_code(self, code: str) -> Voucher | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM vouchers WHERE code = ?", (code.strip().upper(),),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_voucher(row)

    def get_voucher(self, voucher_id: int) -> Voucher | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM vouchers WHERE id = ?", (voucher_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_voucher(row)

    def list_vouchers(self) -> list[Voucher]:
        """Return all vouchers, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM vouchers ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [self._row_to_voucher(r) for r in rows]

    def set_active(self, code: str, active: bool) -> bool:
        """Administrator kill-switch."""
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE vouchers SET active = ? WHERE code = ?",
                (int(active), code.strip().upper()),
            )
        return cursor.rowcount > 0

    def delete_voucher(self, code: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM vouchers WHERE code = ?", (code.strip().upper(),),
            )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Voucher '%s' deleted", code)
        return deleted

    def count_active(self) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM vouchers WHERE active = 1"
            ).fetchone()
        return row[0]

    def redeem(self, voucher_id: int, user_id: int, new_expiry: datetime, now: datetime) -> bool:
        """Consume one use of a voucher and grant premium, in one transaction.

        The voucher update only matches while the voucher is still redeemable,
        so two concurrent redemptions of the last use cannot both succeed.
        Returns False with nothing written when the voucher no longer matches.
        Raises StoreError (rolled back) if the profile does not exist.
        """
        with self._connect(immediate=True) as conn:
            cursor = conn.execute(
                """
                UPDATE vouchers
                   SET used_count = used_count + 1
                 WHERE id = ?
                   AND active = 1
                   AND used_count < usage_limit
                   AND expiry_date >= ?
                """,
                (voucher_id, to_iso(now)),
            )
            if cursor.rowcount == 0:
                return False

            cursor = conn.execute(
                "UPDATE profiles SET is_premium = 1, premium_expiry = ? WHERE user_id = ?",
                (to_iso(new_expiry), user_id),
            )
            if cursor.rowcount == 0:
                raise StoreError(f"Profile {user_id} disappeared during redemption")
        return True


class FoodLogDB(_SQLiteStore):
    """SQLite-backed storage for food entries (append-only)."""

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> FoodEntry:
        return FoodEntry(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            food_name=row["food_name"],
            meal_type=row["meal_type"],
            calories=row["calories"],
            protein=row["protein"],
            carbs=row["carbs"],
            fat=row["fat"],
        )

    def add_entry(self, entry: FoodEntry) -> FoodEntry:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO food_logs
                    (user_id, date, food_name, meal_type, calories, protein, carbs, fat, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.user_id, entry.date, entry.food_name, entry.meal_type,
                    entry.calories, entry.protein, entry.carbs, entry.fat,
                    to_iso(_utcnow()),
                ),
            )
            entry.id = cursor.lastrowid
        logger.info("Food logged: #%d '%s' for user %d", entry.id, entry.food_name, entry.user_id)
        return entry

    def delete_entry(self, user_id: int, entry_id: int) -> bool:
        """Delete one of the user's own entries."""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM food_logs WHERE id = ? AND user_id = ?",
                (entry_id, user_id),
            )
        return cursor.rowcount > 0

    def list_entries(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> list[FoodEntry]:
        params: list = [user_id]
        query = "SELECT * FROM food_logs WHERE user_id = ?" + _range_clause(start, end, params)
        query += " ORDER BY date, id"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def count_all(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM food_logs").fetchone()
        return row[0]

    def top_loggers(self, limit: int = 5) -> list[tuple[int, int]]:
        """Return (user_id, entry_count) pairs, most entries first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT user_id, COUNT(*) AS n
                  FROM food_logs
                 GROUP BY user_id
                 ORDER BY n DESC, user_id
                 LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [(r["user_id"], r["n"]) for r in rows]


class HealthLogDB(_SQLiteStore):
    """SQLite-backed storage for health entries (append-only)."""

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> HealthEntry:
        return HealthEntry(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            calories_burned=row["calories_burned"],
            sleep_hours=row["sleep_hours"],
            spo2_avg=row["spo2_avg"],
            bpm_avg=row["bpm_avg"],
            steps=row["steps"],
            water_ml=row["water_ml"],
        )

    def add_entry(self, entry: HealthEntry) -> HealthEntry:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO health_logs
                    (user_id, date, calories_burned, sleep_hours, spo2_avg,
                     bpm_avg, steps, water_ml, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.user_id, entry.date, entry.calories_burned, entry.sleep_hours,
                    entry.spo2_avg, entry.bpm_avg, entry.steps, entry.water_ml,
                    to_iso(_utcnow()),
                ),
            )
            entry.id = cursor.lastrowid
        logger.info("Health entry #%d logged for user %d on %s", entry.id, entry.user_id, entry.date)
        return entry

    def list_entries(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> list[HealthEntry]:
        params: list = [user_id]
        query = "SELECT * FROM health_logs WHERE user_id = ?" + _range_clause(start, end, params)
        query += " ORDER BY date, id"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(r) for r in rows]


class WeightLogDB(_SQLiteStore):
    """SQLite-backed storage for weight entries, one per user per date."""

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> WeightEntry:
        return WeightEntry(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            weight=row["weight"],
        )

    def upsert(self, user_id: int, date: str, weight: float) -> WeightEntry:
        """Record the weight for a date, replacing any earlier value for that date."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO weight_logs (user_id, date, weight, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (user_id, date) DO UPDATE SET weight = excluded.weight
                """,
                (user_id, date, weight, to_iso(_utcnow())),
            )
            row = conn.execute(
                "SELECT * FROM weight_logs WHERE user_id = ? AND date = ?",
                (user_id, date),
            ).fetchone()
        logger.info("Weight %.1f logged for user %d on %s", weight, user_id, date)
        return self._row_to_entry(row)

    def list_entries(
        self, user_id: int, start: str | None = None, end: str | None = None,
    ) -> list[WeightEntry]:
        params: list = [user_id]
        query = "SELECT * FROM weight_logs WHERE user_id = ?" + _range_clause(start, end, params)
        query += " ORDER BY date"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def recent_entries(self, user_id: int, limit: int = 90) -> list[WeightEntry]:
        """Return the latest `limit` weights in ascending date order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM weight_logs WHERE user_id = ? ORDER BY date DESC LIMIT ?",
                (user_id, limit),
            ).fetchall()
        return [self._row_to_entry(r) for r in reversed(rows)]
