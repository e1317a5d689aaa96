"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides temp-file SQLite stores plus a frozen clock.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("NUTRITION_PROVIDER", "llm")
os.environ.setdefault("ADMIN_USER_IDS", "99999")
os.environ.setdefault("DATABASE_PATH", ":memory:")

from datetime import datetime, timezone

import pytest

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path shared by all stores in a test."""
    return str(tmp_path / "test_fittrack.db")


@pytest.fixture
def profile_db(tmp_db_path):
    from src.data.db import ProfileDB
    return ProfileDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def voucher_db(tmp_db_path):
    from src.data.db import VoucherDB
    return VoucherDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def food_db(tmp_db_path):
    from src.data.db import FoodLogDB
    return FoodLogDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def health_db(tmp_db_path):
    from src.data.db import HealthLogDB
    return HealthLogDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def weight_db(tmp_db_path):
    from src.data.db import WeightLogDB
    return WeightLogDB(db_path=tmp_db_path, timeout=5)


@pytest.fixture
def clock():
    """A frozen clock at NOW."""
    return lambda: NOW


@pytest.fixture
def entitlement(profile_db, voucher_db, clock):
    from src.core.entitlement import EntitlementService
    return EntitlementService(profile_db, voucher_db, clock=clock, default_premium_days=30)
