"""
FitTrack Assistant — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # LLM — provider-agnostic (gemini, anthropic, openai, cohere)
    LLM_PROVIDER: str = "gemini"
    LLM_MODEL: str = ""          # empty → smart default per provider
    LLM_API_KEY: str = ""

    # Nutrition estimator: "llm" | "http"
    NUTRITION_PROVIDER: str = "llm"
    NUTRITION_FUNCTION_URL: str = ""   # hosted proxy (only for NUTRITION_PROVIDER=http)
    NUTRITION_FUNCTION_KEY: str = ""
    ESTIMATOR_TIMEOUT_SECONDS: float = 15.0

    # SQLite
    DATABASE_PATH: str = "data/fittrack.db"
    STORE_TIMEOUT_SECONDS: float = 5.0

    # Administration
    ADMIN_USER_IDS: list[int] = []
    DEFAULT_PREMIUM_DAYS: int = 30
    DEFAULT_VOUCHER_EXPIRY_DAYS: int = 90

    @field_validator("ADMIN_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator("DEFAULT_PREMIUM_DAYS", "DEFAULT_VOUCHER_EXPIRY_DAYS", mode="before")
    @classmethod
    def parse_days(cls, v: str | int) -> int:
        days = int(v)
        if days <= 0:
            raise ValueError("day counts must be positive")
        return days


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    nutrition_provider = os.getenv("NUTRITION_PROVIDER", "llm").lower()
    llm_api_key = os.getenv("LLM_API_KEY", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    if nutrition_provider == "llm" and (not llm_api_key or llm_api_key.startswith("your-")):
        print("ERROR: LLM_API_KEY is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    if nutrition_provider == "http" and not os.getenv("NUTRITION_FUNCTION_URL"):
        print("ERROR: NUTRITION_FUNCTION_URL is required when NUTRITION_PROVIDER=http", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        LLM_PROVIDER=os.getenv("LLM_PROVIDER", "gemini"),
        LLM_MODEL=os.getenv("LLM_MODEL", ""),
        LLM_API_KEY=llm_api_key,
        NUTRITION_PROVIDER=nutrition_provider,
        NUTRITION_FUNCTION_URL=os.getenv("NUTRITION_FUNCTION_URL", ""),
        NUTRITION_FUNCTION_KEY=os.getenv("NUTRITION_FUNCTION_KEY", ""),
        ESTIMATOR_TIMEOUT_SECONDS=os.getenv("ESTIMATOR_TIMEOUT_SECONDS", "15"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/fittrack.db"),
        STORE_TIMEOUT_SECONDS=os.getenv("STORE_TIMEOUT_SECONDS", "5"),
        ADMIN_USER_IDS=os.getenv("ADMIN_USER_IDS", ""),
        DEFAULT_PREMIUM_DAYS=os.getenv("DEFAULT_PREMIUM_DAYS", "30"),
        DEFAULT_VOUCHER_EXPIRY_DAYS=os.getenv("DEFAULT_VOUCHER_EXPIRY_DAYS", "90"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
