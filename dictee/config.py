"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"


@dataclass(frozen=True)
class Settings:
    # --- Database ---
    database_url: str = os.getenv(
        "DICTEE_DB_URL", f"sqlite+aiosqlite:///{DATA_DIR / 'dictee.db'}"
    )
    seed_sentences: bool = os.getenv("SEED_SENTENCES", "true").lower() in ("1", "true", "yes")

    # --- Calendar ---
    # Daily usage rows and the weekly window are computed in this timezone.
    timezone: str = os.getenv("APP_TIMEZONE", "UTC")

    # --- Free tier ---
    free_tier_daily_limit: int = int(os.getenv("FREE_TIER_DAILY_LIMIT", "5"))

    # --- Word goals ---
    default_session_goal: int = int(os.getenv("DEFAULT_SESSION_GOAL", "50"))
    default_weekly_goal: int = int(os.getenv("DEFAULT_WEEKLY_GOAL", "500"))
    default_alltime_goal: int = int(os.getenv("DEFAULT_ALLTIME_GOAL", "5000"))

    # --- Word history ---
    word_history_page_size: int = int(os.getenv("WORD_HISTORY_PAGE_SIZE", "50"))
    word_history_max_page_size: int = 200

    # --- Sentences ---
    sentence_list_limit: int = 100

    # --- Logging ---
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
