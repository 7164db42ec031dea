"""polisim — Application configuration via environment variables."""

from __future__ import annotations

from datetime import date

from pydantic_settings import BaseSettings


class PolisimSettings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "POLISIM_",
        "extra": "ignore",
    }

    # ── Simulation ─────────────────────────────────────────────
    seed: int = 20240101
    start_date: date = date(2024, 1, 1)

    # ── Legislature ────────────────────────────────────────────
    propose_reputation_threshold: int = 20
    propose_reputation_cost: int = 5
    vote_swing: float = 0.10
    voting_period_days: int = 7

    # ── Treasury ───────────────────────────────────────────────
    default_interest_rate: float = 3.5
    recent_entry_limit: int = 10

    # ── Elections ──────────────────────────────────────────────
    activity_display_limit: int = 10

    # ── Logging ────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "console"


settings = PolisimSettings()
