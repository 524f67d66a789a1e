"""
Application settings.

Values come from the process environment, with a `.env` file in the project
directory loaded first (existing environment variables win).

Environment variables:
- DATA_BACKEND: `memory` (default) or `supabase`
- SUPABASE_URL / SUPABASE_KEY: required for the supabase backend
- WALLET_LOW_THRESHOLD: balance below which a WALLET_LOW notification is raised (default 10000)
- LOG_LEVEL: logging level name (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_ENV_PATH = Path(__file__).parent / ".env"

_BACKENDS = ("memory", "supabase")


@dataclass(frozen=True, slots=True)
class Settings:
    data_backend: str = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    wallet_low_threshold: Decimal = Decimal("10000")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.data_backend not in _BACKENDS:
            raise ValueError(f"DATA_BACKEND must be one of {_BACKENDS}, got {self.data_backend!r}")
        if self.wallet_low_threshold < 0:
            raise ValueError("WALLET_LOW_THRESHOLD must be >= 0")


def load_settings(env_path: Optional[Path] = None) -> Settings:
    """Load settings from the environment after reading the .env file."""

    load_dotenv(dotenv_path=env_path or _ENV_PATH)

    raw_threshold = os.getenv("WALLET_LOW_THRESHOLD", "10000")
    try:
        threshold = Decimal(raw_threshold)
    except InvalidOperation:
        raise ValueError(f"WALLET_LOW_THRESHOLD is not a number: {raw_threshold!r}") from None

    return Settings(
        data_backend=os.getenv("DATA_BACKEND", "memory").strip().lower(),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        wallet_low_threshold=threshold,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


__all__ = ["Settings", "load_settings"]
