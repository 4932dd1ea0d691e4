"""
Configuration management for the feedback sentiment engine
"""

import os
from typing import List, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

@dataclass
class Config:
    # Environment
    APP_ENV: str
    PORT: int
    LOG_LEVEL: str

    # API access
    ADMIN_TOKEN: str
    ALLOWED_ORIGINS: List[str]

    # History store
    HISTORY_CAPACITY: int
    STORE_BACKEND: str
    STORE_PATH: str

    # Simulated processing delays (seconds)
    SIMULATE_LATENCY: bool
    ANALYZE_DELAY: float
    BATCH_MIN_DELAY: float
    BATCH_ITEM_DELAY: float
    HISTORY_DELAY: float
    STATS_DELAY: float
    SEARCH_DELAY: float

    # Export
    EXPORT_VERSION: str


_CONFIG_INSTANCE: Optional[Config] = None


def _parse_float(var: str, default: float) -> float:
    raw = os.getenv(var)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _parse_int(var: str, default: int) -> int:
    raw = os.getenv(var)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _build_config() -> Config:
    """Create a new ``Config`` instance from environment variables."""

    backend = os.getenv("STORE_BACKEND", "memory").strip().lower()
    if backend not in ("memory", "file"):
        backend = "memory"

    return Config(
        # Environment
        APP_ENV=os.getenv("APP_ENV", "prod"),
        PORT=_parse_int("PORT", 8000),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),

        # API access
        ADMIN_TOKEN=os.getenv("ADMIN_TOKEN", "demo-token"),
        ALLOWED_ORIGINS=[origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()],

        # History store
        HISTORY_CAPACITY=_parse_int("HISTORY_CAPACITY", 100),
        STORE_BACKEND=backend,
        STORE_PATH=os.getenv("STORE_PATH", ".sentiment_store"),

        # Simulated processing delays
        SIMULATE_LATENCY=os.getenv("SIMULATE_LATENCY", "true").lower() in ("true", "1", "on"),
        ANALYZE_DELAY=_parse_float("ANALYZE_DELAY", 0.8),
        BATCH_MIN_DELAY=_parse_float("BATCH_MIN_DELAY", 1.0),
        BATCH_ITEM_DELAY=_parse_float("BATCH_ITEM_DELAY", 0.2),
        HISTORY_DELAY=_parse_float("HISTORY_DELAY", 0.3),
        STATS_DELAY=_parse_float("STATS_DELAY", 0.2),
        SEARCH_DELAY=_parse_float("SEARCH_DELAY", 0.4),

        # Export
        EXPORT_VERSION=os.getenv("EXPORT_VERSION", "1.0"),
    )


def get_config() -> Config:
    """Return the shared configuration object."""

    global _CONFIG_INSTANCE
    if _CONFIG_INSTANCE is None:
        _CONFIG_INSTANCE = _build_config()
    return _CONFIG_INSTANCE


def reset_config() -> Config:
    """Reload configuration from the environment."""

    global _CONFIG_INSTANCE
    _CONFIG_INSTANCE = _build_config()
    return _CONFIG_INSTANCE
