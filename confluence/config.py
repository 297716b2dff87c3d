"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., CONFLUENCE_SCORING__MAX_WORKERS=8)
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})

DEFAULT_PAIRS = [
    "btcusdt", "ethusdt", "bnbusdt", "solusdt", "adausdt",
    "xrpusdt", "dogeusdt", "avaxusdt", "shibusdt", "dotusdt",
    "maticusdt", "ltcusdt", "uniusdt", "atomusdt", "linkusdt",
    "etcusdt", "xlmusdt", "bchusdt", "vetusdt", "filusdt",
    "trxusdt", "nearusdt", "algousdt", "ftmusdt", "manausdt",
]  # fmt: skip

_PAIR_RE = re.compile(r"^[a-z0-9]{2,20}$")


class ScoringConfig(BaseModel):
    """Scoring worker pool sizing."""

    max_workers: int = Field(default=4, ge=1, le=32)


class WebConfig(BaseModel):
    """Address of the API layer that serves analysis results."""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        CONFLUENCE_LOG_LEVEL=DEBUG
        CONFLUENCE_SCORING__MAX_WORKERS=8
        CONFLUENCE_PAIRS='["btcusdt","ethusdt"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="CONFLUENCE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    scoring: ScoringConfig = ScoringConfig()
    web: WebConfig = WebConfig()
    pairs: list[str] = Field(default_factory=lambda: list(DEFAULT_PAIRS))

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v

    @field_validator("pairs")
    @classmethod
    def validate_pairs(cls, v: list[str]) -> list[str]:
        if len(v) == 0:
            raise ValueError("Pair list must not be empty")
        for pair in v:
            if not _PAIR_RE.match(pair):
                raise ValueError(f"Invalid pair: {pair}")
        return v
