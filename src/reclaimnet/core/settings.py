"""
Central configuration for reclaimnet.

This module provides a single, typed configuration object that reads from
environment variables (12-factor style) using pydantic-settings.

Usage:

    from reclaimnet.core.settings import get_settings

    settings = get_settings()
    window = settings.engine.max_reveal_window_ms
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Commit-reveal timing. All durations are milliseconds.
    """

    min_reveal_delay_ms: int = Field(
        default=0,
        description="Minimum time between commit and reveal. 0 disables the check.",
    )
    max_reveal_window_ms: int = Field(
        default=10 * 60 * 1000,
        description="Maximum time between commit and reveal (boundary inclusive).",
    )
    separate_reveal_window: bool = Field(
        default=False,
        description="If true, the reveal window opens after min_reveal_delay_ms "
        "instead of at commit time.",
    )
    commitment_max_age_ms: int = Field(
        default=60 * 60 * 1000,
        description="Age after which a pending commitment may be expired.",
    )
    epoch_duration_ms: int = Field(
        default=24 * 60 * 60 * 1000,
        description="Length of the validity window recorded on each new epoch.",
    )

    model_config = SettingsConfigDict(env_prefix="RECLAIMNET_")

    @field_validator(
        "min_reveal_delay_ms",
        "max_reveal_window_ms",
        "commitment_max_age_ms",
        "epoch_duration_ms",
    )
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("durations must be non-negative")
        return v

    @property
    def reveal_deadline_ms(self) -> int:
        """Largest accepted commit-to-reveal delay."""
        if self.separate_reveal_window:
            return self.min_reveal_delay_ms + self.max_reveal_window_ms
        return self.max_reveal_window_ms


class GatewaySettings(BaseSettings):
    """
    HTTP gateway-specific settings.
    """

    host: str = Field(
        default="127.0.0.1",
        description="HTTP bind host for the FastAPI/Uvicorn gateway.",
    )
    port: int = Field(
        default=8000,
        description="HTTP bind port for the FastAPI/Uvicorn gateway.",
    )
    admin_token: Optional[str] = Field(
        default=None,
        description="Bearer token required on admin endpoints. "
        "Admin endpoints are disabled when unset.",
    )

    model_config = SettingsConfigDict(env_prefix="RECLAIMNET_HTTP_")


class RuntimeSettings(BaseSettings):
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG/INFO/WARNING/ERROR).",
    )

    model_config = SettingsConfigDict(env_prefix="RECLAIMNET_")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        v = (v or "INFO").upper()
        if v == "WARN":
            return "WARNING"
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return v


class ReclaimSettings(BaseSettings):
    """
    Root configuration object for reclaimnet.

    Aggregates:
      - Engine
      - Gateway
      - Runtime
    """

    engine: EngineSettings = Field(default_factory=EngineSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)


@lru_cache(maxsize=1)
def get_settings() -> ReclaimSettings:
    """
    Cached accessor for ReclaimSettings.
    """
    return ReclaimSettings()
