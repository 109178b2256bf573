"""
Ledger configuration from environment variables.

- VAX_LEDGER_DEPLOYER: Deploying identity, first administrator and issuer (required)
- VAX_LEDGER_SEED_VACCINE_TYPES: Pre-populate vaccine codes 0-2 (default: true)
- VAX_LEDGER_LOG_LEVEL: Package log level (default: INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _req(name: str) -> str:
    """Get required environment variable or raise."""
    v = os.getenv(name)
    if not v:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


def _opt(name: str, default: str) -> str:
    """Get optional environment variable with default."""
    return os.getenv(name, default)


def _opt_bool(name: str, default: bool) -> bool:
    """Parse boolean environment variable."""
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class Settings:
    """Ledger deployment configuration."""

    DEPLOYER: str
    SEED_VACCINE_TYPES: bool = True
    LOG_LEVEL: str = "INFO"

    @staticmethod
    def load() -> Settings:
        """Load settings from environment variables."""
        return Settings(
            DEPLOYER=_req("VAX_LEDGER_DEPLOYER"),
            SEED_VACCINE_TYPES=_opt_bool("VAX_LEDGER_SEED_VACCINE_TYPES", True),
            LOG_LEVEL=_opt("VAX_LEDGER_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply LOG_LEVEL to the package logger."""
    level = logging.getLevelName(settings.LOG_LEVEL)
    if not isinstance(level, int):
        raise RuntimeError(f"Invalid VAX_LEDGER_LOG_LEVEL: {settings.LOG_LEVEL}")
    logger = logging.getLogger("vax_ledger")
    logger.setLevel(level)
    return logger
