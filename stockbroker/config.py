"""Application configuration loaded from environment variables and .env file."""

from __future__ import annotations

import logging
import sys
from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Stockbroker simulator configuration.

    Values are loaded from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Portfolio
    initial_cash: Decimal = Decimal("100000")

    # Market simulation
    tick_interval_seconds: float = 5.0
    random_seed: int | None = None

    # Alerts
    discord_webhook_url: str | None = None

    # Paths
    data_path: str = "data/"

    # Logging
    log_level: str = "INFO"

    @field_validator("initial_cash")
    @classmethod
    def validate_initial_cash(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("initial_cash must be positive")
        return v

    @field_validator("tick_interval_seconds")
    @classmethod
    def validate_tick_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("tick_interval_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got '{v}'")
        return v


def setup_logging(level: str = "INFO", log_file: str = "data/stockbroker.log") -> None:
    """Configure logging with console and file handlers.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path of the DEBUG-level log file. Skipped if its directory
            does not exist.
    """
    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))

    # Clear existing handlers to avoid duplicates on re-init
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level))
    console_handler.setFormatter(logging.Formatter(log_format, date_format))
    root_logger.addHandler(console_handler)

    try:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        root_logger.addHandler(file_handler)
    except OSError:
        pass


# Module-level singleton
settings = Settings()
