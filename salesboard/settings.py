"""
Service configuration.

Values come from the environment, after loading a .env file if one exists.
Anything unset or unparseable falls back to DEFAULT_SETTINGS.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .rules import FETCH_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "CSV_SOURCE": "./data.csv",
    "RATES_SOURCE": "./rates.json",
    "FETCH_TIMEOUT": FETCH_TIMEOUT_SECONDS,
    "LOG_LEVEL": "INFO",
}

ENV_PREFIX = "SALESBOARD_"


@dataclass(frozen=True)
class Settings:
    csv_source: str
    rates_source: Optional[str]
    fetch_timeout: float
    log_level: str


def _timeout_from_env(value: Optional[str]) -> float:
    if value is None or not value.strip():
        return float(DEFAULT_SETTINGS["FETCH_TIMEOUT"])
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("Invalid %sFETCH_TIMEOUT %r, using default", ENV_PREFIX, value)
        return float(DEFAULT_SETTINGS["FETCH_TIMEOUT"])
    if timeout <= 0:
        logger.warning("Non-positive %sFETCH_TIMEOUT %r, using default", ENV_PREFIX, value)
        return float(DEFAULT_SETTINGS["FETCH_TIMEOUT"])
    return timeout


def _log_level_from_env(value: Optional[str]) -> str:
    level = (value or DEFAULT_SETTINGS["LOG_LEVEL"]).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Unknown %sLOG_LEVEL %r, using default", ENV_PREFIX, value)
        return DEFAULT_SETTINGS["LOG_LEVEL"]
    return level


def load_settings(env_file: str = "./.env") -> Settings:
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)

    rates_source = os.getenv(ENV_PREFIX + "RATES_SOURCE", DEFAULT_SETTINGS["RATES_SOURCE"]).strip()
    return Settings(
        csv_source=os.getenv(ENV_PREFIX + "CSV_SOURCE", DEFAULT_SETTINGS["CSV_SOURCE"]).strip(),
        rates_source=rates_source or None,
        fetch_timeout=_timeout_from_env(os.getenv(ENV_PREFIX + "FETCH_TIMEOUT")),
        log_level=_log_level_from_env(os.getenv(ENV_PREFIX + "LOG_LEVEL")),
    )
