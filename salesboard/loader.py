"""
Retrieval of the CSV and rate table.

Locations starting with http:// or https:// are fetched with a fixed
timeout; anything else is read from the local filesystem.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from .parser import decode_csv_bytes
from .rates import RateTable, normalize_rate_table, parse_rate_json
from .rules import DEFAULT_RATES, FETCH_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Raised when a CSV or rate table location cannot be read."""


def _is_url(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def read_source(location: str, timeout: float = FETCH_TIMEOUT_SECONDS) -> bytes:
    """
    Return the raw bytes at a URL or file path.

    Raises:
        SourceError: on timeouts, non-2xx responses and unreadable files.
    """
    if _is_url(location):
        try:
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SourceError(f"Failed to fetch {location}: {exc}") from exc
        return response.content

    try:
        return Path(location).read_bytes()
    except OSError as exc:
        raise SourceError(f"Failed to read {location}: {exc}") from exc


def load_csv_text(location: str, timeout: float = FETCH_TIMEOUT_SECONDS) -> str:
    raw = read_source(location, timeout)
    text, encoding = decode_csv_bytes(raw)
    logger.info("Loaded %d bytes of CSV from %s (%s)", len(raw), location, encoding)
    return text


def load_rate_table(location: Optional[str], timeout: float = FETCH_TIMEOUT_SECONDS) -> RateTable:
    """Load a rate table, falling back to the default table on any failure."""
    if not location:
        return dict(DEFAULT_RATES)
    try:
        raw = read_source(location, timeout)
    except SourceError as exc:
        logger.warning("Using default rates: %s", exc)
        return normalize_rate_table(None)
    return parse_rate_json(raw.decode("utf-8-sig", errors="replace"))
