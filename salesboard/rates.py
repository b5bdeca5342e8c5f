"""Currency rate tables: currency code -> multiplier applied to raw sums."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from .rules import DEFAULT_CURRENCY, DEFAULT_RATES

logger = logging.getLogger(__name__)

RateTable = Dict[str, Any]


def normalize_rate_table(raw: Any) -> RateTable:
    """Return the table as a plain dict, or the default table if unusable."""
    if not isinstance(raw, Mapping) or not raw:
        return dict(DEFAULT_RATES)
    return {str(code): value for code, value in raw.items()}


def parse_rate_json(text: Optional[str]) -> RateTable:
    if text is None or not text.strip():
        return dict(DEFAULT_RATES)
    try:
        raw = json.loads(text)
    except ValueError as exc:
        logger.warning("Ignoring unreadable rate table: %s", exc)
        return dict(DEFAULT_RATES)
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring rate table that is not an object: %s", type(raw).__name__)
    return normalize_rate_table(raw)


def _parse_rate(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    return rate if math.isfinite(rate) and rate > 0 else None


def sanitize_rate(value: Any) -> float:
    """Non-numeric, non-finite or non-positive rates become 1."""
    rate = _parse_rate(value)
    return 1.0 if rate is None else rate


def resolve_rate(rates: Mapping[str, Any], code: Optional[str]) -> float:
    if code is None or code not in rates:
        return 1.0
    rate = _parse_rate(rates[code])
    if rate is None:
        logger.warning("Rate for %s is unusable (%r), using 1", code, rates[code])
        return 1.0
    return rate


def currency_codes(rates: Mapping[str, Any]) -> List[str]:
    return list(rates.keys())


def default_currency(rates: Mapping[str, Any]) -> str:
    if DEFAULT_CURRENCY in rates:
        return DEFAULT_CURRENCY
    for code in rates:
        return code
    return DEFAULT_CURRENCY
