"""
Totals over normalized sales records.

Everything here is a pure function of its arguments: the view selection
(region filter, currency) is passed in as a ViewConfig on every call.
"""

from __future__ import annotations

import locale
import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .normalize import SalesRecord
from .rates import currency_codes, default_currency, resolve_rate, sanitize_rate
from .rules import ALL_REGIONS, DEFAULT_CURRENCY, INTEGER_TOLERANCE, UNKNOWN_PRODUCT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewConfig:
    region: str = ALL_REGIONS
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_params(cls, region: Optional[str], currency: Optional[str], rates: Mapping[str, Any]) -> "ViewConfig":
        region = region or ALL_REGIONS
        currency = currency or default_currency(rates)
        return cls(region=region, currency=currency)


@dataclass(frozen=True)
class AggregationResult:
    total: float
    by_group: Dict[str, float]
    raw_total: float
    raw_by_group: Dict[str, float]
    included: int


@dataclass(frozen=True)
class GroupTotal:
    name: str
    total: float
    formatted: str


@dataclass(frozen=True)
class Summary:
    total: float
    total_formatted: str
    currency: str
    rate: float
    region: str
    groups: List[GroupTotal]
    regions: List[str]
    currencies: List[str]
    records: int
    included: int
    warnings: List[str] = field(default_factory=list)


def format_amount(value: float) -> str:
    """Whole numbers without decimals, everything else with two. No grouping."""
    if not math.isfinite(value):
        return "0"
    nearest = round(value)
    if abs(value - nearest) < INTEGER_TOLERANCE:
        return str(int(nearest))
    return f"{value:.2f}"


def _finite(value: float, label: str) -> float:
    if math.isfinite(value):
        return value
    logger.warning("Sum for %s overflowed, reporting 0", label)
    return 0.0


def collation_key(text: str) -> tuple:
    return (locale.strxfrm(text.casefold()), text)


def _matches(record: SalesRecord, region: Optional[str]) -> bool:
    if not region or region == ALL_REGIONS:
        return True
    return record.region == region


def aggregate(records: Iterable[SalesRecord], region: Optional[str] = ALL_REGIONS, rate: Any = 1) -> AggregationResult:
    """
    Sum sales overall and per product.

    Raw amounts are summed first and converted once at the end, so the
    result does not depend on the rate when it comes to summation order.
    """
    multiplier = sanitize_rate(rate)
    raw_total = 0.0
    raw_by_group: Dict[str, float] = defaultdict(float)
    included = 0

    for record in records:
        if not _matches(record, region):
            continue
        included += 1
        raw_total += record.sales
        raw_by_group[record.product or UNKNOWN_PRODUCT] += record.sales

    return AggregationResult(
        total=_finite(raw_total * multiplier, "total"),
        by_group={k: _finite(v * multiplier, k) for k, v in raw_by_group.items()},
        raw_total=_finite(raw_total, "total"),
        raw_by_group={k: _finite(v, k) for k, v in raw_by_group.items()},
        included=included,
    )


def sorted_groups(result: AggregationResult) -> List[GroupTotal]:
    return [
        GroupTotal(name=name, total=result.by_group[name], formatted=format_amount(result.by_group[name]))
        for name in sorted(result.by_group, key=collation_key)
    ]


def distinct_regions(records: Iterable[SalesRecord]) -> List[str]:
    return sorted({r.region for r in records if r.region}, key=collation_key)


def summarize(records: Sequence[SalesRecord], rates: Mapping[str, Any], config: ViewConfig) -> Summary:
    """Compute everything the presentation layer shows for one view selection."""
    rate = resolve_rate(rates, config.currency)
    result = aggregate(records, config.region, rate)

    warnings: List[str] = []
    if not records:
        warnings.append("No rows found in CSV.")
    if config.currency not in rates:
        warnings.append(f"Unknown currency {config.currency}; amounts are unconverted.")

    logger.debug(
        "Summarized %d/%d records for region=%s currency=%s",
        result.included,
        len(records),
        config.region,
        config.currency,
    )

    return Summary(
        total=result.total,
        total_formatted=format_amount(result.total),
        currency=config.currency,
        rate=rate,
        region=config.region,
        groups=sorted_groups(result),
        regions=distinct_regions(records),
        currencies=currency_codes(rates),
        records=len(records),
        included=result.included,
        warnings=warnings,
    )
