"""
Row normalization.

A parsed CSV is split into a header and data rows once; two views sit on top
of that split:

- record view: every data row becomes a SalesRecord (product, region, sales),
  with header aliases matched case-insensitively and dirty numbers read as 0
- column view: one column located by name and summed, skipping cells that do
  not hold a finite number
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .parser import parse_csv
from .rules import (
    PRODUCT_ALIASES,
    REGION_ALIASES,
    SALES_ALIASES,
    UNKNOWN_PRODUCT,
)

logger = logging.getLogger(__name__)

_RECORD_STRIP = re.compile(r"[^0-9.\-]")
_RECORD_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")

_COLUMN_STRIP = re.compile(r"[^0-9.+\-eE]")
_COLUMN_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class SalesCsvError(Exception):
    """Raised when a CSV cannot be aggregated at all."""


class EmptyInputError(SalesCsvError):
    """Raised when parsing produced no rows."""

    def __init__(self, message: str = "CSV appears to be empty"):
        super().__init__(message)


class MissingColumnError(SalesCsvError):
    """Raised when the column to sum is not in the header."""

    def __init__(self, column: str, headers: Sequence[str]):
        self.column = column
        self.headers = list(headers)
        found = ", ".join(self.headers)
        super().__init__(f"Required column not found: '{column}'. Found headers: {found}")


@dataclass(frozen=True)
class Table:
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)


@dataclass(frozen=True)
class SalesRecord:
    product: str = UNKNOWN_PRODUCT
    region: str = ""
    sales: float = 0.0


@dataclass(frozen=True)
class ColumnSum:
    column: str
    total: float
    counted: int
    skipped: int


def split_table(rows: Sequence[Sequence[str]]) -> Table:
    """Separate the header row from the data rows."""
    if not rows:
        raise EmptyInputError()
    header = [cell.strip() for cell in rows[0]]
    return Table(header=header, rows=[list(r) for r in rows[1:]])


def read_table(text: str) -> Table:
    return split_table(parse_csv(text))


def _leading_float(text: str, pattern: re.Pattern) -> float:
    match = pattern.match(text)
    if match is None:
        return math.nan
    return float(match.group(0))


def coerce_sales(value: Any) -> float:
    """
    Read a sales amount the lenient way.

    Numbers pass through. Anything else has every character other than
    digits, '.' and '-' removed and its leading number read. Failures and
    non-finite results become 0.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        number = _leading_float(_RECORD_STRIP.sub("", str(value)), _RECORD_NUMBER)
    return number if math.isfinite(number) else 0.0


def _first_value(lookup: Mapping[str, Any], aliases: Sequence[str]) -> Optional[Any]:
    for alias in aliases:
        value = lookup.get(alias)
        if value:
            return value
    return None


def _first_present(lookup: Mapping[str, Any], aliases: Sequence[str]) -> Optional[Any]:
    for alias in aliases:
        if lookup.get(alias) is not None:
            return lookup[alias]
    return None


def normalize_mapping(data: Mapping[str, Any]) -> SalesRecord:
    """Build a SalesRecord from a header->value mapping."""
    lookup: Dict[str, Any] = {str(k).lower(): v for k, v in data.items()}

    product = _first_value(lookup, PRODUCT_ALIASES) or UNKNOWN_PRODUCT
    region = _first_value(lookup, REGION_ALIASES) or ""
    raw_sales = _first_present(lookup, SALES_ALIASES)

    return SalesRecord(
        product=str(product),
        region=str(region),
        sales=coerce_sales("0" if raw_sales is None else raw_sales),
    )


def zip_row(header: Sequence[str], row: Sequence[str]) -> Dict[str, str]:
    """Key a row by header name; missing trailing cells read as ''."""
    return {name: (row[j] if j < len(row) else "") for j, name in enumerate(header)}


def normalize_row(header: Sequence[str], row: Sequence[str]) -> SalesRecord:
    return normalize_mapping(zip_row(header, row))


def to_records(table: Table) -> List[SalesRecord]:
    return [normalize_row(table.header, row) for row in table.rows]


def records_from_text(text: str) -> List[SalesRecord]:
    """Parse CSV text straight into records. Raises EmptyInputError on no rows."""
    return to_records(read_table(text))


def column_index(header: Sequence[str], name: str) -> int:
    target = name.strip().lower()
    for j, cell in enumerate(header):
        if cell.strip().lower() == target:
            return j
    raise MissingColumnError(name, header)


def sum_column(table: Table, name: str) -> ColumnSum:
    """
    Sum one column of the table.

    Rows without the cell, blank cells and cells that do not yield a finite
    number are skipped rather than failing the sum.
    """
    idx = column_index(table.header, name)
    total = 0.0
    counted = 0
    skipped = 0

    for i, row in enumerate(table.rows, start=2):
        if idx >= len(row):
            skipped += 1
            continue
        cell = row[idx].strip()
        if not cell:
            skipped += 1
            continue
        number = _leading_float(_COLUMN_STRIP.sub("", cell), _COLUMN_NUMBER)
        if not math.isfinite(number):
            logger.debug("Skipping non-numeric %s cell on row %d: %r", name, i, cell)
            skipped += 1
            continue
        total += number
        counted += 1

    return ColumnSum(column=table.header[idx], total=total, counted=counted, skipped=skipped)
