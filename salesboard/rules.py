"""
Deterministic aggregation rules.

This file exists to make header aliases and fallbacks explicit and enforceable.
"""

# Aliases are tried in order; first match wins.
PRODUCT_ALIASES = ("product", "item", "name")
REGION_ALIASES = ("region", "area")
SALES_ALIASES = ("sales", "amount", "total")

UNKNOWN_PRODUCT = "Unknown"
ALL_REGIONS = "all"

DEFAULT_CURRENCY = "INR"
DEFAULT_RATES = {DEFAULT_CURRENCY: 1}

DEFAULT_SUM_COLUMN = "sales"

# Values this close to an integer render without decimals.
INTEGER_TOLERANCE = 1e-9

FETCH_TIMEOUT_SECONDS = 10
