"""
Metrics Projection — derived ratios from stored counters.
Pure and stateless; all outputs are two-decimal strings and a zero
denominator yields "0.00" instead of raising.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from ppc_manager.models import COUNTER_FIELDS
from ppc_manager.utils import TWO_PLACES, decimal_str, to_decimal

ZERO = "0.00"
HUNDRED = Decimal(100)


def _fmt(value: Decimal) -> str:
    return str(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _ratio(numerator: Decimal, denominator: Decimal, scale: Decimal = Decimal(1)) -> str:
    if denominator > 0:
        return _fmt(numerator / denominator * scale)
    return ZERO


def project_metrics(counters: dict) -> dict[str, str]:
    """
    counters: {impressions, clicks, conversions, spend, sales} — ints, Decimals or decimal strings.
    Returns {ctr, cvr, cpc, acos}.
    """
    impressions = to_decimal(counters.get("impressions", 0))
    clicks = to_decimal(counters.get("clicks", 0))
    conversions = to_decimal(counters.get("conversions", 0))
    spend = to_decimal(counters.get("spend", 0))
    sales = to_decimal(counters.get("sales", 0))
    return {
        "ctr": _ratio(clicks, impressions, HUNDRED),
        "cvr": _ratio(conversions, clicks, HUNDRED),
        "cpc": _ratio(spend, clicks),
        "acos": _ratio(spend, sales, HUNDRED),
    }


def zero_counters() -> dict:
    """Counter values for a new record, at the scale the columns store."""
    return {
        "impressions": 0,
        "clicks": 0,
        "conversions": 0,
        "spend": Decimal("0.00"),
        "sales": Decimal("0.00"),
    }


def counters_of(record: Any) -> dict:
    return {name: getattr(record, name) or 0 for name in COUNTER_FIELDS}


def stats_for(record: Any) -> dict:
    """Counters as the API shows them plus the projected ratios."""
    counters = counters_of(record)
    return {
        "impressions": decimal_str(counters["impressions"]),
        "clicks": int(counters["clicks"]),
        "conversions": int(counters["conversions"]),
        "spend": decimal_str(counters["spend"]),
        "sales": decimal_str(counters["sales"]),
        **project_metrics(counters),
    }
