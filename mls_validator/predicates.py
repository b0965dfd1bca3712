"""
Shared predicate library for both validator surfaces.

Every threshold and every yes/no decision about report data lives here.  The
fail-fast validators (``validators.py``) and the collect-all report checks
(``report_checks.py``) only phrase the outcome differently; neither one
compares a number against a limit on its own.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from .models import DemographicMetric, Statistics, Trend

# ─── Thresholds ──────────────────────────────────────────────────────

PRICE_VOLATILITY = 0.15  # max month-over-month price change
MIN_CONFIDENCE = 0.5
MAX_CONFIDENCE = 1.0
MAX_YOY_GROWTH = 0.30  # max |nextYear.priceChange|
MAX_SEASONAL_VOLUME_CHANGE = 0.5
MIN_SCHOOL_RATING = 0
MAX_SCHOOL_RATING = 10
MAX_SCHOOL_DISTANCE = 10  # miles
MIN_STUDENT_TEACHER_RATIO = 10
MAX_STUDENT_TEACHER_RATIO = 30
MAX_ABSORPTION_RATE = 100  # percent
MAX_PRICE_TO_INCOME_RATIO = 5
MAX_PRICE_DEVIATION = 0.5  # |average - median| / median
MIN_DAYS_ON_MARKET = 5
MAX_POPULATION_DENSITY = 10_000  # per square mile
MAX_EDUCATION_TOTAL = 1.1  # shares may overlap by rounding
PRICE_PER_SQFT_TOLERANCE = 1
INVENTORY_TOLERANCE = 5
MIN_YEAR_BUILT = 1800

# Listing sanity ranges
MAX_BEDROOMS = 20
MIN_SQFT = 100
MAX_SQFT = 100_000
MAX_ACRES = 1000
MIN_STATISTIC_PRICE = 1000
MAX_STATISTIC_PRICE = 100_000_000

# Buyer's market: plenty of supply, slow sales.
BUYERS_MIN_MONTHS_SUPPLY = 6
BUYERS_MIN_DAYS_ON_MARKET = 60
BUYERS_MAX_ABSORPTION_RATE = 40
BUYERS_MAX_LIST_TO_SOLD_RATIO = 0.95

# Seller's market: tight supply, fast sales.
SELLERS_MAX_MONTHS_SUPPLY = 3
SELLERS_MAX_DAYS_ON_MARKET = 30
SELLERS_MIN_ABSORPTION_RATE = 60
SELLERS_MIN_LIST_TO_SOLD_RATIO = 0.98

TRENDS: frozenset[str] = frozenset(t.value for t in Trend)

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_BATHROOM_FORMAT = re.compile(r"^\d+/\d+/\d+$")


# ─── Primitive Predicates ────────────────────────────────────────────


def is_number(value: Any) -> bool:
    """True for int/float values; bools are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def in_range(value: float, low: float, high: float) -> bool:
    return low <= value <= high


def is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_month_key(value: Any) -> bool:
    """'2024-03' style keys with a real month, 01 to 12."""
    return isinstance(value, str) and bool(_MONTH_KEY.match(value))


def is_bathroom_format(value: Any) -> bool:
    """'full/half/quarter', e.g. '2/1/0'."""
    return isinstance(value, str) and bool(_BATHROOM_FORMAT.match(value))


def relative_change(previous: float, current: float) -> float | None:
    """|current - previous| / previous, or None when there is no base to compare to."""
    if previous == 0:
        return None
    return abs((current - previous) / previous)


def exceeds(change: float | None, limit: float) -> bool:
    return change is not None and change > limit


# ─── Domain Predicates ───────────────────────────────────────────────


def is_demographic_metric(value: Any) -> bool:
    """Shape check: numeric value, known trend, numeric percent change."""
    if isinstance(value, DemographicMetric):
        return True
    if not isinstance(value, Mapping):
        return False
    trend = value.get("trend")
    if isinstance(trend, Trend):
        trend = trend.value
    return (
        is_number(value.get("value"))
        and trend in TRENDS
        and is_number(value.get("percentChange", value.get("percent_change")))
    )


def price_per_sqft_matches(list_price: float, sqft: float, price_per_sqft: float) -> bool:
    if sqft <= 0:
        return False
    return abs(list_price / sqft - price_per_sqft) <= PRICE_PER_SQFT_TOLERANCE


def education_total(levels: Iterable[DemographicMetric]) -> float:
    return sum(level.value for level in levels)


def is_buyers_market(stats: Statistics) -> bool:
    return stats.months_of_supply >= BUYERS_MIN_MONTHS_SUPPLY


def is_sellers_market(stats: Statistics) -> bool:
    return stats.months_of_supply <= SELLERS_MAX_MONTHS_SUPPLY


def buyers_market_consistent(stats: Statistics) -> bool:
    """Slow absorption, discounted sales and long DOM must accompany high supply."""
    return (
        stats.absorption_rate <= BUYERS_MAX_ABSORPTION_RATE
        and stats.list_to_sold_ratio <= BUYERS_MAX_LIST_TO_SOLD_RATIO
        and stats.average_days_on_market >= BUYERS_MIN_DAYS_ON_MARKET
    )


def sellers_market_consistent(stats: Statistics) -> bool:
    """Fast absorption, near-list sales and short DOM must accompany low supply."""
    return (
        stats.absorption_rate >= SELLERS_MIN_ABSORPTION_RATE
        and stats.list_to_sold_ratio >= SELLERS_MIN_LIST_TO_SOLD_RATIO
        and stats.average_days_on_market <= SELLERS_MAX_DAYS_ON_MARKET
    )


def sale_to_list_consistent(stats: Statistics) -> bool:
    """Selling above list on average implies a list-to-sold ratio of at least 1."""
    if stats.average_sold_price > stats.average_list_price:
        return stats.list_to_sold_ratio >= 1
    return True


def inventory_consistent(stats: Statistics) -> bool:
    expected = stats.total_active_listings + stats.pending_listings
    return abs(expected - stats.inventory_level) <= INVENTORY_TOLERANCE


def price_deviation(stats: Statistics) -> float | None:
    """|average - median| / median, None when the median is zero."""
    return relative_change(stats.median_price, stats.average_price)


def price_to_income_ratio(median_price: float, median_income: float) -> float | None:
    if median_income <= 0:
        return None
    return median_price / median_income
