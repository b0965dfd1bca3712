"""
Statistics synthesis over the extracted listing buckets.

Pure functions: no I/O, no mutation, and never a ZeroDivisionError. Every
divisor is either clamped to at least 1 or guarded, so an empty report still
produces a fully populated Statistics object (mostly zeros).
"""

from __future__ import annotations

from collections.abc import Sequence

from .config import Settings, get_settings
from .models import Property, Statistics

# The closed bucket of a report is treated as a 3-month sales sample.
SALES_SAMPLE_MONTHS = 3


def average(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    return sum(values) / len(values) if values else 0


def median(values: Sequence[float]) -> float:
    """Middle element of the sorted values (mean of the two middles for even length)."""
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def synthesize_statistics(
    active: Sequence[Property],
    closed: Sequence[Property],
    settings: Settings | None = None,
) -> Statistics:
    """Derive the report-wide Statistics from the active and closed buckets.

    Args:
        active: Listings without a sold price.
        closed: Listings with a sold price.
        settings: Heuristic ratios; defaults to the cached environment settings.
    """
    settings = settings or get_settings()
    active_count = len(active)
    closed_count = len(closed)

    list_prices = [p.list_price for p in active if p.list_price > 0]
    sold_prices = [p.sold_price for p in closed if p.sold_price]
    days_on_market = [p.days_on_market or 0 for p in closed]

    average_list_price = average(list_prices)
    average_sold_price = average(sold_prices)

    if sold_prices and average_list_price > 0:
        list_to_sold_ratio = average_sold_price / average_list_price
    else:
        list_to_sold_ratio = 1.0

    pending = round(active_count * settings.pending_listing_ratio)

    return Statistics(
        average_list_price=average_list_price,
        median_list_price=median(list_prices),
        average_sold_price=average_sold_price,
        median_sold_price=median(sold_prices),
        average_days_on_market=average(days_on_market),
        median_days_on_market=median(days_on_market),
        total_active_listings=active_count,
        total_closed_sales=closed_count,
        average_price=average([*list_prices, *sold_prices]),
        median_price=median([*list_prices, *sold_prices]),
        price_per_square_foot=average([p.price_per_sqft for p in [*active, *closed]]),
        inventory_level=active_count + pending,
        days_of_inventory=settings.days_of_inventory,
        absorption_rate=closed_count / max(active_count, 1) * 100,
        new_listings=round(active_count * settings.new_listing_ratio),
        closed_listings=closed_count,
        pending_listings=pending,
        canceled_listings=round(active_count * settings.canceled_listing_ratio),
        list_to_sold_ratio=list_to_sold_ratio,
        months_of_supply=active_count / max(closed_count / SALES_SAMPLE_MONTHS, 1),
    )
