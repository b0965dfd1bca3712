"""
Collect-all validation surface for lenient UI feedback.

``collect_report_errors`` never raises.  It accepts an MLSReport or any
mapping (the raw camelCase JSON a UI posts back, however malformed) and
returns every problem it finds as a human-readable string.  Nested sections
are checked for presence before they are dereferenced.

The checks here are a simpler, presence-and-shape oriented rule set than the
fail-fast validators, but they decide through the same predicates.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel

from .predicates import (
    MAX_ACRES,
    MAX_BEDROOMS,
    MAX_PRICE_DEVIATION,
    MAX_SCHOOL_RATING,
    MAX_SQFT,
    MAX_STATISTIC_PRICE,
    MIN_SCHOOL_RATING,
    MIN_SQFT,
    MIN_STATISTIC_PRICE,
    MIN_YEAR_BUILT,
    in_range,
    is_demographic_metric,
    is_number,
)

STATISTICS_FIELDS: tuple[str, ...] = (
    "averageDaysOnMarket",
    "medianDaysOnMarket",
    "totalActiveListings",
    "totalClosedSales",
    "averagePrice",
    "medianPrice",
    "pricePerSquareFoot",
    "inventoryLevel",
    "daysOfInventory",
    "absorptionRate",
    "newListings",
    "closedListings",
    "pendingListings",
    "canceledListings",
    "averageListPrice",
    "medianListPrice",
    "averageSoldPrice",
    "medianSoldPrice",
    "listToSoldRatio",
    "monthsOfSupply",
)

DEMOGRAPHIC_FIELDS: tuple[str, ...] = ("population", "medianAge", "medianIncome", "employmentRate")
EDUCATION_FIELDS: tuple[str, ...] = ("highSchool", "bachelors", "graduate")
FORECAST_HORIZONS: tuple[tuple[str, str], ...] = (
    ("nextMonth", "next month"),
    ("nextQuarter", "next quarter"),
    ("nextYear", "next year"),
)


def collect_report_errors(data: Any) -> list[str]:
    """Run every lenient check and return the messages (empty = all clear)."""
    report = _as_mapping(data)
    errors: list[str] = []

    _check_required_fields(report, errors)
    _check_numeric_fields(report, errors)
    _check_market_trends(report.get("marketTrends"), errors)
    _check_statistics(report.get("statistics"), errors)
    _check_school_district(report.get("schoolDistrict"), errors)
    _check_demographic_analysis(report.get("demographicAnalysis"), errors)

    return errors


def collect_listing_errors(data: Any) -> list[str]:
    """Sanity ranges for the active listings and the headline price statistics."""
    report = _as_mapping(data)
    errors: list[str] = []
    current_year = date.today().year

    for index, listing in enumerate(_as_list(report.get("activeListings"))):
        listing = _as_mapping(listing)
        if not listing.get("mlsNumber"):
            errors.append(f"Missing MLS number for active listing {index}")
        if not listing.get("address"):
            errors.append(f"Missing address for active listing {index}")
        if not listing.get("listPrice"):
            errors.append(f"Missing list price for active listing {index}")

        _check_range(listing, "bedrooms", "Bedrooms", 0, MAX_BEDROOMS, errors)
        _check_range(listing, "sqft", "Square footage", MIN_SQFT, MAX_SQFT, errors)
        _check_range(listing, "yearBuilt", "Year built", MIN_YEAR_BUILT, current_year, errors)
        _check_range(listing, "acres", "Acres", 0, MAX_ACRES, errors)

    stats = _as_mapping(report.get("statistics"))
    _check_statistic_price(stats, "averageListPrice", "Average list price", errors)
    _check_statistic_price(stats, "medianListPrice", "Median list price", errors)
    for key, label in (
        ("averageSoldPrice", "Average sold price"),
        ("medianSoldPrice", "Median sold price"),
    ):
        if _number(stats, key) > 0:
            _check_statistic_price(stats, key, label, errors)

    average_list = _number(stats, "averageListPrice")
    median_list = _number(stats, "medianListPrice")
    if abs(average_list - median_list) > average_list * MAX_PRICE_DEVIATION:
        errors.append("Large discrepancy between average and median list prices")

    if _number(stats, "averageDaysOnMarket") < 0:
        errors.append(
            "Negative value not allowed for averageDaysOnMarket: "
            f"{stats.get('averageDaysOnMarket')}"
        )

    return errors


# ─── Report Sections ─────────────────────────────────────────────────


def _check_required_fields(report: Mapping[str, Any], errors: list[str]) -> None:
    if not report.get("mlsNumber"):
        errors.append("MLS number is required")
    if not report.get("listPrice"):
        errors.append("List price is required")
    if not report.get("propertyType"):
        errors.append("Property type is required")
    if report.get("address") is None:
        errors.append("Address is required")
    if report.get("features") is None:
        errors.append("Features are required")
    if report.get("photos") is None:
        errors.append("Photos are required")

    address = report.get("address")
    if isinstance(address, Mapping):
        for key, label in (
            ("street", "Street address"),
            ("city", "City"),
            ("state", "State"),
            ("zipCode", "ZIP code"),
        ):
            if not address.get(key):
                errors.append(f"{label} is required")


def _check_numeric_fields(report: Mapping[str, Any], errors: list[str]) -> None:
    for key, label in (
        ("bedrooms", "Bedrooms"),
        ("bathrooms", "Bathrooms"),
        ("squareFeet", "Square feet"),
        ("lotSize", "Lot size"),
    ):
        if _number(report, key) <= 0:
            errors.append(f"{label} must be greater than 0")
    if _number(report, "yearBuilt") <= MIN_YEAR_BUILT:
        errors.append(f"Year built must be after {MIN_YEAR_BUILT}")


def _check_market_trends(trends: Any, errors: list[str]) -> None:
    if not isinstance(trends, Mapping):
        errors.append("Market trends are required")
        return
    if not isinstance(trends.get("priceHistory"), list):
        errors.append("Price history must be an array")
        return
    if not isinstance(trends.get("seasonality"), list):
        errors.append("Seasonality data must be an array")
        return

    forecast = trends.get("forecast")
    if not isinstance(forecast, Mapping):
        errors.append("Market forecast is required")
        return
    for key, label in FORECAST_HORIZONS:
        metric = forecast.get(key)
        if not (
            isinstance(metric, Mapping)
            and is_number(metric.get("priceChange"))
            and is_number(metric.get("confidence"))
        ):
            errors.append(f"Invalid {label} forecast data")


def _check_statistics(stats: Any, errors: list[str]) -> None:
    stats = _as_mapping(stats)
    for key in STATISTICS_FIELDS:
        if not is_number(stats.get(key)):
            errors.append(f"Invalid or missing {key} in statistics")


def _check_school_district(district: Any, errors: list[str]) -> None:
    if not isinstance(district, Mapping):
        errors.append("School district is required")
        return
    if not district.get("name"):
        errors.append("School district name is required")

    rating = district.get("rating")
    if not is_number(rating) or not in_range(rating, MIN_SCHOOL_RATING, MAX_SCHOOL_RATING):
        errors.append("School district rating must be between 0 and 10")

    schools = district.get("schools")
    if not isinstance(schools, Mapping) or any(
        schools.get(level) is None for level in ("elementary", "middle", "high")
    ):
        errors.append("School information is incomplete")


def _check_demographic_analysis(analysis: Any, errors: list[str]) -> None:
    analysis = _as_mapping(analysis)
    for key in DEMOGRAPHIC_FIELDS:
        if not is_demographic_metric(analysis.get(key)):
            errors.append(f"Invalid {key} demographic metric")

    levels = analysis.get("educationLevels")
    if not isinstance(levels, Mapping):
        errors.append("Education levels are required")
        return
    for level in EDUCATION_FIELDS:
        if not is_demographic_metric(levels.get(level)):
            errors.append(f"Invalid {level} education level metric")


# ─── Helpers ─────────────────────────────────────────────────────────


def _as_mapping(value: Any) -> Mapping[str, Any]:
    """Models become their camelCase JSON; anything that isn't a mapping becomes {}."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, Mapping):
        return value
    return {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _number(data: Mapping[str, Any], key: str) -> float:
    """The numeric value at ``key``; missing or non-numeric reads as 0."""
    value = data.get(key)
    return value if is_number(value) else 0


def _check_range(
    data: Mapping[str, Any],
    key: str,
    label: str,
    low: float,
    high: float,
    errors: list[str],
) -> None:
    value = _number(data, key)
    if not in_range(value, low, high):
        errors.append(f"{label} value {value} is outside valid range [{low}-{high}]")


def _check_statistic_price(
    stats: Mapping[str, Any], key: str, label: str, errors: list[str]
) -> None:
    price = _number(stats, key)
    if price < 0:
        errors.append(f"Negative value not allowed for {label}: {price}")
    if not in_range(price, MIN_STATISTIC_PRICE, MAX_STATISTIC_PRICE):
        errors.append(
            f"{label} value {price} is outside valid range "
            f"[{MIN_STATISTIC_PRICE}-{MAX_STATISTIC_PRICE}]"
        )
