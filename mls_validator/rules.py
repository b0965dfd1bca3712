"""
Deterministic rule groups — the "paranoid" layer over an extracted report.

These rules run PURE CODE checks on report data.  They never guess and never
mutate what they are given.

Each rule function:
  - Takes one model (a PricePoint, a Property, the whole report, ...)
  - Returns a list of ValidationFinding objects (empty = all clear)
  - Reports field paths relative to the object it was given
  - Emits findings in the order a fail-fast caller must surface them

The validate_all() function runs every group over a report, re-rooting the
nested findings under their position in the report.
"""

from __future__ import annotations

from .models import (
    DemographicMetric,
    MarketTrends,
    MLSReport,
    PricePoint,
    Property,
    SchoolInfo,
    Severity,
    Statistics,
    ValidationFinding,
)
from .predicates import (
    MAX_ABSORPTION_RATE,
    MAX_CONFIDENCE,
    MAX_EDUCATION_TOTAL,
    MAX_POPULATION_DENSITY,
    MAX_PRICE_DEVIATION,
    MAX_PRICE_TO_INCOME_RATIO,
    MAX_SCHOOL_DISTANCE,
    MAX_SCHOOL_RATING,
    MAX_SEASONAL_VOLUME_CHANGE,
    MAX_STUDENT_TEACHER_RATIO,
    MAX_YOY_GROWTH,
    MIN_CONFIDENCE,
    MIN_DAYS_ON_MARKET,
    MIN_SCHOOL_RATING,
    MIN_STUDENT_TEACHER_RATIO,
    PRICE_VOLATILITY,
    buyers_market_consistent,
    education_total,
    exceeds,
    in_range,
    inventory_consistent,
    is_blank,
    is_bathroom_format,
    is_buyers_market,
    is_month_key,
    is_sellers_market,
    price_deviation,
    price_per_sqft_matches,
    price_to_income_ratio,
    relative_change,
    sale_to_list_consistent,
    sellers_market_consistent,
)


# ─── Helpers ─────────────────────────────────────────────────────────


def _error(code: str, field: str, message: str, **details: object) -> ValidationFinding:
    return ValidationFinding(
        severity=Severity.ERROR, code=code, field=field, message=message, details=details
    )


def _nest(
    findings: list[ValidationFinding], prefix: str, context: str | None = None
) -> list[ValidationFinding]:
    """Re-root findings under ``prefix``; ``context`` replaces the message lead-in."""
    nested = []
    for f in findings:
        message = f"{context}: {f.message}" if context else f.message
        nested.append(f.model_copy(update={"field": f"{prefix}.{f.field}", "message": message}))
    return nested


# ─── Orchestrator ────────────────────────────────────────────────────


def validate_all(report: MLSReport) -> list[ValidationFinding]:
    """Run ALL report rules and collect findings, in fail-fast order."""
    findings: list[ValidationFinding] = []
    findings.extend(check_market_trends(report.market_trends))

    for index, school in enumerate(report.school_districts):
        findings.extend(
            _nest(
                check_school_info(school),
                f"schoolDistricts[{index}]",
                f"Invalid school district at index {index}",
            )
        )

    analysis = report.demographic_analysis
    for key, metric in analysis.metrics().items():
        findings.extend(
            _nest(
                check_demographic_metric(metric),
                f"demographicAnalysis.{key}",
                f"Invalid demographic metric for {key}",
            )
        )
    for level, metric in analysis.education_metrics().items():
        findings.extend(
            _nest(
                check_demographic_metric(metric),
                f"demographicAnalysis.educationLevels.{level}",
                f"Invalid demographic metric for educationLevels.{level}",
            )
        )

    for bucket, listings in (
        ("activeListings", report.active_listings),
        ("closedListings", report.closed_listings),
    ):
        for index, listing in enumerate(listings):
            findings.extend(
                _nest(
                    check_property(listing),
                    f"{bucket}[{index}]",
                    f"Invalid property in {bucket} at index {index}",
                )
            )

    findings.extend(check_market_conditions(report.statistics))
    findings.extend(check_demographic_trends(report))
    findings.extend(check_statistics_bounds(report.statistics))
    return findings


# ─── Market Trends ───────────────────────────────────────────────────


def check_price_point(point: PricePoint) -> list[ValidationFinding]:
    """A 'YYYY-MM' date, a positive price and a non-negative volume."""
    findings: list[ValidationFinding] = []

    if not is_month_key(point.date):
        findings.append(
            _error("INVALID_DATE_FORMAT", "date",
                   "Invalid date format. Expected YYYY-MM", date=point.date)
        )
    if point.price <= 0:
        findings.append(
            _error("INVALID_PRICE", "price",
                   "Invalid price. Must be a positive number", price=point.price)
        )
    if point.volume < 0:
        findings.append(
            _error("INVALID_VOLUME", "volume",
                   "Invalid volume. Must be a positive number", volume=point.volume)
        )

    return findings


def check_market_trends(trends: MarketTrends) -> list[ValidationFinding]:
    """Chronology and volatility of the price history, seasonal bounds, forecast sanity."""
    findings: list[ValidationFinding] = []
    history = trends.price_history

    for index, point in enumerate(history):
        findings.extend(_nest(check_price_point(point), f"priceHistory[{index}]"))
        if index == 0:
            continue
        previous = history[index - 1]
        if point.date <= previous.date:
            findings.append(
                _error("PRICE_HISTORY_ORDER", f"priceHistory[{index}].date",
                       "Price history must be in chronological order",
                       previous=previous.date, current=point.date)
            )
        change = relative_change(previous.price, point.price)
        if exceeds(change, PRICE_VOLATILITY):
            findings.append(
                _error("PRICE_VOLATILITY", f"priceHistory[{index}].price",
                       "Price volatility exceeds market threshold",
                       change=round(change, 4), threshold=PRICE_VOLATILITY)
            )

    seasonality = trends.seasonality
    for index, entry in enumerate(seasonality):
        if not in_range(entry.month, 1, 12):
            findings.append(
                _error("INVALID_MONTH", f"seasonality[{index}].month",
                       "Invalid month. Must be between 1 and 12", month=entry.month)
            )
        if index == 0:
            continue
        change = relative_change(seasonality[index - 1].sales_volume, entry.sales_volume)
        if exceeds(change, MAX_SEASONAL_VOLUME_CHANGE):
            findings.append(
                _error("SEASONAL_VOLUME_PATTERN", f"seasonality[{index}].salesVolume",
                       "Invalid seasonal volume pattern",
                       change=round(change, 4), threshold=MAX_SEASONAL_VOLUME_CHANGE)
            )

    distinct_months = {entry.month for entry in seasonality}
    if seasonality and len(distinct_months) != 12:
        findings.append(
            ValidationFinding(
                severity=Severity.WARNING,
                code="SEASONALITY_INCOMPLETE",
                field="seasonality",
                message=(
                    f"Seasonal profile covers {len(distinct_months)} of 12 months; "
                    f"seasonal factors for the missing months default to 1."
                ),
                details={"months": sorted(distinct_months)},
            )
        )

    horizons = (
        ("nextMonth", trends.forecast.next_month),
        ("nextQuarter", trends.forecast.next_quarter),
        ("nextYear", trends.forecast.next_year),
    )
    for period, metric in horizons:
        if not in_range(metric.confidence, MIN_CONFIDENCE, MAX_CONFIDENCE):
            findings.append(
                _error("INVALID_CONFIDENCE", f"forecast.{period}.confidence",
                       "Invalid confidence value", confidence=metric.confidence)
            )
        if period == "nextYear" and abs(metric.price_change) > MAX_YOY_GROWTH:
            findings.append(
                _error("ANNUAL_GROWTH_OUT_OF_BOUNDS", f"forecast.{period}.priceChange",
                       "Annual growth rate exceeds historical bounds",
                       price_change=metric.price_change, threshold=MAX_YOY_GROWTH)
            )

    for (_, shorter), (period, longer) in zip(horizons, horizons[1:]):
        if longer.confidence > shorter.confidence:
            findings.append(
                _error("CONFIDENCE_NOT_DECAYING", f"forecast.{period}.confidence",
                       "Forecast confidence must not increase with horizon length",
                       shorter=shorter.confidence, longer=longer.confidence)
            )

    return findings


# ─── Schools & Demographics ─────────────────────────────────────────


def check_school_info(school: SchoolInfo) -> list[ValidationFinding]:
    findings: list[ValidationFinding] = []

    if not in_range(school.rating, MIN_SCHOOL_RATING, MAX_SCHOOL_RATING):
        findings.append(
            _error("INVALID_SCHOOL_RATING", "rating",
                   "Invalid school rating. Must be between 0 and 10", rating=school.rating)
        )
    if not in_range(school.distance, 0, MAX_SCHOOL_DISTANCE):
        findings.append(
            _error("SCHOOL_TOO_FAR", "distance",
                   "School district outside reasonable distance", distance=school.distance)
        )
    if not in_range(
        school.student_teacher_ratio, MIN_STUDENT_TEACHER_RATIO, MAX_STUDENT_TEACHER_RATIO
    ):
        findings.append(
            _error("INVALID_STUDENT_TEACHER_RATIO", "studentTeacherRatio",
                   "Invalid student-teacher ratio", ratio=school.student_teacher_ratio)
        )

    return findings


def check_demographic_metric(metric: DemographicMetric) -> list[ValidationFinding]:
    """Trend and percent change are typed on the model; only the value is ruled here."""
    findings: list[ValidationFinding] = []

    if metric.value <= 0:
        findings.append(
            _error("INVALID_DEMOGRAPHIC_VALUE", "value",
                   "Invalid demographic value. Must be a positive number", value=metric.value)
        )

    return findings


def check_demographic_trends(report: MLSReport) -> list[ValidationFinding]:
    """Education shares, population density, affordability and trend agreement."""
    findings: list[ValidationFinding] = []
    analysis = report.demographic_analysis
    stats = report.statistics

    total = education_total(analysis.education_metrics().values())
    if total > MAX_EDUCATION_TOTAL:
        findings.append(
            _error("EDUCATION_TOTAL_EXCEEDED", "demographicAnalysis.educationLevels",
                   "Invalid education level total", total=round(total, 4))
        )

    if analysis.population.value > MAX_POPULATION_DENSITY:
        findings.append(
            _error("POPULATION_OUT_OF_BOUNDS", "demographicAnalysis.population",
                   "Population exceeds geographic bounds",
                   population=analysis.population.value)
        )

    ratio = price_to_income_ratio(stats.median_price, analysis.median_income.value)
    if ratio is not None and ratio > MAX_PRICE_TO_INCOME_RATIO:
        findings.append(
            _error("PRICE_TO_INCOME_EXCEEDED", "statistics.medianPrice",
                   "Price-to-income ratio exceeds reasonable threshold",
                   ratio=round(ratio, 2), threshold=MAX_PRICE_TO_INCOME_RATIO)
        )

    if (
        analysis.median_income.trend.value == "decreasing"
        and analysis.employment_rate.trend.value == "decreasing"
        and stats.median_price > stats.median_list_price
    ):
        findings.append(
            _error("INCONSISTENT_TRENDS", "demographicAnalysis",
                   "Inconsistent trend indicators")
        )

    return findings


# ─── Listings ────────────────────────────────────────────────────────


def check_property(listing: Property) -> list[ValidationFinding]:
    findings: list[ValidationFinding] = []

    if listing.list_price <= 0:
        findings.append(
            _error("INVALID_LIST_PRICE", "listPrice",
                   "Invalid list price. Must be a positive number", list_price=listing.list_price)
        )
    if listing.sqft <= 0:
        findings.append(
            _error("INVALID_SQFT", "sqft",
                   "Invalid square footage. Must be a positive number", sqft=listing.sqft)
        )
    if is_blank(listing.address):
        findings.append(_error("INVALID_ADDRESS", "address", "Invalid address"))
    if listing.bedrooms <= 0:
        findings.append(
            _error("INVALID_BEDROOMS", "bedrooms",
                   "Invalid number of bedrooms. Must be a positive number",
                   bedrooms=listing.bedrooms)
        )
    if not is_bathroom_format(listing.bathrooms):
        findings.append(
            _error("INVALID_BATHROOM_FORMAT", "bathrooms",
                   'Invalid bathroom format. Must be in format "full/half/quarter"',
                   bathrooms=listing.bathrooms)
        )
    if listing.sqft > 0 and not price_per_sqft_matches(
        listing.list_price, listing.sqft, listing.price_per_sqft
    ):
        findings.append(
            _error("PRICE_PER_SQFT_MISMATCH", "pricePerSqft",
                   "Invalid price per square foot",
                   expected=round(listing.list_price / listing.sqft, 2),
                   actual=listing.price_per_sqft)
        )

    return findings


# ─── Statistics ──────────────────────────────────────────────────────


def check_market_conditions(stats: Statistics) -> list[ValidationFinding]:
    """Supply, absorption, pricing and DOM must tell the same market story."""
    findings: list[ValidationFinding] = []
    signals = {
        "months_of_supply": stats.months_of_supply,
        "absorption_rate": stats.absorption_rate,
        "list_to_sold_ratio": stats.list_to_sold_ratio,
        "average_days_on_market": stats.average_days_on_market,
    }

    if is_buyers_market(stats) and not buyers_market_consistent(stats):
        findings.append(
            _error("INCONSISTENT_MARKET_CONDITIONS", "statistics",
                   "Inconsistent market condition indicators",
                   market="buyers", **signals)
        )
    if is_sellers_market(stats) and not sellers_market_consistent(stats):
        findings.append(
            _error("INCONSISTENT_MARKET_CONDITIONS", "statistics",
                   "Inconsistent market condition indicators",
                   market="sellers", **signals)
        )
    if not sale_to_list_consistent(stats):
        findings.append(
            _error("INCONSISTENT_SALE_TO_LIST", "statistics",
                   "Inconsistent sale-to-list metrics",
                   average_sold_price=stats.average_sold_price,
                   average_list_price=stats.average_list_price,
                   list_to_sold_ratio=stats.list_to_sold_ratio)
        )
    if not inventory_consistent(stats):
        findings.append(
            _error("INCONSISTENT_INVENTORY", "statistics",
                   "Inconsistent inventory metrics",
                   inventory_level=stats.inventory_level,
                   active=stats.total_active_listings,
                   pending=stats.pending_listings)
        )

    return findings


def check_statistics_bounds(stats: Statistics) -> list[ValidationFinding]:
    findings: list[ValidationFinding] = []

    if stats.absorption_rate > MAX_ABSORPTION_RATE:
        findings.append(
            _error("INVALID_ABSORPTION_RATE", "statistics.absorptionRate",
                   "Invalid absorption rate. Must be between 0 and 100",
                   absorption_rate=stats.absorption_rate)
        )

    deviation = price_deviation(stats)
    if deviation is None:
        # zero median: only a non-zero average is out of bounds
        out_of_bounds = stats.average_price != 0
    else:
        out_of_bounds = deviation > MAX_PRICE_DEVIATION
    if out_of_bounds:
        findings.append(
            _error("PRICE_DISTRIBUTION_OUT_OF_BOUNDS", "statistics",
                   "Price distribution exceeds normal bounds",
                   average_price=stats.average_price, median_price=stats.median_price)
        )

    if stats.average_days_on_market < MIN_DAYS_ON_MARKET:
        findings.append(
            _error("INVALID_DAYS_ON_MARKET", "statistics.averageDaysOnMarket",
                   "Invalid average days on market",
                   average_days_on_market=stats.average_days_on_market)
        )

    return findings
