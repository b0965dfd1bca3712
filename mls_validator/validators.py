"""
Fail-fast validation surface.

Each ``validate_*`` function accepts either a model or its camelCase JSON
mapping and raises ValidationError on the FIRST rule it breaks; it returns
the validated model otherwise.  Use this in strict pipelines where a broken
report must stop processing.  The lenient, collect-everything counterpart is
``report_checks.collect_report_errors``.

Both surfaces decide through the same predicates; here the rule groups of
``rules.py`` are run and their first ERROR finding becomes the exception.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models import (
    DemographicMetric,
    MarketTrends,
    MLSReport,
    PricePoint,
    Property,
    SchoolInfo,
    Severity,
    ValidationFinding,
)
from .rules import (
    check_demographic_metric,
    check_demographic_trends,
    check_market_conditions,
    check_market_trends,
    check_price_point,
    check_property,
    check_school_info,
    check_statistics_bounds,
    validate_all,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_price_point(value: Any) -> PricePoint:
    point = _coerce(PricePoint, value, "price point")
    _raise_first(check_price_point(point))
    return point


def validate_market_trends(value: Any) -> MarketTrends:
    trends = _coerce(MarketTrends, value, "market trends")
    _raise_first(check_market_trends(trends))
    return trends


def validate_school_info(value: Any) -> SchoolInfo:
    school = _coerce(SchoolInfo, value, "school info")
    _raise_first(check_school_info(school))
    return school


def validate_demographic_metric(value: Any) -> DemographicMetric:
    metric = _coerce(DemographicMetric, value, "demographic metric")
    _raise_first(check_demographic_metric(metric))
    return metric


def validate_property(value: Any) -> Property:
    listing = _coerce(Property, value, "property")
    _raise_first(check_property(listing))
    return listing


def validate_mls_report(value: Any) -> MLSReport:
    """Validate a whole report: trends, schools, demographics, listings, then statistics.

    Raises:
        ValidationError: with a dotted ``field`` path into the report,
            e.g. ``closedListings[0].pricePerSqft``.
    """
    report = _coerce(MLSReport, value, "MLS report")

    validate_market_trends(report.market_trends)

    for index, school in enumerate(report.school_districts):
        with _rooted(f"schoolDistricts[{index}]", f"Invalid school district at index {index}"):
            validate_school_info(school)

    analysis = report.demographic_analysis
    for key, metric in analysis.metrics().items():
        with _rooted(f"demographicAnalysis.{key}", f"Invalid demographic metric for {key}"):
            validate_demographic_metric(metric)
    for level, metric in analysis.education_metrics().items():
        with _rooted(
            f"demographicAnalysis.educationLevels.{level}",
            f"Invalid demographic metric for educationLevels.{level}",
        ):
            validate_demographic_metric(metric)

    for bucket, listings in (
        ("activeListings", report.active_listings),
        ("closedListings", report.closed_listings),
    ):
        for index, listing in enumerate(listings):
            with _rooted(f"{bucket}[{index}]", f"Invalid property in {bucket} at index {index}"):
                validate_property(listing)

    _raise_first(check_market_conditions(report.statistics))
    _raise_first(check_demographic_trends(report))
    _raise_first(check_statistics_bounds(report.statistics))

    logger.debug("Report %s passed all strict checks", report.mls_number)
    return report


def collect_findings(value: Any) -> list[ValidationFinding]:
    """Collect-all variant of validate_mls_report: every finding, nothing raised."""
    return validate_all(_coerce(MLSReport, value, "MLS report"))


# ─── Helpers ─────────────────────────────────────────────────────────


def _coerce(model: type[ModelT], value: Any, label: str) -> ModelT:
    """Accept a model instance or parse a mapping; bad shapes fail as 'structure'.

    The field is rooted at the container holding the first bad entry, so a
    string ``bathrooms`` on the first active listing reports
    ``activeListings[0].structure``.
    """
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except PydanticValidationError as exc:
        errors = exc.errors()
        locations = [".".join(str(part) for part in err["loc"]) for err in errors]
        raise ValidationError(
            f"Invalid {label} structure",
            _structure_field(errors[0]) if errors else "structure",
            code="INVALID_STRUCTURE",
            details={"locations": locations},
        ) from exc


def _structure_field(error: Any) -> str:
    """``('activeListings', 0, 'bathrooms')`` -> ``'activeListings[0].structure'``."""
    loc = list(error["loc"])
    if error["type"] != "model_type":
        # The last part names the offending field; a non-mapping entry is the container itself.
        loc = loc[:-1]
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return f"{path}.structure" if path else "structure"


@contextmanager
def _rooted(prefix: str, context: str) -> Iterator[None]:
    """Re-raise a nested ValidationError with its path rooted under ``prefix``."""
    try:
        yield
    except ValidationError as err:
        raise err.nested(prefix, f"{context}: {err.message}") from err


def _raise_first(findings: Iterable[ValidationFinding]) -> None:
    for finding in findings:
        if finding.severity == Severity.ERROR:
            raise ValidationError(
                finding.message, finding.field, code=finding.code, details=finding.details
            )
