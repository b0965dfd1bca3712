"""
Deterministic line-by-line extraction of MLS listings from report text.

The text comes from an upstream PDF-to-text step and is scanned one line at a
time.  Each non-blank line is tested against a fixed, ordered set of field
recognizers; the first one that matches claims the line.  A line starting a
new MLS number closes the listing being accumulated.

Philosophy: It's better to extract nothing than to extract wrong data.
            A line that matches no recognizer is skipped, never guessed at.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from .config import Settings, get_settings
from .models import (
    DemographicAnalysis,
    Demographics,
    MarketTrends,
    MLSReport,
    Property,
    ReportAddress,
    SchoolDistrict,
)
from .statistics import synthesize_statistics

logger = logging.getLogger(__name__)

UNKNOWN_MLS_NUMBER = "UNKNOWN"


# ─── Field Patterns (checked in this order) ─────────────────────────

MLS_NUMBER_PATTERN = re.compile(r"MLS#?\s*(\d+[-\s]*\d*)", re.IGNORECASE)
ADDRESS_PATTERN = re.compile(
    r"(\d+[^,\n]*\b(?:Street|St|Avenue|Ave|Road|Rd|Lane|Ln|Drive|Dr|Court|Ct|Circle|Cir|Way)\b[^,\n]*)",
    re.IGNORECASE,
)
PRICE_PATTERN = re.compile(r"(?:List|Price|Sold)(?:\s*Price)?:\s*\$?(\d[\d,]*)", re.IGNORECASE)
BEDROOMS_PATTERN = re.compile(r"(\d+)\s*(?:beds|bedrooms|BR)", re.IGNORECASE)
BATHROOMS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:baths|bathrooms|BA)", re.IGNORECASE)
SQFT_PATTERN = re.compile(r"(\d[\d,]*)\s*(?:sqft|sf|square\s*feet)", re.IGNORECASE)


def extract_mls_data(text: str, settings: Settings | None = None) -> MLSReport:
    """Extract an MLSReport from raw MLS report text.

    Args:
        text: Plain text of the report, one field per line.
        settings: Market defaults; falls back to the cached environment settings.

    Returns:
        MLSReport with active/closed listings and synthesized statistics.
        Market trends, schools and demographics are placeholders awaiting
        enrichment from another source.
    """
    settings = settings or get_settings()
    properties = _extract_listings(text, settings)

    active = [p for p in properties if not p.is_closed]
    closed = [p for p in properties if p.is_closed]
    logger.info(
        "Extracted %d listing(s): %d active, %d closed",
        len(properties), len(active), len(closed),
    )

    return _build_report(active, closed, settings)


# ─── Line Scanner ────────────────────────────────────────────────────


_Accumulator = dict[str, Any]


def _extract_listings(text: str, settings: Settings) -> list[Property]:
    """Walk the lines, accumulating one listing per MLS-number block."""
    properties: list[Property] = []
    current: _Accumulator | None = None

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        mls_match = MLS_NUMBER_PATTERN.search(line)
        if mls_match:
            if current and current.get("mls_number"):
                properties.append(_flush(current))
            current = _new_accumulator(mls_match.group(1), settings)
            continue

        for pattern, apply in _FIELD_RECOGNIZERS:
            match = pattern.search(line)
            if match:
                if current is not None:
                    apply(current, match, line)
                break

    if current and current.get("mls_number"):
        properties.append(_flush(current))

    return properties


def _new_accumulator(raw_number: str, settings: Settings) -> _Accumulator:
    """Start a listing with every field defaulted."""
    return {
        "mls_number": re.sub(r"[-\s]", "", raw_number),
        "city": settings.market_city,
        "bedrooms": 0,
        "bathrooms": "0/0/0",
        "sqft": 0,
        "year_built": 0,
        "garage": "",
        "pool": False,
        "acres": 0,
        "price_per_sqft": 0,
        "list_price": 0,
    }


def _flush(current: _Accumulator) -> Property:
    listing = Property(**current)
    logger.debug("Parsed listing MLS#%s (%s)", listing.mls_number, listing.address or "no address")
    return listing


# ─── Individual Field Recognizers ────────────────────────────────────


def _parse_int(digits: str) -> int:
    """'1,250,000' → 1250000"""
    return int(digits.replace(",", ""))


def _apply_address(current: _Accumulator, match: re.Match[str], line: str) -> None:
    current["address"] = match.group(1).strip()


def _apply_price(current: _Accumulator, match: re.Match[str], line: str) -> None:
    """'Sold Price: $445,000' goes to sold_price, anything else to list_price."""
    price = _parse_int(match.group(1))
    if "sold" in line.lower():
        current["sold_price"] = price
    else:
        current["list_price"] = price


def _apply_bedrooms(current: _Accumulator, match: re.Match[str], line: str) -> None:
    current["bedrooms"] = int(match.group(1))


def _apply_bathrooms(current: _Accumulator, match: re.Match[str], line: str) -> None:
    # Only the full-bath slot is known from a "2.5 baths" style line.
    current["bathrooms"] = f"{match.group(1)}/0/0"


def _apply_sqft(current: _Accumulator, match: re.Match[str], line: str) -> None:
    sqft = _parse_int(match.group(1))
    current["sqft"] = sqft
    if current.get("list_price") and sqft > 0:
        current["price_per_sqft"] = round(current["list_price"] / sqft)


_FIELD_RECOGNIZERS: tuple[
    tuple[re.Pattern[str], Callable[[_Accumulator, re.Match[str], str], None]], ...
] = (
    (ADDRESS_PATTERN, _apply_address),
    (PRICE_PATTERN, _apply_price),
    (BEDROOMS_PATTERN, _apply_bedrooms),
    (BATHROOMS_PATTERN, _apply_bathrooms),
    (SQFT_PATTERN, _apply_sqft),
)


# ─── Report Assembly ─────────────────────────────────────────────────


def _build_report(
    active: list[Property], closed: list[Property], settings: Settings
) -> MLSReport:
    """Assemble the report; headline fields mirror the first listing found."""
    listings = [*active, *closed]
    first = listings[0] if listings else None
    demographic_analysis = placeholder_demographic_analysis()

    return MLSReport(
        mls_number=first.mls_number if first else UNKNOWN_MLS_NUMBER,
        list_price=first.list_price if first else 0,
        property_type=settings.default_property_type,
        bedrooms=first.bedrooms if first else 0,
        bathrooms=_full_baths(first.bathrooms) if first else 0,
        square_feet=first.sqft if first else 0,
        year_built=first.year_built if first else 0,
        lot_size=first.acres if first else 0,
        description="Property details extracted from MLS data",
        address=ReportAddress(
            street=(first.address if first else ""),
            city=(first.city if first else ""),
            state=settings.market_state,
            zip_code=settings.default_zip_code,
        ),
        features=[],
        photos=[],
        market_trends=placeholder_market_trends(),
        statistics=synthesize_statistics(active, closed, settings),
        school_district=placeholder_school_district(),
        demographics=Demographics.from_analysis(demographic_analysis),
        demographic_analysis=demographic_analysis,
        active_listings=active,
        closed_listings=closed,
        school_districts=[],
    )


def _full_baths(bathrooms: str) -> float:
    """'2.5/0/0' → 2.5"""
    try:
        return float(bathrooms.split("/")[0])
    except ValueError:
        return 0


# ─── Not-Yet-Enriched Placeholders ───────────────────────────────────
# Structurally valid, zeroed sections the text never provides.  Enrichment
# sources overwrite these wholesale (e.g. ``report.model_copy(update=...)``).


def placeholder_market_trends() -> MarketTrends:
    return MarketTrends()


def placeholder_school_district() -> SchoolDistrict:
    return SchoolDistrict(name="Unknown School District", rating=0)


def placeholder_demographic_analysis() -> DemographicAnalysis:
    return DemographicAnalysis()
