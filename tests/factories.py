"""Factories for a report that passes every strict rule, plus targeted overrides."""

from __future__ import annotations

from typing import Any

from mls_validator.models import (
    DemographicAnalysis,
    DemographicMetric,
    Demographics,
    EducationLevels,
    Forecast,
    ForecastMetric,
    MarketTrends,
    MLSReport,
    PricePoint,
    Property,
    ReportAddress,
    SchoolDistrict,
    SchoolInfo,
    SchoolsByLevel,
    SeasonalityData,
    Statistics,
)

SAMPLE_MLS_TEXT = """\
MLS# 1001
123 Main St, Plano
List Price: $500,000
4 beds
2 baths
2,000 sqft

MLS# 1002
456 Oak Avenue
List Price: $450,000
Sold Price: $445,000
3 bedrooms
2 baths
1,800 sqft
"""


def make_active_listing(**overrides: Any) -> Property:
    kwargs: dict[str, Any] = {
        "mls_number": "123456",
        "address": "123 Main Street",
        "city": "Plano",
        "list_price": 500000,
        "bedrooms": 4,
        "bathrooms": "2/1/0",
        "sqft": 2500,
        "year_built": 2010,
        "garage": "2 Car Attached",
        "pool": False,
        "acres": 0.25,
        "price_per_sqft": 200,
    }
    kwargs.update(overrides)
    return Property(**kwargs)


def make_closed_listing(**overrides: Any) -> Property:
    kwargs: dict[str, Any] = {
        "mls_number": "123457",
        "address": "456 Oak Avenue",
        "city": "Frisco",
        "list_price": 450000,
        "bedrooms": 3,
        "bathrooms": "2/0/0",
        "sqft": 2000,
        "year_built": 2015,
        "garage": "2 Car Attached",
        "pool": True,
        "acres": 0.2,
        "price_per_sqft": 225,
        "sold_price": 445000,
        "sold_date": "2023-12-01",
        "days_on_market": 45,
        "sale_to_list_ratio": 0.989,
    }
    kwargs.update(overrides)
    return Property(**kwargs)


def make_forecast(**overrides: Any) -> Forecast:
    kwargs: dict[str, Any] = {
        "next_month": ForecastMetric(price_change=0.015, confidence=0.8),
        "next_quarter": ForecastMetric(price_change=0.03, confidence=0.7),
        "next_year": ForecastMetric(price_change=0.05, confidence=0.6),
    }
    kwargs.update(overrides)
    return Forecast(**kwargs)


def make_market_trends(**overrides: Any) -> MarketTrends:
    kwargs: dict[str, Any] = {
        "price_history": [
            PricePoint(date="2023-10", price=495000, volume=100),
            PricePoint(date="2023-11", price=500000, volume=95),
            PricePoint(date="2023-12", price=505000, volume=105),
        ],
        "seasonality": [
            SeasonalityData(month=10, average_price=490000, sales_volume=100),
            SeasonalityData(month=11, average_price=495000, sales_volume=95),
            SeasonalityData(month=12, average_price=500000, sales_volume=105),
        ],
        "forecast": make_forecast(),
    }
    kwargs.update(overrides)
    return MarketTrends(**kwargs)


def make_statistics(**overrides: Any) -> Statistics:
    """Neither a buyer's nor a seller's market (4 months of supply)."""
    kwargs: dict[str, Any] = {
        "average_list_price": 475000,
        "median_list_price": 475000,
        "average_sold_price": 445000,
        "median_sold_price": 445000,
        "average_days_on_market": 45,
        "median_days_on_market": 40,
        "total_active_listings": 100,
        "total_closed_sales": 50,
        "average_price": 460000,
        "median_price": 455000,
        "price_per_square_foot": 200,
        "inventory_level": 115,
        "days_of_inventory": 90,
        "absorption_rate": 33,
        "new_listings": 25,
        "closed_listings": 20,
        "pending_listings": 15,
        "canceled_listings": 5,
        "list_to_sold_ratio": 0.98,
        "months_of_supply": 4,
    }
    kwargs.update(overrides)
    return Statistics(**kwargs)


def metric(value: float, trend: str = "stable", percent_change: float = 0) -> DemographicMetric:
    return DemographicMetric(value=value, trend=trend, percent_change=percent_change)


def make_demographic_analysis(**overrides: Any) -> DemographicAnalysis:
    kwargs: dict[str, Any] = {
        "population": metric(8500, "increasing", 2.1),
        "median_age": metric(35.5),
        "median_income": metric(95000, "increasing", 3.2),
        "employment_rate": metric(0.96),
        "education_levels": EducationLevels(
            high_school=metric(0.5),
            bachelors=metric(0.35, "increasing", 1.5),
            graduate=metric(0.15),
        ),
    }
    kwargs.update(overrides)
    return DemographicAnalysis(**kwargs)


def make_school(**overrides: Any) -> SchoolInfo:
    kwargs: dict[str, Any] = {
        "name": "Wilson Elementary",
        "rating": 9,
        "type": "elementary",
        "distance": 1.2,
        "enrollment": 650,
        "student_teacher_ratio": 15,
    }
    kwargs.update(overrides)
    return SchoolInfo(**kwargs)


def make_report(**overrides: Any) -> MLSReport:
    """A complete report that passes validate_mls_report."""
    analysis = overrides.pop("demographic_analysis", None) or make_demographic_analysis()
    kwargs: dict[str, Any] = {
        "mls_number": "MLS123456",
        "list_price": 500000,
        "property_type": "Single Family",
        "bedrooms": 4,
        "bathrooms": 2.5,
        "square_feet": 2500,
        "year_built": 2010,
        "lot_size": 0.25,
        "description": "Beautiful home in prime location",
        "address": ReportAddress(street="123 Main Street", city="Plano", state="TX", zip_code="75024"),
        "features": ["Updated Kitchen", "Hardwood Floors", "Pool"],
        "photos": ["photo1.jpg", "photo2.jpg"],
        "market_trends": make_market_trends(),
        "statistics": make_statistics(),
        "school_district": SchoolDistrict(
            name="Plano ISD",
            rating=9,
            schools=SchoolsByLevel(
                elementary=["Wilson Elementary"],
                middle=["Rice Middle School"],
                high=["Plano Senior High"],
            ),
        ),
        "demographics": Demographics.from_analysis(analysis),
        "demographic_analysis": analysis,
        "active_listings": [make_active_listing()],
        "closed_listings": [make_closed_listing()],
        "school_districts": [make_school()],
    }
    kwargs.update(overrides)
    return MLSReport(**kwargs)
