"""
Pydantic models for MLS report data — strict typing as our first line of defense.

Attributes are snake_case in Python and camelCase on the wire: every model
carries a camelCase alias so the JSON exchanged with the UI and storage
collaborators (``mlsNumber``, ``listPrice``, ...) validates and dumps
unchanged via ``model_dump(by_alias=True)``.

Numeric wire fields are Strict*: ``"100"`` and ``true`` are rejected instead of
being coerced, so a mapping that fails the collector's numeric shape checks
fails model validation too.  Enums still parse from their string values.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every wire-facing model: camelCase aliases, snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── Enumerations ───────────────────────────────────────────────────


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class SchoolType(str, Enum):
    ELEMENTARY = "elementary"
    MIDDLE = "middle"
    HIGH = "high"


class Severity(str, Enum):
    """Severity of a validation finding."""

    ERROR = "ERROR"  # Report breaks a rule
    WARNING = "WARNING"  # Suspicious — needs human review
    INFO = "INFO"  # Informational observation


# ─── Validation Finding ─────────────────────────────────────────────


class ValidationFinding(BaseModel):
    """A single validation finding with severity, machine-readable code, and details."""

    severity: Severity = Severity.ERROR
    code: str  # Machine-readable, e.g. "PRICE_VOLATILITY"
    field: str  # Dotted path, e.g. "priceHistory[2].price"
    message: str  # Human-readable explanation
    details: dict = Field(default_factory=dict)


# ─── Listings ───────────────────────────────────────────────────────


class Property(CamelModel):
    """A single MLS listing. Active when ``sold_price`` is unset, closed otherwise."""

    mls_number: str
    address: str = ""
    city: str = ""
    list_price: StrictFloat = 0
    bedrooms: StrictInt = 0
    bathrooms: str = "0/0/0"  # "full/half/quarter"
    sqft: StrictInt = 0
    year_built: StrictInt = 0
    garage: str = ""
    pool: StrictBool = False
    acres: StrictFloat = 0
    price_per_sqft: StrictFloat = 0
    sold_price: Optional[StrictFloat] = None
    sold_date: Optional[str] = None
    days_on_market: Optional[StrictInt] = None
    sale_to_list_ratio: Optional[StrictFloat] = None

    @property
    def is_closed(self) -> bool:
        return self.sold_price is not None


# ─── Market Trends ──────────────────────────────────────────────────


class PricePoint(CamelModel):
    date: str  # "YYYY-MM"
    price: StrictFloat
    volume: StrictFloat


class SeasonalityData(CamelModel):
    month: StrictInt
    average_price: StrictFloat
    sales_volume: StrictFloat


class ForecastMetric(CamelModel):
    price_change: StrictFloat = 0
    confidence: StrictFloat = 0


class Forecast(CamelModel):
    next_month: ForecastMetric = Field(default_factory=ForecastMetric)
    next_quarter: ForecastMetric = Field(default_factory=ForecastMetric)
    next_year: ForecastMetric = Field(default_factory=ForecastMetric)


class MarketTrends(CamelModel):
    price_history: list[PricePoint] = Field(default_factory=list)
    seasonality: list[SeasonalityData] = Field(default_factory=list)
    forecast: Forecast = Field(default_factory=Forecast)


# ─── Statistics ─────────────────────────────────────────────────────


class Statistics(CamelModel):
    """Aggregate figures describing the whole report.

    ``absorption_rate`` is a percentage on a 0–100 scale.
    """

    average_days_on_market: StrictFloat = 0
    median_days_on_market: StrictFloat = 0
    total_active_listings: StrictInt = 0
    total_closed_sales: StrictInt = 0
    average_price: StrictFloat = 0
    median_price: StrictFloat = 0
    price_per_square_foot: StrictFloat = 0
    inventory_level: StrictInt = 0
    days_of_inventory: StrictInt = 0
    absorption_rate: StrictFloat = 0
    new_listings: StrictInt = 0
    closed_listings: StrictInt = 0
    pending_listings: StrictInt = 0
    canceled_listings: StrictInt = 0
    average_list_price: StrictFloat = 0
    median_list_price: StrictFloat = 0
    average_sold_price: StrictFloat = 0
    median_sold_price: StrictFloat = 0
    list_to_sold_ratio: StrictFloat = 1
    months_of_supply: StrictFloat = 0


# ─── Schools ────────────────────────────────────────────────────────


class SchoolInfo(CamelModel):
    name: str
    rating: StrictFloat
    type: SchoolType
    distance: StrictFloat  # miles
    enrollment: StrictInt
    student_teacher_ratio: StrictFloat


class SchoolsByLevel(CamelModel):
    elementary: list[str] = Field(default_factory=list)
    middle: list[str] = Field(default_factory=list)
    high: list[str] = Field(default_factory=list)


class SchoolDistrict(CamelModel):
    name: str = ""
    rating: StrictFloat = 0
    schools: SchoolsByLevel = Field(default_factory=SchoolsByLevel)


# ─── Demographics ───────────────────────────────────────────────────


class DemographicMetric(CamelModel):
    value: StrictFloat = 0
    trend: Trend = Trend.STABLE
    percent_change: StrictFloat = 0


class EducationLevels(CamelModel):
    high_school: DemographicMetric = Field(default_factory=DemographicMetric)
    bachelors: DemographicMetric = Field(default_factory=DemographicMetric)
    graduate: DemographicMetric = Field(default_factory=DemographicMetric)


class DemographicAnalysis(CamelModel):
    """Canonical, metric-rich demographic shape."""

    population: DemographicMetric = Field(default_factory=DemographicMetric)
    median_age: DemographicMetric = Field(default_factory=DemographicMetric)
    median_income: DemographicMetric = Field(default_factory=DemographicMetric)
    employment_rate: DemographicMetric = Field(default_factory=DemographicMetric)
    education_levels: EducationLevels = Field(default_factory=EducationLevels)

    def metrics(self) -> dict[str, DemographicMetric]:
        """Headline metrics keyed by their wire name (education levels excluded)."""
        return {
            "population": self.population,
            "medianAge": self.median_age,
            "medianIncome": self.median_income,
            "employmentRate": self.employment_rate,
        }

    def education_metrics(self) -> dict[str, DemographicMetric]:
        levels = self.education_levels
        return {
            "highSchool": levels.high_school,
            "bachelors": levels.bachelors,
            "graduate": levels.graduate,
        }


class EducationLevel(CamelModel):
    high_school: StrictFloat = 0
    bachelors: StrictFloat = 0
    graduate: StrictFloat = 0


class Demographics(CamelModel):
    """Legacy flat demographic shape, kept for consumers that predate the metrics."""

    population: StrictFloat = 0
    median_age: StrictFloat = 0
    median_income: StrictFloat = 0
    employment_rate: StrictFloat = 0
    education_level: EducationLevel = Field(default_factory=EducationLevel)

    @classmethod
    def from_analysis(cls, analysis: DemographicAnalysis) -> Demographics:
        levels = analysis.education_levels
        return cls(
            population=analysis.population.value,
            median_age=analysis.median_age.value,
            median_income=analysis.median_income.value,
            employment_rate=analysis.employment_rate.value,
            education_level=EducationLevel(
                high_school=levels.high_school.value,
                bachelors=levels.bachelors.value,
                graduate=levels.graduate.value,
            ),
        )


# ─── The Report ─────────────────────────────────────────────────────


class ReportAddress(CamelModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""


class MLSReport(CamelModel):
    """The aggregate root produced by the extractor from one text blob."""

    mls_number: str
    list_price: StrictFloat = 0
    property_type: str = ""
    bedrooms: StrictInt = 0
    bathrooms: StrictFloat = 0
    square_feet: StrictInt = 0
    year_built: StrictInt = 0
    lot_size: StrictFloat = 0
    description: str = ""
    address: ReportAddress = Field(default_factory=ReportAddress)
    features: list[str] = Field(default_factory=list)
    photos: list[str] = Field(default_factory=list)
    market_trends: MarketTrends = Field(default_factory=MarketTrends)
    statistics: Statistics = Field(default_factory=Statistics)
    school_district: SchoolDistrict = Field(default_factory=SchoolDistrict)
    demographics: Demographics = Field(default_factory=Demographics)
    demographic_analysis: DemographicAnalysis = Field(default_factory=DemographicAnalysis)
    active_listings: list[Property] = Field(default_factory=list)
    closed_listings: list[Property] = Field(default_factory=list)
    school_districts: list[SchoolInfo] = Field(default_factory=list)

    @property
    def listings(self) -> list[Property]:
        return [*self.active_listings, *self.closed_listings]


# ─── Forecast Outputs ───────────────────────────────────────────────


class MovingAveragePoint(CamelModel):
    date: str
    price: float


class TrendStrength(CamelModel):
    strength: float = 0
    direction: Trend = Trend.STABLE


class Prediction(CamelModel):
    date: str
    price: float
    confidence: float


class MarketPredictions(CamelModel):
    short_term_ma: list[MovingAveragePoint]
    long_term_ma: list[MovingAveragePoint]
    recent_trend: TrendStrength
    seasonality_pattern: dict[int, float]
    predictions: list[Prediction]


class ComparisonAnalysis(CamelModel):
    price_diff: float
    price_change: float  # percent
    volume_change: float  # percent
    months_diff: int
    annualized_return: float  # percent


# ─── Pipeline Output ────────────────────────────────────────────────


class ProcessingResult(CamelModel):
    """Tagged outcome of turning a PDF (or its text) into a report."""

    success: bool
    data: Optional[MLSReport] = None
    error: Optional[str] = None
    raw_text: Optional[str] = None
    findings: list[ValidationFinding] = Field(default_factory=list)

    @classmethod
    def ok(
        cls,
        data: MLSReport,
        raw_text: str,
        findings: list[ValidationFinding] | None = None,
    ) -> ProcessingResult:
        return cls(success=True, data=data, raw_text=raw_text, findings=findings or [])

    @classmethod
    def fail(cls, error: str, raw_text: str | None = None) -> ProcessingResult:
        return cls(success=False, error=error, raw_text=raw_text)
