"""
Market forecast engine — moving averages, trend strength, seasonality, projections.

Everything here is derived on demand from a report's market trends and is
never written back into the report.  The projection is deliberately simple:

    predicted = last price × trend factor × seasonal factor × momentum factor

where the trend factor comes from the recent month-over-month changes, the
seasonal factor from the average price of the target calendar month relative
to the last observed month, and the momentum factor from the 3-month vs
6-month moving average.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

from .models import (
    ComparisonAnalysis,
    MarketPredictions,
    MarketTrends,
    MovingAveragePoint,
    Prediction,
    PricePoint,
    SeasonalityData,
    Trend,
    TrendStrength,
)

SHORT_TERM_WINDOW = 3
LONG_TERM_WINDOW = 6
TREND_WINDOW = 6  # most recent points used for trend strength
PREDICTION_MONTHS = 3
DAYS_PER_MONTH = 30

# Volatility below this is float noise from a perfectly steady series.
_VOLATILITY_EPSILON = 1e-9


def build_market_predictions(
    trends: MarketTrends, months: int = PREDICTION_MONTHS
) -> MarketPredictions | None:
    """Run the whole engine over a report's market trends.

    Returns:
        MarketPredictions, or None when there is no price history to project from.
    """
    if not trends.price_history:
        return None

    history = sorted(trends.price_history, key=lambda p: p.date)
    short_ma = calculate_moving_average(history, SHORT_TERM_WINDOW)
    long_ma = calculate_moving_average(history, LONG_TERM_WINDOW)
    recent_trend = calculate_trend_strength(history[-TREND_WINDOW:])
    seasonality_pattern = analyze_seasonality(trends.seasonality)

    return MarketPredictions(
        short_term_ma=short_ma,
        long_term_ma=long_ma,
        recent_trend=recent_trend,
        seasonality_pattern=seasonality_pattern,
        predictions=generate_predictions(
            history, short_ma, long_ma, recent_trend, seasonality_pattern, months
        ),
    )


# ─── Building Blocks ─────────────────────────────────────────────────


def calculate_moving_average(
    history: Sequence[PricePoint], period: int
) -> list[MovingAveragePoint]:
    """Trailing mean of ``period`` prices; points before the window fills are dropped."""
    averages: list[MovingAveragePoint] = []
    for index in range(period - 1, len(history)):
        window = history[index - period + 1 : index + 1]
        averages.append(
            MovingAveragePoint(
                date=history[index].date,
                price=sum(p.price for p in window) / period,
            )
        )
    return averages


def calculate_trend_strength(recent: Sequence[PricePoint]) -> TrendStrength:
    """Mean month-over-month % change divided by its population standard deviation."""
    if len(recent) < 2:
        return TrendStrength()

    changes = [
        (current.price - previous.price) / previous.price * 100
        for previous, current in zip(recent, recent[1:])
        if previous.price
    ]
    if not changes:
        return TrendStrength()

    mean_change = sum(changes) / len(changes)
    volatility = math.sqrt(sum((c - mean_change) ** 2 for c in changes) / len(changes))
    strength = abs(mean_change) / volatility if volatility > _VOLATILITY_EPSILON else 0

    if mean_change > 0:
        direction = Trend.INCREASING
    elif mean_change < 0:
        direction = Trend.DECREASING
    else:
        direction = Trend.STABLE
    return TrendStrength(strength=strength, direction=direction)


def analyze_seasonality(seasonality: Sequence[SeasonalityData]) -> dict[int, float]:
    """Average price per calendar month (1–12) across every observed year."""
    totals: dict[int, float] = {}
    counts: dict[int, int] = {}
    for entry in seasonality:
        if not 1 <= entry.month <= 12:
            continue
        totals[entry.month] = totals.get(entry.month, 0) + entry.average_price
        counts[entry.month] = counts.get(entry.month, 0) + 1
    return {month: totals[month] / counts[month] for month in sorted(totals)}


def generate_predictions(
    history: Sequence[PricePoint],
    short_ma: Sequence[MovingAveragePoint],
    long_ma: Sequence[MovingAveragePoint],
    trend: TrendStrength,
    seasonality_index: dict[int, float],
    months: int = PREDICTION_MONTHS,
) -> list[Prediction]:
    """Project ``months`` future monthly prices from the last observed point.

    Confidence starts at 1, loses 0.1 per month of horizon and a further
    0.1 / strength for a weak trend (skipped when strength is 0), floored at 0.
    """
    if not history:
        return []

    last = history[-1]
    year, month = _parse_month_key(last.date)

    base_season = seasonality_index.get(month)
    if short_ma and long_ma and long_ma[-1].price:
        ma_factor = short_ma[-1].price / long_ma[-1].price
    else:
        ma_factor = 1.0
    weak_trend_penalty = 0.1 / trend.strength if trend.strength > 0 else 0

    predictions: list[Prediction] = []
    for horizon in range(1, months + 1):
        target_year, target_month = _add_months(year, month, horizon)

        target_season = seasonality_index.get(target_month)
        if target_season and base_season:
            seasonal_factor = target_season / base_season
        else:
            seasonal_factor = 1.0

        step = 0.01 * trend.strength * horizon
        if trend.direction == Trend.INCREASING:
            trend_factor = 1 + step
        elif trend.direction == Trend.DECREASING:
            trend_factor = 1 - step
        else:
            trend_factor = 1.0

        predictions.append(
            Prediction(
                date=f"{target_year:04d}-{target_month:02d}",
                price=last.price * trend_factor * seasonal_factor * ma_factor,
                confidence=max(0.0, 1 - 0.1 * horizon - weak_trend_penalty),
            )
        )
    return predictions


# ─── Point-to-Point Comparison ───────────────────────────────────────


def compare_price_points(first: PricePoint, second: PricePoint) -> ComparisonAnalysis:
    """Compare two history samples, in whichever order they were selected.

    The month span is rounded from a 30-day month and clamped to at least 1,
    so two samples from the same month annualize over a single month.
    """
    earlier, later = sorted((first, second), key=lambda p: p.date)

    price_diff = later.price - earlier.price
    price_change = price_diff / earlier.price * 100 if earlier.price else 0
    if earlier.volume:
        volume_change = (later.volume - earlier.volume) / earlier.volume * 100
    else:
        volume_change = 0

    elapsed = _month_start(later.date) - _month_start(earlier.date)
    months_diff = max(round(elapsed.days / DAYS_PER_MONTH), 1)
    annualized_return = ((1 + price_change / 100) ** (12 / months_diff) - 1) * 100

    return ComparisonAnalysis(
        price_diff=price_diff,
        price_change=price_change,
        volume_change=volume_change,
        months_diff=months_diff,
        annualized_return=annualized_return,
    )


# ─── Month Arithmetic ────────────────────────────────────────────────


def _parse_month_key(key: str) -> tuple[int, int]:
    """'2024-03' → (2024, 3)"""
    year, month = key.split("-")[:2]
    return int(year), int(month)


def _month_start(key: str) -> date:
    year, month = _parse_month_key(key)
    return date(year, month, 1)


def _add_months(year: int, month: int, count: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + count
    return index // 12, index % 12 + 1
