"""
Tests for the market forecast engine.

Run: pytest tests/ -v
"""

from __future__ import annotations

import pytest
from factories import make_market_trends

from mls_validator.forecast import (
    analyze_seasonality,
    build_market_predictions,
    calculate_moving_average,
    calculate_trend_strength,
    compare_price_points,
    generate_predictions,
)
from mls_validator.models import (
    MarketTrends,
    MovingAveragePoint,
    PricePoint,
    SeasonalityData,
    Trend,
    TrendStrength,
)


def _series(*prices: float, start_month: int = 1) -> list[PricePoint]:
    return [
        PricePoint(date=f"2024-{month:02d}", price=price, volume=100)
        for month, price in enumerate(prices, start=start_month)
    ]


# ═══════════════════════════════════════════════════════════════════════
# MOVING AVERAGES & SEASONALITY
# ═══════════════════════════════════════════════════════════════════════


class TestMovingAverage:
    def test_trailing_window(self):
        averages = calculate_moving_average(_series(100, 200, 300, 400), 3)
        assert [(a.date, a.price) for a in averages] == [("2024-03", 200), ("2024-04", 300)]

    def test_window_longer_than_history(self):
        assert calculate_moving_average(_series(100, 200), 3) == []


class TestSeasonality:
    def test_mean_price_per_calendar_month(self):
        pattern = analyze_seasonality(
            [
                SeasonalityData(month=1, average_price=100, sales_volume=10),
                SeasonalityData(month=1, average_price=200, sales_volume=10),
                SeasonalityData(month=6, average_price=300, sales_volume=10),
            ]
        )
        assert pattern == {1: 150, 6: 300}

    def test_out_of_range_months_ignored(self):
        pattern = analyze_seasonality([SeasonalityData(month=13, average_price=1, sales_volume=1)])
        assert pattern == {}


# ═══════════════════════════════════════════════════════════════════════
# TREND STRENGTH
# ═══════════════════════════════════════════════════════════════════════


class TestTrendStrength:
    def test_increasing(self):
        trend = calculate_trend_strength(_series(100, 102, 103.02))
        assert trend.direction == Trend.INCREASING
        assert trend.strength == pytest.approx(3)

    def test_decreasing(self):
        trend = calculate_trend_strength(_series(100, 98, 97.02))
        assert trend.direction == Trend.DECREASING
        assert trend.strength == pytest.approx(3)

    def test_offsetting_changes_are_stable(self):
        trend = calculate_trend_strength(_series(100, 150, 75))
        assert trend.direction == Trend.STABLE
        assert trend.strength == 0

    def test_perfectly_steady_growth_has_no_strength(self):
        trend = calculate_trend_strength(_series(100, 110, 121))
        assert trend.direction == Trend.INCREASING
        assert trend.strength == 0

    def test_single_point(self):
        assert calculate_trend_strength(_series(100)) == TrendStrength()


# ═══════════════════════════════════════════════════════════════════════
# PREDICTIONS
# ═══════════════════════════════════════════════════════════════════════


class TestGeneratePredictions:
    def test_flat_projection_without_signals(self):
        predictions = generate_predictions(_series(500000), [], [], TrendStrength(), {})
        assert [p.price for p in predictions] == [500000, 500000, 500000]
        assert [p.confidence for p in predictions] == pytest.approx([0.9, 0.8, 0.7])
        assert [p.date for p in predictions] == ["2024-02", "2024-03", "2024-04"]

    def test_dates_roll_over_the_year(self):
        predictions = generate_predictions(
            _series(500000, start_month=11), [], [], TrendStrength(), {}
        )
        assert [p.date for p in predictions] == ["2024-12", "2025-01", "2025-02"]

    def test_seasonal_factor(self):
        predictions = generate_predictions(
            _series(500000), [], [], TrendStrength(), {1: 100, 2: 110}
        )
        assert predictions[0].price == pytest.approx(550000)
        assert predictions[1].price == pytest.approx(500000)  # no March data

    def test_trend_factor_and_confidence_penalty(self):
        trend = TrendStrength(strength=2, direction=Trend.INCREASING)
        predictions = generate_predictions(_series(500000), [], [], trend, {})
        assert predictions[0].price == pytest.approx(510000)
        assert predictions[1].price == pytest.approx(520000)
        assert predictions[0].confidence == pytest.approx(0.85)

    def test_decreasing_trend_lowers_price(self):
        trend = TrendStrength(strength=2, direction=Trend.DECREASING)
        predictions = generate_predictions(_series(500000), [], [], trend, {})
        assert predictions[0].price == pytest.approx(490000)

    def test_moving_average_momentum(self):
        short_ma = [MovingAveragePoint(date="2024-01", price=110)]
        long_ma = [MovingAveragePoint(date="2024-01", price=100)]
        predictions = generate_predictions(
            _series(500000), short_ma, long_ma, TrendStrength(), {}
        )
        assert predictions[0].price == pytest.approx(550000)

    def test_confidence_floored_at_zero(self):
        trend = TrendStrength(strength=0.05, direction=Trend.INCREASING)
        predictions = generate_predictions(_series(500000), [], [], trend, {})
        assert all(p.confidence == 0 for p in predictions)

    def test_custom_horizon(self):
        predictions = generate_predictions(_series(500000), [], [], TrendStrength(), {}, months=6)
        assert len(predictions) == 6

    def test_no_history(self):
        assert generate_predictions([], [], [], TrendStrength(), {}) == []


class TestBuildMarketPredictions:
    def test_empty_history(self):
        assert build_market_predictions(MarketTrends()) is None

    def test_full_run_sorts_history(self):
        history = _series(100, 101, 102, 103, 104, 105, 106, 107)
        trends = make_market_trends(price_history=list(reversed(history)))
        result = build_market_predictions(trends)
        assert len(result.short_term_ma) == 6
        assert len(result.long_term_ma) == 3
        assert result.short_term_ma[-1].date == "2024-08"
        assert [p.date for p in result.predictions] == ["2024-09", "2024-10", "2024-11"]
        assert result.seasonality_pattern == {10: 490000, 11: 495000, 12: 500000}

    def test_history_is_not_modified(self):
        history = list(reversed(_series(100, 101, 102)))
        trends = make_market_trends(price_history=history)
        build_market_predictions(trends)
        assert [p.date for p in trends.price_history] == ["2024-03", "2024-02", "2024-01"]


# ═══════════════════════════════════════════════════════════════════════
# POINT-TO-POINT COMPARISON
# ═══════════════════════════════════════════════════════════════════════


class TestComparePricePoints:
    JANUARY = PricePoint(date="2024-01", price=500000, volume=100)
    JULY = PricePoint(date="2024-07", price=530000, volume=120)

    def test_six_month_comparison(self):
        result = compare_price_points(self.JANUARY, self.JULY)
        assert result.price_diff == 30000
        assert result.price_change == pytest.approx(6)
        assert result.volume_change == pytest.approx(20)
        assert result.months_diff == 6
        assert result.annualized_return == pytest.approx(12.36)

    def test_selection_order_does_not_matter(self):
        assert compare_price_points(self.JULY, self.JANUARY) == compare_price_points(
            self.JANUARY, self.JULY
        )

    def test_same_month_annualizes_over_one_month(self):
        later = PricePoint(date="2024-01", price=505000, volume=100)
        result = compare_price_points(self.JANUARY, later)
        assert result.months_diff == 1
        assert result.annualized_return == pytest.approx((1.01**12 - 1) * 100)

    def test_zero_earlier_volume(self):
        earlier = PricePoint(date="2024-01", price=500000, volume=0)
        assert compare_price_points(earlier, self.JULY).volume_change == 0
