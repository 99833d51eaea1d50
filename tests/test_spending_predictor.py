"""
Tests for the spending predictor.
"""
from datetime import date

import pytest

from spendsmart_ai.core.config import AnalyticsConfig
from spendsmart_ai.ml.category_patterns import build_pattern
from spendsmart_ai.ml.growth import calculate_growth_rates
from spendsmart_ai.ml.spending_predictor import (
    SpendingPredictor,
    calculate_model_confidence,
    forecast_category,
    identify_risk_factors,
)
from spendsmart_ai.ml.volatility import score_series
from spendsmart_ai.schemas.forecast import ForecastFailure, ForecastResult, VolatilityScore

AS_OF = date(2026, 6, 30)


def test_forecast_category_for_stable_history(config):
    """Flat seasonality and no growth forecast the average with at least a 15% range."""
    totals = [400, 420, 380, 410, 405, 415]
    pattern = build_pattern(totals, totals, config)
    forecast = forecast_category("Groceries", pattern, 1.0, 0.0, score_series(totals), config)

    assert forecast.predicted == pytest.approx(405)
    assert forecast.range.low == pytest.approx(405 * 0.85)
    assert forecast.range.high == pytest.approx(405 * 1.15)
    assert forecast.factors.stability_score > 0.96
    assert forecast.confidence > 0.96
    assert forecast.insights == []


def test_forecast_category_is_capped(config):
    totals = [100, 100]
    pattern = build_pattern(totals, totals, config)
    forecast = forecast_category("Fuel", pattern, 3.0, 1.0, score_series(totals), config)

    assert forecast.predicted == pytest.approx(250)
    assert forecast.factors.growth_adjustment == pytest.approx(100.0)
    assert any("increases by 200%" in insight for insight in forecast.insights)


def test_forecast_range_never_negative(config):
    pattern = build_pattern([10, 300], [10, 300], config)
    volatile = VolatilityScore(volatility=1.8, stability=0.0, predictability=0.5)
    forecast = forecast_category("Gifts", pattern, 1.0, 0.0, volatile, config)

    assert forecast.range.low == 0.0
    assert forecast.range.high > forecast.predicted
    assert forecast.confidence == 0.0


def test_predict_produces_consecutive_months(six_month_history):
    result = SpendingPredictor().predict(six_month_history, months=3, as_of=AS_OF)

    assert isinstance(result, ForecastResult)
    assert [p.month for p in result.predictions] == ["2026-07", "2026-08", "2026-09"]
    assert result.predictions[0].month_name == "July 2026"
    assert result.data_points == len(six_month_history)
    assert set(result.predictions[0].category_breakdown) == {"Groceries", "Rent"}
    assert result.model_metrics.categories_analyzed == 2
    assert result.model_metrics.months_of_data == 6


def test_predictions_respect_bounds(six_month_history):
    result = SpendingPredictor().predict(six_month_history, as_of=AS_OF)

    assert 0 <= result.confidence <= 100
    for month in result.predictions:
        assert 0.0 <= month.confidence <= 1.0
        assert month.total_predicted == pytest.approx(
            sum(f.predicted for f in month.category_breakdown.values())
        )
        for forecast in month.category_breakdown.values():
            assert forecast.predicted >= 0
            assert forecast.range.low <= forecast.predicted <= forecast.range.high


def test_flat_rent_follows_overall_growth(make_tx):
    """Rent with no change of its own grows at the overall monthly rate."""
    rows = []
    for month in (1, 2, 3, 4):
        rows.append(make_tx("Rent", 1000, date(2026, month, 1)))
        rows += [make_tx("Dining", 50 * month, date(2026, month, day)) for day in (10, 20)]
    overall = calculate_growth_rates(rows).overall
    result = SpendingPredictor().predict(rows, months=1, as_of=date(2026, 4, 30))
    month = result.predictions[0]
    rent = month.category_breakdown["Rent"]

    assert overall == pytest.approx((100 / 1100 + 100 / 1200 + 100 / 1300) / 3)
    assert rent.predicted == pytest.approx(1000 * (1 + overall))
    assert rent.factors.growth_adjustment == pytest.approx(round(overall * 100, 1))
    assert month.factors.trend_factor == pytest.approx(8.4)
    assert month.factors.seasonal_factor == "None"


def test_predict_is_deterministic(six_month_history):
    predictor = SpendingPredictor()
    first = predictor.predict(six_month_history, as_of=AS_OF).to_dict()
    second = predictor.predict(list(reversed(six_month_history)), as_of=AS_OF).to_dict()
    first.pop("generatedAt")
    second.pop("generatedAt")

    assert first == second


def test_weekly_peaks_reach_forecast_insights(six_month_history, make_tx):
    """Weekday patterns add insight text without changing forecast numbers."""
    baseline = SpendingPredictor().predict(six_month_history, as_of=AS_OF)
    rows = list(six_month_history) + [
        make_tx("Dining", 90, date(2026, 1, 2)),
        make_tx("Dining", 10, date(2026, 1, 5)),
    ]
    result = SpendingPredictor().predict(rows, as_of=AS_OF)

    assert "Dining spending peaks on Fridays (80% above its average)" in result.insights
    assert not any("peaks on" in insight for insight in baseline.insights)
    assert result.predictions[0].category_breakdown["Groceries"].predicted == pytest.approx(
        baseline.predictions[0].category_breakdown["Groceries"].predicted
    )


def test_result_uses_camel_case_keys(six_month_history):
    data = SpendingPredictor().predict(six_month_history, as_of=AS_OF).to_dict()

    assert data["success"] is True
    assert "modelMetrics" in data
    month = data["predictions"][0]
    assert {"monthName", "totalPredicted", "categoryBreakdown", "riskFactors"} <= set(month)
    assert "baseAverage" in month["categoryBreakdown"]["Rent"]["factors"]


def test_too_few_transactions_is_reported(make_tx):
    rows = [make_tx("Dining", 10, date(2026, 1, d)) for d in range(1, 10)]
    result = SpendingPredictor().predict(rows, as_of=AS_OF)

    assert isinstance(result, ForecastFailure)
    assert result.success is False
    assert result.message == "Need at least 10 transactions for predictions"
    assert result.predictions == []
    assert result.data_insights["currentTransactions"] == 9
    assert result.data_insights["requiredTransactions"] == 10


def test_separate_configs_coexist(make_tx):
    rows = [make_tx("Dining", 10, date(2026, m, 1)) for m in (1, 2, 3)]

    assert SpendingPredictor(AnalyticsConfig(min_data_points=3)).predict(rows, as_of=AS_OF).success
    assert not SpendingPredictor().predict(rows, as_of=AS_OF).success


def test_malformed_rows_return_failure(six_month_history):
    rows = list(six_month_history) + [
        {"id": "bad", "kind": "expense", "category": "Dining", "amount": -5, "date": "2026-03-01"}
    ]
    result = SpendingPredictor().predict(rows, as_of=AS_OF)

    assert isinstance(result, ForecastFailure)
    assert result.message == "Failed to generate predictions"
    assert result.error


def test_store_rows_are_accepted(six_month_history):
    """Rows can use ``type`` for the discriminator and ISO timestamps for dates."""
    rows = [
        {
            "id": i,
            "type": t.kind,
            "category": t.category,
            "amount": t.amount,
            "date": f"{t.date.isoformat()}T12:00:00Z",
        }
        for i, t in enumerate(six_month_history)
    ]
    result = SpendingPredictor().predict(rows, as_of=AS_OF)

    assert result.success
    assert result.data_points == len(rows)


def test_identify_risk_factors_sorted(config):
    pattern = build_pattern([10, 300], [10, 300], config)
    volatile = VolatilityScore(volatility=0.9, stability=0.1, predictability=0.5)
    breakdown = {"Gifts": forecast_category("Gifts", pattern, 1.0, 0.0, volatile, config)}
    risks = identify_risk_factors(breakdown, {"Gifts": volatile})

    assert [r.risk for r in risks] == ["low_confidence", "high_volatility"]
    assert risks[0].severity >= risks[1].severity


def test_model_confidence_without_patterns(config):
    assert calculate_model_confidence([], {}, {}, config) == 0
