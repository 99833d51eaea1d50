"""
Spending Predictor for SpendSmart.

Projects per-category expense totals for the coming months by combining
category patterns, seasonal multipliers, growth rates and volatility scores
derived from the user's transaction history.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from spendsmart_ai.core.config import AnalyticsConfig
from spendsmart_ai.ml.category_patterns import analyze_category_patterns
from spendsmart_ai.ml.grouping import historical_monthly_average, unique_months
from spendsmart_ai.ml.growth import calculate_growth_rates
from spendsmart_ai.ml.insights import (
    assess_data_quality,
    category_insights,
    forecast_insights,
    month_insights,
    weekly_insights,
)
from spendsmart_ai.ml.seasonality import (
    Multipliers,
    analyze_seasonal_trends,
    analyze_weekly_patterns,
    multiplier_for,
)
from spendsmart_ai.ml.volatility import (
    DEFAULT_VOLATILITY,
    average_volatility,
    calculate_volatility_scores,
)
from spendsmart_ai.schemas.forecast import (
    CategoryForecast,
    CategoryPattern,
    ForecastFactors,
    ForecastFailure,
    ForecastRange,
    ForecastResult,
    GrowthRates,
    ModelMetrics,
    MonthFactors,
    MonthForecast,
    RiskFactor,
    VolatilityScore,
)
from spendsmart_ai.schemas.transaction import Transaction, parse_transactions
from spendsmart_ai.utils.dates import month_key, month_label, shift_months

logger = logging.getLogger(__name__)

HIGH_VOLATILITY_RISK = 0.4
LOW_CONFIDENCE_RISK = 0.5
# Stability assumed for unscored categories when weighting overall confidence
UNSCORED_STABILITY = 0.5


class SpendingPredictor:
    """
    Forecasts monthly spending per category.

    Holds only an immutable AnalyticsConfig; every call works on the
    transaction snapshot it is given.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()

    def predict(
        self,
        transactions: Iterable[Union[Transaction, Mapping[str, Any]]],
        months: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> Union[ForecastResult, ForecastFailure]:
        """
        Forecast the next ``months`` calendar months after ``as_of``.

        Args:
            transactions: Historical transactions (any order, income included).
            months: Number of months to forecast; defaults to ``config.forecast_months``.
            as_of: Reference date; defaults to today.

        Returns:
            ForecastResult, or ForecastFailure when the history is too small
            or the input is malformed.
        """
        months = months or self.config.forecast_months
        as_of = as_of or date.today()

        try:
            history = parse_transactions(transactions)

            if len(history) < self.config.min_data_points:
                logger.info(
                    f"Insufficient transactions for predictions: "
                    f"{len(history)} < {self.config.min_data_points}"
                )
                return ForecastFailure(
                    message=f"Need at least {self.config.min_data_points} transactions for predictions",
                    data_insights={
                        "currentTransactions": len(history),
                        "requiredTransactions": self.config.min_data_points,
                        "suggestion": "Add more transactions across different categories and months",
                    },
                )

            patterns = analyze_category_patterns(history, self.config)
            seasonal = analyze_seasonal_trends(history)
            weekly = analyze_weekly_patterns(history)
            growth = calculate_growth_rates(history)
            volatility = calculate_volatility_scores(history)

            historical_average = historical_monthly_average(history)
            data_quality = assess_data_quality(history)
            first_of_month = as_of.replace(day=1)

            predictions = [
                predict_month(
                    shift_months(first_of_month, offset),
                    patterns,
                    seasonal,
                    growth,
                    volatility,
                    historical_average,
                    data_quality,
                    self.config,
                )
                for offset in range(1, months + 1)
            ]

            result = ForecastResult(
                predictions=predictions,
                confidence=calculate_model_confidence(history, patterns, volatility, self.config),
                data_points=len(history),
                generated_at=datetime.now(timezone.utc),
                insights=forecast_insights(predictions, seasonal, historical_average)
                + weekly_insights(weekly),
                model_metrics=ModelMetrics(
                    categories_analyzed=len(patterns),
                    months_of_data=len(unique_months(history)),
                    seasonal_factors_applied=len(seasonal),
                    average_volatility=average_volatility(volatility),
                ),
            )

            logger.info(
                f"Generated {len(predictions)} monthly forecasts over {len(patterns)} categories "
                f"(confidence {result.confidence})"
            )
            return result

        except Exception as e:
            logger.error(f"Error generating spending predictions: {e}", exc_info=True)
            return ForecastFailure(message="Failed to generate predictions", error=str(e))


def forecast_category(
    category: str,
    pattern: CategoryPattern,
    seasonal_multiplier: float,
    growth_rate: float,
    volatility: VolatilityScore,
    config: AnalyticsConfig,
) -> CategoryForecast:
    """Project one category for one month."""
    prediction = pattern.average * seasonal_multiplier * (1 + growth_rate)
    prediction = max(0.0, min(prediction, pattern.max * config.prediction_cap_multiplier))

    range_multiplier = max(config.min_range_multiplier, volatility.volatility)
    confidence = max(0.0, min(1.0, pattern.confidence * volatility.stability))

    return CategoryForecast(
        predicted=prediction,
        confidence=confidence,
        range=ForecastRange(
            low=max(0.0, prediction * (1 - range_multiplier)),
            high=prediction * (1 + range_multiplier),
        ),
        factors=ForecastFactors(
            base_average=round(pattern.average, 2),
            seasonal_adjustment=round(seasonal_multiplier, 2),
            growth_adjustment=round(growth_rate * 100, 1),
            volatility_score=round(volatility.volatility, 2),
            stability_score=round(volatility.stability, 2),
        ),
        insights=category_insights(category, seasonal_multiplier, growth_rate, volatility),
    )


def predict_month(
    target: date,
    patterns: Mapping[str, CategoryPattern],
    seasonal: Multipliers,
    growth: GrowthRates,
    volatility_scores: Mapping[str, VolatilityScore],
    historical_average: float,
    data_quality: str,
    config: AnalyticsConfig,
) -> MonthForecast:
    """Aggregate category forecasts for a single target month."""
    breakdown: Dict[str, CategoryForecast] = {}
    for category, pattern in patterns.items():
        breakdown[category] = forecast_category(
            category,
            pattern,
            multiplier_for(seasonal, target.month, category),
            growth.for_category(category),
            volatility_scores.get(category, DEFAULT_VOLATILITY),
            config,
        )

    total = sum(f.predicted for f in breakdown.values())
    confidences = [f.confidence for f in breakdown.values()]

    return MonthForecast(
        month=month_key(target),
        month_name=month_label(target),
        total_predicted=total,
        category_breakdown=breakdown,
        confidence=sum(confidences) / len(confidences) if confidences else 0.0,
        factors=MonthFactors(
            historical_average=round(historical_average, 2),
            seasonal_factor="Applied" if target.month in seasonal else "None",
            trend_factor=round(growth.overall * 100, 1),
            data_quality=data_quality,
        ),
        insights=month_insights(target, total, historical_average, seasonal),
        risk_factors=identify_risk_factors(breakdown, volatility_scores),
    )


def identify_risk_factors(
    breakdown: Mapping[str, CategoryForecast],
    volatility_scores: Mapping[str, VolatilityScore],
) -> List[RiskFactor]:
    risks = []
    for category, forecast in breakdown.items():
        score = volatility_scores.get(category)

        if score is not None and score.volatility > HIGH_VOLATILITY_RISK:
            risks.append(RiskFactor(
                category=category,
                risk="high_volatility",
                severity=min(score.volatility * 10, 10.0),
                description=f"{category} spending is unpredictable ({score.volatility * 100:.0f}% variation)",
            ))

        if forecast.confidence < LOW_CONFIDENCE_RISK:
            risks.append(RiskFactor(
                category=category,
                risk="low_confidence",
                severity=(1 - forecast.confidence) * 10,
                description=f"{category} prediction has low confidence due to limited data",
            ))

    return sorted(risks, key=lambda r: r.severity, reverse=True)


def calculate_model_confidence(
    transactions: Sequence[Transaction],
    patterns: Mapping[str, CategoryPattern],
    volatility_scores: Mapping[str, VolatilityScore],
    config: AnalyticsConfig,
) -> int:
    """
    Overall model confidence on a 0-100 scale.

    Blends the spend-weighted category confidence (50%), transaction count
    richness (30%) and months of history (20%).
    """
    if not patterns:
        return 0

    weighted = 0.0
    weights = 0.0
    for category, pattern in patterns.items():
        score = volatility_scores.get(category)
        stability = score.stability if score is not None else UNSCORED_STABILITY
        weight = pattern.average * stability
        weighted += pattern.confidence * stability * weight
        weights += weight

    category_confidence = weighted / weights if weights > 0 else 0.0
    richness = min(len(transactions) / config.richness_transactions, 1.0)
    timespan = min(len(unique_months(transactions)) / config.confidence_months, 1.0)

    blended = category_confidence * 0.5 + richness * 0.3 + timespan * 0.2
    return int(round(max(0.0, min(1.0, blended)) * 100))
