"""
Human-readable insight text for spending forecasts.

Purely descriptive: nothing here feeds back into the forecast numbers.
"""

from calendar import month_name
from datetime import date
from typing import Dict, List, Sequence, Tuple

from spendsmart_ai.ml.seasonality import WEEKDAY_NAMES, Multipliers
from spendsmart_ai.schemas.forecast import MonthForecast, VolatilityScore
from spendsmart_ai.schemas.transaction import Transaction

HIGH_VOLATILITY = 0.5
NOTABLE_GROWTH = 0.1
SEASONAL_DEVIATION = 0.2
SEASONAL_ALERT = 1.3
WEEKLY_PEAK = 1.3
QUALITY_LABELS = ["Poor", "Fair", "Good", "Very Good", "Excellent"]


def category_insights(
    category: str,
    seasonal_multiplier: float,
    growth_rate: float,
    volatility: VolatilityScore,
) -> List[str]:
    insights = []

    if volatility.volatility > HIGH_VOLATILITY:
        insights.append(f"{category} spending is highly variable - predictions less reliable")

    if abs(growth_rate) > NOTABLE_GROWTH:
        direction = "growing" if growth_rate > 0 else "declining"
        insights.append(
            f"{category} has a {direction} trend of {abs(growth_rate * 100):.1f}% per month"
        )

    if seasonal_multiplier > 1 + SEASONAL_DEVIATION:
        insights.append(
            f"{category} typically increases by {(seasonal_multiplier - 1) * 100:.0f}% this month"
        )
    elif seasonal_multiplier < 1 - SEASONAL_DEVIATION:
        insights.append(
            f"{category} typically decreases by {(1 - seasonal_multiplier) * 100:.0f}% this month"
        )

    return insights


def month_insights(
    target: date,
    total_predicted: float,
    historical_average: float,
    seasonal: Multipliers,
) -> List[str]:
    insights = []

    if historical_average > 0:
        difference = (total_predicted - historical_average) / historical_average * 100
        if abs(difference) > 10:
            direction = "higher" if difference > 0 else "lower"
            insights.append(
                f"Predicted spending is {abs(difference):.0f}% {direction} than your typical month"
            )

    high_seasonal = [
        category
        for category, multiplier in seasonal.get(target.month, {}).items()
        if multiplier > 1 + SEASONAL_DEVIATION
    ]
    if high_seasonal:
        insights.append(
            f"{month_name[target.month]} typically sees higher spending in: {', '.join(high_seasonal)}"
        )

    return insights


def forecast_insights(
    predictions: Sequence[MonthForecast],
    seasonal: Multipliers,
    historical_average: float,
) -> List[str]:
    """Headline insights about the first forecast month."""
    insights = []
    if not predictions:
        return insights

    next_month = predictions[0]

    if historical_average > 0:
        if next_month.total_predicted > historical_average * 1.15:
            insights.append(
                "Next month's forecast is significantly higher than usual - consider reducing spending"
            )
        elif next_month.total_predicted < historical_average * 0.85:
            insights.append(
                "Next month's forecast shows reduced spending - you're on track for savings"
            )

    by_growth = sorted(
        next_month.category_breakdown.items(),
        key=lambda item: abs(item[1].factors.growth_adjustment),
        reverse=True,
    )
    if by_growth and abs(by_growth[0][1].factors.growth_adjustment) > NOTABLE_GROWTH * 100:
        category, forecast = by_growth[0]
        growth = forecast.factors.growth_adjustment
        insights.append(
            f"{category} shows strongest {'growth' if growth > 0 else 'decline'} trend "
            f"at {abs(growth):.1f}% per month"
        )

    target_month = int(next_month.month[5:7])
    alerts = [
        (category, multiplier)
        for category, multiplier in seasonal.get(target_month, {}).items()
        if multiplier > SEASONAL_ALERT
    ]
    if alerts:
        category, multiplier = alerts[0]
        insights.append(
            f"Seasonal alert: {category} typically increases by {(multiplier - 1) * 100:.0f}% "
            f"in {next_month.month_name}"
        )

    return insights


def weekly_insights(weekly: Multipliers) -> List[str]:
    """One line per category whose spending clearly peaks on a single weekday."""
    peaks: Dict[str, Tuple[int, float]] = {}
    for weekday in sorted(weekly):
        for category, multiplier in weekly[weekday].items():
            if multiplier > WEEKLY_PEAK and multiplier > peaks.get(category, (0, 0.0))[1]:
                peaks[category] = (weekday, multiplier)

    return [
        f"{category} spending peaks on {WEEKDAY_NAMES[weekday]}s "
        f"({(multiplier - 1) * 100:.0f}% above its average)"
        for category, (weekday, multiplier) in sorted(peaks.items())
    ]


def assess_data_quality(transactions: Sequence[Transaction]) -> str:
    """Grade the history by time span, category diversity and monthly volume."""
    months = len({t.month for t in transactions})
    categories = len({t.category for t in transactions})
    per_month = len(transactions) / max(months, 1)

    score = 0
    if months >= 6:
        score += 3
    elif months >= 3:
        score += 2
    else:
        score += 1

    if categories >= 5:
        score += 2
    elif categories >= 3:
        score += 1

    if per_month >= 20:
        score += 2
    elif per_month >= 10:
        score += 1

    return QUALITY_LABELS[min(score - 1, len(QUALITY_LABELS) - 1)]
