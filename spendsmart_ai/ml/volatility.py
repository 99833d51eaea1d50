"""Volatility Scorer: coefficient of variation and stability per category."""

import logging
from typing import Dict, Mapping, Sequence

from spendsmart_ai.ml import statistics as stats
from spendsmart_ai.ml.grouping import monthly_totals_by_category
from spendsmart_ai.schemas.forecast import VolatilityScore
from spendsmart_ai.schemas.transaction import Transaction

logger = logging.getLogger(__name__)

MIN_VOLATILITY_MONTHS = 3

# Used for categories that lack enough non-zero months to be scored
DEFAULT_VOLATILITY = VolatilityScore(volatility=0.2, stability=0.8, predictability=0.7)


def score_series(amounts: Sequence[float]) -> VolatilityScore:
    volatility = stats.coefficient_of_variation(amounts)
    return VolatilityScore(
        volatility=volatility,
        stability=max(0.0, min(1.0, 1 - volatility)),
        predictability=stats.predictability(amounts),
    )


def calculate_volatility_scores(
    transactions: Sequence[Transaction],
) -> Dict[str, VolatilityScore]:
    scores: Dict[str, VolatilityScore] = {}
    for category, months in monthly_totals_by_category(transactions).items():
        amounts = [amount for amount in months.values() if amount > 0]
        if len(amounts) >= MIN_VOLATILITY_MONTHS:
            scores[category] = score_series(amounts)

    logger.info(f"Scored volatility for {len(scores)} categories")
    return scores


def average_volatility(scores: Mapping[str, VolatilityScore]) -> float:
    if not scores:
        return 0.0
    return sum(s.volatility for s in scores.values()) / len(scores)
