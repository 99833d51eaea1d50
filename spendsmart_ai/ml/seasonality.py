"""
Seasonal and weekly trend analyzers.

A multiplier compares the average transaction amount in a bucket
(calendar month or weekday) with the category's overall average.
These are descriptive signals only; they are not fitted against held-out data.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Sequence

from spendsmart_ai.ml.grouping import expenses
from spendsmart_ai.schemas.transaction import Transaction

logger = logging.getLogger(__name__)

# bucket (month 1-12 or weekday 0-6) -> category -> ratio
Multipliers = Dict[int, Dict[str, float]]

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def day_of_week(t: Transaction) -> int:
    """Weekday with Sunday as 0."""
    return t.date.isoweekday() % 7


def analyze_seasonal_trends(transactions: Sequence[Transaction]) -> Multipliers:
    """Per calendar month (1-12) and category multiplier."""
    multipliers = _bucket_multipliers(transactions, lambda t: t.date.month)
    logger.info(f"Computed seasonal multipliers for {len(multipliers)} calendar months")
    return multipliers


def analyze_weekly_patterns(transactions: Sequence[Transaction]) -> Multipliers:
    """Per weekday (0 = Sunday) and category multiplier. Feeds insight text, not forecast numbers."""
    multipliers = _bucket_multipliers(transactions, day_of_week)
    logger.info(f"Computed weekly multipliers for {len(multipliers)} weekdays")
    return multipliers


def multiplier_for(multipliers: Multipliers, bucket: int, category: str) -> float:
    return multipliers.get(bucket, {}).get(category, 1.0)


def _bucket_multipliers(
    transactions: Sequence[Transaction],
    bucket_of: Callable[[Transaction], int],
) -> Multipliers:
    buckets: Dict[int, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))
    category_totals: Dict[str, List[float]] = defaultdict(list)

    for t in expenses(transactions):
        buckets[bucket_of(t)][t.category].append(t.amount)
        category_totals[t.category].append(t.amount)

    overall = {
        category: sum(amounts) / len(amounts)
        for category, amounts in category_totals.items()
    }

    multipliers: Multipliers = {}
    for bucket in sorted(buckets):
        multipliers[bucket] = {}
        for category, amounts in buckets[bucket].items():
            bucket_avg = sum(amounts) / len(amounts)
            overall_avg = overall[category]
            multipliers[bucket][category] = bucket_avg / overall_avg if overall_avg > 0 else 1.0
    return multipliers
