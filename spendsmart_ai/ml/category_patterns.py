"""
Category Pattern Analyzer.

Summarises each expense category by its monthly totals: level, spread,
trend, predictability, and a confidence weight based on how many months
of data back it up.
"""

import logging
from typing import Dict, List, Optional, Sequence

from spendsmart_ai.core.config import AnalyticsConfig
from spendsmart_ai.ml import statistics as stats
from spendsmart_ai.ml.grouping import group_by_month_and_category
from spendsmart_ai.schemas.forecast import CategoryPattern
from spendsmart_ai.schemas.transaction import Transaction

logger = logging.getLogger(__name__)


def analyze_category_patterns(
    transactions: Sequence[Transaction],
    config: Optional[AnalyticsConfig] = None,
) -> Dict[str, CategoryPattern]:
    """
    Build a CategoryPattern for every category with at least two months of spending.

    Args:
        transactions: Historical transactions; income rows are ignored.
        config: Analytics thresholds (``confidence_months`` is used here).

    Returns:
        Mapping of category name to its pattern.
    """
    config = config or AnalyticsConfig()
    monthly = group_by_month_and_category(transactions)

    monthly_totals: Dict[str, List[float]] = {}
    amounts: Dict[str, List[float]] = {}
    for month_data in monthly.values():
        for category, month_amounts in month_data.items():
            monthly_totals.setdefault(category, []).append(sum(month_amounts))
            amounts.setdefault(category, []).extend(month_amounts)

    patterns: Dict[str, CategoryPattern] = {}
    for category, totals in monthly_totals.items():
        if len(totals) < 2:
            logger.debug(f"Skipping category {category}: only {len(totals)} month(s) of data")
            continue
        patterns[category] = build_pattern(totals, amounts[category], config)

    logger.info(f"Analyzed {len(patterns)} category patterns from {len(monthly)} months")
    return patterns


def build_pattern(
    monthly_totals: List[float],
    transaction_amounts: List[float],
    config: AnalyticsConfig,
) -> CategoryPattern:
    """Compute the statistics of a single category from its ordered monthly totals."""
    average = stats.mean(monthly_totals)
    std_dev = stats.std_dev(monthly_totals)

    return CategoryPattern(
        average=average,
        standard_deviation=std_dev,
        min=min(monthly_totals),
        max=max(monthly_totals),
        trend=stats.normalized_trend(monthly_totals),
        confidence=min(len(monthly_totals) / config.confidence_months, 1.0),
        monthly_totals=list(monthly_totals),
        volatility=std_dev / average if average > 0 else 0.0,
        avg_transaction_size=stats.mean(transaction_amounts),
        transaction_std_dev=stats.std_dev(transaction_amounts),
        total_transactions=len(transaction_amounts),
        predictability=stats.predictability(monthly_totals),
    )
