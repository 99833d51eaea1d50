"""Growth Rate Calculator: average month-over-month change in expense totals."""

import logging
from typing import List, Sequence

from spendsmart_ai.ml.grouping import monthly_expense_totals, monthly_totals_by_category
from spendsmart_ai.schemas.forecast import GrowthRates
from spendsmart_ai.schemas.transaction import Transaction

logger = logging.getLogger(__name__)

MIN_GROWTH_MONTHS = 3


def average_growth(series: List[float], min_months: int = MIN_GROWTH_MONTHS) -> float:
    """
    Mean of consecutive fractional changes over a chronologically ordered series.

    Transitions out of a zero month are skipped. Returns 0 when the series
    is shorter than ``min_months`` or no transition qualifies.
    """
    if len(series) < min_months:
        return 0.0
    changes = [
        (current - previous) / previous
        for previous, current in zip(series, series[1:])
        if previous > 0
    ]
    if not changes:
        return 0.0
    return sum(changes) / len(changes)


def calculate_growth_rates(transactions: Sequence[Transaction]) -> GrowthRates:
    """
    Overall and per-category growth rates.

    Categories with fewer than three months of their own data are omitted,
    so forecasts fall back to the overall rate for them.
    """
    overall = average_growth(list(monthly_expense_totals(transactions).values()))

    categories = {}
    for category, months in monthly_totals_by_category(transactions).items():
        if len(months) >= MIN_GROWTH_MONTHS:
            categories[category] = average_growth(list(months.values()))

    logger.info(
        f"Growth rates: overall={overall:+.3f}, "
        f"{len(categories)} categories with enough history"
    )
    return GrowthRates(overall=overall, categories=categories)
