"""Bucketing helpers used by the analyzers."""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from spendsmart_ai.schemas.transaction import Transaction


def expenses(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.is_expense]


def unique_months(transactions: Iterable[Transaction]) -> List[str]:
    """Distinct ``YYYY-MM`` keys in chronological order."""
    return sorted({t.month for t in transactions})


def group_by_month_and_category(
    transactions: Sequence[Transaction],
) -> Dict[str, Dict[str, List[float]]]:
    """Expense amounts keyed by month, then category. Months are sorted."""
    monthly: Dict[str, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))
    for t in expenses(transactions):
        monthly[t.month][t.category].append(t.amount)
    return {month: dict(monthly[month]) for month in sorted(monthly)}


def monthly_totals_by_category(
    transactions: Sequence[Transaction],
) -> Dict[str, Dict[str, float]]:
    """Expense totals keyed by category, then month (months sorted)."""
    totals: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    for t in expenses(transactions):
        totals[t.category][t.month] += t.amount
    return {
        category: {month: months[month] for month in sorted(months)}
        for category, months in totals.items()
    }


def monthly_expense_totals(transactions: Sequence[Transaction]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for t in expenses(transactions):
        totals[t.month] += t.amount
    return {month: totals[month] for month in sorted(totals)}


def historical_monthly_average(transactions: Sequence[Transaction]) -> float:
    totals = list(monthly_expense_totals(transactions).values())
    if not totals:
        return 0.0
    return sum(totals) / len(totals)
