"""
Shared fixtures for the analytics tests.
"""
import itertools
from datetime import date
from typing import List, Sequence, Union

import pytest

from spendsmart_ai.core.config import AnalyticsConfig
from spendsmart_ai.schemas.transaction import Transaction


class FakeStore:
    """In-memory TransactionStore that records the windows it was asked for."""

    def __init__(self, rows: Sequence[Union[Transaction, dict]] = (), error: Exception = None):
        self.rows = list(rows)
        self.error = error
        self.calls: List[tuple] = []

    async def fetch_by_date_range(self, start_date: str, end_date: str):
        self.calls.append((start_date, end_date))
        if self.error is not None:
            raise self.error
        start = date.fromisoformat(start_date)
        end = date.fromisoformat(end_date)
        return [row for row in self.rows if start <= _row_date(row) <= end]


def _row_date(row) -> date:
    if isinstance(row, Transaction):
        return row.date
    return date.fromisoformat(str(row["date"])[:10])


@pytest.fixture
def config():
    return AnalyticsConfig()


@pytest.fixture
def make_tx():
    """Factory for expense (or income) transactions with unique ids."""
    counter = itertools.count(1)

    def _make(category: str, amount: float, day: date, kind: str = "expense", note: str = None):
        return Transaction(
            id=f"tx-{next(counter)}",
            kind=kind,
            category=category,
            amount=amount,
            date=day,
            note=note,
        )

    return _make


@pytest.fixture
def six_month_history(make_tx):
    """Groceries and Rent spending for January to June 2026, plus monthly salary."""
    groceries = [400, 420, 380, 410, 405, 415]
    rows = []
    for month, total in enumerate(groceries, start=1):
        rows.append(make_tx("Groceries", total / 2, date(2026, month, 5)))
        rows.append(make_tx("Groceries", total / 2, date(2026, month, 20)))
        rows.append(make_tx("Rent", 1000, date(2026, month, 1)))
        rows.append(make_tx("Salary", 3000, date(2026, month, 28), kind="income"))
    return rows


@pytest.fixture
def fake_store():
    return FakeStore
