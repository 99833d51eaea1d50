"""
Tests for the volatility scorer.
"""
from datetime import date

import pytest

from spendsmart_ai.ml.volatility import (
    DEFAULT_VOLATILITY,
    average_volatility,
    calculate_volatility_scores,
    score_series,
)


def test_score_series_stability_is_clamped():
    steady = score_series([100, 100, 100])
    assert steady.volatility == 0.0
    assert steady.stability == 1.0
    assert steady.predictability == 1.0

    wild = score_series([1, 1, 1, 1, 100])
    assert wild.volatility > 1
    assert wild.stability == 0.0


def test_categories_need_three_nonzero_months(make_tx):
    rows = [make_tx("Rent", 1000, date(2026, m, 1)) for m in (1, 2, 3)]
    rows += [make_tx("Gifts", 40, date(2026, m, 1)) for m in (1, 2)]
    scores = calculate_volatility_scores(rows)

    assert set(scores) == {"Rent"}
    assert scores["Rent"].stability == 1.0


def test_default_and_average():
    assert DEFAULT_VOLATILITY.volatility == pytest.approx(0.2)
    assert DEFAULT_VOLATILITY.stability == pytest.approx(0.8)
    assert average_volatility({}) == 0.0
    assert average_volatility({"a": score_series([40, 60, 40, 60])}) == pytest.approx(0.2)
