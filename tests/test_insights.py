"""
Tests for forecast insight text and the data-quality label.
"""
from datetime import date

from spendsmart_ai.ml.insights import (
    assess_data_quality,
    category_insights,
    month_insights,
    weekly_insights,
)
from spendsmart_ai.schemas.forecast import VolatilityScore


def test_data_quality_labels(six_month_history):
    assert assess_data_quality([]) == "Poor"
    assert assess_data_quality(six_month_history) == "Very Good"


def test_category_insights():
    volatile = VolatilityScore(volatility=0.7, stability=0.3, predictability=0.5)
    insights = category_insights("Dining", 0.7, -0.2, volatile)

    assert insights == [
        "Dining spending is highly variable - predictions less reliable",
        "Dining has a declining trend of 20.0% per month",
        "Dining typically decreases by 30% this month",
    ]


def test_month_insights():
    insights = month_insights(date(2026, 12, 1), 1500, 1000, {12: {"Gifts": 1.5, "Rent": 1.0}})

    assert insights == [
        "Predicted spending is 50% higher than your typical month",
        "December typically sees higher spending in: Gifts",
    ]


def test_month_insights_quiet_month():
    assert month_insights(date(2026, 7, 1), 1050, 1000, {}) == []


def test_weekly_insights_pick_peak_weekday():
    weekly = {
        0: {"Dining": 0.5, "Rent": 1.0},
        5: {"Dining": 1.5, "Rent": 1.0},
        6: {"Dining": 1.4, "Fuel": 1.6},
    }

    assert weekly_insights(weekly) == [
        "Dining spending peaks on Fridays (50% above its average)",
        "Fuel spending peaks on Saturdays (60% above its average)",
    ]


def test_weekly_insights_quiet_week():
    assert weekly_insights({1: {"Rent": 1.0}, 3: {"Rent": 1.2}}) == []
