"""
Spending Anomaly Detector for SpendSmart.

Compares a recent window of transactions with a longer historical baseline
using four independent statistical detectors:

1. Unusual amount (Z-score or IQR outlier within a category)
2. New or rarely used category
3. Unusual daily transaction frequency
4. Unusual daily spending total

Each detector first summarises the baseline, then decides per recent value.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from spendsmart_ai.core.config import AnalyticsConfig
from spendsmart_ai.ml import statistics as stats
from spendsmart_ai.ml.grouping import expenses
from spendsmart_ai.ml.seasonality import WEEKDAY_NAMES
from spendsmart_ai.schemas.anomaly import (
    AnalysisWindow,
    Anomaly,
    AnomalyFailure,
    AnomalyResult,
    AnomalySummary,
    AnomalyTransaction,
    ModelPerformance,
)
from spendsmart_ai.schemas.transaction import Transaction, parse_transactions

logger = logging.getLogger(__name__)

MAX_SEVERITY = 10.0
DAILY_CONFIDENCE = 0.8
NEW_CATEGORY_CONFIDENCE = 0.9


def format_currency(amount: float) -> str:
    return f"${amount:,.2f}"


def severity_for(z: float) -> float:
    return min(z, MAX_SEVERITY)


def _ordered(transactions: Iterable[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda t: (t.date, t.id))


class AmountBaseline(BaseModel):
    """Baseline distribution of individual expense amounts for one category."""

    model_config = ConfigDict(frozen=True)

    category: str
    mean: float
    std_dev: float
    median: float
    q1: float
    q3: float
    iqr: float
    amounts: List[float]

    @property
    def data_points(self) -> int:
        return len(self.amounts)

    @classmethod
    def from_amounts(cls, category: str, amounts: Sequence[float]) -> "AmountBaseline":
        q1 = stats.percentile(amounts, 25)
        q3 = stats.percentile(amounts, 75)
        return cls(
            category=category,
            mean=stats.mean(amounts),
            std_dev=stats.std_dev(amounts),
            median=stats.median(amounts),
            q1=q1,
            q3=q3,
            iqr=q3 - q1,
            amounts=sorted(amounts),
        )

    def assess(self, transaction: Transaction, config: AnalyticsConfig) -> Optional[Anomaly]:
        """Flag ``transaction`` if it is a Z-score or IQR outlier for this category."""
        if self.std_dev <= 0 or self.data_points < config.min_category_points:
            return None

        amount = transaction.amount
        z = stats.z_score(amount, self.mean, self.std_dev)
        by_z_score = z > config.anomaly_threshold
        fence = config.iqr_multiplier * self.iqr
        by_iqr = amount > self.q3 + fence or amount < self.q1 - fence

        if not (by_z_score or by_iqr):
            return None

        direction = "high" if amount > self.mean else "low"
        return Anomaly(
            type="unusual_amount",
            severity=severity_for(z),
            confidence=min(self.data_points / 20, 1.0),
            transaction=AnomalyTransaction(
                id=transaction.id,
                date=transaction.date,
                category=transaction.category,
                amount=amount,
                note=transaction.note,
            ),
            details={
                "zScore": round(z, 2),
                "categoryAverage": round(self.mean, 2),
                "categoryMedian": round(self.median, 2),
                "standardDeviation": round(self.std_dev, 2),
                "percentile": stats.percentile_position(amount, self.amounts),
                "dataPoints": self.data_points,
                "detectionMethod": "Z-Score" if by_z_score else "IQR",
            },
            message=(
                f"Unusually {direction} {self.category} expense: {format_currency(amount)} "
                f"({z:.1f}σ from average)"
            ),
        )


class DailyBaseline(BaseModel):
    """Mean and spread of a per-day series (transaction counts or expense totals)."""

    model_config = ConfigDict(frozen=True)

    mean: float
    std_dev: float
    samples: List[float]

    @classmethod
    def from_samples(cls, samples: Sequence[float]) -> "DailyBaseline":
        return cls(mean=stats.mean(samples), std_dev=stats.std_dev(samples), samples=list(samples))

    def z_score(self, value: float) -> float:
        return stats.z_score(value, self.mean, self.std_dev)


def amount_baselines(baseline: Sequence[Transaction]) -> Dict[str, AmountBaseline]:
    by_category: Dict[str, List[float]] = defaultdict(list)
    for t in expenses(baseline):
        by_category[t.category].append(t.amount)
    return {
        category: AmountBaseline.from_amounts(category, amounts)
        for category, amounts in by_category.items()
    }


def detect_amount_anomalies(
    recent: Sequence[Transaction],
    baseline: Sequence[Transaction],
    config: AnalyticsConfig,
) -> List[Anomaly]:
    baselines = amount_baselines(baseline)
    anomalies = []
    for t in _ordered(expenses(recent)):
        category_baseline = baselines.get(t.category)
        if category_baseline is None:
            continue
        anomaly = category_baseline.assess(t, config)
        if anomaly is not None:
            anomalies.append(anomaly)
    return anomalies


def detect_category_anomalies(
    recent: Sequence[Transaction],
    baseline: Sequence[Transaction],
    config: AnalyticsConfig,
) -> List[Anomaly]:
    """Flag recent categories used in fewer than two distinct baseline months."""
    baseline_months: Dict[str, set] = defaultdict(set)
    for t in expenses(baseline):
        baseline_months[t.category].add(t.month)

    recent_by_category: Dict[str, List[Transaction]] = defaultdict(list)
    for t in _ordered(expenses(recent)):
        recent_by_category[t.category].append(t)

    anomalies = []
    for category in sorted(recent_by_category):
        months_used = len(baseline_months.get(category, ()))
        if months_used >= config.new_category_min_months:
            continue

        rows = recent_by_category[category]
        total = sum(t.amount for t in rows)
        is_new = months_used == 0

        anomalies.append(Anomaly(
            type="new_category",
            severity=7.0 if is_new else 5.0,
            confidence=NEW_CATEGORY_CONFIDENCE,
            category=category,
            details={
                "recentTransactions": len(rows),
                "totalSpent": round(total, 2),
                "firstSeen": rows[0].date.isoformat(),
                "historicalUsage": months_used,
                "averageTransactionSize": round(total / len(rows), 2),
            },
            message=(
                f"{'New' if is_new else 'Rarely used'} spending category: {category} "
                f"({format_currency(total)} across {len(rows)} transactions)"
            ),
        ))
    return anomalies


def daily_counts(transactions: Iterable[Transaction]) -> Dict[date, int]:
    """Transactions per calendar day, income included."""
    counts: Dict[date, int] = defaultdict(int)
    for t in transactions:
        counts[t.date] += 1
    return {day: counts[day] for day in sorted(counts)}


def daily_totals(transactions: Iterable[Transaction]) -> Dict[date, float]:
    """Expense total per calendar day."""
    totals: Dict[date, float] = defaultdict(float)
    for t in expenses(transactions):
        totals[t.date] += t.amount
    return {day: totals[day] for day in sorted(totals)}


def detect_frequency_anomalies(
    recent: Sequence[Transaction],
    baseline: Sequence[Transaction],
    config: AnalyticsConfig,
) -> List[Anomaly]:
    """
    Flag days with unusually many transactions.

    Both the Z-score and a 1.5x-the-mean floor must be exceeded; daily
    counts are small integers, so a high Z-score alone is too noisy.
    """
    historical = list(daily_counts(baseline).values())
    if len(historical) < config.min_daily_samples:
        return []

    model = DailyBaseline.from_samples(historical)
    if model.std_dev <= 0:
        return []

    anomalies = []
    for day, count in daily_counts(recent).items():
        z = model.z_score(count)
        if z > config.anomaly_threshold and count > model.mean * config.frequency_mean_multiplier:
            anomalies.append(Anomaly(
                type="unusual_frequency",
                severity=severity_for(z),
                confidence=DAILY_CONFIDENCE,
                date=day,
                details={
                    "transactionCount": count,
                    "historicalAverage": round(model.mean, 1),
                    "zScore": round(z, 2),
                    "percentileRank": stats.percentile_position(count, model.samples),
                },
                message=(
                    f"Unusually high transaction frequency: {count} transactions on "
                    f"{day.isoformat()} ({z:.1f}σ above normal)"
                ),
            ))
    return anomalies


def detect_daily_total_anomalies(
    recent: Sequence[Transaction],
    baseline: Sequence[Transaction],
    config: AnalyticsConfig,
) -> List[Anomaly]:
    historical = list(daily_totals(baseline).values())
    if len(historical) < config.min_daily_samples:
        return []

    model = DailyBaseline.from_samples(historical)
    if model.std_dev <= 0:
        return []

    anomalies = []
    for day, total in daily_totals(recent).items():
        z = model.z_score(total)
        if z > config.anomaly_threshold:
            direction = "high" if total > model.mean else "low"
            anomalies.append(Anomaly(
                type="unusual_daily_total",
                severity=severity_for(z),
                confidence=DAILY_CONFIDENCE,
                date=day,
                details={
                    "dailyTotal": round(total, 2),
                    "historicalAverage": round(model.mean, 2),
                    "zScore": round(z, 2),
                    "percentileRank": stats.percentile_position(total, model.samples),
                    "dayOfWeek": WEEKDAY_NAMES[day.isoweekday() % 7],
                },
                message=(
                    f"Unusually {direction} daily spending: {format_currency(total)} on "
                    f"{day.isoformat()} ({z:.1f}σ from normal)"
                ),
            ))
    return anomalies


def rank_anomalies(anomalies: Iterable[Anomaly]) -> List[Anomaly]:
    """Sort by severity x confidence, highest first."""
    return sorted(anomalies, key=lambda a: a.rank, reverse=True)


def summarize(anomalies: Sequence[Anomaly]) -> AnomalySummary:
    return AnomalySummary(
        total_anomalies=len(anomalies),
        high_severity=sum(1 for a in anomalies if a.severity >= 8),
        medium_severity=sum(1 for a in anomalies if 5 <= a.severity < 8),
        low_severity=sum(1 for a in anomalies if a.severity < 5),
    )


def model_performance(anomalies: Sequence[Anomaly], recent: Sequence[Transaction]) -> ModelPerformance:
    """Heuristic quality indicators; higher severities are assumed more accurate."""
    if anomalies:
        accuracy = sum(min(a.severity / 10, 1.0) for a in anomalies) / len(anomalies)
        detection_accuracy = int(round(accuracy * 100))
        low = sum(1 for a in anomalies if a.severity < 5)
        false_positive_rate = int(round(low / len(anomalies) * 100))
    else:
        detection_accuracy = 100
        false_positive_rate = 0

    monitored = {a.subject_category for a in anomalies if a.subject_category}
    total_categories = len({t.category for t in recent})
    coverage = int(round(len(monitored) / total_categories * 100)) if total_categories else 0

    return ModelPerformance(
        detection_accuracy=detection_accuracy,
        false_positive_rate=false_positive_rate,
        coverage_score=coverage,
    )


class SpendingAnomalyDetector:
    """
    Detects spending anomalies in a recent window relative to a baseline window.

    Holds only an immutable AnalyticsConfig.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        self.config = config or AnalyticsConfig()

    def detect(
        self,
        recent: Iterable[Union[Transaction, Mapping[str, Any]]],
        baseline: Iterable[Union[Transaction, Mapping[str, Any]]],
        recent_days: Optional[int] = None,
    ) -> Union[AnomalyResult, AnomalyFailure]:
        """
        Run all four detectors and rank their findings.

        Args:
            recent: Transactions in the recent window.
            baseline: Transactions in the historical baseline window.
            recent_days: Length of the recent window, reported in the result.

        Returns:
            AnomalyResult with at most ``max_anomalies`` ranked anomalies, or
            AnomalyFailure when the baseline is too small or input is malformed.
        """
        recent_days = recent_days or self.config.recent_window_days

        try:
            recent_rows = parse_transactions(recent)
            baseline_rows = parse_transactions(baseline)

            if len(baseline_rows) < self.config.min_data_points:
                logger.info(
                    f"Insufficient historical data for anomaly detection: "
                    f"{len(baseline_rows)} < {self.config.min_data_points}"
                )
                return AnomalyFailure(
                    message="Insufficient historical data for anomaly detection",
                    data_insights={
                        "historicalTransactions": len(baseline_rows),
                        "recentTransactions": len(recent_rows),
                        "requiredTransactions": self.config.min_data_points,
                    },
                )

            anomalies: List[Anomaly] = []
            for detector in (
                detect_amount_anomalies,
                detect_category_anomalies,
                detect_frequency_anomalies,
                detect_daily_total_anomalies,
            ):
                found = detector(recent_rows, baseline_rows, self.config)
                logger.debug(f"{detector.__name__}: {len(found)} anomalies")
                anomalies.extend(found)

            ranked = rank_anomalies(anomalies)

            result = AnomalyResult(
                anomalies=ranked[:self.config.max_anomalies],
                summary=summarize(ranked),
                analysis_window=AnalysisWindow(
                    recent_days=recent_days,
                    recent_transactions=len(recent_rows),
                    historical_transactions=len(baseline_rows),
                ),
                generated_at=datetime.now(timezone.utc),
                model_performance=model_performance(ranked, recent_rows),
            )

            logger.info(
                f"Anomaly detection complete: {len(ranked)} anomalies found, "
                f"{len(result.anomalies)} returned"
            )
            return result

        except Exception as e:
            logger.error(f"Error detecting anomalies: {e}", exc_info=True)
            return AnomalyFailure(message="Failed to detect anomalies", error=str(e))
