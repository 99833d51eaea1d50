"""Models for the anomaly detection result."""

from datetime import date as date_type, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from spendsmart_ai.schemas.base import ResultModel

AnomalyKind = Literal[
    "unusual_amount",
    "new_category",
    "unusual_frequency",
    "unusual_daily_total",
]


class AnomalyTransaction(ResultModel):
    id: str
    date: date_type
    category: str
    amount: float
    note: Optional[str] = None


class Anomaly(ResultModel):
    """
    One flagged irregularity.

    Exactly one of ``transaction``, ``category`` or ``date`` identifies the
    subject, depending on ``type``.
    """

    type: AnomalyKind
    severity: float = Field(..., ge=0, le=10)
    confidence: float = Field(..., ge=0, le=1)
    transaction: Optional[AnomalyTransaction] = None
    category: Optional[str] = None
    date: Optional[date_type] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    message: str

    @property
    def rank(self) -> float:
        return self.severity * self.confidence

    @property
    def subject_category(self) -> Optional[str]:
        if self.transaction is not None:
            return self.transaction.category
        return self.category


class AnomalySummary(ResultModel):
    total_anomalies: int
    high_severity: int
    medium_severity: int
    low_severity: int


class AnalysisWindow(ResultModel):
    recent_days: int
    recent_transactions: int
    historical_transactions: int


class ModelPerformance(ResultModel):
    detection_accuracy: int
    false_positive_rate: int
    coverage_score: int


class AnomalyResult(ResultModel):
    success: Literal[True] = True
    anomalies: List[Anomaly]
    summary: AnomalySummary
    analysis_window: AnalysisWindow
    generated_at: datetime
    model_performance: ModelPerformance


class AnomalyFailure(ResultModel):
    success: Literal[False] = False
    message: str
    anomalies: List[Anomaly] = Field(default_factory=list)
    data_insights: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
