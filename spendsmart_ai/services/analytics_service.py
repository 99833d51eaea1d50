"""
Analytics service: fetches transaction windows from the store and runs
the forecast and anomaly pipelines on the snapshot.
"""

import logging
import time
from datetime import date, timedelta
from typing import Optional, Union

from spendsmart_ai.core.config import AnalyticsConfig
from spendsmart_ai.db.store import TransactionStore
from spendsmart_ai.ml.anomaly_detector import SpendingAnomalyDetector
from spendsmart_ai.ml.metrics import AnalyticsMetrics
from spendsmart_ai.ml.spending_predictor import SpendingPredictor
from spendsmart_ai.schemas.anomaly import AnomalyFailure, AnomalyResult
from spendsmart_ai.schemas.forecast import ForecastFailure, ForecastResult
from spendsmart_ai.utils.dates import shift_months, to_iso

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Entry point used by the API layer.

    The only awaited work is the store fetch; once the snapshot is in hand
    the analyzers run synchronously.
    """

    def __init__(
        self,
        store: TransactionStore,
        config: Optional[AnalyticsConfig] = None,
        metrics: Optional[AnalyticsMetrics] = None,
    ):
        self.store = store
        self.config = config or AnalyticsConfig()
        self.metrics = metrics or AnalyticsMetrics()
        self.predictor = SpendingPredictor(self.config)
        self.detector = SpendingAnomalyDetector(self.config)

    async def generate_spending_predictions(
        self,
        months: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> Union[ForecastResult, ForecastFailure]:
        """Forecast the next ``months`` months from the last ``history_months`` of history."""
        as_of = as_of or date.today()
        start = shift_months(as_of, -self.config.history_months)
        started = time.perf_counter()

        logger.info(f"Generating spending predictions from {to_iso(start)} to {to_iso(as_of)}")
        try:
            history = await self.store.fetch_by_date_range(to_iso(start), to_iso(as_of))
        except Exception as e:
            logger.error(f"Transaction fetch failed: {e}", exc_info=True)
            result = ForecastFailure(message="Failed to generate predictions", error=str(e))
        else:
            result = self.predictor.predict(history, months=months, as_of=as_of)

        self.metrics.record_run(
            "predictions",
            len(result.predictions),
            time.perf_counter() - started,
            success=result.success,
        )
        return result

    async def detect_spending_anomalies(
        self,
        days: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> Union[AnomalyResult, AnomalyFailure]:
        """
        Compare the last ``days`` days against the preceding baseline months.

        The baseline window ends the day before the recent window starts.
        """
        days = days or self.config.recent_window_days
        as_of = as_of or date.today()
        recent_start = as_of - timedelta(days=days)
        baseline_start = shift_months(as_of, -self.config.baseline_months)
        baseline_end = recent_start - timedelta(days=1)
        started = time.perf_counter()

        logger.info(
            f"Detecting anomalies: recent {to_iso(recent_start)}..{to_iso(as_of)}, "
            f"baseline {to_iso(baseline_start)}..{to_iso(baseline_end)}"
        )
        try:
            recent = await self.store.fetch_by_date_range(to_iso(recent_start), to_iso(as_of))
            baseline = await self.store.fetch_by_date_range(to_iso(baseline_start), to_iso(baseline_end))
        except Exception as e:
            logger.error(f"Transaction fetch failed: {e}", exc_info=True)
            result = AnomalyFailure(message="Failed to detect anomalies", error=str(e))
        else:
            result = self.detector.detect(recent, baseline, recent_days=days)

        self.metrics.record_run(
            "anomalies",
            len(result.anomalies),
            time.perf_counter() - started,
            success=result.success,
        )
        return result
