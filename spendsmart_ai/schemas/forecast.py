"""Models for category patterns and the spending forecast result."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from spendsmart_ai.schemas.base import ResultModel


class CategoryPattern(ResultModel):
    """Monthly-total statistics for one expense category."""

    average: float
    standard_deviation: float
    min: float
    max: float
    trend: float
    confidence: float = Field(..., ge=0, le=1)
    monthly_totals: List[float]
    volatility: float
    avg_transaction_size: float
    transaction_std_dev: float
    total_transactions: int
    predictability: float = Field(..., ge=0, le=1)


class VolatilityScore(ResultModel):
    volatility: float
    stability: float = Field(..., ge=0, le=1)
    predictability: float = Field(..., ge=0, le=1)


class GrowthRates(ResultModel):
    overall: float = 0.0
    categories: Dict[str, float] = Field(default_factory=dict)

    def for_category(self, category: str) -> float:
        # A missing or flat (0) category rate falls back to the overall rate
        return self.categories.get(category) or self.overall


class ForecastRange(ResultModel):
    low: float
    high: float


class ForecastFactors(ResultModel):
    base_average: float
    seasonal_adjustment: float
    growth_adjustment: float  # percent per month
    volatility_score: float
    stability_score: float


class CategoryForecast(ResultModel):
    predicted: float = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=1)
    range: ForecastRange
    factors: ForecastFactors
    insights: List[str] = Field(default_factory=list)


class RiskFactor(ResultModel):
    category: str
    risk: Literal["high_volatility", "low_confidence"]
    severity: float = Field(..., ge=0, le=10)
    description: str


class MonthFactors(ResultModel):
    historical_average: float
    seasonal_factor: Literal["Applied", "None"]
    trend_factor: float  # percent per month
    data_quality: str


class MonthForecast(ResultModel):
    month: str
    month_name: str
    total_predicted: float
    category_breakdown: Dict[str, CategoryForecast]
    confidence: float = Field(..., ge=0, le=1)
    factors: MonthFactors
    insights: List[str] = Field(default_factory=list)
    risk_factors: List[RiskFactor] = Field(default_factory=list)


class ModelMetrics(ResultModel):
    categories_analyzed: int
    months_of_data: int
    seasonal_factors_applied: int
    average_volatility: float


class ForecastResult(ResultModel):
    success: Literal[True] = True
    predictions: List[MonthForecast]
    confidence: int = Field(..., ge=0, le=100)
    data_points: int
    generated_at: datetime
    insights: List[str] = Field(default_factory=list)
    model_metrics: ModelMetrics


class ForecastFailure(ResultModel):
    success: Literal[False] = False
    message: str
    predictions: List[MonthForecast] = Field(default_factory=list)
    confidence: int = 0
    data_insights: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
