from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    PROJECT_NAME: str = "SpendSmart AI Analytics"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Transaction store
    DATABASE_URL: Optional[str] = None
    DB_SERVER: str = "."
    DB_NAME: str = "SpendSmartDatabase"
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_DRIVER: str = "ODBC Driver 17 for SQL Server"
    DB_TRUSTED_CONNECTION: bool = True
    DB_TRUST_SERVER_CERTIFICATE: bool = True

    # Analytics Configuration
    ANOMALY_THRESHOLD: float = 2.5  # Standard deviations for anomaly detection
    MIN_DATA_POINTS: int = 10  # Minimum transactions needed for analysis
    FORECAST_MONTHS: int = 3
    HISTORY_MONTHS: int = 12  # Months of history fetched for predictions
    ANOMALY_RECENT_DAYS: int = 30
    ANOMALY_BASELINE_MONTHS: int = 6
    MAX_ANOMALIES: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


class AnalyticsConfig(BaseModel):
    """
    Immutable set of thresholds shared by the analyzers.

    Passed explicitly into every analyzer so that several configurations
    can be used side by side.
    """

    model_config = ConfigDict(frozen=True)

    anomaly_threshold: float = Field(default=2.5, gt=0)
    min_data_points: int = Field(default=10, ge=1)
    forecast_months: int = Field(default=3, ge=1, le=24)
    history_months: int = Field(default=12, ge=1)
    recent_window_days: int = Field(default=30, ge=1)
    baseline_months: int = Field(default=6, ge=1)
    max_anomalies: int = Field(default=20, ge=1)

    min_category_points: int = 5
    min_daily_samples: int = 10
    iqr_multiplier: float = 1.5
    frequency_mean_multiplier: float = 1.5
    prediction_cap_multiplier: float = 2.5
    min_range_multiplier: float = 0.15
    confidence_months: int = 6
    richness_transactions: int = 200
    new_category_min_months: int = 2

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "AnalyticsConfig":
        source = source or get_settings()
        return cls(
            anomaly_threshold=source.ANOMALY_THRESHOLD,
            min_data_points=source.MIN_DATA_POINTS,
            forecast_months=source.FORECAST_MONTHS,
            history_months=source.HISTORY_MONTHS,
            recent_window_days=source.ANOMALY_RECENT_DAYS,
            baseline_months=source.ANOMALY_BASELINE_MONTHS,
            max_anomalies=source.MAX_ANOMALIES,
        )
