"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Observation API Configuration
    observation_api_base_url: str = Field(
        default="https://api.example.com",
        description="Base URL for the weather observation API"
    )
    observation_api_key: str = Field(
        default="",
        description="API key for authentication"
    )
    observation_api_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for observation API calls"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Analysis Parameters
    min_pattern_samples: int = Field(
        default=5,
        description="Minimum observations required to build a pattern"
    )
    anomaly_medium_z: float = Field(
        default=2.0,
        description="Absolute z-score above which a value is a medium anomaly"
    )
    anomaly_high_z: float = Field(
        default=3.0,
        description="Absolute z-score above which a value is a high anomaly"
    )
    coarse_temperature_anomaly_delta: float = Field(
        default=10.0,
        description="Degrees from the period mean flagged as an extreme temperature"
    )
    expected_daily_precipitation_mm: float = Field(
        default=2.0,
        description="Daily precipitation baseline used by the drought index"
    )

    # Forecast Parameters
    default_climate_zone: str = Field(
        default="highveld",
        description="Climate zone used when a zone id is unknown"
    )
    default_enso_state: str = Field(
        default="neutral",
        description="ENSO state used when none is supplied"
    )
    default_forecast_months: int = Field(
        default=3,
        description="Forecast horizon in months when none is supplied"
    )
    history_window_days: int = Field(
        default=730,
        description="Days of observation history fetched for pattern analysis"
    )

    # Concurrency
    max_concurrency: int = Field(
        default=4,
        description="Maximum locations processed concurrently in batch requests"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Agro-Climatic Advisory Engine",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
