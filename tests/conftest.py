"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Observation factories and sample series
- Reference data and domain services
- Mock observation client and alert dispatcher
- FastAPI test client
"""
import pytest
from datetime import datetime, timedelta
from typing import Callable
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from agroclimate.main import app, limiter
from agroclimate.domain.models import Observation
from agroclimate.domain.reference_data import ClimateReferenceData
from agroclimate.infrastructure.observation_client import ObservationClient
from agroclimate.infrastructure.alert_dispatcher import AlertDispatcher
from agroclimate.services.domain.anomaly_detector import AnomalyConfig, AnomalyDetector
from agroclimate.services.domain.seasonal_pattern_analyzer import SeasonalPatternAnalyzer
from agroclimate.services.domain.seasonal_forecaster import RuleBasedSeasonalForecaster
from agroclimate.services.domain.agro_climatic_predictor import AgroClimaticPredictor
from agroclimate.services.domain.climate_analyzer import ClimateAnalyzer


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def make_observations() -> Callable[..., list[Observation]]:
    """
    Factory for daily observation series.

    Each of temperature, humidity and precipitation may be a constant or a
    list with one value per day.
    """
    def factory(
        days: int,
        start: datetime = datetime(2024, 1, 1, 12, 0),
        temperature=22.0,
        humidity=60.0,
        precipitation=0.0,
        wind_speed=8.0,
        location: str = "harare",
    ) -> list[Observation]:
        def value_at(series, index):
            return series[index] if isinstance(series, (list, tuple)) else series

        return [
            Observation(
                id=f"obs-{index}",
                timestamp=start + timedelta(days=index),
                location=location,
                temperature=value_at(temperature, index),
                humidity=value_at(humidity, index),
                precipitation_mm=value_at(precipitation, index),
                wind_speed_kmh=value_at(wind_speed, index),
            )
            for index in range(days)
        ]

    return factory


@pytest.fixture
def constant_observations(make_observations) -> list[Observation]:
    """30 January days at a constant 22°C, 60% humidity and no rain."""
    return make_observations(30)


@pytest.fixture
def spike_observations(make_observations) -> list[Observation]:
    """29 days at 20°C with a single 40°C day in the middle."""
    temperatures = [20.0] * 30
    temperatures[15] = 40.0
    return make_observations(30, temperature=temperatures)


@pytest.fixture
def year_of_observations(make_observations) -> list[Observation]:
    """A full year of daily observations with a seasonal temperature cycle."""
    start = datetime(2023, 1, 1, 12, 0)
    temperatures = []
    precipitation = []
    for index in range(365):
        month = (start + timedelta(days=index)).month
        # Warm wet summers, cool dry winters
        temperatures.append(16.0 + (8.0 if month in (12, 1, 2) else 4.0 if month in (3, 4, 10, 11) else 0.0))
        precipitation.append(6.0 if month in (11, 12, 1, 2, 3) else 0.0)
    return make_observations(
        365,
        start=start,
        temperature=temperatures,
        humidity=65.0,
        precipitation=precipitation,
    )


# ============================================================
# Domain Service Fixtures
# ============================================================

@pytest.fixture
def reference_data() -> ClimateReferenceData:
    return ClimateReferenceData.default()


@pytest.fixture
def anomaly_detector() -> AnomalyDetector:
    return AnomalyDetector(AnomalyConfig(medium_z=2.0, high_z=3.0))


@pytest.fixture
def pattern_analyzer(reference_data, anomaly_detector) -> SeasonalPatternAnalyzer:
    return SeasonalPatternAnalyzer(
        reference_data=reference_data,
        anomaly_detector=anomaly_detector,
        min_samples=5,
        extreme_delta=10.0,
    )


@pytest.fixture
def forecaster(reference_data) -> RuleBasedSeasonalForecaster:
    return RuleBasedSeasonalForecaster(reference_data=reference_data)


@pytest.fixture
def predictor(reference_data) -> AgroClimaticPredictor:
    return AgroClimaticPredictor(reference_data=reference_data, expected_daily_precipitation_mm=2.0)


@pytest.fixture
def climate_analyzer(reference_data, anomaly_detector) -> ClimateAnalyzer:
    return ClimateAnalyzer(
        reference_data=reference_data,
        anomaly_detector=anomaly_detector,
        expected_daily_precipitation_mm=2.0,
    )


# ============================================================
# Mock Infrastructure Fixtures
# ============================================================

@pytest.fixture
def mock_observation_client(year_of_observations):
    """Create a mock observation client returning a year of history."""
    mock_client = AsyncMock(spec=ObservationClient)
    mock_client.get_observations.return_value = year_of_observations
    return mock_client


@pytest.fixture
def mock_alert_dispatcher():
    """Create a mock alert dispatcher."""
    mock_dispatcher = AsyncMock(spec=AlertDispatcher)
    mock_dispatcher.dispatch.return_value = 0
    return mock_dispatcher


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    limiter.reset()
    return TestClient(app)
