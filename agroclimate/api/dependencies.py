"""
Dependency injection for FastAPI.
"""
from functools import lru_cache
from typing import Annotated
from fastapi import Depends

from agroclimate.config import settings
from agroclimate.domain.reference_data import ClimateReferenceData
from agroclimate.infrastructure.observation_client import (
    ObservationClient,
    get_observation_client,
)
from agroclimate.infrastructure.alert_dispatcher import (
    AlertDispatcher,
    get_alert_dispatcher,
)
from agroclimate.services.domain.seasonal_pattern_analyzer import SeasonalPatternAnalyzer
from agroclimate.services.domain.seasonal_forecaster import RuleBasedSeasonalForecaster
from agroclimate.services.domain.agro_climatic_predictor import AgroClimaticPredictor
from agroclimate.services.domain.climate_analyzer import ClimateAnalyzer
from agroclimate.services.application.agro_advisory_service import AgroAdvisoryService


@lru_cache
def get_reference_data() -> ClimateReferenceData:
    """
    Dependency factory for the shared, read-only reference tables.

    Returns:
        ClimateReferenceData instance
    """
    return ClimateReferenceData.default(default_zone_id=settings.default_climate_zone)


ReferenceDataDep = Annotated[ClimateReferenceData, Depends(get_reference_data)]


def get_pattern_analyzer(reference_data: ReferenceDataDep) -> SeasonalPatternAnalyzer:
    return SeasonalPatternAnalyzer(reference_data=reference_data)


def get_forecaster(reference_data: ReferenceDataDep) -> RuleBasedSeasonalForecaster:
    return RuleBasedSeasonalForecaster(reference_data=reference_data)


def get_predictor(reference_data: ReferenceDataDep) -> AgroClimaticPredictor:
    return AgroClimaticPredictor(reference_data=reference_data)


def get_climate_analyzer(reference_data: ReferenceDataDep) -> ClimateAnalyzer:
    return ClimateAnalyzer(reference_data=reference_data)


def get_advisory_service(
    observation_client: Annotated[ObservationClient, Depends(get_observation_client)],
    pattern_analyzer: Annotated[SeasonalPatternAnalyzer, Depends(get_pattern_analyzer)],
    forecaster: Annotated[RuleBasedSeasonalForecaster, Depends(get_forecaster)],
    predictor: Annotated[AgroClimaticPredictor, Depends(get_predictor)],
    climate_analyzer: Annotated[ClimateAnalyzer, Depends(get_climate_analyzer)],
    alert_dispatcher: Annotated[AlertDispatcher, Depends(get_alert_dispatcher)],
) -> AgroAdvisoryService:
    """
    Dependency factory for AgroAdvisoryService.

    Args:
        observation_client: Observation API client (injected)
        pattern_analyzer: Pattern analyzer (injected)
        forecaster: RBSWSA forecaster (injected)
        predictor: Agro-climatic predictor (injected)
        climate_analyzer: Climate report builder (injected)
        alert_dispatcher: Critical alert dispatcher (injected)

    Returns:
        AgroAdvisoryService instance
    """
    return AgroAdvisoryService(
        observation_client=observation_client,
        pattern_analyzer=pattern_analyzer,
        forecaster=forecaster,
        predictor=predictor,
        climate_analyzer=climate_analyzer,
        alert_dispatcher=alert_dispatcher,
    )


# Type aliases for cleaner route signatures
AdvisoryServiceDep = Annotated[AgroAdvisoryService, Depends(get_advisory_service)]
