"""
API router for location endpoints backed by the observation API.
"""
from datetime import date
from fastapi import APIRouter, HTTPException, Path, Query
from typing import Annotated, List, Optional

from agroclimate.api.dependencies import AdvisoryServiceDep
from agroclimate.api.v1.models.requests import BatchPredictionRequest, Granularity
from agroclimate.api.v1.models.responses import BatchPredictionResponse, PatternsResponse
from agroclimate.domain.models import (
    AgroClimaticPrediction,
    ClimateAnalysisReport,
    SeasonalForecast,
)
from agroclimate.infrastructure.observation_client import ObservationSourceError


router = APIRouter(
    prefix="/locations",
    tags=["locations"],
)

LocationPath = Annotated[str, Path(description="Location identifier known to the observation API")]

COMMON_RESPONSES = {
    404: {"description": "Location not found"},
    429: {"description": "Rate limit exceeded"},
    502: {"description": "Observation API failure"},
}


def _not_found(location: str, error: ObservationSourceError) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=f"Location '{location}' not found: {error.message}"
    )


@router.get(
    "/{location}/patterns",
    response_model=PatternsResponse,
    summary="Get historical weather patterns",
    description="""
    Fetch the observation history for a location and aggregate it into
    season, month and (optionally) year patterns with averages, pattern
    type, anomaly notes, trends and a summary line.
    """,
    responses=COMMON_RESPONSES,
)
async def get_patterns(
    location: LocationPath,
    advisory_service: AdvisoryServiceDep,
    end_date: Annotated[Optional[date], Query(description="Last day of the history window")] = None,
    granularity: Annotated[List[Granularity], Query(description="Pattern granularities")] = ["season", "month"],
) -> PatternsResponse:
    try:
        patterns = await advisory_service.analyze_patterns(
            location,
            end_date=end_date,
            granularities=granularity,
        )
    except ObservationSourceError as e:
        if e.status_code == 404:
            raise _not_found(location, e)
        raise

    return PatternsResponse(
        location=location,
        pattern_count=len(patterns),
        patterns=patterns,
    )


@router.get(
    "/{location}/seasonal-forecast",
    response_model=SeasonalForecast,
    summary="Get an RBSWSA seasonal forecast",
    description="""
    Generate a deterministic rule-based seasonal forecast for a location.

    Zone baselines are replaced by observed month or season averages when
    the observation history provides them. Unknown zones fall back to the
    default zone and unknown ENSO states to neutral.
    """,
    responses=COMMON_RESPONSES,
)
async def get_seasonal_forecast(
    location: LocationPath,
    advisory_service: AdvisoryServiceDep,
    zone: Annotated[Optional[str], Query(description="Climate zone id, e.g. highveld")] = None,
    enso_state: Annotated[Optional[str], Query(description="el_nino, la_nina or neutral")] = None,
    horizon_months: Annotated[Optional[int], Query(ge=1, le=12, description="Months to forecast")] = None,
    start_date: Annotated[Optional[date], Query(description="First forecast month")] = None,
    use_history: Annotated[bool, Query(description="Use observed patterns as baseline")] = True,
) -> SeasonalForecast:
    try:
        return await advisory_service.get_seasonal_forecast(
            location,
            zone_id=zone,
            enso_state=enso_state,
            horizon_months=horizon_months,
            start_date=start_date,
            use_history=use_history,
        )
    except ObservationSourceError as e:
        if e.status_code == 404:
            raise _not_found(location, e)
        raise


@router.get(
    "/{location}/prediction",
    response_model=AgroClimaticPrediction,
    summary="Get an agro-climatic prediction",
    description="""
    Predict weather, soil, crop, yield and risk indicators for a location
    and date. Critical alerts are forwarded to the alert dispatcher. When
    no matching season pattern exists the prediction is flagged as degraded.
    """,
    responses=COMMON_RESPONSES,
)
async def get_prediction(
    location: LocationPath,
    advisory_service: AdvisoryServiceDep,
    target_date: Annotated[Optional[date], Query(description="Date to predict, defaults to today")] = None,
    enso_state: Annotated[Optional[str], Query(description="el_nino, la_nina or neutral")] = None,
) -> AgroClimaticPrediction:
    try:
        return await advisory_service.get_prediction(
            location,
            target_date=target_date,
            enso_state=enso_state,
        )
    except ObservationSourceError as e:
        if e.status_code == 404:
            raise _not_found(location, e)
        raise


@router.get(
    "/{location}/climate-report",
    response_model=ClimateAnalysisReport,
    summary="Get a climate analysis report",
    description="""
    Descriptive statistics, seasonal breakdown, trends, anomalies, climate
    indicators, risk assessment and recommendations over a date window.
    """,
    responses=COMMON_RESPONSES,
)
async def get_climate_report(
    location: LocationPath,
    advisory_service: AdvisoryServiceDep,
    start_date: Annotated[Optional[date], Query(description="First day of the window")] = None,
    end_date: Annotated[Optional[date], Query(description="Last day of the window")] = None,
) -> ClimateAnalysisReport:
    try:
        return await advisory_service.get_climate_report(
            location,
            start_date=start_date,
            end_date=end_date,
        )
    except ObservationSourceError as e:
        if e.status_code == 404:
            raise _not_found(location, e)
        raise


@router.post(
    "/predictions/batch",
    response_model=BatchPredictionResponse,
    summary="Get predictions for several locations",
    description="Run predictions for up to 50 locations with bounded concurrency.",
    responses={
        429: {"description": "Rate limit exceeded"},
        502: {"description": "Observation API failure"},
    },
)
async def get_predictions_batch(
    request: BatchPredictionRequest,
    advisory_service: AdvisoryServiceDep,
) -> BatchPredictionResponse:
    predictions = await advisory_service.get_predictions_batch(
        request.locations,
        target_date=request.target_date,
        enso_state=request.enso_state,
    )
    return BatchPredictionResponse(count=len(predictions), predictions=predictions)
