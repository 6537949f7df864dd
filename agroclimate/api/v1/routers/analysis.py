"""
API router for analysis over caller-supplied observations.
"""
from fastapi import APIRouter

from agroclimate.api.dependencies import AdvisoryServiceDep
from agroclimate.api.v1.models.requests import PatternAnalysisRequest, PredictionRequest
from agroclimate.api.v1.models.responses import PatternsResponse
from agroclimate.domain.models import AgroClimaticPrediction


router = APIRouter(
    prefix="/analysis",
    tags=["analysis"],
)


@router.post(
    "/patterns",
    response_model=PatternsResponse,
    summary="Build patterns from supplied observations",
    responses={429: {"description": "Rate limit exceeded"}},
)
async def analyze_patterns(
    request: PatternAnalysisRequest,
    advisory_service: AdvisoryServiceDep,
) -> PatternsResponse:
    """Aggregate the request's observations; nothing is fetched."""
    patterns = advisory_service.analyze_observations(
        request.observations,
        location=request.location,
        granularities=request.granularities,
    )
    location = request.location or (request.observations[0].location if request.observations else "")
    return PatternsResponse(
        location=location,
        pattern_count=len(patterns),
        patterns=patterns,
    )


@router.post(
    "/prediction",
    response_model=AgroClimaticPrediction,
    summary="Predict from supplied observations",
    responses={429: {"description": "Rate limit exceeded"}},
)
async def predict(
    request: PredictionRequest,
    advisory_service: AdvisoryServiceDep,
) -> AgroClimaticPrediction:
    """Predict from the request's observation history; alerts are not dispatched."""
    return advisory_service.predict_from_observations(
        location=request.location,
        observations=request.observations,
        target_date=request.target_date,
        enso_state=request.enso_state,
        days_ahead=request.days_ahead,
    )
