"""
API request models using Pydantic.
"""
from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from agroclimate.domain.models import EnsoState, Observation


Granularity = Literal["season", "month", "year"]


class PatternAnalysisRequest(BaseModel):
    """Request body for pattern analysis over supplied observations."""
    location: Optional[str] = Field(
        default=None,
        description="Location label; defaults to the first observation's location"
    )
    observations: List[Observation] = Field(
        description="Observations for a single location, in any order"
    )
    granularities: List[Granularity] = Field(
        default=["season", "month"],
        description="Pattern granularities to build (season is always included)"
    )


class PredictionRequest(BaseModel):
    """Request body for a prediction from supplied observations."""
    location: str = Field(description="Location label")
    target_date: date = Field(description="Date to predict")
    enso_state: Optional[EnsoState] = Field(
        default=None,
        description="ENSO phase; defaults to the configured state"
    )
    days_ahead: int = Field(
        default=0,
        ge=0,
        description="Lead time in days used to extrapolate baseline trends"
    )
    observations: List[Observation] = Field(
        default_factory=list,
        description="Observation history; an empty list gives a degraded prediction"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "location": "harare",
                "target_date": "2024-01-15",
                "enso_state": "neutral",
                "days_ahead": 0,
                "observations": [
                    {
                        "timestamp": "2023-12-01T12:00:00",
                        "location": "harare",
                        "temperature": 24.5,
                        "humidity": 68.0,
                        "precipitation_mm": 4.2,
                        "wind_speed_kmh": 9.0,
                    }
                ],
            }
        }


class BatchPredictionRequest(BaseModel):
    """Request body for predictions across several locations."""
    locations: List[str] = Field(
        min_length=1,
        max_length=50,
        description="Location identifiers"
    )
    target_date: Optional[date] = Field(
        default=None,
        description="Date to predict; defaults to today"
    )
    enso_state: Optional[EnsoState] = None
