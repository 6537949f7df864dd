"""
API response models using Pydantic.
"""
from typing import List
from pydantic import BaseModel, Field

from agroclimate.domain.models import AgroClimaticPrediction, HistoricalWeatherPattern


class PatternsResponse(BaseModel):
    """Response model for pattern endpoints."""
    location: str = Field(
        description="Location the patterns describe"
    )
    pattern_count: int = Field(
        description="Number of patterns generated"
    )
    patterns: List[HistoricalWeatherPattern] = Field(
        description="Season, month and year patterns"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "location": "harare",
                "pattern_count": 1,
                "patterns": [
                    {
                        "id": "summer_3f2c9a...",
                        "location": "harare",
                        "granularity": "season",
                        "period_label": "summer",
                        "sample_count": 90,
                        "average_temperature": 23.4,
                        "total_precipitation": 512.0,
                        "pattern_type": "moderate",
                        "summary": "summer: Avg 23.4°C (16.1-31.0°C), Precip 512.0mm, Humidity 71.2%",
                    }
                ],
            }
        }


class BatchPredictionResponse(BaseModel):
    """Response model for batch predictions."""
    count: int = Field(
        description="Number of predictions returned"
    )
    predictions: List[AgroClimaticPrediction] = Field(
        description="Predictions in request order"
    )
