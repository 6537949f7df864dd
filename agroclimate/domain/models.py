"""
Domain models for weather observations, climate reference data and
agro-climatic outputs.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.). Output records
are frozen so collaborators can store or forward them without defensive copies.
"""
from datetime import date as Date, datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple, Union
from pydantic import BaseModel, Field


# ============================================================
# Input
# ============================================================

class Observation(BaseModel):
    """Single weather observation for a location."""
    id: Optional[str] = None
    timestamp: datetime
    location: str
    temperature: float = Field(description="Air temperature in °C", allow_inf_nan=False)
    humidity: float = Field(ge=0, le=100, description="Relative humidity in %", allow_inf_nan=False)
    precipitation_mm: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    wind_speed_kmh: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    pressure_hpa: float = Field(default=1013.25, allow_inf_nan=False)
    uv_index: Optional[float] = None
    cloud_cover: Optional[float] = None
    wind_direction: Optional[str] = None

    class Config:
        frozen = True


# ============================================================
# Static reference data
# ============================================================

class EnsoState(str, Enum):
    """El Niño-Southern Oscillation phase."""
    EL_NINO = "el_nino"
    LA_NINA = "la_nina"
    NEUTRAL = "neutral"


class ClimateZone(BaseModel):
    """Static climate profile for a geographic region."""
    zone_id: str
    altitude: float = Field(description="Metres above sea level")
    avg_temp: float
    annual_rainfall_mm: float
    rainy_season_months: FrozenSet[int]
    dry_season_months: FrozenSet[int]
    frost_risk_months: FrozenSet[int] = frozenset()
    optimal_planting_months: FrozenSet[int] = frozenset()
    suitable_crops: Tuple[str, ...] = ()
    soil_type: str = ""
    description: str = ""

    class Config:
        frozen = True


class SeasonalRule(BaseModel):
    """Monthly modifiers applied to zone baselines."""
    month: int = Field(ge=1, le=12)
    temp_modifier: float
    rainfall_modifier: float
    humidity_modifier: float
    wind_modifier: float
    description: str = ""

    class Config:
        frozen = True


class EnsoEffect(BaseModel):
    """Climate modifiers for an ENSO phase."""
    state: EnsoState
    temp_modifier: float
    rainfall_modifier: float
    drought_risk: float
    description: str = ""

    class Config:
        frozen = True


class CropProfile(BaseModel):
    """Agronomic requirements for a crop."""
    crop_id: str
    optimal_temp_min: float
    optimal_temp_max: float
    optimal_humidity_min: float
    optimal_humidity_max: float
    water_requirement_mm: float = Field(description="Water requirement in mm per season")
    growing_period_days: int
    soil_ph_min: float
    soil_ph_max: float

    class Config:
        frozen = True

    @property
    def daily_water_requirement_mm(self) -> float:
        return self.water_requirement_mm / 30.0


# ============================================================
# Statistics and patterns
# ============================================================

class SeriesStatistics(BaseModel):
    """Descriptive statistics for one weather variable."""
    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    std_dev: float = 0.0
    range: float = 0.0
    total: float = 0.0

    class Config:
        frozen = True


class WeatherAnomaly(BaseModel):
    """A single statistically unusual observation."""
    id: str
    category: str
    severity: str = Field(description="high or medium")
    description: str
    value: float
    expected_value: float
    deviation: float = Field(description="z-score of the value")
    timestamp: datetime
    impact: str = Field(description="minor, moderate or severe")

    class Config:
        frozen = True


class PatternTrends(BaseModel):
    """Trend and volatility figures for a pattern period."""
    temperature_trend: float = 0.0
    humidity_trend: float = 0.0
    precipitation_trend: float = 0.0
    temperature_correlation: float = 0.0
    volatility_temperature: float = 0.0
    volatility_humidity: float = 0.0
    volatility_precipitation: float = 0.0

    class Config:
        frozen = True


class HistoricalWeatherPattern(BaseModel):
    """Aggregate summary of observations over a season, month or year."""
    id: str
    location: str
    granularity: str = Field(description="season, month or year")
    period_label: str
    period_start: datetime
    period_end: datetime
    sample_count: int
    average_temperature: float
    min_temperature: float
    max_temperature: float
    total_precipitation: float
    average_humidity: float
    pattern_type: str
    anomalies: List[str] = Field(default_factory=list)
    trends: PatternTrends = Field(default_factory=PatternTrends)
    summary: str = ""

    class Config:
        frozen = True


# ============================================================
# Seasonal forecast (RBSWSA)
# ============================================================

class TemperatureForecast(BaseModel):
    average: float
    min: float
    max: float

    class Config:
        frozen = True


class RainfallForecast(BaseModel):
    total: float
    estimated_rainy_days: int

    class Config:
        frozen = True


class MonthlyForecast(BaseModel):
    """Rule-based forecast for one calendar month."""
    month: int = Field(ge=1, le=12)
    month_name: str
    temperature: TemperatureForecast
    rainfall: RainfallForecast
    humidity: float
    wind_speed: float
    condition_tags: List[str] = Field(default_factory=list)
    description: str = ""
    confidence: float = Field(ge=0.0, le=1.0)

    class Config:
        frozen = True


class SeasonalSummary(BaseModel):
    """Aggregate view across the forecast horizon."""
    average_temperature: float
    total_rainfall: float
    average_rainfall: float
    average_humidity: float
    temperature_trend: str
    rainfall_trend: str
    seasonal_type: str
    description: str

    class Config:
        frozen = True


class DroughtRisk(BaseModel):
    """Drought assessment for the forecast horizon."""
    overall_risk: float = Field(ge=0.0, le=1.0)
    risk_level: str = Field(description="low, medium or high")
    expected_rainfall: float
    forecast_rainfall: float
    rainfall_deficit: float
    enso_contribution: float
    recommendations: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class SeasonalForecast(BaseModel):
    """Full RBSWSA output for a location."""
    algorithm: str = "RBSWSA"
    location: str
    climate_zone: str
    enso_state: EnsoState
    start_date: Date
    horizon_months: int
    baseline_source: str = Field(description="climate_zone or historical")
    monthly_forecasts: List[MonthlyForecast] = Field(default_factory=list)
    seasonal_summary: SeasonalSummary
    drought_risk: DroughtRisk
    farming_recommendations: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


# ============================================================
# Agro-climatic prediction
# ============================================================

class SoilConditionSummary(BaseModel):
    """Soil state derived from the predicted moisture and temperature."""
    moisture_level: float
    temperature: float
    ph_level: float
    nutrient_status: str
    drainage: str
    description: str

    class Config:
        frozen = True


class AgroClimaticPrediction(BaseModel):
    """Per-date agro-climatic prediction for a location."""
    id: str
    date: Date
    location: str
    temperature: float
    humidity: float
    precipitation: float
    soil_moisture_estimate: float = Field(ge=0.0, le=100.0)
    evapotranspiration_estimate: float = Field(ge=0.0, le=10.0)
    recommended_crop: str
    crop_scores: Dict[str, float] = Field(default_factory=dict)
    irrigation_advice: str
    planting_advice: str
    harvesting_advice: str
    pest_risk: str
    disease_risk: str
    yield_prediction: float = Field(ge=0.0, le=100.0)
    weather_alerts: List[str] = Field(default_factory=list)
    soil_condition_summary: SoilConditionSummary
    climate_indicators: Dict[str, Union[float, str]] = Field(default_factory=dict)
    confidence: float = Field(ge=0.0, le=1.0)
    degraded: bool = Field(
        default=False,
        description="True when no matching historical pattern was available"
    )

    class Config:
        frozen = True


# ============================================================
# Climate analysis report
# ============================================================

class SeasonBreakdown(BaseModel):
    average_temperature: float
    total_precipitation: float
    average_humidity: float
    rainy_days: int
    data_points: int

    class Config:
        frozen = True


class TrendFigures(BaseModel):
    trend: float
    correlation: float
    volatility: float

    class Config:
        frozen = True


class ClimateIndicators(BaseModel):
    climate_type: str
    drought_index: float
    heat_stress_index: float
    comfort_index: float
    variability_index: float
    extremes_index: float

    class Config:
        frozen = True


class WeatherRecommendation(BaseModel):
    id: str
    category: str
    priority: str
    title: str
    description: str
    actions: List[str] = Field(default_factory=list)
    impact: str = ""

    class Config:
        frozen = True


class ClimateAnalysisReport(BaseModel):
    """Descriptive, trend and risk analysis of an observation window."""
    location: str
    start_date: datetime
    end_date: datetime
    data_points: int = 0
    basic_statistics: Dict[str, SeriesStatistics] = Field(default_factory=dict)
    seasonal_analysis: Dict[str, SeasonBreakdown] = Field(default_factory=dict)
    trend_analysis: Dict[str, TrendFigures] = Field(default_factory=dict)
    anomalies: List[WeatherAnomaly] = Field(default_factory=list)
    climate_indicators: Optional[ClimateIndicators] = None
    risk_assessment: Dict[str, str] = Field(default_factory=dict)
    recommendations: List[WeatherRecommendation] = Field(default_factory=list)

    class Config:
        frozen = True
