"""
Domain service: per-date agro-climatic prediction.

Combines a pattern-informed baseline with the seasonal rule and ENSO
adjustments, then scores crops and derives yield, pest and disease risk,
advice strings and weather alerts for a single location and date.
"""
from datetime import date
from typing import Optional, Sequence, Union
from uuid import uuid4
import logging

from agroclimate.domain.models import (
    AgroClimaticPrediction,
    CropProfile,
    EnsoState,
    HistoricalWeatherPattern,
    SoilConditionSummary,
)
from agroclimate.domain.reference_data import ClimateReferenceData
from agroclimate.utils import statistics
from agroclimate.utils.jitter import bounded_noise, seeded_rng
from agroclimate.config import settings

logger = logging.getLogger(__name__)


DEFAULT_BASELINE = (22.0, 60.0, 0.0)

TEMPERATURE_RANGE = (5.0, 45.0)
HUMIDITY_RANGE = (10.0, 100.0)
PRECIPITATION_RANGE = (0.0, 50.0)

HISTORICAL_CONFIDENCE = 0.85
DEGRADED_CONFIDENCE = 0.5

CRITICAL_ALERT_KEYWORDS = ("warning", "frost", "drought")


def critical_alerts(alerts: Sequence[str]) -> list[str]:
    """Select the alerts eligible for critical dispatch (warning, frost or drought)."""
    return [
        alert for alert in alerts
        if any(keyword in alert.lower() for keyword in CRITICAL_ALERT_KEYWORDS)
    ]


def trend_label(slope: float, tolerance: float = 0.1) -> str:
    if slope > tolerance:
        return "Increasing"
    if slope < -tolerance:
        return "Decreasing"
    return "Stable"


class AgroClimaticPredictor:
    """
    Domain service producing an AgroClimaticPrediction.

    The predictor is pure: identical arguments always give an identical
    prediction apart from the generated id.
    """

    def __init__(
        self,
        reference_data: Optional[ClimateReferenceData] = None,
        expected_daily_precipitation_mm: Optional[float] = None,
    ):
        """
        Initialize the predictor.

        Args:
            reference_data: Seasonal rules, ENSO effects, crop profiles and season mapping
            expected_daily_precipitation_mm: Baseline for the drought index
        """
        self.reference_data = reference_data or ClimateReferenceData.default()
        self.expected_daily_precipitation_mm = (
            expected_daily_precipitation_mm
            if expected_daily_precipitation_mm is not None
            else settings.expected_daily_precipitation_mm
        )

    def predict(
        self,
        location: str,
        target_date: date,
        patterns: Optional[Sequence[HistoricalWeatherPattern]] = None,
        enso_state: Union[EnsoState, str, None] = None,
        days_ahead: int = 0,
    ) -> AgroClimaticPrediction:
        """
        Predict agro-climatic conditions for a location and date.

        Args:
            location: Location label, also part of the noise seed
            target_date: Date being predicted
            patterns: Historical patterns; the season pattern for the target date is the baseline
            enso_state: ENSO phase; unknown values fall back to neutral
            days_ahead: Lead time in days, used to extrapolate the baseline trend

        Returns:
            AgroClimaticPrediction; degraded is True when no season pattern matched
        """
        season = self.reference_data.season_for_month(target_date.month)
        baseline_pattern = self._find_season_pattern(patterns or [], season)
        rule = self.reference_data.seasonal_rule(target_date.month)
        state = self.reference_data.parse_enso_state(enso_state)
        enso = self.reference_data.enso_effect(state)

        if baseline_pattern is not None:
            horizon = days_ahead / 30
            base_temperature = (
                baseline_pattern.average_temperature
                + baseline_pattern.trends.temperature_trend * horizon
            )
            base_humidity = (
                baseline_pattern.average_humidity
                + baseline_pattern.trends.humidity_trend * horizon
            )
            base_precipitation = max(
                0.0,
                baseline_pattern.total_precipitation / 30
                + baseline_pattern.trends.precipitation_trend * horizon,
            )
            degraded = False
        else:
            logger.warning(
                f"No '{season}' pattern for {location}, using default baseline "
                f"(degraded confidence)"
            )
            base_temperature, base_humidity, base_precipitation = DEFAULT_BASELINE
            degraded = True

        rng = seeded_rng(location, target_date.isoformat(), days_ahead)
        temperature = statistics.clamp(
            base_temperature
            + rule.temp_modifier * 5
            + enso.temp_modifier * 3
            + bounded_noise(rng, -3.0, 3.0),
            *TEMPERATURE_RANGE,
        )
        humidity = statistics.clamp(
            base_humidity
            + (rule.humidity_modifier - 1) * 20
            + bounded_noise(rng, -10.0, 10.0),
            *HUMIDITY_RANGE,
        )
        precipitation = statistics.clamp(
            base_precipitation * rule.rainfall_modifier * (1 + enso.rainfall_modifier)
            + bounded_noise(rng, 0.0, 5.0),
            *PRECIPITATION_RANGE,
        )

        soil_moisture = self.estimate_soil_moisture(precipitation, humidity)
        evapotranspiration = self.estimate_evapotranspiration(temperature, humidity)

        crop_scores = self.score_crops(temperature, humidity, precipitation)
        recommended = self.select_crop(crop_scores)
        crop = self.reference_data.crop_profile(recommended)

        alerts = self.generate_weather_alerts(temperature, humidity, precipitation)

        confidence = HISTORICAL_CONFIDENCE if not degraded else DEGRADED_CONFIDENCE
        confidence = statistics.clamp(confidence - min(max(days_ahead, 0), 60) * 0.005, 0.0, 1.0)

        indicators = {
            "heat_index": temperature + humidity * 0.1,
            "drought_index": self.drought_index(precipitation),
            "season": season,
            "baseline_source": "default" if degraded else "historical",
            "baseline_temperature": base_temperature,
            "baseline_humidity": base_humidity,
            "baseline_precipitation": base_precipitation,
        }
        if baseline_pattern is not None:
            indicators["temperature_trend"] = trend_label(baseline_pattern.trends.temperature_trend)
            indicators["humidity_trend"] = trend_label(baseline_pattern.trends.humidity_trend)
            indicators["precipitation_trend"] = trend_label(baseline_pattern.trends.precipitation_trend)

        prediction = AgroClimaticPrediction(
            id=f"prediction_{uuid4().hex}",
            date=target_date,
            location=location,
            temperature=temperature,
            humidity=humidity,
            precipitation=precipitation,
            soil_moisture_estimate=soil_moisture,
            evapotranspiration_estimate=evapotranspiration,
            recommended_crop=crop.crop_id,
            crop_scores=crop_scores,
            irrigation_advice=self.irrigation_advice(soil_moisture, precipitation),
            planting_advice=self.planting_advice(crop, temperature, precipitation),
            harvesting_advice=self.harvesting_advice(temperature, precipitation),
            pest_risk=self.assess_pest_risk(temperature, humidity),
            disease_risk=self.assess_disease_risk(humidity, precipitation),
            yield_prediction=self.predict_yield(crop, temperature, humidity, precipitation),
            weather_alerts=alerts,
            soil_condition_summary=self.soil_conditions(soil_moisture, temperature),
            climate_indicators=indicators,
            confidence=confidence,
            degraded=degraded,
        )

        logger.info(
            f"Prediction for {location} on {target_date}: {temperature:.1f}°C, "
            f"{humidity:.0f}%, {precipitation:.1f}mm, crop={crop.crop_id}, "
            f"alerts={len(alerts)}"
        )
        return prediction

    @staticmethod
    def _find_season_pattern(
        patterns: Sequence[HistoricalWeatherPattern],
        season: str,
    ) -> Optional[HistoricalWeatherPattern]:
        for pattern in patterns:
            if pattern.granularity == "season" and pattern.period_label == season:
                return pattern
        return None

    # ============================================================
    # Estimates
    # ============================================================

    @staticmethod
    def estimate_soil_moisture(precipitation: float, humidity: float) -> float:
        return statistics.clamp(precipitation * 2 + humidity * 0.3, 0.0, 100.0)

    @staticmethod
    def estimate_evapotranspiration(temperature: float, humidity: float) -> float:
        return statistics.clamp(temperature * 0.5 - humidity * 0.2, 0.0, 10.0)

    def drought_index(self, precipitation: float) -> float:
        expected = self.expected_daily_precipitation_mm
        return max(0.0, statistics.safe_ratio(expected - precipitation, expected))

    # ============================================================
    # Crops and yield
    # ============================================================

    @staticmethod
    def score_crop(crop: CropProfile, temperature: float, humidity: float, precipitation: float) -> float:
        """Additive suitability score; the maximum is 7."""
        score = 0.0
        if crop.optimal_temp_min <= temperature <= crop.optimal_temp_max:
            score += 3
        else:
            score += 1
        if crop.optimal_humidity_min <= humidity <= crop.optimal_humidity_max:
            score += 2
        else:
            score += 0.5
        if precipitation >= crop.daily_water_requirement_mm:
            score += 2
        else:
            score += 0.5
        return score

    def score_crops(self, temperature: float, humidity: float, precipitation: float) -> dict[str, float]:
        """Score every crop profile, in table order."""
        return {
            crop_id: self.score_crop(crop, temperature, humidity, precipitation)
            for crop_id, crop in self.reference_data.crop_profiles.items()
        }

    @staticmethod
    def select_crop(crop_scores: dict[str, float]) -> str:
        """First crop with the strictly highest score."""
        best_crop = None
        best_score = float("-inf")
        for crop_id, score in crop_scores.items():
            if score > best_score:
                best_crop, best_score = crop_id, score
        return best_crop

    @staticmethod
    def predict_yield(crop: CropProfile, temperature: float, humidity: float, precipitation: float) -> float:
        """Yield potential in [0, 100] starting from a base of 70."""
        value = 70.0
        if crop.optimal_temp_min <= temperature <= crop.optimal_temp_max:
            value += 20
        else:
            value -= 15
        if crop.optimal_humidity_min <= humidity <= crop.optimal_humidity_max:
            value += 10
        else:
            value -= 10
        if precipitation >= crop.daily_water_requirement_mm:
            value += 15
        else:
            value -= 20
        return statistics.clamp(value, 0.0, 100.0)

    # ============================================================
    # Risk
    # ============================================================

    @staticmethod
    def assess_pest_risk(temperature: float, humidity: float) -> str:
        if temperature > 28 and humidity > 75:
            return "high"
        if temperature > 25 and humidity > 65:
            return "medium"
        return "low"

    @staticmethod
    def assess_disease_risk(humidity: float, precipitation: float) -> str:
        if humidity > 80 and precipitation > 5:
            return "high"
        if humidity > 70 and precipitation > 3:
            return "medium"
        return "low"

    # ============================================================
    # Advice
    # ============================================================

    @staticmethod
    def irrigation_advice(soil_moisture: float, precipitation: float) -> str:
        if soil_moisture < 30:
            return "Immediate irrigation required - soil moisture critically low"
        if soil_moisture < 50:
            return "Irrigation recommended within 24 hours"
        if precipitation > 5:
            return "No irrigation needed - sufficient rainfall expected"
        return "Monitor soil moisture - irrigation may be needed soon"

    @staticmethod
    def planting_advice(crop: CropProfile, temperature: float, precipitation: float) -> str:
        if crop.optimal_temp_min <= temperature <= crop.optimal_temp_max and precipitation > 2:
            return f"Optimal conditions for planting {crop.crop_id}"
        if temperature < crop.optimal_temp_min:
            return f"Wait for warmer temperatures before planting {crop.crop_id}"
        if precipitation < 1:
            return f"Ensure adequate irrigation before planting {crop.crop_id}"
        return f"Conditions are suitable for planting {crop.crop_id} with proper preparation"

    @staticmethod
    def harvesting_advice(temperature: float, precipitation: float) -> str:
        if precipitation > 10:
            return "Delay harvesting due to expected heavy rainfall"
        if temperature > 30:
            return "Harvest early morning to avoid heat stress"
        return "Good conditions for harvesting"

    @staticmethod
    def soil_conditions(soil_moisture: float, temperature: float) -> SoilConditionSummary:
        nutrient_status = "good" if soil_moisture > 50 else "poor"
        drainage = "poor" if soil_moisture > 80 else "good"
        return SoilConditionSummary(
            moisture_level=soil_moisture,
            temperature=temperature,
            ph_level=6.5,
            nutrient_status=nutrient_status,
            drainage=drainage,
            description=(
                f"Soil moisture {soil_moisture:.0f}%, soil temperature {temperature:.1f}°C, "
                f"{nutrient_status} nutrient status, {drainage} drainage"
            ),
        )

    # ============================================================
    # Alerts
    # ============================================================

    @staticmethod
    def generate_weather_alerts(temperature: float, humidity: float, precipitation: float) -> list[str]:
        alerts = []
        if temperature > 35:
            alerts.append("High temperature warning")
        if temperature < 5:
            alerts.append("Frost warning")
        if humidity > 85:
            alerts.append("High humidity - disease risk")
        if precipitation > 20:
            alerts.append("Heavy rainfall expected")
        if precipitation < 1 and temperature > 25:
            alerts.append("Drought conditions")
        return alerts
