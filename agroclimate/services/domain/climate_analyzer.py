"""
Domain service: comprehensive climate analysis of an observation window.

Builds a ClimateAnalysisReport with:
- Descriptive statistics per weather variable
- Seasonal breakdown
- Trend, correlation and volatility figures
- Temperature and precipitation anomalies
- Climate indicators (drought, heat stress, comfort, variability, extremes)
- Climate risk levels and prioritised recommendations
"""
from datetime import datetime
from typing import Optional, Sequence
from uuid import uuid4
import logging

from agroclimate.domain.models import (
    ClimateAnalysisReport,
    ClimateIndicators,
    Observation,
    SeasonBreakdown,
    TrendFigures,
    WeatherRecommendation,
)
from agroclimate.domain.reference_data import ClimateReferenceData
from agroclimate.services.domain.anomaly_detector import AnomalyDetector
from agroclimate.utils import statistics
from agroclimate.config import settings

logger = logging.getLogger(__name__)


RISK_MITIGATION_ACTIONS = {
    "drought": [
        "Implement water harvesting systems",
        "Use drought-resistant crop varieties",
        "Practice conservation tillage",
        "Install efficient irrigation systems",
    ],
    "flood": [
        "Improve drainage systems",
        "Plant flood-tolerant crops",
        "Elevate storage facilities",
        "Create flood barriers",
    ],
    "heat_wave": [
        "Provide shade structures",
        "Increase irrigation frequency",
        "Use heat-tolerant varieties",
        "Implement mulching",
    ],
    "frost": [
        "Use frost protection covers",
        "Plant frost-resistant varieties",
        "Implement wind machines",
        "Use heating systems",
    ],
    "wind_damage": [
        "Plant windbreaks",
        "Use staking systems",
        "Choose wind-resistant varieties",
        "Implement shelter belts",
    ],
}

DEFAULT_MITIGATION_ACTIONS = ["Monitor conditions closely", "Implement protective measures"]


def _risk_level(value: float, high: float, moderate: float, above: bool = True) -> str:
    if above:
        if value > high:
            return "high"
        if value > moderate:
            return "moderate"
        return "low"
    if value < high:
        return "high"
    if value < moderate:
        return "moderate"
    return "low"


class ClimateAnalyzer:
    """Domain service producing descriptive and risk analysis reports."""

    def __init__(
        self,
        reference_data: Optional[ClimateReferenceData] = None,
        anomaly_detector: Optional[AnomalyDetector] = None,
        expected_daily_precipitation_mm: Optional[float] = None,
    ):
        self.reference_data = reference_data or ClimateReferenceData.default()
        self.anomaly_detector = anomaly_detector or AnomalyDetector()
        self.expected_daily_precipitation_mm = (
            expected_daily_precipitation_mm
            if expected_daily_precipitation_mm is not None
            else settings.expected_daily_precipitation_mm
        )

    def generate_report(
        self,
        location: str,
        observations: Sequence[Observation],
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ClimateAnalysisReport:
        """
        Analyze an observation window.

        Args:
            location: Location label
            observations: Observations in any order
            start_date: Window start; defaults to the earliest observation
            end_date: Window end; defaults to the latest observation

        Returns:
            ClimateAnalysisReport; empty input gives a report with empty blocks
        """
        ordered = sorted(observations, key=lambda o: o.timestamp)

        if not ordered:
            logger.info(f"No observations for {location}, returning empty climate report")
            now = datetime.now()
            return ClimateAnalysisReport(
                location=location,
                start_date=start_date or now,
                end_date=end_date or now,
            )

        series = self._series(ordered)
        basic_statistics = {name: statistics.summarize(values) for name, values in series.items()}
        risk_assessment = self.assess_risks(series)

        report = ClimateAnalysisReport(
            location=location,
            start_date=start_date or ordered[0].timestamp,
            end_date=end_date or ordered[-1].timestamp,
            data_points=len(ordered),
            basic_statistics=basic_statistics,
            seasonal_analysis=self.seasonal_breakdown(ordered),
            trend_analysis={
                name: TrendFigures(
                    trend=statistics.linear_trend(values),
                    correlation=statistics.correlation(values),
                    volatility=statistics.volatility(values),
                )
                for name, values in series.items()
            },
            anomalies=(
                self.anomaly_detector.detect_temperature(ordered)
                + self.anomaly_detector.detect_precipitation(ordered)
                + self.anomaly_detector.detect_humidity(ordered)
                + self.anomaly_detector.detect_wind(ordered)
            ),
            climate_indicators=self.climate_indicators(series),
            risk_assessment=risk_assessment,
            recommendations=self.recommendations(series, risk_assessment),
        )

        logger.info(
            f"Climate report for {location}: {report.data_points} observations, "
            f"{len(report.anomalies)} anomalies, {len(report.recommendations)} recommendations"
        )
        return report

    @staticmethod
    def _series(ordered: Sequence[Observation]) -> dict[str, list[float]]:
        return {
            "temperature": [o.temperature for o in ordered],
            "precipitation": [o.precipitation_mm for o in ordered],
            "humidity": [o.humidity for o in ordered],
            "wind": [o.wind_speed_kmh for o in ordered],
        }

    def seasonal_breakdown(self, ordered: Sequence[Observation]) -> dict[str, SeasonBreakdown]:
        """Per-season averages and totals, for seasons with data."""
        groups = {label: [] for label in self.reference_data.season_labels}
        for observation in ordered:
            groups[self.reference_data.season_for_month(observation.timestamp.month)].append(observation)

        breakdown = {}
        for label, group in groups.items():
            if not group:
                continue
            breakdown[label] = SeasonBreakdown(
                average_temperature=statistics.mean([o.temperature for o in group]),
                total_precipitation=float(sum(o.precipitation_mm for o in group)),
                average_humidity=statistics.mean([o.humidity for o in group]),
                rainy_days=sum(1 for o in group if o.precipitation_mm > 0),
                data_points=len(group),
            )
        return breakdown

    def climate_indicators(self, series: dict[str, list[float]]) -> ClimateIndicators:
        temperatures = series["temperature"]
        humidities = series["humidity"]
        precipitation = series["precipitation"]

        average_temperature = statistics.mean(temperatures)
        average_humidity = statistics.mean(humidities)

        if average_temperature > 25:
            climate_type = "tropical" if average_humidity > 70 else "arid"
        elif average_temperature < 10:
            climate_type = "cold"
        else:
            climate_type = "temperate"

        expected = self.expected_daily_precipitation_mm
        drought_index = max(
            0.0, statistics.safe_ratio(expected - statistics.mean(precipitation), expected)
        )

        heat_stress = [
            (t + h * 0.1 - 30) / 10
            for t, h in zip(temperatures, humidities)
            if t + h * 0.1 > 30
        ]
        comfort = [
            ((1 - abs(t - 21.5) / 10) + (1 - abs(h - 55) / 30)) / 2
            for t, h in zip(temperatures, humidities)
        ]

        temperature_mean = statistics.mean(temperatures)
        temperature_std = statistics.stddev(temperatures)
        precipitation_mean = statistics.mean(precipitation)
        precipitation_std = statistics.stddev(precipitation)
        threshold = self.anomaly_detector.config.medium_z
        extremes = sum(
            1
            for t, p in zip(temperatures, precipitation)
            if abs(self.anomaly_detector.z_score(t, temperature_mean, temperature_std)) > threshold
            or abs(self.anomaly_detector.z_score(p, precipitation_mean, precipitation_std)) > threshold
        )

        return ClimateIndicators(
            climate_type=climate_type,
            drought_index=drought_index,
            heat_stress_index=statistics.mean(heat_stress),
            comfort_index=statistics.mean(comfort),
            variability_index=statistics.safe_ratio(temperature_std, temperature_mean),
            extremes_index=statistics.safe_ratio(extremes, len(temperatures)),
        )

    @staticmethod
    def assess_risks(series: dict[str, list[float]]) -> dict[str, str]:
        """Risk levels (high, moderate, low) for each climate hazard."""
        temperatures = series["temperature"]
        precipitation = series["precipitation"]
        wind = series["wind"]

        return {
            "drought": _risk_level(float(sum(precipitation)), 400, 600, above=False),
            "flood": _risk_level(max(precipitation, default=0.0), 50, 25),
            "heat_wave": _risk_level(max(temperatures, default=0.0), 35, 30),
            "frost": _risk_level(min(temperatures, default=0.0), 0, 5, above=False),
            "wind_damage": _risk_level(max(wind, default=0.0), 20, 15),
        }

    @staticmethod
    def recommendations(
        series: dict[str, list[float]],
        risk_assessment: dict[str, str],
    ) -> list[WeatherRecommendation]:
        recommendations = []

        if statistics.mean(series["temperature"]) > 28:
            recommendations.append(
                WeatherRecommendation(
                    id=f"temp_high_{uuid4().hex[:12]}",
                    category="temperature",
                    priority="high",
                    title="High Temperature Management",
                    description=(
                        "Average temperatures are above optimal for most crops. "
                        "Consider heat-tolerant varieties and irrigation."
                    ),
                    actions=[
                        "Plant heat-tolerant crop varieties",
                        "Increase irrigation frequency",
                        "Use mulching to reduce soil temperature",
                        "Consider shade structures for sensitive crops",
                    ],
                    impact="Prevents heat stress and maintains crop productivity",
                )
            )

        if sum(series["precipitation"]) < 500:
            recommendations.append(
                WeatherRecommendation(
                    id=f"precip_low_{uuid4().hex[:12]}",
                    category="water",
                    priority="high",
                    title="Water Conservation Required",
                    description=(
                        "Low precipitation levels detected. "
                        "Implement water conservation strategies."
                    ),
                    actions=[
                        "Implement drip irrigation systems",
                        "Use drought-resistant crop varieties",
                        "Practice water harvesting techniques",
                        "Monitor soil moisture levels closely",
                    ],
                    impact="Ensures water availability for crops during dry periods",
                )
            )

        for risk_type, level in risk_assessment.items():
            if level != "high":
                continue
            readable = risk_type.replace("_", " ")
            recommendations.append(
                WeatherRecommendation(
                    id=f"risk_{risk_type}_{uuid4().hex[:12]}",
                    category="risk_management",
                    priority="high",
                    title=f"{readable.title()} Risk Mitigation",
                    description=f"High risk of {readable} detected. Implement protective measures.",
                    actions=list(RISK_MITIGATION_ACTIONS.get(risk_type, DEFAULT_MITIGATION_ACTIONS)),
                    impact="Reduces potential damage from weather extremes",
                )
            )

        return recommendations
