"""
Domain service: Rule-Based Seasonal Weather Simulation Algorithm (RBSWSA).

Produces a deterministic, explainable multi-month forecast for a climate
zone by applying monthly seasonal rules and ENSO modifiers to a zone (or
observed) baseline, then derives:
- A seasonal summary with trend labels
- A drought risk score and band
- An ordered, capped list of farming recommendations

Bounded noise is drawn from a generator seeded by the call inputs, so
identical inputs always give identical forecasts.
"""
from datetime import date
from typing import Optional, Sequence, Union
import logging

from agroclimate.domain.models import (
    ClimateZone,
    DroughtRisk,
    EnsoEffect,
    EnsoState,
    HistoricalWeatherPattern,
    MonthlyForecast,
    RainfallForecast,
    SeasonalForecast,
    SeasonalSummary,
    TemperatureForecast,
)
from agroclimate.domain.reference_data import ClimateReferenceData
from agroclimate.utils import statistics
from agroclimate.utils.jitter import bounded_noise, seeded_rng

logger = logging.getLogger(__name__)


MAX_RECOMMENDATIONS = 12

HIGH_DROUGHT_THRESHOLD = 0.5
MEDIUM_DROUGHT_THRESHOLD = 0.2

DROUGHT_RECOMMENDATIONS = {
    "high": (
        "High drought risk - implement emergency water conservation",
        "Focus on drought-tolerant crops only",
        "Prepare alternative water sources",
        "Reduce planting area to conserve water",
    ),
    "medium": (
        "Moderate drought risk - prepare water conservation measures",
        "Plant drought-resistant crop varieties",
        "Implement efficient irrigation systems",
        "Monitor soil moisture regularly",
    ),
    "low": (
        "Low drought risk - normal farming practices",
        "Maintain regular irrigation schedule",
        "Monitor weather conditions",
    ),
}


def drought_band(composite: float) -> str:
    """Map a composite drought score to its risk band."""
    if composite >= HIGH_DROUGHT_THRESHOLD:
        return "high"
    if composite >= MEDIUM_DROUGHT_THRESHOLD:
        return "medium"
    return "low"


def condition_tags(temperature: float, rainfall: float, humidity: float, wind_speed: float) -> list[str]:
    """Fixed-threshold condition tags for a forecast month."""
    tags = []

    if temperature > 30:
        tags.append("Hot")
    elif temperature < 15:
        tags.append("Cool")
    else:
        tags.append("Moderate")

    if rainfall > 100:
        tags.append("Wet")
    elif rainfall < 20:
        tags.append("Dry")
    else:
        tags.append("Normal")

    if humidity > 80:
        tags.append("Humid")
    elif humidity < 40:
        tags.append("Arid")

    if wind_speed > 20:
        tags.append("Windy")

    return tags


class RuleBasedSeasonalForecaster:
    """
    Table-driven monthly forecaster.

    No training or adaptive state: the output depends only on the
    reference tables and the arguments to generate().
    """

    def __init__(self, reference_data: Optional[ClimateReferenceData] = None):
        self.reference_data = reference_data or ClimateReferenceData.default()

    def generate(
        self,
        zone_id: str,
        horizon_months: int,
        enso_state: Union[EnsoState, str, None],
        start_date: date,
        location: str = "",
        patterns: Optional[Sequence[HistoricalWeatherPattern]] = None,
    ) -> SeasonalForecast:
        """
        Generate a seasonal forecast.

        Args:
            zone_id: Climate zone id; unknown ids fall back to the default zone
            horizon_months: Number of months to forecast; <= 0 gives an empty forecast
            enso_state: ENSO phase; unknown values fall back to neutral
            start_date: First forecast month is the month of this date
            location: Location label, also part of the noise seed
            patterns: Observed patterns used to replace the zone temperature baseline

        Returns:
            SeasonalForecast with monthly forecasts, summary, drought risk and recommendations
        """
        zone = self.reference_data.climate_zone(zone_id)
        state = self.reference_data.parse_enso_state(enso_state)
        enso = self.reference_data.enso_effect(state)
        patterns = list(patterns or [])

        logger.info(
            f"Generating {horizon_months}-month RBSWSA forecast for "
            f"{location or zone.zone_id} (zone={zone.zone_id}, enso={state.value})"
        )

        monthly = []
        used_history = False
        for index in range(max(horizon_months, 0)):
            month = (start_date.month - 1 + index) % 12 + 1
            base_temperature, from_history = self._base_temperature(zone, month, patterns)
            used_history = used_history or from_history
            monthly.append(
                self._forecast_month(
                    zone=zone,
                    enso=enso,
                    month=month,
                    index=index,
                    base_temperature=base_temperature,
                    seed_parts=(location, zone.zone_id, start_date.isoformat(), index, month),
                )
            )

        summary = self.summarize(monthly, enso)
        drought = self.calculate_drought_risk(zone, monthly, enso, horizon_months)
        recommendations = self.generate_farming_recommendations(
            zone=zone,
            current_month=start_date.month,
            summary=summary,
            drought=drought,
        )

        return SeasonalForecast(
            location=location or zone.zone_id,
            climate_zone=zone.zone_id,
            enso_state=state,
            start_date=start_date,
            horizon_months=max(horizon_months, 0),
            baseline_source="historical" if used_history else "climate_zone",
            monthly_forecasts=monthly,
            seasonal_summary=summary,
            drought_risk=drought,
            farming_recommendations=recommendations,
        )

    def _base_temperature(
        self,
        zone: ClimateZone,
        month: int,
        patterns: Sequence[HistoricalWeatherPattern],
    ) -> tuple[float, bool]:
        """Observed month pattern, then season pattern, then zone average."""
        month_label = self.reference_data.month_name(month)
        season_label = self.reference_data.season_for_month(month)

        for granularity, label in (("month", month_label), ("season", season_label)):
            for pattern in patterns:
                if pattern.granularity == granularity and pattern.period_label == label:
                    return pattern.average_temperature, True
        return zone.avg_temp, False

    def _forecast_month(
        self,
        zone: ClimateZone,
        enso: EnsoEffect,
        month: int,
        index: int,
        base_temperature: float,
        seed_parts: tuple,
    ) -> MonthlyForecast:
        rule = self.reference_data.seasonal_rule(month)
        rng = seeded_rng(*seed_parts)
        base_rainfall = zone.annual_rainfall_mm / 12

        temperature = (
            base_temperature
            + rule.temp_modifier * 5
            + enso.temp_modifier * 3
            + bounded_noise(rng, -1.0, 1.0)
        )
        rainfall = max(
            0.0,
            base_rainfall
            * rule.rainfall_modifier
            * (1 + enso.rainfall_modifier)
            * bounded_noise(rng, 0.8, 1.2),
        )
        humidity = statistics.clamp(
            60 + (rule.humidity_modifier - 1) * 20 + bounded_noise(rng, -5.0, 5.0), 0.0, 100.0
        )
        wind_speed = max(0.0, 10 + (rule.wind_modifier - 1) * 5 + bounded_noise(rng, -1.5, 1.5))

        enso_magnitude = abs(enso.temp_modifier) + abs(enso.rainfall_modifier)
        confidence = statistics.clamp(
            ((0.9 - 0.05 * index) + (1 - 0.2 * enso_magnitude)) / 2, 0.0, 1.0
        )

        return MonthlyForecast(
            month=month,
            month_name=self.reference_data.month_name(month),
            temperature=TemperatureForecast(
                average=temperature,
                min=temperature - 5,
                max=temperature + 5,
            ),
            rainfall=RainfallForecast(
                total=rainfall,
                estimated_rainy_days=int(rainfall / 10 + 0.5),
            ),
            humidity=humidity,
            wind_speed=wind_speed,
            condition_tags=condition_tags(temperature, rainfall, humidity, wind_speed),
            description=rule.description,
            confidence=confidence,
        )

    def summarize(self, monthly: Sequence[MonthlyForecast], enso: EnsoEffect) -> SeasonalSummary:
        """Aggregate the monthly forecasts into a seasonal summary."""
        temperatures = [m.temperature.average for m in monthly]
        rainfall = [m.rainfall.total for m in monthly]
        humidity = [m.humidity for m in monthly]

        average_temperature = statistics.mean(temperatures)
        total_rainfall = float(sum(rainfall))

        if total_rainfall > 300:
            seasonal_type = "Wet Season"
        elif total_rainfall < 100:
            seasonal_type = "Dry Season"
        else:
            seasonal_type = "Transition Season"

        if average_temperature > 25:
            temperature_word = "warm"
        elif average_temperature < 20:
            temperature_word = "cool"
        else:
            temperature_word = "moderate"

        if total_rainfall > 300:
            rainfall_word = "wet"
        elif total_rainfall < 100:
            rainfall_word = "dry"
        else:
            rainfall_word = "normal"

        return SeasonalSummary(
            average_temperature=average_temperature,
            total_rainfall=total_rainfall,
            average_rainfall=statistics.mean(rainfall),
            average_humidity=statistics.mean(humidity),
            temperature_trend=self._temperature_trend(temperatures),
            rainfall_trend=self._rainfall_trend(rainfall),
            seasonal_type=seasonal_type,
            description=(
                f"Expecting {temperature_word} temperatures with {rainfall_word} "
                f"rainfall conditions. {enso.description}"
            ),
        )

    @staticmethod
    def _temperature_trend(temperatures: Sequence[float]) -> str:
        if len(temperatures) < 2:
            return "Stable"
        change = temperatures[-1] - temperatures[0]
        if change > 2:
            return "Increasing"
        if change < -2:
            return "Decreasing"
        return "Stable"

    @staticmethod
    def _rainfall_trend(rainfall: Sequence[float]) -> str:
        if len(rainfall) < 2:
            return "Stable"
        first, last = rainfall[0], rainfall[-1]
        if last > first * 1.5:
            return "Increasing"
        if last < first * 0.5:
            return "Decreasing"
        return "Stable"

    def calculate_drought_risk(
        self,
        zone: ClimateZone,
        monthly: Sequence[MonthlyForecast],
        enso: EnsoEffect,
        horizon_months: int,
    ) -> DroughtRisk:
        """
        Score drought risk from the rainfall deficit and the ENSO contribution.

        The deficit only adds risk (a surplus counts as zero), so lowering
        forecast rainfall can never lower the band.
        """
        expected = zone.annual_rainfall_mm * max(horizon_months, 0) / 12
        forecast = float(sum(m.rainfall.total for m in monthly))
        deficit = statistics.safe_ratio(expected - forecast, expected)

        composite = statistics.clamp(max(deficit, 0.0) + enso.drought_risk, 0.0, 1.0)
        band = drought_band(composite)

        logger.debug(
            f"Drought risk for {zone.zone_id}: expected={expected:.1f}mm, "
            f"forecast={forecast:.1f}mm, composite={composite:.2f} ({band})"
        )

        return DroughtRisk(
            overall_risk=composite,
            risk_level=band,
            expected_rainfall=expected,
            forecast_rainfall=forecast,
            rainfall_deficit=deficit,
            enso_contribution=enso.drought_risk,
            recommendations=list(DROUGHT_RECOMMENDATIONS[band]),
        )

    def generate_farming_recommendations(
        self,
        zone: ClimateZone,
        current_month: int,
        summary: SeasonalSummary,
        drought: DroughtRisk,
    ) -> list[str]:
        """
        Assemble the ordered farming recommendation list.

        Order: crops, planting window, frost, drought, temperature,
        rainfall, soil. The list is capped at MAX_RECOMMENDATIONS.
        """
        recommendations = []
        next_month = current_month % 12 + 1

        if zone.suitable_crops:
            recommendations.append(
                f"Recommended crops for your zone: {', '.join(zone.suitable_crops[:3])}"
            )

        if current_month in zone.optimal_planting_months:
            recommendations.append("OPTIMAL PLANTING WINDOW: Start planting now for best yields")
        elif next_month in zone.optimal_planting_months:
            recommendations.append("Prepare fields now - planting window opens next month")

        if current_month in zone.frost_risk_months or next_month in zone.frost_risk_months:
            recommendations.append(
                "FROST RISK: Protect sensitive crops, delay planting frost-sensitive varieties"
            )

        if drought.risk_level == "high":
            recommendations.extend([
                "HIGH DROUGHT RISK: Plant drought-tolerant crops (sorghum, millet, sunflower)",
                "Implement water conservation - mulching is critical",
                "Consider drip irrigation or water harvesting",
                "Reduce planting density to conserve moisture",
            ])
        elif drought.risk_level == "medium":
            recommendations.extend([
                "Moderate drought risk: Prepare water conservation measures",
                "Mix drought-resistant and normal crop varieties",
            ])

        if summary.average_temperature > 28:
            recommendations.extend([
                "HIGH TEMPERATURES: Water early morning (before 8am) or evening (after 5pm)",
                "Apply mulch (10-15cm deep) to cool soil and retain moisture",
                "Monitor crops for heat stress - wilting, leaf curling",
            ])
        elif summary.average_temperature < 18 and zone.frost_risk_months:
            recommendations.append(
                "Cool temperatures: Plant cool-season crops (wheat, barley, potatoes)"
            )

        if summary.total_rainfall > 400:
            recommendations.extend([
                "HIGH RAINFALL EXPECTED: Ensure proper field drainage",
                "Use raised beds or ridges for planting",
                "Monitor for waterlogging and soil erosion",
                "Delay fertilizer application until after heavy rains",
            ])
        elif summary.total_rainfall < 200:
            recommendations.append(
                "Low rainfall: Irrigate regularly, target 25-30mm per week for most crops"
            )

        soil_type = zone.soil_type.lower()
        if "sand" in soil_type:
            recommendations.append(
                "Sandy soils: Increase organic matter, fertilize more frequently in smaller doses"
            )
        elif "loam" in soil_type:
            recommendations.append(
                "Loamy soils: Ideal for most crops, maintain organic matter levels"
            )

        return recommendations[:MAX_RECOMMENDATIONS]
