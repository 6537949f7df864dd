"""
Domain service: statistical anomaly detection over weather series.

Flags values whose z-score crosses the configured bands:
- Symmetric detection for temperature, humidity, wind and generic series
- One-sided (high tail only) detection for precipitation
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence
from uuid import uuid4
import logging

from agroclimate.domain.models import Observation, WeatherAnomaly
from agroclimate.utils import statistics
from agroclimate.config import settings

logger = logging.getLogger(__name__)


@dataclass
class AnomalyConfig:
    """Configuration for anomaly classification."""

    medium_z: float = 2.0
    """Absolute z-score above which a value is flagged as medium"""

    high_z: float = 3.0
    """Absolute z-score above which a value is flagged as high"""


CATEGORY_UNITS = {
    "temperature": "°C",
    "humidity": "%",
    "precipitation": "mm",
    "wind": " km/h",
}


class AnomalyDetector:
    """
    Domain service for flagging statistically unusual observations.

    Every detect_* method computes the mean and population standard
    deviation of the series on demand unless they are supplied.
    """

    def __init__(self, config: Optional[AnomalyConfig] = None):
        self.config = config or AnomalyConfig(
            medium_z=settings.anomaly_medium_z,
            high_z=settings.anomaly_high_z,
        )

    @staticmethod
    def z_score(value: float, mean: float, std: float) -> float:
        """Z-score of a value; 0.0 when the standard deviation is zero."""
        if std == 0:
            return 0.0
        return (value - mean) / std

    def classify(self, z: float) -> Optional[str]:
        """
        Severity band for a z-score.

        Returns:
            "high", "medium" or None when the value is not anomalous
        """
        magnitude = abs(z)
        if magnitude > self.config.high_z:
            return "high"
        if magnitude > self.config.medium_z:
            return "medium"
        return None

    def impact(self, z: float) -> str:
        magnitude = abs(z)
        if magnitude > self.config.high_z:
            return "severe"
        if magnitude > self.config.medium_z:
            return "moderate"
        return "minor"

    def detect_series(
        self,
        values: Sequence[float],
        timestamps: Sequence[datetime],
        category: str,
        mean: Optional[float] = None,
        std: Optional[float] = None,
        one_sided: bool = False,
    ) -> list[WeatherAnomaly]:
        """
        Detect anomalies in a numeric series.

        Args:
            values: Series values
            timestamps: Timestamp for each value
            category: Anomaly category label
            mean: Precomputed series mean
            std: Precomputed population standard deviation
            one_sided: Only flag values above the mean

        Returns:
            List of anomalies in series order
        """
        if len(values) != len(timestamps):
            raise ValueError("values and timestamps must have the same length")
        if not values:
            return []

        mean = statistics.mean(values) if mean is None else mean
        std = statistics.stddev(values) if std is None else std

        anomalies = []
        for value, timestamp in zip(values, timestamps):
            z = self.z_score(value, mean, std)
            if one_sided and z <= 0:
                continue
            severity = self.classify(z)
            if severity is None:
                continue
            anomalies.append(
                WeatherAnomaly(
                    id=f"{category}_{uuid4().hex[:12]}",
                    category=category,
                    severity=severity,
                    description=self._describe(category, value, mean, z),
                    value=value,
                    expected_value=mean,
                    deviation=z,
                    timestamp=timestamp,
                    impact=self.impact(z),
                )
            )

        if anomalies:
            logger.debug(f"Flagged {len(anomalies)} {category} anomalies in {len(values)} values")
        return anomalies

    def detect_temperature(self, observations: Sequence[Observation]) -> list[WeatherAnomaly]:
        return self._detect(observations, "temperature", lambda o: o.temperature)

    def detect_humidity(self, observations: Sequence[Observation]) -> list[WeatherAnomaly]:
        return self._detect(observations, "humidity", lambda o: o.humidity)

    def detect_wind(self, observations: Sequence[Observation]) -> list[WeatherAnomaly]:
        return self._detect(observations, "wind", lambda o: o.wind_speed_kmh)

    def detect_precipitation(self, observations: Sequence[Observation]) -> list[WeatherAnomaly]:
        """Flag rainfall events above mean + medium_z * std; dry spells are never flagged."""
        return self._detect(observations, "precipitation", lambda o: o.precipitation_mm, one_sided=True)

    def _detect(
        self,
        observations: Sequence[Observation],
        category: str,
        accessor: Callable[[Observation], float],
        one_sided: bool = False,
    ) -> list[WeatherAnomaly]:
        ordered = sorted(observations, key=lambda o: o.timestamp)
        return self.detect_series(
            values=[accessor(o) for o in ordered],
            timestamps=[o.timestamp for o in ordered],
            category=category,
            one_sided=one_sided,
        )

    @staticmethod
    def _describe(category: str, value: float, mean: float, z: float) -> str:
        unit = CATEGORY_UNITS.get(category, "")
        if category == "precipitation":
            return f"Extreme rainfall event: {value:.1f}{unit} (expected {mean:.1f}{unit})"
        direction = "high" if z > 0 else "low"
        return f"Unusually {direction} {category}: {value:.1f}{unit} (expected {mean:.1f}{unit})"
