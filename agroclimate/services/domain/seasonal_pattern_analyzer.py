"""
Domain service: aggregate observations into historical weather patterns.

Observations are sorted by timestamp and partitioned by season (always),
and optionally by calendar month and by year. Each partition with enough
samples becomes a HistoricalWeatherPattern carrying averages, a pattern
type, anomaly notes, trend figures and a summary line.
"""
from collections import OrderedDict
from typing import Iterable, Optional, Sequence
from uuid import uuid4
import logging

from agroclimate.domain.models import (
    HistoricalWeatherPattern,
    Observation,
    PatternTrends,
)
from agroclimate.domain.reference_data import ClimateReferenceData
from agroclimate.services.domain.anomaly_detector import AnomalyDetector
from agroclimate.utils import statistics
from agroclimate.config import settings

logger = logging.getLogger(__name__)


GRANULARITIES = ("season", "month", "year")


def classify_pattern_type(average_temperature: float, total_precipitation: float) -> str:
    """Classify a period from its average temperature and total precipitation."""
    if average_temperature > 25:
        if total_precipitation > 100:
            return "hot_wet"
        if total_precipitation < 50:
            return "hot_dry"
    elif average_temperature < 15:
        if total_precipitation > 100:
            return "cool_wet"
        if total_precipitation < 50:
            return "cool_dry"
    return "moderate"


class SeasonalPatternAnalyzer:
    """
    Domain service converting a flat observation list into patterns.

    The month-to-season mapping comes from the injected reference data so
    that the analyzer and the predictor always agree on season labels.
    """

    def __init__(
        self,
        reference_data: Optional[ClimateReferenceData] = None,
        anomaly_detector: Optional[AnomalyDetector] = None,
        min_samples: Optional[int] = None,
        extreme_delta: Optional[float] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            reference_data: Season mapping source
            anomaly_detector: Detector used for the z-score anomaly notes
            min_samples: Partitions smaller than this are skipped
            extreme_delta: Degrees from the period mean flagged as extreme
        """
        self.reference_data = reference_data or ClimateReferenceData.default()
        self.anomaly_detector = anomaly_detector or AnomalyDetector()
        self.min_samples = min_samples if min_samples is not None else settings.min_pattern_samples
        self.extreme_delta = (
            extreme_delta if extreme_delta is not None else settings.coarse_temperature_anomaly_delta
        )

    def analyze(
        self,
        observations: Sequence[Observation],
        location: Optional[str] = None,
        granularities: Iterable[str] = ("season", "month"),
    ) -> list[HistoricalWeatherPattern]:
        """
        Build patterns for every requested granularity.

        Args:
            observations: Observations for one location, in any order
            location: Location label; defaults to the first observation's location
            granularities: Any of "season", "month", "year"; season is always included

        Returns:
            Patterns ordered by granularity, then by period
        """
        requested = set(granularities) | {"season"}
        unknown = requested - set(GRANULARITIES)
        if unknown:
            raise ValueError(f"Unknown pattern granularity: {sorted(unknown)}")

        if not observations:
            logger.info("No observations supplied, no patterns generated")
            return []

        ordered = sorted(observations, key=lambda o: o.timestamp)
        location = location or ordered[0].location

        patterns = []
        for granularity in GRANULARITIES:
            if granularity not in requested:
                continue
            for label, group in self._partition(ordered, granularity).items():
                if len(group) < self.min_samples:
                    logger.debug(
                        f"Skipping {granularity} '{label}': {len(group)} samples "
                        f"(need >= {self.min_samples})"
                    )
                    continue
                patterns.append(self._build_pattern(location, granularity, label, group))

        logger.info(f"Generated {len(patterns)} patterns from {len(ordered)} observations for {location}")
        return patterns

    def _partition(
        self,
        ordered: Sequence[Observation],
        granularity: str,
    ) -> "OrderedDict[str, list[Observation]]":
        if granularity == "season":
            keys = [(label, label) for label in self.reference_data.season_labels]
        elif granularity == "month":
            keys = [(m, self.reference_data.month_name(m)) for m in range(1, 13)]
        else:
            years = sorted({o.timestamp.year for o in ordered})
            keys = [(year, str(year)) for year in years]

        buckets = {key: [] for key, _ in keys}
        for observation in ordered:
            buckets[self._period_key(observation, granularity)].append(observation)

        partitions = OrderedDict()
        for key, label in keys:
            if buckets[key]:
                partitions[label] = buckets[key]
        return partitions

    def _period_key(self, observation: Observation, granularity: str):
        if granularity == "season":
            return self.reference_data.season_for_month(observation.timestamp.month)
        if granularity == "month":
            return observation.timestamp.month
        return observation.timestamp.year

    def _build_pattern(
        self,
        location: str,
        granularity: str,
        label: str,
        group: Sequence[Observation],
    ) -> HistoricalWeatherPattern:
        temperatures = [o.temperature for o in group]
        humidities = [o.humidity for o in group]
        precipitation = [o.precipitation_mm for o in group]

        average_temperature = statistics.mean(temperatures)
        min_temperature = min(temperatures)
        max_temperature = max(temperatures)
        total_precipitation = float(sum(precipitation))
        average_humidity = statistics.mean(humidities)

        anomalies = [
            f"{anomaly.description} on {anomaly.timestamp.date().isoformat()}"
            for anomaly in self.anomaly_detector.detect_temperature(group)
        ]
        # Coarse extreme check, independent of the z-score bands
        if max_temperature > average_temperature + self.extreme_delta:
            anomalies.append("extreme_high_temperature")
        if min_temperature < average_temperature - self.extreme_delta:
            anomalies.append("extreme_low_temperature")

        trends = PatternTrends(
            temperature_trend=statistics.linear_trend(temperatures),
            humidity_trend=statistics.linear_trend(humidities),
            precipitation_trend=statistics.linear_trend(precipitation),
            temperature_correlation=statistics.correlation(temperatures),
            volatility_temperature=statistics.volatility(temperatures),
            volatility_humidity=statistics.volatility(humidities),
            volatility_precipitation=statistics.volatility(precipitation),
        )

        summary = (
            f"{label}: Avg {average_temperature:.1f}°C "
            f"({min_temperature:.1f}-{max_temperature:.1f}°C), "
            f"Precip {total_precipitation:.1f}mm, Humidity {average_humidity:.1f}%"
        )

        return HistoricalWeatherPattern(
            id=f"{label.lower()}_{uuid4().hex}",
            location=location,
            granularity=granularity,
            period_label=label,
            period_start=group[0].timestamp,
            period_end=group[-1].timestamp,
            sample_count=len(group),
            average_temperature=average_temperature,
            min_temperature=min_temperature,
            max_temperature=max_temperature,
            total_precipitation=total_precipitation,
            average_humidity=average_humidity,
            pattern_type=classify_pattern_type(average_temperature, total_precipitation),
            anomalies=anomalies,
            trends=trends,
            summary=summary,
        )
