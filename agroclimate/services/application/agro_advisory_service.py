"""
Application service: Orchestration layer for agro-climatic advisory operations.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Union
import asyncio
import logging

from agroclimate.domain.models import (
    AgroClimaticPrediction,
    ClimateAnalysisReport,
    EnsoState,
    HistoricalWeatherPattern,
    Observation,
    SeasonalForecast,
)
from agroclimate.infrastructure.observation_client import ObservationClient
from agroclimate.infrastructure.alert_dispatcher import AlertDispatcher
from agroclimate.services.domain.seasonal_pattern_analyzer import SeasonalPatternAnalyzer
from agroclimate.services.domain.seasonal_forecaster import RuleBasedSeasonalForecaster
from agroclimate.services.domain.agro_climatic_predictor import (
    AgroClimaticPredictor,
    critical_alerts,
)
from agroclimate.services.domain.climate_analyzer import ClimateAnalyzer
from agroclimate.config import settings

logger = logging.getLogger(__name__)


class AgroAdvisoryService:
    """
    Application service for agro-climatic advisory operations.

    Orchestrates data fetching and domain execution.
    No business logic here, only coordination between the observation
    source, the domain services and the alert dispatcher.
    """

    def __init__(
        self,
        observation_client: ObservationClient,
        pattern_analyzer: SeasonalPatternAnalyzer,
        forecaster: RuleBasedSeasonalForecaster,
        predictor: AgroClimaticPredictor,
        climate_analyzer: ClimateAnalyzer,
        alert_dispatcher: AlertDispatcher,
        max_concurrency: Optional[int] = None,
        history_window_days: Optional[int] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            observation_client: Observation API client for data fetching
            pattern_analyzer: Builds historical patterns from observations
            forecaster: RBSWSA seasonal forecaster
            predictor: Per-date agro-climatic predictor
            climate_analyzer: Climate analysis report builder
            alert_dispatcher: Receives critical weather alerts
            max_concurrency: Locations processed at once in batch predictions
            history_window_days: Days of history fetched for pattern analysis
        """
        self.observation_client = observation_client
        self.pattern_analyzer = pattern_analyzer
        self.forecaster = forecaster
        self.predictor = predictor
        self.climate_analyzer = climate_analyzer
        self.alert_dispatcher = alert_dispatcher
        self.max_concurrency = max_concurrency or settings.max_concurrency
        self.history_window_days = history_window_days or settings.history_window_days

    async def _fetch_history(self, location: str, end: date) -> List[Observation]:
        start = end - timedelta(days=self.history_window_days)
        return await self.observation_client.get_observations(location, start, end)

    async def analyze_patterns(
        self,
        location: str,
        end_date: Optional[date] = None,
        granularities: Iterable[str] = ("season", "month"),
    ) -> List[HistoricalWeatherPattern]:
        """
        Fetch the observation history for a location and build patterns.

        Args:
            location: Location identifier
            end_date: Last day of the history window, defaults to today
            granularities: Pattern granularities to build

        Returns:
            Historical weather patterns; empty when there is no history
        """
        end_date = end_date or date.today()
        observations = await self._fetch_history(location, end_date)
        return self.pattern_analyzer.analyze(observations, location=location, granularities=granularities)

    async def get_seasonal_forecast(
        self,
        location: str,
        zone_id: Optional[str] = None,
        enso_state: Union[EnsoState, str, None] = None,
        horizon_months: Optional[int] = None,
        start_date: Optional[date] = None,
        use_history: bool = True,
    ) -> SeasonalForecast:
        """
        Generate an RBSWSA forecast, using observed patterns as the baseline when available.

        Args:
            location: Location identifier
            zone_id: Climate zone id, defaults to the configured zone
            enso_state: ENSO phase, defaults to the configured state
            horizon_months: Months to forecast, defaults to the configured horizon
            start_date: First forecast month, defaults to today
            use_history: Fetch observation history to replace zone baselines

        Returns:
            SeasonalForecast
        """
        start_date = start_date or date.today()
        patterns = []
        if use_history:
            patterns = await self.analyze_patterns(location, end_date=start_date)

        return self.forecaster.generate(
            zone_id=zone_id or settings.default_climate_zone,
            horizon_months=horizon_months if horizon_months is not None else settings.default_forecast_months,
            enso_state=enso_state or settings.default_enso_state,
            start_date=start_date,
            location=location,
            patterns=patterns,
        )

    async def get_prediction(
        self,
        location: str,
        target_date: Optional[date] = None,
        enso_state: Union[EnsoState, str, None] = None,
        today: Optional[date] = None,
    ) -> AgroClimaticPrediction:
        """
        Predict agro-climatic conditions and dispatch critical alerts.

        Args:
            location: Location identifier
            target_date: Date to predict, defaults to today
            enso_state: ENSO phase, defaults to the configured state
            today: Reference date for the lead time, defaults to the system date

        Returns:
            AgroClimaticPrediction
        """
        today = today or date.today()
        target_date = target_date or today

        patterns = await self.analyze_patterns(location, end_date=today)
        prediction = self.predictor.predict(
            location=location,
            target_date=target_date,
            patterns=patterns,
            enso_state=enso_state or settings.default_enso_state,
            days_ahead=max((target_date - today).days, 0),
        )

        critical = critical_alerts(prediction.weather_alerts)
        if critical:
            await self.alert_dispatcher.dispatch(location, critical)

        return prediction

    async def get_climate_report(
        self,
        location: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ClimateAnalysisReport:
        """
        Build a climate analysis report over an observation window.

        Args:
            location: Location identifier
            start_date: First day of the window, defaults to one history window before end_date
            end_date: Last day of the window, defaults to today

        Returns:
            ClimateAnalysisReport
        """
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=self.history_window_days)
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")

        observations = await self.observation_client.get_observations(location, start_date, end_date)
        return self.climate_analyzer.generate_report(
            location=location,
            observations=observations,
            start_date=datetime.combine(start_date, datetime.min.time()),
            end_date=datetime.combine(end_date, datetime.max.time()),
        )

    async def get_predictions_batch(
        self,
        locations: Sequence[str],
        target_date: Optional[date] = None,
        enso_state: Union[EnsoState, str, None] = None,
    ) -> List[AgroClimaticPrediction]:
        """
        Predict for several locations with bounded concurrency.

        Args:
            locations: Location identifiers
            target_date: Date to predict for every location
            enso_state: ENSO phase applied to every location

        Returns:
            Predictions in the same order as locations
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def predict_one(location: str) -> AgroClimaticPrediction:
            async with semaphore:
                return await self.get_prediction(location, target_date=target_date, enso_state=enso_state)

        logger.info(f"Batch prediction for {len(locations)} locations (concurrency={self.max_concurrency})")
        return list(await asyncio.gather(*(predict_one(location) for location in locations)))

    def analyze_observations(
        self,
        observations: Sequence[Observation],
        location: Optional[str] = None,
        granularities: Iterable[str] = ("season", "month"),
    ) -> List[HistoricalWeatherPattern]:
        """Build patterns from caller-supplied observations without fetching."""
        return self.pattern_analyzer.analyze(observations, location=location, granularities=granularities)

    def predict_from_observations(
        self,
        location: str,
        observations: Sequence[Observation],
        target_date: date,
        enso_state: Union[EnsoState, str, None] = None,
        days_ahead: int = 0,
    ) -> AgroClimaticPrediction:
        """Predict from caller-supplied observations without fetching or dispatching."""
        patterns = self.pattern_analyzer.analyze(observations, location=location)
        return self.predictor.predict(
            location=location,
            target_date=target_date,
            patterns=patterns,
            enso_state=enso_state or settings.default_enso_state,
            days_ahead=days_ahead,
        )
