"""
Unit tests for the agro advisory application service.

Tests cover:
- History fetching window
- Forecasts with and without observed baselines
- Prediction and critical alert dispatch
- Climate report window validation
- Bounded batch concurrency
"""
import asyncio
import pytest
from datetime import date, datetime, timedelta

from agroclimate.services.application.agro_advisory_service import AgroAdvisoryService


@pytest.fixture
def advisory_service(
    mock_observation_client,
    pattern_analyzer,
    forecaster,
    predictor,
    climate_analyzer,
    mock_alert_dispatcher,
) -> AgroAdvisoryService:
    return AgroAdvisoryService(
        observation_client=mock_observation_client,
        pattern_analyzer=pattern_analyzer,
        forecaster=forecaster,
        predictor=predictor,
        climate_analyzer=climate_analyzer,
        alert_dispatcher=mock_alert_dispatcher,
        max_concurrency=2,
        history_window_days=365,
    )


# ============================================================
# Pattern Tests
# ============================================================

class TestAnalyzePatterns:
    """Tests for pattern analysis over fetched history."""

    @pytest.mark.asyncio
    async def test_fetches_history_window(self, advisory_service, mock_observation_client):
        patterns = await advisory_service.analyze_patterns("harare", end_date=date(2024, 1, 1))

        mock_observation_client.get_observations.assert_awaited_once_with(
            "harare", date(2023, 1, 1), date(2024, 1, 1)
        )
        assert {p.granularity for p in patterns} == {"season", "month"}

    @pytest.mark.asyncio
    async def test_empty_history_gives_no_patterns(self, advisory_service, mock_observation_client):
        mock_observation_client.get_observations.return_value = []

        assert await advisory_service.analyze_patterns("harare", end_date=date(2024, 1, 1)) == []

    def test_analyze_supplied_observations(self, advisory_service, mock_observation_client, constant_observations):
        patterns = advisory_service.analyze_observations(constant_observations, granularities=("season",))

        assert len(patterns) == 1
        mock_observation_client.get_observations.assert_not_called()


# ============================================================
# Forecast Tests
# ============================================================

class TestSeasonalForecast:
    """Tests for forecast orchestration."""

    @pytest.mark.asyncio
    async def test_forecast_uses_history(self, advisory_service):
        forecast = await advisory_service.get_seasonal_forecast(
            "harare", zone_id="highveld", enso_state="neutral",
            horizon_months=3, start_date=date(2024, 1, 1),
        )

        assert forecast.baseline_source == "historical"
        assert len(forecast.monthly_forecasts) == 3

    @pytest.mark.asyncio
    async def test_forecast_without_history(self, advisory_service, mock_observation_client):
        forecast = await advisory_service.get_seasonal_forecast(
            "harare", horizon_months=2, start_date=date(2024, 1, 1), use_history=False,
        )

        mock_observation_client.get_observations.assert_not_called()
        assert forecast.baseline_source == "climate_zone"
        assert forecast.climate_zone == "highveld"


# ============================================================
# Prediction Tests
# ============================================================

class TestPrediction:
    """Tests for prediction orchestration and alert dispatch."""

    @pytest.mark.asyncio
    async def test_prediction_uses_season_history(self, advisory_service):
        prediction = await advisory_service.get_prediction(
            "harare", target_date=date(2024, 1, 15), today=date(2024, 1, 10)
        )

        assert prediction.degraded is False
        assert prediction.date == date(2024, 1, 15)

    @pytest.mark.asyncio
    async def test_empty_history_degrades(self, advisory_service, mock_observation_client):
        mock_observation_client.get_observations.return_value = []

        prediction = await advisory_service.get_prediction("harare", today=date(2024, 1, 10))

        assert prediction.degraded is True
        assert prediction.date == date(2024, 1, 10)

    @pytest.mark.asyncio
    async def test_critical_alerts_dispatched(
        self, advisory_service, mock_observation_client, mock_alert_dispatcher, make_observations
    ):
        mock_observation_client.get_observations.return_value = make_observations(
            30, start=datetime(2024, 1, 1), temperature=40.0, humidity=20.0
        )

        await advisory_service.get_prediction("harare", target_date=date(2024, 1, 20), today=date(2024, 1, 20))

        mock_alert_dispatcher.dispatch.assert_awaited_once()
        location, alerts = mock_alert_dispatcher.dispatch.await_args.args
        assert location == "harare"
        assert alerts[0] == "High temperature warning"

    @pytest.mark.asyncio
    async def test_mild_weather_dispatches_nothing(
        self, advisory_service, mock_observation_client, mock_alert_dispatcher, make_observations
    ):
        mock_observation_client.get_observations.return_value = make_observations(
            30, start=datetime(2024, 1, 1), temperature=22.0, humidity=60.0, precipitation=3.0
        )

        await advisory_service.get_prediction("harare", target_date=date(2024, 1, 20), today=date(2024, 1, 20))

        mock_alert_dispatcher.dispatch.assert_not_awaited()

    def test_predict_from_supplied_observations(self, advisory_service, mock_alert_dispatcher, constant_observations):
        prediction = advisory_service.predict_from_observations(
            "harare", constant_observations, target_date=date(2024, 2, 1)
        )

        assert prediction.degraded is False
        mock_alert_dispatcher.dispatch.assert_not_called()


# ============================================================
# Climate Report Tests
# ============================================================

class TestClimateReport:
    """Tests for report orchestration."""

    @pytest.mark.asyncio
    async def test_report_window(self, advisory_service, mock_observation_client):
        report = await advisory_service.get_climate_report(
            "harare", start_date=date(2023, 1, 1), end_date=date(2023, 12, 31)
        )

        mock_observation_client.get_observations.assert_awaited_once_with(
            "harare", date(2023, 1, 1), date(2023, 12, 31)
        )
        assert report.data_points == 365
        assert report.start_date.date() == date(2023, 1, 1)

    @pytest.mark.asyncio
    async def test_inverted_window_rejected(self, advisory_service):
        with pytest.raises(ValueError):
            await advisory_service.get_climate_report(
                "harare", start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
            )


# ============================================================
# Batch Tests
# ============================================================

class TestBatch:
    """Tests for bounded batch predictions."""

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, advisory_service):
        predictions = await advisory_service.get_predictions_batch(
            ["harare", "bulawayo", "mutare"], target_date=date(2024, 1, 15)
        )

        assert [p.location for p in predictions] == ["harare", "bulawayo", "mutare"]

    @pytest.mark.asyncio
    async def test_batch_concurrency_is_bounded(
        self, advisory_service, mock_observation_client, year_of_observations
    ):
        in_flight = 0
        peak = 0

        async def slow_fetch(location, start, end):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return year_of_observations

        mock_observation_client.get_observations.side_effect = slow_fetch

        predictions = await advisory_service.get_predictions_batch(
            [f"site-{i}" for i in range(6)], target_date=date(2024, 1, 15)
        )

        assert len(predictions) == 6
        assert peak == 2
