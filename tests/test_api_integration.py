"""
Integration tests for API endpoints.

Tests the full HTTP request/response cycle with a mocked observation
source and alert dispatcher; the domain services run for real.
"""
import pytest
from fastapi.testclient import TestClient

from agroclimate.main import app
from agroclimate.api.dependencies import get_observation_client, get_alert_dispatcher
from agroclimate.infrastructure.observation_client import ObservationSourceError


@pytest.fixture
def api_client(test_client, mock_observation_client, mock_alert_dispatcher) -> TestClient:
    """Test client with the observation source and alert dispatcher mocked."""
    app.dependency_overrides[get_observation_client] = lambda: mock_observation_client
    app.dependency_overrides[get_alert_dispatcher] = lambda: mock_alert_dispatcher
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()


# ============================================================
# Health Check Tests
# ============================================================

class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_root_endpoint(self, test_client):
        """Root endpoint should return healthy status."""
        response = test_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "service" in data
        assert "version" in data

    def test_health_endpoint(self, test_client):
        """Health endpoint should return healthy status."""
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


# ============================================================
# Location Endpoint Tests
# ============================================================

class TestLocationEndpoints:
    """Tests for endpoints that fetch observation history."""

    def test_patterns(self, api_client):
        response = api_client.get("/api/v1/locations/harare/patterns?end_date=2024-01-01")

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "harare"
        assert data["pattern_count"] == len(data["patterns"]) == 16

    def test_patterns_with_year_granularity(self, api_client):
        response = api_client.get(
            "/api/v1/locations/harare/patterns",
            params={"end_date": "2024-01-01", "granularity": ["season", "year"]},
        )

        assert response.status_code == 200
        granularities = {p["granularity"] for p in response.json()["patterns"]}
        assert granularities == {"season", "year"}

    def test_seasonal_forecast(self, api_client):
        response = api_client.get(
            "/api/v1/locations/chiredzi/seasonal-forecast",
            params={
                "zone": "lowveld",
                "enso_state": "el_nino",
                "horizon_months": 3,
                "start_date": "2024-05-01",
                "use_history": "false",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["algorithm"] == "RBSWSA"
        assert len(data["monthly_forecasts"]) == 3
        assert data["drought_risk"]["risk_level"] == "high"
        assert len(data["farming_recommendations"]) <= 12

    def test_seasonal_forecast_invalid_horizon(self, api_client):
        response = api_client.get("/api/v1/locations/harare/seasonal-forecast?horizon_months=0")

        assert response.status_code == 422

    def test_prediction(self, api_client):
        response = api_client.get("/api/v1/locations/harare/prediction?target_date=2024-01-15")

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "harare"
        assert data["date"] == "2024-01-15"
        assert 0 <= data["yield_prediction"] <= 100
        assert data["recommended_crop"] in data["crop_scores"]
        assert "soil_condition_summary" in data

    def test_climate_report(self, api_client):
        response = api_client.get(
            "/api/v1/locations/harare/climate-report",
            params={"start_date": "2023-01-01", "end_date": "2023-12-31"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["data_points"] == 365
        assert set(data["risk_assessment"]) == {"drought", "flood", "heat_wave", "frost", "wind_damage"}

    def test_climate_report_inverted_window(self, api_client):
        response = api_client.get(
            "/api/v1/locations/harare/climate-report",
            params={"start_date": "2024-02-01", "end_date": "2024-01-01"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_batch_predictions(self, api_client):
        response = api_client.post(
            "/api/v1/locations/predictions/batch",
            json={"locations": ["harare", "gweru"], "target_date": "2024-01-15"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [p["location"] for p in data["predictions"]] == ["harare", "gweru"]

    def test_batch_requires_locations(self, api_client):
        response = api_client.post("/api/v1/locations/predictions/batch", json={"locations": []})

        assert response.status_code == 422


# ============================================================
# Error Mapping Tests
# ============================================================

class TestErrorMapping:
    """Tests for observation source failures."""

    def test_unknown_location_returns_404(self, api_client, mock_observation_client):
        mock_observation_client.get_observations.side_effect = ObservationSourceError(
            "API request failed: 404 - Not Found", status_code=404
        )

        response = api_client.get("/api/v1/locations/atlantis/prediction")

        assert response.status_code == 404
        assert "atlantis" in response.json()["detail"]

    def test_source_failure_passes_status_through(self, api_client, mock_observation_client):
        mock_observation_client.get_observations.side_effect = ObservationSourceError(
            "API request failed: 503 - Unavailable", status_code=502
        )

        response = api_client.get("/api/v1/locations/harare/patterns")

        assert response.status_code == 502
        assert response.json()["error"] == "Observation source error"

    def test_unreachable_source_returns_503(self, api_client, mock_observation_client):
        mock_observation_client.get_observations.side_effect = ObservationSourceError(
            "API request failed: ConnectError", status_code=503
        )

        response = api_client.get("/api/v1/locations/harare/climate-report")

        assert response.status_code == 503
        assert response.json()["error"] == "Observation source unavailable"


# ============================================================
# Analysis Endpoint Tests
# ============================================================

class TestAnalysisEndpoints:
    """Tests for endpoints that take observations in the body."""

    @staticmethod
    def observations(days: int, temperature: float = 22.0) -> list[dict]:
        return [
            {
                "timestamp": f"2024-01-{day + 1:02d}T12:00:00",
                "location": "harare",
                "temperature": temperature,
                "humidity": 60.0,
                "precipitation_mm": 0.0,
            }
            for day in range(days)
        ]

    def test_analysis_patterns(self, api_client, mock_observation_client):
        response = api_client.post(
            "/api/v1/analysis/patterns",
            json={"observations": self.observations(30), "granularities": ["season"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["location"] == "harare"
        assert data["pattern_count"] == 1
        assert data["patterns"][0]["pattern_type"] == "moderate"
        assert data["patterns"][0]["anomalies"] == []
        mock_observation_client.get_observations.assert_not_called()

    def test_analysis_prediction_without_history_is_degraded(self, api_client):
        response = api_client.post(
            "/api/v1/analysis/prediction",
            json={"location": "harare", "target_date": "2024-01-15", "observations": []},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["climate_indicators"]["baseline_temperature"] == 22.0

    def test_analysis_prediction_with_history(self, api_client):
        response = api_client.post(
            "/api/v1/analysis/prediction",
            json={
                "location": "harare",
                "target_date": "2024-02-01",
                "enso_state": "la_nina",
                "observations": self.observations(30, temperature=24.0),
            },
        )

        assert response.status_code == 200
        assert response.json()["degraded"] is False

    def test_invalid_observation_rejected(self, api_client):
        observations = self.observations(5)
        observations[0]["humidity"] = 150.0

        response = api_client.post(
            "/api/v1/analysis/patterns",
            json={"observations": observations},
        )

        assert response.status_code == 422

    def test_invalid_enso_state_rejected(self, api_client):
        response = api_client.post(
            "/api/v1/analysis/prediction",
            json={"location": "harare", "target_date": "2024-01-15", "enso_state": "super_nino"},
        )

        assert response.status_code == 422


# ============================================================
# Response Format Tests
# ============================================================

class TestResponseFormats:
    """Tests for API documentation endpoints."""

    def test_openapi_schema_available(self, test_client):
        """OpenAPI schema should be available."""
        response = test_client.get("/openapi.json")

        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/api/v1/locations/{location}/seasonal-forecast" in paths
        assert "/api/v1/analysis/prediction" in paths

    def test_docs_endpoint_available(self, test_client):
        response = test_client.get("/docs")

        assert response.status_code == 200

    def test_rate_limit_documented_in_openapi(self, test_client):
        schema = test_client.get("/openapi.json").json()
        responses = schema["paths"]["/api/v1/locations/{location}/prediction"]["get"]["responses"]

        assert "429" in responses


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
