"""
Unit tests for the observation API client.

Tests cover:
- Successful API responses and pagination
- Retry logic on 5xx errors
- No retry on 4xx errors
- Payload validation at the boundary
- Async context manager
"""
import pytest
import httpx
import respx
from datetime import date
from unittest.mock import AsyncMock

from agroclimate.domain.models import Observation
from agroclimate.infrastructure.api_constants import ObservationAPIEndpoints
from agroclimate.infrastructure.observation_client import (
    ObservationClient,
    ObservationSourceError,
    get_observation_client,
)


def observation_payload(count: int, next_url=None, temperature=22.5) -> dict:
    return {
        "count": count,
        "next": next_url,
        "previous": None,
        "results": [
            {
                "id": f"obs-{i}",
                "timestamp": f"2024-01-{i + 1:02d}T12:00:00",
                "temperature": temperature,
                "humidity": 65.0,
                "precipitation": 1.5,
                "wind_speed": 12.0,
            }
            for i in range(count)
        ],
    }


# ============================================================
# API Client Initialization Tests
# ============================================================

class TestClientInitialization:
    """Tests for client initialization."""

    def test_client_initialization(self):
        """Client should initialize with correct configuration."""
        client = ObservationClient()

        assert client.base_url is not None
        assert client.client is not None

    def test_location_endpoint(self):
        """Observations are only ever fetched per location."""
        assert ObservationAPIEndpoints.get_location_observations("harare") == "/v1/locations/harare/observations/"
        assert not hasattr(ObservationAPIEndpoints, "OBSERVATIONS")

    def test_singleton_pattern(self):
        """get_observation_client should return the same instance."""
        import agroclimate.infrastructure.observation_client as module
        module._observation_client = None

        client1 = get_observation_client()
        client2 = get_observation_client()

        assert client1 is client2


# ============================================================
# Async Context Manager Tests
# ============================================================

class TestAsyncContextManager:
    """Tests for async context manager functionality."""

    @pytest.mark.asyncio
    async def test_context_manager_enter(self):
        """__aenter__ should return the client instance."""
        client = ObservationClient()

        async with client as ctx_client:
            assert ctx_client is client

    @pytest.mark.asyncio
    async def test_context_manager_exit_closes_client(self):
        """__aexit__ should close the HTTP client."""
        client = ObservationClient()
        client.close = AsyncMock()

        async with client:
            pass

        client.close.assert_called_once()


# ============================================================
# API Response Tests
# ============================================================

class TestAPIResponses:
    """Tests for API response handling."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_observations_success(self):
        """get_observations should return domain observations."""
        client = ObservationClient()

        route = respx.get(f"{client.base_url}/v1/locations/harare/observations/").mock(
            return_value=httpx.Response(200, json=observation_payload(3))
        )

        result = await client.get_observations("harare", date(2024, 1, 1), date(2024, 1, 31))

        assert len(result) == 3
        assert all(isinstance(o, Observation) for o in result)
        assert result[0].location == "harare"
        assert result[0].precipitation_mm == 1.5
        assert result[0].wind_speed_kmh == 12.0
        assert route.calls.last.request.url.params["start"] == "2024-01-01"
        assert route.calls.last.request.url.params["end"] == "2024-01-31"
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_results_are_valid(self):
        """An empty result set is not an error."""
        client = ObservationClient()

        respx.get(f"{client.base_url}/v1/locations/harare/observations/").mock(
            return_value=httpx.Response(200, json=observation_payload(0))
        )

        assert await client.get_observations("harare", date(2024, 1, 1), date(2024, 1, 31)) == []
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_pagination_is_followed(self):
        """The client should follow the next link until it is empty."""
        client = ObservationClient()
        next_url = f"{client.base_url}/v1/locations/harare/observations/?page=2"

        respx.get(next_url).mock(return_value=httpx.Response(200, json=observation_payload(1)))
        respx.get(f"{client.base_url}/v1/locations/harare/observations/").mock(
            return_value=httpx.Response(200, json=observation_payload(2, next_url=next_url))
        )

        result = await client.get_observations("harare", date(2024, 1, 1), date(2024, 1, 31))

        assert len(result) == 3
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_finite_values_rejected(self):
        """NaN readings are rejected at the boundary."""
        client = ObservationClient()

        respx.get(f"{client.base_url}/v1/locations/harare/observations/").mock(
            return_value=httpx.Response(
                200,
                content=b'{"count": 1, "results": [{"timestamp": "2024-01-01T12:00:00", '
                        b'"temperature": NaN, "humidity": 50.0}]}',
                headers={"content-type": "application/json"},
            )
        )

        with pytest.raises(ObservationSourceError) as exc_info:
            await client.get_observations("harare", date(2024, 1, 1), date(2024, 1, 31))

        assert exc_info.value.status_code == 502
        await client.close()


# ============================================================
# Error Handling Tests
# ============================================================

class TestErrorHandling:
    """Tests for error handling."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_4xx_error_no_retry(self):
        """4xx errors should not trigger retry."""
        client = ObservationClient()

        respx.get(f"{client.base_url}/test").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        with pytest.raises(ObservationSourceError, match="404") as exc_info:
            await client._make_request("GET", "/test")

        assert exc_info.value.status_code == 404
        # Should only be called once (no retry)
        assert respx.calls.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_5xx_error_triggers_retry(self):
        """5xx errors should trigger retry."""
        client = ObservationClient()

        route = respx.get(f"{client.base_url}/test")
        route.side_effect = [
            httpx.Response(500, text="Internal Server Error"),
            httpx.Response(200, json={"result": "success"}),
        ]

        result = await client._make_request("GET", "/test")

        assert result == {"result": "success"}
        assert respx.calls.call_count == 2  # Retried once
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_5xx_exhausted_raises_source_error(self):
        """Persistent 5xx errors surface as a 502 after all attempts."""
        client = ObservationClient()

        respx.get(f"{client.base_url}/test").mock(
            return_value=httpx.Response(503, text="Unavailable")
        )

        with pytest.raises(ObservationSourceError) as exc_info:
            await client._make_request("GET", "/test")

        assert exc_info.value.status_code == 502
        assert respx.calls.call_count == 3
        await client.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
