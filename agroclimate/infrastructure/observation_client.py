"""
Infrastructure layer: weather observation API client with retry logic.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError
import httpx
import logging
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from agroclimate.domain.models import Observation
from agroclimate.infrastructure.api_constants import APIConstants, ObservationAPIEndpoints
from agroclimate.config import settings

logger = logging.getLogger(__name__)


# Pydantic models for API responses
class ObservationRecord(BaseModel):
    """Single observation as returned by the observation API."""
    id: Optional[str] = None
    timestamp: datetime
    location: Optional[str] = None
    temperature: float = Field(description="Air temperature in °C")
    humidity: float = Field(description="Relative humidity in %")
    precipitation: float = Field(default=0.0, description="Precipitation in mm")
    wind_speed: float = Field(default=0.0, description="Wind speed in km/h")
    pressure: float = Field(default=1013.25, description="Pressure in hPa")
    uv_index: Optional[float] = None
    cloud_cover: Optional[float] = None
    wind_direction: Optional[str] = None

    def to_observation(self, location: str) -> Observation:
        """Convert to the domain model; rejects NaN/Inf and out-of-range values."""
        return Observation(
            id=self.id,
            timestamp=self.timestamp,
            location=self.location or location,
            temperature=self.temperature,
            humidity=self.humidity,
            precipitation_mm=self.precipitation,
            wind_speed_kmh=self.wind_speed,
            pressure_hpa=self.pressure,
            uv_index=self.uv_index,
            cloud_cover=self.cloud_cover,
            wind_direction=self.wind_direction,
        )


class ObservationsResponse(BaseModel):
    """Response from the location observations endpoint."""
    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[ObservationRecord]


class ObservationSourceError(Exception):
    """Raised when observations cannot be fetched from the observation API."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ObservationClient:
    """
    Client for the weather observation API.
    Implements retry logic with exponential backoff.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the API client with configuration.

        Args:
            client: Preconfigured httpx client, mainly for tests
        """
        self.base_url = settings.observation_api_base_url
        self.api_key = settings.observation_api_key
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=settings.observation_api_timeout,
        )

    async def __aenter__(self) -> "ObservationClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.TransportError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        response = await self.client.request(method, endpoint, **kwargs)
        # Only server errors are retried
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path or absolute URL
            **kwargs: Additional arguments for the request

        Returns:
            Response data as dictionary

        Raises:
            ObservationSourceError: If the request fails after retries
        """
        try:
            response = await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            logger.error(f"Observation API server error after retries: {e.response.status_code}")
            raise ObservationSourceError(
                f"API request failed: {e.response.status_code} - {e.response.text}",
                status_code=502,
            )
        except httpx.RequestError as e:
            logger.error(f"Observation API unreachable after retries: {e}")
            raise ObservationSourceError(f"API request error: {str(e)}", status_code=503)

        if response.is_error:
            raise ObservationSourceError(
                f"API request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        return response.json()

    async def get_observations(
        self,
        location: str,
        start: date,
        end: date,
    ) -> List[Observation]:
        """
        Fetch observations for a location and date range, following pagination.

        Args:
            location: Location identifier
            start: First day of the range (inclusive)
            end: Last day of the range (inclusive)

        Returns:
            Observations in the order returned by the API; may be empty

        Raises:
            ObservationSourceError: If the request fails or the payload is invalid
        """
        endpoint = ObservationAPIEndpoints.get_location_observations(location)
        params = {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "page_size": APIConstants.DEFAULT_PAGE_SIZE,
        }

        observations: List[Observation] = []
        for _ in range(APIConstants.MAX_PAGES):
            data = await self._make_request("GET", endpoint, params=params)
            try:
                page = ObservationsResponse(**data)
                observations.extend(record.to_observation(location) for record in page.results)
            except ValidationError as e:
                raise ObservationSourceError(
                    f"Invalid observation payload for {location}: {e.error_count()} errors",
                    status_code=502,
                )

            if not page.next:
                break
            endpoint, params = page.next, None
        else:
            logger.warning(f"Stopped paging observations for {location} after {APIConstants.MAX_PAGES} pages")

        logger.info(f"Fetched {len(observations)} observations for {location} ({start} to {end})")
        return observations


# Singleton instance
_observation_client: Optional[ObservationClient] = None


def get_observation_client() -> ObservationClient:
    """
    Get or create the singleton observation client instance.

    Returns:
        ObservationClient instance
    """
    global _observation_client
    if _observation_client is None:
        _observation_client = ObservationClient()
    return _observation_client


async def close_observation_client():
    """Close and discard the singleton client, if one was created."""
    global _observation_client
    if _observation_client is not None:
        await _observation_client.close()
        _observation_client = None
