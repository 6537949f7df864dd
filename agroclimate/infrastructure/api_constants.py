"""
API endpoint constants and configuration.

This module contains the observation API endpoint paths and related constants.
"""


class ObservationAPIEndpoints:
    """Weather observation API endpoint paths."""

    BASE = "/v1"

    LOCATION_OBSERVATIONS = f"{BASE}/locations/{{location}}/observations/"

    @classmethod
    def get_location_observations(cls, location: str) -> str:
        """
        Observations endpoint for a specific location.

        Args:
            location: Location identifier

        Returns:
            Formatted endpoint path
        """
        return cls.LOCATION_OBSERVATIONS.format(location=location)


class APIConstants:
    """General API configuration constants."""

    CONTENT_TYPE_JSON = "application/json"

    # Pagination
    DEFAULT_PAGE_SIZE = 500
    MAX_PAGES = 50
