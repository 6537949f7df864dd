"""
Global error handling middleware.

Observation API failures keep the status code chosen by the client
(404 unknown location, 502 bad upstream response, 503 upstream
unreachable). Domain ValueErrors become 400s.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from agroclimate.infrastructure.observation_client import ObservationSourceError

logger = logging.getLogger(__name__)

OBSERVATION_ERROR_LABELS = {
    status.HTTP_404_NOT_FOUND: "Location not found",
    status.HTTP_503_SERVICE_UNAVAILABLE: "Observation source unavailable",
}


def error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Converts exceptions escaping the routers into JSON error bodies.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except ObservationSourceError as e:
            logger.error(
                f"Observation source error ({e.status_code}) on {request.method} "
                f"{request.url.path}: {e.message}"
            )
            label = OBSERVATION_ERROR_LABELS.get(e.status_code, "Observation source error")
            return error_response(e.status_code, label, e.message)

        except ValueError as e:
            logger.warning(f"Rejected {request.method} {request.url.path}: {e}")
            return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", str(e))

        except Exception as e:
            logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {e}")
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                "An unexpected error occurred",
            )
