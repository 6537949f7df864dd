"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from agroclimate.config import settings
from agroclimate.middleware.error_handler import ErrorHandlerMiddleware
from agroclimate.api.v1.routers import analysis, locations

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter, applied to every route
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events using the modern FastAPI pattern.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Forecast defaults: zone={settings.default_climate_zone}, "
                f"enso={settings.default_enso_state}, horizon={settings.default_forecast_months} months")
    logger.info(f"Anomaly bands: medium>{settings.anomaly_medium_z}, high>{settings.anomaly_high_z}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute, "
                f"batch concurrency: {settings.max_concurrency}")

    yield

    # Shutdown
    from agroclimate.infrastructure.observation_client import close_observation_client
    logger.info("Shutting down application...")
    await close_observation_client()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Agro-Climatic Advisory API

    This API turns weather observation histories into seasonal patterns,
    rule-based seasonal forecasts and per-date agro-climatic predictions
    for farmers.

    ## Features

    - **Historical Patterns**: Season, month and year aggregates with anomaly
      notes and trend figures
    - **RBSWSA Seasonal Forecasts**: Deterministic, table-driven monthly forecasts
      with drought risk and farming recommendations
    - **Agro-Climatic Predictions**: Crop suitability, yield potential, pest and
      disease risk, irrigation, planting and harvesting advice
    - **Climate Reports**: Statistics, indicators, risk assessment and
      prioritised recommendations
    - **Robust Error Handling**: Automatic retries with exponential backoff for
      observation API calls
    - **Rate Limiting**: Protects the API from abuse

    ## Forecast Algorithm

    RBSWSA, per forecast month:
    1. Start from the climate zone baseline (or the observed month/season average)
    2. Apply the month's seasonal rule modifiers
    3. Apply the ENSO phase modifiers
    4. Add small seeded jitter so identical requests give identical forecasts
    5. Derive condition tags, confidence, drought risk and recommendations
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(locations.router, prefix="/api/v1")
app.include_router(analysis.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
