"""
Itinerary Planner - Main FastAPI Application
Around-the-world itinerary search over one destination per region
"""

import logging
import logging.config
from contextlib import asynccontextmanager
from typing import Dict, Any
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

# Load .env file explicitly (before importing config)
from dotenv import load_dotenv
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from itinerary_planner.core.config import get_settings
from itinerary_planner.api.endpoints import router as api_router
from itinerary_planner.services.planner import count_sequences

# Initialize settings
settings = get_settings()

# Configure logging
logging.config.dictConfig(settings.get_log_config())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(
        f"Regions: {len(settings.regions)} | "
        f"Candidate sequences: {count_sequences(settings.regions)}"
    )
    logger.info(f"Email reports: {'Enabled' if settings.email_enabled() else 'Disabled'}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("=" * 60)
    logger.info(f"Shutting down {settings.app_name}")
    logger.info("=" * 60)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    **Around-the-World Itinerary Planner API**

    Finds the fastest multi-leg itinerary that visits one destination per region.

    **Core Features:**
    - **Sequence Search**: Every ordering of one destination per region is evaluated
    - **Connection Rules**: Airport-specific minimum connection times between legs
    - **Live Offers**: Flight offers from the Amadeus Flight Offers Search API
    - **Email Reports**: Optional HTML itinerary report for the winning sequence
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception Handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed messages"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "FAILED",
            "message": "Invalid request data",
            "errors": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "FAILED",
            "message": str(exc) if settings.debug else "An unexpected error occurred"
        }
    )


# Include routers
app.include_router(api_router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root() -> Dict[str, Any]:
    """
    Root endpoint - API information
    """
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "search_flights": "GET /flights?start_origin&departure_date&departure_time&flight_type&email",
            "info": "GET /info"
        }
    }


# Additional utility endpoint
@app.get("/info", tags=["Root"])
async def info() -> Dict[str, Any]:
    """
    Detailed API information and configuration
    """
    return {
        "application": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug
        },
        "configuration": {
            "regions": len(settings.regions),
            "candidate_sequences": count_sequences(settings.regions),
            "connection_buffers": len(settings.connection_buffers),
            "default_connection_buffer": f"{settings.default_connection_buffer_hours} hours",
            "extra_travel_time": f"{settings.extra_travel_time_hours} hours",
            "max_workers": settings.max_workers,
            "api_timeout": f"{settings.api_timeout} seconds"
        },
        "services": {
            "amadeus_api": settings.amadeus_base_url,
            "email_reports": "Enabled" if settings.email_enabled() else "Disabled"
        },
        "endpoints_count": len([route for route in app.routes if hasattr(route, 'methods')])
    }


if __name__ == "__main__":
    import uvicorn

    # Run with uvicorn
    uvicorn.run(
        "itinerary_planner.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower()
    )
