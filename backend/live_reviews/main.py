"""
Live Reviews API - Main Application

FastAPI application entry point with middleware and route configuration.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional, Sequence
import logging

import uvicorn

from live_reviews.adapters.base import BaseAdapter
from live_reviews.aggregation.aggregator import ReviewAggregator
from live_reviews.api.routes import router
from live_reviews.api.schemas import ErrorResponse
from live_reviews.config import TRACKED_APPS, Settings, get_settings
from live_reviews.core.cache import ResponseCache, create_cache_backend
from live_reviews.services.review_service import ReviewService, build_adapters

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    adapters: Optional[Sequence[BaseAdapter]] = None
) -> FastAPI:
    """Build the application; adapters default to the configured store adapters."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown."""
        # Startup
        logger.info("Starting Live Reviews API...")
        logger.info(f"Apps: {', '.join(tracked.name for tracked in TRACKED_APPS.values())}")
        logger.info(f"Cache duration: {settings.cache_ttl_seconds // 60} minutes")

        backend = await create_cache_backend(settings.redis_url)
        cache = ResponseCache(backend, ttl=settings.cache_ttl_seconds)
        aggregator = ReviewAggregator(
            adapters if adapters is not None else build_adapters(settings),
            TRACKED_APPS,
            default_total=settings.total_reviews
        )
        app.state.settings = settings
        app.state.review_service = ReviewService(aggregator, cache)
        logger.info(f"Stores: {', '.join(aggregator.stores)}")

        yield

        # Shutdown
        logger.info("Shutting down Live Reviews API...")
        await app.state.review_service.close()

    app = FastAPI(
        title="Live Reviews API",
        description="Top app store reviews for tracked apps",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(router, tags=["Reviews"])

    @app.get("/", summary="Service info")
    async def root(request: Request):
        """Health and usage information."""
        service = request.app.state.review_service
        return {
            "message": "Live Reviews API",
            "status": "healthy",
            "endpoint": "/reviews",
            "description": (
                f"Returns {settings.total_reviews} top reviews from "
                f"{' and '.join(service.app_names)} (both Play Store and App Store)"
            ),
            "example": f"{str(request.base_url).rstrip('/')}/reviews",
            "apps": service.app_names,
            "stores": service.aggregator.stores,
            "cacheInfo": f"Results cached for {settings.cache_ttl_seconds // 60} minutes"
        }

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                message="Something went wrong" if settings.is_production else str(exc)
            ).model_dump(exclude_none=True)
        )

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    logger.info(f"Live Reviews API running on port {settings.port}")
    uvicorn.run(app, host=settings.api_host, port=settings.port)
