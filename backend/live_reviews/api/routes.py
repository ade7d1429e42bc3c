"""
Live Reviews API - API Routes

FastAPI route handlers for the review endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from typing import Optional
import logging

from live_reviews.api.schemas import (
    AggregatedResponse, ErrorResponse, InvalidAppResponse
)
from live_reviews.config import Settings
from live_reviews.core.timestamps import utc_now
from live_reviews.services.review_service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_review_service(request: Request) -> ReviewService:
    """Review service owned by the running application."""
    return request.app.state.review_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def fetch_error_response(error: Exception, settings: Settings) -> JSONResponse:
    """500 payload for a failed aggregation."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Failed to fetch reviews",
            message="Something went wrong" if settings.is_production else str(error),
            timestamp=utc_now()
        ).model_dump()
    )


@router.get(
    "/reviews",
    response_model=AggregatedResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Top reviews",
    description="Top reviews for every tracked app from both stores, highest rating first."
)
async def get_reviews(
    service: ReviewService = Depends(get_review_service),
    settings: Settings = Depends(get_app_settings)
):
    """Return cached or freshly aggregated reviews."""
    try:
        response = await service.get_reviews()
    except Exception as e:
        logger.exception(f"API Error: {e}")
        return fetch_error_response(e, settings)

    logger.info(f"Returning {response.total_reviews} reviews")
    return response


@router.get(
    "/api/reviews",
    response_model=AggregatedResponse,
    responses={
        400: {"model": InvalidAppResponse},
        500: {"model": ErrorResponse}
    },
    summary="Filtered reviews",
    description="Top reviews scoped to one app and/or a custom count."
)
async def get_filtered_reviews(
    app: Optional[str] = Query(default=None, description="Tracked app key (case-insensitive)"),
    count: Optional[int] = Query(default=None, ge=1, description="Number of reviews"),
    service: ReviewService = Depends(get_review_service),
    settings: Settings = Depends(get_app_settings)
):
    """Validate filters and serve a scoped aggregation."""
    # An empty ?app= means no app filter
    app = app or None

    if app is not None and service.match_app(app) is None:
        return JSONResponse(
            status_code=400,
            content=InvalidAppResponse(
                available_apps=service.app_keys
            ).model_dump(by_alias=True)
        )

    if count is not None and count > settings.max_review_count:
        raise HTTPException(
            status_code=422,
            detail=f"count must be at most {settings.max_review_count}"
        )

    # Nothing to filter on
    if app is None and count is None:
        return RedirectResponse(url="/reviews")

    try:
        return await service.get_filtered_reviews(app=app, count=count)
    except Exception as e:
        logger.exception(f"API Error: {e}")
        return fetch_error_response(e, settings)


@router.get(
    "/health",
    summary="Health check",
    description="Check if the API is running."
)
async def health_check(service: ReviewService = Depends(get_review_service)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "live-reviews-api",
        "cacheBackend": service.cache.backend_name
    }
