"""
Live Reviews API - API Schemas

Pydantic models for normalized reviews and response payloads.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from enum import Enum


# ============================================================================
# Enums
# ============================================================================

class Store(str, Enum):
    """Review sources, valued by their display label."""
    PLAY_STORE = "Google Play Store"
    APP_STORE = "Apple App Store"


# ============================================================================
# Review Model
# ============================================================================

class Review(BaseModel):
    """Normalized review record, identical in shape for every store."""
    model_config = ConfigDict(populate_by_name=True)

    app: str = Field(..., min_length=1, description="Tracked app display name")
    store: Store = Field(..., description="Originating store")
    username: str = Field(default="Anonymous", description="Reviewer display name")
    rating: int = Field(default=0, description="Star rating")
    review_text: str = Field(default="", alias="reviewText", description="Review body")
    date: Optional[str] = Field(default=None, description="Posted/updated timestamp")
    version: Optional[str] = Field(default=None, description="App version reviewed")
    thumbs_up: int = Field(default=0, ge=0, alias="thumbsUp", description="Helpfulness votes")
    reply: Optional[str] = Field(default=None, description="Developer reply")
    review_id: Optional[str] = Field(default=None, alias="reviewId", description="Store review ID")


# ============================================================================
# Response Models
# ============================================================================

class AggregatedResponse(BaseModel):
    """Ranked reviews across tracked apps and stores."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    total_reviews: int = Field(..., ge=0, alias="totalReviews", description="Number of reviews returned")
    apps: List[str] = Field(..., description="Tracked app display names")
    stores: List[str] = Field(..., description="Store labels")
    timestamp: str = Field(..., description="Generation timestamp")
    reviews: List[Review] = Field(default_factory=list, description="Reviews, highest rating first")


class ErrorResponse(BaseModel):
    """Internal failure payload."""
    success: bool = Field(default=False)
    error: str = Field(..., description="Error summary")
    message: str = Field(..., description="Error details")
    timestamp: Optional[str] = Field(default=None, description="Failure timestamp")


class InvalidAppResponse(BaseModel):
    """Unknown app key payload."""
    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(default="Invalid app")
    available_apps: List[str] = Field(..., alias="availableApps")
