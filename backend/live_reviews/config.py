"""
Live Reviews API - Configuration Module

Handles environment-based configuration and the static tracked-app set.
"""

from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field
from typing import Dict, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=3000, description="API port (env PORT)")
    environment: str = Field(default="development", description="Deployment environment")

    # Aggregation
    total_reviews: int = Field(default=75, ge=1, description="Reviews returned by /reviews")
    max_review_count: int = Field(default=500, ge=1, description="Upper bound for ?count=")
    request_timeout: float = Field(default=30.0, description="App Store HTTP timeout (seconds)")

    # Source leniency: a lenient adapter returns no reviews instead of raising
    app_store_lenient: bool = Field(default=True, description="Swallow App Store failures")
    play_store_lenient: bool = Field(default=False, description="Swallow Play Store failures")

    # Cache
    cache_ttl_seconds: int = Field(default=600, ge=1, description="Response cache TTL (10 minutes)")
    redis_url: Optional[str] = Field(default=None, description="Redis URL; in-memory cache when unset")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


class TrackedApp(BaseModel):
    """Store identifiers for one tracked application."""
    key: str
    name: str
    play_store_id: str
    app_store_id: int
    country: str = "in"
    lang: str = "en"


TRACKED_APPS: Dict[str, TrackedApp] = {
    "meesho": TrackedApp(
        key="meesho",
        name="Meesho",
        play_store_id="com.meesho.supply",
        app_store_id=1457958492,
    ),
    "cred": TrackedApp(
        key="cred",
        name="CRED",
        play_store_id="com.dreamplug.androidapp",
        app_store_id=1343011398,
    ),
}


# Cached settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get settings instance (reload on each server start)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
