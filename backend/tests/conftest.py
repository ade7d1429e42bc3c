"""Shared fixtures for the Live Reviews API tests."""

import pytest

from live_reviews.api.schemas import Store
from live_reviews.config import Settings

from fakes import make_adapters


@pytest.fixture
def settings():
    """Settings isolated from any local .env or Redis."""
    return Settings(
        _env_file=None,
        redis_url=None,
        environment="development",
        cache_ttl_seconds=600,
        total_reviews=75,
        max_review_count=500,
    )


@pytest.fixture
def adapters():
    """Two apps x two stores with a mix of ratings."""
    return make_adapters({
        ("meesho", Store.PLAY_STORE): [3, 5, 1],
        ("meesho", Store.APP_STORE): [5, 3],
        ("cred", Store.PLAY_STORE): [5, 2],
        ("cred", Store.APP_STORE): [3, 4],
    })
