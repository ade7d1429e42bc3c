"""
Live Reviews API - Review Service

Serves aggregated reviews through the response cache.
"""

from typing import List, Optional
import logging

from live_reviews.adapters.appstore import AppStoreAdapter
from live_reviews.adapters.base import BaseAdapter
from live_reviews.adapters.playstore import PlayStoreAdapter
from live_reviews.aggregation.aggregator import ReviewAggregator
from live_reviews.api.schemas import AggregatedResponse
from live_reviews.config import Settings
from live_reviews.core.cache import ResponseCache
from live_reviews.core.errors import UnknownAppError

logger = logging.getLogger(__name__)


def build_adapters(settings: Settings) -> List[BaseAdapter]:
    """Create the store adapters in their fixed iteration order."""
    return [
        PlayStoreAdapter(lenient=settings.play_store_lenient),
        AppStoreAdapter(
            lenient=settings.app_store_lenient,
            timeout=settings.request_timeout
        ),
    ]


class ReviewService:
    """
    Cached access to aggregated reviews.

    The full tracked-app set is cached under one fixed key; scoped requests
    (single app or custom count) get their own keys.
    """

    def __init__(self, aggregator: ReviewAggregator, cache: ResponseCache):
        self.aggregator = aggregator
        self.cache = cache

    @property
    def app_keys(self) -> List[str]:
        return list(self.aggregator.apps)

    @property
    def app_names(self) -> List[str]:
        return [app.name for app in self.aggregator.apps.values()]

    @property
    def cache_key(self) -> str:
        """Fixed key for the default all-apps response, e.g. meesho_cred_reviews."""
        return "_".join(self.app_keys) + "_reviews"

    def match_app(self, app: str) -> Optional[str]:
        """Case-insensitive lookup of a tracked app key."""
        key = app.strip().lower()
        return key if key in self.aggregator.apps else None

    async def get_reviews(self) -> AggregatedResponse:
        """Top reviews across all tracked apps and stores."""
        return await self.cache.get_or_compute(
            self.cache_key,
            self.aggregator.aggregate
        )

    async def get_filtered_reviews(
        self,
        app: Optional[str] = None,
        count: Optional[int] = None
    ) -> AggregatedResponse:
        """
        Top reviews scoped to one app and/or a custom count.

        Raises:
            UnknownAppError: If app is not a tracked app key
        """
        app_keys = None
        if app:
            key = self.match_app(app)
            if key is None:
                raise UnknownAppError(app)
            app_keys = [key]

        total = self.aggregator.default_total if count is None else count
        if app_keys is None and total == self.aggregator.default_total:
            # Same aggregation as get_reviews(), share its entry
            return await self.get_reviews()

        cache_key = f"{app_keys[0] if app_keys else 'all'}:{total}"

        async def compute() -> AggregatedResponse:
            return await self.aggregator.aggregate(app_keys=app_keys, total=total)

        return await self.cache.get_or_compute(cache_key, compute)

    async def close(self) -> None:
        await self.cache.close()
