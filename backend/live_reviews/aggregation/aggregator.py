"""
Live Reviews API - Review Aggregator

Fans review fetches out across tracked apps and stores, then merges and ranks
the results.
"""

import asyncio
import math
from typing import Dict, List, Optional, Sequence
import logging

from live_reviews.adapters.base import BaseAdapter
from live_reviews.api.schemas import AggregatedResponse, Review
from live_reviews.config import TrackedApp
from live_reviews.core.errors import UnknownAppError
from live_reviews.core.timestamps import utc_now

logger = logging.getLogger(__name__)


class ReviewAggregator:
    """
    Aggregates reviews from every (app, store) combination.

    Each combination is fetched concurrently and fails independently: a
    failed fetch contributes no reviews and never cancels its siblings.
    """

    def __init__(
        self,
        adapters: Sequence[BaseAdapter],
        apps: Dict[str, TrackedApp],
        default_total: int = 75
    ):
        if not adapters:
            raise ValueError("At least one adapter is required")
        self.adapters = list(adapters)
        self.apps = apps
        self.default_total = default_total

    @property
    def stores(self) -> List[str]:
        return [adapter.store.value for adapter in self.adapters]

    def resolve_apps(self, app_keys: Optional[Sequence[str]] = None) -> List[TrackedApp]:
        """Look up tracked apps by key, preserving the requested order."""
        keys = list(app_keys) if app_keys is not None else list(self.apps)
        if not keys:
            raise ValueError("At least one app is required")

        resolved = []
        for key in keys:
            if key not in self.apps:
                raise UnknownAppError(key)
            resolved.append(self.apps[key])
        return resolved

    def per_source_count(self, total: int, num_apps: int) -> int:
        """Even split of the total across (app, store) combinations, rounded up."""
        return math.ceil(total / (num_apps * len(self.adapters)))

    async def _fetch(self, adapter: BaseAdapter, app: TrackedApp, count: int) -> List[Review]:
        try:
            return await adapter.fetch(app, count)
        except Exception as e:
            logger.error(f"{adapter.store.value} error for {app.key}: {e}")
            return []

    async def aggregate(
        self,
        app_keys: Optional[Sequence[str]] = None,
        total: Optional[int] = None
    ) -> AggregatedResponse:
        """
        Fetch, merge and rank reviews.

        Args:
            app_keys: Tracked app keys, all apps when omitted
            total: Number of reviews to return, defaults to the configured total

        Returns:
            AggregatedResponse with reviews sorted by rating, highest first
        """
        total = self.default_total if total is None else total
        if total < 1:
            raise ValueError(f"total must be positive, got {total}")

        apps = self.resolve_apps(app_keys)
        count = self.per_source_count(total, len(apps))

        logger.info(
            f"Fetching {count} reviews per store for "
            f"{', '.join(app.name for app in apps)}"
        )

        # Apps outer, stores inner; results come back in this order
        results = await asyncio.gather(*[
            self._fetch(adapter, app, count)
            for app in apps
            for adapter in self.adapters
        ])

        combined: List[Review] = []
        for reviews in results:
            combined.extend(reviews)

        # sorted() is stable, so equal ratings keep arrival order
        top_reviews = sorted(combined, key=lambda r: r.rating, reverse=True)[:total]

        logger.info(f"Aggregated {len(top_reviews)} of {len(combined)} reviews")

        return AggregatedResponse(
            success=True,
            total_reviews=len(top_reviews),
            apps=[app.name for app in apps],
            stores=self.stores,
            timestamp=utc_now(),
            reviews=top_reviews
        )
