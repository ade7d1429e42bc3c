"""
Live Reviews API - App Store Adapter

Fetches reviews from the iOS App Store.
"""

import httpx
from typing import Any, Dict, List, Optional
import logging
from tenacity import retry, stop_after_attempt, wait_exponential

from live_reviews.adapters.base import BaseAdapter
from live_reviews.api.schemas import Review, Store
from live_reviews.config import TrackedApp
from live_reviews.core.timestamps import normalize_timestamp

logger = logging.getLogger(__name__)


def _label(entry: Dict[str, Any], *path: str) -> Optional[str]:
    """Walk the RSS JSON {"label": ...} nesting, returning None on any gap."""
    node: Any = entry
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, dict):
        node = node.get("label")
    return node or None


class AppStoreAdapter(BaseAdapter):
    """iOS App Store review adapter using RSS feed."""

    # RSS feed URL template (JSON for structured parsing)
    RSS_URL = "https://itunes.apple.com/{country}/rss/customerreviews/id={app_id}/sortBy=mostRecent/page={page}/json"

    # RSS feed serves at most 10 pages of 50 reviews
    PAGE_SIZE = 50
    MAX_PAGES = 10

    def __init__(
        self,
        lenient: bool = True,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(lenient=lenient)
        self.timeout = timeout
        self.transport = transport

    @property
    def store(self) -> Store:
        return Store.APP_STORE

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True
    )
    async def _fetch_page(
        self,
        client: httpx.AsyncClient,
        app: TrackedApp,
        page: int
    ) -> List[Review]:
        """Fetch a single page of reviews."""
        url = self.RSS_URL.format(
            country=app.country,
            app_id=app.app_store_id,
            page=page
        )

        response = await client.get(url)

        # 404 means no more pages (or no reviews for this app/region)
        if response.status_code == 404:
            return []

        response.raise_for_status()

        return self._parse_json(app, response.json())

    def _parse_json(self, app: TrackedApp, data: dict) -> List[Review]:
        """Parse RSS JSON into Review objects."""
        reviews = []

        entries = data.get("feed", {}).get("entry", [])

        # A feed with a single entry serializes it as a dict
        if isinstance(entries, dict):
            entries = [entries]

        for entry in entries:
            # App metadata entries carry no rating
            if "im:rating" not in entry:
                continue

            try:
                rating = _label(entry, "im:rating")
                reviews.append(Review(
                    app=app.name,
                    store=self.store,
                    username=_label(entry, "author", "name") or "Anonymous",
                    rating=int(rating) if rating else 0,
                    review_text=_label(entry, "content") or "",
                    date=normalize_timestamp(_label(entry, "updated")),
                    version=_label(entry, "im:version"),
                    thumbs_up=0,
                    reply=None,
                    review_id=_label(entry, "id"),
                ))
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to parse review entry for {app.name}: {e}")
                continue

        return reviews

    async def _fetch(self, app: TrackedApp, count: int) -> List[Review]:
        """Fetch the most recent reviews, paging the RSS feed until `count` are collected."""
        logger.info(f"Scraping App Store for {app.name} ({app.app_store_id}, {app.country})")

        all_reviews: List[Review] = []
        page = 1

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while len(all_reviews) < count and page <= self.MAX_PAGES:
                try:
                    page_reviews = await self._fetch_page(client, app, page)
                except Exception as e:
                    if page == 1:
                        raise
                    # Later pages are best effort; keep what we have
                    logger.warning(f"Failed to fetch App Store page {page} for {app.name}: {e}")
                    break

                if not page_reviews:
                    break

                all_reviews.extend(page_reviews)
                page += 1

        # Trim to requested count
        all_reviews = all_reviews[:count]

        logger.info(f"Fetched {len(all_reviews)} App Store reviews for {app.name}")
        return all_reviews
