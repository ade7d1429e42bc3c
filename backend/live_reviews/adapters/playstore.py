"""
Live Reviews API - Google Play Store Adapter

Fetches reviews from the Google Play Store.
"""

import asyncio
from typing import Any, Dict, List
import logging

from google_play_scraper import Sort
from google_play_scraper import reviews as gplay_reviews

from live_reviews.adapters.base import BaseAdapter
from live_reviews.api.schemas import Review, Store
from live_reviews.config import TrackedApp
from live_reviews.core.timestamps import normalize_timestamp

logger = logging.getLogger(__name__)


class PlayStoreAdapter(BaseAdapter):
    """Google Play Store review adapter backed by google-play-scraper."""

    @property
    def store(self) -> Store:
        return Store.PLAY_STORE

    async def _fetch(self, app: TrackedApp, count: int) -> List[Review]:
        logger.info(f"Scraping Play Store for {app.name} ({app.play_store_id})")

        # google-play-scraper is blocking; keep it off the event loop
        result, _ = await asyncio.to_thread(
            gplay_reviews,
            app.play_store_id,
            lang=app.lang,
            country=app.country,
            sort=Sort.NEWEST,
            count=count,
        )

        reviews = [self._to_review(app, raw) for raw in result]
        logger.info(f"Fetched {len(reviews)} Play Store reviews for {app.name}")
        return reviews

    def _to_review(self, app: TrackedApp, raw: Dict[str, Any]) -> Review:
        """Map a google-play-scraper record onto the common review shape."""
        return Review(
            app=app.name,
            store=self.store,
            username=raw.get("userName") or "Anonymous",
            rating=raw.get("score") or 0,
            review_text=raw.get("content") or "",
            date=normalize_timestamp(raw.get("at")),
            version=raw.get("reviewCreatedVersion") or raw.get("appVersion") or None,
            thumbs_up=raw.get("thumbsUpCount") or 0,
            reply=raw.get("replyContent") or None,
            review_id=raw.get("reviewId") or None,
        )
