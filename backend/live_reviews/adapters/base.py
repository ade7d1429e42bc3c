"""
Live Reviews API - Base Adapter

Abstract base class for review source adapters.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from live_reviews.api.schemas import Review, Store
from live_reviews.config import TrackedApp

logger = logging.getLogger(__name__)


class BaseAdapter(ABC):
    """
    Abstract base adapter for fetching reviews.

    A lenient adapter logs a warning and returns no reviews when its source
    fails; a strict adapter lets the error reach the caller.
    """

    def __init__(self, lenient: bool = False):
        self.lenient = lenient

    @property
    @abstractmethod
    def store(self) -> Store:
        """Return the store this adapter reads from."""
        pass

    @abstractmethod
    async def _fetch(self, app: TrackedApp, count: int) -> List[Review]:
        """Fetch and normalize the newest `count` reviews for an app."""
        pass

    async def fetch(self, app: TrackedApp, count: int) -> List[Review]:
        """
        Fetch reviews for an app.

        Args:
            app: Tracked app configuration
            count: Number of most recent reviews to request

        Returns:
            List of Review objects in provider order
        """
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        if not self.lenient:
            return await self._fetch(app, count)

        try:
            return await self._fetch(app, count)
        except Exception as e:
            logger.warning(f"{self.store.value} scraping failed for {app.name}: {e}")
            return []
