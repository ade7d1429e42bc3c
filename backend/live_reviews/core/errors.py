"""
Live Reviews API - Exceptions
"""


class LiveReviewsError(Exception):
    """Base class for service errors."""


class UnknownAppError(LiveReviewsError, KeyError):
    """Raised when an app key is not in the tracked-app configuration."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown app: {self.key}"
