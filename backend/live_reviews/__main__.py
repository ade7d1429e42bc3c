"""Run the Live Reviews API with `python -m live_reviews`."""

from live_reviews.main import run

run()
