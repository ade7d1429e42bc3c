"""
Unit tests for the store adapters.

Play Store calls are patched at the google-play-scraper boundary and App Store
HTTP goes through httpx.MockTransport, so nothing touches the network.
"""

import json
import time
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from google_play_scraper import Sort

from live_reviews.adapters.appstore import AppStoreAdapter
from live_reviews.adapters.playstore import PlayStoreAdapter
from live_reviews.api.schemas import Store
from live_reviews.config import TRACKED_APPS
from live_reviews.core.timestamps import to_timestamp

MEESHO = TRACKED_APPS["meesho"]


# ── Play Store ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_playstore_maps_records():
    raw = {
        "reviewId": "gp:abc",
        "userName": "Priya",
        "content": "Great deals",
        "score": 4,
        "thumbsUpCount": 12,
        "reviewCreatedVersion": "15.2",
        "at": datetime.fromtimestamp(1714558830.123),
        "replyContent": "Thanks!",
    }
    with patch(
        "live_reviews.adapters.playstore.gplay_reviews",
        Mock(return_value=([raw], None))
    ) as scraper:
        reviews = await PlayStoreAdapter().fetch(MEESHO, 19)

    scraper.assert_called_once_with(
        "com.meesho.supply", lang="en", country="in", sort=Sort.NEWEST, count=19
    )
    assert len(reviews) == 1
    review = reviews[0]
    assert review.app == "Meesho"
    assert review.store is Store.PLAY_STORE
    assert review.username == "Priya"
    assert review.rating == 4
    assert review.review_text == "Great deals"
    assert review.date == "2024-05-01T10:20:30.123Z"
    assert review.version == "15.2"
    assert review.thumbs_up == 12
    assert review.reply == "Thanks!"
    assert review.review_id == "gp:abc"


@pytest.mark.asyncio
async def test_playstore_defaults_for_missing_fields():
    raw = {"userName": None, "content": None, "score": None, "at": None}
    with patch(
        "live_reviews.adapters.playstore.gplay_reviews",
        Mock(return_value=([raw], None))
    ):
        reviews = await PlayStoreAdapter().fetch(MEESHO, 5)

    dumped = reviews[0].model_dump(by_alias=True)
    assert dumped["username"] == "Anonymous"
    assert dumped["rating"] == 0
    assert dumped["reviewText"] == ""
    assert dumped["thumbsUp"] == 0
    assert dumped["date"] is None
    assert dumped["version"] is None
    assert dumped["reply"] is None
    assert dumped["reviewId"] is None


@pytest.fixture
def kolkata_time(monkeypatch):
    """Run with host local time at UTC+05:30."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.asyncio
async def test_playstore_local_dates_become_utc(kolkata_time):
    # google-play-scraper builds "at" with datetime.fromtimestamp(), i.e. naive local time
    raw = {"reviewId": "gp:epoch", "score": 5, "at": datetime.fromtimestamp(0)}
    with patch(
        "live_reviews.adapters.playstore.gplay_reviews",
        Mock(return_value=([raw], None))
    ):
        reviews = await PlayStoreAdapter().fetch(MEESHO, 1)

    assert reviews[0].date == "1970-01-01T00:00:00.000Z"


def test_naive_datetime_read_as_local_time(kolkata_time):
    assert to_timestamp(datetime(2024, 5, 1, 5, 30)) == "2024-05-01T00:00:00.000Z"
    assert to_timestamp(datetime(2024, 5, 1, 5, 30, tzinfo=timezone.utc)) == "2024-05-01T05:30:00.000Z"


@pytest.mark.asyncio
async def test_playstore_strict_propagates_errors():
    with patch(
        "live_reviews.adapters.playstore.gplay_reviews",
        Mock(side_effect=RuntimeError("blocked"))
    ):
        with pytest.raises(RuntimeError, match="blocked"):
            await PlayStoreAdapter(lenient=False).fetch(MEESHO, 5)


@pytest.mark.asyncio
async def test_playstore_lenient_returns_empty():
    with patch(
        "live_reviews.adapters.playstore.gplay_reviews",
        Mock(side_effect=RuntimeError("blocked"))
    ):
        assert await PlayStoreAdapter(lenient=True).fetch(MEESHO, 5) == []


@pytest.mark.asyncio
async def test_fetch_rejects_non_positive_count():
    with pytest.raises(ValueError):
        await PlayStoreAdapter().fetch(MEESHO, 0)


# ── App Store ─────────────────────────────────────────────────────────────────

def _entry(i: int, rating: str = "5") -> dict:
    return {
        "author": {"name": {"label": f"user{i}"}},
        "im:rating": {"label": rating},
        "im:version": {"label": "3.4.0"},
        "id": {"label": str(1000 + i)},
        "title": {"label": "Title"},
        "content": {"label": f"review {i}"},
        "updated": {"label": "2024-05-01T10:20:30-07:00"},
    }


def _feed(entries) -> dict:
    return {"feed": {"entry": entries}}


def _transport(pages: dict, requested: list) -> httpx.MockTransport:
    """Serve RSS pages by number; unknown pages are 404."""
    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        page = int(str(request.url).split("page=")[1].split("/")[0])
        if page not in pages:
            return httpx.Response(404)
        return httpx.Response(200, content=json.dumps(_feed(pages[page])))
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_appstore_maps_entries_and_skips_metadata():
    requested = []
    metadata = {"im:name": {"label": "Meesho"}}
    adapter = AppStoreAdapter(transport=_transport({1: [metadata, _entry(0, "4")]}, requested))

    reviews = await adapter.fetch(MEESHO, 19)

    assert requested[0] == (
        "https://itunes.apple.com/in/rss/customerreviews/id=1457958492/sortBy=mostRecent/page=1/json"
    )
    assert len(reviews) == 1
    review = reviews[0]
    assert review.store is Store.APP_STORE
    assert review.username == "user0"
    assert review.rating == 4
    assert review.review_text == "review 0"
    assert review.date == "2024-05-01T17:20:30.000Z"
    assert review.version == "3.4.0"
    assert review.thumbs_up == 0
    assert review.reply is None
    assert review.review_id == "1000"


@pytest.mark.asyncio
async def test_appstore_single_entry_feed_is_a_dict():
    adapter = AppStoreAdapter(transport=_transport({1: _entry(7)}, []))

    reviews = await adapter.fetch(MEESHO, 5)

    assert [r.review_id for r in reviews] == ["1007"]


@pytest.mark.asyncio
async def test_appstore_pages_until_count_then_trims():
    requested = []
    pages = {
        1: [_entry(i) for i in range(50)],
        2: [_entry(i) for i in range(50, 100)],
        3: [_entry(i) for i in range(100, 150)],
    }
    adapter = AppStoreAdapter(transport=_transport(pages, requested))

    reviews = await adapter.fetch(MEESHO, 60)

    assert len(requested) == 2
    assert len(reviews) == 60
    assert reviews[-1].review_id == "1059"


@pytest.mark.asyncio
async def test_appstore_404_ends_paging():
    adapter = AppStoreAdapter(transport=_transport({1: [_entry(i) for i in range(50)]}, []))

    reviews = await adapter.fetch(MEESHO, 100)

    assert len(reviews) == 50


@pytest.mark.asyncio
async def test_appstore_lenient_failure_returns_empty():
    adapter = AppStoreAdapter(lenient=True)
    adapter._fetch_page = AsyncMock(side_effect=httpx.ConnectError("unreachable"))

    assert await adapter.fetch(MEESHO, 19) == []


@pytest.mark.asyncio
async def test_appstore_strict_failure_propagates():
    adapter = AppStoreAdapter(lenient=False)
    adapter._fetch_page = AsyncMock(side_effect=httpx.ConnectError("unreachable"))

    with pytest.raises(httpx.ConnectError):
        await adapter.fetch(MEESHO, 19)


@pytest.mark.asyncio
async def test_appstore_later_page_failure_keeps_earlier_reviews():
    adapter = AppStoreAdapter(lenient=False)
    first_page = AppStoreAdapter()._parse_json(MEESHO, _feed([_entry(i) for i in range(50)]))
    adapter._fetch_page = AsyncMock(side_effect=[first_page, httpx.ReadTimeout("slow")])

    reviews = await adapter.fetch(MEESHO, 80)

    assert len(reviews) == 50
