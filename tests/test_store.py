"""Tests for market_news.core.store module."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from market_news.core.store import StoryStore
from market_news.models.datatypes import RankedStory


def _story(headline: str, sources: list[str], published_at: datetime | None = None) -> RankedStory:
    return RankedStory(
        headline=headline, url=f"https://example.com/{headline}", source_domain="example.com",
        published_at=published_at, bucket_name="oil_energy", bucket_display_name="Oil/Energy",
        impact_score=0.4, pickup_score=0.25, recency_score=0.9, relevance_score=0.3,
        final_score=0.4, article_count=len(sources), top_sources=sources,
    )


@pytest.fixture
def store(tmp_path: Path) -> StoryStore:
    return StoryStore(str(tmp_path / "db" / "news.db"))


class TestStoryStore:
    def test_save_and_load_in_display_order(self, store: StoryStore) -> None:
        published = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
        stories = [
            _story("first", ["reuters.com", "cnbc.com"], published),
            _story("second", ["ft.com", "wsj.com", "apnews.com"]),
        ]
        assert store.save_stories("report-1", stories) == 2

        rows = store.load_stories("report-1")
        assert [r["primary_headline"] for r in rows] == ["first", "second"]
        assert [r["display_order"] for r in rows] == [0, 1]
        assert rows[0]["published_at"] == published.isoformat()
        assert rows[1]["published_at"] is None
        assert rows[0]["query_bucket_name"] == "oil_energy"
        assert rows[0]["impact_score"] == 0.4
        assert rows[0]["pickup_score"] == 0.25
        assert rows[0]["recency_score"] == 0.9
        assert rows[0]["relevance_score"] == 0.3
        assert rows[1]["article_count"] == 3

    def test_top_sources_round_trip(self, store: StoryStore) -> None:
        sources = ["wsj.com", "reuters.com", "cnbc.com", "ft.com", "apnews.com"]
        store.save_stories("report-1", [_story("s", sources)])
        assert store.load_stories("report-1")[0]["top_sources"] == sources

    def test_reports_are_isolated(self, store: StoryStore) -> None:
        store.save_stories("a", [_story("in a", ["x.com", "y.com"])])
        store.save_stories("b", [_story("in b", ["x.com", "y.com"])])
        assert [r["primary_headline"] for r in store.load_stories("b")] == ["in b"]

    def test_delete_report(self, store: StoryStore) -> None:
        store.save_stories("a", [_story("one", ["x.com", "y.com"]), _story("two", ["x.com", "y.com"])])
        assert store.delete_report("a") == 2
        assert store.load_stories("a") == []

    def test_unknown_report_is_empty(self, store: StoryStore) -> None:
        assert store.load_stories("missing") == []
