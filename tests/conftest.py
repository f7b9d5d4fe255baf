"""Shared fixtures for the news pipeline tests."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Keep the module-level logger from writing into the working tree.
os.environ.setdefault(
    "MARKET_NEWS_LOG_FILE", os.path.join(tempfile.gettempdir(), "market_news_tests.log")
)

from market_news.models.datatypes import NewsCluster, RawArticle  # noqa: E402
from market_news.pipeline.dedup import distinct_domains  # noqa: E402

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def gdelt_stamp(dt: datetime) -> str:
    return dt.strftime("%Y%m%d%H%M%S")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_article():
    def _make(title: str, domain: str | None = "example.com",
              hours_ago: float | None = 1.0, url: str | None = None) -> RawArticle:
        seendate = gdelt_stamp(NOW - timedelta(hours=hours_ago)) if hours_ago is not None else None
        return RawArticle(
            url=url or f"https://{domain or 'unknown'}/{abs(hash(title)) % 10_000}",
            title=title,
            seendate=seendate,
            domain=domain,
        )
    return _make


@pytest.fixture
def make_cluster():
    def _make(bucket: str = "macro_rates", headline: str = "Fed holds rates steady",
              domains: list[str] | None = None, published_at: datetime | None = NOW) -> NewsCluster:
        domains = domains if domains is not None else ["reuters.com", "cnbc.com"]
        articles = [
            RawArticle(url=f"https://{d}/story", title=headline, domain=d) for d in domains
        ]
        return NewsCluster(
            bucket_name=bucket,
            primary_headline=headline,
            primary_url=f"https://{domains[0] if domains else 'unknown'}/story",
            primary_domain=domains[0] if domains else "unknown",
            primary_published_at=published_at,
            primary_tone=None,
            articles=articles,
            distinct_domains=distinct_domains(articles),
        )
    return _make
