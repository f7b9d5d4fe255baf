"""GDELT DOC 2.0 provider — per-bucket article lists and volume timelines.

Fetch per bucket:
  1. ``mode=artlist``        — up to ``maxrecords`` articles, newest first
  2. wait ``delay_between_requests_ms``
  3. ``mode=timelinevolraw`` — raw article volume over the last 24h
  4. wait again before the next bucket

Buckets are fetched strictly one after another to stay polite with the public
endpoint. Each call degrades to an empty :class:`FetchOutcome` on network,
timeout or payload errors, and a failing bucket is replaced by an empty result
so the batch always completes. Only cancellation aborts the batch.
"""

import json
import time
import urllib.parse
from threading import Event
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from market_news.core.errors import CancellationRequested
from market_news.core.logger import logger
from market_news.models.datatypes import (
    Bucket,
    BucketFetchResult,
    FetchOutcome,
    FetchStatus,
    RawArticle,
    VolumeDataPoint,
)
from market_news.providers.base import NewsSearchProvider

GDELT_DOC_URL = "https://api.gdeltproject.org/api/v2/doc/doc"
DEFAULT_TIMESPAN = "24h"


class GdeltNewsProvider(NewsSearchProvider):
    """GDELT DOC API client.

    Args:
        timeout_seconds: Per-request HTTP timeout.
        base_url: Endpoint override, mainly for tests.
    """

    def __init__(self, timeout_seconds: int = 30, base_url: str = GDELT_DOC_URL) -> None:
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url

    # ── public ────────────────────────────────────────────────────────────────

    def fetch_articles(self, query: str, max_records: int = 250) -> FetchOutcome:
        """Return the article list for ``query`` (newest first)."""
        url = (
            f"{self.base_url}?query={_encode(query)}&mode=artlist"
            f"&maxrecords={max_records}&format=json&sort=datedesc"
        )
        logger.info(f"GdeltNewsProvider: fetching articles q={query!r}")

        status, payload = self._get_json(url, query, "articles")
        if status is not FetchStatus.SUCCESS:
            return FetchOutcome.failed(status)

        raw_articles = payload.get("articles")
        if raw_articles is None:
            raw_articles = []
        if not isinstance(raw_articles, list):
            logger.warning(
                f"GdeltNewsProvider: PARSE_ERROR articles is not a list for q={query!r}"
            )
            return FetchOutcome.failed(FetchStatus.PARSE_ERROR)

        articles = [RawArticle.from_dict(a) for a in raw_articles if isinstance(a, dict)]
        logger.info(f"GdeltNewsProvider: {len(articles)} articles for q={query!r}")
        if not articles:
            return FetchOutcome.failed(FetchStatus.EMPTY)
        return FetchOutcome(status=FetchStatus.SUCCESS, items=articles)

    def fetch_volume_timeline(self, query: str, timespan: str = DEFAULT_TIMESPAN) -> FetchOutcome:
        """Return the first ``timelinevolraw`` series for ``query``."""
        url = (
            f"{self.base_url}?query={_encode(query)}&mode=timelinevolraw"
            f"&timespan={timespan}&format=json"
        )
        logger.debug(f"GdeltNewsProvider: fetching volume timeline q={query!r}")

        status, payload = self._get_json(url, query, "timeline")
        if status is not FetchStatus.SUCCESS:
            return FetchOutcome.failed(status)

        timeline = payload.get("timeline") or []
        if not isinstance(timeline, list):
            logger.warning(
                f"GdeltNewsProvider: PARSE_ERROR timeline is not a list for q={query!r}"
            )
            return FetchOutcome.failed(FetchStatus.PARSE_ERROR)

        first = timeline[0] if timeline and isinstance(timeline[0], dict) else {}
        raw_points = first.get("data") or []
        if not isinstance(raw_points, list):
            raw_points = []

        points = []
        for raw in raw_points:
            if not isinstance(raw, dict):
                continue
            point = VolumeDataPoint.from_dict(raw)
            if point is not None:
                points.append(point)

        logger.debug(f"GdeltNewsProvider: {len(points)} volume points for q={query!r}")
        if not points:
            return FetchOutcome.failed(FetchStatus.EMPTY)
        return FetchOutcome(status=FetchStatus.SUCCESS, items=points)

    def fetch_all_buckets(
        self,
        buckets: Iterable[Bucket],
        max_records_per_bucket: int = 250,
        delay_between_requests_ms: int = 500,
        cancel_event: Optional[Event] = None,
    ) -> List[BucketFetchResult]:
        """Fetch every bucket sequentially, isolating per-bucket failures.

        Args:
            buckets: Ordered query buckets.
            max_records_per_bucket: ``maxrecords`` for each article list.
            delay_between_requests_ms: Pause between consecutive calls.
            cancel_event: Set by the caller to abort the batch.

        Returns:
            One :class:`BucketFetchResult` per bucket, in input order. A bucket
            that failed unexpectedly is present with empty collections.

        Raises:
            CancellationRequested: If ``cancel_event`` is set before a bucket
                starts or during a wait.
        """
        bucket_list = list(buckets)
        logger.info(f"GdeltNewsProvider: fetching {len(bucket_list)} query buckets")

        results: List[BucketFetchResult] = []
        for index, bucket in enumerate(bucket_list):
            _raise_if_cancelled(cancel_event)
            is_last = index == len(bucket_list) - 1
            try:
                results.append(self._fetch_bucket(
                    bucket, max_records_per_bucket, delay_between_requests_ms,
                    cancel_event, is_last,
                ))
            except CancellationRequested:
                raise
            except Exception as exc:
                logger.warning(
                    f"GdeltNewsProvider: bucket '{bucket.name}' failed, skipping: {exc}"
                )
                results.append(BucketFetchResult(bucket_name=bucket.name))

        return results

    # ── internal ──────────────────────────────────────────────────────────────

    def _fetch_bucket(
        self,
        bucket: Bucket,
        max_records: int,
        delay_ms: int,
        cancel_event: Optional[Event],
        is_last: bool,
    ) -> BucketFetchResult:
        articles = self.fetch_articles(bucket.query, max_records)
        _pause(delay_ms, cancel_event)
        timeline = self.fetch_volume_timeline(bucket.query, DEFAULT_TIMESPAN)

        logger.info(
            f"GdeltNewsProvider: bucket '{bucket.name}': "
            f"{len(articles.items)} articles [{articles.status.value}], "
            f"{len(timeline.items)} timeline points [{timeline.status.value}]"
        )

        if not is_last:
            _pause(delay_ms, cancel_event)

        return BucketFetchResult(
            bucket_name=bucket.name,
            articles=list(articles.items),
            volume_series=list(timeline.items),
        )

    def _get_json(self, url: str, query: str, label: str) -> Tuple[FetchStatus, Optional[Dict[str, Any]]]:
        """GET ``url`` and decode a JSON object, mapping every failure to a status."""
        try:
            resp = requests.get(url, timeout=self.timeout_seconds)
            resp.raise_for_status()
        except requests.Timeout:
            logger.warning(f"GdeltNewsProvider: TIMEOUT fetching {label} for q={query!r}")
            return FetchStatus.TIMEOUT, None
        except requests.RequestException as exc:
            logger.warning(f"GdeltNewsProvider: HTTP_ERROR fetching {label} for q={query!r}: {exc}")
            return FetchStatus.HTTP_ERROR, None

        body = (resp.text or "").strip()
        if not body or body == "{}":
            logger.warning(f"GdeltNewsProvider: EMPTY {label} response for q={query!r}")
            return FetchStatus.EMPTY, None

        try:
            payload = json.loads(body)
        except ValueError as exc:
            logger.warning(
                f"GdeltNewsProvider: PARSE_ERROR {label} for q={query!r}: {exc} | "
                f"body={body[:200]!r}"
            )
            return FetchStatus.PARSE_ERROR, None

        if not isinstance(payload, dict):
            logger.warning(f"GdeltNewsProvider: PARSE_ERROR {label} payload is not an object")
            return FetchStatus.PARSE_ERROR, None

        return FetchStatus.SUCCESS, payload


# ── helpers ───────────────────────────────────────────────────────────────────

def _encode(query: str) -> str:
    return urllib.parse.quote_plus(query)


def _raise_if_cancelled(cancel_event: Optional[Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancellationRequested("news fetch cancelled")


def _pause(delay_ms: int, cancel_event: Optional[Event]) -> None:
    """Sleep between calls; wakes up early and raises when cancelled."""
    if delay_ms <= 0:
        return
    seconds = delay_ms / 1000.0
    if cancel_event is None:
        time.sleep(seconds)
        return
    if cancel_event.wait(seconds):
        raise CancellationRequested("news fetch cancelled")
