"""Data structures for the market-moving news pipeline."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Bucket:
    """A named topic query whose articles are fetched and scored independently."""
    name: str
    query: str
    display_name: str


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class RawArticle:
    """
    One entry of a GDELT ``artlist`` response. Every field except ``url`` and
    ``title`` may be absent upstream.
    """
    url: str
    title: str
    seendate: Optional[str] = None
    domain: Optional[str] = None
    language: Optional[str] = None
    source_country: Optional[str] = None
    tone: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawArticle":
        tone = data.get("tone")
        try:
            tone = float(tone) if tone is not None else None
        except (TypeError, ValueError):
            tone = None
        return cls(
            url=_opt_str(data.get("url")) or "",
            title=_opt_str(data.get("title")) or "",
            seendate=_opt_str(data.get("seendate")),
            domain=_opt_str(data.get("domain")),
            language=_opt_str(data.get("language")),
            source_country=_opt_str(data.get("sourcecountry")),
            tone=tone,
        )


@dataclass
class VolumeDataPoint:
    """One point of a GDELT ``timelinevolraw`` series."""
    date: str
    value: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["VolumeDataPoint"]:
        """Return a point, or ``None`` when the value is not numeric."""
        try:
            value = int(float(data.get("value")))
        except (TypeError, ValueError, OverflowError):
            return None
        return cls(date=_opt_str(data.get("date")) or "", value=value)


class FetchStatus(Enum):
    """Outcome of a single upstream call."""
    SUCCESS = "success"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"


@dataclass
class FetchOutcome:
    """Result of one GDELT call. Non-success outcomes always carry no items."""
    status: FetchStatus
    items: List[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @classmethod
    def failed(cls, status: FetchStatus) -> "FetchOutcome":
        return cls(status=status, items=[])


@dataclass
class BucketFetchResult:
    """Articles and volume series fetched for one bucket."""
    bucket_name: str
    articles: List[RawArticle] = field(default_factory=list)
    volume_series: List[VolumeDataPoint] = field(default_factory=list)


@dataclass
class NewsCluster:
    """
    Near-duplicate articles from one bucket, represented by a primary article.
    ``distinct_domains`` keeps first-occurrence order.
    """
    bucket_name: str
    primary_headline: str
    primary_url: str
    primary_domain: str
    primary_published_at: Optional[datetime]
    primary_tone: Optional[float]
    articles: List[RawArticle]
    distinct_domains: List[str]

    @property
    def article_count(self) -> int:
        return len(self.articles)


@dataclass
class RankedStory:
    """
    A scored, market-moving story ready for rendering and persistence.
    All scores lie in ``[0, 1]``.
    """
    headline: str
    url: str
    source_domain: str
    published_at: Optional[datetime]
    bucket_name: str
    bucket_display_name: str
    impact_score: float
    pickup_score: float
    recency_score: float
    relevance_score: float
    final_score: float
    article_count: int
    top_sources: List[str] = field(default_factory=list)

    def top_sources_json(self) -> str:
        return json.dumps(self.top_sources)

    @staticmethod
    def top_sources_from_json(raw: Optional[str]) -> List[str]:
        if not raw:
            return []
        return [str(s) for s in json.loads(raw)]
