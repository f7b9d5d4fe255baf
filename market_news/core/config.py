"""Configuration module for loading project settings and environment variables."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping

import yaml
from dotenv import load_dotenv

from market_news.models.datatypes import Bucket

# Load environment variables from .env file
load_dotenv()

_VOCABULARY_PATH = Path(__file__).resolve().parent.parent / "data" / "vocabulary.yaml"
_WEIGHT_TOLERANCE = 1e-6
_TRUTHY = {"1", "true", "yes", "on"}


def load_config(config_path: str | Path = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from the specified YAML file.

    Args:
        config_path (str | Path): Path to the configuration file. Defaults to "config.yaml".

    Returns:
        Dict[str, Any]: A dictionary containing the configuration settings.
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    with open(config_file, "r", encoding="utf-8") as file:
        config_data = yaml.safe_load(file)

    if not config_data:
        raise ValueError(f"Configuration file {config_path} is empty or invalid.")

    return config_data


@dataclass(frozen=True)
class Vocabulary:
    """Static word lists consumed by the deduplicator, ranker and renderer."""
    stop_words: FrozenSet[str] = frozenset()
    preferred_domains: FrozenSet[str] = frozenset()
    market_keywords: FrozenSet[str] = frozenset()
    bucket_display_names: Mapping[str, str] = field(default_factory=dict)
    bucket_blurbs: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vocabulary":
        return cls(
            stop_words=frozenset(str(w).lower() for w in data.get("stop_words") or []),
            preferred_domains=frozenset(str(d).lower() for d in data.get("preferred_domains") or []),
            market_keywords=frozenset(str(k).lower() for k in data.get("market_keywords") or []),
            bucket_display_names=dict(data.get("bucket_display_names") or {}),
            bucket_blurbs=dict(data.get("bucket_blurbs") or {}),
        )


@lru_cache(maxsize=None)
def load_vocabulary(path: str | Path = _VOCABULARY_PATH) -> Vocabulary:
    """Load the word lists shipped in ``market_news/data/vocabulary.yaml``.

    Args:
        path: Alternative vocabulary file, mainly for tests.

    Returns:
        Parsed :class:`Vocabulary`.
    """
    return Vocabulary.from_dict(load_config(path))


@dataclass(frozen=True)
class RankingWeights:
    """Convex weights for the four ranking sub-scores."""
    impact: float = 0.45
    pickup: float = 0.30
    recency: float = 0.15
    relevance: float = 0.10

    def __post_init__(self) -> None:
        weights = (self.impact, self.pickup, self.recency, self.relevance)
        if any(w < 0 for w in weights):
            raise ValueError(f"Ranking weights must be non-negative, got {weights}")
        total = sum(weights)
        if abs(total - 1.0) > _WEIGHT_TOLERANCE:
            raise ValueError(f"Ranking weights must sum to 1.0, got {total:.6f}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankingWeights":
        defaults = cls()
        return cls(
            impact=float(data.get("impact", defaults.impact)),
            pickup=float(data.get("pickup", defaults.pickup)),
            recency=float(data.get("recency", defaults.recency)),
            relevance=float(data.get("relevance", defaults.relevance)),
        )


@dataclass
class NewsConfig:
    """Typed view over the ``news`` section of config.yaml.

    Attributes:
        enabled: Master switch; a disabled pipeline returns no news.
        max_records_per_query: GDELT ``maxrecords`` cap per bucket.
        delay_between_requests_ms: Pause between consecutive GDELT calls.
        request_timeout_seconds: Per-request HTTP timeout.
        max_stories: Length cap of the ranked list.
        min_articles_per_cluster: Clusters smaller than this are dropped.
        similarity_threshold: Jaccard threshold for clustering headlines.
        weights: Ranking weights (must sum to 1).
        buckets: Ordered query buckets.
        output_dir: Where exports and the story database are written.
    """
    enabled: bool = True
    max_records_per_query: int = 250
    delay_between_requests_ms: int = 500
    request_timeout_seconds: int = 30
    max_stories: int = 10
    min_articles_per_cluster: int = 2
    similarity_threshold: float = 0.7
    weights: RankingWeights = field(default_factory=RankingWeights)
    buckets: List[Bucket] = field(default_factory=list)
    output_dir: str = "output"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "NewsConfig":
        """Build a :class:`NewsConfig` from the parsed YAML dict.

        Environment variables ``MARKET_NEWS_ENABLED`` and
        ``MARKET_NEWS_OUTPUT_DIR`` override the file values.

        Raises:
            ValueError: On invalid weights or malformed buckets.
        """
        news = config.get("news") or {}
        defaults = cls()

        buckets: List[Bucket] = []
        for raw in news.get("buckets") or []:
            if not isinstance(raw, dict):
                raise ValueError(f"Bucket entries must be mappings, got {raw!r}")
            name = (raw.get("name") or "").strip()
            query = (raw.get("query") or "").strip()
            if not name or not query:
                raise ValueError(f"Bucket entries need a name and a query, got {raw!r}")
            buckets.append(Bucket(
                name=name,
                query=query,
                display_name=raw.get("display_name") or name,
            ))

        enabled = bool(news.get("enabled", defaults.enabled))
        env_enabled = os.getenv("MARKET_NEWS_ENABLED")
        if env_enabled is not None:
            enabled = env_enabled.strip().lower() in _TRUTHY

        threshold = float(news.get("similarity_threshold", defaults.similarity_threshold))
        if not 0.0 < threshold <= 1.0:
            raise ValueError(f"similarity_threshold must be in (0, 1], got {threshold}")

        return cls(
            enabled=enabled,
            max_records_per_query=int(news.get("max_records_per_query", defaults.max_records_per_query)),
            delay_between_requests_ms=int(
                news.get("delay_between_requests_ms", defaults.delay_between_requests_ms)
            ),
            request_timeout_seconds=int(
                news.get("request_timeout_seconds", defaults.request_timeout_seconds)
            ),
            max_stories=int(news.get("max_stories", defaults.max_stories)),
            min_articles_per_cluster=int(
                news.get("min_articles_per_cluster", defaults.min_articles_per_cluster)
            ),
            similarity_threshold=threshold,
            weights=RankingWeights.from_dict(news.get("weights") or {}),
            buckets=buckets,
            output_dir=os.getenv("MARKET_NEWS_OUTPUT_DIR", config.get("output_dir", defaults.output_dir)),
        )
