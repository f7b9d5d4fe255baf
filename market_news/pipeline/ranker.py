"""Multi-factor ranking of story clusters across all buckets.

Sub-scores, each in [0, 1]:
  impact    — bucket volume-spike score from :class:`ImpactScorer`
  pickup    — distinct reporting domains / 20, capped at 1
  recency   — exp(-hours / 8), 0 beyond 24h, 1 for future timestamps,
              0.5 when the publish time is unknown
  relevance — finance-keyword density of the headline x 3, capped at 1

``final`` is their weighted sum with weights summing to 1.
"""

import math
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional

from market_news.core.config import RankingWeights, Vocabulary, load_vocabulary
from market_news.core.logger import logger
from market_news.core.news_utils import headline_words, truncate_headline
from market_news.models.datatypes import NewsCluster, RankedStory

MAX_DOMAINS_FOR_PICKUP = 20
RECENCY_HORIZON_HOURS = 24
RECENCY_DECAY_HOURS = RECENCY_HORIZON_HOURS / 3.0
UNKNOWN_RECENCY = 0.5
RELEVANCE_MULTIPLIER = 3
MAX_TOP_SOURCES = 5


class NewsRanker:
    """Scores clusters and returns the top market-moving stories.

    Args:
        weights: Ranking weights. Defaults to 0.45 / 0.30 / 0.15 / 0.10.
        vocabulary: Finance keywords and bucket display names. Defaults to
            the packaged vocabulary.
    """

    def __init__(
        self,
        weights: Optional[RankingWeights] = None,
        vocabulary: Optional[Vocabulary] = None,
    ) -> None:
        self.weights = weights or RankingWeights()
        self.vocabulary = vocabulary or load_vocabulary()

    def rank(
        self,
        clusters: Iterable[NewsCluster],
        impact_scores: Mapping[str, float],
        max_stories: int = 10,
        min_articles_per_cluster: int = 2,
        now: Optional[datetime] = None,
    ) -> List[RankedStory]:
        """Filter, score, sort and truncate ``clusters``.

        Args:
            clusters: Clusters from every bucket.
            impact_scores: Impact score per bucket name.
            max_stories: Maximum number of stories returned.
            min_articles_per_cluster: Smaller clusters are unconfirmed and dropped.
            now: Reference time for recency. Defaults to the current time.

        Returns:
            Stories by descending final score; ties keep input order.
        """
        cluster_list = list(clusters)
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        eligible = [c for c in cluster_list if c.article_count >= min_articles_per_cluster]
        logger.info(
            f"NewsRanker: ranking {len(eligible)} clusters (filtered from "
            f"{len(cluster_list)} with min {min_articles_per_cluster} articles)"
        )

        scored = [self._score_cluster(c, impact_scores, now) for c in eligible]
        # sorted() is stable with reverse=True, so equal scores keep input order
        ranked = sorted(scored, key=lambda s: s.final_score, reverse=True)[:max(0, max_stories)]

        for position, story in enumerate(ranked, start=1):
            logger.debug(
                f"NewsRanker: rank {position}: {truncate_headline(story.headline)!r} "
                f"(score={story.final_score:.3f}, bucket={story.bucket_name})"
            )
        return ranked

    def _score_cluster(
        self,
        cluster: NewsCluster,
        impact_scores: Mapping[str, float],
        now: datetime,
    ) -> RankedStory:
        impact = _unit(float(impact_scores.get(cluster.bucket_name, 0.0)))
        pickup = pickup_score(len(cluster.distinct_domains))
        recency = recency_score(cluster.primary_published_at, now)
        relevance = self.relevance_score(cluster.primary_headline)

        w = self.weights
        final = (
            w.impact * impact
            + w.pickup * pickup
            + w.recency * recency
            + w.relevance * relevance
        )

        return RankedStory(
            headline=cluster.primary_headline,
            url=cluster.primary_url,
            source_domain=cluster.primary_domain,
            published_at=cluster.primary_published_at,
            bucket_name=cluster.bucket_name,
            bucket_display_name=self.vocabulary.bucket_display_names.get(
                cluster.bucket_name, cluster.bucket_name
            ),
            impact_score=impact,
            pickup_score=pickup,
            recency_score=recency,
            relevance_score=relevance,
            final_score=_unit(final),
            article_count=cluster.article_count,
            top_sources=list(cluster.distinct_domains[:MAX_TOP_SOURCES]),
        )

    def relevance_score(self, headline: Optional[str]) -> float:
        words = headline_words(headline)
        if not words:
            return 0.0
        matches = sum(1 for w in words if w in self.vocabulary.market_keywords)
        return min(1.0, matches / len(words) * RELEVANCE_MULTIPLIER)


def pickup_score(distinct_domain_count: int) -> float:
    return min(1.0, distinct_domain_count / MAX_DOMAINS_FOR_PICKUP)


def recency_score(published_at: Optional[datetime], now: datetime) -> float:
    """Exponential decay over a 24h horizon."""
    if published_at is None:
        return UNKNOWN_RECENCY
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)

    hours_ago = (now - published_at).total_seconds() / 3600.0
    if hours_ago < 0:
        return 1.0  # clock skew
    if hours_ago >= RECENCY_HORIZON_HOURS:
        return 0.0
    return math.exp(-hours_ago / RECENCY_DECAY_HOURS)


def _unit(value: float) -> float:
    return min(1.0, max(0.0, value))
