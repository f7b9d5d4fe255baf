"""Pipeline engine — fetch, score, cluster and rank market-moving news.

Flow per run:
  1. Fetch     — GdeltNewsProvider.fetch_all_buckets (sequential, throttled)
  2. Impact    — ImpactScorer.score(volume series) per bucket
  3. Cluster   — NewsDeduplicator.cluster(articles) per bucket
  4. Rank      — NewsRanker.rank(all clusters, impact map)

The engine is the failure boundary: anything other than cancellation is logged
and turned into ``None`` so the surrounding report is generated without a news
section. An empty list means the run succeeded but found nothing worth showing.
"""

from datetime import datetime, timezone
from threading import Event
from typing import Dict, List, Optional

from market_news.core.config import NewsConfig
from market_news.core.errors import CancellationRequested
from market_news.core.logger import logger
from market_news.models.datatypes import NewsCluster, RankedStory
from market_news.pipeline.dedup import NewsDeduplicator
from market_news.pipeline.impact import ImpactScorer
from market_news.pipeline.ranker import NewsRanker
from market_news.providers.base import NewsSearchProvider
from market_news.providers.gdelt import GdeltNewsProvider


class NewsPipeline:
    """Orchestrates the market-moving news pipeline.

    Args:
        config: Parsed :class:`NewsConfig` (passed in; not re-loaded internally).
        provider: News search provider. Defaults to GDELT.
        scorer: Impact scorer.
        deduplicator: Headline clusterer.
        ranker: Story ranker. Defaults to one built from ``config.weights``.
    """

    def __init__(
        self,
        config: NewsConfig,
        provider: Optional[NewsSearchProvider] = None,
        scorer: Optional[ImpactScorer] = None,
        deduplicator: Optional[NewsDeduplicator] = None,
        ranker: Optional[NewsRanker] = None,
    ) -> None:
        self.config = config
        self.provider = provider or GdeltNewsProvider(timeout_seconds=config.request_timeout_seconds)
        self.scorer = scorer or ImpactScorer()
        self.deduplicator = deduplicator or NewsDeduplicator()
        self.ranker = ranker or NewsRanker(weights=config.weights)

    # ── public ────────────────────────────────────────────────────────────────

    def run(
        self,
        now: Optional[datetime] = None,
        cancel_event: Optional[Event] = None,
    ) -> Optional[List[RankedStory]]:
        """Run one stateless pass over freshly fetched data.

        Args:
            now: Reference time for scoring. Defaults to the current time.
            cancel_event: Set by the caller to abort the fetch.

        Returns:
            Ranked stories, or ``None`` when news is disabled or the run failed.

        Raises:
            CancellationRequested: Propagated from the fetch stage.
        """
        if not self.config.enabled:
            logger.info("NewsPipeline: news integration is disabled")
            return None

        try:
            return self._run(now or datetime.now(timezone.utc), cancel_event)
        except CancellationRequested:
            logger.warning("NewsPipeline: run cancelled")
            raise
        except Exception as exc:
            logger.warning(
                f"NewsPipeline: failed to fetch or process news, continuing without "
                f"news section: {exc}",
                exc_info=True,
            )
            return None

    # ── internal ──────────────────────────────────────────────────────────────

    def _run(self, now: datetime, cancel_event: Optional[Event]) -> List[RankedStory]:
        cfg = self.config
        logger.info(f"NewsPipeline: fetching news for {len(cfg.buckets)} query buckets")

        results = self.provider.fetch_all_buckets(
            cfg.buckets,
            cfg.max_records_per_query,
            cfg.delay_between_requests_ms,
            cancel_event,
        )

        impact_scores: Dict[str, float] = {}
        all_clusters: List[NewsCluster] = []
        for result in results:
            impact = self.scorer.score(result.volume_series, now=now)
            impact_scores[result.bucket_name] = impact
            logger.debug(f"NewsPipeline: bucket '{result.bucket_name}' impact={impact:.3f}")

            all_clusters.extend(self.deduplicator.cluster(
                result.articles, result.bucket_name, cfg.similarity_threshold,
            ))

        logger.info(f"NewsPipeline: created {len(all_clusters)} clusters from all buckets")

        stories = self.ranker.rank(
            all_clusters,
            impact_scores,
            max_stories=cfg.max_stories,
            min_articles_per_cluster=cfg.min_articles_per_cluster,
            now=now,
        )
        logger.info(f"NewsPipeline: ranked {len(stories)} market-moving news stories")
        return stories
