"""Headline deduplication — groups one bucket's articles into story clusters.

Articles are walked in input order. Each unassigned article seeds a new
cluster and pulls in every later unassigned article whose headline token set
has Jaccard similarity >= threshold *with the seed*. Members are never compared
with each other, so grouping is not transitive: given ``[a, b, c]`` where
``a~b`` and ``b~c`` but not ``a~c``, the result is ``{a, b}, {c}``.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from market_news.core.config import Vocabulary, load_vocabulary
from market_news.core.logger import logger
from market_news.core.news_utils import jaccard_similarity, parse_gdelt_date, tokenize_headline
from market_news.models.datatypes import NewsCluster, RawArticle

UNKNOWN_DOMAIN = "unknown"
DEFAULT_SIMILARITY_THRESHOLD = 0.7

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class NewsDeduplicator:
    """Clusters near-duplicate headlines within a single bucket.

    Args:
        vocabulary: Stop words and preferred wire services. Defaults to the
            packaged vocabulary.
    """

    def __init__(self, vocabulary: Optional[Vocabulary] = None) -> None:
        self.vocabulary = vocabulary or load_vocabulary()

    def cluster(
        self,
        articles: Iterable[RawArticle],
        bucket_name: str,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> List[NewsCluster]:
        """Group ``articles`` into clusters of near-identical headlines.

        Args:
            articles: Raw articles of one bucket, in fetch order.
            bucket_name: Bucket the clusters belong to.
            similarity_threshold: Minimum Jaccard similarity to the seed.

        Returns:
            Clusters in seed order. Empty when no headline yields tokens.
        """
        article_list = list(articles)
        if not article_list:
            logger.debug(f"NewsDeduplicator: no articles to cluster for bucket '{bucket_name}'")
            return []

        tokenized = []
        for article in article_list:
            tokens = tokenize_headline(article.title, self.vocabulary.stop_words)
            if tokens:
                tokenized.append((article, tokens))

        if not tokenized:
            logger.warning(f"NewsDeduplicator: no tokenizable headlines for bucket '{bucket_name}'")
            return []

        groups: List[List[RawArticle]] = []
        assigned = [False] * len(tokenized)
        for i, (seed, seed_tokens) in enumerate(tokenized):
            if assigned[i]:
                continue
            assigned[i] = True
            group = [seed]
            for j in range(i + 1, len(tokenized)):
                if assigned[j]:
                    continue
                candidate, candidate_tokens = tokenized[j]
                if jaccard_similarity(seed_tokens, candidate_tokens) >= similarity_threshold:
                    group.append(candidate)
                    assigned[j] = True
            groups.append(group)

        logger.info(
            f"NewsDeduplicator: clustered {len(article_list)} articles into "
            f"{len(groups)} clusters for bucket '{bucket_name}'"
        )
        return [self._build_cluster(group, bucket_name) for group in groups]

    def _build_cluster(self, articles: List[RawArticle], bucket_name: str) -> NewsCluster:
        primary = self._select_primary(articles)
        return NewsCluster(
            bucket_name=bucket_name,
            primary_headline=primary.title,
            primary_url=primary.url,
            primary_domain=primary.domain or UNKNOWN_DOMAIN,
            primary_published_at=parse_gdelt_date(primary.seendate),
            primary_tone=primary.tone,
            articles=list(articles),
            distinct_domains=distinct_domains(articles),
        )

    def _select_primary(self, articles: List[RawArticle]) -> RawArticle:
        """First preferred wire service, else the most recently seen article."""
        preferred = self.vocabulary.preferred_domains
        for article in articles:
            if article.domain and article.domain.lower() in preferred:
                return article
        return max(articles, key=lambda a: parse_gdelt_date(a.seendate) or _OLDEST)


def distinct_domains(articles: Iterable[RawArticle]) -> List[str]:
    """Case-insensitive distinct domains in first-occurrence order."""
    seen = set()
    domains = []
    for article in articles:
        domain = article.domain or UNKNOWN_DOMAIN
        key = domain.lower()
        if key not in seen:
            seen.add(key)
            domains.append(domain)
    return domains
