"""Abstract base classes for news search providers."""

from abc import ABC, abstractmethod
from threading import Event
from typing import Iterable, List, Optional

from market_news.models.datatypes import Bucket, BucketFetchResult, FetchOutcome


class NewsSearchProvider(ABC):
    """Abstract interface for an event-search API queried per topic bucket."""

    @abstractmethod
    def fetch_articles(self, query: str, max_records: int = 250) -> FetchOutcome:
        """
        Fetch the most recent articles matching a query.

        Args:
            query (str): Raw (unencoded) search query.
            max_records (int): Upper bound on returned articles.

        Returns:
            FetchOutcome: ``items`` holds :class:`RawArticle` objects. Never raises
                for network or payload errors.
        """
        pass

    @abstractmethod
    def fetch_volume_timeline(self, query: str, timespan: str = "24h") -> FetchOutcome:
        """
        Fetch the raw article-volume time series for a query.

        Args:
            query (str): Raw (unencoded) search query.
            timespan (str): Lookback window understood by the provider.

        Returns:
            FetchOutcome: ``items`` holds :class:`VolumeDataPoint` objects. Never
                raises for network or payload errors.
        """
        pass

    @abstractmethod
    def fetch_all_buckets(
        self,
        buckets: Iterable[Bucket],
        max_records_per_bucket: int = 250,
        delay_between_requests_ms: int = 500,
        cancel_event: Optional[Event] = None,
    ) -> List[BucketFetchResult]:
        """
        Fetch articles and volume for every bucket, one bucket at a time.

        Returns:
            List[BucketFetchResult]: One entry per bucket, in input order.

        Raises:
            CancellationRequested: When ``cancel_event`` is set.
        """
        pass
