"""Volume-spike impact score for one query bucket.

The last ``RECENT_HOURS`` of article volume are compared against the rest of
the 24h window, scaled to an equivalent ``RECENT_HOURS`` baseline:

    baseline = older / BASELINE_HOURS * RECENT_HOURS
    spike    = recent / baseline
    score    = clamp((spike - 1) / 2, 0, 1)

A 3x spike saturates the score; at or below baseline it is 0. Without older
volume there is no baseline, so the score saturates on raw recent volume
(``recent / 100``).
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pandas as pd

from market_news.core.logger import logger
from market_news.core.news_utils import parse_gdelt_date
from market_news.models.datatypes import VolumeDataPoint

RECENT_HOURS = 3
BASELINE_HOURS = 7
SATURATION_VOLUME = 100.0


class ImpactScorer:
    """Turns a bucket's volume series into a spike-intensity score in [0, 1]."""

    def score(
        self,
        volume_series: Iterable[VolumeDataPoint],
        now: Optional[datetime] = None,
    ) -> float:
        """Return the impact score for ``volume_series``.

        Args:
            volume_series: Raw GDELT volume points; unparsable timestamps are
                ignored.
            now: Reference time (aware UTC). Defaults to the current time.

        Returns:
            Score in ``[0.0, 1.0]``.
        """
        rows = []
        for point in volume_series:
            ts = parse_gdelt_date(point.date)
            if ts is not None:
                rows.append({"timestamp": ts, "value": point.value})

        if not rows:
            logger.debug("ImpactScorer: no parseable volume points, score=0")
            return 0.0

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cutoff = now - timedelta(hours=RECENT_HOURS)

        df = pd.DataFrame(rows)
        recent_mask = df["timestamp"] >= pd.Timestamp(cutoff)
        recent_volume = float(df.loc[recent_mask, "value"].sum())
        older_volume = float(df["value"].sum()) - recent_volume

        if older_volume <= 0:
            logger.debug("ImpactScorer: no older volume for baseline, saturating on recent volume")
            return _saturate(recent_volume)

        baseline = older_volume / BASELINE_HOURS * RECENT_HOURS
        if baseline <= 0:
            return _saturate(recent_volume)

        spike_ratio = recent_volume / baseline
        impact = min(1.0, max(0.0, (spike_ratio - 1.0) / 2.0))

        logger.debug(
            f"ImpactScorer: recent={recent_volume:.0f} baseline={baseline:.2f} "
            f"ratio={spike_ratio:.3f} score={impact:.3f}"
        )
        return impact


def _saturate(recent_volume: float) -> float:
    return min(1.0, max(0.0, recent_volume / SATURATION_VOLUME))
