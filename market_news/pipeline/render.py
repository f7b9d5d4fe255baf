"""Rendering and export of ranked stories.

- ``render_news_section`` — markdown "Market-Moving News" block
- ``build_news_content``  — JSON-ready dicts for the structured brief
- ``write_stories_csv``   — flat CSV export, one row per story
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from market_news.core.config import Vocabulary, load_vocabulary
from market_news.models.datatypes import RankedStory

CSV_FILENAME = "market_news.csv"

CSV_HEADER = [
    "Rank", "Headline", "Url", "Source", "Published_At",
    "Bucket", "Bucket_Display_Name",
    "Impact_Score", "Pickup_Score", "Recency_Score", "Relevance_Score",
    "Final_Score", "Article_Count", "Top_Sources",
]


def render_news_section(
    stories: Sequence[RankedStory],
    now: Optional[datetime] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> str:
    """Render stories as a markdown section. Returns ``""`` for no stories."""
    if not stories:
        return ""

    vocabulary = vocabulary or load_vocabulary()
    now = now or datetime.now(timezone.utc)

    lines = ["## Market-Moving News", ""]
    for story in stories:
        lines.append(f"### [{story.bucket_display_name}] {story.headline}")
        lines.append("")

        time_ago = _time_ago(story.published_at, now) if story.published_at else "Recently"
        lines.append(
            f"*{time_ago} | {story.article_count} sources | Score: {story.final_score:.2f}*"
        )
        lines.append("")

        blurb = vocabulary.bucket_blurbs.get(story.bucket_name)
        if blurb:
            lines.append(f"**Why it matters:** {blurb}")
            lines.append("")

        lines.append(f"[Read more]({story.url}) ({story.source_domain})")
        lines.append("")

    return "\n".join(lines)


def build_news_content(stories: Sequence[RankedStory]) -> List[Dict[str, Any]]:
    return [
        {
            "headline": s.headline,
            "url": s.url,
            "source": s.source_domain,
            "publishedAt": s.published_at.isoformat() if s.published_at else None,
            "bucket": s.bucket_name,
            "bucketDisplayName": s.bucket_display_name,
            "articleCount": s.article_count,
            "score": round(s.final_score, 4),
            "topSources": list(s.top_sources),
        }
        for s in stories
    ]


def write_stories_csv(stories: Sequence[RankedStory], output_dir: str | Path = "output") -> Path:
    """Write ``market_news.csv`` (overwrites each run) and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    path = Path(output_dir) / CSV_FILENAME

    rows = [
        {
            "Rank": rank,
            "Headline": s.headline,
            "Url": s.url,
            "Source": s.source_domain,
            "Published_At": s.published_at.isoformat() if s.published_at else "",
            "Bucket": s.bucket_name,
            "Bucket_Display_Name": s.bucket_display_name,
            "Impact_Score": round(s.impact_score, 4),
            "Pickup_Score": round(s.pickup_score, 4),
            "Recency_Score": round(s.recency_score, 4),
            "Relevance_Score": round(s.relevance_score, 4),
            "Final_Score": round(s.final_score, 4),
            "Article_Count": s.article_count,
            "Top_Sources": ";".join(s.top_sources),
        }
        for rank, s in enumerate(stories, start=1)
    ]
    pd.DataFrame(rows, columns=CSV_HEADER).to_csv(path, index=False)
    return path


def _time_ago(published_at: datetime, now: datetime) -> str:
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    minutes = (now - published_at).total_seconds() / 60.0
    if minutes < 60:
        return f"{int(minutes)} min ago"
    if minutes < 1440:
        return f"{int(minutes // 60)} hr ago"
    return f"{int(minutes // 1440)} days ago"
