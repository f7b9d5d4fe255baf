"""Local SQLite storage for ranked news stories."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Sequence

from market_news.core.logger import logger
from market_news.models.datatypes import RankedStory


class StoryStore:
    """SQLite table holding one row per ranked story, keyed by report id."""

    def __init__(self, db_path: str = "output/market_news.db") -> None:
        """
        Initialize the story store.

        Args:
            db_path (str): Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the stories table if it doesn't exist."""
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS news_story_clusters (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    report_id TEXT NOT NULL,
                    display_order INTEGER NOT NULL,
                    primary_headline TEXT NOT NULL,
                    url TEXT,
                    source_domain TEXT,
                    published_at TEXT,
                    query_bucket_name TEXT NOT NULL,
                    impact_score REAL NOT NULL,
                    pickup_score REAL NOT NULL,
                    recency_score REAL NOT NULL,
                    relevance_score REAL NOT NULL,
                    final_score REAL NOT NULL,
                    article_count INTEGER NOT NULL,
                    representative_sources_json TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS ix_news_story_clusters_report "
                "ON news_story_clusters (report_id)"
            )

    def save_stories(self, report_id: str, stories: Sequence[RankedStory]) -> int:
        """
        Persist ``stories`` under ``report_id`` in display order.

        Args:
            report_id (str): Identifier of the parent report.
            stories (Sequence[RankedStory]): Ranked stories.

        Returns:
            int: Number of rows written.
        """
        created_at = datetime.now(timezone.utc).isoformat()
        rows = [
            (
                report_id, order, s.headline, s.url, s.source_domain,
                s.published_at.isoformat() if s.published_at else None,
                s.bucket_name, s.impact_score, s.pickup_score, s.recency_score,
                s.relevance_score, s.final_score, s.article_count,
                s.top_sources_json(), created_at,
            )
            for order, s in enumerate(stories)
        ]
        try:
            with self._get_connection() as conn:
                conn.executemany(
                    """
                    INSERT INTO news_story_clusters (
                        report_id, display_order, primary_headline, url, source_domain,
                        published_at, query_bucket_name, impact_score, pickup_score,
                        recency_score, relevance_score, final_score, article_count,
                        representative_sources_json, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    rows,
                )
        except sqlite3.Error as e:
            logger.error(f"StoryStore: failed to save stories for report {report_id}: {e}")
            raise
        logger.info(f"StoryStore: saved {len(rows)} stories for report {report_id}")
        return len(rows)

    def load_stories(self, report_id: str) -> List[Dict[str, Any]]:
        """
        Return the stored rows of a report in display order.

        ``top_sources`` is restored from its JSON column as a list.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM news_story_clusters WHERE report_id = ? ORDER BY display_order",
                (report_id,),
            )
            rows = cursor.fetchall()

        stories = []
        for row in rows:
            record = dict(row)
            record["top_sources"] = RankedStory.top_sources_from_json(
                record.pop("representative_sources_json")
            )
            stories.append(record)
        return stories

    def delete_report(self, report_id: str) -> int:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM news_story_clusters WHERE report_id = ?", (report_id,)
            )
            return cursor.rowcount
