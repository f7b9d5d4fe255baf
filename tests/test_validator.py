"""Tests for market_news.pipeline.validator module."""

from pathlib import Path

import pandas as pd

from market_news.models.datatypes import RankedStory
from market_news.pipeline.render import write_stories_csv
from market_news.pipeline.validator import validate


def _story(final: float, count: int = 2) -> RankedStory:
    return RankedStory(
        headline="h", url="u", source_domain="d", published_at=None,
        bucket_name="b", bucket_display_name="B",
        impact_score=final, pickup_score=0.1, recency_score=0.5, relevance_score=0.0,
        final_score=final, article_count=count, top_sources=["d"],
    )


class TestValidate:
    def test_valid_export_passes(self, tmp_path: Path) -> None:
        path = write_stories_csv([_story(0.9), _story(0.5), _story(0.5)], tmp_path)
        passed, messages = validate(str(path), max_stories=10, min_articles=2)
        assert passed
        assert all(m.startswith("PASS") for m in messages)

    def test_empty_export_passes(self, tmp_path: Path) -> None:
        path = write_stories_csv([], tmp_path)
        passed, messages = validate(str(path))
        assert passed
        assert messages == ["PASS  no stories (empty news section)"]

    def test_too_many_rows(self, tmp_path: Path) -> None:
        path = write_stories_csv([_story(0.9), _story(0.8), _story(0.7)], tmp_path)
        passed, messages = validate(str(path), max_stories=2)
        assert not passed
        assert "FAIL  row count = 3 (max 2)" in messages

    def test_small_cluster_fails(self, tmp_path: Path) -> None:
        path = write_stories_csv([_story(0.9, count=1)], tmp_path)
        passed, _ = validate(str(path), min_articles=2)
        assert not passed

    def test_score_out_of_range_and_unsorted(self, tmp_path: Path) -> None:
        path = write_stories_csv([_story(0.2), _story(0.8)], tmp_path)
        df = pd.read_csv(path)
        df.loc[0, "Impact_Score"] = 1.5
        df.to_csv(path, index=False)

        passed, messages = validate(str(path))
        assert not passed
        assert any(m.startswith("FAIL  scores out of range") for m in messages)
        assert "FAIL  Final_Score not sorted descending" in messages

    def test_missing_file(self, tmp_path: Path) -> None:
        passed, messages = validate(str(tmp_path / "nope.csv"))
        assert not passed
        assert messages[0].startswith("FAIL  file not found")

    def test_missing_columns(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_text("Headline,Final_Score\nx,0.5\n")
        passed, messages = validate(str(path))
        assert not passed
        assert messages[0].startswith("FAIL  missing columns")
