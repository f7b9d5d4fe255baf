"""Tests for market_news.core.news_utils module."""

from datetime import datetime, timezone

from market_news.core.news_utils import (
    headline_words,
    jaccard_similarity,
    parse_gdelt_date,
    tokenize_headline,
    truncate_headline,
)

STOP_WORDS = frozenset({"the", "and", "for", "with", "its"})


class TestParseGdeltDate:
    def test_compact_numeric_format(self) -> None:
        assert parse_gdelt_date("20240115143000") == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_compact_iso_format(self) -> None:
        assert parse_gdelt_date("20240115T143000Z") == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_generic_fallback(self) -> None:
        assert parse_gdelt_date("2024-01-15T14:30:00Z") == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_naive_generic_value_is_utc(self) -> None:
        result = parse_gdelt_date("2024-01-15 14:30:00")
        assert result == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_blank_and_none(self) -> None:
        assert parse_gdelt_date(None) is None
        assert parse_gdelt_date("") is None
        assert parse_gdelt_date("   ") is None

    def test_garbage_returns_none(self) -> None:
        assert parse_gdelt_date("not a date") is None

    def test_relative_words_are_rejected(self) -> None:
        assert parse_gdelt_date("now") is None
        assert parse_gdelt_date("today") is None
        assert parse_gdelt_date("Tomorrow") is None


class TestTokenizeHeadline:
    def test_lowercases_and_dedups(self) -> None:
        tokens = tokenize_headline("Oil OIL oil Prices", STOP_WORDS)
        assert tokens == {"oil", "prices"}

    def test_drops_short_tokens_and_stop_words(self) -> None:
        tokens = tokenize_headline("The Fed and US banks go for it", STOP_WORDS)
        assert tokens == {"fed", "banks"}

    def test_ignores_digits_and_punctuation(self) -> None:
        tokens = tokenize_headline("S&P 500 rallies 2.5% on AI-driven gains", STOP_WORDS)
        assert tokens == {"rallies", "driven", "gains"}

    def test_empty_headline(self) -> None:
        assert tokenize_headline("", STOP_WORDS) == set()
        assert tokenize_headline(None, STOP_WORDS) == set()


class TestJaccardSimilarity:
    def test_empty_sets_score_zero(self) -> None:
        assert jaccard_similarity(set(), set()) == 0.0

    def test_one_empty_set_scores_zero(self) -> None:
        assert jaccard_similarity({"fed"}, set()) == 0.0

    def test_identical_sets_score_one(self) -> None:
        tokens = {"fed", "rates", "inflation"}
        assert jaccard_similarity(tokens, set(tokens)) == 1.0

    def test_partial_overlap(self) -> None:
        assert jaccard_similarity({"fed", "raises", "interest", "rates"},
                                  {"fed", "raises", "interest", "rates", "sharply"}) == 0.8

    def test_is_symmetric(self) -> None:
        a, b = {"oil", "opec", "cuts"}, {"oil", "prices"}
        assert jaccard_similarity(a, b) == jaccard_similarity(b, a)


class TestHeadlineWords:
    def test_splits_on_punctuation(self) -> None:
        assert headline_words("Stocks rally: Dow, Nasdaq up!") == ["stocks", "rally", "dow", "nasdaq", "up"]

    def test_keeps_ampersand_words(self) -> None:
        assert "s&p" in headline_words("S&P hits record")

    def test_blank(self) -> None:
        assert headline_words("  ") == []


class TestTruncateHeadline:
    def test_short_headline_unchanged(self) -> None:
        assert truncate_headline("Short") == "Short"

    def test_long_headline_truncated(self) -> None:
        result = truncate_headline("x" * 80)
        assert len(result) == 60
        assert result.endswith("...")
