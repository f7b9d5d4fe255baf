"""Utility helpers for the news pipeline — GDELT dates and headline tokens."""

import re
from datetime import datetime, timezone
from typing import AbstractSet, List, Optional, Set

import pandas as pd

# GDELT emits both forms depending on endpoint mode.
_COMPACT_FORMATS = ("%Y%m%d%H%M%S", "%Y%m%dT%H%M%SZ")

_WORD_PATTERN = re.compile(r"\b[a-z]+\b")
_HEADLINE_SPLIT = re.compile(r"[ \-,.:;!?]+")

MIN_TOKEN_LENGTH = 3


def parse_gdelt_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a GDELT timestamp into an aware UTC datetime.

    Tries the compact numeric forms first (``20240115143000`` and
    ``20240115T143000Z``) and falls back to pandas' generic parser.
    Naive results are treated as UTC.

    Args:
        value: Raw timestamp string from GDELT.

    Returns:
        Aware ``datetime`` in UTC, or ``None`` when the value is blank or
        unparsable.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    for fmt in _COMPACT_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    # pandas resolves words like "now" and "today" against the wall clock.
    if not text[0].isdigit():
        return None

    try:
        ts = pd.to_datetime(text, utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def tokenize_headline(headline: Optional[str], stop_words: AbstractSet[str]) -> Set[str]:
    """Return the set of significant lowercase words in a headline.

    Keeps alphabetic words longer than two characters that are not stop words.

    Examples:
        ``"Fed holds rates as inflation cools"`` →
        ``{"fed", "holds", "rates", "inflation", "cools"}``
    """
    if not headline or not headline.strip():
        return set()
    return {
        word for word in _WORD_PATTERN.findall(headline.lower())
        if len(word) >= MIN_TOKEN_LENGTH and word not in stop_words
    }


def jaccard_similarity(first: AbstractSet[str], second: AbstractSet[str]) -> float:
    """Intersection size over union size; 0.0 when either set is empty."""
    if not first or not second:
        return 0.0
    union = len(first | second)
    if union == 0:
        return 0.0
    return len(first & second) / union


def headline_words(headline: Optional[str]) -> List[str]:
    """Split a lowercased headline on spaces and basic punctuation."""
    if not headline or not headline.strip():
        return []
    return [w for w in _HEADLINE_SPLIT.split(headline.lower()) if w]


def truncate_headline(headline: str, max_length: int = 60) -> str:
    if len(headline) <= max_length:
        return headline
    return headline[:max_length - 3] + "..."
