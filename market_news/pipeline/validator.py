"""Output validator — checks market_news.csv against the ranking invariants.

Checks:
  1. Row count <= max stories
  2. Every score column within [0.0, 1.0]
  3. Article_Count >= min articles per cluster
  4. Final_Score sorted in descending order

Usage:
    python -m market_news.pipeline.validator output/market_news.csv [max_stories] [min_articles]
"""

import csv
import sys
from typing import List, Tuple

from market_news.pipeline.render import CSV_HEADER

_SCORE_COLS = [
    "Impact_Score", "Pickup_Score", "Recency_Score", "Relevance_Score", "Final_Score",
]


def validate(csv_path: str, max_stories: int = 10, min_articles: int = 2) -> Tuple[bool, List[str]]:
    """Run all validation checks against csv_path.

    Args:
        csv_path: Path to ``market_news.csv``.
        max_stories: Configured story cap.
        min_articles: Configured minimum cluster size.

    Returns:
        Tuple of ``(passed: bool, messages: list[str])``.
        ``messages`` contains PASS/FAIL lines for each check.
    """
    messages: List[str] = []
    passed = True

    # ── load ──────────────────────────────────────────────────────────────────
    try:
        with open(csv_path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            fieldnames = reader.fieldnames or []
            rows = list(reader)
    except FileNotFoundError:
        return False, [f"FAIL  file not found: {csv_path}"]
    except (OSError, csv.Error) as exc:
        return False, [f"FAIL  could not read CSV: {exc}"]

    # ── column presence ───────────────────────────────────────────────────────
    missing = [c for c in CSV_HEADER if c not in fieldnames]
    if missing:
        return False, [f"FAIL  missing columns: {missing}"]

    # An empty news section is a valid outcome.
    if not rows:
        return True, ["PASS  no stories (empty news section)"]

    # ── check 1: row count ────────────────────────────────────────────────────
    n = len(rows)
    if n <= max_stories:
        messages.append(f"PASS  row count = {n} (max {max_stories})")
    else:
        messages.append(f"FAIL  row count = {n} (max {max_stories})")
        passed = False

    # ── check 2: scores in [0, 1] ─────────────────────────────────────────────
    bad_scores = []
    for i, row in enumerate(rows, start=2):
        for col in _SCORE_COLS:
            raw = row.get(col, "")
            try:
                score = float(raw)
                if not (0.0 <= score <= 1.0):
                    bad_scores.append((i, col, score))
            except ValueError:
                bad_scores.append((i, col, raw))
    if not bad_scores:
        messages.append("PASS  all scores in [0.0, 1.0]")
    else:
        messages.append(
            f"FAIL  scores out of range in {len(bad_scores)} cells: {bad_scores[:3]}"
        )
        passed = False

    # ── check 3: cluster size ─────────────────────────────────────────────────
    small = []
    for i, row in enumerate(rows, start=2):
        try:
            if int(row.get("Article_Count", "")) < min_articles:
                small.append(i)
        except ValueError:
            small.append(i)
    if not small:
        messages.append(f"PASS  Article_Count >= {min_articles} for all rows")
    else:
        messages.append(f"FAIL  Article_Count < {min_articles} at rows {small}")
        passed = False

    # ── check 4: ordering ─────────────────────────────────────────────────────
    try:
        finals = [float(r["Final_Score"]) for r in rows]
    except ValueError:
        finals = []
    if finals and all(a >= b for a, b in zip(finals, finals[1:])):
        messages.append("PASS  Final_Score sorted descending")
    else:
        messages.append("FAIL  Final_Score not sorted descending")
        passed = False

    return passed, messages


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python -m market_news.pipeline.validator <path_to_csv> [max_stories] [min_articles]")
        return 1
    csv_path = sys.argv[1]
    max_stories = int(sys.argv[2]) if len(sys.argv) > 2 else 10
    min_articles = int(sys.argv[3]) if len(sys.argv) > 3 else 2
    passed, messages = validate(csv_path, max_stories, min_articles)
    for msg in messages:
        print(msg)
    if passed:
        print("\nVALIDATION PASSED ✓")
        return 0
    else:
        print("\nVALIDATION FAILED ✗")
        return 1


if __name__ == "__main__":
    sys.exit(main())
