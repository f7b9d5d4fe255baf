"""Market-moving news pipeline entry point.

Usage:
    python run_pipeline.py [config.yaml]

Loads config.yaml, runs NewsPipeline once, and writes the news section as
markdown, JSON and CSV plus one SQLite row per story under a fresh report id.
"""

import json
import os
import sys
import uuid
from datetime import datetime, timezone

from dotenv import load_dotenv

load_dotenv()  # must precede market_news imports so env vars are available at module load

from market_news.core.config import NewsConfig, load_config  # noqa: E402
from market_news.core.logger import logger  # noqa: E402
from market_news.core.store import StoryStore  # noqa: E402
from market_news.pipeline.coordinator import GenerationCoordinator  # noqa: E402
from market_news.pipeline.engine import NewsPipeline  # noqa: E402
from market_news.pipeline.render import (  # noqa: E402
    build_news_content, render_news_section, write_stories_csv,
)


def main(argv: list[str] | None = None, coordinator: GenerationCoordinator | None = None) -> int:
    """Run the pipeline. Returns 0 on success, 1 on failure."""
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else "config.yaml"

    try:
        news_config = NewsConfig.from_dict(load_config(config_path))
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"run_pipeline: failed to load config: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    coordinator = coordinator or GenerationCoordinator()
    output_dir = news_config.output_dir
    now = datetime.now(timezone.utc)
    report_id = uuid.uuid4().hex

    try:
        with coordinator.generation():
            stories = NewsPipeline(news_config).run(now=now)
            if stories is None:
                print("SUCCESS: no news section this cycle")
                logger.info("run_pipeline: completed without news section")
                return 0

            # Files are only written once the stories are persisted.
            os.makedirs(output_dir, exist_ok=True)
            StoryStore(os.path.join(output_dir, "market_news.db")).save_stories(report_id, stories)

            with open(os.path.join(output_dir, "market_news.md"), "w", encoding="utf-8") as f:
                f.write(render_news_section(stories, now=now))
            with open(os.path.join(output_dir, "market_news.json"), "w", encoding="utf-8") as f:
                json.dump({"reportId": report_id, "news": build_news_content(stories)}, f, indent=2)
            csv_path = write_stories_csv(stories, output_dir)
    except Exception as exc:
        logger.error(f"run_pipeline: generation raised: {exc}", exc_info=True)
        print(f"ERROR: generation failed — {exc}", file=sys.stderr)
        return 1

    print(f"SUCCESS: {len(stories)} stories written to {csv_path} (report {report_id})")
    logger.info(f"run_pipeline: completed — {len(stories)} stories → {csv_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
