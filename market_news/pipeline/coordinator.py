"""Tracks whether a report generation is currently running."""

import threading
from contextlib import contextmanager
from typing import Iterator

from market_news.core.errors import GenerationInProgress
from market_news.core.logger import logger


class GenerationCoordinator:
    """Owns the "generation in progress" flag for one job runner.

    Pass the same instance to every caller that may start a generation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        with self._lock:
            return self._in_progress

    @contextmanager
    def generation(self) -> Iterator[None]:
        """Mark a generation as running for the duration of the block.

        Raises:
            GenerationInProgress: If another generation is already running.
        """
        with self._lock:
            if self._in_progress:
                raise GenerationInProgress("a generation is already in progress")
            self._in_progress = True
        logger.info("GenerationCoordinator: generation started")
        try:
            yield
        finally:
            with self._lock:
                self._in_progress = False
            logger.info("GenerationCoordinator: generation finished")
