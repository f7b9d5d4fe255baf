"""Exceptions raised across the news pipeline."""


class CancellationRequested(Exception):
    """Raised when the caller signals cancellation; aborts the whole batch."""


class GenerationInProgress(RuntimeError):
    """Raised when a generation is requested while another one is running."""
