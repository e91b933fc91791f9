"""Logging for reposcan: CLI output setup and per-scan warning capture.

Components log through :func:`get_logger`. While a scan runs, the
orchestrator wraps it in :func:`collect_warnings`, so every WARNING emitted
under the ``reposcan`` hierarchy by the scanning thread also ends up in
``AnalysisReport.warnings``.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

_LOGGER_NAME = "reposcan"
_CONSOLE_FORMAT = "[reposcan] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the reposcan hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class WarningCollector(logging.Handler):
    """Keeps the distinct WARNING messages logged by one thread, in order."""

    def __init__(self, thread_id: int | None = None) -> None:
        super().__init__(level=logging.WARNING)
        self.thread_id = threading.get_ident() if thread_id is None else thread_id
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        # The service runs scans concurrently on executor threads.
        if record.thread != self.thread_id:
            return
        message = record.getMessage()
        if message not in self.messages:
            self.messages.append(message)


@contextmanager
def collect_warnings() -> Iterator[WarningCollector]:
    """Capture warnings logged by the calling thread for the duration of the block."""
    logger = logging.getLogger(_LOGGER_NAME)
    collector = WarningCollector()
    logger.addHandler(collector)
    try:
        yield collector
    finally:
        logger.removeHandler(collector)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send reposcan records to stderr and optionally to ``log_file``.

    Console handlers from a previous call are replaced; a
    :class:`WarningCollector` attached by an in-flight scan is left alone.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if isinstance(handler, WarningCollector):
            continue
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["WarningCollector", "collect_warnings", "configure_logging", "get_logger"]
