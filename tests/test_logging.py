from __future__ import annotations

import logging
import threading
from pathlib import Path

from reposcan.logging import collect_warnings, configure_logging, get_logger


def test_get_logger_is_namespaced() -> None:
    assert get_logger().name == "reposcan"
    assert get_logger("walker").name == "reposcan.walker"


def test_configure_logging_levels_and_handlers(tmp_path: Path) -> None:
    logger = configure_logging(verbose=False)
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1

    log_file = tmp_path / "scan.log"
    logger = configure_logging(verbose=True, log_file=log_file)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    get_logger("orchestrator").debug("scanning %s", "repo")
    for handler in logger.handlers:
        handler.flush()

    assert "DEBUG reposcan.orchestrator: scanning repo" in log_file.read_text(encoding="utf-8")


def test_collect_warnings_keeps_distinct_messages_in_order() -> None:
    logger = get_logger("walker")
    with collect_warnings() as collector:
        logger.warning("Skipped unreadable directory: %s", "a")
        logger.info("not collected")
        logger.warning("Skipped unreadable directory: %s", "a")
        get_logger("orchestrator").warning("Ignoring invalid configuration: %s", "bad")

    assert collector.messages == [
        "Skipped unreadable directory: a",
        "Ignoring invalid configuration: bad",
    ]
    assert collector not in logging.getLogger("reposcan").handlers


def test_collect_warnings_ignores_other_threads() -> None:
    logger = get_logger("walker")
    with collect_warnings() as collector:
        worker = threading.Thread(target=logger.warning, args=("from another scan",))
        worker.start()
        worker.join()
        logger.warning("from this scan")

    assert collector.messages == ["from this scan"]


def test_configure_logging_keeps_active_collector() -> None:
    with collect_warnings() as collector:
        logger = configure_logging(verbose=False)
        assert collector in logger.handlers
        get_logger("cli").warning("still captured")

    assert collector.messages == ["still captured"]
