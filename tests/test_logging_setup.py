"""日志配置测试。"""

from __future__ import annotations

import io
import logging
from datetime import date

from github_trend_rss.logging_setup import configure_logging, log_file_path, resolve_level


def test_resolve_level_aliases() -> None:
    assert resolve_level("warn") == logging.WARNING
    assert resolve_level("DEBUG") == logging.DEBUG
    assert resolve_level("bogus") == logging.INFO
    assert resolve_level(logging.ERROR) == logging.ERROR


def test_log_file_path_is_dated(tmp_path) -> None:
    assert log_file_path(tmp_path, date(2024, 1, 2)) == tmp_path / "github-trend-rss_2024-01-02.log"


def test_console_handler_formats_and_filters() -> None:
    stream = io.StringIO()
    configure_logging("WARN", handler=logging.StreamHandler(stream))
    logger = logging.getLogger("github_trend_rss.pipeline")

    logger.info("hidden")
    logger.warning("shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "[WARNING] github_trend_rss.pipeline: shown" in output


def test_file_logging_writes_dated_file(tmp_path) -> None:
    package_logger = configure_logging(
        "INFO",
        enable_file_logging=True,
        log_dir=tmp_path / "logs",
        handler=logging.StreamHandler(io.StringIO()),
    )
    logging.getLogger("github_trend_rss.cache").info("to file")
    for handler in package_logger.handlers:
        handler.flush()

    path = log_file_path(tmp_path / "logs")
    assert path.is_file()
    assert "to file" in path.read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging("INFO", handler=logging.StreamHandler(io.StringIO()))
    package_logger = configure_logging("INFO", handler=logging.StreamHandler(io.StringIO()))
    assert len(package_logger.handlers) == 1
