"""Tests for the loguru configuration helpers."""

from __future__ import annotations

from log_config.logger import add_file_handler, get_logger, log_performance, logger


class TestLogConfig:
    def test_file_handler_receives_messages(self, tmp_path):
        path = tmp_path / "logs" / "run.log"
        handler_id = add_file_handler(path)
        try:
            get_logger("tests").info("waypoint appended")
            logger.complete()
        finally:
            logger.remove(handler_id)

        assert "waypoint appended" in path.read_text()

    def test_slow_operation_warns(self, tmp_path):
        path = tmp_path / "perf.log"
        handler_id = add_file_handler(path, level="WARNING")
        try:
            log_performance("smoothing", 120.0, threshold_ms=50.0)
            log_performance("filtering", 1.0, threshold_ms=50.0)
            logger.complete()
        finally:
            logger.remove(handler_id)

        text = path.read_text()
        assert "Slow operation: smoothing" in text
        assert "filtering" not in text
