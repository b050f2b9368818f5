"""Unit tests for the logging utilities."""

import logging

import pytest

from blockmcmc.utils.logging import (
    configure_logging,
    get_logger,
    log_operation,
    log_performance,
)


class TestGetLogger:
    """Tests for hierarchical logger naming."""

    def test_package_names_kept(self):
        """Test that package module names are used as-is."""
        assert get_logger("blockmcmc.mcmc.core").name == "blockmcmc.mcmc.core"

    def test_foreign_names_prefixed(self):
        """Test that other names are placed under the package root."""
        assert get_logger("mymodel").name == "blockmcmc.mymodel"
        assert get_logger("__main__").name == "blockmcmc.main"

    def test_caller_module_name(self):
        """Test automatic naming from the calling module."""
        assert get_logger().name == f"blockmcmc.{__name__}"

    def test_configure_logging_level(self):
        """Test setting the package level."""
        configure_logging("DEBUG")
        assert logging.getLogger("blockmcmc").level == logging.DEBUG
        configure_logging("warning")
        assert logging.getLogger("blockmcmc").level == logging.WARNING


class TestLogPerformance:
    """Tests for the timing decorator."""

    def test_logs_above_threshold(self, caplog):
        """Test that slow calls are reported."""
        logger = get_logger("blockmcmc.tests.perf")

        @log_performance(logger=logger, threshold=0.0)
        def work(x):
            return x * 2

        with caplog.at_level(logging.INFO, logger="blockmcmc"):
            assert work(4) == 8
        assert "Performance" in caplog.text
        assert "work completed" in caplog.text

    def test_failures_logged_and_raised(self, caplog):
        """Test that exceptions propagate after logging."""

        @log_performance(threshold=0.0)
        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            fail()
        assert "failed" in caplog.text


class TestLogOperation:
    """Tests for the operation context manager."""

    def test_start_and_completion(self, caplog):
        """Test start and completion messages."""
        logger = get_logger("blockmcmc.tests.operation")
        with caplog.at_level(logging.INFO, logger="blockmcmc"):
            with log_operation("sampling", logger=logger):
                pass
        assert "Starting operation: sampling" in caplog.text
        assert "Completed operation: sampling" in caplog.text

    def test_failure(self, caplog):
        """Test that failures are logged and re-raised."""
        logger = get_logger("blockmcmc.tests.operation")
        with pytest.raises(RuntimeError):
            with log_operation("sampling", logger=logger):
                raise RuntimeError("disk full")
        assert "Failed operation: sampling" in caplog.text
