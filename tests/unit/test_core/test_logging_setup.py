"""
Unit tests for logging setup.
"""

import logging
import pytest

from ekstre.core.logging_setup import LOG_FORMAT, resolve_level, setup_logging


class TestLoggingSetup:
    """Tests for setup_logging."""

    @pytest.mark.parametrize("verbose,debug,level", [
        (False, False, logging.WARNING),
        (True, False, logging.INFO),
        (False, True, logging.DEBUG),
        (True, True, logging.DEBUG),
    ])
    def test_resolve_level(self, verbose, debug, level):
        """Test verbosity flags map to levels."""
        assert resolve_level(verbose, debug) == level

    def test_sets_package_logger_level(self):
        """Test the ekstre logger follows the requested level."""
        logger = logging.getLogger("ekstre")
        previous = logger.level
        try:
            assert setup_logging(debug=True) == logging.DEBUG
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_format_fields(self):
        """Test the log format names the logger and level."""
        assert "%(name)s" in LOG_FORMAT
        assert "%(levelname)s" in LOG_FORMAT
