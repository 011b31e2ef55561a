"""Pytest configuration and fixtures for roomsmith tests.

This module provides pytest hooks and fixtures that apply across all tests.
"""

import logging

import pytest

console_logger = logging.getLogger(__name__)


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_setup(item):
    """Log the test about to run so captured build logs can be attributed."""
    console_logger.debug(f"Starting test: {item.nodeid}")


@pytest.hookimpl(trylast=True)
def pytest_sessionfinish(session, exitstatus):  # noqa: ARG001
    """Drop file handlers a failing test may have left on build loggers."""
    del session, exitstatus  # Unused but required by hookspec.
    for logger in (logging.getLogger(), logging.getLogger("roomsmith")):
        for handler in logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
    console_logger.debug("Closed leftover file log handlers after test session")
