"""Pytest configuration and fixtures for layoutsmith tests.

This module provides pytest hooks that apply across all tests.
"""

import logging
import threading

import pytest

console_logger = logging.getLogger(__name__)


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_teardown(item, nextitem):
    """Report playback threads that a test left running."""
    del nextitem  # Unused but required by hookspec.
    leaked = [t for t in threading.enumerate() if t.name == "LayoutPlayback"]
    if leaked:
        console_logger.warning(
            f"{len(leaked)} playback timer(s) still running after test: {item.nodeid}"
        )
