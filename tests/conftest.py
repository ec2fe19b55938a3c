"""Pytest configuration and fixtures for layoutsmith tests.

This module provides pytest hooks that apply across all tests.
"""

import logging

import pytest

from layoutsmith.utils.logging import configure_logging

console_logger = logging.getLogger(__name__)


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config):  # noqa: ARG001
    """Route library logging through the standard format during tests."""
    del config  # Unused but required by hookspec.
    configure_logging()
