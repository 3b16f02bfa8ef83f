"""Shared test fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging during a test."""
    yield
    logger = logging.getLogger("jira_proxy")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
