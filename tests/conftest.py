"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up testframe loggers after each test to prevent name collisions."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("testframe")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


EXAMPLE_ASSERTION_MESSAGE_PART = "Customizable part of assertion message"


@pytest.fixture
def custom_part() -> str:
    return EXAMPLE_ASSERTION_MESSAGE_PART
