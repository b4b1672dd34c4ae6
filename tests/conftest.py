"""
Root Pytest Fixtures.

Shared fixtures available to all test types.
"""

import logging

import pytest

from hanlon.core import logging as logging_module


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"


@pytest.fixture(autouse=True)
def restore_root_logger():
    """
    Undo setup_logging after each test.

    Every CLI invocation configures the root logger; handlers bound to a
    CliRunner stream must not outlive the test that created them.
    """
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    logging_module._logging_config = None
    yield
    logging_module._logging_config = None
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
