"""Pytest configuration and fixtures for critical-section tests"""
import logging

import pytest

from critical_section.core.config import SectionConfig
from critical_section.core.constants import LOCK_BACKEND_ENV, LOCK_DIR_ENV, LOGGER_NAME, POLL_INTERVAL_ENV


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer environment overrides out of the tests"""
    for name in (LOCK_DIR_ENV, POLL_INTERVAL_ENV, LOCK_BACKEND_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo setup_logging() side effects on the package logger"""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = logger.handlers[:]
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            handler.close()
            logger.removeHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def lock_dir(tmp_path):
    """Create a private lock directory so tests never share slots"""
    path = tmp_path / "locks"
    path.mkdir()
    return path


@pytest.fixture
def section_config(lock_dir):
    """Create a config pointing at the private lock directory with a fast poll"""
    return SectionConfig(lock_dir=lock_dir, poll_interval=0.02)
