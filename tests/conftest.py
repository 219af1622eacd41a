"""Test configuration and fixtures"""

import logging
import tempfile
from pathlib import Path

import pytest

from mediatags.core.logger import LOGGER_NAME, shutdown_logging


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def write_file(temp_dir):
    """Write bytes to a file in the temporary directory and return its path"""
    def _write(name: str, data: bytes) -> Path:
        path = temp_dir / name
        path.write_bytes(data)
        return path
    return _write


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers installed by setup_logging() after each test"""
    yield
    shutdown_logging()
    logging.getLogger(LOGGER_NAME).setLevel(logging.NOTSET)
