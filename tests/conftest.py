"""
Pytest configuration and fixtures for Gnosis tests.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest
from loguru import logger

from gnosis.core.config import IndexSection


@pytest.fixture
def temp_project_dir():
    """Create a temporary project directory for testing."""
    temp_dir = Path(tempfile.mkdtemp())
    project_dir = temp_dir / "project"
    project_dir.mkdir()

    yield project_dir

    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def wiki_root(temp_project_dir):
    """Empty watched root."""
    root = temp_project_dir / "wiki"
    root.mkdir()
    return root


@pytest.fixture
def index_dir(temp_project_dir):
    """Location for the on-disk index (not created)."""
    return temp_project_dir / "index"


@pytest.fixture
def make_section(wiki_root, index_dir):
    """Factory for index sections with short watcher windows and no fts."""

    def _make(**overrides) -> IndexSection:
        values = {
            "watch_dirs": {str(wiki_root): "/wiki"},
            "index_path": str(index_dir),
            "index_name": "wiki",
            "debounce_seconds": 0.3,
            "fulltext": False,
        }
        values.update(overrides)
        return IndexSection(**values)

    return _make


@pytest.fixture
def clean_environment():
    """Clean up Gnosis environment variables before and after tests."""
    original_env = {}
    for key in list(os.environ.keys()):
        if key.startswith("GNOSIS_"):
            original_env[key] = os.environ[key]
            del os.environ[key]

    yield

    for key in list(os.environ.keys()):
        if key.startswith("GNOSIS_"):
            del os.environ[key]

    for key, value in original_env.items():
        os.environ[key] = value


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")

    yield messages

    logger.remove(handler_id)

