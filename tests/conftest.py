"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from deutschmeister.progress import ProgressRecord  # noqa: E402
from deutschmeister.scheduler import MS_PER_DAY, ReviewScheduler  # noqa: E402

NOW_MS = 1_700_000_000_000


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now_ms():
    """A fixed 'current time' in epoch milliseconds."""
    return NOW_MS


@pytest.fixture
def scheduler(now_ms):
    """Default scheduler pinned to now_ms."""
    return ReviewScheduler(clock=lambda: now_ms)


@pytest.fixture
def make_record(now_ms):
    """Factory for progress records with sensible defaults."""

    def _make(item_id="w1", **overrides):
        fields = {
            "interval": 1,
            "repetition": 0,
            "easiness_factor": 2.5,
            "due_at": now_ms + MS_PER_DAY,
            "mastery_count": 0,
        }
        fields.update(overrides)
        return ProgressRecord(item_id=item_id, **fields)

    return _make


@pytest.fixture
def sample_words():
    """Provide a small vocabulary in file format."""
    return [
        {"id": "w1", "german": "Hund", "spanish": "perro", "type": "noun", "gender": "der"},
        {"id": "w2", "german": "gehen", "spanish": "ir", "type": "verb"},
        {
            "id": "w3",
            "german": "Haus",
            "spanish": "casa",
            "type": "noun",
            "gender": "das",
            "exampleGerman": "Das Haus ist groß.",
            "exampleSpanish": "La casa es grande.",
        },
    ]
