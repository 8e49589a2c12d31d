"""
tests/unit/conftest.py — Fixtures for unit tests.

Unit tests run against MagicMock sessions; no tables are created. The app
fixture exists only for code that reads current_app (config, logger).
"""

from __future__ import annotations

import pytest

from backend.app import create_app
from backend.app.models import chirp, refresh_token, user  # noqa: F401  (resolve relationships)


@pytest.fixture
def app_context():
    """Pushes an application context for the 'testing' config."""
    app = create_app("testing")
    with app.app_context():
        yield app
