"""
Unit test specific fixtures.

These fixtures are only available to unit tests.
"""

from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_all_external_dependencies():
    """Automatically mock database sessions for unit tests."""
    # Mock database connections - create a proper context manager mock
    mock_session = MagicMock()
    mock_session.__enter__ = MagicMock(return_value=mock_session)
    mock_session.__exit__ = MagicMock(return_value=None)

    with patch("src.core.database.database_session.get_db_session") as mock_db:
        mock_db.return_value = mock_session
        yield mock_session


@pytest.fixture
def fixed_now():
    """A fixed reference instant for time-dependent tests."""
    from datetime import UTC, datetime

    return datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
