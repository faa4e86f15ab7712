"""Shared fixtures for repository unit tests."""
import pytest
from unittest.mock import MagicMock, patch


def _wire(mock_get_conn):
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


@pytest.fixture
def mock_db(request):
    """Mock get_db_connection in the module named by the test's ``repository_module``.

    Usage in tests:
        repository_module = "reading_quest.repositories.reading_plan"

        def test_something(self, mock_db):
            conn, cur = mock_db
            cur.fetchone.return_value = {"id": 1}
            # ... call repository method ...
            cur.execute.assert_called_once()
    """
    module_name = getattr(request.module, "repository_module")
    with patch(f"{module_name}.get_db_connection") as mock_get_conn:
        yield _wire(mock_get_conn)
