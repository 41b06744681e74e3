"""
Pytest configuration and shared fixtures for all tests.

This module provides shared fixtures for the test suite, including:
- Mocked requests responses carrying separate Link header lines
- Mocked sessions returning those responses
- A guard that keeps private-address checks from touching DNS
"""

import pytest
from unittest.mock import MagicMock, patch


def make_response(
    url="https://example.org/a",
    link_headers=None,
    text="",
    status_code=200,
    raise_error=None,
):
    """Build a MagicMock standing in for a requests.Response."""
    response = MagicMock()
    response.url = url
    response.status_code = status_code
    response.text = text
    response.raw.headers.getlist.return_value = list(link_headers or [])
    if raise_error is not None:
        response.raise_for_status.side_effect = raise_error
    return response


@pytest.fixture
def mock_response():
    """Factory fixture for mocked responses."""
    return make_response


@pytest.fixture
def mock_session():
    """Factory fixture for a session whose get() returns the given response."""
    def _make(response=None, side_effect=None):
        session = MagicMock()
        session.__enter__.return_value = session
        if side_effect is not None:
            session.get.side_effect = side_effect
        else:
            session.get.return_value = response
        return session
    return _make


@pytest.fixture
def public_address():
    """Treat every host as public so no DNS lookups happen."""
    with patch("webmention.source._is_private_or_loopback", return_value=False) as mock_private:
        yield mock_private
