from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from page_analyzer.errors import TransportError
from page_analyzer.fetch import build_session, fetch_document

PAGE = "https://mysite.example/"


def test_returns_body_on_200(fake_session):
    session = fake_session({PAGE: (200, b"<html></html>")})

    assert fetch_document(session, PAGE, timeout_s=2) == b"<html></html>"
    session.get.assert_called_once_with(PAGE, timeout=2, allow_redirects=True)


@pytest.mark.parametrize("status", [201, 204, 301, 404, 500])
def test_non_200_is_transport_error(fake_session, status):
    session = fake_session({PAGE: status})

    with pytest.raises(TransportError) as exc_info:
        fetch_document(session, PAGE, timeout_s=2)
    assert exc_info.value.status_code == status
    assert str(status) in str(exc_info.value)


def test_connection_failure_is_transport_error(fake_session):
    session = fake_session({PAGE: requests.ConnectionError("name resolution failed")})

    with pytest.raises(TransportError) as exc_info:
        fetch_document(session, PAGE, timeout_s=2)
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_response_is_closed():
    resp = MagicMock(status_code=404)
    session = MagicMock()
    session.get.return_value = resp

    with pytest.raises(TransportError):
        fetch_document(session, PAGE, timeout_s=2)
    resp.close.assert_called_once()


def test_build_session_sets_user_agent():
    session = build_session("PageAnalyzer/test")
    try:
        assert session.headers["User-Agent"] == "PageAnalyzer/test"
    finally:
        session.close()
