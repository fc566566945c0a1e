from __future__ import annotations

from typing import Callable, Dict
from unittest.mock import MagicMock

import pytest


def make_response(status_code: int, content: bytes = b"") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    return resp


@pytest.fixture
def fake_session() -> Callable[[Dict[str, object]], MagicMock]:
    """
    Build a session whose get() answers from a url -> response table.

    Values may be a status code, a (status, body) tuple, or an exception
    instance to raise. Unknown urls answer 200.
    """
    def factory(routes: Dict[str, object]) -> MagicMock:
        def get(url, **kwargs):
            route = routes.get(url, 200)
            if isinstance(route, Exception):
                raise route
            if isinstance(route, tuple):
                return make_response(*route)
            return make_response(route)

        session = MagicMock()
        session.get.side_effect = get
        return session

    return factory
