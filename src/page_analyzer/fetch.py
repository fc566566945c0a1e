"""
Document retrieval for the page under analysis.
"""
from __future__ import annotations

import logging

import requests

from page_analyzer.errors import TransportError

logger = logging.getLogger(__name__)


def build_session(user_agent: str) -> requests.Session:
    """Create an HTTP session that identifies itself with `user_agent`."""
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    return session


def fetch_document(session: requests.Session, address: str, timeout_s: float) -> bytes:
    """
    Retrieve the raw body of `address`.

    Only a final status of exactly 200 counts as success. Any other status,
    and any connection-level failure, raises TransportError. Nothing is
    retried.
    """
    logger.info("Fetching %s", address)
    try:
        resp = session.get(address, timeout=timeout_s, allow_redirects=True)
    except requests.RequestException as e:
        raise TransportError(address, reason=str(e)) from e

    try:
        if resp.status_code != 200:
            raise TransportError(address, status_code=resp.status_code)
        body = resp.content
    finally:
        resp.close()

    logger.debug("Fetched %d bytes from %s", len(body), address)
    return body
