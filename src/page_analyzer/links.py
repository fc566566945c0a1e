"""
Link classification and reachability probing.
"""
from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests
from bs4 import Tag

from page_analyzer.errors import AddressError, ProbeError
from page_analyzer.tree import collect, is_anchor

logger = logging.getLogger(__name__)

# Some hosts refuse clients that do not look like a browser
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/138.0.0.0 Safari/537.36"
)

EXPLICIT_SCHEMES: tuple[str, ...] = ("http://", "https://")

DEFAULT_PORTS: Dict[str, int] = {"http": 80, "https": 443}

Origin = Tuple[str, str, int]


class LinkKind(enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


@dataclass(slots=True)
class LinkRecord:
    """A single anchor found on the page."""
    href: str
    kind: LinkKind
    broken: Optional[bool] = None
    status_code: Optional[int] = None

    @property
    def is_external(self) -> bool:
        return self.kind is LinkKind.EXTERNAL


def url_origin(url: str) -> Origin:
    """
    Return (scheme, hostname, port) for an absolute http(s) URL.

    Scheme and host are lower-cased, user info is dropped and a missing port
    becomes the scheme's default, so ":443" on https is the same origin.
    Raises ValueError for anything that has no such origin.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parsed.hostname:
        raise ValueError(f"not an absolute http(s) URL: {url!r}")
    return scheme, parsed.hostname.lower(), parsed.port or DEFAULT_PORTS[scheme]


def page_origin(address: str) -> Origin:
    """Origin of the page under analysis; raises AddressError if it has none."""
    try:
        return url_origin(address)
    except ValueError as e:
        raise AddressError(f"Invalid page address: {address!r} ({e})") from e


def is_external(href: str, origin: Origin) -> bool:
    """
    Check if `href` leaves the page's origin.

    Only hrefs with an explicit http(s) scheme can be external; relative,
    fragment and scheme-less links always count as internal.
    """
    if not href.lower().startswith(EXPLICIT_SCHEMES):
        return False
    try:
        return url_origin(href) != origin
    except ValueError:
        return True


def classify_links(root: Tag, origin: Origin) -> List[LinkRecord]:
    """Classify every anchor below `root` relative to the page's `origin`."""
    records = []
    for anchor in collect(root, is_anchor).get("a", []):
        href = (anchor.get("href") or "").strip()
        kind = LinkKind.EXTERNAL if is_external(href, origin) else LinkKind.INTERNAL
        records.append(LinkRecord(href=href, kind=kind))
    return records


def is_error_status(status_code: int) -> bool:
    """Client and server errors (4xx, 5xx) mark a link as broken."""
    return str(status_code).startswith(("4", "5"))


def probe_link(
    session: requests.Session,
    url: str,
    timeout_s: float,
    user_agent: str = BROWSER_USER_AGENT,
) -> int:
    """Issue one GET against `url` and return its status code."""
    try:
        resp = session.get(
            url,
            headers={"User-Agent": user_agent},
            timeout=timeout_s,
            allow_redirects=True,
            stream=True,
        )
    # urllib3 raises LocationParseError (a ValueError) for hosts it cannot parse
    except (requests.RequestException, ValueError) as e:
        raise ProbeError(url, str(e)) from e
    try:
        return resp.status_code
    finally:
        resp.close()


def _probe_status(
    session: requests.Session,
    url: str,
    timeout_s: float,
    user_agent: str,
    abandoned: threading.Event,
) -> Optional[int]:
    """Status code of `url`, or None when no response could be obtained."""
    try:
        return probe_link(session, url, timeout_s, user_agent)
    except ProbeError as e:
        if abandoned.is_set():
            logger.debug("%s; already left unchecked", e)
        else:
            logger.warning("%s; counting it as broken", e)
        return None


def probe_links(
    session: requests.Session,
    records: List[LinkRecord],
    *,
    timeout_s: float,
    max_workers: int,
    deadline_s: Optional[float] = None,
    user_agent: str = BROWSER_USER_AGENT,
) -> int:
    """
    Probe every external record concurrently, filling in `broken`.

    At most `max_workers` probes run at once. Records are only updated from
    the calling thread once their probe has finished, so probes still
    outstanding when `deadline_s` expires are simply cancelled and leave
    their records unchecked (`broken is None`). Returns the number of
    unchecked records.
    """
    external = [r for r in records if r.is_external]
    if not external:
        return 0

    logger.info("Probing %d external links with %d workers", len(external), max_workers)
    abandoned = threading.Event()
    pool = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="probe")
    try:
        futures: Dict[Future, LinkRecord] = {
            pool.submit(_probe_status, session, record.href, timeout_s, user_agent, abandoned): record
            for record in external
        }
        done, not_done = wait(futures, timeout=deadline_s)
    finally:
        abandoned.set()
        pool.shutdown(wait=False, cancel_futures=True)

    if not_done:
        logger.warning(
            "Probe deadline of %ss reached, %d links left unchecked", deadline_s, len(not_done)
        )

    for future in done:
        record = futures[future]
        error = future.exception()
        if error is not None:
            logger.error("Checking %s failed; counting it as broken", record.href, exc_info=error)
            record.status_code = None
        else:
            record.status_code = future.result()
        record.broken = record.status_code is None or is_error_status(record.status_code)
        if record.broken:
            logger.info("Broken link %s (status %s)", record.href, record.status_code)

    return len(not_done)
