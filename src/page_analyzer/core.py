"""
Page analysis: fetch one document and summarise its structure.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

import requests

from page_analyzer.fetch import build_session, fetch_document
from page_analyzer.links import BROWSER_USER_AGENT, Origin, classify_links, page_origin, probe_links
from page_analyzer.tree import (
    count_headings,
    extract_title,
    has_login_form,
    parse_document,
    resolve_markup_version,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalyzerConfig:
    """Tunables for a single analysis."""
    timeout_s: float = 15.0
    probe_timeout_s: float = 5.0
    max_workers: int = 8
    # None waits for every probe
    probe_deadline_s: Optional[float] = 30.0
    user_agent: str = "PageAnalyzer/1.0"
    probe_user_agent: str = BROWSER_USER_AGENT


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Summary of one analyzed page."""
    markup_version: str
    title: str
    h1_count: int
    h2_count: int
    h3_count: int
    h4_count: int
    internal_links_count: int
    external_links_count: int
    broken_links_count: int
    has_login_form: bool

    def to_dict(self) -> Dict[str, Union[str, int, bool]]:
        """Wire representation with the field names clients expect."""
        return {
            "htmlVersion": self.markup_version,
            "pageTitle": self.title,
            "h1Count": self.h1_count,
            "h2Count": self.h2_count,
            "h3Count": self.h3_count,
            "h4Count": self.h4_count,
            "internalLinksCount": self.internal_links_count,
            "externalLinksCount": self.external_links_count,
            "brokenLinksCount": self.broken_links_count,
            "hasLoginForm": self.has_login_form,
        }


def analyze_document(
    markup: Union[bytes, str],
    address: str,
    config: Optional[AnalyzerConfig] = None,
    session: Optional[requests.Session] = None,
) -> AnalysisResult:
    """
    Analyze markup that was served from `address`.

    External links are probed through `session`; without one, a session is
    created for the duration of the call.
    """
    config = config or AnalyzerConfig()
    origin = page_origin(address)

    if session is None:
        with build_session(config.user_agent) as own_session:
            return _analyze_markup(markup, address, origin, config, own_session)
    return _analyze_markup(markup, address, origin, config, session)


def _analyze_markup(
    markup: Union[bytes, str],
    address: str,
    origin: Origin,
    config: AnalyzerConfig,
    session: requests.Session,
) -> AnalysisResult:
    root = parse_document(markup)
    headings = count_headings(root)
    links = classify_links(root, origin)

    unchecked = probe_links(
        session,
        links,
        timeout_s=config.probe_timeout_s,
        max_workers=config.max_workers,
        deadline_s=config.probe_deadline_s,
        user_agent=config.probe_user_agent,
    )

    external = [link for link in links if link.is_external]
    result = AnalysisResult(
        markup_version=resolve_markup_version(root),
        title=extract_title(root),
        h1_count=headings["h1"],
        h2_count=headings["h2"],
        h3_count=headings["h3"],
        h4_count=headings["h4"],
        internal_links_count=len(links) - len(external),
        external_links_count=len(external),
        broken_links_count=sum(1 for link in external if link.broken),
        has_login_form=has_login_form(root),
    )
    if unchecked:
        logger.warning("%s: %d external links were not checked", address, unchecked)
    return result


def _fetch_and_analyze(
    address: str,
    origin: Origin,
    config: AnalyzerConfig,
    session: requests.Session,
) -> AnalysisResult:
    markup = fetch_document(session, address, config.timeout_s)
    result = _analyze_markup(markup, address, origin, config, session)
    logger.info(
        "%s: %d internal, %d external, %d broken links",
        address,
        result.internal_links_count,
        result.external_links_count,
        result.broken_links_count,
    )
    return result


def analyze(
    address: str,
    config: Optional[AnalyzerConfig] = None,
    session: Optional[requests.Session] = None,
) -> AnalysisResult:
    """
    Fetch the page at `address` and analyze it.

    Args:
        address: Absolute http(s) address of the page.
        config: Timeouts, worker limit and identification headers.
        session: HTTP session to use for the fetch and all probes.

    Returns:
        The page summary.

    Raises:
        AddressError: `address` is not an absolute http(s) address.
        TransportError: the page could not be fetched or did not return 200.
        ParseError: the body could not be parsed.
    """
    config = config or AnalyzerConfig()
    origin = page_origin(address)

    if session is None:
        with build_session(config.user_agent) as own_session:
            return _fetch_and_analyze(address, origin, config, own_session)
    return _fetch_and_analyze(address, origin, config, session)
