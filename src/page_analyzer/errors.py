"""
Error types raised while analyzing a page.
"""
from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for every error the analyzer reports."""


class AddressError(AnalysisError, ValueError):
    """The page address cannot be used as a base for link classification."""


class TransportError(AnalysisError):
    """The page could not be retrieved, or did not answer with 200."""

    def __init__(self, address: str, status_code: Optional[int] = None, reason: str = "") -> None:
        self.address = address
        self.status_code = status_code
        if status_code is not None:
            message = f"response status: {status_code} (expected 200) for {address}"
        else:
            message = f"could not connect to {address}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ParseError(AnalysisError):
    """The response body could not be turned into a document tree."""


class ProbeError(AnalysisError):
    """A reachability check for a single external link did not complete."""

    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        super().__init__(f"could not probe {url}: {reason}" if reason else f"could not probe {url}")


class MissingContentError(AnalysisError):
    """An element that should carry text has none."""
