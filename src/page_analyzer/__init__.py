"""
Single-page analyzer: fetches a URL and reports its markup version, title,
heading counts, internal/external/broken link counts and login form presence.
"""
from page_analyzer.core import analyze, analyze_document, AnalysisResult, AnalyzerConfig
from page_analyzer.errors import (
    AddressError,
    AnalysisError,
    MissingContentError,
    ParseError,
    ProbeError,
    TransportError,
)

__version__ = "1.0.0"
__all__ = [
    "analyze",
    "analyze_document",
    "AnalysisResult",
    "AnalyzerConfig",
    "AnalysisError",
    "AddressError",
    "TransportError",
    "ParseError",
    "ProbeError",
    "MissingContentError",
]
