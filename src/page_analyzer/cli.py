"""
Command-line interface for the page analyzer.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from page_analyzer.core import AnalysisResult, AnalyzerConfig, analyze
from page_analyzer.errors import AnalysisError

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; INFO and up when verbose, warnings otherwise."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO if verbose else logging.WARNING)

    # urllib3 logs every connection at DEBUG/INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def print_summary(address: str, result: AnalysisResult) -> None:
    """Print analysis summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("PAGE SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Address:         {address}\n")
    sys.stderr.write(f"Markup version:  {result.markup_version or '(none)'}\n")
    sys.stderr.write(f"Title:           {result.title or '(none)'}\n")
    sys.stderr.write(
        f"Headings:        h1={result.h1_count} h2={result.h2_count} "
        f"h3={result.h3_count} h4={result.h4_count}\n"
    )
    sys.stderr.write(f"Internal links:  {result.internal_links_count}\n")
    sys.stderr.write(f"External links:  {result.external_links_count}\n")
    sys.stderr.write(f"Broken links:    {result.broken_links_count}\n")
    sys.stderr.write(f"Login form:      {'yes' if result.has_login_form else 'no'}\n")
    sys.stderr.write("\n")


def build_parser() -> argparse.ArgumentParser:
    defaults = AnalyzerConfig()
    parser = argparse.ArgumentParser(
        description="Analyze a single web page and output a JSON summary."
    )
    parser.add_argument("url", help="Page URL (e.g. https://example.com)")
    parser.add_argument(
        "--timeout", type=float, default=defaults.timeout_s,
        help=f"Page request timeout in seconds (default: {defaults.timeout_s:g})",
    )
    parser.add_argument(
        "--probe-timeout", type=float, default=defaults.probe_timeout_s,
        help=f"Timeout per external link check in seconds (default: {defaults.probe_timeout_s:g})",
    )
    parser.add_argument(
        "--workers", type=int, default=defaults.max_workers,
        help=f"Concurrent external link checks (default: {defaults.max_workers})",
    )
    parser.add_argument(
        "--deadline", type=float, default=defaults.probe_deadline_s,
        help=f"Give up on outstanding link checks after this many seconds (default: {defaults.probe_deadline_s:g})",
    )
    parser.add_argument("--user-agent", default=defaults.user_agent, help="User-Agent header for the page request")
    parser.add_argument("--out", default="-", help="Output file path, or '-' for stdout (default: stdout)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the analyzer CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    config = AnalyzerConfig(
        timeout_s=args.timeout,
        probe_timeout_s=args.probe_timeout,
        max_workers=args.workers,
        probe_deadline_s=args.deadline if args.deadline and args.deadline > 0 else None,
        user_agent=args.user_agent,
    )

    try:
        result = analyze(args.url, config)
    except AnalysisError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1

    if args.verbose:
        print_summary(args.url, result)

    json_text = json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
