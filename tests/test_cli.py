from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from page_analyzer.cli import main
from page_analyzer.core import AnalysisResult
from page_analyzer.errors import TransportError

RESULT = AnalysisResult(
    markup_version="HTML5",
    title="Example",
    h1_count=1,
    h2_count=0,
    h3_count=0,
    h4_count=0,
    internal_links_count=3,
    external_links_count=2,
    broken_links_count=1,
    has_login_form=False,
)


@pytest.fixture(autouse=True)
def keep_test_logging():
    """Leave pytest's own log handlers in place."""
    with patch("page_analyzer.cli.configure_logging"):
        yield


@patch("page_analyzer.cli.analyze", return_value=RESULT)
def test_prints_json_to_stdout(mock_analyze, capsys):
    exit_code = main(["https://example.com", "--workers", "3", "--deadline", "0"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert json.loads(out) == RESULT.to_dict()

    address, config = mock_analyze.call_args.args
    assert address == "https://example.com"
    assert config.max_workers == 3
    assert config.probe_deadline_s is None


@patch("page_analyzer.cli.analyze", return_value=RESULT)
def test_verbose_summary_and_output_file(mock_analyze, tmp_path, capsys):
    out_file = tmp_path / "reports" / "example.json"

    exit_code = main(["https://example.com", "--out", str(out_file), "--pretty", "--verbose"])

    assert exit_code == 0
    assert json.loads(out_file.read_text(encoding="utf-8"))["brokenLinksCount"] == 1
    err = capsys.readouterr().err
    assert "PAGE SUMMARY" in err
    assert "Broken links:    1" in err


@patch("page_analyzer.cli.analyze", side_effect=TransportError("https://example.com", status_code=503))
def test_analysis_error_exits_non_zero(mock_analyze, capsys):
    exit_code = main(["https://example.com"])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "503" in captured.err
