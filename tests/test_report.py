"""Tests for packsize.report."""

from __future__ import annotations

import json

from packsize.models import EstimationResult, SkippedFile
from packsize.report import format_bytes, format_size_line, render_json, render_text


def _result(**overrides) -> EstimationResult:
    values = dict(
        root="/repo",
        file_count=2,
        uncompressed_size=1_234_567,
        sample_sizes=[300_000, 300_010],
        mean=300_005.4,
        stddev=5.0,
        elapsed=3.1,
    )
    values.update(overrides)
    return EstimationResult(**values)


def test_format_bytes_uses_decimal_units() -> None:
    assert format_bytes(0) == "0 B"
    assert format_bytes(11) == "11 B"
    assert format_bytes(999) == "999 B"
    assert format_bytes(1000) == "1 kB"
    assert format_bytes(1234) == "1.23 kB"
    assert format_bytes(1_234_567) == "1.23 MB"
    assert format_bytes(999_999) == "1 MB"


def test_format_size_line_includes_exact_count() -> None:
    assert format_size_line(1_234_567) == "1.23 MB (1,234,567 B)"


def test_render_text_reports_mean_and_deviation() -> None:
    lines = render_text(_result()).splitlines()

    assert lines[0] == "1.23 MB (1,234,567 B)"
    assert lines[1] == "300 kB (300,005 B) ± 5 B compressed"


def test_render_json_is_machine_readable() -> None:
    payload = json.loads(render_json(_result(skipped=[SkippedFile("bad.txt", "Permission denied")])))

    assert payload["uncompressed_size"] == 1_234_567
    assert payload["rounds"] == 2
    assert payload["samples"] == [300_000, 300_010]
    assert payload["skipped"] == [{"path": "bad.txt", "reason": "Permission denied"}]
    assert payload["ratio"] == 300_005.4 / 1_234_567


def test_ratio_is_null_for_empty_corpus() -> None:
    payload = json.loads(render_json(_result(uncompressed_size=0)))

    assert payload["ratio"] is None
