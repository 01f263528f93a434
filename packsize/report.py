"""Human-readable and JSON renderings of an estimation result."""

from __future__ import annotations

import json
from typing import Dict

from .models import EstimationResult

_UNITS = ("B", "kB", "MB", "GB", "TB", "PB", "EB")


def format_bytes(value: float) -> str:
    """Format a byte count with decimal units and three significant digits."""
    number = float(value)
    sign = "-" if number < 0 else ""
    number = abs(number)
    if number < 1000:
        return f"{sign}{number:g} B" if number != int(number) else f"{sign}{int(number)} B"

    exponent = 0
    while number >= 1000 and exponent < len(_UNITS) - 1:
        number /= 1000
        exponent += 1
    text = f"{number:.3g}"
    if float(text) >= 1000 and exponent < len(_UNITS) - 1:
        number /= 1000
        exponent += 1
        text = f"{number:.3g}"
    return f"{sign}{text} {_UNITS[exponent]}"


def format_size_line(size: int) -> str:
    return f"{format_bytes(size)} ({size:,} B)"


def render_text(result: EstimationResult) -> str:
    """Return the two-line summary printed at the end of a run."""
    mean = result.rounded_mean
    return "\n".join(
        [
            format_size_line(result.uncompressed_size),
            f"{format_size_line(mean)} ± {result.rounded_stddev:,} B compressed",
        ]
    )


def to_dict(result: EstimationResult) -> Dict[str, object]:
    ratio = result.mean / result.uncompressed_size if result.uncompressed_size else None
    return {
        "root": result.root,
        "files": result.file_count,
        "uncompressed_size": result.uncompressed_size,
        "compressed_mean": result.mean,
        "compressed_stddev": result.stddev,
        "ratio": ratio,
        "rounds": result.rounds,
        "samples": list(result.sample_sizes),
        "elapsed_seconds": result.elapsed,
        "skipped": [{"path": item.path, "reason": item.reason} for item in result.skipped],
    }


def render_json(result: EstimationResult) -> str:
    return json.dumps(to_dict(result), indent=2, sort_keys=True)


__all__ = ["format_bytes", "format_size_line", "render_json", "render_text", "to_dict"]
