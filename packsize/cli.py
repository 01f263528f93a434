"""CLI entrypoint for packsize."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import SUPPORTED_CODECS, ConfigError, PackSizeConfig, load_config
from .logging import configure_logging
from .orchestrator import Orchestrator
from .report import render_json, render_text
from .sampling import CompressionError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="packsize",
        description="Estimate how well the text files of a source tree compress.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to measure (defaults to current directory).",
    )
    parser.add_argument(
        "-t",
        "--time-budget",
        type=int,
        metavar="MS",
        help="Keep sampling until this many milliseconds have elapsed (default 3000).",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        help="Stop after this many rounds even if time remains.",
    )
    parser.add_argument("--seed", type=int, help="Seed for the shuffle generator.")
    parser.add_argument(
        "--codec",
        choices=SUPPORTED_CODECS,
        help="Compression algorithm used for every round (default xz).",
    )
    parser.add_argument("--preset", type=int, help="Compression level or preset.")
    parser.add_argument(
        "--extreme",
        action="store_true",
        default=None,
        help="Use the xz extreme preset variant.",
    )
    parser.add_argument("--workers", type=int, help="Compressor worker threads (zstd).")
    parser.add_argument(
        "--separator",
        help="Text inserted between concatenated files (default none).",
    )
    parser.add_argument(
        "--git",
        dest="use_git",
        action="store_true",
        default=None,
        help="Also skip paths ignored by git.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a machine-readable summary instead of the text report.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Hide per-file notices.",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file.")
    return parser


def _apply_overrides(config: PackSizeConfig, args: argparse.Namespace) -> PackSizeConfig:
    if args.time_budget is not None:
        config.time_budget_ms = args.time_budget
    if args.max_rounds is not None:
        config.max_rounds = args.max_rounds
    if args.seed is not None:
        config.seed = args.seed
    if args.separator is not None:
        config.separator = args.separator.encode("utf-8")
    if args.use_git is not None:
        config.use_git = args.use_git
    if args.codec is not None and args.codec != config.compressor.codec:
        config.compressor.use_codec(args.codec)
    if args.preset is not None:
        config.compressor.preset = args.preset
    if args.extreme is not None:
        config.compressor.extreme = args.extreme
    if args.workers is not None:
        config.compressor.workers = args.workers
    config.validate()
    return config


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for packsize."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)

    root = Path(args.path)
    try:
        config = _apply_overrides(load_config(root), args)
    except ConfigError as exc:
        parser.exit(1, f"packsize: invalid configuration: {exc}\n")

    try:
        result = Orchestrator(config).run(str(root))
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except CompressionError as exc:
        parser.exit(1, f"packsize failed: {exc}\nRun with --verbose for more details.\n")

    if args.json:
        print(render_json(result))
    else:
        print()
        print(render_text(result))


if __name__ == "__main__":
    main(sys.argv[1:])
