#!/usr/bin/env python3
"""
capturelint CLI entrypoint

Subcommands:
  - lint:  lint Swift files for unused capture list entries
  - init:  write a starter capturelint.yaml

Exit codes: 0 clean, 1 configuration error, 2 serious violations found.
"""
from __future__ import annotations

import sys
import argparse
from pathlib import Path

from .config_loader import ConfigError, load_config
from .reporters import REPORTERS


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="capturelint", description="Find unused references in Swift closure capture lists")
    sub = parser.add_subparsers(dest="cmd")

    p_lint = sub.add_parser("lint", help="Lint Swift files (default paths from config)")
    p_lint.add_argument("paths", nargs="*", help="Files or directories to lint")
    p_lint.add_argument("--config", default=None, help="Path to config (YAML or pyproject.toml)")
    p_lint.add_argument("--reporter", choices=sorted(REPORTERS), default=None, help="Output format (default from config)")
    p_lint.add_argument("--strict", action="store_true", help="Fail on warnings as well as errors")
    p_lint.add_argument("--quiet", action="store_true", help="Suppress progress and summary output")

    p_init = sub.add_parser("init", help="Generate configuration (capturelint.yaml)")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing capturelint.yaml if present")
    p_init.add_argument("--output", default="capturelint.yaml", help="Where to write the config")
    return parser


def _run_lint(args: argparse.Namespace) -> int:
    # Lazy import to keep CLI start-up light
    from .linter import lint_paths
    from .reporters import generate_report, summary_line

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    paths = args.paths or config.paths
    reporter = args.reporter or config.reporter
    strict = args.strict or config.strict

    result = lint_paths(paths, config, quiet=args.quiet)
    report = generate_report(reporter, result.violations)
    if report:
        print(report)
    if not args.quiet:
        print(summary_line(result.violations, result.serious_count, result.files_linted), file=sys.stderr)

    if result.serious_count or (strict and result.violations):
        return 2
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "init":
        from .config_init import init_config
        init_config(Path(args.output), force=args.force)
        return 0

    if args.cmd == "lint":
        return _run_lint(args)

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
