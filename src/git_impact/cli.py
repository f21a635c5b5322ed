from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path

from .config import WEEKDAYS, ImpactConfig, init_config, parse_first_day_of_week, read_config
from .errors import MalformedLogRecord, RuleFileError
from .identity import RenameRule
from .ignores import IgnoreRule
from .impact import build_report
from .numstat import git_log_args
from .report import render_csv, render_json, render_table, report_dict, write_impacts_csv, write_json
from .rules import load_ignore_rules, load_rename_rules

logger = logging.getLogger("git_impact")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-impact",
        description="Per-author commit impact report from `git log -z --numstat` output.",
    )
    parser.add_argument("log", nargs="?", default="-", help="Raw log text file, or '-' for stdin (default).")
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--init-config", action="store_true", help="Write a default config file to --config and exit.")
    parser.add_argument("--renames", type=Path, action="append", default=[], help="Rename rule file (repeatable; after those in config).")
    parser.add_argument("--ignore", type=Path, action="append", default=[], help="Ignore rule file (repeatable; after those in config).")
    parser.add_argument(
        "--first-day-of-week",
        type=str,
        default="",
        help=f"Week start for weekly buckets ({', '.join(WEEKDAYS)}; overrides config).",
    )
    parser.add_argument("--weekly", action="store_true", help="Report per-author-per-week subtotals instead of totals.")
    parser.add_argument("--format", choices=["table", "csv", "json"], default="table", help="Output format.")
    parser.add_argument("--output", type=Path, default=None, help="Write the report to a file instead of stdout.")
    parser.add_argument("--top", type=int, default=None, help="Only show the top N authors (0 = all; overrides config).")
    parser.add_argument("--lenient-rules", action="store_true", help="Skip unreadable or malformed rule files with a warning.")
    parser.add_argument("--print-git-command", action="store_true", help="Print the git command that produces the input and exit.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")
    return parser


def _load_rules(cfg: ImpactConfig, args: argparse.Namespace) -> tuple[list[RenameRule], list[IgnoreRule]]:
    strict = cfg.strict_rules and not args.lenient_rules
    rename_rules: list[RenameRule] = []
    ignore_rules: list[IgnoreRule] = []

    for p in [*cfg.rename_files, *args.renames]:
        try:
            rename_rules.extend(load_rename_rules([p]))
        except RuleFileError as e:
            if strict:
                raise
            logger.warning("ignoring rename rules from %s: %s", p, e)

    for p in [*cfg.ignore_files, *args.ignore]:
        try:
            ignore_rules.extend(load_ignore_rules([p]))
        except RuleFileError as e:
            if strict:
                raise
            logger.warning("ignoring ignore rules from %s: %s", p, e)

    return rename_rules, ignore_rules


def _read_log(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.print_git_command:
        print(shlex.join(["git", *git_log_args()]))
        return 0

    if args.init_config:
        if init_config(args.config):
            print(f"Wrote new config: {args.config}")
        else:
            print(f"Config already exists: {args.config}")
        return 0

    try:
        cfg = read_config(args.config)
    except ValueError as e:
        print(f"error: {args.config}: {e}", file=sys.stderr)
        return 2
    try:
        first_day = parse_first_day_of_week(args.first_day_of_week) if args.first_day_of_week else cfg.first_day_of_week
    except ValueError as e:
        print(f"error: --first-day-of-week: {e}", file=sys.stderr)
        return 2
    top = cfg.top_authors if args.top is None else max(0, int(args.top))
    # weekly rows are never cut
    shown_top = 0 if args.weekly else top

    try:
        rename_rules, ignore_rules = _load_rules(cfg, args)
    except RuleFileError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        raw = _read_log(args.log)
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: cannot read log {args.log}: {e}", file=sys.stderr)
        return 2

    try:
        report = build_report(raw, rename_rules, ignore_rules, first_day)
    except MalformedLogRecord as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    impacts = report.weekly if args.weekly else report.totals
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        if args.format == "json":
            write_json(args.output, report_dict(report, top))
        elif args.format == "csv":
            write_impacts_csv(args.output, impacts[:shown_top] if shown_top > 0 else impacts)
        else:
            args.output.write_text(render_table(impacts, shown_top, show_week=args.weekly) + "\n", encoding="utf-8")
        return 0

    if args.format == "json":
        print(render_json(report, top))
    elif args.format == "csv":
        sys.stdout.write(render_csv(impacts, shown_top))
    else:
        print(render_table(impacts, shown_top, show_week=args.weekly))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
