from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Iterable, Sequence

from .errors import GlobSyntaxError, RuleFileError
from .identity import RenameDestination, RenameField, RenameRule, RenameStyle
from .globs import compile_glob
from .ignores import IgnoreRule

logger = logging.getLogger(__name__)

RENAME_STYLES: dict[str, RenameStyle] = {
    "exact": RenameStyle.EXACT,
    "ci": RenameStyle.CASE_INSENSITIVE,
    "icase": RenameStyle.CASE_INSENSITIVE,
    "regex": RenameStyle.REGEX,
}

RENAME_ARROW = "->"


def _parse_field(value: str, *, source: str, line_number: int) -> RenameField:
    try:
        return RenameField(value.strip().lower())
    except ValueError:
        raise RuleFileError(source, line_number, f"unknown field {value!r} (expected name or email)") from None


def parse_rename_line(line: str, *, source: str = "<string>", line_number: int = 0) -> RenameRule | None:
    try:
        tokens = shlex.split(line, comments=True, posix=True)
    except ValueError as e:
        raise RuleFileError(source, line_number, f"cannot tokenize rule: {e}") from e
    if not tokens:
        return None

    if len(tokens) < 5 or tokens[3] != RENAME_ARROW:
        raise RuleFileError(
            source,
            line_number,
            f"expected '<style> <field> <match> {RENAME_ARROW} <field>=<replacement> ...'",
        )

    style = RENAME_STYLES.get(tokens[0].lower())
    if style is None:
        raise RuleFileError(source, line_number, f"unknown rename style {tokens[0]!r} (expected exact, ci or regex)")
    source_field = _parse_field(tokens[1], source=source, line_number=line_number)

    destinations: list[RenameDestination] = []
    for tok in tokens[4:]:
        field_s, eq, replacement = tok.partition("=")
        if not eq:
            raise RuleFileError(source, line_number, f"expected <field>=<replacement>, got {tok!r}")
        destinations.append(
            RenameDestination(field=_parse_field(field_s, source=source, line_number=line_number), replacement=replacement)
        )

    try:
        return RenameRule(style=style, source_field=source_field, match=tokens[2], destinations=tuple(destinations))
    except ValueError as e:
        raise RuleFileError(source, line_number, str(e)) from e


def parse_rename_rules(lines: Iterable[str], source: str = "<string>") -> list[RenameRule]:
    rules: list[RenameRule] = []
    for n, line in enumerate(lines, start=1):
        rule = parse_rename_line(line, source=source, line_number=n)
        if rule is not None:
            rules.append(rule)
    return rules


def parse_ignore_line(line: str, *, source: str = "<string>", line_number: int = 0) -> IgnoreRule | None:
    s = line.rstrip()
    if not s.strip() or s.lstrip().startswith("#"):
        return None
    s = s.lstrip()

    commit_hash_prefix = ""
    if s.startswith("@"):
        parts = s[1:].split(None, 1)
        if len(parts) != 2:
            raise RuleFileError(source, line_number, "expected '@<commit-hash-prefix> <glob>'")
        commit_hash_prefix, s = parts

    negated = False
    if s.startswith("!"):
        negated = True
        s = s[1:]
    elif s[:1] == "\\" and s[1:2] in ("#", "!", "@"):
        s = s[1:]

    try:
        pattern = compile_glob(s)
    except GlobSyntaxError as e:
        raise RuleFileError(source, line_number, f"invalid glob {s!r}: {e}") from e
    return IgnoreRule(commit_hash_prefix=commit_hash_prefix, pattern=pattern, negated=negated)


def parse_ignore_rules(lines: Iterable[str], source: str = "<string>") -> list[IgnoreRule]:
    rules: list[IgnoreRule] = []
    for n, line in enumerate(lines, start=1):
        rule = parse_ignore_line(line, source=source, line_number=n)
        if rule is not None:
            rules.append(rule)
    return rules


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise RuleFileError(str(path), 0, f"cannot read rule file: {e}") from e


def load_rename_rules(paths: Sequence[Path]) -> list[RenameRule]:
    rules: list[RenameRule] = []
    for p in paths:
        loaded = parse_rename_rules(_read_lines(p), source=str(p))
        logger.debug("loaded %d rename rules from %s", len(loaded), p)
        rules.extend(loaded)
    return rules


def load_ignore_rules(paths: Sequence[Path]) -> list[IgnoreRule]:
    rules: list[IgnoreRule] = []
    for p in paths:
        loaded = parse_ignore_rules(_read_lines(p), source=str(p))
        logger.debug("loaded %d ignore rules from %s", len(loaded), p)
        rules.extend(loaded)
    return rules
