from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import re

from .errors import MalformedLogRecord

logger = logging.getLogger(__name__)

RECORD_START = "\x01"
FIELD_SEP = "\x1e"
HEADER_END = "\x02"
ENTRY_END = "\x00"
ENTRY_FIELD_SEP = "\t"

# hash, author date, author email, author name
LOG_FORMAT = "%x01%H%x1e%aI%x1e%ae%x1e%an%x02"

_GIT_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2}) (\d{2}:\d{2}:\d{2}) ([+-]\d{2})(\d{2})$")


@dataclasses.dataclass(frozen=True)
class PathDelta:
    insertions: int | None
    deletions: int | None
    path: str

    @property
    def is_numeric(self) -> bool:
        return self.insertions is not None and self.deletions is not None


@dataclasses.dataclass(frozen=True)
class CommitNumstatRecord:
    commit_hash: str
    author_date: dt.datetime
    author_email: str
    author_name: str
    path_deltas: tuple[PathDelta, ...]


def git_log_args(revision: str = "") -> list[str]:
    args = ["log", "-z", f"--format={LOG_FORMAT}", "--numstat"]
    if revision:
        args.append(revision)
    return args


def parse_author_date(text: str) -> dt.datetime:
    s = (text or "").strip()
    m = _GIT_DATE_RE.match(s)
    if m:
        # `%ai` style: 2011-01-02 12:34:56 +0100
        s = f"{m.group(1)}T{m.group(2)}{m.group(3)}:{m.group(4)}"
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    d = dt.datetime.fromisoformat(s)
    if d.tzinfo is None:
        d = d.replace(tzinfo=dt.timezone.utc)
    return d


def week_start(moment: dt.datetime, first_day_of_week: int = 0) -> dt.date:
    """Floor the UTC calendar day of `moment` to the week start (0 = Monday ... 6 = Sunday)."""
    day = moment.astimezone(dt.timezone.utc).date()
    return day - dt.timedelta(days=(day.weekday() - first_day_of_week) % 7)


def _count(value: str) -> int | None:
    v = value.strip()
    if v.isascii() and v.isdigit():
        return int(v)
    return None


def parse_numstat_body(body: str) -> tuple[PathDelta, ...]:
    entries = [e for e in (raw.strip("\n") for raw in body.split(ENTRY_END)) if e]
    deltas: list[PathDelta] = []
    i = 0
    while i < len(entries):
        parts = entries[i].split(ENTRY_FIELD_SEP, 2)
        if len(parts) < 3:
            logger.debug("skipping numstat entry without counts: %r", entries[i])
            i += 1
            continue
        added, deleted, path = _count(parts[0]), _count(parts[1]), parts[2]
        if not path and i + 2 < len(entries):
            # renames and copies: counts, then old path and new path as separate entries
            path = entries[i + 2]
            i += 3
        else:
            i += 1
        deltas.append(PathDelta(insertions=added, deletions=deleted, path=path))
    return tuple(deltas)


def parse_block(block: str, index: int) -> CommitNumstatRecord:
    header, sep, body = block.partition(HEADER_END)
    if not sep:
        raise MalformedLogRecord(index, "missing header terminator")
    fields = header.split(FIELD_SEP, 3)
    if len(fields) != 4:
        raise MalformedLogRecord(index, f"expected 4 header fields, got {len(fields)}")
    commit_hash, date_s, email, name = fields
    commit_hash = commit_hash.strip()
    if not commit_hash:
        raise MalformedLogRecord(index, "empty commit hash")
    try:
        author_date = parse_author_date(date_s)
    except ValueError as e:
        raise MalformedLogRecord(index, f"invalid author date {date_s!r}") from e

    return CommitNumstatRecord(
        commit_hash=commit_hash,
        author_date=author_date,
        author_email=email,
        author_name=name,
        path_deltas=parse_numstat_body(body),
    )


def split_blocks(raw: str) -> list[str]:
    return [b for b in raw.split(RECORD_START) if b.strip("\x00\n")]


def parse_log(raw: str) -> list[CommitNumstatRecord]:
    records = [parse_block(block, i) for i, block in enumerate(split_blocks(raw))]
    logger.debug("parsed %d commit blocks", len(records))
    return records
