from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Hashable, Iterable, Sequence

from .identity import Identity, RenameRule, normalize_name, rename
from .ignores import IgnoreRule, keep
from .models import ImpactReport, UserImpact
from .numstat import CommitNumstatRecord, parse_log, week_start

logger = logging.getLogger(__name__)


def record_impact(
    record: CommitNumstatRecord,
    rename_rules: Sequence[RenameRule],
    ignore_rules: Sequence[IgnoreRule],
    first_day_of_week: int = 0,
) -> UserImpact:
    author = rename(Identity(name=record.author_name, email=record.author_email), rename_rules)

    insertions = 0
    deletions = 0
    for delta in record.path_deltas:
        if not delta.is_numeric:
            continue
        if not keep(record.commit_hash, delta.path, ignore_rules):
            continue
        insertions += int(delta.insertions or 0)
        deletions += int(delta.deletions or 0)

    return UserImpact(
        author=author.name,
        commits=1,
        insertions=insertions,
        deletions=deletions,
        impact=max(insertions, deletions),
        week=week_start(record.author_date, first_day_of_week),
    )


def merge_impact(dst: UserImpact, src: UserImpact) -> None:
    dst.commits += src.commits
    dst.insertions += src.insertions
    dst.deletions += src.deletions
    dst.impact += src.impact


def _group(
    impacts: Iterable[UserImpact],
    key: Callable[[UserImpact], Hashable],
    week: Callable[[UserImpact], dt.date | None],
) -> list[UserImpact]:
    groups: dict[Hashable, UserImpact] = {}
    for imp in impacts:
        k = key(imp)
        cur = groups.get(k)
        if cur is None:
            cur = UserImpact(author=imp.author, week=week(imp))
            groups[k] = cur
        merge_impact(cur, imp)
    return list(groups.values())


def group_impacts(impacts: Iterable[UserImpact]) -> list[UserImpact]:
    out = _group(impacts, key=lambda i: normalize_name(i.author), week=lambda i: None)
    # stable: equal commit counts keep first-seen order
    out.sort(key=lambda i: -i.commits)
    return out


def group_weekly_impacts(impacts: Iterable[UserImpact]) -> list[UserImpact]:
    out = _group(impacts, key=lambda i: (normalize_name(i.author), i.week), week=lambda i: i.week)
    out.sort(key=lambda i: (i.week or dt.date.min, -i.commits))
    return out


def record_impacts(
    records: Iterable[CommitNumstatRecord],
    rename_rules: Sequence[RenameRule],
    ignore_rules: Sequence[IgnoreRule],
    first_day_of_week: int = 0,
) -> list[UserImpact]:
    return [record_impact(r, rename_rules, ignore_rules, first_day_of_week) for r in records]


def compute_impacts(
    raw_log: str,
    rename_rules: Sequence[RenameRule] = (),
    ignore_rules: Sequence[IgnoreRule] = (),
    first_day_of_week: int = 0,
) -> list[UserImpact]:
    """
    Per-author totals for a raw `git log -z --numstat` dump, most commits first.
    Raises MalformedLogRecord if any commit block cannot be parsed.
    """
    return group_impacts(record_impacts(parse_log(raw_log), rename_rules, ignore_rules, first_day_of_week))


def compute_weekly_impacts(
    raw_log: str,
    rename_rules: Sequence[RenameRule] = (),
    ignore_rules: Sequence[IgnoreRule] = (),
    first_day_of_week: int = 0,
) -> list[UserImpact]:
    return group_weekly_impacts(record_impacts(parse_log(raw_log), rename_rules, ignore_rules, first_day_of_week))


def build_report(
    raw_log: str,
    rename_rules: Sequence[RenameRule] = (),
    ignore_rules: Sequence[IgnoreRule] = (),
    first_day_of_week: int = 0,
) -> ImpactReport:
    per_commit = record_impacts(parse_log(raw_log), rename_rules, ignore_rules, first_day_of_week)
    logger.debug(
        "aggregating %d commits with %d rename rules and %d ignore rules",
        len(per_commit),
        len(rename_rules),
        len(ignore_rules),
    )
    return ImpactReport(totals=group_impacts(per_commit), weekly=group_weekly_impacts(per_commit))
