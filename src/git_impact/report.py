from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Sequence

from .models import ImpactReport, UserImpact

IMPACT_FIELDS = ["author", "commits", "insertions", "deletions", "impact", "week"]


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def bar(value: int, max_value: int, width: int = 22) -> str:
    if max_value <= 0:
        filled = 0
    else:
        filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


def impact_rows(impacts: Sequence[UserImpact]) -> list[dict[str, object]]:
    return [
        {
            "author": i.author,
            "commits": int(i.commits),
            "insertions": int(i.insertions),
            "deletions": int(i.deletions),
            "impact": int(i.impact),
            "week": i.week.isoformat() if i.week else "",
        }
        for i in impacts
    ]


def _top(impacts: Sequence[UserImpact], top: int) -> Sequence[UserImpact]:
    return impacts[:top] if top > 0 else impacts


def render_table(impacts: Sequence[UserImpact], top: int = 0, *, show_week: bool = False) -> str:
    rows = _top(impacts, top)
    if not rows:
        return "(no commits)"
    max_impact = max(int(i.impact) for i in rows)
    name_w = min(32, max(len("author"), max(len(i.author) for i in rows)))

    head = f"{'author':<{name_w}}  {'commits':>8}  {'insertions':>10}  {'deletions':>10}  {'impact':>10}"
    if show_week:
        head = f"{'week':<10}  " + head
    lines = [head, "-" * len(head)]
    for i in rows:
        line = (
            f"{trunc(i.author, name_w):<{name_w}}  {fmt_int(i.commits):>8}  {fmt_int(i.insertions):>10}  "
            f"{fmt_int(i.deletions):>10}  {fmt_int(i.impact):>10}  {bar(i.impact, max_impact)}"
        )
        if show_week:
            line = f"{i.week.isoformat() if i.week else '':<10}  " + line
        lines.append(line)
    if top > 0 and len(impacts) > top:
        lines.append(f"(+{len(impacts) - top} more)")
    return "\n".join(lines)


def render_csv(impacts: Sequence[UserImpact], top: int = 0) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=IMPACT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for row in impact_rows(_top(impacts, top)):
        writer.writerow(row)
    return buf.getvalue()


def report_dict(report: ImpactReport, top: int = 0) -> dict[str, object]:
    return {
        "authors": impact_rows(_top(report.totals, top)),
        "weekly": impact_rows(report.weekly),
    }


def render_json(report: ImpactReport, top: int = 0) -> str:
    return json.dumps(report_dict(report, top), indent=2, sort_keys=False)


def write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data, indent=2, sort_keys=False), encoding="utf-8")


def write_impacts_csv(path: Path, impacts: Sequence[UserImpact]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=IMPACT_FIELDS)
        writer.writeheader()
        for row in impact_rows(impacts):
            writer.writerow(row)
