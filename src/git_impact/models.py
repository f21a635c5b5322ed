from __future__ import annotations

import dataclasses
import datetime as dt


@dataclasses.dataclass
class UserImpact:
    author: str = ""
    commits: int = 0
    insertions: int = 0
    deletions: int = 0
    impact: int = 0
    week: dt.date | None = None

    @property
    def changed(self) -> int:
        return self.insertions + self.deletions


@dataclasses.dataclass(frozen=True)
class ImpactReport:
    totals: list[UserImpact]  # per author, most commits first
    weekly: list[UserImpact]  # per author per week, oldest week first
