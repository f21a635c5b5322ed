from __future__ import annotations

import dataclasses
from typing import Sequence

from .globs import GlobPattern, compile_glob


@dataclasses.dataclass(frozen=True)
class IgnoreRule:
    commit_hash_prefix: str
    pattern: GlobPattern
    negated: bool = False

    @classmethod
    def from_glob(cls, glob: str, *, commit_hash_prefix: str = "", negated: bool = False) -> IgnoreRule:
        return cls(commit_hash_prefix=commit_hash_prefix, pattern=compile_glob(glob), negated=negated)

    def applies(self, commit_hash: str, path: str) -> bool:
        return commit_hash.startswith(self.commit_hash_prefix) and self.pattern.matches(path)


def keep(commit_hash: str, path: str, rules: Sequence[IgnoreRule]) -> bool:
    """
    Decide whether a changed path counts for a commit. Rules are scanned from
    last to first and the first applicable one decides: a plain rule drops the
    path, a negated rule keeps it. Paths no rule applies to are kept.
    """
    for rule in reversed(rules):
        if rule.applies(commit_hash, path):
            return rule.negated
    return True
