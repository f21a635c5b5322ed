from __future__ import annotations

import dataclasses
import enum
import functools
import re
from typing import Sequence


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_name(name: str) -> str:
    return name.strip().casefold()


class RenameStyle(enum.Enum):
    EXACT = "exact"
    CASE_INSENSITIVE = "ci"
    REGEX = "regex"


class RenameField(enum.Enum):
    NAME = "name"
    EMAIL = "email"


@dataclasses.dataclass(frozen=True)
class Identity:
    name: str
    email: str

    def get(self, field: RenameField) -> str:
        return self.name if field is RenameField.NAME else self.email

    def with_field(self, field: RenameField, value: str) -> Identity:
        if field is RenameField.NAME:
            return dataclasses.replace(self, name=value)
        return dataclasses.replace(self, email=value)


@dataclasses.dataclass(frozen=True)
class RenameDestination:
    field: RenameField
    replacement: str


@dataclasses.dataclass(frozen=True)
class RenameRule:
    style: RenameStyle
    source_field: RenameField
    match: str
    destinations: tuple[RenameDestination, ...]

    def __post_init__(self) -> None:
        if self.style is RenameStyle.REGEX:
            try:
                re.compile(self.match)
            except re.error as e:
                raise ValueError(f"invalid rename regex {self.match!r}: {e}") from e

    @functools.cached_property
    def regex(self) -> re.Pattern[str]:
        return re.compile(self.match)

    def applies_to(self, identity: Identity) -> bool:
        value = identity.get(self.source_field)
        if self.style is RenameStyle.EXACT:
            return value == self.match
        if self.style is RenameStyle.CASE_INSENSITIVE:
            return value.casefold() == self.match.casefold()
        return self.regex.search(value) is not None


def apply_rule(identity: Identity, rule: RenameRule) -> Identity:
    if not rule.applies_to(identity):
        return identity

    if rule.style is RenameStyle.REGEX:
        # destination values come from the pre-rule identity
        source = identity.get(rule.source_field)
        out = identity
        for dest in rule.destinations:
            out = out.with_field(dest.field, rule.regex.sub(dest.replacement, source))
        return out

    out = identity
    for dest in rule.destinations:
        out = out.with_field(dest.field, dest.replacement)
    return out


def rename(identity: Identity, rules: Sequence[RenameRule]) -> Identity:
    """
    Thread `identity` through `rules` in order. Each rule sees the cumulative
    result of the rules before it.
    """
    return functools.reduce(apply_rule, rules, identity)
