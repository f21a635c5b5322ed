from __future__ import annotations

import dataclasses
import functools
import re
import sys
import unicodedata
from collections import defaultdict
from typing import Union

from .errors import GlobSyntaxError, UnsupportedGlobFeature

GLOB_SPECIAL = "?*["

# POSIX class name -> (unicode categories, extra class source)
NAMED_CLASSES: dict[str, tuple[tuple[str, ...], str]] = {
    "alnum": (("Lu", "Ll", "Lt", "Nd"), ""),
    "alpha": (("Lu", "Ll", "Lt"), ""),
    "blank": (("Zs", "Zl", "Zp"), r"\f\n\r\t\v\x85"),
    "cntrl": (("Cc",), ""),
    "digit": (("Nd",), ""),
    "lower": (("Ll",), ""),
    "space": (("Zs",), ""),
    "upper": (("Lu",), ""),
    "xdigit": (("Nd",), "a-fA-F"),
}


@dataclasses.dataclass(frozen=True)
class Literal:
    text: str
    position: int


@dataclasses.dataclass(frozen=True)
class Wildcard:
    kind: str  # "?" or "*"
    position: int


@dataclasses.dataclass(frozen=True)
class ClassChar:
    char: str
    position: int


@dataclasses.dataclass(frozen=True)
class ClassRange:
    first: str
    last: str
    position: int


@dataclasses.dataclass(frozen=True)
class NamedClass:
    name: str
    position: int


ClassItem = Union[ClassChar, ClassRange, NamedClass]


@dataclasses.dataclass(frozen=True)
class CharClass:
    negated: bool
    items: tuple[ClassItem, ...]
    position: int


Token = Union[Literal, Wildcard, CharClass]


@dataclasses.dataclass(frozen=True)
class GlobPattern:
    glob: str
    tokens: tuple[Token, ...]
    regex: re.Pattern[str]

    def matches(self, path: str) -> bool:
        return self.regex.fullmatch(path) is not None


def tokenize(glob: str) -> tuple[Token, ...]:
    """
    Scan `glob` into literal runs, `?`/`*` wildcards and bracket expressions.
    Raises GlobSyntaxError at the offset of the first token that cannot be read.
    """
    if not glob:
        raise GlobSyntaxError(0, "empty pattern")

    tokens: list[Token] = []
    i = 0
    n = len(glob)
    while i < n:
        ch = glob[i]
        if ch in "?*":
            tokens.append(Wildcard(kind=ch, position=i))
            i += 1
        elif ch == "[":
            token, i = _scan_bracket(glob, i)
            tokens.append(token)
        else:
            j = i
            while j < n and glob[j] not in GLOB_SPECIAL:
                j += 1
            tokens.append(Literal(text=glob[i:j], position=i))
            i = j
    return tuple(tokens)


def _scan_bracket(glob: str, start: int) -> tuple[CharClass, int]:
    n = len(glob)
    i = start + 1
    negated = False
    if i < n and glob[i] == "!":
        negated = True
        i += 1

    members: list[ClassItem] = []
    if i < n and glob[i] == "]":
        members.append(ClassChar(char="]", position=i))
        i += 1

    while True:
        if i >= n:
            raise GlobSyntaxError(start, "unterminated bracket expression")
        ch = glob[i]
        if ch == "]":
            i += 1
            break
        if ch == "[":
            named, i = _scan_bracket_term(glob, i, start)
            members.append(named)
            continue
        if ch == "/":
            raise GlobSyntaxError(i, "forward slashes are not valid in bracket expressions")
        members.append(ClassChar(char=ch, position=i))
        i += 1

    return CharClass(negated=negated, items=_fold_ranges(members), position=start), i


def _scan_bracket_term(glob: str, i: int, start: int) -> tuple[NamedClass, int]:
    delim = glob[i + 1] if i + 1 < len(glob) else ""
    if delim not in (":", ".", "="):
        raise GlobSyntaxError(start, "unexpected '[' inside bracket expression")
    close = glob.find(delim + "]", i + 2)
    if close < 0:
        raise GlobSyntaxError(start, f"unterminated '[{delim}' inside bracket expression")
    body = glob[i + 2 : close]
    if "]" in body:
        raise GlobSyntaxError(start, f"unterminated '[{delim}' inside bracket expression")

    if delim == ".":
        raise UnsupportedGlobFeature(f"collating symbol '[.{body}.]'", i)
    if delim == "=":
        raise UnsupportedGlobFeature(f"equivalence class '[={body}=]'", i)
    name = body.lower()
    if name not in NAMED_CLASSES:
        raise UnsupportedGlobFeature(f"named character class '[:{body}:]'", i)
    return NamedClass(name=name, position=i), close + 2


def _fold_ranges(members: list[ClassItem]) -> tuple[ClassItem, ...]:
    items: list[ClassItem] = []
    k = 0
    while k < len(members):
        m = members[k]
        if k + 2 < len(members):
            dash, last = members[k + 1], members[k + 2]
            if (
                isinstance(m, ClassChar)
                and isinstance(dash, ClassChar)
                and dash.char == "-"
                and isinstance(last, ClassChar)
            ):
                if ord(last.char) < ord(m.char):
                    raise GlobSyntaxError(m.position, f"invalid range '{m.char}-{last.char}'")
                items.append(ClassRange(first=m.char, last=last.char, position=m.position))
                k += 3
                continue
        items.append(m)
        k += 1
    return tuple(items)


@functools.lru_cache(maxsize=1)
def _category_spans() -> dict[str, tuple[tuple[int, int], ...]]:
    spans: dict[str, list[list[int]]] = defaultdict(list)
    for cp in range(sys.maxunicode + 1):
        cat_spans = spans[unicodedata.category(chr(cp))]
        if cat_spans and cat_spans[-1][1] == cp - 1:
            cat_spans[-1][1] = cp
        else:
            cat_spans.append([cp, cp])
    return {cat: tuple((a, b) for a, b in v) for cat, v in spans.items()}


def _codepoint_source(cp: int) -> str:
    return f"\\U{cp:08x}"


@functools.lru_cache(maxsize=None)
def named_class_source(name: str) -> str:
    categories, extra = NAMED_CLASSES[name]
    table = _category_spans()
    out: list[str] = [extra]
    for cat in categories:
        for a, b in table.get(cat, ()):
            if a == b:
                out.append(_codepoint_source(a))
            else:
                out.append(f"{_codepoint_source(a)}-{_codepoint_source(b)}")
    return "".join(out)


def _escape_class_char(ch: str) -> str:
    if ch in "\\]^-[":
        return "\\" + ch
    return ch


def _class_item_source(item: ClassItem) -> str:
    if isinstance(item, ClassChar):
        return _escape_class_char(item.char)
    if isinstance(item, ClassRange):
        return f"{_escape_class_char(item.first)}-{_escape_class_char(item.last)}"
    return named_class_source(item.name)


def translate(tokens: tuple[Token, ...]) -> str:
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, Literal):
            parts.append(re.escape(token.text))
        elif isinstance(token, Wildcard):
            parts.append("[^/]" if token.kind == "?" else "[^/]*")
        else:
            body = "".join(_class_item_source(item) for item in token.items)
            # bracket expressions never match a path separator
            if token.negated:
                parts.append(f"[^/{body}]")
            else:
                parts.append(f"(?!/)[{body}]")
    return r"\A(?:" + "".join(parts) + r")\Z"


def compile_glob(glob: str) -> GlobPattern:
    """Compile a shell path glob into an anchored matcher where `?`, `*` and classes never match `/`."""
    tokens = tokenize(glob)
    source = translate(tokens)
    try:
        regex = re.compile(source)
    except re.error as e:
        raise GlobSyntaxError(0, f"cannot compile pattern ({e.msg})") from e
    return GlobPattern(glob=glob, tokens=tokens, regex=regex)
