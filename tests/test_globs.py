from __future__ import annotations

import dataclasses

import pytest

from git_impact.errors import GlobSyntaxError, UnsupportedGlobFeature
from git_impact.globs import CharClass, ClassRange, Literal, NamedClass, Wildcard, compile_glob, tokenize


def test_literal_glob_matches_only_itself() -> None:
    p = compile_glob("src/main.py")
    assert p.matches("src/main.py") is True
    assert p.matches("src/main.pz") is False
    assert p.matches("src/mainXpy") is False
    assert p.matches("src/main.py ") is False
    assert p.matches("xsrc/main.py") is False


def test_regex_metacharacters_are_literal() -> None:
    p = compile_glob("a.b+c(d)^$|{1}")
    assert p.matches("a.b+c(d)^$|{1}") is True
    assert p.matches("aXb+c(d)^$|{1}") is False


def test_star_and_question_mark_do_not_cross_slash() -> None:
    p = compile_glob("a*b")
    assert p.matches("ab") is True
    assert p.matches("axxb") is True
    assert p.matches("a/xb") is False

    q = compile_glob("a?c")
    assert q.matches("abc") is True
    assert q.matches("a/c") is False
    assert q.matches("ac") is False


def test_pattern_is_anchored() -> None:
    p = compile_glob("*.log")
    assert p.matches("debug.log") is True
    assert p.matches("debug.log.bak") is False
    assert p.matches("logs/debug.log") is False
    assert compile_glob("*/*.log").matches("logs/debug.log") is True


def test_negated_bracket() -> None:
    p = compile_glob("[!abc]")
    assert p.matches("a") is False
    assert p.matches("d") is True
    assert p.matches("/") is False
    assert p.matches("dd") is False


def test_ranges_and_literal_members() -> None:
    p = compile_glob("[a-c]x")
    assert p.matches("bx") is True
    assert p.matches("dx") is False

    assert compile_glob("[]a]").matches("]") is True
    assert compile_glob("[]a]").matches("a") is True
    assert compile_glob("[!]]").matches("]") is False
    assert compile_glob("[a-]").matches("-") is True
    assert compile_glob("[\\^]").matches("^") is True
    assert compile_glob("[\\^]").matches("\\") is True


def test_range_spanning_slash_never_matches_slash() -> None:
    p = compile_glob("[--0]")
    assert p.matches(".") is True
    assert p.matches("0") is True
    assert p.matches("/") is False


def test_named_classes() -> None:
    digit = compile_glob("[[:digit:]]")
    assert digit.matches("5") is True
    assert digit.matches("a") is False
    assert digit.matches("٣") is True  # ARABIC-INDIC DIGIT THREE

    alpha = compile_glob("[[:alpha:]]")
    assert alpha.matches("é") is True
    assert alpha.matches("1") is False

    assert compile_glob("[[:upper:]]").matches("A") is True
    assert compile_glob("[[:upper:]]").matches("a") is False
    assert compile_glob("[[:lower:]]").matches("a") is True
    assert compile_glob("[[:xdigit:]]").matches("f") is True
    assert compile_glob("[[:xdigit:]]").matches("g") is False
    assert compile_glob("[[:space:]]").matches(" ") is True
    assert compile_glob("[[:blank:]]").matches("\t") is True
    assert compile_glob("[[:cntrl:]]").matches("\x07") is True
    assert compile_glob("[[:alnum:]_]").matches("_") is True
    assert compile_glob("[[:DIGIT:]]").matches("7") is True


def test_negated_named_class() -> None:
    p = compile_glob("v[![:digit:]]*")
    assert p.matches("vx1") is True
    assert p.matches("v1x") is False


def test_unterminated_bracket_fails_at_offset_zero() -> None:
    with pytest.raises(GlobSyntaxError) as exc:
        compile_glob("[")
    assert exc.value.position == 0
    assert "character 0" in str(exc.value)


@pytest.mark.parametrize(
    "glob,position",
    [
        ("", 0),
        ("abc[", 3),
        ("[]", 0),
        ("[!]", 0),
        ("[a[b]", 0),
        ("x[a/b]", 4),
        ("[c-a]", 1),
        ("*.[[:digit:]", 2),
    ],
)
def test_syntax_error_positions(glob: str, position: int) -> None:
    with pytest.raises(GlobSyntaxError) as exc:
        compile_glob(glob)
    assert exc.value.position == position


@pytest.mark.parametrize("glob", ["[[:foo:]]", "[[.a.]]", "[[=a=]]"])
def test_unsupported_features(glob: str) -> None:
    with pytest.raises(UnsupportedGlobFeature) as exc:
        compile_glob(glob)
    assert isinstance(exc.value, GlobSyntaxError)
    assert exc.value.position == 1


def test_unknown_named_class_names_the_class() -> None:
    with pytest.raises(UnsupportedGlobFeature) as exc:
        compile_glob("[[:foo:]]")
    assert "[:foo:]" in exc.value.feature


def test_tokenize_produces_tagged_tokens() -> None:
    tokens = tokenize("src/*.[!o]?")
    assert [type(t) for t in tokens] == [Literal, Wildcard, Literal, CharClass, Wildcard]
    assert tokens[0] == Literal(text="src/", position=0)
    assert tokens[1] == Wildcard(kind="*", position=4)
    cls = tokens[3]
    assert isinstance(cls, CharClass)
    assert cls.negated is True
    assert cls.position == 6


def test_tokenize_bracket_items() -> None:
    (cls,) = tokenize("[a-z[:digit:]_]")
    assert isinstance(cls, CharClass)
    assert cls.items[0] == ClassRange(first="a", last="z", position=1)
    assert cls.items[1] == NamedClass(name="digit", position=4)


def test_glob_pattern_is_immutable() -> None:
    p = compile_glob("*.py")
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.glob = "*.js"  # type: ignore[misc]
