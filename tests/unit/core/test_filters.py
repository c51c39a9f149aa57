from __future__ import annotations

"""
Unit tests for the Inclusion Filter.

Verifies:
1. Glob compilation, including '**' and alternation semantics.
2. Last-match-wins evaluation and '!' inversion.
3. Quote/system applicability of rules.
"""

from pathlib import Path, PurePosixPath

import pytest

from cpp_amalgamate.core.filters import GlobPattern, InliningFilter, parse_rule
from cpp_amalgamate.domain.errors import ConfigError
from cpp_amalgamate.domain.include_models import AppliesTo, IncludeKind


def _filter(*rules: str) -> InliningFilter:
    return InliningFilter(parse_rule(r, position=i) for i, r in enumerate(rules))


def test_glob_double_star_spans_directories():
    """'**' matches any number of segments, '**/' also zero."""
    pattern = GlobPattern("**/b.hpp")
    assert pattern.matches("/tmp/x/y/b.hpp") is True
    assert pattern.matches("b.hpp") is True
    assert pattern.matches("/tmp/x/ab.hpp") is False


def test_glob_basic_wildcards():
    assert GlobPattern("*.h").matches("dir/foo.h") is True
    assert GlobPattern("foo.?pp").matches("foo.hpp") is True
    assert GlobPattern("foo.[ch]").matches("foo.c") is True
    assert GlobPattern("foo.[!ch]").matches("foo.c") is False
    assert GlobPattern("**/*.{h,hpp}").matches("/a/b.hpp") is True
    assert GlobPattern("**/*.{h,hpp}").matches("/a/b.cpp") is False


def test_glob_matches_pure_paths_in_posix_form():
    assert GlobPattern("/usr/**").matches(PurePosixPath("/usr/include/vector")) is True


def test_glob_rejects_malformed_patterns():
    with pytest.raises(ConfigError):
        GlobPattern("")
    with pytest.raises(ConfigError):
        GlobPattern("{a,b")


def test_parse_rule_inversion():
    rule = parse_rule("!vendor/**", AppliesTo.QUOTE, 3)
    assert rule.inverted is True
    assert rule.pattern.glob == "vendor/**"
    assert rule.applies_to is AppliesTo.QUOTE
    assert rule.position == 3
    assert str(rule) == "!vendor/**"


def test_no_rules_inlines_by_default():
    assert _filter().should_inline(Path("/any/header.h"), IncludeKind.SYSTEM) is True


def test_last_match_wins_override():
    """A later inverted rule re-includes what an earlier rule excluded."""
    f = _filter("**/*.h", "!vendor/**")
    assert f.should_inline(Path("vendor/foo.h"), IncludeKind.QUOTE) is True


def test_single_exclusion_rule():
    f = _filter("**/*.h")
    assert f.should_inline(Path("vendor/foo.h"), IncludeKind.QUOTE) is False


def test_filter_precedence_chain():
    f = _filter("**/a/**", "!**/a/b/**", "**/a/b/c.hpp")
    assert f.should_inline(Path("/inc/a/b/c.hpp"), IncludeKind.SYSTEM) is False
    assert f.should_inline(Path("/inc/a/b/d.hpp"), IncludeKind.SYSTEM) is True
    assert f.should_inline(Path("/inc/a/x.hpp"), IncludeKind.SYSTEM) is False


def test_verdict_is_idempotent():
    f = _filter("**", "!**/keep.h")
    path = Path("/src/keep.h")
    verdicts = {f.should_inline(path, IncludeKind.QUOTE) for _ in range(5)}
    assert verdicts == {True}


def test_kind_specific_rules_keep_relative_order():
    rules = [
        parse_rule("**", AppliesTo.BOTH, 0),
        parse_rule("!**/b.hpp", AppliesTo.QUOTE, 1),
        parse_rule("!**/a.hpp", AppliesTo.SYSTEM, 2),
    ]
    f = InliningFilter(rules)

    assert f.should_inline(Path("/d/a.hpp"), IncludeKind.SYSTEM) is True
    assert f.should_inline(Path("/d/b.hpp"), IncludeKind.SYSTEM) is False
    assert f.should_inline(Path("/d/a.hpp"), IncludeKind.QUOTE) is False
    assert f.should_inline(Path("/d/b.hpp"), IncludeKind.QUOTE) is True
    assert [str(r) for r in f.rules_for(IncludeKind.QUOTE)] == ["**", "!**/b.hpp"]
