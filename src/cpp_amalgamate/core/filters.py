from __future__ import annotations

"""
Inclusion Filtering Engine.

Decides whether a resolved header is inlined or left as a literal
'#include' line. Rules are globs over canonical absolute paths, evaluated in
declaration order with the last matching rule taking precedence. A leading
'!' inverts a rule, turning it into a force-include.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterable, List, Sequence, Union

from cpp_amalgamate.domain.errors import ConfigError
from cpp_amalgamate.domain.include_models import AppliesTo, IncludeKind

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOB COMPILATION
# -----------------------------------------------------------------------------

class GlobPattern:
    """
    A compiled glob matched against whole paths.

    Syntax follows 'fnmatch' ('*', '?', '[seq]', '[!seq]') with two
    extensions: '{a,b}' alternation and '**'. The path separator is not
    special, so '*' may span directories; '**/' additionally matches zero
    directories, so '**/foo.h' also matches a bare 'foo.h'.
    """

    def __init__(self, glob: str):
        if not glob:
            raise ConfigError("Empty glob pattern.")
        self.glob = glob
        try:
            self._regex = re.compile(_translate(glob), re.DOTALL)
        except re.error as e:
            raise ConfigError(f"Invalid glob \"{glob}\": {e}") from e

    def matches(self, path: Union[str, PurePath]) -> bool:
        """Return True if the whole path matches the glob."""
        candidate = path.as_posix() if isinstance(path, PurePath) else str(path).replace("\\", "/")
        return self._regex.fullmatch(candidate) is not None

    def __repr__(self) -> str:
        return f"GlobPattern({self.glob!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, GlobPattern) and other.glob == self.glob

    def __hash__(self) -> int:
        return hash(self.glob)


def _translate(glob: str) -> str:
    """Translate glob syntax into an (unanchored) regex for fullmatch."""
    out: List[str] = []
    i, n = 0, len(glob)
    depth = 0  # open '{' groups

    while i < n:
        c = glob[i]
        if c == "*":
            if glob.startswith("**/", i):
                out.append("(?:.*/)?")
                i += 3
                continue
            while i < n and glob[i] == "*":
                i += 1
            out.append(".*")
            continue
        if c == "?":
            out.append(".")
        elif c == "[":
            j = _class_end(glob, i)
            if j < 0:
                out.append(re.escape(c))
            else:
                out.append(_translate_class(glob[i + 1:j]))
                i = j
        elif c == "{":
            depth += 1
            out.append("(?:")
        elif c == "}" and depth:
            depth -= 1
            out.append(")")
        elif c == "," and depth:
            out.append("|")
        elif c == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(glob[i]))
        else:
            out.append(re.escape(c))
        i += 1

    if depth:
        raise ConfigError(f"Invalid glob \"{glob}\": unclosed alternation")
    return "".join(out)


def _class_end(glob: str, start: int) -> int:
    """Index of the ']' closing the class opened at 'start', or -1."""
    j = start + 1
    if j < len(glob) and glob[j] == "!":
        j += 1
    if j < len(glob) and glob[j] == "]":
        j += 1
    while j < len(glob) and glob[j] != "]":
        j += 1
    return j if j < len(glob) else -1


def _translate_class(body: str) -> str:
    negate = body.startswith("!")
    if negate:
        body = body[1:]
    escaped = body.replace("\\", "\\\\").replace("^", "\\^")
    return f"[{'^' if negate else ''}{escaped}]"

# -----------------------------------------------------------------------------
# FILTER RULES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterRule:
    """
    One ordered inlining rule.

    Attributes:
        pattern: Compiled glob over canonical paths.
        inverted: False excludes matches from inlining, True forces inlining.
        applies_to: Include kinds the rule is evaluated for.
        position: Declaration index in the combined rule list.
    """
    pattern: GlobPattern
    inverted: bool = False
    applies_to: AppliesTo = AppliesTo.BOTH
    position: int = 0

    def __str__(self) -> str:
        return f"{'!' if self.inverted else ''}{self.pattern.glob}"


def parse_rule(
        text: str,
        applies_to: Union[AppliesTo, str] = AppliesTo.BOTH,
        position: int = 0,
) -> FilterRule:
    """
    Parse a textual rule; a leading '!' marks a force-include.

    Raises:
        ConfigError: If the glob is empty or malformed.
    """
    raw = text.strip()
    inverted = raw.startswith("!")
    if inverted:
        raw = raw[1:]
    return FilterRule(
        pattern=GlobPattern(raw),
        inverted=inverted,
        applies_to=AppliesTo(applies_to),
        position=position,
    )


class InliningFilter:
    """Ordered, last-match-wins evaluation of filter rules."""

    def __init__(self, rules: Iterable[FilterRule] = ()):
        ordered = sorted(rules, key=lambda r: r.position)
        self._quote: List[FilterRule] = [r for r in ordered if r.applies_to.covers(IncludeKind.QUOTE)]
        self._system: List[FilterRule] = [r for r in ordered if r.applies_to.covers(IncludeKind.SYSTEM)]

        logger.debug(f"Quote filter rules: {[str(r) for r in self._quote]}")
        logger.debug(f"System filter rules: {[str(r) for r in self._system]}")

    def rules_for(self, kind: IncludeKind) -> Sequence[FilterRule]:
        return self._quote if kind is IncludeKind.QUOTE else self._system

    def should_inline(self, path: Path, kind: IncludeKind) -> bool:
        """
        Decide whether a resolved header is inlined.

        Args:
            path: Canonical path of the header.
            kind: Kind of the include that referenced it.

        Returns:
            bool: True to inline, False to keep the '#include' line.
        """
        deciding = None
        for rule in self.rules_for(kind):
            if rule.pattern.matches(path):
                deciding = rule

        if deciding is None:
            logger.debug(f"Inlining {path.name!r} by default")
            return True
        if deciding.inverted:
            logger.debug(f"Inlining {path.name!r} (cause: '{deciding}')")
            return True
        logger.debug(f"Not inlining {path.name!r} (cause: '{deciding}')")
        return False
