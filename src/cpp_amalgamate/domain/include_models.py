from __future__ import annotations

"""
Include Domain Data Models.

Immutable value objects exchanged between the resolver, the filter, the
visitation tracker, the expansion engine and the output emitter.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

if TYPE_CHECKING:
    from cpp_amalgamate.domain.errors import AmalgamationError

# A line without one of these is the unterminated last line of a file
LINE_ENDINGS = ("\n", "\r")

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class IncludeKind(str, Enum):
    """Delimiter style of an include directive."""

    QUOTE = "quote"
    SYSTEM = "system"


class AppliesTo(str, Enum):
    """Which include kinds a search directory or filter rule applies to."""

    BOTH = "both"
    QUOTE = "quote"
    SYSTEM = "system"

    def covers(self, kind: IncludeKind) -> bool:
        return self is AppliesTo.BOTH or self.value == kind.value


class VisitStatus(Enum):
    """Outcome of entering a file in the visitation tracker."""

    FRESH = "fresh"
    DUPLICATE = "duplicate"
    CYCLIC = "cyclic"

# -----------------------------------------------------------------------------
# VALUE OBJECTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class IncludeReference:
    """
    A parsed '#include' directive.

    Attributes:
        target: Text between the delimiters (e.g. 'foo/bar.h').
        kind: QUOTE for "..." and SYSTEM for <...>.
        source: Canonical path of the file containing the directive.
        line: 1-based line number of the directive.
        raw: The original line, re-emitted verbatim when not inlined.
    """
    target: str
    kind: IncludeKind
    source: Path
    line: int
    raw: str = ""

    @property
    def spelling(self) -> str:
        if self.kind is IncludeKind.QUOTE:
            return f"\"{self.target}\""
        return f"<{self.target}>"


@dataclass(frozen=True)
class Resolution:
    """
    A successfully resolved include.

    Attributes:
        path: Canonical, symlink-resolved absolute path (identity key).
        search_dir: Directory in which the match was found.
        relative: Path of the match relative to 'search_dir'.
    """
    path: Path
    search_dir: Path
    relative: str


@dataclass(frozen=True)
class OutputLine:
    """
    One physical line of output and where it came from.

    'source' and 'line' are None for synthetic lines (banners).
    """
    text: str
    source: Optional[Path] = None
    line: Optional[int] = None

    @property
    def is_synthetic(self) -> bool:
        return self.source is None

    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class Diagnostic:
    """A warning or error reported during expansion."""
    severity: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def from_error(cls, error: "AmalgamationError", severity: str) -> "Diagnostic":
        return cls(severity=severity, message=error.message, file=error.file, line=error.line)

    def __str__(self) -> str:
        if self.file is None:
            return f"{self.severity}: {self.message}"
        loc = self.file if self.line is None else f"{self.file}:{self.line}"
        return f"{loc}: {self.severity}: {self.message}"


@dataclass
class ExpansionResult:
    """
    Expanded content of one root file.

    Attributes:
        root: Canonical path of the root file.
        lines: Output lines in emission order.
        files: Every file expanded while processing this root, in order.
    """
    root: Path
    lines: List[OutputLine] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Plain text of the lines; each file ends on a line boundary."""
        parts: List[str] = []
        for ln in self.lines:
            if parts and not parts[-1].endswith(LINE_ENDINGS):
                parts.append("\n")
            parts.append(ln.text)
        return "".join(parts)

    def provenance(self) -> Iterator[Tuple[int, Optional[Path], Optional[int]]]:
        """Yield (output_line, source_file, source_line), output lines 1-based."""
        for idx, ln in enumerate(self.lines, start=1):
            yield idx, ln.source, ln.line
