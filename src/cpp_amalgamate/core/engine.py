from __future__ import annotations

"""
Recursive Include Expansion Engine.

Reads source files line by line, drops '#pragma once', and replaces every
'#include' it can resolve and is allowed to inline with the recursively
expanded content of the referenced file. Each header is inlined at most
once per run; includes that are filtered out, unresolvable or cyclic are
left in the output verbatim (subject to the configured error policies).
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from cpp_amalgamate.core.emitter import OutputEmitter
from cpp_amalgamate.core.filters import InliningFilter
from cpp_amalgamate.core.resolver import IncludeResolver
from cpp_amalgamate.core.tracker import VisitationTracker
from cpp_amalgamate.domain.errors import CyclicInclude, PathError, UnresolvableInclude
from cpp_amalgamate.domain.include_models import (
    Diagnostic,
    ExpansionResult,
    IncludeKind,
    IncludeReference,
    OutputLine,
    VisitStatus,
)
from cpp_amalgamate.domain.policy import ErrorHandling
from cpp_amalgamate.infra.fs import canonicalize, display_relative, read_source_lines

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# DIRECTIVE RECOGNITION
# -----------------------------------------------------------------------------

_INCLUDE_RE = re.compile(r'^\s*#\s*include\s*(["<])([^">]+)([">])\s*(?://.*)?$')
_PRAGMA_ONCE_RE = re.compile(r"^\s*#\s*pragma\s+once\s*$")

_CLOSING = {"\"": "\"", "<": ">"}


def is_pragma_once(line: str) -> bool:
    return _PRAGMA_ONCE_RE.match(line) is not None


def parse_include(line: str, source: Path, line_no: int) -> Optional[IncludeReference]:
    """
    Parse an '#include' line.

    Returns:
        Optional[IncludeReference]: The reference, or None if the line is not
        a well-formed quote/system include (it is then passed through).
    """
    match = _INCLUDE_RE.match(line)
    if match is None:
        return None

    opening, target, closing = match.groups()
    if _CLOSING[opening] != closing:
        logger.debug(f"Found weird include-like statement: {line.strip()}")
        return None

    kind = IncludeKind.QUOTE if opening == "\"" else IncludeKind.SYSTEM
    return IncludeReference(target=target, kind=kind, source=source, line=line_no, raw=line)

# -----------------------------------------------------------------------------
# ENGINE
# -----------------------------------------------------------------------------

class ExpansionEngine:
    """
    Expand root files into amalgamated lines.

    One engine holds the visitation state of one run; every root expanded
    through it shares that state, so a header is inlined at most once across
    all roots.

    Args:
        resolver: Search-path resolver.
        inlining_filter: Decides which resolved headers are inlined.
        emitter: Per-file block finalization (trimming, banners).
        unresolvable_quote: Policy for quote includes that cannot be resolved.
        unresolvable_system: Policy for system includes that cannot be resolved.
        cyclic: Policy for includes that re-enter a file being expanded.
    """

    def __init__(
            self,
            resolver: IncludeResolver,
            inlining_filter: Optional[InliningFilter] = None,
            emitter: Optional[OutputEmitter] = None,
            unresolvable_quote: ErrorHandling = ErrorHandling.IGNORE,
            unresolvable_system: ErrorHandling = ErrorHandling.IGNORE,
            cyclic: ErrorHandling = ErrorHandling.ERROR,
    ):
        self.resolver = resolver
        self.filter = inlining_filter or InliningFilter()
        self.emitter = emitter or OutputEmitter()
        self.unresolvable_quote = unresolvable_quote
        self.unresolvable_system = unresolvable_system
        self.cyclic = cyclic

        self.tracker = VisitationTracker()
        self.diagnostics: List[Diagnostic] = []
        self._expanded: List[Path] = []

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def expand_root(self, source_file: Path) -> ExpansionResult:
        """
        Expand one root source file.

        Args:
            source_file: Root path as given by the user.

        Returns:
            ExpansionResult: Lines of the root (empty if it was already inlined).

        Raises:
            PathError: If the root cannot be canonicalized or read (always fatal).
            AmalgamationError: If an include error escalates under the ERROR policy.
        """
        logger.info(f"Processing source file {Path(source_file).name!r}")
        path = canonicalize(source_file)

        start = len(self._expanded)
        result = ExpansionResult(root=path)

        # A root cannot be CYCLIC: the stack is empty between roots.
        status = self.tracker.enter(path)
        if status is VisitStatus.FRESH:
            source_lines = self._read_entered(path)
            result.lines = self._expand_entered(path, display_relative(path), source_lines)

        result.files = self._expanded[start:]
        return result

    # -------------------------------------------------------------------------
    # RECURSION
    # -------------------------------------------------------------------------

    def _read_entered(self, path: Path) -> List[str]:
        """Read a freshly entered file, popping it from the stack on failure."""
        try:
            return read_source_lines(path)
        except PathError:
            self.tracker.abandon(path)
            raise

    def _expand_entered(self, path: Path, relative: str, source_lines: List[str]) -> List[OutputLine]:
        """Expand a file already pushed on the tracker stack."""
        with self.tracker.expanding(path):
            self._expanded.append(path)
            lines = self._expand_lines(path, source_lines)
        return self.emitter.finish_file(lines, path, relative)

    def _expand_lines(self, path: Path, source_lines: List[str]) -> List[OutputLine]:
        out: List[OutputLine] = []
        current_dir = path.parent

        for line_no, text in enumerate(source_lines, start=1):
            if is_pragma_once(text):
                logger.debug(f"Skipping pragma once in {path.name!r}:{line_no}")
                continue

            reference = parse_include(text, path, line_no)
            if reference is None:
                out.append(OutputLine(text, path, line_no))
                continue

            out.extend(self._process_include(reference, current_dir))

        return out

    def _process_include(self, reference: IncludeReference, current_dir: Path) -> List[OutputLine]:
        """
        Resolve, filter and track one include.

        Returns:
            List[OutputLine]: The spliced content, the original line, or nothing.
        """
        keep_line = [OutputLine(reference.raw, reference.source, reference.line)]
        policy = self._unresolvable_policy(reference.kind)

        try:
            resolution = self.resolver.resolve(reference, current_dir)
        except (UnresolvableInclude, PathError) as e:
            policy.handle(self._locate(e, reference), logger, self.diagnostics)
            return keep_line

        if not self.filter.should_inline(resolution.path, reference.kind):
            return keep_line

        status = self.tracker.enter(resolution.path)

        if status is VisitStatus.DUPLICATE:
            return []

        if status is VisitStatus.CYCLIC:
            chain = self.tracker.cycle_chain(resolution.path)
            error = CyclicInclude(
                f"cyclic include of {reference.spelling} detected:",
                cycle=chain,
                file=reference.source,
                line=reference.line,
            )
            self.cyclic.handle(error, logger, self.diagnostics)
            return keep_line

        # Read up front so an unreadable header leaves no partial output behind
        try:
            source_lines = self._read_entered(resolution.path)
        except PathError as e:
            policy.handle(self._locate(e, reference), logger, self.diagnostics)
            return keep_line

        return self._expand_entered(resolution.path, resolution.relative, source_lines)

    def _unresolvable_policy(self, kind: IncludeKind) -> ErrorHandling:
        if kind is IncludeKind.QUOTE:
            return self.unresolvable_quote
        return self.unresolvable_system

    @staticmethod
    def _locate(error: PathError, reference: IncludeReference) -> PathError:
        """Attach the directive's location to an error raised without one."""
        if error.file is None:
            error.file = str(reference.source)
            error.line = reference.line
        return error
