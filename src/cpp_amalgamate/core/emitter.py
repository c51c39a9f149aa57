from __future__ import annotations

"""
Output Emitter.

Finalizes each expanded file's block (blank trimming, begin/end banners)
before it is spliced into its includer, and renders the combined output,
optionally interleaving '#line' directives so that compilers and debuggers
map amalgamated lines back to their original files.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from cpp_amalgamate.domain.config import PLACEHOLDER_ABSOLUTE, PLACEHOLDER_RELATIVE
from cpp_amalgamate.domain.include_models import LINE_ENDINGS, ExpansionResult, OutputLine


class OutputEmitter:
    """
    Assemble the final text from expansion results.

    Args:
        line_directives: Emit '#line' directives on provenance discontinuities.
        trim_blank_lines: Strip leading/trailing blank lines of each file block.
        file_begin: Banner template rendered before each file's block.
        file_end: Banner template rendered after each file's block.
    """

    def __init__(
            self,
            line_directives: bool = False,
            trim_blank_lines: bool = False,
            file_begin: Optional[str] = None,
            file_end: Optional[str] = None,
    ):
        self.line_directives = line_directives
        self.trim_blank_lines = trim_blank_lines
        self.file_begin = file_begin or None
        self.file_end = file_end or None

    # -------------------------------------------------------------------------
    # PER-FILE FINALIZATION
    # -------------------------------------------------------------------------

    def finish_file(self, lines: List[OutputLine], path: Path, relative: str) -> List[OutputLine]:
        """
        Finalize the block contributed by one expanded file.

        Runs once per file, innermost first, so trimming also removes blank
        padding between originally separate files.

        Args:
            lines: The file's expanded lines (nested includes already spliced).
            path: Canonical path of the file.
            relative: Path relative to the directory it was found in.

        Returns:
            List[OutputLine]: The block to splice into the includer.
        """
        if self.trim_blank_lines:
            lines = trim_blank(lines)

        if not lines:
            return lines

        block: List[OutputLine] = []
        if self.file_begin:
            block.append(OutputLine(render_banner(self.file_begin, path, relative)))
        block.extend(lines)
        if self.file_end:
            block.append(OutputLine(render_banner(self.file_end, path, relative)))
        return block

    # -------------------------------------------------------------------------
    # RENDERING
    # -------------------------------------------------------------------------

    def render(self, results: Iterable[ExpansionResult]) -> str:
        """
        Concatenate the roots in order and produce the final text.

        Roots are joined as-is (a root without a final newline runs into the
        next root). Inside a root every file ends on a line boundary, as with
        real textual substitution.
        """
        parts: List[str] = []
        prev: Optional[OutputLine] = None
        for result in results:
            prev = self._write(parts, result.lines, prev)
        return "".join(parts)

    def render_lines(self, lines: Iterable[OutputLine]) -> str:
        parts: List[str] = []
        self._write(parts, lines, None)
        return "".join(parts)

    def _write(
            self,
            parts: List[str],
            lines: Iterable[OutputLine],
            prev: Optional[OutputLine],
    ) -> Optional[OutputLine]:
        """Append one root's lines to 'parts'; returns the last line written."""
        for idx, ln in enumerate(lines):
            # Only a file's last line can lack a terminator
            if idx:
                _terminate(parts)

            if ln.is_synthetic:
                _terminate(parts)
                parts.append(ln.text)
            else:
                if self.line_directives and not _continues(prev, ln):
                    _terminate(parts)
                    parts.append(line_directive(ln.source, ln.line))
                parts.append(ln.text)
            prev = ln
        return prev


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def trim_blank(lines: List[OutputLine]) -> List[OutputLine]:
    """Remove leading and trailing whitespace-only lines."""
    start, end = 0, len(lines)
    while start < end and lines[start].is_blank():
        start += 1
    while end > start and lines[end - 1].is_blank():
        end -= 1
    return lines[start:end]


def render_banner(template: str, path: Path, relative: str) -> str:
    """
    Substitute '{absolute}' and '{relative}' in a banner template.

    Substitution is literal: any other braces in the template are kept.
    """
    text = template.replace(PLACEHOLDER_ABSOLUTE, path.as_posix())
    text = text.replace(PLACEHOLDER_RELATIVE, relative)
    return text if text.endswith("\n") else text + "\n"


def line_directive(source: Path, line: int) -> str:
    escaped = str(source).replace("\\", "\\\\").replace("\"", "\\\"")
    return f"#line {line} \"{escaped}\"\n"


def _continues(prev: Optional[OutputLine], ln: OutputLine) -> bool:
    """True if 'ln' directly follows 'prev' in the same source file."""
    if prev is None or prev.is_synthetic:
        return False
    return prev.source == ln.source and prev.line is not None and prev.line + 1 == ln.line


def _terminate(parts: List[str]) -> None:
    """Ensure the output ends on a line boundary."""
    if parts and not parts[-1].endswith(LINE_ENDINGS):
        parts.append("\n")
