from __future__ import annotations

"""
Amalgamation Error Hierarchy.

Defines the exception types raised by the include resolution and expansion
engine. Include-level errors carry the location of the offending directive so
that interface layers can report 'file:line' diagnostics.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

PathLike = Union[str, Path]


class AmalgamationError(Exception):
    """
    Base class for every failure that aborts an amalgamation run.

    Attributes:
        file: File containing the directive that triggered the error (if any).
        line: 1-based line number of that directive (if any).
    """

    def __init__(
            self,
            message: str,
            file: Optional[PathLike] = None,
            line: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file = str(file) if file is not None else None
        self.line = line

    def location(self) -> str:
        """Render the 'file:line' prefix, or an empty string if unknown."""
        if self.file is None:
            return ""
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"

    def __str__(self) -> str:
        loc = self.location()
        return f"{loc}: {self.message}" if loc else self.message


class PathError(AmalgamationError):
    """A referenced file or directory does not exist or cannot be read."""


class UnresolvableInclude(AmalgamationError):
    """No search directory yielded an existing file for an include."""


class CyclicInclude(AmalgamationError):
    """
    An include re-enters a file that is still being expanded.

    Attributes:
        cycle: The include chain, outermost first, ending with the re-entered file.
    """

    def __init__(
            self,
            message: str,
            cycle: Sequence[PathLike],
            file: Optional[PathLike] = None,
            line: Optional[int] = None,
    ):
        super().__init__(message, file, line)
        self.cycle: List[str] = [str(p) for p in cycle]

    def __str__(self) -> str:
        head = super().__str__()
        chain = "".join(f"\n\t{p}" for p in self.cycle)
        return f"{head}{chain}"


class ConfigError(AmalgamationError):
    """The run configuration is invalid (bad glob, bad policy, bad config file)."""
