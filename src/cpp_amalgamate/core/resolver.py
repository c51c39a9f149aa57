from __future__ import annotations

"""
Include Search-Path Resolution.

Maps the target of an '#include' directive to a canonical file. Quote
includes search the including file's directory first, then the quote search
directories; system includes search the system search directories only. The
first existing candidate wins.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from cpp_amalgamate.domain.errors import UnresolvableInclude
from cpp_amalgamate.domain.include_models import (
    AppliesTo,
    IncludeKind,
    IncludeReference,
    Resolution,
)
from cpp_amalgamate.infra.fs import canonicalize, canonicalize_dir, is_regular_candidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchPath:
    """A search directory and the include kinds it serves."""
    directory: Path
    applies_to: AppliesTo = AppliesTo.BOTH


class SearchPathSet:
    """
    Ordered search directories, partitioned by include kind.

    Declaration order is preserved inside each partition; a directory given
    for both kinds appears in both.
    """

    def __init__(self, entries: Iterable[Tuple[Union[str, Path], Union[AppliesTo, str]]] = ()):
        self.entries: List[SearchPath] = []
        for directory, applies_to in entries:
            self.entries.append(SearchPath(canonicalize_dir(directory), AppliesTo(applies_to)))

        logger.debug(f"Quote search dirs: {[str(d) for d in self.quote_dirs]}")
        logger.debug(f"System search dirs: {[str(d) for d in self.system_dirs]}")

    def dirs_for(self, kind: IncludeKind) -> List[Path]:
        return [e.directory for e in self.entries if e.applies_to.covers(kind)]

    @property
    def quote_dirs(self) -> List[Path]:
        return self.dirs_for(IncludeKind.QUOTE)

    @property
    def system_dirs(self) -> List[Path]:
        return self.dirs_for(IncludeKind.SYSTEM)


class IncludeResolver:
    """
    Resolve include references against a SearchPathSet.

    Args:
        search_paths: Ordered search directories.
        use_current_dir: If False, quote includes skip the including file's directory.
    """

    def __init__(self, search_paths: Optional[SearchPathSet] = None, use_current_dir: bool = True):
        self.search_paths = search_paths or SearchPathSet()
        self.use_current_dir = use_current_dir

    def candidates(self, kind: IncludeKind, current_dir: Optional[Path]) -> List[Path]:
        """Ordered directories searched for an include of the given kind."""
        dirs: List[Path] = []
        if kind is IncludeKind.QUOTE and self.use_current_dir and current_dir is not None:
            dirs.append(current_dir)
        dirs.extend(self.search_paths.dirs_for(kind))
        return dirs

    def resolve(self, reference: IncludeReference, current_dir: Optional[Path] = None) -> Resolution:
        """
        Find the file an include refers to.

        Args:
            reference: The parsed include directive.
            current_dir: Directory of the including file (defaults to its parent).

        Returns:
            Resolution: Canonical path plus the directory that matched.

        Raises:
            UnresolvableInclude: If no search directory contains the target.
            PathError: If a matching candidate cannot be canonicalized.
        """
        if current_dir is None:
            current_dir = reference.source.parent

        for include_dir in self.candidates(reference.kind, current_dir):
            candidate = include_dir / reference.target
            logger.debug(f"Trying to resolve {reference.spelling} to {candidate}")
            if is_regular_candidate(candidate):
                resolved = canonicalize(candidate)
                logger.debug(f"Resolved {reference.spelling} to {resolved}")
                return Resolution(
                    path=resolved,
                    search_dir=include_dir,
                    relative=Path(os.path.normpath(reference.target)).as_posix(),
                )

        logger.debug(f"Failed to resolve {reference.spelling}")
        raise UnresolvableInclude(
            f"could not resolve {reference.spelling}",
            file=reference.source,
            line=reference.line,
        )
