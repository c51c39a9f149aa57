from __future__ import annotations

"""
Visitation Tracker.

Implements at-most-once inclusion: 'finished' holds every file already
inlined, 'active' is the stack of files currently being expanded. Entering a
finished file is an ordinary duplicate; entering an active one is a cycle.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Set

from cpp_amalgamate.domain.include_models import VisitStatus

logger = logging.getLogger(__name__)


class VisitationTracker:
    """Per-run inclusion state, shared by every root of the run."""

    def __init__(self) -> None:
        self.finished: Set[Path] = set()
        self._active: List[Path] = []

    @property
    def active(self) -> List[Path]:
        """The expansion stack, outermost file first."""
        return list(self._active)

    def status(self, path: Path) -> VisitStatus:
        if path in self._active:
            return VisitStatus.CYCLIC
        if path in self.finished:
            return VisitStatus.DUPLICATE
        return VisitStatus.FRESH

    def enter(self, path: Path) -> VisitStatus:
        """
        Classify 'path' and push it on the stack when it is fresh.

        Returns:
            VisitStatus: FRESH (now active), DUPLICATE or CYCLIC.
        """
        status = self.status(path)
        if status is VisitStatus.FRESH:
            self._active.append(path)
            logger.info(f"Processing new file {path.name!r}")
        elif status is VisitStatus.DUPLICATE:
            logger.debug(f"Skipping {path.name!r}, already included")
        return status

    def leave(self, path: Path) -> None:
        """Move a successfully expanded file from 'active' to 'finished'."""
        self._pop(path)
        self.finished.add(path)

    def abandon(self, path: Path) -> None:
        """Drop a file whose expansion failed; it is not marked finished."""
        self._pop(path)

    def cycle_chain(self, path: Path) -> List[Path]:
        """
        Describe the cycle closed by re-entering 'path'.

        Returns:
            List[Path]: Stack slice from 'path' to the innermost file, then 'path'.
        """
        start = self._active.index(path)
        return self._active[start:] + [path]

    @contextmanager
    def expanding(self, path: Path) -> Iterator[None]:
        """Pair a successful 'enter' with 'leave', or 'abandon' on error."""
        try:
            yield
        except BaseException:
            self.abandon(path)
            raise
        self.leave(path)

    def _pop(self, path: Path) -> None:
        if not self._active or self._active[-1] != path:
            raise RuntimeError(f"Unbalanced visitation stack: expected {path} on top")
        self._active.pop()
