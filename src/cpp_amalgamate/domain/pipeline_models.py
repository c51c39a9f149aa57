from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result object and factory functions used to communicate the
outcome of an amalgamation run between the core and the interface layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cpp_amalgamate.domain.include_models import Diagnostic

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AmalgamationResult:
    """
    Unified result object of a complete amalgamation run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        text: The combined output (empty on failure).
        output_path: Destination file, or None for standard output.
        roots: Root source files as given in the configuration.
        files: Canonical paths of every file inlined, in order.
        diagnostics: Warnings (and the fatal error, if any) reported.
        summary: Execution statistics.
    """
    ok: bool
    error: str

    text: str = ""
    output_path: Optional[str] = None
    roots: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        diagnostics: Optional[List[Diagnostic]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> AmalgamationResult:
    """
    Create a failed result instance. No text is ever carried on failure.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        diagnostics: Diagnostics collected before the abort.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        AmalgamationResult: An immutable error result object.
    """
    return AmalgamationResult(
        ok=False,
        error=error,
        output_path=cfg.get("output"),
        roots=list(cfg.get("files", [])),
        diagnostics=list(diagnostics or []),
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        text: str,
        files: List[str],
        diagnostics: Optional[List[Diagnostic]] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> AmalgamationResult:
    """
    Create a successful result instance.

    Args:
        cfg: Final configuration used during execution.
        text: The rendered output.
        files: Canonical paths of the inlined files.
        diagnostics: Warnings collected during the run.
        summary_extra: Final execution metrics.

    Returns:
        AmalgamationResult: An immutable success result object.
    """
    return AmalgamationResult(
        ok=True,
        error="",
        text=text,
        output_path=cfg.get("output"),
        roots=list(cfg.get("files", [])),
        files=list(files),
        diagnostics=list(diagnostics or []),
        summary=summary_extra or {},
    )
