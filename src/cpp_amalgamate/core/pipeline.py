from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates one amalgamation run:
1. Validates the configuration.
2. Builds the resolver, filter and emitter from it.
3. Expands every root file through a single engine (shared visitation state).
4. Renders the combined output.
5. Persists it to the output file, only once the whole run has succeeded.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from cpp_amalgamate.core.emitter import OutputEmitter
from cpp_amalgamate.core.engine import ExpansionEngine
from cpp_amalgamate.core.filters import InliningFilter, parse_rule
from cpp_amalgamate.core.resolver import IncludeResolver, SearchPathSet
from cpp_amalgamate.core.validator import validate_config
from cpp_amalgamate.domain.errors import AmalgamationError, ConfigError, PathError
from cpp_amalgamate.domain.include_models import Diagnostic, ExpansionResult
from cpp_amalgamate.domain.pipeline_models import (
    AmalgamationResult,
    create_error_result,
    create_success_result,
)
from cpp_amalgamate.domain.policy import ErrorHandling
from cpp_amalgamate.infra.fs import SOURCE_ERRORS

logger = logging.getLogger(__name__)


def build_engine(cfg: Dict[str, Any]) -> ExpansionEngine:
    """
    Assemble an expansion engine from a validated configuration.

    Raises:
        PathError: If a search directory does not exist.
        ConfigError: If a filter glob is malformed.
    """
    search_paths = SearchPathSet(
        (entry["path"], entry["applies_to"]) for entry in cfg["search_paths"]
    )
    resolver = IncludeResolver(search_paths, use_current_dir=cfg["use_current_dir"])

    rules = [
        parse_rule(entry["glob"], entry["applies_to"], position)
        for position, entry in enumerate(cfg["filters"])
    ]

    emitter = OutputEmitter(
        line_directives=cfg["line_directives"],
        trim_blank_lines=cfg["trim_blank_lines"],
        file_begin=cfg["file_begin"],
        file_end=cfg["file_end"],
    )

    return ExpansionEngine(
        resolver,
        InliningFilter(rules),
        emitter,
        unresolvable_quote=ErrorHandling.parse(cfg["unresolvable_quote_include"]),
        unresolvable_system=ErrorHandling.parse(cfg["unresolvable_system_include"]),
        cyclic=ErrorHandling.parse(cfg["cyclic_include"]),
    )


def run_amalgamation(
        config: Optional[Dict[str, Any]],
        *,
        write_output: bool = True,
) -> AmalgamationResult:
    """
    Execute a full amalgamation run.

    Args:
        config: The configuration dictionary (raw or partial).
        write_output: If True and 'output' is set, write the result to that file.

    Returns:
        AmalgamationResult: Status, combined text, diagnostics and statistics.
    """
    logger.info("Amalgamation started.")

    # -------------------------------------------------------------------------
    # 1) Config Normalization
    # -------------------------------------------------------------------------
    try:
        cfg, warnings = validate_config(config, strict=False)
    except ConfigError as e:
        return create_error_result(str(e), {}, [Diagnostic.from_error(e, "error")])

    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    if not cfg["files"]:
        msg = "No source files given."
        logger.error(msg)
        return create_error_result(msg, cfg, [Diagnostic("error", msg)])

    # -------------------------------------------------------------------------
    # 2) Expansion
    # -------------------------------------------------------------------------
    engine: Optional[ExpansionEngine] = None
    results: List[ExpansionResult] = []
    try:
        engine = build_engine(cfg)
        for source_file in cfg["files"]:
            results.append(engine.expand_root(source_file))
        text = engine.emitter.render(results)
    except AmalgamationError as e:
        collected = list(engine.diagnostics) if engine else []
        collected.append(Diagnostic.from_error(e, "error"))
        logger.error(str(e))
        return create_error_result(str(e), cfg, collected)

    # -------------------------------------------------------------------------
    # 3) Persistence
    # -------------------------------------------------------------------------
    output = cfg["output"]
    if output and write_output:
        try:
            _write_output(output, text)
        except PathError as e:
            logger.error(str(e))
            return create_error_result(str(e), cfg, engine.diagnostics + [Diagnostic.from_error(e, "error")])
        logger.info(f"Wrote {output}")

    files = [str(p) for r in results for p in r.files]
    summary = {
        "roots": len(cfg["files"]),
        "files_inlined": len(files),
        "lines": text.count("\n") + (1 if text and not text.endswith("\n") else 0),
        "warnings": sum(1 for d in engine.diagnostics if d.severity == "warning"),
    }

    logger.info("Amalgamation completed successfully.")
    return create_success_result(cfg, text, files, engine.diagnostics, summary)


def _write_output(path: str, text: str) -> None:
    """
    Write the combined output, creating parent directories as needed.

    Raises:
        PathError: If the file cannot be written.
    """
    try:
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8", errors=SOURCE_ERRORS, newline="") as f:
            f.write(text)
    except OSError as e:
        raise PathError(f"Failed to open output file: {e}", file=path) from e
