from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and merging
of configuration sources (defaults, JSON config file, and CLI overrides),
amalgamation, and output delivery to a file or standard output.
"""

import sys
from typing import Any, Dict, List, Optional

from cpp_amalgamate.core.pipeline import run_amalgamation
from cpp_amalgamate.core.validator import validate_config
from cpp_amalgamate.domain.config import load_config, save_config
from cpp_amalgamate.domain.errors import ConfigError
from cpp_amalgamate.infra.fs import SOURCE_ERRORS
from cpp_amalgamate.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
    shutdown_logging,
)
from cpp_amalgamate.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, 1 for a failed run, 2 for usage errors).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)
    cli_args.check_conflicts(parser, args)

    # 2. Resolve base configuration (Defaults vs JSON config file)
    config_warnings: List[str] = []
    try:
        base_conf = load_config(args.config, warnings=config_warnings)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    # 3. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 4. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    # 5. Logging bootstrap (CLI-specific: Console stderr)
    logging_conf = LoggingConfig(level=clean_conf["log_level"], console=True, log_file=clean_conf["log_file"])
    configure_logging(logging_conf, force=True)

    try:
        for w in config_warnings:
            logger.warning(w)
        for w in warnings:
            logger.warning(f"Configuration Constraint: {w}")

        # Short-circuit if configuration dump is requested
        if args.dump_config:
            try:
                save_config(clean_conf, args.dump_config)
            except OSError as e:
                logger.error(f"Failed to write configuration: {e}")
                return 1
            return 0

        if not clean_conf["files"]:
            parser.print_usage(sys.stderr)
            print(f"{parser.prog}: error: the following arguments are required: FILE", file=sys.stderr)
            return 2

        logger.info(f"Writing to {clean_conf['output'] or 'terminal'}")
        return _run(clean_conf)
    finally:
        shutdown_logging()


def _run(conf: Dict[str, Any]) -> int:
    """Run the amalgamation and deliver its output."""
    try:
        result = run_amalgamation(conf)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return 130

    if not result.ok:
        return 1

    if not result.output_path:
        _write_stdout(result.text)

    logger.info(
        f"Inlined {result.summary.get('files_inlined', 0)} files "
        f"({result.summary.get('warnings', 0)} warnings)."
    )
    return 0


def _write_stdout(text: str) -> None:
    """Write the amalgamation as UTF-8, restoring bytes that were not valid UTF-8."""
    data = text.encode("utf-8", SOURCE_ERRORS)
    buffer = getattr(sys.stdout, "buffer", None)
    sys.stdout.flush()
    if buffer is None:
        sys.stdout.write(data.decode("utf-8", "replace"))
    else:
        buffer.write(data)
        buffer.flush()

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged and None means "not given on the command line".

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in out and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
