from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict, Optional

from cpp_amalgamate.domain.include_models import AppliesTo
from cpp_amalgamate.domain.policy import ErrorHandling
from cpp_amalgamate.infra.logging import level_from_verbosity

DESCRIPTION = (
    "cpp-amalgamate combines one or more C++ source files and recursively inlines "
    "included headers. It tracks which headers have been included and skips any "
    "further includes of them. Which includes are inlined and which are left intact "
    "can be controlled with various options."
)

# -----------------------------------------------------------------------------
# ORDERED APPEND ACTION
# -----------------------------------------------------------------------------

class _OrderedEntryAction(argparse.Action):
    """
    Append '{key: value, "applies_to": kind}' to a list shared by several options.

    Keeps the relative command-line order of e.g. '-d' and '--dir-quote',
    which defines search and filter precedence.
    """

    def __init__(self, option_strings, dest, entry_key: str = "path",
                 applies_to: AppliesTo = AppliesTo.BOTH, **kwargs):
        self.entry_key = entry_key
        self.applies_to = applies_to
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        entries = list(getattr(namespace, self.dest, None) or [])
        entries.append({self.entry_key: values, "applies_to": self.applies_to.value})
        setattr(namespace, self.dest, entries)

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the cpp-amalgamate CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="cpp-amalgamate",
        description=DESCRIPTION,
    )

    # --- Inputs and Output ---
    p.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Source files to process.",
    )
    p.add_argument(
        "-o", "--output",
        dest="output",
        metavar="FILE",
        default=None,
        help="Redirect output to a file.",
    )

    # --- Search Directories ---
    for flags, applies_to, help_text in (
            (("-d", "--dir"), AppliesTo.BOTH, "Add a search directory for both system and quote includes."),
            (("--dir-quote",), AppliesTo.QUOTE, "Add a search directory for quote includes."),
            (("--dir-system",), AppliesTo.SYSTEM, "Add a search directory for system includes."),
    ):
        p.add_argument(
            *flags,
            dest="search_paths",
            metavar="DIR",
            action=_OrderedEntryAction,
            entry_key="path",
            applies_to=applies_to,
            default=None,
            help=help_text,
        )
    p.add_argument(
        "--no-current-dir",
        action="store_true",
        help="Do not search the including file's directory for quote includes.",
    )

    # --- Inlining Filters ---
    for flags, applies_to, help_text in (
            (("-f", "--filter"), AppliesTo.BOTH,
             "Exclude headers matching GLOB from inlining. Prefix with '!' to re-include "
             "previously excluded headers. Globs are evaluated in order; the last match wins."),
            (("--filter-quote",), AppliesTo.QUOTE, "Like --filter, but only for quote includes."),
            (("--filter-system",), AppliesTo.SYSTEM, "Like --filter, but only for system includes."),
    ):
        p.add_argument(
            *flags,
            dest="filters",
            metavar="GLOB",
            action=_OrderedEntryAction,
            entry_key="glob",
            applies_to=applies_to,
            default=None,
            help=help_text,
        )

    # --- Error Handling ---
    policies = ErrorHandling.names()
    p.add_argument(
        "--unresolvable-include",
        choices=policies,
        metavar="HANDLING",
        default=None,
        help="How to handle an unresolvable include: error, warn or ignore (default).",
    )
    p.add_argument(
        "--unresolvable-quote-include",
        choices=policies,
        metavar="HANDLING",
        default=None,
        help="Like --unresolvable-include, but only for quote includes.",
    )
    p.add_argument(
        "--unresolvable-system-include",
        choices=policies,
        metavar="HANDLING",
        default=None,
        help="Like --unresolvable-include, but only for system includes.",
    )
    p.add_argument(
        "--cyclic-include",
        choices=policies,
        metavar="HANDLING",
        default=None,
        help="How to handle a cyclic include: error (default), warn or ignore.",
    )

    # --- Output Format ---
    p.add_argument(
        "--line-directives",
        action="store_true",
        help="Add #line directives so compilers and debuggers resolve lines to their original files.",
    )
    p.add_argument(
        "--trim-blank-lines",
        action="store_true",
        help="Strip leading and trailing blank lines from every inlined file.",
    )
    p.add_argument(
        "--file-begin",
        metavar="TEMPLATE",
        default=None,
        help="Line emitted before each file's content; {absolute} and {relative} are substituted.",
    )
    p.add_argument(
        "--file-end",
        metavar="TEMPLATE",
        default=None,
        help="Line emitted after each file's content; {absolute} and {relative} are substituted.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--config",
        metavar="FILE",
        default=None,
        help="Load base settings from a JSON config file.",
    )
    p.add_argument(
        "--dump-config",
        nargs="?",
        const="-",
        default=None,
        metavar="FILE",
        help="Write the effective configuration as JSON to FILE (default: stdout) and exit.",
    )

    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="count",
        default=0,
        help="Report only errors (-q) or nothing (-qq).",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        metavar="FILE",
        default=None,
        help="Also write diagnostics to a rotating log file.",
    )

    return p


def check_conflicts(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Reject option combinations argparse cannot express (exits with code 2)."""
    if args.unresolvable_include and (args.unresolvable_quote_include or args.unresolvable_system_include):
        parser.error(
            "argument --unresolvable-include: not allowed with "
            "--unresolvable-quote-include or --unresolvable-system-include"
        )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Values left at None are not merged over the base configuration.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["files"] = list(args.files) or None
    overrides["output"] = args.output
    overrides["search_paths"] = args.search_paths
    overrides["filters"] = args.filters

    if args.no_current_dir:
        overrides["use_current_dir"] = False

    # Error Handling overrides
    quote = args.unresolvable_include or args.unresolvable_quote_include
    system = args.unresolvable_include or args.unresolvable_system_include
    overrides["unresolvable_quote_include"] = quote
    overrides["unresolvable_system_include"] = system
    overrides["cyclic_include"] = args.cyclic_include

    # Output Format overrides
    if args.line_directives:
        overrides["line_directives"] = True
    if args.trim_blank_lines:
        overrides["trim_blank_lines"] = True
    overrides["file_begin"] = _unescape(args.file_begin)
    overrides["file_end"] = _unescape(args.file_end)

    # Diagnostics overrides
    if args.debug:
        overrides["log_level"] = "DEBUG"
    elif args.verbose or args.quiet:
        overrides["log_level"] = level_from_verbosity(args.verbose, args.quiet)
    overrides["log_file"] = args.log_file

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _unescape(value: Optional[str]) -> Optional[str]:
    """Allow '\\n' in banner templates given on the command line."""
    if value is None:
        return None
    return value.replace("\\n", "\n")

