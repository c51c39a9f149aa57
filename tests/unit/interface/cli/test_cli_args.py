from __future__ import annotations

"""
Unit tests for CLI argument definition and mapping.

Verifies ordered search path / filter collection, policy flag conflicts and
translation of the argparse namespace into configuration overrides.
"""

import pytest

from cpp_amalgamate.interface.cli.args import args_to_overrides, build_parser, check_conflicts


def _parse(*argv: str):
    parser = build_parser()
    args = parser.parse_args(list(argv))
    check_conflicts(parser, args)
    return args


def test_defaults_produce_no_overrides():
    overrides = args_to_overrides(_parse())
    assert overrides["files"] is None
    assert overrides["search_paths"] is None
    assert overrides["filters"] is None
    assert overrides["cyclic_include"] is None
    assert "line_directives" not in overrides
    assert "log_level" not in overrides


def test_search_dirs_keep_command_line_order():
    args = _parse("-d", "a", "--dir-system", "b", "--dir-quote", "c", "--dir", "d", "main.cpp")
    assert args.files == ["main.cpp"]
    assert args_to_overrides(args)["search_paths"] == [
        {"path": "a", "applies_to": "both"},
        {"path": "b", "applies_to": "system"},
        {"path": "c", "applies_to": "quote"},
        {"path": "d", "applies_to": "both"},
    ]


def test_filters_keep_command_line_order():
    args = _parse("-f", "**", "--filter-quote", "!**/b.hpp", "--filter-system", "!**/a.hpp", "x.cpp")
    assert args_to_overrides(args)["filters"] == [
        {"glob": "**", "applies_to": "both"},
        {"glob": "!**/b.hpp", "applies_to": "quote"},
        {"glob": "!**/a.hpp", "applies_to": "system"},
    ]


def test_unresolvable_include_sets_both_policies():
    overrides = args_to_overrides(_parse("--unresolvable-include", "warn", "x.cpp"))
    assert overrides["unresolvable_quote_include"] == "warn"
    assert overrides["unresolvable_system_include"] == "warn"


def test_specific_unresolvable_flags():
    overrides = args_to_overrides(_parse("--unresolvable-system-include", "error", "x.cpp"))
    assert overrides["unresolvable_quote_include"] is None
    assert overrides["unresolvable_system_include"] == "error"


@pytest.mark.parametrize("specific", ["--unresolvable-quote-include", "--unresolvable-system-include"])
def test_unresolvable_include_conflicts_with_specific(specific):
    with pytest.raises(SystemExit) as info:
        _parse("--unresolvable-include", "warn", specific, "error", "x.cpp")
    assert info.value.code == 2


def test_invalid_policy_is_rejected():
    with pytest.raises(SystemExit):
        _parse("--cyclic-include", "loud", "x.cpp")


def test_verbose_and_quiet_conflict():
    with pytest.raises(SystemExit):
        _parse("-v", "-q", "x.cpp")


@pytest.mark.parametrize("argv, level", [
    (["-v"], "INFO"),
    (["-vv"], "DEBUG"),
    (["-vvvv"], "DEBUG"),
    (["-q"], "ERROR"),
    (["-qq"], "OFF"),
    (["--debug", "-q"], "DEBUG"),
])
def test_verbosity_maps_to_log_level(argv, level):
    assert args_to_overrides(_parse(*argv, "x.cpp"))["log_level"] == level


def test_output_format_flags():
    overrides = args_to_overrides(_parse(
        "--line-directives", "--trim-blank-lines", "--no-current-dir",
        "--file-begin", "// begin {relative}\\n", "--file-end", "// end",
        "-o", "out.cpp", "x.cpp",
    ))
    assert overrides["line_directives"] is True
    assert overrides["trim_blank_lines"] is True
    assert overrides["use_current_dir"] is False
    assert overrides["file_begin"] == "// begin {relative}\n"
    assert overrides["file_end"] == "// end"
    assert overrides["output"] == "out.cpp"
