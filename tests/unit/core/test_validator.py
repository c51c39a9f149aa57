from __future__ import annotations

"""
Unit tests for the Configuration Validator.

Verifies type coercion, policy checking and normalization of ordered
search path / filter entries in lenient and strict modes.
"""

import pytest

from cpp_amalgamate.core.validator import validate_config
from cpp_amalgamate.domain.config import get_default_config
from cpp_amalgamate.domain.errors import ConfigError


def test_non_dict_falls_back_to_defaults():
    cfg, warnings = validate_config(["not", "a", "dict"])
    assert cfg == get_default_config()
    assert len(warnings) == 1

    with pytest.raises(ConfigError):
        validate_config("nope", strict=True)


def test_missing_keys_are_filled():
    cfg, warnings = validate_config({"files": "main.cpp"})
    assert cfg["files"] == ["main.cpp"]
    assert cfg["cyclic_include"] == "error"
    assert cfg["use_current_dir"] is True
    assert warnings == []


def test_bool_coercion():
    cfg, warnings = validate_config({"line_directives": "yes", "trim_blank_lines": 0})
    assert cfg["line_directives"] is True
    assert cfg["trim_blank_lines"] is False
    assert len(warnings) == 2

    with pytest.raises(ConfigError):
        validate_config({"line_directives": "yes"}, strict=True)


def test_blank_strings_become_none():
    cfg, _ = validate_config({"output": "  ", "file_begin": ""})
    assert cfg["output"] is None
    assert cfg["file_begin"] is None


def test_invalid_policy_falls_back():
    cfg, warnings = validate_config({"cyclic_include": "explode", "unresolvable_quote_include": "WARN"})
    assert cfg["cyclic_include"] == "error"
    assert cfg["unresolvable_quote_include"] == "warn"
    assert any("cyclic_include" in w for w in warnings)

    with pytest.raises(ConfigError):
        validate_config({"cyclic_include": "explode"}, strict=True)


def test_entries_are_normalized():
    cfg, warnings = validate_config({
        "search_paths": ["include", {"path": "sys", "applies_to": "SYSTEM"}],
        "filters": "**/*.h",
    })
    assert cfg["search_paths"] == [
        {"path": "include", "applies_to": "both"},
        {"path": "sys", "applies_to": "system"},
    ]
    assert cfg["filters"] == [{"glob": "**/*.h", "applies_to": "both"}]
    assert warnings == []


def test_bad_entries_are_discarded():
    cfg, warnings = validate_config({
        "search_paths": [{"path": "a", "applies_to": "neither"}, 42, {"dir": "x"}],
        "filters": 7,
    })
    assert cfg["search_paths"] == []
    assert cfg["filters"] == []
    assert len(warnings) == 4

    with pytest.raises(ConfigError):
        validate_config({"filters": [{"glob": ""}]}, strict=True)


def test_bad_file_items_are_discarded():
    cfg, warnings = validate_config({"files": ["a.cpp", "", None]})
    assert cfg["files"] == ["a.cpp"]
    assert len(warnings) == 2
