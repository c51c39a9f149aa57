from __future__ import annotations

"""
Unit tests for configuration defaults and JSON persistence.
"""

import json

import pytest

from cpp_amalgamate.domain.config import get_default_config, load_config, save_config
from cpp_amalgamate.domain.errors import ConfigError


def test_defaults_match_cli_defaults():
    cfg = get_default_config()
    assert cfg["unresolvable_quote_include"] == "ignore"
    assert cfg["unresolvable_system_include"] == "ignore"
    assert cfg["cyclic_include"] == "error"
    assert cfg["use_current_dir"] is True
    assert cfg["line_directives"] is False
    assert cfg["files"] == [] and cfg["search_paths"] == [] and cfg["filters"] == []


def test_defaults_are_fresh_copies():
    a = get_default_config()
    a["files"].append("x.cpp")
    assert get_default_config()["files"] == []


def test_load_without_path_returns_defaults():
    assert load_config(None) == get_default_config()


def test_load_merges_and_drops_unknown_keys(tmp_path, caplog):
    path = tmp_path / "amalgamate.json"
    path.write_text(json.dumps({"search_paths": ["include"], "bogus": 1}), encoding="utf-8")

    with caplog.at_level("WARNING"):
        cfg = load_config(str(path))

    assert cfg["search_paths"] == ["include"]
    assert "bogus" not in cfg
    assert cfg["cyclic_include"] == "error"
    assert "bogus" in caplog.text


def test_load_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{\n  \"files\": [,\n}", encoding="utf-8")
    with pytest.raises(ConfigError) as info:
        load_config(str(broken))
    assert info.value.line == 2

    listing = tmp_path / "list.json"
    listing.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(listing))


def test_save_then_load(tmp_path):
    cfg = get_default_config()
    cfg["filters"] = [{"glob": "**/vendor/**", "applies_to": "system"}]
    target = tmp_path / "nested" / "amalgamate.json"

    save_config(cfg, str(target))
    assert load_config(str(target)) == cfg


def test_unknown_key_warnings_can_be_collected(tmp_path, caplog):
    path = tmp_path / "amalgamate.json"
    path.write_text(json.dumps({"bogus": 1}), encoding="utf-8")
    collected = []

    with caplog.at_level("WARNING"):
        load_config(str(path), warnings=collected)

    assert len(collected) == 1 and "bogus" in collected[0]
    assert "bogus" not in caplog.text


def test_save_to_stdout(capsys):
    cfg = get_default_config()
    save_config(cfg, "-")
    assert json.loads(capsys.readouterr().out) == cfg
