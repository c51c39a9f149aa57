from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the pipeline, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion, policy
name checking and normalization of ordered search path / filter entries.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from cpp_amalgamate.domain.config import get_default_config
from cpp_amalgamate.domain.errors import ConfigError
from cpp_amalgamate.domain.include_models import AppliesTo
from cpp_amalgamate.domain.policy import ErrorHandling

logger = logging.getLogger(__name__)

POLICY_FIELDS = ("unresolvable_quote_include", "unresolvable_system_include", "cyclic_include")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI, JSON config files) into strictly typed
    parameters and fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises ConfigError on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise ConfigError(msg)
        warnings.append(f"{msg} Using defaults.")
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition (Declarative mapping)
    optional_string_fields = ["output", "file_begin", "file_end", "log_file"]

    bool_fields = ["use_current_dir", "line_directives", "trim_blank_lines"]

    # 3. Field Processing & Normalization
    for field in optional_string_fields:
        merged[field] = _as_optional_str(merged.get(field), field, warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["files"] = _as_list_str(merged.get("files"), "files", warnings, strict)
    merged["log_level"] = _as_optional_str(merged.get("log_level"), "log_level", warnings, strict) \
        or defaults["log_level"]

    for field in POLICY_FIELDS:
        merged[field] = _as_policy(merged.get(field), defaults[field], field, warnings, strict)

    # 4. Ordered Entries (search paths, filters)
    merged["search_paths"] = _as_entries(merged.get("search_paths"), "search_paths", "path", warnings, strict)
    merged["filters"] = _as_entries(merged.get("filters"), "filters", "glob", warnings, strict)

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _fail(msg: str, warnings: List[str], strict: bool, suffix: str) -> None:
    if strict:
        raise ConfigError(msg)
    warnings.append(f"{msg} {suffix}")


def _as_optional_str(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[str]:
    """Validate optional string inputs; blank strings become None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None

    _fail(f"Invalid field '{field}': expected str, received {type(value).__name__}.",
          warnings, strict, "Using fallback.")
    return None


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    _fail(f"Invalid field '{field}': expected bool, received {type(value).__name__}.",
          warnings, strict, "Using fallback.")
    return fallback


def _as_list_str(value: Any, field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str) and item.strip():
                out.append(item)
            else:
                _fail(f"Invalid item in '{field}[{i}]': expected non-empty str.",
                      warnings, strict, "Item discarded.")
        return out

    _fail(f"Invalid field '{field}': expected list[str], received {type(value).__name__}.",
          warnings, strict, "Using fallback.")
    return []


def _as_policy(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate an error handling policy name."""
    if value is None:
        return fallback
    try:
        return ErrorHandling.parse(value).value
    except ValueError:
        _fail(f"Invalid field '{field}': expected one of {ErrorHandling.names()}, received '{value}'.",
              warnings, strict, f"Using '{fallback}'.")
        return fallback


def _as_entries(
        value: Any,
        field: str,
        key: str,
        warnings: List[str],
        strict: bool,
) -> List[Dict[str, str]]:
    """
    Normalize ordered search path or filter entries.

    Accepts plain strings (applying to both include kinds) or mappings of
    the form {key: ..., "applies_to": "both"|"quote"|"system"}.
    """
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        _fail(f"Invalid field '{field}': expected list, received {type(value).__name__}.",
              warnings, strict, "Using fallback.")
        return []

    out: List[Dict[str, str]] = []
    for i, item in enumerate(value):
        if isinstance(item, str):
            item = {key: item}
        if not isinstance(item, dict) or not isinstance(item.get(key), str) or not item[key].strip():
            _fail(f"Invalid item in '{field}[{i}]': expected str or mapping with '{key}'.",
                  warnings, strict, "Item discarded.")
            continue

        applies_to = str(item.get("applies_to", AppliesTo.BOTH.value)).strip().lower()
        try:
            applies_to = AppliesTo(applies_to).value
        except ValueError:
            _fail(f"Invalid 'applies_to' in '{field}[{i}]': '{applies_to}'.",
                  warnings, strict, "Item discarded.")
            continue

        out.append({key: item[key], "applies_to": applies_to})
    return out
