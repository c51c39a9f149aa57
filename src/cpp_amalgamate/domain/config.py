from __future__ import annotations

"""
Configuration Domain Management.

Provides the default run configuration and JSON persistence for reusable
project settings (search paths, filters, policies). The dictionary produced
here drives the behavior of the amalgamation pipeline.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from cpp_amalgamate.domain.errors import ConfigError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
DEFAULT_UNRESOLVABLE_HANDLING = "ignore"
DEFAULT_CYCLIC_HANDLING = "error"

PLACEHOLDER_ABSOLUTE = "{absolute}"
PLACEHOLDER_RELATIVE = "{relative}"

STDOUT_PATH = "-"


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Search paths and filters are ordered lists. Each item is either a plain
    string (applies to quote and system includes) or a mapping with an
    explicit 'applies_to' key.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO
        "files": [],
        "output": None,

        # Resolution
        "search_paths": [],
        "use_current_dir": True,

        # Inlining Filters
        "filters": [],

        # Output Format
        "line_directives": False,
        "trim_blank_lines": False,
        "file_begin": None,
        "file_end": None,

        # Error Handling
        "unresolvable_quote_include": DEFAULT_UNRESOLVABLE_HANDLING,
        "unresolvable_system_include": DEFAULT_UNRESOLVABLE_HANDLING,
        "cyclic_include": DEFAULT_CYCLIC_HANDLING,

        # Diagnostics
        "log_level": "WARNING",
        "log_file": None,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None, warnings: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Load a JSON configuration file merged over the defaults.

    Keys that are not part of the schema are discarded with a warning.

    Args:
        path: Config file location. When None, the defaults are returned.
        warnings: Optional sink for warnings, for callers that emit them once
                  logging is configured. When None they are logged directly.

    Returns:
        Dict[str, Any]: The merged configuration.

    Raises:
        ConfigError: If the file cannot be read or is not a JSON object.
    """
    config = get_default_config()
    if not path:
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}", file=path) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e.msg}", file=path, line=e.lineno) from e

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object.", file=path)

    for key, value in data.items():
        if key not in config:
            msg = f"Unknown config key '{key}' in {path}. Ignored."
            if warnings is None:
                logger.warning(msg)
            else:
                warnings.append(msg)
            continue
        config[key] = value

    logger.debug(f"Configuration loaded from {path}")
    return config


def save_config(config: Dict[str, Any], path: str) -> None:
    """
    Persist a configuration dictionary as JSON.

    The output can be fed back through '--config' unchanged.

    Args:
        config: The configuration to save.
        path: Target file path, or '-' for standard output.
    """
    text = json.dumps(config, ensure_ascii=False, indent=4) + "\n"
    if path == STDOUT_PATH:
        sys.stdout.write(text)
        sys.stdout.flush()
        return

    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    logger.debug(f"Configuration saved to {path}")
