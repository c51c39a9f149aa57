from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for building throwaway C++ source trees and configs.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[..., Path]:
    """
    Return a helper that materializes {relative_path: content} under a directory.

    The directory defaults to tmp_path; intermediate folders are created.
    """

    def _write(files: Dict[str, str], root: Path = tmp_path) -> Path:
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def base_config() -> Dict[str, Any]:
    """
    Return a complete configuration dictionary for pipeline tests.

    Reflects the structure defined in 'cpp_amalgamate.domain.config'.
    """
    return {
        "files": [],
        "output": None,
        "search_paths": [],
        "use_current_dir": True,
        "filters": [],
        "line_directives": False,
        "trim_blank_lines": False,
        "file_begin": None,
        "file_end": None,
        "unresolvable_quote_include": "ignore",
        "unresolvable_system_include": "ignore",
        "cyclic_include": "error",
        "log_level": "WARNING",
        "log_file": None,
    }
