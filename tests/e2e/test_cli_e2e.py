from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess: argument parsing, exit codes, stream output and the
output file side effect.
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "cpp_amalgamate" / "main.py"


def run_cli(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """
    Execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH so that the package is
    resolvable without being installed.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """
    Create a small C++ project.

    Structure:
    /project
      main.cpp        includes "util.h" and <lib/core.hpp>
      util.h
      /include/lib
        core.hpp      includes "../../util.h" (already inlined)
    """
    root = tmp_path / "project"
    (root / "include" / "lib").mkdir(parents=True)
    (root / "main.cpp").write_text(
        '#include "util.h"\n#include <lib/core.hpp>\nint main() { return util() + core(); }\n',
        encoding="utf-8",
    )
    (root / "util.h").write_text("#pragma once\ninline int util() { return 1; }\n", encoding="utf-8")
    (root / "include" / "lib" / "core.hpp").write_text(
        '#pragma once\n#include "../../util.h"\ninline int core() { return 2; }\n',
        encoding="utf-8",
    )
    return root


def test_help():
    result = run_cli(["--help"])
    assert result.returncode == 0
    assert "cpp-amalgamate" in result.stdout
    assert "--line-directives" in result.stdout


def test_missing_files_is_usage_error():
    result = run_cli([])
    assert result.returncode == 2
    assert "usage:" in result.stderr


def test_amalgamate_project(sample_project: Path):
    result = run_cli(["-d", "include", "main.cpp"], cwd=sample_project)

    assert result.returncode == 0, result.stderr
    assert result.stdout == (
        "inline int util() { return 1; }\n"
        "inline int core() { return 2; }\n"
        "int main() { return util() + core(); }\n"
    )


def test_output_file(sample_project: Path, tmp_path: Path):
    out = tmp_path / "dist" / "amalgamated.cpp"
    result = run_cli(["-d", "include", "-o", str(out), "main.cpp"], cwd=sample_project)

    assert result.returncode == 0, result.stderr
    assert result.stdout == ""
    assert "int main()" in out.read_text(encoding="utf-8")


def test_cyclic_include_fails(tmp_path: Path):
    (tmp_path / "a.h").write_text('#include "b.h"\n', encoding="utf-8")
    (tmp_path / "b.h").write_text('#include "a.h"\n', encoding="utf-8")

    result = run_cli(["a.h"], cwd=tmp_path)
    assert result.returncode == 1
    assert result.stdout == ""
    assert "cyclic include" in result.stderr


def test_filter_keeps_system_include(sample_project: Path):
    result = run_cli(["-d", "include", "--filter-system", "**/lib/**", "main.cpp"], cwd=sample_project)
    assert result.returncode == 0, result.stderr
    assert "#include <lib/core.hpp>\n" in result.stdout


def test_header_without_final_newline(tmp_path: Path):
    (tmp_path / "a.h").write_text("int x = 1; // trailing comment", encoding="utf-8")
    (tmp_path / "main.cpp").write_text('#include "a.h"\nint main() { return x; }\n', encoding="utf-8")

    result = run_cli(["main.cpp"], cwd=tmp_path)
    assert result.returncode == 0, result.stderr
    assert result.stdout == "int x = 1; // trailing comment\nint main() { return x; }\n"


def test_non_utf8_bytes_preserved_in_output_file(tmp_path: Path):
    (tmp_path / "main.cpp").write_bytes(b'#include "a.h"\n')
    (tmp_path / "a.h").write_bytes(b'const char* s = "caf\xe9";\n')
    out = tmp_path / "out.cpp"

    result = run_cli(["-o", str(out), "main.cpp"], cwd=tmp_path)
    assert result.returncode == 0, result.stderr
    assert out.read_bytes() == b'const char* s = "caf\xe9";\n'
