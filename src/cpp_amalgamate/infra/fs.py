from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path canonicalization (the identity key used for inclusion
tracking), display paths and resilient source reading. Wraps pathlib so that
every I/O failure surfaces as a PathError.
"""

from pathlib import Path
from typing import List, Optional, Union

from cpp_amalgamate.domain.errors import PathError

PathLike = Union[str, Path]

# Decode/encode error handler shared by source reads and output writes
SOURCE_ERRORS = "surrogateescape"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def canonicalize(path: PathLike) -> Path:
    """
    Resolve a path to its canonical absolute form.

    Relative segments and symbolic links are resolved, so two spellings of
    the same file always yield the same value.

    Args:
        path: File or directory path, relative to the working directory or absolute.

    Returns:
        Path: Canonical absolute path.

    Raises:
        PathError: If the path does not exist or cannot be accessed.
    """
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PathError(f"Failed to canonicalize path \"{path}\": {_reason(e)}") from e


def canonicalize_dir(path: PathLike) -> Path:
    """
    Canonicalize a path that must designate a directory.

    Raises:
        PathError: If the path is missing, inaccessible or not a directory.
    """
    resolved = canonicalize(path)
    if not resolved.is_dir():
        raise PathError(f"Not a directory: \"{path}\"")
    return resolved


def is_regular_candidate(path: Path) -> bool:
    """Return True if 'path' exists and is not a directory."""
    try:
        return path.exists() and not path.is_dir()
    except OSError:
        return False


def display_relative(path: Path, base: Optional[Path] = None) -> str:
    """
    Express 'path' relative to 'base' (default: working directory).

    Falls back to the absolute path when 'path' is not below 'base'.
    """
    base = base if base is not None else Path.cwd()
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()

# -----------------------------------------------------------------------------
# SOURCE READING
# -----------------------------------------------------------------------------

def read_source_lines(path: PathLike) -> List[str]:
    """
    Read a whole source file, keeping line terminators.

    Bytes that are not valid UTF-8 are carried as lone surrogates
    (SOURCE_ERRORS), so writing the output with the same handler restores
    them unchanged.

    Args:
        path: File to read.

    Returns:
        List[str]: Lines including their trailing newline (the last may lack one).

    Raises:
        PathError: If the file cannot be opened or read.
    """
    try:
        with open(path, "r", encoding="utf-8", errors=SOURCE_ERRORS, newline="") as f:
            return f.readlines()
    except OSError as e:
        raise PathError(f"Failed to read file \"{path}\": {_reason(e)}") from e


def _reason(error: BaseException) -> str:
    """Extract a concise human-readable cause from an OS error."""
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return str(error)
