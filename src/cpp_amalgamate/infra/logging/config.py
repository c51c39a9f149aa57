from __future__ import annotations

"""
Logging Configuration Models.

Defines the data structures and constants required to initialize the
logging subsystem, and the mapping from command-line verbosity counters to
severity levels.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

# Above CRITICAL: nothing is reported
LEVEL_OFF: int = logging.CRITICAL + 10

# Mapping of string identifiers to native logging constants
_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "OFF": LEVEL_OFF,
}

# Net verbosity (-v count minus -q count) to level name
_VERBOSITY_LEVELS: Dict[int, str] = {
    -2: "OFF",
    -1: "ERROR",
    0: "WARNING",
    1: "INFO",
    2: "DEBUG",
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem initialization.

    Attributes:
        level: Minimum severity level to capture.
        console: Flag to enable stderr stream output.
        log_file: Optional path for persistent file storage.
        max_bytes: Maximum size per log segment before rotation.
        backup_count: Number of historical log segments to preserve.
        console_fmt: Structural format for terminal output.
        file_fmt: Structural format for file entries.
        datefmt: Chronological format for timestamp generation.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024  # Default: 2MB
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"


def level_from_verbosity(verbose: int, quiet: int) -> str:
    """
    Translate -v/-q occurrence counts into a level name.

    Warnings and errors are reported by default; each -v adds a level of
    detail and each -q removes one, down to no output at all.
    """
    net = int(verbose) - int(quiet)
    net = max(-2, min(2, net))
    return _VERBOSITY_LEVELS[net]
