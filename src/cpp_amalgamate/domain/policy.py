from __future__ import annotations

"""
Error Handling Policies.

Each recoverable condition (unresolvable quote include, unresolvable system
include, cyclic include) is governed by one of three policies: abort the run,
warn and degrade, or degrade silently.
"""

import logging
from enum import Enum
from typing import List, Optional

from cpp_amalgamate.domain.errors import AmalgamationError
from cpp_amalgamate.domain.include_models import Diagnostic


class ErrorHandling(str, Enum):
    """Escalation policy for a recoverable include problem."""

    ERROR = "error"
    WARN = "warn"
    IGNORE = "ignore"

    @classmethod
    def names(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: str) -> "ErrorHandling":
        """
        Convert a policy name into its enum member.

        Raises:
            ValueError: If the name is not one of error/warn/ignore.
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid error handling: \"{value}\"") from None

    def handle(
            self,
            error: AmalgamationError,
            logger: logging.Logger,
            diagnostics: Optional[List[Diagnostic]] = None,
    ) -> None:
        """
        Apply the policy to an error.

        ERROR raises the error. WARN logs it as a warning and records a
        diagnostic. IGNORE only leaves a debug trace. The caller degrades
        gracefully whenever this method returns.

        Args:
            error: The condition being handled.
            logger: Logger receiving the message.
            diagnostics: Optional sink collecting emitted diagnostics.

        Raises:
            AmalgamationError: The given error, under the ERROR policy.
        """
        if self is ErrorHandling.ERROR:
            raise error

        if self is ErrorHandling.IGNORE:
            logger.debug(f"Ignoring: {error}")
            return

        logger.warning(str(error))
        if diagnostics is not None:
            diagnostics.append(Diagnostic.from_error(error, severity="warning"))
