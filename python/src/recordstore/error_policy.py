"""
Error policies invoked by RecordStore every time it records an error.

A policy is any callable taking the error message. The store has already
stored the message when the policy runs.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

logger = logging.getLogger(__name__)

ErrorPolicy = Callable[[str], None]


def record_only(message: str) -> None:
    """Default policy: the message stays in the store's error slot."""


def exit_on_error(message: str) -> None:
    """Fail-fast policy for simple scripts: print the message and exit with status 1."""
    logger.critical("Terminating after database error: %s", message)
    sys.exit(message)


def policy_for(exit_after_error: bool, on_error: ErrorPolicy | None = None) -> ErrorPolicy:
    """An explicit on_error wins; otherwise the exit flag picks the policy."""
    if on_error is not None:
        return on_error
    return exit_on_error if exit_after_error else record_only
